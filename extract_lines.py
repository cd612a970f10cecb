"""Pull raw (character, text) lines out of a transcript page's token stream.

The wiki writes each transcript line as a <dd> item. A <b> run at the very
start of the item names the speaker, and song lyrics are nested <dd> items
inside the line that introduces the song.
"""

import logging
from dataclasses import dataclass
from typing import List

from markup_tokens import TokenKind, TokenStream

logger = logging.getLogger(__name__)

CONTAINER_TAG = "dd"
SPEAKER_TAG = "b"


class TranscriptParseError(Exception):
    pass


class MismatchedContainerError(TranscriptParseError):
    """A closing </dd> showed up with no open <dd> to match it."""


@dataclass
class RawLine:
    character: str
    text: str


def extract_line(stream: TokenStream) -> List[RawLine]:
    """Collect the lines of one <dd> container.

    `stream` must be positioned just after the opening <dd>. On return it is
    positioned just after the matching </dd>.
    """
    lines: List[RawLine] = []
    depth = 1
    text = ""
    character = ""

    while True:
        token = stream.next()

        if token.kind is TokenKind.EOF:
            logger.warning("Markup ended inside an open <dd> (depth %d), keeping partial lines", depth)
            if text:
                lines.append(RawLine(character, text))
            return lines

        if token.kind is TokenKind.START:
            if token.data == CONTAINER_TAG:
                # nested item: each lyric line gets its own <dd>
                if text:
                    lines.append(RawLine(character, text))
                text = ""
                character = ""
                depth += 1
            elif token.data == SPEAKER_TAG and not text:
                if stream.peek().kind is TokenKind.TEXT:
                    character = stream.next().data

        elif token.kind is TokenKind.TEXT:
            text += token.data

        elif token.kind is TokenKind.END and token.data == CONTAINER_TAG:
            depth -= 1
            if depth <= 0:
                if text:
                    lines.append(RawLine(character, text))
                return lines


def extract_transcript(stream: TokenStream) -> List[RawLine]:
    """Collect every transcript line on a page, in document order."""
    lines: List[RawLine] = []
    while True:
        token = stream.next()
        if token.kind is TokenKind.EOF:
            return lines
        if token.data != CONTAINER_TAG:
            continue
        if token.kind is TokenKind.START:
            lines.extend(extract_line(stream))
        elif token.kind is TokenKind.END:
            raise MismatchedContainerError(f"Unmatched </{CONTAINER_TAG}> after {len(lines)} lines")
