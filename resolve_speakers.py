"""Turn raw extracted lines into lines with a resolved speaker.

The wiki is inconsistent about how speakers are written. Sometimes the name
is its own bold node followed by ":text", sometimes it sits inside the text
before a colon, and stage directions may carry a name ("[Rarity: gasps]").
Song headings such as "[Verse 1: Twilight]" set the singer for the lyric
lines that follow and are not emitted themselves.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from extract_lines import RawLine

logger = logging.getLogger(__name__)

WHITESPACE = " \n\r\t\v"
DIALOGUE_MARKER = ":"
ACTION_MARKER = "["
MUSIC_PREFIX = "music"


class LineKind(Enum):
    DIALOGUE = "dialogue"
    ACTION = "action"
    CONTINUATION = "continuation"


@dataclass
class FinalizedLine:
    character: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def classify_line(text: str) -> LineKind:
    if text.startswith(DIALOGUE_MARKER):
        return LineKind.DIALOGUE
    if text.startswith(ACTION_MARKER):
        return LineKind.ACTION
    return LineKind.CONTINUATION


def song_heading_speaker(heading: str) -> str:
    """Singer named by a song heading: "[Verse 1: Twilight]" -> "Twilight"."""
    inner = heading.strip("[]")
    # deliberately keeps only the singer, not the whole "Verse 1: Twilight" label
    _, sep, singer = inner.partition(":")
    return singer.strip(WHITESPACE) if sep else inner


class SpeakerResolver:
    """Carries the last known speaker across the lines of one episode.

    Build a new resolver for every episode.
    """

    def __init__(self):
        self.previous_speaker = ""

    def resolve(self, raw: RawLine) -> Optional[FinalizedLine]:
        character, text = raw.character, raw.text

        if character:
            self.previous_speaker = character
            if character.startswith(ACTION_MARKER):
                self.previous_speaker = song_heading_speaker(character)
                return None

        kind = classify_line(text)
        if kind is LineKind.DIALOGUE:
            text = text[len(DIALOGUE_MARKER):]
        elif kind is LineKind.ACTION:
            text = self._resolve_action(character, text)
        elif character:
            # a bold tag that was not followed by ":" needs the name completed from the text
            prefix, sep, rest = text.partition(":")
            if sep:
                self.previous_speaker += prefix
                text = rest
            else:
                logger.warning("Typo in the wiki, no ':' after speaker %r: %r", character, text)

        return FinalizedLine(self.previous_speaker.strip(WHITESPACE), text.strip(WHITESPACE))

    def _resolve_action(self, character: str, text: str) -> str:
        self.previous_speaker = character
        if not character:
            text = text.strip(WHITESPACE)[1:-1]
        prefix, sep, rest = text.partition(":")
        if not sep or prefix == MUSIC_PREFIX:
            return text
        self.previous_speaker += prefix
        return rest


def resolve_lines(raw_lines: Iterable[RawLine]) -> List[FinalizedLine]:
    resolver = SpeakerResolver()
    out: List[FinalizedLine] = []
    for raw in raw_lines:
        line = resolver.resolve(raw)
        if line is not None:
            out.append(line)
    return out
