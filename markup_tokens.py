"""Tokenize HTML into a lazy stream of start/end/text tokens.

Tokens come straight from the parser's events as the markup is fed in chunks,
so the stream mirrors the document as written: a stray closing tag shows up
as an END token with no matching START. Self-closing tags, comments, doctypes
and other declarations produce no tokens. Adjacent text is merged into one
TEXT token. The stream always finishes with an EOF token.
"""

import codecs
from dataclasses import dataclass
from enum import Enum
from html.parser import HTMLParser
from typing import Iterable, Iterator, List, Optional

from bs4.dammit import UnicodeDammit

CHUNK_SIZE = 8192


class TokenKind(Enum):
    START = "start"
    END = "end"
    TEXT = "text"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    data: str = ""  # tag name for START/END, raw text for TEXT


EOF_TOKEN = Token(TokenKind.EOF)


def start_tag(name: str) -> Token:
    return Token(TokenKind.START, name)


def end_tag(name: str) -> Token:
    return Token(TokenKind.END, name)


def text_token(data: str) -> Token:
    return Token(TokenKind.TEXT, data)


class _TokenCollector(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.tokens: List[Token] = []
        self._text: List[str] = []

    def _flush_text(self) -> None:
        if self._text:
            self.tokens.append(text_token("".join(self._text)))
            self._text = []

    def handle_starttag(self, tag, attrs):
        self._flush_text()
        self.tokens.append(start_tag(tag))

    def handle_endtag(self, tag):
        self._flush_text()
        self.tokens.append(end_tag(tag))

    def handle_startendtag(self, tag, attrs):
        self._flush_text()

    def handle_data(self, data):
        self._text.append(data)

    def handle_comment(self, data):
        self._flush_text()

    def handle_decl(self, decl):
        self._flush_text()

    def handle_pi(self, data):
        self._flush_text()

    def unknown_decl(self, data):
        self._flush_text()

    def close(self):
        super().close()
        self._flush_text()

    def drain(self) -> List[Token]:
        tokens, self.tokens = self.tokens, []
        return tokens


def _iter_chunks(markup, chunk_size: int) -> Iterator[str]:
    if isinstance(markup, bytes):
        markup = UnicodeDammit(markup, ["utf-8"], is_html=True).unicode_markup or ""
    if isinstance(markup, str):
        for i in range(0, len(markup), chunk_size):
            yield markup[i:i + chunk_size]
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = markup.read(chunk_size)
        if not chunk:
            break
        yield decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
    yield decoder.decode(b"", final=True)


def iter_tokens(markup, chunk_size: int = CHUNK_SIZE) -> Iterator[Token]:
    """Yield tokens for an HTML string, bytes or open file."""
    parser = _TokenCollector()
    for chunk in _iter_chunks(markup, chunk_size):
        parser.feed(chunk)
        yield from parser.drain()
    parser.close()
    yield from parser.drain()
    yield EOF_TOKEN


class TokenStream:
    """Token iterator with one token of lookahead.

    Once the underlying tokens run out, every further read returns EOF.
    """

    def __init__(self, tokens: Iterable[Token]):
        self._tokens = iter(tokens)
        self._peeked: Optional[Token] = None

    @classmethod
    def from_markup(cls, markup) -> "TokenStream":
        return cls(iter_tokens(markup))

    def next(self) -> Token:
        if self._peeked is not None:
            token, self._peeked = self._peeked, None
            return token
        return next(self._tokens, EOF_TOKEN)

    def peek(self) -> Token:
        if self._peeked is None:
            self._peeked = next(self._tokens, EOF_TOKEN)
        return self._peeked
