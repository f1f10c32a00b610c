"""Left-to-right tokenizer over a format descriptor body."""

from __future__ import annotations

import sys
from typing import Iterator, NamedTuple

from pystruc.tags import lookup

# Largest repeat count a C size_t can hold; longer digit runs fall back to 1
SIZE_MAX = sys.maxsize * 2 + 1


class Token(NamedTuple):
    count: int
    tag: str


class DescriptorCursor:
    """Walks a descriptor body and yields ``(count, tag)`` tokens on demand.

    Besides the string position the cursor carries the per-call traversal
    state: the active tag, its declared count, how many repetitions remain
    to be consumed, the byte offset reached so far and the largest native
    alignment seen.  A new cursor is created for every pack, unpack or size
    computation, so descriptors stay free of mutable state.
    """

    def __init__(self, body: str):
        self.body = body
        self.position = 0
        self.tag: str | None = None
        self.count = 0
        self.remaining = 0
        self.offset = 0
        self.max_alignment = 1

    def next_token(self) -> Token | None:
        """Return the next token, or None once the body is exhausted.

        Whitespace is ignored anywhere, including between a count and its
        tag.  Digits left dangling at the end of the body are discarded.
        """
        digits = ""
        while self.position < len(self.body):
            char = self.body[self.position]
            self.position += 1
            if char.isspace():
                continue
            if "0" <= char <= "9":
                digits += char
                continue

            lookup(char, self.position - 1)
            count = int(digits) if digits else 1
            if count > SIZE_MAX:
                count = 1
            self.tag = char
            self.count = count
            return Token(count, char)
        return None

    def note_alignment(self, alignment: int) -> None:
        if alignment > self.max_alignment:
            self.max_alignment = alignment

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token


def tokenize(body: str) -> list[Token]:
    """Return every token of *body*; raises InvalidFormat on an unknown tag."""
    return list(DescriptorCursor(body))
