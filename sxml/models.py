"""Data models for the span tokenizer.

Tokens live in a caller-owned numpy structured array so the core can write
them in place without building Python objects. ``Token`` is a read-only view
of one slot for callers that want ordinary objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class TokenType(IntEnum):
    """Kind of span a token describes.

    ``CHARACTER_DATA`` covers element text, CDATA section bodies and
    attribute names.
    """

    START_TAG = 0
    END_TAG = 1
    COMMENT = 2
    PROCESSING_INSTRUCTION = 3
    DOCTYPE = 4
    CHARACTER_DATA = 5
    ATTRIBUTE_VALUE = 6


class ErrorCode(IntEnum):
    """Outcome of a parse call or of a single recognizer."""

    SUCCESS = 0
    BUFFER_DRY = 1
    TOKENS_FULL = 2
    INVALID = 3


TOKEN_DTYPE = np.dtype(
    [
        ("type", np.uint8),
        ("start", np.int64),
        ("end", np.int64),
        ("size", np.int32),
    ]
)


def make_token_array(capacity: int) -> np.ndarray:
    """Allocate a zeroed token array with room for ``capacity`` tokens.

    Examples
    --------
    >>> tokens = make_token_array(8)
    >>> len(tokens), tokens.dtype == TOKEN_DTYPE
    (8, True)
    """
    if capacity < 0:
        msg = f"Token capacity must be non-negative, got {capacity}"
        raise ValueError(msg)
    return np.zeros(capacity, dtype=TOKEN_DTYPE)


def grow_token_array(tokens: np.ndarray, capacity: int) -> np.ndarray:
    """Return a new token array of ``capacity`` slots holding a copy of ``tokens``.

    The existing slots are copied unchanged, so a parse that stopped with
    ``TOKENS_FULL`` can continue into the larger array with the same state.
    """
    if capacity < len(tokens):
        msg = f"Cannot shrink token array from {len(tokens)} to {capacity}"
        raise ValueError(msg)
    grown = make_token_array(capacity)
    grown[: len(tokens)] = tokens
    return grown


@dataclass
class ParseState:
    """Resumable parse position.

    Parameters
    ----------
    cursor : int
        Offset of the first byte not yet tokenized.
    token_count : int
        Number of committed tokens in the caller's array.
    depth : int
        Number of currently open elements.
    """

    cursor: int = 0
    token_count: int = 0
    depth: int = 0

    def copy(self) -> ParseState:
        """Return a scratch copy for speculative parsing."""
        return ParseState(self.cursor, self.token_count, self.depth)

    def commit(self, scratch: ParseState) -> None:
        """Take over every field of a successful scratch copy."""
        self.cursor = scratch.cursor
        self.token_count = scratch.token_count
        self.depth = scratch.depth


@dataclass(frozen=True)
class Token:
    """One token read back from a token array.

    Parameters
    ----------
    type : TokenType
        Token kind.
    start : int
        Inclusive start byte offset.
    end : int
        Exclusive end byte offset.
    size : int
        Number of attribute name/value pairs that follow a start tag or
        processing instruction; 0 for every other token.

    Examples
    --------
    >>> tok = Token(TokenType.START_TAG, 1, 2, 0)
    >>> tok.text(b"<a/>")
    b'a'
    """

    type: TokenType
    start: int
    end: int
    size: int = 0

    def text(self, buffer: bytes) -> bytes:
        """Return the bytes this token spans."""
        return bytes(buffer[self.start : self.end])

    def decode(self, buffer: bytes, encoding: str = "utf-8") -> str:
        """Return the spanned bytes decoded as text (no entity decoding)."""
        return self.text(buffer).decode(encoding)


def read_tokens(tokens: np.ndarray, count: int, *, offset: int = 0) -> list[Token]:
    """Convert the first ``count`` slots of a token array into ``Token`` objects.

    Parameters
    ----------
    tokens : np.ndarray
        Token array with dtype ``TOKEN_DTYPE``.
    count : int
        Number of committed tokens, usually ``state.token_count``.
    offset : int, optional
        Added to every start/end, for callers that re-based their buffer.
    """
    return [
        Token(
            type=TokenType(int(row["type"])),
            start=int(row["start"]) + offset,
            end=int(row["end"]) + offset,
            size=int(row["size"]),
        )
        for row in tokens[:count]
    ]
