"""Byte-range scanning primitives.

Every function works inside the half-open window ``[start, end)`` of a
bytes-like buffer and never looks outside it. Searches report "not found" by
returning ``end``, so callers chain positions and compare against ``end``
explicitly.

Structural delimiters (``<``, ``>``, ``=``, quotes, ``-->`` ...) are plain
ASCII. Raw byte search for them is safe on UTF-8 input: bytes of a multi-byte
UTF-8 sequence are all >= 0x80, so they can never equal an ASCII needle.
``find_byte`` and ``find_substring`` assert that needles stay ASCII.
"""

from __future__ import annotations

import string
from enum import Enum

# C isspace() in the "C" locale
WHITESPACE = frozenset(b" \t\n\r\x0b\x0c")
LETTERS = frozenset(string.ascii_letters.encode("ascii"))


class PrefixMatch(Enum):
    """Outcome of comparing a window against an opening literal."""

    MATCH = "match"
    PARTIAL = "partial"
    MISMATCH = "mismatch"


def _is_ascii(needle: bytes) -> bool:
    return all(b < 0x80 for b in needle)


def find_byte(buf: bytes, start: int, end: int, c: int) -> int:
    """Return the position of the first ``c`` in the window, or ``end``.

    Parameters
    ----------
    buf : bytes
        Buffer to search.
    start, end : int
        Half-open window.
    c : int
        Byte value to look for. Must be ASCII (0-127).

    Returns
    -------
    int
        Position of the match, or ``end`` if absent.

    Examples
    --------
    >>> find_byte(b"<a>", 0, 3, ord(">"))
    2
    >>> find_byte(b"<a>", 0, 2, ord(">"))
    2
    """
    assert start <= end
    assert 0 <= c <= 127, "only ASCII bytes are safe to search for in UTF-8"
    pos = buf.find(bytes((c,)), start, end)
    return end if pos < 0 else pos


def find_substring(buf: bytes, start: int, end: int, needle: bytes) -> int:
    """Return the position of the first ``needle`` fully inside the window, or ``end``.

    Examples
    --------
    >>> find_substring(b"<!-- x -->", 4, 10, b"-->")
    7
    """
    assert start <= end
    assert needle, "needle must not be empty"
    assert _is_ascii(needle), "only ASCII literals are safe to search for in UTF-8"
    pos = buf.find(needle, start, end)
    return end if pos < 0 else pos


def starts_with(buf: bytes, start: int, end: int, prefix: bytes) -> bool:
    """Return True if the window begins with ``prefix``."""
    assert start <= end
    if end - start < len(prefix):
        return False
    return buf[start : start + len(prefix)] == prefix


def ends_with(buf: bytes, start: int, end: int, suffix: bytes) -> bool:
    """Return True if the window ends with ``suffix``."""
    assert start <= end
    if end - start < len(suffix):
        return False
    return buf[end - len(suffix) : end] == suffix


def prefix_status(buf: bytes, start: int, end: int, literal: bytes) -> PrefixMatch:
    """Compare the window against an opening literal that may be cut short.

    Returns ``PARTIAL`` when the window is shorter than ``literal`` but
    every byte present agrees with it, so more input could still complete
    the match.

    Examples
    --------
    >>> prefix_status(b"<!DOC", 0, 5, b"<!DOCTYPE")
    <PrefixMatch.PARTIAL: 'partial'>
    >>> prefix_status(b"<!-- ", 0, 5, b"<!DOCTYPE")
    <PrefixMatch.MISMATCH: 'mismatch'>
    """
    assert start <= end
    available = min(end - start, len(literal))
    if buf[start : start + available] != literal[:available]:
        return PrefixMatch.MISMATCH
    if available < len(literal):
        return PrefixMatch.PARTIAL
    return PrefixMatch.MATCH


def trim_left(buf: bytes, start: int, end: int) -> int:
    """Skip leading whitespace; return the first non-whitespace position or ``end``."""
    assert start <= end
    pos = start
    while pos != end and buf[pos] in WHITESPACE:
        pos += 1
    return pos


def trim_right(buf: bytes, start: int, end: int) -> int:
    """Drop trailing whitespace; return the new exclusive end (``start`` if all blank)."""
    assert start <= end
    pos = end
    while pos != start and buf[pos - 1] in WHITESPACE:
        pos -= 1
    return pos


def first_whitespace(buf: bytes, start: int, end: int) -> int:
    """Return the position of the first whitespace byte, or ``end``."""
    assert start <= end
    pos = start
    while pos != end and buf[pos] not in WHITESPACE:
        pos += 1
    return pos


def is_letter(buf: bytes, pos: int) -> bool:
    """Return True if ``buf[pos]`` is an ASCII letter."""
    return buf[pos] in LETTERS
