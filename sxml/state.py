"""Token emission and cursor bookkeeping.

These helpers only ever mutate a scratch ``ParseState``. Writes into the token
array land at or beyond the caller's committed ``token_count``, so a failed
construct leaves nothing the caller treats as valid.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from sxml.models import ErrorCode, ParseState, TokenType


@dataclass(frozen=True)
class ParseContext:
    """Read-only arguments shared by all recognizers during one parse call.

    Parameters
    ----------
    buffer : bytes
        Input bytes.
    length : int
        Number of valid bytes at the start of ``buffer``.
    tokens : np.ndarray
        Caller's token array.
    capacity : int
        Number of usable slots in ``tokens``.
    check_end_names : bool
        Reject end tags whose name differs from the open start tag.
    """

    buffer: bytes
    length: int
    tokens: np.ndarray
    capacity: int
    check_end_names: bool = False


def push_token(state: ParseState, ctx: ParseContext, kind: TokenType, start: int, end: int) -> bool:
    """Append a token and update count and depth.

    Returns False when the array is full. The count is still advanced so a
    later ``set_cursor`` on the same scratch state reports ``TOKENS_FULL``.
    """
    assert 0 <= start <= end <= ctx.length
    index = state.token_count
    state.token_count += 1
    if ctx.capacity < state.token_count:
        return False

    tokens = ctx.tokens
    tokens["type"][index] = kind
    tokens["start"][index] = start
    tokens["end"][index] = end
    tokens["size"][index] = 0

    if kind == TokenType.START_TAG:
        state.depth += 1
    elif kind == TokenType.END_TAG:
        assert state.depth > 0, "end tag pushed with no open element"
        state.depth -= 1
    return True


def add_attribute_pair(ctx: ParseContext, owner: int) -> None:
    """Count one more name/value pair on the token at slot ``owner``."""
    ctx.tokens["size"][owner] += 1


def set_cursor(state: ParseState, ctx: ParseContext, pos: int) -> ErrorCode:
    """Move the cursor unless an earlier push overflowed the array."""
    if ctx.capacity < state.token_count:
        return ErrorCode.TOKENS_FULL
    assert pos <= ctx.length
    state.cursor = pos
    return ErrorCode.SUCCESS
