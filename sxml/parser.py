"""Resumable driver for the span tokenizer.

``parse`` runs in two phases. The prolog skips whitespace, declarations and
comments until the root start tag is found. The body then alternates
character runs and markup until the root closes. Every construct is
recognized on a scratch copy of the caller's ``ParseState``. The copy is
committed only when the construct is complete, so a call that stops early
leaves the state exactly where the last complete construct ended.
"""

from __future__ import annotations

import logging

import numpy as np

from sxml.models import ErrorCode, ParseState, TokenType
from sxml.recognizers import (
    LOOKAHEAD_MIN,
    LT,
    parse_cdata,
    parse_characters,
    parse_comment,
    parse_doctype,
    parse_end_tag,
    parse_instruction,
    parse_start_tag,
)
from sxml.scan import trim_left
from sxml.state import ParseContext, set_cursor

logger = logging.getLogger(__name__)

QUESTION = ord("?")
BANG = ord("!")
SLASH = ord("/")
DASH = ord("-")


def reset(state: ParseState) -> None:
    """Zero the cursor, token count and depth of ``state``."""
    state.cursor = 0
    state.token_count = 0
    state.depth = 0


def rebase(state: ParseState, shift: int) -> None:
    """Adjust ``state`` after the caller dropped the first ``shift`` bytes of its buffer.

    Tokens committed before the shift keep their old offsets. The caller has
    to remember ``shift`` to map them back.
    """
    if not 0 <= shift <= state.cursor:
        msg = f"Cannot drop {shift} bytes; only {state.cursor} are consumed"
        raise ValueError(msg)
    state.cursor -= shift


def _stop(state: ParseState, err: ErrorCode, offset: int | None = None) -> ErrorCode:
    if err == ErrorCode.INVALID:
        logger.debug("Invalid markup at offset %d", state.cursor if offset is None else offset)
    else:
        logger.debug(
            "Suspended with %s at offset %d after %d tokens (depth %d)",
            err.name,
            state.cursor,
            state.token_count,
            state.depth,
        )
    return err


def _parse_prolog_markup(scratch: ParseState, ctx: ParseContext, lt: int) -> ErrorCode:
    marker = ctx.buffer[lt + 1]
    if marker == QUESTION:
        return parse_instruction(scratch, ctx)
    if marker == BANG:
        if ctx.buffer[lt + 2] == DASH:
            return parse_comment(scratch, ctx)
        return parse_doctype(scratch, ctx)
    return parse_start_tag(scratch, ctx)


def _parse_body_markup(scratch: ParseState, ctx: ParseContext, lt: int) -> ErrorCode:
    marker = ctx.buffer[lt + 1]
    if marker == QUESTION:
        return parse_instruction(scratch, ctx)
    if marker == SLASH:
        return parse_end_tag(scratch, ctx)
    if marker == BANG:
        if ctx.buffer[lt + 2] == DASH:
            return parse_comment(scratch, ctx)
        return parse_cdata(scratch, ctx)
    return parse_start_tag(scratch, ctx)


def parse(
    state: ParseState,
    buffer: bytes,
    tokens: np.ndarray,
    *,
    length: int | None = None,
    capacity: int | None = None,
    check_end_names: bool = False,
) -> ErrorCode:
    """Tokenize as much of ``buffer`` as forms complete constructs.

    Parameters
    ----------
    state : ParseState
        Caller-owned position. It is updated only for fully consumed
        constructs. Pass the same object again to resume.
    buffer : bytes
        Input bytes, from offset 0. Any bytes-like object works.
    tokens : np.ndarray
        Token array with dtype ``TOKEN_DTYPE``. New tokens are written from
        ``state.token_count`` onward.
    length : int, optional
        Number of valid bytes in ``buffer``; defaults to ``len(buffer)``.
    capacity : int, optional
        Number of usable token slots; defaults to ``len(tokens)``.
    check_end_names : bool, optional
        Reject an end tag whose name differs from its start tag. Earlier
        tokens must still point into ``buffer``, so only use this when
        feeding a growing buffer.

    Returns
    -------
    ErrorCode
        ``SUCCESS`` once the root element has closed. ``BUFFER_DRY`` when
        more input is needed. ``TOKENS_FULL`` when a larger array is needed.
        ``INVALID`` when the input is malformed.

    Examples
    --------
    >>> from sxml.models import make_token_array, read_tokens
    >>> state = ParseState()
    >>> tokens = make_token_array(4)
    >>> parse(state, b"<r>hi</r>", tokens)
    <ErrorCode.SUCCESS: 0>
    >>> [t.type.name for t in read_tokens(tokens, state.token_count)]
    ['START_TAG', 'CHARACTER_DATA', 'END_TAG']
    """
    if isinstance(buffer, memoryview):
        buffer = buffer.tobytes()
    if length is None:
        length = len(buffer)
    if capacity is None:
        capacity = len(tokens)
    if not 0 <= length <= len(buffer):
        msg = f"length {length} outside buffer of {len(buffer)} bytes"
        raise ValueError(msg)
    if not 0 <= capacity <= len(tokens):
        msg = f"capacity {capacity} outside token array of {len(tokens)} slots"
        raise ValueError(msg)
    if not (state.cursor <= length and state.token_count <= capacity and state.depth >= 0):
        msg = f"state {state} does not fit a {length}-byte buffer and {capacity} token slots"
        raise ValueError(msg)

    ctx = ParseContext(buffer, length, tokens, capacity, check_end_names)
    scratch = state.copy()
    end = length

    root_found = scratch.depth > 0
    while not root_found:
        lt = trim_left(buffer, scratch.cursor, end)
        if end - lt < LOOKAHEAD_MIN:
            return _stop(state, ErrorCode.BUFFER_DRY)

        if buffer[lt] != LT:
            return _stop(state, ErrorCode.INVALID, lt)

        set_cursor(scratch, ctx, lt)
        state.commit(scratch)

        count = scratch.token_count
        err = _parse_prolog_markup(scratch, ctx, lt)
        if err != ErrorCode.SUCCESS:
            return _stop(state, err)

        root_found = scratch.depth > 0 or _closed_root(ctx, count, scratch)
        state.commit(scratch)

    while scratch.depth > 0:
        err = parse_characters(scratch, ctx)
        if err != ErrorCode.SUCCESS:
            return _stop(state, err)

        state.commit(scratch)

        lt = scratch.cursor
        assert buffer[lt] == LT
        if end - lt < LOOKAHEAD_MIN:
            return _stop(state, ErrorCode.BUFFER_DRY)

        err = _parse_body_markup(scratch, ctx, lt)
        if err != ErrorCode.SUCCESS:
            return _stop(state, err)

        state.commit(scratch)

    logger.debug("Root element complete at offset %d with %d tokens", state.cursor, state.token_count)
    return ErrorCode.SUCCESS


def _closed_root(ctx: ParseContext, count: int, scratch: ParseState) -> bool:
    """Return True if the construct just parsed was a self-closing root."""
    return scratch.token_count > count and ctx.tokens["type"][count] == TokenType.START_TAG
