"""Recognizers for the individual XML constructs.

Each recognizer consumes exactly one construct at ``state.cursor`` and
returns an ``ErrorCode``:

- ``SUCCESS``: tokens pushed and the cursor moved past the construct.
- ``BUFFER_DRY``: the closing delimiter is not in the buffer yet.
- ``TOKENS_FULL``: the token array ran out of room.
- ``INVALID``: the bytes do not have the shape this construct requires.

Recognizers only mutate the scratch state they are given. The driver decides
whether that state is committed.
"""

from __future__ import annotations

from sxml.models import ErrorCode, ParseState, TokenType
from sxml.scan import (
    PrefixMatch,
    ends_with,
    find_byte,
    find_substring,
    first_whitespace,
    is_letter,
    prefix_status,
    starts_with,
    trim_left,
    trim_right,
)
from sxml.state import ParseContext, add_attribute_pair, push_token, set_cursor

# Bytes needed after the cursor before the driver can pick a recognizer
LOOKAHEAD_MIN = 3

LT = ord("<")
GT = ord(">")
EQUALS = ord("=")
OPEN_BRACKET = ord("[")
QUOTES = frozenset(b"'\"")

COMMENT_OPEN, COMMENT_CLOSE = b"<!--", b"-->"
INSTRUCTION_OPEN, INSTRUCTION_CLOSE = b"<?", b"?>"
DOCTYPE_OPEN, DOCTYPE_CLOSE = b"<!DOCTYPE", b"]>"
CDATA_OPEN, CDATA_CLOSE = b"<![CDATA[", b"]]>"
END_TAG_OPEN = b"</"
SELF_CLOSE = b"/>"


def _expect_open(ctx: ParseContext, start: int, literal: bytes) -> ErrorCode | None:
    """Check an opening literal; None when it matches in full."""
    status = prefix_status(ctx.buffer, start, ctx.length, literal)
    if status is PrefixMatch.MATCH:
        return None
    if status is PrefixMatch.PARTIAL:
        return ErrorCode.BUFFER_DRY
    return ErrorCode.INVALID


def parse_attributes(state: ParseState, ctx: ParseContext, owner: int, start: int, end: int) -> ErrorCode:
    """Parse ``name="value"`` pairs in ``[start, end)``.

    Each pair becomes a CHARACTER_DATA token for the name followed by an
    ATTRIBUTE_VALUE token for the unquoted value. The token at slot ``owner``
    gets its ``size`` bumped once per pair.
    """
    buf = ctx.buffer
    name = trim_left(buf, start, end)
    while name != end:
        if not is_letter(buf, name):
            return ErrorCode.INVALID

        eq = find_byte(buf, name, end, EQUALS)
        if eq == end:
            return ErrorCode.INVALID

        if not push_token(state, ctx, TokenType.CHARACTER_DATA, name, trim_right(buf, name, eq)):
            return ErrorCode.TOKENS_FULL

        quote = trim_left(buf, eq + 1, end)
        if quote == end or buf[quote] not in QUOTES:
            return ErrorCode.INVALID

        value = quote + 1
        close = find_byte(buf, value, end, buf[quote])
        if close == end:
            return ErrorCode.INVALID

        if not push_token(state, ctx, TokenType.ATTRIBUTE_VALUE, value, close):
            return ErrorCode.TOKENS_FULL

        add_attribute_pair(ctx, owner)
        name = trim_left(buf, close + 1, end)

    return ErrorCode.SUCCESS


def parse_comment(state: ParseState, ctx: ParseContext) -> ErrorCode:
    """Consume ``<!-- ... -->`` and emit its interior as a COMMENT token."""
    start, end = state.cursor, ctx.length
    err = _expect_open(ctx, start, COMMENT_OPEN)
    if err is not None:
        return err

    start += len(COMMENT_OPEN)
    close = find_substring(ctx.buffer, start, end, COMMENT_CLOSE)
    if close == end:
        return ErrorCode.BUFFER_DRY

    if not push_token(state, ctx, TokenType.COMMENT, start, close):
        return ErrorCode.TOKENS_FULL
    return set_cursor(state, ctx, close + len(COMMENT_CLOSE))


def parse_instruction(state: ParseState, ctx: ParseContext) -> ErrorCode:
    """Consume ``<?target pseudo="attrs"?>``.

    The target name becomes a PROCESSING_INSTRUCTION token. Pseudo-attributes
    are parsed on their own scratch copy. If they are not in ``name="value"``
    form (``<?php echo 1; ?>``), they are dropped and the instruction keeps
    ``size == 0``.
    """
    buf, start, end = ctx.buffer, state.cursor, ctx.length
    assert LOOKAHEAD_MIN <= end - start

    if not starts_with(buf, start, end, INSTRUCTION_OPEN):
        return ErrorCode.INVALID

    start += len(INSTRUCTION_OPEN)
    quest = find_substring(buf, start, end, INSTRUCTION_CLOSE)
    if quest == end:
        return ErrorCode.BUFFER_DRY

    name_end = first_whitespace(buf, start, quest)
    owner = state.token_count
    if not push_token(state, ctx, TokenType.PROCESSING_INSTRUCTION, start, name_end):
        return ErrorCode.TOKENS_FULL

    scratch = state.copy()
    err = parse_attributes(scratch, ctx, owner, name_end, quest)
    if err == ErrorCode.TOKENS_FULL:
        return err
    if err == ErrorCode.SUCCESS:
        state.commit(scratch)
    else:
        ctx.tokens["size"][owner] = 0

    return set_cursor(state, ctx, quest + len(INSTRUCTION_CLOSE))


def parse_doctype(state: ParseState, ctx: ParseContext) -> ErrorCode:
    """Consume ``<!DOCTYPE ... ]>`` or a subset-less ``<!DOCTYPE ...>``.

    When a ``[`` appears before the first ``>``, the declaration carries an
    internal subset and runs to ``]>``. Otherwise it ends at that ``>``.
    """
    buf, start, end = ctx.buffer, state.cursor, ctx.length
    err = _expect_open(ctx, start, DOCTYPE_OPEN)
    if err is not None:
        return err

    start += len(DOCTYPE_OPEN)
    gt = find_byte(buf, start, end, GT)
    bracket = find_byte(buf, start, gt, OPEN_BRACKET)
    if bracket == gt:
        if gt == end:
            return ErrorCode.BUFFER_DRY
        close, close_len = gt, 1
    else:
        close, close_len = find_substring(buf, bracket, end, DOCTYPE_CLOSE), len(DOCTYPE_CLOSE)
        if close == end:
            return ErrorCode.BUFFER_DRY

    if not push_token(state, ctx, TokenType.DOCTYPE, start, close):
        return ErrorCode.TOKENS_FULL
    return set_cursor(state, ctx, close + close_len)


def parse_start_tag(state: ParseState, ctx: ParseContext) -> ErrorCode:
    """Consume ``<name attr="v">`` or the self-closing ``<name/>``.

    A self-closing tag emits an END_TAG right after the START_TAG and its
    attributes. The END_TAG reuses the same name span.
    """
    buf, start, end = ctx.buffer, state.cursor, ctx.length
    assert LOOKAHEAD_MIN <= end - start

    if not (buf[start] == LT and is_letter(buf, start + 1)):
        return ErrorCode.INVALID

    start += 1
    gt = find_byte(buf, start, end, GT)
    if gt == end:
        return ErrorCode.BUFFER_DRY

    self_closing = ends_with(buf, start, gt + 1, SELF_CLOSE)
    inner_end = gt - 1 if self_closing else gt

    name_end = first_whitespace(buf, start, inner_end)
    owner = state.token_count
    if not push_token(state, ctx, TokenType.START_TAG, start, name_end):
        return ErrorCode.TOKENS_FULL

    err = parse_attributes(state, ctx, owner, name_end, inner_end)
    if err != ErrorCode.SUCCESS:
        return err

    if self_closing and not push_token(state, ctx, TokenType.END_TAG, start, name_end):
        return ErrorCode.TOKENS_FULL

    return set_cursor(state, ctx, gt + 1)


def _matches_open_tag(state: ParseState, ctx: ParseContext, start: int, end: int) -> bool:
    """Return True if ``buffer[start:end]`` names the innermost open element."""
    types = ctx.tokens["type"]
    level = 0
    for index in range(state.token_count - 1, -1, -1):
        kind = types[index]
        if kind == TokenType.END_TAG:
            level += 1
        elif kind == TokenType.START_TAG:
            if level == 0:
                open_start = int(ctx.tokens["start"][index])
                open_end = int(ctx.tokens["end"][index])
                return ctx.buffer[open_start:open_end] == ctx.buffer[start:end]
            level -= 1
    return False


def parse_end_tag(state: ParseState, ctx: ParseContext) -> ErrorCode:
    """Consume ``</name>``; only whitespace may follow the name."""
    buf, start, end = ctx.buffer, state.cursor, ctx.length
    assert LOOKAHEAD_MIN <= end - start

    if not (starts_with(buf, start, end, END_TAG_OPEN) and is_letter(buf, start + 2)):
        return ErrorCode.INVALID

    start += len(END_TAG_OPEN)
    gt = find_byte(buf, start, end, GT)
    if gt == end:
        return ErrorCode.BUFFER_DRY

    name_end = first_whitespace(buf, start, gt)
    if trim_left(buf, name_end, gt) != gt:
        return ErrorCode.INVALID

    if ctx.check_end_names and not _matches_open_tag(state, ctx, start, name_end):
        return ErrorCode.INVALID

    if not push_token(state, ctx, TokenType.END_TAG, start, name_end):
        return ErrorCode.TOKENS_FULL
    return set_cursor(state, ctx, gt + 1)


def parse_cdata(state: ParseState, ctx: ParseContext) -> ErrorCode:
    """Consume ``<![CDATA[ ... ]]>`` and emit the raw interior as CHARACTER_DATA."""
    start, end = state.cursor, ctx.length
    err = _expect_open(ctx, start, CDATA_OPEN)
    if err is not None:
        return err

    start += len(CDATA_OPEN)
    close = find_substring(ctx.buffer, start, end, CDATA_CLOSE)
    if close == end:
        return ErrorCode.BUFFER_DRY

    if not push_token(state, ctx, TokenType.CHARACTER_DATA, start, close):
        return ErrorCode.TOKENS_FULL
    return set_cursor(state, ctx, close + len(CDATA_CLOSE))


def parse_characters(state: ParseState, ctx: ParseContext) -> ErrorCode:
    """Consume text up to the next ``<``; an empty run emits nothing."""
    start, end = state.cursor, ctx.length
    lt = find_byte(ctx.buffer, start, end, LT)
    if lt == end:
        return ErrorCode.BUFFER_DRY

    if lt != start and not push_token(state, ctx, TokenType.CHARACTER_DATA, start, lt):
        return ErrorCode.TOKENS_FULL
    return set_cursor(state, ctx, lt)
