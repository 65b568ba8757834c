"""Tests for the per-construct recognizers."""

import pytest

from sxml.models import ErrorCode, ParseState, TokenType, make_token_array, read_tokens
from sxml.recognizers import (
    parse_cdata,
    parse_characters,
    parse_comment,
    parse_doctype,
    parse_end_tag,
    parse_instruction,
    parse_start_tag,
)
from sxml.state import ParseContext


def make_ctx(buffer: bytes, capacity: int = 16) -> ParseContext:
    """Build a parse context over ``buffer`` with a fresh token array."""
    return ParseContext(buffer, len(buffer), make_token_array(capacity), capacity)


def spans(ctx: ParseContext, state: ParseState) -> list[tuple[TokenType, bytes, int]]:
    """Return (type, text, size) for every token pushed on ``state``."""
    return [(t.type, t.text(ctx.buffer), t.size) for t in read_tokens(ctx.tokens, state.token_count)]


class TestComment:
    """parse_comment() tests."""

    def test_interior_span(self) -> None:
        """Test that the token covers the comment body only."""
        ctx = make_ctx(b"<!-- hi -->")
        state = ParseState()
        assert parse_comment(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [(TokenType.COMMENT, b" hi ", 0)]
        assert state.cursor == 11

    def test_unterminated(self) -> None:
        """Test that a missing ``-->`` asks for more input."""
        ctx = make_ctx(b"<!-- hi --")
        state = ParseState()
        assert parse_comment(state, ctx) == ErrorCode.BUFFER_DRY
        assert state.token_count == 0

    def test_partial_opening(self) -> None:
        """Test that a cut-off ``<!-`` asks for more input."""
        assert parse_comment(ParseState(), make_ctx(b"<!-")) == ErrorCode.BUFFER_DRY

    def test_wrong_opening(self) -> None:
        """Test that a non-comment opening is invalid."""
        assert parse_comment(ParseState(), make_ctx(b"<!-x hi -->")) == ErrorCode.INVALID


class TestInstruction:
    """parse_instruction() tests."""

    def test_xml_declaration(self) -> None:
        """Test target name and pseudo-attributes."""
        ctx = make_ctx(b'<?xml version="1.0" encoding="UTF-8"?>')
        state = ParseState()
        assert parse_instruction(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [
            (TokenType.PROCESSING_INSTRUCTION, b"xml", 2),
            (TokenType.CHARACTER_DATA, b"version", 0),
            (TokenType.ATTRIBUTE_VALUE, b"1.0", 0),
            (TokenType.CHARACTER_DATA, b"encoding", 0),
            (TokenType.ATTRIBUTE_VALUE, b"UTF-8", 0),
        ]
        assert state.cursor == len(ctx.buffer)
        assert state.depth == 0

    def test_free_form_content_is_dropped(self) -> None:
        """Test that non-attribute content leaves only the target token."""
        ctx = make_ctx(b"<?php echo 1; ?>")
        state = ParseState()
        assert parse_instruction(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [(TokenType.PROCESSING_INSTRUCTION, b"php", 0)]
        assert state.cursor == len(ctx.buffer)

    def test_partially_valid_attributes_are_dropped(self) -> None:
        """Test that a malformed tail discards the pairs parsed before it."""
        ctx = make_ctx(b'<?pi a="1" junk?>')
        state = ParseState()
        assert parse_instruction(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [(TokenType.PROCESSING_INSTRUCTION, b"pi", 0)]

    def test_unterminated(self) -> None:
        """Test that a missing ``?>`` asks for more input."""
        assert parse_instruction(ParseState(), make_ctx(b'<?xml version="1.0"')) == ErrorCode.BUFFER_DRY

    def test_tokens_full(self) -> None:
        """Test that attribute tokens count against capacity."""
        ctx = make_ctx(b'<?xml a="1"?>', capacity=2)
        assert parse_instruction(ParseState(), ctx) == ErrorCode.TOKENS_FULL


class TestDoctype:
    """parse_doctype() tests."""

    def test_internal_subset(self) -> None:
        """Test a declaration that runs to ``]>``."""
        ctx = make_ctx(b'<!DOCTYPE r [<!ENTITY e "v">]>')
        state = ParseState()
        assert parse_doctype(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [(TokenType.DOCTYPE, b' r [<!ENTITY e "v">', 0)]
        assert state.cursor == len(ctx.buffer)

    def test_without_subset(self) -> None:
        """Test a declaration that ends at the first ``>``."""
        ctx = make_ctx(b"<!DOCTYPE html><html/>")
        state = ParseState()
        assert parse_doctype(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [(TokenType.DOCTYPE, b" html", 0)]
        assert state.cursor == 15

    @pytest.mark.parametrize(
        "data",
        [b"<!DOC", b"<!DOCTYPE html", b"<!DOCTYPE r [ <!ENTITY e 'v'>"],
    )
    def test_incomplete(self, data: bytes) -> None:
        """Test that incomplete declarations ask for more input."""
        assert parse_doctype(ParseState(), make_ctx(data)) == ErrorCode.BUFFER_DRY

    def test_other_declaration_is_invalid(self) -> None:
        """Test that a non-DOCTYPE ``<!`` construct is rejected, not waited on."""
        assert parse_doctype(ParseState(), make_ctx(b"<!ELEMENT x ANY>")) == ErrorCode.INVALID


class TestCdata:
    """parse_cdata() tests."""

    def test_raw_interior(self) -> None:
        """Test that markup inside CDATA is kept verbatim."""
        ctx = make_ctx(b"<![CDATA[a<b>&amp;]]>")
        state = ParseState()
        assert parse_cdata(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [(TokenType.CHARACTER_DATA, b"a<b>&amp;", 0)]
        assert state.cursor == len(ctx.buffer)

    def test_unterminated(self) -> None:
        """Test that a missing ``]]>`` asks for more input."""
        assert parse_cdata(ParseState(), make_ctx(b"<![CDATA[abc]]")) == ErrorCode.BUFFER_DRY

    def test_wrong_opening(self) -> None:
        """Test that ``<![`` without ``CDATA[`` is invalid."""
        assert parse_cdata(ParseState(), make_ctx(b"<![INCLUDE[x]]>")) == ErrorCode.INVALID


class TestStartTag:
    """parse_start_tag() tests."""

    def test_attributes(self) -> None:
        """Test double- and single-quoted attributes."""
        ctx = make_ctx(b"<a x=\"1\" y='2'>")
        state = ParseState()
        assert parse_start_tag(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [
            (TokenType.START_TAG, b"a", 2),
            (TokenType.CHARACTER_DATA, b"x", 0),
            (TokenType.ATTRIBUTE_VALUE, b"1", 0),
            (TokenType.CHARACTER_DATA, b"y", 0),
            (TokenType.ATTRIBUTE_VALUE, b"2", 0),
        ]
        assert state.depth == 1
        assert state.cursor == len(ctx.buffer)

    def test_whitespace_around_equals(self) -> None:
        """Test that names are right-trimmed and values left-trimmed."""
        ctx = make_ctx(b'<a  x = "1" >')
        state = ParseState()
        assert parse_start_tag(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state)[1:] == [
            (TokenType.CHARACTER_DATA, b"x", 0),
            (TokenType.ATTRIBUTE_VALUE, b"1", 0),
        ]

    def test_empty_value(self) -> None:
        """Test an empty quoted value."""
        ctx = make_ctx(b'<a x="">')
        state = ParseState()
        assert parse_start_tag(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state)[2] == (TokenType.ATTRIBUTE_VALUE, b"", 0)

    def test_self_closing(self) -> None:
        """Test that ``<a/>`` emits a paired end tag with the same span."""
        ctx = make_ctx(b"<a/>")
        state = ParseState()
        assert parse_start_tag(state, ctx) == ErrorCode.SUCCESS
        tokens = read_tokens(ctx.tokens, state.token_count)
        assert [(t.type, t.start, t.end) for t in tokens] == [
            (TokenType.START_TAG, 1, 2),
            (TokenType.END_TAG, 1, 2),
        ]
        assert state.depth == 0
        assert state.cursor == 4

    def test_self_closing_with_attribute(self) -> None:
        """Test attributes on a self-closing tag."""
        ctx = make_ctx(b'<img src="p.png"/>')
        state = ParseState()
        assert parse_start_tag(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [
            (TokenType.START_TAG, b"img", 1),
            (TokenType.CHARACTER_DATA, b"src", 0),
            (TokenType.ATTRIBUTE_VALUE, b"p.png", 0),
            (TokenType.END_TAG, b"img", 0),
        ]

    def test_utf8_value(self) -> None:
        """Test that attribute values may hold multi-byte text."""
        ctx = make_ctx('<a t="café">'.encode())
        state = ParseState()
        assert parse_start_tag(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state)[2] == (TokenType.ATTRIBUTE_VALUE, "café".encode(), 0)

    @pytest.mark.parametrize(
        "data",
        [
            b"<1a>",
            b'<a 1="x">',
            b"<a x>",
            b"<a x=1>",
            b'<a x="1>',
            b"<a x='1\">",
        ],
    )
    def test_invalid(self, data: bytes) -> None:
        """Test malformed names and attributes."""
        assert parse_start_tag(ParseState(), make_ctx(data)) == ErrorCode.INVALID

    def test_unterminated(self) -> None:
        """Test that a missing ``>`` asks for more input."""
        assert parse_start_tag(ParseState(), make_ctx(b'<abc x="1"')) == ErrorCode.BUFFER_DRY

    def test_tokens_full(self) -> None:
        """Test running out of slots in the middle of the attributes."""
        ctx = make_ctx(b'<a x="1">', capacity=2)
        assert parse_start_tag(ParseState(), ctx) == ErrorCode.TOKENS_FULL

    def test_tokens_full_on_self_closing_pair(self) -> None:
        """Test running out of slots for the paired end tag."""
        ctx = make_ctx(b"<a/>", capacity=1)
        assert parse_start_tag(ParseState(), ctx) == ErrorCode.TOKENS_FULL


class TestEndTag:
    """parse_end_tag() tests."""

    @pytest.mark.parametrize("data", [b"</a>", b"</a  >", b"</a\n>"])
    def test_name_span(self, data: bytes) -> None:
        """Test the name span with optional trailing whitespace."""
        ctx = make_ctx(data)
        state = ParseState(depth=1)
        assert parse_end_tag(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [(TokenType.END_TAG, b"a", 0)]
        assert state.depth == 0
        assert state.cursor == len(data)

    @pytest.mark.parametrize("data", [b"</a b>", b"</1>", b"</ a>"])
    def test_invalid(self, data: bytes) -> None:
        """Test trailing junk and bad names."""
        assert parse_end_tag(ParseState(depth=1), make_ctx(data)) == ErrorCode.INVALID

    def test_unterminated(self) -> None:
        """Test that a missing ``>`` asks for more input."""
        assert parse_end_tag(ParseState(depth=1), make_ctx(b"</ab")) == ErrorCode.BUFFER_DRY


class TestCharacters:
    """parse_characters() tests."""

    def test_text_run(self) -> None:
        """Test that text up to ``<`` becomes one token."""
        ctx = make_ctx(b"a &amp; b<")
        state = ParseState()
        assert parse_characters(state, ctx) == ErrorCode.SUCCESS
        assert spans(ctx, state) == [(TokenType.CHARACTER_DATA, b"a &amp; b", 0)]
        assert state.cursor == 9

    def test_empty_run(self) -> None:
        """Test that an empty run emits nothing."""
        ctx = make_ctx(b"<b/>")
        state = ParseState()
        assert parse_characters(state, ctx) == ErrorCode.SUCCESS
        assert state.token_count == 0
        assert state.cursor == 0

    def test_no_markup_yet(self) -> None:
        """Test that text without a following ``<`` asks for more input."""
        state = ParseState()
        assert parse_characters(state, make_ctx(b"partial text")) == ErrorCode.BUFFER_DRY
        assert state == ParseState()
