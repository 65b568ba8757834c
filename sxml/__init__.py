"""Resumable span tokenizer for a practical subset of XML.

The tokenizer scans a byte buffer and records each construct as a typed
``(start, end)`` span in a caller-owned numpy array. It does not copy text,
decode entities or build a tree. Parsing can stop when input runs out or the
array fills, then resume later from the same ``ParseState``.

Examples
--------
>>> from sxml import ParseState, make_token_array, parse, read_tokens
>>> buffer = b'<a x="1"><b/></a>'
>>> state = ParseState()
>>> tokens = make_token_array(8)
>>> parse(state, buffer, tokens)
<ErrorCode.SUCCESS: 0>
>>> [(t.type.name, t.text(buffer)) for t in read_tokens(tokens, state.token_count)]
[('START_TAG', b'a'), ('CHARACTER_DATA', b'x'), ('ATTRIBUTE_VALUE', b'1'), ('START_TAG', b'b'), ('END_TAG', b'b'), ('END_TAG', b'a')]

>>> # Convenience layer for whole documents or chunked input
>>> from sxml import tokenize
>>> [t.type.name for t in tokenize("<r>hi</r>")]
['START_TAG', 'CHARACTER_DATA', 'END_TAG']
"""

from sxml.errors import IncompleteXMLError, InvalidXMLError, XMLTokenizeError
from sxml.models import (
    TOKEN_DTYPE,
    ErrorCode,
    ParseState,
    Token,
    TokenType,
    grow_token_array,
    make_token_array,
    read_tokens,
)
from sxml.parser import parse, rebase, reset
from sxml.stream import TokenStream, iter_chunks, tokenize

__all__ = [
    "TOKEN_DTYPE",
    "ErrorCode",
    "IncompleteXMLError",
    "InvalidXMLError",
    "ParseState",
    "Token",
    "TokenStream",
    "TokenType",
    "XMLTokenizeError",
    "grow_token_array",
    "iter_chunks",
    "make_token_array",
    "parse",
    "read_tokens",
    "rebase",
    "reset",
    "tokenize",
]
