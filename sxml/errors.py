"""Exceptions raised by the convenience layer.

The core ``parse`` never raises for bad input; it returns an ``ErrorCode``.
"""

from __future__ import annotations

from sxml.models import ErrorCode


class XMLTokenizeError(ValueError):
    """Base class for tokenizing failures.

    Parameters
    ----------
    msg : str
        Human-readable description.
    code : ErrorCode
        The code that ended the parse.
    offset : int
        Byte offset of the first construct that could not be consumed.
    """

    def __init__(self, msg: str, code: ErrorCode, offset: int) -> None:
        super().__init__(msg)
        self.code = code
        self.offset = offset


class InvalidXMLError(XMLTokenizeError):
    """The input does not have the structure the tokenizer accepts."""


class IncompleteXMLError(XMLTokenizeError):
    """The input ended before the root element closed."""
