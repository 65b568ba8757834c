"""Incremental tokenizing over a growing buffer.

``TokenStream`` is the caller-side collaborator that the core leaves out. It
collects chunks into one buffer and grows the token array when it fills, then
resumes ``parse`` with the same state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from sxml.errors import IncompleteXMLError, InvalidXMLError
from sxml.models import ErrorCode, ParseState, Token, grow_token_array, make_token_array, read_tokens
from sxml.parser import parse

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 64
GROWTH_FACTOR = 2


class TokenStream:
    """Feed XML bytes in chunks and collect tokens as constructs complete.

    Parameters
    ----------
    capacity : int, optional
        Initial token array size, by default ``DEFAULT_CAPACITY``.
    check_end_names : bool, optional
        Reject end tags whose name differs from the open element.

    Examples
    --------
    >>> stream = TokenStream()
    >>> stream.feed(b"<root>")
    <ErrorCode.BUFFER_DRY: 1>
    >>> stream.feed(b"</root>")
    <ErrorCode.SUCCESS: 0>
    >>> [t.type.name for t in stream.tokens]
    ['START_TAG', 'END_TAG']
    """

    def __init__(self, *, capacity: int = DEFAULT_CAPACITY, check_end_names: bool = False) -> None:
        self._buffer = bytearray()
        self._tokens = make_token_array(max(capacity, 1))
        self._state = ParseState()
        self._check_end_names = check_end_names
        self._done = False

    @property
    def state(self) -> ParseState:
        """Committed parse position."""
        return self._state

    @property
    def done(self) -> bool:
        """True once the root element has closed."""
        return self._done

    @property
    def buffer(self) -> bytes:
        """All bytes fed so far."""
        return bytes(self._buffer)

    @property
    def capacity(self) -> int:
        """Current token array size."""
        return len(self._tokens)

    @property
    def tokens(self) -> list[Token]:
        """Committed tokens in document order."""
        return read_tokens(self._tokens, self._state.token_count)

    def feed(self, chunk: bytes) -> ErrorCode:
        """Append ``chunk`` and tokenize everything that is now complete.

        Returns
        -------
        ErrorCode
            ``SUCCESS`` when the root element has closed, ``BUFFER_DRY``
            when more input is needed.

        Raises
        ------
        InvalidXMLError
            If the input is malformed.
        """
        if self._done:
            return ErrorCode.SUCCESS

        self._buffer.extend(chunk)
        while True:
            err = parse(
                self._state,
                self._buffer,
                self._tokens,
                check_end_names=self._check_end_names,
            )
            if err != ErrorCode.TOKENS_FULL:
                break
            new_capacity = len(self._tokens) * GROWTH_FACTOR
            logger.debug("Growing token array from %d to %d", len(self._tokens), new_capacity)
            self._tokens = grow_token_array(self._tokens, new_capacity)

        if err == ErrorCode.INVALID:
            offset = self._state.cursor
            msg = f"Invalid XML near byte {offset}: {_excerpt(self._buffer, offset)!r}"
            raise InvalidXMLError(msg, err, offset)

        self._done = err == ErrorCode.SUCCESS
        return err

    def close(self) -> list[Token]:
        """Finish the stream and return its tokens.

        Raises
        ------
        IncompleteXMLError
            If the root element never closed.
        """
        if not self._done:
            offset = self._state.cursor
            msg = f"XML input ended inside the document at byte {offset} (depth {self._state.depth})"
            raise IncompleteXMLError(msg, ErrorCode.BUFFER_DRY, offset)
        return self.tokens


def _excerpt(buffer: bytes, offset: int, width: int = 20) -> bytes:
    return bytes(buffer[offset : offset + width])


def iter_chunks(data: bytes, size: int) -> Iterator[bytes]:
    """Yield successive ``size``-byte slices of ``data``.

    Examples
    --------
    >>> list(iter_chunks(b"abcde", 2))
    [b'ab', b'cd', b'e']
    """
    if size < 1:
        msg = f"Chunk size must be positive, got {size}"
        raise ValueError(msg)
    for start in range(0, len(data), size):
        yield data[start : start + size]


def tokenize(
    data: bytes | str,
    *,
    capacity: int = DEFAULT_CAPACITY,
    check_end_names: bool = False,
) -> list[Token]:
    """Tokenize a complete document in one pass.

    Parameters
    ----------
    data : bytes | str
        The document. ``str`` input is encoded as UTF-8, and token offsets
        refer to those encoded bytes.
    capacity : int, optional
        Initial token array size.
    check_end_names : bool, optional
        Reject end tags whose name differs from the open element.

    Returns
    -------
    list[Token]
        All tokens of the root element and its prolog.

    Raises
    ------
    InvalidXMLError
        If the document is malformed.
    IncompleteXMLError
        If the document ends before the root element closes.

    Examples
    --------
    >>> [(t.type.name, t.start, t.end) for t in tokenize("<a/>")]
    [('START_TAG', 1, 2), ('END_TAG', 1, 2)]
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    stream = TokenStream(capacity=capacity, check_end_names=check_end_names)
    stream.feed(data)
    return stream.close()
