"""
Exception taxonomy for parsing and rendering JSON node trees.

Parse failures carry the offset of the first byte that could not be
interpreted, plus line and column numbers computed against the caller's
document. Rendering can only fail when the allocator runs out of memory.
"""

from __future__ import annotations

from typing import TypeAlias

Position: TypeAlias = int


class JSONError(Exception):
    """Base class for every error raised by jtree."""


class JSONDecodeError(JSONError, ValueError):
    """
    Reports a parse failure with precise position information.

    ``pos`` indexes the document as the caller supplied it (characters for
    ``str`` input, bytes otherwise); ``byte_offset`` always indexes its UTF-8
    encoding.
    """

    def __init__(
        self,
        msg: str,
        doc: str | bytes = "",
        pos: Position = 0,
        byte_offset: Position | None = None,
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos
        self.byte_offset = pos if byte_offset is None else byte_offset

        newline = "\n" if isinstance(doc, str) else b"\n"
        self.lineno = doc.count(newline, 0, pos) + 1 if doc else 1  # type: ignore[arg-type]
        self.colno = pos - doc.rfind(newline, 0, pos) if doc else pos + 1  # type: ignore[arg-type]

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")

    def __reduce__(self) -> tuple[type, tuple[str, str | bytes, int, int]]:
        return (type(self), (self.msg, self.doc, self.pos, self.byte_offset))


class MalformedInputError(JSONDecodeError):
    """Unparseable number, unterminated string or trailing backslash."""


class UnexpectedTokenError(JSONDecodeError):
    """Input matches none of the JSON productions, or a delimiter is missing."""


class InvalidEscapeError(JSONDecodeError):
    """Bad hex digit, invalid code unit or unknown escape letter."""


class InvalidSurrogatePairError(JSONDecodeError):
    """Lone or mismatched UTF-16 surrogate."""


class TrailingGarbageError(JSONDecodeError):
    """Non-whitespace after the top-level value in strict mode."""


class OutOfMemoryError(JSONError, MemoryError):
    """The allocator refused a request, or a size computation overflowed."""


class AllocatorError(JSONError, RuntimeError):
    """A block was released that the allocator does not own."""


class NestingLimitError(JSONDecodeError):
    """Arrays and objects nest deeper than ``NESTING_LIMIT``."""


class TreeDepthError(JSONError, RecursionError):
    """A tree handed to a printer nests deeper than ``NESTING_LIMIT``."""
