"""Amortized-doubling byte buffer with a committed-length cursor."""

from __future__ import annotations

import logging

from jtree._allocator import SIZE_MAX
from jtree._allocator import Allocator
from jtree._errors import OutOfMemoryError

logger = logging.getLogger(__name__)


class PrintBuffer:
    """
    Output buffer for the buffered printer.

    ``offset`` is the committed length: bytes before it are final, bytes from
    it onwards are scratch space. Writers obtain room with ``ensure``, write a
    NUL-terminated fragment, and then either advance ``offset`` themselves or
    call ``update`` to find the terminator.

    Once an allocation fails the buffer is released and left empty, so every
    later ``ensure`` fails too instead of writing into a stale block.
    """

    def __init__(self, capacity: int, allocator: Allocator) -> None:
        if capacity < 0:
            raise ValueError("capacity must be a non-negative integer")
        self.allocator = allocator
        self.buffer: bytearray | None = allocator.allocate(capacity)
        if self.buffer is None:
            raise OutOfMemoryError(
                f"could not allocate a {capacity} byte print buffer"
            )
        self.length = capacity
        self.offset = 0

    def ensure(self, needed: int) -> memoryview:
        """Returns a writable view of at least ``needed`` bytes at the cursor."""
        if self.buffer is None:
            raise OutOfMemoryError("print buffer was released")

        needed += self.offset
        if needed <= self.length:
            return memoryview(self.buffer)[self.offset :]

        newsize = max(self.length, needed) * 2
        if newsize > SIZE_MAX:
            raise OutOfMemoryError(f"print buffer size overflow at {needed} bytes")

        newbuffer = self.allocator.allocate(newsize)
        if newbuffer is None:
            self.release()
            raise OutOfMemoryError(
                f"could not grow print buffer to {newsize} bytes"
            )
        logger.debug("growing print buffer from %d to %d bytes", self.length, newsize)
        newbuffer[: self.length] = self.buffer
        self.allocator.release(self.buffer)
        self.buffer = newbuffer
        self.length = newsize
        return memoryview(newbuffer)[self.offset :]

    def update(self) -> int:
        """Returns the committed length implied by the NUL after the cursor."""
        if self.buffer is None:
            return 0
        end = self.buffer.find(0, self.offset)
        return self.length if end < 0 else end

    def write(self, data: bytes | bytearray) -> None:
        """Appends ``data`` at the cursor and commits it."""
        view = self.ensure(len(data) + 1)
        view[: len(data)] = data
        view[len(data)] = 0
        self.offset += len(data)

    def getvalue(self) -> bytes:
        if self.buffer is None:
            raise OutOfMemoryError("print buffer was released")
        return bytes(self.buffer[: self.offset])

    def release(self) -> None:
        if self.buffer is not None:
            self.allocator.release(self.buffer)
        self.buffer = None
        self.length = 0
