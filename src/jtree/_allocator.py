"""
Pluggable memory allocation for nodes, string payloads and print buffers.

Every block the library owns is obtained from an ``Allocator`` and handed
back to the same allocator exactly once. An allocator signals exhaustion by
returning ``None``; callers translate that into ``OutOfMemoryError`` after
releasing whatever partial state they already hold.
"""

from __future__ import annotations

import logging
import sys
from typing import Protocol
from typing import runtime_checkable

from jtree._errors import AllocatorError

logger = logging.getLogger(__name__)

# Largest request any allocator will honour, mirroring size_t on the host.
SIZE_MAX = sys.maxsize


@runtime_checkable
class Allocator(Protocol):
    """Structural protocol for allocators.

    ``allocate`` returns a zero-filled ``bytearray`` of exactly ``size`` bytes
    or ``None`` on failure. ``release`` takes back a block previously returned
    by ``allocate`` on the same allocator.
    """

    def allocate(self, size: int) -> bytearray | None: ...

    def release(self, block: bytearray) -> None: ...


class DefaultAllocator:
    """Allocates plain bytearrays and lets the garbage collector reclaim them."""

    def allocate(self, size: int) -> bytearray | None:
        if size < 0 or size > SIZE_MAX:
            return None
        try:
            return bytearray(size)
        except MemoryError:
            return None

    def release(self, block: bytearray) -> None:
        pass


DEFAULT_ALLOCATOR = DefaultAllocator()


class TrackingAllocator(DefaultAllocator):
    """
    Allocator that keeps an exact ledger of live blocks.

    Releasing a block twice, or a block it never handed out, raises
    ``AllocatorError``. Tests use ``live_count`` to prove that every
    allocation made during a parse or render was released exactly once.
    """

    def __init__(self) -> None:
        self.allocations = 0
        self.releases = 0
        self.live_bytes = 0
        self.peak_bytes = 0
        self._live: dict[int, tuple[bytearray, int]] = {}

    @property
    def live_count(self) -> int:
        return len(self._live)

    def owns(self, block: bytearray) -> bool:
        entry = self._live.get(id(block))
        return entry is not None and entry[0] is block

    def allocate(self, size: int) -> bytearray | None:
        block = super().allocate(size)
        if block is None:
            return None
        self._live[id(block)] = (block, size)
        self.allocations += 1
        self.live_bytes += size
        self.peak_bytes = max(self.peak_bytes, self.live_bytes)
        return block

    def release(self, block: bytearray) -> None:
        if not self.owns(block):
            raise AllocatorError(
                f"release of a block not owned by this allocator ({len(block)} bytes)"
            )
        _, size = self._live.pop(id(block))
        self.releases += 1
        self.live_bytes -= size


class LimitedAllocator(TrackingAllocator):
    """Tracking allocator that refuses every request after ``budget`` successes."""

    def __init__(self, budget: int) -> None:
        if budget < 0:
            raise ValueError("budget must be a non-negative integer")
        super().__init__()
        self.budget = budget

    def allocate(self, size: int) -> bytearray | None:
        if self.allocations >= self.budget:
            logger.debug(
                "allocation of %d bytes refused: budget of %d exhausted",
                size,
                self.budget,
            )
            return None
        return super().allocate(size)
