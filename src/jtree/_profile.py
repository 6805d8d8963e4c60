"""
Opt-in timing of parser and printer hot paths.

Set ``JTREE_PROFILE`` in the environment before import to collect per-section
call counts, elapsed time and bytes handled. Without it every
``ProfileContext`` is an empty context manager.
"""

import os
import time
from dataclasses import dataclass
from typing import Any

PROFILE_HOT_PATHS = __debug__ and "JTREE_PROFILE" in os.environ


@dataclass
class HotPathStats:
    """Accumulated timings for one named section."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    bytes_processed: int = 0

    def record_call(self, duration_ns: int, nbytes: int = 0) -> None:
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.bytes_processed += nbytes

    @property
    def mean_time_ns(self) -> float:
        return self.total_time_ns / self.call_count if self.call_count else 0.0

    @property
    def megabytes_per_second(self) -> float:
        if not self.total_time_ns:
            return 0.0
        return self.bytes_processed / self.total_time_ns * 1e3


def format_hot_path_stats(stats: dict[str, HotPathStats]) -> str:
    """Renders ``stats`` as a table, slowest section first."""
    rows = [f"{'section':<20} {'calls':>10} {'total ms':>10} {'mean ns':>10} {'MB/s':>8}"]
    for entry in sorted(stats.values(), key=lambda s: s.total_time_ns, reverse=True):
        rows.append(
            f"{entry.function_name:<20} {entry.call_count:>10} "
            f"{entry.total_time_ns / 1e6:>10.3f} {entry.mean_time_ns:>10.0f} "
            f"{entry.megabytes_per_second:>8.1f}"
        )
    return "\n".join(rows)


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Times the enclosed block; ``nbytes`` may be set inside it."""

        __slots__ = ("func_name", "nbytes", "start_time")

        def __init__(self, func_name: str, nbytes: int = 0) -> None:
            self.func_name = func_name
            self.nbytes = nbytes
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            entry = _hot_path_stats.get(self.func_name)
            if entry is None:
                entry = _hot_path_stats[self.func_name] = HotPathStats(
                    self.func_name
                )
            entry.record_call(duration, self.nbytes)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return dict(_hot_path_stats)

    def clear_hot_path_stats() -> None:
        _hot_path_stats.clear()

else:

    class ProfileContext:  # type: ignore[no-redef]
        __slots__ = ("nbytes",)

        def __init__(self, func_name: str, nbytes: int = 0) -> None:
            self.nbytes = nbytes

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass
