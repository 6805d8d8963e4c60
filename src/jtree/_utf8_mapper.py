"""Byte offset to character offset mapping for UTF-8 encoded documents."""

from __future__ import annotations

from bisect import bisect_right
from typing import Final

from jtree._node import TEXT_ENCODING
from jtree._node import TEXT_ERRORS


def _encoded_length(text: str) -> int:
    return len(text.encode(TEXT_ENCODING, TEXT_ERRORS))


class UTF8PositionMapper:
    """Maps offsets into a document's UTF-8 encoding back to ``str`` indices.

    The parser reports byte offsets; callers that passed a ``str`` expect
    character indices. Pairs of (byte, char) offsets are recorded every
    ``checkpoint_interval`` characters, and a lookup bisects to the nearest
    pair at or before the byte offset and walks forward from there.
    """

    def __init__(self, text: str, checkpoint_interval: int = 256) -> None:
        """
        Args:
            text: The document the byte offsets refer to
            checkpoint_interval: Characters between recorded offset pairs
        """
        if checkpoint_interval < 1:
            raise ValueError("checkpoint_interval must be positive")
        self.text: Final = text
        self.checkpoint_interval: Final = checkpoint_interval
        self._is_ascii_only: Final = text.isascii()
        self._byte_checkpoints: list[int] = []
        self._char_checkpoints: list[int] = []

        if not self._is_ascii_only:
            self._build_checkpoints()

    def _build_checkpoints(self) -> None:
        byte_pos = 0
        interval = self.checkpoint_interval
        for char_pos in range(0, len(self.text), interval):
            self._byte_checkpoints.append(byte_pos)
            self._char_checkpoints.append(char_pos)
            byte_pos += _encoded_length(self.text[char_pos : char_pos + interval])

        # sentinel pair for the end of the document
        self._byte_checkpoints.append(byte_pos)
        self._char_checkpoints.append(len(self.text))

    def byte_to_char(self, byte_pos: int) -> int:
        """Returns the index of the first character starting at or after
        ``byte_pos``, or ``len(text)`` for offsets at or past the end."""
        if self._is_ascii_only:
            return min(byte_pos, len(self.text))

        index = bisect_right(self._byte_checkpoints, byte_pos) - 1
        current_byte = self._byte_checkpoints[index]
        char_pos = self._char_checkpoints[index]

        text = self.text
        while current_byte < byte_pos and char_pos < len(text):
            current_byte += _encoded_length(text[char_pos])
            char_pos += 1

        return char_pos
