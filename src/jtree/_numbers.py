"""
Number codec: text to double and double to text.

Parsing takes the longest prefix that a C ``strtod`` would accept in decimal
form and hands it to ``float``. Formatting follows a fixed chain of
heuristics (zero, 32-bit integer, non-finite, large integer, scientific,
fixed) whose order decides the output and must not be rearranged.
"""

import math
import re
import sys

from jtree._errors import MalformedInputError
from jtree._node import Node
from jtree._node import NodeType
from jtree._profile import ProfileContext

DBL_EPSILON = sys.float_info.epsilon
INT_MAX = 2**31 - 1
INT_MIN = -(2**31)

_NUMBER_PREFIX = re.compile(rb"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_number(node: Node, data: bytes, start: int) -> int:
    """
    Parses the number at ``start`` into ``node``; returns the offset after it.

    Trailing bytes the numeric grammar cannot use (``1e``, ``0x14``) are left
    for the caller to reject.
    """
    with ProfileContext("parse_number"):
        match = _NUMBER_PREFIX.match(data, start)
        if match is None:
            raise MalformedInputError("Invalid number", b"", start)
        node.value = float(match.group())
        node.type = NodeType.NUMBER
        return match.end()


def _is_integral(number: float) -> bool:
    if not math.isfinite(number):
        return False
    return abs(math.floor(number) - number) <= DBL_EPSILON


def format_number(number: float) -> bytes:
    """Renders ``number`` using the same format policy as the C printer."""
    if number == 0:
        return b"0"
    if _is_integral(number) and INT_MIN <= number <= INT_MAX:
        return b"%d" % int(number)
    # NaN and the infinities are the only values for which this holds.
    if (number * 0) != 0:
        return b"null"
    if _is_integral(number) and abs(number) < 1.0e60:
        return b"%.0f" % number
    if abs(number) < 1.0e-6 or abs(number) > 1.0e9:
        return b"%e" % number
    return b"%f" % number
