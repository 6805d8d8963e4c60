"""
Test data generators for parse, render and minify benchmarks.

Creates JSON documents that stress different parts of the tree codec:
- Wide objects (many members, long sibling chains)
- Long mixed arrays (every node type)
- Deep nesting (recursive descent and pretty indentation)
- Escape-heavy strings, including surrogate pairs
- Commented, indented text for the minifier
"""

import json
import random
import string
from typing import Any

# Constants for random data generation
_INT_TYPE = 1
_FLOAT_TYPE = 2
_STRING_TYPE = 3
_BOOL_TYPE = 4
_NULL_TYPE = 5
_ESCAPE_PROBABILITY = 0.3

DATA_TYPES = (
    "small_object",
    "large_object",
    "mixed_array",
    "nested_structure",
    "string_heavy",
    "surrogate_heavy",
)


def generate_test_data(data_type: str) -> str:
    """Generates JSON test data based on specified type."""
    generators = {
        "small_object": _generate_small_object,
        "large_object": _generate_large_object,
        "mixed_array": _generate_mixed_array,
        "nested_structure": _generate_nested_structure,
        "string_heavy": _generate_string_heavy,
        "surrogate_heavy": _generate_surrogate_heavy,
        "commented": _generate_commented,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type]()


def _generate_small_object() -> str:
    """Generates a small JSON object (< 1KB) with basic key-value pairs."""
    data = {
        "id": 12345,
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "active": True,
        "balance": 1234.56,
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }
    return json.dumps(data)


def _generate_large_object() -> str:
    """Generates a large JSON object (> 10KB) with wide member lists."""
    data = {
        "account_id": random.randint(1000000, 9999999),
        "settings": {
            f"option_{i}": random.choice([True, False, None, i, _random_string(6)])
            for i in range(100)
        },
        "ledger": [
            {
                "id": f"entry_{i:06d}",
                "amount": round(random.uniform(1.0, 1000.0), 2),
                "units": random.randint(1, 10**6),
                "tiny": random.uniform(0, 1e-7),
                "huge": random.uniform(1e10, 1e12),
                "memo": f"Payment for {_random_string(20)}",
            }
            for i in range(60)
        ],
    }
    return json.dumps(data)


def _generate_mixed_array() -> str:
    """Generates a large array with every node type."""
    array: list[Any] = []

    for i in range(300):
        choice = random.randint(1, 6)
        if choice == _INT_TYPE:
            array.append(random.randint(-(2**40), 2**40))
        elif choice == _FLOAT_TYPE:
            array.append(round(random.uniform(-100.0, 100.0), 3))
        elif choice == _STRING_TYPE:
            array.append(_random_string(random.randint(5, 30)))
        elif choice == _BOOL_TYPE:
            array.append(random.choice([True, False]))
        elif choice == _NULL_TYPE:
            array.append(None)
        else:
            array.append({"index": i, "tags": [], "meta": {}})

    return json.dumps(array)


def _generate_nested_structure() -> str:
    """Generates a deeply nested JSON structure."""

    def create_nested_dict(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_string(10)}

        return {
            "level": depth,
            "items": [create_nested_dict(depth - 1) for _ in range(2)],
            "nested": [[[create_nested_dict(depth - 1)]]],
        }

    return json.dumps(create_nested_dict(6))


def _create_escaped_string() -> str:
    """Creates a JSON string body with random short escape sequences."""
    chars = []
    for _ in range(50):
        if random.random() < _ESCAPE_PROBABILITY:
            chars.append(
                random.choice(
                    ['\\"', "\\\\", "\\/", "\\b", "\\f", "\\n", "\\r", "\\t"]
                )
            )
        else:
            chars.append(random.choice(string.ascii_letters + string.digits + " "))
    return "".join(chars)


def _generate_string_heavy() -> str:
    """Generates JSON with many string escape sequences."""
    strings = ",".join(f'"{_create_escaped_string()}"' for _ in range(100))
    unicode = ",".join(
        f'"BMP: \\u{random.randint(0x00A0, 0xD7FF):04x}"' for _ in range(50)
    )
    members = ",".join(
        f'"key_{i}": "{_create_escaped_string()}"' for i in range(20)
    )
    return f'{{"strings": [{strings}], "unicode": [{unicode}], "mixed": {{{members}}}}}'


def _generate_surrogate_heavy() -> str:
    """Generates strings made mostly of escaped astral code points."""

    def pair(code_point: int) -> str:
        offset = code_point - 0x10000
        return "\\u%04x\\u%04x" % (0xD800 + (offset >> 10), 0xDC00 + (offset & 0x3FF))

    strings = ",".join(
        '"' + "".join(pair(random.randint(0x1F300, 0x1FAFF)) for _ in range(20)) + '"'
        for _ in range(100)
    )
    return f"[{strings}]"


def _generate_commented() -> str:
    """Generates indented JSON with line and block comments."""
    lines = ["/* generated configuration */", "{"]
    for i in range(200):
        lines.append(f"    // setting {i}")
        lines.append(f'    "key_{i}": "value // not a comment {i}",  /* inline */')
    lines.append('    "last": true')
    lines.append("}")
    return "\n".join(lines)


def _random_string(length: int) -> str:
    """Generates a random string of specified length."""
    return "".join(random.choices(string.ascii_letters, k=length))
