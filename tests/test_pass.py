"""
JSON specification compliance tests for valid JSON inputs.

Validates that properly formatted JSON strings parse successfully into node
trees with the expected shape and values.
"""

import jtree

from .conftest import JsonTestCase


def test_json_spec_compliance(
    json_pass_cases: list[JsonTestCase],
    tracking_allocator: jtree.TrackingAllocator,
) -> None:
    """
    Validates JSON strings that must parse successfully per specification.

    Tests standards compliance for valid JSON structures including complex
    nested documents, deep arrays, and simple objects.
    """
    for case in json_pass_cases:
        tree = jtree.loads(
            case.input_data, strict=True, allocator=tracking_allocator
        )
        assert tree.type in (jtree.NodeType.ARRAY, jtree.NodeType.OBJECT)
        tree.delete()


def test_pass1_values(json_pass_cases: list[JsonTestCase]) -> None:
    """
    Validates selected values from the pass1.json document.
    """
    tree = jtree.loads(json_pass_cases[0].input_data)
    assert len(tree) == 20

    members = tree.item(8)
    assert members is not None
    assert members.get("integer").value == 1234567890.0  # type: ignore[union-attr]
    assert members.get("E").value == 1.234567890e34  # type: ignore[union-attr]
    assert members.get("").value == 23456789012e66  # type: ignore[union-attr]
    assert members.get("controls").text == "\b\f\n\r\t"  # type: ignore[union-attr]
    assert members.get("slash").text == "/ & /"  # type: ignore[union-attr]
    assert (
        members.get("hex").text  # type: ignore[union-attr]
        == "\u0123\u4567\u89ab\ucdef\uabcd\uef4a"
    )
    assert members.get("array").type is jtree.NodeType.ARRAY  # type: ignore[union-attr]
    assert len(members.get(" s p a c e d ")) == 7  # type: ignore[arg-type]
    tree.delete()


def test_basic_json_values(basic_json_values: list[JsonTestCase]) -> None:
    """
    Validates parsing of fundamental JSON value types.

    Covers all JSON primitive types and basic container structures
    to ensure core parsing functionality works correctly.
    """
    for case in basic_json_values:
        tree = jtree.loads(case.input_data)
        assert tree.to_python() == case.expected_output, case.description
        tree.delete()


def test_empty_containers() -> None:
    """
    Validates parsing of empty JSON containers.
    """
    assert jtree.loads("[]").to_python() == []
    assert jtree.loads("{}").to_python() == {}
    assert jtree.loads(" [] ").to_python() == []  # With whitespace
    assert jtree.loads(" {} ").to_python() == {}  # With whitespace


def test_whitespace_handling() -> None:
    """
    Validates proper handling of JSON whitespace.

    Every byte from 1 to 32 counts as whitespace, not only the four the
    grammar names.
    """
    assert jtree.loads(" null ").type is jtree.NodeType.NULL
    assert jtree.loads("\n\ttrue\n").type is jtree.NodeType.TRUE
    assert jtree.loads("\r\n42\r\n").value == 42.0

    assert jtree.loads("[ 1 , 2 , 3 ]").to_python() == [1.0, 2.0, 3.0]
    assert jtree.loads('{ "key" : "value" }').to_python() == {"key": "value"}
    assert jtree.loads("\x01\x0b[\x1f1\x0c]\x07").to_python() == [1.0]
