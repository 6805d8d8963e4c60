"""
Value model: the tagged node type and the child/sibling tree it forms.

A node owns its first child (``child``) and its following sibling (``next``);
there are no parent or previous links. String payloads and object keys are
UTF-8 byte blocks obtained from the node's allocator. A reference node shares
``child`` and its string payload with the node it was copied from and never
releases them.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import dataclass
from dataclasses import field
from enum import IntEnum
from typing import Any

from jtree._allocator import DEFAULT_ALLOCATOR
from jtree._allocator import Allocator
from jtree._errors import OutOfMemoryError

# Accounting size of one node block on a 64-bit layout.
NODE_SIZE = 64

# Deepest array or object nesting the parser and printers accept.
NESTING_LIMIT = 200

TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"


class NodeType(IntEnum):
    """Variant tag of a node, one bit per JSON type."""

    INVALID = 0
    FALSE = 1 << 0
    TRUE = 1 << 1
    NULL = 1 << 2
    NUMBER = 1 << 3
    STRING = 1 << 4
    ARRAY = 1 << 5
    OBJECT = 1 << 6


def encode_text(text: str | bytes | bytearray) -> bytes:
    """Returns the UTF-8 bytes for a key or string value."""
    if isinstance(text, str):
        return text.encode(TEXT_ENCODING, TEXT_ERRORS)
    return bytes(text)


def copy_block(data: bytes | bytearray, allocator: Allocator) -> bytearray:
    """Copies ``data`` into a freshly allocated block of exactly its size."""
    block = allocator.allocate(len(data))
    if block is None:
        raise OutOfMemoryError(f"could not allocate {len(data)} bytes")
    block[:] = data
    return block


@dataclass(eq=False, repr=False)
class Node:
    """
    One JSON value in a parsed or constructed tree.

    ``value`` holds a float for NUMBER nodes and an owned bytearray for
    STRING nodes. ``name`` holds the member key when the node lives inside an
    object; when ``name_is_const`` is set it is a borrowed constant and is
    never released.
    """

    allocator: Allocator = DEFAULT_ALLOCATOR
    type: NodeType = NodeType.INVALID
    value: float | bytearray | None = None
    name: bytearray | bytes | None = None
    child: Node | None = None
    next: Node | None = None
    is_reference: bool = False
    name_is_const: bool = False
    _block: bytearray | None = field(default=None)

    def __repr__(self) -> str:
        label = self.type.name
        if self.name is not None:
            label = f"{self.key!r}: {label}"
        if self.type is NodeType.NUMBER:
            label += f" {self.value!r}"
        elif self.type is NodeType.STRING:
            label += f" {self.text!r}"
        elif self.type in (NodeType.ARRAY, NodeType.OBJECT):
            label += f" ({len(self)} children)"
        if self.is_reference:
            label += " ref"
        return f"<Node {label}>"

    @property
    def text(self) -> str | None:
        """Decoded string payload, or None for non-string nodes."""
        if self.type is not NodeType.STRING or self.value is None:
            return None
        return bytes(self.value).decode(TEXT_ENCODING, TEXT_ERRORS)  # type: ignore[arg-type]

    @property
    def key(self) -> str | None:
        """Decoded member key, or None outside an object."""
        if self.name is None:
            return None
        return bytes(self.name).decode(TEXT_ENCODING, TEXT_ERRORS)

    def is_bool(self) -> bool:
        return self.type in (NodeType.TRUE, NodeType.FALSE)

    def __len__(self) -> int:
        count = 0
        node = self.child
        while node is not None:
            count += 1
            node = node.next
        return count

    def __iter__(self) -> Iterator[Node]:
        node = self.child
        while node is not None:
            yield node
            node = node.next

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str | bytes | bytearray):
            return False
        return self.get(key) is not None

    def item(self, index: int) -> Node | None:
        """Returns the array element at ``index``, or None when out of range."""
        if index < 0:
            return None
        node = self.child
        while node is not None and index > 0:
            index -= 1
            node = node.next
        return node

    def get(self, key: str | bytes | bytearray) -> Node | None:
        """Returns the first object member whose key matches exactly."""
        wanted = encode_text(key)
        for node in self:
            if node.name is not None and bytes(node.name) == wanted:
                return node
        return None

    def to_python(self) -> Any:
        """Materializes the subtree as plain dicts, lists and scalars."""
        if self.type is NodeType.NULL:
            return None
        if self.type is NodeType.TRUE:
            return True
        if self.type is NodeType.FALSE:
            return False
        if self.type is NodeType.NUMBER:
            return self.value
        if self.type is NodeType.STRING:
            return self.text
        if self.type is NodeType.ARRAY:
            return [node.to_python() for node in self]
        if self.type is NodeType.OBJECT:
            return {node.key: node.to_python() for node in self}
        raise ValueError("cannot materialize an uninitialized node")

    def delete(self) -> None:
        """
        Releases this node, its following siblings and everything they own.

        Sibling chains are walked in a loop and pending child lists are kept
        on an explicit stack, so neither long arrays nor deep nesting grow the
        call stack. Reference nodes release only their own block and name,
        never the shared child list or string payload.
        """
        pending: list[Node] = [self]
        while pending:
            node: Node | None = pending.pop()
            while node is not None:
                following = node.next
                allocator = node.allocator
                if not node.is_reference:
                    if node.child is not None:
                        pending.append(node.child)
                    if node.type is NodeType.STRING and node.value is not None:
                        allocator.release(node.value)  # type: ignore[arg-type]
                if not node.name_is_const and node.name is not None:
                    allocator.release(node.name)  # type: ignore[arg-type]
                if node._block is not None:
                    allocator.release(node._block)
                node.child = node.next = None
                node.value = node.name = node._block = None
                node = following


def new_node(allocator: Allocator = DEFAULT_ALLOCATOR) -> Node:
    """Allocates one zero-initialized node."""
    block = allocator.allocate(NODE_SIZE)
    if block is None:
        raise OutOfMemoryError("could not allocate a node")
    return Node(allocator=allocator, _block=block)


def create_null(allocator: Allocator = DEFAULT_ALLOCATOR) -> Node:
    node = new_node(allocator)
    node.type = NodeType.NULL
    return node


def create_true(allocator: Allocator = DEFAULT_ALLOCATOR) -> Node:
    node = new_node(allocator)
    node.type = NodeType.TRUE
    return node


def create_false(allocator: Allocator = DEFAULT_ALLOCATOR) -> Node:
    node = new_node(allocator)
    node.type = NodeType.FALSE
    return node


def create_bool(flag: bool, allocator: Allocator = DEFAULT_ALLOCATOR) -> Node:
    node = new_node(allocator)
    node.type = NodeType.TRUE if flag else NodeType.FALSE
    return node


def create_number(
    number: float, allocator: Allocator = DEFAULT_ALLOCATOR
) -> Node:
    node = new_node(allocator)
    node.type = NodeType.NUMBER
    node.value = float(number)
    return node


def create_string(
    text: str | bytes | bytearray, allocator: Allocator = DEFAULT_ALLOCATOR
) -> Node:
    node = new_node(allocator)
    node.type = NodeType.STRING
    try:
        node.value = copy_block(encode_text(text), allocator)
    except OutOfMemoryError:
        node.delete()
        raise
    return node


def create_array(allocator: Allocator = DEFAULT_ALLOCATOR) -> Node:
    node = new_node(allocator)
    node.type = NodeType.ARRAY
    return node


def create_object(allocator: Allocator = DEFAULT_ALLOCATOR) -> Node:
    node = new_node(allocator)
    node.type = NodeType.OBJECT
    return node


def create_reference(node: Node, allocator: Allocator | None = None) -> Node:
    """
    Creates a non-owning shallow copy of ``node``.

    The copy shares ``child`` and the string payload, has no name and no
    sibling, and never releases the shared data when deleted.
    """
    ref = new_node(node.allocator if allocator is None else allocator)
    ref.type = node.type
    ref.value = node.value
    ref.child = node.child
    ref.name_is_const = node.name_is_const
    ref.is_reference = True
    return ref


def _build_array(
    values: Iterable[Any], make: Any, allocator: Allocator
) -> Node:
    array = create_array(allocator)
    previous: Node | None = None
    try:
        for value in values:
            item = make(value, allocator)
            if previous is None:
                array.child = item
            else:
                previous.next = item
            previous = item
    except OutOfMemoryError:
        array.delete()
        raise
    return array


def _to_single(number: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def create_int_array(
    numbers: Iterable[int], allocator: Allocator = DEFAULT_ALLOCATOR
) -> Node:
    return _build_array(numbers, create_number, allocator)


def create_float_array(
    numbers: Iterable[float], allocator: Allocator = DEFAULT_ALLOCATOR
) -> Node:
    """Builds an array of numbers rounded to single precision."""
    return _build_array(
        (_to_single(n) for n in numbers), create_number, allocator
    )


def create_double_array(
    numbers: Iterable[float], allocator: Allocator = DEFAULT_ALLOCATOR
) -> Node:
    return _build_array(numbers, create_number, allocator)


def create_string_array(
    strings: Iterable[str | bytes], allocator: Allocator = DEFAULT_ALLOCATOR
) -> Node:
    return _build_array(strings, create_string, allocator)


def duplicate(node: Node, recurse: bool = False) -> Node:
    """
    Deep-copies ``node`` (and, with ``recurse``, its whole child list).

    The copy owns all of its data: it is never a reference and its name is
    never constant, whatever the source was. On allocation failure the partial
    copy is deleted before the error propagates.
    """
    allocator = node.allocator
    copy = new_node(allocator)
    try:
        copy.type = node.type
        if node.type is NodeType.STRING and node.value is not None:
            copy.value = copy_block(node.value, allocator)  # type: ignore[arg-type]
        elif node.type is NodeType.NUMBER:
            copy.value = node.value
        if node.name is not None:
            copy.name = copy_block(node.name, allocator)
        if recurse:
            previous: Node | None = None
            for source in node:
                child = duplicate(source, recurse=True)
                if previous is None:
                    copy.child = child
                else:
                    previous.next = child
                previous = child
    except OutOfMemoryError:
        copy.delete()
        raise
    return copy
