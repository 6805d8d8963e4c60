"""
Tree mutation: linking, unlinking and replacing children.

All operations are pointer surgery on ``child``/``next``. A detached node
comes back with ``next`` cleared and becomes owned by the caller; deleted and
replaced nodes are released through their own allocator.
"""

from __future__ import annotations

from jtree._node import Node
from jtree._node import copy_block
from jtree._node import create_reference
from jtree._node import encode_text


def _set_owned_name(item: Node, name: str | bytes) -> None:
    if not item.name_is_const and item.name is not None:
        item.allocator.release(item.name)  # type: ignore[arg-type]
    item.name = None
    item.name_is_const = False
    item.name = copy_block(encode_text(name), item.allocator)


def _find_key(obj: Node, name: str | bytes) -> int | None:
    wanted = encode_text(name)
    for index, node in enumerate(obj):
        if node.name is not None and bytes(node.name) == wanted:
            return index
    return None


def add_item_to_array(array: Node, item: Node | None) -> None:
    """Appends ``item`` after the last child of ``array``."""
    if item is None:
        return
    if array.child is None:
        array.child = item
        return
    last = array.child
    while last.next is not None:
        last = last.next
    last.next = item


def add_item_to_object(obj: Node, name: str | bytes, item: Node | None) -> None:
    """
    Appends ``item`` to ``obj`` under an owned copy of ``name``.

    If the key cannot be copied the item is not linked and stays with the
    caller.
    """
    if item is None:
        return
    _set_owned_name(item, name)
    add_item_to_array(obj, item)


def add_item_to_object_cs(obj: Node, name: bytes, item: Node | None) -> None:
    """
    Appends ``item`` under ``name`` without copying it.

    The key is borrowed: it is never released, so it must outlive the tree.
    """
    if item is None:
        return
    if not item.name_is_const and item.name is not None:
        item.allocator.release(item.name)  # type: ignore[arg-type]
    item.name = name
    item.name_is_const = True
    add_item_to_array(obj, item)


def add_item_reference_to_array(array: Node, item: Node) -> None:
    add_item_to_array(array, create_reference(item))


def add_item_reference_to_object(obj: Node, name: str | bytes, item: Node) -> None:
    add_item_to_object(obj, name, create_reference(item))


def detach_item_from_array(array: Node, which: int) -> Node | None:
    """Unlinks and returns the child at index ``which``, or None."""
    if which < 0:
        return None
    previous: Node | None = None
    current = array.child
    while current is not None and which > 0:
        previous = current
        current = current.next
        which -= 1
    if current is None:
        return None
    if previous is None:
        array.child = current.next
    else:
        previous.next = current.next
    current.next = None
    return current


def delete_item_from_array(array: Node, which: int) -> None:
    item = detach_item_from_array(array, which)
    if item is not None:
        item.delete()


def detach_item_from_object(obj: Node, name: str | bytes) -> Node | None:
    index = _find_key(obj, name)
    if index is None:
        return None
    return detach_item_from_array(obj, index)


def delete_item_from_object(obj: Node, name: str | bytes) -> None:
    item = detach_item_from_object(obj, name)
    if item is not None:
        item.delete()


def insert_item_in_array(array: Node, which: int, item: Node) -> None:
    """Inserts ``item`` before index ``which``; appends when past the end."""
    previous: Node | None = None
    current = array.child
    while current is not None and which > 0:
        previous = current
        current = current.next
        which -= 1
    if current is None:
        add_item_to_array(array, item)
        return
    item.next = current
    if previous is None:
        array.child = item
    else:
        previous.next = item


def replace_item_in_array(array: Node, which: int, item: Node) -> None:
    """Swaps ``item`` in at index ``which`` and deletes the old child."""
    if which < 0:
        return
    previous: Node | None = None
    current = array.child
    while current is not None and which > 0:
        previous = current
        current = current.next
        which -= 1
    if current is None:
        return
    item.next = current.next
    if previous is None:
        array.child = item
    else:
        previous.next = item
    current.next = None
    current.delete()


def replace_item_in_object(obj: Node, name: str | bytes, item: Node) -> None:
    """Swaps ``item`` in for the member ``name``; no-op when it is absent."""
    index = _find_key(obj, name)
    if index is None:
        return
    _set_owned_name(item, name)
    replace_item_in_array(obj, index, item)
