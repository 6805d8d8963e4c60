"""
Tree mutation tests.

Validates adding, detaching, inserting and replacing children by index and
by key, and that ownership moves with each operation.
"""

import jtree


def test_build_and_render(tracking_allocator: jtree.TrackingAllocator) -> None:
    """
    Validates a tree assembled by hand renders as expected.
    """
    root = jtree.create_object(tracking_allocator)
    jtree.add_item_to_object(root, "name", jtree.create_string("jtree", tracking_allocator))
    jtree.add_item_to_object(
        root, "sizes", jtree.create_int_array([1, 2], tracking_allocator)
    )
    jtree.add_item_to_object(root, "ok", jtree.create_true(tracking_allocator))
    jtree.add_item_to_array(root, None)

    assert jtree.render_unformatted(root) == '{"name":"jtree","sizes":[1,2],"ok":true}'
    root.delete()


def test_add_item_to_object_copies_key() -> None:
    """
    Validates the key is copied into a block the node owns.
    """
    allocator = jtree.TrackingAllocator()
    root = jtree.create_object(allocator)
    item = jtree.create_null(allocator)
    jtree.add_item_to_object(root, "key", item)

    assert item.key == "key"
    assert allocator.owns(item.name)  # type: ignore[arg-type]

    jtree.add_item_to_object(root, "renamed", jtree.detach_item_from_object(root, "key"))
    assert [node.key for node in root] == ["renamed"]
    root.delete()
    assert allocator.live_count == 0


def test_constant_keys_are_borrowed(
    tracking_allocator: jtree.TrackingAllocator,
) -> None:
    """
    Validates constant keys are used as-is and never released.
    """
    key = b"constant"
    root = jtree.create_object(tracking_allocator)
    item = jtree.create_number(1, tracking_allocator)
    jtree.add_item_to_object_cs(root, key, item)

    assert item.name is key
    assert item.name_is_const
    assert jtree.render_unformatted(root) == '{"constant":1}'
    root.delete()

    copy_source = jtree.create_object(tracking_allocator)
    jtree.add_item_to_object_cs(copy_source, key, jtree.create_null(tracking_allocator))
    copy = jtree.duplicate(copy_source, recurse=True)
    assert not copy.child.name_is_const  # type: ignore[union-attr]
    assert copy.child.name is not key  # type: ignore[union-attr]
    copy_source.delete()
    copy.delete()


def test_references_in_containers(
    tracking_allocator: jtree.TrackingAllocator,
) -> None:
    """
    Validates a subtree can appear in several trees without being copied.
    """
    shared = jtree.loads('{"x": [1, 2]}', allocator=tracking_allocator)
    first = jtree.create_array(tracking_allocator)
    second = jtree.create_object(tracking_allocator)
    jtree.add_item_reference_to_array(first, shared)
    jtree.add_item_reference_to_object(second, "shared", shared)

    assert jtree.render_unformatted(first) == '[{"x":[1,2]}]'
    assert jtree.render_unformatted(second) == '{"shared":{"x":[1,2]}}'

    first.delete()
    second.delete()
    assert shared.to_python() == {"x": [1.0, 2.0]}
    shared.delete()


def test_detach_and_delete_from_array(
    tracking_allocator: jtree.TrackingAllocator,
) -> None:
    """
    Validates detaching by index at the head, middle and tail.
    """
    array = jtree.loads("[0, 1, 2, 3, 4]", allocator=tracking_allocator)

    head = jtree.detach_item_from_array(array, 0)
    assert head is not None and head.value == 0.0 and head.next is None
    middle = jtree.detach_item_from_array(array, 1)
    assert middle is not None and middle.value == 2.0
    assert jtree.detach_item_from_array(array, 10) is None
    assert jtree.detach_item_from_array(array, -1) is None
    jtree.delete_item_from_array(array, 2)

    assert array.to_python() == [1.0, 3.0]
    head.delete()
    middle.delete()
    array.delete()


def test_detach_and_delete_from_object(
    tracking_allocator: jtree.TrackingAllocator,
) -> None:
    """
    Validates detaching by key uses the first exact match.
    """
    obj = jtree.loads('{"a": 1, "b": 2, "a": 3}', allocator=tracking_allocator)

    item = jtree.detach_item_from_object(obj, "a")
    assert item is not None and item.value == 1.0
    assert jtree.detach_item_from_object(obj, "A") is None
    jtree.delete_item_from_object(obj, b"b")
    jtree.delete_item_from_object(obj, "missing")

    assert obj.to_python() == {"a": 3.0}
    item.delete()
    obj.delete()


def test_insert_item_in_array(
    tracking_allocator: jtree.TrackingAllocator,
) -> None:
    """
    Validates insertion before an index, and appending past the end.
    """
    array = jtree.loads("[1, 3]", allocator=tracking_allocator)
    jtree.insert_item_in_array(array, 1, jtree.create_number(2, tracking_allocator))
    jtree.insert_item_in_array(array, 0, jtree.create_number(0, tracking_allocator))
    jtree.insert_item_in_array(array, 99, jtree.create_number(4, tracking_allocator))

    assert array.to_python() == [0.0, 1.0, 2.0, 3.0, 4.0]

    empty = jtree.create_array(tracking_allocator)
    jtree.insert_item_in_array(empty, 0, jtree.create_null(tracking_allocator))
    assert jtree.render_unformatted(empty) == "[null]"

    array.delete()
    empty.delete()


def test_replace_item_in_array(
    tracking_allocator: jtree.TrackingAllocator,
) -> None:
    """
    Validates replacement releases the old child and keeps the siblings.
    """
    array = jtree.loads('["a", "b", "c"]', allocator=tracking_allocator)
    jtree.replace_item_in_array(array, 1, jtree.create_number(2, tracking_allocator))
    jtree.replace_item_in_array(array, 0, jtree.create_null(tracking_allocator))

    assert array.to_python() == [None, 2.0, "c"]

    spare = jtree.create_true(tracking_allocator)
    jtree.replace_item_in_array(array, 5, spare)
    assert len(array) == 3
    spare.delete()
    array.delete()


def test_replace_item_in_object(
    tracking_allocator: jtree.TrackingAllocator,
) -> None:
    """
    Validates replacement by key gives the new child the key.
    """
    obj = jtree.loads('{"keep": 1, "swap": {"deep": [1]}}', allocator=tracking_allocator)
    jtree.replace_item_in_object(obj, "swap", jtree.create_string("new", tracking_allocator))

    assert obj.to_python() == {"keep": 1.0, "swap": "new"}
    assert obj.get("swap").key == "swap"  # type: ignore[union-attr]

    spare = jtree.create_false(tracking_allocator)
    jtree.replace_item_in_object(obj, "absent", spare)
    assert len(obj) == 2
    spare.delete()
    obj.delete()
