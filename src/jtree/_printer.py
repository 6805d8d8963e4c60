"""
Tree serializer: two strategies behind one ``Printer`` interface.

``BufferedPrinter`` appends everything to a single growable ``PrintBuffer``.
``FragmentPrinter`` renders every child into its own block, then allocates
one exact-size block for the parent and concatenates. Both share the scalar
codecs and produce byte-identical output.

Pretty output indents object members with one tab per depth level, puts a
newline after every member and a space after ``:`` and ``,``. Arrays stay on
one line.
"""

from __future__ import annotations

from jtree._allocator import Allocator
from jtree._errors import OutOfMemoryError
from jtree._errors import TreeDepthError
from jtree._node import NESTING_LIMIT
from jtree._node import Node
from jtree._node import NodeType
from jtree._numbers import format_number
from jtree._printbuffer import PrintBuffer
from jtree._profile import ProfileContext
from jtree._strings import escaped_size
from jtree._strings import write_escaped

_LITERALS = {
    NodeType.NULL: b"null",
    NodeType.TRUE: b"true",
    NodeType.FALSE: b"false",
}


def _put(view: memoryview, data: bytes) -> None:
    """Writes ``data`` plus a NUL terminator without committing it."""
    view[: len(data)] = data
    view[len(data)] = 0


class Printer:
    """Renders a node tree to UTF-8 JSON text."""

    def __init__(self, pretty: bool, allocator: Allocator) -> None:
        self.pretty = pretty
        self.allocator = allocator
        self.item_separator = b", " if pretty else b","
        self.key_separator = b": " if pretty else b":"

    def render(self, node: Node) -> bytes:
        raise NotImplementedError

    @staticmethod
    def scalar_text(node: Node) -> bytes | None:
        """Text of a null, boolean or number node; None for other types."""
        if node.type in _LITERALS:
            return _LITERALS[node.type]
        if node.type is NodeType.NUMBER:
            return format_number(node.value)  # type: ignore[arg-type]
        return None

    @staticmethod
    def check_depth(depth: int) -> None:
        if depth >= NESTING_LIMIT:
            raise TreeDepthError(f"tree nests deeper than {NESTING_LIMIT} levels")


class BufferedPrinter(Printer):
    """Writes directly into one amortized-doubling print buffer."""

    def __init__(
        self, pretty: bool, allocator: Allocator, prebuffer: int = 256
    ) -> None:
        super().__init__(pretty, allocator)
        self.prebuffer = prebuffer

    def render(self, node: Node) -> bytes:
        buffer = PrintBuffer(self.prebuffer, self.allocator)
        try:
            with ProfileContext("render_buffered") as profile:
                self.print_value(node, 0, buffer)
                buffer.offset = profile.nbytes = buffer.update()
                return buffer.getvalue()
        finally:
            buffer.release()

    def print_value(self, node: Node, depth: int, buffer: PrintBuffer) -> None:
        """Writes ``node`` at the cursor, leaving it NUL-terminated but uncommitted."""
        text = self.scalar_text(node)
        if text is not None:
            _put(buffer.ensure(len(text) + 1), text)
        elif node.type is NodeType.STRING:
            self.print_string(node.value, buffer)  # type: ignore[arg-type]
        elif node.type is NodeType.ARRAY:
            self.print_array(node, depth, buffer)
        elif node.type is NodeType.OBJECT:
            self.print_object(node, depth, buffer)
        else:
            raise ValueError(f"cannot render a node of type {node.type!r}")

    def print_string(
        self, data: bytes | bytearray | None, buffer: PrintBuffer
    ) -> None:
        view = buffer.ensure(escaped_size(data) + 1)
        end = write_escaped(data, view)
        view[end] = 0

    def print_array(self, node: Node, depth: int, buffer: PrintBuffer) -> None:
        self.check_depth(depth)
        if node.child is None:
            _put(buffer.ensure(3), b"[]")
            return

        buffer.write(b"[")
        for child in node:
            self.print_value(child, depth + 1, buffer)
            buffer.offset = buffer.update()
            if child.next is not None:
                buffer.write(self.item_separator)
        _put(buffer.ensure(2), b"]")

    def print_object(self, node: Node, depth: int, buffer: PrintBuffer) -> None:
        self.check_depth(depth)
        if node.child is None:
            _put(buffer.ensure(depth + 4 if self.pretty else 3), b"{}")
            return

        buffer.write(b"{\n" if self.pretty else b"{")
        depth += 1
        for child in node:
            if self.pretty:
                buffer.write(b"\t" * depth)
            self.print_string(child.name, buffer)
            buffer.offset = buffer.update()
            buffer.write(self.key_separator)

            self.print_value(child, depth, buffer)
            buffer.offset = buffer.update()

            tail = b"," if child.next is not None else b""
            if self.pretty:
                tail += b"\n"
            buffer.write(tail)

        closing = b"\t" * (depth - 1) + b"}" if self.pretty else b"}"
        _put(buffer.ensure(len(closing) + 1), closing)


class FragmentPrinter(Printer):
    """
    Renders each child into its own block and concatenates them.

    Every intermediate block comes from the allocator and is released once
    copied into its parent. If any child fails, every sibling block rendered
    so far is released before the error propagates.
    """

    def render(self, node: Node) -> bytes:
        with ProfileContext("render_fragments") as profile:
            out = self.print_value(node, 0)
            profile.nbytes = len(out)
        try:
            return bytes(out)
        finally:
            self.allocator.release(out)

    def _allocate(self, size: int) -> bytearray:
        block = self.allocator.allocate(size)
        if block is None:
            raise OutOfMemoryError(f"could not allocate {size} bytes")
        return block

    def _copy(self, data: bytes) -> bytearray:
        block = self._allocate(len(data))
        block[:] = data
        return block

    def _release_all(self, blocks: list[bytearray]) -> None:
        for block in blocks:
            self.allocator.release(block)

    def print_value(self, node: Node, depth: int) -> bytearray:
        text = self.scalar_text(node)
        if text is not None:
            return self._copy(text)
        if node.type is NodeType.STRING:
            return self.print_string(node.value)  # type: ignore[arg-type]
        if node.type is NodeType.ARRAY:
            return self.print_array(node, depth)
        if node.type is NodeType.OBJECT:
            return self.print_object(node, depth)
        raise ValueError(f"cannot render a node of type {node.type!r}")

    def print_string(self, data: bytes | bytearray | None) -> bytearray:
        out = self._allocate(escaped_size(data))
        write_escaped(data, out)
        return out

    def print_array(self, node: Node, depth: int) -> bytearray:
        self.check_depth(depth)
        if node.child is None:
            return self._copy(b"[]")

        entries: list[bytearray] = []
        try:
            for child in node:
                entries.append(self.print_value(child, depth + 1))
            size = 2 + sum(map(len, entries))
            size += len(self.item_separator) * (len(entries) - 1)
            out = self._allocate(size)
        except Exception:
            self._release_all(entries)
            raise

        out[0] = ord("[")
        cursor = 1
        for index, entry in enumerate(entries):
            out[cursor : cursor + len(entry)] = entry
            cursor += len(entry)
            if index != len(entries) - 1:
                out[cursor : cursor + len(self.item_separator)] = self.item_separator
                cursor += len(self.item_separator)
        out[cursor] = ord("]")
        self._release_all(entries)
        return out

    def print_object(self, node: Node, depth: int) -> bytearray:
        self.check_depth(depth)
        if node.child is None:
            return self._copy(b"{}")

        names: list[bytearray] = []
        entries: list[bytearray] = []
        depth += 1
        indent = b"\t" * depth if self.pretty else b""
        closing_indent = indent[: depth - 1]
        newline = b"\n" if self.pretty else b""
        try:
            for child in node:
                names.append(self.print_string(child.name))
                entries.append(self.print_value(child, depth))
            per_member = len(indent) + len(self.key_separator) + len(newline)
            size = 2 + len(newline) + len(closing_indent)
            size += sum(map(len, names)) + sum(map(len, entries))
            # one comma between each pair of members
            size += per_member * len(entries) + len(entries) - 1
            out = self._allocate(size)
        except Exception:
            self._release_all(names)
            self._release_all(entries)
            raise

        parts = [b"{", newline]
        for index, (name, entry) in enumerate(zip(names, entries, strict=True)):
            parts += [indent, name, self.key_separator, entry]
            if index != len(entries) - 1:
                parts.append(b",")
            parts.append(newline)
        parts += [closing_indent, b"}"]

        cursor = 0
        for part in parts:
            out[cursor : cursor + len(part)] = part
            cursor += len(part)
        self._release_all(names)
        self._release_all(entries)
        return out


def render_node(
    node: Node,
    pretty: bool,
    allocator: Allocator,
    buffered: bool = False,
    prebuffer: int = 256,
) -> bytes:
    """Renders ``node`` with the chosen strategy."""
    if not isinstance(node, Node):
        raise TypeError(f"expected a Node, not {type(node).__name__}")
    printer: Printer
    if buffered:
        printer = BufferedPrinter(pretty, allocator, prebuffer)
    else:
        printer = FragmentPrinter(pretty, allocator)
    return printer.render(node)
