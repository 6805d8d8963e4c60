"""
JSON text to node tree codec.

Parses JSON documents into a tree of typed ``Node`` objects linked through
``child`` and ``next``, and renders trees back to text either through a
growable print buffer or by concatenating per-node fragments, in compact or
tab-indented form. Every block the tree owns comes from a pluggable
``Allocator``.
"""

import os
from dataclasses import dataclass
from typing import IO
from typing import Any
from typing import TypeAlias

from jtree._allocator import DEFAULT_ALLOCATOR
from jtree._allocator import Allocator
from jtree._allocator import DefaultAllocator
from jtree._allocator import LimitedAllocator
from jtree._allocator import TrackingAllocator
from jtree._errors import AllocatorError
from jtree._errors import InvalidEscapeError
from jtree._errors import InvalidSurrogatePairError
from jtree._errors import JSONDecodeError
from jtree._errors import JSONError
from jtree._errors import MalformedInputError
from jtree._errors import NestingLimitError
from jtree._errors import OutOfMemoryError
from jtree._errors import TrailingGarbageError
from jtree._errors import TreeDepthError
from jtree._errors import UnexpectedTokenError
from jtree._minify import minify
from jtree._node import NESTING_LIMIT
from jtree._node import Node
from jtree._node import NodeType
from jtree._node import create_array
from jtree._node import create_bool
from jtree._node import create_double_array
from jtree._node import create_false
from jtree._node import create_float_array
from jtree._node import create_int_array
from jtree._node import create_null
from jtree._node import create_number
from jtree._node import create_object
from jtree._node import create_reference
from jtree._node import create_string
from jtree._node import create_string_array
from jtree._node import create_true
from jtree._node import duplicate
from jtree._parser import JsonParser
from jtree._parser import ParseResult
from jtree._parser import parse_document
from jtree._printbuffer import PrintBuffer
from jtree._printer import BufferedPrinter
from jtree._printer import FragmentPrinter
from jtree._printer import Printer
from jtree._printer import render_node
from jtree._profile import HotPathStats
from jtree._profile import clear_hot_path_stats
from jtree._profile import format_hot_path_stats
from jtree._profile import get_hot_path_stats
from jtree._tree import add_item_reference_to_array
from jtree._tree import add_item_reference_to_object
from jtree._tree import add_item_to_array
from jtree._tree import add_item_to_object
from jtree._tree import add_item_to_object_cs
from jtree._tree import delete_item_from_array
from jtree._tree import delete_item_from_object
from jtree._tree import detach_item_from_array
from jtree._tree import detach_item_from_object
from jtree._tree import insert_item_in_array
from jtree._tree import replace_item_in_array
from jtree._tree import replace_item_in_object

__version__ = "0.1.0"

JsonText: TypeAlias = str | bytes | bytearray | memoryview

# Printer strategy - fragment concatenation by default, buffered via environment
USE_BUFFERED_PRINTER = "JTREE_BUFFERED" in os.environ

DEFAULT_PREBUFFER = 256


@dataclass(frozen=True)
class ParseConfig:
    """
    Configures parsing with immutable settings.

    ``strict`` rejects anything but whitespace after the top-level value;
    ``allocator`` supplies every node and string block of the new tree.
    """

    strict: bool = False
    allocator: Allocator | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")
        if self.allocator is not None and not isinstance(
            self.allocator, Allocator
        ):
            raise TypeError("allocator must implement allocate() and release()")

    @property
    def effective_allocator(self) -> Allocator:
        return DEFAULT_ALLOCATOR if self.allocator is None else self.allocator


@dataclass(frozen=True)
class RenderConfig:
    """
    Configures rendering with immutable settings.

    ``buffered`` selects the print-buffer strategy, whose initial capacity is
    ``prebuffer`` bytes; otherwise fragments are rendered and concatenated.
    """

    pretty: bool = True
    buffered: bool = USE_BUFFERED_PRINTER
    prebuffer: int = DEFAULT_PREBUFFER
    allocator: Allocator | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.pretty, bool):
            raise TypeError("pretty must be a boolean")
        if not isinstance(self.buffered, bool):
            raise TypeError("buffered must be a boolean")
        if not isinstance(self.prebuffer, int) or isinstance(self.prebuffer, bool):
            raise TypeError("prebuffer must be an integer")
        if self.prebuffer < 0:
            raise ValueError("prebuffer must be a non-negative integer")
        if self.allocator is not None and not isinstance(
            self.allocator, Allocator
        ):
            raise TypeError("allocator must implement allocate() and release()")

    @property
    def effective_allocator(self) -> Allocator:
        return DEFAULT_ALLOCATOR if self.allocator is None else self.allocator


def parse_with_opts(
    text: JsonText, *, strict: bool = False, config: ParseConfig | None = None
) -> ParseResult:
    """
    Parses ``text`` and reports where parsing stopped.

    ``strict`` (or ``config.strict``) rejects trailing non-whitespace with
    ``TrailingGarbageError``; otherwise trailing bytes are ignored and
    ``ParseResult.end`` points just past the value.
    """
    if config is None:
        config = ParseConfig(strict=strict)
    return parse_document(
        text, config.effective_allocator, strict=strict or config.strict
    )


def parse(text: JsonText, config: ParseConfig | None = None) -> Node:
    """Parses ``text`` into a new tree owned by the caller."""
    return parse_with_opts(text, config=config).node


def render_bytes(node: Node, config: RenderConfig | None = None) -> bytes:
    """Renders ``node`` to UTF-8 JSON text."""
    if config is None:
        config = RenderConfig()
    return render_node(
        node,
        config.pretty,
        config.effective_allocator,
        buffered=config.buffered,
        prebuffer=config.prebuffer,
    )


def render(
    node: Node, pretty: bool = True, config: RenderConfig | None = None
) -> str:
    """Renders ``node`` by concatenating per-node fragments."""
    if config is None:
        config = RenderConfig(pretty=pretty, buffered=False)
    return render_bytes(node, config).decode("utf-8", "surrogateescape")


def render_unformatted(node: Node) -> str:
    return render(node, pretty=False)


def render_buffered(
    node: Node,
    prebuffer: int = DEFAULT_PREBUFFER,
    pretty: bool = True,
    config: RenderConfig | None = None,
) -> str:
    """Renders ``node`` through a print buffer of ``prebuffer`` initial bytes."""
    if config is None:
        config = RenderConfig(pretty=pretty, buffered=True, prebuffer=prebuffer)
    return render_bytes(node, config).decode("utf-8", "surrogateescape")


def loads(s: JsonText, **kwargs: Any) -> Node:
    """
    Parses a JSON document into a node tree.

    Keyword arguments are ``ParseConfig`` fields.
    """
    return parse(s, ParseConfig(**kwargs))


def dumps(node: Node, **kwargs: Any) -> str:
    """
    Serializes a node tree to a JSON string.

    Keyword arguments are ``RenderConfig`` fields.
    """
    return render_bytes(node, RenderConfig(**kwargs)).decode(
        "utf-8", "surrogateescape"
    )


def load(fp: IO[str] | IO[bytes], **kwargs: Any) -> Node:
    """
    Parses a JSON document read from a file-like object.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return loads(fp.read(), **kwargs)


def dump(node: Node, fp: IO[str], **kwargs: Any) -> None:
    """
    Serializes a node tree to a text file-like object.
    """
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    fp.write(dumps(node, **kwargs))


__all__ = [
    "DEFAULT_ALLOCATOR",
    "Allocator",
    "AllocatorError",
    "BufferedPrinter",
    "DefaultAllocator",
    "FragmentPrinter",
    "HotPathStats",
    "InvalidEscapeError",
    "InvalidSurrogatePairError",
    "JSONDecodeError",
    "JSONError",
    "JsonParser",
    "LimitedAllocator",
    "MalformedInputError",
    "NESTING_LIMIT",
    "NestingLimitError",
    "Node",
    "NodeType",
    "OutOfMemoryError",
    "ParseConfig",
    "ParseResult",
    "PrintBuffer",
    "Printer",
    "RenderConfig",
    "TrackingAllocator",
    "TrailingGarbageError",
    "TreeDepthError",
    "UnexpectedTokenError",
    "add_item_reference_to_array",
    "add_item_reference_to_object",
    "add_item_to_array",
    "add_item_to_object",
    "add_item_to_object_cs",
    "clear_hot_path_stats",
    "create_array",
    "create_bool",
    "create_double_array",
    "create_false",
    "create_float_array",
    "create_int_array",
    "create_null",
    "create_number",
    "create_object",
    "create_reference",
    "create_string",
    "create_string_array",
    "create_true",
    "delete_item_from_array",
    "delete_item_from_object",
    "detach_item_from_array",
    "detach_item_from_object",
    "dump",
    "dumps",
    "format_hot_path_stats",
    "duplicate",
    "get_hot_path_stats",
    "insert_item_in_array",
    "load",
    "loads",
    "minify",
    "parse",
    "parse_with_opts",
    "render",
    "render_buffered",
    "render_bytes",
    "render_unformatted",
    "replace_item_in_array",
    "replace_item_in_object",
]
