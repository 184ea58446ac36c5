"""
Defines the display node types produced by the REPL output transformer.

Every node is a plain description of how one value should be shown. Nodes that
keep a handle on the inspected value store it in ``native_ref``; that field is
left out of equality and repr so comparing two trees never runs user code.
"""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class PromiseStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class _Undefined:
    """Sentinel for a value that was never produced (distinct from None)."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


def _ref():
    return field(default=None, compare=False, repr=False)


# =================================================================
# Scalar nodes
# =================================================================

@dataclass
class Primitive:
    """A boxed number or boolean, shown with its primitive value."""
    type_name: str
    text_value: str


@dataclass
class Literal:
    """Keyword-like values: booleans, None, undefined, symbols."""
    text: str


@dataclass
class NumberNode:
    value: Any
    integer: bool = False

    @property
    def text(self) -> str:
        if self.integer:
            return str(int(self.value))
        if isinstance(self.value, float) and math.isnan(self.value):
            return "NaN"
        return str(self.value)


@dataclass
class StringNode:
    text: str


@dataclass
class HTMLStringNode:
    """A string holding an HTML document; ``html_body`` is its <body> markup."""
    html_body: str
    source_text: str


# =================================================================
# Container and reference nodes
# =================================================================

@dataclass
class ArrayChunk:
    """
    A bounded group of consecutive sequence elements.

    Leaf chunks hold display nodes for the original elements; internal chunks
    hold other ``ArrayChunk`` instances and are not ``indexed``. ``total_length``
    is only set on the root of a chunked sequence.
    """
    items: List[Any]
    label: str
    start_index: int = 0
    indexed: bool = True
    total_length: Optional[int] = None


@dataclass
class ObjectNode:
    native_ref: Any = _ref()
    label: Optional[str] = None
    is_primitive_wrapper: bool = False


@dataclass
class FunctionNode:
    highlighted_source: Any
    collapsed_preview: Any = None
    is_expandable: bool = False
    native_ref: Any = _ref()


@dataclass
class PromiseNode:
    status: PromiseStatus
    snapshot_value: Any = None
    native_ref: Any = _ref()


@dataclass
class BufferNode:
    native_ref: Any = _ref()

    @property
    def length(self) -> int:
        if isinstance(self.native_ref, memoryview):
            return self.native_ref.nbytes
        return len(self.native_ref)


@dataclass
class RegexNode:
    native_ref: Any = _ref()

    @property
    def pattern(self) -> str:
        pattern = self.native_ref.pattern
        if isinstance(pattern, bytes):
            return pattern.decode("latin-1")
        return pattern

    @property
    def flags(self) -> str:
        """Inline-flag letters for the flags set explicitly on the pattern."""
        letters = [
            (re.ASCII, "a"), (re.IGNORECASE, "i"), (re.LOCALE, "L"),
            (re.MULTILINE, "m"), (re.DOTALL, "s"), (re.VERBOSE, "x"),
        ]
        flags = self.native_ref.flags
        return "".join(ch for bit, ch in letters if flags & bit)


# =================================================================
# Diagnostics
# =================================================================

@dataclass
class ErrorDisplay:
    headline: str
    trace_lines: List[str] = field(default_factory=list)


@dataclass
class ReadErrorDisplay:
    """A property read that raised; ``error`` is the rendering of the exception."""
    error: Any


@dataclass
class SourceFileNode:
    location: Optional[str]
    name: str


DISPLAY_NODE_TYPES = (
    Primitive, Literal, NumberNode, StringNode, HTMLStringNode, ArrayChunk,
    ObjectNode, FunctionNode, PromiseNode, BufferNode, RegexNode,
    ErrorDisplay, ReadErrorDisplay, SourceFileNode,
)


def is_display_node(obj) -> bool:
    return isinstance(obj, DISPLAY_NODE_TYPES)
