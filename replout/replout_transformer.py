"""
Maps runtime values to display node trees.
"""
import collections
import collections.abc
import inspect
import logging
import math
import numbers
import re
import textwrap
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Union

from replout.replout_async import DEFAULT_INTROSPECTORS, AsyncIntrospector, inspect_async, is_thenable
from replout.replout_chunker import chunk
from replout.replout_config import ReploutConfig
from replout.replout_highlight import Highlighter, RichHighlighter
from replout.replout_nodes import (
    UNDEFINED, BufferNode, FunctionNode, HTMLStringNode, Literal,
    NumberNode, ObjectNode, Primitive, ReadErrorDisplay, RegexNode, StringNode,
)
from replout.replout_serialize import html_body

logger = logging.getLogger(__name__)


class TypeTag(str, Enum):
    OBJECT = "object"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    FUNCTION = "function"
    SYMBOL = "symbol"
    UNDEFINED = "undefined"
    # Override-only tags, for callers that already know the rendering they want.
    ARRAY = "array"
    REGEXP = "regexp"
    NULL = "null"
    BUFFER = "buffer"
    PROMISE = "promise"

    @classmethod
    def parse(cls, tag: Union['TypeTag', str]) -> Optional['TypeTag']:
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag).lower())
        except ValueError:
            return None


_BUFFER_TYPES = (bytes, bytearray, memoryview)
_SYMBOLS = (Ellipsis, NotImplemented)


def type_tag_of(value) -> TypeTag:
    """The primitive type tag of ``value``; everything unlisted is an object."""
    if value is UNDEFINED:
        return TypeTag.UNDEFINED
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, (int, float)) and not isinstance(value, Enum):
        return TypeTag.NUMBER
    if isinstance(value, str):
        return TypeTag.STRING
    if inspect.isroutine(value) or inspect.isclass(value):
        return TypeTag.FUNCTION
    if any(value is s for s in _SYMBOLS):
        return TypeTag.SYMBOL
    return TypeTag.OBJECT


def is_indexed(value) -> bool:
    if isinstance(value, (list, tuple, collections.deque)):
        return True
    return isinstance(value, collections.abc.MutableSequence) and not isinstance(value, bytearray)


def is_buffer(value) -> bool:
    try:
        return isinstance(value, _BUFFER_TYPES)
    except Exception:
        return False


def object_label(value) -> Optional[str]:
    """Structural label shown after an object's type in its collapsed form."""
    try:
        if callable(getattr(value, "__html__", None)) and not inspect.isclass(value):
            return " HTMLElement {}"
    except Exception:
        logger.debug("__html__ probe raised on %s", type(value).__name__, exc_info=True)
    if isinstance(value, BaseException):
        return f" {type(value).__name__} {{}}"
    if is_buffer(value):
        size = value.nbytes if isinstance(value, memoryview) else len(value)
        return f" Buffer ({size} bytes) {{}}"
    return None


class Transformer:
    """Turns a value plus a type tag into a display node tree."""

    def __init__(self, config: Optional[ReploutConfig] = None,
                 highlighter: Optional[Highlighter] = None,
                 introspectors: Iterable[AsyncIntrospector] = DEFAULT_INTROSPECTORS):
        self.config = config or ReploutConfig()
        self.highlighter = highlighter or RichHighlighter(self.config.lexer, self.config.theme)
        self.introspectors = tuple(introspectors)
        self._handlers = self._create_handlers()
        # ids of sequences currently being chunked, innermost last
        self._active = []

    def transform_object(self, value):
        """Dispatches on the value's own type tag."""
        return self.as_object(value, type_tag_of(value))

    def as_object(self, value, tag: Union[TypeTag, str]):
        """
        Renders ``value`` with the strategy for ``tag``.

        Returns None when ``tag`` names no strategy, or when an override tag does
        not apply to the value (e.g. ``"promise"`` on a non-future). Callers show
        the raw value in that case. A value whose own methods raise while it is
        being rendered comes back as a ``ReadErrorDisplay`` of that error.
        """
        parsed = TypeTag.parse(tag)
        if parsed is None:
            logger.debug("no display strategy for type tag %r", tag)
            return None
        try:
            return self._handlers[parsed](value)
        except Exception as e:
            logger.debug("rendering %s as %s raised %s", type(value).__name__, parsed.value, type(e).__name__)
            return self._render_failure(e)

    def _render_failure(self, e: Exception) -> ReadErrorDisplay:
        try:
            rendered = self._format_object(e)
        except Exception:
            logger.debug("rendering the failure itself raised", exc_info=True)
            rendered = None
        return ReadErrorDisplay(e if rendered is None else rendered)

    def _create_handlers(self) -> Dict[TypeTag, Callable[[Any], Any]]:
        handlers = {
            TypeTag.OBJECT: self._format_object,
            TypeTag.NUMBER: self._format_number,
            TypeTag.BOOLEAN: self._format_boolean,
            TypeTag.STRING: self._format_string,
            TypeTag.FUNCTION: self._format_function,
            TypeTag.SYMBOL: self._format_symbol,
            TypeTag.UNDEFINED: self._format_undefined,
            TypeTag.ARRAY: self._format_array,
            TypeTag.REGEXP: self._format_regexp,
            TypeTag.NULL: self._format_null,
            TypeTag.BUFFER: self._format_buffer,
            TypeTag.PROMISE: self._format_promise,
        }
        return handlers

    # -----------------------------------------------------------------
    # object
    # -----------------------------------------------------------------

    def _format_object(self, o):
        if is_indexed(o):
            return self._format_array(o)

        if isinstance(o, re.Pattern):
            return self._format_regexp(o)

        if o is None:
            return self._format_null(o)

        if isinstance(o, numbers.Number) and not isinstance(o, bool):
            return Primitive("Number", str(o))

        if isinstance(o, bool):
            return Primitive("Boolean", str(o))

        if is_thenable(o):
            node = inspect_async(o, self.introspectors)
            if node is not None:
                return node

        if is_buffer(o):
            return self._format_buffer(o)

        return ObjectNode(o, object_label(o), isinstance(o, (str, collections.UserString)))

    def _format_array(self, a):
        if not is_indexed(a):
            return None
        key = id(a)
        if key in self._active:
            return Literal("[Circular]")
        if len(self._active) >= self.config.max_depth:
            return ObjectNode(a, None, False)

        try:
            items = list(a)
        except Exception:
            # Iteration itself is broken; leave it to the renderer to show what it can
            logger.debug("copying %s raised; rendering it as an object", type(a).__name__, exc_info=True)
            return ObjectNode(a, None, False)

        self._active.append(key)
        try:
            return chunk(items, self._element, self.config.chunk_range)
        finally:
            self._active.pop()

    def _element(self, value):
        node = self.transform_object(value)
        return value if node is None else node

    def _format_regexp(self, re_obj):
        if not isinstance(re_obj, re.Pattern):
            return None
        return RegexNode(re_obj)

    def _format_null(self, _):
        return Literal("None")

    def _format_buffer(self, buf):
        if not is_buffer(buf):
            return None
        return BufferNode(buf)

    def _format_promise(self, p):
        return inspect_async(p, self.introspectors)

    # -----------------------------------------------------------------
    # primitives
    # -----------------------------------------------------------------

    def _format_number(self, n):
        if not isinstance(n, numbers.Number):
            return None
        if not isinstance(n, numbers.Real):
            return NumberNode(n, False)
        integer = isinstance(n, numbers.Integral) or (math.isfinite(n) and float(n).is_integer())
        return NumberNode(n, integer)

    def _format_boolean(self, b):
        return Literal(str(bool(b)))

    def _format_string(self, s):
        body = html_body(s)
        if body:
            return HTMLStringNode(body, s)
        return StringNode(str(s))

    def _format_function(self, f):
        code = self._function_source(f)
        source = self.highlighter(code)
        idx = code.find("\n")
        if idx == -1:
            return FunctionNode(source, None, False, f)
        return FunctionNode(source, self.highlighter(code[:idx]), True, f)

    def _function_source(self, f) -> str:
        try:
            return textwrap.dedent(inspect.getsource(f)).rstrip("\n")
        except (OSError, TypeError):
            return repr(f)

    def _format_symbol(self, sy):
        return Literal(str(sy))

    def _format_undefined(self, _):
        return Literal("undefined")
