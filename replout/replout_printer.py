"""
A plain-text printer for display node trees.
"""
from rich.text import Text

from replout.replout_accessor import property_names, read_property
from replout.replout_nodes import (
    ArrayChunk, BufferNode, ErrorDisplay, FunctionNode, HTMLStringNode, Literal,
    NumberNode, ObjectNode, Primitive, PromiseNode, PromiseStatus, ReadErrorDisplay,
    RegexNode, SourceFileNode, StringNode,
)


class DisplayPrinter:
    """Formats display nodes into indented text for a terminal."""

    def __init__(self, transformer, indent_width=2, expand_depth=1, max_bytes=16):
        self.transformer = transformer
        self._indent_char = " " * indent_width
        self.expand_depth = expand_depth
        self.max_bytes = max_bytes
        self._handlers = self._create_handlers()

    def pformat(self, node, level=0):
        """Public entry point to format a node."""
        handler = self._get_handler(node)
        return handler(node, level)

    def _get_handler(self, node):
        handler = self._handlers.get(type(node))
        if handler is not None:
            return handler
        # Highlighter output
        if isinstance(node, Text):
            return lambda n, l: n.plain
        if isinstance(node, str):
            return lambda n, l: n
        # Raw values handed back on a dispatch miss
        return lambda n, l: repr(n)

    def _create_handlers(self):
        return {
            Primitive: self._pformat_primitive,
            Literal: self._pformat_literal,
            NumberNode: self._pformat_number,
            StringNode: self._pformat_string,
            HTMLStringNode: self._pformat_html,
            ArrayChunk: self._pformat_array,
            ObjectNode: self._pformat_object,
            FunctionNode: self._pformat_function,
            PromiseNode: self._pformat_promise,
            BufferNode: self._pformat_buffer,
            RegexNode: self._pformat_regex,
            ErrorDisplay: self._pformat_error,
            ReadErrorDisplay: self._pformat_read_error,
            SourceFileNode: self._pformat_source,
        }

    def _pformat_primitive(self, node, level):
        return f"{node.type_name} {{[[PrimitiveValue]]: {node.text_value}}}"

    def _pformat_literal(self, node, level):
        return node.text

    def _pformat_number(self, node, level):
        return node.text

    def _pformat_string(self, node, level):
        return repr(node.text)

    def _pformat_html(self, node, level):
        return f"HTML {node.html_body}"

    def _pformat_block(self, header, lines, level, open_char, close_char):
        if not lines:
            return f"{header}{open_char}{close_char}"
        outer_indent = self._indent_char * level
        inner_indent = self._indent_char * (level + 1)
        body = "\n".join(f"{inner_indent}{line}" for line in lines)
        return f"{header}{open_char}\n{body}\n{outer_indent}{close_char}"

    def _pformat_array(self, node, level):
        lines = []
        for offset, item in enumerate(node.items):
            text = self.pformat(item, level + 1)
            if node.indexed:
                text = f"{node.start_index + offset}: {text}"
            lines.append(text)
        return self._pformat_block(f"{node.label} ", lines, level, "[", "]")

    def _pformat_object(self, node, level):
        if node.label:
            return node.label.strip()
        obj = node.native_ref
        header = type(obj).__name__
        if node.is_primitive_wrapper:
            return f"{header} {{[[PrimitiveValue]]: {str(obj)!r}}}"
        if level >= self.expand_depth:
            return f"{header} {{…}}"
        lines = []
        for name in property_names(obj):
            value = read_property(obj, name, self.transformer)
            if not isinstance(value, ReadErrorDisplay):
                rendered = self.transformer.transform_object(value)
                value = value if rendered is None else rendered
            lines.append(f"{name}: {self.pformat(value, level + 1)}")
        return self._pformat_block(f"{header} ", lines, level, "{", "}")

    def _pformat_function(self, node, level):
        if node.is_expandable and level > 0:
            return f"{self.pformat(node.collapsed_preview, level)} …"
        return self.pformat(node.highlighted_source, level)

    def _pformat_promise(self, node, level):
        if node.status is PromiseStatus.PENDING:
            return "Promise {<pending>}"
        value = self.transformer.transform_object(node.snapshot_value)
        value = node.snapshot_value if value is None else value
        return f"Promise {{<{node.status.value}>: {self.pformat(value, level + 1)}}}"

    def _pformat_buffer(self, node, level):
        # Slicing a typed or multi-dimensional memoryview counts items, not bytes
        view = memoryview(node.native_ref)
        try:
            data = view.cast("B")[:self.max_bytes].tobytes()
        except TypeError:
            # Strided views and non-native formats cannot be cast
            data = view.tobytes()[:self.max_bytes]
        more = " …" if node.length > self.max_bytes else ""
        return f"Buffer({node.length}) <{data.hex(' ')}{more}>"

    def _pformat_regex(self, node, level):
        return f"/{node.pattern}/{node.flags}"

    def _pformat_error(self, node, level):
        return "\n".join([node.headline] + list(node.trace_lines))

    def _pformat_read_error(self, node, level):
        return f"[[Get Error]] {self.pformat(node.error, level)}"

    def _pformat_source(self, node, level):
        location = node.location or "<source not found>"
        return f"{node.name} -> {location}"
