import array
import asyncio
import collections.abc
import re
from decimal import Decimal

import pytest

from replout.replout_nodes import ErrorDisplay, FunctionNode, SourceFileNode
from replout.replout_printer import DisplayPrinter
from replout.replout_transformer import Transformer


class FlakyMapping(collections.abc.Mapping):
    def __getitem__(self, key):
        if key == "bad":
            raise RuntimeError("nope")
        return 1

    def __iter__(self):
        return iter(["ok", "bad"])

    def __len__(self):
        return 2


@pytest.fixture
def transformer():
    return Transformer()


@pytest.fixture
def printer(transformer):
    return DisplayPrinter(transformer, indent_width=2)


def render(printer, transformer, value):
    return printer.pformat(transformer.transform_object(value))


FORMAT_TEST_CASES = [
    ("int", 3, "3"),
    ("float", 1.5, "1.5"),
    ("integral_float", 2.0, "2"),
    ("nan", float("nan"), "NaN"),
    ("bool", True, "True"),
    ("none", None, "None"),
    ("str", "hi", "'hi'"),
    ("decimal", Decimal("1.5"), "Number {[[PrimitiveValue]]: 1.5}"),
    ("regex", re.compile("a+", re.I), "/a+/i"),
    ("bytes", b"\x00\x01", "Buffer(2) <00 01>"),
    ("empty_list", [], "Array[0] []"),
    ("flat_list", [1, "a"], "Array[2] [\n  0: 1\n  1: 'a'\n]"),
    ("nested_list", [[1]], "Array[1] [\n  0: Array[1] [\n    0: 1\n  ]\n]"),
    ("dict", {"a": 1}, "dict {\n  a: 1\n}"),
    ("empty_dict", {}, "dict {}"),
    ("nested_dict", {"a": {"b": 1}}, "dict {\n  a: dict {…}\n}"),
    ("exception", ValueError("x"), "ValueError {}"),
    ("html", "<html><body><p>x</p></body></html>", "HTML <body><p>x</p></body>"),
]


@pytest.mark.parametrize(
    "test_id, value, expected",
    FORMAT_TEST_CASES,
    ids=[t[0] for t in FORMAT_TEST_CASES]
)
def test_pformat(printer, transformer, test_id, value, expected):
    assert render(printer, transformer, value) == expected


def test_long_list_prints_group_headers(printer, transformer):
    out = render(printer, transformer, list(range(250)))
    lines = out.splitlines()
    assert lines[0] == "Array[250] ["
    assert lines[1] == "  [0 … 99] ["
    assert lines[2] == "    0: 0"
    assert "  [200 … 249] [" in lines
    assert "    249: 249" in lines
    assert lines[-1] == "]"


def test_primitive_wrapper(printer, transformer):
    assert printer.pformat(transformer.as_object("hi", "object")) == "str {[[PrimitiveValue]]: 'hi'}"


def test_read_errors_are_shown_inline(printer, transformer):
    out = render(printer, transformer, FlakyMapping())
    assert out == "FlakyMapping {\n  ok: 1\n  bad: [[Get Error]] RuntimeError {}\n}"


def test_promises(printer, transformer):
    loop = asyncio.new_event_loop()
    try:
        pending = loop.create_future()
        done = loop.create_future()
        done.set_result(42)
        assert render(printer, transformer, pending) == "Promise {<pending>}"
        assert render(printer, transformer, done) == "Promise {<resolved>: 42}"
    finally:
        loop.close()


def test_error_display(printer):
    node = ErrorDisplay("TypeError: x", ["  at foo", "  at bar"])
    assert printer.pformat(node) == "TypeError: x\n  at foo\n  at bar"


def test_function_collapses_when_nested(printer):
    node = FunctionNode("def f():\n    pass", "def f():", True)
    assert printer.pformat(node) == "def f():\n    pass"
    assert printer.pformat(node, level=1) == "def f(): …"


def test_highlighted_function_prints_plain_text(printer, transformer):
    out = render(printer, transformer, len)
    assert out == "<built-in function len>"


def test_source_node(printer):
    assert printer.pformat(SourceFileNode("/x/json/__init__.py", "json")) == "json -> /x/json/__init__.py"
    assert printer.pformat(SourceFileNode(None, "nope")) == "nope -> <source not found>"


def test_raw_values_fall_back_to_repr(printer):
    assert printer.pformat(object) == repr(object)


class UniterableList(list):
    def __iter__(self):
        raise RuntimeError("iteration is broken")


def test_uniterable_list_is_expanded_by_index(printer, transformer):
    out = render(printer, transformer, UniterableList([1, 2]))
    assert out == "UniterableList {\n  0: 1\n  1: 2\n}"


def test_typed_memoryview_shows_bytes(printer, transformer):
    values = array.array("i", [1, 2])
    out = render(printer, transformer, memoryview(values))
    assert out == f"Buffer({values.itemsize * 2}) <{bytes(values).hex(' ')}>"


def test_typed_memoryview_is_truncated_by_bytes(transformer):
    values = array.array("i", range(10))
    printer = DisplayPrinter(transformer, max_bytes=4)
    out = printer.pformat(transformer.transform_object(memoryview(values)))
    assert out == f"Buffer({values.itemsize * 10}) <{bytes(values)[:4].hex(' ')} …>"


def test_multidimensional_memoryview(printer, transformer):
    view = memoryview(bytes(range(6))).cast("B", shape=[2, 3])
    assert render(printer, transformer, view) == "Buffer(6) <00 01 02 03 04 05>"


def test_non_contiguous_memoryview(printer, transformer):
    view = memoryview(bytes(range(6)))[::2]
    assert render(printer, transformer, view) == "Buffer(3) <00 02 04>"
