"""
Outcome wrappers for one evaluated expression.

``Some`` holds a value that evaluation produced; ``Nothing`` stands for an
evaluation that failed, whose diagnostic text the caller still holds.
"""
import traceback
from dataclasses import dataclass
from typing import Any, List, Tuple

from replout.replout_nodes import ErrorDisplay


@dataclass
class HighlightResult:
    """The display form of an outcome.

    ``error`` is True only for outcomes that came from the ``Nothing`` path;
    an exception held by ``Some`` renders as an ``ErrorDisplay`` with
    ``error`` False.
    """
    formatted_output: Any
    error: bool


def split_trace(text: str) -> Tuple[str, List[str]]:
    """Splits on newlines only; ``\\r\\n`` endings lose their ``\\r``."""
    first, *rest = [line[:-1] if line.endswith("\r") else line for line in str(text).split("\n")]
    return first, rest


def exception_stack(exc: BaseException) -> str:
    """``"<Name>: <message>"`` followed by the formatted frames of the traceback."""
    try:
        message = str(exc)
    except Exception:
        message = "<exception str() failed>"
    headline = f"{type(exc).__name__}: {message}" if message else type(exc).__name__
    frames = "".join(traceback.format_tb(exc.__traceback__)).rstrip("\n")
    return f"{headline}\n{frames}" if frames else headline


class Nothing:
    """The failed-evaluation outcome. There is exactly one instance."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Nothing"

    def highlight(self, output: str = "", transformer=None) -> HighlightResult:
        first, rest = split_trace(output)
        return HighlightResult(ErrorDisplay(first, rest), True)


class Some:
    """A produced value, rendered through the transformer on ``highlight``."""

    def __init__(self, value):
        self.value = value

    def __repr__(self) -> str:
        return f"Some({self.value!r})"

    def highlight(self, output: str = "", transformer=None) -> HighlightResult:
        if isinstance(self.value, BaseException):
            first, rest = split_trace(exception_stack(self.value))
            return HighlightResult(ErrorDisplay(first, rest), False)

        if transformer is None:
            from replout.replout_output import default_transformer
            transformer = default_transformer()
        node = transformer.transform_object(self.value)
        return HighlightResult(self.value if node is None else node, False)


def some(value) -> Some:
    return Some(value)


def none() -> Nothing:
    return Nothing()
