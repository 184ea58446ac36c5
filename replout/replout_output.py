"""
Module-level entry points bound to a shared default ``Transformer``.
"""
from typing import Optional, Sequence

from replout.replout_accessor import read_property as _read_property
from replout.replout_result import Nothing, Some, none, some
from replout.replout_serialize import JSONResult, to_json
from replout.replout_source import source as _source
from replout.replout_transformer import Transformer, TypeTag

_default: Optional[Transformer] = None


def default_transformer() -> Transformer:
    global _default
    if _default is None:
        _default = Transformer()
    return _default


def set_default_transformer(transformer: Optional[Transformer]) -> None:
    """Replaces the shared transformer; None resets it to a fresh default on next use."""
    global _default
    _default = transformer


def as_object(value, tag):
    return default_transformer().as_object(value, tag)


def transform_object(value):
    return default_transformer().transform_object(value)


def read_property(obj, name):
    return _read_property(obj, name, default_transformer())


def source(module: str, search_paths: Optional[Sequence[str]] = None):
    return _source(module, search_paths)


__all__ = [
    "Some", "Nothing", "some", "none",
    "JSONResult", "to_json",
    "TypeTag", "as_object", "transform_object",
    "read_property", "source",
    "default_transformer", "set_default_transformer",
]
