"""
Exception-isolated reads of live object properties.

Used by rendering layers that expand objects lazily: a getter that raises is
shown in place as a ``ReadErrorDisplay`` instead of escaping to the caller.
"""
import collections.abc
import logging
from typing import Any, List

from replout.replout_nodes import UNDEFINED, ReadErrorDisplay

logger = logging.getLogger(__name__)


def _read(obj, name):
    if isinstance(obj, collections.abc.Mapping):
        return obj[name]
    if isinstance(name, int) and isinstance(obj, collections.abc.Sequence):
        return obj[name]
    return getattr(obj, name)


def read_property(obj, name, transformer) -> Any:
    """
    Returns ``obj``'s property ``name``, or a ``ReadErrorDisplay`` if reading it raised.

    Mappings are subscripted, integer names index sequences and everything else
    goes through ``getattr``. None and UNDEFINED are returned unchanged.
    """
    if obj is None or obj is UNDEFINED:
        return obj
    try:
        return _read(obj, name)
    except Exception as e:
        logger.debug("read of %r on %s raised %s", name, type(obj).__name__, type(e).__name__)
        try:
            rendered = transformer.transform_object(e)
        except Exception:
            logger.debug("rendering the read error failed", exc_info=True)
            rendered = None
        return ReadErrorDisplay(e if rendered is None else rendered)


def property_names(obj) -> List[Any]:
    """Keys a renderer can pass to ``read_property``. Never raises."""
    try:
        if isinstance(obj, collections.abc.Mapping):
            return list(obj.keys())
        if isinstance(obj, collections.abc.Sequence) and not isinstance(obj, (str, bytes, bytearray)):
            return list(range(len(obj)))
        names = list(vars(obj))
    except TypeError:
        names = [n for n in getattr(type(obj), "__slots__", ()) if isinstance(n, str)]
    except Exception:
        logger.debug("listing properties of %s failed", type(obj).__name__, exc_info=True)
        return []
    if isinstance(obj, BaseException):
        names = ["args"] + names
    return [n for n in names if not n.startswith("_")]
