"""
Snapshot inspection of future-like values.

Two families of futures are understood, each through its own introspector:

- ``concurrent.futures.Future`` keeps its state in plain instance fields, which
  are read directly without taking the future's condition lock.
- asyncio futures and tasks are probed through their non-blocking
  ``done()`` / ``cancelled()`` / ``exception()`` / ``result()`` methods.

Inspection never waits for settlement and never registers callbacks. Either
introspector can be left out of the list handed to ``inspect_async``.
"""

import asyncio
import concurrent.futures
import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Tuple

from replout.replout_nodes import PromiseNode, PromiseStatus

logger = logging.getLogger(__name__)

Snapshot = Tuple[PromiseStatus, Any]


class AsyncIntrospector(ABC):
    """Reads the current status and settled value of one family of futures."""

    @abstractmethod
    def matches(self, value) -> bool:
        ...

    @abstractmethod
    def snapshot(self, value) -> Snapshot:
        ...


class ConcurrentFutureIntrospector(AsyncIntrospector):
    """Reads ``concurrent.futures.Future`` state fields as they are right now."""

    _STATES = {
        "PENDING": PromiseStatus.PENDING,
        "RUNNING": PromiseStatus.PENDING,
        "FINISHED": PromiseStatus.RESOLVED,
        "CANCELLED": PromiseStatus.REJECTED,
        "CANCELLED_AND_NOTIFIED": PromiseStatus.REJECTED,
    }

    def matches(self, value) -> bool:
        return isinstance(value, concurrent.futures.Future)

    def snapshot(self, value) -> Snapshot:
        state = vars(value).get("_state", "PENDING")
        status = self._STATES.get(state, PromiseStatus.PENDING)
        if state.startswith("CANCELLED"):
            return status, concurrent.futures.CancelledError()
        if status is PromiseStatus.RESOLVED:
            exc = vars(value).get("_exception")
            if exc is not None:
                return PromiseStatus.REJECTED, exc
            return status, vars(value).get("_result")
        return status, None


class AsyncioFutureIntrospector(AsyncIntrospector):
    """Probes asyncio futures and tasks without awaiting them."""

    def matches(self, value) -> bool:
        return asyncio.isfuture(value)

    def snapshot(self, value) -> Snapshot:
        if not value.done():
            return PromiseStatus.PENDING, None
        if value.cancelled():
            return PromiseStatus.REJECTED, asyncio.CancelledError()
        # exception() and result() mark the exception as retrieved, which would
        # silence asyncio's "exception was never retrieved" report.
        exc = getattr(value, "_exception", None)
        if exc is not None:
            return PromiseStatus.REJECTED, exc
        return PromiseStatus.RESOLVED, getattr(value, "_result", None)


DEFAULT_INTROSPECTORS: Tuple[AsyncIntrospector, ...] = (
    ConcurrentFutureIntrospector(),
    AsyncioFutureIntrospector(),
)


def _probe_attr(value, name: str) -> Any:
    """getattr that treats a raising property as absent."""
    try:
        return getattr(value, name, None)
    except Exception:
        logger.debug("attribute probe %r raised on %s", name, type(value).__name__, exc_info=True)
        return None


def is_thenable(value) -> bool:
    """True for futures and for anything exposing a callable ``then`` or ``__await__``."""
    if asyncio.isfuture(value) or isinstance(value, concurrent.futures.Future):
        return True
    return callable(_probe_attr(value, "then")) or callable(_probe_attr(value, "__await__"))


def inspect_async(value, introspectors: Iterable[AsyncIntrospector] = DEFAULT_INTROSPECTORS) -> Optional[PromiseNode]:
    """
    Returns a ``PromiseNode`` for ``value`` or None when no introspector claims it.

    A None result is the defined fallback for thenables of unknown origin; the
    caller renders them as plain objects.
    """
    for introspector in introspectors:
        if introspector.matches(value):
            status, settled = introspector.snapshot(value)
            return PromiseNode(status, settled, value)
    logger.debug("no introspector matched thenable of type %s", type(value).__name__)
    return None
