"""
Locates the source file of a module for display.
"""
import logging
import sys
from importlib.machinery import PathFinder
from typing import Callable, Optional, Sequence

from replout.replout_nodes import SourceFileNode

logger = logging.getLogger(__name__)

Resolver = Callable[[str, Sequence[str]], Optional[str]]


def find_module_source(module: str, search_paths: Sequence[str]) -> Optional[str]:
    """Resolves a dotted module name to its origin file using only ``search_paths``."""
    if not module or any(not part for part in module.split(".")):
        return None
    paths = list(search_paths)
    spec = None
    for part in module.split("."):
        spec = PathFinder.find_spec(part, paths)
        if spec is None:
            return None
        paths = list(spec.submodule_search_locations or [])
    if spec is None or not spec.has_location:
        return None
    return spec.origin


def source(module: str, search_paths: Optional[Sequence[str]] = None,
           resolver: Resolver = find_module_source) -> SourceFileNode:
    """A ``SourceFileNode`` for ``module``; ``location`` is None when it cannot be resolved."""
    paths = sys.path if search_paths is None else search_paths
    try:
        location = resolver(module, paths)
    except (ImportError, ValueError, OSError):
        logger.debug("resolving source for %r failed", module, exc_info=True)
        location = None
    return SourceFileNode(location, module)
