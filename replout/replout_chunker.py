"""
Splits long sequences into a bounded tree of index-labelled chunks.

No level of the resulting tree has more than ``range_size`` siblings for
inputs up to ``range_size ** 3`` elements: leaves hold at most ``range_size``
elements, and when there are more than ``range_size`` leaves they are grouped
once more. Grouping stops at that second tier.
"""

import logging
from typing import Any, Callable, List, Sequence

from replout.replout_nodes import ArrayChunk

logger = logging.getLogger(__name__)

RANGE = 100


def range_label(lo: int, hi: int) -> str:
    return f"[{lo} … {hi}]"


def _partition(items: List[Any], size: int) -> List[List[Any]]:
    if not items:
        return [[]]
    return [items[i:i + size] for i in range(0, len(items), size)]


def _leaves(items: List[Any], element: Callable[[Any], Any], size: int) -> List[ArrayChunk]:
    groups = _partition(items, size)
    if len(groups) == 1:
        return [ArrayChunk([element(v) for v in groups[0]], f"Array[{len(items)}]", 0, True)]

    leaves = []
    for n, group in enumerate(groups):
        lo = n * size
        hi = lo + len(group) - 1
        leaves.append(ArrayChunk([element(v) for v in group], range_label(lo, hi), lo, True))
    return leaves


def _regroup(chunks: List[ArrayChunk], size: int) -> List[ArrayChunk]:
    """Groups chunks into parents labelled with the element range they span."""
    parents = []
    for group in _partition(chunks, size):
        first, last = group[0], group[-1]
        lo = first.start_index
        hi = last.start_index + len(last.items) - 1
        parents.append(ArrayChunk(group, range_label(lo, hi), lo, False))
    return parents


def chunk(items: Sequence[Any], element: Callable[[Any], Any] = lambda v: v,
          range_size: int = RANGE) -> ArrayChunk:
    """
    Builds the chunk tree for ``items``.

    ``element`` maps each original element to its display form. The input is
    copied first and never mutated. A sequence that fits in a single group is
    returned as one unwrapped leaf labelled ``Array[<n>]``; anything longer gets
    a root ``Array[<n>]`` chunk whose children are the groups.
    """
    if range_size < 1:
        raise ValueError(f"range_size must be positive, got {range_size}")

    copied = list(items)
    total = len(copied)
    chunks = _leaves(copied, element, range_size)

    if len(chunks) > range_size:
        chunks = _regroup(chunks, range_size)
        if len(chunks) > range_size:
            logger.warning(
                "sequence of %d elements exceeds two chunk tiers; root holds %d groups",
                total, len(chunks),
            )

    if len(chunks) == 1:
        return chunks[0]
    return ArrayChunk(chunks, f"Array[{total}]", 0, False, total)
