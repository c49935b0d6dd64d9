"""Partitions and the split-many refinement.

A partition of a box I is a prepartition of I whose boxes cover I. It is not
a separate type: ``Prepartition.is_partition`` is the predicate, and the
functions here build prepartitions that are partitions by construction.

``split_many`` is the reconciliation tool. Splitting I along every face
hyperplane of the boxes of a prepartition π yields a grid whose cells each
lie inside one box of π or outside all of them. Two prepartitions with the
same union therefore have the same refinement along their common
hyperplanes (``reconcile``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .box import Box, Coord, Hyperplane, Scalar
from .errors import InvariantViolation
from .prepartition import Prepartition, _require_same_root

logger = logging.getLogger(__name__)


def is_partition(pi: Prepartition) -> bool:
    return pi.is_partition()


def split(root: Box, coord: Coord, x: Scalar) -> Prepartition:
    """The partition of ``root`` by the hyperplane x[coord] = x.

    Two boxes when x is strictly inside the side, otherwise {root}.
    """
    lower, upper = root.split_at(coord, x)
    return Prepartition._build(root, (p for p in (lower, upper) if p is not None))


def _ordered(splits: Iterable[Hyperplane]) -> list[Hyperplane]:
    return sorted(set(splits))


def split_many(root: Box, splits: Iterable[Hyperplane]) -> Prepartition:
    """Split ``root`` successively along every hyperplane in ``splits``.

    Each pass replaces every current box by the non-empty pieces of its split,
    so the result is a partition of ``root`` for any ``splits``.
    """
    current = [root]
    ordered = _ordered(splits)
    for coord, x in ordered:
        refined: list[Box] = []
        for j in current:
            refined.extend(p for p in j.split_at(coord, x) if p is not None)
        current = refined
    logger.debug("split_many: %d hyperplanes -> %d boxes", len(ordered), len(current))
    return Prepartition._build(root, current)


def split_center(root: Box) -> Prepartition:
    """The 2^dim boxes obtained by halving every side of ``root``."""
    return Prepartition._build(root, root.split_center_boxes())


def complement(pi: Prepartition) -> Prepartition:
    """A prepartition of pi.root whose union is root \\ union(pi)."""
    grid = split_many(pi.root, pi.hyperplanes())
    return grid.filter(lambda cell: not any(cell <= j for j in pi.boxes))


def common_splits(*pis: Prepartition) -> frozenset[Hyperplane]:
    return frozenset().union(*(pi.hyperplanes() for pi in pis))


def reconcile(
    first: Prepartition, second: Prepartition
) -> tuple[frozenset[Hyperplane], Prepartition]:
    """The common refinement of two prepartitions with the same union.

    Returns the hyperplanes ``s`` and the prepartition
    ``first.split_many(s) == second.split_many(s)``.
    """
    _require_same_root(first, second)
    if first.union != second.union:
        raise InvariantViolation("cannot reconcile prepartitions with different unions")
    s = common_splits(first, second)
    refined = first.split_many(s)
    other = second.split_many(s)
    if refined != other:
        raise InvariantViolation("refinements along common hyperplanes disagree")
    return s, refined
