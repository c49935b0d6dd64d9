"""Prepartitions: finite families of pairwise disjoint sub-boxes of a root box.

A prepartition of a root box I is a finite set of boxes such that

  (a) every box J satisfies J ≤ I, and
  (b) distinct boxes have disjoint point sets.

Prepartitions of the same root are ordered by refinement: π₁ ≤ π₂ iff every
box of π₁ lies in some box of π₂. The top element is {I}, the bottom element
is the empty family, and ``inf`` is the meet.

Values are immutable. The public constructor validates (a) and (b); every
derived operation (restrict, bunion, filter, inf, split_many, ...) builds a
value that satisfies them by construction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import reduce
from itertools import combinations
from types import MappingProxyType
from typing import Any, TypeVar

from .box import Box, Coord, Hyperplane, Point, Scalar
from .config import get_settings
from .errors import InvariantViolation, RootMismatch
from .union import BoxUnion

logger = logging.getLogger(__name__)

M = TypeVar("M")

_NO_PARENTS: Mapping[Box, Box] = MappingProxyType({})


def _require_same_root(a: Prepartition, b: Prepartition) -> None:
    if a.root != b.root:
        raise RootMismatch(f"prepartitions of {a.root} and {b.root} cannot be combined")


def corner_signature(box: Box, point: Point) -> frozenset[Coord]:
    """Coordinates on which ``box`` starts exactly at ``point``.

    For disjoint boxes whose closed hulls contain ``point`` this map is
    injective, which bounds the number of such boxes by 2^dim.
    """
    return frozenset(c for c, lo, _ in box.sides() if lo == point[c])


@dataclass(frozen=True)
class Prepartition:
    """A set of pairwise disjoint sub-boxes of ``root``.

    Example:
        I = Box.of({"x": (0, 2), "y": (0, 2)})
        Prepartition(I, {Box.of({"x": (0, 1), "y": (0, 2)}),
                         Box.of({"x": (1, 2), "y": (0, 2)})})
    """

    root: Box
    boxes: frozenset[Box] = frozenset()
    # Reverse index filled by ``bunion``: produced box -> parent box.
    parents: Mapping[Box, Box] = field(
        default_factory=lambda: _NO_PARENTS, init=False, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "boxes", frozenset(self.boxes))
        for j in self.boxes:
            if j.coords != self.root.coords:
                raise InvariantViolation(
                    f"box {j} uses coordinates {j.coords}, root uses {self.root.coords}"
                )
            if not j <= self.root:
                raise InvariantViolation(f"box {j} is not a sub-box of the root {self.root}")
        for a, b in combinations(self.boxes, 2):
            if not a.is_disjoint(b):
                raise InvariantViolation(f"boxes {a} and {b} overlap")

    @classmethod
    def _build(
        cls,
        root: Box,
        boxes: Iterable[Box],
        parents: Mapping[Box, Box] | None = None,
    ) -> Prepartition:
        # Skips validation: callers guarantee (a) and (b).
        self = object.__new__(cls)
        object.__setattr__(self, "root", root)
        object.__setattr__(self, "boxes", frozenset(boxes))
        object.__setattr__(
            self, "parents", _NO_PARENTS if parents is None else MappingProxyType(dict(parents))
        )
        return self

    # -- constructors -------------------------------------------------------

    @classmethod
    def single(cls, root: Box, box: Box) -> Prepartition:
        """The one-box prepartition {box}; requires box ≤ root."""
        if get_settings().check_preconditions and not box <= root:
            raise InvariantViolation(f"box {box} is not a sub-box of the root {root}")
        return cls._build(root, (box,))

    @classmethod
    def top(cls, root: Box) -> Prepartition:
        return cls._build(root, (root,))

    @classmethod
    def bottom(cls, root: Box) -> Prepartition:
        return cls._build(root, ())

    @classmethod
    def of_with_bot(cls, root: Box, boxes: Iterable[Box | None]) -> Prepartition:
        """Validate and build from possibly-empty boxes, dropping the empty ones."""
        return cls(root, frozenset(b for b in boxes if b is not None))

    # -- collection protocol ------------------------------------------------

    def __iter__(self) -> Iterator[Box]:
        return iter(self.boxes)

    def __len__(self) -> int:
        return len(self.boxes)

    def __contains__(self, box: object) -> bool:
        return box in self.boxes

    def __str__(self) -> str:
        inner = ", ".join(sorted(str(b) for b in self.boxes))
        return f"Prepartition({self.root}; {{{inner}}})"

    @property
    def union(self) -> BoxUnion:
        return BoxUnion(self.boxes)

    def sum(self, fn: Callable[[Box], M], zero: M) -> M:
        return reduce(lambda acc, b: acc + fn(b), self.boxes, zero)

    def hyperplanes(self) -> frozenset[Hyperplane]:
        """Hyperplanes of all faces of all boxes."""
        return frozenset().union(*(b.hyperplanes() for b in self.boxes))

    # -- refinement order ---------------------------------------------------

    def __le__(self, other: object) -> bool:
        """π₁ ≤ π₂: every box of π₁ is a sub-box of some box of π₂."""
        if not isinstance(other, Prepartition):
            return NotImplemented
        _require_same_root(self, other)
        return all(any(j <= k for k in other.boxes) for j in self.boxes)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Prepartition):
            return NotImplemented
        return other <= self

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Prepartition):
            return NotImplemented
        return self <= other and self != other

    def refines_by_overlap(self, other: Prepartition) -> bool:
        """Equivalent form of ≤: overlapping boxes are nested and unions are included."""
        _require_same_root(self, other)
        nested = all(
            j <= k for j in self.boxes for k in other.boxes if not j.is_disjoint(k)
        )
        return nested and self.union <= other.union

    # -- derived prepartitions ----------------------------------------------

    def restrict(self, box: Box) -> Prepartition:
        """The non-empty intersections of the boxes with ``box``, rooted at ``box``.

        union(π.restrict(J)) == J ∩ union(π).
        """
        pieces = (j.intersect(box) for j in self.boxes)
        return Prepartition._build(box, (p for p in pieces if p is not None))

    def bunion(self, refine: Callable[[Box], Prepartition]) -> Prepartition:
        """Replace every box J by the boxes of ``refine(J)``, a prepartition of J.

        The result records the parent of each produced box, see
        ``bunion_index``.
        """
        boxes: list[Box] = []
        parents: dict[Box, Box] = {}
        for j in self.boxes:
            sub = refine(j)
            if sub.root != j:
                raise RootMismatch(f"refinement of {j} is rooted at {sub.root}")
            for k in sub.boxes:
                boxes.append(k)
                parents[k] = j
        logger.debug("bunion: %d boxes refined into %d", len(self.boxes), len(boxes))
        return Prepartition._build(self.root, boxes, parents)

    def bunion_index(self, box: Box) -> Box:
        """The box of the original prepartition that ``box`` was produced from."""
        try:
            return self.parents[box]
        except KeyError:
            raise KeyError(f"{box} was not produced by bunion") from None

    def disj_union(self, other: Prepartition) -> Prepartition:
        """The union of two families; their unions must be disjoint."""
        _require_same_root(self, other)
        if get_settings().check_preconditions and not self.union.isdisjoint(other.union):
            raise InvariantViolation("disj_union of prepartitions with overlapping unions")
        return Prepartition._build(self.root, self.boxes | other.boxes)

    def filter(self, predicate: Callable[[Box], bool]) -> Prepartition:
        return Prepartition._build(self.root, (j for j in self.boxes if predicate(j)))

    def inf(self, other: Prepartition) -> Prepartition:
        """Meet in the refinement order: all non-empty pairwise intersections."""
        _require_same_root(self, other)
        return self.bunion(other.restrict)

    def __and__(self, other: Prepartition) -> Prepartition:
        return self.inf(other)

    def split_many(self, splits: Iterable[Hyperplane]) -> Prepartition:
        """Refine every box along every hyperplane in ``splits``."""
        from .partition import split_many

        return self.inf(split_many(self.root, splits))

    def complement(self) -> Prepartition:
        """A prepartition whose union is root \\ union(self)."""
        from .partition import complement

        return complement(self)

    # -- predicates and measurements ----------------------------------------

    def is_partition(self) -> bool:
        """True iff the boxes cover the root."""
        return BoxUnion((self.root,)) <= self.union

    def distortion(self) -> Scalar:
        return max((j.distortion() for j in self.boxes), default=0)

    def closed_hull_boxes(self, point: Point) -> frozenset[Box]:
        """Boxes whose closed hull contains ``point``; at most 2^dim of them."""
        found = frozenset(j for j in self.boxes if j.in_closed_hull(point))
        if get_settings().check_preconditions:
            signatures = {corner_signature(j, point) for j in found}
            if len(signatures) != len(found):
                raise InvariantViolation(
                    f"corner signatures at {dict(point)} are not injective; boxes overlap"
                )
        return found

    def closed_hull_multiplicity(self, point: Point) -> int:
        return len(self.closed_hull_boxes(point))

    def summary(self) -> dict[str, Any]:
        return {
            "root": str(self.root),
            "box_count": len(self.boxes),
            "is_partition": self.is_partition(),
            "distortion": self.distortion(),
        }
