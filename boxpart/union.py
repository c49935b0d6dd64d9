"""Finite unions of boxes as point sets.

``BoxUnion`` evaluates the union of the half-open sets of a finite family
of boxes lazily. Comparisons between unions are exact: the bounds of every
box involved cut space into a grid, each grid cell lies either inside a box
or outside it, so subset tests reduce to finitely many cell-in-box tests.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from itertools import pairwise, product

from .box import Box, Coord, Point, Scalar


def grid_breakpoints(boxes: Iterable[Box]) -> dict[Coord, list[Scalar]]:
    """Sorted distinct bounds per coordinate over all ``boxes``."""
    points: dict[Coord, set[Scalar]] = {}
    for b in boxes:
        for c, lo, hi in b.sides():
            points.setdefault(c, set()).update((lo, hi))
    return {c: sorted(v) for c, v in points.items()}


def grid_cells(box: Box, breakpoints: Mapping[Coord, list[Scalar]]) -> Iterator[Box]:
    """The grid cells covering ``box``; its own bounds must be breakpoints."""
    per_coord = []
    for c, lo, hi in box.sides():
        cuts = [p for p in breakpoints[c] if lo <= p <= hi]
        per_coord.append(list(pairwise(cuts)))
    for combo in product(*per_coord):
        yield Box(
            box.coords,
            tuple(lo for lo, _ in combo),
            tuple(hi for _, hi in combo),
        )


@dataclass(frozen=True, eq=False)
class BoxUnion:
    """The point set ⋃ boxes. Unhashable: equality is point-set equality."""

    boxes: frozenset[Box]

    def __init__(self, boxes: Iterable[Box] = ()) -> None:
        object.__setattr__(self, "boxes", frozenset(boxes))

    __hash__ = None  # type: ignore[assignment]

    @property
    def is_empty(self) -> bool:
        return not self.boxes

    def __contains__(self, point: Point) -> bool:
        return any(point in b for b in self.boxes)

    def _cells_outside(self, other: BoxUnion) -> Iterator[Box]:
        """Grid cells of self that are not covered by other."""
        breakpoints = grid_breakpoints(self.boxes | other.boxes)
        for b in self.boxes:
            for cell in grid_cells(b, breakpoints):
                if not any(cell <= k for k in other.boxes):
                    yield cell

    def __le__(self, other: object) -> bool:
        if not isinstance(other, BoxUnion):
            return NotImplemented
        return next(self._cells_outside(other), None) is None

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, BoxUnion):
            return NotImplemented
        return other <= self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoxUnion):
            return NotImplemented
        return self <= other and other <= self

    def isdisjoint(self, other: BoxUnion) -> bool:
        return all(a.is_disjoint(b) for a in self.boxes for b in other.boxes)

    def intersect_box(self, box: Box) -> BoxUnion:
        pieces = (b.intersect(box) for b in self.boxes)
        return BoxUnion(p for p in pieces if p is not None)

    def __and__(self, box: Box) -> BoxUnion:
        return self.intersect_box(box)

    def difference(self, other: BoxUnion) -> BoxUnion:
        """self \\ other, as a union of grid cells."""
        return BoxUnion(self._cells_outside(other))

    def __sub__(self, other: BoxUnion) -> BoxUnion:
        return self.difference(other)

    def __or__(self, other: BoxUnion) -> BoxUnion:
        return BoxUnion(self.boxes | other.boxes)

    def __repr__(self) -> str:
        return f"BoxUnion({sorted(map(str, self.boxes))})"
