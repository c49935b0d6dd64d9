"""Axis-aligned boxes in finite-dimensional real space.

A box over coordinates ι is the product of one interval per coordinate.
As a point set it is half-open, {x | ∀ i, lower i < x i ≤ upper i}, so the
two halves of a split cover the box exactly and share no point. Its closed
hull (Icc) is {x | ∀ i, lower i ≤ x i ≤ upper i}.

Coordinates are plain strings. Bounds may be any ordered numbers (int,
Fraction, float); exact types keep every derived quantity exact.

A "possibly empty box" is ``Box | None``: intersections and splits return
``None`` instead of a degenerate box.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from fractions import Fraction
from itertools import product
from numbers import Rational

from .errors import InvalidBox

# ---------------------------------------------------------------------------
# Scalars, points, hyperplanes
# ---------------------------------------------------------------------------

Coord = str
Scalar = int | float | Fraction
Point = Mapping[Coord, Scalar]
# A split instruction / face of a box: the hyperplane x[coord] = value.
Hyperplane = tuple[Coord, Scalar]


def _ratio(a: Scalar, b: Scalar) -> Scalar:
    if isinstance(a, Rational) and isinstance(b, Rational):
        return Fraction(a) / Fraction(b)
    return a / b


def _is_finite(v: Scalar) -> bool:
    return not isinstance(v, float) or math.isfinite(v)


def _midpoint(lo: Scalar, hi: Scalar) -> Scalar:
    if isinstance(lo, Rational) and isinstance(hi, Rational):
        return Fraction(lo + hi, 2)
    return (lo + hi) / 2


# ---------------------------------------------------------------------------
# Box
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Box:
    """A box with strict lower < upper bounds on every coordinate.

    Coordinates are stored sorted by name, so two boxes built from the same
    bounds in a different order are equal and hash equal.

    Example:
        Box.of({"x": (0, 2), "y": (0, 1)})   # (0, 2] × (0, 1]
        Box(("x", "y"), (0, 0), (2, 1))       # the same box
    """

    coords: tuple[Coord, ...]
    lower: tuple[Scalar, ...]
    upper: tuple[Scalar, ...]

    def __post_init__(self) -> None:
        coords, lower, upper = tuple(self.coords), tuple(self.lower), tuple(self.upper)
        if not len(coords) == len(lower) == len(upper):
            raise InvalidBox(
                f"{len(coords)} coordinates but {len(lower)} lower and {len(upper)} upper bounds"
            )
        if len(set(coords)) != len(coords):
            raise InvalidBox(f"duplicate coordinates in {coords}")

        order = sorted(range(len(coords)), key=coords.__getitem__)
        coords = tuple(coords[k] for k in order)
        lower = tuple(lower[k] for k in order)
        upper = tuple(upper[k] for k in order)

        for c, lo, hi in zip(coords, lower, upper, strict=True):
            # `not lo < hi` also rejects NaN bounds.
            if not lo < hi:
                raise InvalidBox(f"coordinate {c!r}: lower bound {lo} is not < upper bound {hi}")
            if not (_is_finite(lo) and _is_finite(hi)):
                raise InvalidBox(f"coordinate {c!r}: bounds ({lo}, {hi}] are not finite")

        object.__setattr__(self, "coords", coords)
        object.__setattr__(self, "lower", lower)
        object.__setattr__(self, "upper", upper)

    @classmethod
    def of(cls, bounds: Mapping[Coord, tuple[Scalar, Scalar]]) -> Box:
        """Build a box from ``{coord: (lower, upper)}``."""
        coords = tuple(bounds)
        return cls(
            coords,
            tuple(bounds[c][0] for c in coords),
            tuple(bounds[c][1] for c in coords),
        )

    # -- accessors ----------------------------------------------------------

    @property
    def dim(self) -> int:
        return len(self.coords)

    @property
    def bounds(self) -> dict[Coord, tuple[Scalar, Scalar]]:
        return {c: (lo, hi) for c, lo, hi in self.sides()}

    def sides(self) -> Iterator[tuple[Coord, Scalar, Scalar]]:
        return zip(self.coords, self.lower, self.upper, strict=True)

    def _index(self, coord: Coord) -> int:
        try:
            return self.coords.index(coord)
        except ValueError:
            raise KeyError(f"box has no coordinate {coord!r}") from None

    def lower_of(self, coord: Coord) -> Scalar:
        return self.lower[self._index(coord)]

    def upper_of(self, coord: Coord) -> Scalar:
        return self.upper[self._index(coord)]

    def side(self, coord: Coord) -> Scalar:
        k = self._index(coord)
        return self.upper[k] - self.lower[k]

    def __getitem__(self, coord: Coord) -> tuple[Scalar, Scalar]:
        k = self._index(coord)
        return self.lower[k], self.upper[k]

    def __str__(self) -> str:
        if not self.coords:
            return "Box()"
        return " × ".join(f"{c}∈({lo}, {hi}]" for c, lo, hi in self.sides())

    # -- points -------------------------------------------------------------

    def contains_point(self, point: Point) -> bool:
        """True iff lower i < point[i] ≤ upper i for every coordinate."""
        return all(lo < point[c] <= hi for c, lo, hi in self.sides())

    def __contains__(self, point: Point) -> bool:
        return self.contains_point(point)

    def in_closed_hull(self, point: Point) -> bool:
        return all(lo <= point[c] <= hi for c, lo, hi in self.sides())

    def center(self) -> dict[Coord, Scalar]:
        return {c: _midpoint(lo, hi) for c, lo, hi in self.sides()}

    # -- order --------------------------------------------------------------

    def __le__(self, other: object) -> bool:
        """Sub-box test: the closed hull of self lies in the closed hull of other."""
        if not isinstance(other, Box):
            return NotImplemented
        if self.coords != other.coords:
            return False
        return all(
            olo <= lo and hi <= ohi
            for lo, hi, olo, ohi in zip(self.lower, self.upper, other.lower, other.upper)
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Box):
            return NotImplemented
        return self <= other and self != other

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Box):
            return NotImplemented
        return other <= self

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Box):
            return NotImplemented
        return other < self

    # -- meet and splits ----------------------------------------------------

    def intersect(self, other: Box) -> Box | None:
        """Pointwise max of lowers and min of uppers, or None if that is empty."""
        if self.coords != other.coords:
            raise ValueError(f"cannot intersect boxes over {self.coords} and {other.coords}")
        lower = tuple(max(a, b) for a, b in zip(self.lower, other.lower))
        upper = tuple(min(a, b) for a, b in zip(self.upper, other.upper))
        if any(not lo < hi for lo, hi in zip(lower, upper)):
            return None
        return Box(self.coords, lower, upper)

    def __and__(self, other: Box) -> Box | None:
        return self.intersect(other)

    def is_disjoint(self, other: Box) -> bool:
        return self.intersect(other) is None

    def _with_side(self, coord: Coord, lo: Scalar, hi: Scalar) -> Box | None:
        if not lo < hi:
            return None
        k = self._index(coord)
        return Box(
            self.coords,
            self.lower[:k] + (lo,) + self.lower[k + 1 :],
            self.upper[:k] + (hi,) + self.upper[k + 1 :],
        )

    def split_lower(self, coord: Coord, x: Scalar) -> Box | None:
        """The part with x[coord] ≤ x: upper bound clipped to min(upper, x)."""
        lo, hi = self[coord]
        return self._with_side(coord, lo, min(hi, x))

    def split_upper(self, coord: Coord, x: Scalar) -> Box | None:
        """The part with x[coord] > x: lower bound clipped to max(lower, x)."""
        lo, hi = self[coord]
        return self._with_side(coord, max(lo, x), hi)

    def split_at(self, coord: Coord, x: Scalar) -> tuple[Box | None, Box | None]:
        """Both halves of the split along the hyperplane x[coord] = x.

        For x strictly inside (lower, upper) both halves are boxes. Otherwise
        exactly one half is the box itself and the other is None.
        """
        return self.split_lower(coord, x), self.split_upper(coord, x)

    def split_center_box(self, upper_coords: Iterable[Coord]) -> Box:
        """The child of the center split taking the upper half on ``upper_coords``."""
        chosen = frozenset(upper_coords)
        unknown = chosen - set(self.coords)
        if unknown:
            raise KeyError(f"box has no coordinates {sorted(unknown)}")
        mid = self.center()
        return Box(
            self.coords,
            tuple(mid[c] if c in chosen else lo for c, lo, _ in self.sides()),
            tuple(hi if c in chosen else mid[c] for c, _, hi in self.sides()),
        )

    def split_center_boxes(self) -> tuple[Box, ...]:
        """All 2^dim children of the center split."""
        choices = product((False, True), repeat=self.dim)
        return tuple(
            self.split_center_box(c for c, up in zip(self.coords, picks) if up)
            for picks in choices
        )

    # -- derived quantities -------------------------------------------------

    def face(self, coord: Coord) -> Box:
        """The box over the remaining coordinates after dropping ``coord``."""
        k = self._index(coord)
        return Box(
            self.coords[:k] + self.coords[k + 1 :],
            self.lower[:k] + self.lower[k + 1 :],
            self.upper[:k] + self.upper[k + 1 :],
        )

    def hyperplanes(self) -> frozenset[Hyperplane]:
        """The hyperplanes carrying the faces of the box."""
        return frozenset(
            plane for c, lo, hi in self.sides() for plane in ((c, lo), (c, hi))
        )

    def volume(self) -> Scalar:
        return math.prod(hi - lo for _, lo, hi in self.sides())

    def distortion(self) -> Scalar:
        """Longest side divided by shortest side; 0 for a zero-dimensional box."""
        if not self.coords:
            return 0
        sides = [hi - lo for _, lo, hi in self.sides()]
        return _ratio(max(sides), min(sides))


# ---------------------------------------------------------------------------
# Domains of box-additive maps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DomainScope:
    """Either all boxes (``box is None``) or the sub-boxes of a fixed box."""

    box: Box | None = None

    @classmethod
    def all_boxes(cls) -> DomainScope:
        return cls(None)

    @classmethod
    def subboxes_of(cls, box: Box) -> DomainScope:
        return cls(box)

    @property
    def is_all(self) -> bool:
        return self.box is None

    def __contains__(self, box: Box) -> bool:
        return self.box is None or box <= self.box

    def __le__(self, other: object) -> bool:
        if not isinstance(other, DomainScope):
            return NotImplemented
        if other.box is None:
            return True
        return self.box is not None and self.box <= other.box

    def __str__(self) -> str:
        return "all boxes" if self.box is None else f"sub-boxes of {self.box}"
