"""Box-additive maps.

A box-additive map on a domain (all boxes, or the sub-boxes of a box I₀)
is a function f : Box → M into a commutative additive monoid such that for
every box J of the domain and every partition π of J

    Σ_{K ∈ π} f(K) = f(J).

The law is either supplied by the caller (``BoxAdditiveMap(...)``) or
derived from the two-piece split law (``of_split_law``):

    f(J ∩ {x_i ≤ x}) + f(J ∩ {x_i > x}) = f(J)   for lower_i < x < upper_i.

The derivation is constructive and ``sum_partition`` replays it when
preconditions are checked:

  1. split J along every face hyperplane s of π, applying the split law at
     each binary split, so Σ over split_many(J, s) equals f(J);
  2. do the same for every box K of π;
  3. reconcile: the refinements of the K together are exactly the
     refinement of J, hence Σ_{K ∈ π} f(K) = f(J).
"""

from __future__ import annotations

import cmath
import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import reduce
from numbers import Complex, Rational
from typing import Any, Generic, TypeVar

from .box import Box, Coord, DomainScope, Hyperplane, Scalar
from .config import get_settings
from .errors import DomainMismatch, InvariantViolation, RootMismatch
from .partition import reconcile, split_many
from .prepartition import Prepartition

logger = logging.getLogger(__name__)

M = TypeVar("M")
N = TypeVar("N")

# (box, coordinate, threshold) -> does the split law hold there?
SplitLaw = Callable[[Box, Coord, Scalar], bool]


def values_agree(a: Any, b: Any) -> bool:
    """Equality of map values.

    Exact numbers (int, Fraction) compare with ``==``. Other numbers, complex
    ones included, compare with the configured tolerance. Sized values such
    as vectors and matrices compare elementwise.
    """
    if isinstance(a, Rational) and isinstance(b, Rational):
        return a == b
    if isinstance(a, Complex) and isinstance(b, Complex):
        tol = get_settings().tolerance
        return cmath.isclose(complex(a), complex(b), rel_tol=tol, abs_tol=tol)
    try:
        n, m = len(a), len(b)
    except TypeError:
        return bool(a == b)
    return n == m and all(values_agree(x, y) for x, y in zip(a, b))


class LawSource(Enum):
    SUPPLIED = "supplied"    # the caller vouches for the partition law
    SPLIT_LAW = "split_law"  # derived from the two-piece split law


@dataclass(frozen=True)
class BoxAdditiveMap(Generic[M]):
    """A function on boxes that is additive over partitions.

    Example:
        area = BoxAdditiveMap(Box.volume)
        area(Box.of({"x": (0, 2), "y": (0, 2)}))   # 4
    """

    fn: Callable[[Box], M]
    domain: DomainScope = field(default_factory=DomainScope.all_boxes)
    zero: Any = 0
    law: LawSource = LawSource.SUPPLIED
    split_law: SplitLaw | None = None

    # -- constructors -------------------------------------------------------

    @classmethod
    def of_split_law(
        cls,
        fn: Callable[[Box], M],
        domain: DomainScope | None = None,
        *,
        zero: Any = 0,
        split_law: SplitLaw | None = None,
    ) -> BoxAdditiveMap[M]:
        """A map whose partition law is derived from the two-piece split law.

        ``split_law`` overrides how a single split instance is verified; by
        default the values of the two halves are added and compared.
        """
        return cls(
            fn,
            DomainScope.all_boxes() if domain is None else domain,
            zero,
            LawSource.SPLIT_LAW,
            split_law,
        )

    @classmethod
    def zero_map(cls, domain: DomainScope | None = None, zero: Any = 0) -> BoxAdditiveMap[Any]:
        return cls(lambda _: zero, DomainScope.all_boxes() if domain is None else domain, zero)

    # -- evaluation ---------------------------------------------------------

    def __call__(self, box: Box) -> M:
        if get_settings().check_preconditions and box not in self.domain:
            raise InvariantViolation(f"{box} is outside the domain ({self.domain})")
        return self.fn(box)

    def sum(self, boxes: Iterable[Box]) -> M:
        return reduce(lambda acc, b: acc + self(b), boxes, self.zero)

    def check_split_law(self, box: Box, coord: Coord, x: Scalar) -> bool:
        """Does f(lower half) + f(upper half) == f(box) for this split?"""
        lower, upper = box.split_at(coord, x)
        if lower is None or upper is None:
            raise ValueError(f"threshold {x} is not strictly inside {box} along {coord!r}")
        if self.split_law is not None:
            return self.split_law(box, coord, x)
        return values_agree(self.fn(lower) + self.fn(upper), self.fn(box))

    def sum_partition(self, box: Box, pi: Prepartition) -> M:
        """Σ_{K ∈ pi} f(K), which equals f(box) when pi is a partition of box."""
        if pi.root != box:
            raise RootMismatch(f"prepartition is rooted at {pi.root}, not {box}")
        checked = get_settings().check_preconditions
        if checked:
            if box not in self.domain:
                raise InvariantViolation(f"{box} is outside the domain ({self.domain})")
            if not pi.is_partition():
                raise InvariantViolation(f"{pi} does not cover {box}")

        total = pi.sum(self.fn, self.zero)
        if not checked:
            return total

        match self.law:
            case LawSource.SPLIT_LAW:
                self._derive_partition_law(box, pi)
            case LawSource.SUPPLIED:
                expected = self.fn(box)
                if not values_agree(total, expected):
                    raise InvariantViolation(
                        f"sum over partition is {total}, value on {box} is {expected}"
                    )
        return total

    def _split_checked(self, box: Box, splits: Iterable[Hyperplane]) -> list[Box]:
        """split_many(box, splits), checking the split law at every binary split."""
        current = [box]
        for coord, x in sorted(set(splits)):
            refined: list[Box] = []
            for j in current:
                lower, upper = j.split_at(coord, x)
                if lower is None or upper is None:
                    refined.append(j)
                    continue
                if not self.check_split_law(j, coord, x):
                    logger.warning("split law fails on %s along %r at %s", j, coord, x)
                    raise InvariantViolation(f"split law fails on {j} along {coord!r} at {x}")
                refined.extend((lower, upper))
            current = refined
        return current

    def _derive_partition_law(self, box: Box, pi: Prepartition) -> None:
        s = pi.hyperplanes()
        whole = self._split_checked(box, s)
        pieces = [cell for k in pi.boxes for cell in self._split_checked(k, s)]
        if len(pieces) != len(whole) or frozenset(pieces) != frozenset(whole):
            raise InvariantViolation(
                f"refinements of the {len(pi)} boxes do not reassemble the refinement of {box}"
            )
        logger.debug(
            "partition law derived on %s: %d boxes, %d hyperplanes, %d cells",
            box, len(pi), len(s), len(whole),
        )

    def congr_on_equal_union(self, first: Prepartition, second: Prepartition) -> M:
        """The common sum of f over two prepartitions with the same union."""
        if get_settings().check_preconditions:
            if first.root not in self.domain:
                raise InvariantViolation(f"{first.root} is outside the domain ({self.domain})")
            s, _ = reconcile(first, second)
            for pi in (first, second):
                for k in pi.boxes:
                    self.sum_partition(k, split_many(k, s))
            total, other = first.sum(self.fn, self.zero), second.sum(self.fn, self.zero)
            if not values_agree(total, other):
                raise InvariantViolation(f"sums {total} and {other} over equal unions differ")
            return total
        return first.sum(self.fn, self.zero)

    # -- algebra ------------------------------------------------------------

    def _require_same_domain(self, other: BoxAdditiveMap[Any]) -> None:
        if self.domain != other.domain:
            raise DomainMismatch(f"maps on {self.domain} and {other.domain} cannot be combined")

    def _unary_law(self) -> SplitLaw | None:
        # Pointwise images keep the source's custom split check.
        return self.check_split_law if self.split_law is not None else None

    def __add__(self, other: object) -> BoxAdditiveMap[Any]:
        if not isinstance(other, BoxAdditiveMap):
            return NotImplemented
        self._require_same_domain(other)
        f, g = self.fn, other.fn
        if self.law is LawSource.SUPPLIED and other.law is LawSource.SUPPLIED:
            law, split_law = LawSource.SUPPLIED, None
        else:
            law = LawSource.SPLIT_LAW

            def split_law(box: Box, coord: Coord, x: Scalar) -> bool:
                return self.check_split_law(box, coord, x) and other.check_split_law(box, coord, x)

        return BoxAdditiveMap(
            lambda b: f(b) + g(b), self.domain, self.zero + other.zero, law, split_law
        )

    def __neg__(self) -> BoxAdditiveMap[Any]:
        f = self.fn
        return BoxAdditiveMap(lambda b: -f(b), self.domain, -self.zero, self.law, self._unary_law())

    def __sub__(self, other: object) -> BoxAdditiveMap[Any]:
        if not isinstance(other, BoxAdditiveMap):
            return NotImplemented
        return self + (-other)

    def scale(self, c: Any) -> BoxAdditiveMap[Any]:
        """The map J ↦ c * f(J)."""
        f = self.fn
        return BoxAdditiveMap(lambda b: c * f(b), self.domain, c * self.zero, self.law, self._unary_law())

    def __rmul__(self, c: Any) -> BoxAdditiveMap[Any]:
        return self.scale(c)

    def restrict(self, box: Box) -> BoxAdditiveMap[M]:
        """The same function on the sub-boxes of ``box``; requires box in the domain."""
        narrowed = DomainScope.subboxes_of(box)
        if get_settings().check_preconditions and not narrowed <= self.domain:
            raise InvariantViolation(f"{narrowed} is not inside {self.domain}")
        return replace(self, domain=narrowed)

    def map(self, g: Callable[[M], N], zero: Any = None) -> BoxAdditiveMap[N]:
        """Compose with an additive monoid homomorphism ``g``.

        A custom split check of the source is kept, and the image values of
        the two halves are compared as well, so a non-additive ``g`` fails.
        """
        f = self.fn

        def image(b: Box) -> N:
            return g(f(b))

        split_law: SplitLaw | None = None
        if self.split_law is not None:

            def split_law(box: Box, coord: Coord, x: Scalar) -> bool:
                lower, upper = box.split_at(coord, x)
                return self.check_split_law(box, coord, x) and values_agree(
                    image(lower) + image(upper), image(box)
                )

        return BoxAdditiveMap(
            image,
            self.domain,
            g(self.zero) if zero is None else zero,
            self.law,
            split_law,
        )

    def to_smul(self, operator: Any) -> BoxAdditiveMap[Any]:
        """The map J ↦ f(J) * operator, for a scalar-valued f."""
        f = self.fn
        return BoxAdditiveMap(
            lambda b: f(b) * operator, self.domain, self.zero * operator, self.law, self._unary_law()
        )


# ---------------------------------------------------------------------------
# Derived constructions
# ---------------------------------------------------------------------------


def upper_sub_lower(
    domain_box: Box,
    coord: Coord,
    face_maps: Callable[[Scalar], BoxAdditiveMap[Any]],
    *,
    zero: Any = 0,
) -> BoxAdditiveMap[Any]:
    """J ↦ F(J.upper coord)(J.face coord) - F(J.lower coord)(J.face coord).

    ``face_maps(t)`` must be box-additive on the faces of ``domain_box``
    (the boxes over the remaining coordinates) for every t in
    [domain_box.lower coord, domain_box.upper coord]. The result is
    box-additive on the sub-boxes of ``domain_box``. Its split law is
    checked by cases on the split axis:

    - along ``coord``: both halves keep the face of J and the value at the
      threshold cancels (telescoping);
    - along another axis: the face is split along the same hyperplane and
      both face maps satisfy their own split law there.
    """

    def fn(j: Box) -> Any:
        face = j.face(coord)
        return face_maps(j.upper_of(coord))(face) - face_maps(j.lower_of(coord))(face)

    def split_law(j: Box, axis: Coord, x: Scalar) -> bool:
        lower, upper = j.split_at(axis, x)
        assert lower is not None and upper is not None
        face = j.face(coord)
        if axis == coord:
            return lower.face(coord) == face == upper.face(coord)
        if face.split_at(axis, x) != (lower.face(coord), upper.face(coord)):
            return False
        top = face_maps(j.upper_of(coord))
        bottom = face_maps(j.lower_of(coord))
        return top.check_split_law(face, axis, x) and bottom.check_split_law(face, axis, x)

    return BoxAdditiveMap.of_split_law(
        fn, DomainScope.subboxes_of(domain_box), zero=zero, split_law=split_law
    )


def to_box_additive(
    measure: Callable[[Box], Scalar], domain: DomainScope | None = None
) -> BoxAdditiveMap[Scalar]:
    """Adapt a finite measure of boxes into a box-additive map.

    Every value is checked to be finite and non-negative.
    """

    def fn(j: Box) -> Scalar:
        value = measure(j)
        if not 0 <= value < math.inf:
            raise InvariantViolation(
                f"measure of {j} is {value}; expected a finite non-negative value"
            )
        return value

    return BoxAdditiveMap.of_split_law(fn, domain)


def volume(domain: DomainScope | None = None) -> BoxAdditiveMap[Scalar]:
    """J ↦ ∏ᵢ (J.upper i − J.lower i)."""
    return to_box_additive(Box.volume, domain)
