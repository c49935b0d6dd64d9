"""Diagnostics for raw box collections.

``Prepartition(...)`` refuses invalid input by raising. The checker instead
inspects a root and a plain sequence of boxes (for example, decoded from a
file) and reports every problem it finds:

- coords_consistent (error): a box uses other coordinates than the root
- duplicate_box (error): the same box is listed twice
- box_le_root (error): a box sticks out of the root
- pairwise_disjoint (error): two boxes overlap
- covers_root (warning): the boxes leave part of the root uncovered
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations

from .box import Box
from .prepartition import Prepartition
from .union import BoxUnion

logger = logging.getLogger(__name__)


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    check: str
    severity: Severity
    boxes: tuple[Box, ...]
    message: str


@dataclass(frozen=True)
class CheckResult:
    root: Box
    box_count: int
    diagnostics: tuple[Diagnostic, ...]

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == Severity.ERROR)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == Severity.WARNING)

    @property
    def is_well_formed(self) -> bool:
        """The boxes form a prepartition of the root."""
        return len(self.errors) == 0

    @property
    def is_partition(self) -> bool:
        return self.is_well_formed and not any(
            d.check == "covers_root" for d in self.diagnostics
        )


@dataclass
class CheckContext:
    root: Box
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def error(self, check: str, message: str, *boxes: Box) -> None:
        self.diagnostics.append(Diagnostic(check, Severity.ERROR, boxes, message))

    def warning(self, check: str, message: str, *boxes: Box) -> None:
        self.diagnostics.append(Diagnostic(check, Severity.WARNING, boxes, message))


def _check_boxes_individually(boxes: list[Box], ctx: CheckContext) -> list[Box]:
    """Per-box checks; returns the distinct boxes that can be compared further."""
    comparable: list[Box] = []
    for b, count in Counter(boxes).items():
        if b.coords != ctx.root.coords:
            ctx.error(
                "coords_consistent",
                f"Box {b} uses coordinates {b.coords}, root uses {ctx.root.coords}",
                b,
            )
            continue
        if count > 1:
            ctx.error("duplicate_box", f"Box {b} is listed {count} times", b)
        if not b <= ctx.root:
            ctx.error("box_le_root", f"Box {b} is not a sub-box of the root {ctx.root}", b)
        comparable.append(b)
    return comparable


def _check_disjoint(boxes: list[Box], ctx: CheckContext) -> None:
    for a, b in combinations(boxes, 2):
        overlap = a.intersect(b)
        if overlap is not None:
            ctx.error("pairwise_disjoint", f"Boxes {a} and {b} overlap on {overlap}", a, b)


def _check_cover(boxes: list[Box], ctx: CheckContext) -> None:
    uncovered = BoxUnion((ctx.root,)) - BoxUnion(boxes)
    if not uncovered.is_empty:
        example = min(uncovered.boxes, key=lambda b: (b.lower, b.upper))
        ctx.warning(
            "covers_root",
            f"{len(uncovered.boxes)} grid cell(s) of the root are uncovered, e.g. {example}",
            example,
        )


def check_boxes(root: Box, boxes: Iterable[Box]) -> CheckResult:
    listed = list(boxes)
    ctx = CheckContext(root)
    comparable = _check_boxes_individually(listed, ctx)
    _check_disjoint(comparable, ctx)
    # Coverage is only meaningful for a well-formed prepartition.
    if not ctx.diagnostics:
        _check_cover(comparable, ctx)
    logger.debug("checked %d boxes: %d diagnostics", len(listed), len(ctx.diagnostics))
    return CheckResult(root, len(listed), tuple(ctx.diagnostics))


def check_prepartition(pi: Prepartition) -> CheckResult:
    return check_boxes(pi.root, pi.boxes)
