"""Builder helpers for boxes, points and prepartitions.

    I = box(x=(0, 2), y=(0, 2))
    pi = grid(I, x=[1], y=[1])          # four unit squares
    pi.closed_hull_multiplicity(point(x=1, y=1))   # 4
"""

from collections.abc import Iterable

from boxpart.box import Box, Scalar
from boxpart.partition import split_many
from boxpart.prepartition import Prepartition


def box(**bounds: tuple[Scalar, Scalar]) -> Box:
    return Box.of(bounds)


def point(**coords: Scalar) -> dict[str, Scalar]:
    return dict(coords)


def prepartition(root: Box, *boxes: Box) -> Prepartition:
    """Validated prepartition of ``root`` with the given boxes."""
    return Prepartition(root, frozenset(boxes))


def grid(root: Box, **cuts: Iterable[Scalar]) -> Prepartition:
    """Split ``root`` at the given thresholds per coordinate."""
    return split_many(root, ((c, x) for c, xs in cuts.items() for x in xs))
