from fractions import Fraction

import pytest

from boxpart import Box, DomainScope, InvalidBox
from boxpart.helpers import box, point


def test_coordinates_are_sorted() -> None:
    a = Box(("y", "x"), (0, 1), (1, 3))
    b = box(x=(1, 3), y=(0, 1))
    assert a == b
    assert hash(a) == hash(b)
    assert a.coords == ("x", "y")
    assert a.lower == (1, 0)
    assert a.upper == (3, 1)
    assert a["y"] == (0, 1)


@pytest.mark.parametrize(
    "lo, hi",
    [(1, 1), (2, 1), (0, float("nan")), (0, float("inf")), (float("-inf"), 0)],
)
def test_invalid_box_rejected(lo: float, hi: float) -> None:
    with pytest.raises(InvalidBox):
        box(x=(0, 1), y=(lo, hi))


def test_invalid_box_is_value_error() -> None:
    with pytest.raises(ValueError):
        box(x=(3, 0))


def test_malformed_box_rejected() -> None:
    with pytest.raises(InvalidBox):
        Box(("x", "y"), (0,), (1, 1))
    with pytest.raises(InvalidBox):
        Box(("x", "x"), (0, 0), (1, 1))


def test_contains_point_is_half_open() -> None:
    i = box(x=(0, 2), y=(0, 2))
    assert point(x=1, y=1) in i
    assert i.contains_point(point(x=2, y=2))
    assert point(x=0, y=1) not in i
    assert point(x=3, y=1) not in i
    assert i.in_closed_hull(point(x=0, y=1))
    assert not i.in_closed_hull(point(x=3, y=1))


def test_order_is_a_partial_order() -> None:
    big = box(x=(0, 4), y=(0, 4))
    mid = box(x=(0, 2), y=(1, 3))
    small = box(x=(1, 2), y=(1, 2))
    sideways = box(x=(1, 5), y=(0, 1))

    for b in (big, mid, small, sideways):
        assert b <= b
    assert small <= mid <= big
    assert small <= big
    assert small < big
    assert big >= mid
    assert big > mid
    assert not big <= small
    assert not sideways <= big
    assert not big <= sideways

    same = Box.of({"y": (0, 4), "x": (0, 4)})
    assert big <= same and same <= big
    assert big == same
    assert not big < same


def test_boxes_over_other_coordinates_are_incomparable() -> None:
    assert not box(x=(0, 1)) <= box(y=(0, 1))
    assert not box(x=(0, 1)) <= box(x=(0, 1), y=(0, 1))


def test_intersect() -> None:
    a = box(x=(0, 2), y=(0, 2))
    b = box(x=(1, 3), y=(-1, 1))
    assert a & b == box(x=(1, 2), y=(0, 1))
    assert a.intersect(b) == b.intersect(a)
    assert a.intersect(a) == a

    touching = box(x=(2, 3), y=(0, 2))
    assert a.intersect(touching) is None
    assert a.is_disjoint(touching)

    with pytest.raises(ValueError):
        a.intersect(box(x=(0, 1)))


def test_split_inside() -> None:
    i = box(x=(0, 2), y=(0, 2))
    lower, upper = i.split_at("x", 1)
    assert lower == box(x=(0, 1), y=(0, 2))
    assert upper == box(x=(1, 2), y=(0, 2))
    assert lower.is_disjoint(upper)

    # The hyperplane belongs to the lower half only.
    assert point(x=1, y=1) in lower
    assert point(x=1, y=1) not in upper

    for p in (point(x=0, y=0), point(x=1, y=2), point(x=2, y=2), point(x=Fraction(3, 2), y=1)):
        assert lower.in_closed_hull(p) or upper.in_closed_hull(p)
    assert lower.volume() + upper.volume() == i.volume()


@pytest.mark.parametrize("x", [-1, 0])
def test_split_below_keeps_only_upper(x: int) -> None:
    i = box(x=(0, 2), y=(0, 2))
    assert i.split_at("x", x) == (None, i)


@pytest.mark.parametrize("x", [2, 5])
def test_split_above_keeps_only_lower(x: int) -> None:
    i = box(x=(0, 2), y=(0, 2))
    assert i.split_at("x", x) == (i, None)


def test_split_unknown_coordinate() -> None:
    with pytest.raises(KeyError):
        box(x=(0, 1)).split_at("z", 0)


def test_face() -> None:
    i = box(x=(0, 2), y=(1, 3), z=(0, 1))
    assert i.face("y") == box(x=(0, 2), z=(0, 1))

    point_box = box(x=(0, 1)).face("x")
    assert point_box == Box((), (), ())
    assert point_box.volume() == 1
    assert point_box.distortion() == 0

    with pytest.raises(KeyError):
        i.face("w")


def test_volume_and_distortion() -> None:
    i = box(x=(0, 2), y=(0, 4))
    assert i.volume() == 8
    assert i.distortion() == 2
    assert isinstance(i.distortion(), Fraction)

    f = box(x=(0.0, 1.0), y=(0.0, 0.5))
    assert f.distortion() == 2.0
    assert f.volume() == 0.5


def test_distortion_is_kept_by_center_splits() -> None:
    i = box(x=(0, 4), y=(0, 1))
    for child in i.split_center_boxes():
        assert child.distortion() <= i.distortion()
        for grandchild in child.split_center_boxes():
            assert grandchild.distortion() <= child.distortion()


def test_split_center_boxes() -> None:
    i = box(x=(0, 2), y=(0, 2))
    children = i.split_center_boxes()
    assert len(children) == 4
    assert len(set(children)) == 4
    assert box(x=(0, 1), y=(1, 2)) in children
    assert i.split_center_box({"y"}) == box(x=(0, 1), y=(1, 2))
    assert i.split_center_box(()) == box(x=(0, 1), y=(0, 1))
    assert sum(c.volume() for c in children) == i.volume()
    assert i.center() == {"x": 1, "y": 1}

    with pytest.raises(KeyError):
        i.split_center_box({"z"})


def test_hyperplanes() -> None:
    assert box(x=(0, 1), y=(2, 3)).hyperplanes() == {("x", 0), ("x", 1), ("y", 2), ("y", 3)}


def test_domain_scope() -> None:
    i = box(x=(0, 2), y=(0, 2))
    inner = box(x=(0, 1), y=(0, 1))
    outer = box(x=(0, 3), y=(0, 1))

    scope = DomainScope.subboxes_of(i)
    everything = DomainScope.all_boxes()
    assert inner in scope
    assert i in scope
    assert outer not in scope
    assert outer in everything
    assert everything.is_all
    assert not scope.is_all

    assert scope <= everything
    assert not everything <= scope
    assert DomainScope.subboxes_of(inner) <= scope
    assert not DomainScope.subboxes_of(outer) <= scope
