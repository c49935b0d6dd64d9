from fractions import Fraction

import pytest

from boxpart import (
    BoxUnion,
    InvariantViolation,
    Prepartition,
    RootMismatch,
    common_splits,
    complement,
    is_partition,
    reconcile,
    split,
    split_center,
    split_many,
)
from boxpart.helpers import box, grid, prepartition

I = box(x=(0, 2), y=(0, 2))
LEFT = box(x=(0, 1), y=(0, 2))
RIGHT = box(x=(1, 2), y=(0, 2))


def test_split_of_the_square() -> None:
    top = Prepartition.top(I)
    halves = split(I, "x", 1)
    assert halves.boxes == {LEFT, RIGHT}
    assert is_partition(halves)
    assert halves.union == top.union
    assert halves <= top


def test_split_outside_the_side_is_top() -> None:
    assert split(I, "x", 0) == Prepartition.top(I)
    assert split(I, "x", 7) == Prepartition.top(I)
    assert split(I, "x", -1) == Prepartition.top(I)


def test_top_is_a_partition_and_bottom_is_not() -> None:
    assert is_partition(Prepartition.top(I))
    assert not is_partition(Prepartition.bottom(I))
    assert not is_partition(prepartition(I, LEFT))


def test_partition_cannot_be_extended() -> None:
    with pytest.raises(InvariantViolation):
        prepartition(I, LEFT, RIGHT, box(x=(0, 2), y=(0, 1)))


def test_partition_is_its_only_refining_superset() -> None:
    quarters = grid(I, x=[1], y=[1])
    candidates = [
        quarters,
        Prepartition.top(I),
        split(I, "x", 1),
        grid(I, x=[1, Fraction(3, 2)], y=[1]),
        prepartition(I, box(x=(0, 1), y=(0, 1))),
    ]
    for other in candidates:
        if quarters <= other and quarters.boxes <= other.boxes:
            assert other == quarters
    for extra in (LEFT, I, box(x=(0, Fraction(1, 2)), y=(0, Fraction(1, 2)))):
        with pytest.raises(InvariantViolation):
            prepartition(I, *quarters.boxes, extra)


def test_bunion_of_partitions_is_a_partition() -> None:
    pi = split(I, "x", 1)
    refined = pi.bunion(lambda j: split(j, "y", Fraction(1, 3)))
    assert is_partition(refined)
    assert len(refined) == 4

    mixed = pi.bunion(lambda j: split_center(j) if j == LEFT else Prepartition.top(j))
    assert is_partition(mixed)
    assert len(mixed) == 5


def test_inf_of_partitions_is_a_partition() -> None:
    a = grid(I, x=[Fraction(1, 2)])
    b = grid(I, x=[Fraction(3, 2)], y=[1])
    meet = a & b
    assert is_partition(meet)
    assert len(meet) == 6


def test_restrict_of_partition_is_a_partition() -> None:
    pi = grid(I, x=[1], y=[1])
    j = box(x=(Fraction(1, 2), Fraction(3, 2)), y=(0, 2))
    restricted = pi.restrict(j)
    assert restricted.root == j
    assert is_partition(restricted)


def test_partial_family_is_not_a_partition_after_filter() -> None:
    pi = grid(I, x=[1], y=[1])
    kept = pi.filter(lambda j: j.lower_of("x") == 0)
    assert not is_partition(kept)
    assert kept.union == BoxUnion([LEFT])


def test_complement_completes_a_prepartition() -> None:
    unit = box(x=(0, 1), y=(0, 1))
    corner = prepartition(unit, box(x=(0, Fraction(1, 2)), y=(0, Fraction(1, 2))))
    rest = complement(corner)
    assert len(rest) == 3
    assert rest.union.isdisjoint(corner.union)
    assert is_partition(corner.disj_union(rest))


def test_complement_of_a_hole() -> None:
    hole = prepartition(I, box(x=(Fraction(1, 2), Fraction(3, 2)), y=(Fraction(1, 2), Fraction(3, 2))))
    rest = complement(hole)
    assert len(rest) == 8
    assert is_partition(hole.disj_union(rest))


def test_split_many() -> None:
    pi = split_many(I, [("x", Fraction(1, 2)), ("x", 1), ("x", 5), ("y", -1)])
    assert is_partition(pi)
    assert len(pi) == 3
    assert split_many(I, []) == Prepartition.top(I)


def test_split_many_ignores_order_and_duplicates() -> None:
    splits = [("y", 1), ("x", 1), ("x", Fraction(1, 2))]
    assert split_many(I, splits) == split_many(I, list(reversed(splits)) + splits)


def test_split_many_of_union_is_successive_refinement() -> None:
    s1 = {("x", 1), ("y", Fraction(1, 2))}
    s2 = {("x", Fraction(3, 2)), ("y", Fraction(1, 2))}
    assert split_many(I, s1 | s2) == split_many(I, s1).split_many(s2)
    assert split_many(I, s1 | s2) == split_many(I, s1) & split_many(I, s2)


def test_split_center() -> None:
    q = split_center(box(x=(0, 1), y=(0, 1)))
    assert is_partition(q)
    assert len(q) == 4
    assert all(j.volume() == Fraction(1, 4) for j in q)

    cube = split_center(box(x=(0, 2), y=(0, 2), z=(0, 2)))
    assert len(cube) == 8
    assert is_partition(cube)
    assert cube.distortion() == 1


def test_common_splits() -> None:
    a = split(I, "x", 1)
    b = split(I, "y", 1)
    assert common_splits(a, b) == a.hyperplanes() | b.hyperplanes()
    assert ("x", 1) in common_splits(a, b)
    assert ("y", 1) in common_splits(a, b)
    assert common_splits() == frozenset()


def test_reconcile_partitions() -> None:
    s, refined = reconcile(split(I, "x", 1), split(I, "y", 1))
    assert refined == grid(I, x=[1], y=[1])
    assert ("x", 1) in s and ("y", 1) in s


def test_reconcile_prepartitions_with_same_union() -> None:
    a = prepartition(I, LEFT)
    b = prepartition(I, box(x=(0, 1), y=(0, 1)), box(x=(0, 1), y=(1, 2)))
    s, refined = reconcile(a, b)
    assert refined == b
    assert refined == a.split_many(s) == b.split_many(s)
    assert refined.union == a.union


def test_reconcile_requires_equal_unions() -> None:
    with pytest.raises(InvariantViolation):
        reconcile(split(I, "x", 1), prepartition(I, LEFT))
    with pytest.raises(RootMismatch):
        reconcile(Prepartition.top(I), Prepartition.top(LEFT))
