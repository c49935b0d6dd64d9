"""JSON serialization for boxes and prepartitions.

Every value serializes to a dict with a "type" discriminator field:

    {"type": "box", "bounds": {"x": [0, "1/2"], "y": [0, 1]}}
    {"type": "prepartition", "root": {...box...}, "boxes": [{...box...}, ...]}

Bounds keep their exactness: ints and floats are JSON numbers, Fractions
are "p/q" strings. Round-trip: from_json(to_json(x)) == x.
"""

from __future__ import annotations

import json
from fractions import Fraction
from pathlib import Path
from typing import Any

from .box import Box, Scalar
from .errors import BoxPartitionError
from .prepartition import Prepartition
from .result import Err, Ok, Result

# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def scalar_to_json(v: Scalar) -> int | float | str:
    if isinstance(v, bool):
        raise TypeError(f"Booleans are not coordinates: {v!r}")
    if isinstance(v, int | float):
        return v
    if isinstance(v, Fraction):
        return v.numerator if v.denominator == 1 else f"{v.numerator}/{v.denominator}"
    raise TypeError(f"Unsupported scalar type: {type(v)}")


def scalar_from_json(v: Any) -> Scalar:
    if isinstance(v, bool):
        raise ValueError(f"Booleans are not coordinates: {v!r}")
    if isinstance(v, int | float):
        return v
    if isinstance(v, str):
        return Fraction(v)
    raise ValueError(f"Unsupported scalar encoding: {v!r}")


# ---------------------------------------------------------------------------
# Boxes
# ---------------------------------------------------------------------------


def box_to_json(b: Box) -> dict[str, Any]:
    return {
        "type": "box",
        "bounds": {
            c: [scalar_to_json(lo), scalar_to_json(hi)] for c, lo, hi in b.sides()
        },
    }


def _expect(d: Any, type_name: str) -> dict[str, Any]:
    if not isinstance(d, dict):
        raise ValueError(f"Expected a {type_name} object, got {type(d).__name__}")
    if d.get("type") != type_name:
        raise ValueError(f"Expected a {type_name}, got type {d.get('type')!r}")
    return d


def box_from_json(d: dict[str, Any]) -> Box:
    bounds = _expect(d, "box")["bounds"]
    if not isinstance(bounds, dict):
        raise ValueError(f"Box bounds must be an object, got {type(bounds).__name__}")
    return Box.of(
        {
            c: (scalar_from_json(lo), scalar_from_json(hi))
            for c, (lo, hi) in bounds.items()
        }
    )


# ---------------------------------------------------------------------------
# Prepartitions
# ---------------------------------------------------------------------------


def prepartition_to_json(pi: Prepartition) -> dict[str, Any]:
    ordered = sorted(pi.boxes, key=lambda b: (b.lower, b.upper))
    return {
        "type": "prepartition",
        "root": box_to_json(pi.root),
        "boxes": [box_to_json(b) for b in ordered],
    }


def raw_prepartition_from_json(d: dict[str, Any]) -> tuple[Box, tuple[Box, ...]]:
    """Decode the root and the boxes without checking the prepartition invariants."""
    d = _expect(d, "prepartition")
    root = box_from_json(d["root"])
    if not isinstance(d["boxes"], list):
        raise ValueError(f"Prepartition boxes must be a list, got {type(d['boxes']).__name__}")
    return root, tuple(box_from_json(b) for b in d["boxes"])


def prepartition_from_json(d: dict[str, Any]) -> Prepartition:
    root, boxes = raw_prepartition_from_json(d)
    return Prepartition(root, frozenset(boxes))


# ---------------------------------------------------------------------------
# Top level
# ---------------------------------------------------------------------------


def to_json(obj: Box | Prepartition) -> dict[str, Any]:
    if isinstance(obj, Box):
        return box_to_json(obj)
    elif isinstance(obj, Prepartition):
        return prepartition_to_json(obj)
    raise TypeError(f"Cannot serialize {type(obj)}")


def from_json(d: dict[str, Any]) -> Box | Prepartition:
    t = d.get("type") if isinstance(d, dict) else None
    if t == "box":
        return box_from_json(d)
    elif t == "prepartition":
        return prepartition_from_json(d)
    raise ValueError(f"Unknown type: {t!r}")


def dumps(obj: Box | Prepartition, indent: int | None = 2) -> str:
    return json.dumps(to_json(obj), indent=indent, ensure_ascii=False)


def loads(s: str) -> Box | Prepartition:
    return from_json(json.loads(s))


def load_raw_prepartition(
    path: str | Path,
) -> Result[tuple[Box, tuple[Box, ...]], Exception]:
    """Read a prepartition file for checking; every failure is returned, not raised."""
    try:
        text = Path(path).read_text()
    except OSError as e:
        return Err(e)
    try:
        return Ok(raw_prepartition_from_json(json.loads(text)))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, BoxPartitionError) as e:
        return Err(e)
