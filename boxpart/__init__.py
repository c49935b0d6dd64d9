"""boxpart: partitions of axis-aligned boxes and box-additive maps."""

from .box import Box, Coord, DomainScope, Hyperplane, Point, Scalar
from .union import BoxUnion
from .prepartition import Prepartition
from .partition import (
    common_splits,
    complement,
    is_partition,
    reconcile,
    split,
    split_center,
    split_many,
)
from .additive import (
    BoxAdditiveMap,
    LawSource,
    to_box_additive,
    upper_sub_lower,
    values_agree,
    volume,
)
from .errors import (
    BoxPartitionError,
    DomainMismatch,
    InvalidBox,
    InvariantViolation,
    RootMismatch,
)
from .config import Settings, get_settings, override_settings, set_settings
from .serialization import dumps, loads
from .helpers import box, grid, point, prepartition
from .result import Ok, Err, Result

__all__ = [
    # Boxes
    "Box", "Coord", "DomainScope", "Hyperplane", "Point", "Scalar", "BoxUnion",
    # Prepartitions and partitions
    "Prepartition", "common_splits", "complement", "is_partition", "reconcile",
    "split", "split_center", "split_many",
    # Box-additive maps
    "BoxAdditiveMap", "LawSource", "to_box_additive", "upper_sub_lower",
    "values_agree", "volume",
    # Errors
    "BoxPartitionError", "DomainMismatch", "InvalidBox", "InvariantViolation",
    "RootMismatch",
    # Settings
    "Settings", "get_settings", "override_settings", "set_settings",
    # Serialization
    "dumps", "loads",
    # Helpers
    "box", "grid", "point", "prepartition",
    # Result
    "Ok", "Err", "Result",
]
