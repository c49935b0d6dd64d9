"""Exceptions raised by the box-partition engine.

Degenerate geometry is not an error: ``Box.split_at`` and ``Box.intersect``
return ``None`` for the empty side. Exceptions are reserved for invalid
construction and for broken preconditions.
"""

from __future__ import annotations


class BoxPartitionError(Exception):
    """Base class for every error raised by boxpart."""


class InvalidBox(BoxPartitionError, ValueError):
    """A box was built with a coordinate where lower >= upper."""


class InvariantViolation(BoxPartitionError):
    """A precondition or an additivity law does not hold."""


class RootMismatch(InvariantViolation):
    """Two prepartitions (or a prepartition and a box) disagree on the root."""


class DomainMismatch(BoxPartitionError, ValueError):
    """Box-additive maps over different domains were combined."""
