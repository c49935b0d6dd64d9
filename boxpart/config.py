"""Runtime settings for precondition checking and value comparison.

Settings are read from the environment (and a ``.env`` file, if present):

    BOXPART_CHECK_PRECONDITIONS   "1"/"true"/"yes" or "0"/"false"/"no"
    BOXPART_TOLERANCE             float, used when comparing float values
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any

from dotenv import find_dotenv, load_dotenv

from .result import Err, Ok, Result

logger = logging.getLogger(__name__)

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class Settings:
    """Engine-wide policy.

    check_preconditions:
        Verify caller-supplied preconditions (``single``, ``disj_union``,
        domain membership, ``sum_partition``). When off, a violated
        precondition silently produces a wrong result.
    tolerance:
        Relative and absolute tolerance used when two float values of a
        box-additive map are compared. Exact scalars compare with ``==``.
    """

    check_preconditions: bool = True
    tolerance: float = 1e-9

    @classmethod
    def from_env(cls) -> Result[Settings, ValueError]:
        """Build settings from BOXPART_* variables, loading ``.env`` first.

        The ``.env`` file is looked up from the working directory upwards.
        Variables already set in the environment take precedence.
        """
        load_dotenv(find_dotenv(usecwd=True))
        defaults = cls()

        raw_check = os.getenv("BOXPART_CHECK_PRECONDITIONS")
        match raw_check:
            case None:
                check = defaults.check_preconditions
            case str(v) if v.strip().lower() in _TRUE:
                check = True
            case str(v) if v.strip().lower() in _FALSE:
                check = False
            case _:
                return Err(
                    ValueError(f"BOXPART_CHECK_PRECONDITIONS: not a boolean: {raw_check!r}")
                )

        raw_tol = os.getenv("BOXPART_TOLERANCE")
        if raw_tol is None:
            tolerance = defaults.tolerance
        else:
            try:
                tolerance = float(raw_tol)
            except ValueError:
                return Err(ValueError(f"BOXPART_TOLERANCE: not a number: {raw_tol!r}"))
            if not tolerance >= 0.0:
                return Err(ValueError(f"BOXPART_TOLERANCE must be >= 0, got {tolerance}"))

        return Ok(cls(check_preconditions=check, tolerance=tolerance))


_active = Settings()


def get_settings() -> Settings:
    return _active


def set_settings(settings: Settings) -> Settings:
    """Install ``settings`` and return the previously active value."""
    global _active
    previous = _active
    _active = settings
    logger.debug("settings changed: %s", settings)
    return previous


@contextmanager
def override_settings(**changes: Any) -> Iterator[Settings]:
    """Temporarily replace fields of the active settings."""
    previous = set_settings(replace(_active, **changes))
    try:
        yield _active
    finally:
        set_settings(previous)
