"""Small pure validation helpers shared by the core operations."""

from __future__ import annotations

import math
from numbers import Integral, Real

from fprsim.errors import InvalidParameter


def positive_int(name: str, value: object, minimum: int = 1) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}.")
    out = int(value)
    if out < minimum:
        raise InvalidParameter(f"{name} must be >= {minimum}, got {out}.")
    return out


def finite_float(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidParameter(f"{name} must be a real number, got {value!r}.")
    out = float(value)
    if not math.isfinite(out):
        raise InvalidParameter(f"{name} must be finite, got {out}.")
    return out


def open_unit_interval(name: str, value: object) -> float:
    """Validate a probability strictly inside (0, 1), e.g. a significance level."""
    out = finite_float(name, value)
    if not 0.0 < out < 1.0:
        raise InvalidParameter(f"{name} must lie in the open interval (0, 1), got {out}.")
    return out


def seed_value(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidParameter(f"seed must be an integer, got {value!r}.")
    out = int(value)
    if out < 0:
        raise InvalidParameter(f"seed must be non-negative, got {out}.")
    return out
