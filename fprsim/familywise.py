"""Closed-form family-wise false-positive rate for independent tests."""

from __future__ import annotations

from fprsim.core.types import FamilyWiseResult
from fprsim.core.utils import open_unit_interval, positive_int


def family_wise_rate(alpha: float, k: int) -> float:
    """Probability of at least one false positive among `k` independent tests.

    Computed as ``1 - (1 - alpha) ** k``. Non-decreasing in both `alpha` and
    `k`, and equal to `alpha` when ``k == 1``.
    """
    alpha_f = open_unit_interval("alpha", alpha)
    k_i = positive_int("k", k)
    if k_i == 1:
        return alpha_f
    return 1.0 - (1.0 - alpha_f) ** k_i


def family_wise_result(alpha: float, k: int) -> FamilyWiseResult:
    rate = family_wise_rate(alpha, k)
    return FamilyWiseResult(alpha=float(alpha), k=int(k), rate=rate)
