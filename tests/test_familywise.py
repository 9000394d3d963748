from __future__ import annotations

import pytest

from fprsim.errors import InvalidParameter
from fprsim.familywise import family_wise_rate, family_wise_result


def test_single_test_rate_is_alpha():
    assert family_wise_rate(0.05, 1) == pytest.approx(0.05, abs=1e-15)
    assert family_wise_rate(0.01, 1) == 0.01


def test_known_values():
    assert family_wise_rate(0.05, 2) == pytest.approx(0.0975)
    assert family_wise_rate(0.05, 3) == pytest.approx(0.142625)
    assert family_wise_rate(0.05, 20) == pytest.approx(1.0 - 0.95**20)


def test_monotone_in_k_and_alpha():
    ks = list(range(1, 60))
    rates = [family_wise_rate(0.05, k) for k in ks]
    assert all(b >= a for a, b in zip(rates, rates[1:]))

    alphas = [0.001, 0.01, 0.05, 0.1, 0.3, 0.7, 0.999]
    for k in (1, 2, 5, 50):
        by_alpha = [family_wise_rate(a, k) for a in alphas]
        assert all(b >= a for a, b in zip(by_alpha, by_alpha[1:]))
        assert all(0.0 < r <= 1.0 for r in by_alpha)


@pytest.mark.parametrize(
    "alpha,k",
    [(0.0, 1), (1.0, 1), (-0.2, 3), (1.2, 3), (0.05, 0), (0.05, -1), (0.05, 2.0), (0.05, True)],
)
def test_invalid_parameters(alpha, k):
    with pytest.raises(InvalidParameter):
        family_wise_rate(alpha, k)


def test_family_wise_result_value_object():
    res = family_wise_result(0.05, 3)
    assert res.alpha == 0.05
    assert res.k == 3
    assert res.rate == pytest.approx(0.142625)
