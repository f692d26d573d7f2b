import math
from dataclasses import dataclass
from typing import Optional, Sequence

from abadvisor.services.stats.special import (
    LogFactorialTable,
    chi_square_cdf,
    log_choose,
    normal_cdf,
)

SMALL_EXPECTED_COUNT = 5
SMALL_SAMPLE_SIZE = 30

# Absorbs rounding noise when comparing a table's log-probability to the observed one
FISHER_LOG_TOLERANCE = 1e-12


@dataclass(frozen=True)
class ZTestResult:
    z: float
    p_value: float


@dataclass(frozen=True)
class ChiSquareResult:
    chi2: float
    df: int
    p_value: float


def _clamp01(x: float) -> float:
    return min(max(x, 0.0), 1.0)


def _rate(x: int, n: int) -> float:
    if n <= 0:
        return 0.0
    return x / n


def pooled_proportion(x1: int, n1: int, x2: int, n2: int) -> float:
    total = n1 + n2
    if total == 0:
        return 0.0
    return (x1 + x2) / total


def small_counts_flag(x1: int, n1: int, x2: int, n2: int) -> bool:
    p = pooled_proportion(x1, n1, x2, n2)

    expected = (n1 * p, n1 * (1 - p), n2 * p, n2 * (1 - p))
    if any(e < SMALL_EXPECTED_COUNT for e in expected):
        return True

    return n1 < SMALL_SAMPLE_SIZE or n2 < SMALL_SAMPLE_SIZE


def two_prop_z_test(x1: int, n1: int, x2: int, n2: int) -> ZTestResult:
    if n1 == 0 or n2 == 0:
        return ZTestResult(z=0.0, p_value=1.0)

    p1 = _rate(x1, n1)
    p2 = _rate(x2, n2)
    p = pooled_proportion(x1, n1, x2, n2)

    se = math.sqrt(p * (1 - p) * (1 / n1 + 1 / n2))
    if se == 0:
        # Pooled rate of exactly 0 or 1: nothing to distinguish
        return ZTestResult(z=0.0, p_value=1.0)

    z = (p2 - p1) / se
    p_value = 2 * (1 - normal_cdf(abs(z)))

    return ZTestResult(z=z, p_value=_clamp01(p_value))


def hypergeometric_log_pmf(
    a: int, row1: int, col1: int, total: int, table: Optional[LogFactorialTable] = None
) -> float:
    return (
        log_choose(col1, a, table)
        + log_choose(total - col1, row1 - a, table)
        - log_choose(total, row1, table)
    )


def fishers_exact_two_sided(
    x1: int, n1: int, x2: int, n2: int, table: Optional[LogFactorialTable] = None
) -> float:
    # 2x2 table [[x1, n1 - x1], [x2, n2 - x2]] with fixed margins
    row1 = n1
    row2 = n2
    col1 = x1 + x2
    total = row1 + row2

    min_a = max(0, col1 - row2)
    max_a = min(col1, row1)

    observed = hypergeometric_log_pmf(x1, row1, col1, total, table)

    p_sum = 0.0
    for a in range(min_a, max_a + 1):
        log_p = hypergeometric_log_pmf(a, row1, col1, total, table)
        if log_p <= observed + FISHER_LOG_TOLERANCE:
            p_sum += math.exp(log_p)

    return _clamp01(p_sum)


def chi_square_2xk(xs: Sequence[int], ns: Sequence[int]) -> ChiSquareResult:
    k = len(xs)
    df = k - 1

    successes = sum(xs)
    total = sum(ns)
    if total == 0 or df < 1:
        return ChiSquareResult(chi2=0.0, df=df, p_value=1.0)

    pooled = successes / total

    chi2 = 0.0
    for x, n in zip(xs, ns):
        expected_success = n * pooled
        expected_failure = n * (1 - pooled)

        # Cells with zero expectation contribute nothing
        if expected_success > 0:
            chi2 += (x - expected_success) ** 2 / expected_success
        if expected_failure > 0:
            chi2 += ((n - x) - expected_failure) ** 2 / expected_failure

    p_value = 1 - chi_square_cdf(chi2, df)

    return ChiSquareResult(chi2=chi2, df=df, p_value=_clamp01(p_value))
