"""
Statistical building blocks for the decision engine.

- special: erf, normal CDF, log-gamma, log-factorial cache, incomplete gamma
- intervals: Wilson score interval, normal-approximation difference interval
- hypothesis: z-test, Fisher's exact test, 2xk chi-square, small-count heuristic
"""

from abadvisor.services.stats.hypothesis import (
    ChiSquareResult,
    ZTestResult,
    chi_square_2xk,
    fishers_exact_two_sided,
    small_counts_flag,
    two_prop_z_test,
)
from abadvisor.services.stats.intervals import Interval, diff_ci_normal, wilson_ci
from abadvisor.services.stats.special import (
    LogFactorialTable,
    chi_square_cdf,
    erf,
    log_choose,
    log_factorial,
    log_gamma,
    normal_cdf,
    regularized_lower_incomplete_gamma,
)

__all__ = [
    "erf",
    "normal_cdf",
    "log_gamma",
    "log_factorial",
    "log_choose",
    "LogFactorialTable",
    "regularized_lower_incomplete_gamma",
    "chi_square_cdf",
    "Interval",
    "wilson_ci",
    "diff_ci_normal",
    "ZTestResult",
    "ChiSquareResult",
    "small_counts_flag",
    "two_prop_z_test",
    "fishers_exact_two_sided",
    "chi_square_2xk",
]
