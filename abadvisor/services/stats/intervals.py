import math
from dataclasses import dataclass

DEFAULT_Z = 1.96  # 95% two-sided


@dataclass(frozen=True)
class Interval:
    low: float
    high: float

    @property
    def width(self) -> float:
        return self.high - self.low


def _clamp01(x: float) -> float:
    return min(max(x, 0.0), 1.0)


def wilson_ci(x: int, n: int, z: float = DEFAULT_Z) -> Interval:
    # n == 0 is not a real interval; callers read [0, 0] as "unknown"
    if n == 0:
        return Interval(0.0, 0.0)

    p = x / n
    c = z * z / n
    center = (p + c / 2) / (1 + c)
    half = z * math.sqrt(p * (1 - p) / n + z * z / (4 * n * n)) / (1 + c)

    # The bounds are exactly 0 and 1 at the edges; pin them so rounding cannot
    # push them past the observed rate
    low = 0.0 if x == 0 else _clamp01(center - half)
    high = 1.0 if x == n else _clamp01(center + half)

    return Interval(low, high)


def diff_ci_normal(p1: float, n1: int, p2: float, n2: int, z: float = DEFAULT_Z) -> Interval:
    """Normal-approximation interval for ``p2 - p1`` using the unpooled standard error."""
    if n1 <= 0 or n2 <= 0:
        raise ValueError(f"Sample sizes must be positive, got n1={n1}, n2={n2}")

    se = math.sqrt(p1 * (1 - p1) / n1 + p2 * (1 - p2) / n2)
    diff = p2 - p1
    margin = z * se

    return Interval(diff - margin, diff + margin)
