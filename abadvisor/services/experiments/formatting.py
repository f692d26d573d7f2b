import math
from typing import Optional

MISSING = "n/a"


def _missing(x: Optional[float]) -> bool:
    return x is None or not math.isfinite(x)


def _smart_decimals(pct: float) -> int:
    return 2 if abs(pct) < 10 else 1


def _sign(x: float) -> str:
    return "+" if x > 0 else ""


def format_rate(x: Optional[float]) -> str:
    if _missing(x):
        return MISSING
    return f"{x * 100:.2f}"


def format_pct(x: Optional[float]) -> str:
    if _missing(x):
        return MISSING
    return f"{x * 100:.2f}%"


def format_pct_smart(x: Optional[float]) -> str:
    if _missing(x):
        return MISSING
    pct = x * 100
    return f"{pct:.{_smart_decimals(pct)}f}%"


def format_p(p: Optional[float]) -> str:
    if _missing(p):
        return MISSING
    if p < 0.0001:
        return "< 0.0001"
    return f"{p:.4f}"


def format_lift_signed(rel: Optional[float]) -> str:
    if _missing(rel):
        return MISSING
    pct = rel * 100
    return f"{_sign(pct)}{pct:.{_smart_decimals(pct)}f}%"


def format_pp(delta: Optional[float]) -> str:
    # Percentage points
    if _missing(delta):
        return MISSING
    pp = delta * 100
    return f"{_sign(pp)}{pp:.{_smart_decimals(pp)}f} pp"


def format_counts(successes: int, traffic: int) -> str:
    return f"{successes}/{traffic}"
