from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

import structlog

from abadvisor.services.experiments.summary import classify_outcome
from abadvisor.services.stats.hypothesis import (
    chi_square_2xk,
    fishers_exact_two_sided,
    small_counts_flag,
    two_prop_z_test,
)
from abadvisor.services.stats.intervals import Interval, diff_ci_normal, wilson_ci

logger = structlog.get_logger("decision")

# No multiple-comparison or continuity correction is applied
ALPHA = 0.05
TIE_TOLERANCE = 1e-4

CHI_SQUARE_NOTE = "Global difference detected; no pairwise post-hoc tests are run."


class Metric(str, Enum):
    CTR = "ctr"
    CONVERSION = "conversion"

    @property
    def noun(self) -> str:
        return "CTR" if self is Metric.CTR else "conversion rate"


class TestKind(str, Enum):
    Z_TEST = "z_test"
    FISHER_EXACT = "fisher_exact"
    CHI_SQUARE = "chi_square"

    __test__ = False  # not a pytest test class

    @property
    def display_name(self) -> str:
        return _TEST_NAMES[self][0]

    @property
    def rationale(self) -> str:
        return _TEST_NAMES[self][1]


_TEST_NAMES = {
    TestKind.Z_TEST: (
        "Two-proportion z-test",
        "Two-proportion z-test - we're comparing success rates between two independent variants.",
    ),
    TestKind.FISHER_EXACT: (
        "Fisher's exact test",
        "Fisher's exact test - safer with small sample sizes.",
    ),
    TestKind.CHI_SQUARE: (
        "Chi-square test",
        "Chi-square test - we're checking if success rates differ across multiple variants.",
    ),
}


@dataclass(frozen=True)
class Variant:
    name: str
    traffic: int
    successes: int

    @property
    def rate(self) -> float:
        if self.traffic == 0:
            return 0.0
        return self.successes / self.traffic


@dataclass(frozen=True)
class DecisionInput:
    metric: Metric
    variants: Sequence[Variant]


@dataclass(frozen=True)
class VariantResult:
    name: str
    rate: float
    traffic: int
    successes: int
    ci_low: float
    ci_high: float
    lift_abs: float
    lift_rel: Optional[float]  # None when the control rate is 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "rate": self.rate,
            "traffic": self.traffic,
            "successes": self.successes,
            "ciLow": self.ci_low,
            "ciHigh": self.ci_high,
            "liftAbs": self.lift_abs,
            "liftRel": self.lift_rel,
        }


@dataclass(frozen=True)
class PairwiseDiff:
    ci_low: float
    ci_high: float


@dataclass(frozen=True)
class Summary:
    kind: str
    text: str


@dataclass(frozen=True)
class DecisionResult:
    test_kind: TestKind
    test_name: str
    test_why: str
    p_value: float
    significant: bool
    winner: Optional[str]
    leader: Optional[str]
    variants: Tuple[VariantResult, ...]
    summary: Summary
    note: Optional[str] = None
    statistic: Optional[float] = None
    df: Optional[int] = None
    two_variant: Optional[PairwiseDiff] = None

    def variant(self, name: Optional[str]) -> Optional[VariantResult]:
        if name is None:
            return None
        return next((v for v in self.variants if v.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "testKind": self.test_kind.value,
            "testName": self.test_name,
            "testWhy": self.test_why,
            "pValue": self.p_value,
            "significant": self.significant,
            "winner": self.winner,
            "leader": self.leader,
            "note": self.note,
            "statistic": self.statistic,
            "df": self.df,
            "variants": [v.to_dict() for v in self.variants],
            "twoVariant": None,
            "summary": {"kind": self.summary.kind, "text": self.summary.text},
        }
        if self.two_variant is not None:
            data["twoVariant"] = {
                "diff": {"ciLow": self.two_variant.ci_low, "ciHigh": self.two_variant.ci_high}
            }
        return data


def _normalize(variant: Variant) -> Variant:
    return Variant(
        name=variant.name.strip() or "?",
        traffic=variant.traffic,
        successes=variant.successes,
    )


def _enrich(variant: Variant, control: Variant) -> VariantResult:
    ci = wilson_ci(variant.successes, variant.traffic)
    lift_rel = variant.rate / control.rate - 1 if control.rate > 0 else None

    return VariantResult(
        name=variant.name,
        rate=variant.rate,
        traffic=variant.traffic,
        successes=variant.successes,
        ci_low=ci.low,
        ci_high=ci.high,
        lift_abs=variant.rate - control.rate,
        lift_rel=lift_rel,
    )


def _higher_of_two(a: Variant, b: Variant) -> Optional[int]:
    if b.rate > a.rate:
        return 1
    if a.rate > b.rate:
        return 0
    return None


def decide(data: DecisionInput) -> DecisionResult:
    if len(data.variants) < 2:
        raise ValueError(f"At least two variants are required, got {len(data.variants)}")

    variants = [_normalize(v) for v in data.variants]
    control = variants[0]

    # Stable descending order: equal rates keep input order
    ranked = sorted(range(len(variants)), key=lambda i: variants[i].rate, reverse=True)
    has_tie = abs(variants[ranked[0]].rate - variants[ranked[1]].rate) < TIE_TOLERANCE

    results = tuple(_enrich(v, control) for v in variants)

    statistic: Optional[float] = None
    df: Optional[int] = None
    note: Optional[str] = None
    two_variant: Optional[PairwiseDiff] = None

    if len(variants) == 2:
        a, b = variants

        if small_counts_flag(a.successes, a.traffic, b.successes, b.traffic):
            kind = TestKind.FISHER_EXACT
            p_value = fishers_exact_two_sided(a.successes, a.traffic, b.successes, b.traffic)
        else:
            kind = TestKind.Z_TEST
            z_result = two_prop_z_test(a.successes, a.traffic, b.successes, b.traffic)
            p_value = z_result.p_value
            statistic = z_result.z

        significant = p_value < ALPHA

        higher = _higher_of_two(a, b)
        winner_idx = higher if significant else None
        if significant:
            leader_idx = winner_idx
        elif has_tie:
            leader_idx = None
        else:
            leader_idx = 1 if b.rate > a.rate else 0

        if a.traffic > 0 and b.traffic > 0:
            diff = diff_ci_normal(a.rate, a.traffic, b.rate, b.traffic)
        else:
            diff = Interval(0.0, 0.0)
        two_variant = PairwiseDiff(ci_low=diff.low, ci_high=diff.high)
    else:
        kind = TestKind.CHI_SQUARE
        chi_result = chi_square_2xk(
            [v.successes for v in variants], [v.traffic for v in variants]
        )
        p_value = chi_result.p_value
        statistic = chi_result.chi2
        df = chi_result.df

        significant = p_value < ALPHA

        top = ranked[0]
        winner_idx = top if significant and not has_tie else None
        if significant:
            leader_idx = winner_idx
        else:
            leader_idx = None if has_tie else top

        if significant:
            note = CHI_SQUARE_NOTE

    winner = results[winner_idx] if winner_idx is not None else None
    leader = results[leader_idx] if leader_idx is not None else None

    outcome = classify_outcome(
        significant=significant,
        p_value=p_value,
        winner=winner,
        leader=leader,
        multi=len(variants) > 2,
    )

    logger.info(
        "decision_computed",
        test_kind=kind.value,
        p_value=p_value,
        significant=significant,
        variant_count=len(variants),
        outcome=outcome.kind,
    )

    return DecisionResult(
        test_kind=kind,
        test_name=kind.display_name,
        test_why=kind.rationale,
        p_value=p_value,
        significant=significant,
        winner=winner.name if winner else None,
        leader=leader.name if leader else None,
        variants=results,
        summary=Summary(kind=outcome.kind, text=outcome.render()),
        note=note,
        statistic=statistic,
        df=df,
        two_variant=two_variant,
    )

