from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import structlog

from abadvisor.services.experiments.decision import (
    DecisionInput,
    DecisionResult,
    Metric,
    Variant,
    decide,
)

logger = structlog.get_logger("qa")


@dataclass(frozen=True)
class QACase:
    name: str
    input: DecisionInput
    expected_behavior: str


@dataclass(frozen=True)
class QACheck:
    name: str
    passed: bool


@dataclass
class QACaseResult:
    case_name: str
    passed: bool
    expected_behavior: str
    checks: List[QACheck] = field(default_factory=list)
    result: Optional[DecisionResult] = None
    error: Optional[str] = None


@dataclass
class QAReport:
    passed: int
    failed: int
    results: List[QACaseResult]

    @property
    def ok(self) -> bool:
        return self.failed == 0


def _case(name: str, metric: Metric, variants: Sequence[tuple], expected: str) -> QACase:
    return QACase(
        name=name,
        input=DecisionInput(
            metric=metric,
            variants=tuple(Variant(n, traffic, successes) for n, traffic, successes in variants),
        ),
        expected_behavior=expected,
    )


QA_CASES: List[QACase] = [
    _case(
        "Very small counts - should use Fisher's exact",
        Metric.CTR,
        [("A", 10, 1), ("B", 12, 3)],
        "Should use Fisher's exact test due to small sample sizes",
    ),
    _case(
        "Zero traffic variant",
        Metric.CONVERSION,
        [("A", 100, 5), ("B", 0, 0)],
        "Should handle zero traffic gracefully",
    ),
    _case(
        "100% conversion rate",
        Metric.CONVERSION,
        [("A", 50, 25), ("B", 50, 50)],
        "Should handle 100% conversion rate",
    ),
    _case(
        "Exact tie scenario",
        Metric.CTR,
        [("A", 1000, 50), ("B", 1000, 50)],
        "Should detect tie and show appropriate messaging",
    ),
    _case(
        "Multi-variant A/B/C test",
        Metric.CTR,
        [("A", 1000, 50), ("B", 1100, 66), ("C", 1200, 84)],
        "Should use Chi-square test for 3+ variants",
    ),
    _case(
        "Large sample sizes",
        Metric.CONVERSION,
        [("A", 100000, 5000), ("B", 100000, 5500)],
        "Should use z-test with large samples",
    ),
]


def sanity_checks(case: QACase, result: DecisionResult) -> List[QACheck]:
    return [
        QACheck("p-value is valid", 0 <= result.p_value <= 1),
        QACheck("has test name", bool(result.test_name)),
        QACheck("variants data complete", len(result.variants) == len(case.input.variants)),
        QACheck(
            "confidence intervals valid",
            all(v.ci_low <= v.rate <= v.ci_high for v in result.variants),
        ),
    ]


def run_qa_checks(cases: Sequence[QACase] = QA_CASES) -> QAReport:
    results: List[QACaseResult] = []
    passed = 0
    failed = 0

    for case in cases:
        try:
            result = decide(case.input)
        except Exception as e:
            # A crashing case is a failed case; keep going with the rest
            logger.warning("qa_case_errored", case=case.name, error=str(e))
            failed += 1
            results.append(
                QACaseResult(
                    case_name=case.name,
                    passed=False,
                    expected_behavior=case.expected_behavior,
                    error=str(e) or type(e).__name__,
                )
            )
            continue

        checks = sanity_checks(case, result)
        all_passed = all(c.passed for c in checks)
        if all_passed:
            passed += 1
        else:
            failed += 1

        results.append(
            QACaseResult(
                case_name=case.name,
                passed=all_passed,
                expected_behavior=case.expected_behavior,
                checks=checks,
                result=result,
            )
        )

    logger.info("qa_completed", passed=passed, failed=failed)
    return QAReport(passed=passed, failed=failed, results=results)
