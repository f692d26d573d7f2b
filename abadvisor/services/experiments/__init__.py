"""
Decision engine for A/B/n experiments.

This module provides:
- Test selection (z-test, Fisher's exact, chi-square) and significance
- Winner / leader / tie resolution with per-variant lift and Wilson intervals
- Deterministic one-sentence summaries
- Built-in QA scenarios for sanity checking the engine
"""

from abadvisor.services.experiments.decision import (
    ALPHA,
    DecisionInput,
    DecisionResult,
    Metric,
    PairwiseDiff,
    Summary,
    TestKind,
    Variant,
    VariantResult,
    decide,
)
from abadvisor.services.experiments.qa import QA_CASES, QAReport, run_qa_checks

__all__ = [
    "ALPHA",
    "Metric",
    "TestKind",
    "Variant",
    "DecisionInput",
    "VariantResult",
    "PairwiseDiff",
    "Summary",
    "DecisionResult",
    "decide",
    "QA_CASES",
    "QAReport",
    "run_qa_checks",
]
