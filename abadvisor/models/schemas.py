from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from abadvisor.config import get_settings
from abadvisor.services.experiments.decision import DecisionInput, DecisionResult, Metric, Variant
from abadvisor.services.experiments.qa import QAReport


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---


class VariantInput(BaseModel):
    name: str = Field(..., description="Variant label; the first variant is the control")
    traffic: int = Field(..., ge=0, description="Total exposed units")
    successes: int = Field(..., ge=0, description="Units that converted / clicked")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Variant name must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def check_counts(self) -> "VariantInput":
        max_count = get_settings().MAX_COUNT
        if self.traffic > max_count or self.successes > max_count:
            raise ValueError(f"Counts must not exceed {max_count:,}")
        if self.successes > self.traffic:
            raise ValueError(
                f"Successes ({self.successes}) cannot exceed traffic ({self.traffic}) "
                f"for variant '{self.name}'"
            )
        return self


class DecisionRequest(BaseModel):
    metric: Metric = Field(Metric.CONVERSION, description="Metric label: ctr or conversion")
    variants: List[VariantInput] = Field(..., min_length=2, description="Control first")

    @field_validator("variants")
    @classmethod
    def check_variant_count(cls, v: List[VariantInput]) -> List[VariantInput]:
        max_variants = get_settings().MAX_VARIANTS
        if len(v) > max_variants:
            raise ValueError(f"At most {max_variants} variants are supported, got {len(v)}")
        return v

    def to_input(self) -> DecisionInput:
        return DecisionInput(
            metric=self.metric,
            variants=tuple(Variant(v.name, v.traffic, v.successes) for v in self.variants),
        )


# --- Responses ---


class VariantResultSchema(CamelModel):
    name: str
    rate: float
    traffic: int
    successes: int
    ci_low: float
    ci_high: float
    lift_abs: float
    lift_rel: Optional[float] = None


class DiffInterval(CamelModel):
    ci_low: float
    ci_high: float


class TwoVariantSchema(CamelModel):
    diff: DiffInterval


class SummarySchema(CamelModel):
    kind: str
    text: str


class DecisionResponse(CamelModel):
    test_kind: str
    test_name: str
    test_why: str
    p_value: float
    significant: bool
    winner: Optional[str] = None
    leader: Optional[str] = None
    note: Optional[str] = None
    statistic: Optional[float] = None
    df: Optional[int] = None
    variants: List[VariantResultSchema]
    two_variant: Optional[TwoVariantSchema] = None
    summary: SummarySchema

    @classmethod
    def from_result(cls, result: DecisionResult) -> "DecisionResponse":
        two_variant = None
        if result.two_variant is not None:
            two_variant = TwoVariantSchema(
                diff=DiffInterval(
                    ci_low=result.two_variant.ci_low, ci_high=result.two_variant.ci_high
                )
            )

        return cls(
            test_kind=result.test_kind.value,
            test_name=result.test_name,
            test_why=result.test_why,
            p_value=result.p_value,
            significant=result.significant,
            winner=result.winner,
            leader=result.leader,
            note=result.note,
            statistic=result.statistic,
            df=result.df,
            variants=[
                VariantResultSchema(
                    name=v.name,
                    rate=v.rate,
                    traffic=v.traffic,
                    successes=v.successes,
                    ci_low=v.ci_low,
                    ci_high=v.ci_high,
                    lift_abs=v.lift_abs,
                    lift_rel=v.lift_rel,
                )
                for v in result.variants
            ],
            two_variant=two_variant,
            summary=SummarySchema(kind=result.summary.kind, text=result.summary.text),
        )


class QACheckSchema(CamelModel):
    name: str
    passed: bool


class QACaseSchema(CamelModel):
    case_name: str
    passed: bool
    expected_behavior: str
    checks: List[QACheckSchema] = []
    test_name: Optional[str] = None
    p_value: Optional[float] = None
    error: Optional[str] = None


class QAReportResponse(CamelModel):
    passed: int
    failed: int
    results: List[QACaseSchema]

    @classmethod
    def from_report(cls, report: QAReport) -> "QAReportResponse":
        return cls(
            passed=report.passed,
            failed=report.failed,
            results=[
                QACaseSchema(
                    case_name=r.case_name,
                    passed=r.passed,
                    expected_behavior=r.expected_behavior,
                    checks=[QACheckSchema(name=c.name, passed=c.passed) for c in r.checks],
                    test_name=r.result.test_name if r.result else None,
                    p_value=r.result.p_value if r.result else None,
                    error=r.error,
                )
                for r in report.results
            ],
        )


class TemplateInfo(BaseModel):
    type: str
    name: str
    description: str
    sections: List[str]


class ReportResponse(CamelModel):
    report_id: str
    template_type: str
    output_format: str
    title: str
    generated_at: datetime
    content: str
    decision: DecisionResponse
