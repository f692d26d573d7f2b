import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

import structlog
from pydantic import BaseModel

from abadvisor.services.experiments.decision import ALPHA, DecisionResult, Metric
from abadvisor.services.experiments.formatting import format_counts, format_p, format_pct_smart
from abadvisor.services.reports.templates import ReportSection, ReportTemplate, get_template

logger = structlog.get_logger("reports")

OUTPUT_FORMATS = ("markdown", "text")
FOOTER_TEXT = "Generated by A/B Test Advisor"


class GeneratedReport(BaseModel):
    report_id: str
    template_type: str
    output_format: str
    title: str
    content: str
    generated_at: datetime


class ReportGenerator:
    def __init__(self):
        self._renderers: Dict[ReportSection, Callable[..., List[str]]] = {
            ReportSection.HEADLINE: self._headline,
            ReportSection.TEST_DETAILS: self._test_details,
            ReportSection.VARIANT_TABLE: self._variant_table,
            ReportSection.RECOMMENDATION: self._recommendation,
            ReportSection.FOOTER: self._footer,
        }

    def generate(
        self,
        result: DecisionResult,
        metric: Metric,
        template_type: str = "full",
        output_format: str = "markdown",
        generated_at: Optional[datetime] = None,
    ) -> GeneratedReport:
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unknown output format: {output_format}. Available: {list(OUTPUT_FORMATS)}"
            )

        template = get_template(template_type)
        generated_at = generated_at or datetime.now(timezone.utc)

        blocks = [self._title(template, generated_at, output_format)]
        for section in template.sections:
            renderer = self._renderers[section]
            blocks.append(
                "\n".join(
                    renderer(result=result, metric=metric, fmt=output_format, when=generated_at)
                )
            )

        report = GeneratedReport(
            report_id=str(uuid.uuid4()),
            template_type=template.template_type,
            output_format=output_format,
            title=template.display_name,
            content="\n\n".join(blocks) + "\n",
            generated_at=generated_at,
        )

        logger.info(
            "report_generated",
            report_id=report.report_id,
            template_type=template.template_type,
            output_format=output_format,
        )
        return report

    # --- layout helpers ---

    @staticmethod
    def _heading(title: str, fmt: str, level: int = 2) -> List[str]:
        if fmt == "markdown":
            return [f"{'#' * level} {title}", ""]
        underline = "=" if level == 1 else "-"
        return [title, underline * len(title)]

    @staticmethod
    def _table(headers: Sequence[str], rows: Sequence[Sequence[str]], fmt: str) -> List[str]:
        if fmt == "markdown":
            lines = ["| " + " | ".join(headers) + " |"]
            lines.append("|" + "|".join("---" for _ in headers) + "|")
            lines.extend("| " + " | ".join(row) + " |" for row in rows)
            return lines

        widths = [
            max(len(str(cell)) for cell in column) for column in zip(headers, *rows)
        ]
        lines = ["  ".join(h.ljust(w) for h, w in zip(headers, widths)).rstrip()]
        lines.extend("  ".join(c.ljust(w) for c, w in zip(row, widths)).rstrip() for row in rows)
        return lines

    def _title(self, template: ReportTemplate, when: datetime, fmt: str) -> str:
        lines = self._heading(template.display_name, fmt, level=1)
        lines.append(when.strftime("%B %d, %Y"))
        return "\n".join(lines)

    # --- sections ---

    @staticmethod
    def _top_name(result: DecisionResult) -> Optional[str]:
        return result.winner if result.winner is not None else result.leader

    def _headline(self, result: DecisionResult, metric: Metric, fmt: str, **_) -> List[str]:
        top_name = self._top_name(result)

        if top_name is None:
            headline = "Equal Performance Detected"
        elif result.significant:
            headline = f"Variant {top_name} is the Winner"
        else:
            headline = f"Variant {top_name} is Leading"

        lines = self._heading(headline, fmt)

        top = result.variant(top_name)
        if top is not None:
            control = result.variants[0]
            lines.append(
                f"{format_pct_smart(top.rate)} {metric.noun}, "
                f"vs {format_pct_smart(control.rate)} for Control"
            )
            lines.append("")

        lines.append(result.summary.text)
        return lines

    def _test_details(self, result: DecisionResult, fmt: str, **_) -> List[str]:
        bullet = "- " if fmt == "markdown" else "  "
        outcome = (
            "Statistically Significant" if result.significant else "Not Statistically Significant"
        )

        lines = self._heading("Test Details", fmt)
        lines.append(f"{bullet}Statistical Test: {result.test_name}")
        lines.append(f"{bullet}Why: {result.test_why}")
        lines.append(f"{bullet}P-Value: {format_p(result.p_value)}")
        lines.append(f"{bullet}Significance Level: alpha = {ALPHA}")
        lines.append(f"{bullet}Result: {outcome}")
        if result.note:
            lines.append(f"{bullet}Note: {result.note}")
        return lines

    def _variant_table(self, result: DecisionResult, fmt: str, **_) -> List[str]:
        top_name = self._top_name(result)

        rows = []
        for variant in sorted(result.variants, key=lambda v: v.name.casefold()):
            name = variant.name
            if name == top_name:
                name = f"**{name}**" if fmt == "markdown" else f"{name} *"
            rows.append(
                [
                    name,
                    format_pct_smart(variant.rate),
                    format_counts(variant.successes, variant.traffic),
                    f"{format_pct_smart(variant.ci_low)} - {format_pct_smart(variant.ci_high)}",
                ]
            )

        lines = self._heading("Variant Performance", fmt)
        lines.extend(
            self._table(["Variant", "Performance", "Count", "Confidence Interval"], rows, fmt)
        )
        return lines

    def _recommendation(self, result: DecisionResult, fmt: str, **_) -> List[str]:
        top_name = self._top_name(result)
        p = format_p(result.p_value)

        if top_name is None:
            text = (
                "Variants are performing equally. Consider running the test longer "
                "or try different variants."
            )
        elif result.significant:
            text = (
                f"Implement Variant {top_name}. The results are statistically "
                f"significant with p = {p}."
            )
        else:
            text = (
                f"Continue testing. While Variant {top_name} is leading, more data is "
                f"needed for statistical significance (p = {p})."
            )

        lines = self._heading("Recommendations", fmt)
        lines.append(text)
        return lines

    def _footer(self, fmt: str, when: datetime, **_) -> List[str]:
        text = f"{FOOTER_TEXT} on {when.strftime('%Y-%m-%d')}"
        if fmt == "markdown":
            return ["---", f"_{text}_"]
        return [text]


_generator: Optional[ReportGenerator] = None


def get_report_generator() -> ReportGenerator:
    global _generator
    if _generator is None:
        _generator = ReportGenerator()
    return _generator
