from datetime import datetime, timezone

import pytest
from structlog.testing import capture_logs

from abadvisor.services.experiments.decision import DecisionInput, Metric, Variant, decide
from abadvisor.services.reports.generator import (
    FOOTER_TEXT,
    ReportGenerator,
    get_report_generator,
)

WHEN = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _decide(*variants, metric=Metric.CONVERSION):
    return decide(DecisionInput(metric=metric, variants=tuple(Variant(*v) for v in variants)))


@pytest.fixture
def generator():
    return ReportGenerator()


@pytest.fixture
def winner_result():
    return _decide(("A", 100000, 5000), ("B", 100000, 5500))


class TestFullMarkdownReport:
    def test_structure(self, generator, winner_result):
        report = generator.generate(winner_result, Metric.CONVERSION, generated_at=WHEN)
        content = report.content

        assert report.template_type == "full"
        assert report.output_format == "markdown"
        assert report.title == "A/B Test Results Summary"
        assert report.generated_at == WHEN
        assert content.startswith("# A/B Test Results Summary\n\nOctober 19, 2026\n")
        assert "## Variant B is the Winner" in content
        assert "5.50% conversion rate, vs 5.00% for Control" in content
        assert winner_result.summary.text in content
        assert content.endswith("---\n_Generated by A/B Test Advisor on 2026-10-19_\n")

    def test_test_details(self, generator, winner_result):
        content = generator.generate(winner_result, Metric.CONVERSION, generated_at=WHEN).content

        assert "## Test Details" in content
        assert "- Statistical Test: Two-proportion z-test" in content
        assert "- P-Value: < 0.0001" in content
        assert "- Significance Level: alpha = 0.05" in content
        assert "- Result: Statistically Significant" in content
        assert "- Note:" not in content

    def test_variant_table(self, generator, winner_result):
        content = generator.generate(winner_result, Metric.CONVERSION, generated_at=WHEN).content

        assert "| Variant | Performance | Count | Confidence Interval |" in content
        assert "|---|---|---|---|" in content
        assert "| A | 5.00% | 5000/100000 |" in content
        assert "| **B** | 5.50% | 5500/100000 |" in content

    def test_recommendation_for_winner(self, generator, winner_result):
        content = generator.generate(winner_result, Metric.CONVERSION, generated_at=WHEN).content

        assert "## Recommendations" in content
        assert (
            "Implement Variant B. The results are statistically significant with p = < 0.0001."
            in content
        )

    def test_ctr_metric_noun(self, generator):
        result = _decide(("A", 10, 1), ("B", 12, 3), metric=Metric.CTR)
        content = generator.generate(result, Metric.CTR, generated_at=WHEN).content

        assert "## Variant B is Leading" in content
        assert "25.0% CTR, vs 10.0% for Control" in content
        assert "Continue testing. While Variant B is leading" in content
        assert "- Statistical Test: Fisher's exact test" in content

    def test_tie(self, generator):
        result = _decide(("A", 1000, 50), ("B", 1000, 50))
        content = generator.generate(result, Metric.CONVERSION, generated_at=WHEN).content

        assert "## Equal Performance Detected" in content
        assert "for Control" not in content
        assert "Variants are performing equally." in content
        assert "**" not in content

    def test_multi_variant_note(self, generator):
        result = _decide(("A", 1000, 100), ("B", 1000, 150), ("C", 1000, 200))
        content = generator.generate(result, Metric.CONVERSION, generated_at=WHEN).content

        assert "- Statistical Test: Chi-square test" in content
        assert f"- Note: {result.note}" in content
        assert "| **C** |" in content

    def test_variant_rows_sorted_by_name(self, generator):
        result = _decide(("control", 1000, 50), ("Beta", 1000, 55), ("alpha", 1000, 60))
        content = generator.generate(result, Metric.CONVERSION, generated_at=WHEN).content

        rows = [line for line in content.splitlines() if line.startswith("| ") and "/" in line]
        names = [row.split("|")[1].strip().strip("*") for row in rows]
        assert names == ["alpha", "Beta", "control"]


class TestTextReport:
    def test_plain_headings(self, generator, winner_result):
        report = generator.generate(
            winner_result, Metric.CONVERSION, output_format="text", generated_at=WHEN
        )
        content = report.content

        assert content.startswith("A/B Test Results Summary\n========================\n")
        assert "Variant B is the Winner\n-----------------------" in content
        assert "#" not in content
        assert "|" not in content
        assert "  Statistical Test: Two-proportion z-test" in content

    def test_top_variant_marked(self, generator, winner_result):
        content = generator.generate(
            winner_result, Metric.CONVERSION, output_format="text", generated_at=WHEN
        ).content

        lines = content.splitlines()
        assert any(line.startswith("B *") for line in lines)
        assert any(line.startswith("A ") and "5000/100000" in line for line in lines)
        assert content.endswith(f"{FOOTER_TEXT} on 2026-10-19\n")


class TestBriefReport:
    def test_sections(self, generator, winner_result):
        report = generator.generate(
            winner_result, Metric.CONVERSION, template_type="brief", generated_at=WHEN
        )

        assert report.title == "A/B Test Brief"
        assert "## Variant B is the Winner" in report.content
        assert "## Recommendations" in report.content
        assert "Test Details" not in report.content
        assert "Variant Performance" not in report.content
        assert FOOTER_TEXT not in report.content


class TestGeneratorErrors:
    def test_unknown_template(self, generator, winner_result):
        with pytest.raises(ValueError, match="Unknown template type"):
            generator.generate(winner_result, Metric.CONVERSION, template_type="nonexistent")

    def test_unknown_format(self, generator, winner_result):
        with pytest.raises(ValueError, match="Unknown output format"):
            generator.generate(winner_result, Metric.CONVERSION, output_format="pdf")


class TestGeneratorMisc:
    def test_unique_ids(self, generator, winner_result):
        first = generator.generate(winner_result, Metric.CONVERSION)
        second = generator.generate(winner_result, Metric.CONVERSION)
        assert first.report_id != second.report_id

    def test_default_timestamp_is_utc(self, generator, winner_result):
        report = generator.generate(winner_result, Metric.CONVERSION)
        assert report.generated_at.tzinfo is not None

    def test_logs_generation(self, generator, winner_result):
        with capture_logs() as logs:
            report = generator.generate(winner_result, Metric.CONVERSION)

        events = [log for log in logs if log["event"] == "report_generated"]
        assert events[0]["report_id"] == report.report_id

    def test_shared_instance(self):
        assert get_report_generator() is get_report_generator()
