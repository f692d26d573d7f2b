from enum import Enum
from typing import Dict, List

from pydantic import BaseModel


class ReportSection(str, Enum):
    HEADLINE = "headline"
    TEST_DETAILS = "test_details"
    VARIANT_TABLE = "variant_table"
    RECOMMENDATION = "recommendation"
    FOOTER = "footer"


class ReportTemplate(BaseModel):
    template_type: str
    display_name: str
    description: str
    sections: List[ReportSection]


FULL_TEMPLATE = ReportTemplate(
    template_type="full",
    display_name="A/B Test Results Summary",
    description="Headline result, test details, per-variant performance and a recommendation",
    sections=[
        ReportSection.HEADLINE,
        ReportSection.TEST_DETAILS,
        ReportSection.VARIANT_TABLE,
        ReportSection.RECOMMENDATION,
        ReportSection.FOOTER,
    ],
)


BRIEF_TEMPLATE = ReportTemplate(
    template_type="brief",
    display_name="A/B Test Brief",
    description="Headline result and recommendation only, for status updates",
    sections=[
        ReportSection.HEADLINE,
        ReportSection.RECOMMENDATION,
    ],
)


TEMPLATES: Dict[str, ReportTemplate] = {
    "full": FULL_TEMPLATE,
    "brief": BRIEF_TEMPLATE,
}


def get_template(template_type: str) -> ReportTemplate:
    if template_type not in TEMPLATES:
        raise ValueError(
            f"Unknown template type: {template_type}. Available: {list(TEMPLATES.keys())}"
        )
    return TEMPLATES[template_type]


def list_templates() -> List[Dict[str, str]]:
    return [
        {
            "type": template.template_type,
            "name": template.display_name,
            "description": template.description,
        }
        for template in TEMPLATES.values()
    ]
