from abadvisor.services.reports.generator import (
    GeneratedReport,
    ReportGenerator,
    get_report_generator,
)
from abadvisor.services.reports.templates import get_template, list_templates

__all__ = [
    "GeneratedReport",
    "ReportGenerator",
    "get_report_generator",
    "get_template",
    "list_templates",
]
