from typing import Dict, List

from fastapi import APIRouter, HTTPException, Query

from abadvisor.models.schemas import (
    DecisionRequest,
    DecisionResponse,
    ReportResponse,
    TemplateInfo,
)
from abadvisor.services.experiments.decision import decide
from abadvisor.services.reports.generator import get_report_generator
from abadvisor.services.reports.templates import get_template, list_templates

router = APIRouter()


@router.get("/templates", response_model=List[Dict[str, str]])
async def get_templates():
    return list_templates()


@router.get("/templates/{template_type}", response_model=TemplateInfo)
async def get_template_info(template_type: str):
    try:
        template = get_template(template_type)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return TemplateInfo(
        type=template.template_type,
        name=template.display_name,
        description=template.description,
        sections=[section.value for section in template.sections],
    )


@router.post("/generate", response_model=ReportResponse)
async def generate_report(
    request: DecisionRequest,
    template_type: str = Query("full", description="Report template type"),
    output_format: str = Query("markdown", description="markdown or text"),
):
    result = decide(request.to_input())
    generator = get_report_generator()

    try:
        report = generator.generate(
            result, request.metric, template_type=template_type, output_format=output_format
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ReportResponse(
        report_id=report.report_id,
        template_type=report.template_type,
        output_format=report.output_format,
        title=report.title,
        generated_at=report.generated_at,
        content=report.content,
        decision=DecisionResponse.from_result(result),
    )
