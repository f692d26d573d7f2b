from fastapi import APIRouter

from abadvisor.models.schemas import DecisionRequest, DecisionResponse, QAReportResponse
from abadvisor.services.experiments.decision import decide
from abadvisor.services.experiments.qa import run_qa_checks

router = APIRouter()


@router.post("", response_model=DecisionResponse)
async def create_decision(request: DecisionRequest):
    result = decide(request.to_input())
    return DecisionResponse.from_result(result)


@router.get("/qa", response_model=QAReportResponse)
async def run_qa():
    """Run the built-in QA scenarios through the decision engine."""
    return QAReportResponse.from_report(run_qa_checks())
