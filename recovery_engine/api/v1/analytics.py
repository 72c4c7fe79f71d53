"""GET /v1/analytics/* - portfolio KPIs and partner performance"""

from fastapi import APIRouter, Depends

from recovery_engine.api.v1.schemas import (
    MonthlyRecoverySchema,
    PartnerPerformanceItem,
    PartnerPerformanceResponse,
    PortfolioSummaryResponse,
)
from recovery_engine.api.dependencies import get_case_repository, get_partner_repository
from recovery_engine.infrastructure.database.repositories import CaseRepository, PartnerRepository
from recovery_engine.domain.analytics import partner_performance, summarize_portfolio

router = APIRouter()


@router.get("/analytics/summary", response_model=PortfolioSummaryResponse)
def get_summary(case_repo: CaseRepository = Depends(get_case_repository)):
    """
    Dashboard headline figures.

    Returns:
        Recovered totals, active and at-risk counts, prediction accuracy and status breakdown
    """
    summary = summarize_portfolio(case_repo.list_cases())
    return PortfolioSummaryResponse(
        total_recovered=summary.total_recovered,
        recovered_this_month=summary.recovered_this_month,
        recovered_last_month=summary.recovered_last_month,
        recovered_trend=summary.recovered_trend,
        active_cases=summary.active_cases,
        active_this_month=summary.active_this_month,
        active_last_month=summary.active_last_month,
        active_trend=summary.active_trend,
        sla_breach_risks=summary.sla_breach_risks,
        risks_this_month=summary.risks_this_month,
        risks_last_month=summary.risks_last_month,
        risk_trend=summary.risk_trend,
        prediction_accuracy=summary.prediction_accuracy,
        status_breakdown=summary.status_breakdown,
        recovered_by_month=[
            MonthlyRecoverySchema(month=m.month, recovered=m.recovered) for m in summary.recovered_by_month
        ],
    )


@router.get("/analytics/partners", response_model=PartnerPerformanceResponse)
def get_partner_performance(
    case_repo: CaseRepository = Depends(get_case_repository),
    partner_repo: PartnerRepository = Depends(get_partner_repository),
):
    performance = partner_performance(case_repo.list_cases(), partner_repo.list_partners())
    return PartnerPerformanceResponse(
        partners=[
            PartnerPerformanceItem(
                partner_id=p.partner_id,
                name=p.name,
                recovered_amount=p.recovered_amount,
                resolved_cases=p.resolved_cases,
            )
            for p in performance
        ]
    )
