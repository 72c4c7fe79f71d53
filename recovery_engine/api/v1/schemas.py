"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from recovery_engine.domain.models import Case, CaseStatus, InteractionType, Partner


class CaseCreateRequest(BaseModel):
    """Request body for POST /v1/cases"""

    case_id: Optional[str] = Field(None, min_length=1, description="Caller-supplied case identifier")
    customer_name: str = Field("Unknown", description="Debtor name")
    amount: float = Field(0, ge=0, description="Outstanding amount")
    currency: Optional[str] = Field(None, min_length=3, max_length=3, description="ISO currency code")
    days_overdue: int = Field(0, ge=0, description="Days since invoice due date")


class CaseImportRequest(BaseModel):
    """Request body for POST /v1/cases/import"""

    cases: List[CaseCreateRequest] = Field(..., min_length=1)


class ManualAllocationRequest(BaseModel):
    partner_id: str = Field(..., min_length=1)


class StatusUpdateRequest(BaseModel):
    status: CaseStatus
    note: Optional[str] = None


class InteractionRequest(BaseModel):
    interaction_type: InteractionType
    notes: str = Field(..., min_length=1)
    outcome: Optional[str] = None


class PartnerCreateRequest(BaseModel):
    """Request body for POST /v1/partners"""

    partner_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    recovery_rate: float = Field(..., ge=0, le=1, description="Historical recovery rate")
    active_cases: int = Field(0, ge=0)
    capacity: int = Field(0, ge=0)
    regions: List[str] = Field(default_factory=list)


class AnalysisSchema(BaseModel):
    recovery_probability: int
    priority_score: int
    sla_breach_risk: str
    recommended_partner_id: Optional[str] = None
    rationale: str


class AuditEntrySchema(BaseModel):
    timestamp: datetime
    action: str
    actor: str
    details: str


class InteractionSchema(BaseModel):
    interaction_id: str
    occurred_at: datetime
    interaction_type: str
    notes: str
    outcome: Optional[str] = None


class CaseResponse(BaseModel):
    """Full case representation"""

    case_id: str
    customer_name: str
    amount: float
    currency: str
    days_overdue: int
    status: str
    assigned_partner_id: Optional[str] = None
    assigned_at: Optional[datetime] = None
    created_at: datetime
    analysis: Optional[AnalysisSchema] = None
    audit_log: List[AuditEntrySchema]
    interactions: List[InteractionSchema]


class CaseListResponse(BaseModel):
    cases: List[CaseResponse]


class PartnerResponse(BaseModel):
    partner_id: str
    name: str
    recovery_rate: float
    active_cases: int
    capacity: int
    regions: List[str]


class PartnerListResponse(BaseModel):
    partners: List[PartnerResponse]


class BatchAllocationResponse(BaseModel):
    """Response for POST /v1/allocations/batch"""

    assigned_count: int
    assignments: Dict[str, str]


class MonthlyRecoverySchema(BaseModel):
    month: str
    recovered: float


class PortfolioSummaryResponse(BaseModel):
    total_recovered: float
    recovered_this_month: float
    recovered_last_month: float
    recovered_trend: float
    active_cases: int
    active_this_month: int
    active_last_month: int
    active_trend: float
    sla_breach_risks: int
    risks_this_month: int
    risks_last_month: int
    risk_trend: float
    prediction_accuracy: float
    status_breakdown: Dict[str, int]
    recovered_by_month: List[MonthlyRecoverySchema]


class PartnerPerformanceItem(BaseModel):
    partner_id: str
    name: str
    recovered_amount: float
    resolved_cases: int


class PartnerPerformanceResponse(BaseModel):
    partners: List[PartnerPerformanceItem]


class PartnerStatsResponse(BaseModel):
    partner_id: str
    pending: int
    active: int
    resolved: int
    resolution_rate: float


def case_to_response(case: Case) -> CaseResponse:
    """Map a domain Case onto its API representation"""
    analysis = None
    if case.analysis is not None:
        analysis = AnalysisSchema(
            recovery_probability=case.analysis.recovery_probability,
            priority_score=case.analysis.priority_score,
            sla_breach_risk=case.analysis.sla_breach_risk.value,
            recommended_partner_id=case.analysis.recommended_partner_id,
            rationale=case.analysis.rationale,
        )

    return CaseResponse(
        case_id=case.case_id,
        customer_name=case.customer_name,
        amount=case.amount,
        currency=case.currency,
        days_overdue=case.days_overdue,
        status=case.status.value,
        assigned_partner_id=case.assigned_partner_id,
        assigned_at=case.assigned_at,
        created_at=case.created_at,
        analysis=analysis,
        audit_log=[
            AuditEntrySchema(
                timestamp=entry.timestamp,
                action=entry.action.value,
                actor=entry.actor.value,
                details=entry.details,
            )
            for entry in case.audit_log
        ],
        interactions=[
            InteractionSchema(
                interaction_id=i.interaction_id,
                occurred_at=i.occurred_at,
                interaction_type=i.interaction_type.value,
                notes=i.notes,
                outcome=i.outcome,
            )
            for i in case.interactions
        ],
    )


def partner_to_response(partner: Partner) -> PartnerResponse:
    return PartnerResponse(
        partner_id=partner.partner_id,
        name=partner.name,
        recovery_rate=partner.recovery_rate,
        active_cases=partner.active_cases,
        capacity=partner.capacity,
        regions=list(partner.regions),
    )
