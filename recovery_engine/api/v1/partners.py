"""Partner directory and partner-scoped portal endpoints"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from recovery_engine.api.v1.schemas import (
    CaseListResponse,
    PartnerCreateRequest,
    PartnerListResponse,
    PartnerResponse,
    PartnerStatsResponse,
    case_to_response,
    partner_to_response,
)
from recovery_engine.api.dependencies import get_case_repository, get_partner_repository
from recovery_engine.infrastructure.database.session import get_db
from recovery_engine.infrastructure.database.repositories import CaseRepository, PartnerRepository
from recovery_engine.domain.analytics import partner_cases, partner_stats
from recovery_engine.domain.exceptions import InvalidInputError, UnknownPartnerError
from recovery_engine.domain.models import Partner

router = APIRouter()


def _require_partner(partner_repo: PartnerRepository, partner_id: str) -> Partner:
    partner = partner_repo.get_partner(partner_id)
    if partner is None:
        raise HTTPException(status_code=404, detail=str(UnknownPartnerError(partner_id)))
    return partner


@router.post("/partners", response_model=PartnerResponse, status_code=201)
def register_partner(
    request_body: PartnerCreateRequest,
    db: Session = Depends(get_db),
    partner_repo: PartnerRepository = Depends(get_partner_repository),
):
    """Add an agency to the directory; registration order is the tie-break order"""
    try:
        partner = Partner(**request_body.model_dump())
        partner_repo.add_partner(partner)
        db.commit()
    except InvalidInputError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return partner_to_response(partner)


@router.get("/partners", response_model=PartnerListResponse)
def list_partners(partner_repo: PartnerRepository = Depends(get_partner_repository)):
    return PartnerListResponse(partners=[partner_to_response(p) for p in partner_repo.list_partners()])


@router.get("/partners/{partner_id}/cases", response_model=CaseListResponse)
def get_partner_cases(
    partner_id: str,
    search: Optional[str] = Query(None, description="Match on case id or customer name"),
    case_repo: CaseRepository = Depends(get_case_repository),
    partner_repo: PartnerRepository = Depends(get_partner_repository),
):
    """Cases assigned to the given partner only"""
    _require_partner(partner_repo, partner_id)
    cases = partner_cases(case_repo.list_cases(), partner_id, search=search)
    return CaseListResponse(cases=[case_to_response(c) for c in cases])


@router.get("/partners/{partner_id}/stats", response_model=PartnerStatsResponse)
def get_partner_stats(
    partner_id: str,
    case_repo: CaseRepository = Depends(get_case_repository),
    partner_repo: PartnerRepository = Depends(get_partner_repository),
):
    _require_partner(partner_repo, partner_id)
    stats = partner_stats(case_repo.list_cases(), partner_id)
    return PartnerStatsResponse(
        partner_id=stats.partner_id,
        pending=stats.pending,
        active=stats.active,
        resolved=stats.resolved,
        resolution_rate=stats.resolution_rate,
    )
