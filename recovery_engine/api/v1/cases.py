"""Case endpoints - ingestion, lookup, scoring, status updates and interaction logging"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from recovery_engine.api.v1.schemas import (
    CaseCreateRequest,
    CaseImportRequest,
    CaseListResponse,
    CaseResponse,
    InteractionRequest,
    StatusUpdateRequest,
    case_to_response,
)
from recovery_engine.api.dependencies import get_case_repository, get_partner_repository, get_request_id
from recovery_engine.config import settings
from recovery_engine.infrastructure.database.session import get_db
from recovery_engine.infrastructure.database.repositories import CaseRepository, PartnerRepository
from recovery_engine.domain.models import CaseStatus
from recovery_engine.domain.lifecycle import add_interaction, import_cases, ingest_case, update_status
from recovery_engine.domain.scoring import score_case
from recovery_engine.domain.exceptions import (
    CaseAlreadyExistsError,
    CaseNotFoundError,
    ConcurrentUpdateError,
    InvalidInputError,
)
from recovery_engine.infrastructure.observability.metrics import record_scoring, status_transition_counter
from recovery_engine.infrastructure.observability.logging import log_scoring

router = APIRouter()


@router.post("/cases", response_model=CaseResponse, status_code=201)
def create_case(
    request_body: CaseCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    case_repo: CaseRepository = Depends(get_case_repository),
):
    """Ingest a single NEW case with its CREATED audit entry"""
    request_id = get_request_id(request)

    try:
        case = ingest_case(
            customer_name=request_body.customer_name,
            amount=request_body.amount,
            currency=request_body.currency or settings.default_currency,
            days_overdue=request_body.days_overdue,
            case_id=request_body.case_id,
        )
        case_repo.add_case(case)
        db.commit()

    except InvalidInputError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except CaseAlreadyExistsError as e:
        db.rollback()
        logging.warning(f"Duplicate case rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return case_to_response(case)


@router.post("/cases/import", response_model=CaseListResponse, status_code=201)
def import_case_batch(
    request_body: CaseImportRequest,
    request: Request,
    db: Session = Depends(get_db),
    case_repo: CaseRepository = Depends(get_case_repository),
):
    """Bulk-ingest already-parsed case rows; all or nothing"""
    request_id = get_request_id(request)
    rows = [row.model_dump(exclude_none=True) for row in request_body.cases]

    try:
        cases = import_cases(rows, default_currency=settings.default_currency)
        case_repo.add_cases(cases)
        db.commit()

    except InvalidInputError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except CaseAlreadyExistsError as e:
        db.rollback()
        logging.warning(f"Import rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info("Cases imported", extra={"request_id": request_id, "case_count": len(cases)})
    return CaseListResponse(cases=[case_to_response(c) for c in cases])


@router.get("/cases", response_model=CaseListResponse)
def list_cases(
    status: Optional[CaseStatus] = Query(None, description="Filter by lifecycle status"),
    case_repo: CaseRepository = Depends(get_case_repository),
):
    cases = case_repo.list_cases(status=status, limit=settings.case_list_limit)
    return CaseListResponse(cases=[case_to_response(c) for c in cases])


@router.get("/cases/{case_id}", response_model=CaseResponse)
def get_case(case_id: str, case_repo: CaseRepository = Depends(get_case_repository)):
    try:
        return case_to_response(case_repo.get_case(case_id))
    except CaseNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/cases/{case_id}/analyze", response_model=CaseResponse)
def analyze(
    case_id: str,
    request: Request,
    db: Session = Depends(get_db),
    case_repo: CaseRepository = Depends(get_case_repository),
    partner_repo: PartnerRepository = Depends(get_partner_repository),
):
    """
    Run the scorer on a case.

    Replaces any earlier analysis and moves NEW cases to AI_PROCESSED.
    """
    request_id = get_request_id(request)

    try:
        case = case_repo.get_case(case_id, for_update=True)
        scored = score_case(case, partner_repo.list_partners())
        case_repo.save_case(scored)
        db.commit()

    except CaseNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidInputError as e:
        db.rollback()
        logging.warning(f"Scoring rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except ConcurrentUpdateError as e:
        db.rollback()
        logging.warning(f"Scoring conflict: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_scoring(scored.analysis.sla_breach_risk.value)
    log_scoring(request_id, case_id, scored.analysis.recovery_probability, scored.analysis.sla_breach_risk.value)
    return case_to_response(scored)


@router.post("/cases/{case_id}/status", response_model=CaseResponse)
def change_status(
    case_id: str,
    request_body: StatusUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
    case_repo: CaseRepository = Depends(get_case_repository),
):
    request_id = get_request_id(request)

    try:
        case = case_repo.get_case(case_id, for_update=True)
        updated = update_status(case, request_body.status, note=request_body.note)
        case_repo.save_case(updated)
        db.commit()

    except CaseNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidInputError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except ConcurrentUpdateError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    status_transition_counter.labels(status=updated.status.value).inc()
    return case_to_response(updated)


@router.post("/cases/{case_id}/interactions", response_model=CaseResponse, status_code=201)
def log_interaction(
    case_id: str,
    request_body: InteractionRequest,
    request: Request,
    db: Session = Depends(get_db),
    case_repo: CaseRepository = Depends(get_case_repository),
):
    """Record a call, email, letter or SMS against a case"""
    request_id = get_request_id(request)

    try:
        case = case_repo.get_case(case_id, for_update=True)
        updated = add_interaction(case, request_body.interaction_type, request_body.notes, request_body.outcome)
        case_repo.save_case(updated)
        db.commit()

    except CaseNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidInputError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except ConcurrentUpdateError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return case_to_response(updated)
