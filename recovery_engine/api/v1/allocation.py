"""Allocation endpoints - auto, manual and batch assignment of cases to partners"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from recovery_engine.api.v1.schemas import BatchAllocationResponse, CaseResponse, ManualAllocationRequest, case_to_response
from recovery_engine.api.dependencies import get_case_repository, get_partner_repository, get_request_id
from recovery_engine.infrastructure.database.session import get_db
from recovery_engine.infrastructure.database.repositories import CaseRepository, PartnerRepository
from recovery_engine.domain.allocation import allocate_auto, allocate_batch, allocate_manual, value_segment
from recovery_engine.domain.exceptions import (
    CaseNotFoundError,
    ConcurrentUpdateError,
    InvalidInputError,
    NoPartnersAvailableError,
    UnknownPartnerError,
)
from recovery_engine.infrastructure.observability.metrics import allocation_failures_counter, record_allocation
from recovery_engine.infrastructure.observability.logging import log_allocation, log_batch_allocation

router = APIRouter()


@router.post("/cases/{case_id}/allocate/auto", response_model=CaseResponse)
def auto_allocate(
    case_id: str,
    request: Request,
    db: Session = Depends(get_db),
    case_repo: CaseRepository = Depends(get_case_repository),
    partner_repo: PartnerRepository = Depends(get_partner_repository),
):
    """Assign a case to its recommended partner, or the best recovery rate if unscored"""
    request_id = get_request_id(request)

    try:
        case = case_repo.get_case(case_id, for_update=True)
        allocated = allocate_auto(case, partner_repo.list_partners())
        case_repo.save_case(allocated)
        db.commit()

    except CaseNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except NoPartnersAvailableError as e:
        db.rollback()
        allocation_failures_counter.labels(reason="no_partners").inc()
        logging.warning(f"Auto allocation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except InvalidInputError as e:
        db.rollback()
        allocation_failures_counter.labels(reason="invalid_input").inc()
        raise HTTPException(status_code=422, detail=str(e))

    except ConcurrentUpdateError as e:
        db.rollback()
        allocation_failures_counter.labels(reason="conflict").inc()
        logging.warning(f"Auto allocation conflict: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_allocation("auto")
    log_allocation(request_id, case_id, allocated.assigned_partner_id, "auto")
    return case_to_response(allocated)


@router.post("/cases/{case_id}/allocate/manual", response_model=CaseResponse)
def manual_allocate(
    case_id: str,
    request_body: ManualAllocationRequest,
    request: Request,
    db: Session = Depends(get_db),
    case_repo: CaseRepository = Depends(get_case_repository),
    partner_repo: PartnerRepository = Depends(get_partner_repository),
):
    """Assign a case to an operator-chosen partner from the directory"""
    request_id = get_request_id(request)

    try:
        case = case_repo.get_case(case_id, for_update=True)
        allocated = allocate_manual(case, request_body.partner_id, partners=partner_repo.list_partners())
        case_repo.save_case(allocated)
        db.commit()

    except (CaseNotFoundError, UnknownPartnerError) as e:
        db.rollback()
        allocation_failures_counter.labels(reason="not_found").inc()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidInputError as e:
        db.rollback()
        allocation_failures_counter.labels(reason="invalid_input").inc()
        raise HTTPException(status_code=422, detail=str(e))

    except ConcurrentUpdateError as e:
        db.rollback()
        allocation_failures_counter.labels(reason="conflict").inc()
        logging.warning(f"Manual allocation conflict: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_allocation("manual")
    log_allocation(request_id, case_id, allocated.assigned_partner_id, "manual")
    return case_to_response(allocated)


@router.post("/allocations/batch", response_model=BatchAllocationResponse)
def batch_allocate(
    request: Request,
    db: Session = Depends(get_db),
    case_repo: CaseRepository = Depends(get_case_repository),
    partner_repo: PartnerRepository = Depends(get_partner_repository),
):
    """
    Assign every NEW / AI_PROCESSED case in one pass.

    Flow:
    1. Snapshot all cases and the partner directory
    2. Segment by value and pick one target partner per segment
    3. Persist only the cases that were assigned
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = allocate_batch(case_repo.list_cases(), partner_repo.list_partners())

        assigned = [c for c in result.cases if c.case_id in result.assignments]
        case_repo.save_cases(assigned)
        db.commit()

    except NoPartnersAvailableError as e:
        allocation_failures_counter.labels(reason="no_partners").inc()
        logging.warning(f"Batch allocation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except ConcurrentUpdateError as e:
        db.rollback()
        allocation_failures_counter.labels(reason="conflict").inc()
        logging.warning(f"Batch allocation conflict: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    for case in assigned:
        record_allocation("batch", value_segment(case))

    duration_ms = (time.time() - start_time) * 1000
    log_batch_allocation(request_id, len(result.assignments), duration_ms)

    return BatchAllocationResponse(assigned_count=len(result.assignments), assignments=result.assignments)
