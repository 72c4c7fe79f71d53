"""Partner allocation - single (auto/manual) and batch assignment of cases to agencies"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from recovery_engine.domain.models import (
    BATCH_ELIGIBLE_STATUSES,
    TERMINAL_STATUSES,
    Actor,
    Analysis,
    AuditAction,
    AuditEntry,
    BatchAllocation,
    Case,
    CaseStatus,
    Partner,
)
from recovery_engine.domain.exceptions import InvalidInputError, NoPartnersAvailableError, UnknownPartnerError
from recovery_engine.domain.scoring import HIGH_VALUE_THRESHOLD, select_best_partner
from recovery_engine.utils.date_utils import utc_now

logger = logging.getLogger(__name__)

HIGH_VALUE_SEGMENT = "High Value"
STANDARD_SEGMENT = "Standard"


def _assign(case: Case, partner_id: str, action: AuditAction, actor: Actor, details: str, now: datetime) -> Case:
    """Build the assigned copy of a case with its audit entry"""
    entry = AuditEntry(timestamp=now, action=action, actor=actor, details=details)
    return replace(
        case,
        assigned_partner_id=partner_id,
        assigned_at=now,
        status=CaseStatus.ASSIGNED,
        audit_log=case.audit_log + (entry,),
    )


def _ensure_assignable(case: Case) -> None:
    if case.status in TERMINAL_STATUSES:
        raise InvalidInputError(f"Case {case.case_id} is {case.status.value} and cannot be allocated")


def value_segment(case: Case) -> str:
    return HIGH_VALUE_SEGMENT if case.amount > HIGH_VALUE_THRESHOLD else STANDARD_SEGMENT


def select_auto_partner(analysis: Optional[Analysis], partners: Sequence[Partner]) -> str:
    """
    Pick the partner for automatic allocation.

    Uses the scorer's recommendation when it names a partner in the current
    directory, otherwise the partner with the best recovery rate.

    Raises:
        NoPartnersAvailableError: partner list is empty
    """
    if not partners:
        raise NoPartnersAvailableError("Automatic allocation requires at least one partner")

    recommended = analysis.recommended_partner_id if analysis else None
    if recommended:
        if any(p.partner_id == recommended for p in partners):
            return recommended
        logger.warning(
            "Recommended partner missing from directory, falling back to best recovery rate",
            extra={"recommended_partner_id": recommended},
        )

    return select_best_partner(partners, key=lambda p: p.recovery_rate).partner_id


def allocate_auto(case: Case, partners: Sequence[Partner], now: datetime | None = None) -> Case:
    """Assign a case using its analysis recommendation (or the best-rate fallback)"""
    _ensure_assignable(case)
    partner_id = select_auto_partner(case.analysis, partners)
    return _assign(
        case,
        partner_id,
        AuditAction.ALLOCATED_AUTO,
        Actor.AUTO_ALLOCATOR,
        f"Smart-assigned to {partner_id} (Best Match).",
        now or utc_now(),
    )


def allocate_manual(
    case: Case,
    partner_id: str,
    partners: Optional[Sequence[Partner]] = None,
    now: datetime | None = None,
) -> Case:
    """
    Assign a case to an operator-chosen partner.

    The partner id is only checked against the directory when one is given.

    Raises:
        UnknownPartnerError: partners supplied and partner_id is not among them
    """
    _ensure_assignable(case)
    if partners is not None and not any(p.partner_id == partner_id for p in partners):
        raise UnknownPartnerError(partner_id)

    return _assign(
        case,
        partner_id,
        AuditAction.ALLOCATED_MANUAL,
        Actor.ADMIN,
        f"Assigned to DCA {partner_id}",
        now or utc_now(),
    )


def allocate_batch(cases: Sequence[Case], partners: Sequence[Partner], now: datetime | None = None) -> BatchAllocation:
    """
    Assign every NEW / AI_PROCESSED case in one pass.

    Segmentation:
    - High value (amount > 50,000): partner with the highest recovery rate
    - Standard: partner with the highest raw capacity (not remaining headroom)

    Both targets are resolved once from the partner snapshot, so each case's
    assignment is independent of the others. Allocation is capacity-unaware.
    Ineligible cases are returned unchanged and in their original position.
    """
    if not partners:
        raise NoPartnersAvailableError("Batch allocation requires at least one partner")

    timestamp = now or utc_now()
    targets = {
        HIGH_VALUE_SEGMENT: select_best_partner(partners, key=lambda p: p.recovery_rate),
        STANDARD_SEGMENT: select_best_partner(partners, key=lambda p: p.capacity),
    }

    updated: List[Case] = []
    assignments: Dict[str, str] = {}

    for case in cases:
        if case.status not in BATCH_ELIGIBLE_STATUSES:
            updated.append(case)
            continue

        segment = value_segment(case)
        partner = targets[segment]
        updated.append(
            _assign(
                case,
                partner.partner_id,
                AuditAction.ALLOCATED_BATCH,
                Actor.AI_OPTIMIZER,
                f"Segment: {segment}. Matched to top performer: {partner.name}",
                timestamp,
            )
        )
        assignments[case.case_id] = partner.partner_id

    logger.info("Batch allocation completed", extra={"assigned_count": len(assignments), "case_count": len(cases)})
    return BatchAllocation(cases=updated, assignments=assignments)
