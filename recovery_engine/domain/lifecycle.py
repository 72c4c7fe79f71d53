"""Case lifecycle - ingestion, status updates and interaction logging"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from recovery_engine.domain.models import (
    BATCH_ELIGIBLE_STATUSES,
    TERMINAL_STATUSES,
    Actor,
    AuditAction,
    AuditEntry,
    Case,
    CaseStatus,
    Interaction,
    InteractionType,
)
from recovery_engine.domain.exceptions import InvalidInputError
from recovery_engine.domain.scoring import validate_case_figures
from recovery_engine.utils.date_utils import utc_now

DEFAULT_CURRENCY = "USD"
DEFAULT_CUSTOMER_NAME = "Unknown"

INGEST_FIELDS = frozenset({"case_id", "customer_name", "amount", "currency", "days_overdue"})


def is_batch_eligible(case: Case) -> bool:
    return case.status in BATCH_ELIGIBLE_STATUSES


def is_terminal(case: Case) -> bool:
    return case.status in TERMINAL_STATUSES


def ingest_case(
    customer_name: str = DEFAULT_CUSTOMER_NAME,
    amount: float = 0,
    currency: str = DEFAULT_CURRENCY,
    days_overdue: int = 0,
    case_id: Optional[str] = None,
    now: datetime | None = None,
    details: str = "Case ingested via API",
) -> Case:
    """
    Create a NEW case with its CREATED audit entry.

    Missing fields fall back to amount 0, currency USD and an unknown customer.

    Raises:
        InvalidInputError: negative amount or days overdue
    """
    timestamp = now or utc_now()
    case = Case(
        case_id=case_id or f"CASE-{uuid.uuid4().hex[:12].upper()}",
        customer_name=customer_name,
        amount=amount,
        currency=currency,
        days_overdue=days_overdue,
        status=CaseStatus.NEW,
        created_at=timestamp,
        audit_log=(
            AuditEntry(
                timestamp=timestamp,
                action=AuditAction.CREATED,
                actor=Actor.SYSTEM,
                details=details,
            ),
        ),
    )
    validate_case_figures(case)
    return case


def import_cases(
    rows: Iterable[Mapping[str, Any]],
    now: datetime | None = None,
    default_currency: str = DEFAULT_CURRENCY,
) -> List[Case]:
    """
    Bulk-ingest already-parsed rows sharing one creation timestamp.

    Either every row is valid and all cases are returned, or an
    InvalidInputError is raised and nothing is created.
    """
    timestamp = now or utc_now()
    batch_id = uuid.uuid4().hex[:8].upper()
    cases = []
    seen_ids = set()

    for index, row in enumerate(rows):
        unknown = set(row) - INGEST_FIELDS
        if unknown:
            raise InvalidInputError(f"Row {index} has unknown fields: {', '.join(sorted(unknown))}")

        fields = dict(row)
        fields.setdefault("currency", default_currency)
        fields.setdefault("case_id", f"CASE-IMP-{batch_id}-{index}")
        if fields["case_id"] in seen_ids:
            raise InvalidInputError(f"Row {index} repeats case id {fields['case_id']}")
        seen_ids.add(fields["case_id"])
        cases.append(ingest_case(now=timestamp, details="Bulk imported", **fields))

    return cases


def update_status(
    case: Case,
    status: CaseStatus,
    note: Optional[str] = None,
    actor: Actor = Actor.DCA_USER,
    now: datetime | None = None,
) -> Case:
    """
    Move a case to any status; the workflow owner decides what is allowed.

    Sending a case back to NEW or AI_PROCESSED releases its partner
    assignment so it can be picked up by the next batch run.
    """
    try:
        new_status = CaseStatus(status)
    except ValueError as e:
        raise InvalidInputError(f"Unknown case status: {status}") from e

    details = f"Changed to {new_status.value}. Note: {note or ''}"
    assigned_partner_id, assigned_at = case.assigned_partner_id, case.assigned_at
    if new_status in BATCH_ELIGIBLE_STATUSES and assigned_partner_id is not None:
        details += f" Released from {assigned_partner_id}."
        assigned_partner_id, assigned_at = None, None

    entry = AuditEntry(
        timestamp=now or utc_now(),
        action=AuditAction.STATUS_UPDATE,
        actor=actor,
        details=details,
    )
    return replace(
        case,
        status=new_status,
        assigned_partner_id=assigned_partner_id,
        assigned_at=assigned_at,
        audit_log=case.audit_log + (entry,),
    )


def add_interaction(
    case: Case,
    interaction_type: InteractionType,
    notes: str,
    outcome: Optional[str] = None,
    now: datetime | None = None,
) -> Case:
    """Log a contact attempt and its audit entry"""
    try:
        kind = InteractionType(interaction_type)
    except ValueError as e:
        raise InvalidInputError(f"Unknown interaction type: {interaction_type}") from e

    timestamp = now or utc_now()
    interaction = Interaction(
        interaction_id=uuid.uuid4().hex,
        occurred_at=timestamp,
        interaction_type=kind,
        notes=notes,
        outcome=outcome,
    )
    entry = AuditEntry(
        timestamp=timestamp,
        action=AuditAction.INTERACTION_LOG,
        actor=Actor.DCA_USER,
        details=f"{kind.value}: {notes}",
    )
    return replace(
        case,
        interactions=case.interactions + (interaction,),
        audit_log=case.audit_log + (entry,),
    )
