"""Data access layer translating between ORM rows and domain dataclasses"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from recovery_engine.infrastructure.database.models import CaseRecord, PartnerRecord
from recovery_engine.domain.exceptions import (
    CaseAlreadyExistsError,
    CaseNotFoundError,
    ConcurrentUpdateError,
    InvalidInputError,
)
from recovery_engine.domain.models import (
    Actor,
    Analysis,
    AuditAction,
    AuditEntry,
    Case,
    CaseStatus,
    Interaction,
    InteractionType,
    Partner,
    SlaBreachRisk,
)
from recovery_engine.utils.date_utils import parse_timestamp


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo on the way back; treat stored values as UTC"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _analysis_to_json(analysis: Optional[Analysis]) -> Optional[Dict[str, Any]]:
    if analysis is None:
        return None
    return {
        "recovery_probability": analysis.recovery_probability,
        "priority_score": analysis.priority_score,
        "sla_breach_risk": analysis.sla_breach_risk.value,
        "recommended_partner_id": analysis.recommended_partner_id,
        "rationale": analysis.rationale,
    }


def _analysis_from_json(data: Optional[Dict[str, Any]]) -> Optional[Analysis]:
    if not data:
        return None
    return Analysis(
        recovery_probability=data["recovery_probability"],
        priority_score=data["priority_score"],
        sla_breach_risk=SlaBreachRisk(data["sla_breach_risk"]),
        recommended_partner_id=data.get("recommended_partner_id"),
        rationale=data["rationale"],
    )


def _case_to_record_fields(case: Case) -> Dict[str, Any]:
    return {
        "customer_name": case.customer_name,
        "amount": case.amount,
        "currency": case.currency,
        "days_overdue": case.days_overdue,
        "status": case.status.value,
        "assigned_partner_id": case.assigned_partner_id,
        "assigned_at": case.assigned_at,
        "created_at": case.created_at,
        "analysis": _analysis_to_json(case.analysis),
        "audit_log": [
            {
                "timestamp": entry.timestamp.isoformat(),
                "action": entry.action.value,
                "actor": entry.actor.value,
                "details": entry.details,
            }
            for entry in case.audit_log
        ],
        "interactions": [
            {
                "interaction_id": i.interaction_id,
                "occurred_at": i.occurred_at.isoformat(),
                "interaction_type": i.interaction_type.value,
                "notes": i.notes,
                "outcome": i.outcome,
            }
            for i in case.interactions
        ],
    }


def case_from_record(record: CaseRecord) -> Case:
    """Rebuild a domain Case from its database row"""
    return Case(
        case_id=record.case_id,
        customer_name=record.customer_name,
        amount=record.amount,
        currency=record.currency,
        days_overdue=record.days_overdue,
        status=CaseStatus(record.status),
        created_at=_as_utc(record.created_at),
        assigned_partner_id=record.assigned_partner_id,
        assigned_at=_as_utc(record.assigned_at),
        analysis=_analysis_from_json(record.analysis),
        audit_log=tuple(
            AuditEntry(
                timestamp=parse_timestamp(entry["timestamp"]),
                action=AuditAction(entry["action"]),
                actor=Actor(entry["actor"]),
                details=entry["details"],
            )
            for entry in record.audit_log or []
        ),
        interactions=tuple(
            Interaction(
                interaction_id=i["interaction_id"],
                occurred_at=parse_timestamp(i["occurred_at"]),
                interaction_type=InteractionType(i["interaction_type"]),
                notes=i["notes"],
                outcome=i.get("outcome"),
            )
            for i in record.interactions or []
        ),
    )


def partner_from_record(record: PartnerRecord) -> Partner:
    return Partner(
        partner_id=record.partner_id,
        name=record.name,
        recovery_rate=record.recovery_rate,
        active_cases=record.active_cases,
        capacity=record.capacity,
        regions=list(record.regions or []),
    )


class CaseRepository:
    """Repository for recovery cases"""

    def __init__(self, db: Session):
        self.db = db

    def get_case(self, case_id: str, for_update: bool = False) -> Case:
        """
        Fetch a case or raise CaseNotFoundError.

        for_update takes a row lock where the backend supports one; the
        version column still catches writers that read without it.
        """
        record = self.db.get(CaseRecord, case_id, with_for_update=for_update)
        if record is None:
            raise CaseNotFoundError(case_id)
        return case_from_record(record)

    def list_cases(self, status: Optional[CaseStatus] = None, limit: Optional[int] = None) -> List[Case]:
        """Newest cases first"""
        query = self.db.query(CaseRecord)
        if status is not None:
            query = query.filter(CaseRecord.status == status.value)
        query = query.order_by(CaseRecord.created_at.desc(), CaseRecord.case_id)
        if limit is not None:
            query = query.limit(limit)
        return [case_from_record(r) for r in query.all()]

    def add_case(self, case: Case) -> None:
        """Insert a newly ingested case; existing ids are never overwritten"""
        if self.db.get(CaseRecord, case.case_id) is not None:
            raise CaseAlreadyExistsError(case.case_id)
        self.db.add(CaseRecord(case_id=case.case_id, **_case_to_record_fields(case)))
        try:
            self.db.flush()
        except IntegrityError as e:
            raise CaseAlreadyExistsError(case.case_id) from e

    def add_cases(self, cases: Iterable[Case]) -> None:
        for case in cases:
            self.add_case(case)

    def save_case(self, case: Case) -> None:
        """
        Write back a case previously loaded in this session.

        Raises:
            CaseNotFoundError: case was never stored
            ConcurrentUpdateError: another transaction updated the row since it was read
        """
        record = self.db.get(CaseRecord, case.case_id)
        if record is None:
            raise CaseNotFoundError(case.case_id)
        for name, value in _case_to_record_fields(case).items():
            setattr(record, name, value)
        try:
            self.db.flush()
        except StaleDataError as e:
            raise ConcurrentUpdateError(case.case_id) from e

    def save_cases(self, cases: Iterable[Case]) -> None:
        for case in cases:
            self.save_case(case)


class PartnerRepository:
    """Repository for the partner directory"""

    def __init__(self, db: Session):
        self.db = db

    def list_partners(self) -> List[Partner]:
        """All partners in registration order"""
        records = self.db.query(PartnerRecord).order_by(PartnerRecord.id).all()
        return [partner_from_record(r) for r in records]

    def get_partner(self, partner_id: str) -> Optional[Partner]:
        record = self.db.query(PartnerRecord).filter(PartnerRecord.partner_id == partner_id).first()
        return partner_from_record(record) if record else None

    def add_partner(self, partner: Partner) -> None:
        if self.get_partner(partner.partner_id) is not None:
            raise InvalidInputError(f"Partner already registered: {partner.partner_id}")
        self.db.add(
            PartnerRecord(
                partner_id=partner.partner_id,
                name=partner.name,
                recovery_rate=partner.recovery_rate,
                active_cases=partner.active_cases,
                capacity=partner.capacity,
                regions=list(partner.regions),
            )
        )
        self.db.flush()
