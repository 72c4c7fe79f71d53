"""Case scoring engine - recovery probability, priority and SLA risk heuristics"""

import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import Callable, Sequence

from recovery_engine.domain.models import (
    Actor,
    Analysis,
    AuditAction,
    AuditEntry,
    Case,
    CaseStatus,
    Partner,
    SlaBreachRisk,
)
from recovery_engine.domain.exceptions import InvalidInputError, NoPartnersAvailableError
from recovery_engine.utils.date_utils import utc_now

logger = logging.getLogger(__name__)

# Cases above this amount get a recovery bonus and go to the high-value allocation segment
HIGH_VALUE_THRESHOLD = 50_000

SLA_BREACH_PROBABILITY_CUTOFF = 50


def validate_case_figures(case: Case) -> None:
    """Reject negative amounts and negative days overdue"""
    if case.amount < 0:
        raise InvalidInputError(f"Case {case.case_id} has negative amount: {case.amount}")
    if case.days_overdue < 0:
        raise InvalidInputError(f"Case {case.case_id} has negative days overdue: {case.days_overdue}")


def calculate_recovery_probability(case: Case) -> int:
    """
    Estimate recovery probability on a 0-100 scale.

    Younger debt recovers more often: start at 100 and lose half a point per
    day overdue. High-value cases get a +10 bonus since they are worked harder.
    """
    score = 100 - case.days_overdue * 0.5
    if case.amount > HIGH_VALUE_THRESHOLD:
        score += 10
    return max(0, min(100, math.floor(score)))


def calculate_priority_score(case: Case) -> int:
    """
    Priority on a 0-100 scale.

    Amount and age each contribute up to 50 points and saturate independently:
    $1000 per point of amount, 2 days per point of age.
    """
    amount_weight = min(50, case.amount / 1000)
    age_weight = min(50, case.days_overdue / 2)
    return math.floor(amount_weight + age_weight)


def classify_sla_breach_risk(recovery_probability: int) -> SlaBreachRisk:
    # MEDIUM exists on the enum but has no trigger condition
    if recovery_probability < SLA_BREACH_PROBABILITY_CUTOFF:
        return SlaBreachRisk.HIGH
    return SlaBreachRisk.LOW


def select_best_partner(partners: Sequence[Partner], key: Callable[[Partner], float]) -> Partner:
    """Return the partner with the highest key; ties keep the earliest partner in the list"""
    if not partners:
        raise NoPartnersAvailableError("No partners available for selection")

    best = partners[0]
    for candidate in partners[1:]:
        if key(candidate) > key(best):
            best = candidate
    return best


def analyze_case(case: Case, partners: Sequence[Partner]) -> Analysis:
    """
    Score a single case and recommend a partner.

    Pure function of its inputs. Raises InvalidInputError on negative figures
    or when there are no partners to recommend.
    """
    validate_case_figures(case)
    if not partners:
        raise InvalidInputError("Cannot score a case against an empty partner list")

    probability = calculate_recovery_probability(case)
    priority = calculate_priority_score(case)
    best_partner = select_best_partner(partners, key=lambda p: p.recovery_rate)

    return Analysis(
        recovery_probability=probability,
        priority_score=priority,
        sla_breach_risk=classify_sla_breach_risk(probability),
        recommended_partner_id=best_partner.partner_id,
        rationale=(
            f"AI score {probability}% based on {case.days_overdue} days overdue. "
            f"Matched to {best_partner.name} for efficiency."
        ),
    )


def score_case(case: Case, partners: Sequence[Partner], now: datetime | None = None) -> Case:
    """
    Run the scorer and attach its analysis to the case.

    Re-scoring replaces the previous analysis. A NEW case moves to
    AI_PROCESSED; cases further along keep their status.
    """
    analysis = analyze_case(case, partners)
    timestamp = now or utc_now()

    status = CaseStatus.AI_PROCESSED if case.status == CaseStatus.NEW else case.status
    entry = AuditEntry(
        timestamp=timestamp,
        action=AuditAction.AI_SCORING,
        actor=Actor.AI_ENGINE,
        details=f"Processed. Score: {analysis.recovery_probability}",
    )

    logger.debug(
        "Case scored",
        extra={
            "case_id": case.case_id,
            "recovery_probability": analysis.recovery_probability,
            "priority_score": analysis.priority_score,
        },
    )

    return replace(
        case,
        status=status,
        analysis=analysis,
        audit_log=case.audit_log + (entry,),
    )
