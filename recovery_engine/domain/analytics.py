"""Portfolio and partner metrics computed over a snapshot of cases"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from recovery_engine.domain.models import TERMINAL_STATUSES, Case, CaseStatus, Partner, SlaBreachRisk
from recovery_engine.utils.date_utils import is_previous_month, is_same_month, shift_month, utc_now

# A resolved case counts as correctly predicted when its probability was above this
ACCURATE_PREDICTION_THRESHOLD = 80

RECOVERY_SERIES_MONTHS = 12


@dataclass
class MonthlyRecovery:
    month: str  # YYYY-MM
    recovered: float


@dataclass
class PortfolioSummary:
    """Headline KPIs for the operations dashboard"""

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
    prediction_accuracy: float  # percent of resolved cases predicted above threshold
    status_breakdown: Dict[str, int]
    recovered_by_month: List[MonthlyRecovery]


@dataclass
class PartnerPerformance:
    partner_id: str
    name: str
    recovered_amount: float
    resolved_cases: int


@dataclass
class PartnerStats:
    """Workload counters for one partner's portal"""

    partner_id: str
    pending: int
    active: int
    resolved: int
    resolution_rate: float


def month_over_month(current: float, previous: float, no_baseline: float = 0.0) -> float:
    """Percent change against last month; no_baseline is returned when last month is zero"""
    if previous > 0:
        return round((current - previous) / previous * 100, 1)
    return no_baseline


def recovered_by_month(
    cases: Sequence[Case], now: datetime | None = None, months: int = RECOVERY_SERIES_MONTHS
) -> List[MonthlyRecovery]:
    """Recovered amount for each of the trailing calendar months, oldest first"""
    reference = now or utc_now()
    buckets: Dict[tuple, float] = {shift_month(reference, -offset): 0.0 for offset in range(months - 1, -1, -1)}

    for c in cases:
        key = (c.created_at.year, c.created_at.month)
        if c.status == CaseStatus.RESOLVED and key in buckets:
            buckets[key] += c.amount

    return [MonthlyRecovery(month=f"{year:04d}-{month:02d}", recovered=total) for (year, month), total in buckets.items()]


def summarize_portfolio(cases: Sequence[Case], now: datetime | None = None) -> PortfolioSummary:
    """
    Aggregate dashboard KPIs.

    Month buckets are keyed on case creation date. The recovered trend
    reads 100% when nothing was recovered last month; the active and risk
    trends read 0% in the same situation.
    """
    reference = now or utc_now()
    resolved = [c for c in cases if c.status == CaseStatus.RESOLVED]
    active = [c for c in cases if c.status not in TERMINAL_STATUSES]
    at_risk = [c for c in cases if c.analysis and c.analysis.sla_breach_risk == SlaBreachRisk.HIGH]

    def this_month(group: Sequence[Case]) -> List[Case]:
        return [c for c in group if is_same_month(c.created_at, reference)]

    def last_month(group: Sequence[Case]) -> List[Case]:
        return [c for c in group if is_previous_month(c.created_at, reference)]

    correctly_predicted = sum(
        1 for c in resolved if c.analysis and c.analysis.recovery_probability > ACCURATE_PREDICTION_THRESHOLD
    )
    accuracy = round(correctly_predicted / len(resolved) * 100, 1) if resolved else 0.0

    breakdown = {status.value: 0 for status in CaseStatus}
    for c in cases:
        breakdown[c.status.value] += 1

    recovered_now = sum(c.amount for c in this_month(resolved))
    recovered_before = sum(c.amount for c in last_month(resolved))
    active_now, active_before = len(this_month(active)), len(last_month(active))
    risks_now, risks_before = len(this_month(at_risk)), len(last_month(at_risk))

    return PortfolioSummary(
        total_recovered=sum(c.amount for c in resolved),
        recovered_this_month=recovered_now,
        recovered_last_month=recovered_before,
        recovered_trend=month_over_month(recovered_now, recovered_before, no_baseline=100.0),
        active_cases=len(active),
        active_this_month=active_now,
        active_last_month=active_before,
        active_trend=month_over_month(active_now, active_before),
        sla_breach_risks=len(at_risk),
        risks_this_month=risks_now,
        risks_last_month=risks_before,
        risk_trend=month_over_month(risks_now, risks_before),
        prediction_accuracy=accuracy,
        status_breakdown=breakdown,
        recovered_by_month=recovered_by_month(cases, reference),
    )


def partner_performance(cases: Sequence[Case], partners: Sequence[Partner]) -> List[PartnerPerformance]:
    """Recovered amount per partner, best performer first; ties keep directory order"""
    performance = []
    for partner in partners:
        resolved = [
            c for c in cases if c.assigned_partner_id == partner.partner_id and c.status == CaseStatus.RESOLVED
        ]
        performance.append(
            PartnerPerformance(
                partner_id=partner.partner_id,
                name=partner.name,
                recovered_amount=sum(c.amount for c in resolved),
                resolved_cases=len(resolved),
            )
        )
    return sorted(performance, key=lambda p: p.recovered_amount, reverse=True)


def partner_cases(cases: Sequence[Case], partner_id: str, search: Optional[str] = None) -> List[Case]:
    """Cases assigned to one partner, optionally filtered by case id or customer name"""
    scoped = [c for c in cases if c.assigned_partner_id == partner_id]
    if search:
        needle = search.lower()
        scoped = [c for c in scoped if needle in c.case_id.lower() or needle in c.customer_name.lower()]
    return scoped


def partner_stats(cases: Sequence[Case], partner_id: str) -> PartnerStats:
    scoped = partner_cases(cases, partner_id)
    resolved = sum(1 for c in scoped if c.status == CaseStatus.RESOLVED)
    return PartnerStats(
        partner_id=partner_id,
        pending=sum(1 for c in scoped if c.status == CaseStatus.ASSIGNED),
        active=sum(1 for c in scoped if c.status == CaseStatus.IN_PROGRESS),
        resolved=resolved,
        resolution_rate=round(resolved / len(scoped) * 100, 1) if scoped else 0.0,
    )
