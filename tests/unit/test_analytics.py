"""Unit tests for portfolio and partner metrics"""

from datetime import datetime, timezone
from recovery_engine.domain.models import Analysis, CaseStatus, SlaBreachRisk
from recovery_engine.domain.analytics import partner_cases, partner_performance, partner_stats, summarize_portfolio
from recovery_engine.utils.date_utils import is_previous_month


def _analysis(probability, risk=SlaBreachRisk.LOW):
    return Analysis(probability, 50, risk, "dca-001", "test")


def test_summarize_portfolio(make_case, now):
    last_month = datetime(2024, 2, 10, tzinfo=timezone.utc)
    cases = [
        make_case("R1", amount=1000, status=CaseStatus.RESOLVED, analysis=_analysis(90)),
        make_case("R2", amount=500, status=CaseStatus.RESOLVED, analysis=_analysis(60), created_at=last_month),
        make_case("A1", status=CaseStatus.ASSIGNED, analysis=_analysis(20, SlaBreachRisk.HIGH)),
        make_case("N1"),
        make_case("C1", status=CaseStatus.CLOSED),
    ]

    summary = summarize_portfolio(cases, now=now)

    assert summary.total_recovered == 1500
    assert summary.recovered_this_month == 1000
    assert summary.recovered_last_month == 500
    assert summary.active_cases == 2
    assert summary.sla_breach_risks == 1
    assert summary.prediction_accuracy == 50.0
    assert summary.status_breakdown["RESOLVED"] == 2
    assert summary.status_breakdown["ESCALATED"] == 0


def test_summarize_empty_portfolio(now):
    summary = summarize_portfolio([], now=now)
    assert summary.total_recovered == 0
    assert summary.prediction_accuracy == 0.0


def test_previous_month_wraps_year():
    january = datetime(2024, 1, 5, tzinfo=timezone.utc)
    assert is_previous_month(datetime(2023, 12, 31, tzinfo=timezone.utc), january)
    assert not is_previous_month(datetime(2024, 12, 1, tzinfo=timezone.utc), january)


def test_partner_performance(make_case, partners):
    cases = [
        make_case("1", amount=300, status=CaseStatus.RESOLVED, assigned_partner_id="dca-001"),
        make_case("2", amount=200, status=CaseStatus.RESOLVED, assigned_partner_id="dca-001"),
        make_case("3", amount=999, status=CaseStatus.IN_PROGRESS, assigned_partner_id="dca-001"),
    ]

    performance = partner_performance(cases, partners)

    assert [p.partner_id for p in performance] == [p.partner_id for p in partners]
    assert performance[0].recovered_amount == 500
    assert performance[0].resolved_cases == 2
    assert performance[1].recovered_amount == 0


def test_partner_scoped_views_only_see_own_cases(make_case):
    cases = [
        make_case("A", status=CaseStatus.ASSIGNED, assigned_partner_id="dca-001"),
        make_case("B", status=CaseStatus.IN_PROGRESS, assigned_partner_id="dca-001", customer_name="Hooli"),
        make_case("C", status=CaseStatus.RESOLVED, assigned_partner_id="dca-001"),
        make_case("D", status=CaseStatus.RESOLVED, assigned_partner_id="dca-002"),
    ]

    assert [c.case_id for c in partner_cases(cases, "dca-002")] == ["D"]
    assert [c.case_id for c in partner_cases(cases, "dca-001", search="hoo")] == ["B"]

    stats = partner_stats(cases, "dca-001")
    assert (stats.pending, stats.active, stats.resolved) == (1, 1, 1)
    assert stats.resolution_rate == 33.3


def test_partner_stats_without_cases(make_case):
    stats = partner_stats([make_case()], "dca-005")
    assert stats.resolution_rate == 0.0


def test_month_over_month_trends(make_case, now):
    february = datetime(2024, 2, 20, tzinfo=timezone.utc)
    high = _analysis(20, SlaBreachRisk.HIGH)
    cases = [
        make_case("R-MAR", amount=1500, status=CaseStatus.RESOLVED),
        make_case("R-FEB", amount=1000, status=CaseStatus.RESOLVED, created_at=february),
        make_case("A-MAR-1", analysis=high),
        make_case("A-MAR-2", analysis=high),
        make_case("A-MAR-3"),
        make_case("A-FEB", created_at=february, analysis=high),
        make_case("A-FEB-2", created_at=february),
    ]

    summary = summarize_portfolio(cases, now=now)

    assert summary.recovered_trend == 50.0
    assert (summary.active_this_month, summary.active_last_month) == (3, 2)
    assert summary.active_trend == 50.0
    assert (summary.risks_this_month, summary.risks_last_month) == (2, 1)
    assert summary.risk_trend == 100.0


def test_trends_without_last_month_baseline(make_case, now):
    summary = summarize_portfolio([make_case("R", status=CaseStatus.RESOLVED), make_case("N")], now=now)

    # Recovered reads as full growth, volume and risk as flat
    assert summary.recovered_trend == 100.0
    assert summary.active_trend == 0.0
    assert summary.risk_trend == 0.0


def test_recovered_by_month_covers_trailing_year(make_case, now):
    cases = [
        make_case("1", amount=700, status=CaseStatus.RESOLVED),
        make_case("2", amount=300, status=CaseStatus.RESOLVED, created_at=datetime(2023, 4, 2, tzinfo=timezone.utc)),
        make_case("3", amount=999, status=CaseStatus.RESOLVED, created_at=datetime(2023, 3, 30, tzinfo=timezone.utc)),
        make_case("4", amount=50, status=CaseStatus.IN_PROGRESS),
    ]

    series = summarize_portfolio(cases, now=now).recovered_by_month

    assert len(series) == 12
    assert series[0].month == "2023-04"
    assert series[-1].month == "2024-03"
    assert series[0].recovered == 300
    assert series[-1].recovered == 700
    assert sum(m.recovered for m in series) == 1000


def test_partner_performance_sorted_by_recovered_amount(make_case, partners):
    cases = [
        make_case("1", amount=100, status=CaseStatus.RESOLVED, assigned_partner_id="dca-001"),
        make_case("2", amount=900, status=CaseStatus.RESOLVED, assigned_partner_id="dca-004"),
    ]

    performance = partner_performance(cases, partners)

    assert [p.partner_id for p in performance] == ["dca-004", "dca-001", "dca-002", "dca-003", "dca-005"]
