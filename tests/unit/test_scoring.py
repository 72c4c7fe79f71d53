"""Unit tests for case scoring logic"""

import pytest
from dataclasses import replace
from recovery_engine.domain.models import Actor, AuditAction, CaseStatus, Partner, SlaBreachRisk
from recovery_engine.domain.scoring import (
    analyze_case,
    calculate_priority_score,
    calculate_recovery_probability,
    classify_sla_breach_risk,
    score_case,
    select_best_partner,
)
from recovery_engine.domain.exceptions import InvalidInputError, NoPartnersAvailableError


def test_analyze_case_high_value_example(make_case, partners):
    """60k at 40 days: 100 - 20 + 10 bonus"""
    analysis = analyze_case(make_case(amount=60_000, days_overdue=40), partners)

    assert analysis.recovery_probability == 90
    assert analysis.priority_score == 70  # min(50, 60) + min(50, 20)
    assert analysis.sla_breach_risk == SlaBreachRisk.LOW


def test_analyze_case_old_debt_example(make_case, partners):
    analysis = analyze_case(make_case(amount=10_000, days_overdue=160), partners)

    assert analysis.recovery_probability == 20
    assert analysis.priority_score == 60
    assert analysis.sla_breach_risk == SlaBreachRisk.HIGH


def test_recovery_probability_clamped(make_case):
    assert calculate_recovery_probability(make_case(amount=0, days_overdue=0)) == 100
    assert calculate_recovery_probability(make_case(amount=90_000, days_overdue=0)) == 100
    assert calculate_recovery_probability(make_case(amount=0, days_overdue=1000)) == 0


def test_recovery_probability_floors_half_points(make_case):
    # 100 - 0.5 * 3 = 98.5
    assert calculate_recovery_probability(make_case(amount=0, days_overdue=3)) == 98


def test_recovery_probability_bonus_is_strictly_above_threshold(make_case):
    assert calculate_recovery_probability(make_case(amount=50_000, days_overdue=40)) == 80
    assert calculate_recovery_probability(make_case(amount=50_000.01, days_overdue=40)) == 90


@pytest.mark.parametrize("amount", [0, 25_000, 50_000, 75_000])
def test_recovery_probability_never_increases_with_age(make_case, amount):
    scores = [calculate_recovery_probability(make_case(amount=amount, days_overdue=d)) for d in range(0, 400)]

    assert all(0 <= s <= 100 for s in scores)
    assert all(later <= earlier for earlier, later in zip(scores, scores[1:]))


def test_priority_axes_saturate_independently(make_case):
    # Huge amount cannot push past its own 50-point ceiling
    assert calculate_priority_score(make_case(amount=10_000_000, days_overdue=0)) == 50
    assert calculate_priority_score(make_case(amount=0, days_overdue=10_000)) == 50
    assert calculate_priority_score(make_case(amount=10_000_000, days_overdue=10_000)) == 100
    assert calculate_priority_score(make_case(amount=1_500, days_overdue=3)) == 3  # floor(1.5 + 1.5)


def test_priority_bounds(make_case):
    for amount in (0, 999, 49_999, 120_000):
        for days in (0, 1, 99, 101, 365):
            assert 0 <= calculate_priority_score(make_case(amount=amount, days_overdue=days)) <= 100


def test_sla_risk_only_low_or_high():
    assert classify_sla_breach_risk(49) == SlaBreachRisk.HIGH
    assert classify_sla_breach_risk(50) == SlaBreachRisk.LOW
    assert all(classify_sla_breach_risk(p) != SlaBreachRisk.MEDIUM for p in range(0, 101))


def test_recommended_partner_first_occurrence_on_tie(make_case):
    partners = [
        Partner("A", "Alpha", 0.7, 0, 10),
        Partner("B", "Bravo", 0.9, 0, 10),
        Partner("C", "Charlie", 0.9, 0, 10),
    ]

    analysis = analyze_case(make_case(), partners)

    assert analysis.recommended_partner_id == "B"
    assert "Bravo" in analysis.rationale


def test_rationale_mentions_probability_days_and_partner(make_case, partners):
    analysis = analyze_case(make_case(amount=10_000, days_overdue=160), partners)

    assert "20%" in analysis.rationale
    assert "160 days" in analysis.rationale
    assert "Internal Ops" in analysis.rationale


def test_select_best_partner_empty():
    with pytest.raises(NoPartnersAvailableError):
        select_best_partner([], key=lambda p: p.capacity)


def test_analyze_case_empty_partner_list(make_case):
    with pytest.raises(InvalidInputError):
        analyze_case(make_case(), [])


@pytest.mark.parametrize("overrides", [{"amount": -1}, {"days_overdue": -5}])
def test_analyze_case_rejects_negative_figures(make_case, partners, overrides):
    with pytest.raises(InvalidInputError):
        analyze_case(make_case(**overrides), partners)


def test_score_case_moves_new_to_ai_processed(make_case, partners, now):
    case = make_case()
    scored = score_case(case, partners, now=now)

    assert scored.status == CaseStatus.AI_PROCESSED
    assert scored.analysis.recommended_partner_id == "dca-003"
    entry = scored.audit_log[-1]
    assert entry.action == AuditAction.AI_SCORING
    assert entry.actor == Actor.AI_ENGINE
    assert entry.timestamp == now

    # Input untouched
    assert case.status == CaseStatus.NEW
    assert case.analysis is None
    assert case.audit_log == ()


def test_rescoring_replaces_analysis(make_case, partners):
    first = score_case(make_case(days_overdue=10), partners)
    aged = replace(first, days_overdue=150)
    second = score_case(aged, partners)

    assert second.analysis.recovery_probability == 25
    assert len(second.audit_log) == 2


def test_score_case_keeps_later_status(make_case, partners):
    scored = score_case(make_case(status=CaseStatus.IN_PROGRESS), partners)
    assert scored.status == CaseStatus.IN_PROGRESS


def test_score_case_failure_leaves_case_untouched(make_case):
    case = make_case()
    with pytest.raises(InvalidInputError):
        score_case(case, [])
    assert case.status == CaseStatus.NEW
    assert case.audit_log == ()


def test_partner_rejects_rate_outside_unit_interval():
    with pytest.raises(InvalidInputError):
        Partner("X", "Bad Rate", 1.2, 0, 10)
    with pytest.raises(InvalidInputError):
        Partner("Y", "Negative", 0.5, -1, 10)
