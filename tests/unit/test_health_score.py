"""Unit tests for the money health score"""

import pytest
from spendio_gateway.domain.models import BalanceSnapshot, DebtItem, MonthTotals
from spendio_gateway.domain.health_score import (
    calculate_health_score,
    cashflow_points,
    debt_points,
    discipline_points,
    recommended_actions,
    score_label,
    trend_points,
)


def test_no_activity_scores_zero():
    result = calculate_health_score(MonthTotals(), BalanceSnapshot(cash=50_000))

    assert result.score == 0
    assert result.has_data is False
    actions = recommended_actions(result)
    assert len(actions) == 1
    assert actions[0].title == "Get Started with Your Finances"


def test_no_income_with_expenses_scores_fifteen():
    result = calculate_health_score(MonthTotals(expenses=500))

    assert result.score == 15
    assert result.breakdown.cashflow_explanation == "No income recorded"


def test_no_income_with_recorded_debt_scores_fifteen():
    result = calculate_health_score(MonthTotals(), debts=[DebtItem("Card", 2000, 100)])
    assert result.score == 15


def test_excellent_month():
    """70% or less allocated, 20%+ saved, low debt, 3+ months emergency fund"""
    totals = MonthTotals(income=5000, expenses=2000, savings=800, investing=400, debt_pay=200)
    snapshot = BalanceSnapshot(cash=3000, emergency=6000)

    result = calculate_health_score(totals, snapshot)

    # 40 cashflow + 25 discipline + 25 debt + 5 neutral trend + 10 emergency bonus
    assert result.score == 100
    assert result.components.cashflow == 40
    assert result.components.discipline == 25
    assert result.components.debt == 25
    assert result.components.trend == 5
    assert result.breakdown.cashflow_ratio == 0.68
    assert result.breakdown.wealth_rate == 24
    assert result.breakdown.debt_ratio == 4
    assert result.breakdown.emergency_fund_months == 3.0
    assert score_label(result.score) == "Excellent control"


def test_overspending_is_capped_at_35():
    totals = MonthTotals(income=2000, expenses=2100, savings=0, investing=0, debt_pay=0)
    snapshot = BalanceSnapshot(emergency=10_000)

    result = calculate_health_score(totals, snapshot)

    assert result.score <= 35
    titles = [a.title for a in recommended_actions(result, snapshot)]
    assert "Overspending Alert" in titles


def test_heavy_debt_is_capped_at_25():
    totals = MonthTotals(income=2000, expenses=200, debt_pay=1200)

    result = calculate_health_score(totals, BalanceSnapshot(cash=5000, emergency=5000))

    assert result.score <= 25
    titles = [a.title for a in recommended_actions(result, BalanceSnapshot(cash=5000, emergency=5000))]
    assert "High Debt Burden" in titles


def test_expected_debt_payments_count_when_higher():
    totals = MonthTotals(income=2000, expenses=500)
    debts = [DebtItem("Mortgage", 150_000, 900), DebtItem("Car", 10_000, 300)]

    result = calculate_health_score(totals, BalanceSnapshot(cash=5000), debts)

    assert result.breakdown.debt_ratio == 60
    assert result.breakdown.monthly_debt_payment == 1200


def test_zero_income_scores_from_balances():
    """Savings without income or spending: rated on total holdings"""
    totals = MonthTotals(income=0, savings=100)

    assert calculate_health_score(totals, BalanceSnapshot(cash=12_000)).score == 55
    assert calculate_health_score(totals, BalanceSnapshot(cash=6_000)).score == 45
    assert calculate_health_score(totals, BalanceSnapshot()).score == 30


def test_cashflow_points_bands():
    assert cashflow_points(0.5) == 40
    assert cashflow_points(0.8) == pytest.approx(32.5)
    assert cashflow_points(0.95) == pytest.approx(17.5)
    assert cashflow_points(1.2) == 0


def test_discipline_points_heavy_debt_floor():
    assert discipline_points(0.0, 0.1) == 0
    assert discipline_points(0.0, 0.4) == 5
    assert discipline_points(0.25, 0.0) == 25


def test_debt_points_low_cash_penalty():
    assert debt_points(0.1, cash_balance=1000, debt_pay=100) == 25
    assert debt_points(0.1, cash_balance=50, debt_pay=100) == 20
    assert debt_points(0.5, cash_balance=0, debt_pay=100) == 0


def test_trend_points():
    previous = MonthTotals(income=2000, expenses=1800, savings=100, debt_pay=100)

    assert trend_points(None, 0.5, 0.1, 0.2) == 5
    assert trend_points(MonthTotals(), 0.5, 0.1, 0.2) == 5
    # better cashflow, lower debt, higher wealth rate: capped at 10
    assert trend_points(previous, 0.5, 0.01, 0.2) == 10
    # worse on every count
    assert trend_points(previous, 1.5, 0.3, 0.0) == 5


def test_trend_uses_previous_month():
    totals = MonthTotals(income=3000, expenses=1500, savings=300)
    previous = MonthTotals(income=2500, expenses=2000, savings=100)

    result = calculate_health_score(totals, BalanceSnapshot(), previous=previous)

    assert result.components.trend == 10
    assert result.breakdown.trend_explanation == "Income trending up. Good momentum."


def test_score_labels():
    assert score_label(90) == "Excellent control"
    assert score_label(72) == "Healthy & stable"
    assert score_label(55) == "Needs attention"
    assert score_label(31) == "Financial stress"
    assert score_label(10) == "High risk"


def test_breakdown_ties_round_up_and_match_explanations():
    result = calculate_health_score(MonthTotals(income=1000, savings=125))

    assert result.breakdown.wealth_rate == 13
    assert result.breakdown.cashflow_ratio == 0.13
    assert "13%" in result.breakdown.cashflow_explanation
    assert "13%" in result.breakdown.wealth_explanation
