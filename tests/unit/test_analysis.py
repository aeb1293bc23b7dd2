"""Unit tests for the stored-history AI health analysis"""

import pytest
from datetime import date
from spendio_gateway.domain.analysis import (
    build_analysis_prompt,
    fallback_health_analysis,
    normalize_analysis,
    prepare_financial_data,
)
from spendio_gateway.domain.models import BalanceSnapshot, DebtItem, MonthTotals, Targets, Transaction

FEB = date(2026, 2, 10)
MAR = date(2026, 3, 10)

HISTORY = {
    "2026-03": [
        Transaction("t3", "income", 3000, MAR, "Salary"),
        Transaction("t4", "expense", 1500, MAR, "Housing"),
        Transaction("t5", "expense", 500, MAR, "Food"),
        Transaction("t6", "savings", 600, MAR, "Savings"),
    ],
    "2026-02": [
        Transaction("t1", "income", 2000, FEB, "Salary"),
        Transaction("t2", "expense", 1000, FEB, "Food"),
    ],
}


@pytest.fixture
def financial_data() -> dict:
    return prepare_financial_data(
        HISTORY,
        BalanceSnapshot(cash=800, emergency=3000),
        [DebtItem("Card", 1500, 75)],
        Targets(savings=5000),
        "EUR",
    )


def test_prepare_totals_and_averages(financial_data: dict):
    assert financial_data["totalIncome"] == 5000
    assert financial_data["totalExpenses"] == 3000
    assert financial_data["avgMonthlyIncome"] == 2500
    assert financial_data["avgMonthlyExpenses"] == 1500
    assert financial_data["savingsRate"] == 12
    assert financial_data["dataPoints"] == 2
    assert [m["month"] for m in financial_data["monthlyData"]] == ["2026-02", "2026-03"]


def test_prepare_debt_and_emergency(financial_data: dict):
    assert financial_data["debtToIncomeRatio"] == 60
    assert financial_data["emergencyFundMonths"] == 2.0
    assert financial_data["benchmarkRatings"]["debtPercentile"] == "below average"
    assert financial_data["expenseByCategory"] == {"Food": 1500, "Housing": 1500}


def test_prepare_month_over_month_trend(financial_data: dict):
    trends = financial_data["trendMetrics"]

    assert trends["monthOverMonthIncomeChange"] == 50.0
    assert trends["monthOverMonthExpenseChange"] == 100.0
    assert trends["monthOverMonthSavingsChange"] == 0
    assert trends["currentTrend"] == "improving"


def test_prompt_uses_prepared_figures(financial_data: dict):
    prompt = build_analysis_prompt(financial_data, "Alex")

    assert "financial health of Alex" in prompt
    assert "- Income: EUR 2500.00" in prompt
    assert "- Expenses: EUR 1500.00 (60.0% of income)" in prompt
    assert "Housing: EUR1500.00" in prompt
    assert "- Income Change (MoM): +50%" in prompt
    assert "- Savings Change (MoM): 0%" in prompt
    assert "- Debt-to-Income: 60% (healthy if < 36%)" in prompt


def test_prompt_without_history():
    data = prepare_financial_data({}, None, [], None, "USD")

    prompt = build_analysis_prompt(data, "Sam")

    assert data["dataPoints"] == 1
    assert "(N/A% of income)" in prompt
    assert data["trendMetrics"]["currentTrend"] == "declining"


def test_normalize_fills_missing_fields():
    result = normalize_analysis({"score": 72.6, "rating": "Good", "strengths": "none"})

    assert result["score"] == 73
    assert result["strengths"] == []
    assert result["summary"] == "Financial health assessment complete."
    assert result["insights"] == ""
    assert result["opportunityAreas"] == []


@pytest.mark.parametrize("raw,expected", [(150, 100), (-3, 0), ("81", 81), ("abc", 50), (True, 50), (None, 50)])
def test_normalize_score(raw, expected):
    assert normalize_analysis({"score": raw})["score"] == expected


def test_fallback_strong_finances():
    result = fallback_health_analysis(
        [MonthTotals(income=3000, expenses=1000, savings=700, investing=200)],
        BalanceSnapshot(emergency=5000),
        [],
    )

    assert result["score"] == 100
    assert result["rating"] == "Excellent"
    assert result["strengths"] == ["Strong savings habit", "Active investment strategy"]
    assert result["insights"] == "Based on 1 months of data: You have positive cash flow with a 23.3% savings rate."


def test_fallback_with_debt_and_no_data():
    result = fallback_health_analysis([], None, [DebtItem("Card", 1500, 75)])

    assert result["score"] == 50
    assert result["rating"] == "Fair"
    assert result["weaknesses"] == ["Outstanding debt"]
    assert result["recommendations"][1] == "Aim to save at least 20% of income"
