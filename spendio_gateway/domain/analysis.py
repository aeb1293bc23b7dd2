"""Server-side AI health analysis: payload, prompt, reply normalization and fallback score"""

from numbers import Number
from typing import Any, Dict, List, Mapping, Optional, Sequence
from spendio_gateway.domain.metrics import compute_month_totals, normalize_type
from spendio_gateway.domain.models import BalanceSnapshot, DebtItem, MonthTotals, Targets, Transaction, TransactionType
from spendio_gateway.utils.number_utils import format_number, round_half_up

BENCHMARKS = {
    "avgSavingsRate": 20,
    "avgInvestmentRate": 5,
    "avgDebtToIncome": 36,  # recommended max
    "recommendedEmergencyFund": 6,  # months of expenses
    "avgExpenseRatio": 70,
}

DEFAULT_SCORE = 50

LIST_FIELDS = (
    "strengths",
    "weaknesses",
    "recommendations",
    "personalizedGoals",
    "riskFactors",
    "opportunityAreas",
)

TEXT_FIELDS = ("insights", "benchmarkComparison", "trendAnalysis")


def _growth(current: float, previous: float) -> float:
    """Month-over-month change in percent, 0 without a previous amount"""
    if previous > 0:
        return (current - previous) / previous * 100
    return 0


def _signed(value: float) -> str:
    return f"+{format_number(value)}" if value > 0 else format_number(value)


def rating_for(score: float) -> str:
    if score >= 80:
        return "Excellent"
    elif score >= 60:
        return "Good"
    elif score >= 40:
        return "Fair"
    return "Poor"


def prepare_financial_data(
    transactions_by_month: Mapping[str, Sequence[Transaction]],
    snapshot: Optional[BalanceSnapshot],
    debts: Sequence[DebtItem],
    targets: Optional[Targets],
    currency: str,
) -> Dict[str, Any]:
    """
    Summarize a user's whole history for the health analysis.

    The result is the `financialData` payload: totals and monthly averages,
    rates, debt and emergency-fund coverage, expenses per category, the last
    month-over-month changes and benchmark ratings.
    """
    snapshot = snapshot or BalanceSnapshot()
    targets = targets or Targets()

    monthly_stats: List[Dict[str, Any]] = []
    expense_by_category: Dict[str, float] = {}
    for month in sorted(transactions_by_month):
        txns = transactions_by_month[month]
        totals = compute_month_totals(txns)
        monthly_stats.append({
            "month": month,
            "income": totals.income,
            "expenses": totals.expenses,
            "savings": totals.savings,
            "investing": totals.investing,
            "debtPayments": totals.debt_pay,
        })
        for txn in txns:
            if normalize_type(txn.type) == TransactionType.EXPENSE.value:
                expense_by_category[txn.category] = expense_by_category.get(txn.category, 0) + txn.amount

    total_income = sum(m["income"] for m in monthly_stats)
    total_expenses = sum(m["expenses"] for m in monthly_stats)
    total_savings = sum(m["savings"] for m in monthly_stats)
    total_investing = sum(m["investing"] for m in monthly_stats)
    total_debt_payments = sum(m["debtPayments"] for m in monthly_stats)

    income_growth = expense_growth = savings_growth = 0
    if len(monthly_stats) >= 2:
        current, previous = monthly_stats[-1], monthly_stats[-2]
        income_growth = _growth(current["income"], previous["income"])
        expense_growth = _growth(current["expenses"], previous["expenses"])
        savings_growth = _growth(current["savings"], previous["savings"])

    num_months = len(monthly_stats) or 1
    avg_income = total_income / num_months
    avg_expenses = total_expenses / num_months
    savings_rate = total_savings / total_income * 100 if avg_income > 0 else 0
    investment_rate = total_investing / total_income * 100 if avg_income > 0 else 0

    total_debt_amount = sum(d.total for d in debts)
    debt_to_income = total_debt_amount / avg_income * 100 if avg_income > 0 else 0
    emergency_months = snapshot.emergency / avg_expenses if avg_expenses > 0 else 0

    return {
        "currency": currency,
        "totalIncome": total_income,
        "totalExpenses": total_expenses,
        "totalSavings": total_savings,
        "totalInvesting": total_investing,
        "totalDebtPayments": total_debt_payments,
        "avgMonthlyIncome": avg_income,
        "avgMonthlyExpenses": avg_expenses,
        "savingsRate": round_half_up(savings_rate),
        "investmentRate": round_half_up(investment_rate),
        "currentCash": snapshot.cash,
        "emergencyFund": snapshot.emergency,
        "savingsTarget": snapshot.savings,
        "investmentAmount": snapshot.investing,
        "debtAmount": snapshot.debt,
        "debtCount": len(debts),
        "totalDebtAmount": total_debt_amount,
        "debtToIncomeRatio": round_half_up(debt_to_income),
        "emergencyFundMonths": round_half_up(emergency_months, 1),
        "expenseByCategory": expense_by_category,
        "savingsGoal": targets.savings,
        "investingGoal": targets.investing,
        "monthlyData": monthly_stats,
        "dataPoints": num_months,
        "trendMetrics": {
            "monthOverMonthIncomeChange": round_half_up(income_growth, 1),
            "monthOverMonthExpenseChange": round_half_up(expense_growth, 1),
            "monthOverMonthSavingsChange": round_half_up(savings_growth, 1),
            "currentTrend": "improving" if income_growth > 0 else "declining",
        },
        "benchmarks": dict(BENCHMARKS),
        "benchmarkRatings": {
            "savingsPercentile": "above average" if savings_rate >= BENCHMARKS["avgSavingsRate"] else "below average",
            "investmentPercentile": (
                "above average" if investment_rate >= BENCHMARKS["avgInvestmentRate"] else "below average"
            ),
            "debtPercentile": "above average" if debt_to_income <= BENCHMARKS["avgDebtToIncome"] else "below average",
        },
    }


def build_analysis_prompt(data: Mapping[str, Any], user_name: str) -> str:
    """User message for the health-score model, filled with the prepared figures"""
    cur = data["currency"]
    trends = data["trendMetrics"]
    ratings = data["benchmarkRatings"]
    points = data["dataPoints"]
    avg_income = data["avgMonthlyIncome"]
    avg_expenses = data["avgMonthlyExpenses"]
    emergency_months = data["emergencyFundMonths"]

    top_expenses = ", ".join(
        f"{cat}: {cur}{amount:.2f}"
        for cat, amount in sorted(data["expenseByCategory"].items(), key=lambda item: item[1], reverse=True)[:5]
    )
    expense_ratio = f"{avg_expenses / avg_income * 100:.1f}" if avg_income > 0 else "N/A"
    monthly_savings = avg_income - avg_expenses - data["totalInvesting"] / points
    savings_gap = 0.20 * avg_income - data["totalSavings"] / points

    return f"""
You are analyzing the financial health of {user_name}. Provide a REALISTIC, SPECIFIC, and ACTIONABLE assessment. Avoid generic statements - focus on their actual numbers and situation.

=== FINANCIAL SNAPSHOT ===

Monthly Flow:
- Income: {cur} {avg_income:.2f}
- Expenses: {cur} {avg_expenses:.2f} ({expense_ratio}% of income)
- Savings: {cur} {monthly_savings:.2f}/month
- Top Spending: {top_expenses}

Wealth Building:
- Savings Rate: {data['savingsRate']}% (industry avg: 20%)
- Investment Rate: {data['investmentRate']}% (industry avg: 5%)
- Total Saved: {cur} {data['totalSavings']:.2f}
- Total Invested: {cur} {data['totalInvesting']:.2f}

Financial Safety:
- Emergency Fund: {cur} {data['emergencyFund']:.2f} ({emergency_months:.1f} months of expenses, target: 6 months)
- Total Liquid Cash: {cur} {data['currentCash']:.2f}
- Debt Amount: {cur} {data['totalDebtAmount']:.2f} across {data['debtCount']} accounts
- Debt-to-Income: {data['debtToIncomeRatio']}% (healthy if < 36%)

Growth Trends:
- Income Change (MoM): {_signed(trends['monthOverMonthIncomeChange'])}%
- Expense Change (MoM): {_signed(trends['monthOverMonthExpenseChange'])}%
- Savings Change (MoM): {_signed(trends['monthOverMonthSavingsChange'])}%
- Overall Trend: {trends['currentTrend']}

=== SCORING FRAMEWORK ===

CRITICAL SUCCESS FACTORS:
1. Income Stability: Is income consistent? Growing? Declining?
2. Expense Control: Are they overspending relative to income? Can they cut back?
3. Emergency Readiness: Do they have 3-6 months emergency fund? If not, how critical is it?
4. Debt Management: Is debt manageable relative to income? Are they paying it down?
5. Wealth Building: Are they saving/investing enough for their age and goals?
6. Goal Progress: How close are they to their stated savings/investing targets?

=== ANALYSIS REQUIREMENTS ===

Score (0-100):
- 80-100: Excellent financial health with strong savings, manageable debt, emergency fund in place
- 60-79: Good health but needs improvement in one area (savings, emergency fund, or debt)
- 40-59: Fair - multiple areas need work, moderate financial stress
- 0-39: Poor - serious financial issues need immediate attention

Rating: Must match score (Poor/Fair/Good/Excellent)

Summary: 2-3 sentences describing their overall financial situation. Be honest about what's working and what isn't.

Strengths: List 2-3 SPECIFIC strengths based on their actual numbers. Examples:
- "Consistent income of {cur}{round_half_up(avg_income)}/month with positive month-over-month growth"
- "Strong emergency fund of {emergency_months:.1f} months" (if > 3)
- "Low debt-to-income ratio at {data['debtToIncomeRatio']}%"
- "Saving {data['savingsRate']}% of income"

Weaknesses: List 2-3 SPECIFIC areas needing improvement:
- "Emergency fund only covers {emergency_months:.1f} months of expenses (need 6)"
- "Debt-to-income ratio of {data['debtToIncomeRatio']}% is above the healthy 36% threshold"
- "Savings rate of {data['savingsRate']}% is below the recommended 20%"

Recommendations: 3-5 SPECIFIC, MEASURABLE actions:
- If savings low: "Increase savings by {cur}{savings_gap:.2f}/month to reach 20% savings rate"
- If emergency fund low: "Build emergency fund to {cur}{round_half_up(avg_expenses * 6)} (currently {cur}{round_half_up(data['emergencyFund'])})"
- If expenses high: "Top categories are {top_expenses} - review these for potential cuts"
- Specific debt payoff timeline if they have debt

Insights: Detailed analysis of patterns. Examples:
- "Your expenses are trending [up/down] by {format_number(abs(trends['monthOverMonthExpenseChange']))}% month-over-month, which suggests [discipline/concern]"
- "Compared to industry averages, your {ratings['savingsPercentile']} savings rate"
- "At current savings rate of {cur}{round_half_up(data['totalSavings'] / points)}/month, you'll reach your {cur}{round_half_up(data['savingsGoal'])} goal in approximately [X] months"

TrendAnalysis: How their financial situation is evolving:
- Month-over-month changes in income, expenses, savings
- Trajectory (improving/declining/stable)
- Sustainability of current spending patterns

BenchmarkComparison: How they stack up:
- vs. typical person their age (if you can infer age)
- vs. industry averages
- Areas where they're ahead and behind

PersonalizedGoals: 2-3 specific, achievable financial goals based on their situation

RiskFactors: 1-3 specific risks to watch:
- Low emergency fund
- High debt-to-income ratio
- Volatile income
- Expense creep

OpportunityAreas: 2-3 biggest opportunities:
- Specific expense categories to cut
- Savings targets to increase
- Debt payoff timeline improvements
- Income growth opportunities

=== IMPORTANT ===
Be CRITICAL but CONSTRUCTIVE. Don't sugarcoat if they're in a bad situation, but provide hope and a roadmap. Use their actual numbers throughout. Avoid generic advice.
"""


def _score_value(raw: Any) -> int:
    """Model scores outside 0-100 are clamped, anything non-numeric becomes the default"""
    if isinstance(raw, bool):
        return DEFAULT_SCORE
    if not isinstance(raw, Number):
        try:
            raw = float(raw)
        except (TypeError, ValueError):
            return DEFAULT_SCORE
    if raw != raw:  # NaN
        return DEFAULT_SCORE
    return round_half_up(max(0, min(100, raw)))


def normalize_analysis(analysis: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill the fields a model reply left out or got the wrong type for"""
    result: Dict[str, Any] = {
        "score": _score_value(analysis.get("score")),
        "rating": analysis.get("rating") or "Good",
        "summary": analysis.get("summary") or "Financial health assessment complete.",
    }
    for field in LIST_FIELDS:
        value = analysis.get(field)
        result[field] = value if isinstance(value, list) else []
    for field in TEXT_FIELDS:
        result[field] = analysis.get(field) or ""
    return result


def fallback_health_analysis(
    month_totals: Sequence[MonthTotals],
    snapshot: Optional[BalanceSnapshot],
    debts: Sequence[DebtItem],
) -> Dict[str, Any]:
    """
    Rule-based analysis used when the model is unavailable or its reply unusable.

    Starts from 50 and adds points for savings above 20%, investing above 5%,
    no debts, three months of expenses in the emergency fund and positive
    cash flow.
    """
    snapshot = snapshot or BalanceSnapshot()
    total_income = sum(t.income for t in month_totals)
    total_expenses = sum(t.expenses for t in month_totals)
    total_savings = sum(t.savings for t in month_totals)
    total_investing = sum(t.investing for t in month_totals)

    num_months = len(month_totals) or 1
    savings_rate = total_savings / total_income * 100 if total_income > 0 else 0
    investment_rate = total_investing / total_income * 100 if total_income > 0 else 0

    score = DEFAULT_SCORE
    if savings_rate > 20:
        score += 15
    if investment_rate > 5:
        score += 10
    if not debts:
        score += 10
    if snapshot.emergency > total_expenses / num_months * 3:
        score += 10
    if total_income > total_expenses:
        score += 5
    score = min(100, max(0, score))

    cash_flow = "positive" if total_income > total_expenses else "negative"
    return normalize_analysis({
        "score": score,
        "rating": rating_for(score),
        "summary": "Financial health assessment based on your spending and savings patterns.",
        "strengths": [
            "Strong savings habit" if savings_rate > 20 else "Consistent spending tracking",
            "Active investment strategy" if investment_rate > 5 else "Potential for growth",
        ],
        "weaknesses": ["Outstanding debt" if debts else "Opportunity to build more wealth"],
        "recommendations": [
            "Continue tracking expenses regularly",
            "Aim to save at least 20% of income" if savings_rate < 20 else "Maintain your savings discipline",
            "Consider building an emergency fund of 3-6 months",
        ],
        "insights": (
            f"Based on {num_months} months of data: You have {cash_flow} cash flow "
            f"with a {savings_rate:.1f}% savings rate."
        ),
    })
