"""Money health score - weighted 0-100 rating of a month's finances"""

from typing import List, Optional, Sequence
from spendio_gateway.domain.models import (
    BalanceSnapshot,
    DebtItem,
    HealthBreakdown,
    HealthComponents,
    HealthScore,
    MonthTotals,
    RecommendedAction,
)
from spendio_gateway.utils.number_utils import round_half_up


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _zero_score() -> HealthScore:
    return HealthScore(
        score=0,
        components=HealthComponents(),
        breakdown=HealthBreakdown(
            cashflow_ratio=0,
            cashflow_explanation="No financial data entered yet",
            wealth_rate=0,
            wealth_explanation="Add your income and expenses to get started",
            debt_ratio=0,
            debt_explanation="No debt information",
            trend_explanation="Add monthly data to see trends",
            emergency_fund_months=0,
        ),
        has_data=False,
    )


def _score_from_snapshot(snapshot: BalanceSnapshot) -> HealthScore:
    """Balances without any monthly flow: rate on total holdings alone"""
    total_balance = snapshot.cash + snapshot.savings + snapshot.investing + snapshot.emergency

    score = 30
    if total_balance >= 5000:
        score = 45
    if total_balance >= 10000:
        score = 55

    return HealthScore(
        score=score,
        components=HealthComponents(),
        breakdown=HealthBreakdown(
            cashflow_ratio=0,
            cashflow_explanation="Add income to get started",
            wealth_rate=0,
            wealth_explanation="Good balances, but no income tracked",
            debt_ratio=0,
            debt_explanation="No income data",
            trend_explanation="Need monthly income to analyze trends",
            emergency_fund_months=0,
        ),
    )


def cashflow_points(cashflow_ratio: float) -> float:
    """0-40 pts: full marks up to 70% of income allocated, zero when overspending"""
    if cashflow_ratio <= 0.7:
        points = 40
    elif cashflow_ratio <= 0.9:
        points = 40 - ((cashflow_ratio - 0.7) / 0.2) * 15
    elif cashflow_ratio <= 1.0:
        points = 25 - ((cashflow_ratio - 0.9) / 0.1) * 15
    else:
        points = 0
    return _clamp(points, 0, 40)


def discipline_points(wealth_rate: float, debt_ratio: float) -> float:
    """0-25 pts: full marks at 20%+ of income saved or invested"""
    if wealth_rate >= 0.2:
        points = 25
    elif wealth_rate >= 0.1:
        points = 25 - ((0.2 - wealth_rate) / 0.1) * 10
    elif wealth_rate >= 0.05:
        points = 15 - ((0.1 - wealth_rate) / 0.05) * 7
    elif wealth_rate > 0:
        points = 8 * (wealth_rate / 0.05)
    else:
        points = 0

    # Heavy debt load earns a minimum credit
    if debt_ratio > 0.35 and points < 5:
        points = 5
    return _clamp(points, 0, 25)


def debt_points(debt_ratio: float, cash_balance: float, debt_pay: float) -> float:
    """0-25 pts: full marks at or below 15% of income, minus 5 when cash can't cover a payment"""
    if debt_ratio <= 0.15:
        points = 25
    elif debt_ratio <= 0.3:
        points = 25 - ((debt_ratio - 0.15) / 0.15) * 10
    elif debt_ratio <= 0.4:
        points = 15 - ((debt_ratio - 0.3) / 0.1) * 10
    else:
        points = 0

    if debt_pay > 0 and cash_balance < debt_pay:
        points = max(0, points - 5)
    return _clamp(points, 0, 25)


def trend_points(
    previous: Optional[MonthTotals],
    cashflow_ratio: float,
    debt_ratio: float,
    wealth_rate: float,
) -> int:
    """0-10 pts: 5 neutral, +3 better cashflow, +3 lower debt, +4 steady saving"""
    if previous is None or previous.income <= 0:
        return 5

    prev_outflow = previous.expenses + previous.savings + previous.investing + previous.debt_pay
    prev_cashflow_ratio = prev_outflow / previous.income
    prev_debt_ratio = previous.debt_pay / previous.income
    prev_wealth_rate = (previous.savings + previous.investing) / previous.income

    points = 5
    if cashflow_ratio < prev_cashflow_ratio:
        points += 3
    if debt_ratio < prev_debt_ratio:
        points += 3
    if wealth_rate >= prev_wealth_rate * 0.95:
        points += 4
    return min(10, points)


def emergency_bonus(emergency_months: float) -> int:
    """0-10 pts: 10 for three months of expenses covered, 5 for one"""
    if emergency_months >= 3:
        return 10
    elif emergency_months >= 1:
        return 5
    return 0


def cashflow_explanation(ratio: float) -> str:
    percent = round_half_up(ratio * 100)
    if ratio <= 0.7:
        return f"You allocated {percent}% of income. Excellent control."
    elif ratio <= 0.9:
        return f"You allocated {percent}% of income. Good but watch closely."
    elif ratio <= 1.0:
        return f"You allocated {percent}% of income. Very tight, no margin."
    return f"You allocated {percent}% of income. Overspending detected."


def wealth_explanation(rate: float) -> str:
    percent = round_half_up(rate * 100)
    if rate >= 0.2:
        return f"You saved/invested {percent}% of income. Excellent discipline."
    elif rate >= 0.1:
        return f"You saved/invested {percent}% of income. Good habit."
    elif rate >= 0.05:
        return f"You saved/invested {percent}% of income. Building slowly."
    elif rate > 0:
        return f"You saved/invested {percent}% of income. Start increasing."
    return "No savings or investing this month. Consider setting aside funds."


def debt_explanation(ratio: float) -> str:
    percent = round_half_up(ratio * 100)
    if ratio == 0:
        return "You have no active debt. Perfect position, focus on building wealth."
    elif ratio <= 0.15:
        return f"Debt payments are {percent}% of income. Very manageable and healthy."
    elif ratio <= 0.3:
        return f"Debt payments are {percent}% of income. Monitor and consider accelerating payoff."
    elif ratio <= 0.4:
        return f"Debt payments are {percent}% of income. Heavy burden, prioritize debt reduction."
    return f"Debt payments are {percent}% of income. Critical level, take immediate action."


def trend_explanation(current: MonthTotals, previous: Optional[MonthTotals]) -> str:
    if previous is None:
        return "Add more months of data to see trends."
    if current.income > previous.income:
        return "Income trending up. Good momentum."
    elif current.income < previous.income * 0.9:
        return "Income declining. Watch expenses carefully."
    return "Income stable. Consistent month-to-month."


def calculate_health_score(
    totals: MonthTotals,
    snapshot: Optional[BalanceSnapshot] = None,
    debts: Sequence[DebtItem] = (),
    previous: Optional[MonthTotals] = None,
) -> HealthScore:
    """
    Calculate money health score from 0 (high risk) to 100 (excellent).

    Components:
    - 0-40: Cashflow stability (share of income allocated)
    - 0-25: Savings + investing discipline
    - 0-25: Debt burden
    - 0-10: Trend versus the previous month
    - 0-10: Emergency fund bonus

    Guardrails:
    - Negative remaining cash caps the score at 35
    - Debt payments above 50% of income cap the score at 25

    Debt payments count as the larger of what was paid this month and what
    the recorded debts expect monthly.
    """
    snapshot = snapshot or BalanceSnapshot()
    income = totals.income
    expenses = totals.expenses
    savings = totals.savings
    investing = totals.investing

    debt_pay = totals.debt_pay
    if debts:
        debt_pay = max(debt_pay, sum(d.monthly for d in debts))

    total_activity = income + expenses + savings + investing + debt_pay
    if total_activity == 0:
        return _zero_score()

    if income <= 0:
        if expenses > 0 or debt_pay > 0 or debts:
            return HealthScore(
                score=15,
                components=HealthComponents(),
                breakdown=HealthBreakdown(
                    cashflow_ratio=999,
                    cashflow_explanation="No income recorded",
                    wealth_rate=0,
                    wealth_explanation="Cannot save without income",
                    debt_ratio=999,
                    debt_explanation="No income to pay debt",
                    trend_explanation="Insufficient data",
                    emergency_fund_months=0,
                    monthly_debt_payment=debt_pay,
                ),
            )
        return _score_from_snapshot(snapshot)

    outflow = expenses + savings + investing + debt_pay
    remaining_cash = income - outflow
    cashflow_ratio = outflow / income
    wealth_rate = (savings + investing) / income
    debt_ratio = debt_pay / income

    cashflow_pts = cashflow_points(cashflow_ratio)
    discipline_pts = discipline_points(wealth_rate, debt_ratio)
    debt_pts = debt_points(debt_ratio, snapshot.cash, debt_pay)
    trend_pts = trend_points(previous, cashflow_ratio, debt_ratio, wealth_rate)

    emergency_months = snapshot.emergency / (expenses if expenses > 0 else 1)
    raw_score = cashflow_pts + discipline_pts + debt_pts + trend_pts + emergency_bonus(emergency_months)

    if remaining_cash < 0:
        raw_score = min(raw_score, 35)
    if debt_ratio > 0.5:
        raw_score = min(raw_score, 25)

    return HealthScore(
        score=int(_clamp(round_half_up(raw_score), 0, 100)),
        components=HealthComponents(
            cashflow=round_half_up(cashflow_pts),
            discipline=round_half_up(discipline_pts),
            debt=round_half_up(debt_pts),
            trend=round_half_up(trend_pts),
        ),
        breakdown=HealthBreakdown(
            cashflow_ratio=round_half_up(cashflow_ratio, 2),
            cashflow_explanation=cashflow_explanation(cashflow_ratio),
            wealth_rate=round_half_up(wealth_rate * 100),
            wealth_explanation=wealth_explanation(wealth_rate),
            debt_ratio=round_half_up(debt_ratio * 100),
            debt_explanation=debt_explanation(debt_ratio),
            trend_explanation=trend_explanation(totals, previous),
            emergency_fund_months=round_half_up(emergency_months, 1),
            monthly_debt_payment=debt_pay,
        ),
    )


def recommended_actions(result: HealthScore, snapshot: Optional[BalanceSnapshot] = None) -> List[RecommendedAction]:
    """
    Turn a health score into prioritized actions.

    red: urgent problems, yellow: worth watching, green: things going well.
    """
    snapshot = snapshot or BalanceSnapshot()
    b = result.breakdown

    if not result.has_data:
        return [
            RecommendedAction(
                priority="red",
                title="Get Started with Your Finances",
                description="Add your current account balances and enter your monthly income and expenses to get personalized insights.",
            )
        ]

    actions: List[RecommendedAction] = []

    # red
    if b.cashflow_ratio > 1.0:
        actions.append(RecommendedAction(
            "red", "Overspending Alert",
            "You're spending more than you earn. Immediately reduce expenses or increase income.",
        ))
    if b.debt_ratio > 40:
        actions.append(RecommendedAction(
            "red", "High Debt Burden",
            "Debt payments exceed 40% of income. Focus on paying down debt or increasing income.",
        ))
    if b.debt_ratio > 20 and snapshot.cash < b.monthly_debt_payment:
        actions.append(RecommendedAction(
            "red", "Low Cash Reserve",
            "Your cash balance is low relative to debt payments. Build an emergency buffer.",
        ))
    if snapshot.emergency == 0 and b.cashflow_ratio > 0.8:
        actions.append(RecommendedAction(
            "red", "No Emergency Fund",
            "You have no emergency cushion. Start building one, even a small monthly amount helps.",
        ))

    # yellow
    if 0.9 < b.cashflow_ratio <= 1.0:
        actions.append(RecommendedAction(
            "yellow", "Tight Cashflow",
            "You have very little margin. Small unexpected costs could cause problems.",
        ))
    if 25 < b.debt_ratio <= 40:
        actions.append(RecommendedAction(
            "yellow", "Moderate Debt",
            "Your debt payments are significant. Consider accelerating payoff or refinancing.",
        ))
    if 0 < b.wealth_rate < 5:
        actions.append(RecommendedAction(
            "yellow", "Low Savings Rate",
            "You're saving less than 5%. Try to increase to 10%+ for financial security.",
        ))

    # green
    if 0 < b.cashflow_ratio < 0.85:
        actions.append(RecommendedAction(
            "green", "Healthy Cashflow",
            "Good spending control. Keep maintaining this balance.",
        ))
    if 0 <= b.debt_ratio < 20:
        actions.append(RecommendedAction(
            "green", "Manageable Debt",
            "Debt is under control. You have room in your budget for savings.",
        ))
    if b.wealth_rate >= 10:
        actions.append(RecommendedAction(
            "green", "Strong Savings Discipline",
            "Excellent job saving 10%+. Keep building wealth.",
        ))
    if b.emergency_fund_months >= 1:
        actions.append(RecommendedAction(
            "green", "Emergency Fund Building",
            f"You have {b.emergency_fund_months} months of expenses saved. Continue building.",
        ))

    return actions


def score_label(score: int) -> str:
    if score >= 85:
        return "Excellent control"
    elif score >= 70:
        return "Healthy & stable"
    elif score >= 50:
        return "Needs attention"
    elif score >= 30:
        return "Financial stress"
    return "High risk"
