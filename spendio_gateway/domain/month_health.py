"""Monthly health rating, quarter-over-quarter trend, tips and pre-add transaction checks"""

from typing import List, Mapping, Optional
from spendio_gateway.domain.metrics import normalize_type
from spendio_gateway.domain.models import (
    HealthTip,
    HealthTrend,
    MetricChange,
    MonthHealth,
    MonthTotals,
    TransactionAssessment,
    TransactionType,
)
from spendio_gateway.utils.date_utils import shift_month
from spendio_gateway.utils.number_utils import format_currency, round_half_up

# Average score change (points) beyond which a trend is improving or declining
TREND_THRESHOLD = 5


def has_month_data(totals: MonthTotals) -> bool:
    return any(
        value > 0
        for value in (totals.income, totals.expenses, totals.savings, totals.investing, totals.debt_pay)
    )


def income_stability_score(income: float, previous: Optional[MonthTotals]) -> int:
    """0-25 pts: how close income is to last month's"""
    if income <= 0:
        return 0
    if previous is None or previous.income <= 0:
        return 15

    stability = income / previous.income
    if 0.95 <= stability <= 1.05:
        return 25
    elif 0.9 <= stability <= 1.1:
        return 20
    elif 0.8 <= stability <= 1.2:
        return 15
    elif stability >= 0.7:
        return 10
    return 5


def expense_control_score(totals: MonthTotals) -> int:
    """
    0-25 pts: share of income actively allocated.

    60-100% earns full marks. Money left idle scores low, and so does
    allocating more than was earned.
    """
    if totals.income <= 0:
        return 0

    allocated = totals.expenses + totals.savings + totals.investing + totals.debt_pay
    ratio = allocated / totals.income
    if 0.6 <= ratio <= 1.0:
        return 25
    elif 0.5 <= ratio < 0.6:
        return 20
    elif 0.4 <= ratio < 0.5:
        return 15
    elif 0.3 <= ratio < 0.4:
        return 8
    return 0


def savings_rate_score(totals: MonthTotals) -> int:
    """0-25 pts: savings plus investing as a share of income"""
    if totals.income <= 0:
        return 0

    rate = (totals.savings + totals.investing) / totals.income
    if rate >= 0.25:
        return 25
    elif rate >= 0.2:
        return 23
    elif rate >= 0.15:
        return 20
    elif rate >= 0.1:
        return 15
    elif rate >= 0.05:
        return 10
    elif rate > 0:
        return 5
    return 0


def debt_management_score(totals: MonthTotals) -> int:
    """0-25 pts: lower debt payments relative to income score higher"""
    if totals.income <= 0:
        return 20 if totals.debt_pay == 0 else 0

    ratio = totals.debt_pay / totals.income
    if ratio == 0:
        return 25
    elif ratio <= 0.1:
        return 24
    elif ratio <= 0.2:
        return 20
    elif ratio <= 0.35:
        return 15
    elif ratio <= 0.5:
        return 8
    return 0


def adherence_score(savings: float, previous: Optional[MonthTotals]) -> int:
    """0-25 pts: consistency of the savings amount with last month"""
    if previous is not None and previous.savings > 0 and savings > 0:
        consistency = savings / previous.savings
        if 0.9 <= consistency <= 1.1:
            return 25
        elif 0.8 <= consistency <= 1.2:
            return 20
        elif 0.6 <= consistency <= 1.4:
            return 15
        return 8
    elif savings > 0:
        return 15
    return 5


def month_explanation(totals: MonthTotals) -> str:
    income = totals.income
    if income == 0:
        return "No income recorded this month."

    ratio = (totals.expenses + totals.savings + totals.investing + totals.debt_pay) / income
    allocated = round_half_up(ratio * 100)
    unallocated = round_half_up((1 - ratio) * 100)
    savings_rate = (totals.savings + totals.investing) / income
    debt_ratio = totals.debt_pay / income

    parts = []
    if ratio > 1:
        parts.append(f"You allocated {allocated}% of income (overspending - more than you earned).")
    elif ratio >= 0.6:
        parts.append(f"Good allocation - you're actively managing {allocated}% of income.")
    elif ratio >= 0.4:
        parts.append(
            f"Moderate allocation - only {allocated}% of income is allocated, {unallocated}% is unaccounted for."
        )
    elif ratio >= 0.3:
        parts.append(f"Poor allocation - only {allocated}% of income is allocated, {unallocated}% is sitting idle.")
    else:
        parts.append(
            f"CRITICAL allocation - only {allocated}% of income is allocated, {unallocated}% is unaccounted for."
        )

    if savings_rate >= 0.15:
        parts.append("Strong savings rate.")
    elif savings_rate >= 0.05:
        parts.append("Building wealth gradually.")
    elif savings_rate == 0:
        parts.append("No savings or investing, money isn't working for you.")
    else:
        parts.append("Low savings.")

    if debt_ratio > 0.35:
        parts.append("High debt burden.")
    elif debt_ratio > 0.1:
        parts.append("Manageable debt.")
    elif debt_ratio > 0:
        parts.append("Minimal debt.")
    else:
        parts.append("No debt payments.")

    return "This month: " + " ".join(parts)


def calculate_month_health(totals: MonthTotals, previous: Optional[MonthTotals] = None) -> MonthHealth:
    """
    Rate one month on five 0-25 metrics.

    Metrics: income stability, expense control, savings rate, debt management
    and savings adherence. Stability and adherence compare against `previous`
    when it is given. A month without any activity scores 0.
    """
    if not has_month_data(totals):
        return MonthHealth(0, 0, 0, 0, 0, 0, "No financial data recorded this month")

    scores = (
        income_stability_score(totals.income, previous),
        expense_control_score(totals),
        savings_rate_score(totals),
        debt_management_score(totals),
        adherence_score(totals.savings, previous),
    )
    return MonthHealth(*scores, total=sum(scores), explanation=month_explanation(totals))


def _average(values: List[int]) -> float:
    return sum(values) / len(values)


def _metric_change(current: List[MonthHealth], previous: List[MonthHealth], attr: str) -> MetricChange:
    now = round_half_up(_average([getattr(h, attr) for h in current]))
    before = round_half_up(_average([getattr(h, attr) for h in previous]))
    return MetricChange(current=now, previous=before, change=now - before)


def calculate_health_trend(months: Mapping[str, MonthTotals], current_month: str) -> Optional[HealthTrend]:
    """
    Compare average monthly health of the 3 months ending at `current_month`
    with the 3 months before them.

    `months` maps YYYY-MM keys to totals for every month with records.
    Returns None unless both windows hold at least one month with activity.

    Raises:
        ValueError: when current_month is not a YYYY-MM key
    """
    current_keys = [shift_month(current_month, -2), shift_month(current_month, -1), current_month]
    previous_keys = [shift_month(current_month, -5), shift_month(current_month, -4), shift_month(current_month, -3)]

    if not any(k in months and has_month_data(months[k]) for k in current_keys):
        return None
    if not any(k in months and has_month_data(months[k]) for k in previous_keys):
        return None

    current = [calculate_month_health(months[k]) for k in current_keys if k in months]
    previous = [calculate_month_health(months[k]) for k in previous_keys if k in months]

    current_avg = _average([h.total for h in current])
    previous_avg = _average([h.total for h in previous])
    change_points = round_half_up(current_avg - previous_avg)

    if change_points > TREND_THRESHOLD:
        trend = "improving"
    elif change_points < -TREND_THRESHOLD:
        trend = "declining"
    else:
        trend = "stable"

    return HealthTrend(
        current_score=round_half_up(current_avg),
        previous_score=round_half_up(previous_avg),
        change_points=change_points,
        trend=trend,
        current_period=f"Last 3 months ({current_keys[0]} to {current_month})",
        previous_period=f"3 months prior ({previous_keys[0]} to {previous_keys[2]})",
        income_stability=_metric_change(current, previous, "income_score"),
        expense_control=_metric_change(current, previous, "expense_score"),
        savings_rate=_metric_change(current, previous, "savings_score"),
        debt_management=_metric_change(current, previous, "debt_score"),
    )


def generate_tips(health: MonthHealth, trend: Optional[HealthTrend] = None) -> List[HealthTip]:
    """Advice per metric, plus a trend tip when the quarter moved clearly"""
    tips: List[HealthTip] = []

    # income
    if health.income_score == 0:
        tips.append(HealthTip(
            "income", "high", "No income recorded",
            "Start by tracking your monthly income to get personalized financial insights.",
            "Go to Financial Data and add your income sources",
        ))
    elif health.income_score < 10:
        tips.append(HealthTip(
            "income", "high", "Income is unstable",
            "Your income varies significantly month-to-month. This makes budgeting difficult.",
            "Build an emergency fund to cover 3-6 months of expenses",
        ))
    elif trend is not None and trend.income_stability.change < -5:
        tips.append(HealthTip(
            "income", "medium", "Income is declining",
            f"Your income dropped {abs(trend.income_stability.change)} points compared to last quarter.",
            "Review income sources and consider side income if needed",
        ))

    # expenses
    if health.expense_score == 0:
        tips.append(HealthTip(
            "expenses", "high", "Money not being allocated productively",
            "Less than 30% of income is being used (expenses + savings + debt). Most money is just sitting idle.",
            "Create a budget: allocate 60-100% of income to expenses (50-70%), savings (10-20%), or debt (0-30%)",
        ))
    elif health.expense_score < 10:
        tips.append(HealthTip(
            "expenses", "high", "Poor income allocation",
            "Only 30-40% of income is allocated. The rest is unaccounted for, which isn't 'saving', it's neglect.",
            "Build a spending plan: allocate every dollar to either expenses, savings, or investing",
        ))
    elif health.expense_score < 15:
        tips.append(HealthTip(
            "expenses", "medium", "Low income allocation",
            "Only 40-50% of income is being managed. Increase allocation to 60%+ for better control.",
            "Increase either expenses, savings, or debt payments to fully utilize your income",
        ))

    # savings
    if health.savings_score == 0:
        tips.append(HealthTip(
            "savings", "high", "You're not saving anything",
            "Building wealth requires consistent savings. Start small if needed.",
            "Allocate even 5% of income to savings and automate it to make it effortless",
        ))
    elif health.savings_score < 10:
        tips.append(HealthTip(
            "savings", "medium", "Low savings rate",
            "You're saving less than 5% of income. Aim for 10-20%.",
            "Review expenses, find $100-200/month to redirect to savings",
        ))
    elif health.savings_score >= 20:
        tips.append(HealthTip(
            "savings", "low", "Excellent savings discipline",
            "You're saving 20%+ of income. Keep up this momentum!",
            "Consider diversifying: spread savings across emergency fund, investments, and goals",
        ))

    # debt
    if health.debt_score == 25:
        tips.append(HealthTip(
            "debt", "low", "Debt-free! Focus on wealth building",
            "With no debt payments, you can fully focus on saving and investing.",
            "Increase your savings rate to 15%+ or invest in long-term goals",
        ))
    elif health.debt_score < 10:
        tips.append(HealthTip(
            "debt", "high", "High debt burden",
            "Debt payments exceed 35% of income. This limits your financial flexibility.",
            "Create a debt payoff plan: pay off smallest balance first OR highest interest rate first",
        ))
    elif health.debt_score < 20 and trend is not None and trend.debt_management.change < 0:
        tips.append(HealthTip(
            "debt", "medium", "Debt payments are increasing",
            "Your debt burden score declined. Avoid taking on new debt.",
            "Redirect extra income toward debt payoff",
        ))

    # goals
    if health.adherence_score < 10:
        tips.append(HealthTip(
            "goals", "medium", "Inconsistent savings pattern",
            "Your savings amounts vary significantly. Make it a fixed habit.",
            "Set up automatic transfers for the same day each month",
        ))
    elif health.adherence_score >= 20:
        tips.append(HealthTip(
            "goals", "low", "Consistent with your goals",
            "You're maintaining steady progress on your savings targets.",
            "Consider increasing targets as your income grows",
        ))

    if trend is not None:
        if trend.trend == "improving":
            tips.append(HealthTip(
                "goals", "low", f"Health score improved by {trend.change_points} points",
                "Your financial health is trending positively. Maintain this trajectory!",
                "Review what's working (lower expenses? higher income?) and double down on it",
            ))
        elif trend.trend == "declining":
            tips.append(HealthTip(
                "goals", "high", f"Health score declined by {abs(trend.change_points)} points",
                "Your financial situation has worsened over the last 3 months.",
                "Review the metrics that dropped most and address them immediately",
            ))

    return tips


def _percent(part: float, whole: float) -> int:
    return round_half_up(part / whole * 100)


def assess_transaction(
    totals: MonthTotals,
    transaction_type: str,
    amount: float,
    currency: str = "EUR",
) -> TransactionAssessment:
    """
    Judge a transaction against the month's totals before it is added.

    red and yellow results set should_warn so the caller can ask for
    confirmation. Types other than expense, savings, investing and debt
    payment are always green.
    """
    tx_type = normalize_type(transaction_type)
    income = totals.income

    def money(value: float) -> str:
        return format_currency(value, currency)

    if income <= 0:
        if tx_type == TransactionType.EXPENSE.value:
            return TransactionAssessment(
                "red", "No income recorded",
                "You haven't recorded any income this month. Adding expenses without income will drain your savings.",
                "Record your income first, then add expenses.",
                True,
            )
        if tx_type == TransactionType.DEBT_PAYMENT.value:
            return TransactionAssessment(
                "red", "No income recorded",
                "Paying debt without recorded income could strain your finances.",
                "Record your income first.",
                True,
            )

    if tx_type == TransactionType.EXPENSE.value:
        total_would_be = totals.expenses + amount
        ratio = total_would_be / income

        if amount > income * 0.5:
            return TransactionAssessment(
                "red", "Very large expense",
                f"This {money(amount)} expense is {_percent(amount, income)}% of your monthly income ({money(income)}).",
                "Is this a necessary purchase? Consider waiting or finding a cheaper alternative.",
                True,
            )
        if ratio > 1:
            return TransactionAssessment(
                "red", "Will exceed monthly income",
                f"Adding {money(amount)} will bring total expenses to {money(total_would_be)}, "
                f"which exceeds income of {money(income)}.",
                "This will result in deficit spending. Reduce expenses or increase income.",
                True,
            )
        if ratio > 0.8:
            return TransactionAssessment(
                "yellow", "High expense ratio",
                f"With this expense, you'll spend {round_half_up(ratio * 100)}% of income, "
                f"leaving only {round_half_up((1 - ratio) * 100)}% for savings/debt.",
                "You'll have very little left to save. Consider postponing this purchase.",
                True,
            )
        return TransactionAssessment(
            "green", "Purchase looks reasonable",
            f"This {money(amount)} expense is sustainable. You'll still have funds for savings/debt.",
            "Go ahead with this purchase.",
            False,
        )

    if tx_type == TransactionType.SAVINGS.value:
        if income <= 0:
            return TransactionAssessment(
                "yellow", "Very high savings rate",
                "You're saving without any recorded income. Ensure you cover all expenses first.",
                "Good habit, but don't over-save at the expense of essential spending.",
                True,
            )
        if amount > income * 0.5:
            return TransactionAssessment(
                "yellow", "Large savings deposit",
                f"You're saving {money(amount)}, which is {_percent(amount, income)}% of income.",
                "That's aggressive saving! Make sure you have enough for essential expenses.",
                True,
            )
        ratio = (totals.savings + amount) / income
        if ratio > 0.5:
            return TransactionAssessment(
                "yellow", "Very high savings rate",
                f"You'll be saving {round_half_up(ratio * 100)}% of income. Ensure you cover all expenses first.",
                "Good habit, but don't over-save at the expense of essential spending.",
                True,
            )
        return TransactionAssessment(
            "green", "Good savings move",
            f"Saving {money(amount)} is a smart choice for building wealth.",
            "Continue this habit!",
            False,
        )

    if tx_type == TransactionType.INVESTING.value:
        if income > 0 and amount > income * 0.3:
            return TransactionAssessment(
                "yellow", "Large investment amount",
                f"You're investing {money(amount)}, which is {_percent(amount, income)}% of income.",
                "Good for growth, but ensure you have an emergency fund (3-6 months expenses).",
                True,
            )
        return TransactionAssessment(
            "green", "Solid investment",
            f"Investing {money(amount)} will help build long-term wealth.",
            "Great decision!",
            False,
        )

    if tx_type == TransactionType.DEBT_PAYMENT.value:
        ratio = (totals.debt_pay + amount) / income

        if amount > income * 0.5:
            return TransactionAssessment(
                "red", "Very large debt payment",
                f"This {money(amount)} payment is {_percent(amount, income)}% of your monthly income.",
                "Verify you can afford this and still cover essential expenses.",
                True,
            )
        if ratio > 0.5:
            return TransactionAssessment(
                "red", "Debt payments exceed 50% of income",
                f"Your total debt payments would be {round_half_up(ratio * 100)}% of income, this is unsustainable.",
                "Consider negotiating lower payment amounts with creditors.",
                True,
            )
        if ratio > 0.3:
            return TransactionAssessment(
                "yellow", "High debt payment ratio",
                f"Debt payments will be {round_half_up(ratio * 100)}% of income. Monitor your budget carefully.",
                "You're managing debt, but watch for over-commitment.",
                True,
            )
        return TransactionAssessment(
            "green", "Good debt payment",
            f"Paying {money(amount)} towards debt is manageable and reduces your liability.",
            "Keep up the debt payoff plan!",
            False,
        )

    return TransactionAssessment(
        "green", "Transaction ready",
        "This transaction is ready to add.",
        "Proceed.",
        False,
    )
