"""Financial-health metrics engine - pure functions over month totals and balances"""

from dataclasses import replace
from typing import Iterable, Optional, Sequence
from spendio_gateway.domain.models import (
    BalanceSnapshot,
    DebtItem,
    DerivedMetrics,
    MonthTotals,
    Targets,
    Transaction,
    TransactionType,
)
from spendio_gateway.utils.number_utils import format_number, round_half_up

# Income sources the tracker files under income besides the plain "income" type
INCOME_TYPES = {"income", "salary", "business", "freelance", "investments", "side_hustle"}


def normalize_type(transaction_type: str) -> str:
    """
    Canonical type for a transaction as it is stored, gated and applied.

    Income sources collapse to "income" and "expense" matches regardless of
    case. Other types pass through unchanged.
    """
    lowered = (transaction_type or "").lower()
    if lowered in INCOME_TYPES:
        return TransactionType.INCOME.value
    if lowered == TransactionType.EXPENSE.value:
        return TransactionType.EXPENSE.value
    return transaction_type


def compute_net(totals: MonthTotals) -> float:
    """Money left after expenses, savings, investing and debt payments"""
    return totals.net


def compute_month_totals(transactions: Iterable[Transaction]) -> MonthTotals:
    """
    Rebuild a month's totals from its transaction list.

    Emergency-fund contributions move the snapshot balance only, so they are
    not part of any monthly total.
    """
    income = expenses = savings = investing = debt_pay = 0
    for txn in transactions:
        tx_type = normalize_type(txn.type)
        if tx_type == TransactionType.INCOME.value:
            income += txn.amount
        elif tx_type == TransactionType.EXPENSE.value:
            expenses += txn.amount
        elif tx_type == TransactionType.SAVINGS.value:
            savings += txn.amount
        elif tx_type == TransactionType.INVESTING.value:
            investing += txn.amount
        elif tx_type == TransactionType.DEBT_PAYMENT.value:
            debt_pay += txn.amount

    return MonthTotals(
        income=income,
        expenses=expenses,
        savings=savings,
        investing=investing,
        debt_pay=debt_pay,
    )


def apply_to_snapshot(snapshot: BalanceSnapshot, transaction_type: str, amount: float) -> BalanceSnapshot:
    """
    Balances after recording a transaction; pass a negated amount to undo one.

    Returns a new snapshot, the input is left untouched.
    """
    transaction_type = normalize_type(transaction_type)
    if transaction_type == TransactionType.INCOME.value:
        return replace(snapshot, cash=snapshot.cash + amount)
    elif transaction_type in (TransactionType.EXPENSE.value, TransactionType.DEBT_PAYMENT.value):
        return replace(snapshot, cash=snapshot.cash - amount)
    elif transaction_type == TransactionType.SAVINGS.value:
        return replace(snapshot, savings=snapshot.savings + amount)
    elif transaction_type == TransactionType.INVESTING.value:
        return replace(snapshot, investing=snapshot.investing + amount)
    elif transaction_type == TransactionType.EMERGENCY_FUND.value:
        return replace(snapshot, emergency=snapshot.emergency + amount)
    elif transaction_type == "cash_adjustment":
        return replace(snapshot, cash=snapshot.cash + amount)
    return snapshot


def compute_derived_metrics(totals: MonthTotals, snapshot: BalanceSnapshot) -> DerivedMetrics:
    """
    Turn month totals and a balance snapshot into health ratios.

    Ratios are percentages of income. Income is floored at 1 so a month
    without income still yields finite ratios (0 < income < 1 is floored
    the same way). Emergency-fund coverage is only computed when both the
    fund and the month's expenses are positive.
    """
    denominator = max(totals.income, 1)
    outflow = totals.expenses + totals.savings + totals.investing + totals.debt_pay

    cashflow_ratio = outflow / denominator * 100
    wealth_rate = (totals.savings + totals.investing) / denominator * 100
    debt_ratio = totals.debt_pay / denominator * 100

    if snapshot.emergency > 0 and totals.expenses > 0:
        emergency_fund_months = snapshot.emergency / totals.expenses
    else:
        emergency_fund_months = 0

    return DerivedMetrics(
        cashflow_ratio=round_half_up(cashflow_ratio, 1),
        wealth_rate=round_half_up(wealth_rate, 1),
        debt_ratio=round_half_up(debt_ratio, 1),
        emergency_fund_months=round_half_up(emergency_fund_months, 1),
    )


def build_financial_context(
    month: str,
    totals: Optional[MonthTotals],
    snapshot: Optional[BalanceSnapshot],
    debts: Sequence[DebtItem] = (),
    targets: Optional[Targets] = None,
) -> str:
    """Render the financial summary embedded into the advisor chat prompt"""
    totals = totals or MonthTotals()
    snapshot = snapshot or BalanceSnapshot()
    targets = targets or Targets()
    metrics = compute_derived_metrics(totals, snapshot)

    if debts:
        debt_lines = "\n".join(
            f"- {d.name}: {format_number(d.total)} total, {format_number(d.monthly)}/month" for d in debts
        )
    else:
        debt_lines = "- No debts recorded"

    return f"""
Current Month: {month}

Monthly Financials:
- Income: {format_number(totals.income)}
- Expenses: {format_number(totals.expenses)}
- Savings: {format_number(totals.savings)}
- Investing: {format_number(totals.investing)}
- Debt Payments: {format_number(totals.debt_pay)}
- Monthly Net: {format_number(compute_net(totals))}

Account Balances (Snapshot):
- Cash: {format_number(snapshot.cash)}
- Savings Account: {format_number(snapshot.savings)}
- Emergency Fund: {format_number(snapshot.emergency)}
- Investing Account: {format_number(snapshot.investing)}

Financial Health Metrics:
- Cashflow Ratio: {metrics.cashflow_ratio:.1f}%
- Wealth Rate: {metrics.wealth_rate:.1f}%
- Debt Ratio: {metrics.debt_ratio:.1f}%
- Emergency Fund: {metrics.emergency_fund_months:.1f} months of expenses

Debts:
{debt_lines}

Savings & Investing Targets:
- Savings Target: {format_number(targets.savings)}
- Investing Target: {format_number(targets.investing)}
"""
