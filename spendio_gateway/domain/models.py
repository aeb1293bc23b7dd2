"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, fields
from datetime import date
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Transaction types recorded by the finance tracker"""

    INCOME = "income"
    EXPENSE = "expense"
    SAVINGS = "savings"
    INVESTING = "investing"
    DEBT_PAYMENT = "debt_payment"
    EMERGENCY_FUND = "emergency_fund"


class Bucket(str, Enum):
    """Monthly quota buckets"""

    INCOME = "income"
    EXPENSES = "expenses"
    SAVINGS = "savings"
    INVESTING = "investing"
    DEBTS = "debts"


class QuotaCategory(str, Enum):
    """Categories a caller asks permission for when adding a transaction"""

    INCOME = "income"
    EXPENSES = "expenses"
    SAVINGS = "savings"
    INVESTING = "investing"
    DEBT = "debt"


class PlanStatus(str, Enum):
    """Subscription tier: pro, free, or no subscription record at all"""

    PRO = "pro"
    FREE = "free"
    NONE = "none"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "PlanStatus":
        if value == "pro":
            return cls.PRO
        if value == "free":
            return cls.FREE
        return cls.NONE


@dataclass(frozen=True)
class MonthTotals:
    """Aggregated sums for one calendar month"""

    income: float = 0
    expenses: float = 0
    savings: float = 0
    investing: float = 0
    debt_pay: float = 0

    @property
    def net(self) -> float:
        return self.income - self.expenses - self.savings - self.investing - self.debt_pay


@dataclass(frozen=True)
class BalanceSnapshot:
    """Point-in-time account balances"""

    cash: float = 0
    savings: float = 0
    emergency: float = 0
    investing: float = 0
    debt: float = 0


@dataclass
class Transaction:
    """Single ledger entry within a month"""

    transaction_id: str
    type: str  # see TransactionType; unknown values are allowed
    amount: float
    date: date
    category: str = ""
    sub_category: Optional[str] = None
    name: str = ""


@dataclass(frozen=True)
class DebtItem:
    """Outstanding debt with its monthly payment"""

    name: str
    total: float
    monthly: float
    type: str = "other"


@dataclass(frozen=True)
class Targets:
    """Monthly savings and investing targets"""

    savings: float = 0
    investing: float = 0


@dataclass(frozen=True)
class DerivedMetrics:
    """Financial-health ratios in percent, emergency fund in months"""

    cashflow_ratio: float
    wealth_rate: float
    debt_ratio: float
    emergency_fund_months: float


@dataclass
class CategoryCounts:
    """Transaction counts per quota bucket for one month"""

    income: int = 0
    expenses: int = 0
    savings: int = 0
    investing: int = 0
    debts: int = 0

    def __getitem__(self, bucket: Bucket) -> int:
        return getattr(self, Bucket(bucket).value)

    def increment(self, bucket: Bucket) -> None:
        name = Bucket(bucket).value
        setattr(self, name, getattr(self, name) + 1)

    def total(self) -> int:
        return sum(getattr(self, f.name) for f in fields(self))


@dataclass
class HealthBreakdown:
    """Per-component explanation of a health score"""

    cashflow_ratio: float  # fraction of income allocated, 2 dp
    cashflow_explanation: str
    wealth_rate: int  # percent of income saved or invested
    wealth_explanation: str
    debt_ratio: int  # percent of income going to debt payments
    debt_explanation: str
    trend_explanation: str
    emergency_fund_months: float
    monthly_debt_payment: float = 0


@dataclass
class HealthComponents:
    cashflow: int = 0
    discipline: int = 0
    debt: int = 0
    trend: int = 0


@dataclass
class HealthScore:
    """Money health score (0-100) with its components"""

    score: int
    components: HealthComponents
    breakdown: HealthBreakdown
    has_data: bool = True


@dataclass
class RecommendedAction:
    priority: str  # "red" | "yellow" | "green"
    title: str
    description: str



@dataclass(frozen=True)
class MonthHealth:
    """Five-metric monthly rating, each metric worth 0-25 points"""

    income_score: int
    expense_score: int
    savings_score: int
    debt_score: int
    adherence_score: int
    total: int
    explanation: str


@dataclass(frozen=True)
class MetricChange:
    current: int
    previous: int
    change: int


@dataclass(frozen=True)
class HealthTrend:
    """Average monthly health of the last 3 months against the 3 before"""

    current_score: int
    previous_score: int
    change_points: int
    trend: str  # "improving" | "declining" | "stable"
    current_period: str
    previous_period: str
    income_stability: MetricChange
    expense_control: MetricChange
    savings_rate: MetricChange
    debt_management: MetricChange


@dataclass(frozen=True)
class HealthTip:
    category: str  # "income" | "expenses" | "savings" | "debt" | "goals"
    priority: str  # "high" | "medium" | "low"
    title: str
    description: str
    actionable: str


@dataclass(frozen=True)
class TransactionAssessment:
    """Risk feedback on a transaction before it is recorded"""

    risk_level: str  # "green" | "yellow" | "red"
    title: str
    message: str
    recommendation: str
    should_warn: bool
