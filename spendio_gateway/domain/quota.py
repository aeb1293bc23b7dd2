"""Category quota tracker - plan-tier limits on transactions per month"""

from typing import Dict, Iterable, Mapping, Optional, Union
from spendio_gateway.domain.models import (
    Bucket,
    CategoryCounts,
    PlanStatus,
    QuotaCategory,
    Transaction,
    TransactionType,
)
from spendio_gateway.domain.metrics import normalize_type

# Free plan: 1 transaction per category per month, pro plan: unlimited
FREE_PLAN_LIMIT = 1

TRANSACTION_BUCKETS: Dict[TransactionType, Bucket] = {
    TransactionType.INCOME: Bucket.INCOME,
    TransactionType.EXPENSE: Bucket.EXPENSES,
    TransactionType.SAVINGS: Bucket.SAVINGS,
    TransactionType.INVESTING: Bucket.INVESTING,
    TransactionType.DEBT_PAYMENT: Bucket.DEBTS,
    TransactionType.EMERGENCY_FUND: Bucket.SAVINGS,  # shares the savings allowance
}

CATEGORY_BUCKETS: Dict[QuotaCategory, Bucket] = {
    QuotaCategory.INCOME: Bucket.INCOME,
    QuotaCategory.EXPENSES: Bucket.EXPENSES,
    QuotaCategory.SAVINGS: Bucket.SAVINGS,
    QuotaCategory.INVESTING: Bucket.INVESTING,
    QuotaCategory.DEBT: Bucket.DEBTS,
}

BUCKET_CATEGORIES: Dict[Bucket, QuotaCategory] = {bucket: category for category, bucket in CATEGORY_BUCKETS.items()}


def classify(transaction_type: str) -> Optional[Bucket]:
    """Map a transaction type to its quota bucket, None when unmapped"""
    try:
        return TRANSACTION_BUCKETS[TransactionType(transaction_type)]
    except ValueError:
        return None


def quota_category(transaction_type: str) -> Optional[QuotaCategory]:
    """Category whose allowance a new transaction of this type consumes"""
    bucket = classify(normalize_type(transaction_type))
    return BUCKET_CATEGORIES[bucket] if bucket is not None else None


def count_by_category(transactions: Iterable[Transaction]) -> CategoryCounts:
    """
    Count a month's transactions per bucket.

    Snapshot updates are not transactions and never reach this function.
    Transactions with an unknown type are left out of every bucket.
    """
    counts = CategoryCounts()
    for txn in transactions:
        bucket = classify(txn.type)
        if bucket is not None:
            counts.increment(bucket)
    return counts


def can_add_transaction(
    plan_status: Union[PlanStatus, str, None],
    counts: Union[CategoryCounts, Mapping[str, int]],
    category: Union[QuotaCategory, str],
    limit: int = FREE_PLAN_LIMIT,
) -> bool:
    """
    Check whether one more transaction of `category` fits the month's quota.

    Pro users are unlimited. Free users and users without a subscription
    record share the free limit.
    """
    if not isinstance(plan_status, PlanStatus):
        plan_status = PlanStatus.from_value(plan_status)

    if plan_status is PlanStatus.PRO:
        return True
    elif plan_status is PlanStatus.FREE:
        return transaction_count(counts, category) < limit
    else:
        # No subscription record: same allowance as free
        return transaction_count(counts, category) < limit


def transaction_count(
    counts: Union[CategoryCounts, Mapping[str, int]],
    category: Union[QuotaCategory, str],
) -> int:
    bucket = CATEGORY_BUCKETS[QuotaCategory(category)]
    if isinstance(counts, CategoryCounts):
        return counts[bucket]
    return counts.get(bucket.value, 0)


def is_pro_plan(plan_status: Union[PlanStatus, str, None]) -> bool:
    return PlanStatus.from_value(plan_status) is PlanStatus.PRO


def is_free_plan(plan_status: Union[PlanStatus, str, None]) -> bool:
    return not is_pro_plan(plan_status)


def can_view_full_recommendations(plan_status: Union[PlanStatus, str, None]) -> bool:
    """Full recommendation list is a pro feature"""
    return is_pro_plan(plan_status)
