"""Per-month financial health endpoints: metrics, monthly health, advisor context and quota"""

from dataclasses import asdict
from typing import List, NamedTuple, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from spendio_gateway.api.v1.schemas import (
    CategoryCountsSchema,
    DerivedMetricsSchema,
    FinancialContextResponse,
    HealthBreakdownSchema,
    HealthComponentsSchema,
    HealthScoreSchema,
    HealthTipSchema,
    HealthTrendSchema,
    MonthHealthResponse,
    MonthHealthSchema,
    MonthMetricsResponse,
    QuotaResponse,
    RecommendedActionSchema,
    TotalsSchema,
)
from spendio_gateway.api.dependencies import get_user_profile, valid_month
from spendio_gateway.config import settings
from spendio_gateway.domain.health_score import calculate_health_score, recommended_actions, score_label
from spendio_gateway.domain.metrics import build_financial_context, compute_derived_metrics, compute_month_totals
from spendio_gateway.domain.month_health import calculate_health_trend, calculate_month_health, generate_tips, has_month_data
from spendio_gateway.domain.models import (
    BalanceSnapshot,
    DebtItem,
    MonthTotals,
    PlanStatus,
    QuotaCategory,
    Targets,
    Transaction,
)
from spendio_gateway.domain.quota import (
    can_add_transaction,
    can_view_full_recommendations,
    count_by_category,
    is_free_plan,
)
from spendio_gateway.infrastructure.database.models import UserProfile
from spendio_gateway.infrastructure.database.repositories import (
    DebtRepository,
    SnapshotRepository,
    TargetsRepository,
    TransactionRepository,
    to_debt,
    to_snapshot,
    to_transaction,
)
from spendio_gateway.infrastructure.database.session import get_db
from spendio_gateway.utils.date_utils import previous_month

router = APIRouter()

# Recommended actions shown to users without a pro plan
FREE_ACTIONS_SHOWN = 2


class MonthData(NamedTuple):
    transactions: List[Transaction]
    totals: MonthTotals
    snapshot: Optional[BalanceSnapshot]
    debts: List[DebtItem]
    targets: Targets


def load_month(db: Session, user_id: str, month: str) -> MonthData:
    """Fetch a month's stored data and rebuild its totals"""
    transactions = [to_transaction(r) for r in TransactionRepository(db).get_by_month(user_id, month)]
    return MonthData(
        transactions=transactions,
        totals=compute_month_totals(transactions),
        snapshot=to_snapshot(SnapshotRepository(db).get_latest(user_id)),
        debts=[to_debt(r) for r in DebtRepository(db).get_debts(user_id)],
        targets=TargetsRepository(db).get_targets(user_id),
    )


@router.get("/users/{user_id}/months/{month}/metrics", response_model=MonthMetricsResponse)
def get_month_metrics(
    month: str = Depends(valid_month),
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """
    Derived ratios, category counts and money health score for a month.

    The previous month's totals feed the trend component.
    """
    data = load_month(db, profile.id, month)
    snapshot = data.snapshot or BalanceSnapshot()

    prev_records = TransactionRepository(db).get_by_month(profile.id, previous_month(month))
    previous = compute_month_totals(to_transaction(r) for r in prev_records) if prev_records else None

    health = calculate_health_score(data.totals, snapshot, data.debts, previous)
    actions = recommended_actions(health, snapshot)
    if not can_view_full_recommendations(profile.subscription_status):
        actions = actions[:FREE_ACTIONS_SHOWN]

    return MonthMetricsResponse(
        user_id=profile.id,
        month=month,
        totals=TotalsSchema(**asdict(data.totals), net=data.totals.net),
        metrics=DerivedMetricsSchema(**asdict(compute_derived_metrics(data.totals, snapshot))),
        counts=CategoryCountsSchema(**asdict(count_by_category(data.transactions))),
        health=HealthScoreSchema(
            score=health.score,
            label=score_label(health.score),
            components=HealthComponentsSchema(**asdict(health.components)),
            breakdown=HealthBreakdownSchema(**asdict(health.breakdown)),
        ),
        actions=[RecommendedActionSchema(**asdict(a)) for a in actions],
    )


@router.get("/users/{user_id}/months/{month}/context", response_model=FinancialContextResponse)
def get_financial_context(
    month: str = Depends(valid_month),
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """Financial summary block for the advisor chat prompt"""
    data = load_month(db, profile.id, month)
    context = build_financial_context(month, data.totals, data.snapshot, data.debts, data.targets)
    return FinancialContextResponse(user_id=profile.id, month=month, financial_context=context)


@router.get("/users/{user_id}/months/{month}/quota", response_model=QuotaResponse)
def get_month_quota(
    month: str = Depends(valid_month),
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """Which categories still accept a transaction this month"""
    data = load_month(db, profile.id, month)
    counts = count_by_category(data.transactions)
    plan = PlanStatus.from_value(profile.subscription_status)

    return QuotaResponse(
        user_id=profile.id,
        month=month,
        plan=plan.value,
        limit=settings.free_plan_limit if is_free_plan(plan) else None,
        counts=CategoryCountsSchema(**asdict(counts)),
        can_add={
            category.value: can_add_transaction(plan, counts, category, limit=settings.free_plan_limit)
            for category in QuotaCategory
        },
    )


@router.get("/users/{user_id}/months/{month}/health", response_model=MonthHealthResponse)
def get_month_health(
    month: str = Depends(valid_month),
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """
    Five-metric monthly rating, the 3-month trend and tips.

    The previous month feeds income stability and savings adherence when it
    has activity. The trend is omitted until both 3-month windows hold data.
    """
    history = {
        key: compute_month_totals(to_transaction(r) for r in records)
        for key, records in TransactionRepository(db).get_by_months(profile.id).items()
    }
    totals = history.get(month, MonthTotals())
    previous = history.get(previous_month(month))
    if previous is not None and not has_month_data(previous):
        previous = None

    health = calculate_month_health(totals, previous)
    trend = calculate_health_trend(history, month)

    return MonthHealthResponse(
        user_id=profile.id,
        month=month,
        health=MonthHealthSchema(**asdict(health)),
        trend=HealthTrendSchema(**asdict(trend)) if trend is not None else None,
        tips=[HealthTipSchema(**asdict(tip)) for tip in generate_tips(health, trend)],
    )
