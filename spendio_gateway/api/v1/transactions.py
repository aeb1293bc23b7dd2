"""Transaction endpoints with free-plan quota gating and pre-add risk checks"""

import uuid
import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from spendio_gateway.api.v1.schemas import (
    TransactionAssessmentSchema,
    TransactionAssessRequest,
    TransactionCreate,
    TransactionListResponse,
    TransactionSchema,
)
from spendio_gateway.api.dependencies import get_request_id, get_user_profile, valid_month
from spendio_gateway.config import settings
from spendio_gateway.domain.metrics import apply_to_snapshot, compute_month_totals, normalize_type
from spendio_gateway.domain.month_health import assess_transaction
from spendio_gateway.domain.models import BalanceSnapshot, PlanStatus, Transaction
from spendio_gateway.domain.quota import can_add_transaction, count_by_category, quota_category
from spendio_gateway.infrastructure.database.models import UserProfile
from spendio_gateway.infrastructure.database.repositories import (
    SnapshotRepository,
    TransactionRepository,
    to_snapshot,
    to_transaction,
)
from spendio_gateway.infrastructure.database.session import get_db
from spendio_gateway.infrastructure.observability.logging import log_quota_decision
from spendio_gateway.infrastructure.observability.metrics import quota_denial_counter, transactions_created_counter
from spendio_gateway.utils.date_utils import month_key

router = APIRouter()


def _schema(txn: Transaction) -> TransactionSchema:
    return TransactionSchema(
        transaction_id=txn.transaction_id,
        type=txn.type,
        amount=txn.amount,
        date=txn.date,
        category=txn.category,
        sub_category=txn.sub_category,
        name=txn.name,
    )


def _move_snapshot(db: Session, user_id: str, transaction_type: str, amount: float) -> None:
    """Store the balances after a transaction as the newest snapshot"""
    snapshot_repo = SnapshotRepository(db)
    current = to_snapshot(snapshot_repo.get_latest(user_id)) or BalanceSnapshot()
    updated = apply_to_snapshot(current, transaction_type, amount)
    if updated != current:
        snapshot_repo.create_snapshot(user_id, updated)


@router.post("/users/{user_id}/transactions", response_model=TransactionSchema, status_code=201)
def create_transaction(
    request_body: TransactionCreate,
    request: Request,
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """
    Record a transaction if the user's plan allows it.

    Flow:
    Income sources such as "salary" are stored as "income" and use its allowance.

    1. Count the target month's transactions per category
    2. Reject with 403 when a free (or unsubscribed) user used up the category
    3. Persist the transaction and move the snapshot balances
    """
    request_id = get_request_id(request)
    txn_repo = TransactionRepository(db)
    month = month_key(request_body.date)
    tx_type = normalize_type(request_body.type)

    category = quota_category(tx_type)
    if category is not None:
        month_txns = [to_transaction(r) for r in txn_repo.get_by_month(profile.id, month)]
        counts = count_by_category(month_txns)
        plan = PlanStatus.from_value(profile.subscription_status)
        allowed = can_add_transaction(plan, counts, category, limit=settings.free_plan_limit)
        log_quota_decision(request_id, profile.id, category.value, plan.value, allowed)

        if not allowed:
            quota_denial_counter.labels(category=category.value).inc()
            raise HTTPException(
                status_code=403,
                detail=(
                    f"Free plan allows {settings.free_plan_limit} {category.value} transaction(s) "
                    f"per month. Upgrade to Pro for unlimited transactions."
                ),
            )

    try:
        record = txn_repo.create_transaction(
            profile.id,
            type=tx_type,
            amount=request_body.amount,
            date=request_body.date,
            cat=request_body.category,
            sub_cat=request_body.sub_category,
            name=request_body.name,
        )
        _move_snapshot(db, profile.id, tx_type, request_body.amount)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to record transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    transactions_created_counter.labels(type=tx_type).inc()
    return _schema(to_transaction(record))


@router.post("/users/{user_id}/transactions/assess", response_model=TransactionAssessmentSchema)
def assess_new_transaction(
    request_body: TransactionAssessRequest,
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """Risk feedback on a transaction against its month, nothing is recorded"""
    records = TransactionRepository(db).get_by_month(profile.id, month_key(request_body.date))
    totals = compute_month_totals(to_transaction(r) for r in records)
    assessment = assess_transaction(totals, request_body.type, request_body.amount, currency=profile.currency)
    return TransactionAssessmentSchema(**asdict(assessment))

@router.get("/users/{user_id}/transactions", response_model=TransactionListResponse)
def list_transactions(
    month: str = Query(..., description="Month as YYYY-MM"),
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """Transactions for one month, newest first"""
    month = valid_month(month)
    records = TransactionRepository(db).get_by_month(profile.id, month)
    return TransactionListResponse(
        user_id=profile.id,
        month=month,
        transactions=[_schema(to_transaction(r)) for r in records],
    )


@router.delete("/users/{user_id}/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: str,
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """Delete a transaction and undo its effect on the snapshot balances"""
    try:
        txn_uuid = uuid.UUID(transaction_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid transaction ID format")

    txn_repo = TransactionRepository(db)
    record = txn_repo.get_transaction(profile.id, txn_uuid)
    if record is None:
        raise HTTPException(status_code=404, detail="Transaction not found")

    _move_snapshot(db, profile.id, record.type, -record.amt)
    txn_repo.delete_transaction(record)
    db.commit()
    return Response(status_code=204)
