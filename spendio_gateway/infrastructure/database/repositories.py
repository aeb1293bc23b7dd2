"""Data access layer for the finance tracker tables"""

import uuid
from datetime import date
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from spendio_gateway.infrastructure.database.models import (
    DebtRecord,
    FinancialTargets,
    SnapshotRecord,
    TransactionRecord,
    UserProfile,
)
from spendio_gateway.domain.models import BalanceSnapshot, DebtItem, Targets, Transaction
from spendio_gateway.utils.date_utils import month_bounds, month_key


def to_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(
        transaction_id=str(record.id),
        type=record.type,
        amount=record.amt,
        date=record.date,
        category=record.cat,
        sub_category=record.sub_cat,
        name=record.name,
    )


def to_debt(record: DebtRecord) -> DebtItem:
    return DebtItem(name=record.name, total=record.total, monthly=record.monthly, type=record.type)


def to_snapshot(record: Optional[SnapshotRecord]) -> Optional[BalanceSnapshot]:
    if record is None:
        return None
    return BalanceSnapshot(
        cash=record.cash,
        savings=record.savings,
        emergency=record.emergency,
        investing=record.investing,
        debt=record.debt,
    )


class UserRepository:
    """Repository for user profiles"""

    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return self.db.query(UserProfile).filter(UserProfile.id == user_id).first()

    def create_profile(
        self,
        user_id: str,
        email: str,
        name: str = "",
        currency: str = "EUR",
        subscription_status: Optional[str] = "free",
    ) -> UserProfile:
        profile = UserProfile(
            id=user_id,
            email=email,
            name=name,
            currency=currency,
            subscription_status=subscription_status,
        )
        self.db.add(profile)
        self.db.flush()
        return profile

    def update_subscription(self, profile: UserProfile, status: Optional[str]) -> UserProfile:
        profile.subscription_status = status
        self.db.flush()
        return profile


class TransactionRepository:
    """Repository for transactions"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_month(self, user_id: str, month: str) -> List[TransactionRecord]:
        """Transactions dated within the YYYY-MM month, newest first"""
        start, end = month_bounds(month)
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id)
            .filter(TransactionRecord.date >= start)
            .filter(TransactionRecord.date <= end)
            .order_by(TransactionRecord.date.desc())
            .all()
        )

    def get_by_months(self, user_id: str) -> Dict[str, List[TransactionRecord]]:
        """Every transaction of the user keyed by YYYY-MM, months oldest first"""
        records = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id)
            .order_by(TransactionRecord.date.asc())
            .all()
        )
        months: Dict[str, List[TransactionRecord]] = {}
        for record in records:
            months.setdefault(month_key(record.date), []).append(record)
        return months

    def create_transaction(
        self,
        user_id: str,
        type: str,
        amount: float,
        date: date,
        cat: str = "",
        sub_cat: Optional[str] = None,
        name: str = "",
    ) -> TransactionRecord:
        record = TransactionRecord(
            user_id=user_id,
            type=type,
            amt=amount,
            date=date,
            cat=cat,
            sub_cat=sub_cat,
            name=name or sub_cat or cat,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def get_transaction(self, user_id: str, transaction_id: uuid.UUID) -> Optional[TransactionRecord]:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.id == transaction_id)
            .filter(TransactionRecord.user_id == user_id)
            .first()
        )

    def delete_transaction(self, record: TransactionRecord) -> None:
        self.db.delete(record)
        self.db.flush()


class DebtRepository:
    """Repository for tracked debts"""

    def __init__(self, db: Session):
        self.db = db

    def get_debts(self, user_id: str) -> List[DebtRecord]:
        return (
            self.db.query(DebtRecord)
            .filter(DebtRecord.user_id == user_id)
            .order_by(DebtRecord.created_at.desc())
            .all()
        )

    def create_debt(self, user_id: str, name: str, total: float, monthly: float, type: str = "other") -> DebtRecord:
        record = DebtRecord(user_id=user_id, name=name, total=total, monthly=monthly, type=type)
        self.db.add(record)
        self.db.flush()
        return record

    def get_debt(self, user_id: str, debt_id: uuid.UUID) -> Optional[DebtRecord]:
        return (
            self.db.query(DebtRecord)
            .filter(DebtRecord.id == debt_id)
            .filter(DebtRecord.user_id == user_id)
            .first()
        )

    def delete_debt(self, record: DebtRecord) -> None:
        self.db.delete(record)
        self.db.flush()


class TargetsRepository:
    """Repository for savings/investing targets"""

    def __init__(self, db: Session):
        self.db = db

    def get_targets(self, user_id: str) -> Targets:
        """Stored targets, zeros when none were set"""
        row = self.db.get(FinancialTargets, user_id)
        if row is None:
            return Targets()
        return Targets(savings=row.savings, investing=row.investing)

    def upsert_targets(self, user_id: str, savings: float, investing: float) -> Targets:
        row = self.db.get(FinancialTargets, user_id)
        if row is None:
            row = FinancialTargets(user_id=user_id)
            self.db.add(row)
        row.savings = savings
        row.investing = investing
        self.db.flush()
        return Targets(savings=savings, investing=investing)


class SnapshotRepository:
    """Repository for balance snapshots"""

    def __init__(self, db: Session):
        self.db = db

    def get_latest(self, user_id: str) -> Optional[SnapshotRecord]:
        return (
            self.db.query(SnapshotRecord)
            .filter(SnapshotRecord.user_id == user_id)
            .order_by(SnapshotRecord.id.desc())
            .first()
        )

    def create_snapshot(self, user_id: str, snapshot: BalanceSnapshot) -> SnapshotRecord:
        record = SnapshotRecord(
            user_id=user_id,
            cash=snapshot.cash,
            savings=snapshot.savings,
            emergency=snapshot.emergency,
            investing=snapshot.investing,
            debt=snapshot.debt,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def get_history(self, user_id: str, limit: int = 12) -> List[SnapshotRecord]:
        return (
            self.db.query(SnapshotRecord)
            .filter(SnapshotRecord.user_id == user_id)
            .order_by(SnapshotRecord.id.desc())
            .limit(limit)
            .all()
        )
