"""User profile, subscription, snapshot, targets and debts endpoints"""

import uuid
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from spendio_gateway.api.v1.schemas import (
    DebtCreate,
    DebtSchema,
    SnapshotSchema,
    SubscriptionUpdate,
    TargetsSchema,
    UserCreate,
    UserResponse,
)
from spendio_gateway.api.dependencies import get_user_profile
from spendio_gateway.domain.models import BalanceSnapshot, PlanStatus
from spendio_gateway.infrastructure.database.models import UserProfile
from spendio_gateway.infrastructure.database.repositories import (
    DebtRepository,
    SnapshotRepository,
    TargetsRepository,
    UserRepository,
    to_snapshot,
)
from spendio_gateway.infrastructure.database.session import get_db

router = APIRouter()


def _user_response(profile: UserProfile) -> UserResponse:
    return UserResponse(
        user_id=profile.id,
        email=profile.email,
        name=profile.name,
        currency=profile.currency,
        plan=PlanStatus.from_value(profile.subscription_status).value,
    )


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(request_body: UserCreate, db: Session = Depends(get_db)):
    """Create the profile for a user registered with the auth provider"""
    user_repo = UserRepository(db)
    if user_repo.get_profile(request_body.user_id) is not None:
        raise HTTPException(status_code=409, detail="User already exists")

    profile = user_repo.create_profile(
        user_id=request_body.user_id,
        email=request_body.email,
        name=request_body.name,
        currency=request_body.currency,
        subscription_status=request_body.subscription_status,
    )
    db.commit()
    return _user_response(profile)


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(profile: UserProfile = Depends(get_user_profile)):
    return _user_response(profile)


@router.put("/users/{user_id}/subscription", response_model=UserResponse)
def update_subscription(
    request_body: SubscriptionUpdate,
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """Switch plan tier; a null status removes the subscription record"""
    UserRepository(db).update_subscription(profile, request_body.status)
    db.commit()
    return _user_response(profile)


@router.get("/users/{user_id}/snapshot", response_model=SnapshotSchema)
def get_snapshot(profile: UserProfile = Depends(get_user_profile), db: Session = Depends(get_db)):
    snapshot = to_snapshot(SnapshotRepository(db).get_latest(profile.id)) or BalanceSnapshot()
    return SnapshotSchema(**vars(snapshot))


@router.put("/users/{user_id}/snapshot", response_model=SnapshotSchema)
def update_snapshot(
    request_body: SnapshotSchema,
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    """Record current account balances as the newest snapshot"""
    SnapshotRepository(db).create_snapshot(profile.id, BalanceSnapshot(**request_body.model_dump()))
    db.commit()
    return request_body


@router.get("/users/{user_id}/snapshot/history", response_model=List[SnapshotSchema])
def get_snapshot_history(profile: UserProfile = Depends(get_user_profile), db: Session = Depends(get_db)):
    return [
        SnapshotSchema(**vars(to_snapshot(record)))
        for record in SnapshotRepository(db).get_history(profile.id)
    ]


@router.get("/users/{user_id}/targets", response_model=TargetsSchema)
def get_targets(profile: UserProfile = Depends(get_user_profile), db: Session = Depends(get_db)):
    targets = TargetsRepository(db).get_targets(profile.id)
    return TargetsSchema(savings=targets.savings, investing=targets.investing)


@router.put("/users/{user_id}/targets", response_model=TargetsSchema)
def update_targets(
    request_body: TargetsSchema,
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    TargetsRepository(db).upsert_targets(profile.id, request_body.savings, request_body.investing)
    db.commit()
    return request_body


@router.get("/users/{user_id}/debts", response_model=List[DebtSchema])
def list_debts(profile: UserProfile = Depends(get_user_profile), db: Session = Depends(get_db)):
    return [
        DebtSchema(debt_id=str(d.id), name=d.name, total=d.total, monthly=d.monthly, type=d.type)
        for d in DebtRepository(db).get_debts(profile.id)
    ]


@router.post("/users/{user_id}/debts", response_model=DebtSchema, status_code=201)
def create_debt(
    request_body: DebtCreate,
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    record = DebtRepository(db).create_debt(
        profile.id,
        name=request_body.name,
        total=request_body.total,
        monthly=request_body.monthly,
        type=request_body.type,
    )
    db.commit()
    return DebtSchema(debt_id=str(record.id), **request_body.model_dump())


@router.delete("/users/{user_id}/debts/{debt_id}", status_code=204)
def delete_debt(
    debt_id: str,
    profile: UserProfile = Depends(get_user_profile),
    db: Session = Depends(get_db),
):
    try:
        debt_uuid = uuid.UUID(debt_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid debt ID format")

    debt_repo = DebtRepository(db)
    record = debt_repo.get_debt(profile.id, debt_uuid)
    if record is None:
        raise HTTPException(status_code=404, detail="Debt not found")

    debt_repo.delete_debt(record)
    db.commit()
    return Response(status_code=204)
