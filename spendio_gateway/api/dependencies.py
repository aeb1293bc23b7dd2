"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, HTTPException, Path, Request
from sqlalchemy.orm import Session
from spendio_gateway.infrastructure.clients.chat import ChatCompletionClient
from spendio_gateway.infrastructure.database.models import UserProfile
from spendio_gateway.infrastructure.database.repositories import UserRepository
from spendio_gateway.infrastructure.database.session import get_db
from spendio_gateway.utils.date_utils import parse_month


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_chat_client() -> ChatCompletionClient:
    """Provide chat-completion API client instance"""
    return ChatCompletionClient()


def get_user_profile(user_id: str = Path(..., min_length=1), db: Session = Depends(get_db)) -> UserProfile:
    """Load the profile named in the path or answer 404"""
    profile = UserRepository(db).get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


def valid_month(month: str) -> str:
    """Validate a YYYY-MM month key"""
    try:
        parse_month(month)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid month, expected YYYY-MM")
    return month
