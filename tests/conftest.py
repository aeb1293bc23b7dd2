"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from spendio_gateway.api.main import create_app
from spendio_gateway.infrastructure.database.models import Base
from spendio_gateway.infrastructure.database.session import engine_options, get_db
from spendio_gateway.domain.models import Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, **engine_options(TEST_DATABASE_URL))
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def create_user(client: TestClient):
    """Factory creating a user profile through the API"""

    def _create(user_id: str = "user_1", plan: str | None = "free") -> dict:
        response = client.post(
            "/api/users",
            json={
                "user_id": user_id,
                "email": f"{user_id}@example.com",
                "name": "Alex",
                "subscription_status": plan,
            },
        )
        assert response.status_code == 201
        return response.json()

    return _create


@pytest.fixture
def free_user(create_user) -> dict:
    return create_user("user_free", "free")


@pytest.fixture
def pro_user(create_user) -> dict:
    return create_user("user_pro", "pro")


@pytest.fixture
def sample_month() -> list[Transaction]:
    """One month of typical activity"""
    day = date(2026, 3, 1)
    return [
        Transaction("t1", "income", 3000, day, "Salary", None, "Salary"),
        Transaction("t2", "expense", 1200, day, "Housing", "Rent", "Rent"),
        Transaction("t3", "expense", 300, day, "Food", "Groceries", "Groceries"),
        Transaction("t4", "savings", 400, day, "Savings", None, "Monthly savings"),
        Transaction("t5", "investing", 200, day, "ETF", None, "Index fund"),
        Transaction("t6", "debt_payment", 150, day, "Loan", None, "Car loan"),
        Transaction("t7", "emergency_fund", 100, day, "Emergency", None, "Buffer"),
    ]
