"""SQLAlchemy ORM models for the finance tracker tables"""

import uuid
from sqlalchemy import Column, String, Float, DateTime, Date, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class UserProfile(Base):
    """User profile with subscription status"""

    __tablename__ = "user_profiles"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False, default="")
    currency = Column(String(3), nullable=False, default="EUR")
    subscription_status = Column(Text, nullable=True)  # "free" | "pro" | NULL
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transactions = relationship("TransactionRecord", back_populates="user", cascade="all, delete-orphan")
    debts = relationship("DebtRecord", back_populates="user", cascade="all, delete-orphan")


class TransactionRecord(Base):
    """Income, expense, savings, investing, debt or emergency-fund entry"""

    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Text, nullable=False)
    date = Column(Date, nullable=False, index=True)
    cat = Column(Text, nullable=False, default="")
    sub_cat = Column(Text, nullable=True)
    name = Column(Text, nullable=False, default="")
    amt = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("UserProfile", back_populates="transactions")


class DebtRecord(Base):
    """Outstanding debt tracked by the user"""

    __tablename__ = "debts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Text, nullable=False, default="other")
    name = Column(Text, nullable=False)
    total = Column(Float, nullable=False, default=0)
    monthly = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("UserProfile", back_populates="debts")


class FinancialTargets(Base):
    """Monthly savings and investing targets, one row per user"""

    __tablename__ = "financial_targets"

    user_id = Column(Text, ForeignKey("user_profiles.id", ondelete="CASCADE"), primary_key=True)
    savings = Column(Float, nullable=False, default=0)
    investing = Column(Float, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class SnapshotRecord(Base):
    """Point-in-time account balances; the newest row is current"""

    __tablename__ = "snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    cash = Column(Float, nullable=False, default=0)
    savings = Column(Float, nullable=False, default=0)
    emergency = Column(Float, nullable=False, default=0)
    investing = Column(Float, nullable=False, default=0)
    debt = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
