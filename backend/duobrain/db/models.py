# duobrain/db/models.py: User (+ income sources / recurring expenses), Transaction, Jar, Goal, UpcomingCharge, Job
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship
from .base import Base
import enum


def _values(enum_cls):
    # persist the human-readable values ("In Progress"), not the member names
    return [member.value for member in enum_cls]


class IncomeType(str, enum.Enum):
    monthly = "Monthly"
    irregular = "Irregular"


class TransactionType(str, enum.Enum):
    income = "Income"
    expense = "Expense"
    recurring_income = "RecurringIncome"
    recurring_expense = "RecurringExpense"


class GoalStatus(str, enum.Enum):
    in_progress = "In Progress"
    completed = "Completed"


class ChargeStatus(str, enum.Enum):
    upcoming = "Upcoming"
    due = "Due"
    paid = "Paid"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    otp = Column(String(6), nullable=True)
    otp_expires = Column(DateTime, nullable=True)
    monthly_income = Column(Numeric(12, 2), nullable=False, default=0)
    income_type = Column(Enum(IncomeType, values_callable=_values, name="income_type"), nullable=False, default=IncomeType.monthly)
    finance_tips_opt_in = Column(Boolean, nullable=False, default=False)
    onboarding_done = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # relationships
    income_sources = relationship(
        "IncomeSource", back_populates="user", cascade="all, delete-orphan", order_by="IncomeSource.id"
    )
    recurring_expenses = relationship(
        "RecurringExpense", back_populates="user", cascade="all, delete-orphan", order_by="RecurringExpense.id"
    )
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")
    jars = relationship("Jar", back_populates="user", cascade="all, delete-orphan")
    goals = relationship("Goal", back_populates="user", cascade="all, delete-orphan")
    charges = relationship("UpcomingCharge", back_populates="user", cascade="all, delete-orphan")
    job = relationship("Job", back_populates="user", cascade="all, delete-orphan", uselist=False)


class IncomeSource(Base):
    __tablename__ = "income_sources"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    source_name = Column(String(150), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)

    user = relationship("User", back_populates="income_sources")


class RecurringExpense(Base):
    __tablename__ = "recurring_expenses"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expense_name = Column(String(150), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)

    user = relationship("User", back_populates="recurring_expenses")


class Transaction(Base):
    __tablename__ = "transactions"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(TransactionType, values_callable=_values, name="transaction_type"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String(150), nullable=False, default="General")
    description = Column(Text, nullable=True)
    transaction_date = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # originating charge / jar operation, if any
    charge_id = Column(Integer, ForeignKey("upcoming_charges.id", ondelete="SET NULL"), nullable=True, index=True)
    jar_id = Column(Integer, ForeignKey("jars.id", ondelete="SET NULL"), nullable=True, index=True)

    user = relationship("User", back_populates="transactions")


class Jar(Base):
    __tablename__ = "jars"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    jar_name = Column(String(150), nullable=False)
    goal_amount = Column(Numeric(12, 2), nullable=False)
    amount_saved = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="jars")


class Goal(Base):
    __tablename__ = "goals"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    goal_name = Column(String(150), nullable=False)
    target_amount = Column(Numeric(12, 2), nullable=False)
    amount_saved = Column(Numeric(12, 2), nullable=False, default=0)
    target_date = Column(DateTime, nullable=False)
    status = Column(Enum(GoalStatus, values_callable=_values, name="goal_status"), nullable=False, default=GoalStatus.in_progress)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="goals")


class UpcomingCharge(Base):
    __tablename__ = "upcoming_charges"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    charge_name = Column(String(150), nullable=False)
    field = Column(String(150), nullable=False)
    due_date = Column(DateTime, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    status = Column(Enum(ChargeStatus, values_callable=_values, name="charge_status"), nullable=False, default=ChargeStatus.upcoming)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="charges")


class Job(Base):
    """Per-user marker of the last (month, year) whose recurring items were materialised."""
    __tablename__ = "jobs"
    __table_args__ = (UniqueConstraint("user_id", name="uq_jobs_user_id"),)
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    last_updated_month = Column(Integer, nullable=False)
    last_updated_year = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="job")
