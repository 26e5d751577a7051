"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 10:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

income_type = sa.Enum("Monthly", "Irregular", name="income_type")
transaction_type = sa.Enum("Income", "Expense", "RecurringIncome", "RecurringExpense", name="transaction_type")
goal_status = sa.Enum("In Progress", "Completed", name="goal_status")
charge_status = sa.Enum("Upcoming", "Due", "Paid", name="charge_status")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def _owner():
    return sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("full_name", sa.String(150), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("otp", sa.String(6), nullable=True),
        sa.Column("otp_expires", sa.DateTime(), nullable=True),
        sa.Column("monthly_income", sa.Numeric(12, 2), nullable=False),
        sa.Column("income_type", income_type, nullable=False),
        sa.Column("finance_tips_opt_in", sa.Boolean(), nullable=False),
        sa.Column("onboarding_done", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "income_sources",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("source_name", sa.String(150), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_income_sources_id", "income_sources", ["id"])
    op.create_index("ix_income_sources_user_id", "income_sources", ["user_id"])

    op.create_table(
        "recurring_expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("expense_name", sa.String(150), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_recurring_expenses_id", "recurring_expenses", ["id"])
    op.create_index("ix_recurring_expenses_user_id", "recurring_expenses", ["user_id"])

    op.create_table(
        "jars",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("jar_name", sa.String(150), nullable=False),
        sa.Column("goal_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("amount_saved", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_jars_id", "jars", ["id"])
    op.create_index("ix_jars_user_id", "jars", ["user_id"])

    op.create_table(
        "goals",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("goal_name", sa.String(150), nullable=False),
        sa.Column("target_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("amount_saved", sa.Numeric(12, 2), nullable=False),
        sa.Column("target_date", sa.DateTime(), nullable=False),
        sa.Column("status", goal_status, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_goals_id", "goals", ["id"])
    op.create_index("ix_goals_user_id", "goals", ["user_id"])

    op.create_table(
        "upcoming_charges",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("charge_name", sa.String(150), nullable=False),
        sa.Column("field", sa.String(150), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False),
        sa.Column("status", charge_status, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_upcoming_charges_id", "upcoming_charges", ["id"])
    op.create_index("ix_upcoming_charges_user_id", "upcoming_charges", ["user_id"])
    op.create_index("ix_upcoming_charges_due_date", "upcoming_charges", ["due_date"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("category", sa.String(150), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("transaction_date", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.Column("charge_id", sa.Integer(), sa.ForeignKey("upcoming_charges.id", ondelete="SET NULL"), nullable=True),
        sa.Column("jar_id", sa.Integer(), sa.ForeignKey("jars.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_transactions_id", "transactions", ["id"])
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_transaction_date", "transactions", ["transaction_date"])
    op.create_index("ix_transactions_charge_id", "transactions", ["charge_id"])
    op.create_index("ix_transactions_jar_id", "transactions", ["jar_id"])

    op.create_table(
        "jobs",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("last_updated_month", sa.Integer(), nullable=False),
        sa.Column("last_updated_year", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_jobs_user_id"),
    )
    op.create_index("ix_jobs_id", "jobs", ["id"])


def downgrade():
    op.drop_table("jobs")
    op.drop_table("transactions")
    op.drop_table("upcoming_charges")
    op.drop_table("goals")
    op.drop_table("jars")
    op.drop_table("recurring_expenses")
    op.drop_table("income_sources")
    op.drop_table("users")
    bind = op.get_bind()
    for enum_type in (charge_status, goal_status, transaction_type, income_type):
        enum_type.drop(bind, checkfirst=True)
