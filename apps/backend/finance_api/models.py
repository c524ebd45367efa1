from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .core.config import get_settings
from .core.database import Base


try:
    LOCAL_ZONE = ZoneInfo(get_settings().TIMEZONE)
except (ZoneInfoNotFoundError, ValueError):
    LOCAL_ZONE = ZoneInfo("UTC")


def now_local_naive() -> dt.datetime:
    """Return naive datetime normalized to configured local timezone."""
    return dt.datetime.now(LOCAL_ZONE).replace(tzinfo=None)


def today_local() -> dt.date:
    return now_local_naive().date()


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


MONEY = Numeric(12, 2)
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize a stored or aggregated amount to cents.

    SQLite keeps NUMERIC as REAL, so sums come back with binary drift.
    """
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


class TimestampMixin:
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=now_local_naive, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=now_local_naive, onupdate=now_local_naive, nullable=False)


class TxnKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class RecurringPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    INR = "INR"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class User(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reset_token: Mapped[str | None] = mapped_column(String(255))
    reset_token_expiry: Mapped[dt.datetime | None] = mapped_column(DateTime)

    preference: Mapped["UserPreference | None"] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class Category(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    kind: Mapped[TxnKind] = mapped_column(
        SAEnum(TxnKind, name="txn_kind", values_callable=_enum_values), nullable=False
    )
    color: Mapped[str] = mapped_column(String(7), nullable=False)
    icon: Mapped[str] = mapped_column(String(50), nullable=False)
    # system defaults have no owner and are visible to every user
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"))

    __table_args__ = (
        Index("ix_category_user_id", "user_id"),
        Index("ix_category_kind", "kind"),
    )


# owner-level uniqueness; NULL user_id (system defaults) never collides
Index(
    "uq_category_owner_name_kind",
    Category.user_id,
    func.lower(Category.name),
    Category.kind,
    unique=True,
)


class Transaction(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    kind: Mapped[TxnKind] = mapped_column(
        SAEnum(TxnKind, name="txn_kind", values_callable=_enum_values), nullable=False
    )
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id", ondelete="RESTRICT"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    recurring_period: Mapped[RecurringPeriod | None] = mapped_column(
        SAEnum(RecurringPeriod, name="recurring_period", values_callable=_enum_values)
    )
    recurring_end_date: Mapped[dt.date | None] = mapped_column(Date)

    category: Mapped[Category] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        Index("ix_transaction_user_date", "user_id", "date"),
        Index("ix_transaction_category_id", "category_id"),
    )

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category is not None else None


class Budget(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id", ondelete="CASCADE"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    # cached aggregate, refreshed by BudgetService.recompute_spent
    spent: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0"), nullable=False)
    period: Mapped[BudgetPeriod] = mapped_column(
        SAEnum(BudgetPeriod, name="budget_period", values_callable=_enum_values), nullable=False
    )
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    alert_threshold: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("80"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    category: Mapped[Category] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_budget_amount_positive"),
        CheckConstraint("start_date <= end_date", name="ck_budget_span"),
        CheckConstraint("alert_threshold >= 0 AND alert_threshold <= 100", name="ck_budget_threshold"),
        Index("ix_budget_user_category", "user_id", "category_id"),
    )

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category is not None else None

    @property
    def percent_used(self) -> float:
        planned = to_money(self.amount)
        return float(to_money(self.spent) / planned * 100) if planned else 0.0

    @property
    def remaining(self) -> float:
        return float(to_money(self.amount) - to_money(self.spent))

    @property
    def is_over_threshold(self) -> bool:
        return self.percent_used >= float(self.alert_threshold)


class Goal(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0"), nullable=False)
    target_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    priority: Mapped[GoalPriority] = mapped_column(
        SAEnum(GoalPriority, name="goal_priority", values_callable=_enum_values),
        default=GoalPriority.MEDIUM,
        nullable=False,
    )
    # derived: current_amount >= target_amount, see GoalService
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        CheckConstraint("target_amount > 0", name="ck_goal_target_positive"),
        CheckConstraint("current_amount >= 0", name="ck_goal_current_non_negative"),
        Index("ix_goal_user_target_date", "user_id", "target_date"),
    )


class UserPreference(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), unique=True, nullable=False)
    currency: Mapped[Currency] = mapped_column(
        SAEnum(Currency, name="currency", values_callable=_enum_values), default=Currency.USD, nullable=False
    )
    theme: Mapped[Theme] = mapped_column(
        SAEnum(Theme, name="theme", values_callable=_enum_values), default=Theme.LIGHT, nullable=False
    )

    user: Mapped[User] = relationship(back_populates="preference")
