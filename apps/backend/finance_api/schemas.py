from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from .models import (
    BudgetPeriod,
    Currency,
    GoalPriority,
    RecurringPeriod,
    Theme,
    TxnKind,
)


PositiveMoney = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


class PatchModel(BaseModel):
    """Base for partial updates.

    Only fields listed in ``nullable_fields`` may be sent as an explicit null;
    any other null is rejected instead of being written to a NOT NULL column.
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "PatchModel":
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{name} cannot be null")
        return self


# ----- Auth ---------------------------------------------------------------


class RegisterIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ForgotPasswordIn(BaseModel):
    email: EmailStr


class ResetPasswordIn(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=128)


class ProfileUpdate(PatchModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class UserOut(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class AuthOut(BaseModel):
    user: UserOut
    token: str


class MessageOut(BaseModel):
    message: str


# ----- Categories ---------------------------------------------------------

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    kind: TxnKind = Field(validation_alias=AliasChoices("kind", "type"))
    color: str = Field(pattern=HEX_COLOR)
    icon: str = Field(min_length=1, max_length=50)

    @field_validator("name", "icon", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class CategoryUpdate(PatchModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    icon: Optional[str] = Field(default=None, min_length=1, max_length=50)

    @field_validator("name", "icon", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class CategoryOut(BaseModel):
    id: int
    name: str
    kind: TxnKind
    color: str
    icon: str
    is_default: bool
    user_id: Optional[int]
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class CategoryUsageOut(BaseModel):
    id: int
    name: str
    kind: TxnKind
    color: str
    icon: str
    transaction_count: int
    total_amount: float


# ----- Transactions -------------------------------------------------------


class TransactionCreate(BaseModel):
    amount: PositiveMoney
    kind: TxnKind = Field(validation_alias=AliasChoices("kind", "type"))
    category_id: int = Field(gt=0)
    description: str = Field(min_length=1)
    date: dt.date
    is_recurring: bool = False
    recurring_period: Optional[RecurringPeriod] = None
    recurring_end_date: Optional[dt.date] = None

    @model_validator(mode="after")
    def validate_recurring(self) -> "TransactionCreate":
        if self.is_recurring:
            if self.recurring_period is None:
                raise ValueError("recurring_period is required when is_recurring is true")
            if self.recurring_end_date is not None and self.recurring_end_date < self.date:
                raise ValueError("recurring_end_date must not be before date")
        elif self.recurring_period is not None or self.recurring_end_date is not None:
            raise ValueError("recurring_period/recurring_end_date are only allowed for recurring transactions")
        return self


class TransactionUpdate(PatchModel):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"recurring_period", "recurring_end_date"})

    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    kind: Optional[TxnKind] = Field(default=None, validation_alias=AliasChoices("kind", "type"))
    category_id: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = Field(default=None, min_length=1)
    date: Optional[dt.date] = None
    is_recurring: Optional[bool] = None
    recurring_period: Optional[RecurringPeriod] = None
    recurring_end_date: Optional[dt.date] = None


class TransactionOut(BaseModel):
    id: int
    user_id: int
    amount: float
    kind: TxnKind
    category_id: int
    category_name: Optional[str] = None
    description: str
    date: dt.date
    is_recurring: bool
    recurring_period: Optional[RecurringPeriod]
    recurring_end_date: Optional[dt.date]
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionPageOut(BaseModel):
    items: list[TransactionOut]
    total: int
    page: int
    page_size: int
    total_pages: int


class CategoryBreakdownItem(BaseModel):
    category: str
    kind: TxnKind
    amount: float


class TransactionStatsOut(BaseModel):
    total_income: float
    total_expenses: float
    balance: float
    monthly_income: float
    monthly_expenses: float
    category_breakdown: list[CategoryBreakdownItem]


# ----- Budgets ------------------------------------------------------------


class BudgetCreate(BaseModel):
    category_id: int = Field(gt=0)
    amount: PositiveMoney
    period: BudgetPeriod
    start_date: dt.date
    end_date: dt.date
    alert_threshold: Decimal = Field(default=Decimal("80"), ge=0, le=100, max_digits=5, decimal_places=2)

    @model_validator(mode="after")
    def validate_span(self) -> "BudgetCreate":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class BudgetUpdate(PatchModel):
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    period: Optional[BudgetPeriod] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    alert_threshold: Optional[Decimal] = Field(default=None, ge=0, le=100, max_digits=5, decimal_places=2)
    is_active: Optional[bool] = None


class BudgetOut(BaseModel):
    id: int
    user_id: int
    category_id: int
    category_name: Optional[str] = None
    amount: float
    spent: float
    remaining: float
    percent_used: float
    is_over_threshold: bool
    period: BudgetPeriod
    start_date: dt.date
    end_date: dt.date
    alert_threshold: float
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class BudgetSummaryOut(BaseModel):
    budget_id: int
    category_name: Optional[str] = None
    period_start: dt.date
    period_end: dt.date
    planned: float
    spent: float
    remaining: float
    execution_rate: float
    is_over_threshold: bool


# ----- Goals --------------------------------------------------------------


class GoalCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    target_amount: PositiveMoney
    target_date: dt.date
    priority: GoalPriority = GoalPriority.MEDIUM


class GoalUpdate(PatchModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    target_amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    current_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    target_date: Optional[dt.date] = None
    priority: Optional[GoalPriority] = None


class GoalProgressIn(BaseModel):
    amount: PositiveMoney


class GoalOut(BaseModel):
    id: int
    user_id: int
    title: str
    description: str
    target_amount: float
    current_amount: float
    target_date: dt.date
    priority: GoalPriority
    is_completed: bool
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field(return_type=float)
    def progress_percent(self) -> float:
        if not self.target_amount:
            return 0.0
        return min(100.0, (self.current_amount / self.target_amount) * 100)


# ----- Preferences --------------------------------------------------------


class PreferenceUpdate(PatchModel):
    currency: Optional[Currency] = None
    theme: Optional[Theme] = None


class PreferenceOut(BaseModel):
    id: int
    user_id: int
    currency: Currency
    theme: Theme
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)
