"""Pydantic schemas for API requests and responses.

JSON bodies use camelCase field names; Python attributes stay snake_case.
Money is accepted as ``Decimal`` and serialized as a float rounded to cents.
"""
from __future__ import annotations

from datetime import date, datetime
from datetime import date as calendar_date
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from app.core.constants import (
    COMPENSATION_TYPE_ENUM,
    GOAL_TYPE_ENUM,
    PAYMENT_METHOD_ENUM,
    ROLE_CHATTER,
    ROLE_ENUM,
    SALE_STATUS_ENUM,
    SALE_TYPE_BASE,
    SALE_TYPE_ENUM,
    SHIFT_SLOTS,
)
from app.core.formatting import round_money

Money = Annotated[Decimal, PlainSerializer(lambda value: float(round_money(value)), return_type=float)]
Percent = Annotated[Decimal, PlainSerializer(lambda value: float(value), return_type=float)]


def _quantize(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _check_choice(value: Optional[str], choices, label: str) -> Optional[str]:
    if value is None:
        return None
    normalized = str(value).strip().upper()
    if normalized not in choices:
        raise ValueError(f"{label} must be one of: {', '.join(choices)}.")
    return normalized


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# --- Users -------------------------------------------------------------------


class UserBase(ApiModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=200)
    role: str = ROLE_CHATTER
    commission_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    fixed_salary: Optional[Decimal] = Field(None, ge=0)

    @field_validator("email", "name", mode="before")
    def strip_required_strings(cls, value: Any, info: ValidationInfo) -> str:
        if value is None:
            raise ValueError(f"{info.field_name.replace('_', ' ').title()} is required.")
        value_str = str(value).strip()
        if not value_str:
            raise ValueError(f"{info.field_name.replace('_', ' ').title()} cannot be empty.")
        return value_str

    @field_validator("email")
    def validate_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Email must contain '@'.")
        return value.lower()

    @field_validator("role")
    def validate_role(cls, value: str) -> str:
        return _check_choice(value, ROLE_ENUM, "Role")

    @field_validator("fixed_salary")
    def quantize_salary(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _quantize(value)


class UserCreate(UserBase):
    password: str = Field(..., min_length=4, max_length=128)


class UserUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[str] = None
    commission_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    fixed_salary: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=4, max_length=128)

    @field_validator("role")
    def validate_role(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, ROLE_ENUM, "Role")

    @field_validator("fixed_salary")
    def quantize_salary(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _quantize(value)


class UserRead(ApiModel):
    id: int
    email: str
    name: str
    role: str
    commission_percent: Optional[Percent] = None
    fixed_salary: Optional[Money] = None
    is_active: bool
    created_at: datetime


class UserSummary(ApiModel):
    id: int
    name: str
    email: str


# --- Creators ----------------------------------------------------------------


class CreatorFields(ApiModel):
    compensation_type: Optional[str] = None
    revenue_share_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    fixed_salary_cost: Optional[Decimal] = Field(None, ge=0)
    onlyfans_commission_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None

    @field_validator("compensation_type")
    def validate_compensation_type(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, COMPENSATION_TYPE_ENUM, "Compensation type")

    @field_validator("fixed_salary_cost")
    def quantize_salary(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _quantize(value)


class CreatorCreate(CreatorFields):
    name: str = Field(..., min_length=1, max_length=200)
    compensation_type: str
    onlyfans_commission_percent: Decimal = Field(Decimal("20"), ge=0, le=100)
    is_active: bool = True

    @field_validator("name", mode="before")
    def strip_name(cls, value: Any) -> str:
        value_str = str(value or "").strip()
        if not value_str:
            raise ValueError("Name cannot be empty.")
        return value_str


class CreatorUpdate(CreatorFields):
    name: Optional[str] = Field(None, min_length=1, max_length=200)


class CreatorRead(ApiModel):
    id: int
    name: str
    compensation_type: str
    revenue_share_percent: Optional[Percent] = None
    fixed_salary_cost: Optional[Money] = None
    onlyfans_commission_percent: Percent
    is_active: bool
    created_at: datetime


# --- Sales -------------------------------------------------------------------


def _check_sale_amounts(sale_type: Optional[str], amount: Optional[Decimal], base_amount: Optional[Decimal]) -> None:
    if amount is None:
        return
    if sale_type == SALE_TYPE_BASE and amount == 0 and (base_amount or 0) > 0:
        return
    if amount <= 0:
        raise ValueError(
            "Amount must be positive, or if BASE type is selected, either amount or baseAmount must be positive."
        )


class SaleCreate(ApiModel):
    creator_id: int
    amount: Decimal = Field(..., ge=0)
    base_amount: Decimal = Field(Decimal("0"), ge=0)
    sale_type: str
    note: Optional[str] = None
    # Supplying a sale date is the backdate toggle.
    sale_date: Optional[datetime] = None
    user_id: Optional[int] = None

    @field_validator("sale_type")
    def validate_sale_type(cls, value: str) -> str:
        return _check_choice(value, SALE_TYPE_ENUM, "Sale type")

    @field_validator("amount", "base_amount")
    def quantize_amount(cls, value: Decimal) -> Decimal:
        return _quantize(value)

    @model_validator(mode="after")
    def check_amounts(self) -> "SaleCreate":
        _check_sale_amounts(self.sale_type, self.amount, self.base_amount)
        return self


class SaleUpdate(ApiModel):
    creator_id: Optional[int] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    base_amount: Optional[Decimal] = Field(None, ge=0)
    sale_type: Optional[str] = None
    note: Optional[str] = None
    sale_date: Optional[datetime] = None
    user_id: Optional[int] = None

    @field_validator("sale_type")
    def validate_sale_type(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, SALE_TYPE_ENUM, "Sale type")

    @field_validator("amount", "base_amount")
    def quantize_amount(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _quantize(value)


class SaleRead(ApiModel):
    id: int
    user_id: int
    user_name: Optional[str] = None
    creator_id: int
    creator_name: Optional[str] = None
    amount: Money
    base_amount: Money
    sale_type: str
    status: str
    note: Optional[str] = None
    sale_date: datetime
    created_at: datetime
    edit_state: str
    editable_until: datetime
    can_edit: bool


class SalePage(ApiModel):
    items: List[SaleRead]
    total: int
    page: int
    limit: int
    pages: int


class SaleFilters(ApiModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    creator_id: Optional[int] = None
    sale_type: Optional[str] = None
    status: Optional[str] = None
    user_id: Optional[int] = None

    @field_validator("sale_type")
    def validate_sale_type(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, SALE_TYPE_ENUM, "Sale type")

    @field_validator("status")
    def validate_status(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, SALE_STATUS_ENUM, "Status")


class SaleBucket(ApiModel):
    key: str
    count: int
    amount: Money


class SaleStats(ApiModel):
    year: int
    month: int
    total_amount: Money
    total_base: Money
    count: int
    by_type: List[SaleBucket]
    by_status: List[SaleBucket]


# --- Monthly financials ------------------------------------------------------


class CustomCost(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    amount: Money = Field(..., ge=0)


class MonthlyFinancialUpsert(ApiModel):
    creator_id: int
    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    gross_revenue: Decimal = Field(Decimal("0"), ge=0)
    marketing_costs: Decimal = Field(Decimal("0"), ge=0)
    tool_costs: Decimal = Field(Decimal("0"), ge=0)
    other_costs: Decimal = Field(Decimal("0"), ge=0)
    custom_costs: List[CustomCost] = Field(default_factory=list)
    notes: Optional[str] = None

    @field_validator("gross_revenue", "marketing_costs", "tool_costs", "other_costs")
    def quantize_amount(cls, value: Decimal) -> Decimal:
        return _quantize(value)


class MonthlyFinancialRead(ApiModel):
    id: Optional[int] = None
    creator_id: int
    creator_name: Optional[str] = None
    year: int
    month: int
    gross_revenue: Money = Decimal("0")
    marketing_costs: Money = Decimal("0")
    tool_costs: Money = Decimal("0")
    other_costs: Money = Decimal("0")
    custom_costs: List[CustomCost] = Field(default_factory=list)
    custom_costs_total: Money = Decimal("0")
    total_costs: Money = Decimal("0")
    notes: Optional[str] = None


# --- Payments ----------------------------------------------------------------


class PaymentBase(ApiModel):
    amount: Decimal = Field(..., gt=0)
    payment_date: date
    payment_method: str
    note: Optional[str] = None

    @field_validator("payment_method")
    def validate_method(cls, value: str) -> str:
        return _check_choice(value, PAYMENT_METHOD_ENUM, "Payment method")

    @field_validator("amount")
    def quantize_amount(cls, value: Decimal) -> Decimal:
        return _quantize(value)


class PaymentCreate(PaymentBase):
    user_id: int


class PaymentUpdate(ApiModel):
    user_id: Optional[int] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    note: Optional[str] = None

    @field_validator("payment_method")
    def validate_method(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, PAYMENT_METHOD_ENUM, "Payment method")

    @field_validator("amount")
    def quantize_amount(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _quantize(value)


class PaymentRead(ApiModel):
    id: int
    user_id: int
    user: Optional[UserSummary] = None
    amount: Money
    payment_date: date
    payment_method: str
    note: Optional[str] = None
    created_at: datetime


# --- Goals -------------------------------------------------------------------


class GoalCreate(ApiModel):
    type: str
    target: Decimal = Field(..., gt=0)
    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(0, ge=0, le=12)
    user_id: Optional[int] = None
    creator_id: Optional[int] = None
    bonus_amount: Optional[Decimal] = Field(None, ge=0)

    @field_validator("type")
    def validate_type(cls, value: str) -> str:
        return _check_choice(value, GOAL_TYPE_ENUM, "Goal type")

    @field_validator("target", "bonus_amount")
    def quantize_amount(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _quantize(value)


class GoalUpdate(ApiModel):
    type: Optional[str] = None
    target: Optional[Decimal] = Field(None, gt=0)
    year: Optional[int] = Field(None, ge=2000, le=2100)
    month: Optional[int] = Field(None, ge=0, le=12)
    user_id: Optional[int] = None
    creator_id: Optional[int] = None
    bonus_amount: Optional[Decimal] = Field(None, ge=0)

    @field_validator("type")
    def validate_type(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, GOAL_TYPE_ENUM, "Goal type")

    @field_validator("target", "bonus_amount")
    def quantize_amount(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _quantize(value)


class GoalRead(ApiModel):
    id: int
    type: str
    target: Money
    year: int
    month: int
    user_id: Optional[int] = None
    creator_id: Optional[int] = None
    bonus_amount: Optional[Money] = None
    scope: str
    created_at: datetime


class GoalProgressRead(ApiModel):
    goal: GoalRead
    current: Money
    target: Money
    progress_percent: Money
    remaining: Money
    achieved: bool
    bonus_amount: Optional[Money] = None
    bonus_description: Optional[str] = None
    period_start: date
    period_end: date


# --- Shifts ------------------------------------------------------------------

ShiftStart = Literal["09:00", "14:30", "20:00", "01:00"]


class ShiftCreate(ApiModel):
    user_id: int
    date: calendar_date
    start_time: ShiftStart
    end_time: Optional[str] = None

    @model_validator(mode="after")
    def fill_end_time(self) -> "ShiftCreate":
        expected = SHIFT_SLOTS[self.start_time]
        if self.end_time is None:
            self.end_time = expected
        elif self.end_time != expected:
            raise ValueError(f"A shift starting at {self.start_time} must end at {expected}.")
        return self


class ShiftUpdate(ApiModel):
    user_id: Optional[int] = None
    date: Optional[calendar_date] = None
    start_time: Optional[ShiftStart] = None


class ShiftRead(ApiModel):
    id: int
    user_id: int
    user: Optional[UserSummary] = None
    date: calendar_date
    start_time: str
    end_time: str
    created_at: datetime


class ShiftRange(ApiModel):
    start_date: date
    end_date: date


class ShiftAutoGenerate(ApiModel):
    week_start_date: date
    # weekday (0 = Monday) -> start time -> user ids
    template: Dict[int, Dict[ShiftStart, List[int]]]
    overwrite_existing: bool = False
    weeks: int = Field(1, ge=1, le=52)

    @field_validator("template")
    def validate_weekdays(cls, value: Dict[int, Dict[str, List[int]]]) -> Dict[int, Dict[str, List[int]]]:
        for weekday in value:
            if weekday < 0 or weekday > 6:
                raise ValueError("Template weekdays must be between 0 (Monday) and 6 (Sunday).")
        return value


class ShiftGenerationResult(ApiModel):
    created: int
    skipped: int
    replaced: int


class DeletedCount(ApiModel):
    deleted: int


# --- Dashboards --------------------------------------------------------------


class DailyPoint(ApiModel):
    date: calendar_date
    sales: Money
    commission: Money
    base_earnings: Money
    fixed_salary: Money
    total: Money
    count: int


class ChatterDashboard(ApiModel):
    user_id: int
    user_name: str
    year: int
    month: int
    total_sales: Money
    total_commissions: Money
    sale_count: int
    daily: List[DailyPoint]


class ChatterDetail(ApiModel):
    user: UserRead
    period_start: date
    period_end: date
    daily: List[DailyPoint]
    payments: List[PaymentRead]
    total_sales: Money
    commission: Money
    base_earnings: Money
    fixed_salary: Money
    total_retribution: Money
    total_payments: Money
    amount_owed: Money


class ChatterRevenueRow(ApiModel):
    user_id: int
    name: str
    email: str
    role: str
    commission_percent: Optional[Percent] = None
    revenue: Money
    commission: Money
    fixed_salary: Money
    total_base: Money
    total_retribution: Money
    sale_count: int


class CreatorFinancialsRead(ApiModel):
    creator_id: Optional[int] = None
    creator_name: str
    compensation_type: str
    revenue_share_percent: Optional[Percent] = None
    fixed_salary_cost: Optional[Money] = None
    gross_revenue: Money
    total_sales_amount: Money
    creator_earnings: Money
    chatter_commissions: Money = Decimal("0")
    marketing_costs: Money
    tool_costs: Money
    other_costs: Money
    custom_costs: List[CustomCost]
    custom_costs_total: Money
    net_revenue: Money
    agency_profit: Money


class AdminRecap(ApiModel):
    year: int
    month: int
    cumulative: bool
    period_start: date
    period_end: date
    total_sales: Money
    total_commissions: Money
    total_fixed_salaries: Money
    total_payments: Money
    total_owed_to_chatters: Money
    total_net_revenue: Money
    total_agency_profit: Money
    chatter_revenue: List[ChatterRevenueRow]
    creator_financials: List[CreatorFinancialsRead]


# --- Analytics ---------------------------------------------------------------


class MonthComparison(ApiModel):
    year: int
    month: int
    current_amount: Money
    previous_amount: Money
    amount_change: Money
    amount_change_percent: Money
    current_count: int
    previous_count: int
    count_change: int
    count_change_percent: Money


class LeaderboardEntry(ApiModel):
    rank: int
    user_id: int
    name: str
    amount: Money
    count: int


class CreatorDailyRevenue(ApiModel):
    date: calendar_date
    creator_id: int
    creator_name: str
    amount: Money


class HealthStatus(ApiModel):
    status: str
    version: str
    in_flight: int
