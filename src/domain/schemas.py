from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from domain.models import (
    AlertSeverity,
    BehaviourType,
    EmotionTag,
    ExpenseCategory,
    IncomeSource,
    InsightType,
    RoutineExpense,
    Transaction,
    TransactionType,
    WindowKind,
)


class TransactionCreate(BaseModel):
    """
    Validated input for a new transaction.

    The store assigns the id; everything else is fixed at creation time.
    Income carries a `source`, expenses carry a `category` and optionally an
    `emotion_tag`. An expense without a category is accepted and simply stays
    out of the category breakdown.
    """

    type: TransactionType
    amount: float = Field(gt=0)
    date: datetime = Field(default_factory=datetime.now)
    category: Optional[ExpenseCategory] = None
    source: Optional[IncomeSource] = None
    emotion_tag: Optional[EmotionTag] = None
    description: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if not isinstance(value, str):
            return value

        text = value.strip()
        if not text:
            return value

        for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y", "%d-%m-%Y"):
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        return value

    @model_validator(mode="after")
    def validate_type_fields(self) -> "TransactionCreate":
        if self.type == TransactionType.INCOME:
            if self.category is not None:
                raise ValueError("income transactions cannot carry a category")
            if self.emotion_tag is not None:
                raise ValueError("income transactions cannot carry an emotion_tag")
        elif self.source is not None:
            raise ValueError("expense transactions cannot carry a source")
        return self

    def to_transaction(self, transaction_id: str) -> Transaction:
        return Transaction(
            id=transaction_id,
            type=self.type,
            amount=float(self.amount),
            date=self.date,
            category=self.category,
            source=self.source,
            emotion_tag=self.emotion_tag,
            description=self.description,
        )


class FinanceSummary(BaseModel):
    total_income: float = 0.0
    total_expenses: float = 0.0
    balance: float = 0.0
    category_breakdown: Dict[ExpenseCategory, float] = Field(default_factory=dict)
    behaviour_type: BehaviourType = BehaviourType.PLANNED


class Insight(BaseModel):
    id: str
    type: InsightType
    title: str
    description: str
    icon: str = ""


class SmartAlert(BaseModel):
    id: str
    severity: AlertSeverity
    title: str
    message: str


class DaySpend(BaseModel):
    day_date: date
    day: str
    amount: float
    is_today: bool = False


class MoneyLeak(BaseModel):
    category: ExpenseCategory
    amount: float
    percent: int
    message: str


class MonthPace(BaseModel):
    days_in_month: int
    day_of_month: int
    days_left: int
    expected_pace_so_far: float
    is_ahead_of_pace: bool
    suggested_daily_allowance: float


class WindowStatus(BaseModel):
    """
    Spend against a limit over one day/week/month window.

    `remaining`, `percent_used` and `over_budget_amount` are None when no
    limit is configured. Window-specific extras are None outside their window.
    """

    window: WindowKind
    start: datetime
    end: datetime
    limit: Optional[float] = None
    spent: float = 0.0
    remaining: Optional[float] = None
    percent_used: Optional[int] = None
    is_over_budget: bool = False
    over_budget_amount: Optional[float] = None
    transaction_count: int = 0
    category_breakdown: Dict[ExpenseCategory, float] = Field(default_factory=dict)
    alerts: List[SmartAlert] = Field(default_factory=list)

    projected_routine_remaining: Optional[float] = None
    daily_spend: Optional[List[DaySpend]] = None
    daily_average: Optional[float] = None
    pace: Optional[MonthPace] = None
    money_leaks: Optional[List[MoneyLeak]] = None
    emotion_breakdown: Optional[Dict[EmotionTag, float]] = None


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = ""
    role: Literal["studying", "working", "both"] = "studying"
    has_income: bool = False
    monthly_allowance: float = Field(default=0.0, ge=0)
    salary: float = Field(default=0.0, ge=0)
    side_income: float = Field(default=0.0, ge=0)
    daily_limit: float = Field(default=0.0, ge=0)
    weekly_limit: float = Field(default=0.0, ge=0)
    monthly_limit: float = Field(default=0.0, ge=0)
    routine_expenses: List[RoutineExpense] = Field(default_factory=list)

    @field_validator("daily_limit", "weekly_limit", "monthly_limit", mode="before")
    @classmethod
    def coerce_unset_limit(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("routine_expenses")
    @classmethod
    def check_routine_amounts(cls, value: List[RoutineExpense]) -> List[RoutineExpense]:
        for item in value:
            if float(item.amount) < 0:
                raise ValueError(f"routine expense {item.name!r} has a negative amount")
        return value

    @property
    def routine_expenses_total(self) -> float:
        return sum(float(item.amount) for item in self.routine_expenses)

    @property
    def expected_income(self) -> float:
        return self.monthly_allowance + self.salary + self.side_income

    def limit_for(self, window: WindowKind) -> float:
        limits = {
            WindowKind.DAY: self.daily_limit,
            WindowKind.WEEK: self.weekly_limit,
            WindowKind.MONTH: self.monthly_limit,
        }
        return limits[window]


class ToolContext(BaseModel):
    user_id: str = "local"
    as_of: datetime = Field(default_factory=datetime.now)


class ToolRequest(BaseModel):
    request_id: str
    tool: str
    args: Dict[str, Any] = Field(default_factory=dict)
    transactions: List[Transaction] = Field(
        default_factory=list,
        description="Snapshot of the transaction list read at call time. Tools never fetch on their own.",
    )
    profile: UserProfile = Field(default_factory=UserProfile)
    context: ToolContext = Field(default_factory=ToolContext)


class ToolResponse(BaseModel):
    request_id: str
    tool: str
    ok: bool = True
    result: Dict[str, Any] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    context: ToolContext


class AdviceResponse(BaseModel):
    text: str
    source: Literal["llm", "fallback", "empty"]
    cached: bool = False
