from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class ExpenseCategory(str, Enum):
    FOOD = "food"
    TRAVEL = "travel"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    OTHERS = "others"


class IncomeSource(str, Enum):
    ALLOWANCE = "allowance"
    SALARY = "salary"
    SIDE_INCOME = "side-income"
    OTHERS = "others"


class EmotionTag(str, Enum):
    NEED = "need"
    IMPULSE = "impulse"
    STRESS = "stress"
    CELEBRATION = "celebration"


class BehaviourType(str, Enum):
    PLANNED = "planned"
    IMPULSIVE = "impulsive"
    FREQUENT_SMALL = "frequent-small"


class InsightType(str, Enum):
    BEHAVIOUR = "behaviour"
    LEAK = "leak"
    SAVING = "saving"
    ALERT = "alert"


class AlertSeverity(str, Enum):
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"


class WindowKind(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TransactionType
    amount: float
    date: datetime
    category: ExpenseCategory | None = None
    source: IncomeSource | None = None
    emotion_tag: EmotionTag | None = None
    description: str = ""

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME


@dataclass(frozen=True)
class RoutineExpense:
    id: str
    name: str
    amount: float
    category: str = "routine"
