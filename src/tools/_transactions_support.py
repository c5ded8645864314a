from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

from domain.models import EmotionTag, Transaction
from domain.schemas import ToolRequest


def as_naive_local(value: datetime) -> datetime:
    """Aware timestamps are shifted to local time so they compare with naive window bounds."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def coerce_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return as_naive_local(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return as_naive_local(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None


def expenses(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.is_expense]


def incomes(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.is_income]


def count_tagged(transactions: Iterable[Transaction], tag: EmotionTag) -> int:
    return sum(1 for t in transactions if t.is_expense and t.emotion_tag == tag)


def total_amount(transactions: Iterable[Transaction]) -> float:
    return sum(float(t.amount) for t in transactions)


def resolve_as_of(request: ToolRequest) -> datetime:
    # An explicit `now` arg wins over the request context.
    args = request.args if isinstance(request.args, dict) else {}
    override = coerce_datetime(args.get("now"))
    if override is not None:
        return override
    return as_naive_local(request.context.as_of)
