from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

from domain.models import BehaviourType, EmotionTag, Transaction
from domain.schemas import ToolRequest, ToolResponse
from tools._transactions_support import count_tagged, expenses
from tools.base import Tool, ToolSpec
from tools.registry import register_tool

IMPULSE_RATIO_THRESHOLD = 0.4
SMALL_RATIO_THRESHOLD = 0.5
DEFAULT_SMALL_EXPENSE_THRESHOLD = 100.0


def small_expense_threshold() -> float:
    return float(os.getenv("SMALL_EXPENSE_THRESHOLD", str(DEFAULT_SMALL_EXPENSE_THRESHOLD)))


@dataclass(frozen=True)
class BehaviourStats:
    expense_count: int
    impulse_count: int
    small_count: int

    @property
    def impulse_ratio(self) -> float:
        if self.expense_count == 0:
            return 0.0
        return self.impulse_count / self.expense_count

    @property
    def small_ratio(self) -> float:
        if self.expense_count == 0:
            return 0.0
        return self.small_count / self.expense_count


def behaviour_stats(transactions: Iterable[Transaction], small_threshold: float | None = None) -> BehaviourStats:
    threshold = small_expense_threshold() if small_threshold is None else float(small_threshold)
    expense_rows = expenses(transactions)
    return BehaviourStats(
        expense_count=len(expense_rows),
        impulse_count=count_tagged(expense_rows, EmotionTag.IMPULSE),
        small_count=sum(1 for t in expense_rows if float(t.amount) < threshold),
    )


def classify_stats(stats: BehaviourStats) -> BehaviourType:
    if stats.expense_count == 0:
        return BehaviourType.PLANNED
    if stats.impulse_ratio > IMPULSE_RATIO_THRESHOLD:
        return BehaviourType.IMPULSIVE
    if stats.small_ratio > SMALL_RATIO_THRESHOLD:
        return BehaviourType.FREQUENT_SMALL
    return BehaviourType.PLANNED


def classify_behaviour(transactions: Iterable[Transaction], small_threshold: float | None = None) -> BehaviourType:
    """Label the spending style; impulsive beats frequent-small, planned is the fallback."""
    return classify_stats(behaviour_stats(transactions, small_threshold))


@register_tool
class BehaviourTool(Tool):
    name = "detect.behaviour"
    description = "Classify spending style (planned / impulsive / frequent-small) from expense emotion tags and sizes."

    def run(self, request: ToolRequest) -> ToolResponse:
        args = request.args if isinstance(request.args, dict) else {}
        stats = behaviour_stats(request.transactions, args.get("small_threshold"))
        return self.respond(
            request,
            {
                "behaviour_type": classify_stats(stats).value,
                "expense_count": stats.expense_count,
                "impulse_ratio": round(stats.impulse_ratio, 4),
                "small_ratio": round(stats.small_ratio, 4),
            },
        )

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            args_schema={
                "type": "object",
                "properties": {
                    "small_threshold": {
                        "type": "number",
                        "description": "Amount below which an expense counts as small. Defaults to SMALL_EXPENSE_THRESHOLD.",
                    }
                },
            },
        )
