from __future__ import annotations

from typing import Iterable

from domain.formatting import format_inr, round_half_up
from domain.models import BehaviourType, EmotionTag, ExpenseCategory, InsightType, Transaction
from domain.schemas import FinanceSummary, Insight, ToolRequest, ToolResponse
from tools._transactions_support import count_tagged
from tools.base import Tool
from tools.ledger.summary import compute_summary
from tools.registry import register_tool

FOOD_LEAK_SHARE = 0.4
SAVING_SURPLUS_THRESHOLD = 1000.0
STRESS_COUNT_THRESHOLD = 2

BEHAVIOUR_MESSAGES: dict[BehaviourType, str] = {
    BehaviourType.PLANNED: "You're a Planned Spender! You think before spending and manage money wisely.",
    BehaviourType.IMPULSIVE: "You tend to be an Impulsive Spender. Consider pausing before making purchases.",
    BehaviourType.FREQUENT_SMALL: "You're a Frequent Small Spender. Those small purchases add up!",
}


def behaviour_insight(summary: FinanceSummary) -> Insight:
    return Insight(
        id="1",
        type=InsightType.BEHAVIOUR,
        title="Your Spending Style",
        description=BEHAVIOUR_MESSAGES[summary.behaviour_type],
        icon="🎯",
    )


def food_leak_insight(summary: FinanceSummary) -> Insight | None:
    food = summary.category_breakdown.get(ExpenseCategory.FOOD, 0.0)
    if not food > summary.total_expenses * FOOD_LEAK_SHARE:
        return None
    percent = round_half_up(food / summary.total_expenses * 100)
    return Insight(
        id="2",
        type=InsightType.LEAK,
        title="Food Money Leak Detected",
        description=(
            f"You spent {format_inr(food)} on food ({percent}% of expenses). "
            "Consider cooking more at home."
        ),
        icon="🍔",
    )


def saving_insight(summary: FinanceSummary) -> Insight | None:
    if not summary.balance > SAVING_SURPLUS_THRESHOLD:
        return None
    return Insight(
        id="3",
        type=InsightType.SAVING,
        title="Great Savings Potential!",
        description=(
            f"You have {format_inr(summary.balance)} surplus. "
            "Consider starting a small recurring deposit or emergency fund."
        ),
        icon="💰",
    )


def stress_insight(transactions: Iterable[Transaction]) -> Insight | None:
    if count_tagged(transactions, EmotionTag.STRESS) <= STRESS_COUNT_THRESHOLD:
        return None
    return Insight(
        id="4",
        type=InsightType.ALERT,
        title="Stress Spending Pattern",
        description=(
            "You seem to spend when stressed. Try healthier stress relief activities "
            "like exercise or talking to friends."
        ),
        icon="⚠️",
    )


def compute_insights(transactions: Iterable[Transaction], summary: FinanceSummary | None = None) -> list[Insight]:
    """
    Build the insight list in its fixed order: behaviour, food leak, saving, stress.

    The behaviour insight is always present; the others only when their
    trigger holds. Ids name the slot, so the same kind always has the same id.
    """
    rows = list(transactions)
    if summary is None:
        summary = compute_summary(rows)
    candidates = [
        behaviour_insight(summary),
        food_leak_insight(summary),
        saving_insight(summary),
        stress_insight(rows),
    ]
    return [insight for insight in candidates if insight is not None]


@register_tool
class InsightsTool(Tool):
    name = "insights.generate"
    description = "Behaviour, money-leak, saving and stress-spending insights derived from the transaction summary."

    def run(self, request: ToolRequest) -> ToolResponse:
        summary = compute_summary(request.transactions)
        insights = compute_insights(request.transactions, summary)
        return self.respond(
            request,
            {
                "insights": [insight.model_dump(mode="json") for insight in insights],
                "insight_count": len(insights),
                "behaviour_type": summary.behaviour_type.value,
            },
        )
