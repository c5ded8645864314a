from __future__ import annotations

import logging
from typing import List, Sequence

from domain.formatting import format_inr
from domain.models import EmotionTag, Transaction
from domain.schemas import AdviceResponse, FinanceSummary
from infrastructure.llm.llm_client import LLMClient
from infrastructure.persistence.advice_cache import AdviceCache, fingerprint
from tools._transactions_support import expenses, total_amount

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful financial advisor for PocketKash, an expense tracking app. "
    "Provide brief, actionable insights based on the user's spending data. "
    "Keep responses concise (2-3 bullet points) and encouraging."
)

EMPTY_ADVICE = "Add some transactions to get personalized AI insights about your spending patterns."

DEFAULT_TIPS = (
    "• Keep tracking your expenses to get better insights!",
    "• Set daily spending limits to stay on budget.",
)


def _tagged_spend(transactions: Sequence[Transaction], tag: EmotionTag) -> float:
    return total_amount(t for t in expenses(transactions) if t.emotion_tag == tag)


def fallback_digest(transactions: Sequence[Transaction], summary: FinanceSummary) -> str:
    """Locally computed tips used whenever the model is unavailable or returns nothing."""
    tips: List[str] = []
    impulse = _tagged_spend(transactions, EmotionTag.IMPULSE)
    stress = _tagged_spend(transactions, EmotionTag.STRESS)

    if impulse > summary.total_expenses * 0.2:
        tips.append(
            f"• Your impulse spending ({format_inr(impulse)}) is high. "
            "Try the 24-hour rule before non-essential purchases."
        )
    if stress > 0:
        tips.append(
            f"• You've spent {format_inr(stress)} during stressful moments. "
            "Consider healthier alternatives like exercise or talking to friends."
        )
    if summary.balance > summary.total_income * 0.2:
        tips.append("• Great job! You have a healthy balance. Consider putting some into savings.")
    elif summary.balance < 0:
        tips.append("• You're spending more than you earn. Review your expenses and cut non-essentials.")

    if summary.category_breakdown:
        top_category, top_amount = max(summary.category_breakdown.items(), key=lambda item: item[1])
        if top_amount > summary.total_expenses * 0.4:
            tips.append(
                f"• {top_category.value.capitalize()} is your biggest expense category. Look for ways to reduce it."
            )

    return "\n\n".join(tips) if tips else "\n".join(DEFAULT_TIPS)


class AdvisorLLM:
    """Builds the spending digest prompt and turns model output into advice, falling back to local tips."""

    def __init__(self, llm_client: LLMClient, cache: AdviceCache | None = None):
        self._llm = llm_client
        self._cache = cache or AdviceCache()

    def build_prompt(self, transactions: Sequence[Transaction], summary: FinanceSummary, user_name: str = "") -> str:
        recent = ", ".join(
            f"{(t.category.value if t.category else t.type.value)}: {format_inr(t.amount)} "
            f"({t.emotion_tag.value if t.emotion_tag else 'normal'})"
            for t in list(transactions)[-5:]
        )
        breakdown = ", ".join(
            f"{category.value}: {format_inr(amount)}" for category, amount in summary.category_breakdown.items()
        )
        return "\n".join(
            [
                "User's Financial Summary:",
                f"- Total Expenses: {format_inr(summary.total_expenses)}",
                f"- Total Income: {format_inr(summary.total_income)}",
                f"- Balance: {format_inr(summary.balance)}",
                f"- Spending Behavior: {summary.behaviour_type.value}",
                f"- Recent transactions: {recent}",
                f"- Category breakdown: {breakdown}",
                "",
                "Provide 2-3 bullet points of personalized financial insights and actionable tips "
                f"for {user_name or 'the user'}. Be encouraging and specific.",
            ]
        )

    def generate_advice(
        self,
        transactions: Sequence[Transaction],
        summary: FinanceSummary,
        user_name: str = "",
        force_refresh: bool = False,
    ) -> AdviceResponse:
        rows = list(transactions)
        if not rows:
            return AdviceResponse(text=EMPTY_ADVICE, source="empty")

        prompt = self.build_prompt(rows, summary, user_name)
        key = fingerprint({"prompt": prompt, "summary": summary.model_dump(mode="json"), "user": user_name})
        if not force_refresh:
            cached = self._cache.get(key)
            if cached is not None:
                logger.info("AdvisorLLM cache hit transactions=%d", len(rows))
                return AdviceResponse(text=cached, source="llm", cached=True)

        logger.info("AdvisorLLM generate_advice start transactions=%d behaviour=%s", len(rows), summary.behaviour_type.value)
        try:
            raw = self._llm.complete(prompt, system=SYSTEM_PROMPT).strip()
        except Exception:
            logger.exception("AdvisorLLM model call failed; using fallback digest")
            raw = ""
        if raw:
            self._cache.put(key, raw)
            return AdviceResponse(text=raw, source="llm")

        logger.info("AdvisorLLM empty model response; using fallback digest")
        return AdviceResponse(text=fallback_digest(rows, summary), source="fallback")
