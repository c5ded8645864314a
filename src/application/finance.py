from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any

from application.tool_executor import ToolExecutor
from domain.models import Transaction, WindowKind
from domain.schemas import (
    AdviceResponse,
    FinanceSummary,
    Insight,
    ToolResponse,
    TransactionCreate,
    UserProfile,
    WindowStatus,
)
from infrastructure.llm.llm_client import LLMClient
from infrastructure.store.transaction_store import TransactionStore
from infrastructure.user_profile.profile import ProfileStore
from llm.advisor_llm import AdvisorLLM
from tools.budget.window import evaluate_window
from tools.insights.generate import compute_insights
from tools.ledger.summary import compute_summary

logger = logging.getLogger(__name__)

DASHBOARD_TOOLS = (
    "ledger.summary",
    "insights.generate",
    "budget.daily",
    "budget.weekly",
    "budget.monthly",
)


class FinanceService:
    """
    Facade the interfaces talk to.

    Holds the transaction store and profile store, and reads a fresh snapshot
    from them on every call; nothing derived is kept between calls except the
    advisor's exact-input cache.
    """

    def __init__(
        self,
        store: TransactionStore,
        profiles: ProfileStore,
        tool_executor: ToolExecutor,
        advisor: AdvisorLLM | None = None,
    ):
        self._store = store
        self._profiles = profiles
        self._tool_executor = tool_executor
        self._advisor = advisor or AdvisorLLM(LLMClient())

    # ---- transactions ----
    def add_transaction(self, draft: TransactionCreate | dict[str, Any]) -> Transaction:
        return self._store.add(draft)

    def delete_transaction(self, transaction_id: str) -> bool:
        return self._store.remove(transaction_id)

    def list_transactions(self) -> list[Transaction]:
        return self._store.list()

    # ---- profile ----
    def profile(self) -> UserProfile:
        return self._profiles.get()

    def update_profile(self, **changes: Any) -> UserProfile:
        return self._profiles.update(**changes)

    # ---- derived views ----
    def summary(self) -> FinanceSummary:
        return compute_summary(self._store.list())

    def insights(self) -> list[Insight]:
        transactions = self._store.list()
        return compute_insights(transactions, compute_summary(transactions))

    def window_status(self, window: WindowKind | str, now: datetime | None = None) -> WindowStatus:
        window = WindowKind(window)
        profile = self._profiles.get()
        return evaluate_window(
            self._store.list(),
            limit=profile.limit_for(window),
            window=window,
            now=now,
            routine_expenses_total=profile.routine_expenses_total,
        )

    def advice(self, force_refresh: bool = False) -> AdviceResponse:
        transactions = self._store.list()
        summary = compute_summary(transactions)
        return self._advisor.generate_advice(
            transactions,
            summary,
            user_name=self._profiles.get().name,
            force_refresh=force_refresh,
        )

    # ---- tool surface ----
    def run_tool(self, tool_name: str, args: dict[str, Any] | None = None, now: datetime | None = None) -> ToolResponse:
        return self._tool_executor.run_call(
            tool_name,
            self._store.list(),
            self._profiles.get(),
            args=args,
            as_of=now,
        )

    def dashboard(self, now: datetime | None = None) -> list[ToolResponse]:
        logger.info("FinanceService dashboard start transactions=%d", len(self._store))
        t0 = time.perf_counter()
        responses = self._tool_executor.run_calls(
            DASHBOARD_TOOLS,
            self._store.list(),
            self._profiles.get(),
            as_of=now,
        )
        logger.info(
            "FinanceService dashboard complete in %.3fs failed=%d",
            time.perf_counter() - t0,
            sum(1 for r in responses if not r.ok),
        )
        return responses
