from __future__ import annotations

from typing import Iterable

from domain.models import ExpenseCategory, Transaction
from domain.schemas import FinanceSummary, ToolRequest, ToolResponse
from tools._transactions_support import expenses, incomes, total_amount
from tools.base import Tool
from tools.detect.behaviour import classify_behaviour
from tools.registry import register_tool


def empty_breakdown() -> dict[ExpenseCategory, float]:
    return {category: 0.0 for category in ExpenseCategory}


def category_breakdown(transactions: Iterable[Transaction]) -> dict[ExpenseCategory, float]:
    breakdown = empty_breakdown()
    for txn in expenses(transactions):
        # Uncategorised expenses still count toward totals, just not here.
        if txn.category is None:
            continue
        breakdown[txn.category] += float(txn.amount)
    return breakdown


def compute_summary(transactions: Iterable[Transaction]) -> FinanceSummary:
    rows = list(transactions)
    total_income = total_amount(incomes(rows))
    total_expenses = total_amount(expenses(rows))
    return FinanceSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
        category_breakdown=category_breakdown(rows),
        behaviour_type=classify_behaviour(rows),
    )


@register_tool
class LedgerSummaryTool(Tool):
    name = "ledger.summary"
    description = "Total income, total expenses, balance and per-category expense breakdown over all transactions."

    def run(self, request: ToolRequest) -> ToolResponse:
        summary = compute_summary(request.transactions)
        result = summary.model_dump(mode="json")
        result["transaction_count"] = len(request.transactions)
        return self.respond(request, result)
