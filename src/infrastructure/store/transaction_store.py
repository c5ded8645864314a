from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Iterable

from domain.models import Transaction
from domain.schemas import TransactionCreate

logger = logging.getLogger(__name__)


class TransactionStore:
    """
    Ordered in-memory transaction collection.

    Transactions are append-only records: they can be added or removed by id,
    never edited in place. Ids are uuid4 hex strings and never reused.
    Readers get a copy of the list, so a snapshot cannot change under them.
    """

    def __init__(self, transactions: Iterable[Transaction] | None = None) -> None:
        self._transactions: list[Transaction] = []
        for txn in transactions or []:
            self._append(txn)

    def _append(self, txn: Transaction) -> Transaction:
        if any(existing.id == txn.id for existing in self._transactions):
            raise ValueError(f"Duplicate transaction id: {txn.id}")
        self._transactions.append(txn)
        return txn

    def add(self, draft: TransactionCreate | dict[str, Any]) -> Transaction:
        if not isinstance(draft, TransactionCreate):
            draft = TransactionCreate.model_validate(draft)
        txn = self._append(draft.to_transaction(uuid.uuid4().hex))
        logger.info("TransactionStore add id=%s type=%s amount=%.2f", txn.id, txn.type.value, txn.amount)
        return txn

    def remove(self, transaction_id: str) -> bool:
        before = len(self._transactions)
        self._transactions = [t for t in self._transactions if t.id != transaction_id]
        removed = len(self._transactions) < before
        logger.info("TransactionStore remove id=%s removed=%s", transaction_id, removed)
        return removed

    def get(self, transaction_id: str) -> Transaction | None:
        return next((t for t in self._transactions if t.id == transaction_id), None)

    def list(self) -> list[Transaction]:
        return list(self._transactions)

    def clear(self) -> None:
        self._transactions.clear()

    def __len__(self) -> int:
        return len(self._transactions)


def sample_transactions(now: datetime | None = None) -> list[Transaction]:
    """Demo data set: a month's allowance, a side gig and a handful of tagged expenses."""
    now = now or datetime.now()
    base = now.replace(hour=12, minute=0, second=0, microsecond=0)
    drafts = [
        {"type": "income", "amount": 5000, "source": "allowance", "description": "Monthly allowance"},
        {"type": "expense", "amount": 150, "category": "food", "emotion_tag": "need", "description": "Lunch"},
        {"type": "expense", "amount": 500, "category": "shopping", "emotion_tag": "impulse", "description": "New headphones"},
        {"type": "expense", "amount": 80, "category": "travel", "emotion_tag": "need", "description": "Metro card"},
        {"type": "expense", "amount": 200, "category": "entertainment", "emotion_tag": "celebration", "description": "Movie night"},
        {"type": "expense", "amount": 120, "category": "food", "emotion_tag": "stress", "description": "Late night snacks"},
        {"type": "income", "amount": 2000, "source": "side-income", "description": "Freelance work"},
        {"type": "expense", "amount": 350, "category": "food", "emotion_tag": "impulse", "description": "Cafe visit"},
    ]
    transactions: list[Transaction] = []
    for idx, draft in enumerate(drafts, start=1):
        # Spread over the last week, oldest first.
        draft["date"] = base - timedelta(days=max(0, len(drafts) - idx - 1))
        txn = TransactionCreate.model_validate(draft).to_transaction(str(idx))
        transactions.append(txn)
    return transactions
