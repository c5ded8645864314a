from __future__ import annotations

import unittest
from datetime import datetime

from pydantic import ValidationError

from domain.models import EmotionTag, ExpenseCategory, RoutineExpense, TransactionType, WindowKind
from domain.schemas import TransactionCreate, UserProfile
from infrastructure.store.transaction_store import TransactionStore, sample_transactions
from infrastructure.user_profile.profile import ProfileStore


class TransactionStoreTests(unittest.TestCase):
    def test_add_assigns_unique_ids_in_order(self) -> None:
        store = TransactionStore()
        first = store.add({"type": "expense", "amount": 120, "category": "food", "emotion_tag": "stress"})
        second = store.add(TransactionCreate(type=TransactionType.INCOME, amount=5000, source="salary"))

        self.assertNotEqual(first.id, second.id)
        self.assertEqual([t.id for t in store.list()], [first.id, second.id])
        self.assertEqual(first.category, ExpenseCategory.FOOD)
        self.assertEqual(first.emotion_tag, EmotionTag.STRESS)
        self.assertIsNone(second.category)

    def test_remove_by_id(self) -> None:
        store = TransactionStore()
        txn = store.add({"type": "expense", "amount": 50, "category": "travel"})

        self.assertTrue(store.remove(txn.id))
        self.assertFalse(store.remove(txn.id))
        self.assertIsNone(store.get(txn.id))
        self.assertEqual(len(store), 0)

    def test_ids_are_not_reused_after_delete(self) -> None:
        store = TransactionStore()
        removed = store.add({"type": "expense", "amount": 50, "category": "travel"})
        store.remove(removed.id)
        again = store.add({"type": "expense", "amount": 50, "category": "travel"})
        self.assertNotEqual(removed.id, again.id)

    def test_list_returns_a_snapshot(self) -> None:
        store = TransactionStore()
        store.add({"type": "expense", "amount": 50, "category": "travel"})
        snapshot = store.list()
        store.add({"type": "expense", "amount": 70, "category": "food"})

        self.assertEqual(len(snapshot), 1)
        self.assertEqual(len(store), 2)

    def test_duplicate_seed_ids_are_rejected(self) -> None:
        seed = sample_transactions()
        with self.assertRaises(ValueError):
            TransactionStore(seed + seed[:1])

    def test_sample_transactions(self) -> None:
        seed = sample_transactions(datetime(2026, 9, 15, 9, 0))
        store = TransactionStore(seed)

        self.assertEqual(len(store), 8)
        self.assertEqual([t.id for t in seed], [str(i) for i in range(1, 9)])
        self.assertEqual(seed[-1].date, datetime(2026, 9, 15, 12, 0))
        self.assertLessEqual(seed[0].date, seed[-1].date)


class TransactionCreateTests(unittest.TestCase):
    def test_rejects_non_positive_amount(self) -> None:
        with self.assertRaises(ValidationError):
            TransactionCreate(type="expense", amount=0, category="food")

    def test_rejects_unknown_category(self) -> None:
        with self.assertRaises(ValidationError):
            TransactionCreate(type="expense", amount=10, category="rent")

    def test_income_cannot_carry_expense_fields(self) -> None:
        with self.assertRaises(ValidationError):
            TransactionCreate(type="income", amount=10, source="salary", category="food")
        with self.assertRaises(ValidationError):
            TransactionCreate(type="income", amount=10, source="salary", emotion_tag="impulse")

    def test_expense_cannot_carry_source(self) -> None:
        with self.assertRaises(ValidationError):
            TransactionCreate(type="expense", amount=10, category="food", source="salary")

    def test_expense_without_category_is_accepted(self) -> None:
        draft = TransactionCreate(type="expense", amount=10)
        self.assertIsNone(draft.category)

    def test_date_strings_are_coerced(self) -> None:
        self.assertEqual(
            TransactionCreate(type="expense", amount=10, category="food", date="2026-09-15").date,
            datetime(2026, 9, 15),
        )
        self.assertEqual(
            TransactionCreate(type="expense", amount=10, category="food", date="15/09/2026").date,
            datetime(2026, 9, 15),
        )


class ProfileStoreTests(unittest.TestCase):
    def test_default_profile_has_unset_limits(self) -> None:
        profile = ProfileStore().get()

        for window in WindowKind:
            self.assertEqual(profile.limit_for(window), 0)
        self.assertEqual(profile.routine_expenses_total, 0)

    def test_update_validates_and_merges(self) -> None:
        store = ProfileStore()
        store.update(name="Asha", daily_limit=300)
        profile = store.update(
            routine_expenses=[{"id": "r1", "name": "Bus", "amount": 40}, {"id": "r2", "name": "Tea", "amount": 20}],
        )

        self.assertEqual(profile.name, "Asha")
        self.assertEqual(profile.daily_limit, 300)
        self.assertEqual(profile.routine_expenses_total, 60)
        self.assertIsInstance(profile.routine_expenses[0], RoutineExpense)
        self.assertEqual(profile.routine_expenses[0].category, "routine")

        with self.assertRaises(ValidationError):
            store.update(weekly_limit=-1)
        self.assertEqual(store.get().weekly_limit, 0)

    def test_update_rejects_negative_routine_amount(self) -> None:
        store = ProfileStore()

        with self.assertRaises(ValidationError):
            store.update(routine_expenses=[{"id": "r1", "name": "Bus", "amount": -40}])
        self.assertEqual(store.get().routine_expenses_total, 0)

    def test_update_rejects_unknown_fields(self) -> None:
        store = ProfileStore()

        with self.assertRaises(ValidationError):
            store.update(dailyLimit=300)
        self.assertEqual(store.get().daily_limit, 0)

    def test_expected_income_and_null_limits(self) -> None:
        profile = UserProfile(monthly_allowance=3000, salary=0, side_income=1500, monthly_limit=None)
        self.assertEqual(profile.expected_income, 4500)
        self.assertEqual(profile.limit_for(WindowKind.MONTH), 0)


if __name__ == "__main__":
    unittest.main()
