from __future__ import annotations

import http.client
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from infrastructure.llm.llm_client import LLMClient
from interface.api import app


class ApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)

    def test_health(self) -> None:
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})

    def test_add_list_and_delete_transaction(self) -> None:
        created = self.client.post(
            "/transactions",
            json={"type": "expense", "amount": 75, "category": "travel", "emotion_tag": "need", "date": "2026-09-15"},
        )
        self.assertEqual(created.status_code, 201)
        txn_id = created.json()["id"]
        self.assertIn(txn_id, [t["id"] for t in self.client.get("/transactions").json()])

        self.assertEqual(self.client.delete(f"/transactions/{txn_id}").status_code, 200)
        self.assertEqual(self.client.delete(f"/transactions/{txn_id}").status_code, 404)

    def test_invalid_transaction_is_rejected(self) -> None:
        res = self.client.post("/transactions", json={"type": "income", "amount": 100, "category": "food"})
        self.assertEqual(res.status_code, 422)

    def test_summary_and_insights(self) -> None:
        summary = self.client.get("/summary").json()
        insights = self.client.get("/insights").json()

        self.assertEqual(summary["balance"], summary["total_income"] - summary["total_expenses"])
        self.assertEqual(set(summary["category_breakdown"]), {"food", "travel", "shopping", "entertainment", "others"})
        self.assertEqual(insights[0]["type"], "behaviour")

    def test_budget_window(self) -> None:
        res = self.client.get("/budget/week", params={"now": "2026-09-15T10:00:00"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["window"], "week")
        self.assertEqual(len(res.json()["daily_spend"]), 7)
        self.assertEqual(self.client.get("/budget/year").status_code, 422)

    def test_profile_update_validation(self) -> None:
        ok = self.client.patch("/profile", json={"daily_limit": 250})
        bad = self.client.patch("/profile", json={"daily_limit": -5})

        self.assertEqual(ok.json()["daily_limit"], 250)
        self.assertEqual(bad.status_code, 422)

    def test_tools_endpoints(self) -> None:
        names = {spec["name"] for spec in self.client.get("/tools").json()}
        self.assertIn("budget.monthly", names)

        res = self.client.post("/tools/detect.behaviour", json={"small_threshold": 500})
        self.assertTrue(res.json()["ok"])
        self.assertIn(res.json()["result"]["behaviour_type"], {"planned", "impulsive", "frequent-small"})
        self.assertEqual(self.client.post("/tools/missing.tool", json={}).status_code, 404)

    def test_advice_falls_back_when_model_is_down(self) -> None:
        with patch.object(LLMClient, "complete", return_value=""):
            res = self.client.get("/advice", params={"refresh": "true"})

        self.assertEqual(res.status_code, 200)
        self.assertIn(res.json()["source"], {"fallback", "empty"})

    def test_advice_falls_back_when_model_connection_drops(self) -> None:
        dropped = http.client.RemoteDisconnected("Remote end closed connection without response")
        with patch("infrastructure.llm.llm_client.urllib.request.urlopen", side_effect=dropped):
            res = self.client.get("/advice", params={"refresh": "true"})

        self.assertEqual(res.status_code, 200)
        self.assertIn(res.json()["source"], {"fallback", "empty"})

    def test_profile_rejects_unknown_and_negative_fields(self) -> None:
        unknown = self.client.patch("/profile", json={"dailyLimit": 300})
        negative = self.client.patch(
            "/profile", json={"routine_expenses": [{"id": "r1", "name": "Bus", "amount": -40}]}
        )

        self.assertEqual(unknown.status_code, 422)
        self.assertEqual(negative.status_code, 422)


if __name__ == "__main__":
    unittest.main()
