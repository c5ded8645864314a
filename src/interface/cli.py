from __future__ import annotations

import json
import os

from application.finance import FinanceService
from application.tool_executor import ToolExecutor
from infrastructure.store.transaction_store import TransactionStore, sample_transactions
from infrastructure.user_profile.profile import ProfileStore
from tools.registry import registry

VIEWS = ("dashboard", "summary", "insights", "day", "week", "month", "advice")


def build_service() -> FinanceService:
    import tools  # noqa: F401

    seed = sample_transactions() if os.getenv("POCKETKASH_SAMPLE_DATA", "1") == "1" else None
    return FinanceService(
        store=TransactionStore(seed),
        profiles=ProfileStore(),
        tool_executor=ToolExecutor(registry),
    )


def render_view(service: FinanceService, view: str) -> str:
    if view == "summary":
        return service.summary().model_dump_json(indent=2)
    if view == "insights":
        return json.dumps([i.model_dump(mode="json") for i in service.insights()], indent=2, ensure_ascii=False)
    if view in ("day", "week", "month"):
        return service.window_status(view).model_dump_json(indent=2)
    if view == "advice":
        return service.advice().model_dump_json(indent=2)
    return json.dumps(
        [r.model_dump(mode="json") for r in service.dashboard()],
        indent=2,
        ensure_ascii=False,
    )


def main() -> None:
    view = input(f"PocketKash [{'/'.join(VIEWS)}] > ").strip().lower()
    if view not in VIEWS:
        view = "dashboard"
    print(render_view(build_service(), view))


if __name__ == "__main__":
    main()
