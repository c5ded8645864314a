from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException
from pydantic import ValidationError

from domain.models import Transaction, WindowKind
from domain.schemas import TransactionCreate
from interface.cli import build_service
from tools.registry import registry

app = FastAPI(title="PocketKash API")
service = build_service()


def transaction_payload(txn: Transaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "type": txn.type.value,
        "amount": txn.amount,
        "date": txn.date.isoformat(),
        "category": txn.category.value if txn.category else None,
        "source": txn.source.value if txn.source else None,
        "emotion_tag": txn.emotion_tag.value if txn.emotion_tag else None,
        "description": txn.description,
    }


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/transactions")
def list_transactions() -> list[dict]:
    return [transaction_payload(t) for t in service.list_transactions()]


@app.post("/transactions", status_code=201)
def add_transaction(draft: TransactionCreate) -> dict:
    return transaction_payload(service.add_transaction(draft))


@app.delete("/transactions/{transaction_id}")
def delete_transaction(transaction_id: str) -> dict[str, str]:
    if not service.delete_transaction(transaction_id):
        raise HTTPException(status_code=404, detail=f"Transaction not found: {transaction_id}")
    return {"deleted": transaction_id}


@app.get("/summary")
def summary() -> dict:
    return service.summary().model_dump(mode="json")


@app.get("/insights")
def insights() -> list[dict]:
    return [insight.model_dump(mode="json") for insight in service.insights()]


@app.get("/budget/{window}")
def budget_window(window: WindowKind, now: Optional[datetime] = None) -> dict:
    return service.window_status(window, now=now).model_dump(mode="json")


@app.get("/advice")
def advice(refresh: bool = False) -> dict:
    return service.advice(force_refresh=refresh).model_dump()


@app.get("/profile")
def get_profile() -> dict:
    return service.profile().model_dump(mode="json")


@app.patch("/profile")
def update_profile(changes: Dict[str, Any] = Body(...)) -> dict:
    try:
        profile = service.update_profile(**changes)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return profile.model_dump(mode="json")


@app.get("/tools")
def list_tools() -> list[dict]:
    return [spec.__dict__ for spec in registry.list_specs()]


@app.post("/tools/{tool_name}")
def run_tool(tool_name: str, args: Optional[Dict[str, Any]] = Body(default=None)) -> dict:
    if tool_name not in registry:
        raise HTTPException(status_code=404, detail=f"Tool not registered: {tool_name}")
    return service.run_tool(tool_name, args=args or {}).model_dump(mode="json")
