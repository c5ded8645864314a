from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Sequence

from domain.models import Transaction
from domain.schemas import ToolContext, ToolRequest, ToolResponse, UserProfile
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Runs registered tools over an explicit transaction snapshot; one failing call never aborts the batch."""

    def __init__(self, registry: ToolRegistry):
        self._registry = registry

    def run_call(
        self,
        tool_name: str,
        transactions: Sequence[Transaction],
        profile: UserProfile,
        args: dict[str, Any] | None = None,
        as_of: datetime | None = None,
        request_id: str = "local",
    ) -> ToolResponse:
        context = ToolContext(as_of=as_of or datetime.now())
        req = ToolRequest(
            request_id=f"{request_id}:{tool_name}",
            tool=tool_name,
            args=args or {},
            transactions=list(transactions),
            profile=profile,
            context=context,
        )
        logger.info("ToolExecutor running tool=%s transactions=%d", tool_name, len(req.transactions))
        t = time.perf_counter()
        try:
            tool = self._registry.get_tool(req.tool)
            response = tool.run(req)
        except Exception as exc:
            logger.exception("ToolExecutor failed tool=%s", tool_name)
            response = ToolResponse(
                request_id=req.request_id,
                tool=req.tool,
                ok=False,
                errors=[str(exc) or exc.__class__.__name__],
                context=context,
            )
        logger.info("ToolExecutor finished tool=%s in %.3fs ok=%s", tool_name, time.perf_counter() - t, response.ok)
        return response

    def run_calls(
        self,
        tool_names: Sequence[str],
        transactions: Sequence[Transaction],
        profile: UserProfile,
        as_of: datetime | None = None,
        request_id: str = "local",
    ) -> list[ToolResponse]:
        as_of = as_of or datetime.now()
        return [
            self.run_call(name, transactions, profile, as_of=as_of, request_id=request_id)
            for name in tool_names
        ]
