from __future__ import annotations

from calendar import monthrange
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable

from domain.formatting import format_inr, round_half_up
from domain.models import AlertSeverity, EmotionTag, ExpenseCategory, Transaction, WindowKind
from domain.schemas import (
    DaySpend,
    MoneyLeak,
    MonthPace,
    SmartAlert,
    ToolRequest,
    ToolResponse,
    WindowStatus,
)
from tools._transactions_support import as_naive_local, count_tagged, resolve_as_of, total_amount
from tools.base import Tool, ToolSpec
from tools.registry import register_tool

NEAR_LIMIT_PERCENT = 80
PACE_TOLERANCE = 1.1
HIGH_SPEND_DAY_FACTOR = 1.5
IMPULSE_ALERT_COUNT = 2
ROUTINE_MIDDAY_HOUR = 12
ROUTINE_EVENING_HOUR = 18

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

WINDOW_LABELS: dict[WindowKind, str] = {
    WindowKind.DAY: "daily",
    WindowKind.WEEK: "weekly",
    WindowKind.MONTH: "monthly",
}

WINDOW_PERIODS: dict[WindowKind, str] = {
    WindowKind.DAY: "today",
    WindowKind.WEEK: "this week",
    WindowKind.MONTH: "this month",
}

# category -> (percent of month spend that counts as a leak, tip)
MONEY_LEAK_RULES: dict[ExpenseCategory, tuple[int, str]] = {
    ExpenseCategory.FOOD: (40, "Food expenses are {percent}% of your spending. Consider cooking more at home."),
    ExpenseCategory.ENTERTAINMENT: (25, "Entertainment is {percent}% of spending. Look for free alternatives."),
    ExpenseCategory.SHOPPING: (30, "Shopping takes {percent}% of your budget. Apply the 24-hour rule before buying."),
}


@dataclass(frozen=True)
class WindowBounds:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        moment = as_naive_local(moment)
        return self.start <= moment < self.end


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def window_bounds(window: WindowKind, now: datetime) -> WindowBounds:
    """
    day:   [today 00:00, tomorrow 00:00)
    week:  [00:00 six days ago, tomorrow 00:00) -- trailing seven days, not a calendar week
    month: [1st 00:00, 1st of next month 00:00)
    """
    today = _midnight(as_naive_local(now))
    if window == WindowKind.DAY:
        return WindowBounds(start=today, end=today + timedelta(days=1))
    if window == WindowKind.WEEK:
        return WindowBounds(start=today - timedelta(days=6), end=today + timedelta(days=1))
    month_start = today.replace(day=1)
    days_in_month = monthrange(today.year, today.month)[1]
    return WindowBounds(start=month_start, end=month_start + timedelta(days=days_in_month))


def routine_projection(routine_expenses_total: float, now: datetime) -> float:
    """
    Rough estimate of routine spend still to come today, from the hour of `now` alone:
    all of it before noon, half until 18:00, nothing after.
    """
    hour = as_naive_local(now).hour
    if hour < ROUTINE_MIDDAY_HOUR:
        return float(routine_expenses_total)
    if hour < ROUTINE_EVENING_HOUR:
        return float(routine_expenses_total) * 0.5
    return 0.0


def _window_breakdown(rows: Iterable[Transaction]) -> dict[ExpenseCategory, float]:
    breakdown: dict[ExpenseCategory, float] = defaultdict(float)
    for txn in rows:
        if txn.category is not None:
            breakdown[txn.category] += float(txn.amount)
    return dict(breakdown)


def _emotion_breakdown(rows: Iterable[Transaction]) -> dict[EmotionTag, float]:
    breakdown: dict[EmotionTag, float] = defaultdict(float)
    for txn in rows:
        if txn.emotion_tag is not None:
            breakdown[txn.emotion_tag] += float(txn.amount)
    return dict(breakdown)


def _daily_spend(transactions: list[Transaction], now: datetime) -> list[DaySpend]:
    today = _midnight(as_naive_local(now))
    days: list[DaySpend] = []
    for offset in range(6, -1, -1):
        day_start = today - timedelta(days=offset)
        bounds = WindowBounds(start=day_start, end=day_start + timedelta(days=1))
        amount = total_amount(t for t in transactions if t.is_expense and bounds.contains(t.date))
        days.append(
            DaySpend(
                day_date=day_start.date(),
                day=DAY_NAMES[day_start.weekday()],
                amount=amount,
                is_today=offset == 0,
            )
        )
    return days


def _money_leaks(breakdown: dict[ExpenseCategory, float], spent: float) -> list[MoneyLeak]:
    if spent <= 0:
        return []
    leaks: list[MoneyLeak] = []
    for category, amount in breakdown.items():
        rule = MONEY_LEAK_RULES.get(category)
        if rule is None:
            continue
        threshold, template = rule
        percent = round_half_up(amount / spent * 100)
        if percent > threshold:
            leaks.append(
                MoneyLeak(category=category, amount=amount, percent=percent, message=template.format(percent=percent))
            )
    return leaks


def _month_pace(limit: float, spent: float, remaining: float, now: datetime) -> MonthPace:
    moment = as_naive_local(now)
    days_in_month = monthrange(moment.year, moment.month)[1]
    day_of_month = moment.day
    expected = limit / days_in_month * day_of_month
    return MonthPace(
        days_in_month=days_in_month,
        day_of_month=day_of_month,
        days_left=days_in_month - day_of_month,
        expected_pace_so_far=expected,
        is_ahead_of_pace=spent > expected * PACE_TOLERANCE,
        suggested_daily_allowance=remaining / max(1, days_in_month - day_of_month + 1),
    )


def _limit_alerts(status: WindowStatus) -> list[SmartAlert]:
    if status.limit is None:
        return []
    label = WINDOW_LABELS[status.window]
    if status.is_over_budget:
        message = f"You've exceeded your {label} limit by {format_inr(status.over_budget_amount or 0.0)}."
        if status.window == WindowKind.DAY:
            message += " Try to balance tomorrow."
        return [
            SmartAlert(
                id=f"over-{label}",
                severity=AlertSeverity.DANGER,
                title=f"{label.capitalize()} limit exceeded!",
                message=message,
            )
        ]
    if status.percent_used is not None and status.percent_used >= NEAR_LIMIT_PERCENT:
        message = f"You've used {status.percent_used}% of your {label} budget."
        if status.window == WindowKind.DAY:
            message += f" Only {format_inr(status.remaining or 0.0)} left."
        elif status.window == WindowKind.MONTH and status.pace is not None:
            message = f"You've used {status.percent_used}% of your {label} budget with {status.pace.days_left} days left."
        return [
            SmartAlert(
                id=f"near-{label}",
                severity=AlertSeverity.WARNING,
                title=f"Approaching {label} limit",
                message=message,
            )
        ]
    return []


def _window_alerts(status: WindowStatus, window_rows: list[Transaction]) -> list[SmartAlert]:
    alerts = _limit_alerts(status)

    projected = status.projected_routine_remaining
    if (
        status.window == WindowKind.DAY
        and projected is not None
        and status.remaining is not None
        and 0 < status.remaining < projected
        and not status.is_over_budget
    ):
        alerts.append(
            SmartAlert(
                id="routine-warning",
                severity=AlertSeverity.WARNING,
                title="Routine expenses ahead",
                message=f"You usually spend around {format_inr(projected)} more today. Spend carefully!",
            )
        )

    if count_tagged(window_rows, EmotionTag.IMPULSE) >= IMPULSE_ALERT_COUNT:
        alerts.append(
            SmartAlert(
                id="impulse-alert",
                severity=AlertSeverity.WARNING,
                title="Multiple impulse purchases",
                message=(
                    f"You've made several impulse purchases {WINDOW_PERIODS[status.window]}. "
                    "Take a moment before your next purchase."
                ),
            )
        )

    if status.window == WindowKind.WEEK and status.daily_spend is not None:
        average = status.daily_average or 0.0
        high_days = [d.day for d in status.daily_spend if d.amount > average * HIGH_SPEND_DAY_FACTOR]
        if high_days:
            alerts.append(
                SmartAlert(
                    id="high-spend-days",
                    severity=AlertSeverity.INFO,
                    title="Spending pattern detected",
                    message=f"You spent more than average on {', '.join(high_days)}.",
                )
            )

    if (
        status.window == WindowKind.MONTH
        and status.pace is not None
        and status.pace.is_ahead_of_pace
        and not status.is_over_budget
    ):
        allowance = round_half_up(status.pace.suggested_daily_allowance)
        alerts.append(
            SmartAlert(
                id="pace-warning",
                severity=AlertSeverity.WARNING,
                title="Spending faster than expected",
                message=(
                    "You're spending faster than your daily pace. "
                    f"Limit to {format_inr(allowance)}/day to stay on track."
                ),
            )
        )
    return alerts


def evaluate_window(
    transactions: Iterable[Transaction],
    limit: float | None,
    window: WindowKind | str,
    now: datetime | None = None,
    routine_expenses_total: float = 0.0,
) -> WindowStatus:
    """
    Spend, remaining budget and alerts for one window ending at `now`.

    Only expenses inside the window count. A limit of 0/None means no limit is
    configured: remaining/percent stay None and limit-relative alerts are
    suppressed, while spend totals are still reported.
    """
    window = WindowKind(window)
    now = as_naive_local(now or datetime.now())
    rows = list(transactions)
    bounds = window_bounds(window, now)
    window_rows = [t for t in rows if t.is_expense and bounds.contains(t.date)]
    spent = total_amount(window_rows)

    effective_limit = float(limit) if limit and float(limit) > 0 else None
    status = WindowStatus(
        window=window,
        start=bounds.start,
        end=bounds.end,
        limit=effective_limit,
        spent=spent,
        transaction_count=len(window_rows),
        category_breakdown=_window_breakdown(window_rows),
    )
    if effective_limit is not None:
        status.remaining = max(0.0, effective_limit - spent)
        status.percent_used = min(100, round_half_up(spent / effective_limit * 100))
        status.is_over_budget = spent > effective_limit
        status.over_budget_amount = max(0.0, spent - effective_limit)

    if window == WindowKind.DAY:
        status.projected_routine_remaining = routine_projection(routine_expenses_total, now)
    elif window == WindowKind.WEEK:
        status.daily_spend = _daily_spend(rows, now)
        status.daily_average = spent / 7
    else:
        status.money_leaks = _money_leaks(status.category_breakdown, spent)
        status.emotion_breakdown = _emotion_breakdown(window_rows)
        if effective_limit is not None:
            status.pace = _month_pace(effective_limit, spent, status.remaining or 0.0, now)

    status.alerts = _window_alerts(status, window_rows)
    return status


class _BudgetWindowBase(Tool):
    window: WindowKind

    def run(self, request: ToolRequest) -> ToolResponse:
        args = request.args if isinstance(request.args, dict) else {}
        limit: Any = args.get("limit")
        if limit is None:
            limit = request.profile.limit_for(self.window)
        status = evaluate_window(
            request.transactions,
            limit=float(limit or 0),
            window=self.window,
            now=resolve_as_of(request),
            routine_expenses_total=request.profile.routine_expenses_total,
        )
        return self.respond(request, status.model_dump(mode="json"))

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            args_schema={
                "type": "object",
                "properties": {
                    "limit": {
                        "type": "number",
                        "minimum": 0,
                        "description": "Spending limit for the window. Defaults to the profile limit; 0 means unset.",
                    },
                    "now": {
                        "type": "string",
                        "description": "ISO timestamp to evaluate at. Defaults to the request context time.",
                    },
                },
            },
        )


@register_tool
class DailyBudgetTool(_BudgetWindowBase):
    name = "budget.daily"
    window = WindowKind.DAY
    description = "Today's spend against the daily limit, with routine-expense projection and alerts."


@register_tool
class WeeklyBudgetTool(_BudgetWindowBase):
    name = "budget.weekly"
    window = WindowKind.WEEK
    description = "Trailing seven-day spend against the weekly limit, with per-day breakdown and alerts."


@register_tool
class MonthlyBudgetTool(_BudgetWindowBase):
    name = "budget.monthly"
    window = WindowKind.MONTH
    description = "Calendar-month spend against the monthly limit, with pace projection, money leaks and alerts."
