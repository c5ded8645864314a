from __future__ import annotations

import math

CURRENCY_SYMBOL = "₹"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _group_indian(digits: str) -> str:
    # 12,34,56,789: last three digits, then pairs.
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_inr(amount: float) -> str:
    """Render whole rupees with Indian digit grouping, e.g. 150000 -> '₹1,50,000'."""
    rounded = round_half_up(abs(float(amount)))
    sign = "-" if amount < 0 and rounded else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(str(rounded))}"
