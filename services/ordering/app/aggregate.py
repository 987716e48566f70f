"""
Ordering Service — 注文集約 (Order Aggregate)

注文の状態と、状態に依存するルールをまとめる。

状態遷移 (呼び出し側が PATCH で進める):
    acknowledged → inProgress → completed
    acknowledged / inProgress → cancelled  (CancelProductOrder による)

これ以外の値も受け付ける。サーバ側で遷移を検証はしない。
"""

import math
from collections.abc import Mapping
from typing import Any

from services.shared import config
from services.shared.errors import ConflictError

ACKNOWLEDGED = "acknowledged"
IN_PROGRESS = "inProgress"
COMPLETED = "completed"
CANCELLED = "cancelled"

# 削除できない状態
LOCKED_STATES = frozenset({IN_PROGRESS, COMPLETED})

TAX_RATE = 15


def ensure_deletable(order: Mapping[str, Any]) -> None:
    state = order.get("state")
    if state in LOCKED_STATES:
        raise ConflictError(f"Cannot delete product order in {state} state")


def _amount(value: Any) -> int | float:
    """金額を数として読む。"100" は 100、読めない値は 0。"""
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return number if math.isfinite(number) else 0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_order_total_price(items: Any) -> dict | None:
    """
    注文明細の itemPrice を合計して OrderPrice を作る。

    税抜額は 15% 固定の概算 (合計 / 1.15 を四捨五入)。
    合計が 0 なら None (orderTotalPrice 自体を付けない)。
    """
    if not isinstance(items, list) or not items:
        return None

    total = 0
    currency = config.DEFAULT_CURRENCY
    for item in items:
        if not isinstance(item, Mapping):
            continue
        prices = item.get("itemPrice")
        if not isinstance(prices, list):
            continue
        for entry in prices:
            price = entry.get("price") if isinstance(entry, Mapping) else None
            amount = price.get("taxIncludedAmount") if isinstance(price, Mapping) else None
            if not isinstance(amount, Mapping):
                continue
            total += _amount(amount.get("value"))
            currency = amount.get("unit") or currency

    if total == 0:
        return None

    return {
        "@type": "OrderPrice",
        "description": "Total order price",
        "name": "OrderTotal",
        "priceType": "total",
        "price": {
            "@type": "Price",
            "taxIncludedAmount": {"unit": currency, "value": total},
            "dutyFreeAmount": {
                "unit": currency,
                "value": _round_half_up(total / 1.15),
            },
            "taxRate": TAX_RATE,
        },
    }
