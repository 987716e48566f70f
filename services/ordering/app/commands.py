"""
Ordering Service — コマンドハンドラ (Write 側)

注文と注文キャンセルの作成・更新・削除。
状態に依存する副作用はここだけで起こる。

  - 作成: state は常に acknowledged、合計金額はこのとき一度だけ計算
  - 更新: state が completed になったら completionDate を記録
  - 削除: inProgress / completed の注文は 409
  - キャンセル作成: 参照先の注文があれば cancelled にする
"""

import logging
from collections.abc import Mapping
from typing import Any

from services.shared.commands import delete_resource, publish_changes, strip_identity
from services.shared.errors import NotFoundError
from services.shared.identity import new_id, now_iso
from services.shared.normalizer import normalize, normalize_update
from services.shared.notifications import NotificationPublisher
from services.shared.store import DocumentStore

from .aggregate import ACKNOWLEDGED, CANCELLED, COMPLETED, compute_order_total_price, ensure_deletable
from .templates import CANCEL_PRODUCT_ORDER, PRODUCT_ORDER

logger = logging.getLogger(__name__)


async def create_order(
    orders: DocumentStore,
    payload: Mapping[str, Any],
    publisher: NotificationPublisher | None = None,
) -> dict:
    """
    注文作成コマンド

    1. 呼び出し側の state / 日付は無視し、受付時点の値を付ける (明細の state も)
    2. 明細を正規化 (id・数量・action・state のデフォルト)
    3. 元の明細から合計金額を計算 (0 なら付けない)
    4. 保存して ProductOrderCreateEvent を発行
    """
    order_id = new_id()
    now = now_iso()
    raw = {
        "id": order_id,
        "href": PRODUCT_ORDER.locator(order_id),
        **strip_identity(payload),
        "state": ACKNOWLEDGED,
        "orderDate": now,
        "creationDate": now,
        "completionDate": None,
    }
    raw.pop("orderTotalPrice", None)
    items = raw.get("productOrderItem")
    if isinstance(items, list):
        # 明細も受付時点では必ず acknowledged
        raw["productOrderItem"] = [
            {**item, "state": ACKNOWLEDGED} if isinstance(item, Mapping) else item
            for item in items
        ]
    total = compute_order_total_price(payload.get("productOrderItem"))
    if total is not None:
        raw["orderTotalPrice"] = total

    order = normalize(raw, PRODUCT_ORDER)
    await orders.insert(order)
    logger.info("Created ProductOrder %s", order_id)

    if publisher is not None:
        await publisher.publish("ProductOrderCreateEvent", order)
    return order


async def update_order(
    orders: DocumentStore,
    order_id: str,
    patch: Mapping[str, Any],
    publisher: NotificationPublisher | None = None,
) -> dict:
    """
    注文更新コマンド (部分更新)

    合計金額は再計算しない。state が completed のときだけ completionDate を付ける。
    """
    existing = await orders.find_by_id(order_id)
    if existing is None:
        raise NotFoundError(PRODUCT_ORDER.kind, order_id)

    updated = normalize_update(existing, patch, PRODUCT_ORDER)
    now = now_iso()
    updated["lastUpdate"] = now
    if patch.get("state") == COMPLETED:
        updated["completionDate"] = now

    await orders.update(order_id, updated)
    logger.info("Updated ProductOrder %s (%s)", order_id, ", ".join(patch))

    if publisher is not None:
        await publish_changes(publisher, PRODUCT_ORDER.kind, existing, updated)
    return updated


async def delete_order(
    orders: DocumentStore,
    order_id: str,
    publisher: NotificationPublisher | None = None,
) -> None:
    """注文削除コマンド。処理中・完了済みの注文は削除できない。"""
    await delete_resource(orders, PRODUCT_ORDER, order_id, publisher, guard=ensure_deletable)


async def create_cancel_order(
    cancels: DocumentStore,
    orders: DocumentStore,
    payload: Mapping[str, Any],
    publisher: NotificationPublisher | None = None,
) -> dict:
    """
    注文キャンセル作成コマンド

    1. CancelProductOrder を保存 (参照先の状態は確認しない)
    2. productOrder.id の注文があれば state=cancelled にする

    2つの書き込みはアトミックではない。2 で失敗してもキャンセルは残る。
    """
    cancel_id = new_id()
    raw = {
        "id": cancel_id,
        "href": CANCEL_PRODUCT_ORDER.locator(cancel_id),
        **strip_identity(payload),
        "state": ACKNOWLEDGED,
        "creationDate": now_iso(),
        "effectiveCancellationDate": None,
    }
    cancel = normalize(raw, CANCEL_PRODUCT_ORDER)
    await cancels.insert(cancel)
    logger.info("Created CancelProductOrder %s", cancel_id)

    if publisher is not None:
        await publisher.publish("CancelProductOrderCreateEvent", cancel)

    reference = payload.get("productOrder")
    order_id = reference.get("id") if isinstance(reference, Mapping) else None
    if order_id:
        await _cancel_referenced_order(orders, str(order_id), cancel["creationDate"], publisher)
    return cancel


async def _cancel_referenced_order(
    orders: DocumentStore,
    order_id: str,
    cancelled_at: str,
    publisher: NotificationPublisher | None,
) -> None:
    order = await orders.find_by_id(order_id)
    if order is None:
        logger.info("Cancel references unknown ProductOrder %s", order_id)
        return

    before = dict(order)
    order["state"] = CANCELLED
    order["completionDate"] = cancelled_at
    await orders.update(order_id, order)
    logger.info("ProductOrder %s cancelled", order_id)

    if publisher is not None:
        await publish_changes(publisher, PRODUCT_ORDER.kind, before, order)
