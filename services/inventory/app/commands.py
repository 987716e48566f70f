"""
Inventory Service — コマンドハンドラ (Write 側)

製品の id はサーバが "prod-" 付きで採番する (呼び出し側の id は使わない)。
"""

from collections.abc import Mapping
from typing import Any

from services.shared.commands import create_resource
from services.shared.notifications import NotificationPublisher
from services.shared.store import DocumentStore

from .templates import HUB, PRODUCT


async def create_product(
    products: DocumentStore,
    payload: Mapping[str, Any],
    publisher: NotificationPublisher | None = None,
) -> dict:
    data = {k: v for k, v in payload.items() if k != "id"}
    return await create_resource(products, PRODUCT, data, publisher)


async def register_hub(hubs: DocumentStore, payload: Mapping[str, Any]) -> dict:
    """通知先 (callback) を登録する。callback の検証は呼び出し側で済んでいる前提。"""
    data = {k: v for k, v in payload.items() if k != "id"}
    data["callback"] = str(data["callback"])
    return await create_resource(hubs, HUB, data)
