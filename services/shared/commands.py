"""
Shared — 汎用コマンドハンドラ (Write 側)

作成・更新・削除の共通処理。
入力を正規化して保存し、変更を通知として発行する。
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from .errors import ConflictError, NotFoundError
from .identity import new_id, now_iso
from .normalizer import ResourceTemplate, normalize, normalize_update
from .notifications import NotificationPublisher
from .store import DocumentStore

logger = logging.getLogger(__name__)


def strip_identity(payload: Mapping[str, Any]) -> dict:
    """呼び出し側が送ってきた id / href / @type は採用しない。"""
    return {k: v for k, v in payload.items() if k not in ("id", "href", "@type")}


async def allocate_id(
    store: DocumentStore,
    template: ResourceTemplate,
    payload: Mapping[str, Any],
) -> str:
    """id が指定されていればそれを使い、無ければ生成する。重複は 409。"""
    requested = payload.get("id")
    if requested in (None, ""):
        return new_id(template.id_prefix)
    resource_id = str(requested)
    if await store.find_by_id(resource_id) is not None:
        raise ConflictError(f"{template.kind} with id {resource_id} already exists")
    return resource_id


async def create_resource(
    store: DocumentStore,
    template: ResourceTemplate,
    payload: Mapping[str, Any],
    publisher: NotificationPublisher | None = None,
) -> dict:
    resource_id = await allocate_id(store, template, payload)
    raw = {
        "id": resource_id,
        "href": template.locator(resource_id),
        **strip_identity(payload),
        "lastUpdate": now_iso(),
    }
    resource = normalize(raw, template)
    await store.insert(resource)
    logger.info("Created %s %s", template.kind, resource_id)

    if publisher is not None:
        await publisher.publish(f"{template.kind}CreateEvent", resource)
    return resource


async def update_resource(
    store: DocumentStore,
    template: ResourceTemplate,
    resource_id: str,
    patch: Mapping[str, Any],
    publisher: NotificationPublisher | None = None,
) -> dict:
    existing = await store.find_by_id(resource_id)
    if existing is None:
        raise NotFoundError(template.kind, resource_id)

    updated = normalize_update(existing, patch, template)
    updated["lastUpdate"] = now_iso()
    await store.update(resource_id, updated)
    logger.info("Updated %s %s (%s)", template.kind, resource_id, ", ".join(patch))

    if publisher is not None:
        await publish_changes(publisher, template.kind, existing, updated)
    return updated


async def publish_changes(
    publisher: NotificationPublisher,
    kind: str,
    before: Mapping[str, Any],
    after: dict,
) -> None:
    await publisher.publish(f"{kind}AttributeValueChangeEvent", after)
    for state_field in ("state", "status"):
        if state_field in after and before.get(state_field) != after.get(state_field):
            await publisher.publish(f"{kind}StateChangeEvent", after)
            break


async def delete_resource(
    store: DocumentStore,
    template: ResourceTemplate,
    resource_id: str,
    publisher: NotificationPublisher | None = None,
    guard: Callable[[dict], None] | None = None,
) -> None:
    """削除する。guard は削除可否を判定し、不可なら例外を投げる。"""
    existing = await store.find_by_id(resource_id)
    if existing is None:
        raise NotFoundError(template.kind, resource_id)
    if guard is not None:
        guard(existing)

    await store.delete(resource_id)
    logger.info("Deleted %s %s", template.kind, resource_id)

    if publisher is not None:
        await publisher.publish(f"{template.kind}DeleteEvent", existing)
