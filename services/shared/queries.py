"""
Shared — 汎用クエリハンドラ (Read 側)

一覧: 全件取得 → フィルタ → ページング → フィールド選択
単体: 取得 → フィールド選択
"""

from collections.abc import Iterable, Mapping
from typing import Any

from . import config
from .errors import NotFoundError, ValidationError
from .filtering import filter_resources
from .projection import parse_fields, project
from .store import DocumentStore


def _non_negative_int(query: Mapping[str, Any], name: str) -> int | None:
    raw = query.get(name)
    if raw in (None, ""):
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(name, "must be a non-negative integer") from None
    if value < 0:
        raise ValidationError(name, "must be a non-negative integer")
    return value


def paginate(items: list, query: Mapping[str, Any]) -> list:
    """offset / limit が無ければ全件を返す。"""
    offset = _non_negative_int(query, "offset")
    limit = _non_negative_int(query, "limit")
    if offset is None and limit is None:
        return items
    start = offset or 0
    size = min(limit if limit is not None else config.DEFAULT_PAGE_SIZE, config.MAX_PAGE_SIZE)
    return items[start:start + size]


async def list_resources(
    store: DocumentStore,
    query: Mapping[str, Any],
    always: Iterable[str] = (),
) -> tuple[list[dict], int]:
    """(ページ内のリソース, フィルタ後の総件数) を返す。"""
    items = filter_resources(await store.find_all(), query)
    total = len(items)
    fields = parse_fields(query.get("fields"))
    return [project(item, fields, always) for item in paginate(items, query)], total


async def get_resource(
    store: DocumentStore,
    kind: str,
    resource_id: str,
    fields: str | None = None,
    always: Iterable[str] = (),
) -> dict:
    resource = await store.find_by_id(resource_id)
    if resource is None:
        raise NotFoundError(kind, resource_id)
    return project(resource, parse_fields(fields), always)
