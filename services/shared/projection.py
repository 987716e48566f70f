"""
Shared — フィールド選択 (Field Projection Selector)

?fields=a,b,c で要求された項目だけを返す。
@type / id / href は要求されていなくても必ず先頭に含める。
"""

from collections.abc import Iterable, Mapping
from typing import Any

IDENTITY_FIELDS = ("@type", "id", "href")


def parse_fields(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def project(
    resource: Mapping[str, Any],
    fields: Iterable[str] | None,
    always: Iterable[str] = (),
) -> dict:
    """
    リソースを要求フィールドに絞り込む。

    fields が空なら元のリソースをそのまま返す。
    always はリソース種別ごとに常に残したい追加項目。
    """
    requested = list(fields or [])
    if not requested:
        return dict(resource)

    result = {name: resource.get(name) for name in IDENTITY_FIELDS}
    for name in [*requested, *always]:
        if name in resource and name not in result:
            result[name] = resource[name]
    return result
