"""
Shared — フィルタ (Filter Matcher)

クエリ文字列の key=value をリソースに対する条件として評価する。

  - key はドット区切りでネストを辿る (productOrderItem.0.state など)
  - 値が存在しない項目の条件は「満たした」とみなす
  - 値が null なら "null" とだけ一致
  - key に "Date" を含み値が文字列なら、日付 (年月日) が同じなら一致
  - それ以外は大文字小文字を無視した文字列比較
  - すべての条件を満たしたリソースだけを返す (AND)
"""

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from . import config
from .normalizer import is_falsy

logger = logging.getLogger(__name__)

RESERVED_KEYS = frozenset({"fields", "limit", "offset"})

# 「項目が無い」を None (= JSON の null) と区別するための番兵
UNDEFINED = object()


def resolve_path(resource: Any, path: str) -> Any:
    current = resource
    for segment in path.split("."):
        if is_falsy(current):
            return UNDEFINED
        if isinstance(current, Mapping):
            if segment not in current:
                return UNDEFINED
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return UNDEFINED
            current = current[index]
        else:
            return UNDEFINED
    return current


def _zone() -> tzinfo:
    if config.TMF_TIMEZONE.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(config.TMF_TIMEZONE)


# ISO 8601 以外に受け付ける書式 (月/日/年 など)。タイムゾーンは付かない。
LOOSE_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def _parse_datetime(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in LOOSE_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def calendar_day(value: Any) -> date | None:
    """文字列を既定タイムゾーンでの日付に変換する。解釈できなければ None。"""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = _parse_datetime(text)
    if parsed is None:
        return None
    zone = _zone()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed.astimezone(zone).date()


def _stringify(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join("" if item is None else _stringify(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    return str(value)


def matches(resource: Mapping[str, Any], key: str, expected: Any) -> bool:
    actual = resolve_path(resource, key)
    if actual is UNDEFINED:
        return True

    if actual is None:
        return expected is None or expected == "null"

    if "Date" in key and isinstance(actual, str):
        # 同じ年月日なら一致 (時刻のずれは無視)
        return calendar_day(actual) == calendar_day(expected)

    return _stringify(actual).lower() == _stringify(expected).lower()


def constraints_from(query: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in query.items() if key not in RESERVED_KEYS}


def filter_resources(
    resources: Iterable[Mapping[str, Any]],
    query: Mapping[str, Any],
) -> list:
    constraints = constraints_from(query)
    items = list(resources)
    if not constraints:
        return items
    result = [
        item
        for item in items
        if all(matches(item, key, value) for key, value in constraints.items())
    ]
    logger.debug("Filter %s matched %d of %d", constraints, len(result), len(items))
    return result
