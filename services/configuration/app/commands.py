"""
Configuration Service — コマンドハンドラ (Write 側)

instantSync=true なら受付と同時に評価して結果を返す (200)。
false なら acknowledged として保存するだけ (201)。
"""

import logging
from collections.abc import Mapping
from typing import Any

from services.shared.commands import create_resource
from services.shared.identity import new_id
from services.shared.notifications import NotificationPublisher
from services.shared.store import DocumentStore

from .templates import CHECK_PRODUCT_CONFIGURATION, QUERY_PRODUCT_CONFIGURATION

logger = logging.getLogger(__name__)

SPEC_FIELD = "productConfigurationSpecification"


# ── CheckProductConfiguration ────────────────────

def _cardinality(value: Any) -> int:
    """"2" のような文字列も数として読む。読めなければ 0。"""
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def missing_characteristics(item: Mapping[str, Any]) -> list[str]:
    """minCardinality を満たしていない特性名の一覧"""
    configuration = item.get("productConfiguration")
    if not isinstance(configuration, Mapping):
        return []
    missing = []
    for char in configuration.get("configurationCharacteristic") or []:
        if not isinstance(char, Mapping):
            continue
        required = _cardinality(char.get("minCardinality"))
        if required <= 0:
            continue
        values = char.get("configurationCharacteristicValue") or []
        selected = [v for v in values if isinstance(v, Mapping) and v.get("isSelected")]
        if len(selected) < required:
            missing.append(char.get("name"))
    return missing


def evaluate_check_item(item: Mapping[str, Any]) -> dict:
    """明細を検証して approved / rejected を付ける。"""
    missing = missing_characteristics(item)
    context = item.get("contextItem") or {}
    return {
        **item,
        "@type": "CheckProductConfigurationItem",
        "contextItem": {
            **context,
            "@type": "ItemRef",
            "id": context.get("id") or item.get("id"),
            "itemId": context.get("itemId") or item.get("id"),
            "name": context.get("name") or f"Quote item {item.get('id')}",
            "@referredType": context.get("@referredType") or "QuoteItem",
        },
        "state": "rejected" if missing else "approved",
        "stateReason": [
            {
                "@type": "StateReason",
                "code": "123",
                "label": f"Missing required characteristic: {name}",
            }
            for name in missing
        ],
    }


async def create_check(
    store: DocumentStore,
    payload: Mapping[str, Any],
    publisher: NotificationPublisher | None = None,
) -> tuple[dict, int]:
    """(保存したリソース, HTTP ステータス) を返す。"""
    data = dict(payload)
    items = [dict(item) for item in data.get("checkProductConfigurationItem") or []]
    if data.get(SPEC_FIELD):
        for item in items:
            item[SPEC_FIELD] = data[SPEC_FIELD]

    if data.get("instantSync"):
        data["state"] = "done"
        data["checkProductConfigurationItem"] = [evaluate_check_item(i) for i in items]
        status_code = 200
    else:
        data["state"] = "acknowledged"
        data["checkProductConfigurationItem"] = [{**i, "stateReason": []} for i in items]
        status_code = 201

    check = await create_resource(store, CHECK_PRODUCT_CONFIGURATION, data, publisher)
    logger.info("CheckProductConfiguration %s is %s", check["id"], check["state"])
    return check, status_code


# ── QueryProductConfiguration ────────────────────

def computed_item_id(request_id: Any) -> str:
    """数値の id は +1 して2桁以上にゼロ埋め ("01" → "02")。それ以外は新規採番。"""
    try:
        return str(int(request_id) + 1).zfill(2)
    except (TypeError, ValueError):
        return new_id()


def compute_item(request_item: Mapping[str, Any]) -> dict:
    configuration = request_item.get("productConfiguration") or {}
    computed_id = computed_item_id(request_item.get("id"))
    return {
        "@type": "QueryProductConfigurationItem",
        "id": computed_id,
        "state": "approved",
        "productConfigurationItemRelationship": [
            {
                "@type": "ProductConfigurationItemRelationship",
                "id": request_item.get("id"),
                "relationshipType": "requestItem",
            }
        ],
        "productConfiguration": {
            **configuration,
            "@type": "ProductConfiguration",
            "id": computed_id,
            "isSelectable": False,
            "isSelected": True,
            "isVisible": True,
            "configurationAction": configuration.get("configurationAction") or [
                {
                    "@type": "ConfigurationAction",
                    "action": "add",
                    "description": "Add new product",
                    "isSelected": True,
                }
            ],
        },
    }


async def create_query(
    store: DocumentStore,
    payload: Mapping[str, Any],
    publisher: NotificationPublisher | None = None,
) -> tuple[dict, int]:
    data = dict(payload)
    status_code = 201
    if data.get("instantSync"):
        data["state"] = "done"
        data["computedProductConfigurationItem"] = [
            compute_item(item)
            for item in data.get("requestProductConfigurationItem") or []
            if isinstance(item, Mapping)
        ]
        status_code = 200

    query = await create_resource(store, QUERY_PRODUCT_CONFIGURATION, data, publisher)
    logger.info("QueryProductConfiguration %s is %s", query["id"], query["state"])
    return query, status_code
