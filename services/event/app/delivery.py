"""
Event Service — Hub への通知配信

登録済み Hub の callback に通知を POST する。
失敗はログに残すだけで再送はしない。
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from services.shared import config

logger = logging.getLogger(__name__)


async def deliver(
    client: httpx.AsyncClient,
    hubs: Iterable[Mapping[str, Any]],
    notification: Mapping[str, Any],
) -> int:
    """配信に成功した Hub の数を返す。"""
    delivered = 0
    for hub in hubs:
        callback = hub.get("callback")
        if not callback:
            continue
        try:
            resp = await client.post(
                callback,
                json=notification,
                timeout=config.HUB_CALLBACK_TIMEOUT_SECONDS,
            )
            resp.raise_for_status()
            delivered += 1
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Hub %s rejected %s: %s",
                hub.get("id"), notification.get("eventType"), e.response.status_code,
            )
        except httpx.HTTPError as e:
            logger.warning("Hub %s unreachable: %s", hub.get("id"), e)
    return delivered
