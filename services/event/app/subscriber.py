"""
Event Service — Redis Pub/Sub サブスクライバー

tmf_events チャネルを購読し、受信した通知を
  1. Event リソースとして記録し
  2. 条件に合う Hub の callback に配信する。

注意: Redis Pub/Sub は fire-and-forget 方式。
購読していない間に発行された通知は失われる。
"""

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import NamedTuple
from urllib.parse import parse_qsl

import httpx
import redis.asyncio as aioredis
from pydantic import ValidationError as PydanticValidationError

from services.shared import config
from services.shared.commands import create_resource
from services.shared.filtering import filter_resources
from services.shared.notifications import Notification
from services.shared.store import DocumentStore

from .delivery import deliver
from .templates import EVENT

logger = logging.getLogger(__name__)


class HubSource(NamedTuple):
    """Hub の保存先と、そこに配る eventType (None なら全件)"""

    store: DocumentStore
    event_types: frozenset[str] | None = None


def hub_accepts(hub: dict, notification: dict) -> bool:
    """Hub の query ("eventType=ProductOrderCreateEvent" など) に合うか。"""
    query = hub.get("query")
    if not query:
        return True
    constraints = dict(parse_qsl(str(query).lstrip("?")))
    return bool(filter_resources([notification], constraints))


async def matching_hubs(sources: Sequence[HubSource], notification: dict) -> list[dict]:
    event_type = notification.get("eventType", "")
    hubs = []
    for source in sources:
        if source.event_types is not None and event_type not in source.event_types:
            continue
        hubs.extend(h for h in await source.store.find_all() if hub_accepts(h, notification))
    return hubs


async def handle_notification(
    data: str,
    events: DocumentStore,
    sources: Sequence[HubSource],
    client: httpx.AsyncClient,
) -> dict:
    """通知1件を記録して配信する。記録した Event を返す。"""
    notification = Notification.model_validate_json(data).model_dump(by_alias=True)
    event = await create_resource(
        events,
        EVENT,
        {
            "eventId": notification["eventId"],
            "eventTime": notification["eventTime"],
            "eventType": notification["eventType"],
            "event": notification["event"],
        },
    )
    hubs = await matching_hubs(sources, notification)
    if hubs:
        delivered = await deliver(client, hubs, notification)
        logger.info(
            "Delivered %s to %d of %d hubs", notification["eventType"], delivered, len(hubs)
        )
    return event


async def run_subscriber(
    redis: aioredis.Redis,
    events: DocumentStore,
    sources: Sequence[HubSource],
    shutdown_event: asyncio.Event,
    client: httpx.AsyncClient | None = None,
) -> None:
    """
    tmf_events チャネルを購読し、通知を記録・配信する。
    shutdown_event がセットされるまで待機を続ける。
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=config.HUB_CALLBACK_TIMEOUT_SECONDS)
    pubsub = redis.pubsub()
    await pubsub.subscribe(config.EVENTS_CHANNEL)
    logger.info("Subscribed to %s channel", config.EVENTS_CHANNEL)

    try:
        while not shutdown_event.is_set():
            message = await pubsub.get_message(
                ignore_subscribe_messages=True, timeout=1.0
            )
            if message and message["type"] == "message":
                try:
                    await handle_notification(message["data"], events, sources, client)
                except (PydanticValidationError, json.JSONDecodeError):
                    logger.warning("Ignored malformed notification: %r", message["data"])
                except Exception:
                    logger.exception("Failed to process notification")
            else:
                await asyncio.sleep(0.1)
    finally:
        await pubsub.unsubscribe(config.EVENTS_CHANNEL)
        await pubsub.aclose()
        if owns_client:
            await client.aclose()
