"""
Shared — 通知の発行 (Redis Pub/Sub)

リソースの作成・更新・削除を TMF 形式の通知として tmf_events チャネルに
発行する。Event Service がこれを購読し、登録済み Hub に配信する。

Redis Pub/Sub は fire-and-forget。発行に失敗してもリクエストは失敗させない。
"""

import logging
from typing import Any

import redis.asyncio as aioredis
from pydantic import BaseModel, Field
from redis.exceptions import RedisError

from . import config
from .identity import new_id, now_iso

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """TMF の通知イベント (例: ProductOrderStateChangeEvent)"""

    event_id: str = Field(default_factory=new_id, alias="eventId")
    event_time: str = Field(default_factory=now_iso, alias="eventTime")
    event_type: str = Field(alias="eventType")
    event: dict[str, Any]

    model_config = {"populate_by_name": True}


def resource_key(type_name: str) -> str:
    """"ProductOrder" → "productOrder" """
    return type_name[:1].lower() + type_name[1:]


class NotificationPublisher:
    def __init__(
        self,
        redis: aioredis.Redis | None = None,
        channel: str = config.EVENTS_CHANNEL,
    ) -> None:
        self.redis = redis
        self.channel = channel
        self._owned = False

    async def connect(self, redis_url: str) -> None:
        if self.redis is None and redis_url:
            self.redis = aioredis.from_url(redis_url, decode_responses=True)
            self._owned = True

    async def aclose(self) -> None:
        if self._owned and self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._owned = False

    async def publish(self, event_type: str, resource: dict) -> Notification | None:
        """
        resource を包んだ通知を発行する。

        event_type は "ProductOrderCreateEvent" のような完全な名前。
        Redis 未接続なら何もしない。
        """
        if self.redis is None:
            return None
        type_name = resource.get("@type", "Resource")
        notification = Notification(
            eventType=event_type,
            event={resource_key(type_name): resource},
        )
        try:
            await self.redis.publish(
                self.channel, notification.model_dump_json(by_alias=True)
            )
        except RedisError:
            logger.exception("Failed to publish %s", event_type)
            return None
        logger.info("Published %s for %s", event_type, resource.get("id"))
        return notification
