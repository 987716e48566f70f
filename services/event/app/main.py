"""
Event Service — FastAPI エントリーポイント (TMF688 Event Management)

Event の CRUD、通知先 Hub と Topic の登録。
他サービスが発行した通知はサブスクライバー (subscriber.py) が
Event として記録し、Hub に配信する。
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import redis.asyncio as aioredis
from fastapi import FastAPI
from pydantic import BaseModel, ConfigDict, Field

from services.shared import config
from services.shared.errors import install_error_handlers
from services.shared.http import crud_router
from services.shared.store import StoreFactory

from .subscriber import HubSource, run_subscriber
from .templates import EVENT, HUB, TOPIC

EVENT_COLLECTION = "event"
HUB_COLLECTION = "eventHub"
TOPIC_COLLECTION = "topic"

PRODUCT_EVENT_TYPES = frozenset(
    f"Product{suffix}"
    for suffix in ("CreateEvent", "AttributeValueChangeEvent", "StateChangeEvent", "DeleteEvent")
)


# ── Request Models ───────────────────────────────

class EventRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    eventType: str = Field(min_length=1)
    event: dict[str, Any]


class HubRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    callback: str = Field(min_length=1)
    query: str | None = None


class TopicRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    contentQuery: str | None = None
    headerQuery: str | None = None


def create_app(stores: StoreFactory, lifespan=None) -> FastAPI:
    app = FastAPI(title="Event Service", lifespan=lifespan)
    install_error_handlers(app)

    app.include_router(
        crud_router(
            "event", EVENT, stores.get(EVENT_COLLECTION), create_model=EventRequest
        )
    )
    app.include_router(
        crud_router(
            "hub", HUB, stores.get(HUB_COLLECTION),
            create_model=HubRequest, with_patch=False,
        )
    )
    app.include_router(
        crud_router(
            "topic", TOPIC, stores.get(TOPIC_COLLECTION),
            create_model=TopicRequest, with_patch=False,
        )
    )

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "event-service"}

    return app


def hub_sources(stores: StoreFactory) -> list[HubSource]:
    """Event Service の Hub には全件、在庫 Hub には Product の通知だけを配る。"""
    return [
        HubSource(stores.get(HUB_COLLECTION)),
        HubSource(stores.get("productInventoryHub"), event_types=PRODUCT_EVENT_TYPES),
    ]


# ── 単体起動用 (uvicorn services.event.app.main:app) ──

_stores = StoreFactory()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await _stores.ensure_schema()
    shutdown_event = asyncio.Event()
    redis = None
    task = None
    if config.REDIS_URL:
        redis = aioredis.from_url(config.REDIS_URL, decode_responses=True)
        task = asyncio.create_task(
            run_subscriber(
                redis, _stores.get(EVENT_COLLECTION), hub_sources(_stores), shutdown_event
            )
        )
    yield
    shutdown_event.set()
    if task is not None:
        await task
    if redis is not None:
        await redis.aclose()
    await _stores.dispose()


app = create_app(_stores, lifespan=lifespan)
