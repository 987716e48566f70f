"""
Gateway — 統合エントリーポイント

各 TMF API サービスを1つの ASGI アプリにマウントする。
ストアと通知の発行者はここで1つずつ作り、全サービスで共有する
(注文とキャンセルが同じストアを見る、など)。

  ┌─────────┐   /productCatalogManagement/v5          ┌───────────────┐
  │         │──────────────────────────────────────▶  │ Catalog       │
  │         │   /productOrderingManagement/v4         │ Ordering      │
  │ Gateway │──────────────────────────────────────▶  │               │
  │         │   /tmf-api/event/v4                     │ Event         │
  │         │   /tmf-api/productConfigurationMgmt/v5  │ Configuration │
  │         │   /tmf-api                              │ Inventory     │
  └─────────┘                                          └───────────────┘
       │ tmf_events (Redis Pub/Sub)                          ▲
       └──────────────── Event Service subscriber ───────────┘

/tmf-api 配下はより長いパスを先にマウントする (Inventory は最後)。
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.catalog.app.main import create_app as create_catalog_app
from services.configuration.app.main import create_app as create_configuration_app
from services.event.app.main import EVENT_COLLECTION, hub_sources
from services.event.app.main import create_app as create_event_app
from services.event.app.subscriber import run_subscriber
from services.inventory.app.main import create_app as create_inventory_app
from services.ordering.app.main import create_app as create_ordering_app
from services.shared import config
from services.shared.errors import install_error_handlers
from services.shared.notifications import NotificationPublisher
from services.shared.store import StoreFactory

logger = logging.getLogger(__name__)

CATALOG_PREFIX = "/productCatalogManagement/v5"
ORDERING_PREFIX = "/productOrderingManagement/v4"
EVENT_PREFIX = "/tmf-api/event/v4"
CONFIGURATION_PREFIX = "/tmf-api/productConfigurationManagement/v5"
INVENTORY_PREFIX = "/tmf-api"


def create_gateway(
    stores: StoreFactory,
    publisher: NotificationPublisher | None = None,
    lifespan=None,
) -> FastAPI:
    app = FastAPI(title="TMF API Gateway", lifespan=lifespan)
    install_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count", "X-Result-Count"],
    )

    mounted: dict[str, str] = {}
    if config.ENABLE_TMF620:
        app.mount(CATALOG_PREFIX, create_catalog_app(stores, publisher))
        mounted["TMF620"] = CATALOG_PREFIX
    if config.ENABLE_TMF622:
        app.mount(ORDERING_PREFIX, create_ordering_app(stores, publisher))
        mounted["TMF622"] = ORDERING_PREFIX
    if config.ENABLE_TMF688:
        app.mount(EVENT_PREFIX, create_event_app(stores))
        mounted["TMF688"] = EVENT_PREFIX
    if config.ENABLE_TMF760:
        app.mount(CONFIGURATION_PREFIX, create_configuration_app(stores, publisher))
        mounted["TMF760"] = CONFIGURATION_PREFIX
    if config.ENABLE_TMF637:
        app.mount(INVENTORY_PREFIX, create_inventory_app(stores, publisher))
        mounted["TMF637"] = INVENTORY_PREFIX

    @app.get("/")
    async def index():
        """マウント済み API の一覧"""
        return {
            "name": "TMF API Gateway",
            "apis": {name: f"{config.API_BASE_URL}{prefix}" for name, prefix in mounted.items()},
        }

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "gateway", "apis": sorted(mounted)}

    return app


# ── 起動 (uvicorn services.gateway.app.main:app) ──

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

_stores = StoreFactory()
_publisher = NotificationPublisher()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """ストアの準備、Redis 接続、通知サブスクライバの起動。"""
    await _stores.ensure_schema()
    await _publisher.connect(config.REDIS_URL)

    shutdown_event = asyncio.Event()
    subscriber_task = None
    if _publisher.redis is not None and config.ENABLE_TMF688:
        subscriber_task = asyncio.create_task(
            run_subscriber(
                _publisher.redis,
                _stores.get(EVENT_COLLECTION),
                hub_sources(_stores),
                shutdown_event,
            )
        )
    else:
        logger.info("Notification subscriber is not running")

    yield

    shutdown_event.set()
    if subscriber_task is not None:
        await subscriber_task
    await _publisher.aclose()
    await _stores.dispose()


app = create_gateway(_stores, _publisher, lifespan=lifespan)
