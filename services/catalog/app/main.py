"""
Catalog Service — FastAPI エントリーポイント (TMF620 Product Catalog)

5種類のカタログリソースに同じ CRUD エンドポイントを提供する。

    GET    /{resource}            一覧 (フィルタ・fields・limit/offset)
    POST   /{resource}            作成
    GET    /{resource}/{id}       取得
    PATCH  /{resource}/{id}       部分更新
    DELETE /{resource}/{id}       削除
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from services.shared import config
from services.shared.errors import install_error_handlers
from services.shared.http import crud_router
from services.shared.notifications import NotificationPublisher
from services.shared.store import StoreFactory

from .templates import TEMPLATES


def create_app(
    stores: StoreFactory,
    publisher: NotificationPublisher | None = None,
    lifespan=None,
) -> FastAPI:
    app = FastAPI(title="Catalog Service", lifespan=lifespan)
    install_error_handlers(app)

    for path, template in TEMPLATES.items():
        app.include_router(crud_router(path, template, stores.get(path), publisher))

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "catalog-service"}

    return app


# ── 単体起動用 (uvicorn services.catalog.app.main:app) ──

_stores = StoreFactory()
_publisher = NotificationPublisher()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await _stores.ensure_schema()
    await _publisher.connect(config.REDIS_URL)
    yield
    await _publisher.aclose()
    await _stores.dispose()


app = create_app(_stores, _publisher, lifespan=lifespan)
