"""
Configuration Service — FastAPI エントリーポイント (TMF760 Product Configuration)

CheckProductConfiguration: 構成の妥当性チェック
QueryProductConfiguration: 構成候補の問い合わせ
どちらも作成・一覧・取得・削除のみ (更新は無い)。
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from services.shared import config, queries
from services.shared.commands import delete_resource
from services.shared.errors import install_error_handlers
from services.shared.http import list_response, query_mapping
from services.shared.normalizer import ResourceTemplate
from services.shared.notifications import NotificationPublisher
from services.shared.store import DocumentStore, StoreFactory

from . import commands
from .templates import ALWAYS_PROJECTED, CHECK_PRODUCT_CONFIGURATION, QUERY_PRODUCT_CONFIGURATION


def _add_read_routes(
    app: FastAPI, path: str, template: ResourceTemplate, store: DocumentStore
) -> None:
    """一覧・取得・削除は Check と Query で共通。"""

    @app.get(f"/{path}", name=f"list_{path}")
    async def list_items(request: Request):
        items, total = await queries.list_resources(
            store, query_mapping(request), ALWAYS_PROJECTED
        )
        return list_response(items, total)

    @app.get(f"/{path}/{{resource_id}}", name=f"get_{path}")
    async def get_item(resource_id: str, fields: str | None = None):
        return await queries.get_resource(
            store, template.kind, resource_id, fields, ALWAYS_PROJECTED
        )

    @app.delete(f"/{path}/{{resource_id}}", status_code=204, name=f"delete_{path}")
    async def delete_item(resource_id: str):
        await delete_resource(store, template, resource_id)
        return Response(status_code=204)


def create_app(
    stores: StoreFactory,
    publisher: NotificationPublisher | None = None,
    lifespan=None,
) -> FastAPI:
    app = FastAPI(title="Configuration Service", lifespan=lifespan)
    install_error_handlers(app)

    checks = stores.get("checkProductConfiguration")
    query_store = stores.get("queryProductConfiguration")

    @app.post("/checkProductConfiguration")
    async def create_check(payload: dict[str, Any] = Body(...)):
        """instantSync なら 200 (評価済み)、それ以外は 201"""
        check, status_code = await commands.create_check(checks, payload, publisher)
        return JSONResponse(content=check, status_code=status_code)

    @app.post("/queryProductConfiguration")
    async def create_query(payload: dict[str, Any] = Body(...)):
        query, status_code = await commands.create_query(query_store, payload, publisher)
        return JSONResponse(content=query, status_code=status_code)

    _add_read_routes(app, "checkProductConfiguration", CHECK_PRODUCT_CONFIGURATION, checks)
    _add_read_routes(app, "queryProductConfiguration", QUERY_PRODUCT_CONFIGURATION, query_store)

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "configuration-service"}

    return app


# ── 単体起動用 (uvicorn services.configuration.app.main:app) ──

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
