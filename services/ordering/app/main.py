"""
Ordering Service — FastAPI エントリーポイント (TMF622 Product Ordering)

ProductOrder は CRUD、CancelProductOrder は作成・一覧・取得のみ。
キャンセルの作成は参照先の注文の状態も変える (commands.create_cancel_order)。
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, Request, Response

from services.shared import config, queries
from services.shared.errors import install_error_handlers
from services.shared.http import list_response, query_mapping
from services.shared.notifications import NotificationPublisher
from services.shared.store import StoreFactory

from . import commands
from .templates import CANCEL_PRODUCT_ORDER, PRODUCT_ORDER


def create_app(
    stores: StoreFactory,
    publisher: NotificationPublisher | None = None,
    lifespan=None,
) -> FastAPI:
    app = FastAPI(title="Ordering Service", lifespan=lifespan)
    install_error_handlers(app)

    orders = stores.get("productOrder")
    cancels = stores.get("cancelProductOrder")

    # ── ProductOrder ─────────────────────────────────

    @app.get("/productOrder")
    async def list_orders(request: Request):
        """注文一覧 (フィルタ・fields・limit/offset)"""
        items, total = await queries.list_resources(orders, query_mapping(request))
        return list_response(items, total)

    @app.post("/productOrder", status_code=201)
    async def create_order(payload: dict[str, Any] = Body(...)):
        return await commands.create_order(orders, payload, publisher)

    @app.get("/productOrder/{order_id}")
    async def get_order(order_id: str, fields: str | None = None):
        return await queries.get_resource(orders, PRODUCT_ORDER.kind, order_id, fields)

    @app.patch("/productOrder/{order_id}")
    async def update_order(order_id: str, payload: dict[str, Any] = Body(...)):
        return await commands.update_order(orders, order_id, payload, publisher)

    @app.delete("/productOrder/{order_id}", status_code=204)
    async def delete_order(order_id: str):
        await commands.delete_order(orders, order_id, publisher)
        return Response(status_code=204)

    # ── CancelProductOrder ───────────────────────────

    @app.get("/cancelProductOrder")
    async def list_cancel_orders(request: Request):
        items, total = await queries.list_resources(cancels, query_mapping(request))
        return list_response(items, total)

    @app.post("/cancelProductOrder", status_code=201)
    async def create_cancel_order(payload: dict[str, Any] = Body(...)):
        return await commands.create_cancel_order(cancels, orders, payload, publisher)

    @app.get("/cancelProductOrder/{cancel_id}")
    async def get_cancel_order(cancel_id: str, fields: str | None = None):
        return await queries.get_resource(
            cancels, CANCEL_PRODUCT_ORDER.kind, cancel_id, fields
        )

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "ordering-service"}

    return app


# ── 単体起動用 (uvicorn services.ordering.app.main:app) ──

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
