"""
Inventory Service — FastAPI エントリーポイント (TMF637 Product Inventory)

製品の CRUD と、製品イベントの通知先 (Hub) の登録・解除。
/tmf-api の下にマウントされる。
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from services.shared import config, queries
from services.shared.commands import delete_resource, update_resource
from services.shared.errors import install_error_handlers
from services.shared.http import as_payload, list_response, query_mapping
from services.shared.notifications import NotificationPublisher
from services.shared.store import StoreFactory

from . import commands
from .templates import HUB, PRODUCT

PRODUCT_COLLECTION = "product"
HUB_COLLECTION = "productInventoryHub"


# ── Request Models ───────────────────────────────

class HubRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    callback: str = Field(min_length=1)
    query: str | None = None


def create_app(
    stores: StoreFactory,
    publisher: NotificationPublisher | None = None,
    lifespan=None,
) -> FastAPI:
    app = FastAPI(title="Inventory Service", lifespan=lifespan)
    install_error_handlers(app)

    products = stores.get(PRODUCT_COLLECTION)
    hubs = stores.get(HUB_COLLECTION)

    # ── Product ──────────────────────────────────────

    @app.get("/product")
    async def list_products(request: Request):
        items, total = await queries.list_resources(products, query_mapping(request))
        return list_response(items, total)

    @app.post("/product", status_code=201)
    async def create_product(payload: dict[str, Any] = Body(...)):
        return await commands.create_product(products, payload, publisher)

    @app.get("/product/{product_id}")
    async def get_product(product_id: str, fields: str | None = None):
        return await queries.get_resource(products, PRODUCT.kind, product_id, fields)

    @app.patch("/product/{product_id}")
    async def update_product(product_id: str, payload: dict[str, Any] = Body(...)):
        return await update_resource(products, PRODUCT, product_id, payload, publisher)

    @app.delete("/product/{product_id}", status_code=204)
    async def delete_product(product_id: str):
        await delete_resource(products, PRODUCT, product_id, publisher)
        return Response(status_code=204)

    # ── Hub (通知先の登録) ───────────────────────────

    @app.post("/hub", status_code=201)
    async def register_hub(req: HubRequest):
        return await commands.register_hub(hubs, as_payload(req))

    @app.get("/hub")
    async def list_hubs(request: Request):
        items, total = await queries.list_resources(hubs, query_mapping(request))
        return list_response(items, total)

    @app.delete("/hub/{hub_id}", status_code=204)
    async def unregister_hub(hub_id: str):
        await delete_resource(hubs, HUB, hub_id)
        return Response(status_code=204)

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "inventory-service"}

    return app


# ── 単体起動用 (uvicorn services.inventory.app.main:app) ──

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
