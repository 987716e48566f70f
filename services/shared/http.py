"""
Shared — HTTP ヘルパー

クエリ文字列の取り出し、一覧レスポンスの組み立て、
単純な CRUD リソース用のルーター生成。
"""

from collections.abc import Iterable
from typing import Any

from fastapi import APIRouter, Body, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import commands, queries
from .normalizer import ResourceTemplate
from .notifications import NotificationPublisher
from .store import DocumentStore


def query_mapping(request: Request) -> dict[str, str]:
    """同じキーが複数あれば最後の値を使う。"""
    return dict(request.query_params.items())


def list_response(items: list[dict], total: int) -> JSONResponse:
    return JSONResponse(
        content=items,
        headers={"X-Total-Count": str(total), "X-Result-Count": str(len(items))},
    )


def as_payload(body: Any) -> dict:
    if isinstance(body, BaseModel):
        return body.model_dump(by_alias=True, exclude_unset=True)
    return dict(body)


def crud_router(
    path: str,
    template: ResourceTemplate,
    store: DocumentStore,
    publisher: NotificationPublisher | None = None,
    *,
    create_model: type[BaseModel] | None = None,
    always: Iterable[str] = (),
    with_patch: bool = True,
) -> APIRouter:
    """
    GET/POST /{path} と GET/PATCH/DELETE /{path}/{id} を持つルーターを返す。

    create_model を渡すと POST の必須項目を pydantic で検証する (欠けていれば 400)。
    """
    router = APIRouter(prefix=f"/{path}")
    always = tuple(always)
    body_type = create_model or dict[str, Any]

    @router.get("", name=f"list_{path}")
    async def list_items(request: Request):
        items, total = await queries.list_resources(store, query_mapping(request), always)
        return list_response(items, total)

    @router.post("", status_code=201, name=f"create_{path}")
    async def create_item(payload: body_type = Body(...)):
        return await commands.create_resource(store, template, as_payload(payload), publisher)

    @router.get("/{resource_id}", name=f"get_{path}")
    async def get_item(resource_id: str, fields: str | None = None):
        return await queries.get_resource(store, template.kind, resource_id, fields, always)

    if with_patch:

        @router.patch("/{resource_id}", name=f"patch_{path}")
        async def patch_item(resource_id: str, payload: dict[str, Any] = Body(...)):
            return await commands.update_resource(
                store, template, resource_id, payload, publisher
            )

    @router.delete("/{resource_id}", status_code=204, name=f"delete_{path}")
    async def delete_item(resource_id: str):
        await commands.delete_resource(store, template, resource_id, publisher)
        return Response(status_code=204)

    return router
