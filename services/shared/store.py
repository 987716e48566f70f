"""
Shared — コレクションストア

ハンドラが使うドキュメント操作は insert / find_by_id / find_all /
update / delete の5つだけ。バックエンドはインメモリか SQL
(tmf_documents テーブルに JSON で保存) のどちらか。

ロックもトランザクションも跨がない。更新は後勝ち (last-write-wins)。
"""

import copy
import json
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from . import config


class DocumentStore(Protocol):
    collection: str

    async def insert(self, record: dict) -> dict: ...

    async def find_by_id(self, resource_id: str) -> dict | None: ...

    async def find_all(self) -> list[dict]: ...

    async def update(self, resource_id: str, record: dict) -> dict | None: ...

    async def delete(self, resource_id: str) -> bool: ...


class MemoryStore:
    """挿入順を保つ dict。入出力はディープコピーして共有参照を防ぐ。"""

    def __init__(self, collection: str) -> None:
        self.collection = collection
        self._records: dict[str, dict] = {}

    async def insert(self, record: dict) -> dict:
        self._records[record["id"]] = copy.deepcopy(record)
        return copy.deepcopy(record)

    async def find_by_id(self, resource_id: str) -> dict | None:
        record = self._records.get(resource_id)
        return copy.deepcopy(record) if record is not None else None

    async def find_all(self) -> list[dict]:
        return [copy.deepcopy(r) for r in self._records.values()]

    async def update(self, resource_id: str, record: dict) -> dict | None:
        if resource_id not in self._records:
            return None
        self._records[resource_id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    async def delete(self, resource_id: str) -> bool:
        return self._records.pop(resource_id, None) is not None


class SqlDocumentStore:
    """SQLAlchemy (async) で tmf_documents テーブルに JSON を保存する。"""

    def __init__(self, collection: str, session_factory: sessionmaker) -> None:
        self.collection = collection
        self._session_factory = session_factory

    async def insert(self, record: dict) -> dict:
        now = datetime.now(timezone.utc)
        async with self._session_factory() as session:
            await session.execute(
                text("""
                    INSERT INTO tmf_documents (collection, id, body, created_at, updated_at)
                    VALUES (:collection, :id, :body, :now, :now)
                """),
                {
                    "collection": self.collection,
                    "id": record["id"],
                    "body": json.dumps(record, default=str),
                    "now": now,
                },
            )
            await session.commit()
        return copy.deepcopy(record)

    async def find_by_id(self, resource_id: str) -> dict | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT body FROM tmf_documents
                    WHERE collection = :collection AND id = :id
                """),
                {"collection": self.collection, "id": resource_id},
            )
            row = result.fetchone()
        if not row:
            return None
        return _load(row.body)

    async def find_all(self) -> list[dict]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT body FROM tmf_documents
                    WHERE collection = :collection
                    ORDER BY created_at ASC, id ASC
                """),
                {"collection": self.collection},
            )
            return [_load(row.body) for row in result.fetchall()]

    async def update(self, resource_id: str, record: dict) -> dict | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    UPDATE tmf_documents
                    SET body = :body, updated_at = :now
                    WHERE collection = :collection AND id = :id
                """),
                {
                    "collection": self.collection,
                    "id": resource_id,
                    "body": json.dumps(record, default=str),
                    "now": datetime.now(timezone.utc),
                },
            )
            await session.commit()
        if result.rowcount == 0:
            return None
        return copy.deepcopy(record)

    async def delete(self, resource_id: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    DELETE FROM tmf_documents
                    WHERE collection = :collection AND id = :id
                """),
                {"collection": self.collection, "id": resource_id},
            )
            await session.commit()
        return result.rowcount > 0


def _load(body: Any) -> dict:
    return json.loads(body) if isinstance(body, str) else body


class StoreFactory:
    """
    コレクション名ごとにストアを作る。

    DATABASE_URL が空ならインメモリ。同じ名前には同じストアを返すので、
    gateway でサービスを束ねても注文とキャンセルは同じストアを見る。
    """

    def __init__(self, database_url: str | None = None) -> None:
        self.database_url = config.DATABASE_URL if database_url is None else database_url
        self._stores: dict[str, DocumentStore] = {}
        self.engine = None
        self._session_factory: sessionmaker | None = None
        if self.database_url:
            self.engine = create_async_engine(self.database_url, echo=False)
            self._session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False
            )

    def get(self, collection: str) -> DocumentStore:
        if collection not in self._stores:
            if self._session_factory is None:
                self._stores[collection] = MemoryStore(collection)
            else:
                self._stores[collection] = SqlDocumentStore(collection, self._session_factory)
        return self._stores[collection]

    async def ensure_schema(self) -> None:
        if self.engine is None:
            return
        async with self.engine.begin() as conn:
            await conn.execute(
                text("""
                    CREATE TABLE IF NOT EXISTS tmf_documents (
                        collection VARCHAR(100) NOT NULL,
                        id VARCHAR(255) NOT NULL,
                        body TEXT NOT NULL,
                        created_at TIMESTAMP NOT NULL,
                        updated_at TIMESTAMP NOT NULL,
                        PRIMARY KEY (collection, id)
                    )
                """)
            )

    async def dispose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
