"""
Shared — ID・ロケータ生成 (Identity & Reference Generator)

リソースの id と href を作る。href は id とパスから決定的に導出される。
"""

from datetime import datetime, timezone
from uuid import uuid4

from . import config

# 埋め込み参照に id が無いときに使うデフォルト id
DEFAULT_REF_ID = "1"


def new_id(prefix: str | None = None) -> str:
    value = str(uuid4())
    return f"{prefix}-{value}" if prefix else value


def locator(path: str, resource_id: str) -> str:
    """`{API_BASE_URL}/{path}/{id}` 形式の href を返す。"""
    return f"{config.API_BASE_URL}/{path.strip('/')}/{resource_id}"


def now_iso() -> str:
    """現在時刻 (UTC, ミリ秒, Z 付き)"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
