"""
Shared — 設定 (Configuration)

全サービス共通の環境変数をここで読み込む。
DATABASE_URL が空ならインメモリ、REDIS_URL が空なら通知は送らない。
"""

import os

DATABASE_URL = os.environ.get("DATABASE_URL", "")
REDIS_URL = os.environ.get("REDIS_URL", "")
API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:3000").rstrip("/")

# 日付フィルタの比較に使うタイムゾーン
TMF_TIMEZONE = os.environ.get("TMF_TIMEZONE", "UTC")
DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "LKR")

DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE = int(os.environ.get("MAX_PAGE_SIZE", "100"))

HUB_CALLBACK_TIMEOUT_SECONDS = float(os.environ.get("HUB_CALLBACK_TIMEOUT_SECONDS", "10"))
EVENTS_CHANNEL = os.environ.get("EVENTS_CHANNEL", "tmf_events")

EXPOSE_ERROR_DETAIL = os.environ.get("EXPOSE_ERROR_DETAIL", "false").lower() == "true"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

ENABLE_TMF620 = os.environ.get("ENABLE_TMF620", "true").lower() != "false"
ENABLE_TMF622 = os.environ.get("ENABLE_TMF622", "true").lower() != "false"
ENABLE_TMF637 = os.environ.get("ENABLE_TMF637", "true").lower() != "false"
ENABLE_TMF688 = os.environ.get("ENABLE_TMF688", "true").lower() != "false"
ENABLE_TMF760 = os.environ.get("ENABLE_TMF760", "true").lower() != "false"
