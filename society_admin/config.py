"""
config.py - 接続先・パス解決・アプリ定数
Society Admin Console
"""

import os
import sys

# ---------------------------------------------------------------------------
# パス解決（exe 化対応）
# ---------------------------------------------------------------------------


def get_base_path() -> str:
    """
    セッション情報を保存するディレクトリを返す。
    - SOCIETY_ADMIN_HOME が設定されていればそのディレクトリ
    - exe 化後  : %LOCALAPPDATA%/SocietyAdmin
    - スクリプト: ~/.society_admin
    """
    override = os.environ.get("SOCIETY_ADMIN_HOME")
    if override:
        return override
    if getattr(sys, "frozen", False) and os.environ.get("LOCALAPPDATA"):
        return os.path.join(os.environ["LOCALAPPDATA"], "SocietyAdmin")
    return os.path.join(os.path.expanduser("~"), ".society_admin")


BASE_PATH = get_base_path()

# トークンは固定キーで 1 つだけ保存する
TOKEN_PATH = os.path.join(BASE_PATH, "session.json")
TOKEN_KEY = "adminToken"

# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------

API_BASE_URL = os.environ.get(
    "SOCIETY_ADMIN_API_URL", "http://api.fbareaadmin.cloud/api"
).rstrip("/")
HTTP_TIMEOUT_SECONDS = 10.0

# ---------------------------------------------------------------------------
# タイミング
# ---------------------------------------------------------------------------

SEARCH_DEBOUNCE_SECONDS = 0.5  # 検索ありの画面
FILTER_DEBOUNCE_SECONDS = 0.3  # タブ切替のみの画面
STATS_POLL_SECONDS = 120  # サイドバーのバッジ更新間隔

# ---------------------------------------------------------------------------
# アプリ定数
# ---------------------------------------------------------------------------

APP_TITLE = "FB Area Block 13 - Admin Panel"
APP_VERSION = "0.1.0"
MAX_IMAGE_BYTES = 5 * 1024 * 1024  # deal 画像の上限

# ---------------------------------------------------------------------------
# カラーパレット
# ---------------------------------------------------------------------------

COLOR_BG = "#F0F2F5"
COLOR_CARD = "#FFFFFF"
COLOR_BORDER = "#D0D7DE"
COLOR_TEXT_MUTED = "#656D76"
COLOR_TEXT_MAIN = "#1F2328"
COLOR_PRIMARY = "#2E7D32"
COLOR_SIDEBAR_HEADER = "#90EE90"
COLOR_DANGER = "#CF222E"
COLOR_SUCCESS = "#2DA44E"
COLOR_WARNING = "#BF8700"
COLOR_INFO = "#0969DA"
COLOR_NEUTRAL = "#6E7781"

# ステータス → バッジ色
STATUS_COLORS = {
    "pending": COLOR_WARNING,
    "submitted": COLOR_INFO,
    "in_progress": COLOR_INFO,
    "approved": COLOR_SUCCESS,
    "resolved": COLOR_SUCCESS,
    "active": COLOR_SUCCESS,
    "featured": COLOR_INFO,
    "rejected": COLOR_DANGER,
    "suspended": COLOR_DANGER,
    "inactive": COLOR_NEUTRAL,
    "expired": COLOR_NEUTRAL,
}

PRIORITY_COLORS = {
    "urgent": COLOR_DANGER,
    "high": "#BC4C00",
    "medium": COLOR_WARNING,
    "low": COLOR_INFO,
}

# AppBar
COLOR_APPBAR_BG = "#FFFFFF"
COLOR_APPBAR_FG = "#1F2328"

# UI 定数
BORDER_RADIUS_CARD = 10
BORDER_RADIUS_BTN = 6
SHADOW_ELEVATION = 2
SIDEBAR_WIDTH = 260
