"""
credentials.py - 認証トークン管理
Society Admin Console

Bearer トークンの取得・保存・破棄と、セッション無効化の通知を一か所にまとめる。
"""
import json
import logging
import os
from typing import Callable

from society_admin.config import TOKEN_KEY, TOKEN_PATH

logger = logging.getLogger(__name__)

InvalidatedCallback = Callable[[], None]


class CredentialProvider:
    """トークンの保管先を抽象化する。サブクラスは _load / _store / _erase を実装する。"""

    def __init__(self):
        self._subscribers: list[InvalidatedCallback] = []

    # --- storage hooks -----------------------------------------------------

    def _load(self) -> str | None:
        raise NotImplementedError

    def _store(self, token: str) -> None:
        raise NotImplementedError

    def _erase(self) -> None:
        raise NotImplementedError

    # --- public API ----------------------------------------------------------

    def get(self) -> str | None:
        return self._load() or None

    def set(self, token: str) -> None:
        if not token:
            raise ValueError("token must not be empty")
        self._store(token)

    def clear(self, notify: bool = True) -> None:
        """
        トークンを破棄する。保存済みトークンがあった場合のみ購読者へ通知する。
        利用者自身のログアウトでは notify=False（画面遷移は呼び出し側が行う）。
        """
        had_token = self.get() is not None
        self._erase()
        if not had_token or not notify:
            return
        logger.info("Session invalidated")
        for callback in list(self._subscribers):
            try:
                callback()
            except Exception:
                logger.exception("Session invalidated callback failed")

    def subscribe_invalidated(self, callback: InvalidatedCallback) -> Callable[[], None]:
        """セッション無効化の購読を登録し、解除用の関数を返す。"""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe


class MemoryCredentialProvider(CredentialProvider):
    def __init__(self, token: str | None = None):
        super().__init__()
        self._token = token

    def _load(self) -> str | None:
        return self._token

    def _store(self, token: str) -> None:
        self._token = token

    def _erase(self) -> None:
        self._token = None


# ---------------------------------------------------------------------------
# ファイル保存（固定キー 1 つだけの JSON）
# ---------------------------------------------------------------------------


class FileCredentialProvider(CredentialProvider):
    def __init__(self, path: str = TOKEN_PATH, key: str = TOKEN_KEY):
        super().__init__()
        self.path = path
        self.key = key

    def _load(self) -> str | None:
        """ファイルが存在しない・壊れている場合は None。"""
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return None
        if not isinstance(data, dict):
            return None
        token = data.get(self.key)
        return token if isinstance(token, str) else None

    def _store(self, token: str) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({self.key: token}, f, ensure_ascii=False, indent=2)

    def _erase(self) -> None:
        if os.path.exists(self.path):
            try:
                os.remove(self.path)
                logger.debug(f"Token file deleted: {self.path}")
            except OSError as e:
                logger.warning(f"Failed to delete token file: {e}")
