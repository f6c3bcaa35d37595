"""
Tests for token storage and session invalidation
"""
import json

import pytest

from society_admin.services.credentials import FileCredentialProvider, MemoryCredentialProvider


class TestInvalidation:
    """Subscribers hear about a lost session once"""

    def test_clear_notifies_subscribers(self):
        provider = MemoryCredentialProvider("abc")
        calls = []
        provider.subscribe_invalidated(lambda: calls.append("a"))
        provider.subscribe_invalidated(lambda: calls.append("b"))

        provider.clear()

        assert provider.get() is None
        assert calls == ["a", "b"]

    def test_clear_without_token_is_silent(self):
        provider = MemoryCredentialProvider()
        calls = []
        provider.subscribe_invalidated(lambda: calls.append(True))

        provider.clear()

        assert calls == []

    def test_clear_without_notify(self):
        """Logging out does not trigger the session expired handler"""
        provider = MemoryCredentialProvider("abc")
        calls = []
        provider.subscribe_invalidated(lambda: calls.append(True))

        provider.clear(notify=False)

        assert provider.get() is None
        assert calls == []

    def test_unsubscribe(self):
        provider = MemoryCredentialProvider("abc")
        calls = []
        unsubscribe = provider.subscribe_invalidated(lambda: calls.append(True))

        unsubscribe()
        provider.clear()

        assert calls == []

    def test_failing_subscriber_does_not_stop_others(self):
        provider = MemoryCredentialProvider("abc")
        calls = []

        def broken():
            raise RuntimeError("boom")

        provider.subscribe_invalidated(broken)
        provider.subscribe_invalidated(lambda: calls.append(True))

        provider.clear()

        assert calls == [True]

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError):
            MemoryCredentialProvider().set("")


class TestFileProvider:
    """Token persisted under a fixed key"""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "session.json"
        provider = FileCredentialProvider(path=str(path), key="adminToken")

        provider.set("jwt-123")

        assert json.loads(path.read_text(encoding="utf-8")) == {"adminToken": "jwt-123"}
        assert FileCredentialProvider(path=str(path)).get() == "jwt-123"

    def test_clear_removes_file(self, tmp_path):
        path = tmp_path / "session.json"
        provider = FileCredentialProvider(path=str(path))
        provider.set("jwt-123")

        provider.clear()

        assert not path.exists()
        assert provider.get() is None

    def test_missing_file(self, tmp_path):
        assert FileCredentialProvider(path=str(tmp_path / "none.json")).get() is None

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")

        assert FileCredentialProvider(path=str(path)).get() is None

    def test_wrong_key(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"otherToken": "x"}), encoding="utf-8")

        assert FileCredentialProvider(path=str(path)).get() is None
