from unittest.mock import Mock

import pytest

from medistore.services import lock_service as lock_module
from medistore.services.lock_service import LockService


class StubRedis:
    """Answers like a redis server where the checkout key is already taken."""

    def __init__(self):
        self.calls = []

    def set(self, name, value, nx=False, ex=None):
        self.calls.append(("set", name, value, nx, ex))
        return None

    def eval(self, script, numkeys, *args):
        self.calls.append(("eval", numkeys) + args)
        return 0


@pytest.fixture
def lock(monkeypatch):
    service = LockService("redis://localhost:6379/0")
    service.redis = StubRedis()
    monkeypatch.setattr(lock_module, "logger", Mock())
    return service


def test_refused_acquire_is_logged(lock):
    assert lock.acquire_checkout_lock(7, "token", 30) is False

    assert lock.redis.calls == [("set", "checkout:7:lock", "token", True, 30)]
    lock_module.logger.warning.assert_called_once()
    assert lock_module.logger.warning.call_args.kwargs["extra"]["user_id"] == 7


def test_release_with_foreign_token(lock):
    assert lock.release_checkout_lock(7, "token") is False

    assert lock.redis.calls == [("eval", 1, "checkout:7:lock", "token")]
    assert lock_module.logger.warning.call_args.kwargs["extra"]["operation"] == "release_checkout_lock"
