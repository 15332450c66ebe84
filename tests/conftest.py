"""
Shared fixtures and test doubles.
"""

import asyncio
import time

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from portfolio_backend.config import Settings
from portfolio_backend.exceptions import CompletionError
from portfolio_backend.repositories import Database

MEMORY_DB = "sqlite+aiosqlite:///:memory:"


class FakeRedis:
    """Async stand-in for a redis.asyncio client, injected via constructors.

    Set ``fail = True`` to make every call raise a connection error.
    """

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expires: dict[str, float] = {}
        self.lists: dict[str, list[str]] = {}
        self.fail = False
        self.closed = False

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("connection refused")

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> str | None:
        self._check()
        deadline = self.expires.get(key)
        if deadline is not None and time.monotonic() >= deadline:
            self.store.pop(key, None)
            self.expires.pop(key, None)
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._check()
        self.store[key] = value
        if ex is None:
            self.expires.pop(key, None)
        else:
            self.expires[key] = time.monotonic() + ex
        return True

    async def delete(self, *keys: str) -> int:
        self._check()
        for key in keys:
            self.expires.pop(key, None)
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def rpush(self, key: str, value: str) -> int:
        self._check()
        self.lists.setdefault(key, []).append(value)
        return len(self.lists[key])

    async def blpop(self, keys: list[str], timeout: int = 0):
        self._check()
        for key in keys:
            if self.lists.get(key):
                return key, self.lists[key].pop(0)
        await asyncio.sleep(0.01)
        return None

    async def aclose(self) -> None:
        self.closed = True


class FakeProvider:
    """Completion provider with a scripted behaviour."""

    def __init__(self, reply: str | None = "Halo! Ada yang bisa saya bantu?", delay: float = 0.0, error: bool = False) -> None:
        self.reply = reply
        self.delay = delay
        self.error = error
        self.prompts: list[str] = []
        self.closed = False

    async def complete(self, prompt: str, timeout: float) -> str | None:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise CompletionError("provider unavailable")
        return self.reply

    async def close(self) -> None:
        self.closed = True


class RecordingMailer:
    def __init__(self) -> None:
        self.sent = []

    async def send(self, job) -> None:
        self.sent.append(job)


@pytest.fixture
def settings(tmp_path):
    """Settings that need no Redis, AI endpoint, SMTP or static files."""
    return Settings(
        environment="test",
        log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'portfolio.db'}",
        redis_url=None,
        ai_api_url=None,
        chat_request_timeout=1.0,
        chat_socket_timeout=1.0,
        email_user=None,
        email_pass=None,
        static_dir=str(tmp_path / "public"),
        admin_token="secret",
    )


@pytest.fixture
async def database():
    db = Database(MEMORY_DB)
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def fake_redis():
    return FakeRedis()
