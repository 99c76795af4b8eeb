"""RedisClient revocation list against an in-memory stand-in."""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

import notegate.core.redis_client as redis_client_module
from notegate.core.redis_client import BLACKLIST_PREFIX, RedisClient


class FakeRedis:
    def __init__(self, reachable=True):
        self.reachable = reachable
        self.store = {}
        self.closed = False

    async def ping(self):
        if not self.reachable:
            raise RedisConnectionError("connection refused")
        return True

    async def setex(self, key, ttl, value):
        self.store[key] = (value, ttl)
        return True

    async def exists(self, key):
        return int(key in self.store)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_redis(monkeypatch):
    def _install(reachable=True):
        fake = FakeRedis(reachable)
        monkeypatch.setattr(redis_client_module.redis, "from_url", lambda *a, **kw: fake)
        return fake

    return _install


async def test_blacklist_round_trip(fake_redis):
    fake = fake_redis()
    client = RedisClient()
    await client.connect()

    assert await client.add_to_blacklist("jti-1", 300) is True
    assert await client.is_token_blacklisted("jti-1") is True
    assert await client.is_token_blacklisted("jti-2") is False
    assert fake.store[f"{BLACKLIST_PREFIX}jti-1"][1] == 300


async def test_unreachable_redis_raises_and_stays_offline(fake_redis):
    fake = fake_redis(reachable=False)
    client = RedisClient()

    with pytest.raises(RedisConnectionError):
        await client.connect()

    assert client.connected is False
    assert fake.closed is True


async def test_offline_client_degrades_quietly():
    client = RedisClient()

    assert await client.add_to_blacklist("jti-1", 300) is False
    assert await client.is_token_blacklisted("jti-1") is False


async def test_disconnect(fake_redis):
    fake = fake_redis()
    client = RedisClient()
    await client.connect()

    await client.disconnect()

    assert fake.closed is True
    assert client.connected is False
