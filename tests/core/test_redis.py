"""
Tests for the optional Redis connection.
"""

from billboard_api.core.redis import close_redis, get_redis, init_redis, is_redis_healthy


async def test_empty_url_disables_redis():
    assert await init_redis("") is None
    assert get_redis() is None
    assert await is_redis_healthy() is False


async def test_unreachable_server_leaves_redis_disabled():
    assert await init_redis("redis://127.0.0.1:1/0") is None
    assert get_redis() is None
    await close_redis()
