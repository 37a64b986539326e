import asyncio
from typing import Protocol

import httpx
from redis.asyncio import Redis
from redis.exceptions import RedisError

from attendance_tracker.config import settings
from attendance_tracker.utils.logging import get_logger

logger = get_logger(__name__)


class CacheClient(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None: ...

    async def close(self) -> None: ...


class RedisTcpCache:
    def __init__(self, client: Redis):
        self.client = client

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        await self.client.setex(key, ttl_seconds, value)

    async def close(self) -> None:
        await self.client.aclose()


class UpstashRestCache:
    def __init__(self, rest_url: str, token: str):
        self.client = httpx.AsyncClient(
            base_url=rest_url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            timeout=5.0,
        )

    async def _run(self, *command: str) -> object | None:
        response = await self.client.post("/", json=list(command))
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, dict):
            if payload.get("error"):
                raise RuntimeError(str(payload["error"]))
            return payload.get("result")
        return None

    async def ping(self) -> None:
        result = await self._run("PING")
        if str(result).upper() != "PONG":
            raise RuntimeError("Upstash REST ping failed")

    async def get(self, key: str) -> str | None:
        result = await self._run("GET", key)
        if result is None:
            return None
        return str(result)

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        await self._run("SETEX", key, str(ttl_seconds), value)

    async def close(self) -> None:
        await self.client.aclose()


_cache_client: CacheClient | None = None
_cache_ready = False
_cache_lock = asyncio.Lock()


async def _build_redis_cache() -> RedisTcpCache:
    redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await redis.ping()
        return RedisTcpCache(redis)
    except Exception:
        await redis.aclose()
        raise


async def _build_cache_client() -> CacheClient | None:
    backend = settings.CACHE_BACKEND.strip().lower()
    if backend == "none":
        logger.info("Cache backend: disabled")
        return None
    if backend not in {"auto", "redis", "upstash_rest"}:
        raise RuntimeError(f"Unsupported CACHE_BACKEND: {backend}")

    if backend in {"auto", "upstash_rest"}:
        if settings.UPSTASH_REDIS_REST_URL and settings.UPSTASH_REDIS_REST_TOKEN:
            upstash_cache = UpstashRestCache(
                settings.UPSTASH_REDIS_REST_URL, settings.UPSTASH_REDIS_REST_TOKEN
            )
            try:
                await upstash_cache.ping()
                logger.info("Cache backend: Upstash REST")
                return upstash_cache
            except (httpx.HTTPError, RuntimeError) as error:
                await upstash_cache.close()
                if backend == "upstash_rest":
                    raise
                logger.warning("Upstash REST unavailable: %s", error)
        elif backend == "upstash_rest":
            raise RuntimeError(
                "Upstash REST selected but UPSTASH_REDIS_REST_URL/TOKEN are missing."
            )

    try:
        cache = await _build_redis_cache()
        logger.info("Cache backend: Redis TCP")
        return cache
    except Exception as error:
        if backend == "redis":
            raise
        # auto: the database alone answers duplicate checks
        logger.warning("Redis unavailable, running without cache: %s", error)
        return None


async def init_cache() -> None:
    await get_cache_client()


async def shutdown_cache() -> None:
    global _cache_client, _cache_ready
    async with _cache_lock:
        if _cache_client is not None:
            await _cache_client.close()
        _cache_client = None
        _cache_ready = False


async def get_cache_client() -> CacheClient | None:
    global _cache_client, _cache_ready
    if _cache_ready:
        return _cache_client

    async with _cache_lock:
        if not _cache_ready:
            _cache_client = await _build_cache_client()
            _cache_ready = True
        return _cache_client


async def get_cache():
    cache = await get_cache_client()
    yield cache


CACHE_ERRORS = (RedisError, httpx.HTTPError, RuntimeError, OSError)


def marked_key(class_id: str, student_id: str, date: str) -> str:
    return f"attendance:{class_id}:{student_id}:{date}"


async def is_marked(
    cache: CacheClient | None, class_id: str, student_id: str, date: str
) -> bool:
    """Fast path for "already marked"; a miss or a cache error means ask the database."""
    if cache is None:
        return False
    key = marked_key(class_id, student_id, date)
    try:
        return bool(await cache.get(key))
    except CACHE_ERRORS as error:
        logger.warning("Cache read failed for %s: %s", key, error)
        return False


async def remember_marked(
    cache: CacheClient | None, class_id: str, student_id: str, date: str
) -> None:
    if cache is None:
        return
    key = marked_key(class_id, student_id, date)
    try:
        await cache.setex(key, settings.MARKED_CACHE_TTL_SECONDS, "marked")
    except CACHE_ERRORS as error:
        logger.warning("Cache write failed for %s: %s", key, error)
