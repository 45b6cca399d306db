import redis

from ...application.ports.rate_limiter import RateLimiter


class RedisRateLimiter(RateLimiter):
    def __init__(self, url: str, prefix: str = "rl:", client=None) -> None:
        self.client = client or redis.Redis.from_url(url)
        self.prefix = prefix

    def _key(self, key: str, window_seconds: int) -> str:
        return f"{self.prefix}{key}:{window_seconds}"

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        rk = self._key(key, window_seconds)
        # INCR then EXPIRE NX: the first hit of a window sets its lifetime
        pipe = self.client.pipeline()
        pipe.incr(rk, 1)
        pipe.expire(rk, window_seconds, nx=True)
        count, _ = pipe.execute()
        return int(count) <= int(max_requests)

    def retry_after(self, key: str, window_seconds: int) -> int:
        ttl = self.client.ttl(self._key(key, window_seconds))
        return max(int(ttl or 0), 0)
