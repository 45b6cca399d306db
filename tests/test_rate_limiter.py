from app.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from app.infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_memory_rate_limiter_allows_then_blocks():
    rl = InMemoryRateLimiter()
    key = "k1"
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is False


def test_sixth_request_in_window_is_rejected_and_window_resets():
    clock = FakeClock()
    rl = InMemoryRateLimiter(clock=clock)
    results = [rl.allow("1.2.3.4", 5, 60) for _ in range(6)]
    assert results == [True] * 5 + [False]

    clock.now += 30
    assert rl.allow("1.2.3.4", 5, 60) is False
    assert rl.retry_after("1.2.3.4", 60) == 30

    clock.now += 31
    assert rl.allow("1.2.3.4", 5, 60) is True
    assert rl.retry_after("1.2.3.4", 60) == 60


def test_keys_and_windows_are_independent():
    rl = InMemoryRateLimiter(clock=FakeClock())
    assert rl.allow("a", 1, 60) is True
    assert rl.allow("a", 1, 60) is False
    assert rl.allow("b", 1, 60) is True
    assert rl.allow("a", 1, 900) is True


def test_prune_drops_expired_windows():
    clock = FakeClock()
    rl = InMemoryRateLimiter(clock=clock)
    rl.allow("a", 1, 10)
    rl.allow("b", 1, 100)
    clock.now += 50
    assert rl.prune() == 1
    assert rl.allow("b", 1, 100) is False


class FakePipe:
    def __init__(self, client):
        self.client = client
        self.ops = []

    def incr(self, k, n):
        self.ops.append(("incr", k, n))
        return self

    def expire(self, k, s, nx=False):
        self.ops.append(("expire", k, s, nx))
        return self

    def execute(self):
        out = []
        for op in self.ops:
            if op[0] == "incr":
                self.client.store[op[1]] = self.client.store.get(op[1], 0) + op[2]
                out.append(self.client.store[op[1]])
            else:
                if not (op[3] and op[1] in self.client.ttls):
                    self.client.ttls[op[1]] = op[2]
                out.append(True)
        return out


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}

    def pipeline(self):
        return FakePipe(self)

    def ttl(self, k):
        return self.ttls.get(k, -2)


def test_redis_rate_limiter_with_fake():
    fake = FakeRedis()
    rl = RedisRateLimiter(url="redis://fake", client=fake)

    assert rl.allow("k1", 2, 60) is True
    assert rl.allow("k1", 2, 60) is True
    assert rl.allow("k1", 2, 60) is False
    assert fake.store == {"rl:k1:60": 3}
    assert rl.retry_after("k1", 60) == 60


def test_redis_retry_after_is_zero_for_unknown_key():
    rl = RedisRateLimiter(url="redis://fake", client=FakeRedis())
    assert rl.retry_after("missing", 60) == 0
