from clientes_api.services.rate_limit import RateLimiter


def test_allows_up_to_limit_then_rejects(clock):
    limiter = RateLimiter(clock=clock)

    results = [limiter.check("login:10.0.0.1", 900, 5) for _ in range(6)]

    assert [allowed for allowed, _ in results] == [True] * 5 + [False]
    assert results[-1][1] == 901


def test_keys_are_independent(clock):
    limiter = RateLimiter(clock=clock)
    for _ in range(5):
        limiter.check("login:10.0.0.1", 900, 5)

    assert limiter.check("login:10.0.0.2", 900, 5) == (True, None)


def test_window_reopens(clock):
    limiter = RateLimiter(clock=clock)
    for _ in range(5):
        limiter.check("login:10.0.0.1", 900, 5)

    clock.advance(901)

    assert limiter.check("login:10.0.0.1", 900, 5) == (True, None)


def test_idle_keys_are_dropped(clock):
    limiter = RateLimiter(clock=clock)
    for address in ("10.0.0.1", "10.0.0.2", "10.0.0.3"):
        limiter.check(f"login:{address}", 900, 5)
    assert len(limiter) == 3

    clock.advance(901)
    limiter.check("login:10.0.0.9", 900, 5)

    assert len(limiter) == 1


def test_active_keys_survive_sweep(clock):
    limiter = RateLimiter(clock=clock)
    limiter.check("login:old", 900, 5)
    clock.advance(600)
    limiter.check("login:recent", 900, 5)

    clock.advance(400)
    limiter.check("login:new", 900, 5)

    assert len(limiter) == 2
