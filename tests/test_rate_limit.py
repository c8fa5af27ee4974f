"""Tests for the sliding-window rate limiter and the logging notifier."""

import logging

from quotedesk.services.notifications import LoggingNotifier, NotificationEvent
from quotedesk.services.rate_limit import InMemoryRateLimiter


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestInMemoryRateLimiter:
    """Tests for InMemoryRateLimiter."""

    def test_allows_up_to_limit(self):
        limiter = InMemoryRateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())
        assert [limiter.check_rate_limit("a") for _ in range(4)] == [True, True, True, False]

    def test_keys_are_independent(self):
        limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        assert limiter.check_rate_limit("a")
        assert limiter.check_rate_limit("b")
        assert not limiter.check_rate_limit("a")

    def test_window_slides(self):
        clock = FakeClock()
        limiter = InMemoryRateLimiter(max_requests=2, window_seconds=60, clock=clock)
        assert limiter.check_rate_limit("a")
        clock.now += 30
        assert limiter.check_rate_limit("a")
        assert not limiter.check_rate_limit("a")

        # First hit has aged out, second has not
        clock.now += 31
        assert limiter.check_rate_limit("a")
        assert not limiter.check_rate_limit("a")

    def test_reset(self):
        limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        limiter.check_rate_limit("a")
        limiter.check_rate_limit("b")

        limiter.reset("a")
        assert limiter.check_rate_limit("a")
        assert not limiter.check_rate_limit("b")

        limiter.reset()
        assert limiter.check_rate_limit("b")

    def test_zero_limit_blocks_everything(self):
        limiter = InMemoryRateLimiter(max_requests=0, window_seconds=60, clock=FakeClock())
        assert limiter.max_requests == 0
        assert not limiter.check_rate_limit("a")

    def test_defaults_from_config(self):
        limiter = InMemoryRateLimiter()
        assert limiter.max_requests == 20
        assert limiter.window_seconds == 60


class TestLoggingNotifier:
    """Tests for LoggingNotifier."""

    def test_destructive_logged_as_error(self, caplog):
        with caplog.at_level(logging.INFO, logger="quotedesk.services.notifications"):
            LoggingNotifier().notify(
                NotificationEvent(title="Error", description="Failed", variant="destructive")
            )
        assert caplog.records[-1].levelno == logging.ERROR
        assert "Failed" in caplog.records[-1].getMessage()

    def test_success_logged_as_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="quotedesk.services.notifications"):
            LoggingNotifier().notify(NotificationEvent(title="Quote created", variant="success"))
        assert caplog.records[-1].levelno == logging.INFO
