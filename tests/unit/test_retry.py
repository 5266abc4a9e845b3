"""
Tests for retry_on_conflict
"""
import pytest

from orderdesk.domain.exceptions import IllegalTransition
from orderdesk.core.constants import OrderStatus
from orderdesk.repositories.exceptions import ConcurrencyConflict
from orderdesk.utils.retry import retry_on_conflict


class TestRetryOnConflict:
    """Tests for the conflict retry decorator"""

    async def test_returns_first_success(self):
        calls = []

        @retry_on_conflict(max_attempts=3, base_delay=0)
        async def operation():
            calls.append(1)
            return "ok"

        assert await operation() == "ok"
        assert len(calls) == 1

    async def test_retries_conflict_then_succeeds(self):
        calls = []

        @retry_on_conflict(max_attempts=3, base_delay=0)
        async def operation():
            calls.append(1)
            if len(calls) < 3:
                raise ConcurrencyConflict("Order", 1, expected_version=len(calls))
            return len(calls)

        assert await operation() == 3

    async def test_reraises_after_last_attempt(self):
        calls = []

        @retry_on_conflict(max_attempts=2, base_delay=0)
        async def operation():
            calls.append(1)
            raise ConcurrencyConflict("Order", 1, expected_version=1, actual_version=2)

        with pytest.raises(ConcurrencyConflict) as exc_info:
            await operation()

        assert len(calls) == 2
        assert exc_info.value.actual_version == 2

    async def test_other_errors_not_retried(self):
        calls = []

        @retry_on_conflict(max_attempts=5, base_delay=0)
        async def operation():
            calls.append(1)
            raise IllegalTransition(OrderStatus.CANCELLED, OrderStatus.PENDING)

        with pytest.raises(IllegalTransition):
            await operation()
        assert len(calls) == 1

    async def test_backoff_delays(self, monkeypatch):
        """Delays grow exponentially and are capped"""
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)

        monkeypatch.setattr("orderdesk.utils.retry.asyncio.sleep", fake_sleep)

        @retry_on_conflict(max_attempts=4, base_delay=0.1, max_delay=0.3)
        async def operation():
            raise ConcurrencyConflict("Order", 1, expected_version=1)

        with pytest.raises(ConcurrencyConflict):
            await operation()

        assert delays == pytest.approx([0.1, 0.2, 0.3])

    async def test_config_defaults(self, monkeypatch):
        """Attempts default to Config.CONFLICT_RETRY_ATTEMPTS"""
        monkeypatch.setattr("orderdesk.core.config.Config.CONFLICT_RETRY_ATTEMPTS", 2)
        monkeypatch.setattr("orderdesk.core.config.Config.CONFLICT_RETRY_BASE_DELAY", 0)
        calls = []

        @retry_on_conflict()
        async def operation():
            calls.append(1)
            raise ConcurrencyConflict("Order", 1, expected_version=1)

        with pytest.raises(ConcurrencyConflict):
            await operation()
        assert len(calls) == 2
