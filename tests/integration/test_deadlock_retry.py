"""
Integration tests de reintentos ante deadlocks.

Verifica que:
- Se detectan los errores MySQL 1213 (Deadlock) y 1205 (Lock wait timeout)
  y el "database is locked" de SQLite
- Las escrituras del store se reintentan con backoff exponencial
- Los errores que no son deadlocks se propagan sin reintentos
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from posada.domain.errors import PersistenceError
from posada.infrastructure.db.repositories.reservation_store_sql import ReservationStoreSQL
from posada.infrastructure.db.retry import is_deadlock_error, retry_on_deadlock

pytestmark = pytest.mark.deadlock


def _operational_error(message: str) -> OperationalError:
    return OperationalError("statement", "params", message, connection_invalidated=False)


DEADLOCK = "(asyncmy.errors.OperationalError) (1213, 'Deadlock found when trying to get lock')"


class TestDeadlockDetection:
    @pytest.mark.parametrize(
        "message",
        [
            DEADLOCK,
            "(asyncmy.errors.OperationalError) (1205, 'Lock wait timeout exceeded')",
            "(sqlite3.OperationalError) database is locked",
        ],
    )
    def test_transient_lock_errors_are_detected(self, message):
        assert is_deadlock_error(_operational_error(message))

    def test_other_errors_are_not_deadlocks(self):
        assert not is_deadlock_error(Exception("1213"))
        assert not is_deadlock_error(
            _operational_error("(asyncmy.errors.OperationalError) (2013, 'Lost connection to MySQL server')")
        )


class TestRetryLogic:
    @pytest.mark.asyncio
    async def test_retry_until_success(self):
        call_count = 0

        async def fails_twice():
            nonlocal call_count
            call_count += 1
            if call_count <= 2:
                raise _operational_error(DEADLOCK)
            return "ok"

        result = await retry_on_deadlock(fails_twice, max_attempts=3, base_delay=0.01)

        assert result == "ok"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        always_fails = AsyncMock(side_effect=_operational_error(DEADLOCK))

        with pytest.raises(OperationalError):
            await retry_on_deadlock(always_fails, max_attempts=3, base_delay=0.01)

        assert always_fails.await_count == 3

    @pytest.mark.asyncio
    async def test_non_deadlock_error_not_retried(self):
        fails = AsyncMock(side_effect=ValueError("bad input"))

        with pytest.raises(ValueError):
            await retry_on_deadlock(fails, max_attempts=3, base_delay=0.01)

        assert fails.await_count == 1

    @pytest.mark.asyncio
    async def test_exponential_backoff(self):
        always_fails = AsyncMock(side_effect=_operational_error(DEADLOCK))

        with patch("posada.infrastructure.db.retry.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            with pytest.raises(OperationalError):
                await retry_on_deadlock(always_fails, max_attempts=3, base_delay=0.1)

        delays = [call.args[0] for call in mock_sleep.await_args_list]
        assert delays == pytest.approx([0.1, 0.2])


class TestStoreWritesUseRetry:
    @pytest.mark.asyncio
    async def test_persistent_deadlock_surfaces_as_persistence_error(self):
        store = ReservationStoreSQL(session_factory=None)

        async def retry_exhausted(func, *args, **kwargs):
            raise _operational_error(DEADLOCK)

        with patch(
            "posada.infrastructure.db.repositories.reservation_store_sql.retry_on_deadlock",
            side_effect=retry_exhausted,
        ) as mock_retry:
            with pytest.raises(PersistenceError):
                await store.delete_reservation("res-1")

        mock_retry.assert_called_once()
