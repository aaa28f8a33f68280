import pytest
import asyncio

from common.db.context import (
    is_readonly_forced,
    get_current_session,
    set_current_session,
    reset_current_session,
    in_transaction,
    readonly,
    _force_readonly,
)


class TestContextVariables:
    """Test context variable behavior."""

    def test_default_state(self):
        assert is_readonly_forced() is False
        assert get_current_session(readonly=False) is None
        assert get_current_session(readonly=True) is None
        assert in_transaction(readonly=False) is False
        assert in_transaction(readonly=True) is False

    async def test_write_and_read_slots_are_separate(self, test_db):
        token = set_current_session(test_db, readonly=True)
        try:
            assert in_transaction(readonly=True) is True
            assert in_transaction(readonly=False) is False
        finally:
            reset_current_session(token, readonly=True)

        assert get_current_session(readonly=True) is None


class TestContextIsolation:
    """Concurrent webhook deliveries must not see each other's session."""

    async def test_concurrent_tasks_have_isolated_contexts(self, test_db):
        results = {}

        async def deliver(event_id: str, delay: float, session):
            token = set_current_session(session, readonly=False)
            await asyncio.sleep(delay)
            results[event_id] = get_current_session(readonly=False) is session
            reset_current_session(token, readonly=False)

        async def untouched(event_id: str):
            await asyncio.sleep(0.01)
            results[event_id] = get_current_session(readonly=False) is None

        await asyncio.gather(
            deliver("evt_1", 0.01, test_db),
            deliver("evt_2", 0.005, test_db),
            untouched("evt_3"),
        )

        assert results == {"evt_1": True, "evt_2": True, "evt_3": True}

    async def test_readonly_flag_isolated_between_tasks(self):
        results = {}

        @readonly
        async def summary_read():
            await asyncio.sleep(0.01)
            results["summary"] = is_readonly_forced()

        async def webhook_write():
            await asyncio.sleep(0.01)
            results["webhook"] = is_readonly_forced()

        await asyncio.gather(summary_read(), webhook_write())

        assert results == {"summary": True, "webhook": False}


class TestReadonlyDecorator:
    """Test the @readonly decorator."""

    async def test_sets_and_resets_force_flag(self):
        @readonly
        async def get_entitlement(tenant_id: str, include_vip: bool = True):
            return (tenant_id, include_vip, is_readonly_forced())

        assert await get_entitlement("uid_bob", include_vip=False) == (
            "uid_bob",
            False,
            True,
        )
        assert is_readonly_forced() is False

    async def test_resets_on_exception(self):
        @readonly
        async def failing_read():
            raise LookupError("tenant not found")

        with pytest.raises(LookupError):
            await failing_read()

        assert is_readonly_forced() is False

    async def test_nested_readonly_stays_forced(self):
        seen = []

        @readonly
        async def inner():
            seen.append(is_readonly_forced())

        @readonly
        async def outer():
            seen.append(is_readonly_forced())
            await inner()
            seen.append(_force_readonly.get())

        await outer()

        assert seen == [True, True, True]
        assert is_readonly_forced() is False
