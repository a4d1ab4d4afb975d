from datetime import datetime
from unittest.mock import AsyncMock, call, patch

import pytest

from fintrack.core.errors import PersistenceUnavailableError
from fintrack.models.records import Collection
from fintrack.services.session import LedgerSession

OWNER = "owner-1"


def lending(name="Alice", amount=1000):
    return {
        "personName": name,
        "amount": amount,
        "date": datetime(2026, 10, 1, 12, 0),
        "type": "lending",
    }


@pytest.mark.asyncio
async def test_create_persists_collection(gateway):
    session = LedgerSession(OWNER, gateway)
    await session.load()

    record = await session.create(Collection.TRANSACTIONS, lending())

    stored = await gateway.load(OWNER, Collection.TRANSACTIONS)
    assert [r.id for r in stored] == [record.id]
    assert not session.offline


@pytest.mark.asyncio
async def test_round_trip_equals_original(gateway):
    """A fresh session sees exactly what the previous one wrote."""
    session = LedgerSession(OWNER, gateway)
    await session.load()
    await session.create(Collection.TRANSACTIONS, lending())
    await session.create(Collection.EXPENSES, {
        "title": "Groceries", "amount": 42.5, "category": "Food",
        "date": datetime(2026, 10, 3), "paymentMethod": "card",
    })
    balance = await session.create(
        Collection.OTHER_BALANCES, {"type": "bank", "label": "Checking", "amount": 900}
    )
    await session.add_sub_transaction(balance.id, {"type": "debit", "note": "Rent", "amount": 400})

    fresh = LedgerSession(OWNER, gateway)
    await fresh.load()

    for collection in Collection:
        assert [r.model_dump() for r in fresh.store.records(collection)] == \
            [r.model_dump() for r in session.store.records(collection)]


@pytest.mark.asyncio
async def test_owners_are_isolated(gateway):
    alice = LedgerSession("alice", gateway)
    await alice.load()
    await alice.create(Collection.TRANSACTIONS, lending())

    bob = LedgerSession("bob", gateway)
    await bob.load()

    assert bob.store.transactions == []


@pytest.mark.asyncio
async def test_load_failure_degrades_only_that_collection(gateway):
    seed = LedgerSession(OWNER, gateway)
    await seed.load()
    await seed.create(Collection.EXPENSES, {
        "title": "Rent", "amount": 800, "category": "Housing", "date": datetime(2026, 10, 1),
    })

    real_load = gateway.load

    async def flaky_load(owner_id, collection):
        if collection == Collection.TRANSACTIONS:
            raise PersistenceUnavailableError("down")
        return await real_load(owner_id, collection)

    gateway.load = AsyncMock(side_effect=flaky_load)
    session = LedgerSession(OWNER, gateway)
    await session.load()

    assert session.degraded == {Collection.TRANSACTIONS}
    assert session.store.transactions == []
    assert len(session.store.expenses) == 1
    assert session.offline
    assert session.warnings


@pytest.mark.asyncio
async def test_degraded_collection_is_never_written_back(gateway):
    seed = LedgerSession(OWNER, gateway)
    await seed.load()
    existing = await seed.create(Collection.TRANSACTIONS, lending("Bob", 50))

    real_load, real_save = gateway.load, gateway.save
    gateway.load = AsyncMock(side_effect=PersistenceUnavailableError("down"))
    gateway.save = AsyncMock()
    session = LedgerSession(OWNER, gateway)
    await session.load(Collection.TRANSACTIONS)

    record = await session.create(Collection.TRANSACTIONS, lending())

    assert record in session.store.transactions
    assert Collection.TRANSACTIONS in session.pending
    gateway.save.assert_not_called()

    # store comes back: reload, merge, then write
    gateway.load, gateway.save = real_load, real_save
    still_pending = await session.flush()

    assert still_pending == set()
    assert not session.degraded
    stored = await gateway.load(OWNER, Collection.TRANSACTIONS)
    assert {r.id for r in stored} == {existing.id, record.id}


@pytest.mark.asyncio
async def test_save_failure_is_retried_then_queued(gateway):
    session = LedgerSession(OWNER, gateway, retries=2, backoff=0)
    await session.load()
    gateway.save = AsyncMock(side_effect=PersistenceUnavailableError("down"))

    record = await session.create(Collection.TRANSACTIONS, lending())

    assert gateway.save.await_count == 3
    assert session.store.transactions == [record]
    assert session.pending == {Collection.TRANSACTIONS}
    assert session.warnings


@pytest.mark.asyncio
async def test_save_retries_back_off_exponentially(gateway):
    session = LedgerSession(OWNER, gateway, retries=4, backoff=1)
    await session.load()
    gateway.save = AsyncMock(side_effect=PersistenceUnavailableError("down"))

    with patch("fintrack.services.session.asyncio.sleep", new_callable=AsyncMock) as sleep:
        await session.create(Collection.TRANSACTIONS, lending())

    assert gateway.save.await_count == 5
    # no wait after the last attempt, capped at five seconds
    assert sleep.await_args_list == [call(1), call(2), call(4), call(5.0)]


@pytest.mark.asyncio
async def test_save_succeeds_after_transient_failure(gateway):
    session = LedgerSession(OWNER, gateway, retries=1, backoff=0)
    await session.load()
    real_save = gateway.save
    gateway.save = AsyncMock(side_effect=[PersistenceUnavailableError("blip"), None])

    await session.create(Collection.TRANSACTIONS, lending())

    assert gateway.save.await_count == 2
    assert not session.pending
    gateway.save = real_save


@pytest.mark.asyncio
async def test_flush_writes_queued_changes(gateway):
    session = LedgerSession(OWNER, gateway, retries=0)
    await session.load()
    real_save = gateway.save
    gateway.save = AsyncMock(side_effect=PersistenceUnavailableError("down"))
    record = await session.create(Collection.TRANSACTIONS, lending())
    assert session.pending

    gateway.save = real_save
    assert await session.flush() == set()

    stored = await gateway.load(OWNER, Collection.TRANSACTIONS)
    assert [r.id for r in stored] == [record.id]


@pytest.mark.asyncio
async def test_strict_session_raises_on_load_failure(gateway):
    gateway.load = AsyncMock(side_effect=PersistenceUnavailableError("down"))
    session = LedgerSession(OWNER, gateway, strict=True)

    with pytest.raises(PersistenceUnavailableError):
        await session.load()


@pytest.mark.asyncio
async def test_strict_session_raises_on_save_failure(gateway):
    session = LedgerSession(OWNER, gateway, strict=True, retries=0)
    await session.load()
    gateway.save = AsyncMock(side_effect=RuntimeError("boom"))

    with pytest.raises(PersistenceUnavailableError):
        await session.create(Collection.TRANSACTIONS, lending())


@pytest.mark.asyncio
async def test_missing_records_do_not_write(gateway):
    session = LedgerSession(OWNER, gateway)
    await session.load()
    gateway.save = AsyncMock()

    assert await session.update(Collection.TRANSACTIONS, "missing", {"amount": 5}) is None
    assert await session.delete(Collection.TRANSACTIONS, "missing") == []
    assert await session.add_sub_transaction("missing", {"type": "credit", "amount": 1}) is None

    gateway.save.assert_not_called()
