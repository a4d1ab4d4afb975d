"""Tests for the persistence gateways."""
import time
from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import bson
import pytest
from bson.codec_options import CodecOptions
from pymongo.errors import ServerSelectionTimeoutError

from fintrack.core.errors import PersistenceUnavailableError
from fintrack.models.records import Collection, Expense, LendingRecord
from fintrack.repositories.base import dump_records, parse_records
from fintrack.repositories.mongo_gateway import MongoGateway
from fintrack.services import aggregation, mutations
from fintrack.services.record_store import RecordStore


@pytest.fixture
def mock_collection():
    collection = MagicMock()
    collection.find_one = AsyncMock()
    collection.replace_one = AsyncMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__.return_value = mock_collection
    db.command = AsyncMock(return_value={"ok": 1})
    return db


@pytest.mark.asyncio
class TestMemoryGateway:
    async def test_load_unknown_owner_is_empty(self, gateway):
        assert await gateway.load("nobody", Collection.EXPENSES) == []

    async def test_save_then_load(self, gateway):
        record = Expense(title="Rent", amount=800, category="Housing", date=datetime(2026, 10, 1))

        await gateway.save("owner", Collection.EXPENSES, [record])
        loaded = await gateway.load("owner", Collection.EXPENSES)

        assert len(loaded) == 1
        assert loaded[0].model_dump() == record.model_dump()

    async def test_loaded_records_are_copies(self, gateway):
        record = Expense(title="Rent", amount=800, category="Housing", date=datetime(2026, 10, 1))
        await gateway.save("owner", Collection.EXPENSES, [record])

        first = await gateway.load("owner", Collection.EXPENSES)
        first[0].title = "Changed"
        second = await gateway.load("owner", Collection.EXPENSES)

        assert second[0].title == "Rent"

    async def test_ping(self, gateway):
        assert await gateway.ping() is True


@pytest.mark.asyncio
class TestMongoGateway:
    async def test_load_missing_document(self, mock_db, mock_collection):
        mock_collection.find_one.return_value = None

        records = await MongoGateway(mock_db).load("owner", Collection.TRANSACTIONS)

        assert records == []
        mock_db.__getitem__.assert_called_with("transactions")
        mock_collection.find_one.assert_awaited_once_with({"_id": "owner"})

    async def test_load_parses_records(self, mock_db, mock_collection):
        mock_collection.find_one.return_value = {
            "_id": "owner",
            "records": [{
                "id": "abc",
                "personName": "Alice",
                "amount": 1000,
                "date": datetime(2026, 10, 1),
                "type": "lending",
            }],
        }

        records = await MongoGateway(mock_db).load("owner", Collection.TRANSACTIONS)

        assert len(records) == 1
        assert isinstance(records[0], LendingRecord)
        assert records[0].person_name == "Alice"
        assert records[0].status == "pending"

    async def test_save_replaces_whole_snapshot(self, mock_db, mock_collection):
        record = LendingRecord(person_name="Alice", amount=1000, kind="lending", date=datetime(2026, 10, 1))

        await MongoGateway(mock_db).save("owner", Collection.TRANSACTIONS, [record])

        mock_collection.replace_one.assert_awaited_once()
        args, kwargs = mock_collection.replace_one.call_args
        assert args[0] == {"_id": "owner"}
        assert args[1]["_id"] == "owner"
        assert args[1]["records"] == [record.model_dump()]
        assert kwargs["upsert"] is True

    async def test_driver_errors_become_unavailable(self, mock_db, mock_collection):
        mock_collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")
        mock_collection.replace_one.side_effect = ServerSelectionTimeoutError("no servers")
        gateway = MongoGateway(mock_db)

        with pytest.raises(PersistenceUnavailableError):
            await gateway.load("owner", Collection.EXPENSES)
        with pytest.raises(PersistenceUnavailableError):
            await gateway.save("owner", Collection.EXPENSES, [])

    async def test_ping(self, mock_db):
        assert await MongoGateway(mock_db).ping() is True

        mock_db.command.side_effect = ServerSelectionTimeoutError("no servers")
        assert await MongoGateway(mock_db).ping() is False

    async def test_ping_without_connection(self):
        assert await MongoGateway(None).ping() is False


@pytest.fixture
def india_local_time(monkeypatch):
    """Run with the process local zone at UTC+05:30."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset unavailable")
    monkeypatch.setenv("TZ", "IST-05:30")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def bson_round_trip(collection, records):
    """What MongoGateway.save then load does to a snapshot."""
    raw = bson.encode({"_id": "owner", "records": dump_records(records)})
    doc = bson.decode(raw, codec_options=CodecOptions(tz_aware=True))
    return parse_records(collection, doc["records"])


class TestBsonRoundTrip:
    def test_naive_date_keeps_local_day_and_month(self, india_local_time):
        expense = Expense(
            title="Diwali gifts", amount=100, category="Gifts", date=datetime(2026, 10, 31, 22, 0)
        )
        today = date(2026, 10, 31)
        before = aggregation.expense_stats(RecordStore(expenses=[expense]), today)

        loaded = bson_round_trip(Collection.EXPENSES, [expense])

        assert loaded[0].model_dump() == expense.model_dump()
        assert loaded[0].date.utcoffset() == timedelta(hours=5, minutes=30)
        after = aggregation.expense_stats(RecordStore(expenses=loaded), today)
        assert before.monthly_total == after.monthly_total == 100

    def test_chart_bucket_unchanged(self, india_local_time):
        record = LendingRecord(
            person_name="Alice", amount=250, kind="lending", date=datetime(2026, 10, 19, 23, 30)
        )

        loaded = bson_round_trip(Collection.TRANSACTIONS, [record])

        points = aggregation.chart_series(RecordStore(transactions=loaded), date(2026, 10, 19))
        assert points[-1].lending == 250

    def test_generated_timestamps_survive(self, india_local_time):
        store = RecordStore()
        balance = mutations.other_balances.create(
            store, {"type": "cash", "label": "Wallet", "amount": 500}
        )
        balance = mutations.other_balances.add_sub_transaction(
            store, balance.id, {"type": "debit", "note": "Lunch", "amount": 20}
        )

        loaded = bson_round_trip(Collection.OTHER_BALANCES, [balance])

        assert loaded[0].model_dump() == balance.model_dump()
        assert loaded[0].amount == 480
