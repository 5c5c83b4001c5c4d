"""Tests pour l'historique des recherches."""

import pytest
from datetime import date, datetime, timezone
from flight_search.storage import SearchHistoryStorage
from flight_search.models import CabinClass, SearchQuery, TripType


@pytest.fixture
async def storage(tmp_path):
    """Crée une base de données temporaire pour les tests."""
    db_path = str(tmp_path / "test.db")
    storage = SearchHistoryStorage(db_path)
    await storage.init_db()
    return storage


def make_query(**overrides):
    params = dict(
        origin="NYC",
        destination="PAR",
        departure_date=date(2026, 11, 20),
        origin_name="New York",
        destination_name="Paris",
    )
    params.update(overrides)
    return SearchQuery(**params)


@pytest.mark.asyncio
async def test_record_and_read_search(storage):
    """Une recherche enregistrée est relue à l'identique."""
    searched_at = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)
    query = make_query(
        trip_type=TripType.ROUND_TRIP,
        return_date=date(2026, 11, 27),
        passengers=3,
        cabin_class=CabinClass.BUSINESS,
    )

    assert await storage.record_search(query, searched_at)

    records = await storage.recent_searches()
    assert len(records) == 1
    record = records[0]
    assert record.origin == "NYC"
    assert record.origin_name == "New York"
    assert record.destination == "PAR"
    assert record.departure_date == date(2026, 11, 20)
    assert record.return_date == date(2026, 11, 27)
    assert record.passengers == 3
    assert record.cabin_class == "BUSINESS"
    assert record.trip_type == "round-trip"
    assert record.searched_at == searched_at


@pytest.mark.asyncio
async def test_recent_searches_newest_first(storage):
    """Les recherches les plus récentes sont renvoyées en premier."""
    for day, destination in [(1, "LON"), (3, "ROM"), (2, "BCN")]:
        await storage.record_search(
            make_query(destination=destination),
            datetime(2026, 10, day, tzinfo=timezone.utc),
        )

    records = await storage.recent_searches(limit=2)

    assert [r.destination for r in records] == ["ROM", "BCN"]
    assert await storage.count_searches() == 3


@pytest.mark.asyncio
async def test_one_way_without_cabin(storage):
    """Les champs optionnels absents sont stockés à NULL."""
    await storage.record_search(make_query(cabin_class=None))

    record = (await storage.recent_searches())[0]
    assert record.return_date is None
    assert record.cabin_class is None


@pytest.mark.asyncio
async def test_record_failure_is_not_raised(tmp_path):
    """Un échec d'écriture est signalé par False, sans exception."""
    storage = SearchHistoryStorage(str(tmp_path / "missing" / "history.db"))

    assert await storage.record_search(make_query()) is False
    assert await storage.recent_searches() == []
    assert await storage.count_searches() == 0
