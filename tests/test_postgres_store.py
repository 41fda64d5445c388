import asyncio
import threading
import time
import uuid
from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from models.notification import NotificationPriority, NotificationRecord
from models.user import UserRole
from services.matching_engine import TrainerMatchingEngine
from services.postgres_store import PostgresTrainingStore

from factories import CAIRO, COMMUNICATION, TEAMWORK, make_request


@pytest.fixture
def db_manager():
    return MagicMock()


@pytest.fixture
def pg_store(db_manager, config):
    return PostgresTrainingStore(db_manager, config)


def _user_row(user_id, **overrides):
    row = {
        "id": user_id,
        "full_name": "Mona Hassan",
        "email": None,
        "role": "TR",
        "province": "cairo",
        "specialization": f'["{COMMUNICATION}"]',
        "rating": None,
        "total_training_hours": 40,
        "is_active": True,
    }
    row.update(overrides)
    return row


def test_fetch_active_trainers_normalizes_rows(pg_store, db_manager):
    trainer_id = uuid.uuid4()
    db_manager.execute_query.return_value = [_user_row(trainer_id)]

    [trainer] = asyncio.run(pg_store.fetch_active_trainers())

    assert trainer.id == str(trainer_id)
    assert trainer.province == CAIRO
    assert trainer.specializations == [COMMUNICATION]
    assert trainer.rating == 0
    args = db_manager.execute_query.call_args[0]
    assert args[1] == ("TR",)


def test_fetch_trainer_statistics(pg_store, db_manager):
    db_manager.execute_query.return_value = [
        {"trainer_id": "tr-1", "average_rating": 4.8, "total_hours": 130},
    ]

    stats = asyncio.run(pg_store.fetch_trainer_statistics(["tr-1", "tr-2"]))

    assert set(stats) == {"tr-1"}
    assert stats["tr-1"].total_hours == 130
    assert asyncio.run(pg_store.fetch_trainer_statistics([])) == {}
    assert db_manager.execute_query.call_count == 1


def test_find_users_filters_specialization(pg_store, db_manager):
    db_manager.execute_query.return_value = [
        _user_row("sv-1", role="SV"),
        _user_row("sv-2", role="SV", specialization=TEAMWORK),
    ]

    users = asyncio.run(pg_store.find_users(UserRole.PROGRAM_SUPERVISOR, specialization="communication"))

    assert [u.id for u in users] == ["sv-1"]


def test_find_users_restricts_ids(pg_store, db_manager):
    db_manager.execute_query.return_value = []

    asyncio.run(pg_store.find_users(UserRole.TRAINER, user_ids=["a", "b"]))

    query, params = db_manager.execute_query.call_args[0]
    assert "ANY" in query
    assert params == ("TR", ["a", "b"])


def test_fetch_request(pg_store, db_manager):
    db_manager.execute_query.return_value = {
        "id": "req-1",
        "title": "Workshop",
        "specialization": "communication",
        "province": "cairo",
        "requested_date": date(2026, 5, 1),
        "duration_hours": None,
        "status": "final_approved",
        "requester_id": uuid.UUID(int=1),
        "assigned_trainer_id": None,
    }

    request = asyncio.run(pg_store.fetch_request("req-1"))

    assert request.requested_date == datetime(2026, 5, 1)
    assert request.duration_hours == 2
    assert request.requester_id == str(uuid.UUID(int=1))

    db_manager.execute_query.return_value = None
    assert asyncio.run(pg_store.fetch_request("missing")) is None


def test_fetch_pending_applications_embeds_trainer(pg_store, db_manager):
    db_manager.execute_query.return_value = [
        {
            "id": "app-1",
            "training_request_id": "req-1",
            "trainer_id": "tr-1",
            "status": "pending",
            "created_at": None,
            "trainer": _user_row("tr-1"),
        },
        {
            "id": "app-2",
            "training_request_id": "req-1",
            "trainer_id": "tr-2",
            "status": "pending",
            "created_at": None,
            "trainer": None,
        },
    ]

    applications = asyncio.run(pg_store.fetch_pending_applications("req-1"))

    assert applications[0].trainer.specializations == [COMMUNICATION]
    assert applications[1].trainer is None


def test_fetch_availability(pg_store, db_manager):
    db_manager.execute_query.return_value = {"is_available": False}
    assert asyncio.run(pg_store.fetch_availability("tr-1", date(2026, 5, 1))) is False

    db_manager.execute_query.return_value = None
    assert asyncio.run(pg_store.fetch_availability("tr-1", date(2026, 5, 1))) is None


def test_count_calendar_events(pg_store, db_manager):
    db_manager.execute_query.return_value = {"event_count": 3}
    start = datetime(2026, 5, 1, tzinfo=timezone.utc)

    assert asyncio.run(pg_store.count_calendar_events("tr-1", start, start)) == 3


def test_insert_notifications_returns_ids(pg_store, db_manager):
    db_manager.execute_insert_returning.return_value = [{"id": uuid.UUID(int=7)}]
    record = NotificationRecord(
        user_id="u-1",
        title="t",
        body="b",
        type="workflow",
        data={"requestId": "req-1"},
        created_at=datetime(2026, 5, 1, tzinfo=timezone.utc),
        priority=NotificationPriority.HIGH,
    )

    ids = asyncio.run(pg_store.insert_notifications([record]))

    assert ids == [str(uuid.UUID(int=7))]
    params_list = db_manager.execute_insert_returning.call_args[0][1]
    assert params_list[0][0] == "u-1"
    assert params_list[0][4].adapted == {"requestId": "req-1"}
    assert params_list[0][-1] == "high"


def test_fetch_user_notifications_builds_query(pg_store, db_manager):
    db_manager.execute_query.return_value = [{
        "id": "n-1",
        "user_id": "u-1",
        "title": "t",
        "body": "b",
        "type": "chat",
        "data": None,
        "is_read": False,
        "created_at": datetime(2026, 5, 1, tzinfo=timezone.utc),
        "expires_at": None,
        "priority": None,
    }]

    [record] = asyncio.run(pg_store.fetch_user_notifications(
        "u-1", limit=10, offset=20, unread_only=True, notification_type="chat"
    ))

    query, params = db_manager.execute_query.call_args[0]
    assert "is_read = false" in query
    assert query.index("ORDER BY") < query.index("LIMIT") < query.index("OFFSET")
    assert params == ("u-1", "chat", 10, 20)
    assert record.data == {}
    assert record.priority == NotificationPriority.NORMAL


def test_notification_updates(pg_store, db_manager):
    db_manager.execute_update.return_value = 0
    assert asyncio.run(pg_store.mark_notification_read("n-1")) is False

    db_manager.execute_update.return_value = 4
    assert asyncio.run(pg_store.mark_all_notifications_read("u-1")) == 4
    assert asyncio.run(pg_store.delete_notifications_before(datetime(2026, 1, 1))) == 4

    db_manager.execute_query.return_value = {"unread_count": 2}
    assert asyncio.run(pg_store.count_unread_notifications("u-1")) == 2


class SlowDatabaseManager:
    """Answers the matching queries after a short delay and tracks overlapping calls"""

    def __init__(self, trainer_ids, delay=0.02):
        self.trainer_ids = trainer_ids
        self.delay = delay
        self.in_flight = 0
        self.peak_in_flight = 0
        self._lock = threading.Lock()

    def execute_query(self, query, params=None, fetch_one=False, fetch_all=True):
        with self._lock:
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            time.sleep(self.delay)
            if "trainer_availability" in query:
                return {"is_available": True}
            if "calendar_events" in query:
                return {"event_count": 0}
            if "trainer_statistics" in query:
                return []
            return [_user_row(trainer_id) for trainer_id in self.trainer_ids]
        finally:
            with self._lock:
                self.in_flight -= 1


def test_store_reused_across_event_loops(config):
    config.db_max_concurrency = 4
    db_manager = SlowDatabaseManager([f"tr-{i}" for i in range(6)])
    engine = TrainerMatchingEngine(PostgresTrainingStore(db_manager, config), config)
    request = make_request()

    first = asyncio.run(engine.find_best_trainers(request, 6))
    second = asyncio.run(engine.find_best_trainers(request, 6))

    assert [s.factors.availability_match for s in first] == [1.0] * 6
    assert [s.factors.availability_match for s in second] == [1.0] * 6
    assert [s.factors.workload_score for s in second] == [1.0] * 6


def test_in_flight_queries_capped_at_db_max_concurrency(config):
    config.db_max_concurrency = 3
    db_manager = SlowDatabaseManager([f"tr-{i}" for i in range(8)])
    engine = TrainerMatchingEngine(PostgresTrainingStore(db_manager, config), config)

    ranked = asyncio.run(engine.find_best_trainers(make_request(), 8))

    assert len(ranked) == 8
    assert 1 < db_manager.peak_in_flight <= config.db_max_concurrency
