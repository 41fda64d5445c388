import pytest

from config import Config
from factories import FakePushSender, FakeTrainingStore


@pytest.fixture
def config(monkeypatch):
    for var in (
        "SUPABASE_DATABASE_URL",
        "ONESIGNAL_APP_ID",
        "ONESIGNAL_REST_API_KEY",
        "DEFAULT_MAX_TRAINERS",
        "WORKLOAD_WINDOW_DAYS",
        "NOTIFICATION_TTL_DAYS",
        "MATCH_THRESHOLD_EXCELLENT",
        "MATCH_THRESHOLD_GOOD",
        "MATCH_THRESHOLD_FAIR",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/trainers_test")
    return Config()


@pytest.fixture
def store():
    return FakeTrainingStore()


@pytest.fixture
def push_sender():
    return FakePushSender()
