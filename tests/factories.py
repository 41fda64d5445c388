from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional

from models.notification import NotificationRecord
from models.training_request import TrainerApplication, TrainingRequest
from models.user import TrainerStatistics, UserProfile, UserRole
from utils.locale_normalizer import LocaleNormalizer


CAIRO = LocaleNormalizer.PROVINCE_NAMES["cairo"]
GIZA = LocaleNormalizer.PROVINCE_NAMES["giza"]
ASWAN = LocaleNormalizer.PROVINCE_NAMES["aswan"]
COMMUNICATION = LocaleNormalizer.SPECIALIZATION_NAMES["communication"]
PRESENTATION = LocaleNormalizer.SPECIALIZATION_NAMES["presentation"]
TEAMWORK = LocaleNormalizer.SPECIALIZATION_NAMES["teamwork"]


def make_trainer(trainer_id: str = "tr-1", **overrides) -> UserProfile:
    fields = {
        "id": trainer_id,
        "full_name": f"Trainer {trainer_id}",
        "role": UserRole.TRAINER,
        "province": CAIRO,
        "specialization": [COMMUNICATION],
        "rating": 0,
        "total_training_hours": 0,
        "is_active": True,
    }
    fields.update(overrides)
    return UserProfile(**fields)


def make_user(user_id: str, role: UserRole, **overrides) -> UserProfile:
    fields = {"id": user_id, "full_name": f"User {user_id}", "role": role}
    fields.update(overrides)
    return UserProfile(**fields)


def make_request(request_id: str = "req-1", days_ahead: int = 2, **overrides) -> TrainingRequest:
    fields = {
        "id": request_id,
        "title": "Effective Communication Workshop",
        "province": "cairo",
        "specialization": "communication",
        "requested_date": datetime.combine(date.today() + timedelta(days=days_ahead), time(10, 0)),
        "requester_id": "dv-1",
    }
    fields.update(overrides)
    return TrainingRequest(**fields)


class FakeTrainingStore:
    """In-memory implementation of every data-access contract"""

    def __init__(self):
        self.trainers: List[UserProfile] = []
        self.users: List[UserProfile] = []
        self.statistics: Dict[str, TrainerStatistics] = {}
        self.requests: Dict[str, TrainingRequest] = {}
        self.applications: Dict[str, List[TrainerApplication]] = {}
        self.availability: Dict[tuple, bool] = {}
        self.event_counts: Dict[str, int] = {}
        self.notifications: List[NotificationRecord] = []
        self.failing: set = set()
        self.calls: List[str] = []

    def _record(self, name: str):
        self.calls.append(name)
        if name in self.failing:
            raise RuntimeError(f"{name} failed")

    async def fetch_active_trainers(self) -> List[UserProfile]:
        self._record("fetch_active_trainers")
        return [t for t in self.trainers if t.is_active]

    async def fetch_trainer_statistics(self, trainer_ids: List[str]) -> Dict[str, TrainerStatistics]:
        self._record("fetch_trainer_statistics")
        return {tid: self.statistics[tid] for tid in trainer_ids if tid in self.statistics}

    async def find_users(self, role: UserRole, specialization: Optional[str] = None,
                         user_ids: Optional[Iterable[str]] = None) -> List[UserProfile]:
        self._record("find_users")
        users = [u for u in self.users if u.role == role]
        if specialization:
            users = [u for u in users if LocaleNormalizer.specialization_matches(u.specializations, specialization)]
        if user_ids is not None:
            wanted = set(user_ids)
            users = [u for u in users if u.id in wanted]
        return users

    async def fetch_request(self, request_id: str) -> Optional[TrainingRequest]:
        self._record("fetch_request")
        return self.requests.get(request_id)

    async def fetch_pending_applications(self, request_id: str) -> List[TrainerApplication]:
        self._record("fetch_pending_applications")
        return [a for a in self.applications.get(request_id, []) if a.status == "pending"]

    async def fetch_availability(self, trainer_id: str, day: date) -> Optional[bool]:
        self._record("fetch_availability")
        return self.availability.get((trainer_id, day))

    async def count_calendar_events(self, trainer_id: str, start: datetime, end: datetime) -> int:
        self._record("count_calendar_events")
        return self.event_counts.get(trainer_id, 0)

    async def insert_notifications(self, records: List[NotificationRecord]) -> List[str]:
        self._record("insert_notifications")
        ids = []
        for record in records:
            record_id = f"n-{len(self.notifications) + 1}"
            self.notifications.append(record.model_copy(update={"id": record_id}))
            ids.append(record_id)
        return ids

    async def fetch_user_notifications(self, user_id: str, limit: Optional[int] = None,
                                       offset: Optional[int] = None, unread_only: bool = False,
                                       notification_type: Optional[str] = None) -> List[NotificationRecord]:
        self._record("fetch_user_notifications")
        records = [n for n in self.notifications if n.user_id == user_id]
        if unread_only:
            records = [n for n in records if not n.is_read]
        if notification_type:
            records = [n for n in records if n.type == notification_type]
        records.sort(key=lambda n: n.created_at, reverse=True)
        start = offset or 0
        return records[start:start + limit] if limit else records[start:]

    async def mark_notification_read(self, notification_id: str) -> bool:
        self._record("mark_notification_read")
        for i, record in enumerate(self.notifications):
            if record.id == notification_id:
                self.notifications[i] = record.model_copy(update={"is_read": True})
                return True
        return False

    async def mark_all_notifications_read(self, user_id: str) -> int:
        self._record("mark_all_notifications_read")
        updated = 0
        for i, record in enumerate(self.notifications):
            if record.user_id == user_id and not record.is_read:
                self.notifications[i] = record.model_copy(update={"is_read": True})
                updated += 1
        return updated

    async def count_unread_notifications(self, user_id: str) -> int:
        self._record("count_unread_notifications")
        return sum(1 for n in self.notifications if n.user_id == user_id and not n.is_read)

    async def delete_notifications_before(self, cutoff: datetime) -> int:
        self._record("delete_notifications_before")
        kept = [n for n in self.notifications if n.created_at >= cutoff]
        deleted = len(self.notifications) - len(kept)
        self.notifications = kept
        return deleted


class FakePushSender:
    def __init__(self, result: bool = True, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.sent: List[Dict[str, Any]] = []

    async def send_to_users(self, user_ids, title, message, data=None, priority="normal") -> bool:
        self.sent.append({
            "user_ids": list(user_ids),
            "title": title,
            "message": message,
            "data": data,
            "priority": priority,
        })
        if self.error:
            raise self.error
        return self.result
