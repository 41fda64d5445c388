"""
Data-access contracts consumed by the matching engine and the notification services
"""

from typing import Any, Dict, Iterable, List, Optional, Protocol
from datetime import date, datetime

from models.notification import NotificationRecord
from models.training_request import TrainerApplication, TrainingRequest
from models.user import TrainerStatistics, UserProfile, UserRole


class TrainerDirectory(Protocol):
    """User directory queries"""

    async def fetch_active_trainers(self) -> List[UserProfile]:
        ...

    async def fetch_trainer_statistics(self, trainer_ids: List[str]) -> Dict[str, TrainerStatistics]:
        ...

    async def find_users(self, role: UserRole, specialization: Optional[str] = None,
                         user_ids: Optional[Iterable[str]] = None) -> List[UserProfile]:
        ...


class RequestStore(Protocol):
    """Training request and application lookups"""

    async def fetch_request(self, request_id: str) -> Optional[TrainingRequest]:
        ...

    async def fetch_pending_applications(self, request_id: str) -> List[TrainerApplication]:
        ...


class AvailabilityStore(Protocol):

    async def fetch_availability(self, trainer_id: str, day: date) -> Optional[bool]:
        ...


class CalendarStore(Protocol):

    async def count_calendar_events(self, trainer_id: str, start: datetime, end: datetime) -> int:
        ...


class MatchingDataSource(TrainerDirectory, RequestStore, AvailabilityStore, CalendarStore, Protocol):
    """Everything the matching engine reads"""


class NotificationStore(Protocol):
    """Persisted notification records"""

    async def insert_notifications(self, records: List[NotificationRecord]) -> List[str]:
        ...

    async def fetch_user_notifications(self, user_id: str, limit: Optional[int] = None,
                                       offset: Optional[int] = None, unread_only: bool = False,
                                       notification_type: Optional[str] = None) -> List[NotificationRecord]:
        ...

    async def mark_notification_read(self, notification_id: str) -> bool:
        ...

    async def mark_all_notifications_read(self, user_id: str) -> int:
        ...

    async def count_unread_notifications(self, user_id: str) -> int:
        ...

    async def delete_notifications_before(self, cutoff: datetime) -> int:
        ...


class PushSender(Protocol):
    """Push delivery channel"""

    async def send_to_users(self, user_ids: List[str], title: str, message: str,
                            data: Optional[Dict[str, Any]] = None, priority: str = "normal") -> bool:
        ...
