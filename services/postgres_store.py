"""
PostgreSQL implementation of the data-access contracts
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Dict, Iterable, List, Optional
from datetime import date, datetime

from psycopg2.extras import Json

from config import Config
from models.notification import NotificationRecord
from models.training_request import TrainerApplication, TrainingRequest
from models.user import TrainerStatistics, UserProfile, UserRole
from utils.database import DatabaseManager
from utils.locale_normalizer import LocaleNormalizer


USER_ID_COLUMNS = ("id",)
REQUEST_ID_COLUMNS = ("id", "requester_id", "assigned_trainer_id")
APPLICATION_ID_COLUMNS = ("id", "training_request_id", "trainer_id")
NOTIFICATION_ID_COLUMNS = ("id", "user_id")


def _stringify_ids(row: Dict[str, Any], columns: Iterable[str]) -> Dict[str, Any]:
    """UUID columns come back as uuid.UUID; models expect strings"""
    row = dict(row)
    for column in columns:
        if row.get(column) is not None:
            row[column] = str(row[column])
    return row


class PostgresTrainingStore:
    """Directory, request, availability, calendar and notification store on PostgreSQL"""

    def __init__(self, db_manager: DatabaseManager, config: Optional[Config] = None):
        """
        Initialize the store

        Args:
            db_manager: Database manager instance
            config: Configuration instance
        """
        self.db_manager = db_manager
        self.config = config or Config()
        # Bounds in-flight queries at DB_MAX_CONCURRENCY
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, self.config.db_max_concurrency),
            thread_name_prefix="pg-store",
        )

    async def _run(self, func, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args, **kwargs))

    def close(self):
        """Stop the worker threads and close the database connection"""
        self._executor.shutdown(wait=True)
        self.db_manager.close()

    # Directory

    async def fetch_active_trainers(self) -> List[UserProfile]:
        rows = await self._run(
            self.db_manager.execute_query,
            "SELECT * FROM users WHERE role = %s AND is_active = true",
            (UserRole.TRAINER.value,),
        )
        return [UserProfile(**_stringify_ids(row, USER_ID_COLUMNS)) for row in rows or []]

    async def fetch_trainer_statistics(self, trainer_ids: List[str]) -> Dict[str, TrainerStatistics]:
        if not trainer_ids:
            return {}

        rows = await self._run(
            self.db_manager.execute_query,
            """
            SELECT trainer_id, average_rating, total_hours
            FROM trainer_statistics
            WHERE trainer_id::text = ANY(%s)
            """,
            (list(trainer_ids),),
        )
        stats = [TrainerStatistics(**_stringify_ids(row, ("trainer_id",))) for row in rows or []]
        return {s.trainer_id: s for s in stats}

    async def find_users(self, role: UserRole, specialization: Optional[str] = None,
                         user_ids: Optional[Iterable[str]] = None) -> List[UserProfile]:
        """
        Users holding a role, optionally restricted by specialization and IDs

        The specialization column is stored in several shapes, so containment
        is checked on the normalized profile rather than in SQL.
        """
        query = "SELECT * FROM users WHERE role = %s"
        params: List[Any] = [role.value]
        if user_ids is not None:
            query += " AND id::text = ANY(%s)"
            params.append(list(user_ids))

        rows = await self._run(self.db_manager.execute_query, query, tuple(params))
        users = [UserProfile(**_stringify_ids(row, USER_ID_COLUMNS)) for row in rows or []]

        if specialization:
            users = [
                user for user in users
                if LocaleNormalizer.specialization_matches(user.specializations, specialization)
            ]
        return users

    # Requests

    async def fetch_request(self, request_id: str) -> Optional[TrainingRequest]:
        row = await self._run(
            self.db_manager.execute_query,
            "SELECT * FROM training_requests WHERE id::text = %s",
            (request_id,),
            fetch_one=True,
        )
        if not row:
            return None
        return TrainingRequest(**_stringify_ids(row, REQUEST_ID_COLUMNS))

    async def fetch_pending_applications(self, request_id: str) -> List[TrainerApplication]:
        rows = await self._run(
            self.db_manager.execute_query,
            """
            SELECT a.id, a.training_request_id, a.trainer_id, a.status, a.created_at,
                   row_to_json(u.*) AS trainer
            FROM trainer_applications a
            LEFT JOIN users u ON u.id = a.trainer_id
            WHERE a.training_request_id::text = %s AND a.status = 'pending'
            """,
            (request_id,),
        )

        applications = []
        for row in rows or []:
            row = _stringify_ids(row, APPLICATION_ID_COLUMNS)
            trainer = row.pop("trainer", None)
            applications.append(TrainerApplication(
                **row,
                trainer=UserProfile(**_stringify_ids(trainer, USER_ID_COLUMNS)) if trainer else None,
            ))
        return applications

    # Availability and workload

    async def fetch_availability(self, trainer_id: str, day: date) -> Optional[bool]:
        row = await self._run(
            self.db_manager.execute_query,
            """
            SELECT is_available FROM trainer_availability
            WHERE trainer_id::text = %s AND date = %s
            LIMIT 1
            """,
            (trainer_id, day),
            fetch_one=True,
        )
        if not row:
            return None
        return bool(row["is_available"])

    async def count_calendar_events(self, trainer_id: str, start: datetime, end: datetime) -> int:
        row = await self._run(
            self.db_manager.execute_query,
            """
            SELECT COUNT(*) AS event_count FROM calendar_events
            WHERE assigned_trainer_id::text = %s AND start_date >= %s AND start_date <= %s
            """,
            (trainer_id, start, end),
            fetch_one=True,
        )
        return int(row["event_count"]) if row else 0

    # Notifications

    async def insert_notifications(self, records: List[NotificationRecord]) -> List[str]:
        params_list = [
            (
                record.user_id,
                record.title,
                record.body,
                record.type,
                Json(record.data),
                record.is_read,
                record.created_at,
                record.expires_at,
                record.priority.value,
            )
            for record in records
        ]
        rows = await self._run(
            self.db_manager.execute_insert_returning,
            """
            INSERT INTO notifications
                (user_id, title, body, type, data, is_read, created_at, expires_at, priority)
            VALUES %s
            RETURNING id
            """,
            params_list,
        )
        return [str(row["id"]) for row in rows]

    async def fetch_user_notifications(self, user_id: str, limit: Optional[int] = None,
                                       offset: Optional[int] = None, unread_only: bool = False,
                                       notification_type: Optional[str] = None) -> List[NotificationRecord]:
        query = "SELECT * FROM notifications WHERE user_id::text = %s"
        params: List[Any] = [user_id]

        if unread_only:
            query += " AND is_read = false"
        if notification_type:
            query += " AND type = %s"
            params.append(notification_type)

        query += " ORDER BY created_at DESC"
        if limit:
            query += " LIMIT %s"
            params.append(limit)
        if offset:
            query += " OFFSET %s"
            params.append(offset)

        rows = await self._run(self.db_manager.execute_query, query, tuple(params))
        return [self._row_to_notification(row) for row in rows or []]

    @staticmethod
    def _row_to_notification(row: Dict[str, Any]) -> NotificationRecord:
        row = _stringify_ids(row, NOTIFICATION_ID_COLUMNS)
        row["data"] = row.get("data") or {}
        row["priority"] = row.get("priority") or "normal"
        return NotificationRecord(**row)

    async def mark_notification_read(self, notification_id: str) -> bool:
        updated = await self._run(
            self.db_manager.execute_update,
            "UPDATE notifications SET is_read = true WHERE id::text = %s",
            (notification_id,),
        )
        return updated > 0

    async def mark_all_notifications_read(self, user_id: str) -> int:
        return await self._run(
            self.db_manager.execute_update,
            "UPDATE notifications SET is_read = true WHERE user_id::text = %s AND is_read = false",
            (user_id,),
        )

    async def count_unread_notifications(self, user_id: str) -> int:
        row = await self._run(
            self.db_manager.execute_query,
            "SELECT COUNT(*) AS unread_count FROM notifications WHERE user_id::text = %s AND is_read = false",
            (user_id,),
            fetch_one=True,
        )
        return int(row["unread_count"]) if row else 0

    async def delete_notifications_before(self, cutoff: datetime) -> int:
        return await self._run(
            self.db_manager.execute_update,
            "DELETE FROM notifications WHERE created_at < %s",
            (cutoff,),
        )
