"""
Notification delivery - OneSignal push plus persisted notification records
"""

import asyncio
from typing import List, Optional
from datetime import datetime, timedelta, timezone

from config import Config
from exceptions.custom_errors import DeliveryError
from models.notification import (
    ChannelOutcome,
    DeliveryResult,
    NotificationPayload,
    NotificationRecord,
)
from services.data_access import NotificationStore, PushSender
from utils.onesignal_client import OneSignalClient


class NotificationService:
    """Deliver notifications over push and the notifications table"""

    def __init__(self, store: NotificationStore, push_sender: Optional[PushSender] = None,
                 config: Optional[Config] = None):
        """
        Initialize notification service

        Args:
            store: Notification record store
            push_sender: Push channel; built from configuration when omitted
            config: Configuration instance
        """
        self.store = store
        self.config = config or Config()
        if push_sender is None and self.config.push_configured:
            push_sender = OneSignalClient.from_config(self.config)
        self.push_sender = push_sender

    async def send_notification(self, notification: NotificationPayload) -> DeliveryResult:
        """
        Send a notification over both channels concurrently

        Succeeds when either channel succeeds. Never raises.

        Args:
            notification: Notification payload

        Returns:
            Delivery result with the outcome of each channel
        """
        print(f"📤 Sending notification: \"{notification.title}\" to {len(notification.target_user_ids)} users")

        push_outcome, db_outcome = await asyncio.gather(
            self._send_push(notification),
            self._save_records(notification),
        )

        if push_outcome.ok and db_outcome.ok:
            method = "both"
            details = f"Push notification sent + Database saved ({len(db_outcome.notification_ids)} records)"
        elif push_outcome.ok:
            method = "onesignal"
            details = "Push notification sent successfully"
        elif db_outcome.ok:
            method = "database"
            details = f"Database saved ({len(db_outcome.notification_ids)} records)"
        else:
            error = DeliveryError(
                f"Both push notification and database save failed "
                f"(push: {push_outcome.error}; database: {db_outcome.error})"
            )
            print(f"❌ Failed to send notification: {error}")
            return DeliveryResult(
                success=False,
                details=f"Error: {error}",
                push=push_outcome,
                database=db_outcome,
            )

        print(f"✅ Notification sent successfully via {method}")
        return DeliveryResult(
            success=True,
            method=method,
            details=details,
            notification_ids=db_outcome.notification_ids,
            push=push_outcome,
            database=db_outcome,
        )

    async def _send_push(self, notification: NotificationPayload) -> ChannelOutcome:
        if self.push_sender is None:
            return ChannelOutcome(channel="onesignal", ok=False, error="Push delivery not configured")

        data = {
            "type": notification.type.value,
            "priority": notification.priority.value,
            "actionUrl": notification.action_url,
            **notification.data,
        }

        try:
            sent = await self.push_sender.send_to_users(
                notification.target_user_ids,
                notification.title,
                notification.body,
                data,
                notification.priority.value,
            )
        except Exception as e:
            print(f"❌ OneSignal error: {str(e)}")
            return ChannelOutcome(channel="onesignal", ok=False, error=str(e))

        if not sent:
            print("⚠️ OneSignal push notification failed")
            return ChannelOutcome(channel="onesignal", ok=False, error="Push notification not accepted")

        return ChannelOutcome(channel="onesignal", ok=True)

    def build_records(self, notification: NotificationPayload) -> List[NotificationRecord]:
        """One unread record per target user, expiring after the configured TTL"""
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(days=self.config.notification_ttl_days)
        data = {**notification.data, "actionUrl": notification.action_url}

        return [
            NotificationRecord(
                user_id=user_id,
                title=notification.title,
                body=notification.body,
                type=notification.type.value,
                data=data,
                is_read=False,
                created_at=now,
                expires_at=expires_at,
                priority=notification.priority,
            )
            for user_id in notification.target_user_ids
        ]

    async def _save_records(self, notification: NotificationPayload) -> ChannelOutcome:
        records = self.build_records(notification)
        print(f"💾 Saving {len(records)} notifications to database...")

        try:
            ids = await self.store.insert_notifications(records)
        except Exception as e:
            print(f"❌ Database save failed: {str(e)}")
            return ChannelOutcome(channel="database", ok=False, error=str(e))

        if not ids:
            return ChannelOutcome(channel="database", ok=False, error="No notification records saved")

        print(f"✅ Saved {len(ids)} notifications to database")
        return ChannelOutcome(channel="database", ok=True, notification_ids=list(ids))

    async def get_user_notifications(self, user_id: str, limit: Optional[int] = None,
                                     offset: Optional[int] = None, unread_only: bool = False,
                                     notification_type: Optional[str] = None) -> List[NotificationRecord]:
        """Newest-first notifications for a user; empty list on failure"""
        try:
            return await self.store.fetch_user_notifications(
                user_id,
                limit=limit,
                offset=offset,
                unread_only=unread_only,
                notification_type=notification_type,
            )
        except Exception as e:
            print(f"❌ Get notifications error: {str(e)}")
            return []

    async def mark_as_read(self, notification_id: str) -> bool:
        try:
            updated = await self.store.mark_notification_read(notification_id)
        except Exception as e:
            print(f"❌ Mark as read error: {str(e)}")
            return False
        if updated:
            print("✅ Notification marked as read")
        return updated

    async def mark_all_as_read(self, user_id: str) -> bool:
        try:
            await self.store.mark_all_notifications_read(user_id)
        except Exception as e:
            print(f"❌ Mark all as read error: {str(e)}")
            return False
        print("✅ All notifications marked as read")
        return True

    async def get_unread_count(self, user_id: str) -> int:
        try:
            return await self.store.count_unread_notifications(user_id)
        except Exception as e:
            print(f"❌ Get unread count error: {str(e)}")
            return 0

    async def cleanup_old_notifications(self, days_old: int = 30) -> int:
        """Delete notifications created more than days_old days ago"""
        cutoff = datetime.now(timezone.utc) - timedelta(days=days_old)
        try:
            deleted_count = await self.store.delete_notifications_before(cutoff)
        except Exception as e:
            print(f"❌ Cleanup error: {str(e)}")
            return 0
        print(f"🧹 Cleaned up {deleted_count} old notifications")
        return deleted_count
