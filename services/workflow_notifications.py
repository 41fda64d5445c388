"""
Workflow notification routing - who is notified of a training request event, and with what
"""

from typing import Any, Dict, List, Optional

from models.notification import (
    DeliveryResult,
    NotificationPayload,
    NotificationPriority,
    NotificationTarget,
    NotificationType,
    WorkflowNotificationData,
)
from models.training_request import TrainingStatus
from models.user import UserRole
from services.data_access import RequestStore, TrainerDirectory
from services.notification_service import NotificationService
from utils.locale_normalizer import LocaleNormalizer


# Status -> role of the first target -> message template.
# "{title}" is replaced with the request title.
STATUS_MESSAGES: Dict[TrainingStatus, Dict[UserRole, Dict[str, Any]]] = {
    TrainingStatus.UNDER_REVIEW: {
        UserRole.DEVELOPMENT_MANAGEMENT_OFFICER: {
            "title": "🔍 طلب تدريب يحتاج مراجعة",
            "body": "طلب \"{title}\" في انتظار مراجعتك",
            "priority": NotificationPriority.HIGH,
            "action": "review",
        },
    },
    TrainingStatus.PENDING_SUPERVISOR_APPROVAL: {
        UserRole.PROGRAM_SUPERVISOR: {
            "title": "✅ طلب تدريب يحتاج موافقة",
            "body": "طلب \"{title}\" في انتظار موافقتك",
            "priority": NotificationPriority.HIGH,
            "action": "approve",
        },
    },
    TrainingStatus.PENDING_TRAINER_SELECTION: {
        UserRole.TRAINER: {
            "title": "🎯 فرصة تدريب جديدة",
            "body": "طلب تدريب \"{title}\" متاح للتقديم",
            "priority": NotificationPriority.NORMAL,
            "action": "apply",
        },
    },
    TrainingStatus.PENDING_FINAL_APPROVAL: {
        UserRole.TRAINER_PREPARATION_PROJECT_MANAGER: {
            "title": "📋 طلب تدريب يحتاج موافقة نهائية",
            "body": "طلب \"{title}\" في انتظار الموافقة النهائية",
            "priority": NotificationPriority.HIGH,
            "action": "final_approve",
        },
    },
    TrainingStatus.FINAL_APPROVED: {
        UserRole.PROVINCIAL_DEVELOPMENT_OFFICER: {
            "title": "🎉 تم اعتماد طلب التدريب",
            "body": "طلب \"{title}\" تم اعتماده نهائياً وجاهز للاستلام",
            "priority": NotificationPriority.NORMAL,
            "action": "receive",
        },
    },
    TrainingStatus.RECEIVED: {
        UserRole.TRAINER: {
            "title": "📅 تدريب جاهز للجدولة",
            "body": "تدريب \"{title}\" تم استلامه وجاهز للجدولة",
            "priority": NotificationPriority.NORMAL,
            "action": "schedule",
        },
    },
    TrainingStatus.SCHEDULED: {
        UserRole.PROVINCIAL_DEVELOPMENT_OFFICER: {
            "title": "⏰ تدريب مجدول",
            "body": "تدريب \"{title}\" تم جدولته وجاهز للتنفيذ",
            "priority": NotificationPriority.NORMAL,
            "action": "execute",
        },
        UserRole.TRAINER: {
            "title": "⏰ تدريب مجدول",
            "body": "تدريب \"{title}\" تم جدولته",
            "priority": NotificationPriority.NORMAL,
        },
    },
    TrainingStatus.COMPLETED: {
        UserRole.PROVINCIAL_DEVELOPMENT_OFFICER: {
            "title": "✅ تم إكمال التدريب",
            "body": "تدريب \"{title}\" تم إكماله بنجاح",
            "priority": NotificationPriority.LOW,
        },
        UserRole.TRAINER: {
            "title": "✅ تم إكمال التدريب",
            "body": "تدريب \"{title}\" تم إكماله بنجاح",
            "priority": NotificationPriority.LOW,
        },
    },
}

# Statuses that notify the requester and the assigned trainer
PARTICIPANT_STATUSES = {
    TrainingStatus.RECEIVED,
    TrainingStatus.SCHEDULED,
    TrainingStatus.COMPLETED,
    TrainingStatus.CANCELLED,
}

# Statuses that notify every user holding a role
ROLE_STATUSES = {
    TrainingStatus.UNDER_REVIEW: UserRole.DEVELOPMENT_MANAGEMENT_OFFICER,
    TrainingStatus.PENDING_FINAL_APPROVAL: UserRole.TRAINER_PREPARATION_PROJECT_MANAGER,
}

# Statuses that notify a role filtered by the request's specialization
SPECIALIZATION_STATUSES = {
    TrainingStatus.PENDING_SUPERVISOR_APPROVAL: UserRole.PROGRAM_SUPERVISOR,
    TrainingStatus.PENDING_TRAINER_SELECTION: UserRole.TRAINER,
}


def _action_url(request_id: str) -> str:
    return f"/training-requests/{request_id}"


class WorkflowNotificationService:
    """Resolve targets and messages for training workflow events"""

    def __init__(self, directory: TrainerDirectory, requests: RequestStore,
                 notification_service: NotificationService):
        """
        Initialize workflow notification service

        Args:
            directory: User directory
            requests: Training request store
            notification_service: Delivery service
        """
        self.directory = directory
        self.requests = requests
        self.notification_service = notification_service

    async def send_new_training_request_notification(self, request_id: str, request_title: str,
                                                     specialization: str,
                                                     requester_name: str) -> Optional[DeliveryResult]:
        """
        Notify development management officers of a new request

        Returns:
            Delivery result, or None when nothing was sent
        """
        try:
            print(f"📝 Sending new training request notification for: {request_title}")

            try:
                reviewers = await self.directory.find_users(UserRole.DEVELOPMENT_MANAGEMENT_OFFICER)
            except Exception as e:
                print(f"❌ Failed to get CC users: {str(e)}")
                return None

            if not reviewers:
                print("⚠️ No CC users found for notification")
                return None

            target_user_ids = [user.id for user in reviewers]
            notification = NotificationPayload(
                title="📝 طلب تدريب جديد يحتاج مراجعة",
                body=(
                    f"طلب تدريب \"{request_title}\" في تخصص "
                    f"{LocaleNormalizer.specialization_display_name(specialization)} من {requester_name}"
                ),
                type=NotificationType.TRAINING_REQUEST,
                target_user_ids=target_user_ids,
                priority=NotificationPriority.HIGH,
                action_url=_action_url(request_id),
                data={
                    "requestId": request_id,
                    "requestTitle": request_title,
                    "specialization": specialization,
                    "requesterName": requester_name,
                    "action": "review",
                    "status": TrainingStatus.UNDER_REVIEW.value,
                    "type": NotificationType.TRAINING_REQUEST.value,
                    "targetScreen": "RequestDetails",
                },
            )

            result = await self.notification_service.send_notification(notification)
            print(f"✅ New training request notification sent to {len(target_user_ids)} CC users")
            return result
        except Exception as e:
            print(f"❌ Failed to send new training request notification: {str(e)}")
            return None

    async def send_status_change_notification(self, data: WorkflowNotificationData) -> Optional[DeliveryResult]:
        """
        Notify the users concerned by a request's new status

        Args:
            data: Status transition details

        Returns:
            Delivery result, or None when nothing was sent
        """
        try:
            old_status = data.old_status.value if data.old_status else None
            print(f"🔄 Sending status change notification: {old_status} → {data.new_status.value}")

            targets = await self.get_target_users_for_status(data.new_status, data)

            if not targets:
                print("⚠️ No target users found for status change notification")
                return None

            notification = self.create_status_change_notification(data, targets)
            if notification is None:
                print(f"⚠️ No message template for {data.new_status.value} / {targets[0].role.value}")
                return None

            result = await self.notification_service.send_notification(notification)
            print(f"✅ Status change notification sent to {len(targets)} users")
            return result
        except Exception as e:
            print(f"❌ Failed to send status change notification: {str(e)}")
            return None

    async def send_trainer_application_notification(self, request_id: str, request_title: str,
                                                    trainer_name: str,
                                                    specialization: str) -> Optional[DeliveryResult]:
        """
        Notify the specialization's supervisors that a trainer applied

        Returns:
            Delivery result, or None when nothing was sent
        """
        try:
            print(f"👨‍🏫 Sending trainer application notification for: {request_title}")

            try:
                supervisors = await self.directory.find_users(
                    UserRole.PROGRAM_SUPERVISOR, specialization=specialization
                )
            except Exception as e:
                print(f"❌ Failed to get supervisors: {str(e)}")
                return None

            if not supervisors:
                print("⚠️ No supervisors found for trainer application notification")
                return None

            target_user_ids = [user.id for user in supervisors]
            notification = NotificationPayload(
                title="👨‍🏫 مدرب جديد تقدم للتدريب",
                body=(
                    f"{trainer_name} تقدم لتدريب \"{request_title}\" في تخصص "
                    f"{LocaleNormalizer.specialization_display_name(specialization)}"
                ),
                type=NotificationType.TRAINING_REQUEST,
                target_user_ids=target_user_ids,
                priority=NotificationPriority.NORMAL,
                action_url=_action_url(request_id),
                data={
                    "requestId": request_id,
                    "requestTitle": request_title,
                    "trainerName": trainer_name,
                    "specialization": specialization,
                    "action": "review_application",
                    "status": TrainingStatus.PENDING_TRAINER_SELECTION.value,
                    "type": NotificationType.TRAINING_REQUEST.value,
                    "targetScreen": "RequestDetails",
                },
            )

            result = await self.notification_service.send_notification(notification)
            print(f"✅ Trainer application notification sent to {len(target_user_ids)} supervisors")
            return result
        except Exception as e:
            print(f"❌ Failed to send trainer application notification: {str(e)}")
            return None

    async def get_target_users_for_status(self, status: TrainingStatus,
                                          data: WorkflowNotificationData) -> List[NotificationTarget]:
        """
        Resolve the recipients for a status

        A lookup failure is logged and the targets collected so far are returned.

        Args:
            status: New workflow status
            data: Status transition details

        Returns:
            Targets in notification order, each tagged with its role
        """
        targets: List[NotificationTarget] = []

        try:
            if status in ROLE_STATUSES:
                role = ROLE_STATUSES[status]
                users = await self.directory.find_users(role)
                targets.extend(NotificationTarget(id=user.id, role=role) for user in users)

            elif status in SPECIALIZATION_STATUSES:
                if data.specialization:
                    role = SPECIALIZATION_STATUSES[status]
                    users = await self.directory.find_users(role, specialization=data.specialization)
                    targets.extend(NotificationTarget(id=user.id, role=role) for user in users)

            elif status == TrainingStatus.FINAL_APPROVED:
                request = await self.requests.fetch_request(data.request_id)
                if request:
                    targets.append(NotificationTarget(
                        id=request.requester_id,
                        role=UserRole.PROVINCIAL_DEVELOPMENT_OFFICER,
                    ))

            elif status in PARTICIPANT_STATUSES:
                request = await self.requests.fetch_request(data.request_id)
                if request:
                    targets.append(NotificationTarget(
                        id=request.requester_id,
                        role=UserRole.PROVINCIAL_DEVELOPMENT_OFFICER,
                    ))
                    if request.assigned_trainer_id:
                        targets.append(NotificationTarget(
                            id=request.assigned_trainer_id,
                            role=UserRole.TRAINER,
                        ))
        except Exception as e:
            print(f"❌ Failed to get target users: {str(e)}")

        return targets

    def create_status_change_notification(self, data: WorkflowNotificationData,
                                          targets: List[NotificationTarget]) -> Optional[NotificationPayload]:
        """Payload for a status change, or None when no template fits the first target's role"""
        if not targets:
            return None

        template = self.get_status_message(data.new_status, targets[0].role)
        if template is None:
            return None

        return NotificationPayload(
            title=template["title"],
            body=template["body"].format(title=data.request_title),
            type=NotificationType.WORKFLOW,
            target_user_ids=[target.id for target in targets],
            priority=template.get("priority", NotificationPriority.NORMAL),
            action_url=_action_url(data.request_id),
            data={
                "requestId": data.request_id,
                "requestTitle": data.request_title,
                "newStatus": data.new_status.value,
                "oldStatus": data.old_status.value if data.old_status else None,
                "action": template.get("action"),
                "type": NotificationType.TRAINING_REQUEST.value,
                "targetScreen": "RequestDetails",
            },
        )

    @staticmethod
    def get_status_message(status: TrainingStatus, role: UserRole) -> Optional[Dict[str, Any]]:
        """Message template for a status and role, None if there is none"""
        return STATUS_MESSAGES.get(status, {}).get(role)
