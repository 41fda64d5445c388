"""
Notification data models
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from models.training_request import TrainingStatus
from models.user import UserRole


class NotificationType(str, Enum):
    TRAINING_REQUEST = "training_request"
    WORKFLOW = "workflow"
    CHAT = "chat"
    SYSTEM = "system"


class NotificationPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class NotificationPayload(BaseModel):
    """Notification handed to the delivery service"""
    title: str
    body: str
    type: NotificationType
    target_user_ids: List[str] = Field(default_factory=list)
    priority: NotificationPriority = NotificationPriority.NORMAL
    action_url: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class NotificationRecord(BaseModel):
    """Notification row stored per target user"""
    id: Optional[str] = None
    user_id: str
    title: str
    body: str
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool = False
    created_at: datetime
    expires_at: Optional[datetime] = None
    priority: NotificationPriority = NotificationPriority.NORMAL


class ChannelOutcome(BaseModel):
    """Result of one delivery channel"""
    channel: str  # onesignal, database
    ok: bool
    notification_ids: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class DeliveryResult(BaseModel):
    """Combined result of a notification delivery"""
    success: bool
    method: Optional[str] = None  # onesignal, database, both
    details: str
    notification_ids: List[str] = Field(default_factory=list)
    push: Optional[ChannelOutcome] = None
    database: Optional[ChannelOutcome] = None


class NotificationTarget(BaseModel):
    """Resolved recipient with the role it was selected for"""
    id: str
    role: UserRole


class WorkflowNotificationData(BaseModel):
    """Status transition reported by the workflow"""
    request_id: str
    request_title: str
    new_status: TrainingStatus
    old_status: Optional[TrainingStatus] = None
    specialization: Optional[str] = None
    requester_name: Optional[str] = None
    trainer_name: Optional[str] = None
