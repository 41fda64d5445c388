"""
Training request and application data models
"""

from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional
from datetime import date, datetime, time

from models.user import UserProfile


class TrainingStatus(str, Enum):
    """Training request workflow status"""
    UNDER_REVIEW = "under_review"
    PENDING_SUPERVISOR_APPROVAL = "pending_supervisor_approval"
    PENDING_TRAINER_SELECTION = "pending_trainer_selection"
    PENDING_FINAL_APPROVAL = "pending_final_approval"
    FINAL_APPROVED = "final_approved"
    RECEIVED = "received"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TrainingRequest(BaseModel):
    """Training request record"""
    id: str
    title: str = ""
    description: Optional[str] = None
    specialization: str
    province: str
    requested_date: datetime
    duration_hours: float = Field(default=2, gt=0)
    max_participants: Optional[int] = None
    status: TrainingStatus = TrainingStatus.UNDER_REVIEW
    requester_id: str
    assigned_trainer_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("requested_date", mode="before")
    @classmethod
    def _accept_plain_dates(cls, value: Any) -> Any:
        if isinstance(value, str) and len(value.strip()) == 10:
            value = date.fromisoformat(value.strip())
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.min)
        return value

    @field_validator("duration_hours", mode="before")
    @classmethod
    def _default_duration(cls, value: Any) -> Any:
        return 2 if value is None else value

    @property
    def requested_day(self) -> date:
        """Requested calendar day, time discarded"""
        return self.requested_date.date()


class TrainerApplication(BaseModel):
    """Trainer application for a training request"""
    id: Optional[str] = None
    training_request_id: str
    trainer_id: str
    status: str = "pending"  # pending, accepted, rejected
    trainer: Optional[UserProfile] = None
    created_at: Optional[datetime] = None
