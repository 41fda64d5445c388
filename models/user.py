"""
User directory data models
"""

from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Optional
from datetime import datetime

from utils.locale_normalizer import LocaleNormalizer


class UserRole(str, Enum):
    """Organization roles"""
    PROVINCIAL_DEVELOPMENT_OFFICER = "DV"
    DEVELOPMENT_MANAGEMENT_OFFICER = "CC"
    TRAINER_PREPARATION_PROJECT_MANAGER = "PM"
    PROGRAM_SUPERVISOR = "SV"
    TRAINER = "TR"
    BOARD_MEMBER = "MB"


class TrainerStatistics(BaseModel):
    """Aggregated trainer statistics side-record"""
    trainer_id: str
    average_rating: Optional[float] = None
    total_hours: Optional[int] = None


class UserProfile(BaseModel):
    """User directory record"""
    id: str
    full_name: str = ""
    email: Optional[str] = None
    role: UserRole
    province: str = ""
    specializations: List[str] = Field(default_factory=list, alias="specialization")
    rating: float = Field(default=0.0, ge=0)
    total_training_hours: int = Field(default=0, ge=0)
    is_active: bool = True
    trainer_stats: Optional[TrainerStatistics] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "7d3c0b6e-1f4a-4c1e-9a8e-2f4b1c9d0e11",
                "full_name": "Mona Hassan",
                "role": "TR",
                "province": "القاهرة",
                "specialization": "[\"التواصل الفعال\", \"العقلية\"]",
                "rating": 4.5,
                "total_training_hours": 120,
                "is_active": True
            }
        }

    @field_validator("specializations", mode="before")
    @classmethod
    def _parse_specializations(cls, value: Any) -> List[str]:
        return LocaleNormalizer.parse_specializations(value)

    @field_validator("province", mode="before")
    @classmethod
    def _normalize_province(cls, value: Any) -> str:
        return LocaleNormalizer.province_name(value)

    @field_validator("rating", "total_training_hours", mode="before")
    @classmethod
    def _default_missing_numbers(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def effective_rating(self) -> float:
        """Statistics average rating when present, else the profile rating"""
        if self.trainer_stats and self.trainer_stats.average_rating:
            return float(self.trainer_stats.average_rating)
        return float(self.rating or 0)

    @property
    def effective_hours(self) -> int:
        """Statistics total hours when present, else the profile hours"""
        if self.trainer_stats and self.trainer_stats.total_hours:
            return int(self.trainer_stats.total_hours)
        return int(self.total_training_hours or 0)

    def with_statistics(self, stats: Optional[TrainerStatistics]) -> "UserProfile":
        """Copy of this profile joined with its statistics record"""
        return self.model_copy(update={"trainer_stats": stats})
