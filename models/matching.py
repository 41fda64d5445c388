"""
Trainer matching data models
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from models.user import UserProfile


class RequestPriority(str, Enum):
    """Urgency derived from days until the requested date"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MatchingCriteria(BaseModel):
    """Criteria a trainer is scored against"""
    province: str
    specialization: str
    requested_date: datetime
    duration: float = 2
    priority: RequestPriority
    max_trainers: Optional[int] = None


class MatchFactors(BaseModel):
    """The six factor sub-scores, each in [0, 1]"""
    location_match: float = Field(..., ge=0, le=1)
    specialization_match: float = Field(..., ge=0, le=1)
    availability_match: float = Field(..., ge=0, le=1)
    rating_score: float = Field(..., ge=0, le=1)
    experience_score: float = Field(..., ge=0, le=1)
    workload_score: float = Field(..., ge=0, le=1)

    class Config:
        frozen = True


class TrainerScore(BaseModel):
    """Scored trainer for one recommendation call"""
    trainer_id: str
    trainer: UserProfile
    score: float = Field(..., ge=0, le=1)
    factors: MatchFactors
    reasoning: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class RecommendationResult(BaseModel):
    """Ranked applicants with a summary sentence"""
    recommendations: List[TrainerScore] = Field(default_factory=list)
    summary: str
