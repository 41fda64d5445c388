"""
Factor scoring for trainer matching - location, specialization, availability,
rating, experience and workload
"""

import math
from typing import List, Optional
from datetime import date, datetime

from models.matching import MatchFactors, RequestPriority
from models.user import UserProfile
from utils.locale_normalizer import LocaleNormalizer


# Composite weights, must sum to 1.0
FACTOR_WEIGHTS = {
    "location_match": 0.25,
    "specialization_match": 0.30,
    "availability_match": 0.20,
    "rating_score": 0.15,
    "experience_score": 0.05,
    "workload_score": 0.05,
}

SAME_PROVINCE_SCORE = 1.0
ADJACENT_PROVINCE_SCORE = 0.6
DISTANT_PROVINCE_SCORE = 0.2

EXACT_SPECIALIZATION_SCORE = 1.0
RELATED_SPECIALIZATION_SCORE = 0.7
UNRELATED_SPECIALIZATION_SCORE = 0.3

AVAILABLE_SCORE = 1.0
UNAVAILABLE_SCORE = 0.1
UNKNOWN_AVAILABILITY_SCORE = 0.3

NEUTRAL_WORKLOAD_SCORE = 0.5

# (minimum hours, score), checked in order
EXPERIENCE_THRESHOLDS = [(100, 1.0), (50, 0.8), (20, 0.6), (5, 0.4)]
MIN_EXPERIENCE_SCORE = 0.2

# (maximum events, score), checked in order
WORKLOAD_THRESHOLDS = [(0, 1.0), (2, 0.8), (4, 0.6), (6, 0.4)]
MAX_WORKLOAD_SCORE = 0.2


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


class FactorScorer:
    """Deterministic factor scores and reasoning for a trainer"""

    @staticmethod
    def location_score(trainer_province: str, request_province: str) -> float:
        """
        Score how close the trainer is to the requested province

        Args:
            trainer_province: Stored province name on the trainer record
            request_province: Request-side province code

        Returns:
            1.0 same province, 0.6 adjacent, 0.2 otherwise
        """
        if trainer_province == LocaleNormalizer.province_name(request_province):
            return SAME_PROVINCE_SCORE

        if trainer_province in LocaleNormalizer.adjacent_province_names(request_province):
            return ADJACENT_PROVINCE_SCORE

        return DISTANT_PROVINCE_SCORE

    @staticmethod
    def specialization_score(trainer_specializations: List[str], request_specialization: str) -> float:
        """
        Score the trainer's specializations against the requested one

        Args:
            trainer_specializations: Normalized stored names
            request_specialization: Request-side specialization code

        Returns:
            1.0 exact, 0.7 related, 0.3 otherwise
        """
        requested = LocaleNormalizer.specialization_name(request_specialization)

        if requested in trainer_specializations:
            return EXACT_SPECIALIZATION_SCORE

        related = LocaleNormalizer.related_specializations(requested)
        if any(name in trainer_specializations for name in related):
            return RELATED_SPECIALIZATION_SCORE

        return UNRELATED_SPECIALIZATION_SCORE

    @staticmethod
    def availability_score(is_available: Optional[bool]) -> float:
        """Map an availability record (None when absent) to a score"""
        if is_available is None:
            return UNKNOWN_AVAILABILITY_SCORE
        return AVAILABLE_SCORE if is_available else UNAVAILABLE_SCORE

    @staticmethod
    def rating_score(trainer: UserProfile) -> float:
        return _clamp(trainer.effective_rating / 5.0)

    @staticmethod
    def experience_score(trainer: UserProfile) -> float:
        total_hours = trainer.effective_hours
        for min_hours, score in EXPERIENCE_THRESHOLDS:
            if total_hours >= min_hours:
                return score
        return MIN_EXPERIENCE_SCORE

    @staticmethod
    def workload_score(event_count: Optional[int]) -> float:
        """
        Map the number of upcoming calendar events to a score

        Args:
            event_count: Events in the workload window, None if the lookup failed

        Returns:
            Lower workload gives a higher score; 0.5 when unknown
        """
        if event_count is None:
            return NEUTRAL_WORKLOAD_SCORE
        for max_events, score in WORKLOAD_THRESHOLDS:
            if event_count <= max_events:
                return score
        return MAX_WORKLOAD_SCORE

    @staticmethod
    def composite_score(factors: MatchFactors) -> float:
        """Weighted sum of the six factors, rounded half-up to two decimals"""
        total = sum(
            getattr(factors, name) * weight
            for name, weight in FACTOR_WEIGHTS.items()
        )
        return _clamp(math.floor(total * 100 + 0.5) / 100)

    @staticmethod
    def generate_reasoning(factors: MatchFactors, trainer: UserProfile) -> List[str]:
        """
        Human-readable reasons, in factor order

        Args:
            factors: Computed factor scores
            trainer: Scored trainer

        Returns:
            One line per factor that crosses its threshold
        """
        reasoning = []

        if factors.location_match >= 0.8:
            reasoning.append("✅ Located in the same province")
        elif factors.location_match >= 0.5:
            reasoning.append("📍 Located in nearby province")

        if factors.specialization_match >= 0.8:
            reasoning.append("🎯 Perfect specialization match")
        elif factors.specialization_match >= 0.6:
            reasoning.append("🔗 Related specialization")

        if factors.availability_match >= 0.8:
            reasoning.append("✅ Available on requested date")

        if factors.rating_score >= 0.8:
            reasoning.append(f"⭐ Highly rated trainer ({trainer.effective_rating:g}/5)")

        if factors.experience_score >= 0.8:
            reasoning.append(f"🏆 Experienced trainer ({trainer.effective_hours}+ hours)")

        if factors.workload_score >= 0.8:
            reasoning.append("⚡ Low current workload")

        return reasoning

    @staticmethod
    def determine_priority(requested_date: datetime, today: Optional[date] = None) -> RequestPriority:
        """
        Derive request priority from whole calendar days until the requested date

        Args:
            requested_date: Requested training date
            today: Reference day, defaults to the current date in the
                requested date's timezone

        Returns:
            high within 3 days, medium within 7, low otherwise
        """
        today = today or datetime.now(requested_date.tzinfo).date()
        days_until_request = (requested_date.date() - today).days

        if days_until_request <= 3:
            return RequestPriority.HIGH
        if days_until_request <= 7:
            return RequestPriority.MEDIUM
        return RequestPriority.LOW


def to_percentage(score: float) -> int:
    """Score in [0, 1] as a whole percentage, rounding halves up"""
    return int(math.floor(score * 100 + 0.5))
