"""
Trainer matching engine - weighted multi-factor scoring and ranking of trainers
"""

import asyncio
from typing import List, Optional
from datetime import date, datetime, timedelta, timezone

from config import Config
from exceptions.custom_errors import InvalidMatchingRequest, MatchingFailure, RequestNotFound
from models.matching import MatchFactors, MatchingCriteria, RecommendationResult, TrainerScore
from models.training_request import TrainingRequest
from models.user import UserProfile
from services.data_access import MatchingDataSource
from services.scoring import FactorScorer, to_percentage


NO_PENDING_APPLICATIONS_SUMMARY = "No pending applications found for this request."
NO_SUITABLE_TRAINERS_SUMMARY = (
    "No suitable trainers found for this request. Consider adjusting the criteria or date."
)


class TrainerMatchingEngine:
    """Scores trainers against training requests and ranks them"""

    def __init__(self, store: MatchingDataSource, config: Optional[Config] = None):
        """
        Initialize matching engine

        Args:
            store: Directory, request, availability and calendar data source
            config: Configuration instance
        """
        self.store = store
        self.config = config or Config()

    async def find_best_trainers(self, request: TrainingRequest,
                                 max_results: Optional[int] = None) -> List[TrainerScore]:
        """
        Rank every active trainer for a training request

        Args:
            request: Training request to match
            max_results: Maximum number of trainers to return

        Returns:
            Top trainers sorted by composite score, highest first

        Raises:
            InvalidMatchingRequest: Request lacks matching fields or the cap is not positive
            MatchingFailure: The trainer pool could not be fetched
        """
        if max_results is None:
            max_results = self.config.default_max_trainers
        self._validate_request(request, max_results)

        criteria = self.build_criteria(request, max_trainers=max_results)

        try:
            trainers = await self.fetch_available_trainers()
            print(f"🔍 DEBUG: Scoring {len(trainers)} trainers for request {request.id}")
            scored_trainers = await asyncio.gather(
                *(self.score_trainer(trainer, criteria) for trainer in trainers)
            )
        except Exception as e:
            print(f"❌ Trainer matching error: {str(e)}")
            raise MatchingFailure() from e

        ranked = sorted(scored_trainers, key=lambda s: s.score, reverse=True)
        return ranked[:max_results]

    async def get_trainer_recommendations(self, request_id: str) -> RecommendationResult:
        """
        Rank only the trainers with a pending application for a request

        Args:
            request_id: Training request ID

        Returns:
            Ranked applicants and a summary sentence

        Raises:
            RequestNotFound: The request does not exist
            MatchingFailure: The request or its applications could not be fetched
        """
        try:
            request = await self.store.fetch_request(request_id)
        except Exception as e:
            print(f"❌ Failed to load training request {request_id}: {str(e)}")
            raise MatchingFailure("Failed to load training request") from e

        if request is None:
            raise RequestNotFound(request_id)

        try:
            applications = await self.store.fetch_pending_applications(request_id)
        except Exception as e:
            print(f"❌ Failed to load applications for {request_id}: {str(e)}")
            raise MatchingFailure("Failed to load trainer applications") from e

        trainers = [
            application.trainer
            for application in applications
            if application.status == "pending" and application.trainer is not None
        ]

        if not trainers:
            return RecommendationResult(recommendations=[], summary=NO_PENDING_APPLICATIONS_SUMMARY)

        criteria = self.build_criteria(request)
        trainers = await self._attach_statistics(trainers)
        scored_trainers = await asyncio.gather(
            *(self.score_trainer(trainer, criteria) for trainer in trainers)
        )

        recommendations = sorted(scored_trainers, key=lambda s: s.score, reverse=True)
        summary = self.generate_summary(recommendations)

        return RecommendationResult(recommendations=recommendations, summary=summary)

    def build_criteria(self, request: TrainingRequest, max_trainers: Optional[int] = None,
                       today: Optional[date] = None) -> MatchingCriteria:
        """Matching criteria for a request; priority is derived, not scored"""
        return MatchingCriteria(
            province=request.province,
            specialization=request.specialization,
            requested_date=request.requested_date,
            duration=request.duration_hours,
            priority=FactorScorer.determine_priority(request.requested_date, today),
            max_trainers=max_trainers,
        )

    async def fetch_available_trainers(self) -> List[UserProfile]:
        """Active trainers joined with their statistics records"""
        trainers = await self.store.fetch_active_trainers()
        if not trainers:
            return []
        return await self._attach_statistics(trainers)

    async def _attach_statistics(self, trainers: List[UserProfile]) -> List[UserProfile]:
        try:
            stats = await self.store.fetch_trainer_statistics([t.id for t in trainers])
        except Exception as e:
            print(f"⚠️ Failed to fetch trainer statistics: {str(e)}")
            return trainers

        return [trainer.with_statistics(stats.get(trainer.id)) for trainer in trainers]

    async def score_trainer(self, trainer: UserProfile, criteria: MatchingCriteria) -> TrainerScore:
        """
        Score a trainer on all six factors

        Args:
            trainer: Trainer profile, optionally joined with statistics
            criteria: Matching criteria

        Returns:
            Composite score, factor scores and reasoning
        """
        is_available, event_count = await asyncio.gather(
            self._lookup_availability(trainer.id, criteria.requested_date.date()),
            self._lookup_workload(trainer.id),
        )

        factors = MatchFactors(
            location_match=FactorScorer.location_score(trainer.province, criteria.province),
            specialization_match=FactorScorer.specialization_score(
                trainer.specializations, criteria.specialization
            ),
            availability_match=FactorScorer.availability_score(is_available),
            rating_score=FactorScorer.rating_score(trainer),
            experience_score=FactorScorer.experience_score(trainer),
            workload_score=FactorScorer.workload_score(event_count),
        )

        return TrainerScore(
            trainer_id=trainer.id,
            trainer=trainer,
            score=FactorScorer.composite_score(factors),
            factors=factors,
            reasoning=FactorScorer.generate_reasoning(factors, trainer),
        )

    async def _lookup_availability(self, trainer_id: str, day: date) -> Optional[bool]:
        try:
            return await self.store.fetch_availability(trainer_id, day)
        except Exception as e:
            print(f"⚠️ Availability lookup failed for trainer {trainer_id}: {str(e)}")
            return None

    async def _lookup_workload(self, trainer_id: str) -> Optional[int]:
        now = datetime.now(timezone.utc)
        window_end = now + timedelta(days=self.config.workload_window_days)
        try:
            return await self.store.count_calendar_events(trainer_id, now, window_end)
        except Exception as e:
            print(f"⚠️ Workload lookup failed for trainer {trainer_id}: {str(e)}")
            return None

    @staticmethod
    def generate_summary(recommendations: List[TrainerScore]) -> str:
        """Summary naming the best match and the average score"""
        if not recommendations:
            return NO_SUITABLE_TRAINERS_SUMMARY

        best_match = recommendations[0]
        avg_score = sum(rec.score for rec in recommendations) / len(recommendations)

        return (
            f"Found {len(recommendations)} suitable trainers. "
            f"Best match: {best_match.trainer.full_name} ({to_percentage(best_match.score)}% match). "
            f"Average compatibility: {to_percentage(avg_score)}%."
        )

    @staticmethod
    def _validate_request(request: TrainingRequest, max_results: int):
        missing = [
            field for field, value in (
                ("province", request.province),
                ("specialization", request.specialization),
                ("requested_date", request.requested_date),
            )
            if not value
        ]
        if missing:
            raise InvalidMatchingRequest(f"Training request is missing: {', '.join(missing)}")
        if max_results <= 0:
            raise InvalidMatchingRequest("max_results must be positive")
