"""
RecommendationAgent - Ranks applicants for a training request and labels match quality
"""

from typing import Any, Dict, List, Optional

from config import Config
from models.matching import TrainerScore
from services.matching_engine import TrainerMatchingEngine
from services.scoring import to_percentage


MATCH_COLORS = {
    "excellent": "#28a745",
    "good": "#ffc107",
    "fair": "#fd7e14",
    "poor": "#dc3545",
}


class RecommendationAgent:
    """Turns ranked trainer scores into display-ready recommendation cards"""

    def __init__(self, matching_engine: TrainerMatchingEngine, config: Optional[Config] = None):
        """
        Initialize RecommendationAgent

        Args:
            matching_engine: Trainer matching engine
            config: Configuration instance
        """
        self.matching_engine = matching_engine
        self.config = config or matching_engine.config

    async def recommend_applicants(self, request_id: str) -> Dict[str, Any]:
        """
        Rank the pending applicants for a request

        Args:
            request_id: Training request ID

        Returns:
            Summary and recommendation cards, best first
        """
        result = await self.matching_engine.get_trainer_recommendations(request_id)
        print(f"🔍 DEBUG: {len(result.recommendations)} applicants ranked for request {request_id}")

        return {
            "request_id": request_id,
            "summary": result.summary,
            "recommendations": self.format_recommendations(result.recommendations),
        }

    def format_recommendations(self, recommendations: List[TrainerScore]) -> List[Dict[str, Any]]:
        cards = []
        for rank, recommendation in enumerate(recommendations, start=1):
            quality = self.match_quality(recommendation.score)
            factors = recommendation.factors.model_dump()
            cards.append({
                "rank": rank,
                "trainer_id": recommendation.trainer_id,
                "full_name": recommendation.trainer.full_name,
                "specializations": recommendation.trainer.specializations,
                "score": recommendation.score,
                "match_percentage": to_percentage(recommendation.score),
                "match_quality": quality,
                "color": MATCH_COLORS[quality],
                "factor_percentages": {name: to_percentage(value) for name, value in factors.items()},
                "reasoning": list(recommendation.reasoning),
            })
        return cards

    def match_quality(self, score: float) -> str:
        """Classify a composite score as excellent, good, fair or poor"""
        if score >= self.config.match_threshold_excellent:
            return "excellent"
        elif score >= self.config.match_threshold_good:
            return "good"
        elif score >= self.config.match_threshold_fair:
            return "fair"
        return "poor"
