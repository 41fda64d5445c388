"""
Orchestrator - wires the matching engine and the workflow notifications together
"""

from typing import Any, Dict, Optional

from config import Config
from agents.recommendation_agent import RecommendationAgent
from models.notification import DeliveryResult, WorkflowNotificationData
from models.training_request import TrainingRequest
from services.data_access import MatchingDataSource, NotificationStore, PushSender
from services.matching_engine import TrainerMatchingEngine
from services.notification_service import NotificationService
from services.postgres_store import PostgresTrainingStore
from services.workflow_notifications import WorkflowNotificationService
from utils.database import DatabaseManager


class TrainingOrchestrator:
    """Entry point coordinating trainer matching and workflow notifications"""

    def __init__(self, store: MatchingDataSource, notification_store: NotificationStore,
                 config: Config, push_sender: Optional[PushSender] = None):
        """
        Initialize orchestrator

        Args:
            store: Directory, request, availability and calendar data source
            notification_store: Notification record store
            config: Configuration instance
            push_sender: Push channel; built from configuration when omitted
        """
        self.config = config

        # Initialize services
        self.matching_engine = TrainerMatchingEngine(store, config)
        self.recommendation_agent = RecommendationAgent(self.matching_engine, config)
        self.notification_service = NotificationService(notification_store, push_sender, config)
        self.workflow_notifications = WorkflowNotificationService(
            store, store, self.notification_service
        )

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "TrainingOrchestrator":
        """Build an orchestrator backed by PostgreSQL"""
        config = config or Config()
        db_manager = DatabaseManager(config.db_connection_string)
        store = PostgresTrainingStore(db_manager, config)
        return cls(store, store, config)

    async def suggest_trainers(self, request: TrainingRequest,
                               max_results: Optional[int] = None) -> Dict[str, Any]:
        """
        Rank the whole trainer pool for a request

        Args:
            request: Training request
            max_results: Maximum number of trainers to return

        Returns:
            Result bundle with the request ID and recommendation cards
        """
        ranked = await self.matching_engine.find_best_trainers(request, max_results)
        return {
            "request_id": request.id,
            "recommendations": self.recommendation_agent.format_recommendations(ranked),
        }

    async def review_applicants(self, request_id: str) -> Dict[str, Any]:
        return await self.recommendation_agent.recommend_applicants(request_id)

    async def on_request_created(self, request: TrainingRequest,
                                 requester_name: str) -> Optional[DeliveryResult]:
        return await self.workflow_notifications.send_new_training_request_notification(
            request.id, request.title, request.specialization, requester_name
        )

    async def on_trainer_applied(self, request: TrainingRequest,
                                 trainer_name: str) -> Optional[DeliveryResult]:
        return await self.workflow_notifications.send_trainer_application_notification(
            request.id, request.title, trainer_name, request.specialization
        )

    async def on_status_change(self, data: WorkflowNotificationData) -> Optional[DeliveryResult]:
        return await self.workflow_notifications.send_status_change_notification(data)
