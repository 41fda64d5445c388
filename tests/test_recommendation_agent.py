import asyncio

import pytest

from agents.orchestrator import TrainingOrchestrator
from agents.recommendation_agent import MATCH_COLORS, RecommendationAgent
from models.notification import WorkflowNotificationData
from models.training_request import TrainerApplication, TrainingStatus
from models.user import UserRole
from services.matching_engine import TrainerMatchingEngine

from factories import GIZA, make_request, make_trainer, make_user


@pytest.fixture
def agent(store, config):
    return RecommendationAgent(TrainerMatchingEngine(store, config))


@pytest.mark.parametrize(
    "score,quality",
    [(1.0, "excellent"), (0.8, "excellent"), (0.79, "good"), (0.6, "good"), (0.59, "fair"), (0.4, "fair"), (0.39, "poor"), (0.0, "poor")],
)
def test_match_quality_thresholds(agent, score, quality):
    assert agent.match_quality(score) == quality


def test_recommend_applicants_formats_cards(store, agent):
    request = make_request()
    store.requests[request.id] = request
    store.availability[("best", request.requested_date.date())] = True
    for trainer in (
        make_trainer("best", full_name="Mona Hassan", rating=4.5, total_training_hours=120),
        make_trainer("second", province=GIZA),
    ):
        store.applications.setdefault(request.id, []).append(
            TrainerApplication(training_request_id=request.id, trainer_id=trainer.id, trainer=trainer)
        )

    result = asyncio.run(agent.recommend_applicants(request.id))

    assert result["request_id"] == request.id
    assert result["summary"].startswith("Found 2 suitable trainers")
    first, second = result["recommendations"]
    assert (first["rank"], first["trainer_id"], first["full_name"]) == (1, "best", "Mona Hassan")
    assert first["match_quality"] == "excellent"
    assert first["color"] == MATCH_COLORS["excellent"]
    assert first["factor_percentages"]["location_match"] == 100
    assert first["factor_percentages"]["rating_score"] == 90
    assert "🎯 Perfect specialization match" in first["reasoning"]
    assert second["rank"] == 2
    assert second["factor_percentages"]["location_match"] == 60


def test_recommend_applicants_empty(store, agent):
    request = make_request()
    store.requests[request.id] = request

    result = asyncio.run(agent.recommend_applicants(request.id))

    assert result["recommendations"] == []
    assert result["summary"] == "No pending applications found for this request."


def test_orchestrator_wires_matching_and_notifications(store, push_sender, config):
    orchestrator = TrainingOrchestrator(store, store, config, push_sender)
    request = make_request(requester_id="dv-1")
    store.requests[request.id] = request
    store.trainers = [make_trainer("a"), make_trainer("b", province=GIZA)]
    store.users = [make_user("cc-1", UserRole.DEVELOPMENT_MANAGEMENT_OFFICER)]

    suggested = asyncio.run(orchestrator.suggest_trainers(request, max_results=1))
    created = asyncio.run(orchestrator.on_request_created(request, "Omar"))
    approved = asyncio.run(orchestrator.on_status_change(WorkflowNotificationData(
        request_id=request.id,
        request_title=request.title,
        new_status=TrainingStatus.FINAL_APPROVED,
        old_status=TrainingStatus.PENDING_FINAL_APPROVAL,
    )))

    assert [card["trainer_id"] for card in suggested["recommendations"]] == ["a"]
    assert created.success and approved.success
    assert [sent["user_ids"] for sent in push_sender.sent] == [["cc-1"], ["dv-1"]]
