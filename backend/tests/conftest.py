# tests/conftest.py
"""
Fixtures et factories partagées sur l'ensemble de la suite de tests.

Trois couches :
    1. Engine  — fonctions pures, aucun mock (factories de questions / réponses)
    2. Service — AnalyticsService réel sur le jeu "golden"
    3. Router  — httpx.AsyncClient + service mocké via pytest-mock
"""
import pytest
from datetime import datetime, timezone
from typing import Dict, List, Optional

from httpx import AsyncClient, ASGITransport

from app.main import app
from app.engine.scoring.config import (
    parse_question, parse_questions, parse_response, parse_responses, parse_score_config,
)
from app.engine.scoring.models import Question, Response, ScoreConfig
from app.seed.golden_survey import (
    golden_payload, golden_questions, golden_responses, golden_score_config,
)

AGREEMENT = {"Strongly Disagree": 1, "Disagree": 2, "Neutral": 3, "Agree": 4, "Strongly Agree": 5}


# ── Factories engine ──────────────────────────────────────────────────────────

def make_question(
    id: str = "q1",
    type: str = "likert",
    category: Optional[str] = "engagement",
    scorable: bool = True,
    option_scores: Optional[Dict[str, float]] = None,
    **kwargs,
) -> Question:
    """Question Likert 5 points scorable par défaut."""
    raw = {
        "id": id,
        "type": type,
        "scorable": scorable,
        "scoringCategory": category,
        "optionScores": AGREEMENT if option_scores is None else option_scores,
    }
    if type == "likert":
        raw.setdefault("likertPoints", 5)
    raw.update(kwargs)
    return parse_question(raw)


def make_score_config(
    categories: Optional[List] = None,
    ranges: Optional[List[Dict]] = None,
    enabled: bool = True,
) -> ScoreConfig:
    """
    categories : liste d'ids (str) ou de dicts complets.
    ranges     : None → plages canoniques ; [] → aucune plage.
    """
    categories = ["engagement"] if categories is None else categories
    return parse_score_config({
        "enabled": enabled,
        "categories": [c if isinstance(c, dict) else {"id": c, "name": c.title()} for c in categories],
        "scoreRanges": golden_score_config()["scoreRanges"] if ranges is None else ranges,
    })


def make_response(
    id: str = "r1",
    answers: Optional[Dict] = None,
    manager: Optional[str] = "mgr-001",
    completion: Optional[float] = 100,
    completed_at: Optional[datetime] = None,
    **kwargs,
) -> Response:
    raw = {
        "id": id,
        "answers": answers or {},
        "metadata": {"managerId": manager} if manager else {},
        "completionPercentage": completion,
        "completedAt": completed_at or datetime(2025, 1, 15, 10, tzinfo=timezone.utc),
    }
    raw.update(kwargs)
    return parse_response(raw)


# ── Jeu golden (déjà parsé) ───────────────────────────────────────────────────

@pytest.fixture
def golden_question_set() -> List[Question]:
    return parse_questions(golden_questions())


@pytest.fixture
def golden_config() -> ScoreConfig:
    return parse_score_config(golden_score_config())


@pytest.fixture
def golden_response_set() -> List[Response]:
    return parse_responses(golden_responses())


@pytest.fixture
def golden_request() -> dict:
    """Corps JSON brut pour les endpoints /analytics."""
    return golden_payload()


# ── Fixtures HTTP (httpx.AsyncClient) ─────────────────────────────────────────

@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
