# tests/modules/analytics/test_service.py
"""
Tests unitaires pour modules.analytics.service — AnalyticsService.

Service réel sur le jeu golden (aucun mock : l'engine est pur).

Couverture :
    load                  → parsing + scoring en un passage
    get_distribution      → histogramme + statistiques golden
    get_band_distribution → 5 / 4 / 1
    get_segment_summary   → Alice 90, Bob 49 ; segment "unassigned"
    get_participation     → 744 s, taux de réponse
    get_question_summary  → 12 questions
    get_category_overview → moyennes par catégorie
    get_report            → toutes les sections + scores par réponse
    get_trends            → une version implicite, leaderboard, single-version
    get_comparison        → versions explicites, VERSION_NOT_FOUND, < 2 versions
    get_timeline          → regroupement journalier
    Erreurs               → ScoringConfigError remontée telle quelle
    Avertissements        → scoring désactivé, peu de réponses
    Settings              → seuils injectés
"""
import pytest
from copy import deepcopy

from app.core.config import Settings
from app.engine.scoring.config import ScoringConfigError
from app.modules.analytics.service import AnalyticsService
from app.modules.analytics.schemas import (
    AnalyticsRequest,
    CompareRequest,
    TimelineRequest,
    TrendsRequest,
)

pytestmark = pytest.mark.service

service = AnalyticsService()


def _codes(envelope):
    return [w["code"] for w in envelope["warnings"]]


def _versioned(golden_request, split_at=5):
    """Réponses 1-5 → v1, 6-10 → v2 (même config)."""
    raw = deepcopy(golden_request)
    for i, response in enumerate(raw["responses"]):
        response["scoreConfigVersionId"] = "v1" if i < split_at else "v2"
    raw["versions"] = [
        {"id": "v2", "versionNumber": 2, "label": "Après"},
        {"id": "v1", "versionNumber": 1, "label": "Avant"},
    ]
    return raw


# ── load ──────────────────────────────────────────────────────────────────────

def test_load_score_toutes_les_reponses(golden_request):
    dataset = service.load(AnalyticsRequest.model_validate(golden_request))
    assert dataset.survey_id == "golden-test-survey-001"
    assert dataset.scoring_enabled
    assert dataset.scored_count == 10
    assert dataset.overall_scores == [88, 90, 94, 88, 88, 50, 42, 52, 42, 60]


# ── Distribution & bandes ─────────────────────────────────────────────────────

def test_get_distribution(golden_request):
    envelope = service.get_distribution(AnalyticsRequest.model_validate(golden_request))
    data = envelope["data"]
    assert {b["range"]: b["count"] for b in data["buckets"]}["41-60"] == 5
    assert data["statistics"]["mean"] == 69.4
    assert data["statistics"]["std_dev"] == 20.8
    assert envelope["meta"]["metric"] == "distribution"
    assert envelope["meta"]["response_count"] == 10
    assert envelope["warnings"] == []


def test_get_band_distribution(golden_request):
    data = service.get_band_distribution(AnalyticsRequest.model_validate(golden_request))["data"]
    counts = {b["band_id"]: b["count"] for b in data["bands"]}
    assert counts == {
        "critical": 0, "needs-improvement": 4, "developing": 1,
        "effective": 0, "highly-effective": 5,
    }


def test_get_band_distribution_scoring_desactive(golden_request):
    golden_request["survey"]["scoreConfig"]["enabled"] = False
    envelope = service.get_band_distribution(AnalyticsRequest.model_validate(golden_request))
    assert envelope["data"]["is_empty"]
    assert envelope["meta"]["scoring_enabled"] is False
    assert _codes(envelope) == ["scoring-disabled"]


# ── Segments ──────────────────────────────────────────────────────────────────

def test_get_segment_summary(golden_request):
    data = service.get_segment_summary(AnalyticsRequest.model_validate(golden_request))["data"]
    segments = {s["segment_key"]: s for s in data["segments"]}
    assert segments["mgr-001"]["rounded_score"] == 90
    assert segments["mgr-001"]["display_score"] == 89.6
    assert segments["mgr-002"]["rounded_score"] == 49
    assert segments["mgr-002"]["segment_label"] == "Bob Manager"
    assert data["segment_by"] == "managerId"


def test_get_segment_summary_sans_cle(golden_request):
    for response in golden_request["responses"]:
        response["metadata"] = {}
    envelope = service.get_segment_summary(AnalyticsRequest.model_validate(golden_request))
    assert [s["segment_key"] for s in envelope["data"]["segments"]] == ["unassigned"]
    assert "no-segments" in _codes(envelope)


# ── Synthèses ─────────────────────────────────────────────────────────────────

def test_get_participation(golden_request):
    golden_request["invitedCount"] = 20
    data = service.get_participation(AnalyticsRequest.model_validate(golden_request))["data"]
    assert data["avg_completion_time"] == 744
    assert data["completion_rate"] == 100.0
    assert data["response_rate"] == 50.0


def test_get_question_summary(golden_request):
    data = service.get_question_summary(AnalyticsRequest.model_validate(golden_request))["data"]
    assert len(data["questions"]) == 12
    assert data["total_responses"] == 10
    assert data["questions"][0]["question_text"] == "I feel motivated to do my best work."


def test_get_category_overview(golden_request):
    data = service.get_category_overview(AnalyticsRequest.model_validate(golden_request))["data"]
    averages = {c["category_id"]: c["average_score"] for c in data["categories"]}
    assert averages["burnout-risk"] == 64.0
    assert averages["engagement"] == 72.0


def test_get_report(golden_request):
    envelope = service.get_report(AnalyticsRequest.model_validate(golden_request))
    data = envelope["data"]
    assert set(data) == {"participation", "distribution", "bands", "segments", "categories", "responses"}
    assert len(data["responses"]) == 10
    assert data["responses"][0]["categories"]["engagement"]["interpretation"] == (
        "Highly effective - consistently strong"
    )
    assert envelope["meta"]["metric"] == "report"


# ── Tendances ─────────────────────────────────────────────────────────────────

def test_get_trends_version_implicite(golden_request):
    envelope = service.get_trends(TrendsRequest.model_validate(golden_request))
    data = envelope["data"]
    assert data["total_versions"] == 1
    assert data["has_multiple_versions"] is False
    assert data["trends"][0]["overall_score"] == 69.4
    assert data["leaderboard"][0]["category_id"] == "engagement"
    assert "single-version" in _codes(envelope)


def test_get_trends_versions_explicites(golden_request):
    envelope = service.get_trends(TrendsRequest.model_validate(_versioned(golden_request)))
    data = envelope["data"]
    assert [t["version_id"] for t in data["trends"]] == ["v1", "v2"]
    assert data["trends"][0]["overall_score"] == 89.6
    assert data["trends"][1]["overall_score"] == 49.2
    assert "single-version" not in _codes(envelope)


def test_get_comparison_deux_dernieres_versions(golden_request):
    data = service.get_comparison(CompareRequest.model_validate(_versioned(golden_request)))["data"]
    assert data["version_before"]["version_id"] == "v1"
    assert data["summary"]["overall_trend"] == "negative"
    assert data["summary"]["declined"] == 5
    engagement = next(c for c in data["categories"] if c["category_id"] == "engagement")
    # Alice 92.0 → Bob 52.0
    assert engagement["change"] == -40.0
    assert engagement["change_percent"] == -43.5


def test_get_comparison_version_inconnue(golden_request):
    raw = _versioned(golden_request)
    raw["versionBefore"] = "v9"
    with pytest.raises(ValueError, match="VERSION_NOT_FOUND"):
        service.get_comparison(CompareRequest.model_validate(raw))


def test_get_comparison_une_seule_version(golden_request):
    envelope = service.get_comparison(CompareRequest.model_validate(golden_request))
    assert envelope["data"] is None
    assert "single-version" in _codes(envelope)


def test_get_timeline(golden_request):
    golden_request["granularity"] = "daily"
    data = service.get_timeline(TimelineRequest.model_validate(golden_request))["data"]
    assert [p["period"] for p in data["points"]] == ["2025-01-15", "2025-01-16"]
    assert data["points"][0]["overall_score"] == 89.6


# ── Erreurs & avertissements ──────────────────────────────────────────────────

def test_config_invalide_leve_scoring_config_error(golden_request):
    golden_request["survey"]["scoreConfig"]["scoreRanges"][0]["min"] = 50
    with pytest.raises(ScoringConfigError):
        service.get_distribution(AnalyticsRequest.model_validate(golden_request))


def test_peu_de_reponses(golden_request):
    golden_request["responses"] = golden_request["responses"][:3]
    assert "low-responses" in _codes(service.get_distribution(AnalyticsRequest.model_validate(golden_request)))


def test_seuils_injectes(golden_request):
    strict = AnalyticsService(Settings(ANALYTICS_LOW_RESPONSE_THRESHOLD=50, ANALYTICS_COMPLETION_THRESHOLD=101))
    envelope = strict.get_participation(AnalyticsRequest.model_validate(golden_request))
    assert "low-responses" in _codes(envelope)
    assert envelope["data"]["completion_rate"] == 0.0
