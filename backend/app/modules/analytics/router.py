# modules/analytics/router.py
"""
Endpoints analytics d'un questionnaire.

Sans état : l'appelant envoie le questionnaire et ses réponses, chaque
endpoint renvoie une enveloppe {meta, data, warnings}.
"""
import logging

from fastapi import APIRouter, HTTPException, status

from app.engine.scoring.config import ScoringConfigError
from app.modules.analytics.service import AnalyticsService
from app.modules.analytics.schemas import (
    AnalyticsEnvelopeOut,
    AnalyticsRequest,
    CompareRequest,
    TimelineRequest,
    TrendsRequest,
)

router = APIRouter(prefix="/analytics", tags=["Analytics"])
service = AnalyticsService()
logger = logging.getLogger(__name__)


def _run(method, payload):
    try:
        return method(payload)
    except ScoringConfigError as e:
        logger.warning("%s rejeté : %s", method.__name__, e.detail)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ValueError as e:
        code = str(e)
        if code == "VERSION_NOT_FOUND":
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Version de scoring introuvable."
            )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=code)


# ─────────────────────────────────────────────
# SYNTHÈSE
# ─────────────────────────────────────────────

@router.post(
    "/report",
    response_model=AnalyticsEnvelopeOut,
    summary="Tableau de bord complet",
    description=(
        "Participation, distribution, bandes, segments et catégories "
        "calculés en un seul passage sur les réponses."
    ),
)
def get_report(payload: AnalyticsRequest):
    return _run(service.get_report, payload)


@router.post(
    "/participation",
    response_model=AnalyticsEnvelopeOut,
    summary="Participation",
    description="Volume de réponses, taux de réponse et de complétion, durée moyenne (secondes).",
)
def get_participation(payload: AnalyticsRequest):
    return _run(service.get_participation, payload)


@router.post(
    "/questions",
    response_model=AnalyticsEnvelopeOut,
    summary="Synthèse par question",
)
def get_question_summary(payload: AnalyticsRequest):
    return _run(service.get_question_summary, payload)


# ─────────────────────────────────────────────
# SCORES
# ─────────────────────────────────────────────

@router.post(
    "/distribution",
    response_model=AnalyticsEnvelopeOut,
    summary="Distribution des scores globaux",
    description="Histogramme par tranches de 20 points + min, max, moyenne, médiane, écart-type.",
)
def get_distribution(payload: AnalyticsRequest):
    return _run(service.get_distribution, payload)


@router.post(
    "/bands",
    response_model=AnalyticsEnvelopeOut,
    summary="Répartition par bande de performance",
)
def get_band_distribution(payload: AnalyticsRequest):
    return _run(service.get_band_distribution, payload)


@router.post(
    "/segments",
    response_model=AnalyticsEnvelopeOut,
    summary="Scores par segment",
    description=(
        "Regroupe les réponses selon un champ de metadata (managerId par défaut). "
        "Les réponses sans clé forment le segment 'unassigned'."
    ),
)
def get_segment_summary(payload: AnalyticsRequest):
    return _run(service.get_segment_summary, payload)


@router.post(
    "/categories",
    response_model=AnalyticsEnvelopeOut,
    summary="Vue par catégorie",
)
def get_category_overview(payload: AnalyticsRequest):
    return _run(service.get_category_overview, payload)


# ─────────────────────────────────────────────
# TENDANCES
# ─────────────────────────────────────────────

@router.post(
    "/trends",
    response_model=AnalyticsEnvelopeOut,
    summary="Scores par version de scoring",
    description="Versions ordonnées par numéro (défaut) ou par date de création.",
)
def get_trends(payload: TrendsRequest):
    return _run(service.get_trends, payload)


@router.post(
    "/compare",
    response_model=AnalyticsEnvelopeOut,
    summary="Comparaison avant / après",
    description="Compare deux versions (par défaut les deux dernières avec réponses).",
)
def get_comparison(payload: CompareRequest):
    return _run(service.get_comparison, payload)


@router.post(
    "/timeline",
    response_model=AnalyticsEnvelopeOut,
    summary="Scores par période",
    description="Moyennes par jour, semaine (lundi) ou mois.",
)
def get_timeline(payload: TimelineRequest):
    return _run(service.get_timeline, payload)
