# app/modules/analytics/schemas.py
"""
Contrats d'entrée / sortie des endpoints /analytics.

Les entrées acceptent le format stocké (camelCase : scoringCategory,
optionScores…) comme le snake_case. La validation structurelle du
scoring (catégories dupliquées, plages inversées…) reste dans
engine/scoring/config.py pour renvoyer un code SCORING_MISCONFIGURED.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional, Union
from datetime import datetime

from app.shared.enums import TrendGranularity, VersionOrdering


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ── Configuration ──────────────────────────────────────────

class ScoreCategoryIn(_CamelModel):
    id: str
    name: Optional[str] = None
    weight: Optional[float] = None


class ScoreRangeIn(_CamelModel):
    id: Optional[str] = None
    min: float
    max: float
    label: Optional[str] = None
    color: Optional[str] = None
    interpretation: Optional[str] = None


class ScoreConfigIn(_CamelModel):
    enabled: bool = False
    categories: List[ScoreCategoryIn] = []
    score_ranges: List[ScoreRangeIn] = []


class QuestionIn(_CamelModel):
    id: str
    type: str = "text"
    question: Optional[str] = None
    options: List[Union[str, Dict[str, Any]]] = []
    scorable: bool = False
    scoring_category: Optional[str] = None
    score_weight: Optional[float] = None
    option_scores: Dict[str, float] = {}
    rating_scale: Optional[int] = None
    likert_points: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None


class SurveyIn(_CamelModel):
    id: str
    title: Optional[str] = None
    questions: List[QuestionIn] = []
    score_config: Optional[ScoreConfigIn] = None


# ── Réponses & versions ────────────────────────────────────

class ResponseIn(_CamelModel):
    id: str
    survey_id: Optional[str] = None
    answers: Dict[str, Any] = {}
    metadata: Dict[str, Any] = {}
    completion_percentage: Optional[float] = Field(None, ge=0, le=100)
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_duration_ms: Optional[float] = Field(None, ge=0)
    score_config_version_id: Optional[str] = None


class ScoringVersionIn(_CamelModel):
    id: str
    version_number: int = Field(..., ge=0)
    created_at: Optional[datetime] = None
    label: Optional[str] = None
    score_config: Optional[ScoreConfigIn] = None


# ── Requêtes ───────────────────────────────────────────────

class AnalyticsRequest(_CamelModel):
    """Questionnaire + réponses. Champ de metadata utilisé pour segmenter."""
    survey: SurveyIn
    responses: List[ResponseIn] = []
    segment_by: str = "managerId"
    segment_label_field: Optional[str] = "managerName"
    invited_count: Optional[int] = Field(None, ge=0)


class TrendsRequest(AnalyticsRequest):
    """
    Sans `versions`, toutes les réponses forment une seule version
    scorée avec la config courante du survey.
    """
    versions: List[ScoringVersionIn] = []
    order_by: VersionOrdering = VersionOrdering.VERSION_NUMBER


class CompareRequest(TrendsRequest):
    version_before: Optional[str] = None     # défaut : avant-dernière version
    version_after: Optional[str] = None      # défaut : dernière version


class TimelineRequest(AnalyticsRequest):
    granularity: TrendGranularity = TrendGranularity.WEEKLY


# ── Réponse ────────────────────────────────────────────────

class AnalyticsWarningOut(BaseModel):
    code: str
    severity: str
    title: str
    message: str


class AnalyticsMetaOut(BaseModel):
    metric: str
    survey_id: str
    response_count: int
    scoring_enabled: bool
    generated_at: datetime


class AnalyticsEnvelopeOut(BaseModel):
    meta: AnalyticsMetaOut
    data: Any
    warnings: List[AnalyticsWarningOut] = []
