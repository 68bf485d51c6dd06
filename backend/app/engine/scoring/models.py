# engine/scoring/models.py
"""
Structures de données du moteur de scoring — ZÉRO accès DB.

Tous les objets d'entrée sont immuables (frozen) : ils sont construits
une fois par engine/scoring/config.py depuis le JSON stocké, puis
partagés en lecture seule par le calculateur et les agrégateurs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from app.shared.enums import AnswerKind, QuestionType


# ── Configuration ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ScoreCategory:
    id: str
    name: str
    weight: float = 1.0         # poids dans le score global de la réponse


@dataclass(frozen=True)
class ScoreRange:
    id: str
    min: float                  # bornes inclusives
    max: float
    label: str
    color: Optional[str] = None
    interpretation: Optional[str] = None
    severity: Optional[str] = None   # renseigné sur la table canonique uniquement

    def contains(self, score: float) -> bool:
        return self.min <= score <= self.max


@dataclass(frozen=True)
class ScoreConfig:
    enabled: bool = False
    categories: Tuple[ScoreCategory, ...] = ()
    score_ranges: Tuple[ScoreRange, ...] = ()

    @property
    def category_ids(self) -> List[str]:
        return [c.id for c in self.categories]

    def category(self, category_id: str) -> Optional[ScoreCategory]:
        for c in self.categories:
            if c.id == category_id:
                return c
        return None


# ── Questions & réponses ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Question:
    id: str
    type: str
    text: str = ""
    scorable: bool = False
    scoring_category: Optional[str] = None
    score_weight: float = 1.0
    option_scores: Dict[str, float] = field(default_factory=dict)
    options: Tuple[str, ...] = ()
    rating_scale: Optional[int] = None
    likert_points: Optional[int] = None
    scale_min: Optional[float] = None
    scale_max: Optional[float] = None

    @property
    def scale_maximum(self) -> Optional[float]:
        """Valeur maximale de l'échelle numérique, si la question en a une."""
        if self.type in (QuestionType.RATING, QuestionType.OPINION_SCALE):
            return self.rating_scale
        if self.type == QuestionType.LIKERT:
            return self.likert_points
        if self.type == QuestionType.SLIDER:
            return self.scale_max
        return None


@dataclass(frozen=True)
class Answer:
    """
    Réponse à une question, sous forme d'union étiquetée.

    SINGLE → un libellé (values[0])
    MULTI  → plusieurs libellés (checkbox)
    OTHER  → valeur brute non textuelle (nombre, booléen, objet)
    """
    kind: AnswerKind
    values: Tuple[str, ...] = ()
    raw: Any = None

    @classmethod
    def single(cls, value: str) -> "Answer":
        return cls(kind=AnswerKind.SINGLE, values=(value,), raw=value)

    @classmethod
    def multi(cls, values) -> "Answer":
        values = tuple(values)
        return cls(kind=AnswerKind.MULTI, values=values, raw=list(values))

    @classmethod
    def other(cls, raw: Any) -> "Answer":
        return cls(kind=AnswerKind.OTHER, raw=raw)

    @property
    def label(self) -> Optional[str]:
        """Libellé unique utilisable pour une recherche dans optionScores."""
        if self.kind == AnswerKind.SINGLE:
            return self.values[0]
        if self.kind == AnswerKind.OTHER and isinstance(self.raw, (int, float)) \
                and not isinstance(self.raw, bool):
            raw = float(self.raw)
            return str(int(raw)) if raw.is_integer() else str(raw)
        return None


@dataclass(frozen=True)
class Response:
    id: str
    answers: Dict[str, Answer] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    survey_id: Optional[str] = None
    completion_percentage: Optional[float] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_duration_ms: Optional[float] = None
    score_config_version_id: Optional[str] = None

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.completed_at or self.started_at or self.created_at


# ── Résultats de scoring ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class CategoryScore:
    category_id: str
    category_name: str
    raw_score: float            # Σ points pondérés
    max_score: float            # Σ maxima pondérés (> 0)
    normalized_score: int       # 0-100, arrondi au demi supérieur
    band: Optional[ScoreRange] = None
    interpretation: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "raw_score": self.raw_score,
            "max_score": self.max_score,
            "normalized_score": self.normalized_score,
            "band": self.band.label if self.band else None,
            "band_id": self.band.id if self.band else None,
            "color": self.band.color if self.band else None,
            "interpretation": self.interpretation,
        }


@dataclass(frozen=True)
class ResponseScoreSet:
    """Scores d'une réponse : une entrée par catégorie calculable, dans l'ordre de la config."""
    categories: Dict[str, CategoryScore]
    overall_score: Optional[int]        # None si aucune catégorie calculable
    response: Optional[Response] = None

    @property
    def response_id(self) -> Optional[str]:
        return self.response.id if self.response else None

    @property
    def scores(self) -> Dict[str, int]:
        return {cid: cs.normalized_score for cid, cs in self.categories.items()}

    @property
    def is_empty(self) -> bool:
        return not self.categories

    def to_dict(self) -> Dict:
        return {
            "response_id": self.response_id,
            "overall_score": self.overall_score,
            "categories": {cid: cs.to_dict() for cid, cs in self.categories.items()},
        }


# ── Versions ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ScoringVersion:
    """Instantané de configuration + réponses collectées sous cette configuration."""
    id: str
    version_number: int
    score_config: Optional[ScoreConfig]
    responses: Tuple[Response, ...] = ()
    created_at: Optional[datetime] = None
    label: Optional[str] = None

    @property
    def display_label(self) -> str:
        return self.label or f"v{self.version_number}"


@dataclass
class VersionPoint:
    version_id: str
    label: str
    version_number: int
    version_date: Optional[datetime]
    category_scores: Dict[str, Optional[float]]    # moyenne par catégorie, 1 décimale
    category_names: Dict[str, str]
    overall_score: Optional[float]
    response_count: int
    scored_count: int

    def to_dict(self) -> Dict:
        return {
            "version_id": self.version_id,
            "label": self.label,
            "version_number": self.version_number,
            "version_date": self.version_date.isoformat() if self.version_date else None,
            "category_scores": dict(self.category_scores),
            "overall_score": self.overall_score,
            "response_count": self.response_count,
            "scored_count": self.scored_count,
        }
