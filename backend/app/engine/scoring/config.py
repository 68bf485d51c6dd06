# engine/scoring/config.py
"""
Lecture et validation des configurations stockées — ZÉRO accès DB.

Transforme le JSON brut (clés camelCase, ou snake_case) en objets
immuables du moteur. C'est le seul endroit qui inspecte la forme des
valeurs : en aval, le calculateur ne voit que des Answer étiquetées.

Une configuration activée mais structurellement invalide lève
ScoringConfigError. Une configuration activée sans catégorie n'est PAS
une exception : c'est le cas "misconfigured" signalé par ConfidenceGuard.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from app.engine.scoring.models import (
    Answer, Question, Response, ScoreCategory, ScoreConfig, ScoreRange, ScoringVersion,
)

logger = logging.getLogger(__name__)

ERROR_PREFIX = "SCORING_MISCONFIGURED"


class ScoringConfigError(ValueError):
    """Configuration de scoring activée mais inexploitable."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{ERROR_PREFIX}: {detail}")


def _get(raw: Mapping, *keys, default=None):
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool):
        raise ScoringConfigError(f"{what} doit être numérique (reçu {value!r})")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ScoringConfigError(f"{what} doit être numérique (reçu {value!r})")
    if not math.isfinite(number):
        raise ScoringConfigError(f"{what} doit être un nombre fini (reçu {value!r})")
    return number


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    # Sans décalage → UTC (comparable aux dates "...Z")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


# ── ScoreConfig ───────────────────────────────────────────────────────────────

def parse_score_config(raw: Optional[Mapping]) -> Optional[ScoreConfig]:
    """
    JSON scoreConfig → ScoreConfig.

    Returns:
        None si aucune configuration, ScoreConfig(enabled=False) si désactivée
        (le contenu n'est alors pas validé).
    """
    if raw is None:
        return None
    if not _get(raw, "enabled", default=False):
        logger.debug("scoreConfig désactivée, contenu non validé")
        return ScoreConfig(enabled=False)

    categories = tuple(
        _parse_category(c, i) for i, c in enumerate(_get(raw, "categories", default=[]))
    )
    ids = [c.id for c in categories]
    duplicates = sorted({cid for cid in ids if ids.count(cid) > 1})
    if duplicates:
        raise ScoringConfigError(f"catégories dupliquées : {', '.join(duplicates)}")

    ranges = tuple(
        _parse_range(r, i) for i, r in enumerate(_get(raw, "scoreRanges", "score_ranges", default=[]))
    )
    return ScoreConfig(enabled=True, categories=categories, score_ranges=ranges)


def _parse_category(raw: Mapping, index: int) -> ScoreCategory:
    category_id = _get(raw, "id")
    if not category_id:
        raise ScoringConfigError(f"catégorie #{index} sans identifiant")
    weight = _number(_get(raw, "weight", default=1), f"poids de la catégorie '{category_id}'")
    if weight <= 0:
        raise ScoringConfigError(f"poids de la catégorie '{category_id}' doit être > 0")
    return ScoreCategory(
        id=str(category_id),
        name=str(_get(raw, "name", default=category_id)),
        weight=weight,
    )


def _parse_range(raw: Mapping, index: int) -> ScoreRange:
    range_id = _get(raw, "id", default=f"range-{index}")
    low = _number(_get(raw, "min"), f"min de la plage '{range_id}'")
    high = _number(_get(raw, "max"), f"max de la plage '{range_id}'")
    if low > high:
        raise ScoringConfigError(f"plage '{range_id}' : min ({low:g}) > max ({high:g})")
    return ScoreRange(
        id=str(range_id),
        min=low,
        max=high,
        label=str(_get(raw, "label", default=range_id)),
        color=_get(raw, "color"),
        interpretation=_get(raw, "interpretation"),
    )


# ── Questions ─────────────────────────────────────────────────────────────────

def _option_label(option: Any) -> str:
    if isinstance(option, Mapping):
        return str(_get(option, "label", "value", "text", default=""))
    return str(option)


def parse_question(raw: Mapping) -> Question:
    question_id = _get(raw, "id")
    if not question_id:
        raise ValueError("QUESTION_ID_MISSING")

    scorable = bool(_get(raw, "scorable", default=False))
    weight = _number(_get(raw, "scoreWeight", "score_weight", default=1), f"scoreWeight de '{question_id}'")
    if scorable and weight <= 0:
        raise ScoringConfigError(f"scoreWeight de '{question_id}' doit être > 0")

    option_scores = {
        str(label): _number(points, f"optionScores['{label}'] de '{question_id}'")
        for label, points in (_get(raw, "optionScores", "option_scores", default={}) or {}).items()
    }

    def _int_or_none(*keys):
        value = _get(raw, *keys)
        return None if value is None else int(_number(value, f"{keys[0]} de '{question_id}'"))

    def _float_or_none(*keys):
        value = _get(raw, *keys)
        return None if value is None else _number(value, f"{keys[0]} de '{question_id}'")

    return Question(
        id=str(question_id),
        type=str(_get(raw, "type", default="text")),
        text=str(_get(raw, "text", "question", "title", default="")),
        scorable=scorable,
        scoring_category=_get(raw, "scoringCategory", "scoring_category"),
        score_weight=weight,
        option_scores=option_scores,
        options=tuple(_option_label(o) for o in _get(raw, "options", default=[]) or []),
        rating_scale=_int_or_none("ratingScale", "rating_scale"),
        likert_points=_int_or_none("likertPoints", "likert_points"),
        scale_min=_float_or_none("min", "scale_min"),
        scale_max=_float_or_none("max", "scale_max"),
    )


def parse_questions(raw: Iterable[Mapping]) -> List[Question]:
    return [parse_question(q) for q in raw]


# ── Réponses ──────────────────────────────────────────────────────────────────

def to_answer(raw: Any) -> Optional[Answer]:
    """
    Valeur brute → Answer étiquetée. None, "" et [] → None (question non répondue).
    """
    if isinstance(raw, Answer):
        return raw
    if raw is None:
        return None
    if isinstance(raw, str):
        return Answer.single(raw) if raw.strip() else None
    if isinstance(raw, (list, tuple)):
        values = [str(v) for v in raw if v is not None and str(v).strip()]
        return Answer.multi(values) if values else None
    return Answer.other(raw)


def parse_answers(raw: Mapping[str, Any]) -> Dict[str, Answer]:
    answers = {}
    for question_id, value in (raw or {}).items():
        answer = to_answer(value)
        if answer is not None:
            answers[str(question_id)] = answer
    return answers


def parse_response(raw: Mapping) -> Response:
    completion = _get(raw, "completionPercentage", "completion_percentage")
    duration = _get(raw, "totalDurationMs", "total_duration_ms")
    return Response(
        id=str(_get(raw, "id", default="")),
        survey_id=_get(raw, "surveyId", "survey_id"),
        answers=parse_answers(_get(raw, "answers", default={})),
        metadata=dict(_get(raw, "metadata", default={}) or {}),
        completion_percentage=None if completion is None else float(completion),
        created_at=parse_datetime(_get(raw, "createdAt", "created_at")),
        started_at=parse_datetime(_get(raw, "startedAt", "started_at")),
        completed_at=parse_datetime(_get(raw, "completedAt", "completed_at")),
        total_duration_ms=None if duration is None else float(duration),
        score_config_version_id=_get(raw, "scoreConfigVersionId", "score_config_version_id"),
    )


def parse_responses(raw: Iterable[Mapping]) -> List[Response]:
    return [parse_response(r) for r in raw]


# ── Versions ──────────────────────────────────────────────────────────────────

def parse_version(raw: Mapping, responses: Iterable[Response] = ()) -> ScoringVersion:
    version_id = _get(raw, "id")
    if not version_id:
        raise ValueError("VERSION_ID_MISSING")
    return ScoringVersion(
        id=str(version_id),
        version_number=int(_get(raw, "versionNumber", "version_number", default=0)),
        score_config=parse_score_config(_get(raw, "scoreConfig", "score_config")),
        responses=tuple(responses),
        created_at=parse_datetime(_get(raw, "createdAt", "created_at")),
        label=_get(raw, "label"),
    )
