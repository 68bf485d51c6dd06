# engine/scoring/overview.py
"""
Vues de synthèse d'un questionnaire — ZÉRO accès DB.

- compute_participation()     : volume, taux de réponse / complétion, durée moyenne
- compute_question_summary()  : statistiques et répartition par question
- compute_category_overview() : moyenne, min, max et contribution par catégorie

Ces vues ne dépendent pas du scoring (sauf la dernière) et restent
disponibles quand le scoring est désactivé.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from app.engine.scoring.models import Answer, Question, Response, ResponseScoreSet, ScoreConfig
from app.engine.scoring.rounding import percentage, round1, round_int, to_number
from app.engine.scoring.segments import COMPLETION_THRESHOLD
from app.shared.enums import AnswerKind, QuestionType

STRUCTURAL_TYPES = {t.value for t in (
    QuestionType.SECTION, QuestionType.STATEMENT, QuestionType.LEGAL, QuestionType.HIDDEN,
)}
NUMERIC_TYPES = {t.value for t in (
    QuestionType.RATING, QuestionType.NPS, QuestionType.EMOJI_RATING, QuestionType.LIKERT,
    QuestionType.OPINION_SCALE, QuestionType.SLIDER, QuestionType.NUMBER,
)}
DISTRIBUTION_TYPES = {t.value for t in (
    QuestionType.MULTIPLE_CHOICE, QuestionType.CHECKBOX, QuestionType.DROPDOWN,
    QuestionType.YES_NO, QuestionType.IMAGE_CHOICE, QuestionType.RATING, QuestionType.NPS,
    QuestionType.LIKERT, QuestionType.OPINION_SCALE, QuestionType.EMOJI_RATING,
)}

DEFAULT_LIKERT_LABELS = {
    5: ["Strongly Disagree", "Disagree", "Neutral", "Agree", "Strongly Agree"],
    7: ["Strongly Disagree", "Disagree", "Somewhat Disagree", "Neutral",
        "Somewhat Agree", "Agree", "Strongly Agree"],
}


# ── Participation ─────────────────────────────────────────────────────────────

@dataclass
class ParticipationMetrics:
    total_responses: int
    completed_responses: int
    response_rate: Optional[float]      # None si aucune invitation suivie
    completion_rate: float
    avg_completion_time: Optional[int]  # secondes

    def to_dict(self) -> Dict:
        return dict(self.__dict__)


def _duration_ms(response: Response) -> Optional[float]:
    if response.total_duration_ms is not None:
        return response.total_duration_ms
    if response.completed_at and response.started_at:
        return (response.completed_at - response.started_at).total_seconds() * 1000
    return None


def compute_participation(
    responses: Sequence[Response],
    invited_count: Optional[int] = None,
    completion_threshold: float = COMPLETION_THRESHOLD,
) -> ParticipationMetrics:
    total = len(responses)
    completed = sum(
        1 for r in responses
        if r.completion_percentage is not None and r.completion_percentage >= completion_threshold
    )
    durations = [d for d in (_duration_ms(r) for r in responses) if d is not None]

    return ParticipationMetrics(
        total_responses=total,
        completed_responses=completed,
        response_rate=percentage(total, invited_count) if invited_count else None,
        completion_rate=percentage(completed, total),
        avg_completion_time=round_int(float(np.mean(durations)) / 1000) if durations else None,
    )


# ── Synthèse par question ─────────────────────────────────────────────────────

@dataclass
class OptionCount:
    value: str
    label: str
    count: int
    percentage: float


@dataclass
class QuestionSummary:
    question_id: str
    question_number: int
    question_text: str
    question_type: str
    total_answers: int
    completion_rate: float
    avg_value: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    distribution: Optional[List[OptionCount]] = field(default=None)

    def to_dict(self) -> Dict:
        data = dict(self.__dict__)
        if self.distribution is not None:
            data["distribution"] = [o.__dict__.copy() for o in self.distribution]
        return data


def question_options(question: Question) -> List[str]:
    """Options affichables d'une question, générées depuis l'échelle si besoin."""
    if question.options:
        return list(question.options)
    if question.type == QuestionType.LIKERT:
        if question.option_scores:
            return sorted(question.option_scores, key=lambda label: question.option_scores[label])
        points = question.likert_points or 5
        return DEFAULT_LIKERT_LABELS.get(points, [str(i) for i in range(1, points + 1)])
    if question.type == QuestionType.RATING:
        return [str(i) for i in range(1, (question.rating_scale or 5) + 1)]
    if question.type == QuestionType.NPS:
        return [str(i) for i in range(0, 11)]
    if question.type == QuestionType.YES_NO:
        return ["Yes", "No"]
    if question.type == QuestionType.OPINION_SCALE:
        low = int(question.scale_min or 1)
        high = int(question.scale_max or question.rating_scale or 10)
        return [str(i) for i in range(low, high + 1)]
    if question.type == QuestionType.EMOJI_RATING:
        return [str(i) for i in range(1, 6)]
    return []


def _numeric_value(question: Question, answer: Answer) -> Optional[float]:
    label = answer.label
    if label is None:
        return None
    value = to_number(label)
    if value is not None:
        return value
    if question.type in (QuestionType.LIKERT, QuestionType.OPINION_SCALE):
        return question.option_scores.get(label)
    return None


def _distribution_values(answer: Answer):
    if answer.kind != AnswerKind.OTHER:
        return answer.values
    # Oui / Non envoyé en booléen
    if isinstance(answer.raw, bool):
        return ("Yes" if answer.raw else "No",)
    return (answer.label or str(answer.raw),)


def _option_key(question: Question, options: List[str], value: str) -> str:
    # Likert saisi en numérique ("4") → libellé correspondant
    if question.type == QuestionType.LIKERT and value not in options and value.isdigit():
        index = int(value) - 1
        if 0 <= index < len(options):
            return options[index]
    return value


def summarize_question(
    question: Question,
    question_number: int,
    responses: Sequence[Response],
) -> QuestionSummary:
    answers = [r.answers[question.id] for r in responses if question.id in r.answers]
    summary = QuestionSummary(
        question_id=question.id,
        question_number=question_number,
        question_text=question.text or f"Question {question_number}",
        question_type=question.type,
        total_answers=len(answers),
        completion_rate=percentage(len(answers), len(responses)),
    )
    if not answers:
        return summary

    if question.type in NUMERIC_TYPES:
        values = [v for v in (_numeric_value(question, a) for a in answers) if v is not None]
        if values:
            summary.avg_value = round1(float(np.mean(values)))
            summary.min_value = float(np.min(values))
            summary.max_value = float(np.max(values))

    if question.type in DISTRIBUTION_TYPES:
        options = question_options(question)
        counts = {option: 0 for option in options}
        for answer in answers:
            for value in _distribution_values(answer):
                key = _option_key(question, options, value)
                counts[key] = counts.get(key, 0) + 1
        summary.distribution = [
            OptionCount(value=option, label=option, count=counts[option],
                        percentage=percentage(counts[option], len(answers)))
            for option in options
        ]
    return summary


def compute_question_summary(questions: Sequence[Question], responses: Sequence[Response]) -> List[QuestionSummary]:
    """Une synthèse par question répondable, numérotée dans l'ordre du questionnaire."""
    answerable = [q for q in questions if q.type not in STRUCTURAL_TYPES]
    return [summarize_question(q, number, responses) for number, q in enumerate(answerable, start=1)]


# ── Vue par catégorie ─────────────────────────────────────────────────────────

@dataclass
class CategoryOverview:
    category_id: str
    category_name: str
    weight: float
    response_count: int
    average_score: Optional[float]
    min_score: Optional[int]
    max_score: Optional[int]
    contribution: float             # % du score global pondéré

    def to_dict(self) -> Dict:
        return dict(self.__dict__)


def compute_category_overview(
    score_sets: Sequence[Optional[ResponseScoreSet]],
    score_config: Optional[ScoreConfig],
) -> List[CategoryOverview]:
    """
    Statistiques par catégorie, triées par poids puis moyenne décroissants.
    Une catégorie sans score garde average_score=None (jamais 0).
    """
    if score_config is None or not score_config.enabled:
        return []

    rows = []
    for category in score_config.categories:
        scores = [
            s.categories[category.id].normalized_score
            for s in score_sets if s is not None and category.id in s.categories
        ]
        rows.append(CategoryOverview(
            category_id=category.id,
            category_name=category.name,
            weight=category.weight,
            response_count=len(scores),
            average_score=round1(float(np.mean(scores))) if scores else None,
            min_score=min(scores) if scores else None,
            max_score=max(scores) if scores else None,
            contribution=0.0,
        ))

    weighted_total = sum(r.average_score * r.weight for r in rows if r.average_score is not None)
    for row in rows:
        if row.average_score is not None:
            row.contribution = percentage(row.average_score * row.weight, weighted_total)

    return sorted(rows, key=lambda r: (-r.weight, -(r.average_score if r.average_score is not None else -1)))
