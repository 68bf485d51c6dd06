# engine/scoring/calculator.py
"""
Calcul des scores par catégorie d'une réponse — ZÉRO accès DB.

Pour chaque catégorie de la config :
    raw        = Σ points(réponse) × scoreWeight
    max        = Σ maximum(question) × scoreWeight
    normalized = arrondi(100 × raw / max)        (0-100, demi supérieur)

Points d'une réponse :
    1. le libellé est une clé de optionScores → cette valeur
       (les items inversés sont exprimés ici : 'Strongly Agree' → 1)
    2. sinon, question à échelle (rating, likert, slider…) → valeur numérique
    3. sinon → réponse ignorée (ni points, ni maximum)

Appelé par : modules/analytics/service.py, engine/scoring/trends.py
"""
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from app.engine.scoring.bands import BandResolver
from app.engine.scoring.config import to_answer
from app.engine.scoring.models import (
    Answer, CategoryScore, Question, Response, ResponseScoreSet, ScoreConfig,
)
from app.engine.scoring.rounding import clamp, round_int, to_number
from app.shared.enums import AnswerKind

logger = logging.getLogger(__name__)


class CategoryScoreCalculator:

    def __init__(self, resolver: Optional[BandResolver] = None):
        self.resolver = resolver or BandResolver()

    # ── API ───────────────────────────────────────────────────

    def compute(
        self,
        questions: Sequence[Question],
        answers: Mapping[str, Any],
        score_config: Optional[ScoreConfig],
        response: Optional[Response] = None,
    ) -> Optional[ResponseScoreSet]:
        """
        Scores normalisés d'une réponse.

        Returns:
            None si le scoring est absent ou désactivé.
            Un ResponseScoreSet (éventuellement vide) sinon. Les catégories
            sans aucune réponse scorée sont omises, pas mises à zéro.
        """
        if score_config is None or not score_config.enabled:
            return None

        known = set(score_config.category_ids)
        totals: Dict[str, list] = {}

        for question in questions:
            if not question.scorable or not question.scoring_category:
                continue
            if question.scoring_category not in known:
                logger.debug("Question %s → catégorie inconnue '%s', ignorée",
                             question.id, question.scoring_category)
                continue

            answer = to_answer(answers.get(question.id))
            if answer is None:
                continue

            points = self.score_answer(question, answer)
            if points is None:
                continue

            bucket = totals.setdefault(question.scoring_category, [0.0, 0.0])
            bucket[0] += points[0]
            bucket[1] += points[1]

        categories = {}
        for category in score_config.categories:
            if category.id not in totals:
                continue
            raw, maximum = totals[category.id]
            if maximum <= 0:
                logger.debug("Catégorie %s : maximum nul, omise", category.id)
                continue

            normalized = round_int(clamp(raw / maximum * 100))
            band = self.resolver.resolve(normalized, score_config.score_ranges) \
                if score_config.score_ranges else None

            categories[category.id] = CategoryScore(
                category_id=category.id,
                category_name=category.name,
                raw_score=raw,
                max_score=maximum,
                normalized_score=normalized,
                band=band,
                interpretation=band.interpretation if band else None,
            )

        return ResponseScoreSet(
            categories=categories,
            overall_score=self.overall_score(categories, score_config),
            response=response,
        )

    def score_response(
        self,
        response: Response,
        questions: Sequence[Question],
        score_config: Optional[ScoreConfig],
    ) -> Optional[ResponseScoreSet]:
        return self.compute(questions, response.answers, score_config, response=response)

    def score_all(
        self,
        responses: Iterable[Response],
        questions: Sequence[Question],
        score_config: Optional[ScoreConfig],
    ) -> list:
        return [self.score_response(r, questions, score_config) for r in responses]

    # ── Points ────────────────────────────────────────────────

    def score_answer(self, question: Question, answer: Answer) -> Optional[Tuple[float, float]]:
        """(points pondérés, maximum pondéré) ou None si la réponse ne compte pas."""
        weight = question.score_weight

        if answer.kind == AnswerKind.MULTI:
            return self._score_multi(question, answer, weight)

        label = answer.label
        if question.option_scores and label in question.option_scores:
            best = max(question.option_scores.values())
            return question.option_scores[label] * weight, best * weight

        scale = question.scale_maximum
        value = to_number(label)
        if scale and value is not None:
            return value * weight, scale * weight

        return None

    @staticmethod
    def _score_multi(question: Question, answer: Answer, weight: float) -> Optional[Tuple[float, float]]:
        # Maximum = toutes les options positives cochées
        matched = [question.option_scores[v] for v in answer.values if v in question.option_scores]
        if not matched:
            return None
        best = sum(v for v in question.option_scores.values() if v > 0)
        return sum(matched) * weight, best * weight

    # ── Global ────────────────────────────────────────────────

    @staticmethod
    def overall_score(categories: Mapping[str, CategoryScore], score_config: ScoreConfig) -> Optional[int]:
        """Moyenne des catégories pondérée par leur poids, bornée [0, 100], arrondie à l'entier."""
        if not categories:
            return None
        weighted, total_weight = 0.0, 0.0
        for category in score_config.categories:
            score = categories.get(category.id)
            if score is None:
                continue
            weighted += score.normalized_score * category.weight
            total_weight += category.weight
        return round_int(clamp(weighted / total_weight))
