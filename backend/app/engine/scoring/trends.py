# engine/scoring/trends.py
"""
Tendances entre versions de scoring — ZÉRO accès DB.

Une version = une configuration figée + les réponses collectées sous
elle. On ne compare que des moyennes de versions, jamais des réponses
rescorées avec une autre configuration.

Direction d'une catégorie (seuil ε, 1 point par défaut) :
    change >  ε → up
    change < -ε → down
    sinon       → neutral   (aussi quand une des deux valeurs manque)

Tendance globale (improved / declined) :
    0 / 0 → stable      x / 0 → positive
    0 / y → negative    x / y → mixed

Appelé par : modules/analytics/service.py
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from app.engine.scoring.bands import BandResolver
from app.engine.scoring.calculator import CategoryScoreCalculator
from app.engine.scoring.models import (
    Question, ResponseScoreSet, ScoreConfig, ScoringVersion, VersionPoint,
)
from app.engine.scoring.rounding import mean_or_none, round1
from app.shared.enums import OverallTrend, TrendDirection, TrendGranularity, VersionOrdering

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 1.0


def resolve_trend_direction(change: Optional[float], threshold: float = TREND_THRESHOLD) -> TrendDirection:
    if change is None:
        return TrendDirection.NEUTRAL
    if change > threshold:
        return TrendDirection.UP
    if change < -threshold:
        return TrendDirection.DOWN
    return TrendDirection.NEUTRAL


def classify_overall_trend(improved: int, declined: int) -> OverallTrend:
    if improved and declined:
        return OverallTrend.MIXED
    if improved:
        return OverallTrend.POSITIVE
    if declined:
        return OverallTrend.NEGATIVE
    return OverallTrend.STABLE


# ── Résultats ─────────────────────────────────────────────────────────────────

@dataclass
class CategoryComparison:
    category_id: str
    category_name: str
    score_before: Optional[float]
    score_after: Optional[float]
    change: Optional[float]             # after - before, 1 décimale
    change_percent: Optional[float]     # None si before == 0 ou donnée manquante
    trend: TrendDirection


@dataclass
class ComparisonSummary:
    improved: int
    declined: int
    stable: int
    overall_trend: OverallTrend
    overall_before: Optional[float]
    overall_after: Optional[float]
    overall_change: Optional[float]


@dataclass
class ComparisonResult:
    version_before: VersionPoint
    version_after: VersionPoint
    categories: List[CategoryComparison]
    summary: ComparisonSummary

    def to_dict(self) -> Dict:
        return {
            "version_before": self.version_before.to_dict(),
            "version_after": self.version_after.to_dict(),
            "categories": [
                {**c.__dict__, "trend": c.trend.value} for c in self.categories
            ],
            "summary": {**self.summary.__dict__, "overall_trend": self.summary.overall_trend.value},
        }


@dataclass
class TrendsSummary:
    points: List[VersionPoint]
    has_multiple_versions: bool
    ordering: VersionOrdering

    @property
    def total_versions(self) -> int:
        return len(self.points)

    def to_dict(self) -> Dict:
        return {
            "trends": [p.to_dict() for p in self.points],
            "has_multiple_versions": self.has_multiple_versions,
            "total_versions": self.total_versions,
            "ordering": self.ordering.value,
        }


@dataclass
class PeriodPoint:
    period: str                                 # date ISO du début de période
    category_scores: Dict[str, Optional[float]]
    overall_score: Optional[float]
    response_count: int

    def to_dict(self) -> Dict:
        return dict(self.__dict__)


# ── Agrégateur ────────────────────────────────────────────────────────────────

class TrendAggregator:

    def __init__(
        self,
        calculator: Optional[CategoryScoreCalculator] = None,
        threshold: float = TREND_THRESHOLD,
        resolver: Optional[BandResolver] = None,
    ):
        self.resolver = resolver or BandResolver()
        self.calculator = calculator or CategoryScoreCalculator(self.resolver)
        self.threshold = threshold

    # ── Points de version ─────────────────────────────────────

    def build_point(self, version: ScoringVersion, questions: Sequence[Question]) -> VersionPoint:
        """Scores moyens d'une version, chaque réponse scorée avec la config de SA version."""
        score_sets = self.calculator.score_all(version.responses, questions, version.score_config)
        return self.point_from_score_sets(
            version_id=version.id,
            label=version.display_label,
            version_number=version.version_number,
            version_date=version.created_at,
            score_sets=score_sets,
            score_config=version.score_config,
        )

    @staticmethod
    def point_from_score_sets(
        version_id: str,
        label: str,
        version_number: int,
        version_date: Optional[datetime],
        score_sets: Sequence[Optional[ResponseScoreSet]],
        score_config: Optional[ScoreConfig],
    ) -> VersionPoint:
        scored = [s for s in score_sets if s is not None and not s.is_empty]
        categories = score_config.categories if score_config else ()

        category_scores = {}
        for category in categories:
            avg = mean_or_none(
                s.categories[category.id].normalized_score for s in scored if category.id in s.categories
            )
            category_scores[category.id] = None if avg is None else round1(avg)

        overall = mean_or_none(s.overall_score for s in scored if s.overall_score is not None)
        return VersionPoint(
            version_id=version_id,
            label=label,
            version_number=version_number,
            version_date=version_date,
            category_scores=category_scores,
            category_names={c.id: c.name for c in categories},
            overall_score=None if overall is None else round1(overall),
            response_count=len(score_sets),
            scored_count=len(scored),
        )

    # ── Série de versions ─────────────────────────────────────

    def summarize(
        self,
        versions: Iterable[ScoringVersion],
        questions: Sequence[Question],
        order_by: VersionOrdering = VersionOrdering.VERSION_NUMBER,
    ) -> TrendsSummary:
        """
        Points ordonnés par numéro de version (défaut) ou par date de création.
        Les versions sans réponse sont écartées.
        """
        if order_by == VersionOrdering.CREATED_AT:
            ordered = sorted(versions, key=lambda v: (v.created_at is None, v.created_at or datetime.min))
        else:
            ordered = sorted(versions, key=lambda v: v.version_number)

        points = []
        for version in ordered:
            if not version.responses:
                logger.debug("Version %s sans réponse, écartée", version.id)
                continue
            points.append(self.build_point(version, questions))

        return TrendsSummary(points=points, has_multiple_versions=len(points) > 1, ordering=order_by)

    # ── Avant / après ─────────────────────────────────────────

    def compare(self, before: VersionPoint, after: VersionPoint) -> ComparisonResult:
        category_ids = list(before.category_scores)
        category_ids += [cid for cid in after.category_scores if cid not in before.category_scores]

        comparisons = []
        for cid in category_ids:
            score_before = before.category_scores.get(cid)
            score_after = after.category_scores.get(cid)
            change, change_percent = self._delta(score_before, score_after)
            comparisons.append(CategoryComparison(
                category_id=cid,
                category_name=after.category_names.get(cid) or before.category_names.get(cid, cid),
                score_before=score_before,
                score_after=score_after,
                change=change,
                change_percent=change_percent,
                trend=resolve_trend_direction(change, self.threshold),
            ))

        improved = sum(1 for c in comparisons if c.trend == TrendDirection.UP)
        declined = sum(1 for c in comparisons if c.trend == TrendDirection.DOWN)
        overall_change, _ = self._delta(before.overall_score, after.overall_score)

        return ComparisonResult(
            version_before=before,
            version_after=after,
            categories=comparisons,
            summary=ComparisonSummary(
                improved=improved,
                declined=declined,
                stable=len(comparisons) - improved - declined,
                overall_trend=classify_overall_trend(improved, declined),
                overall_before=before.overall_score,
                overall_after=after.overall_score,
                overall_change=overall_change,
            ),
        )

    @staticmethod
    def _delta(before: Optional[float], after: Optional[float]):
        if before is None or after is None:
            return None, None
        change = round1(after - before)
        change_percent = None if before == 0 else round1((after - before) / before * 100)
        return change, change_percent

    # ── Série temporelle ──────────────────────────────────────

    def time_series(
        self,
        score_sets: Iterable[Optional[ResponseScoreSet]],
        granularity: TrendGranularity = TrendGranularity.WEEKLY,
        score_config: Optional[ScoreConfig] = None,
    ) -> List[PeriodPoint]:
        """
        Moyennes par période (jour, semaine commençant le lundi, mois).
        Les réponses sans horodatage ou sans score sont ignorées.
        """
        periods: Dict[str, List[ResponseScoreSet]] = {}
        for score_set in score_sets:
            if score_set is None or score_set.is_empty or score_set.response is None:
                continue
            timestamp = score_set.response.timestamp
            if timestamp is None:
                continue
            periods.setdefault(period_start(timestamp, granularity), []).append(score_set)

        category_ids = score_config.category_ids if score_config else None
        points = []
        for key in sorted(periods):
            members = periods[key]
            ids = category_ids or list(dict.fromkeys(cid for s in members for cid in s.categories))
            category_scores = {}
            for cid in ids:
                avg = mean_or_none(s.categories[cid].normalized_score for s in members if cid in s.categories)
                category_scores[cid] = None if avg is None else round1(avg)
            overall = mean_or_none(s.overall_score for s in members if s.overall_score is not None)
            points.append(PeriodPoint(
                period=key,
                category_scores=category_scores,
                overall_score=None if overall is None else round1(overall),
                response_count=len(members),
            ))
        return points

    # ── Classement ────────────────────────────────────────────

    def leaderboard(self, point: VersionPoint) -> List[Dict]:
        """Catégories triées par score décroissant, avec leur bande canonique."""
        ranked = sorted(
            ((cid, score) for cid, score in point.category_scores.items() if score is not None),
            key=lambda item: -item[1],
        )
        rows = []
        for rank, (cid, score) in enumerate(ranked, start=1):
            band = self.resolver.resolve_band(score)
            rows.append({
                "rank": rank,
                "category_id": cid,
                "category_name": point.category_names.get(cid, cid),
                "score": score,
                "band_id": band.id if band else None,
                "band_label": band.label if band else None,
                "color": band.color if band else None,
            })
        return rows


def period_start(timestamp: datetime, granularity: TrendGranularity) -> str:
    day = timestamp.date()
    if granularity == TrendGranularity.DAILY:
        return day.isoformat()
    if granularity == TrendGranularity.WEEKLY:
        return (day - timedelta(days=day.weekday())).isoformat()
    return day.replace(day=1).isoformat()
