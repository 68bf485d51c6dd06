# modules/analytics/service.py
"""
Orchestration des calculs analytics.

Reçoit un questionnaire et ses réponses (déjà chargés par l'appelant),
délègue tout calcul à engine/scoring et enveloppe le résultat :

    {"meta": {...}, "data": {...}, "warnings": [...]}

Les avertissements de ConfidenceGuard accompagnent TOUJOURS les
chiffres : un indicateur n'est jamais renvoyé sans son contexte.

Erreurs levées :
    ScoringConfigError            → config activée mais invalide (422)
    ValueError("VERSION_NOT_FOUND") → version demandée inconnue (404)
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.core.config import Settings, settings
from app.engine.scoring.bands import BandResolver
from app.engine.scoring.calculator import CategoryScoreCalculator
from app.engine.scoring.confidence import ConfidenceContext, ConfidenceGuard
from app.engine.scoring.config import (
    parse_questions, parse_responses, parse_score_config, parse_version,
)
from app.engine.scoring.distribution import DistributionAggregator
from app.engine.scoring.models import (
    Question, Response, ResponseScoreSet, ScoreConfig, ScoringVersion,
)
from app.engine.scoring.overview import (
    compute_category_overview, compute_participation, compute_question_summary,
)
from app.engine.scoring.segments import SegmentAggregator, build_segment_entries
from app.engine.scoring.trends import TrendAggregator
from app.modules.analytics.schemas import (
    AnalyticsRequest, CompareRequest, TimelineRequest, TrendsRequest,
)

logger = logging.getLogger(__name__)

CURRENT_VERSION_ID = "current"


@dataclass
class SurveyDataset:
    survey_id: str
    questions: List[Question]
    score_config: Optional[ScoreConfig]
    responses: List[Response]
    score_sets: List[Optional[ResponseScoreSet]]

    @property
    def scoring_enabled(self) -> bool:
        return self.score_config is not None and self.score_config.enabled

    @property
    def scored_count(self) -> int:
        return sum(1 for s in self.score_sets if s is not None and not s.is_empty)

    @property
    def overall_scores(self) -> List[int]:
        return [s.overall_score for s in self.score_sets if s is not None and s.overall_score is not None]


class AnalyticsService:

    def __init__(self, config: Settings = settings):
        self.settings = config
        self.resolver = BandResolver()
        self.calculator = CategoryScoreCalculator(self.resolver)
        self.distribution = DistributionAggregator(resolver=self.resolver)
        self.segments = SegmentAggregator(
            self.distribution,
            completion_threshold=config.ANALYTICS_COMPLETION_THRESHOLD,
            unassigned_key=config.ANALYTICS_UNASSIGNED_SEGMENT,
        )
        self.trends = TrendAggregator(
            self.calculator,
            threshold=config.ANALYTICS_TREND_THRESHOLD,
            resolver=self.resolver,
        )
        self.guard = ConfidenceGuard(low_response_threshold=config.ANALYTICS_LOW_RESPONSE_THRESHOLD)

    # ── Chargement ────────────────────────────────────────────

    def load(self, payload: AnalyticsRequest) -> SurveyDataset:
        survey = payload.survey
        questions = parse_questions(q.model_dump(by_alias=True) for q in survey.questions)
        score_config = parse_score_config(
            survey.score_config.model_dump(by_alias=True) if survey.score_config else None
        )
        responses = parse_responses(r.model_dump(by_alias=True) for r in payload.responses)
        return SurveyDataset(
            survey_id=survey.id,
            questions=questions,
            score_config=score_config,
            responses=responses,
            score_sets=self.calculator.score_all(responses, questions, score_config),
        )

    def _envelope(self, metric: str, dataset: SurveyDataset, data, **context) -> Dict:
        warnings = self.guard.check(ConfidenceContext(
            score_config=dataset.score_config,
            questions=tuple(dataset.questions),
            response_count=len(dataset.responses),
            scored_count=dataset.scored_count,
            **context,
        ))
        logger.info(
            "analytics %s survey=%s responses=%d warnings=%d",
            metric, dataset.survey_id, len(dataset.responses), len(warnings),
        )
        return {
            "meta": {
                "metric": metric,
                "survey_id": dataset.survey_id,
                "response_count": len(dataset.responses),
                "scoring_enabled": dataset.scoring_enabled,
                "generated_at": datetime.now(timezone.utc),
            },
            "data": data,
            "warnings": [w.to_dict() for w in warnings],
        }

    # ── Distribution ──────────────────────────────────────────

    def get_distribution(self, payload: AnalyticsRequest) -> Dict:
        dataset = self.load(payload)
        data = self.distribution.aggregate(dataset.overall_scores).to_dict()
        return self._envelope("distribution", dataset, data)

    def get_band_distribution(self, payload: AnalyticsRequest) -> Dict:
        dataset = self.load(payload)
        return self._envelope("bands", dataset, self._bands(dataset))

    def _bands(self, dataset: SurveyDataset) -> Dict:
        # Plages du survey si configurées, table canonique sinon
        ranges = dataset.score_config.score_ranges if dataset.scoring_enabled else ()
        return self.distribution.aggregate_bands(dataset.overall_scores, ranges or None).to_dict()

    # ── Segments ──────────────────────────────────────────────

    def get_segment_summary(self, payload: AnalyticsRequest) -> Dict:
        dataset = self.load(payload)
        data, has_segments = self._segments(dataset, payload)
        return self._envelope("segments", dataset, data, segment_requested=True, has_segment_data=has_segments)

    def _segments(self, dataset: SurveyDataset, payload: AnalyticsRequest):
        entries = build_segment_entries(
            zip(dataset.responses, dataset.score_sets),
            key_field=payload.segment_by,
            label_field=payload.segment_label_field,
        )
        summaries = self.segments.aggregate(entries)
        data = {
            "segment_by": payload.segment_by,
            "segments": [s.to_dict() for s in summaries.values()],
        }
        return data, any(e.segment_key for e in entries)

    # ── Synthèses ─────────────────────────────────────────────

    def get_participation(self, payload: AnalyticsRequest) -> Dict:
        dataset = self.load(payload)
        return self._envelope("participation", dataset, self._participation(dataset, payload))

    def _participation(self, dataset: SurveyDataset, payload: AnalyticsRequest) -> Dict:
        return compute_participation(
            dataset.responses,
            invited_count=payload.invited_count,
            completion_threshold=self.settings.ANALYTICS_COMPLETION_THRESHOLD,
        ).to_dict()

    def get_question_summary(self, payload: AnalyticsRequest) -> Dict:
        dataset = self.load(payload)
        data = {
            "questions": [q.to_dict() for q in compute_question_summary(dataset.questions, dataset.responses)],
            "total_responses": len(dataset.responses),
        }
        return self._envelope("questions", dataset, data)

    def get_category_overview(self, payload: AnalyticsRequest) -> Dict:
        dataset = self.load(payload)
        return self._envelope("categories", dataset, self._categories(dataset))

    def _categories(self, dataset: SurveyDataset) -> Dict:
        rows = compute_category_overview(dataset.score_sets, dataset.score_config)
        return {"categories": [r.to_dict() for r in rows]}

    def get_report(self, payload: AnalyticsRequest) -> Dict:
        """Tableau de bord complet en un appel : un seul scoring des réponses."""
        dataset = self.load(payload)
        segments, has_segments = self._segments(dataset, payload)
        data = {
            "participation": self._participation(dataset, payload),
            "distribution": self.distribution.aggregate(dataset.overall_scores).to_dict(),
            "bands": self._bands(dataset),
            "segments": segments,
            "categories": self._categories(dataset),
            "responses": [s.to_dict() for s in dataset.score_sets if s is not None],
        }
        return self._envelope("report", dataset, data, segment_requested=True, has_segment_data=has_segments)

    # ── Tendances ─────────────────────────────────────────────

    def _versions(self, payload: TrendsRequest, dataset: SurveyDataset) -> List[ScoringVersion]:
        if not payload.versions:
            return [ScoringVersion(
                id=CURRENT_VERSION_ID,
                version_number=1,
                score_config=dataset.score_config,
                responses=tuple(dataset.responses),
                label="Current",
            )]

        by_version: Dict[Optional[str], List[Response]] = {}
        for response in dataset.responses:
            by_version.setdefault(response.score_config_version_id, []).append(response)
        orphans = len(by_version.get(None, []))
        if orphans:
            logger.debug("%d réponse(s) sans version de scoring, exclues des tendances", orphans)

        # Version sans instantané → config courante du survey
        current = payload.survey.score_config
        versions = []
        for version in payload.versions:
            raw = version.model_dump(by_alias=True)
            if raw.get("scoreConfig") is None and current is not None:
                raw["scoreConfig"] = current.model_dump(by_alias=True)
            versions.append(parse_version(raw, by_version.get(version.id, ())))
        return versions

    def get_trends(self, payload: TrendsRequest) -> Dict:
        dataset = self.load(payload)
        summary = self.trends.summarize(self._versions(payload, dataset), dataset.questions, payload.order_by)
        data = summary.to_dict()
        data["leaderboard"] = self.trends.leaderboard(summary.points[-1]) if summary.points else []
        return self._envelope(
            "trends", dataset, data,
            trend_requested=True, version_count=summary.total_versions,
        )

    def get_comparison(self, payload: CompareRequest) -> Dict:
        """
        Avant / après entre deux versions (défaut : les deux dernières).
        Moins de deux versions avec réponses → data=None + avertissement.
        """
        dataset = self.load(payload)
        summary = self.trends.summarize(self._versions(payload, dataset), dataset.questions, payload.order_by)
        points = {p.version_id: p for p in summary.points}

        for requested in (payload.version_before, payload.version_after):
            if requested is not None and requested not in points:
                raise ValueError("VERSION_NOT_FOUND")

        data = None
        if summary.has_multiple_versions:
            before = points[payload.version_before] if payload.version_before else summary.points[-2]
            after = points[payload.version_after] if payload.version_after else summary.points[-1]
            data = self.trends.compare(before, after).to_dict()

        return self._envelope(
            "compare", dataset, data,
            trend_requested=True, version_count=summary.total_versions,
        )

    def get_timeline(self, payload: TimelineRequest) -> Dict:
        dataset = self.load(payload)
        points = self.trends.time_series(dataset.score_sets, payload.granularity, dataset.score_config)
        data = {
            "granularity": payload.granularity.value,
            "points": [p.to_dict() for p in points],
        }
        return self._envelope("timeline", dataset, data)
