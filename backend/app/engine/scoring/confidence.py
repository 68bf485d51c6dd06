# engine/scoring/confidence.py
"""
Garde-fous de confiance — ZÉRO accès DB.

Inspecte le contexte d'une requête analytics et produit des
avertissements structurés. Ne bloque jamais le calcul : l'appelant
affiche les avertissements à côté des chiffres.

Sévérités :
    error   → les chiffres sont trompeurs ou absents (config cassée)
    warning → les chiffres existent mais sont fragiles
    info    → contexte utile (pas de tendance possible, pas de segment…)
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from app.engine.scoring.bands import validate_score_ranges
from app.engine.scoring.models import Question, ScoreConfig
from app.shared.enums import WarningCode, WarningSeverity

MIN_RESPONSES_MEANINGFUL = 5

_SEVERITY_ORDER = {
    WarningSeverity.ERROR: 0,
    WarningSeverity.WARNING: 1,
    WarningSeverity.INFO: 2,
}


@dataclass(frozen=True)
class AnalyticsWarning:
    code: WarningCode
    severity: WarningSeverity
    title: str
    message: str

    def to_dict(self) -> Dict:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
        }


@dataclass(frozen=True)
class ConfidenceContext:
    score_config: Optional[ScoreConfig]
    questions: Sequence[Question] = field(default_factory=tuple)
    response_count: int = 0
    scored_count: Optional[int] = None      # None → inconnu, pas de contrôle
    version_count: int = 1
    trend_requested: bool = False
    segment_requested: bool = False
    has_segment_data: bool = True


class ConfidenceGuard:

    def __init__(self, low_response_threshold: int = MIN_RESPONSES_MEANINGFUL):
        self.low_response_threshold = low_response_threshold

    def check(self, context: ConfidenceContext) -> List[AnalyticsWarning]:
        """Tous les avertissements applicables, triés par sévérité (erreurs d'abord)."""
        warnings = []
        warnings += self._check_volume(context)
        warnings += self._check_config(context)
        warnings += self._check_scope(context)
        return sort_warnings(warnings)

    # ── Volume ────────────────────────────────────────────────

    def _check_volume(self, ctx: ConfidenceContext) -> List[AnalyticsWarning]:
        if ctx.response_count == 0:
            return [AnalyticsWarning(
                code=WarningCode.NO_RESPONSES,
                severity=WarningSeverity.INFO,
                title="Aucune réponse",
                message="Aucune réponse collectée pour le moment : les indicateurs sont vides.",
            )]
        if ctx.response_count < self.low_response_threshold:
            return [AnalyticsWarning(
                code=WarningCode.LOW_RESPONSES,
                severity=WarningSeverity.WARNING,
                title="Données limitées",
                message=(
                    f"Seulement {ctx.response_count} réponse(s) "
                    f"(minimum recommandé : {self.low_response_threshold}). "
                    "Les résultats peuvent ne pas être représentatifs."
                ),
            )]
        return []

    # ── Configuration ─────────────────────────────────────────

    def _check_config(self, ctx: ConfidenceContext) -> List[AnalyticsWarning]:
        config = ctx.score_config
        if config is None or not config.enabled:
            return [AnalyticsWarning(
                code=WarningCode.SCORING_DISABLED,
                severity=WarningSeverity.INFO,
                title="Scoring désactivé",
                message="Ce questionnaire n'a pas de scoring actif : seules les statistiques de participation sont disponibles.",
            )]

        if not config.categories:
            return [AnalyticsWarning(
                code=WarningCode.MISCONFIGURED,
                severity=WarningSeverity.ERROR,
                title="Scoring mal configuré",
                message="Le scoring est activé mais aucune catégorie n'est définie : aucun score ne peut être calculé.",
            )]

        warnings = []

        unmapped = self._unmapped_categories(config, ctx.questions)
        if unmapped:
            warnings.append(AnalyticsWarning(
                code=WarningCode.UNMAPPED_CATEGORIES,
                severity=WarningSeverity.WARNING,
                title="Catégories sans question",
                message=f"Aucune question scorable ne mesure : {', '.join(unmapped)}.",
            ))

        if not config.score_ranges:
            warnings.append(AnalyticsWarning(
                code=WarningCode.NO_SCORE_RANGES,
                severity=WarningSeverity.WARNING,
                title="Plages de score absentes",
                message="Aucune plage de score configurée : les bandes canoniques sont utilisées pour la distribution.",
            ))
        else:
            problems = validate_score_ranges(config.score_ranges)
            if problems:
                warnings.append(AnalyticsWarning(
                    code=WarningCode.INVALID_SCORE_RANGES,
                    severity=WarningSeverity.WARNING,
                    title="Plages de score incohérentes",
                    message="Certains scores ne recevront pas de bande : " + " ; ".join(problems) + ".",
                ))

        if ctx.response_count > 0 and ctx.scored_count == 0:
            warnings.append(AnalyticsWarning(
                code=WarningCode.NO_SCORED_RESPONSES,
                severity=WarningSeverity.WARNING,
                title="Aucune réponse scorée",
                message="Des réponses existent mais aucune ne contient de réponse scorable.",
            ))
        return warnings

    @staticmethod
    def _unmapped_categories(config: ScoreConfig, questions: Iterable[Question]) -> List[str]:
        mapped = {q.scoring_category for q in questions if q.scorable and q.scoring_category}
        return [c.id for c in config.categories if c.id not in mapped]

    # ── Périmètre demandé ─────────────────────────────────────

    @staticmethod
    def _check_scope(ctx: ConfidenceContext) -> List[AnalyticsWarning]:
        warnings = []
        if ctx.trend_requested and ctx.version_count <= 1:
            warnings.append(AnalyticsWarning(
                code=WarningCode.SINGLE_VERSION,
                severity=WarningSeverity.INFO,
                title="Une seule version",
                message="Une seule version de scoring avec des réponses : aucune tendance ne peut être calculée.",
            ))
        if ctx.segment_requested and not ctx.has_segment_data:
            warnings.append(AnalyticsWarning(
                code=WarningCode.NO_SEGMENTS,
                severity=WarningSeverity.INFO,
                title="Aucun segment",
                message="Aucune réponse ne porte de clé de segment : toutes sont regroupées comme non assignées.",
            ))
        return warnings


def sort_warnings(warnings: Iterable[AnalyticsWarning]) -> List[AnalyticsWarning]:
    """Tri stable : error, puis warning, puis info."""
    return sorted(warnings, key=lambda w: _SEVERITY_ORDER[w.severity])
