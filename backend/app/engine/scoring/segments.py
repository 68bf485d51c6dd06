# engine/scoring/segments.py
"""
Agrégation par segment (manager, équipe…) — ZÉRO accès DB.

La clé de segment est opaque : le service choisit le champ de metadata
à utiliser. Une réponse sans clé tombe dans le segment "non assigné",
jamais ignorée.

avg_score reste en précision flottante. L'affichage (1 décimale) et le
score entier (demi supérieur) sont dérivés, pas stockés :
    Bob : 50, 42, 52, 42, 60 → avg 49.2 → affiché 49.2, arrondi 49
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from app.engine.scoring.distribution import BandDistributionResult, DistributionAggregator
from app.engine.scoring.models import Response, ResponseScoreSet
from app.engine.scoring.rounding import mean_or_none, percentage, round1, round_int

COMPLETION_THRESHOLD = 80.0
UNASSIGNED_SEGMENT = "unassigned"


@dataclass(frozen=True)
class SegmentEntry:
    segment_key: Optional[str]
    overall_score: Optional[float]      # None → réponse non scorée
    completion_pct: Optional[float] = None
    segment_label: Optional[str] = None


@dataclass
class SegmentSummary:
    segment_key: str
    segment_label: Optional[str]
    respondent_count: int
    scored_count: int
    avg_score: Optional[float]          # précision complète
    completion_rate: float              # % de réponses ≥ seuil de complétion
    band_distribution: BandDistributionResult

    @property
    def display_score(self) -> Optional[float]:
        return None if self.avg_score is None else round1(self.avg_score)

    @property
    def rounded_score(self) -> Optional[int]:
        return None if self.avg_score is None else round_int(self.avg_score)

    def to_dict(self) -> Dict:
        return {
            "segment_key": self.segment_key,
            "segment_label": self.segment_label,
            "respondent_count": self.respondent_count,
            "scored_count": self.scored_count,
            "avg_score": self.avg_score,
            "display_score": self.display_score,
            "rounded_score": self.rounded_score,
            "completion_rate": self.completion_rate,
            "band_distribution": self.band_distribution.to_dict(),
        }


class SegmentAggregator:

    def __init__(
        self,
        distribution: Optional[DistributionAggregator] = None,
        completion_threshold: float = COMPLETION_THRESHOLD,
        unassigned_key: str = UNASSIGNED_SEGMENT,
    ):
        self.distribution = distribution or DistributionAggregator()
        self.completion_threshold = completion_threshold
        self.unassigned_key = unassigned_key

    def aggregate(self, entries: Iterable[SegmentEntry]) -> Dict[str, SegmentSummary]:
        """
        Un résumé par clé de segment, dans l'ordre de première apparition.

        Segments absents de l'entrée → absents de la sortie (jamais de
        segment à zéro réponse).
        """
        groups: Dict[str, List[SegmentEntry]] = {}
        labels: Dict[str, Optional[str]] = {}

        for entry in entries:
            key = entry.segment_key or self.unassigned_key
            groups.setdefault(key, []).append(entry)
            if not labels.get(key) and entry.segment_label:
                labels[key] = entry.segment_label

        return {key: self._summarize(key, labels.get(key), members) for key, members in groups.items()}

    def _summarize(self, key: str, label: Optional[str], members: List[SegmentEntry]) -> SegmentSummary:
        scores = [e.overall_score for e in members if e.overall_score is not None]
        completed = sum(
            1 for e in members
            if e.completion_pct is not None and e.completion_pct >= self.completion_threshold
        )
        return SegmentSummary(
            segment_key=key,
            segment_label=label,
            respondent_count=len(members),
            scored_count=len(scores),
            avg_score=mean_or_none(scores),
            completion_rate=percentage(completed, len(members)),
            band_distribution=self.distribution.aggregate_bands(scores),
        )


def build_segment_entries(
    scored: Iterable[Tuple[Response, Optional[ResponseScoreSet]]],
    key_field: str = "managerId",
    label_field: Optional[str] = "managerName",
) -> List[SegmentEntry]:
    """(réponse, scores) → SegmentEntry. La clé est lue dans response.metadata."""
    entries = []
    for response, score_set in scored:
        key = response.metadata.get(key_field)
        label = response.metadata.get(label_field) if label_field else None
        entries.append(SegmentEntry(
            segment_key=str(key) if key not in (None, "") else None,
            overall_score=score_set.overall_score if score_set else None,
            completion_pct=response.completion_percentage,
            segment_label=label,
        ))
    return entries
