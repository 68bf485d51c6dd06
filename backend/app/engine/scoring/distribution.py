# engine/scoring/distribution.py
"""
Distribution des scores — ZÉRO accès DB.

Deux vues d'un même ensemble de scores 0-100 :
- aggregate()       : histogramme par tranches fixes + statistiques
- aggregate_bands() : comptage par bande de performance

Statistiques (numpy) :
    mean, median, std_dev arrondis à 1 décimale
    std_dev = écart-type de POPULATION (ddof=0) : l'ensemble des répondants
    est la population étudiée, pas un échantillon.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from app.engine.scoring.bands import BandResolver
from app.engine.scoring.models import ScoreRange
from app.engine.scoring.rounding import clamp, percentage, round1

STDDEV_DDOF = 0


@dataclass(frozen=True)
class Bucket:
    label: str
    min: float
    max: float      # borne haute incluse : un score appartient à la 1re tranche où score ≤ max


DEFAULT_BUCKETS: Tuple[Bucket, ...] = (
    Bucket("0-20", 0, 20),
    Bucket("21-40", 21, 40),
    Bucket("41-60", 41, 60),
    Bucket("61-80", 61, 80),
    Bucket("81-100", 81, 100),
)


# ── Résultats ─────────────────────────────────────────────────────────────────

@dataclass
class BucketCount:
    range: str
    min: float
    max: float
    count: int
    percentage: float


@dataclass
class DistributionStatistics:
    min: float
    max: float
    mean: float
    median: float
    std_dev: float


@dataclass
class DistributionResult:
    buckets: List[BucketCount]
    statistics: Optional[DistributionStatistics]    # None si aucun score
    total: int
    is_empty: bool

    def to_dict(self) -> Dict:
        stats = self.statistics
        return {
            "buckets": [b.__dict__.copy() for b in self.buckets],
            "statistics": stats.__dict__.copy() if stats else None,
            "total": self.total,
            "is_empty": self.is_empty,
        }


@dataclass
class BandCount:
    band_id: str
    label: str
    color: Optional[str]
    min_score: float
    max_score: float
    count: int
    percentage: float


@dataclass
class BandDistributionResult:
    bands: List[BandCount]
    total: int                  # scores reçus
    resolved: int               # scores tombés dans une bande
    is_empty: bool = field(default=False)

    @property
    def unresolved(self) -> int:
        return self.total - self.resolved

    def counts(self) -> Dict[str, int]:
        return {b.band_id: b.count for b in self.bands}

    def to_dict(self) -> Dict:
        return {
            "bands": [b.__dict__.copy() for b in self.bands],
            "total": self.total,
            "resolved": self.resolved,
            "unresolved": self.unresolved,
            "is_empty": self.is_empty,
        }


# ── Agrégateur ────────────────────────────────────────────────────────────────

class DistributionAggregator:

    def __init__(
        self,
        buckets: Sequence[Bucket] = DEFAULT_BUCKETS,
        resolver: Optional[BandResolver] = None,
        ddof: int = STDDEV_DDOF,
    ):
        if not buckets:
            raise ValueError("BUCKETS_EMPTY")
        self.buckets = tuple(buckets)
        self.resolver = resolver or BandResolver()
        self.ddof = ddof

    def aggregate(self, scores: Sequence[float]) -> DistributionResult:
        """
        Histogramme + statistiques.

        Les scores hors [0, 100] sont bornés avant affectation.
        Entrée vide → is_empty=True, statistics=None, tranches à zéro.
        """
        values = [clamp(float(s)) for s in scores if s is not None]
        counts = [0] * len(self.buckets)
        for value in values:
            counts[self._bucket_index(value)] += 1

        total = len(values)
        buckets = [
            BucketCount(
                range=bucket.label,
                min=bucket.min,
                max=bucket.max,
                count=count,
                percentage=percentage(count, total),
            )
            for bucket, count in zip(self.buckets, counts)
        ]
        return DistributionResult(
            buckets=buckets,
            statistics=self.statistics(values) if values else None,
            total=total,
            is_empty=total == 0,
        )

    def statistics(self, values: Sequence[float]) -> DistributionStatistics:
        arr = np.asarray(values, dtype=float)
        return DistributionStatistics(
            min=float(np.min(arr)),
            max=float(np.max(arr)),
            mean=round1(float(np.mean(arr))),
            median=round1(float(np.median(arr))),
            std_dev=round1(float(np.std(arr, ddof=self.ddof))) if len(arr) > self.ddof else 0.0,
        )

    def aggregate_bands(
        self,
        scores: Sequence[float],
        ranges: Optional[Sequence[ScoreRange]] = None,
    ) -> BandDistributionResult:
        """
        Comptage par bande, dans l'ordre de la table, bandes vides incluses.

        Sans `ranges` → table canonique du résolveur (score borné et arrondi).
        Avec `ranges` → plages du survey, correspondance littérale ; un score
        hors plages n'est compté nulle part. Pourcentages rapportés aux
        scores résolus.
        """
        values = [float(s) for s in scores if s is not None]
        table = list(self.resolver.table) if ranges is None else list(ranges)
        counts = {r.id: 0 for r in table}

        resolved = 0
        for value in values:
            if ranges is None:
                band = self.resolver.resolve_band(value)
            else:
                band = self.resolver.resolve(value, ranges)
            if band is None:
                continue
            counts[band.id] += 1
            resolved += 1

        bands = [
            BandCount(
                band_id=r.id,
                label=r.label,
                color=r.color,
                min_score=r.min,
                max_score=r.max,
                count=counts[r.id],
                percentage=percentage(counts[r.id], resolved),
            )
            for r in table
        ]
        return BandDistributionResult(
            bands=bands,
            total=len(values),
            resolved=resolved,
            is_empty=resolved == 0,
        )

    def _bucket_index(self, value: float) -> int:
        for index, bucket in enumerate(self.buckets):
            if value <= bucket.max:
                return index
        return len(self.buckets) - 1
