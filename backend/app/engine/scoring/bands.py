# engine/scoring/bands.py
"""
Résolution des bandes de performance — ZÉRO accès DB.

Deux usages distincts :
- resolve()       : plages configurées par le survey (scoreRanges),
                    correspondance littérale min ≤ score ≤ max.
- resolve_index() : table canonique à 5 bandes, utilisée quand aucune
                    plage n'est configurée (distribution, leaderboard).

Le résolveur reçoit sa table à la construction : aucun état global.
"""
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from app.engine.scoring.models import ScoreRange
from app.engine.scoring.rounding import clamp, round_int
from app.shared.enums import BandId, BandSeverity

SCORE_MIN = 0
SCORE_MAX = 100


@dataclass(frozen=True)
class BandTable:
    ranges: Tuple[ScoreRange, ...]

    def __iter__(self) -> Iterator[ScoreRange]:
        return iter(self.ranges)

    def __len__(self) -> int:
        return len(self.ranges)

    def __getitem__(self, index: int) -> ScoreRange:
        return self.ranges[index]

    @property
    def ids(self) -> List[str]:
        return [r.id for r in self.ranges]


# ── Table canonique ───────────────────────────────────────────────────────────

CANONICAL_BANDS = BandTable((
    ScoreRange(
        id=BandId.CRITICAL.value, min=0, max=39, label="Critical",
        color="#ef4444", severity=BandSeverity.CRITICAL.value,
        interpretation="Action immédiate requise.",
    ),
    ScoreRange(
        id=BandId.NEEDS_IMPROVEMENT.value, min=40, max=54, label="Needs Improvement",
        color="#f97316", severity=BandSeverity.WARNING.value,
        interpretation="Axes d'amélioration significatifs.",
    ),
    ScoreRange(
        id=BandId.DEVELOPING.value, min=55, max=69, label="Developing",
        color="#f59e0b", severity=BandSeverity.NEUTRAL.value,
        interpretation="En progression, à consolider.",
    ),
    ScoreRange(
        id=BandId.EFFECTIVE.value, min=70, max=84, label="Effective",
        color="#84cc16", severity=BandSeverity.GOOD.value,
        interpretation="Bon niveau, quelques ajustements possibles.",
    ),
    ScoreRange(
        id=BandId.HIGHLY_EFFECTIVE.value, min=85, max=100, label="Highly Effective",
        color="#22c55e", severity=BandSeverity.EXCELLENT.value,
        interpretation="Excellence, à maintenir.",
    ),
))


class BandResolver:

    def __init__(self, table: BandTable = CANONICAL_BANDS):
        self.table = table

    def resolve(
        self,
        score: Optional[float],
        ranges: Optional[Sequence[ScoreRange]] = None,
    ) -> Optional[ScoreRange]:
        """
        Première plage (dans l'ordre donné) contenant le score.

        Aucun arrondi ni bornage : un score dans un trou entre deux
        plages, ou hors bornes, renvoie None.
        """
        if score is None:
            return None
        candidates = self.table.ranges if ranges is None else ranges
        for score_range in candidates:
            if score_range.contains(score):
                return score_range
        return None

    def resolve_index(self, score: float) -> int:
        """
        Index de la bande dans la table du résolveur.

        Le score est borné à [0, 100] puis arrondi à l'entier (demi supérieur)
        avant la recherche. -1 si la table ne couvre pas la valeur.
        """
        value = round_int(clamp(score, SCORE_MIN, SCORE_MAX))
        for index, score_range in enumerate(self.table):
            if score_range.contains(value):
                return index
        return -1

    def resolve_band(self, score: float) -> Optional[ScoreRange]:
        index = self.resolve_index(score)
        return self.table[index] if index >= 0 else None


def validate_score_ranges(
    ranges: Sequence[ScoreRange],
    lower: float = SCORE_MIN,
    upper: float = SCORE_MAX,
) -> List[str]:
    """
    Vérifie que les plages couvrent [lower, upper] sans trou ni chevauchement.

    Les scores normalisés étant entiers, deux plages sont contiguës quand
    min(n+1) == max(n) + 1. Returns: liste de problèmes (vide = OK).
    """
    if not ranges:
        return []

    problems = []
    ordered = sorted(ranges, key=lambda r: (r.min, r.max))

    if ordered[0].min > lower:
        problems.append(f"aucune plage ne couvre {lower:g}–{ordered[0].min - 1:g}")
    if ordered[-1].max < upper:
        problems.append(f"aucune plage ne couvre {ordered[-1].max + 1:g}–{upper:g}")

    for previous, current in zip(ordered, ordered[1:]):
        if current.min <= previous.max:
            problems.append(f"chevauchement entre '{previous.id}' et '{current.id}'")
        elif current.min > previous.max + 1:
            problems.append(
                f"trou entre '{previous.id}' (max {previous.max:g}) et '{current.id}' (min {current.min:g})"
            )
    return problems
