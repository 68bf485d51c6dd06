# engine/scoring/rounding.py
"""
Arrondis partagés par tout le moteur — ZÉRO accès DB.

Python arrondit "au pair" (round(2.5) == 2). Les scores affichés doivent
arrondir au demi supérieur (72.5 → 73), comme un tableur. Tout arrondi
de score passe par ici.
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Arrondi commercial : la moitié s'éloigne de zéro."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_int(value: float) -> int:
    return int(round_half_up(value, 0))


def round1(value: float) -> float:
    return round_half_up(value, 1)


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))


def percentage(part: float, total: float) -> float:
    """Pourcentage à 1 décimale. Total nul → 0.0 (jamais de division par zéro)."""
    if total <= 0:
        return 0.0
    return round1(part / total * 100)


def to_number(value: Any) -> Optional[float]:
    """Valeur numérique finie, ou None ('nan', 'inf', '1e999' ne sont pas des nombres)."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def mean_or_none(values) -> Optional[float]:
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)
