# app/shared/enums.py
"""
Toutes les énumérations du moteur d'analytics.

Source unique de vérité pour les types de questions, bandes, tendances
et niveaux d'alerte. Importé par l'engine, les schemas et les services.
"""

from enum import Enum


class QuestionType(str, Enum):
    LIKERT          = "likert"
    RATING          = "rating"
    OPINION_SCALE   = "opinion_scale"
    SLIDER          = "slider"
    NPS             = "nps"
    NUMBER          = "number"
    EMOJI_RATING    = "emoji_rating"
    MULTIPLE_CHOICE = "multiple_choice"
    DROPDOWN        = "dropdown"
    YES_NO          = "yes_no"
    IMAGE_CHOICE    = "image_choice"
    CHECKBOX        = "checkbox"
    TEXT            = "text"
    TEXTAREA        = "textarea"
    # Types structurels, jamais répondus
    SECTION         = "section"
    STATEMENT       = "statement"
    LEGAL           = "legal"
    HIDDEN          = "hidden"


class AnswerKind(str, Enum):
    SINGLE = "single"   # un libellé d'option
    MULTI  = "multi"    # sélection multiple (checkbox)
    OTHER  = "other"    # nombre, booléen, objet JSON…


class BandId(str, Enum):
    CRITICAL          = "critical"
    NEEDS_IMPROVEMENT = "needs-improvement"
    DEVELOPING        = "developing"
    EFFECTIVE         = "effective"
    HIGHLY_EFFECTIVE  = "highly-effective"


class BandSeverity(str, Enum):
    CRITICAL  = "critical"
    WARNING   = "warning"
    NEUTRAL   = "neutral"
    GOOD      = "good"
    EXCELLENT = "excellent"


class TrendDirection(str, Enum):
    UP      = "up"
    DOWN    = "down"
    NEUTRAL = "neutral"


class OverallTrend(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    MIXED    = "mixed"
    STABLE   = "stable"


class VersionOrdering(str, Enum):
    VERSION_NUMBER = "version_number"   # ordre explicite (défaut)
    CREATED_AT     = "created_at"       # chronologique, sur demande uniquement


class TrendGranularity(str, Enum):
    DAILY   = "daily"
    WEEKLY  = "weekly"
    MONTHLY = "monthly"


class WarningSeverity(str, Enum):
    ERROR   = "error"
    WARNING = "warning"
    INFO    = "info"


class WarningCode(str, Enum):
    NO_RESPONSES         = "no-responses"
    LOW_RESPONSES        = "low-responses"
    SCORING_DISABLED     = "scoring-disabled"
    MISCONFIGURED        = "misconfigured"
    UNMAPPED_CATEGORIES  = "unmapped-categories"
    NO_SCORE_RANGES      = "no-score-ranges"
    INVALID_SCORE_RANGES = "invalid-score-ranges"
    NO_SCORED_RESPONSES  = "no-scored-responses"
    SINGLE_VERSION       = "single-version"
    NO_SEGMENTS          = "no-segments"
