# seed/golden_survey.py
"""
Jeu de données de référence ("golden") pour l'analytics.

Format identique au JSON stocké (clés camelCase). Sert de fixture aux
tests et de payload de démonstration pour POST /analytics/report.

Contenu :
    12 questions :
        q1-q10  → Likert 5 points, 2 par catégorie
        q9, q10 → burnout inversé via optionScores ('Strongly Agree' → 1)
        q11     → checkbox non scorable
        q12     → textarea non scorable

    5 catégories, 5 plages de score (bandes canoniques 0-39 … 85-100)

    10 réponses, 2 managers :
        mgr-001 Alice → scores globaux 88, 90, 94, 88, 88  (moyenne 89.6)
        mgr-002 Bob   → scores globaux 50, 42, 52, 42, 60  (moyenne 49.2)

Usage :
    from app.seed.golden_survey import golden_payload
"""
from copy import deepcopy
from typing import Dict, List

GOLDEN_SURVEY_ID = "golden-test-survey-001"

AGREEMENT = {"Strongly Disagree": 1, "Disagree": 2, "Neutral": 3, "Agree": 4, "Strongly Agree": 5}
AGREEMENT_REVERSED = {"Strongly Agree": 1, "Agree": 2, "Neutral": 3, "Disagree": 4, "Strongly Disagree": 5}

SA, A, N, D, SD = "Strongly Agree", "Agree", "Neutral", "Disagree", "Strongly Disagree"


def _likert(question_id: str, text: str, category: str, scores: Dict[str, int]) -> Dict:
    return {
        "id": question_id,
        "type": "likert",
        "question": text,
        "required": True,
        "likertPoints": 5,
        "scorable": True,
        "scoringCategory": category,
        "scoreWeight": 1,
        "optionScores": dict(scores),
    }


GOLDEN_QUESTIONS: List[Dict] = [
    _likert("q1", "I feel motivated to do my best work.", "engagement", AGREEMENT),
    _likert("q2", "I am proud to work for this organization.", "engagement", AGREEMENT),
    _likert("q3", "My manager provides clear expectations.", "leadership-effectiveness", AGREEMENT),
    _likert("q4", "I trust my manager to support me.", "leadership-effectiveness", AGREEMENT),
    _likert("q5", "I can speak up without fear of negative consequences.", "psychological-safety", AGREEMENT),
    _likert("q6", "It is safe to take risks on this team.", "psychological-safety", AGREEMENT),
    _likert("q7", "I have enough energy for my work.", "team-wellbeing", AGREEMENT),
    _likert("q8", "My workload is manageable.", "team-wellbeing", AGREEMENT),
    _likert("q9", "I feel emotionally drained after work.", "burnout-risk", AGREEMENT_REVERSED),
    _likert("q10", "I feel burnt out from my job.", "burnout-risk", AGREEMENT_REVERSED),
    {
        "id": "q11",
        "type": "checkbox",
        "question": "What factors impact your wellbeing? (Select all)",
        "required": False,
        "options": ["Workload", "Manager support", "Team dynamics", "Remote work"],
        "scorable": False,
    },
    {
        "id": "q12",
        "type": "textarea",
        "question": "Any additional comments?",
        "required": False,
        "scorable": False,
    },
]

GOLDEN_SCORE_CONFIG: Dict = {
    "enabled": True,
    "categories": [
        {"id": "engagement", "name": "Engagement Energy"},
        {"id": "leadership-effectiveness", "name": "Leadership Effectiveness"},
        {"id": "psychological-safety", "name": "Psychological Safety"},
        {"id": "team-wellbeing", "name": "Team Wellbeing"},
        {"id": "burnout-risk", "name": "Burnout Risk"},
    ],
    "scoreRanges": [
        {"id": "critical", "min": 0, "max": 39, "label": "Critical",
         "interpretation": "Critical - immediate attention needed"},
        {"id": "needs-improvement", "min": 40, "max": 54, "label": "Needs Improvement",
         "interpretation": "Needs improvement - meaningful risk areas"},
        {"id": "developing", "min": 55, "max": 69, "label": "Developing",
         "interpretation": "Developing - foundations present"},
        {"id": "effective", "min": 70, "max": 84, "label": "Effective",
         "interpretation": "Effective - healthy range"},
        {"id": "highly-effective", "min": 85, "max": 100, "label": "Highly Effective",
         "interpretation": "Highly effective - consistently strong"},
    ],
}

# (id, manager, q1..q10, q11, q12, créée, complétée, durée ms)
_ROWS = [
    ("resp-001", "mgr-001", (SA, SA, A, A, SA, A, A, A, SD, D), ["Workload"], "Great job!",
     "2025-01-15T09:50:00Z", "2025-01-15T10:00:00Z", 600000),
    ("resp-002", "mgr-001", (A, SA, SA, A, A, SA, SA, A, D, SD), ["Manager support"], "",
     "2025-01-15T10:45:00Z", "2025-01-15T11:00:00Z", 900000),
    ("resp-003", "mgr-001", (SA, A, A, SA, SA, SA, A, SA, SD, SD), ["Team dynamics"], "Keep it up!",
     "2025-01-15T11:48:00Z", "2025-01-15T12:00:00Z", 720000),
    ("resp-004", "mgr-001", (A, A, SA, SA, A, A, SA, SA, D, D), ["Remote work"], "",
     "2025-01-15T12:50:00Z", "2025-01-15T13:00:00Z", 600000),
    ("resp-005", "mgr-001", (SA, SA, A, A, SA, A, A, A, SD, D), ["Workload", "Manager support"], "Excellent!",
     "2025-01-15T13:45:00Z", "2025-01-15T14:00:00Z", 900000),
    ("resp-006", "mgr-002", (N, D, N, D, N, N, N, D, A, A), ["Workload"], "Needs work",
     "2025-01-16T09:50:00Z", "2025-01-16T10:00:00Z", 600000),
    ("resp-007", "mgr-002", (D, N, D, N, D, D, D, N, SA, SA), ["Manager support"], "",
     "2025-01-16T10:45:00Z", "2025-01-16T11:00:00Z", 900000),
    ("resp-008", "mgr-002", (N, N, N, D, N, N, N, D, A, A), ["Team dynamics"], "",
     "2025-01-16T11:48:00Z", "2025-01-16T12:00:00Z", 720000),
    ("resp-009", "mgr-002", (D, D, D, N, D, D, D, N, SA, A), ["Remote work"], "Struggling",
     "2025-01-16T12:50:00Z", "2025-01-16T13:00:00Z", 600000),
    ("resp-010", "mgr-002", (N, N, N, N, N, N, N, N, N, N), ["Workload", "Team dynamics"], "",
     "2025-01-16T13:45:00Z", "2025-01-16T14:00:00Z", 900000),
]

_MANAGER_NAMES = {"mgr-001": "Alice Manager", "mgr-002": "Bob Manager"}

GOLDEN_RESPONSES: List[Dict] = []
for _id, _manager, _likerts, _factors, _comment, _created, _completed, _duration in _ROWS:
    _answers = {f"q{i + 1}": value for i, value in enumerate(_likerts)}
    _answers["q11"] = _factors
    _answers["q12"] = _comment
    GOLDEN_RESPONSES.append({
        "id": _id,
        "surveyId": GOLDEN_SURVEY_ID,
        "answers": _answers,
        "metadata": {"managerId": _manager, "managerName": _MANAGER_NAMES[_manager]},
        "completionPercentage": 100,
        "createdAt": _created,
        "completedAt": _completed,
        "totalDurationMs": _duration,
    })


# ── Accès ─────────────────────────────────────────────────────────────────────
# Copies profondes : un test qui modifie la fixture n'affecte pas les autres.

def golden_questions() -> List[Dict]:
    return deepcopy(GOLDEN_QUESTIONS)


def golden_score_config() -> Dict:
    return deepcopy(GOLDEN_SCORE_CONFIG)


def golden_responses() -> List[Dict]:
    return deepcopy(GOLDEN_RESPONSES)


def golden_survey() -> Dict:
    return {
        "id": GOLDEN_SURVEY_ID,
        "title": "Golden Analytics Test Survey",
        "questions": golden_questions(),
        "scoreConfig": golden_score_config(),
    }


def golden_payload() -> Dict:
    """Corps de requête complet pour les endpoints /analytics."""
    return {"survey": golden_survey(), "responses": golden_responses()}
