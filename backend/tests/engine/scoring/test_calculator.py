# tests/engine/scoring/test_calculator.py
"""
Tests unitaires pour engine.scoring.calculator.CategoryScoreCalculator

Couverture :
    - Scoring désactivé / absent → None
    - Likert via optionScores, items inversés
    - Arrondi demi supérieur du score normalisé (72.5 → 73)
    - Réponses absentes, vides, libellé inconnu → ignorées
    - Catégorie inconnue, question non scorable → ignorées
    - Catégorie sans réponse → omise (pas de zéro)
    - Échelles numériques (rating, slider) sans optionScores
    - Valeurs non finies ("nan", "inf", "1e999") → réponse ignorée
    - Checkbox : somme des options, maximum = options positives
    - scoreWeight, poids de catégorie dans le score global
    - Bande + interprétation, absentes sans plages configurées
    - Jeu golden : scores globaux par réponse
"""
import pytest

from app.engine.scoring.calculator import CategoryScoreCalculator
from app.engine.scoring.models import Answer
from tests.conftest import make_question, make_response, make_score_config

pytestmark = pytest.mark.engine

calculator = CategoryScoreCalculator()


# ── Activation ────────────────────────────────────────────────────────────────

class TestActivation:
    def test_config_absente(self):
        assert calculator.compute([make_question()], {"q1": "Agree"}, None) is None

    def test_config_desactivee(self):
        config = make_score_config(enabled=False)
        assert calculator.compute([make_question()], {"q1": "Agree"}, config) is None

    def test_config_sans_categorie_donne_ensemble_vide(self):
        config = make_score_config(categories=[])
        result = calculator.compute([make_question()], {"q1": "Agree"}, config)
        assert result.is_empty
        assert result.overall_score is None


# ── Likert & optionScores ─────────────────────────────────────────────────────

class TestLikertScoring:
    def setup_method(self):
        self.config = make_score_config()
        self.questions = [make_question("q1"), make_question("q2")]

    def test_normalisation(self):
        result = calculator.compute(self.questions, {"q1": "Strongly Agree", "q2": "Agree"}, self.config)
        score = result.categories["engagement"]
        assert score.raw_score == 9
        assert score.max_score == 10
        assert score.normalized_score == 90

    def test_item_inverse(self):
        reversed_scores = {"Strongly Agree": 1, "Agree": 2, "Neutral": 3, "Disagree": 4, "Strongly Disagree": 5}
        questions = [make_question("q1", option_scores=reversed_scores)]
        result = calculator.compute(questions, {"q1": "Strongly Disagree"}, self.config)
        assert result.categories["engagement"].normalized_score == 100

    def test_arrondi_demi_superieur(self):
        # 29 / 40 = 72.5 % → 73 (round() Python donnerait 72)
        questions = [make_question(f"q{i}") for i in range(1, 9)]
        answers = {f"q{i}": "Agree" for i in range(1, 7)}
        answers["q7"] = "Neutral"
        answers["q8"] = "Disagree"
        result = calculator.compute(questions, answers, self.config)
        assert result.categories["engagement"].raw_score == 29
        assert result.categories["engagement"].normalized_score == 73

    def test_reponse_absente_ignoree(self):
        result = calculator.compute(self.questions, {"q1": "Agree"}, self.config)
        # q2 non répondue : ni points ni maximum
        assert result.categories["engagement"].max_score == 5
        assert result.categories["engagement"].normalized_score == 80

    def test_reponse_vide_ignoree(self):
        result = calculator.compute(self.questions, {"q1": "Agree", "q2": ""}, self.config)
        assert result.categories["engagement"].max_score == 5

    def test_libelle_inconnu_ignore(self):
        result = calculator.compute(self.questions, {"q1": "Agree", "q2": "Peut-être"}, self.config)
        assert result.categories["engagement"].max_score == 5

    def test_aucune_reponse_categorie_omise(self):
        result = calculator.compute(self.questions, {}, self.config)
        assert "engagement" not in result.categories
        assert result.overall_score is None


# ── Filtrage des questions ────────────────────────────────────────────────────

class TestFiltrage:
    def test_categorie_inconnue_ignoree(self):
        config = make_score_config()
        questions = [make_question("q1"), make_question("q2", category="fantome")]
        result = calculator.compute(questions, {"q1": "Agree", "q2": "Agree"}, config)
        assert list(result.categories) == ["engagement"]
        assert result.categories["engagement"].max_score == 5

    def test_question_non_scorable_ignoree(self):
        config = make_score_config()
        questions = [make_question("q1"), make_question("q2", scorable=False)]
        result = calculator.compute(questions, {"q1": "Agree", "q2": "Strongly Agree"}, config)
        assert result.categories["engagement"].max_score == 5

    def test_ordre_des_categories_de_la_config(self):
        config = make_score_config(categories=["wellbeing", "engagement"])
        questions = [make_question("q1", category="engagement"), make_question("q2", category="wellbeing")]
        result = calculator.compute(questions, {"q1": "Agree", "q2": "Agree"}, config)
        assert list(result.categories) == ["wellbeing", "engagement"]


# ── Échelles numériques ───────────────────────────────────────────────────────

class TestScaleScoring:
    def test_rating_numerique(self):
        config = make_score_config()
        question = make_question("q1", type="rating", option_scores={}, ratingScale=10)
        result = calculator.compute([question], {"q1": 7}, config)
        assert result.categories["engagement"].normalized_score == 70

    def test_rating_en_texte(self):
        config = make_score_config()
        question = make_question("q1", type="rating", option_scores={}, ratingScale=5)
        result = calculator.compute([question], {"q1": "4"}, config)
        assert result.categories["engagement"].normalized_score == 80

    def test_slider_utilise_max(self):
        config = make_score_config()
        question = make_question("q1", type="slider", option_scores={}, min=0, max=200)
        result = calculator.compute([question], {"q1": 50}, config)
        assert result.categories["engagement"].normalized_score == 25

    @pytest.mark.parametrize("raw", ["nan", "NaN", "inf", "-inf", "1e999", float("nan"), float("inf")])
    def test_valeur_non_finie_ignoree(self, raw):
        config = make_score_config()
        question = make_question("q1", type="rating", option_scores={}, ratingScale=5)
        result = calculator.compute([question], {"q1": raw}, config)
        assert result.is_empty
        assert result.overall_score is None

    def test_valeur_non_finie_sans_effet_sur_les_autres(self):
        config = make_score_config()
        questions = [
            make_question("q1", type="rating", option_scores={}, ratingScale=5),
            make_question("q2", type="rating", option_scores={}, ratingScale=5),
        ]
        score = calculator.compute(questions, {"q1": "inf", "q2": "2"}, config).categories["engagement"]
        assert score.raw_score == 2
        assert score.max_score == 5
        assert score.normalized_score == 40

    def test_texte_libre_sans_echelle_ignore(self):
        config = make_score_config()
        question = make_question("q1", type="text", option_scores={})
        result = calculator.compute([question], {"q1": "bonjour"}, config)
        assert result.is_empty


# ── Checkbox ──────────────────────────────────────────────────────────────────

class TestMultiSelect:
    def setup_method(self):
        self.config = make_score_config()
        self.question = make_question(
            "q1", type="checkbox",
            option_scores={"A": 2, "B": 3, "C": 5, "Aucun": -1},
        )

    def test_somme_des_options(self):
        result = calculator.compute([self.question], {"q1": ["A", "C"]}, self.config)
        score = result.categories["engagement"]
        assert score.raw_score == 7
        assert score.max_score == 10      # options positives uniquement
        assert score.normalized_score == 70

    def test_score_negatif_borne_a_zero(self):
        result = calculator.compute([self.question], {"q1": ["Aucun"]}, self.config)
        assert result.categories["engagement"].normalized_score == 0

    def test_options_inconnues_ignorees(self):
        result = calculator.compute([self.question], {"q1": ["X", "Y"]}, self.config)
        assert result.is_empty

    def test_liste_vide_non_repondue(self):
        result = calculator.compute([self.question], {"q1": []}, self.config)
        assert result.is_empty

    def test_answer_deja_etiquetee(self):
        result = calculator.compute([self.question], {"q1": Answer.multi(["B"])}, self.config)
        assert result.categories["engagement"].raw_score == 3


# ── Poids ─────────────────────────────────────────────────────────────────────

class TestPoids:
    def test_score_weight_question(self):
        config = make_score_config()
        questions = [make_question("q1", scoreWeight=3), make_question("q2")]
        # (5×3 + 1×1) / (5×3 + 5×1) = 16/20 = 80 %
        result = calculator.compute(questions, {"q1": "Strongly Agree", "q2": "Strongly Disagree"}, config)
        assert result.categories["engagement"].normalized_score == 80

    def test_poids_categorie_dans_global(self):
        config = make_score_config(categories=[
            {"id": "a", "name": "A", "weight": 3},
            {"id": "b", "name": "B", "weight": 1},
        ])
        questions = [make_question("q1", category="a"), make_question("q2", category="b")]
        result = calculator.compute(questions, {"q1": "Strongly Agree", "q2": "Strongly Disagree"}, config)
        # (100×3 + 20×1) / 4 = 80
        assert result.overall_score == 80

    def test_global_moyenne_simple_par_defaut(self):
        config = make_score_config(categories=["a", "b"])
        questions = [make_question("q1", category="a"), make_question("q2", category="b")]
        result = calculator.compute(questions, {"q1": "Strongly Agree", "q2": "Agree"}, config)
        assert result.overall_score == 90


# ── Bandes ────────────────────────────────────────────────────────────────────

class TestBandes:
    def test_bande_et_interpretation(self):
        config = make_score_config()
        result = calculator.compute([make_question()], {"q1": "Agree"}, config)
        score = result.categories["engagement"]
        assert score.band.id == "effective"
        assert score.interpretation == "Effective - healthy range"

    def test_sans_plages_pas_de_bande(self):
        config = make_score_config(ranges=[])
        result = calculator.compute([make_question()], {"q1": "Agree"}, config)
        score = result.categories["engagement"]
        assert score.normalized_score == 80
        assert score.band is None
        assert score.interpretation is None

    def test_score_dans_un_trou(self):
        config = make_score_config(ranges=[
            {"id": "low", "min": 0, "max": 50, "label": "Low"},
            {"id": "high", "min": 90, "max": 100, "label": "High"},
        ])
        result = calculator.compute([make_question()], {"q1": "Agree"}, config)
        assert result.categories["engagement"].band is None


# ── Jeu golden ────────────────────────────────────────────────────────────────

class TestGolden:
    def test_scores_globaux_par_reponse(self, golden_question_set, golden_config, golden_response_set):
        results = calculator.score_all(golden_response_set, golden_question_set, golden_config)
        assert [r.overall_score for r in results] == [88, 90, 94, 88, 88, 50, 42, 52, 42, 60]

    def test_detail_premiere_reponse(self, golden_question_set, golden_config, golden_response_set):
        result = calculator.score_response(golden_response_set[0], golden_question_set, golden_config)
        assert result.scores == {
            "engagement": 100,
            "leadership-effectiveness": 80,
            "psychological-safety": 90,
            "team-wellbeing": 80,
            "burnout-risk": 90,
        }
        assert result.response_id == "resp-001"

    def test_questions_non_scorables_sans_effet(self, golden_question_set, golden_config, golden_response_set):
        response = golden_response_set[0]
        sans_q11 = {k: v for k, v in response.answers.items() if k not in ("q11", "q12")}
        result = calculator.compute(golden_question_set, sans_q11, golden_config)
        assert result.overall_score == 88
