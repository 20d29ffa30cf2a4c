from decimal import Decimal

from django.test import SimpleTestCase

from elearning.models import QuestionType
from elearning.services.exceptions import InconsistentQuestionSetException
from elearning.services.scoring import (
    GradableOption,
    GradableQuestion,
    ScoringEngine,
    is_passing,
    score_percent,
    whole_percent,
)

"""
    Tests für die Bewertungslogik. Die Engine arbeitet ohne Datenbank.
"""


def choice_question(question_id, points=1, correct_option=None):
    correct_option = correct_option or question_id * 10
    return GradableQuestion(
        id=question_id,
        question_type=QuestionType.MULTIPLE_CHOICE,
        points=points,
        options=(
            GradableOption(id=correct_option, text="richtig", is_correct=True),
            GradableOption(id=correct_option + 1, text="falsch", is_correct=False),
        ),
    )


class ScoringEngineTests(SimpleTestCase):
    def setUp(self):
        self.engine = ScoringEngine()

    def test_all_correct_scores_hundred(self):
        questions = [choice_question(1, points=10)]
        result = self.engine.score(questions, {"1": 10}, passing_score=70)
        self.assertEqual(result.score_percent, Decimal("100.00"))
        self.assertTrue(result.is_passed)
        self.assertEqual(result.correct_answers, 1)
        self.assertEqual(result.incorrect_answers, 0)

    def test_passing_boundary_is_inclusive(self):
        questions = [choice_question(i) for i in range(1, 11)]
        seven_correct = {i: i * 10 for i in range(1, 8)}
        result = self.engine.score(questions, seven_correct, passing_score=70)
        self.assertEqual(result.score_percent, Decimal("70.00"))
        self.assertTrue(result.is_passed)

        six_correct = {i: i * 10 for i in range(1, 7)}
        result = self.engine.score(questions, six_correct, passing_score=70)
        self.assertFalse(result.is_passed)

    def test_pass_decision_not_affected_by_rounding(self):
        # 2 von 3 Punkten = 66.67 %, reicht nicht für 67 %
        questions = [choice_question(i) for i in range(1, 4)]
        result = self.engine.score(questions, {1: 10, 2: 20}, passing_score=67)
        self.assertEqual(result.score_percent, Decimal("66.67"))
        self.assertFalse(result.is_passed)
        self.assertTrue(self.engine.score(questions, {1: 10, 2: 20}, passing_score=66).is_passed)

    def test_zero_questions_score_zero(self):
        result = self.engine.score([], {}, passing_score=70)
        self.assertEqual(result.score_percent, Decimal("0.00"))
        self.assertEqual(result.total_points, 0)
        self.assertFalse(result.is_passed)
        self.assertTrue(self.engine.score([], {}, passing_score=0).is_passed)

    def test_missing_and_invalid_choices_count_as_incorrect(self):
        questions = [choice_question(1), choice_question(2), choice_question(3), choice_question(4)]
        # Option einer anderen Frage, kein Zahlwert, None, fehlt
        submitted = {"1": 20, "2": "abc", "3": None}
        result = self.engine.score(questions, submitted, passing_score=50)
        self.assertEqual(result.earned_points, 0)
        self.assertEqual(result.incorrect_answers, 4)
        self.assertTrue(all(not r.answered for r in result.per_question))

    def test_wrong_option_is_answered_but_incorrect(self):
        result = self.engine.score([choice_question(1, points=3)], {1: 11}, passing_score=50)
        item = result.per_question[0]
        self.assertTrue(item.answered)
        self.assertFalse(item.is_correct)
        self.assertEqual(item.selected_option_id, 11)
        self.assertEqual(item.answer_text, "falsch")
        self.assertEqual(item.points_earned, 0)

    def test_string_and_integer_keys_give_same_result(self):
        questions = [choice_question(1, points=2), choice_question(2, points=3)]
        as_int = self.engine.score(questions, {1: 10, 2: 21}, passing_score=40)
        as_str = self.engine.score(questions, {"1": "10", "2": "21"}, passing_score=40)
        self.assertEqual(as_int, as_str)

    def test_score_is_deterministic(self):
        questions = [choice_question(i, points=i) for i in range(1, 6)]
        submitted = {1: 10, 3: 30, 5: 51}
        first = self.engine.score(questions, submitted, passing_score=50)
        for _ in range(3):
            self.assertEqual(self.engine.score(questions, submitted, passing_score=50), first)

    def test_short_answer_requires_manual_grading(self):
        questions = [
            choice_question(1, points=5),
            GradableQuestion(id=2, question_type=QuestionType.SHORT_ANSWER, points=5),
        ]
        result = self.engine.score(questions, {1: 10, 2: "Eine Funktion mit Umgebung"}, passing_score=50)
        self.assertEqual(result.total_points, 10)
        self.assertEqual(result.earned_points, 5)
        self.assertEqual(result.pending_manual_grading, 1)
        self.assertEqual(result.incorrect_answers, 0)
        pending = result.per_question[1]
        self.assertTrue(pending.requires_manual_grading)
        self.assertEqual(pending.answer_text, "Eine Funktion mit Umgebung")

    def test_manual_grader_awards_points_within_bounds(self):
        grader = lambda question, text: 99 if text else None
        engine = ScoringEngine(manual_grader=grader)
        questions = [GradableQuestion(id=1, question_type=QuestionType.SHORT_ANSWER, points=4)]
        result = engine.score(questions, {1: "Antwort"}, passing_score=100)
        self.assertEqual(result.earned_points, 4)
        self.assertTrue(result.is_passed)
        self.assertEqual(result.pending_manual_grading, 0)

    def test_question_without_points_is_inconsistent(self):
        questions = [GradableQuestion(id=1, question_type=QuestionType.MULTIPLE_CHOICE, points=0)]
        with self.assertRaises(InconsistentQuestionSetException):
            self.engine.score(questions, {}, passing_score=70)


class PassRuleTests(SimpleTestCase):
    def test_score_percent_rounds_half_up(self):
        self.assertEqual(score_percent(1, 8), Decimal("12.50"))
        self.assertEqual(score_percent(1, 3), Decimal("33.33"))
        self.assertEqual(score_percent(2, 3), Decimal("66.67"))
        self.assertEqual(score_percent(0, 0), Decimal("0.00"))

    def test_is_passing(self):
        self.assertTrue(is_passing(7, 10, 70))
        self.assertFalse(is_passing(69, 100, 70))
        self.assertTrue(is_passing(0, 0, 0))
        self.assertFalse(is_passing(0, 0, 1))

    def test_whole_percent_rounds_half_up(self):
        self.assertEqual(whole_percent(score_percent(33, 40)), 83)
        self.assertEqual(whole_percent(Decimal("82.49")), 82)
        self.assertEqual(whole_percent(Decimal("0.50")), 1)
        self.assertEqual(whole_percent(0), 0)
