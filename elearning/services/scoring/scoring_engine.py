"""
Scoring Engine für DSP E-Learning Platform

Reine Bewertungsfunktion: Ergebnis hängt ausschließlich von Fragen,
Korrektheit der Antwortoptionen und den eingereichten Auswahlen ab. Keine
Datenbankzugriffe, keine Zeit- oder Reihenfolgeabhängigkeit; eine erneute
Bewertung (z.B. für ein Audit) liefert dasselbe Ergebnis.

Regeln:
- score = earned / total * 100, bei total == 0 ist score 0
- bestanden, wenn score >= passing_score (Grenze inklusive)
- fehlende oder ungültige Auswahl zählt als falsch, ohne Fehler
- Kurzantworten bringen automatisch 0 Punkte und werden als
  "manuelle Bewertung erforderlich" markiert, sofern kein manueller
  Bewerter übergeben wurde

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple

from ...final_exam.models import CHOICE_QUESTION_TYPES, TestQuestion
from ..exceptions import InconsistentQuestionSetException

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class GradableOption:
    id: int
    text: str
    is_correct: bool


@dataclass(frozen=True)
class GradableQuestion:
    id: int
    question_type: str
    points: int
    options: Tuple[GradableOption, ...] = ()

    @property
    def is_auto_gradable(self) -> bool:
        return self.question_type in CHOICE_QUESTION_TYPES

    @classmethod
    def from_model(cls, question: TestQuestion) -> "GradableQuestion":
        # options müssen vorab per prefetch_related geladen sein
        return cls(
            id=question.pk,
            question_type=question.question_type,
            points=question.points,
            options=tuple(
                GradableOption(id=o.pk, text=o.option_text, is_correct=o.is_correct)
                for o in question.options.all()
            ),
        )


@dataclass(frozen=True)
class QuestionResult:
    question_id: int
    points_possible: int
    points_earned: int
    is_correct: bool
    answered: bool
    selected_option_id: Optional[int] = None
    answer_text: str = ""
    requires_manual_grading: bool = False


@dataclass(frozen=True)
class ScoreResult:
    per_question: Tuple[QuestionResult, ...]
    total_points: int
    earned_points: int
    score_percent: Decimal
    passing_score: int
    is_passed: bool

    @property
    def correct_answers(self) -> int:
        return sum(1 for r in self.per_question if r.is_correct)

    @property
    def pending_manual_grading(self) -> int:
        return sum(1 for r in self.per_question if r.requires_manual_grading)

    @property
    def incorrect_answers(self) -> int:
        return len(self.per_question) - self.correct_answers - self.pending_manual_grading


# Erweiterungspunkt: (Frage, Antworttext) -> vergebene Punkte oder None (noch offen)
ManualGrader = Callable[[GradableQuestion, str], Optional[int]]


def score_percent(earned_points: int, total_points: int) -> Decimal:
    """Prozentwert mit zwei Nachkommastellen; 0 bei total_points == 0."""
    if total_points <= 0:
        return Decimal("0.00")
    return (Decimal(earned_points) * 100 / Decimal(total_points)).quantize(
        TWO_PLACES, rounding=ROUND_HALF_UP
    )


def whole_percent(score) -> int:
    """Ganzzahliger Prozentwert, .5 wird aufgerundet."""
    return int(Decimal(str(score)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_passing(earned_points: int, total_points: int, passing_score: int) -> bool:
    """Bestehensregel mit inklusiver Grenze, exakt auf ganzzahliger Basis."""
    if total_points <= 0:
        return 0 >= passing_score
    return earned_points * 100 >= passing_score * total_points


def _normalize_choices(submitted_choices: Optional[Mapping[Any, Any]]) -> dict:
    # JSON-Payloads liefern Frage-IDs als Strings
    if not submitted_choices:
        return {}
    return {str(key): value for key, value in submitted_choices.items()}


def _parse_option_id(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ScoringEngine:
    """
    Bewertet eine Menge von Fragen gegen die eingereichten Auswahlen.

    Args:
        manual_grader: Optionaler Bewerter für nicht automatisch bewertbare
            Fragetypen (Kurzantwort). Ohne Bewerter bleiben diese offen.
    """

    def __init__(self, manual_grader: Optional[ManualGrader] = None):
        self.manual_grader = manual_grader
        self.logger = logger

    @staticmethod
    def prepare(questions: Iterable[TestQuestion]) -> Tuple[GradableQuestion, ...]:
        return tuple(GradableQuestion.from_model(q) for q in questions)

    def score(
        self,
        questions: Iterable[GradableQuestion],
        submitted_choices: Optional[Mapping[Any, Any]],
        passing_score: int,
    ) -> ScoreResult:
        """
        Bewertet alle Fragen.

        Args:
            questions: Aktive Fragen des Tests
            submitted_choices: Mapping Frage-ID -> Options-ID (bzw. Text bei Kurzantworten)
            passing_score: Bestehensgrenze in Prozent

        Returns:
            ScoreResult mit Einzelergebnissen, Punkten und Bestehensentscheidung

        Raises:
            InconsistentQuestionSetException: Frage mit Punktwert < 1
        """
        choices = _normalize_choices(submitted_choices)
        results = []
        total_points = 0
        earned_points = 0

        for question in questions:
            if question.points is None or question.points < 1:
                raise InconsistentQuestionSetException(
                    f"Question {question.id} has an invalid point value",
                    details={"question_id": question.id, "points": question.points},
                )
            total_points += question.points
            raw = choices.get(str(question.id))

            if question.is_auto_gradable:
                result = self._grade_choice(question, raw)
            else:
                result = self._grade_manual(question, raw)
            earned_points += result.points_earned
            results.append(result)

        return ScoreResult(
            per_question=tuple(results),
            total_points=total_points,
            earned_points=earned_points,
            score_percent=score_percent(earned_points, total_points),
            passing_score=passing_score,
            is_passed=is_passing(earned_points, total_points, passing_score),
        )

    def _grade_choice(self, question: GradableQuestion, raw: Any) -> QuestionResult:
        option_id = _parse_option_id(raw)
        selected = next((o for o in question.options if o.id == option_id), None)
        if selected is None:
            return QuestionResult(
                question_id=question.id,
                points_possible=question.points,
                points_earned=0,
                is_correct=False,
                answered=False,
            )
        return QuestionResult(
            question_id=question.id,
            points_possible=question.points,
            points_earned=question.points if selected.is_correct else 0,
            is_correct=selected.is_correct,
            answered=True,
            selected_option_id=selected.id,
            answer_text=selected.text,
        )

    def _grade_manual(self, question: GradableQuestion, raw: Any) -> QuestionResult:
        text = raw.strip() if isinstance(raw, str) else ""
        awarded = self.manual_grader(question, text) if self.manual_grader else None
        if awarded is None:
            return QuestionResult(
                question_id=question.id,
                points_possible=question.points,
                points_earned=0,
                is_correct=False,
                answered=bool(text),
                answer_text=text,
                requires_manual_grading=True,
            )
        awarded = max(0, min(int(awarded), question.points))
        return QuestionResult(
            question_id=question.id,
            points_possible=question.points,
            points_earned=awarded,
            is_correct=awarded == question.points,
            answered=bool(text),
            answer_text=text,
        )
