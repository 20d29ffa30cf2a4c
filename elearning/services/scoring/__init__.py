"""
Scoring Services Package für DSP E-Learning Platform

Deterministische Bewertung von Testversuchen (Multiple Choice, Wahr/Falsch)
mit Erweiterungspunkt für manuell bewertete Kurzantworten.

Author: DSP Development Team
Version: 1.0.0
"""

from .scoring_engine import (
    GradableOption,
    GradableQuestion,
    QuestionResult,
    ScoreResult,
    ScoringEngine,
    is_passing,
    score_percent,
    whole_percent,
)

__all__ = [
    "GradableOption",
    "GradableQuestion",
    "QuestionResult",
    "ScoreResult",
    "ScoringEngine",
    "is_passing",
    "score_percent",
    "whole_percent",
]
