"""
Eligibility Services Package für DSP E-Learning Platform

Zulassungsprüfung vor dem Start eines Testversuchs und vor dem Abruf der Fragen.

Author: DSP Development Team
Version: 1.0.0
"""

from .eligibility_gate import EligibilityDecision, EligibilityGate

__all__ = ["EligibilityDecision", "EligibilityGate"]
