"""
Attempt Services Package für DSP E-Learning Platform

Author: DSP Development Team
Version: 1.0.0
"""

from .attempt_service import AttemptService, FinalizeResult, StartResult

__all__ = ["AttemptService", "FinalizeResult", "StartResult"]
