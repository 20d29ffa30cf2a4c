"""
Activity Services Package für DSP E-Learning Platform

Author: DSP Development Team
Version: 1.0.0
"""

from .activity_recorder import ActivityRecorder, ActivityStats, time_ago

__all__ = ["ActivityRecorder", "ActivityStats", "time_ago"]
