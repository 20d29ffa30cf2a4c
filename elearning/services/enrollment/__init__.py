"""
Enrollment Services Package für DSP E-Learning Platform

Schnittstelle zum Einschreibungs-/Fortschrittssystem:
- Einschreibung eines Lernenden lesen
- Kurs nach bestandenem Test als abgeschlossen markieren

Author: DSP Development Team
Version: 1.0.0
"""

from .enrollment_service import EnrollmentService, EnrollmentSnapshot

__all__ = ["EnrollmentService", "EnrollmentSnapshot"]
