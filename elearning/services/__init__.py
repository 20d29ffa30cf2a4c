"""
E-Learning Services Package für DSP (Digital Solutions Platform)

Dieses Paket enthält die Services des Prüfungs- und Zertifikatssystems:
- Enrollment Services (Kursfortschritt, Kursabschluss)
- Eligibility Services (Zulassung zum Testversuch)
- Attempt Services (Zustandsautomat der Testversuche)
- Scoring Services (Bewertung)
- Certificate Services (Ausstellung, Verifizierung)
- Activity Services (Aktivitätsverlauf)

Struktur:
├── enrollment/       # Schnittstelle zum Einschreibungssystem
├── eligibility/      # Zulassungsprüfung
├── attempts/         # Start, Antworten, Abgabe, Abbruch
├── scoring/          # Reine Bewertungslogik
├── certificates/     # Zertifikatsausstellung
├── activity/         # Aktivitätsprotokoll
└── exceptions.py     # Fehlerhierarchie und DRF-Exception-Handler

Author: DSP Development Team
Version: 1.0.0
"""

# Enrollment Services
from .enrollment import EnrollmentService, EnrollmentSnapshot

# Scoring Services
from .scoring import ScoringEngine, ScoreResult, QuestionResult

# Eligibility Services
from .eligibility import EligibilityGate, EligibilityDecision

# Certificate Services
from .certificates import CertificateIssuer, IssuanceResult

# Activity Services
from .activity import ActivityRecorder, ActivityStats

# Attempt Services
from .attempts import AttemptService, StartResult, FinalizeResult

__all__ = [
    # Enrollment
    "EnrollmentService",
    "EnrollmentSnapshot",
    # Scoring
    "ScoringEngine",
    "ScoreResult",
    "QuestionResult",
    # Eligibility
    "EligibilityGate",
    "EligibilityDecision",
    # Certificates
    "CertificateIssuer",
    "IssuanceResult",
    # Activity
    "ActivityRecorder",
    "ActivityStats",
    # Attempts
    "AttemptService",
    "StartResult",
    "FinalizeResult",
]
