"""
E-Learning Final Exam Views Package - DSP (Digital Solutions Platform)

Dieses Paket enthält alle Views für das Prüfungssystem.

Features:
- Lernenden-Views: Zulassung, Start, Antworten, Abgabe, Verlauf
- Admin-Views: Abbruch und Neubewertung von Versuchen
- Rollenbasierte Zugriffskontrolle

Author: DSP Development Team
Created: 10.07.2025
Version: 1.0.0
"""

from .student_views import *
from .admin_views import *
