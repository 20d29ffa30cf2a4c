"""
E-Learning Final Exam Package - DSP (Digital Solutions Platform)

Dieses Paket enthält die Module für Kursabschlusstests im E-Learning-System.

Features:
- Tests mit Fragen und Antwortoptionen je Kurs
- Testversuche mit Fortsetzung, Zwischenspeicherung und Abgabe
- Automatische Bewertung für Multiple Choice und Wahr/Falsch
- Lernenden- und Admin-spezifische Views

Struktur:
- models.py: Datenmodelle für Tests, Fragen, Versuche und Antworten
- serializers.py: API-Serialisierung für Prüfungsdaten
- views/: Lernenden- und Admin-Views

Author: DSP Development Team
Created: 10.07.2025
Version: 1.0.0
"""
