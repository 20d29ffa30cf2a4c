"""
E-Learning Package - DSP (Digital Solutions Platform)

Dieses Paket enthält das Prüfungs- und Zertifikatssystem der E-Learning-Plattform.
Lernende legen Kursabschlusstests ab und erhalten nach bestandenem Test
ein öffentlich verifizierbares Zertifikat.

Features:
- Zulassungsprüfung vor dem Testversuch
- Testversuche mit Fortsetzung, Zwischenspeicherung und Abgabe
- Deterministische Bewertung
- Idempotente Zertifikatsausstellung
- Aktivitätsverlauf und Statistik

Struktur:
- courses/: Kurse und Einschreibungen
- final_exam/: Tests, Fragen, Versuche und Antworten
- certificates/: Kurszertifikate
- activity/: Aktivitätsverlauf
- services/: Geschäftslogik
- management/: Django Management Commands

Author: DSP Development Team
Created: 10.07.2025
Version: 1.0.0
"""
