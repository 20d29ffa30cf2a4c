"""
E-Learning Certificates Package

Zertifikate pro Lernendem und Kurs: Ausstellung, öffentliche Verifizierung,
Widerruf und Erneuerung durch Administratoren.
"""
