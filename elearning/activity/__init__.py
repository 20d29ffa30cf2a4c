"""
E-Learning Activity Package

Aktivitätsverlauf der Lernenden (Testversuche, bestandene Tests, Zertifikate).
"""
