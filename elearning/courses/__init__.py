"""
E-Learning Courses Package

Kurse und Einschreibungen, auf die das Prüfungssystem zugreift
(Kursfortschritt, Abschlussstatus).
"""
