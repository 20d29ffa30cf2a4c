"""
Gemeinsame Testdaten für die E-Learning Test-Suite.

Author: DSP Development Team
Version: 1.0.0
"""

from decimal import Decimal

from django.contrib.auth.models import User

from elearning.models import (
    Course,
    CourseTest,
    Enrollment,
    QuestionType,
    TestQuestion,
    TestQuestionOption,
)

PASSWORD = "Musterpassword"


def create_learner(username="max", **extra):
    extra.setdefault("email", f"{username}@test.com")
    return User.objects.create_user(username=username, password=PASSWORD, **extra)


def create_staff(username="admin"):
    return create_learner(username, is_staff=True)


def create_course(title="Python Grundlagen"):
    return Course.objects.create(title=title, category="Python", difficulty="Beginner")


def enroll(learner, course, progress=100):
    return Enrollment.objects.create(learner=learner, course=course, progress=Decimal(progress))


def create_test(course, passing_score=70, **extra):
    return CourseTest.objects.create(
        course=course, title=f"Abschlusstest {course.title}", passing_score=passing_score, **extra
    )


def add_choice_question(test, points=10, option_count=4, correct_index=0, order=0):
    """Legt eine Multiple-Choice-Frage an und gibt (Frage, Optionen) zurück."""
    question = TestQuestion.objects.create(
        test=test,
        question_text=f"Frage {order}",
        question_type=QuestionType.MULTIPLE_CHOICE,
        points=points,
        order=order,
    )
    options = [
        TestQuestionOption.objects.create(
            question=question,
            option_text=chr(ord("A") + i),
            is_correct=(i == correct_index),
            order=i,
        )
        for i in range(option_count)
    ]
    return question, options


def add_short_answer_question(test, points=5, order=0):
    return TestQuestion.objects.create(
        test=test,
        question_text="Erklären Sie den Begriff Closure.",
        question_type=QuestionType.SHORT_ANSWER,
        points=points,
        order=order,
    )
