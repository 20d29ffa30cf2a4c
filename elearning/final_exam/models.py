from django.db import models
from django.db.models import Q
from django.conf import settings
from django.utils.translation import gettext_lazy as _
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone
import datetime

from ..courses.models import Course

User = settings.AUTH_USER_MODEL


class QuestionType(models.TextChoices):
    MULTIPLE_CHOICE = "multiple_choice", _("Multiple Choice")
    TRUE_FALSE = "true_false", _("Wahr/Falsch")
    SHORT_ANSWER = "short_answer", _("Kurzantwort")


# Fragetypen, die über Antwortoptionen automatisch bewertet werden
CHOICE_QUESTION_TYPES = frozenset({QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE})


class CourseTest(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="tests")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    instructions = models.TextField(blank=True)
    passing_score = models.PositiveSmallIntegerField(
        default=70,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text=_("Mindestpunktzahl in Prozent (0-100) zum Bestehen."),
    )
    time_limit_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Optionales Zeitlimit in Minuten."),
    )
    max_attempts = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Optionale maximale Anzahl abgeschlossener Versuche."),
    )
    is_active = models.BooleanField(default=True)
    order = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Course Test")
        verbose_name_plural = _("Course Tests")
        ordering = ["course", "order"]
        db_table = "elearning_course_test"
        constraints = [
            models.CheckConstraint(
                condition=Q(passing_score__gte=0) & Q(passing_score__lte=100),
                name="course_test_passing_score_range",
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.course.title})"

    def active_questions(self):
        return (
            self.questions.filter(is_active=True)
            .prefetch_related("options")
            .order_by("order", "id")
        )


class TestQuestion(models.Model):
    test = models.ForeignKey(CourseTest, on_delete=models.CASCADE, related_name="questions")
    question_text = models.TextField()
    question_type = models.CharField(
        max_length=20, choices=QuestionType.choices, default=QuestionType.MULTIPLE_CHOICE
    )
    points = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    is_active = models.BooleanField(default=True)
    order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Test Question")
        verbose_name_plural = _("Test Questions")
        ordering = ["test", "order"]
        db_table = "elearning_test_question"

    def __str__(self):
        return f"Q{self.order}: {self.question_text[:40]}"

    @property
    def is_auto_gradable(self) -> bool:
        return self.question_type in CHOICE_QUESTION_TYPES


class TestQuestionOption(models.Model):
    question = models.ForeignKey(
        TestQuestion, on_delete=models.CASCADE, related_name="options"
    )
    option_text = models.CharField(max_length=500)
    is_correct = models.BooleanField(default=False)
    order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Answer Option")
        verbose_name_plural = _("Answer Options")
        ordering = ["question", "order"]
        db_table = "elearning_test_question_option"

    def __str__(self):
        return f"{self.option_text[:40]}{' ✓' if self.is_correct else ''}"


class TestAttempt(models.Model):
    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", _("In Bearbeitung")
        COMPLETED = "completed", _("Abgeschlossen")
        ABANDONED = "abandoned", _("Abgebrochen")

    test = models.ForeignKey(CourseTest, on_delete=models.CASCADE, related_name="attempts")
    learner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="test_attempts")
    attempt_number = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.CharField(
        max_length=15, choices=Status.choices, default=Status.IN_PROGRESS
    )
    started_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    total_points = models.PositiveIntegerField(default=0)
    earned_points = models.PositiveIntegerField(default=0)
    score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Ergebnis in Prozent. Erst nach Abschluss gesetzt."),
    )
    time_taken_minutes = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        verbose_name = _("Test Attempt")
        verbose_name_plural = _("Test Attempts")
        ordering = ["-started_at"]
        db_table = "elearning_test_attempt"
        constraints = [
            models.UniqueConstraint(
                fields=["learner", "test", "attempt_number"],
                name="uniq_attempt_number_per_learner_test",
            ),
            models.UniqueConstraint(
                fields=["learner", "test"],
                condition=Q(status="in_progress"),
                name="uniq_open_attempt_per_learner_test",
            ),
        ]
        indexes = [
            models.Index(fields=["learner", "test", "status"], name="attempt_learner_test_status"),
        ]

    @property
    def due_at(self):
        if self.started_at and self.test and self.test.time_limit_minutes:
            return self.started_at + datetime.timedelta(minutes=self.test.time_limit_minutes)
        return None

    @property
    def remaining_minutes(self):
        due = self.due_at
        if due and self.status == self.Status.IN_PROGRESS:
            return max(0, int((due - timezone.now()).total_seconds() // 60))
        return None

    @property
    def is_passed(self) -> bool:
        if self.status != self.Status.COMPLETED or self.score is None:
            return False
        if self.total_points == 0:
            return self.test.passing_score <= 0
        # Ganzzahlig vergleichen, der gespeicherte Prozentwert ist gerundet
        return self.earned_points * 100 >= self.test.passing_score * self.total_points

    def __str__(self):
        return f"Attempt #{self.attempt_number} for {self.test.title} by {self.learner}"


class TestAnswer(models.Model):
    attempt = models.ForeignKey(TestAttempt, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey(TestQuestion, on_delete=models.CASCADE, related_name="answers")
    selected_option = models.ForeignKey(
        TestQuestionOption,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    answer_text = models.TextField(blank=True)
    # Während der Bearbeitung nur Anzeige-Status; bei Abgabe neu berechnet.
    is_correct = models.BooleanField(default=False)
    points_earned = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Test Answer")
        verbose_name_plural = _("Test Answers")
        ordering = ["attempt", "question__order"]
        db_table = "elearning_test_answer"
        constraints = [
            models.UniqueConstraint(
                fields=["attempt", "question"], name="uniq_answer_per_attempt_question"
            ),
        ]

    def __str__(self):
        return f"Answer to {self.question_id} in attempt {self.attempt_id}"
