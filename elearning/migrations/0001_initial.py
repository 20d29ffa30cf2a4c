import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(help_text="The unique title of the course", max_length=255, unique=True, verbose_name="Course Title")),
                ("category", models.CharField(blank=True, max_length=100, verbose_name="Category")),
                ("difficulty", models.CharField(blank=True, max_length=50, verbose_name="Difficulty")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Course",
                "verbose_name_plural": "Courses",
                "db_table": "elearning_course",
                "ordering": ["title"],
            },
        ),
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("active", "Aktiv"), ("completed", "Abgeschlossen"), ("dropped", "Abgebrochen")], default="active", max_length=15)),
                ("progress", models.DecimalField(decimal_places=2, default=0, help_text="Course completion in percent (0-100).", max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)], verbose_name="Progress")),
                ("test_passed", models.BooleanField(default=False, verbose_name="Test Passed")),
                ("enrolled_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="enrollments", to="elearning.course", verbose_name="Course")),
                ("learner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="enrollments", to=settings.AUTH_USER_MODEL, verbose_name="Learner")),
            ],
            options={
                "verbose_name": "Enrollment",
                "verbose_name_plural": "Enrollments",
                "db_table": "elearning_enrollment",
                "ordering": ["-enrolled_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("learner", "course"), name="uniq_enrollment_learner_course"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CourseTest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("instructions", models.TextField(blank=True)),
                ("passing_score", models.PositiveSmallIntegerField(default=70, help_text="Mindestpunktzahl in Prozent (0-100) zum Bestehen.", validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ("time_limit_minutes", models.PositiveIntegerField(blank=True, help_text="Optionales Zeitlimit in Minuten.", null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ("max_attempts", models.PositiveIntegerField(blank=True, help_text="Optionale maximale Anzahl abgeschlossener Versuche.", null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ("is_active", models.BooleanField(default=True)),
                ("order", models.PositiveSmallIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="tests", to="elearning.course")),
            ],
            options={
                "verbose_name": "Course Test",
                "verbose_name_plural": "Course Tests",
                "db_table": "elearning_course_test",
                "ordering": ["course", "order"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("passing_score__gte", 0), ("passing_score__lte", 100)), name="course_test_passing_score_range"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TestQuestion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("question_text", models.TextField()),
                ("question_type", models.CharField(choices=[("multiple_choice", "Multiple Choice"), ("true_false", "Wahr/Falsch"), ("short_answer", "Kurzantwort")], default="multiple_choice", max_length=20)),
                ("points", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("is_active", models.BooleanField(default=True)),
                ("order", models.PositiveSmallIntegerField(default=0)),
                ("test", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="questions", to="elearning.coursetest")),
            ],
            options={
                "verbose_name": "Test Question",
                "verbose_name_plural": "Test Questions",
                "db_table": "elearning_test_question",
                "ordering": ["test", "order"],
            },
        ),
        migrations.CreateModel(
            name="TestQuestionOption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("option_text", models.CharField(max_length=500)),
                ("is_correct", models.BooleanField(default=False)),
                ("order", models.PositiveSmallIntegerField(default=0)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="options", to="elearning.testquestion")),
            ],
            options={
                "verbose_name": "Answer Option",
                "verbose_name_plural": "Answer Options",
                "db_table": "elearning_test_question_option",
                "ordering": ["question", "order"],
            },
        ),
        migrations.CreateModel(
            name="TestAttempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("attempt_number", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("status", models.CharField(choices=[("in_progress", "In Bearbeitung"), ("completed", "Abgeschlossen"), ("abandoned", "Abgebrochen")], default="in_progress", max_length=15)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("earned_points", models.PositiveIntegerField(default=0)),
                ("score", models.DecimalField(blank=True, decimal_places=2, help_text="Ergebnis in Prozent. Erst nach Abschluss gesetzt.", max_digits=5, null=True)),
                ("time_taken_minutes", models.PositiveIntegerField(blank=True, null=True)),
                ("learner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="test_attempts", to=settings.AUTH_USER_MODEL)),
                ("test", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attempts", to="elearning.coursetest")),
            ],
            options={
                "verbose_name": "Test Attempt",
                "verbose_name_plural": "Test Attempts",
                "db_table": "elearning_test_attempt",
                "ordering": ["-started_at"],
                "indexes": [
                    models.Index(fields=["learner", "test", "status"], name="attempt_learner_test_status"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("learner", "test", "attempt_number"), name="uniq_attempt_number_per_learner_test"),
                    models.UniqueConstraint(condition=models.Q(("status", "in_progress")), fields=("learner", "test"), name="uniq_open_attempt_per_learner_test"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TestAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("answer_text", models.TextField(blank=True)),
                ("is_correct", models.BooleanField(default=False)),
                ("points_earned", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("attempt", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="answers", to="elearning.testattempt")),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="answers", to="elearning.testquestion")),
                ("selected_option", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="elearning.testquestionoption")),
            ],
            options={
                "verbose_name": "Test Answer",
                "verbose_name_plural": "Test Answers",
                "db_table": "elearning_test_answer",
                "ordering": ["attempt", "question__order"],
                "constraints": [
                    models.UniqueConstraint(fields=("attempt", "question"), name="uniq_answer_per_attempt_question"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Certificate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("certificate_number", models.CharField(max_length=100, unique=True, verbose_name="Certificate Number")),
                ("verification_code", models.CharField(help_text="Public token used to verify the certificate", max_length=50, unique=True, verbose_name="Verification Code")),
                ("issued_date", models.DateTimeField(default=django.utils.timezone.now, verbose_name="Issued")),
                ("expiry_date", models.DateTimeField(blank=True, null=True, verbose_name="Expires")),
                ("is_valid", models.BooleanField(default=True, verbose_name="Valid")),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="certificates", to="elearning.course", verbose_name="Course")),
                ("learner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="certificates", to=settings.AUTH_USER_MODEL, verbose_name="Learner")),
                ("test_attempt", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="certificates", to="elearning.testattempt", verbose_name="Qualifying Attempt")),
            ],
            options={
                "verbose_name": "Certificate",
                "verbose_name_plural": "Certificates",
                "db_table": "elearning_certificate",
                "ordering": ["-issued_date"],
                "indexes": [
                    models.Index(fields=["is_valid"], name="certificate_is_valid"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("learner", "course"), name="uniq_certificate_learner_course"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("activity_type", models.CharField(choices=[("enrollment", "Enrollment"), ("chapter_completed", "Chapter completed"), ("course_completed", "Course completed"), ("test_attempted", "Test attempted"), ("test_passed", "Test passed"), ("certificate_earned", "Certificate earned")], max_length=30)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("points_earned", models.IntegerField(default=0)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("course", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="elearning.course")),
                ("learner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="activities", to=settings.AUTH_USER_MODEL, verbose_name="Learner")),
                ("test", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="elearning.coursetest")),
            ],
            options={
                "verbose_name": "Activity Log",
                "verbose_name_plural": "Activity Logs",
                "db_table": "elearning_activity_log",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["learner", "created_at"], name="activity_learner_created"),
                    models.Index(fields=["activity_type"], name="activity_type_idx"),
                ],
            },
        ),
    ]
