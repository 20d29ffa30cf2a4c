from rest_framework import serializers

# Angepasste Importe
from .models import CourseTest, TestQuestion, TestQuestionOption, TestAttempt, TestAnswer


class OptionSerializer(serializers.ModelSerializer):
    """Antwortoption ohne Korrektheits-Flag (Ansicht für Lernende)."""

    class Meta:
        model = TestQuestionOption
        fields = ["id", "option_text", "order"]


class StaffOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = TestQuestionOption
        fields = ["id", "option_text", "order", "is_correct"]


class QuestionSerializer(serializers.ModelSerializer):
    options = OptionSerializer(many=True, read_only=True)

    class Meta:
        model = TestQuestion
        fields = ["id", "question_text", "question_type", "points", "order", "options"]


class StaffQuestionSerializer(QuestionSerializer):
    options = StaffOptionSerializer(many=True, read_only=True)


class CourseTestSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True)

    class Meta:
        model = CourseTest
        fields = [
            "id",
            "course",
            "course_title",
            "title",
            "description",
            "instructions",
            "passing_score",
            "time_limit_minutes",
            "max_attempts",
        ]


class TestAttemptSerializer(serializers.ModelSerializer):
    test_title = serializers.CharField(source="test.title", read_only=True)
    passing_score = serializers.IntegerField(source="test.passing_score", read_only=True)
    is_passed = serializers.BooleanField(read_only=True)
    remaining_minutes = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = TestAttempt
        fields = [
            "id",
            "test",
            "test_title",
            "attempt_number",
            "status",
            "started_at",
            "completed_at",
            "total_points",
            "earned_points",
            "score",
            "passing_score",
            "is_passed",
            "time_taken_minutes",
            "remaining_minutes",
        ]
        read_only_fields = fields


class TestAnswerSerializer(serializers.ModelSerializer):
    class Meta:
        model = TestAnswer
        fields = ["id", "question", "selected_option", "answer_text", "updated_at"]
        read_only_fields = fields


class CompletedAnswerSerializer(serializers.ModelSerializer):
    """Endgültige Antwort eines abgeschlossenen Versuchs."""

    class Meta:
        model = TestAnswer
        fields = ["id", "question", "selected_option", "answer_text", "is_correct", "points_earned"]
        read_only_fields = fields


class TestAttemptDetailSerializer(TestAttemptSerializer):
    answers = serializers.SerializerMethodField()

    class Meta(TestAttemptSerializer.Meta):
        fields = TestAttemptSerializer.Meta.fields + ["answers"]
        read_only_fields = fields

    def get_answers(self, obj):
        answers = obj.answers.all().order_by("question__order", "question_id")
        # Zwischengespeicherte Korrektheit ist nicht verbindlich
        if obj.status == TestAttempt.Status.COMPLETED:
            return CompletedAnswerSerializer(answers, many=True).data
        return TestAnswerSerializer(answers, many=True).data


class SubmitAnswerSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    selected_option_id = serializers.IntegerField(required=False, allow_null=True)
    answer_text = serializers.CharField(required=False, allow_blank=True, max_length=5000)


class FinalizeAttemptSerializer(serializers.Serializer):
    # Frage-ID -> Options-ID (bzw. Text bei Kurzantworten)
    answers = serializers.DictField(child=serializers.JSONField(allow_null=True), required=False, default=dict)
