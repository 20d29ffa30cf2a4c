from rest_framework import serializers

from ..services.activity import time_ago
from .models import ActivityLog


class ActivityLogSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source="activity_type", read_only=True)
    time_ago = serializers.SerializerMethodField()
    course = serializers.SerializerMethodField()
    test = serializers.SerializerMethodField()

    class Meta:
        model = ActivityLog
        fields = [
            "id",
            "type",
            "title",
            "description",
            "time_ago",
            "points_earned",
            "course",
            "test",
            "metadata",
            "created_at",
        ]
        read_only_fields = fields

    def get_time_ago(self, obj):
        return time_ago(obj.created_at)

    def get_course(self, obj):
        if obj.course is None:
            return None
        return {
            "id": obj.course.pk,
            "title": obj.course.title,
            "category": obj.course.category,
            "difficulty": obj.course.difficulty,
        }

    def get_test(self, obj):
        if obj.test is None:
            return None
        return {"id": obj.test.pk, "title": obj.test.title, "passing_score": obj.test.passing_score}
