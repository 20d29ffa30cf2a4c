"""
Activity Recorder für DSP E-Learning Platform

Schreibt den Aktivitätsverlauf der Lernenden (Test versucht, Test bestanden,
Zertifikat erhalten). Die Protokollierung ist best-effort: ein Fehler beim
Schreiben wird geloggt, aber nie an den Aufrufer weitergereicht und macht
keine bereits abgeschlossene Geschäftsoperation rückgängig.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from ...activity.models import ActivityLog
from ...certificates.models import Certificate
from ...final_exam.models import CourseTest, TestAttempt
from ..scoring import whole_percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivityStats:
    total_activities: int
    total_points: int
    recent_activity_count: int
    activities_by_type: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalActivities": self.total_activities,
            "totalPoints": self.total_points,
            "recentActivityCount": self.recent_activity_count,
            "activitiesByType": dict(self.activities_by_type),
        }


def time_ago(moment, now=None) -> str:
    """Menschlich lesbare Altersangabe, z.B. '3 hours ago'."""
    now = now or timezone.now()
    seconds = int((now - moment).total_seconds())

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        value, unit = seconds // 60, "minute"
    elif seconds < 86400:
        value, unit = seconds // 3600, "hour"
    elif seconds < 2592000:
        value, unit = seconds // 86400, "day"
    else:
        value, unit = seconds // 2592000, "month"
    return f"{value} {unit}{'s' if value > 1 else ''} ago"


class ActivityRecorder:
    """Service für den Aktivitätsverlauf der Lernenden."""

    def __init__(self):
        self.logger = logger

    def record(
        self,
        learner,
        activity_type: str,
        title: str,
        description: str = "",
        course_id: Optional[int] = None,
        test_id: Optional[int] = None,
        points_earned: int = 0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[ActivityLog]:
        """
        Legt einen Eintrag an. Gibt None zurück, wenn das Schreiben fehlschlägt.
        """
        try:
            with transaction.atomic():
                entry = ActivityLog.objects.create(
                    learner=learner,
                    activity_type=activity_type,
                    title=title,
                    description=description,
                    course_id=course_id,
                    test_id=test_id,
                    points_earned=points_earned,
                    metadata=metadata or {},
                )
        except Exception:
            self.logger.exception(
                f"Aktivität '{activity_type}' für Lernenden {learner.pk} konnte nicht gespeichert werden"
            )
            return None
        return entry

    def record_test_result(self, learner, test: CourseTest, attempt: TestAttempt, correct_answers: int, total_questions: int) -> Optional[ActivityLog]:
        passed = attempt.is_passed
        rounded = whole_percent(attempt.score or 0)
        verb = "Passed" if passed else "Attempted"
        return self.record(
            learner,
            ActivityLog.ActivityType.TEST_PASSED if passed else ActivityLog.ActivityType.TEST_ATTEMPTED,
            title=f"{verb} {test.title}",
            description=f"{verb} {test.title} with {rounded}% score",
            course_id=test.course_id,
            test_id=test.pk,
            points_earned=(
                settings.ACTIVITY_POINTS_TEST_PASSED
                if passed
                else settings.ACTIVITY_POINTS_TEST_ATTEMPTED
            ),
            metadata={
                "testTitle": test.title,
                "score": rounded,
                "passingScore": test.passing_score,
                "isPassed": passed,
                "correctAnswers": correct_answers,
                "totalQuestions": total_questions,
                "attemptNumber": attempt.attempt_number,
            },
        )

    def record_certificate_earned(self, learner, certificate: Certificate) -> Optional[ActivityLog]:
        course_name = (certificate.metadata or {}).get("courseName", "")
        return self.record(
            learner,
            ActivityLog.ActivityType.CERTIFICATE_EARNED,
            title=f"Earned certificate for {course_name}",
            description=f"Certificate {certificate.certificate_number} issued",
            course_id=certificate.course_id,
            points_earned=settings.ACTIVITY_POINTS_CERTIFICATE_EARNED,
            metadata={
                "certificateNumber": certificate.certificate_number,
                "verificationCode": certificate.verification_code,
            },
        )

    def recent_for_learner(self, learner, limit: int = 10) -> List[ActivityLog]:
        return list(
            ActivityLog.objects.filter(learner=learner)
            .select_related("course", "test")
            .order_by("-created_at", "-id")[:limit]
        )

    def stats_for_learner(self, learner) -> ActivityStats:
        entries = ActivityLog.objects.filter(learner=learner)
        by_type = {
            row["activity_type"]: row["count"]
            for row in entries.values("activity_type").annotate(count=Count("id")).order_by()
        }
        since = timezone.now() - timedelta(days=7)
        return ActivityStats(
            total_activities=entries.count(),
            total_points=entries.aggregate(total=Sum("points_earned"))["total"] or 0,
            recent_activity_count=entries.filter(created_at__gte=since).count(),
            activities_by_type=by_type,
        )
