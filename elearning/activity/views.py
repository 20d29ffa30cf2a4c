"""
Activity Views für DSP E-Learning Platform

- GET /api/elearning/activities/mine/?limit=10 - Letzte Aktivitäten
- GET /api/elearning/activities/stats/ - Aktivitätsstatistik

Author: DSP Development Team
Version: 1.0.0
"""

import logging

from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from ..services.activity import ActivityRecorder
from .serializers import ActivityLogSerializer

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class MyActivitiesView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", DEFAULT_LIMIT))
        except (TypeError, ValueError):
            limit = DEFAULT_LIMIT
        limit = max(1, min(limit, MAX_LIMIT))

        activities = ActivityRecorder().recent_for_learner(request.user, limit)
        return Response(
            {
                "success": True,
                "data": {"activities": ActivityLogSerializer(activities, many=True).data},
            }
        )


class MyActivityStatsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        stats = ActivityRecorder().stats_for_learner(request.user)
        return Response({"success": True, "data": stats.to_dict()})
