import logging

from rest_framework import permissions
from rest_framework.views import APIView
from rest_framework.response import Response

# Angepasste Importe
from ...services.attempts import AttemptService
from ..serializers import TestAttemptSerializer

logger = logging.getLogger(__name__)

__all__ = ["AbandonAttemptView", "RescoreAttemptView"]


class AbandonAttemptView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, attempt_id):
        attempt = AttemptService().abandon_attempt(attempt_id)
        logger.info(f"Versuch {attempt_id} von {request.user} abgebrochen")
        return Response(
            {
                "success": True,
                "message": "Test attempt abandoned",
                "data": TestAttemptSerializer(attempt).data,
            }
        )


class RescoreAttemptView(APIView):
    """Audit: Neubewertung eines abgeschlossenen Versuchs ohne Schreibzugriff."""

    permission_classes = [permissions.IsAdminUser]

    def get(self, request, attempt_id):
        return Response({"success": True, "data": AttemptService().rescore_attempt(attempt_id)})
