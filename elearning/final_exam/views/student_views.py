import logging

from rest_framework import permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response

# Angepasste Importe
from ...services.attempts import AttemptService
from ..serializers import (
    CourseTestSerializer,
    QuestionSerializer,
    StaffQuestionSerializer,
    TestAttemptSerializer,
    TestAttemptDetailSerializer,
    TestAnswerSerializer,
    SubmitAnswerSerializer,
    FinalizeAttemptSerializer,
)

logger = logging.getLogger(__name__)

__all__ = [
    "StartAttemptView",
    "TestQuestionsView",
    "TestEligibilityView",
    "TestHistoryView",
    "MyAttemptsView",
    "SubmitAnswerView",
    "FinalizeAttemptView",
    "AttemptDetailView",
]


class StartAttemptView(APIView):
    """Startet einen Testversuch oder setzt den offenen Versuch fort."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, test_id):
        result = AttemptService().start_attempt(request.user, test_id)
        return Response(
            {
                "success": True,
                "message": "Test attempt resumed" if result.resumed else "Test attempt started",
                "resumed": result.resumed,
                "data": TestAttemptSerializer(result.attempt).data,
            },
            status=status.HTTP_200_OK if result.resumed else status.HTTP_201_CREATED,
        )


class TestQuestionsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, test_id):
        test, questions = AttemptService().get_questions_for_attempt(request.user, test_id)
        serializer_class = StaffQuestionSerializer if request.user.is_staff else QuestionSerializer
        return Response(
            {
                "success": True,
                "data": {
                    "test": CourseTestSerializer(test).data,
                    "questions": serializer_class(questions, many=True).data,
                },
            }
        )


class TestEligibilityView(APIView):
    """Vorschau der Zulassungsprüfung ohne Seiteneffekte."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, test_id):
        service = AttemptService()
        test = service.gate.get_test(test_id)
        decision = service.gate.evaluate(request.user.pk, test)
        return Response({"success": True, "data": decision.to_dict()})


class TestHistoryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, test_id):
        test, attempts = AttemptService().test_history(request.user, test_id)
        return Response(
            {
                "success": True,
                "data": {
                    "test": CourseTestSerializer(test).data,
                    "attempts": TestAttemptSerializer(attempts, many=True).data,
                },
            }
        )


class MyAttemptsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        attempts = AttemptService().my_attempts(request.user)
        return Response({"success": True, "data": TestAttemptSerializer(attempts, many=True).data})


class SubmitAnswerView(APIView):
    """Zwischenspeichern einer Antwort während der Bearbeitung."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, attempt_id):
        serializer = SubmitAnswerSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        answer = AttemptService().submit_answer(
            request.user,
            attempt_id,
            serializer.validated_data["question_id"],
            selected_option_id=serializer.validated_data.get("selected_option_id"),
            answer_text=serializer.validated_data.get("answer_text"),
        )
        return Response({"success": True, "data": TestAnswerSerializer(answer).data})


class FinalizeAttemptView(APIView):
    """Abgabe und Bewertung eines Versuchs."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, attempt_id):
        serializer = FinalizeAttemptSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = AttemptService().finalize_attempt(
            request.user, attempt_id, serializer.validated_data["answers"]
        )
        return Response(
            {
                "success": True,
                "message": "Test passed" if result.passed else "Test submitted",
                "data": result.to_dict(),
            }
        )


class AttemptDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, attempt_id):
        attempt = AttemptService().get_attempt(request.user, attempt_id)
        return Response({"success": True, "data": TestAttemptDetailSerializer(attempt).data})
