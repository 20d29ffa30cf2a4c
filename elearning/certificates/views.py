"""
Certificate Views für DSP E-Learning Platform

API-Endpoints für Kurszertifikate:
- GET  /api/elearning/certificates/mine/ - Zertifikate des Lernenden
- GET  /api/elearning/certificates/<pk>/ - Einzelnes Zertifikat
- POST /api/elearning/certificates/generate/ - Ausstellung für bestandenen Versuch
- GET  /api/elearning/certificates/verify/<code>/ - Öffentliche Verifizierung
- GET  /api/elearning/certificates/all/ - Alle Zertifikate (Admin)
- POST /api/elearning/certificates/<pk>/revoke/ - Sperren (Admin)
- POST /api/elearning/certificates/<pk>/renew/ - Erneuern (Admin)

Author: DSP Development Team
Version: 1.0.0
"""

import logging

from rest_framework import generics, permissions, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from ..services.attempts import AttemptService
from ..services.certificates import CertificateIssuer
from ..services.exceptions import NotFoundException
from .models import Certificate
from .serializers import (
    AdminCertificateSerializer,
    CertificateSerializer,
    GenerateCertificateSerializer,
)

logger = logging.getLogger(__name__)


class CertificatePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


class MyCertificatesView(generics.ListAPIView):
    serializer_class = CertificateSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Certificate.objects.filter(learner=self.request.user).select_related("course")


class CertificateDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        certificate = (
            Certificate.objects.select_related("course")
            .filter(pk=pk, learner=request.user)
            .first()
        )
        if certificate is None:
            raise NotFoundException("Certificate not found")
        return Response({"success": True, "data": CertificateSerializer(certificate).data})


class GenerateCertificateView(APIView):
    """Idempotente Ausstellung für einen bestandenen Versuch."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = GenerateCertificateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        issuance = AttemptService().issue_certificate_for_attempt(
            request.user, serializer.validated_data["attempt_id"]
        )
        return Response(
            {
                "success": True,
                "message": "Certificate generated" if issuance.created else "Certificate already exists",
                "data": CertificateSerializer(issuance.certificate).data,
            },
            status=status.HTTP_201_CREATED if issuance.created else status.HTTP_200_OK,
        )


class VerifyCertificateView(APIView):
    """Öffentliche Verifizierung, keine Authentifizierung erforderlich."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, code):
        return Response({"success": True, "data": CertificateIssuer().verify(code)})


class AllCertificatesView(generics.ListAPIView):
    serializer_class = AdminCertificateSerializer
    permission_classes = [permissions.IsAdminUser]
    pagination_class = CertificatePagination

    def get_queryset(self):
        queryset = Certificate.objects.select_related("course", "learner").order_by("-issued_date", "-id")
        is_valid = self.request.query_params.get("is_valid")
        if is_valid is not None:
            queryset = queryset.filter(is_valid=is_valid.lower() in ("1", "true", "yes"))
        return queryset


class RevokeCertificateView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, pk):
        certificate = CertificateIssuer().revoke(pk)
        logger.info(f"Zertifikat {certificate.certificate_number} von {request.user} gesperrt")
        return Response(
            {
                "success": True,
                "message": "Certificate revoked",
                "data": AdminCertificateSerializer(certificate).data,
            }
        )


class RenewCertificateView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, pk):
        certificate = CertificateIssuer().renew(pk)
        logger.info(f"Zertifikat {certificate.certificate_number} von {request.user} erneuert")
        return Response(
            {
                "success": True,
                "message": "Certificate renewed",
                "data": AdminCertificateSerializer(certificate).data,
            }
        )
