"""
E-Learning Application URL Configuration

This module defines the URL routing structure for the course test and
certification system. Each functional area has its own URL namespace.

URL Structure:
- /api/elearning/token/: Authentication endpoints (JWT token management)
- /api/elearning/exams/: Test taking (eligibility, start, answers, submit)
- /api/elearning/certificates/: Certificate listing, issuance and verification
- /api/elearning/activities/: Learner activity history and statistics

Author: DSP Development Team
Version: 1.0.0
"""

from typing import List
from django.urls import path, include, URLPattern
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

# Import der Views
from .final_exam import views as exam_views
from .certificates import views as certificate_views
from .activity import views as activity_views

app_name = 'elearning'

# --- Examination System URL Patterns ---

exams_urlpatterns: List[URLPattern] = [
    # Test endpoints
    path('tests/<int:test_id>/eligibility/', exam_views.TestEligibilityView.as_view(), name='test-eligibility'),
    path('tests/<int:test_id>/start/', exam_views.StartAttemptView.as_view(), name='start-attempt'),
    path('tests/<int:test_id>/questions/', exam_views.TestQuestionsView.as_view(), name='test-questions'),
    path('tests/<int:test_id>/history/', exam_views.TestHistoryView.as_view(), name='test-history'),
    path('my-attempts/', exam_views.MyAttemptsView.as_view(), name='my-attempts'),

    # Attempt execution endpoints
    path('attempts/<int:attempt_id>/', exam_views.AttemptDetailView.as_view(), name='attempt-detail'),
    path('attempts/<int:attempt_id>/answers/', exam_views.SubmitAnswerView.as_view(), name='submit-answer'),
    path('attempts/<int:attempt_id>/submit/', exam_views.FinalizeAttemptView.as_view(), name='submit-attempt'),

    # Administration endpoints (requires staff privileges)
    path('attempts/<int:attempt_id>/abandon/', exam_views.AbandonAttemptView.as_view(), name='abandon-attempt'),
    path('attempts/<int:attempt_id>/rescore/', exam_views.RescoreAttemptView.as_view(), name='rescore-attempt'),
]

# --- Certification URL Patterns ---

certificates_urlpatterns: List[URLPattern] = [
    path('mine/', certificate_views.MyCertificatesView.as_view(), name='my-certificates'),
    path('generate/', certificate_views.GenerateCertificateView.as_view(), name='generate-certificate'),
    # Public verification endpoint (no authentication required)
    path('verify/<str:code>/', certificate_views.VerifyCertificateView.as_view(), name='verify-certificate'),
    path('all/', certificate_views.AllCertificatesView.as_view(), name='all-certificates'),
    path('<int:pk>/', certificate_views.CertificateDetailView.as_view(), name='certificate-detail'),
    path('<int:pk>/revoke/', certificate_views.RevokeCertificateView.as_view(), name='revoke-certificate'),
    path('<int:pk>/renew/', certificate_views.RenewCertificateView.as_view(), name='renew-certificate'),
]

# --- Activity URL Patterns ---

activities_urlpatterns: List[URLPattern] = [
    path('mine/', activity_views.MyActivitiesView.as_view(), name='my-activities'),
    path('stats/', activity_views.MyActivityStatsView.as_view(), name='my-activity-stats'),
]

# --- Main URL Configuration for E-Learning Application ---

urlpatterns: List[URLPattern] = [
    # Authentication endpoints (JWT token management)
    path('token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    # Functional area URL includes with proper namespacing
    path('exams/', include((exams_urlpatterns, 'exams'))),
    path('certificates/', include((certificates_urlpatterns, 'certificates'))),
    path('activities/', include((activities_urlpatterns, 'activities'))),
]
