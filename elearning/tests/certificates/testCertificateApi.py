from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from elearning.models import Certificate, TestAttempt
from elearning.services.certificates import CertificateIssuer
from elearning.tests.helpers import create_course, create_learner, create_staff, create_test

BASE = "/api/elearning/certificates"


class CertificateApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.learner = create_learner(first_name="Max", last_name="Mustermann")
        cls.staff = create_staff()
        cls.course = create_course()
        cls.test = create_test(cls.course, passing_score=70)

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.learner)

    def completed_attempt(self, earned, number=1):
        return TestAttempt.objects.create(
            test=self.test,
            learner=self.learner,
            attempt_number=number,
            status=TestAttempt.Status.COMPLETED,
            total_points=10,
            earned_points=earned,
            score=Decimal(earned * 10),
        )

    def test_generate_for_passed_attempt_is_idempotent(self):
        attempt = self.completed_attempt(earned=8)
        first = self.client.post(f"{BASE}/generate/", {"attempt_id": attempt.pk}, format="json")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        second = self.client.post(f"{BASE}/generate/", {"attempt_id": attempt.pk}, format="json")
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(first.json()["data"]["id"], second.json()["data"]["id"])
        self.assertEqual(Certificate.objects.count(), 1)

    def test_generate_does_not_undo_revocation(self):
        attempt = self.completed_attempt(earned=9)
        first = self.client.post(f"{BASE}/generate/", {"attempt_id": attempt.pk}, format="json")
        certificate_id = first.json()["data"]["id"]
        CertificateIssuer().revoke(certificate_id)

        response = self.client.post(f"{BASE}/generate/", {"attempt_id": attempt.pk}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["id"], certificate_id)
        self.assertFalse(response.json()["data"]["is_valid"])
        self.assertFalse(Certificate.objects.get(pk=certificate_id).is_valid)

    def test_generate_rejects_failed_attempt(self):
        attempt = self.completed_attempt(earned=5)
        response = self.client.post(f"{BASE}/generate/", {"attempt_id": attempt.pk}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(Certificate.objects.exists())

    def test_generate_rejects_foreign_attempt(self):
        attempt = self.completed_attempt(earned=10)
        self.client.force_authenticate(user=create_learner("erika"))
        response = self.client.post(f"{BASE}/generate/", {"attempt_id": attempt.pk}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_my_certificates_and_detail(self):
        certificate = CertificateIssuer().issue(self.learner, self.test).certificate
        mine = self.client.get(f"{BASE}/mine/")
        self.assertEqual(mine.status_code, status.HTTP_200_OK)
        self.assertEqual([c["id"] for c in mine.json()], [certificate.pk])

        detail = self.client.get(f"{BASE}/{certificate.pk}/")
        self.assertEqual(detail.json()["data"]["course_title"], "Python Grundlagen")

        self.client.force_authenticate(user=create_learner("erika"))
        self.assertEqual(self.client.get(f"{BASE}/{certificate.pk}/").status_code, status.HTTP_404_NOT_FOUND)

    def test_public_verification(self):
        certificate = CertificateIssuer().issue(self.learner, self.test).certificate
        anonymous = APIClient()
        response = anonymous.get(f"{BASE}/verify/{certificate.verification_code}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["learnerName"], "Max Mustermann")
        self.assertEqual(data["courseName"], "Python Grundlagen")
        self.assertTrue(data["isValid"])

        missing = anonymous.get(f"{BASE}/verify/NOPE00000000/")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(missing.json()["success"])

    def test_admin_listing_and_revocation(self):
        certificate = CertificateIssuer().issue(self.learner, self.test).certificate
        self.assertEqual(self.client.get(f"{BASE}/all/").status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            self.client.post(f"{BASE}/{certificate.pk}/revoke/").status_code,
            status.HTTP_403_FORBIDDEN,
        )

        self.client.force_authenticate(user=self.staff)
        listing = self.client.get(f"{BASE}/all/")
        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(listing.json()["count"], 1)
        self.assertEqual(listing.json()["results"][0]["learner_username"], "max")

        revoked = self.client.post(f"{BASE}/{certificate.pk}/revoke/")
        self.assertFalse(revoked.json()["data"]["is_valid"])
        self.assertEqual(self.client.get(f"{BASE}/all/?is_valid=false").json()["count"], 1)

        renewed = self.client.post(f"{BASE}/{certificate.pk}/renew/")
        self.assertTrue(renewed.json()["data"]["is_valid"])
