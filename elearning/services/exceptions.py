"""
Test-Taking & Certification Exceptions

This module provides the exception hierarchy of the test-taking and certification
services. Exceptions follow a hierarchical structure to allow for granular error
handling and proper error classification:

- Denials: expected, user-facing outcomes (ineligible to start, invalid state,
  foreign attempt, unknown resource). They always name the rule that blocked
  the action.
- Data-integrity faults: unexpected system faults (missing course data,
  inconsistent question set, exhausted certificate issuance). The surrounding
  transaction is rolled back, nothing partial is committed.

``assessment_exception_handler`` is registered as the DRF exception handler and
renders every ``AssessmentException`` as a JSON error response.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from typing import Optional, Dict, Any

from django.db import models
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DenialReason(models.TextChoices):
    """Rules of the eligibility gate, in evaluation order."""

    TEST_INACTIVE = "TestInactive", _("Test is not active")
    NOT_ENROLLED = "NotEnrolled", _("You are not enrolled in this course")
    PREREQUISITES_INCOMPLETE = "PrerequisitesIncomplete", _(
        "You must complete all course chapters before taking the test"
    )
    ALREADY_CERTIFIED = "AlreadyCertified", _(
        "You have already received a certificate for this course. No retakes allowed."
    )
    ALREADY_PASSED = "AlreadyPassed", _(
        "You have already passed this test. No retakes allowed."
    )
    ATTEMPT_LIMIT_REACHED = "AttemptLimitReached", _(
        "You have reached the maximum number of attempts"
    )


class AssessmentException(Exception):
    """
    Base exception class for all test-taking and certification errors.

    Attributes:
        message (str): Human-readable error message
        status_code (int): HTTP status code used when rendered by the API
        error_code (Optional[str]): Machine-readable error identifier
        details (Dict[str, Any]): Additional error details

    Example:
        >>> try:
        ...     service.finalize_attempt(attempt_id, learner, choices)
        ... except AssessmentException as e:
        ...     logger.warning(f"Finalize rejected: {e.error_code} - {e.message}")
    """

    default_status_code = status.HTTP_400_BAD_REQUEST
    default_error_code = "AssessmentError"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code or self.default_status_code
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "message": self.message,
            "status_code": self.status_code,
            "error_code": self.error_code,
            "details": self.details,
            "exception_type": self.__class__.__name__,
        }


# --- Denials ---


class DenialException(AssessmentException):
    """Expected, user-facing refusal of an action."""

    default_status_code = status.HTTP_400_BAD_REQUEST
    default_error_code = "Denied"


class AttemptDeniedException(DenialException):
    """
    Raised when the eligibility gate refuses to start an attempt.

    Attributes:
        reason (DenialReason): The gate rule that blocked the start
    """

    default_status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        reason: DenialReason,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.reason = DenialReason(reason)
        super().__init__(
            message=message or str(self.reason.label),
            error_code=self.reason.value,
            details=details,
        )


class InvalidStateException(DenialException):
    """Raised for an illegal attempt state transition (e.g. finalize twice)."""

    default_status_code = status.HTTP_409_CONFLICT
    default_error_code = "InvalidState"

    def __init__(self, message: str, current_status: Optional[str] = None) -> None:
        super().__init__(
            message,
            details={"current_status": current_status} if current_status else None,
        )


class UnauthorizedAttemptException(DenialException):
    """Raised when a learner touches an attempt they do not own."""

    default_status_code = status.HTTP_403_FORBIDDEN
    default_error_code = "Unauthorized"

    def __init__(self, message: str = "Unauthorized access to test attempt") -> None:
        super().__init__(message)


class NotFoundException(DenialException):
    """Raised when a referenced test, attempt, question or certificate is unknown."""

    default_status_code = status.HTTP_404_NOT_FOUND
    default_error_code = "NotFound"


# --- Data-integrity faults ---


class DataIntegrityException(AssessmentException):
    """Unexpected system fault; the operation is aborted without partial state."""

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_error_code = "DataIntegrityFault"


class MissingCourseDataException(DataIntegrityException):
    """Course metadata could not be resolved while issuing a certificate."""

    default_error_code = "MissingCourseData"


class InconsistentQuestionSetException(DataIntegrityException):
    """The question set of a test cannot be graded."""

    default_error_code = "InconsistentQuestionSet"


class IssuanceExhaustedException(DataIntegrityException):
    """Certificate number / verification code regeneration retries were exhausted."""

    default_error_code = "IssuanceExhausted"


# --- DRF integration ---


def assessment_exception_handler(exc, context):
    """
    DRF exception handler rendering ``AssessmentException`` instances.

    Everything else is delegated to the default DRF handler.
    """
    if isinstance(exc, AssessmentException):
        if isinstance(exc, DataIntegrityException):
            logger.error(f"Data integrity fault: {exc.error_code} - {exc.message}")
        return Response(
            {"success": False, "error": exc.to_dict()},
            status=exc.status_code,
        )
    return exception_handler(exc, context)
