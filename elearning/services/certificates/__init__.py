"""
Certificate Services Package für DSP E-Learning Platform

Author: DSP Development Team
Version: 1.0.0
"""

from .certificate_issuer import CertificateIssuer, IssuanceResult

__all__ = ["CertificateIssuer", "IssuanceResult"]
