"""
Authentication services: OTP issuance and verification, session tokens,
and the per-request authorization gate.
"""

from qrmenu.services.auth.base import Identity, OtpMode
from qrmenu.services.auth.gate import AuthorizationGate
from qrmenu.services.auth.otp import OtpIssuer, generate_otp
from qrmenu.services.auth.session import SessionIssuer
from qrmenu.services.auth.verifier import OtpVerifier

__all__ = [
    "Identity",
    "OtpMode",
    "OtpIssuer",
    "OtpVerifier",
    "SessionIssuer",
    "AuthorizationGate",
    "generate_otp",
]
