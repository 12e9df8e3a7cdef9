from .issue_token import (
    VERIFY_EMAIL_WORKFLOW,
    IssueVerificationTokenUseCase,
    build_verification_url,
)
from .resend import ResendVerificationEmailUseCase
from .verify_email import VerifyEmailUseCase

__all__ = [
    "IssueVerificationTokenUseCase",
    "VerifyEmailUseCase",
    "ResendVerificationEmailUseCase",
    "VERIFY_EMAIL_WORKFLOW",
    "build_verification_url",
]
