from __future__ import annotations

import logging

from django.conf import settings

from core.attempt_counter import AttemptCount, is_blocked, record_attempt, reset_attempts
from core.elections_services import VotingError
from core.models import AttemptWindow

logger = logging.getLogger(__name__)


class OtpRateLimitedError(VotingError):
    code = "OTP_RATE_LIMITED"
    default_message = "Too many one-time code requests. Please try again later."


class AccountLockedError(VotingError):
    code = "ACCOUNT_LOCKED"
    default_message = "Too many failed login attempts. Please try again after the lockout window."


def check_otp_request_allowed(*, subject_key: str) -> AttemptCount:
    # Record first, then judge: every request counts, including rejected ones.
    attempt = record_attempt(scope=AttemptWindow.Scope.otp, subject_key=subject_key, window=settings.OTP_WINDOW)
    if attempt.count > settings.OTP_MAX_PER_WINDOW:
        logger.info("One-time code requests throttled until %s", attempt.window_ends_at.isoformat())
        raise OtpRateLimitedError()
    return attempt


def ensure_login_allowed(*, username: str) -> None:
    """Raise AccountLockedError while `username` is inside a lockout window.

    Call this before checking credentials so a locked account cannot be used
    to probe passwords.
    """

    if is_blocked(
        scope=AttemptWindow.Scope.login,
        subject_key=username,
        max_attempts=settings.LOGIN_MAX_FAILED_ATTEMPTS,
    ):
        raise AccountLockedError()


def record_login_failure(*, username: str) -> AttemptCount:
    attempt = record_attempt(scope=AttemptWindow.Scope.login, subject_key=username, window=settings.LOGIN_WINDOW)
    if attempt.count >= settings.LOGIN_MAX_FAILED_ATTEMPTS:
        logger.warning("Login locked out after %d failed attempts", attempt.count)
    return attempt


def clear_login_failures(*, username: str) -> None:
    reset_attempts(scope=AttemptWindow.Scope.login, subject_key=username)
