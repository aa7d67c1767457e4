from __future__ import annotations

import datetime
import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Protocol

from django.conf import settings
from django.utils import timezone
from django.utils.crypto import constant_time_compare, salted_hmac
from django.utils.module_loading import import_string

from core.models import OneTimeCode
from core.throttling import check_otp_request_allowed

logger = logging.getLogger(__name__)

_CODE_HMAC_SALT = "core.otp_services.code"


class OtpSender(Protocol):
    def send(self, *, phone: str, code: str, expires_at: datetime.datetime) -> None: ...


class LoggingOtpSender:
    """Development stand-in for an SMS provider: writes the code to the log.

    Logged at DEBUG, so the code only appears where debug logging is enabled.
    """

    def send(self, *, phone: str, code: str, expires_at: datetime.datetime) -> None:
        logger.debug(
            "One-time code for subject %s: %s (valid until %s)",
            hash_phone(phone)[:8],
            code,
            expires_at.isoformat(),
        )


@dataclass(frozen=True)
class OtpIssueResult:
    expires_at: datetime.datetime


def hash_phone(phone: str) -> str:
    return hashlib.sha256(str(phone or "").strip().encode("utf-8")).hexdigest()


def _hash_code(*, subject_key: str, code: str) -> str:
    return salted_hmac(_CODE_HMAC_SALT, f"{subject_key}:{code}", algorithm="sha256").hexdigest()


def _default_sender() -> OtpSender:
    return import_string(settings.OTP_SENDER)()


def generate_otp_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def send_otp(*, phone: str, sender: OtpSender | None = None) -> OtpIssueResult:
    phone = str(phone or "").strip()
    if not phone:
        raise ValueError("phone is required")

    subject_key = hash_phone(phone)
    check_otp_request_allowed(subject_key=subject_key)

    code = generate_otp_code()
    expires_at = timezone.now() + settings.OTP_TTL

    # A newer code replaces any outstanding one for the same phone.
    OneTimeCode.objects.update_or_create(
        subject_key=subject_key,
        defaults={
            "code_hash": _hash_code(subject_key=subject_key, code=code),
            "expires_at": expires_at,
        },
    )

    (sender or _default_sender()).send(phone=phone, code=code, expires_at=expires_at)
    return OtpIssueResult(expires_at=expires_at)


def _load_code(*, subject_key: str) -> OneTimeCode | None:
    return OneTimeCode.objects.filter(subject_key=subject_key).first()


def verify_otp(*, phone: str, code: str | int) -> bool:
    subject_key = hash_phone(phone)
    now = timezone.now()
    entry = _load_code(subject_key=subject_key)
    if entry is None:
        return False

    if entry.expires_at <= now:
        # A code re-sent since the read keeps the same row with a later expiry.
        OneTimeCode.objects.filter(pk=entry.pk, expires_at__lte=now).delete()
        return False

    provided = str(code if code is not None else "").strip()
    if not constant_time_compare(_hash_code(subject_key=subject_key, code=provided), entry.code_hash):
        return False

    # One-time use: only the caller whose delete removes the row succeeds.
    deleted, _ = OneTimeCode.objects.filter(pk=entry.pk, code_hash=entry.code_hash).delete()
    return deleted > 0
