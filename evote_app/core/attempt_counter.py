from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from core.models import AttemptWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptCount:
    count: int
    window_ends_at: datetime.datetime


def record_attempt(*, scope: str, subject_key: str, window: datetime.timedelta) -> AttemptCount:
    """Count one attempt for `subject_key` in a fixed window of length `window`.

    Every branch is a single conditional write, so concurrent callers sharing a
    subject never lose an increment:

    - a current window is bumped with `count = count + 1`;
    - a lapsed window is reset to a fresh one with `count = 1`;
    - a missing row is inserted; losing that insert race falls back to the
      increment.
    """

    if window <= datetime.timedelta(0):
        raise ValueError("window must be positive")

    while True:
        now = timezone.now()
        with transaction.atomic():
            current = AttemptWindow.objects.filter(scope=scope, subject_key=subject_key, window_ends_at__gt=now)
            if current.update(count=F("count") + 1):
                # The updated row stays locked until commit, so this read sees our own write.
                row = current.values("count", "window_ends_at").get()
                return AttemptCount(count=int(row["count"]), window_ends_at=row["window_ends_at"])

            window_ends_at = now + window
            reset = AttemptWindow.objects.filter(
                scope=scope,
                subject_key=subject_key,
                window_ends_at__lte=now,
            ).update(count=1, window_started_at=now, window_ends_at=window_ends_at)
            if reset:
                return AttemptCount(count=1, window_ends_at=window_ends_at)

        try:
            with transaction.atomic():
                AttemptWindow.objects.create(
                    scope=scope,
                    subject_key=subject_key,
                    count=1,
                    window_started_at=now,
                    window_ends_at=window_ends_at,
                )
        except IntegrityError:
            # Another caller opened the window first; count against theirs.
            logger.debug("Attempt window for scope %s created concurrently; retrying", scope)
            continue
        return AttemptCount(count=1, window_ends_at=window_ends_at)


def is_blocked(*, scope: str, subject_key: str, max_attempts: int) -> bool:
    return AttemptWindow.objects.filter(
        scope=scope,
        subject_key=subject_key,
        window_ends_at__gt=timezone.now(),
        count__gte=max_attempts,
    ).exists()


def reset_attempts(*, scope: str, subject_key: str) -> None:
    AttemptWindow.objects.filter(scope=scope, subject_key=subject_key).delete()
