from __future__ import annotations

from typing import override

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from core.models import AttemptWindow, OneTimeCode, VotingToken


class Command(BaseCommand):
    help = (
        "Delete expired voting tokens (after the retention period), lapsed attempt windows "
        "and expired one-time codes. Votes are never touched."
    )

    def add_arguments(self, parser) -> None:
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without deleting anything.",
        )

    @override
    def handle(self, *args, **options) -> None:
        dry_run: bool = bool(options.get("dry_run"))

        now = timezone.now()

        tokens = VotingToken.objects.filter(expires_at__lte=now - settings.VOTING_TOKEN_RETENTION)
        windows = AttemptWindow.objects.filter(window_ends_at__lte=now)
        codes = OneTimeCode.objects.filter(expires_at__lte=now)

        if dry_run:
            self.stdout.write(
                f"[dry-run] Would delete {tokens.count()} voting token(s), {windows.count()} attempt window(s) "
                f"and {codes.count()} one-time code(s)."
            )
            return

        tokens_deleted, _ = tokens.delete()
        windows_deleted, _ = windows.delete()
        codes_deleted, _ = codes.delete()

        self.stdout.write(
            f"Deleted {tokens_deleted} voting token(s), {windows_deleted} attempt window(s) "
            f"and {codes_deleted} one-time code(s)."
        )
