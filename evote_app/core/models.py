from __future__ import annotations

import uuid
from typing import override

from django.db import models


class AppendOnlyViolation(Exception):
    """Raised when code tries to change or remove an append-only row."""


class Election(models.Model):
    class Status(models.TextChoices):
        open = "open", "Open"
        closed = "closed", "Closed"
        finalized = "finalized", "Finalized"

    election_id = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.open)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("election_id",)

    def __str__(self) -> str:
        return f"{self.election_id} ({self.status})"


class Candidate(models.Model):
    class Status(models.TextChoices):
        active = "active", "Active"
        inactive = "inactive", "Inactive"

    election_id = models.CharField(max_length=64)
    candidate_id = models.CharField(max_length=64)
    name = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.active)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["election_id", "candidate_id"], name="uniq_candidate_per_election"),
        ]
        ordering = ("election_id", "candidate_id")

    def __str__(self) -> str:
        return f"{self.election_id}: {self.candidate_id}"


class Voter(models.Model):
    """A registered voter.

    Rows are owned by the registration flow; voting only ever flips
    `has_voted` from False to True. There is deliberately no modification
    timestamp: one written at vote time would share a value with the Vote row.
    """

    class Status(models.TextChoices):
        pending = "pending", "Pending"
        active = "active", "Active"
        blocked = "blocked", "Blocked"

    voter_id = models.CharField(max_length=128, unique=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.pending)
    has_voted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.voter_id


class VotingToken(models.Model):
    # No voter reference: knowing a token must not reveal who requested it.
    token_id = models.CharField(max_length=64, unique=True)
    election_id = models.CharField(max_length=64)
    spent = models.BooleanField(default=False)
    expires_at = models.DateTimeField()
    nonce = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["token_id", "election_id"], name="vt_token_election"),
            models.Index(fields=["expires_at"], name="vt_exp_at"),
        ]

    def __str__(self) -> str:
        return f"token for {self.election_id}"


class AppendOnlyQuerySet(models.QuerySet):
    @override
    def update(self, **kwargs) -> int:
        raise AppendOnlyViolation(f"{self.model.__name__} rows cannot be updated")

    @override
    def delete(self):
        raise AppendOnlyViolation(f"{self.model.__name__} rows cannot be deleted")


class Vote(models.Model):
    """An anonymous vote.

    Only the election, the chosen candidate, the time and a server-minted
    signature are stored. The random primary key carries no insertion order.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    election_id = models.CharField(max_length=64)
    candidate_id = models.CharField(max_length=64)
    created_at = models.DateTimeField()
    server_signature = models.CharField(max_length=128, unique=True)

    objects = AppendOnlyQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["election_id", "candidate_id"], name="vote_election_candidate"),
        ]

    def __str__(self) -> str:
        return f"{self.election_id}: {self.candidate_id}"

    @override
    def save(self, *args, **kwargs) -> None:
        # A default UUID pk is set before the first save, so `_state.adding`
        # is the only reliable "new row" signal.
        if not self._state.adding:
            raise AppendOnlyViolation("Vote rows cannot be updated")
        kwargs["force_insert"] = True
        super().save(*args, **kwargs)

    @override
    def delete(self, *args, **kwargs):
        raise AppendOnlyViolation("Vote rows cannot be deleted")


class AttemptWindow(models.Model):
    """Fixed-window attempt counter for one subject within one scope."""

    class Scope(models.TextChoices):
        otp = "otp", "One-time code requests"
        login = "login", "Failed logins"

    scope = models.CharField(max_length=32, choices=Scope.choices)
    subject_key = models.CharField(max_length=255)
    count = models.PositiveIntegerField(default=0)
    window_started_at = models.DateTimeField()
    window_ends_at = models.DateTimeField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["scope", "subject_key"], name="uniq_attempt_window_subject"),
        ]
        indexes = [
            models.Index(fields=["window_ends_at"], name="aw_ends_at"),
        ]

    def __str__(self) -> str:
        return f"{self.scope}: {self.count}"


class OneTimeCode(models.Model):
    # `subject_key` is the sha256 of the phone number; `code_hash` an HMAC of the code.
    subject_key = models.CharField(max_length=64, unique=True)
    code_hash = models.CharField(max_length=128)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["expires_at"], name="otc_exp_at"),
        ]

    def __str__(self) -> str:
        return f"code for {self.subject_key[:8]}"
