from __future__ import annotations

from typing import override

from django.contrib import admin

from .models import Candidate, Election, Vote, Voter, VotingToken


@admin.register(Election)
class ElectionAdmin(admin.ModelAdmin):
    list_display = ("election_id", "name", "status", "updated_at")
    list_filter = ("status",)
    search_fields = ("election_id", "name")


@admin.register(Candidate)
class CandidateAdmin(admin.ModelAdmin):
    list_display = ("election_id", "candidate_id", "name", "status")
    list_filter = ("status", "election_id")
    search_fields = ("candidate_id", "name")


@admin.register(Voter)
class VoterAdmin(admin.ModelAdmin):
    list_display = ("voter_id", "status", "has_voted")
    list_filter = ("status", "has_voted")
    search_fields = ("voter_id",)
    # has_voted only ever changes through vote submission.
    readonly_fields = ("has_voted", "created_at")


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """Admin view for rows only the voting services may write."""

    @override
    def has_add_permission(self, request) -> bool:
        return False

    @override
    def has_change_permission(self, request, obj=None) -> bool:
        return False


@admin.register(VotingToken)
class VotingTokenAdmin(ReadOnlyModelAdmin):
    list_display = ("election_id", "spent", "expires_at", "created_at")
    list_filter = ("spent", "election_id")
    # Token ids and nonces are bearer secrets until spent or expired.
    exclude = ("token_id", "nonce")


@admin.register(Vote)
class VoteAdmin(ReadOnlyModelAdmin):
    list_display = ("election_id", "candidate_id", "created_at")
    list_filter = ("election_id",)

    @override
    def has_delete_permission(self, request, obj=None) -> bool:
        return False
