from __future__ import annotations

import datetime
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from core.elections_services import issue_voting_token, submit_vote
from core.models import AttemptWindow, OneTimeCode, Vote, VotingToken
from core.tests.voting_fixtures import create_active_voter, create_open_election


class PurgeExpiredCommandTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        now = timezone.now()
        create_open_election()

        voter = create_active_voter()
        redeemed = issue_voting_token(voter=voter, election_id="e1")
        submit_vote(voter=voter, token_id=redeemed.token_id, election_id="e1", candidate_id="c1")
        VotingToken.objects.filter(token_id=redeemed.token_id).update(expires_at=now - datetime.timedelta(days=2))

        self.recently_expired = issue_voting_token(voter=create_active_voter("voter-2"), election_id="e1")
        VotingToken.objects.filter(token_id=self.recently_expired.token_id).update(
            expires_at=now - datetime.timedelta(hours=1),
        )
        self.live = issue_voting_token(voter=create_active_voter("voter-3"), election_id="e1")

        AttemptWindow.objects.create(
            scope=AttemptWindow.Scope.login,
            subject_key="lapsed",
            count=3,
            window_started_at=now - datetime.timedelta(hours=1),
            window_ends_at=now - datetime.timedelta(minutes=45),
        )
        AttemptWindow.objects.create(
            scope=AttemptWindow.Scope.login,
            subject_key="current",
            count=1,
            window_started_at=now,
            window_ends_at=now + datetime.timedelta(minutes=15),
        )

        OneTimeCode.objects.create(subject_key="a" * 64, code_hash="x", expires_at=now - datetime.timedelta(minutes=1))
        OneTimeCode.objects.create(subject_key="b" * 64, code_hash="y", expires_at=now + datetime.timedelta(minutes=4))

    def test_dry_run_deletes_nothing(self) -> None:
        out = StringIO()
        call_command("purge_expired", "--dry-run", stdout=out)

        self.assertIn("[dry-run] Would delete 1 voting token(s), 1 attempt window(s) and 1 one-time code(s).", out.getvalue())
        self.assertEqual(VotingToken.objects.count(), 3)
        self.assertEqual(AttemptWindow.objects.count(), 2)
        self.assertEqual(OneTimeCode.objects.count(), 2)

    def test_purges_only_expired_rows(self) -> None:
        out = StringIO()
        call_command("purge_expired", stdout=out)

        self.assertIn("Deleted 1 voting token(s), 1 attempt window(s) and 1 one-time code(s).", out.getvalue())
        self.assertEqual(
            set(VotingToken.objects.values_list("token_id", flat=True)),
            {self.recently_expired.token_id, self.live.token_id},
        )
        self.assertEqual(list(AttemptWindow.objects.values_list("subject_key", flat=True)), ["current"])
        self.assertEqual(list(OneTimeCode.objects.values_list("subject_key", flat=True)), ["b" * 64])

    def test_votes_are_never_purged(self) -> None:
        call_command("purge_expired", stdout=StringIO())

        self.assertEqual(Vote.objects.count(), 1)
