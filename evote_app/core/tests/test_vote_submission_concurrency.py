from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from django.db import connection
from django.test import TransactionTestCase

from core.elections_services import (
    AlreadyVotedError,
    SubmitResult,
    TokenAlreadyUsedError,
    VoterContext,
    VotingError,
    issue_voting_token,
    submit_vote,
)
from core.models import Vote, Voter, VotingToken
from core.tests.voting_fixtures import create_active_voter, create_open_election


class ConcurrentSubmissionTests(TransactionTestCase):
    workers = 6

    def _race(self, voters: list[VoterContext], token_id: str, nonce: str) -> list[object]:
        barrier = threading.Barrier(len(voters))

        def attempt(voter: VoterContext) -> object:
            try:
                barrier.wait()
                return submit_vote(voter=voter, token_id=token_id, election_id="e1", candidate_id="c1", nonce=nonce)
            except VotingError as exc:
                return exc
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=len(voters)) as pool:
            return list(pool.map(attempt, voters))

    def test_same_token_from_many_holders_is_redeemed_once(self) -> None:
        create_open_election()
        voters = [create_active_voter(f"voter-{i}") for i in range(self.workers)]
        issued = issue_voting_token(voter=voters[0], election_id="e1")

        outcomes = self._race(voters, issued.token_id, issued.nonce)

        successes = [o for o in outcomes if isinstance(o, SubmitResult)]
        failures = [o for o in outcomes if not isinstance(o, SubmitResult)]
        self.assertEqual(len(successes), 1)
        self.assertTrue(all(isinstance(f, TokenAlreadyUsedError) for f in failures), failures)
        self.assertEqual(Vote.objects.count(), 1)
        self.assertEqual(Voter.objects.filter(has_voted=True).count(), 1)
        self.assertTrue(VotingToken.objects.get(token_id=issued.token_id).spent)

    def test_same_voter_racing_one_token_votes_once(self) -> None:
        create_open_election()
        voter = create_active_voter()
        issued = issue_voting_token(voter=voter, election_id="e1")

        outcomes = self._race([voter] * self.workers, issued.token_id, issued.nonce)

        successes = [o for o in outcomes if isinstance(o, SubmitResult)]
        failures = [o for o in outcomes if not isinstance(o, SubmitResult)]
        self.assertEqual(len(successes), 1)
        self.assertTrue(all(isinstance(f, (TokenAlreadyUsedError, AlreadyVotedError)) for f in failures), failures)
        self.assertEqual(Vote.objects.count(), 1)
