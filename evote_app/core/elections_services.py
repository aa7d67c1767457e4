from __future__ import annotations

import datetime
import logging
import secrets
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.db import connection, transaction
from django.utils import timezone
from django.utils.crypto import constant_time_compare

from core.models import Candidate, Election, Vote, Voter, VotingToken

logger = logging.getLogger(__name__)


class VotingError(Exception):
    """Base class for named voting failures.

    `code` is stable and machine-readable. Messages never include voter, token
    or nonce values.
    """

    code = "VOTING_ERROR"
    default_message = "Voting request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ElectionNotOpenError(VotingError):
    code = "ELECTION_NOT_OPEN"
    default_message = "Election is not open for voting"


class VoterNotFoundError(VotingError):
    code = "VOTER_NOT_FOUND"
    default_message = "Voter not found"


class VoterInactiveError(VotingError):
    code = "VOTER_INACTIVE"
    default_message = "Voter is not active"


class AlreadyVotedError(VotingError):
    code = "ALREADY_VOTED"
    default_message = "Voter has already cast a vote"


class InvalidVoteTokenError(VotingError):
    code = "INVALID_VOTE_TOKEN"
    default_message = "Invalid voting token"


class TokenAlreadyUsedError(VotingError):
    code = "TOKEN_ALREADY_USED"
    default_message = "Voting token already used"


class TokenExpiredError(VotingError):
    code = "TOKEN_EXPIRED"
    default_message = "Voting token has expired"


class TokenNonceMismatchError(VotingError):
    code = "TOKEN_NONCE_MISMATCH"
    default_message = "Token nonce does not match"


class InvalidCandidateError(VotingError):
    code = "INVALID_CANDIDATE"
    default_message = "Invalid candidate for this election"


class StorageTransactionUnsupportedError(VotingError):
    code = "TRANSACTION_NOT_SUPPORTED"
    default_message = "The configured database cannot run multi-record transactions"


@dataclass(frozen=True)
class VoterContext:
    """An already-authenticated caller."""

    voter_id: str


@dataclass(frozen=True)
class TokenIssueResult:
    token_id: str
    nonce: str
    expires_at: datetime.datetime


@dataclass(frozen=True)
class SubmitResult:
    election_id: str
    candidate_id: str


def _resolve_election_id(election_id: str | None) -> str:
    return str(election_id or "").strip() or settings.DEFAULT_ELECTION_ID


def ensure_atomic_commit_supported() -> None:
    if not connection.features.supports_transactions:
        raise StorageTransactionUnsupportedError()


def is_election_open(*, election_id: str) -> bool:
    status = Election.objects.filter(election_id=election_id).values_list("status", flat=True).first()
    if status is None:
        if settings.ELECTION_OPEN_WHEN_MISSING:
            logger.warning("Election %r has no record; treating it as open", election_id)
            return True
        return False
    return status == Election.Status.open


def _check_voter_eligible(voter: Voter | None) -> Voter:
    if voter is None:
        raise VoterNotFoundError()
    if voter.status != Voter.Status.active:
        raise VoterInactiveError()
    if voter.has_voted:
        raise AlreadyVotedError()
    return voter


def issue_voting_token(*, voter: VoterContext, election_id: str | None = None) -> TokenIssueResult:
    election_id = _resolve_election_id(election_id)

    if not is_election_open(election_id=election_id):
        raise ElectionNotOpenError()

    _check_voter_eligible(Voter.objects.filter(voter_id=voter.voter_id).first())

    # The token row is not tied to the voter in any way. Redemption re-checks
    # eligibility from the caller's identity instead of trusting the token.
    token = VotingToken.objects.create(
        token_id=str(uuid.uuid4()),
        election_id=election_id,
        spent=False,
        expires_at=timezone.now() + settings.VOTING_TOKEN_TTL,
        nonce=secrets.token_hex(16),
    )
    logger.info("Issued voting token for election %r", election_id)

    return TokenIssueResult(token_id=token.token_id, nonce=token.nonce, expires_at=token.expires_at)


def _lock_voter(*, voter_id: str) -> Voter | None:
    return Voter.objects.select_for_update().filter(voter_id=voter_id).first()


def _lock_voting_token(*, token_id: str, election_id: str) -> VotingToken | None:
    return VotingToken.objects.select_for_update().filter(token_id=token_id, election_id=election_id).first()


@transaction.atomic
def submit_vote(
    *,
    voter: VoterContext,
    token_id: str,
    candidate_id: str,
    election_id: str | None = None,
    nonce: str | None = None,
) -> SubmitResult:
    """Redeem a voting token into an anonymous vote.

    All checks and writes run in one transaction. Any failure, including the
    two re-checks made by conditional writes, rolls back the whole unit, so a
    caller sees either a committed vote or a named error and nothing else.
    """

    ensure_atomic_commit_supported()

    election_id = _resolve_election_id(election_id)
    token_id = str(token_id or "").strip()
    candidate_id = str(candidate_id or "").strip()
    now = timezone.now()

    # Lock order is always voter, then token.
    _check_voter_eligible(_lock_voter(voter_id=voter.voter_id))

    if not token_id:
        raise InvalidVoteTokenError()
    token = _lock_voting_token(token_id=token_id, election_id=election_id)
    if token is None:
        raise InvalidVoteTokenError()
    if token.spent:
        raise TokenAlreadyUsedError()
    if token.expires_at <= now:
        raise TokenExpiredError()
    if nonce is not None and not constant_time_compare(str(nonce), token.nonce):
        raise TokenNonceMismatchError()

    if not candidate_id or not Candidate.objects.filter(
        election_id=election_id,
        candidate_id=candidate_id,
        status=Candidate.Status.active,
    ).exists():
        raise InvalidCandidateError()

    # Compare-and-set on the spent flag. Zero rows means another redemption
    # won after our read; that is a double spend, not something to retry.
    spent = VotingToken.objects.filter(pk=token.pk, spent=False).update(spent=True)
    if spent == 0:
        raise TokenAlreadyUsedError()

    Vote.objects.create(
        election_id=election_id,
        candidate_id=candidate_id,
        created_at=now,
        server_signature=secrets.token_hex(32),
    )

    marked = Voter.objects.filter(voter_id=voter.voter_id, has_voted=False).update(has_voted=True)
    if marked == 0:
        if Voter.objects.filter(voter_id=voter.voter_id).exists():
            raise AlreadyVotedError()
        raise VoterNotFoundError()

    logger.info("Accepted vote for election %r", election_id)

    return SubmitResult(election_id=election_id, candidate_id=candidate_id)
