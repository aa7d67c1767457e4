from __future__ import annotations

from core.elections_services import VoterContext
from core.models import Candidate, Election, Voter


def create_open_election(*, election_id: str = "e1", candidate_ids: tuple[str, ...] = ("c1", "c2")) -> Election:
    election = Election.objects.create(election_id=election_id, name=f"Election {election_id}")
    for candidate_id in candidate_ids:
        Candidate.objects.create(election_id=election_id, candidate_id=candidate_id, name=candidate_id.upper())
    return election


def create_active_voter(voter_id: str = "voter-1") -> VoterContext:
    Voter.objects.create(voter_id=voter_id, status=Voter.Status.active)
    return VoterContext(voter_id=voter_id)
