"""Partition normalized candidates into album groups."""

from scoring.config import ScoringConfig
from scoring.models import CandidateGroup, NormalizedCandidate, RawCandidate
from scoring.normalize import normalize_candidates


def group_candidates(candidates: list[NormalizedCandidate]) -> list[CandidateGroup]:
    """Group candidates by grouping key.

    Groups appear in the order their first member was seen; members keep
    their original order within a group.
    """
    members_by_key: dict[str, list[NormalizedCandidate]] = {}
    for candidate in candidates:
        members_by_key.setdefault(candidate.grouping_key, []).append(candidate)

    groups = []
    for grouping_key, members in members_by_key.items():
        first = members[0]
        groups.append(
            CandidateGroup(
                grouping_key=grouping_key,
                barcode=first.barcode,
                normalized_artist=first.normalized_artist,
                normalized_title=first.normalized_title,
                candidates=members,
            )
        )
    return groups


def is_singleton(group: CandidateGroup) -> bool:
    """True when the group has exactly one candidate (no tie-break needed)."""
    return len(group.candidates) == 1


def normalize_and_group(
    candidates: list[RawCandidate], config: ScoringConfig
) -> list[CandidateGroup]:
    return group_candidates(normalize_candidates(candidates, config))
