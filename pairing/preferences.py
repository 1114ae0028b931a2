from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Mapping, Optional, Sequence, Set, Tuple, Union

from .data_models import Identity, PersonAttributes


Score = Union[int, float]

# Sorts beneath every past match.
LOWEST_SCORE = float("-inf")

_TICKS_EPOCH = datetime(1, 1, 1)
_TICKS_PER_SECOND = 10_000_000


@dataclass(frozen=True)
class ScoreWeights:
    same_sub_team: int = 16
    different_seniority: int = 10
    same_discipline: int = 6
    same_gender: int = 2


SCORE_WEIGHTS = ScoreWeights()

_EMPTY_ATTRIBUTES = PersonAttributes()


def to_ticks(moment: datetime) -> int:
    """Count 100ns intervals since 0001-01-01 UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    delta = moment - _TICKS_EPOCH
    return (delta.days * 86_400 + delta.seconds) * _TICKS_PER_SECOND + delta.microseconds * 10


def get_attributes(attributes: Optional[Mapping[str, PersonAttributes]], identity_id: str) -> PersonAttributes:
    if not attributes:
        return _EMPTY_ATTRIBUTES
    return attributes.get(identity_id) or _EMPTY_ATTRIBUTES


def _lower_set(values: Sequence[str]) -> Set[str]:
    return {str(v).strip().lower() for v in values if v is not None}


def _same_text(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


def score_candidate(
    subject: PersonAttributes,
    candidate: Identity,
    candidate_attributes: PersonAttributes,
) -> Score:
    """Score how much `subject` would like to be paired with `candidate`.

    Higher is better. The score is directional: A scoring B says nothing
    about B scoring A.

    1) Candidate named in the subject's low preferences -> LOWEST_SCORE.
    2) Matched before -> minus the ticks of the most recent such match, so any
       past match is negative and recent ones sink furthest.
    3) Otherwise add up the weighted attribute signals.
    """
    low_preferences = _lower_set(subject.low_preference_names)
    if low_preferences and candidate.name and candidate.name.strip().lower() in low_preferences:
        return LOWEST_SCORE

    past = subject.most_recent_match_with(candidate.id)
    if past is not None:
        return -to_ticks(past.matched_at)

    weights = SCORE_WEIGHTS
    score = 0
    if _lower_set(subject.sub_teams) & _lower_set(candidate_attributes.sub_teams):
        score += weights.same_sub_team
    if not _same_text(subject.seniority, candidate_attributes.seniority):
        score += weights.different_seniority
    if _same_text(subject.discipline, candidate_attributes.discipline):
        score += weights.same_discipline
    if _same_text(subject.gender, candidate_attributes.gender):
        score += weights.same_gender
    return score


def score_group(
    subject_id: str,
    candidates: Sequence[Identity],
    attributes: Optional[Mapping[str, PersonAttributes]],
) -> List[Score]:
    subject = get_attributes(attributes, subject_id)
    return [score_candidate(subject, c, get_attributes(attributes, c.id)) for c in candidates]


def rank_positions(
    subject_id: str,
    candidates: Sequence[Identity],
    attributes: Optional[Mapping[str, PersonAttributes]],
) -> List[int]:
    """Positions into `candidates`, best first. Ties keep their input order."""
    scores = score_group(subject_id, candidates, attributes)
    # sorted() is stable with reverse=True as well
    return sorted(range(len(candidates)), key=lambda i: scores[i], reverse=True)


def rank_candidates(
    subject_id: str,
    candidates: Sequence[Identity],
    attributes: Optional[Mapping[str, PersonAttributes]],
) -> List[Identity]:
    """
    Order `candidates` from most to least desirable for `subject_id`.

    Args:
        subject_id: Id of the person doing the ranking.
        candidates: The group to rank; its order breaks ties.
        attributes: Attribute records keyed by identity id. Missing entries
            count as empty records.

    Returns:
        The candidates, best first.
    """
    return [candidates[i] for i in rank_positions(subject_id, candidates, attributes)]


def ranked_with_scores(
    subject_id: str,
    candidates: Sequence[Identity],
    attributes: Optional[Mapping[str, PersonAttributes]],
) -> List[Tuple[Identity, Score]]:
    scores = score_group(subject_id, candidates, attributes)
    order = sorted(range(len(candidates)), key=lambda i: scores[i], reverse=True)
    return [(candidates[i], scores[i]) for i in order]


def is_previously_matched(
    a: Identity,
    b: Identity,
    attributes: Optional[Mapping[str, PersonAttributes]],
) -> bool:
    return get_attributes(attributes, a.id).has_matched_with(b.id) or get_attributes(
        attributes, b.id
    ).has_matched_with(a.id)
