"""
Matchmaking nodes for one pairing attempt.

People live in a `PersonPool` and refer to each other by pool index, so the
engagement state is a plain integer per person (`UNENGAGED` when free).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .data_models import Identity


UNENGAGED = -1


@dataclass
class Person:
    identity: Identity
    preferences: List[int] = field(default_factory=list)
    fiance: int = UNENGAGED
    next_proposal_index: int = 0
    _ranks: Dict[int, int] = field(default_factory=dict, repr=False)

    @property
    def is_engaged(self) -> bool:
        return self.fiance != UNENGAGED

    def set_preferences(self, preferences: Iterable[int]) -> None:
        self.preferences = list(preferences)
        self._ranks = {index: rank for rank, index in enumerate(self.preferences)}

    def rank_of(self, index: int) -> int:
        """Position of `index` in this person's preferences (lower is better)."""
        try:
            return self._ranks[index]
        except KeyError:
            raise KeyError(f"{self.identity.id} has no preference entry for pool index {index}") from None

    def prefers(self, candidate: int) -> bool:
        """True if `candidate` ranks above the current fiance."""
        if not self.is_engaged:
            return True
        return self.rank_of(candidate) < self.rank_of(self.fiance)

    def next_candidate(self) -> Optional[int]:
        """Advance the proposal cursor; None once every candidate was tried."""
        if self.next_proposal_index >= len(self.preferences):
            return None
        candidate = self.preferences[self.next_proposal_index]
        self.next_proposal_index += 1
        return candidate


class PersonPool:
    """Arena of `Person` records for a single attempt."""

    def __init__(self, identities: Sequence[Identity]):
        self.people: List[Person] = [Person(identity) for identity in identities]

    def __len__(self) -> int:
        return len(self.people)

    def __getitem__(self, index: int) -> Person:
        return self.people[index]

    def __iter__(self) -> Iterator[Person]:
        return iter(self.people)

    def engage(self, proposer: int, receiver: int) -> None:
        """Engage two people, freeing whoever either of them was engaged to."""
        for index in (proposer, receiver):
            current = self.people[index].fiance
            if current != UNENGAGED:
                self.people[current].fiance = UNENGAGED
        self.people[proposer].fiance = receiver
        self.people[receiver].fiance = proposer

    def is_symmetric(self) -> bool:
        for index, person in enumerate(self.people):
            if person.is_engaged and self.people[person.fiance].fiance != index:
                return False
        return True
