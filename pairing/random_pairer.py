from __future__ import annotations

import random
from typing import List, MutableSequence, Sequence, TypeVar

from .data_models import Identity, MatchPair, MatchResult


T = TypeVar("T")


def shuffle_in_place(rng: random.Random, items: MutableSequence[T]) -> None:
    """Fisher-Yates shuffle driven by `rng.randint`, uniform over permutations."""
    n = len(items)
    for i in range(n - 1):
        j = rng.randint(i, n - 1)
        items[i], items[j] = items[j], items[i]


def random_pairs(identities: Sequence[Identity], rng: random.Random) -> MatchResult:
    """Shuffle a copy of the roster and pair neighbours: (0, 1), (2, 3), ...

    An odd roster leaves its last shuffled member as the odd person. Nobody
    is checked for earlier matches, so `previously_matched` is always False.
    """
    people: List[Identity] = list(identities)
    shuffle_in_place(rng, people)

    pairs = [
        MatchPair(first=people[i], second=people[i + 1], previously_matched=False)
        for i in range(0, len(people) - 1, 2)
    ]
    odd_person = people[-1] if len(people) % 2 == 1 else None
    return MatchResult(pairs=pairs, odd_person=odd_person, strategy="random", attempts=1)
