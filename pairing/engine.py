"""
Pairing engine: turns an eligible roster into pairs for one cycle.

It will:

- Hand empty and single-person rosters back as-is
- Shuffle and pair neighbours for groups too small for stable matching
- Otherwise:
    - Shuffle the roster and split it into two halves (odd person set aside)
    - Rank each half against the other using participant attributes
    - Run Gale-Shapley with the first half proposing
    - Flag pairs that have met before and, if configured, reshuffle and retry
"""
from __future__ import annotations

import random
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from .data_models import Identity, MatchPair, MatchResult, PersonAttributes
from .person import PersonPool
from .preferences import is_previously_matched, rank_positions
from .random_pairer import random_pairs, shuffle_in_place
from .stable_matcher import match_stable


# Below this size stable matching has too little to work with.
STABLE_MATCHING_MIN_SIZE = 4

STRATEGIES = ("auto", "random", "stable")

ProgressFn = Callable[[int, int, int], None]
AttributeLookup = Mapping[str, PersonAttributes]


def _new_seed() -> int:
    return random.SystemRandom().randrange(2**31)


class PairingEngine:
    """Orchestrates one pairing run per `create_pairs` call.

    Args:
        max_retries: Extra attempts allowed when an attempt contains a repeat
            pair. The last attempt is returned even if it still has repeats.
        random_seed: Default seed for runs that do not pass their own.
        progress_fn: Called as `progress_fn(attempt, max_attempts, repeat_pairs)`
            after every stable-matching attempt.
    """

    def __init__(
        self,
        max_retries: int = 0,
        random_seed: Optional[int] = None,
        progress_fn: Optional[ProgressFn] = None,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {max_retries}")
        self.max_retries = max_retries
        self.random_seed = random_seed
        self.progress_fn = progress_fn

    def create_pairs(
        self,
        identities: Sequence[Identity],
        attributes: Optional[AttributeLookup] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        strategy: str = "auto",
    ) -> MatchResult:
        """Pair up `identities`.

        Args:
            identities: Distinct participants eligible this cycle.
            attributes: Attribute records keyed by identity id; missing ones
                count as empty.
            seed: Seed for this run; falls back to the engine's `random_seed`,
                then to a fresh seed which is reported on the result.
            rng: Explicit random source. Takes precedence over any seed and is
                not shared-safe, so give each concurrent run its own.
            strategy: "auto" (size based), "random" or "stable".

        Returns:
            MatchResult with `n // 2` pairs and the odd person if `n` is odd.
        """
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy '{strategy}'. Expected one of {', '.join(STRATEGIES)}")

        n = len(identities)
        if n == 0:
            return MatchResult()
        if n == 1:
            return MatchResult(odd_person=identities[0])

        run_seed: Optional[int] = None
        if rng is None:
            run_seed = seed if seed is not None else self.random_seed
            if run_seed is None:
                run_seed = _new_seed()
            rng = random.Random(run_seed)

        use_random = strategy == "random" or (strategy == "auto" and n < STABLE_MATCHING_MIN_SIZE)
        if use_random:
            result = random_pairs(identities, rng)
        else:
            result = self._stable_pairs(identities, attributes, rng)
        return result.model_copy(update={"seed": run_seed})

    def _stable_pairs(
        self,
        identities: Sequence[Identity],
        attributes: Optional[AttributeLookup],
        rng: random.Random,
    ) -> MatchResult:
        max_attempts = self.max_retries + 1
        attempt = 0
        while True:
            attempt += 1
            pairs, odd_person = stable_pairs_once(identities, attributes, rng)
            repeats = sum(1 for pair in pairs if pair.previously_matched)
            if self.progress_fn is not None:
                self.progress_fn(attempt, max_attempts, repeats)
            if repeats == 0 or attempt >= max_attempts:
                break
        return MatchResult(pairs=pairs, odd_person=odd_person, strategy="stable", attempts=attempt)


def stable_pairs_once(
    identities: Sequence[Identity],
    attributes: Optional[AttributeLookup],
    rng: random.Random,
) -> Tuple[List[MatchPair], Optional[Identity]]:
    """Run a single shuffle -> split -> rank -> match attempt."""
    shuffled = list(identities)
    shuffle_in_place(rng, shuffled)

    half = len(shuffled) // 2
    odd_person = shuffled[-1] if len(shuffled) % 2 == 1 else None
    pool = PersonPool(shuffled[: 2 * half])
    group_a = list(range(half))
    group_b = list(range(half, 2 * half))

    _assign_preferences(pool, group_a, group_b, attributes)
    _assign_preferences(pool, group_b, group_a, attributes)

    engagements = match_stable(pool, group_a, group_b)

    pairs = []
    for a, b in engagements:
        first, second = pool[a].identity, pool[b].identity
        pairs.append(
            MatchPair(
                first=first,
                second=second,
                previously_matched=is_previously_matched(first, second, attributes),
            )
        )
    return pairs, odd_person


def _assign_preferences(
    pool: PersonPool,
    group: Sequence[int],
    others: Sequence[int],
    attributes: Optional[AttributeLookup],
) -> None:
    candidates = [pool[i].identity for i in others]
    for i in group:
        order = rank_positions(pool[i].identity.id, candidates, attributes)
        pool[i].set_preferences(others[k] for k in order)
