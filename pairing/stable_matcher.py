"""
Gale-Shapley deferred acceptance over a `PersonPool`.

    while some proposer p is free and has someone left to propose to:
        r = next receiver on p's list
        if r is free:             engage (p, r)
        elif r prefers p:         free r's fiance, engage (p, r)
        else:                     p stays free

Proposers propose in preference order and never twice to the same receiver,
so the loop makes at most len(proposers) * len(receivers) proposals.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, List, Sequence, Tuple

from .person import UNENGAGED, PersonPool


class StableMatchingError(RuntimeError):
    """Preference lists were not total orders over equal-size groups."""


def match_stable(pool: PersonPool, proposers: Sequence[int], receivers: Sequence[int]) -> List[Tuple[int, int]]:
    """Engage every proposer with a receiver so that no blocking pair exists.

    Args:
        pool: Arena holding both groups. Every proposer must rank all receivers
            and every receiver must rank all proposers (pool indices).
        proposers: Pool indices of the proposing group.
        receivers: Pool indices of the receiving group.

    Returns:
        (proposer, receiver) index pairs in proposer order. The engagements are
        also left on the pool.

    Raises:
        StableMatchingError: If the groups differ in size or a proposer runs
            out of candidates, which only happens with malformed preferences.
    """
    if len(proposers) != len(receivers):
        raise StableMatchingError(
            f"Groups must be the same size (got {len(proposers)} proposers, {len(receivers)} receivers)"
        )

    free: Deque[int] = deque(p for p in proposers if not pool[p].is_engaged)
    while free:
        proposer_index = free[0]
        proposer = pool[proposer_index]
        receiver_index = proposer.next_candidate()
        if receiver_index is None:
            raise StableMatchingError(
                f"{proposer.identity.id} exhausted its preferences without getting engaged"
            )

        receiver = pool[receiver_index]
        if not receiver.is_engaged:
            pool.engage(proposer_index, receiver_index)
            free.popleft()
        elif receiver.prefers(proposer_index):
            jilted = receiver.fiance
            pool.engage(proposer_index, receiver_index)
            free.popleft()
            free.append(jilted)

    pairs = []
    for p in proposers:
        fiance = pool[p].fiance
        if fiance == UNENGAGED:
            raise StableMatchingError(f"{pool[p].identity.id} ended up unengaged")
        pairs.append((p, fiance))
    return pairs


def find_blocking_pairs(pool: PersonPool, proposers: Sequence[int]) -> List[Tuple[int, int]]:
    """(proposer, receiver) pairs that would both rather be with each other."""
    blocking = []
    for p in proposers:
        person = pool[p]
        for r in person.preferences:
            if r == person.fiance:
                break
            if pool[r].prefers(p):
                blocking.append((p, r))
    return blocking
