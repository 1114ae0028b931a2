"""Shared fixtures for the pairing tests."""
from datetime import datetime
from typing import Iterable, List

import pytest

from pairing.data_models import Identity, PastMatch, PersonAttributes


def make_roster(ids: Iterable[str]) -> List[Identity]:
    return [Identity(id=i, name=i.upper()) for i in ids]


class ScriptedRandom:
    """Stand-in random source whose `randint` replays a fixed list of answers."""

    def __init__(self, answers: Iterable[int]):
        self.answers = list(answers)
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        value = self.answers[self.calls]
        self.calls += 1
        assert a <= value <= b, f"scripted value {value} outside [{a}, {b}]"
        return value


def past(partner_id: str, year: int = 2024, month: int = 1, day: int = 1) -> PastMatch:
    return PastMatch(partner_id=partner_id, matched_at=datetime(year, month, day))


@pytest.fixture
def roster_abcde() -> List[Identity]:
    return make_roster("abcde")


@pytest.fixture
def everyone_met_before() -> dict:
    ids = "abcd"
    return {
        i: PersonAttributes(past_matches=[past(j) for j in ids if j != i])
        for i in ids
    }
