from datetime import datetime, timezone

from pairing.data_models import Identity, PastMatch, PersonAttributes
from pairing.preferences import (
    LOWEST_SCORE,
    SCORE_WEIGHTS,
    is_previously_matched,
    rank_candidates,
    rank_positions,
    score_candidate,
    to_ticks,
)

from .conftest import make_roster, past


def test_to_ticks_matches_dotnet_epoch():
    assert to_ticks(datetime(1, 1, 1)) == 0
    assert to_ticks(datetime(1, 1, 2)) == 864_000_000_000
    # 2000-01-01 in .NET ticks
    assert to_ticks(datetime(2000, 1, 1)) == 630_822_816_000_000_000


def test_to_ticks_converts_aware_to_utc():
    aware = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert to_ticks(aware) == to_ticks(datetime(2024, 5, 1, 12, 0))


def test_never_matched_ranks_above_past_match():
    roster = make_roster("xy")
    attributes = {"s": PersonAttributes(past_matches=[past("x")])}
    assert [p.id for p in rank_candidates("s", roster, attributes)] == ["y", "x"]


def test_recent_past_match_ranks_below_older_one():
    roster = make_roster("xy")
    attributes = {
        "s": PersonAttributes(past_matches=[past("x", 2024, 6, 1), past("y", 2022, 6, 1)]),
    }
    assert [p.id for p in rank_candidates("s", roster, attributes)] == ["y", "x"]


def test_uses_most_recent_of_repeated_matches():
    subject = PersonAttributes(past_matches=[past("x", 2020), past("x", 2024)])
    score = score_candidate(subject, Identity(id="x", name="X"), PersonAttributes())
    assert score == -to_ticks(datetime(2024, 1, 1))


def test_low_preference_ranks_last_even_below_past_matches():
    roster = [Identity(id="z", name="Zed Zee"), Identity(id="x", name="X"), Identity(id="y", name="Y")]
    attributes = {
        "s": PersonAttributes(past_matches=[past("x"), past("y")], low_preference_names=["zed ZEE"]),
    }
    ranked = rank_candidates("s", roster, attributes)
    assert ranked[-1].id == "z"
    assert score_candidate(attributes["s"], roster[0], PersonAttributes()) == LOWEST_SCORE


def test_attribute_weights_add_up():
    subject = PersonAttributes(discipline="Engineering", gender="F", seniority="Senior", sub_teams=["Search"])
    candidate = PersonAttributes(discipline="engineering", gender="f", seniority="junior", sub_teams=["search", "infra"])
    w = SCORE_WEIGHTS
    expected = w.same_sub_team + w.different_seniority + w.same_discipline + w.same_gender
    assert score_candidate(subject, Identity(id="c"), candidate) == expected == 34


def test_same_seniority_earns_nothing_for_seniority():
    subject = PersonAttributes(discipline="Design", gender="m", seniority="Senior")
    candidate = PersonAttributes(discipline="Sales", gender="f", seniority="SENIOR")
    assert score_candidate(subject, Identity(id="c"), candidate) == 0


def test_missing_records_score_as_empty_attributes():
    # empty discipline and gender compare equal, seniority does not differ
    roster = make_roster("xy")
    assert rank_positions("s", roster, {}) == [0, 1]
    assert score_candidate(PersonAttributes(), roster[0], PersonAttributes()) == 8


def test_ties_keep_input_order():
    roster = make_roster("pqrs")
    assert [p.id for p in rank_candidates("s", roster, None)] == ["p", "q", "r", "s"]


def test_is_previously_matched_checks_both_sides():
    a, b, c = make_roster("abc")
    attributes = {"b": PersonAttributes(past_matches=[PastMatch(partner_id="a", matched_at=datetime(2023, 1, 1))])}
    assert is_previously_matched(a, b, attributes)
    assert is_previously_matched(b, a, attributes)
    assert not is_previously_matched(a, c, attributes)
