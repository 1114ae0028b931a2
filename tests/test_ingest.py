import json
from datetime import datetime

import pandas as pd
import pytest
from pydantic import ValidationError

from pairing.ingest import clean_roster_df, load_attributes, load_roster, parse_attributes, roster_from_df


def test_roster_columns_are_resolved_through_aliases():
    df = pd.DataFrame({"user_id ": ["u1", "u2"], "Name": ["Ada Lovelace", "Alan Turing"]})
    roster = roster_from_df(df)
    assert [(p.id, p.name) for p in roster] == [("u1", "Ada Lovelace"), ("u2", "Alan Turing")]


def test_missing_names_fall_back_to_id():
    df = pd.DataFrame({"identityId": ["u1", "u2"], "displayName": ["Ada", None]})
    assert [p.name for p in roster_from_df(df)] == ["Ada", "u2"]


def test_blank_and_duplicate_ids_are_dropped(capsys):
    df = pd.DataFrame({"identityId": ["u1", " ", "u1", "u2"], "displayName": ["A", "B", "C", "D"]})
    cleaned = clean_roster_df(df)
    assert cleaned["identityId"].tolist() == ["u1", "u2"]
    assert cleaned["displayName"].tolist() == ["A", "D"]
    out = capsys.readouterr().out
    assert "Warning: dropping 1 roster rows without an id." in out
    assert "duplicate" in out


def test_roster_without_id_column_is_rejected():
    with pytest.raises(ValueError, match="No identifier column"):
        roster_from_df(pd.DataFrame({"email": ["a@example.com"]}))


def test_load_roster_reads_csv_as_text(tmp_path):
    path = tmp_path / "roster.csv"
    path.write_text("identityId,displayName\n007,Bond\n42,Arthur\n", encoding="utf-8")
    roster = load_roster(path)
    assert [p.id for p in roster] == ["007", "42"]


def test_load_roster_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_roster(tmp_path / "nope.csv")


def test_parse_attributes_from_mapping():
    payload = {
        "u1": {
            "discipline": "Engineering",
            "gender": None,
            "subTeams": ["Search"],
            "lowPreferenceNames": ["Bob"],
            "pastMatches": [{"partnerId": "u2", "matchedAtUtc": "2024-03-01T10:00:00Z"}],
        },
        "u2": None,
    }
    attributes = parse_attributes(payload)
    u1 = attributes["u1"]
    assert u1.discipline == "Engineering"
    assert u1.gender == ""
    assert u1.sub_teams == ["Search"]
    assert u1.low_preference_names == ["Bob"]
    assert u1.past_matches[0].partner_id == "u2"
    assert u1.past_matches[0].matched_at == datetime(2024, 3, 1, 10, 0)
    assert attributes["u2"].past_matches == []


def test_parse_attributes_from_record_list():
    payload = [{"identityId": "u1", "seniority": "Senior"}, {"id": "u2"}]
    attributes = parse_attributes(payload)
    assert attributes["u1"].seniority == "Senior"
    assert set(attributes) == {"u1", "u2"}


def test_parse_attributes_rejects_records_without_id():
    with pytest.raises(ValueError, match="identityId"):
        parse_attributes([{"seniority": "Senior"}])


def test_parse_attributes_rejects_bad_timestamps():
    with pytest.raises(ValidationError):
        parse_attributes({"u1": {"pastMatches": [{"partnerId": "u2", "matchedAtUtc": "last tuesday"}]}})


def test_load_attributes(tmp_path):
    assert load_attributes(None) == {}

    path = tmp_path / "attributes.json"
    path.write_text(json.dumps({"u1": {"gender": "f"}}), encoding="utf-8")
    assert load_attributes(path)["u1"].gender == "f"

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="not valid JSON"):
        load_attributes(broken)
