from synthetic_generation.gen_synthetic_roster import build_synthetic_dataset


def test_synthetic_dataset_has_history_for_every_cycle():
    roster_df, attributes = build_synthetic_dataset(total=9, cycles=2, seed=3)

    assert list(roster_df.columns) == ["identityId", "displayName"]
    assert roster_df["identityId"].is_unique
    assert set(attributes) <= set(roster_df["identityId"])

    # 9 people -> 4 pairs per cycle -> 8 people with a new past match each cycle
    total_matches = sum(len(a.past_matches) for a in attributes.values())
    assert total_matches == 2 * 8
