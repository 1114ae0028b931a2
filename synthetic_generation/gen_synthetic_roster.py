#!/usr/bin/env python3
"""Generate a synthetic roster and attribute store for trying out the pairing CLI.

Writes `data/synthetic_roster_<timestamp>.csv` (identityId, displayName) and a
matching `data/synthetic_attributes_<timestamp>.json`. Past matches come from
running the real engine over a few earlier cycles.
"""

import argparse
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd
import shortuuid

# Ensure project root (parent of synthetic_generation/) is on sys.path for package imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pairing.data_models import Identity, PersonAttributes
from pairing.engine import PairingEngine
from pairing.history import record_pairs, save_attributes


FIRST_NAMES = [
    "Avery", "Blake", "Casey", "Devon", "Emery", "Finley", "Harper", "Jordan",
    "Kai", "Logan", "Morgan", "Noel", "Parker", "Quinn", "Reese", "Sage",
    "Skyler", "Taylor", "Rowan", "Jamie",
]
LAST_NAMES = [
    "Adler", "Brooks", "Chen", "Diaz", "Eriksen", "Fischer", "Garcia", "Haddad",
    "Ito", "Jensen", "Kowalski", "Laine", "Moreau", "Nakamura", "Okafor", "Patel",
]
DISCIPLINES = ["Engineering", "Design", "Product", "Data Science", "Sales", "Marketing"]
GENDERS = ["female", "male", "non-binary", ""]
SENIORITIES = ["Junior", "Mid", "Senior", "Principal"]
SUB_TEAMS = ["platform", "growth", "payments", "search", "mobile", "infra"]


def generate_synthetic_id() -> str:
    """Generate a short UUID for synthetic participant identification."""
    return shortuuid.uuid()


def generate_timestamped_filename(prefix: str, extension: str) -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"


def generate_roster(total: int, rng: random.Random) -> List[Identity]:
    return [
        Identity(id=generate_synthetic_id(), name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}")
        for _ in range(total)
    ]


def generate_attributes(
    roster: List[Identity],
    rng: random.Random,
    coverage: float = 0.9,
    low_preference_rate: float = 0.05,
) -> Dict[str, PersonAttributes]:
    """Random profile data for roughly `coverage` of the roster."""
    attributes: Dict[str, PersonAttributes] = {}
    for person in roster:
        if rng.random() > coverage:
            continue
        others = [p.name for p in roster if p.id != person.id]
        low = [rng.choice(others)] if others and rng.random() < low_preference_rate else []
        attributes[person.id] = PersonAttributes(
            discipline=rng.choice(DISCIPLINES),
            gender=rng.choice(GENDERS),
            seniority=rng.choice(SENIORITIES),
            sub_teams=rng.sample(SUB_TEAMS, k=rng.randint(0, 2)),
            low_preference_names=low,
        )
    return attributes


def simulate_history(
    roster: List[Identity],
    attributes: Dict[str, PersonAttributes],
    cycles: int,
    seed: int,
    cycle_days: int = 14,
) -> Dict[str, PersonAttributes]:
    """Pair the roster `cycles` times in the past and record each cycle."""
    engine = PairingEngine(max_retries=3)
    start = datetime.now(timezone.utc) - timedelta(days=cycle_days * cycles)
    for cycle in range(cycles):
        result = engine.create_pairs(roster, attributes, seed=seed + cycle)
        attributes = record_pairs(attributes, result, matched_at=start + timedelta(days=cycle_days * cycle))
    return attributes


def build_synthetic_dataset(total: int, cycles: int, seed: int) -> Tuple[pd.DataFrame, Dict[str, PersonAttributes]]:
    rng = random.Random(seed)
    roster = generate_roster(total, rng)
    attributes = generate_attributes(roster, rng)
    attributes = simulate_history(roster, attributes, cycles, seed)
    roster_df = pd.DataFrame([{"identityId": p.id, "displayName": p.name} for p in roster])
    return roster_df, attributes


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(description="Generate a synthetic pairing roster.")
    parser.add_argument("--total", type=int, required=True, help="Number of synthetic participants to generate")
    parser.add_argument("--cycles", type=int, default=3, help="Earlier pairing cycles to record as history")
    parser.add_argument("--seed", type=int, default=7, help="Random seed")
    parser.add_argument("--out-dir", type=Path, default=Path("data"), help="Output directory")
    return parser.parse_args()


def main() -> None:
    """Entry point for CLI execution."""
    args = parse_args()

    print(f"Generating {args.total} synthetic participants with {args.cycles} past cycles...")
    roster_df, attributes = build_synthetic_dataset(args.total, args.cycles, args.seed)

    args.out_dir.mkdir(parents=True, exist_ok=True)
    roster_path = args.out_dir / generate_timestamped_filename("synthetic_roster", "csv")
    attributes_path = args.out_dir / generate_timestamped_filename("synthetic_attributes", "json")
    roster_df.to_csv(roster_path, index=False)
    save_attributes(attributes_path, attributes)
    print(f"Saved {len(roster_df)} participants to {roster_path}")
    print(f"Saved {len(attributes)} attribute records to {attributes_path}")


if __name__ == "__main__":
    main()
