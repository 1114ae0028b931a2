from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .data_models import Identity, PersonAttributes


FIELD_ALIASES: Dict[str, List[str]] = {
    "id": ["identityId", "identity_id", "user_id", "userId", "participant_id", "id", "Id"],
    "name": ["displayName", "display_name", "name", "Name", "Your name"],
}


def get_alias_column(df: pd.DataFrame, key: str) -> Optional[str]:
    for candidate in FIELD_ALIASES.get(key, []):
        if candidate in df.columns:
            return candidate
    return None


def resolve_aliases(df: pd.DataFrame) -> Dict[str, Optional[str]]:
    return {key: get_alias_column(df, key) for key in FIELD_ALIASES}


def clean_roster_df(df: pd.DataFrame) -> pd.DataFrame:
    """Normalize a roster export: trimmed headers/cells, one row per id."""

    out = df.copy()
    out.columns = [col.strip() if isinstance(col, str) else col for col in out.columns]
    id_col = get_alias_column(out, "id")
    if id_col is None:
        raise ValueError(f"No identifier column found. Expected one of: {FIELD_ALIASES['id']}")

    for col in out.columns:
        if pd.api.types.is_object_dtype(out[col]) or pd.api.types.is_string_dtype(out[col]) or col == id_col:
            out[col] = (
                out[col]
                .astype(str)
                .str.replace("\n", " ")
                .str.replace(r"\s+", " ", regex=True)
                .str.strip()
                .replace({"nan": None, "None": None, "": None})
            )

    blank = out[id_col].isna()
    if blank.any():
        print(f"Warning: dropping {int(blank.sum())} roster rows without an id.")
        out = out[~blank]

    dupes = out[id_col].duplicated(keep="first")
    if dupes.any():
        print(f"Warning: dropping {int(dupes.sum())} duplicate roster rows: {sorted(out.loc[dupes, id_col].unique())}")
        out = out[~dupes]

    return out.reset_index(drop=True)


def roster_from_df(df: pd.DataFrame) -> List[Identity]:
    cleaned = clean_roster_df(df)
    alias_map = resolve_aliases(cleaned)
    id_col = alias_map["id"]
    name_col = alias_map["name"]

    roster = []
    for _, row in cleaned.iterrows():
        identity_id = str(row[id_col])
        name = row[name_col] if name_col is not None else None
        if name is None or pd.isna(name) or not str(name).strip():
            name = identity_id
        roster.append(Identity(id=identity_id, name=str(name)))
    return roster


def load_roster(csv_path: Path) -> List[Identity]:
    if not Path(csv_path).exists():
        raise FileNotFoundError(f"Roster CSV not found: {csv_path}")
    return roster_from_df(pd.read_csv(csv_path, dtype=str))


def parse_attributes(payload: Any) -> Dict[str, PersonAttributes]:
    """Build the attribute lookup from a decoded attribute-store document.

    Accepts either an object keyed by identity id or a list of records that
    each carry an `identityId` (or `id`).
    """
    if isinstance(payload, dict):
        return {str(key): PersonAttributes.model_validate(record or {}) for key, record in payload.items()}

    if isinstance(payload, list):
        out: Dict[str, PersonAttributes] = {}
        for position, record in enumerate(payload):
            if not isinstance(record, dict):
                raise ValueError(f"Attribute record #{position} is not an object")
            key = record.get("identityId", record.get("id"))
            if key is None:
                raise ValueError(f"Attribute record #{position} has no 'identityId'")
            body = {k: v for k, v in record.items() if k not in ("identityId", "id")}
            out[str(key)] = PersonAttributes.model_validate(body)
        return out

    raise ValueError(f"Unsupported attribute document type: {type(payload).__name__}")


def load_attributes(json_path: Optional[Path]) -> Dict[str, PersonAttributes]:
    """Read the attribute store; no path means nobody has attributes yet."""
    if json_path is None:
        return {}
    path = Path(json_path)
    if not path.exists():
        raise FileNotFoundError(f"Attribute file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        try:
            payload = json.load(fh)
        except json.JSONDecodeError as e:
            raise ValueError(f"Attribute file {path} is not valid JSON ({e})") from e
    return parse_attributes(payload)
