"""Keep the attribute store's match history current after a pairing run.

Nothing here talks to a database: callers get a new attribute mapping back and
decide where to persist it (`save_attributes` writes the JSON store used by the
CLI).
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .data_models import MatchResult, PastMatch, PersonAttributes


def record_pairs(
    attributes: Mapping[str, PersonAttributes],
    result: MatchResult,
    matched_at: Optional[datetime] = None,
) -> Dict[str, PersonAttributes]:
    """Return a copy of `attributes` with every pair from `result` added to history.

    Both members get the other inserted at the front of `past_matches`, keeping
    the list most-recent-first. People without a record get a fresh one.
    """
    when = matched_at or datetime.now(timezone.utc)
    updated: Dict[str, PersonAttributes] = {key: value.model_copy(deep=True) for key, value in attributes.items()}

    def _prepend(person_id: str, partner_id: str) -> None:
        record = updated.get(person_id) or PersonAttributes()
        history = [PastMatch(partner_id=partner_id, matched_at=when)] + list(record.past_matches)
        updated[person_id] = record.model_copy(update={"past_matches": history})

    for pair in result.pairs:
        _prepend(pair.first.id, pair.second.id)
        _prepend(pair.second.id, pair.first.id)
    return updated


def dump_attributes(attributes: Mapping[str, PersonAttributes]) -> Dict[str, Any]:
    """Serialize to the attribute-store wire shape (camelCase keys, ISO timestamps)."""
    return {key: value.model_dump(mode="json", by_alias=True) for key, value in attributes.items()}


def save_attributes(path: Path, attributes: Mapping[str, PersonAttributes]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(dump_attributes(attributes), fh, ensure_ascii=False, indent=2)
