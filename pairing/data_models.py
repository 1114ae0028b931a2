from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Identity(BaseModel):
    """
    Represents a single participant handed to the pairing engine.

    The engine treats it as an opaque token: it is only compared for equality
    and shown by name.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="identityId")
    name: str = Field(default="", alias="displayName")

    def __str__(self) -> str:
        return self.name or self.id


class PastMatch(BaseModel):
    """
    A pairing from an earlier cycle, as stored on the participant's record.
    """

    model_config = ConfigDict(populate_by_name=True)

    partner_id: str = Field(..., alias="partnerId")
    matched_at: datetime = Field(..., alias="matchedAtUtc")

    @field_validator("matched_at")
    @classmethod
    def as_naive_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class PersonAttributes(BaseModel):
    """
    Static profile data used only for scoring.

    Fields:
        past_matches: Earlier pairings, most recent first.
        discipline, gender, seniority: Free text, compared case-insensitively.
        sub_teams: Team membership tags.
        low_preference_names: Display names this person wants ranked last.
    """

    model_config = ConfigDict(populate_by_name=True)

    past_matches: List[PastMatch] = Field(default_factory=list, alias="pastMatches")
    discipline: str = ""
    gender: str = ""
    seniority: str = ""
    sub_teams: List[str] = Field(default_factory=list, alias="subTeams")
    low_preference_names: List[str] = Field(default_factory=list, alias="lowPreferenceNames")

    @field_validator("discipline", "gender", "seniority", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("past_matches", "sub_teams", "low_preference_names", mode="before")
    @classmethod
    def none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    def has_matched_with(self, partner_id: str) -> bool:
        return any(match.partner_id == partner_id for match in self.past_matches)

    def most_recent_match_with(self, partner_id: str) -> Optional[PastMatch]:
        matches = [match for match in self.past_matches if match.partner_id == partner_id]
        if not matches:
            return None
        return max(matches, key=lambda match: match.matched_at)


class MatchPair(BaseModel):
    """One pair in a pairing run."""

    first: Identity
    second: Identity
    previously_matched: bool = False


class MatchResult(BaseModel):
    """Outcome of one pairing run.

    Fields:
        pairs: Disjoint pairs covering all but at most one participant.
        odd_person: The leftover participant when the roster size is odd.
        strategy: Which algorithm produced the pairs ("none", "random" or "stable").
        attempts: Number of pairing attempts made, retries included.
        seed: Seed of the random source, when the engine created it.
    """

    pairs: List[MatchPair] = Field(default_factory=list)
    odd_person: Optional[Identity] = None
    strategy: str = "none"
    attempts: int = 0
    seed: Optional[int] = None

    @property
    def has_any_previously_matched_pair(self) -> bool:
        return any(pair.previously_matched for pair in self.pairs)

    @property
    def previously_matched_count(self) -> int:
        return sum(1 for pair in self.pairs if pair.previously_matched)

    def identities(self) -> List[Identity]:
        out: List[Identity] = []
        for pair in self.pairs:
            out.extend((pair.first, pair.second))
        if self.odd_person is not None:
            out.append(self.odd_person)
        return out

    def to_records(self) -> Dict[str, Any]:
        """Render the result in the shape downstream notification code consumes."""
        return {
            "pairs": [
                {
                    "idA": pair.first.id,
                    "idB": pair.second.id,
                    "previouslyMatched": pair.previously_matched,
                }
                for pair in self.pairs
            ],
            "oddPersonId": self.odd_person.id if self.odd_person is not None else None,
        }
