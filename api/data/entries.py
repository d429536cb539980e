"""
Score Entries
Structured and legacy leaderboard entries and their serialized form.

The serialized JSON string of an entry is also its member identity in the
sorted set, so `serialize_entry` must stay byte-compatible with members the
game client's backend has already written: compact separators, fixed key
order, literal non-ASCII, integral floats without a fractional part.
"""

import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class StructuredEntry:
    """A full score record."""
    name: str
    efficiency: int
    score: Optional[int] = None
    accuracy: Optional[float] = None
    date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "accuracy": self.accuracy,
            "efficiency": self.efficiency,
            "date": self.date,
        }


@dataclass(frozen=True)
class LegacyEntry:
    """A member that is not a JSON object: only name and efficiency are known."""
    name: str
    efficiency: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "efficiency": self.efficiency}


ScoreEntry = Union[StructuredEntry, LegacyEntry]


def format_entry_date(today: Optional[date] = None) -> str:
    """Local date as YYYY/M/D."""
    today = today or date.today()
    return f"{today.year}/{today.month}/{today.day}"


def _json_number(value: float) -> Union[int, float]:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _dumps(data: Dict[str, Any]) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def build_entry(name: str, score: int, accuracy: float, efficiency: int,
                today: Optional[date] = None) -> StructuredEntry:
    return StructuredEntry(
        name=name,
        score=score,
        accuracy=accuracy,
        efficiency=efficiency,
        date=format_entry_date(today),
    )


def serialize_entry(entry: StructuredEntry) -> str:
    """Serialize a full entry as a sorted-set member."""
    return _dumps({
        "name": entry.name,
        "score": entry.score,
        "accuracy": _json_number(entry.accuracy),
        "efficiency": entry.efficiency,
        "date": entry.date,
    })


def serialize_mapping(data: Dict[str, Any]) -> str:
    """Serialize an already-decoded entry, keeping its key order."""
    return _dumps(data)


def serialize_reduced(name: str, efficiency: int) -> str:
    """Serialize the name+efficiency member used by admin delete and edit."""
    return _dumps({"name": name, "efficiency": efficiency})


def parse_member(member: str, efficiency: int) -> ScoreEntry:
    """
    Decode a sorted-set member.

    `efficiency` is the member's score in the sorted set and always wins
    over any efficiency embedded in the JSON.
    """
    try:
        data = json.loads(member)
    except (TypeError, ValueError):
        return LegacyEntry(name=member, efficiency=efficiency)

    if not isinstance(data, dict) or not isinstance(data.get("name"), str):
        return LegacyEntry(name=member, efficiency=efficiency)

    return StructuredEntry(
        name=data["name"],
        efficiency=efficiency,
        score=data.get("score"),
        accuracy=data.get("accuracy"),
        date=data.get("date"),
    )


def parse_stored_best(raw: Any) -> Optional[Dict[str, Any]]:
    """
    Decode a player-best value.

    Returns None when the value is missing, unparsable, or has no usable
    efficiency, which callers treat as "no prior score".
    """
    if raw is None:
        return None
    if isinstance(raw, dict):
        data = raw
    elif isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError as e:
            print(f"[RANKING] Failed to parse stored best score: {e}")
            return None
    else:
        print(f"[RANKING] Unexpected stored best type: {type(raw).__name__}")
        return None

    if not isinstance(data, dict):
        return None
    efficiency = data.get("efficiency")
    if isinstance(efficiency, bool) or not isinstance(efficiency, (int, float)):
        return None
    return data
