"""
Leaderboard Service
Ranking policy: submission, best-score enforcement, top-N trim, rank lookup.

Every operation is a strict sequence of store calls. Nothing here is atomic:
two concurrent submissions for the same player can both read the same prior
best and both supersede it (lost update), and a store failure midway leaves
whatever was already written. Store errors propagate unchanged.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from ..data.entries import (
    ScoreEntry,
    build_entry,
    parse_member,
    parse_stored_best,
    serialize_entry,
    serialize_mapping,
    serialize_reduced,
)
from ..data.score_store import ScoreStore
from ..errors import InvalidInput, StoreProtocolError
from ..security.validators import (
    parse_accuracy,
    parse_float,
    parse_int,
    sanitize_mode,
    sanitize_player_name,
)
from ..settings import MAX_ENTRIES, RANKING_MODES


def ranking_key(mode: str) -> str:
    """Sorted set holding a mode's leaderboard."""
    return f"ranking:{mode}"


def player_key(mode: str, name: str) -> str:
    """Key holding a player's best entry for a mode."""
    return f"player:{mode}:{name}"


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of a submission. `rank` is None when not accepted."""
    accepted: bool
    rank: Optional[int] = None


def _require_mode(mode: Any) -> str:
    clean = sanitize_mode(mode)
    if clean is None:
        raise InvalidInput("Invalid or missing mode", {"mode": mode})
    return clean


def _require_name(name: Any, field: str = "name") -> str:
    clean = sanitize_player_name(name)
    if clean is None:
        raise InvalidInput(f"Invalid or missing {field}", {field: name})
    return clean


def _require_numbers(**fields: Tuple[Any, Callable[[Any], Any]]) -> Dict[str, Any]:
    """
    Coerce numeric fields given as (value, parser) pairs.

    Every missing or invalid field is reported in one InvalidInput.
    """
    parsed: Dict[str, Any] = {}
    missing = []
    invalid = []
    for field, (value, parser) in fields.items():
        if value is None:
            missing.append(field)
            continue
        number = parser(value)
        if number is None:
            invalid.append(field)
        parsed[field] = number
    if missing:
        raise InvalidInput("Missing required fields", {"missing": missing})
    if invalid:
        raise InvalidInput("Invalid numeric values", {"invalid": invalid})
    return parsed


class LeaderboardEngine:
    """Per-mode top-N leaderboards over a ScoreStore."""

    def __init__(
        self,
        store: ScoreStore,
        max_entries: int = MAX_ENTRIES,
        modes: Sequence[str] = RANKING_MODES,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.max_entries = max_entries
        self.modes = tuple(modes)
        self._today = today

    # ============== FETCH ==============

    def fetch(self, mode: Any) -> Iterator[ScoreEntry]:
        """
        Return up to `max_entries` entries for a mode, best first.

        The mode is validated immediately. The result is a fresh generator
        per call and the store is read on first iteration.
        """
        return self._iter_entries(_require_mode(mode))

    def _iter_entries(self, mode: str) -> Iterator[ScoreEntry]:
        reply = self.store.zrevrange(
            ranking_key(mode), 0, self.max_entries - 1, withscores=True
        )
        if len(reply) % 2:
            print(f"[RANKING] Odd-length reply for {mode}, dropping trailing element")
            reply = reply[:-1]

        for i in range(0, len(reply), 2):
            member, raw_score = reply[i], reply[i + 1]
            efficiency = parse_int(raw_score)
            if efficiency is None:
                print(f"[RANKING] Non-numeric score in {mode}: {raw_score!r}")
                raise StoreProtocolError("ZREVRANGE returned a non-numeric score", body=raw_score)
            yield parse_member(str(member), efficiency)

    # ============== SUBMIT ==============

    def submit(self, mode: Any, name: Any, score: Any, accuracy: Any,
               efficiency: Any) -> SubmitResult:
        """Record a score if it beats the player's current best."""
        mode = _require_mode(mode)
        name = _require_name(name)
        numbers = _require_numbers(
            score=(score, parse_int),
            accuracy=(accuracy, parse_accuracy),
            efficiency=(efficiency, parse_int),
        )
        efficiency = numbers["efficiency"]

        key = ranking_key(mode)
        best_key = player_key(mode, name)

        existing_raw = self.store.get(best_key)
        existing = parse_stored_best(existing_raw)
        if existing is not None:
            if efficiency <= existing["efficiency"]:
                print(f"[RANKING] {mode}/{name}: {efficiency} does not beat {existing['efficiency']}")
                return SubmitResult(accepted=False)
            # The stored string is the exact member written last time
            previous_member = (
                existing_raw if isinstance(existing_raw, str) else serialize_mapping(existing)
            )
            self.store.zrem(key, previous_member)

        entry = build_entry(name, numbers["score"], numbers["accuracy"], efficiency, self._today())
        member = serialize_entry(entry)
        self.store.zadd(key, efficiency, member)
        self.store.set(best_key, member)

        self._trim(key)

        player_rank = self._rank_of(key, member, efficiency)
        print(f"[RANKING] {mode}/{name}: saved efficiency {efficiency}, rank {player_rank}")
        return SubmitResult(accepted=True, rank=player_rank)

    # ============== ADMIN ==============

    def delete(self, mode: Any, name: Any, efficiency: Any) -> None:
        """
        Remove a player's name+efficiency member and best-score key.

        Best effort: a full-field member does not match the reduced form and
        stays in the sorted set.
        """
        mode = _require_mode(mode)
        name = _require_name(name)
        efficiency = _require_numbers(efficiency=(efficiency, parse_int))["efficiency"]

        removed = self.store.zrem(ranking_key(mode), serialize_reduced(name, efficiency))
        self.store.delete(player_key(mode, name))
        if not removed:
            print(f"[RANKING] Delete {mode}/{name}: no exact member match")

    def edit(self, mode: Any, old_name: Any, old_efficiency: Any, new_name: Any,
             new_score: Any, new_accuracy: Any, new_efficiency: Any) -> None:
        """Replace an entry with a fully specified one and move the best-score key."""
        mode = _require_mode(mode)
        old_name = _require_name(old_name, "oldName")
        new_name = _require_name(new_name, "newName")
        numbers = _require_numbers(
            oldEfficiency=(old_efficiency, parse_int),
            newScore=(new_score, parse_int),
            newAccuracy=(new_accuracy, parse_accuracy),
            newEfficiency=(new_efficiency, parse_int),
        )

        key = ranking_key(mode)
        entry = build_entry(
            new_name,
            numbers["newScore"],
            numbers["newAccuracy"],
            numbers["newEfficiency"],
            self._today(),
        )
        member = serialize_entry(entry)

        self.store.zrem(key, serialize_reduced(old_name, numbers["oldEfficiency"]))
        self.store.zadd(key, entry.efficiency, member)
        if old_name != new_name:
            self.store.delete(player_key(mode, old_name))
        self.store.set(player_key(mode, new_name), member)

        self._trim(key)

    def reset_all(self) -> List[str]:
        """
        Delete every known mode's sorted set and return the keys cleared.

        Player best-score keys are left behind: the store has no key scan.
        """
        deleted_keys = []
        for mode in self.modes:
            key = ranking_key(mode)
            if self.store.exists(key):
                self.store.delete(key)
                deleted_keys.append(key)
        print(f"[RANKING] Reset cleared {deleted_keys}")
        return deleted_keys

    def diagnose(self, mode: Any) -> Dict[str, Any]:
        """Raw connectivity checks against the store."""
        key = ranking_key(_require_mode(mode))
        return {
            "ping": self.store.ping(),
            "exists": self.store.exists(key),
            "zrevrange": self.store.zrevrange(key, 0, 4, withscores=True),
        }

    # ============== HELPERS ==============

    def _rank_of(self, key: str, member: str, efficiency: int) -> int:
        """
        1-based competition rank: one plus the entries with a strictly
        greater efficiency. Off the board is `max_entries + 1`.
        """
        position = self.store.zrevrank(key, member)
        if position is None:
            return self.max_entries + 1
        if position == 0:
            return 1

        # Equal scores sort by member, so entries above may share our efficiency
        above = self.store.zrevrange(key, 0, position - 1, withscores=True)
        better = 0
        for raw_score in above[1::2]:
            score = parse_float(raw_score)
            if score is None:
                raise StoreProtocolError("ZREVRANGE returned a non-numeric score", body=raw_score)
            if score > efficiency:
                better += 1
        return better + 1

    def _trim(self, key: str) -> None:
        """Evict everything below the top `max_entries` by descending rank."""
        if self.store.zcard(key) > self.max_entries:
            # Ascending ranks 0..-(N+1) are the descending ranks N..end
            removed = self.store.zremrangebyrank(key, 0, -(self.max_entries + 1))
            print(f"[RANKING] Trimmed {removed} entries from {key}")
