"""
Closed vocabularies for the enumerated fields of the domain.

  mood     — the classification carried by every status update
  status   — lifecycle statuses of a status update (review workflow)
  reaction — emoji a reader can attach to a status update

The sets are frozen at import time and pairwise disjoint. There is no
runtime registration: adding a value is a code change.
"""
from typing import Optional

MOOD = "mood"
STATUS = "status"
REACTION = "reaction"

MOODS = frozenset({"focused", "calm", "happy", "blocked"})
STATUSES = frozenset({"submitted", "in_review", "approved", "denied", "needs_info"})
REACTION_KINDS = frozenset({"👍", "❤️", "😂", "😮", "😢", "🔥"})

_REGISTRY: dict[str, frozenset[str]] = {
    MOOD: MOODS,
    STATUS: STATUSES,
    REACTION: REACTION_KINDS,
}

# Fields on a status update whose changes are written to the transition log,
# mapped to the vocabulary their values must belong to.
TRACKED_FIELDS: dict[str, str] = {
    "mood": MOOD,
    "status": STATUS,
}


def is_valid(set_name: str, value: Optional[str]) -> bool:
    """Case-sensitive exact membership test. Unknown sets never match."""
    values = _REGISTRY.get(set_name)
    if values is None or not isinstance(value, str):
        return False
    return value in values


def values(set_name: str) -> list[str]:
    """Sorted members of a set, for stable error messages."""
    return sorted(_REGISTRY.get(set_name, ()))


def vocabulary_for_field(field: str) -> str:
    try:
        return TRACKED_FIELDS[field]
    except KeyError:
        raise ValueError(f"'{field}' is not a tracked field") from None


def humanize(value: Optional[str]) -> Optional[str]:
    """Display label for a vocabulary token: in_review → In Review."""
    if value is None:
        return None
    return " ".join(word.capitalize() for word in value.split("_") if word)
