"""Matching of queried stop ids against feed stop ids."""

from typing import List, Optional

from .models import StopTimeUpdate


def matches(stop_id: str, candidate: str) -> bool:
    """
    Check whether a feed stop id refers to the queried stop.

    Accepts the exact id, the same number written with leading zeros
    ("08922" for "8922") and platform variants ("8922-1"). "89" never
    matches "8922".

    Args:
        stop_id: Stop id the caller asked for.
        candidate: Stop id found in a stop time update.

    Returns:
        True if the candidate is the queried stop.
    """
    if candidate == stop_id:
        return True

    # Numeric comparison handles leading zeros
    if _same_number(stop_id, candidate):
        return True

    # Platform/bay variants must start with our id followed by a dash
    if candidate.startswith(stop_id + "-"):
        return True

    # Only strip LEADING zeros
    candidate_trimmed = candidate.lstrip("0")
    if candidate_trimmed == stop_id.lstrip("0") and candidate_trimmed == stop_id:
        return True

    return False


def _same_number(a: str, b: str) -> bool:
    # int() would also accept "8_922" and padded whitespace
    if not (a.lstrip("+-").isdigit() and b.lstrip("+-").isdigit()):
        return False
    try:
        return int(a) == int(b)
    except ValueError:
        return False


def find_matching_update(stop_id: str, updates: List[StopTimeUpdate]) -> Optional[StopTimeUpdate]:
    """Return the first stop time update serving stop_id, or None."""
    for update in updates:
        if matches(stop_id, update.stop_id):
            return update
    return None


def last_stop_id(updates: List[StopTimeUpdate]) -> Optional[str]:
    """Stop id of the update with the highest stop sequence."""
    if not updates:
        return None
    last = max(updates, key=lambda u: u.stop_sequence or 0)
    return last.stop_id
