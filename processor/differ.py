"""Structural diff between two active strike snapshots."""
import logging
from typing import Any, Optional

from processor.models import ActiveStrikes, DiffResult

logger = logging.getLogger(__name__)


def values_equal(left: Any, right: Any) -> bool:
    """
    Compare two decoded JSON values for exact structural equality.

    Objects compare key by key, arrays element by element in order. Scalars
    must match in JSON type as well as value, so ``True`` never equals ``1``.

    Args:
        left: First JSON value
        right: Second JSON value

    Returns:
        True if both values are structurally identical
    """
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)

    if isinstance(left, list) and isinstance(right, list):
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))

    if _json_type(left) != _json_type(right):
        return False

    return left == right


def _json_type(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, dict):
        return 'object'
    if isinstance(value, list):
        return 'array'
    return type(value).__name__


def diff_active_strikes(
    previous: ActiveStrikes,
    current: ActiveStrikes
) -> Optional[DiffResult]:
    """
    Classify every employer whose strike changed between two snapshots.

    An employer only in ``current``, or in both with different content, is
    newly active. An employer only in ``previous`` is newly inactive; a
    changed strike is not also reported as inactive.

    Args:
        previous: Active strikes from the last persisted snapshot
        current: Active strikes from the latest feed

    Returns:
        DiffResult, or None when nothing differs
    """
    added = [
        strike for employer, strike in current.items()
        if employer not in previous or
        not values_equal(previous[employer].to_dict(), strike.to_dict())
    ]

    removed = [
        strike for employer, strike in previous.items()
        if employer not in current
    ]

    if not added and not removed:
        return None

    logger.info(
        f"Diff found {len(added)} newly active and "
        f"{len(removed)} newly inactive strikes"
    )
    return DiffResult(added=added, removed=removed)
