# =============================================================================
# classpoll_core/data/migrations.py
# Load-time migrations for poll vote ledgers
# =============================================================================
"""
The ``polls.voted_user_ids`` column has held two shapes over time:

    version 1  JSON array of user ids that voted (which option was lost)
    version 2  JSON object {user_id: option_id}

Rows are upgraded to the current version as they are loaded, so the rest
of the application only ever sees version 2. A version 1 ledger cannot be
reconstructed and is replaced with an empty mapping.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Tuple

from classpoll_core.logging import get_logger

logger = get_logger(__name__)

CURRENT_LEDGER_VERSION = 2


def detect_ledger_version(ledger: Any) -> int:
    if isinstance(ledger, dict):
        return 2
    return 1


def _v1_to_v2(ledger: Any) -> Dict[str, str]:
    return {}


# (from_version, upgrade step)
LEDGER_MIGRATIONS: List[Tuple[int, Callable[[Any], Any]]] = [
    (1, _v1_to_v2),
]


def migrate_ledger(ledger: Any) -> Dict[str, str]:
    """Upgrade a stored ledger value to the current mapping shape."""
    version = detect_ledger_version(ledger)
    for from_version, step in LEDGER_MIGRATIONS:
        if version == from_version:
            ledger = step(ledger)
            version = from_version + 1
    return {str(user_id): str(option_id) for user_id, option_id in ledger.items() if option_id}


def migrate_poll_record(row: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a polls row whose ledger is in the current shape."""
    stored = row.get("voted_user_ids")
    migrated = dict(row)
    migrated["voted_user_ids"] = migrate_ledger(stored if stored is not None else {})
    if stored is not None and detect_ledger_version(stored) != CURRENT_LEDGER_VERSION:
        # Counts must match the (now empty) ledger
        logger.info(f"Poll {row.get('id')}: discarding legacy vote ledger and its counts")
        migrated["options"] = [dict(option, votes=0) for option in row.get("options") or []]
    return migrated
