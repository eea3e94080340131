"""In-memory data stores backing the application wizard."""

from typing import Any, Dict, Set

# Application drafts keyed by draft id; the session cookie only carries the id.
drafts: Dict[str, Dict[str, Any]] = {}

# Draft ids whose latest write reached memory but not MongoDB.
unsynced_drafts: Set[str] = set()
