"""
Session value cache for resolved settings.

A ``SessionCache`` belongs to one configuration view. Once a memoized chain
resolves a setting, the value is stored here and later resolutions of the
same setting return it without walking the chain again. Entries are never
invalidated.

The lock only protects the table itself. Two threads resolving the same
setting at the same time may both walk the chain; the first ``put`` wins and
both observe equal values because resolution is deterministic for a view.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional


class SessionCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: str) -> str:
        """Store ``value`` unless an entry exists; return the stored value."""
        with self._lock:
            return self._values.setdefault(key, value)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._values)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
