"""
Process inputs consumed by the resolution engine.

Two tables feed every resolution:

- ``EnvironmentSnapshot``: the process environment, captured once and never
  re-read. Tests build one from a plain dict instead of patching
  ``os.environ``.
- ``SystemProperties``: the mutable process properties table. The host
  process may write to it (the java home discovery caches its result here),
  so all access goes through a lock.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Optional


class EnvironmentSnapshot(Mapping):
    """Immutable view of environment variables."""

    def __init__(self, variables: Optional[Mapping[str, str]] = None):
        self._variables: Mapping[str, str] = MappingProxyType(dict(variables or {}))

    @classmethod
    def capture(cls) -> "EnvironmentSnapshot":
        """Snapshot the current process environment."""
        return cls(os.environ)

    def __getitem__(self, key: str) -> str:
        return self._variables[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"EnvironmentSnapshot({len(self)} variables)"


def _default_properties() -> Dict[str, str]:
    return {
        "user.dir": os.getcwd(),
        "user.home": str(Path.home()),
        "os.name": os.name,
        "path.separator": os.pathsep,
        "file.separator": os.sep,
        "line.separator": os.linesep,
    }


class SystemProperties:
    """Thread-safe process properties table."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None, defaults: bool = True):
        self._lock = threading.Lock()
        self._properties: Dict[str, str] = _default_properties() if defaults else {}
        if initial:
            self._properties.update(initial)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._properties.get(key, default)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._properties[key] = value

    def remove(self, key: str) -> Optional[str]:
        with self._lock:
            return self._properties.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        """Return a copy of all properties."""
        with self._lock:
            return dict(self._properties)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._properties

    def __repr__(self) -> str:
        return f"SystemProperties({len(self.snapshot())} entries)"


_system_properties: SystemProperties | None = None
_system_properties_lock = threading.Lock()


def system_properties() -> SystemProperties:
    """Return the process-wide properties table, creating it on first use."""
    global _system_properties
    if _system_properties is None:
        with _system_properties_lock:
            if _system_properties is None:
                _system_properties = SystemProperties()
    return _system_properties
