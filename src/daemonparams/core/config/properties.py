"""
Property file loading and the per-process properties store.

Property files use the ``key=value`` line format: ``#`` and ``!`` start
comments, keys end at the first unescaped ``=``, ``:`` or whitespace, a
trailing backslash continues a line, and the usual ``\\t \\n \\r \\f \\uXXXX``
escapes apply. Values are interpolated (see ``interpolation``) once, when the
file is first loaded.

``PropertiesStore.get`` parses each path at most once. The first caller for a
path takes that path's lock and loads it; concurrent callers for the same
path wait on the lock and then read the stored mapping. Callers for other
paths are not blocked.
"""

from __future__ import annotations

import os
import re
import threading
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Tuple, Union

from daemonparams.core.utils.logger import log_debug

from .environment import EnvironmentSnapshot, SystemProperties, system_properties
from .errors import FileReadFailure
from .interpolation import build_lookup, perform_substitution

PathLike = Union[str, os.PathLike]

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _continues(line: str) -> bool:
    backslashes = len(line) - len(line.rstrip("\\"))
    return backslashes % 2 == 1


def _logical_lines(text: str) -> Iterator[str]:
    lines = _LINE_BREAK.split(text)
    i = 0
    while i < len(lines):
        line = lines[i].lstrip(_WHITESPACE)
        i += 1
        if not line or line[0] in "#!":
            continue
        while _continues(line) and i < len(lines):
            line = line[:-1] + lines[i].lstrip(_WHITESPACE)
            i += 1
        if _continues(line):
            line = line[:-1]
        yield line


def _split_entry(line: str) -> Tuple[str, str]:
    i = 0
    while i < len(line):
        char = line[i]
        if char == "\\":
            i += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        i += 1
    key = line[:i]
    j = i
    while j < len(line) and line[j] in _WHITESPACE:
        j += 1
    if j < len(line) and line[j] in _SEPARATORS:
        j += 1
    while j < len(line) and line[j] in _WHITESPACE:
        j += 1
    return key, line[j:]


def _unescape(text: str) -> str:
    if "\\" not in text:
        return text
    out: List[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char != "\\":
            out.append(char)
            i += 1
            continue
        if i + 1 >= len(text):
            break
        code = text[i + 1]
        if code == "u":
            digits = text[i + 2:i + 6]
            if len(digits) != 4:
                raise ValueError("Malformed \\uxxxx encoding.")
            try:
                out.append(chr(int(digits, 16)))
            except ValueError:
                raise ValueError("Malformed \\uxxxx encoding.") from None
            i += 6
            continue
        out.append(_ESCAPES.get(code, code))
        i += 2
    return "".join(out)


def parse_properties(text: str) -> Dict[str, str]:
    """Parse property file text into an ordered dict; later keys win."""
    entries: Dict[str, str] = {}
    for line in _logical_lines(text):
        raw_key, raw_value = _split_entry(line)
        entries[_unescape(raw_key)] = _unescape(raw_value)
    return entries


def _read_text(path: Path) -> str:
    data = path.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def load_properties(
    path: PathLike,
    system_props: Optional[SystemProperties] = None,
    environment: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Load and interpolate one property file.

    A path that does not exist yields an empty dict. A file that exists but
    cannot be read or parsed raises ``FileReadFailure``.
    """
    path = Path(path)
    if not path.exists():
        return {}
    try:
        entries = parse_properties(_read_text(path))
    except (OSError, ValueError) as exc:
        raise FileReadFailure(path, str(exc)) from exc
    props = system_props if system_props is not None else system_properties()
    env = environment if environment is not None else EnvironmentSnapshot.capture()
    lookup = build_lookup(props.snapshot(), env)
    log_debug("properties", f"Loaded {len(entries)} entries", context=str(path))
    return perform_substitution(entries, lookup)


def normalize_path(path: PathLike) -> Path:
    return Path(os.path.normpath(os.path.abspath(path)))


class PropertiesStore:
    """Memoizing map from property file path to its interpolated entries."""

    def __init__(
        self,
        system_props: Optional[SystemProperties] = None,
        environment: Optional[Mapping[str, str]] = None,
    ):
        self.system_properties = system_props if system_props is not None else system_properties()
        self.environment = environment if environment is not None else EnvironmentSnapshot.capture()
        self._entries: Dict[Path, Mapping[str, str]] = {}
        self._locks: Dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, path: Path) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = threading.Lock()
                self._locks[path] = lock
            return lock

    def get(self, path: PathLike) -> Mapping[str, str]:
        key = normalize_path(path)
        entries = self._entries.get(key)
        if entries is not None:
            return entries
        with self._lock_for(key):
            entries = self._entries.get(key)
            if entries is None:
                loaded = load_properties(key, self.system_properties, self.environment)
                entries = MappingProxyType(loaded)
                self._entries[key] = entries
        return entries

    def loaded_paths(self) -> List[Path]:
        return list(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return normalize_path(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
