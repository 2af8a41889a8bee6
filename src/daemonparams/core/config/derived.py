"""Computed setting values that are not plain source lookups."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import DigestComputationFailure

EXTENSIONS_FILENAME = "extensions.xml"


def parse_ext_classpath(value: Optional[str], base_dir: Path) -> List[str]:
    """
    Split a path-separator delimited classpath and make each entry absolute.

    Relative entries are resolved against ``base_dir``. Order and duplicates
    are kept.
    """
    segments = (value or "").split(os.pathsep)
    # Trailing empty segments are dropped, inner ones kept
    while segments and not segments[-1]:
        segments.pop()
    return [os.path.abspath(os.path.join(base_dir, segment)) for segment in segments]


def extensions_descriptors(project_dir: Path, user_home: Path, daemon_home: Path) -> List[Path]:
    """Candidate extension descriptors: project, user, then installation."""
    candidates = (
        Path(project_dir) / ".mvn" / EXTENSIONS_FILENAME,
        Path(user_home) / ".m2" / EXTENSIONS_FILENAME,
        Path(daemon_home) / "mvn" / "conf" / EXTENSIONS_FILENAME,
    )
    return [Path(os.path.normpath(os.path.abspath(path))) for path in candidates]


def digest_descriptors(paths: Sequence[Path]) -> str:
    """SHA-1 over each existing file's path followed by its content."""
    try:
        blob = []
        for path in paths:
            if path.exists():
                blob.append(str(path))
                blob.append(path.read_bytes().decode("utf-8"))
        return hashlib.sha1("".join(blob).encode("utf-8")).hexdigest()
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise DigestComputationFailure(str(exc)) from exc


def core_extensions_discriminator(project_dir: Path, user_home: Path, daemon_home: Path) -> str:
    """
    Hash identifying the core extensions visible to a build.

    Two clients get the same value only if the same set of descriptor files
    exists at the same paths with the same content.
    """
    return digest_descriptors(extensions_descriptors(project_dir, user_home, daemon_home))


def find_default_multimodule_project_directory(cwd: Path) -> str:
    """Nearest ancestor of ``cwd`` holding a ``.mvn`` directory, else ``cwd``."""
    directory: Optional[Path] = Path(cwd)
    while directory is not None:
        if (directory / ".mvn").is_dir():
            return str(directory)
        parent = directory.parent
        directory = parent if parent != directory else None
    return str(cwd)
