"""
Platform probes used by path settings and computed defaults.
"""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from daemonparams.core.utils.logger import log_debug


def is_cygwin(environment: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when running under Cygwin (or MSYS) path emulation."""
    if sys.platform.startswith(("cygwin", "msys")):
        return True
    if sys.platform != "win32" or environment is None:
        return False
    ostype = environment.get("OSTYPE", "").lower()
    return ostype.startswith(("cygwin", "msys"))


def cygpath(path: str) -> str:
    """Convert a Cygwin path to its native Windows form with ``cygpath -w``."""
    try:
        completed = subprocess.run(
            ["cygpath", "-w", path],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise RuntimeError(f"Unable to run cygpath for {path}: {exc}") from exc
    if completed.returncode != 0:
        raise RuntimeError(
            f"cygpath exited with code {completed.returncode} for {path}: "
            f"{completed.stderr.strip()}"
        )
    return completed.stdout.strip()


def find_java_home_from_executable(java: str = "java") -> Optional[str]:
    """
    Ask a ``java`` executable for its ``java.home`` property.

    Returns None when the executable is missing or does not report one.
    """
    try:
        completed = subprocess.run(
            [java, "-XshowSettings:properties", "-version"],
            capture_output=True,
            text=True,
            check=False,
            timeout=60,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        log_debug("platform", f"Could not run {java}: {exc}")
        return None
    # The JVM prints its settings on stderr
    for line in (completed.stderr + completed.stdout).splitlines():
        name, sep, value = line.strip().partition("=")
        if sep and name.strip() == "java.home":
            return value.strip()
    return None


def daemon_home_from_executable(executable: Optional[str], version: str) -> Optional[str]:
    """
    Locate the daemon installation from the client executable path.

    The client lives in ``<home>/bin``; the location is accepted only if the
    daemon jar for ``version`` is present under ``<home>/lib``.
    """
    if not executable:
        return None
    home = Path(executable).resolve().parent.parent
    if (home / "lib" / f"daemon-{version}.jar").exists():
        return str(home)
    return None
