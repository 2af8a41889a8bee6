"""
Shared pytest fixtures and configuration for daemonparams tests.

This module provides an isolated process environment for every test: an
injected environment snapshot, a private system properties table and a
directory layout (user home, project, daemon installation) under tmp_path.
"""

import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, Optional

import pytest

# Put `src/` first so `import daemonparams` uses workspace code.
_REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from daemonparams.core.config.catalog import SETTINGS
from daemonparams.core.config.chain import ResolutionChain, ResolutionContext
from daemonparams.core.config.environment import EnvironmentSnapshot, SystemProperties
from daemonparams.core.config.properties import PropertiesStore
from daemonparams.core.daemon_parameters import DaemonParameters
from daemonparams.core.utils.logger import reset_logging


# ============================================================================
# Process Input Fixtures
# ============================================================================

@pytest.fixture
def environment() -> EnvironmentSnapshot:
    """Environment snapshot with a couple of well-known variables."""
    return EnvironmentSnapshot({"FOO": "bar", "PATH": "/usr/bin"})


@pytest.fixture
def layout(tmp_path: Path) -> SimpleNamespace:
    """Directory layout: user home, project with .mvn, daemon installation."""
    home = tmp_path / "home"
    project = tmp_path / "project"
    daemon_home = tmp_path / "daemon"
    (home / ".m2").mkdir(parents=True)
    (project / ".mvn").mkdir(parents=True)
    (daemon_home / "conf").mkdir(parents=True)
    (daemon_home / "mvn" / "conf").mkdir(parents=True)
    return SimpleNamespace(
        root=tmp_path,
        home=home,
        project=project,
        daemon_home=daemon_home,
        local_properties=project / ".mvn" / "daemon.properties",
        user_properties=home / ".m2" / "daemon.properties",
        global_properties=daemon_home / "conf" / "daemon.properties",
    )


@pytest.fixture
def system_props(layout: SimpleNamespace) -> SystemProperties:
    """Private properties table pointing user.dir/user.home into the layout."""
    return SystemProperties(
        {"user.dir": str(layout.project), "user.home": str(layout.home)},
        defaults=False,
    )


@pytest.fixture
def store(system_props: SystemProperties, environment: EnvironmentSnapshot) -> PropertiesStore:
    return PropertiesStore(system_props, environment)


@pytest.fixture
def context(system_props: SystemProperties, environment: EnvironmentSnapshot) -> ResolutionContext:
    return ResolutionContext(system_props, environment)


@pytest.fixture
def chain_factory(context: ResolutionContext):
    """Build an empty chain for a catalog setting."""

    def _make(name: str = "BUILDER") -> ResolutionChain:
        return ResolutionChain(SETTINGS[name], context)

    return _make


@pytest.fixture
def make_parameters(layout, system_props, environment):
    """Factory for DaemonParameters wired to the test layout."""

    def _make(
        overrides: Optional[Dict[str, Any]] = None,
        env: Optional[Dict[str, str]] = None,
        with_daemon_home: bool = True,
    ) -> DaemonParameters:
        values: Dict[str, Any] = {}
        if with_daemon_home:
            values["DAEMON_HOME"] = layout.daemon_home
        values.update(overrides or {})
        snapshot = EnvironmentSnapshot(env) if env is not None else environment
        return DaemonParameters(
            values,
            environment=snapshot,
            system_properties=system_props,
        )

    return _make


@pytest.fixture
def write_properties():
    """Write a property file, creating parent directories."""

    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


# ============================================================================
# CLI Fixtures
# ============================================================================

@pytest.fixture
def typer_test_client():
    """Typer test client for CLI testing."""
    from typer.testing import CliRunner
    return CliRunner()


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def clean_logging():
    """Start every test from an unconfigured logger."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def clean_environment():
    """Restore os.environ after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual functions/classes")
    config.addinivalue_line("markers", "integration: Tests that resolve full daemon parameters")
