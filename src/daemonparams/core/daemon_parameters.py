"""
Daemon parameters: the standard resolution chain of every daemon setting.

``DaemonParameters`` is an immutable configuration view. It holds explicit
overrides (usually from the command line) and resolves everything else on
demand from process properties, the layered property files, environment
variables and computed defaults.

Property files are consulted in this order:

1. the file named by ``daemon.propertiesPath`` (supplied)
2. ``<project>/.mvn/daemon.properties`` (local)
3. ``<user home>/.m2/daemon.properties`` (user)
4. ``<daemon home>/conf/daemon.properties`` (global)

Derived views (``cd``, ``with_debug``, ``with_jvm_args``...) copy the
overrides into a new mapping and start with an empty session cache. They
share the property file store, since a file's content is fixed for the
process lifetime.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple, Union

from daemonparams import __version__
from daemonparams.core.config.cache import SessionCache
from daemonparams.core.config.catalog import SETTINGS, Setting, SocketFamily
from daemonparams.core.config.chain import ResolutionChain, ResolutionContext
from daemonparams.core.config.coercion import OptionalValue
from daemonparams.core.config.derived import (
    core_extensions_discriminator,
    find_default_multimodule_project_directory,
    parse_ext_classpath,
)
from daemonparams.core.config.environment import (
    EnvironmentSnapshot,
    SystemProperties,
    system_properties as default_system_properties,
)
from daemonparams.core.config.errors import ConfigError
from daemonparams.core.config.platform import (
    daemon_home_from_executable,
    find_java_home_from_executable,
)
from daemonparams.core.config.properties import PropertiesStore
from daemonparams.core.config.sources import ValueSource, described_source, override_source
from daemonparams.core.utils.logger import log_warning

LOG_EXTENSION = ".log"
EXT_CLASS_PATH = "maven.ext.class.path"
PROPERTIES_FILENAME = "daemon.properties"

SettingKey = Union[Setting, str]


def _setting(key: SettingKey) -> Setting:
    return key if isinstance(key, Setting) else SETTINGS[key]


def _to_property_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _build_overrides(
    base: Mapping[str, str], changes: Mapping[SettingKey, Any]
) -> Mapping[str, str]:
    overrides = dict(base)
    for key, value in changes.items():
        prop = key if isinstance(key, str) and key not in SETTINGS else _setting(key).property
        if value is None:
            overrides.pop(prop, None)
        else:
            overrides[prop] = _to_property_value(value)
    return MappingProxyType(overrides)


class DaemonParameters:
    """Lazily resolved daemon configuration."""

    def __init__(
        self,
        overrides: Optional[Mapping[SettingKey, Any]] = None,
        *,
        environment: Optional[Mapping[str, str]] = None,
        system_properties: Optional[SystemProperties] = None,
        store: Optional[PropertiesStore] = None,
        executable: Optional[str] = None,
    ):
        self._overrides = _build_overrides({}, overrides or {})
        self.environment = environment if environment is not None else EnvironmentSnapshot.capture()
        self.system_properties = (
            system_properties if system_properties is not None else default_system_properties()
        )
        self.store = (
            store if store is not None else PropertiesStore(self.system_properties, self.environment)
        )
        self.executable = executable
        self.cache = SessionCache()
        self.context = ResolutionContext(self.system_properties, self.environment)

    @property
    def overrides(self) -> Mapping[str, str]:
        return self._overrides

    # ------------------------------------------------------------------
    # Chain builders
    # ------------------------------------------------------------------

    def value(self, key: SettingKey) -> ResolutionChain:
        """Chain holding only the explicit override of ``key``."""
        setting = _setting(key)
        return ResolutionChain(setting, self.context).with_override(
            override_source(self._overrides, setting)
        )

    def property(self, key: SettingKey) -> ResolutionChain:
        """Standard chain: override, system property, property files, default."""
        setting = _setting(key)
        return (
            self.value(setting)
            .with_system_property()
            .with_property_file(self.store, self.supplied_properties_path())
            .with_property_file(self.store, self.local_properties_path())
            .with_property_file(self.store, self.user_properties_path())
            .with_property_file(self.store, self.global_properties_path)
            .with_computed_default(lambda: self._default_value(setting))
        )

    def system_property(self, key: SettingKey) -> ResolutionChain:
        return ResolutionChain(_setting(key), self.context).with_system_property()

    def environment_variable(self, key: SettingKey) -> ResolutionChain:
        return ResolutionChain(_setting(key), self.context).with_environment_variable()

    def from_value_source(self, key: SettingKey, source: ValueSource) -> ResolutionChain:
        return ResolutionChain(_setting(key), self.context).with_override(source)

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def daemon_home(self) -> Path:
        home = (
            self.value("DAEMON_HOME")
            .with_override(
                described_source(
                    "path relative to the daemon executable",
                    lambda: daemon_home_from_executable(self.executable, __version__),
                )
            )
            .with_system_property()
            .with_property_file(self.store, self.supplied_properties_path())
            .with_property_file(self.store, self.local_properties_path())
            .with_property_file(self.store, self.user_properties_path())
            .with_environment_variable()
            .with_failure_if_unresolved()
            .with_memoization(self.cache)
            .as_path()
        )
        return Path(os.path.normpath(home.absolute()))

    def java_home(self) -> Path:
        result = (
            self.value("JAVA_HOME")
            .with_property_file(self.store, self.supplied_properties_path())
            .with_property_file(self.store, self.local_properties_path())
            .with_property_file(self.store, self.user_properties_path())
            .with_property_file(self.store, self.global_properties_path)
            .with_system_property()
            .with_environment_variable()
            .with_override(described_source("java command", self._java_home_from_path))
            .with_failure_if_unresolved()
            .with_memoization(self.cache)
            .as_path()
        )
        try:
            return result.resolve(strict=True)
        except OSError as exc:
            raise ConfigError(f"Could not get a real path from path {result}") from exc

    def _java_home_from_path(self) -> Optional[str]:
        log_warning(
            "daemon_parameters",
            "Falling back to finding JAVA_HOME by running java executable available in PATH."
            " You may want to avoid this time consuming task by setting JAVA_HOME environment"
            " variable or by passing java.home system property through command line or in"
            " one of the daemon configuration files.",
        )
        java_home = find_java_home_from_executable("java")
        if java_home is not None:
            self.system_properties.set(SETTINGS["JAVA_HOME"].property, java_home)
        return java_home

    def user_dir(self) -> Path:
        return (
            self.value("USER_DIR")
            .with_system_property()
            .with_failure_if_unresolved()
            .with_memoization(self.cache)
            .as_path()
            .absolute()
        )

    def user_home(self) -> Path:
        return (
            self.value("USER_HOME")
            .with_system_property()
            .with_failure_if_unresolved()
            .with_memoization(self.cache)
            .as_path()
            .absolute()
        )

    def supplied_properties_path(self) -> Optional[Path]:
        return (
            self.value("DAEMON_PROPERTIES_PATH")
            .with_system_property()
            .with_environment_variable()
            .as_path()
        )

    def jvm_config_path(self) -> Path:
        """``.mvn/jvm.config`` of the project; its content is passed to the daemon JVM."""
        return self.multi_module_project_directory() / ".mvn" / "jvm.config"

    def local_properties_path(self) -> Path:
        return self.multi_module_project_directory() / ".mvn" / PROPERTIES_FILENAME

    def user_properties_path(self) -> Path:
        return self.user_home() / ".m2" / PROPERTIES_FILENAME

    def global_properties_path(self) -> Path:
        return self.daemon_home() / "conf" / PROPERTIES_FILENAME

    def daemon_storage(self) -> Path:
        return (
            self.value("DAEMON_STORAGE")
            .with_system_property()
            .with_property_file(self.store, self.global_properties_path)
            .with_environment_variable()
            .with_computed_default(
                lambda: str(self.user_home() / ".m2" / "daemon" / "registry" / __version__)
            )
            .as_path()
        )

    def registry(self) -> Path:
        return self.daemon_storage() / "registry.bin"

    def daemon_log(self, daemon: str) -> Path:
        return self.daemon_storage() / f"daemon-{daemon}{LOG_EXTENSION}"

    def daemon_out_log(self, daemon: str) -> Path:
        return self.daemon_storage() / f"daemon-{daemon}.out{LOG_EXTENSION}"

    def multi_module_project_directory(self, project_dir: Optional[Path] = None) -> Path:
        directory = (
            self.value("MULTIMODULE_PROJECT_DIRECTORY")
            .with_system_property()
            .with_computed_default(
                lambda: find_default_multimodule_project_directory(
                    project_dir if project_dir is not None else self.user_dir()
                )
            )
            .as_path()
        )
        return Path(os.path.normpath(directory.absolute()))

    # ------------------------------------------------------------------
    # Plain settings
    # ------------------------------------------------------------------

    def min_heap_size(self) -> Optional[str]:
        return self.property("MIN_HEAP_SIZE").as_string()

    def max_heap_size(self) -> Optional[str]:
        return self.property("MAX_HEAP_SIZE").as_string()

    def thread_stack_size(self) -> Optional[str]:
        return self.property("THREAD_STACK_SIZE").as_string()

    def jvm_args(self) -> Optional[str]:
        return self.property("JVM_ARGS").as_string()

    def jdk_java_opts(self) -> Optional[str]:
        return self.property("JDK_JAVA_OPTIONS").as_string()

    def threads(self) -> str:
        """
        Number of build threads passed to the daemon unless the user passes
        ``-T``/``--threads`` explicitly. Defaults to one less than the CPU
        count, but at least ``daemon.minThreads``.
        """
        cpus = os.cpu_count() or 1
        return (
            self.property("THREADS")
            .with_computed_default(
                lambda: str(self.property("MIN_THREADS").as_int_with(lambda m: max(cpus - 1, m)))
            )
            .with_failure_if_unresolved()
            .as_string()
        )

    def builder(self) -> str:
        return self.property("BUILDER").with_failure_if_unresolved().as_string()

    def settings(self) -> Optional[Path]:
        """Path to ``settings.xml`` or None."""
        return self.property("SETTINGS_FILE").as_path()

    def file(self) -> Optional[Path]:
        """Path to ``pom.xml`` or None."""
        return self.value("POM_FILE").as_path()

    def repo_local(self) -> Optional[Path]:
        """Local repository, or None if the daemon should use its default."""
        return self.property("REPO_LOCAL").as_path()

    def no_daemon(self) -> bool:
        """True if the build should run in this process instead of a daemon."""
        return (
            self.value("NO_DAEMON")
            .with_system_property()
            .with_environment_variable()
            .with_computed_default()
            .as_bool()
        )

    def debug(self) -> bool:
        return self.value("DEBUG").with_system_property().with_computed_default().as_bool()

    def serial(self) -> bool:
        return self.value("SERIAL").with_system_property().with_computed_default().as_bool()

    def keep_alive(self) -> timedelta:
        return self.property("KEEP_ALIVE").with_failure_if_unresolved().as_duration()

    def max_lost_keep_alive(self) -> int:
        return self.property("MAX_LOST_KEEP_ALIVE").with_failure_if_unresolved().as_int()

    def no_buffering(self) -> bool:
        return self.property("NO_BUFFERING").with_failure_if_unresolved().as_bool()

    def rolling_window_size(self) -> int:
        return self.property("ROLLING_WINDOW_SIZE").with_failure_if_unresolved().as_int()

    def purge_log_period(self) -> timedelta:
        return self.property("LOG_PURGE_PERIOD").with_failure_if_unresolved().as_duration()

    def idle_timeout(self) -> timedelta:
        return self.property("IDLE_TIMEOUT").with_failure_if_unresolved().as_duration()

    def enable_assertions(self) -> bool:
        return self.property("ENABLE_ASSERTIONS").as_bool()

    def socket_family(self) -> OptionalValue[SocketFamily]:
        return self.property("SOCKET_FAMILY").as_optional().map(SocketFamily)

    # ------------------------------------------------------------------
    # Computed defaults and discriminating values
    # ------------------------------------------------------------------

    def _default_value(self, setting: Setting) -> Optional[str]:
        if setting.name == "EXT_CLASSPATH":
            classpath = parse_ext_classpath(self.system_properties.get(EXT_CLASS_PATH), self.user_home())
            return ",".join(classpath)
        if setting.name == "CORE_EXTENSIONS_DISCRIMINATOR":
            return core_extensions_discriminator(
                self.multi_module_project_directory(), self.user_home(), self.daemon_home()
            )
        if setting.name == "CORE_EXTENSIONS_EXCLUDE":
            exclusions = self.system_property(setting).with_computed_default().as_string()
            return exclusions if exclusions is not None else ""
        return setting.default_value()

    def discriminating_values(self) -> List[Tuple[Setting, str]]:
        """Discriminating settings that are set, with their resolved values."""
        values = []
        for setting in SETTINGS.values():
            if not setting.discriminating:
                continue
            chain = self.property(setting).with_memoization(self.cache)
            if chain.is_set():
                values.append((setting, chain.as_string()))
        return values

    def daemon_opts(self) -> List[str]:
        return [setting.as_daemon_opt(value) for setting, value in self.discriminating_values()]

    def daemon_opts_map(self) -> Dict[str, str]:
        return {setting.property: value for setting, value in self.discriminating_values()}

    def discriminating_system_properties(self, args: List[str]) -> None:
        for setting, value in self.discriminating_values():
            setting.add_system_property(args, value)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def derive(self, changes: Mapping[SettingKey, Any]) -> "DaemonParameters":
        """New view with ``changes`` applied to the overrides; None removes one."""
        derived = DaemonParameters(
            environment=self.environment,
            system_properties=self.system_properties,
            store=self.store,
            executable=self.executable,
        )
        derived._overrides = _build_overrides(self._overrides, changes)
        return derived

    def cd(self, new_user_dir: Union[str, Path]) -> "DaemonParameters":
        """New view whose working directory is ``new_user_dir``."""
        return self.derive({"USER_DIR": new_user_dir})

    def with_debug(self, debug: bool) -> "DaemonParameters":
        return self.derive({"DEBUG": debug})

    def _joined(self, key: str, opts: str, before: bool) -> str:
        original = self._overrides.get(SETTINGS[key].property, "")
        if not original:
            return opts
        return f"{opts} {original}" if before else f"{original} {opts}"

    def with_jdk_java_opts(self, opts: str, before: bool) -> "DaemonParameters":
        return self.derive({"JDK_JAVA_OPTIONS": self._joined("JDK_JAVA_OPTIONS", opts, before)})

    def with_jvm_args(self, opts: str, before: bool) -> "DaemonParameters":
        return self.derive({"JVM_ARGS": self._joined("JVM_ARGS", opts, before)})

    def __repr__(self) -> str:
        return f"DaemonParameters(overrides={dict(self._overrides)!r})"
