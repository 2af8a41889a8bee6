"""Catalog of settings recognized by the build daemon client."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

DefaultValue = Union[str, Callable[[], Optional[str]], None]


class SocketFamily(Enum):
    """Socket families the daemon can listen on."""

    inet = "inet"
    unix = "unix"


@dataclass(frozen=True)
class Setting:
    """Metadata describing a daemon setting."""

    name: str
    property: Optional[str]
    environment_variable: Optional[str] = None
    default: DefaultValue = None
    discriminating: bool = False
    optional: bool = False
    options: Tuple[str, ...] = field(default_factory=tuple)
    description: str = ""

    def default_value(self) -> Optional[str]:
        if callable(self.default):
            return self.default()
        return self.default

    def as_daemon_opt(self, value: str) -> str:
        return f"-D{self.property}={value}"

    def add_system_property(self, args: List[str], value: str) -> None:
        args.append(self.as_daemon_opt(value))

    def __str__(self) -> str:
        return self.name


_CATALOG: Tuple[Setting, ...] = (
    Setting("USER_DIR", "user.dir", description="Working directory of the client."),
    Setting("USER_HOME", "user.home", description="Home directory of the user."),
    Setting(
        "JAVA_HOME",
        "java.home",
        "JAVA_HOME",
        description="JDK used to run the daemon.",
    ),
    Setting(
        "DAEMON_HOME",
        "daemon.home",
        "DAEMON_HOME",
        description="Installation directory of the build daemon.",
    ),
    Setting(
        "DAEMON_PROPERTIES_PATH",
        "daemon.propertiesPath",
        "DAEMON_PROPERTIES_PATH",
        description="Extra properties file consulted before the standard ones.",
    ),
    Setting(
        "DAEMON_STORAGE",
        "daemon.storage",
        "DAEMON_STORAGE",
        description="Directory holding the daemon registry and logs.",
    ),
    Setting(
        "MULTIMODULE_PROJECT_DIRECTORY",
        "daemon.multiModuleProjectDirectory",
        description="Root of the multi-module project.",
    ),
    Setting("MIN_HEAP_SIZE", "daemon.minHeapSize", discriminating=True, optional=True),
    Setting("MAX_HEAP_SIZE", "daemon.maxHeapSize", discriminating=True, optional=True),
    Setting(
        "THREAD_STACK_SIZE", "daemon.threadStackSize", discriminating=True, optional=True
    ),
    Setting(
        "JVM_ARGS",
        "daemon.jvmArgs",
        discriminating=True,
        optional=True,
        description="Extra JVM arguments for the daemon.",
    ),
    Setting(
        "JDK_JAVA_OPTIONS",
        "daemon.jdkJavaOpts",
        "JDK_JAVA_OPTIONS",
        discriminating=True,
        optional=True,
    ),
    Setting("THREADS", "daemon.threads", options=("-T", "--threads")),
    Setting("MIN_THREADS", "daemon.minThreads", default="1"),
    Setting("BUILDER", "daemon.builder", default="smart", options=("-b", "--builder")),
    Setting("SETTINGS_FILE", "maven.settings", options=("-s", "--settings")),
    Setting("POM_FILE", "maven.file", options=("-f", "--file")),
    Setting("REPO_LOCAL", "maven.repo.local"),
    Setting("NO_DAEMON", "daemon.noDaemon", "DAEMON_NO_DAEMON", default="false"),
    Setting("DEBUG", "daemon.debug", default="false"),
    Setting("SERIAL", "daemon.serial", default="false", options=("-1", "--serial")),
    Setting("KEEP_ALIVE", "daemon.keepAlive", default="100ms", discriminating=True),
    Setting("MAX_LOST_KEEP_ALIVE", "daemon.maxLostKeepAlive", default="30"),
    Setting("NO_BUFFERING", "daemon.noBuffering", default="false"),
    Setting("ROLLING_WINDOW_SIZE", "daemon.rollingWindowSize", default="0"),
    Setting("LOG_PURGE_PERIOD", "daemon.logPurgePeriod", default="7d"),
    Setting("IDLE_TIMEOUT", "daemon.idleTimeout", default="3h", discriminating=True),
    Setting("SOCKET_FAMILY", "daemon.socketFamily", optional=True),
    Setting("EXT_CLASSPATH", "daemon.extClasspath", discriminating=True, optional=True),
    Setting(
        "CORE_EXTENSIONS_DISCRIMINATOR",
        "daemon.coreExtensionsDiscriminator",
        discriminating=True,
        optional=True,
    ),
    Setting(
        "CORE_EXTENSIONS_EXCLUDE",
        "daemon.coreExtensionsExclude",
        discriminating=True,
        optional=True,
    ),
    Setting(
        "ENABLE_ASSERTIONS",
        "daemon.enableAssertions",
        default="false",
        discriminating=True,
    ),
)

SETTINGS: Dict[str, Setting] = {setting.name: setting for setting in _CATALOG}


def get_setting(name: str) -> Setting:
    """Look up a setting by name or property key."""
    setting = SETTINGS.get(name) or SETTINGS.get(name.upper())
    if setting is not None:
        return setting
    for candidate in _CATALOG:
        if candidate.property == name:
            return candidate
    raise KeyError(f"Unknown setting: {name}")


def discriminating_settings() -> List[Setting]:
    return [setting for setting in _CATALOG if setting.discriminating]
