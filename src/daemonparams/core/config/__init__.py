"""Layered, lazy resolution of daemon settings."""

from .cache import SessionCache
from .catalog import SETTINGS, Setting, SocketFamily, discriminating_settings, get_setting
from .chain import ResolutionChain, ResolutionContext
from .coercion import OptionalValue
from .derived import (
    core_extensions_discriminator,
    find_default_multimodule_project_directory,
    parse_ext_classpath,
)
from .environment import EnvironmentSnapshot, SystemProperties, system_properties
from .errors import (
    ConfigError,
    DigestComputationFailure,
    DurationParseFailure,
    FileReadFailure,
    IntegerParseFailure,
    ResolutionExhausted,
    TypedParseFailure,
)
from .properties import PropertiesStore, load_properties, parse_properties
from .sources import ValueSource, described_source

__all__ = [
    "SETTINGS",
    "ConfigError",
    "DigestComputationFailure",
    "DurationParseFailure",
    "EnvironmentSnapshot",
    "FileReadFailure",
    "IntegerParseFailure",
    "OptionalValue",
    "PropertiesStore",
    "ResolutionChain",
    "ResolutionContext",
    "ResolutionExhausted",
    "SessionCache",
    "Setting",
    "SocketFamily",
    "SystemProperties",
    "TypedParseFailure",
    "ValueSource",
    "core_extensions_discriminator",
    "described_source",
    "discriminating_settings",
    "find_default_multimodule_project_directory",
    "get_setting",
    "load_properties",
    "parse_ext_classpath",
    "parse_properties",
    "system_properties",
]
