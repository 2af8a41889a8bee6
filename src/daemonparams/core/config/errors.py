"""Exceptions raised while resolving daemon parameters."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Sequence


class ConfigError(Exception):
    """Base exception for configuration resolution errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ResolutionExhausted(ConfigError):
    """No source, including the default, produced a value for a required setting."""

    def __init__(self, setting_name: str, sources: Sequence[str]):
        self.setting_name = setting_name
        self.sources = tuple(sources)
        message = (
            f"Could not get value for Setting.{setting_name} from any of the "
            f"following sources: {', '.join(self.sources)}"
        )
        super().__init__(message, {"setting": setting_name, "sources": list(self.sources)})


class FileReadFailure(ConfigError):
    """A property file exists but could not be read or parsed."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        message = f"Could not read {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"path": str(path)})


class TypedParseFailure(ConfigError, ValueError):
    """A resolved raw value could not be parsed as the requested type."""

    type_name = "value"

    def __init__(self, raw: Optional[str], setting_name: str = ""):
        self.raw = raw
        self.setting_name = setting_name
        target = f" for Setting.{setting_name}" if setting_name else ""
        message = f"Cannot parse {raw!r} as {self.type_name}{target}"
        super().__init__(message, {"raw": raw, "setting": setting_name})


class IntegerParseFailure(TypedParseFailure):
    type_name = "an integer"


class DurationParseFailure(TypedParseFailure):
    type_name = "a duration"


class DigestComputationFailure(ConfigError):
    """The core extensions discriminator could not be computed."""

    def __init__(self, reason: str = ""):
        message = "Cannot calculate core extensions discriminator"
        if reason:
            message += f": {reason}"
        super().__init__(message)
