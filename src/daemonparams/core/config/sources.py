"""Describable, lazily evaluated value sources."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from .catalog import Setting
from .environment import SystemProperties

if TYPE_CHECKING:
    from .properties import PropertiesStore

Supplier = Callable[[], Optional[str]]


@dataclass(frozen=True)
class ValueSource:
    """
    A single place a setting's raw value may come from.

    ``fetch`` returns ``None`` when the value is not configured at this
    source; exceptions are reserved for I/O failures. ``describe`` renders
    where the source looks, for diagnostics.
    """

    description: Callable[[], str]
    supplier: Supplier

    def describe(self) -> str:
        return self.description()

    def fetch(self) -> Optional[str]:
        return self.supplier()

    def __str__(self) -> str:
        return self.describe()


def described_source(description: str, supplier: Supplier) -> ValueSource:
    return ValueSource(lambda: description, supplier)


def override_source(overrides: Mapping[str, str], setting: Setting) -> ValueSource:
    key = setting.property
    return ValueSource(
        lambda: f"value: {key}",
        lambda: overrides.get(key) if key is not None else None,
    )


def system_property_source(properties: SystemProperties, setting: Setting) -> ValueSource:
    key = setting.property
    if key is None:
        raise ValueError(f"Cannot use Setting.{setting.name} for getting a system property")
    return ValueSource(lambda: f"system property {key}", lambda: properties.get(key))


def property_file_source(store: "PropertiesStore", path: Path, setting: Setting) -> ValueSource:
    key = setting.property
    return ValueSource(
        lambda: f"property {key} in {path}",
        lambda: store.get(path).get(key),
    )


def lazy_property_file_source(
    store: "PropertiesStore", path_supplier: Callable[[], Optional[Path]], setting: Setting
) -> ValueSource:
    """Like ``property_file_source`` but the file location is computed on first use."""
    key = setting.property

    def fetch() -> Optional[str]:
        path = path_supplier()
        if path is None:
            return None
        return store.get(path).get(key)

    return ValueSource(lambda: f"property {key} in {path_supplier()}", fetch)


def environment_variable_source(environment: Mapping[str, str], setting: Setting) -> ValueSource:
    variable = setting.environment_variable
    if variable is None:
        raise ValueError(f"Cannot use Setting.{setting.name} for getting an environment variable")
    return ValueSource(lambda: f"environment variable {variable}", lambda: environment.get(variable))


def default_source(supplier: Supplier) -> ValueSource:
    # Describing evaluates the supplier.
    return ValueSource(lambda: f"default: {supplier()}", supplier)
