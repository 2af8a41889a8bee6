"""
Priority ordered resolution chains.

A ``ResolutionChain`` is an immutable tuple of ``ValueSource`` objects bound
to one ``Setting``. Sources are consulted in the order they were added, and
the first one returning a value wins; later sources are never evaluated. Each
``with_*`` call returns a new chain, so a chain held in a variable keeps
meaning what it meant when it was built.

Example:
    >>> chain = (
    ...     ResolutionChain(setting, context)
    ...     .with_override(source)
    ...     .with_system_property()
    ...     .with_environment_variable()
    ...     .with_failure_if_unresolved()
    ... )
    >>> chain.as_string()
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Tuple, Union

from daemonparams.core.utils.logger import is_debug_enabled, log_debug

from . import coercion
from .cache import SessionCache
from .catalog import Setting
from .coercion import OptionalValue
from .environment import SystemProperties
from .errors import ResolutionExhausted
from .sources import (
    Supplier,
    ValueSource,
    default_source,
    environment_variable_source,
    lazy_property_file_source,
    property_file_source,
    system_property_source,
)

if TYPE_CHECKING:
    from .properties import PropertiesStore


@dataclass(frozen=True)
class ResolutionContext:
    """Process inputs shared by the chains of one configuration view."""

    system_properties: SystemProperties
    environment: Mapping[str, str]


@dataclass(frozen=True)
class ResolutionChain:
    setting: Setting
    context: ResolutionContext
    sources: Tuple[ValueSource, ...] = ()
    fail_if_unresolved: bool = False
    cache: Optional[SessionCache] = None

    def _append(self, source: ValueSource) -> "ResolutionChain":
        if self.fail_if_unresolved:
            # Nothing after the failure point is ever consulted
            return self
        return dataclasses.replace(self, sources=self.sources + (source,))

    def with_override(self, source: ValueSource) -> "ResolutionChain":
        return self._append(source)

    or_source = with_override

    def with_system_property(self) -> "ResolutionChain":
        return self._append(system_property_source(self.context.system_properties, self.setting))

    def with_property_file(
        self,
        store: "PropertiesStore",
        path: Union[Path, Callable[[], Optional[Path]], None],
    ) -> "ResolutionChain":
        """Consult ``path`` in ``store``; a missing path adds nothing.

        ``path`` may also be a callable, for locations that are themselves
        settings and should only be resolved when this source is reached.
        """
        if path is None:
            return self
        if callable(path):
            return self._append(lazy_property_file_source(store, path, self.setting))
        return self._append(property_file_source(store, path, self.setting))

    def with_environment_variable(self) -> "ResolutionChain":
        return self._append(environment_variable_source(self.context.environment, self.setting))

    def with_computed_default(self, supplier: Optional[Supplier] = None) -> "ResolutionChain":
        return self._append(default_source(supplier or self.setting.default_value))

    def with_failure_if_unresolved(self) -> "ResolutionChain":
        return dataclasses.replace(self, fail_if_unresolved=True)

    def with_memoization(self, cache: SessionCache) -> "ResolutionChain":
        return dataclasses.replace(self, cache=cache)

    @property
    def cache_key(self) -> str:
        return self.setting.property or self.setting.name

    def describe(self) -> Tuple[str, ...]:
        """Descriptions of every source, highest priority first."""
        return tuple(source.describe() for source in self.sources)

    def _walk(self) -> Optional[str]:
        for source in self.sources:
            value = source.fetch()
            if value is not None:
                if is_debug_enabled():
                    log_debug(
                        "resolution",
                        f"Loaded value for key [{self.setting.name}] from "
                        f"{source.describe()}: [{value}]",
                    )
                return value
        if self.fail_if_unresolved:
            raise ResolutionExhausted(self.setting.name, self.describe())
        return None

    def resolve(self) -> Optional[str]:
        """Return the winning raw value, or None when nothing is configured."""
        if self.cache is None:
            return self._walk()
        cached = self.cache.get(self.cache_key)
        if cached is not None:
            return cached
        value = self._walk()
        if value is None:
            return None
        return self.cache.put(self.cache_key, value)

    def is_set(self) -> bool:
        try:
            value = self.resolve()
        except ResolutionExhausted as exc:
            if self.setting.optional and exc.setting_name == self.setting.name:
                return False
            raise
        if value is not None:
            return True
        if self.setting.optional:
            return False
        raise ResolutionExhausted(self.setting.name, self.describe())

    def as_string(self) -> Optional[str]:
        return coercion.to_string(self.resolve())

    def as_optional(self) -> OptionalValue[str]:
        return coercion.to_optional(self.resolve())

    def as_path(self) -> Optional[Path]:
        return coercion.to_path(self.resolve(), self.context.environment)

    def as_bool(self) -> bool:
        return coercion.to_bool(self.resolve())

    def as_int(self) -> int:
        return coercion.to_int(self.resolve(), self.setting.name)

    def as_int_with(self, function: Callable[[int], int]) -> int:
        return function(self.as_int())

    def as_duration(self) -> timedelta:
        return coercion.to_duration(self.resolve(), self.setting.name)

    def __repr__(self) -> str:
        flags = " fail" if self.fail_if_unresolved else ""
        flags += " memoized" if self.cache is not None else ""
        # describe() would evaluate default sources
        return f"ResolutionChain({self.setting.name}, {len(self.sources)} sources{flags})"
