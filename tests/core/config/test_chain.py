"""
Tests for resolution chains.

This module tests priority order, laziness, failure diagnostics,
memoization and immutability of ResolutionChain.
"""

import threading
from datetime import timedelta

import pytest

from daemonparams.core.config.cache import SessionCache
from daemonparams.core.config.catalog import SETTINGS
from daemonparams.core.config.chain import ResolutionChain, ResolutionContext
from daemonparams.core.config.environment import EnvironmentSnapshot, SystemProperties
from daemonparams.core.config.errors import (
    DurationParseFailure,
    IntegerParseFailure,
    ResolutionExhausted,
)
from daemonparams.core.config.sources import described_source


def _source(name, holder):
    return described_source(name, lambda: holder.get(name))


class TestPriority:
    """Sources are consulted strictly in the order they were added."""

    def test_first_source_wins(self, chain_factory):
        values = {"s1": "a", "s2": "b", "s3": "c"}
        chain = (
            chain_factory()
            .with_override(_source("s1", values))
            .with_override(_source("s2", values))
            .with_override(_source("s3", values))
        )

        assert chain.resolve() == "a"
        del values["s1"]
        assert chain.resolve() == "b"
        del values["s2"]
        assert chain.resolve() == "c"

    def test_override_beats_every_other_source(self, store, write_properties, tmp_path):
        setting = SETTINGS["BUILDER"]
        props_file = write_properties(tmp_path / "p.properties", "daemon.builder=from-file\n")
        system_props = SystemProperties({"daemon.builder": "from-sysprop"}, defaults=False)
        context = ResolutionContext(system_props, EnvironmentSnapshot())
        overrides = {"daemon.builder": "from-override"}

        chain = (
            ResolutionChain(setting, context)
            .with_override(described_source("value: daemon.builder", lambda: overrides.get("daemon.builder")))
            .with_system_property()
            .with_property_file(store, props_file)
            .with_computed_default()
        )

        assert chain.resolve() == "from-override"

    def test_environment_variable_source(self, context):
        setting = SETTINGS["JAVA_HOME"]
        env_context = ResolutionContext(
            context.system_properties, EnvironmentSnapshot({"JAVA_HOME": "/opt/jdk"})
        )
        chain = ResolutionChain(setting, env_context).with_system_property().with_environment_variable()

        assert chain.resolve() == "/opt/jdk"

    def test_environment_variable_requires_catalog_name(self, chain_factory):
        with pytest.raises(ValueError):
            chain_factory("BUILDER").with_environment_variable()

    def test_default_comes_from_catalog(self, chain_factory):
        assert chain_factory("BUILDER").with_computed_default().resolve() == "smart"


class TestLaziness:
    def test_lower_priority_source_not_evaluated(self, chain_factory):
        calls = []

        def expensive():
            calls.append(1)
            return "late"

        chain = (
            chain_factory()
            .with_override(described_source("early", lambda: "early"))
            .with_override(described_source("expensive", expensive))
        )

        assert chain.resolve() == "early"
        assert calls == []

    def test_missing_property_file_path_is_skipped(self, chain_factory, store):
        base = chain_factory().with_computed_default()
        chain = chain_factory().with_property_file(store, None).with_computed_default()

        assert len(chain.sources) == len(base.sources)
        assert chain.resolve() == "smart"

    def test_lazy_property_file_path(self, chain_factory, store, write_properties, tmp_path):
        path = write_properties(tmp_path / "lazy.properties", "daemon.builder=lazy\n")
        requested = []

        def locate():
            requested.append(path)
            return path

        chain = chain_factory().with_property_file(store, locate)
        assert requested == []
        assert chain.resolve() == "lazy"
        assert requested == [path]


class TestFailure:
    def test_unresolved_without_failure_link_is_none(self, chain_factory):
        chain = chain_factory("SETTINGS_FILE").with_system_property()

        assert chain.resolve() is None
        assert chain.as_string() is None

    def test_failure_lists_sources_in_priority_order(self, chain_factory, store, tmp_path):
        missing = tmp_path / "missing.properties"
        chain = (
            chain_factory("JAVA_HOME")
            .with_override(described_source("value: java.home", lambda: None))
            .with_system_property()
            .with_property_file(store, missing)
            .with_environment_variable()
            .with_failure_if_unresolved()
        )

        with pytest.raises(ResolutionExhausted) as excinfo:
            chain.resolve()

        assert excinfo.value.sources == (
            "value: java.home",
            "system property java.home",
            f"property java.home in {missing}",
            "environment variable JAVA_HOME",
        )
        message = str(excinfo.value)
        assert message.startswith("Could not get value for Setting.JAVA_HOME")
        positions = [message.index(source) for source in excinfo.value.sources]
        assert positions == sorted(positions)

    def test_sources_after_failure_point_are_ignored(self, chain_factory):
        chain = (
            chain_factory()
            .with_failure_if_unresolved()
            .with_override(described_source("late", lambda: "late"))
        )

        with pytest.raises(ResolutionExhausted):
            chain.resolve()

    def test_is_set_optional_setting(self, chain_factory):
        chain = chain_factory("SOCKET_FAMILY").with_system_property().with_failure_if_unresolved()

        assert chain.is_set() is False

    def test_is_set_required_setting_raises(self, chain_factory):
        chain = chain_factory("THREADS").with_system_property()

        with pytest.raises(ResolutionExhausted):
            chain.is_set()

    def test_is_set_true_when_found(self, chain_factory):
        assert chain_factory().with_computed_default().is_set() is True


class TestImmutability:
    def test_extension_returns_new_chain(self, chain_factory):
        base = chain_factory().with_system_property()
        extended = base.with_computed_default()

        assert extended is not base
        assert len(base.sources) == 1
        assert len(extended.sources) == 2
        assert base.resolve() is None
        assert extended.resolve() == "smart"

    def test_chains_are_frozen(self, chain_factory):
        chain = chain_factory()
        with pytest.raises(AttributeError):
            chain.sources = ()


class TestMemoization:
    def test_second_resolution_uses_cache(self, chain_factory):
        values = {"src": "first"}
        cache = SessionCache()
        chain = chain_factory().with_override(_source("src", values)).with_memoization(cache)

        assert chain.resolve() == "first"
        values["src"] = "second"
        assert chain.resolve() == "first"
        assert cache.get("daemon.builder") == "first"

    def test_cache_consulted_before_sources(self, chain_factory):
        cache = SessionCache()
        cache.put("daemon.builder", "cached")
        calls = []
        chain = (
            chain_factory()
            .with_override(described_source("src", lambda: calls.append(1) or "fresh"))
            .with_memoization(cache)
        )

        assert chain.resolve() == "cached"
        assert calls == []

    def test_absent_value_not_cached(self, chain_factory):
        cache = SessionCache()
        chain = chain_factory().with_system_property().with_memoization(cache)

        assert chain.resolve() is None
        assert "daemon.builder" not in cache

    def test_concurrent_resolutions_converge(self, chain_factory):
        cache = SessionCache()
        chain = chain_factory().with_computed_default().with_memoization(cache)
        results = []

        def worker():
            results.append(chain.resolve())

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == ["smart"] * 20


class TestTypedAccessors:
    def _chain(self, chain_factory, raw, name="BUILDER"):
        return chain_factory(name).with_override(described_source("raw", lambda: raw))

    def test_as_bool(self, chain_factory):
        assert self._chain(chain_factory, "").as_bool() is True
        assert self._chain(chain_factory, "TRUE").as_bool() is True
        assert self._chain(chain_factory, "false").as_bool() is False
        assert self._chain(chain_factory, None).as_bool() is False

    def test_as_int(self, chain_factory):
        assert self._chain(chain_factory, "42").as_int() == 42
        assert self._chain(chain_factory, "4").as_int_with(lambda v: v * 2) == 8
        with pytest.raises(IntegerParseFailure):
            self._chain(chain_factory, "abc", "MAX_LOST_KEEP_ALIVE").as_int()

    def test_as_duration(self, chain_factory):
        assert self._chain(chain_factory, "10s").as_duration() == timedelta(seconds=10)
        with pytest.raises(DurationParseFailure):
            self._chain(chain_factory, "soon").as_duration()

    def test_as_path_and_optional(self, chain_factory, tmp_path):
        assert self._chain(chain_factory, str(tmp_path)).as_path() == tmp_path
        assert self._chain(chain_factory, None).as_path() is None
        assert self._chain(chain_factory, "x").as_optional().get() == "x"
        assert not self._chain(chain_factory, None).as_optional().is_present()
