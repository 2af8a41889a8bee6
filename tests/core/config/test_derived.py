"""Tests for computed values: ext classpath, discriminator hash, project root."""

import hashlib
import os

import pytest

import daemonparams.core.config.derived as derived
from daemonparams.core.config.derived import (
    core_extensions_discriminator,
    extensions_descriptors,
    find_default_multimodule_project_directory,
    parse_ext_classpath,
)
from daemonparams.core.config.errors import DigestComputationFailure


def test_parse_ext_classpath(tmp_path):
    value = os.pathsep.join(["lib/a.jar", str(tmp_path / "abs.jar"), "lib/a.jar"])
    assert parse_ext_classpath(value, tmp_path) == [
        str(tmp_path / "lib" / "a.jar"),
        str(tmp_path / "abs.jar"),
        str(tmp_path / "lib" / "a.jar"),
    ]
    assert parse_ext_classpath("", tmp_path) == []
    assert parse_ext_classpath(None, tmp_path) == []


def test_parse_ext_classpath_drops_trailing_separators(tmp_path):
    trailing = os.pathsep.join(["a.jar", "", ""])
    inner = os.pathsep.join(["a.jar", "", "b.jar"])
    assert parse_ext_classpath(trailing, tmp_path) == [str(tmp_path / "a.jar")]
    assert parse_ext_classpath(os.pathsep, tmp_path) == []
    assert parse_ext_classpath(inner, tmp_path) == [
        str(tmp_path / "a.jar"),
        str(tmp_path),
        str(tmp_path / "b.jar"),
    ]


def test_extensions_descriptors_order(layout):
    assert extensions_descriptors(layout.project, layout.home, layout.daemon_home) == [
        layout.project / ".mvn" / "extensions.xml",
        layout.home / ".m2" / "extensions.xml",
        layout.daemon_home / "mvn" / "conf" / "extensions.xml",
    ]


def test_discriminator_without_files_is_empty_digest(layout):
    result = core_extensions_discriminator(layout.project, layout.home, layout.daemon_home)
    assert result == hashlib.sha1(b"").hexdigest()


def test_discriminator_covers_path_and_content(layout):
    project_file = layout.project / ".mvn" / "extensions.xml"
    project_file.write_text("<extensions/>", encoding="utf-8")
    expected = hashlib.sha1((str(project_file) + "<extensions/>").encode("utf-8")).hexdigest()

    first = core_extensions_discriminator(layout.project, layout.home, layout.daemon_home)
    assert first == expected

    project_file.write_text("<extensions><extension/></extensions>", encoding="utf-8")
    second = core_extensions_discriminator(layout.project, layout.home, layout.daemon_home)
    assert second != first


def test_discriminator_changes_when_descriptor_deleted(layout):
    user_file = layout.home / ".m2" / "extensions.xml"
    user_file.write_text("<extensions/>", encoding="utf-8")
    args = (layout.project, layout.home, layout.daemon_home)
    present = core_extensions_discriminator(*args)

    user_file.unlink()

    assert core_extensions_discriminator(*args) != present
    assert core_extensions_discriminator(*args) == hashlib.sha1(b"").hexdigest()


def test_discriminator_is_deterministic(layout):
    (layout.home / ".m2" / "extensions.xml").write_text("<a/>", encoding="utf-8")
    (layout.daemon_home / "mvn" / "conf" / "extensions.xml").write_text("<b/>", encoding="utf-8")
    args = (layout.project, layout.home, layout.daemon_home)
    assert core_extensions_discriminator(*args) == core_extensions_discriminator(*args)


def test_discriminator_read_failure(layout, monkeypatch):
    (layout.project / ".mvn" / "extensions.xml").write_text("<x/>", encoding="utf-8")

    def broken(self):
        raise OSError("permission denied")

    monkeypatch.setattr(derived.Path, "read_bytes", broken)
    with pytest.raises(DigestComputationFailure, match="permission denied"):
        core_extensions_discriminator(layout.project, layout.home, layout.daemon_home)


def test_find_default_multimodule_project_directory(layout):
    nested = layout.project / "module" / "src"
    nested.mkdir(parents=True)
    assert find_default_multimodule_project_directory(nested) == str(layout.project)


def test_find_default_multimodule_project_directory_without_marker(tmp_path):
    plain = tmp_path / "plain"
    plain.mkdir()
    # tmp_path ancestors have no .mvn directory in a clean test environment
    assert find_default_multimodule_project_directory(plain) == str(plain)
