"""Tests for package.json reading, writing and patching."""

import logging

import orjson
import pytest

from create_react_app.core.manifest import (
    make_caret_range,
    read_engine_requirement,
    read_manifest,
    set_caret_range_for_runtime_deps,
    write_initial_manifest,
    write_manifest,
)
from create_react_app.exceptions import ManifestInvariantError


def _write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(data))


class TestReadWrite:
    """Test manifest serialization."""

    def test_initial_manifest(self, project_root):
        """Test the starting manifest and its formatting."""
        path = write_initial_manifest(project_root, "my-app")

        assert path == project_root / "package.json"
        assert path.read_text() == (
            "{\n"
            '  "name": "my-app",\n'
            '  "version": "0.1.0",\n'
            '  "private": true\n'
            "}\n"
        )

    def test_unknown_keys_survive_rewrite(self, project_root):
        """Test that re-serialising keeps every key."""
        path = project_root / "package.json"
        manifest = {"name": "x", "browserslist": [">0.2%"], "custom": {"a": 1}}
        write_manifest(path, manifest)
        assert read_manifest(path) == manifest

    def test_invalid_json(self, project_root):
        """Test that broken JSON raises ValueError."""
        path = project_root / "package.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid JSON"):
            read_manifest(path)

    def test_non_object(self, project_root):
        """Test that a JSON array is rejected."""
        path = project_root / "package.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="Expected a JSON object"):
            read_manifest(path)

    def test_missing_file(self, project_root):
        """Test that a missing manifest raises OSError."""
        with pytest.raises(OSError):
            read_manifest(project_root / "package.json")


class TestCaretRange:
    """Test runtime dependency patching."""

    def test_exact_version_becomes_caret(self):
        """Test the common case."""
        dependencies = {"react": "18.2.0"}
        make_caret_range(dependencies, "react")
        assert dependencies == {"react": "^18.2.0"}

    def test_invalid_caret_keeps_version(self, caplog):
        """Test that a tag is kept verbatim and an error is logged."""
        caplog.set_level(logging.ERROR)
        dependencies = {"react": "next"}
        make_caret_range(dependencies, "react")
        assert dependencies == {"react": "next"}
        assert "Unable to patch react dependency version" in caplog.text

    def test_missing_dependency(self):
        """Test that a missing dependency is an invariant violation."""
        with pytest.raises(ManifestInvariantError, match="Missing react-dom"):
            make_caret_range({"react": "18.2.0"}, "react-dom")

    def test_patch_project_manifest(self, project_root):
        """Test that only the runtime libraries are patched."""
        _write_json(
            project_root / "package.json",
            {
                "name": "my-app",
                "dependencies": {
                    "react": "18.2.0",
                    "react-dom": "18.2.0",
                    "react-scripts": "5.0.1",
                },
            },
        )

        set_caret_range_for_runtime_deps(project_root, "react-scripts")

        manifest = read_manifest(project_root / "package.json")
        assert manifest["dependencies"] == {
            "react": "^18.2.0",
            "react-dom": "^18.2.0",
            "react-scripts": "5.0.1",
        }

    def test_missing_dependencies_section(self, project_root):
        """Test that a manifest without dependencies is rejected."""
        _write_json(project_root / "package.json", {"name": "my-app"})
        with pytest.raises(
            ManifestInvariantError, match="Missing dependencies"
        ):
            set_caret_range_for_runtime_deps(project_root, "react-scripts")

    def test_missing_scripts_package(self, project_root):
        """Test that the scripts package must have been installed."""
        _write_json(
            project_root / "package.json",
            {"dependencies": {"react": "18.2.0", "react-dom": "18.2.0"}},
        )
        with pytest.raises(ManifestInvariantError) as exc_info:
            set_caret_range_for_runtime_deps(project_root, "react-scripts")
        assert exc_info.value.target == "react-scripts"


class TestEngineRequirement:
    """Test reading engines.node from an installed package."""

    def test_declared(self, project_root):
        """Test a package that declares a node range."""
        _write_json(
            project_root / "node_modules" / "react-scripts" / "package.json",
            {"name": "react-scripts", "engines": {"node": ">=14.0.0"}},
        )
        assert (
            read_engine_requirement(project_root, "react-scripts")
            == ">=14.0.0"
        )

    def test_scoped_package(self, project_root):
        """Test that scoped packages are looked up in their scope dir."""
        _write_json(
            project_root
            / "node_modules"
            / "@org"
            / "scripts"
            / "package.json",
            {"name": "@org/scripts", "engines": {"node": ">=16"}},
        )
        assert read_engine_requirement(project_root, "@org/scripts") == ">=16"

    def test_not_declared(self, project_root):
        """Test packages without engines or not installed at all."""
        _write_json(
            project_root / "node_modules" / "react-scripts" / "package.json",
            {"name": "react-scripts"},
        )
        assert read_engine_requirement(project_root, "react-scripts") is None
        assert read_engine_requirement(project_root, "missing") is None
