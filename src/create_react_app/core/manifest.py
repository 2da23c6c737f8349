"""Read and rewrite package.json files.

The project manifest is written once before installing, rewritten by the
package manager during install, then patched so the runtime libraries use
caret ranges instead of exact pins.
"""

from pathlib import Path
from typing import Any

import orjson

from create_react_app.constants import (
    DEPENDENCY_CACHE_DIR,
    INITIAL_PROJECT_VERSION,
    MANIFEST_FILE_NAME,
    RUNTIME_DEPENDENCIES,
)
from create_react_app.domain.version import is_valid_range
from create_react_app.exceptions import ManifestInvariantError
from create_react_app.logger import get_logger

logger = get_logger(__name__)

Manifest = dict[str, Any]


def read_manifest(path: Path) -> Manifest:
    """Load a package.json file.

    Args:
        path: Path to the manifest file

    Returns:
        Parsed manifest

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not a JSON object

    """
    with path.open("rb") as f:
        try:
            data = orjson.loads(f.read())
        except orjson.JSONDecodeError as e:
            msg = f"Invalid JSON in {path}: {e}"
            raise ValueError(msg) from e

    if not isinstance(data, dict):
        msg = f"Expected a JSON object in {path}"
        raise ValueError(msg)
    return data


def write_manifest(path: Path, manifest: Manifest) -> None:
    """Write a manifest with 2-space indentation and a trailing newline."""
    with path.open("wb") as f:
        f.write(
            orjson.dumps(
                manifest,
                option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE,
            )
        )


def write_initial_manifest(root: Path, app_name: str) -> Path:
    """Write the minimal manifest a fresh project starts with.

    Args:
        root: Project directory
        app_name: Project name

    Returns:
        Path of the written manifest

    """
    path = root / MANIFEST_FILE_NAME
    write_manifest(
        path,
        {
            "name": app_name,
            "version": INITIAL_PROJECT_VERSION,
            "private": True,
        },
    )
    logger.debug("Wrote initial manifest %s", path)
    return path


def make_caret_range(dependencies: dict[str, str], name: str) -> None:
    """Replace an exact dependency pin with a caret range in place.

    A version whose caret form would not be a valid range (a tag, a URL)
    is kept as it is.

    Args:
        dependencies: The manifest's ``dependencies`` mapping
        name: Dependency to patch

    Raises:
        ManifestInvariantError: If ``name`` is not a dependency

    """
    version = dependencies.get(name)
    if version is None:
        msg = f"Missing {name} dependency in package.json"
        raise ManifestInvariantError(msg, name)

    patched = f"^{version}"
    if not is_valid_range(patched):
        logger.error(
            "Unable to patch %s dependency version because version %s "
            "will become invalid %s",
            name,
            version,
            patched,
        )
        patched = version

    dependencies[name] = patched


def set_caret_range_for_runtime_deps(root: Path, package_name: str) -> None:
    """Patch the project's runtime dependencies to caret ranges.

    Args:
        root: Project directory
        package_name: Scripts package that must be a dependency

    Raises:
        ManifestInvariantError: If ``dependencies``, the scripts package or
            a runtime library is missing

    """
    path = root / MANIFEST_FILE_NAME
    manifest = read_manifest(path)

    dependencies = manifest.get("dependencies")
    if not isinstance(dependencies, dict):
        msg = "Missing dependencies in package.json"
        raise ManifestInvariantError(msg)

    if package_name not in dependencies:
        msg = f"Unable to find {package_name} in package.json"
        raise ManifestInvariantError(msg, package_name)

    for name in RUNTIME_DEPENDENCIES:
        make_caret_range(dependencies, name)

    write_manifest(path, manifest)


def read_engine_requirement(root: Path, package_name: str) -> str | None:
    """Return ``engines.node`` of an installed package, if declared.

    Args:
        root: Project directory
        package_name: Installed package name

    Returns:
        The declared node range, or None when the package or the field is
        missing

    """
    path = root / DEPENDENCY_CACHE_DIR / package_name / MANIFEST_FILE_NAME
    if not path.exists():
        return None

    engines = read_manifest(path).get("engines")
    if not isinstance(engines, dict):
        return None
    node_range = engines.get("node")
    return node_range if isinstance(node_range, str) else None
