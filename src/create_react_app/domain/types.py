"""Domain types for business logic.

This module contains pure domain types used in business logic without
any IO or infrastructure dependencies.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TypedDict

from create_react_app.domain.version import valid_semver

ARCHIVE_SUFFIX_RE = re.compile(r"^.+\.(tgz|tar\.gz)$")
FILE_PREFIX = "file:"
GIT_PREFIX = "git+"


class TargetKind(Enum):
    """Where an install target fetches its package from."""

    REGISTRY_VERSION = "registry-version"
    REGISTRY_TAG = "registry-tag"
    LOCAL_PATH = "local-path"
    REMOTE_ARCHIVE = "remote-archive"
    GIT_URL = "git-url"
    BARE_NAME = "bare-name"


def is_archive(target: str) -> bool:
    """Return True if ``target`` points at a .tgz or .tar.gz archive."""
    return ARCHIVE_SUFFIX_RE.match(target) is not None


def split_registry_target(target: str) -> tuple[str, str]:
    """Split ``name@version`` on the last ``@``.

    The ``@`` opening a scope is never a separator, so
    ``"@scope/name@2.0.0"`` gives ``("@scope/name", "2.0.0")``.

    Raises:
        ValueError: If ``target`` has no version separator

    """
    name, separator, version = target.rpartition("@")
    if not separator or not name:
        msg = f"'{target}' has no version or tag"
        raise ValueError(msg)
    return name, version


def classify_target(target: str) -> TargetKind:
    """Classify an install target string.

    Exactly one kind matches any input; strings that fit no other pattern
    are bare package names.

    Args:
        target: Install target produced by the specifier parser

    Returns:
        The target's kind

    """
    if target.startswith(GIT_PREFIX):
        return TargetKind.GIT_URL
    if is_archive(target) or "://" in target:
        return TargetKind.REMOTE_ARCHIVE
    if target.startswith(FILE_PREFIX):
        return TargetKind.LOCAL_PATH
    if target.rfind("@") > 0:
        _, version = split_registry_target(target)
        if valid_semver(version):
            return TargetKind.REGISTRY_VERSION
        return TargetKind.REGISTRY_TAG
    return TargetKind.BARE_NAME


@dataclass(frozen=True)
class PackageDescriptor:
    """Canonical identity recovered from an install target."""

    name: str
    version: str | None = None


@dataclass
class DependencySet:
    """Install targets in install order, unique by resolved package name."""

    _targets: list[str] = field(default_factory=list)
    _names: list[str] = field(default_factory=list)

    def add(self, target: str, name: str | None = None) -> bool:
        """Append ``target`` unless a target for ``name`` is already present.

        Args:
            target: Install target string handed to the package manager
            name: Resolved package name (defaults to ``target``)

        Returns:
            True if the target was added

        """
        name = name or target
        if name in self._names:
            return False
        self._targets.append(target)
        self._names.append(name)
        return True

    @property
    def targets(self) -> tuple[str, ...]:
        """Install targets in insertion order."""
        return tuple(self._targets)

    @property
    def names(self) -> tuple[str, ...]:
        """Resolved package names in insertion order."""
        return tuple(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)


class NetworkSettings(TypedDict):
    """Network section of settings.conf."""

    yarn_registry_host: str
    timeout_seconds: int


class Settings(TypedDict):
    """Typed view of settings.conf."""

    config_version: str
    log_level: str
    console_log_level: str
    network: NetworkSettings
