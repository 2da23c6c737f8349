"""npm and yarn backends.

Both expose the same install/uninstall capability. Only yarn probes the
registry before installing: an unreachable registry switches it to
``--offline`` so it installs from its local cache. npm is always assumed to
be online.
"""

import asyncio
import os
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from packaging.version import InvalidVersion

from create_react_app.constants import (
    DEFAULT_YARN_REGISTRY_HOST,
    MAX_YARN_PNP_VERSION,
    MIN_NPM_VERSION,
    MIN_YARN_PNP_VERSION,
    NPM_EXECUTABLE,
    YARN_EXECUTABLE,
)
from create_react_app.core.process import capture_output, run_command
from create_react_app.domain.types import Settings
from create_react_app.domain.version import (
    valid_semver,
    version_gte,
    version_lt,
)
from create_react_app.logger import get_logger

logger = get_logger(__name__)

# Nightly yarn builds report "1.22.0-20200101.1234"
_TRIM_VERSION_RE = re.compile(r"^(.+?)[-+].+$")


@dataclass(frozen=True)
class NpmVersionInfo:
    """Result of probing ``npm --version``."""

    has_min_npm: bool
    npm_version: str | None


@dataclass(frozen=True)
class YarnVersionInfo:
    """Result of probing ``yarnpkg --version``."""

    has_min_yarn_pnp: bool
    has_max_yarn_pnp: bool
    yarn_version: str | None


def is_using_yarn(environ: Mapping[str, str] | None = None) -> bool:
    """Return True when invoked through ``yarn create``."""
    env = os.environ if environ is None else environ
    return env.get("npm_config_user_agent", "").startswith("yarn")


async def get_proxy(environ: Mapping[str, str] | None = None) -> str | None:
    """Return the HTTPS proxy from the environment or npm's config."""
    env = os.environ if environ is None else environ
    proxy = env.get("https_proxy")
    if proxy:
        return proxy

    configured = await capture_output(
        [NPM_EXECUTABLE, "config", "get", "https-proxy"]
    )
    if not configured or configured == "null":
        return None
    return configured


async def can_resolve(host: str) -> bool:
    """Return True if ``host`` resolves through DNS."""
    loop = asyncio.get_running_loop()
    try:
        await loop.getaddrinfo(host, None)
    except OSError as e:
        logger.debug("DNS lookup for %s failed: %s", host, e)
        return False
    return True


class PackageManager(ABC):
    """Install capability shared by the npm and yarn backends."""

    name: str
    executable: str

    @abstractmethod
    def build_install_command(
        self,
        root: Path,
        dependencies: Sequence[str],
        *,
        verbose: bool = False,
        is_online: bool = True,
        use_pnp: bool = False,
    ) -> list[str]:
        """Return the command that installs ``dependencies`` into ``root``."""

    @abstractmethod
    def build_uninstall_command(self, root: Path, package: str) -> list[str]:
        """Return the command that removes ``package`` from ``root``."""

    @abstractmethod
    async def check_online(self) -> bool:
        """Return False when the registry cannot be reached."""

    def warn_install_mode(self, *, is_online: bool, use_pnp: bool) -> None:
        """Log warnings about how the install is about to run."""

    async def install(
        self,
        root: Path,
        dependencies: Sequence[str],
        *,
        verbose: bool = False,
        is_online: bool = True,
        use_pnp: bool = False,
    ) -> None:
        """Install ``dependencies`` into ``root`` with inherited stdio.

        Raises:
            FatalInstallError: If the package manager exits non-zero

        """
        self.warn_install_mode(is_online=is_online, use_pnp=use_pnp)
        command = self.build_install_command(
            root,
            dependencies,
            verbose=verbose,
            is_online=is_online,
            use_pnp=use_pnp,
        )
        await run_command(command, cwd=root)

    async def uninstall(self, root: Path, package: str) -> None:
        """Remove ``package`` from the project in ``root``.

        Raises:
            FatalInstallError: If the package manager exits non-zero

        """
        await run_command(
            self.build_uninstall_command(root, package), cwd=root
        )


class NpmPackageManager(PackageManager):
    """npm backend."""

    name = "npm"
    executable = NPM_EXECUTABLE

    def build_install_command(
        self,
        root: Path,  # noqa: ARG002
        dependencies: Sequence[str],
        *,
        verbose: bool = False,
        is_online: bool = True,  # noqa: ARG002
        use_pnp: bool = False,  # noqa: ARG002
    ) -> list[str]:
        """Return ``npm install`` pinning exact versions.

        npm has no reliable ``--prefix`` equivalent, so the target
        directory is passed as the child's working directory instead.
        """
        command = [
            self.executable,
            "install",
            "--no-audit",
            "--save",
            "--save-exact",
            "--loglevel",
            "error",
            *dependencies,
        ]
        if verbose:
            command.append("--verbose")
        return command

    def build_uninstall_command(
        self,
        root: Path,  # noqa: ARG002
        package: str,
    ) -> list[str]:
        """Return ``npm uninstall --save <package>``."""
        return [self.executable, "uninstall", "--save", package]

    async def check_online(self) -> bool:
        """npm never probes the registry."""
        return True

    def warn_install_mode(
        self, *, is_online: bool, use_pnp: bool  # noqa: ARG002
    ) -> None:
        """Warn that npm ignores Plug'n'Play."""
        if use_pnp:
            logger.warning("NPM doesn't support PnP.")
            logger.warning("Falling back to the regular installs.")

    async def check_version(self) -> NpmVersionInfo:
        """Probe ``npm --version`` against the supported minimum."""
        npm_version = await capture_output([self.executable, "--version"])
        has_min_npm = False
        if npm_version:
            try:
                has_min_npm = version_gte(npm_version, MIN_NPM_VERSION)
            except InvalidVersion:
                logger.debug("Unrecognized npm version: %s", npm_version)
        return NpmVersionInfo(has_min_npm=has_min_npm, npm_version=npm_version)


class YarnPackageManager(PackageManager):
    """yarn (classic) backend."""

    name = "yarn"
    executable = YARN_EXECUTABLE

    def __init__(
        self, registry_host: str = DEFAULT_YARN_REGISTRY_HOST
    ) -> None:
        """Initialize yarn backend.

        Args:
            registry_host: Host probed to decide between online and offline

        """
        self.registry_host = registry_host

    def build_install_command(
        self,
        root: Path,
        dependencies: Sequence[str],
        *,
        verbose: bool = False,
        is_online: bool = True,
        use_pnp: bool = False,
    ) -> list[str]:
        """Return ``yarnpkg add --exact`` with an explicit ``--cwd``."""
        command = [self.executable, "add", "--exact"]
        if not is_online:
            command.append("--offline")
        if use_pnp:
            command.append("--enable-pnp")
        command.extend(dependencies)
        command.extend(["--cwd", str(root)])
        if verbose:
            command.append("--verbose")
        return command

    def build_uninstall_command(self, root: Path, package: str) -> list[str]:
        """Return ``yarnpkg remove <package> --cwd <root>``."""
        return [self.executable, "remove", package, "--cwd", str(root)]

    async def check_online(self) -> bool:
        """Resolve the registry host, falling back to the proxy host.

        Behind a proxy external names often do not resolve; resolving the
        proxy itself is then taken as a sign of connectivity.
        """
        if await can_resolve(self.registry_host):
            return True

        proxy = await get_proxy()
        if not proxy:
            return False
        proxy_host = urlparse(proxy).hostname
        if not proxy_host:
            return False
        return await can_resolve(proxy_host)

    def warn_install_mode(
        self, *, is_online: bool, use_pnp: bool  # noqa: ARG002
    ) -> None:
        """Warn when falling back to the offline cache."""
        if not is_online:
            logger.warning("You appear to be offline.")
            logger.warning("Falling back to the local Yarn cache.")

    async def check_version(self) -> YarnVersionInfo:
        """Probe ``yarnpkg --version`` against the Plug'n'Play window."""
        yarn_version = await capture_output([self.executable, "--version"])
        if not yarn_version:
            return YarnVersionInfo(False, False, None)

        comparable = yarn_version
        if not valid_semver(yarn_version):
            trimmed = _TRIM_VERSION_RE.match(yarn_version)
            if trimmed is None:
                return YarnVersionInfo(False, False, yarn_version)
            comparable = trimmed.group(1)

        try:
            return YarnVersionInfo(
                has_min_yarn_pnp=version_gte(comparable, MIN_YARN_PNP_VERSION),
                has_max_yarn_pnp=version_lt(comparable, MAX_YARN_PNP_VERSION),
                yarn_version=yarn_version,
            )
        except InvalidVersion:
            logger.debug("Unrecognized yarn version: %s", yarn_version)
            return YarnVersionInfo(False, False, yarn_version)


def create_package_manager(
    use_yarn: bool,  # noqa: FBT001
    settings: Settings | None = None,
) -> PackageManager:
    """Create the backend for the chosen package manager.

    Args:
        use_yarn: Whether to use yarn instead of npm
        settings: Loaded settings (for the yarn registry host)

    Returns:
        Package manager backend

    """
    if not use_yarn:
        return NpmPackageManager()
    registry_host = DEFAULT_YARN_REGISTRY_HOST
    if settings is not None:
        registry_host = settings["network"]["yarn_registry_host"]
    return YarnPackageManager(registry_host)
