"""Pytest configuration and fixtures for create-react-app tests."""

import logging
import tarfile

import pytest

from create_react_app.constants import DEPENDENCY_CACHE_DIR, MANIFEST_FILE_NAME
from create_react_app.core.manifest import read_manifest, write_manifest
from create_react_app.core.package_manager import PackageManager
from create_react_app.core.process import format_command
from create_react_app.domain.types import split_registry_target
from create_react_app.exceptions import FatalInstallError


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Enable log propagation for all loggers during tests.

    This allows pytest's caplog fixture to capture logs from all loggers,
    even those created with propagate=False in production code.
    """
    original_propagation = {}
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("create_react_app"):
            logger = logging.getLogger(name)
            original_propagation[name] = logger.propagate
            logger.propagate = True

    yield

    for name, propagate_value in original_propagation.items():
        logger = logging.getLogger(name)
        logger.propagate = propagate_value


@pytest.fixture
def project_root(tmp_path):
    """Provide an empty project directory inside tmp_path."""
    root = tmp_path / "my-app"
    root.mkdir()
    return root


class FakePackageManager(PackageManager):
    """Package manager that writes node_modules instead of spawning npm.

    Installed packages get version 1.0.0 unless the target pins one or
    ``versions`` overrides it; ``engines`` adds an ``engines.node`` range to
    a package's manifest.
    """

    name = "fake"
    executable = "fake-pm"

    def __init__(
        self,
        *,
        fail: bool = False,
        online: bool = True,
        versions: dict[str, str] | None = None,
        engines: dict[str, str] | None = None,
    ) -> None:
        self.fail = fail
        self.online = online
        self.versions = versions or {}
        self.engines = engines or {}
        self.installs: list[dict] = []

    def build_install_command(
        self,
        root,
        dependencies,
        *,
        verbose=False,
        is_online=True,
        use_pnp=False,
    ):
        return [self.executable, "add", *dependencies]

    def build_uninstall_command(self, root, package):
        return [self.executable, "remove", package]

    async def check_online(self):
        return self.online

    async def install(
        self,
        root,
        dependencies,
        *,
        verbose=False,
        is_online=True,
        use_pnp=False,
    ):
        self.installs.append(
            {
                "root": root,
                "dependencies": list(dependencies),
                "verbose": verbose,
                "is_online": is_online,
                "use_pnp": use_pnp,
            }
        )
        (root / DEPENDENCY_CACHE_DIR).mkdir(exist_ok=True)
        if self.fail:
            command = self.build_install_command(root, dependencies)
            raise FatalInstallError(
                "fake-pm exited with code 1",
                command=format_command(command),
                returncode=1,
            )

        manifest = read_manifest(root / MANIFEST_FILE_NAME)
        installed = manifest.setdefault("dependencies", {})
        for target in dependencies:
            name, version = target, "1.0.0"
            if target.rfind("@") > 0:
                name, version = split_registry_target(target)
            version = self.versions.get(name, version)
            installed[name] = version

            package_dir = root / DEPENDENCY_CACHE_DIR / name
            package_dir.mkdir(parents=True, exist_ok=True)
            package_manifest = {"name": name, "version": version}
            if name in self.engines:
                package_manifest["engines"] = {"node": self.engines[name]}
            write_manifest(package_dir / MANIFEST_FILE_NAME, package_manifest)

        write_manifest(root / MANIFEST_FILE_NAME, manifest)


@pytest.fixture
def fake_package_manager():
    """Provide the FakePackageManager class for per-test configuration."""
    return FakePackageManager


@pytest.fixture
def make_archive(tmp_path):
    """Build .tgz archives shaped like ``npm pack`` output."""

    def _make(
        name: str,
        version: str = "1.0.0",
        *,
        file_name: str | None = None,
        top: str = "package",
    ):
        source = tmp_path / "archive-src" / top
        source.mkdir(parents=True, exist_ok=True)
        write_manifest(
            source / MANIFEST_FILE_NAME, {"name": name, "version": version}
        )
        archive = tmp_path / (file_name or f"{name.split('/')[-1]}.tgz")
        with tarfile.open(archive, "w:gz") as tar:
            tar.add(source, arcname=top)
        return archive

    return _make
