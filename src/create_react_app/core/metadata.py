"""Recover the canonical name and version behind an install target.

Archives are downloaded (or copied) into a scoped temporary directory,
extracted and their package.json read. When that fails the name is guessed
from the archive file name instead; an unreadable archive is never fatal
on its own.
"""

import asyncio
import contextlib
import re
import shutil
import tarfile
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import urlparse

import aiofiles
import aiohttp

from create_react_app.constants import MANIFEST_FILE_NAME
from create_react_app.core.manifest import read_manifest
from create_react_app.domain.types import (
    FILE_PREFIX,
    PackageDescriptor,
    TargetKind,
    classify_target,
    split_registry_target,
)
from create_react_app.exceptions import SpecifierError
from create_react_app.logger import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 8192

# "my-react-scripts-0.8.2.tgz" → "my-react-scripts"
_ARCHIVE_NAME_RE = re.compile(
    r"^(?:.*/)?([^/]+?)(?:-\d+.+?)?(?:\.(?:tgz|tar\.gz))?$"
)
# "git+ssh://github.com/org/react-scripts.git#v1.2.3" → "react-scripts"
_GIT_NAME_RE = re.compile(r"([^/]+)\.git(?:#.*)?$")


@asynccontextmanager
async def temporary_directory() -> AsyncIterator[Path]:
    """Yield a temporary directory that is removed on every exit path.

    Removal errors are swallowed; the OS reclaims temp space eventually.
    """
    path = Path(await asyncio.to_thread(tempfile.mkdtemp, prefix="cra-"))
    try:
        yield path
    finally:
        with contextlib.suppress(OSError):
            await asyncio.to_thread(shutil.rmtree, path)


def archive_name_from_path(target: str) -> str:
    """Guess a package name from an archive URL or path.

    A trailing ``-<version>`` and the archive extension are stripped.

    Raises:
        SpecifierError: If no file name can be found in ``target``

    """
    path = urlparse(target).path if "://" in target else target
    path = path.removeprefix(FILE_PREFIX)
    match = _ARCHIVE_NAME_RE.match(path)
    if match is None:
        msg = "Could not derive a package name from the archive location"
        raise SpecifierError(msg, target)
    return match.group(1)


def git_repository_name(target: str) -> str:
    """Extract the repository name from a ``git+`` URL.

    Raises:
        SpecifierError: If the URL has no path segment to use

    """
    match = _GIT_NAME_RE.search(target)
    if match:
        return match.group(1)

    segment = target.split("#", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    name = segment.removesuffix(".git")
    if not name or ":" in name:
        msg = "Could not derive a package name from the git URL"
        raise SpecifierError(msg, target)
    return name


def _find_manifest(directory: Path) -> Path:
    """Locate package.json at the root or inside the single top directory.

    npm packs everything under ``package/``; other tools use the project
    name or nothing at all.
    """
    candidate = directory / MANIFEST_FILE_NAME
    if candidate.is_file():
        return candidate

    subdirectories = [p for p in directory.iterdir() if p.is_dir()]
    if len(subdirectories) == 1:
        candidate = subdirectories[0] / MANIFEST_FILE_NAME
        if candidate.is_file():
            return candidate

    msg = f"No {MANIFEST_FILE_NAME} found in archive"
    raise FileNotFoundError(msg)


def _extract_archive(archive: Path, destination: Path) -> Path:
    """Extract ``archive`` and return the path of its manifest."""
    destination.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive, "r:*") as tar:
        tar.extractall(destination, filter="data")
    return _find_manifest(destination)


def _descriptor_from_manifest(path: Path) -> PackageDescriptor:
    manifest = read_manifest(path)
    name = manifest.get("name")
    if not isinstance(name, str) or not name:
        msg = f"{path} has no package name"
        raise ValueError(msg)
    version = manifest.get("version")
    return PackageDescriptor(
        name=name, version=version if isinstance(version, str) else None
    )


class PackageMetadataResolver:
    """Resolves install targets into ``PackageDescriptor`` values.

    Attributes:
        session: Optional shared HTTP session for archive downloads. When
            omitted, a short-lived session is opened per download.

    """

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        """Initialize resolver.

        Args:
            session: HTTP session used to download remote archives

        """
        self.session = session

    async def resolve(self, target: str) -> PackageDescriptor:
        """Return the name and, when known, the version behind ``target``.

        Args:
            target: Install target from the specifier parser

        Returns:
            Package descriptor

        Raises:
            SpecifierError: If no name can be recovered at all

        """
        kind = classify_target(target)
        logger.debug("Resolving %s target: %s", kind.value, target)

        if kind is TargetKind.REMOTE_ARCHIVE:
            return await self._resolve_archive(target)
        if kind is TargetKind.GIT_URL:
            return PackageDescriptor(name=git_repository_name(target))
        if kind in (TargetKind.REGISTRY_VERSION, TargetKind.REGISTRY_TAG):
            name, version = split_registry_target(target)
            return PackageDescriptor(name=name, version=version)
        if kind is TargetKind.LOCAL_PATH:
            return await asyncio.to_thread(self._resolve_local, target)
        return PackageDescriptor(name=target)

    @staticmethod
    def _resolve_local(target: str) -> PackageDescriptor:
        path = Path(target.removeprefix(FILE_PREFIX)) / MANIFEST_FILE_NAME
        try:
            return _descriptor_from_manifest(path)
        except (OSError, ValueError) as e:
            msg = f"Cannot read {path}: {e}"
            raise SpecifierError(msg, target) from e

    async def _resolve_archive(self, target: str) -> PackageDescriptor:
        try:
            async with temporary_directory() as tmpdir:
                archive = await self._fetch_archive(target, tmpdir)
                manifest_path = await asyncio.to_thread(
                    _extract_archive, archive, tmpdir / "extracted"
                )
                return await asyncio.to_thread(
                    _descriptor_from_manifest, manifest_path
                )
        except (
            OSError,
            ValueError,
            TimeoutError,
            tarfile.TarError,
            aiohttp.ClientError,
        ) as e:
            logger.info(
                "Could not extract the package name from the archive: %s", e
            )
            name = archive_name_from_path(target)
            logger.info('Based on the filename, assuming it is "%s"', name)
            return PackageDescriptor(name=name)

    async def _fetch_archive(self, target: str, directory: Path) -> Path:
        """Download or copy the archive into ``directory``."""
        archive = directory / "package.tgz"
        if target.startswith(("http://", "https://")):
            await self._download(target, archive)
        else:
            source = Path(target.removeprefix(FILE_PREFIX))
            await asyncio.to_thread(shutil.copyfile, source, archive)
        return archive

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self.session is not None:
            yield self.session
            return
        async with aiohttp.ClientSession() as session:
            yield session

    async def _download(self, url: str, dest: Path) -> None:
        logger.debug("Downloading archive %s", url)
        async with self._session_scope() as session:
            async with session.get(url) as response:
                response.raise_for_status()
                async with aiofiles.open(dest, "wb") as f:
                    async for chunk in response.content.iter_chunked(
                        CHUNK_SIZE
                    ):
                        await f.write(chunk)


async def resolve_package_info(
    target: str, session: aiohttp.ClientSession | None = None
) -> PackageDescriptor:
    """Resolve ``target`` with a one-off ``PackageMetadataResolver``."""
    return await PackageMetadataResolver(session).resolve(target)
