"""Project directory lifecycle: validation, creation and rollback.

Rollback only knows about the files a bootstrap generates (package.json and
node_modules). It removes those, then the directory itself if nothing else
is left, so files the user already had are never touched.
"""

import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from create_react_app.constants import (
    DEFAULT_SCRIPTS_PACKAGE,
    ERROR_LOG_FILE_PATTERNS,
    KNOWN_GENERATED_FILES,
    RUNTIME_DEPENDENCIES,
    SAFE_PREEXISTING_FILES,
)
from create_react_app.core.manifest import write_initial_manifest
from create_react_app.exceptions import (
    ProjectDirectoryError,
    ProjectNameError,
)
from create_react_app.logger import get_logger

logger = get_logger(__name__)

MAX_PACKAGE_NAME_LENGTH = 214

_BLACKLISTED_NAMES = frozenset({"node_modules", "favicon.ico"})

_NODE_BUILTINS = frozenset(
    {
        "assert", "async_hooks", "buffer", "child_process", "cluster",
        "console", "constants", "crypto", "dgram", "diagnostics_channel",
        "dns", "domain", "events", "fs", "http", "http2", "https",
        "inspector", "module", "net", "os", "path", "perf_hooks",
        "process", "punycode", "querystring", "readline", "repl",
        "stream", "string_decoder", "sys", "timers", "tls",
        "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
        "worker_threads", "zlib",
    }
)  # fmt: skip

_SCOPED_NAME_RE = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)$")
_SPECIAL_CHARS_RE = re.compile(r"[~'!()*]")

# Reserved because npm refuses to install a package into a same-named project
RESERVED_PROJECT_NAMES = tuple(
    sorted((*RUNTIME_DEPENDENCIES, DEFAULT_SCRIPTS_PACKAGE))
)


def _is_url_safe(value: str) -> bool:
    return quote(value, safe="") == value


def validate_project_name(name: str) -> None:
    """Check ``name`` against npm's rules for new package names.

    Raises:
        ProjectNameError: Listing every rule the name breaks

    """
    problems: list[str] = []

    if not name:
        problems.append("name length must be greater than zero")
    if name.startswith("."):
        problems.append("name cannot start with a period")
    if name.startswith("_"):
        problems.append("name cannot start with an underscore")
    if name.strip() != name:
        problems.append("name cannot contain leading or trailing spaces")
    if name.lower() in _BLACKLISTED_NAMES:
        problems.append(f"{name} is a blacklisted name")
    if name.lower() in _NODE_BUILTINS:
        problems.append(f"{name} is a core module name")
    if len(name) > MAX_PACKAGE_NAME_LENGTH:
        problems.append(
            f"name can no longer contain more than "
            f"{MAX_PACKAGE_NAME_LENGTH} characters"
        )
    if name.lower() != name:
        problems.append("name can no longer contain capital letters")
    if _SPECIAL_CHARS_RE.search(name.rsplit("/", 1)[-1]):
        problems.append(
            "name can no longer contain special characters (\"~'!()*\")"
        )
    if name and not _is_url_safe(name):
        match = _SCOPED_NAME_RE.match(name)
        scope, package = match.groups() if match else (None, None)
        if not (
            scope
            and package
            and _is_url_safe(scope)
            and _is_url_safe(package)
        ):
            problems.append("name can only contain URL-friendly characters")

    if problems:
        raise ProjectNameError(
            "because of npm naming restrictions", name, problems
        )

    if name in RESERVED_PROJECT_NAMES:
        raise ProjectNameError(
            "because a dependency with the same name exists",
            name,
            [
                "the following names are not allowed: "
                + ", ".join(RESERVED_PROJECT_NAMES)
            ],
        )


def _is_error_log(file_name: str) -> bool:
    return file_name.startswith(ERROR_LOG_FILE_PATTERNS)


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


@dataclass(frozen=True)
class ProjectWorkspace:
    """The directory a new project is bootstrapped into."""

    root: Path

    @classmethod
    def from_name(
        cls, name: str, base_dir: Path | None = None
    ) -> "ProjectWorkspace":
        """Build the workspace for ``name`` relative to ``base_dir``."""
        return cls(((base_dir or Path.cwd()) / name).resolve())

    @property
    def name(self) -> str:
        """Project name (the directory's base name)."""
        return self.root.name

    def create(self) -> None:
        """Create the project directory if it does not exist."""
        self.root.mkdir(parents=True, exist_ok=True)

    def find_conflicts(self) -> list[str]:
        """Return entries that could clash with the generated project."""
        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if entry.name not in SAFE_PREEXISTING_FILES
            # IntelliJ IDEA creates module files before the bootstrap
            and not entry.name.endswith(".iml")
            and not _is_error_log(entry.name)
        )

    def ensure_safe(self) -> None:
        """Refuse to bootstrap over existing files and drop stale logs.

        Raises:
            ProjectDirectoryError: If conflicting files are present

        """
        conflicts = self.find_conflicts()
        if conflicts:
            raise ProjectDirectoryError(
                "Either try using a new directory name, or remove the "
                "files listed",
                self.name,
                [
                    f"{name}/" if (self.root / name).is_dir() else name
                    for name in conflicts
                ],
            )

        for entry in self.root.iterdir():
            if _is_error_log(entry.name):
                logger.debug("Removing log from previous install: %s", entry)
                _remove_path(entry)

    def write_initial_manifest(self) -> Path:
        """Write the starting package.json into the workspace."""
        return write_initial_manifest(self.root, self.name)

    def remove_generated_files(self) -> list[str]:
        """Delete known generated files that are present.

        Returns:
            Names of the entries that were deleted

        """
        removed: list[str] = []
        if not self.root.is_dir():
            return removed

        for file_name in KNOWN_GENERATED_FILES:
            path = self.root / file_name
            if not path.exists() and not path.is_symlink():
                continue
            logger.info("Deleting generated file... %s", file_name)
            try:
                _remove_path(path)
            except OSError:
                logger.exception("Failed to delete %s", path)
            else:
                removed.append(file_name)
        return removed

    def rollback(self) -> bool:
        """Remove generated files, then the directory if it is now empty.

        Returns:
            True if the project directory itself was deleted

        """
        self.remove_generated_files()
        if not self.root.is_dir() or any(self.root.iterdir()):
            return False

        logger.info(
            "Deleting %s/ from %s", self.name, self.root.parent
        )
        try:
            self.root.rmdir()
        except OSError:
            logger.exception("Failed to delete %s", self.root)
            return False
        return True
