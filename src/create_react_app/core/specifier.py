"""Turn --scripts-version and --template values into install targets.

A specifier may be a semver version, an ``@tag``, a ``file:`` path, an
archive URL, a git URL or a (possibly scoped) package name. Parsing is
total: anything unrecognized is handed to the package manager verbatim.
"""

import asyncio
import re
from collections.abc import Awaitable, Callable
from pathlib import Path

from create_react_app.constants import (
    DEFAULT_SCRIPTS_PACKAGE,
    DEFAULT_TEMPLATE_PACKAGE,
)
from create_react_app.domain.types import FILE_PREFIX, is_archive
from create_react_app.domain.version import valid_semver
from create_react_app.exceptions import UserCancelledError
from create_react_app.logger import get_logger

logger = get_logger(__name__)

_TEMPLATE_RE = re.compile(r"^(@[^/]+/)?([^@]+)?(@.+)?$")

ConfirmCallback = Callable[[str], Awaitable[bool]]

# Target-name prefix → question asked before installing it
DEPRECATED_PACKAGES: dict[str, str] = {
    "react-scripts-ts": (
        "The react-scripts-ts package is deprecated. TypeScript is now "
        "supported natively in Create React App. You can use the "
        "--template typescript option instead when generating your app to "
        "include TypeScript support. Would you like to continue using "
        "react-scripts-ts?"
    ),
}


def _resolve_file_specifier(raw: str, base_dir: Path | None) -> str:
    """Return ``file:<absolute path>`` for a ``file:`` specifier."""
    base = base_dir or Path.cwd()
    relative = raw[len(FILE_PREFIX) :]
    return f"{FILE_PREFIX}{(base / relative).resolve()}"


def parse_version_specifier(
    raw: str | None, base_dir: Path | None = None
) -> str:
    """Build the scripts package install target.

    Examples:
        >>> parse_version_specifier(None)
        'react-scripts'
        >>> parse_version_specifier("0.8.2")
        'react-scripts@0.8.2'
        >>> parse_version_specifier("@next")
        'react-scripts@next'

    Args:
        raw: Value of --scripts-version, if any
        base_dir: Directory ``file:`` paths are relative to
            (defaults to the current directory)

    Returns:
        Install target string

    """
    if not raw:
        return DEFAULT_SCRIPTS_PACKAGE

    version = valid_semver(raw)
    if version:
        return f"{DEFAULT_SCRIPTS_PACKAGE}@{version}"
    if raw.startswith("@") and "/" not in raw:
        return f"{DEFAULT_SCRIPTS_PACKAGE}{raw}"
    if raw.startswith(FILE_PREFIX):
        return _resolve_file_specifier(raw, base_dir)
    # Archives, URLs, forks published under another name
    return raw


def parse_template_specifier(
    raw: str | None, base_dir: Path | None = None
) -> str:
    """Build the template package install target.

    Short names get the ``cra-template-`` prefix while any ``@scope/`` and
    ``@version`` are kept:

    ========================  ================================
    raw                       target
    ========================  ================================
    ``typescript``            ``cra-template-typescript``
    ``@org/foo@1.0.0``        ``@org/cra-template-foo@1.0.0``
    ``cra-template-foo``      ``cra-template-foo``
    ``@org``                  ``@org/cra-template``
    ========================  ================================

    Args:
        raw: Value of --template, if any
        base_dir: Directory ``file:`` paths are relative to
            (defaults to the current directory)

    Returns:
        Install target string

    """
    default = DEFAULT_TEMPLATE_PACKAGE
    if not raw:
        return default

    if raw.startswith(FILE_PREFIX):
        return _resolve_file_specifier(raw, base_dir)
    if "://" in raw or is_archive(raw):
        return raw

    match = _TEMPLATE_RE.match(raw)
    if match is None:
        logger.debug("Unrecognized template specifier, using as is: %s", raw)
        return raw

    scope = match.group(1) or ""
    name = match.group(2) or ""
    version = match.group(3) or ""

    if name == default or name.startswith(f"{default}-"):
        return f"{scope}{name}{version}"
    if version and not scope and not name:
        # "@org" alone means the org's own cra-template
        return f"{version}/{default}"
    return f"{scope}{default}-{name}{version}"


def find_deprecation(target: str) -> str | None:
    """Return the deprecation question for ``target``, if it has one."""
    for prefix, message in DEPRECATED_PACKAGES.items():
        if target.startswith(prefix):
            return message
    return None


async def ask_on_terminal(message: str) -> bool:
    """Ask a yes/no question on the terminal; the default answer is no."""
    answer = await asyncio.to_thread(input, f"{message} (y/N) ")
    return answer.strip().lower() in ("y", "yes")


async def confirm_deprecated_package(
    target: str, confirm: ConfirmCallback | None = None
) -> str:
    """Ask before installing a deprecated package.

    Args:
        target: Install target produced by ``parse_version_specifier``
        confirm: Async yes/no callback (defaults to a terminal prompt)

    Returns:
        ``target`` unchanged when it is not deprecated or the user agreed

    Raises:
        UserCancelledError: If the user declined

    """
    message = find_deprecation(target)
    if message is None:
        return target

    ask = confirm or ask_on_terminal
    if not await ask(message):
        raise UserCancelledError("Declined deprecated package", target)

    logger.debug("User accepted deprecated package %s", target)
    return target
