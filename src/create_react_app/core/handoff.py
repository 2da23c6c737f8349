"""Post-install handoff to the scripts package's own init script."""

from pathlib import Path
from typing import Protocol

import orjson

from create_react_app.constants import NODE_EXECUTABLE, PNP_FILE_NAME
from create_react_app.core.process import run_command
from create_react_app.logger import get_logger

logger = get_logger(__name__)

_INIT_SOURCE = (
    "const init = require('{package}/scripts/init.js');"
    "init.apply(null, JSON.parse(process.argv[1]));"
)


class Initializer(Protocol):
    """Callable run once the dependencies are installed."""

    async def __call__(
        self,
        root: Path,
        app_name: str,
        verbose: bool,  # noqa: FBT001
        original_directory: Path,
        template_name: str | None,
    ) -> None: ...


class NodeScriptInitializer:
    """Run ``<package>/scripts/init.js`` from the new project through node.

    When Plug'n'Play generated a ``.pnp.js`` the script is loaded through
    it, since there is no node_modules tree to resolve from.
    """

    def __init__(self, package_name: str) -> None:
        """Initialize handoff.

        Args:
            package_name: Installed scripts package that owns init.js

        """
        self.package_name = package_name

    def build_command(
        self,
        root: Path,
        app_name: str,
        verbose: bool,  # noqa: FBT001
        original_directory: Path,
        template_name: str | None,
    ) -> list[str]:
        """Return the node command line for the init script."""
        arguments = orjson.dumps(
            [
                str(root),
                app_name,
                verbose,
                str(original_directory),
                template_name,
            ]
        ).decode()

        command = [NODE_EXECUTABLE]
        pnp_path = root / PNP_FILE_NAME
        if pnp_path.exists():
            command.extend(["--require", str(pnp_path)])
        command.extend(
            [
                "-e",
                _INIT_SOURCE.format(package=self.package_name),
                "--",
                arguments,
            ]
        )
        return command

    async def __call__(
        self,
        root: Path,
        app_name: str,
        verbose: bool,  # noqa: FBT001
        original_directory: Path,
        template_name: str | None,
    ) -> None:
        """Run the init script with ``root`` as the working directory.

        Raises:
            FatalInstallError: If node exits non-zero

        """
        logger.debug("Handing off to %s/scripts/init.js", self.package_name)
        command = self.build_command(
            root, app_name, verbose, original_directory, template_name
        )
        await run_command(command, cwd=root)
