"""Staged install of a new project with rollback on failure.

Stages run strictly in order: resolve both targets, probe connectivity,
build the dependency list, install, check the node engine requirement,
patch runtime dependencies to caret ranges and hand off to the init script.
Any failure in between, interrupts included, rolls back the workspace and
is re-raised unchanged.
"""

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from packaging.version import InvalidVersion

from create_react_app.constants import (
    LEGACY_SCRIPTS_PACKAGE,
    RUNTIME_DEPENDENCIES,
)
from create_react_app.core.compat import (
    supports_template,
    template_incompatibility_message,
)
from create_react_app.core.handoff import Initializer, NodeScriptInitializer
from create_react_app.core.manifest import (
    read_engine_requirement,
    set_caret_range_for_runtime_deps,
)
from create_react_app.core.metadata import PackageMetadataResolver
from create_react_app.core.package_manager import PackageManager
from create_react_app.core.process import get_node_version
from create_react_app.core.workspace import ProjectWorkspace
from create_react_app.domain.types import DependencySet, PackageDescriptor
from create_react_app.domain.version import InvalidRangeError, satisfies
from create_react_app.exceptions import (
    CreateAppError,
    FatalInstallError,
    RuntimeIncompatibleError,
)
from create_react_app.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class InstallOptions:
    """Per-run switches for ``InstallOrchestrator``.

    Attributes:
        verbose: Pass ``--verbose`` to the package manager and init script
        use_pnp: Ask yarn for a Plug'n'Play install
        template: Template as requested by the user, None for the default
        original_directory: Directory the tool was started from
        scripts_version: Scripts install target, used to spot the legacy
            fallback

    """

    verbose: bool = False
    use_pnp: bool = False
    template: str | None = None
    original_directory: Path = field(default_factory=Path.cwd)
    scripts_version: str | None = None

    @property
    def uses_legacy_scripts(self) -> bool:
        """Return True when the old unsupported scripts were forced."""
        return self.scripts_version == LEGACY_SCRIPTS_PACKAGE


def _describe_install(
    package_info: PackageDescriptor,
    template_info: PackageDescriptor | None,
) -> str:
    names = ", ".join(RUNTIME_DEPENDENCIES)
    message = f"Installing {names}, and {package_info.name}"
    if template_info is not None:
        message += f" with {template_info.name}"
    return f"{message}..."


def report_failure(error: BaseException) -> None:
    """Log why the install is aborted.

    Other ``CreateAppError`` messages are left to the caller, which
    reports them once.
    """
    logger.info("Aborting installation.")
    if isinstance(error, FatalInstallError) and error.command:
        logger.error("  %s has failed.", error.command)
    elif isinstance(error, (KeyboardInterrupt, asyncio.CancelledError)):
        logger.warning("Installation interrupted.")
    elif not isinstance(error, CreateAppError):
        logger.exception("Unexpected error. Please report it as a bug:")


@contextmanager
def rollback_on_failure(workspace: ProjectWorkspace) -> Iterator[None]:
    """Roll ``workspace`` back if the block raises, then re-raise.

    Interrupts and task cancellation are rolled back too.
    """
    try:
        yield
    except (Exception, KeyboardInterrupt, asyncio.CancelledError) as e:
        report_failure(e)
        workspace.rollback()
        logger.info("Done.")
        raise


class InstallOrchestrator:
    """Runs the install stages against a prepared workspace.

    Attributes:
        package_manager: npm or yarn backend
        resolver: Metadata resolver for the install targets
        initializer: Handoff run after install; defaults to the scripts
            package's init script
        runtime_version: Node version checked against ``engines.node``;
            probed from ``node --version`` when omitted

    """

    def __init__(
        self,
        package_manager: PackageManager,
        resolver: PackageMetadataResolver | None = None,
        initializer: Initializer | None = None,
        runtime_version: str | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            package_manager: Backend used for the install
            resolver: Metadata resolver (a fresh one when omitted)
            initializer: Handoff callable (node init script when omitted)
            runtime_version: Node version for the engines check

        """
        self.package_manager = package_manager
        self.resolver = resolver or PackageMetadataResolver()
        self.initializer = initializer
        self.runtime_version = runtime_version

    async def install_and_initialize(
        self,
        workspace: ProjectWorkspace,
        package_to_install: str,
        template_to_install: str,
        options: InstallOptions,
    ) -> None:
        """Install dependencies and initialize the project.

        Args:
            workspace: Created workspace holding the initial manifest
            package_to_install: Scripts package install target
            template_to_install: Template install target
            options: Per-run switches

        Raises:
            CreateAppError: When a stage fails; the workspace has already
                been rolled back
            KeyboardInterrupt: Re-raised after rollback
            asyncio.CancelledError: Re-raised after rollback

        """
        with rollback_on_failure(workspace):
            await self._run_stages(
                workspace, package_to_install, template_to_install, options
            )

        if options.uses_legacy_scripts:
            logger.warning(
                "Note: the project was bootstrapped with an old unsupported "
                "version of tools."
            )
            logger.warning(
                "Please update to Node >=14 and npm >=6 to get supported "
                "tools in new projects."
            )

    async def _run_stages(
        self,
        workspace: ProjectWorkspace,
        package_to_install: str,
        template_to_install: str,
        options: InstallOptions,
    ) -> None:
        package_info, template_info = await self.resolve_targets(
            package_to_install, template_to_install
        )
        is_online = await self.package_manager.check_online()

        dependencies = DependencySet()
        for name in RUNTIME_DEPENDENCIES:
            dependencies.add(name)
        dependencies.add(package_to_install, package_info.name)

        use_template = supports_template(package_info)
        if use_template:
            dependencies.add(template_to_install, template_info.name)
        elif options.template:
            logger.warning(template_incompatibility_message(package_info))
            logger.warning("Ignoring the requested template.")

        logger.info(
            "Installing packages. This might take a couple of minutes."
        )
        logger.info(
            _describe_install(
                package_info, template_info if use_template else None
            )
        )
        await self.package_manager.install(
            workspace.root,
            dependencies.targets,
            verbose=options.verbose,
            is_online=is_online,
            use_pnp=options.use_pnp,
        )

        await self.check_runtime(workspace.root, package_info.name)
        set_caret_range_for_runtime_deps(workspace.root, package_info.name)

        initializer = self.initializer or NodeScriptInitializer(
            package_info.name
        )
        await initializer(
            workspace.root,
            workspace.name,
            options.verbose,
            options.original_directory,
            template_info.name if use_template else None,
        )

    async def resolve_targets(
        self, package_to_install: str, template_to_install: str
    ) -> tuple[PackageDescriptor, PackageDescriptor]:
        """Resolve both install targets concurrently.

        Returns:
            Descriptors for the scripts package and the template

        Raises:
            SpecifierError: The first resolution failure, unwrapped

        """
        try:
            async with asyncio.TaskGroup() as tg:
                package_task = tg.create_task(
                    self.resolver.resolve(package_to_install)
                )
                template_task = tg.create_task(
                    self.resolver.resolve(template_to_install)
                )
        except ExceptionGroup as group:
            raise group.exceptions[0] from None

        return package_task.result(), template_task.result()

    async def check_runtime(self, root: Path, package_name: str) -> None:
        """Verify node satisfies the installed package's ``engines.node``.

        Raises:
            RuntimeIncompatibleError: If the requirement is not met

        """
        required = read_engine_requirement(root, package_name)
        if required is None:
            return

        current = self.runtime_version or await get_node_version()
        if current is None:
            logger.debug("Node version unknown, skipping engines check")
            return

        try:
            compatible = satisfies(current, required)
        except (InvalidRangeError, InvalidVersion) as e:
            logger.debug("Cannot compare %s with %s: %s", current, required, e)
            compatible = False

        if not compatible:
            msg = (
                f"You are running Node {current}. Create React App requires "
                f"Node {required} or higher. Please update your version of "
                "Node."
            )
            raise RuntimeIncompatibleError(msg, current, required)
