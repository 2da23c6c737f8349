"""Programmatic entry point that bootstraps a new React project.

``create_app`` prepares the workspace and hands over to
``InstallOrchestrator``; ``run`` drives it on uvloop and maps the outcome
to an exit code.
"""

from contextlib import AsyncExitStack
from pathlib import Path
from typing import Any

import uvloop

from create_react_app.config import SettingsManager
from create_react_app.constants import (
    LEGACY_SCRIPTS_PACKAGE,
    MIN_NODE_VERSION,
)
from create_react_app.core.handoff import Initializer
from create_react_app.core.http_session import create_http_session
from create_react_app.core.metadata import PackageMetadataResolver
from create_react_app.core.orchestrator import (
    InstallOptions,
    InstallOrchestrator,
    rollback_on_failure,
)
from create_react_app.core.package_manager import (
    NpmPackageManager,
    PackageManager,
    YarnPackageManager,
    create_package_manager,
    is_using_yarn,
)
from create_react_app.core.process import get_node_version
from create_react_app.core.specifier import (
    ConfirmCallback,
    confirm_deprecated_package,
    parse_template_specifier,
    parse_version_specifier,
)
from create_react_app.core.workspace import (
    ProjectWorkspace,
    validate_project_name,
)
from create_react_app.domain.types import Settings
from create_react_app.domain.version import coerce_version, version_lt
from create_react_app.exceptions import (
    CreateAppError,
    ProjectDirectoryError,
    ProjectNameError,
    UserCancelledError,
)
from create_react_app.logger import (
    flush_all_handlers,
    get_logger,
    update_logger_from_config,
)

logger = get_logger(__name__)


def _is_legacy_node(node_version: str | None) -> bool:
    coerced = coerce_version(node_version)
    return coerced is not None and version_lt(coerced, MIN_NODE_VERSION)


async def _select_install_mode(
    package_manager: PackageManager,
    package_to_install: str,
    use_pnp: bool,  # noqa: FBT001
) -> tuple[str, bool]:
    """Apply the package manager version fallbacks.

    Returns:
        Possibly downgraded install target and Plug'n'Play switch

    """
    if isinstance(package_manager, NpmPackageManager):
        npm_info = await package_manager.check_version()
        if not npm_info.has_min_npm:
            if npm_info.npm_version:
                logger.warning(
                    "You are using npm %s so the project will be "
                    "bootstrapped with an old unsupported version of tools.",
                    npm_info.npm_version,
                )
                logger.warning(
                    "Please update to npm 6 or higher for a better, fully "
                    "supported experience."
                )
            package_to_install = LEGACY_SCRIPTS_PACKAGE
    elif isinstance(package_manager, YarnPackageManager) and use_pnp:
        yarn_info = await package_manager.check_version()
        if yarn_info.yarn_version and not yarn_info.has_min_yarn_pnp:
            logger.warning(
                "You are using Yarn %s together with the --use-pnp flag, but "
                "Plug'n'Play is only supported starting from the 1.12 "
                "release.",
                yarn_info.yarn_version,
            )
            logger.warning(
                "Please update to Yarn 1.12 or higher for a better, fully "
                "supported experience."
            )
            use_pnp = False
        elif yarn_info.yarn_version and not yarn_info.has_max_yarn_pnp:
            logger.warning(
                "Yarn %s does not support the --use-pnp flag, which is "
                "only needed for Yarn 1.x.",
                yarn_info.yarn_version,
            )
            use_pnp = False
    return package_to_install, use_pnp


async def create_app(  # noqa: PLR0913
    name: str,
    *,
    verbose: bool = False,
    scripts_version: str | None = None,
    template: str | None = None,
    use_yarn: bool | None = None,
    use_pnp: bool = False,
    settings: Settings | None = None,
    confirm: ConfirmCallback | None = None,
    initializer: Initializer | None = None,
    package_manager: PackageManager | None = None,
    resolver: PackageMetadataResolver | None = None,
    base_dir: Path | None = None,
    runtime_version: str | None = None,
) -> Path:
    """Create a new React project in directory ``name``.

    Args:
        name: Project directory, relative to ``base_dir``
        verbose: Pass --verbose to the package manager and init script
        scripts_version: Scripts specifier (version, tag, path, URL, name)
        template: Template specifier
        use_yarn: Force yarn or npm; detected from the user agent when None
        use_pnp: Request a yarn Plug'n'Play install
        settings: Loaded settings (read from settings.conf when omitted)
        confirm: Async yes/no callback for deprecated packages
        initializer: Handoff run after install
        package_manager: Backend overriding ``use_yarn``
        resolver: Metadata resolver (one sharing an HTTP session otherwise)
        base_dir: Directory the tool runs from (defaults to the cwd)
        runtime_version: Node version (probed when omitted)

    Returns:
        The project directory

    Raises:
        ProjectNameError: If the name breaks npm naming rules
        ProjectDirectoryError: If the directory holds conflicting files
        UserCancelledError: If a deprecated package was declined
        CreateAppError: If installation failed (after rollback)

    """
    update_logger_from_config()
    if settings is None:
        settings = SettingsManager().load_settings()
    original_directory = (base_dir or Path.cwd()).resolve()

    node_version = runtime_version or await get_node_version()
    if _is_legacy_node(node_version):
        logger.warning(
            "You are using Node %s so the project will be bootstrapped "
            "with an old unsupported version of tools.",
            node_version,
        )
        logger.warning(
            "Please update to Node 14 or higher for a better, fully "
            "supported experience."
        )
        scripts_version = LEGACY_SCRIPTS_PACKAGE

    workspace = ProjectWorkspace.from_name(name, original_directory)
    validate_project_name(workspace.name)

    package_to_install = parse_version_specifier(
        scripts_version, original_directory
    )
    template_to_install = parse_template_specifier(
        template, original_directory
    )
    await confirm_deprecated_package(package_to_install, confirm)

    workspace.create()
    workspace.ensure_safe()
    logger.info("Creating a new React app in %s.", workspace.root)

    async with AsyncExitStack() as stack:
        # The orchestrator guards its own stages
        with rollback_on_failure(workspace):
            workspace.write_initial_manifest()

            if package_manager is None:
                if use_yarn is None:
                    use_yarn = is_using_yarn()
                package_manager = create_package_manager(use_yarn, settings)

            package_to_install, use_pnp = await _select_install_mode(
                package_manager, package_to_install, use_pnp
            )

            if resolver is None:
                session = await stack.enter_async_context(
                    create_http_session(settings)
                )
                resolver = PackageMetadataResolver(session)

            options = InstallOptions(
                verbose=verbose,
                use_pnp=use_pnp,
                template=template,
                original_directory=original_directory,
                scripts_version=package_to_install,
            )
            orchestrator = InstallOrchestrator(
                package_manager,
                resolver=resolver,
                initializer=initializer,
                runtime_version=node_version,
            )

        await orchestrator.install_and_initialize(
            workspace, package_to_install, template_to_install, options
        )

    logger.info("Success! Created %s at %s", workspace.name, workspace.root)
    return workspace.root


def _report_error(error: CreateAppError) -> None:
    logger.error("%s", error)
    if isinstance(error, ProjectNameError):
        for problem in error.problems:
            logger.error("  * %s", problem)
    elif isinstance(error, ProjectDirectoryError):
        for conflict in error.conflicts:
            logger.error("  %s", conflict)


def run(name: str, **options: Any) -> int:
    """Run ``create_app`` on uvloop and return the process exit code.

    Args:
        name: Project directory
        **options: Keyword arguments for ``create_app``

    Returns:
        0 on success or when the user cancelled, 1 otherwise

    """
    try:
        uvloop.run(create_app(name, **options))
    except UserCancelledError as e:
        logger.info("%s", e)
        return 0
    except CreateAppError as e:
        _report_error(e)
        return 1
    except KeyboardInterrupt:
        logger.info("Cancelled by user")
        return 1
    except Exception:
        logger.exception("Unexpected error")
        return 1
    finally:
        flush_all_handlers()
    return 0
