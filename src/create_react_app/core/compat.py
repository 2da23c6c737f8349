"""Decide whether a scripts package understands the --template option."""

from create_react_app.constants import (
    DEFAULT_SCRIPTS_PACKAGE,
    TEMPLATES_VERSION_MINIMUM,
)
from create_react_app.domain.types import PackageDescriptor
from create_react_app.domain.version import coerce_version, version_gte


def supports_template(
    package_info: PackageDescriptor,
    minimum: str = TEMPLATES_VERSION_MINIMUM,
) -> bool:
    """Return True if the resolved scripts package supports templates.

    Versions that cannot be read (tags, forks, git URLs) are assumed to be
    compatible.

    Args:
        package_info: Resolved scripts package
        minimum: First version with template support

    Returns:
        Whether the template should be installed

    """
    version = coerce_version(package_info.version)
    if version is None:
        return True
    return version_gte(version, minimum)


def template_incompatibility_message(package_info: PackageDescriptor) -> str:
    """Build the warning shown when a requested template is dropped."""
    if package_info.name == DEFAULT_SCRIPTS_PACKAGE:
        qualifier = "is not"
    else:
        qualifier = "may not be"
    return (
        f"The {package_info.name} version you're using {qualifier} "
        "compatible with the --template option."
    )
