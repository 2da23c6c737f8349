"""Centralized constants module for create-react-app.

Single source of truth for package names, version thresholds, file names
and logging formats shared across the codebase.

Usage:
    from create_react_app.constants import DEFAULT_SCRIPTS_PACKAGE
"""

from typing import Final

# =============================================================================
# Package Constants
# =============================================================================

# Package installed when no --scripts-version is given
DEFAULT_SCRIPTS_PACKAGE: Final[str] = "react-scripts"

# Template installed when no --template is given; also the alias prefix
DEFAULT_TEMPLATE_PACKAGE: Final[str] = "cra-template"

# Runtime libraries always installed first, patched to caret ranges afterwards
RUNTIME_DEPENDENCIES: Final[tuple[str, ...]] = ("react", "react-dom")

# Last scripts release that still bootstraps on old node / npm
LEGACY_SCRIPTS_PACKAGE: Final[str] = "react-scripts@0.9.x"

# First scripts release that understands templates
TEMPLATES_VERSION_MINIMUM: Final[str] = "3.3.0"

# Version of the manifest written into a fresh project
INITIAL_PROJECT_VERSION: Final[str] = "0.1.0"

# =============================================================================
# Tooling Version Constants
# =============================================================================

MIN_NODE_VERSION: Final[str] = "14.0.0"
MIN_NPM_VERSION: Final[str] = "6.0.0"
MIN_YARN_PNP_VERSION: Final[str] = "1.12.0"
MAX_YARN_PNP_VERSION: Final[str] = "2.0.0"

NPM_EXECUTABLE: Final[str] = "npm"
YARN_EXECUTABLE: Final[str] = "yarnpkg"
NODE_EXECUTABLE: Final[str] = "node"

# Grace period between SIGTERM and SIGKILL for a cancelled child
CHILD_TERMINATE_TIMEOUT_SECONDS: Final[float] = 5.0

# =============================================================================
# Workspace Constants
# =============================================================================

MANIFEST_FILE_NAME: Final[str] = "package.json"
DEPENDENCY_CACHE_DIR: Final[str] = "node_modules"
PNP_FILE_NAME: Final[str] = ".pnp.js"

# Files removed from the project directory when installation is aborted
KNOWN_GENERATED_FILES: Final[tuple[str, ...]] = (
    MANIFEST_FILE_NAME,
    DEPENDENCY_CACHE_DIR,
)

# Files that may already exist in a directory we bootstrap into
SAFE_PREEXISTING_FILES: Final[frozenset[str]] = frozenset(
    {
        ".DS_Store",
        ".git",
        ".gitattributes",
        ".gitignore",
        ".gitlab-ci.yml",
        ".hg",
        ".hgcheck",
        ".hgignore",
        ".idea",
        ".npmignore",
        ".travis.yml",
        "docs",
        "LICENSE",
        "README.md",
        "mkdocs.yml",
        "Thumbs.db",
    }
)

# Logs left behind by a previous failed install, removed on the next run
ERROR_LOG_FILE_PATTERNS: Final[tuple[str, ...]] = (
    "npm-debug.log",
    "yarn-error.log",
    "yarn-debug.log",
)

# =============================================================================
# Configuration Constants
# =============================================================================

CONFIG_VERSION: Final[str] = "1.0.0"
CONFIG_FILE_NAME: Final[str] = "settings.conf"
CONFIG_DIR_NAME: Final[str] = ".config"
DEFAULT_CONFIG_SUBDIR: Final[str] = "create-react-app"
CONFIG_DIR_ENV_VAR: Final[str] = "CREATE_REACT_APP_CONFIG_DIR"
LOG_DIR_ENV_VAR: Final[str] = "CREATE_REACT_APP_LOG_DIR"
LOG_FILE_NAME: Final[str] = "create-react-app.log"

DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_CONSOLE_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_YARN_REGISTRY_HOST: Final[str] = "registry.yarnpkg.com"
DEFAULT_TIMEOUT_SECONDS: Final[int] = 10

SECTION_DEFAULT: Final[str] = "DEFAULT"
SECTION_NETWORK: Final[str] = "network"

KEY_CONFIG_VERSION: Final[str] = "config_version"
KEY_LOG_LEVEL: Final[str] = "log_level"
KEY_CONSOLE_LOG_LEVEL: Final[str] = "console_log_level"
KEY_YARN_REGISTRY_HOST: Final[str] = "yarn_registry_host"
KEY_TIMEOUT_SECONDS: Final[str] = "timeout_seconds"

# =============================================================================
# Logging Constants
# =============================================================================

LOG_ROTATION_THRESHOLD_BYTES: Final[int] = 1024 * 1024  # 1 MB
LOG_BACKUP_COUNT: Final[int] = 3

LOG_CONSOLE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
LOG_CONSOLE_DATE_FORMAT: Final[str] = "%H:%M:%S"
LOG_FILE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}
