"""Exception classes for create-react-app operations."""


class CreateAppError(Exception):
    """Base exception for create-react-app operations."""

    error_prefix: str = "Operation failed"

    def __init__(self, message: str, target: str | None = None) -> None:
        """Initialize error with message and optional target.

        Args:
            message: Error message describing the failure.
            target: Optional name of the package or path that failed.

        """
        super().__init__(message)
        self.message = message
        self.target = target

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.target:
            return f"{self.error_prefix} for '{self.target}': {self.message}"
        return f"{self.error_prefix}: {self.message}"


class UserCancelledError(CreateAppError):
    """Raised when the user declines an interactive confirmation."""

    error_prefix = "Cancelled"


class SpecifierError(CreateAppError):
    """Raised when a specifier cannot be turned into a package identity."""

    error_prefix = "Invalid package specifier"


class ProjectNameError(CreateAppError):
    """Raised when the project name violates npm naming rules."""

    error_prefix = "Cannot create a project"

    def __init__(
        self,
        message: str,
        target: str | None = None,
        problems: list[str] | None = None,
    ) -> None:
        """Initialize error with the individual naming problems.

        Args:
            message: Error message describing the failure.
            target: Rejected project name.
            problems: One entry per violated naming rule.

        """
        super().__init__(message, target)
        self.problems = problems or []


class ProjectDirectoryError(CreateAppError):
    """Raised when the target directory holds conflicting files."""

    error_prefix = "Unsafe project directory"

    def __init__(
        self,
        message: str,
        target: str | None = None,
        conflicts: list[str] | None = None,
    ) -> None:
        """Initialize error with the conflicting entries.

        Args:
            message: Error message describing the failure.
            target: Project directory name.
            conflicts: Directory entries that block the bootstrap.

        """
        super().__init__(message, target)
        self.conflicts = conflicts or []


class FatalInstallError(CreateAppError):
    """Raised when a package manager or node child process fails."""

    error_prefix = "Installation failed"

    def __init__(
        self,
        message: str,
        command: str | None = None,
        returncode: int | None = None,
    ) -> None:
        """Initialize error with the failing command line.

        Args:
            message: Error message describing the failure.
            command: Full command line of the failed child process.
            returncode: Exit code of the child process, if it ran.

        """
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class RuntimeIncompatibleError(CreateAppError):
    """Raised when node does not satisfy the installed package's engines."""

    error_prefix = "Unsupported node version"

    def __init__(
        self, message: str, current: str, required: str
    ) -> None:
        """Initialize error with both sides of the failed requirement.

        Args:
            message: Error message describing the failure.
            current: Running node version.
            required: Range declared in ``engines.node``.

        """
        super().__init__(message)
        self.current = current
        self.required = required


class ManifestInvariantError(CreateAppError):
    """Raised when the generated package.json lacks an expected entry."""

    error_prefix = "Invalid package.json"
