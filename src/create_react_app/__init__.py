"""Top-level package for create-react-app.

Resolves React project package specifiers, installs them with npm or yarn
and rolls the project directory back when installation fails.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("create-react-app-py")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "dev"
