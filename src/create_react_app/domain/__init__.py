"""Pure domain types and version logic (no I/O)."""

from create_react_app.domain.types import (
    DependencySet,
    PackageDescriptor,
    TargetKind,
    classify_target,
)

__all__ = [
    "DependencySet",
    "PackageDescriptor",
    "TargetKind",
    "classify_target",
]
