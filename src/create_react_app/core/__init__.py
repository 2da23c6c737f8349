"""Install pipeline: specifiers, metadata, package managers and rollback."""
