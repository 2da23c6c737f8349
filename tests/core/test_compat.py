"""Tests for the template compatibility gate."""

import pytest

from create_react_app.core.compat import (
    supports_template,
    template_incompatibility_message,
)
from create_react_app.domain.types import PackageDescriptor


@pytest.mark.parametrize(
    ("version", "expected"),
    [
        ("3.3.0", True),
        ("4.0.3", True),
        ("3.2.9", False),
        ("0.9.x", False),
        ("3.3.0-next.1", True),
        ("next", True),
        (None, True),
    ],
)
def test_supports_template(version, expected):
    """Test the version threshold and the permissive fallback."""
    info = PackageDescriptor("react-scripts", version)
    assert supports_template(info) is expected


def test_custom_minimum():
    """Test that the threshold can be overridden."""
    info = PackageDescriptor("react-scripts", "2.0.0")
    assert supports_template(info, minimum="2.0.0")


def test_message_for_default_package():
    """Test the definite wording for react-scripts."""
    message = template_incompatibility_message(
        PackageDescriptor("react-scripts", "3.2.0")
    )
    assert "react-scripts version you're using is not compatible" in message


def test_message_for_fork():
    """Test the hedged wording for other scripts packages."""
    message = template_incompatibility_message(
        PackageDescriptor("my-scripts", "1.0.0")
    )
    assert "my-scripts version you're using may not be compatible" in message
