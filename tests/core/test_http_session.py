"""Tests for the configured HTTP session."""

import aiohttp
import pytest

from create_react_app.config import SettingsManager
from create_react_app.core.http_session import create_http_session


@pytest.mark.asyncio
async def test_timeout_from_settings(tmp_path):
    """Test that the connect timeout follows timeout_seconds."""
    settings = SettingsManager(tmp_path).get_default_settings()
    settings["network"]["timeout_seconds"] = 4

    async with create_http_session(settings) as session:
        assert isinstance(session, aiohttp.ClientSession)
        assert session.timeout.sock_connect == 4
        assert session.timeout.total == 240

    assert session.closed


@pytest.mark.asyncio
async def test_defaults_without_settings():
    """Test the default timeout when no settings are passed."""
    async with create_http_session() as session:
        assert session.timeout.sock_connect == 10
