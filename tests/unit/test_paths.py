"""Tests for uptide.utils.paths."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from uptide.exceptions import ConfigurationError
from uptide.utils.paths import BaseDirs, resolve_path


class TestBaseDirs:
    """Tests for BaseDirs.from_environment."""

    def test_defaults_under_home(self):
        dirs = BaseDirs.from_environment({"HOME": "/home/me"})

        assert dirs.home_dir == Path("/home/me")
        assert dirs.config_dir == Path("/home/me/.config")
        assert dirs.data_dir == Path("/home/me/.local/share")

    def test_xdg_variables_override_defaults(self):
        dirs = BaseDirs.from_environment(
            {"HOME": "/home/me", "XDG_CONFIG_HOME": "/cfg", "XDG_DATA_HOME": "/data"}
        )

        assert dirs.config_dir == Path("/cfg")
        assert dirs.data_dir == Path("/data")

    def test_falls_back_to_path_home(self, monkeypatch):
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: Path("/from/pwd")))

        assert BaseDirs.from_environment({}).home_dir == Path("/from/pwd")

    def test_unknown_home_raises(self, monkeypatch):
        def no_home(cls):
            raise KeyError("HOME")

        monkeypatch.setattr(Path, "home", classmethod(no_home))

        with pytest.raises(ConfigurationError):
            BaseDirs.from_environment({})


class TestResolvePath:
    """Tests for resolve_path precedence."""

    @pytest.mark.asyncio
    async def test_explicit_value_wins(self):
        probe = AsyncMock(return_value="/probed")

        result = await resolve_path("/explicit", probe, Path("/default"))

        assert result == Path("/explicit")
        probe.assert_not_called()

    @pytest.mark.asyncio
    async def test_lookup_used_without_explicit_value(self):
        result = await resolve_path(None, AsyncMock(return_value="/probed\n"), Path("/default"))

        assert result == Path("/probed")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answer", [None, "", "   "])
    async def test_empty_lookup_answer_uses_default(self, answer):
        result = await resolve_path(None, AsyncMock(return_value=answer), Path("/default"))

        assert result == Path("/default")

    @pytest.mark.asyncio
    async def test_no_lookup_uses_default(self):
        assert await resolve_path("", None, Path("/default")) == Path("/default")
