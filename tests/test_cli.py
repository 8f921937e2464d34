"""Tests for the CLI handlers and command dispatch."""

from __future__ import annotations

import argparse
import io
import logging

import pytest
from rich.console import Console

from cli.auth_handlers import handle_callback, logout, refresh_groups, switch_group
from cli.debug_setup import setup_logging
from cli.main import build_parser, run_command
from cli.status_display import show_groups
from conftest import query_of
from vv_auth import CALLBACK_URI, GroupItem, get_auth_service


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=160, force_terminal=False), buffer


class TestHandlers:
    @pytest.mark.asyncio
    async def test_callback_completes_login(self, service) -> None:
        console, out = _console()
        url = await service.create_auth_request()
        state = query_of(url)["state"]

        ok = await handle_callback(service, f"{CALLBACK_URI}?code=abc&state={state}", console)

        assert ok
        assert "Login successful" in out.getvalue()
        assert "alice" in out.getvalue()

    @pytest.mark.asyncio
    async def test_repeated_callback_reported_as_ignored(self, service) -> None:
        url = await service.create_auth_request()
        callback = f"{CALLBACK_URI}?code=abc&state={query_of(url)['state']}"
        await handle_callback(service, callback, _console()[0])

        console, out = _console()
        ok = await handle_callback(service, callback, console)

        assert not ok
        assert "already processed" in out.getvalue()
        assert "Login successful" not in out.getvalue()
        assert service.is_authenticated

    @pytest.mark.asyncio
    async def test_callback_error_printed_verbatim(self, service, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("cli.auth_handlers.Prompt.ask", lambda *args, **kwargs: "n")
        console, out = _console()
        await service.create_auth_request()

        ok = await handle_callback(service, f"{CALLBACK_URI}?code=abc&state=wrong", console)

        assert not ok
        assert "Invalid state parameter - possible CSRF attack" in out.getvalue()

    @pytest.mark.asyncio
    async def test_switch_group_error(self, service) -> None:
        console, out = _console()

        assert not await switch_group(service, "daily", console)
        assert "Please login first" in out.getvalue()

    @pytest.mark.asyncio
    async def test_refresh_requires_login(self, service) -> None:
        console, out = _console()

        assert not await refresh_groups(service, console)
        assert "Not logged in" in out.getvalue()

    @pytest.mark.asyncio
    async def test_logout(self, service) -> None:
        console, out = _console()

        assert await logout(service, console)
        assert "Logged out" in out.getvalue()


class TestStatusDisplay:
    def test_groups_table_masks_keys(self) -> None:
        console, out = _console()
        groups = [
            GroupItem(type="daily", apiKey="sk-daily-secret-0002", defaultModelId="m", isDefault=True),
            GroupItem(type="trial"),
        ]

        show_groups(groups, console)

        text = out.getvalue()
        assert "daily" in text and "trial" in text
        assert "sk-d...0002" in text
        assert "sk-daily-secret-0002" not in text

    def test_no_groups(self) -> None:
        console, out = _console()
        show_groups(None, console)
        assert "No groups available" in out.getvalue()


class TestCommandDispatch:
    def test_parser(self) -> None:
        args = build_parser().parse_args(["--state-dir", "/tmp/x", "switch-group", "daily"])
        assert args.command == "switch-group"
        assert args.group_type == "daily"
        assert args.state_dir == "/tmp/x"

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    @pytest.mark.asyncio
    async def test_status_initializes_service(self, tmp_path) -> None:
        args = argparse.Namespace(command="status", state_dir=str(tmp_path), debug=False)

        assert await run_command(args)
        assert not get_auth_service().is_authenticated


class TestLoggingSetup:
    @pytest.fixture(autouse=True)
    def _restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        httpx_level = logging.getLogger("httpx").level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)
        logging.getLogger("httpx").setLevel(httpx_level)

    def test_level_from_setting(self) -> None:
        setup_logging(log_level="warning")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self) -> None:
        setup_logging(log_level="chatty")
        assert logging.getLogger().level == logging.INFO
