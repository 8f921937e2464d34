"""CLI entry point and argument parsing"""

import argparse
import asyncio
import sys

from rich.console import Console

from cli.auth_handlers import (
    handle_callback,
    login,
    logout,
    refresh_groups,
    show_remote_config,
    switch_group,
)
from cli.debug_setup import setup_logging
from cli.status_display import show_auth_status, show_groups
from utils.storage import StateManager
from vv_auth import get_auth_service, init_auth_service


console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="VVCode account CLI")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--state-dir",
        default=None,
        help="Directory for stored tokens and settings (default: from config)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("login", help="Log in through the browser")
    callback_parser = subparsers.add_parser("callback", help="Complete a login from a callback URI")
    callback_parser.add_argument("uri", help="vscode://.../vv-callback?code=...&state=...")
    subparsers.add_parser("logout", help="Log out and clear stored account data")
    subparsers.add_parser("status", help="Show login status")
    subparsers.add_parser("groups", help="List stored groups")
    switch_parser = subparsers.add_parser("switch-group", help="Make a group the default and apply it")
    switch_parser.add_argument("group_type", help="Group type, e.g. discount, daily or performance")
    subparsers.add_parser("refresh-groups", help="Re-fetch groups from the server")
    remote_parser = subparsers.add_parser("remote-config", help="Show remote runtime configuration")
    remote_parser.add_argument("--refresh", action="store_true", help="Bypass the in-process cache")

    return parser


async def run_command(args: argparse.Namespace) -> bool:
    """Dispatch one parsed command"""
    if args.command == "remote-config":
        return await show_remote_config(console, refresh=args.refresh)

    await init_auth_service(StateManager(args.state_dir))
    service = get_auth_service()

    if args.command == "login":
        return await login(service, console)
    if args.command == "callback":
        return await handle_callback(service, args.uri, console)
    if args.command == "logout":
        return await logout(service, console)
    if args.command == "status":
        show_auth_status(service, console)
        return True
    if args.command == "groups":
        show_groups(service.get_group_config(), console)
        return True
    if args.command == "switch-group":
        return await switch_group(service, args.group_type, console)
    if args.command == "refresh-groups":
        return await refresh_groups(service, console)

    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None):
    """Entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug)

    try:
        ok = asyncio.run(run_command(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
