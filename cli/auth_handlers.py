"""Authentication handlers for CLI"""

from rich.prompt import Prompt

from remote_config import get_dynamic_config
from vv_auth import VVAuthError, VVAuthService, parse_callback_uri
from cli.status_display import show_auth_status, show_groups


async def login(service: VVAuthService, console) -> bool:
    """
    Run the browser login flow

    Opens the login page, then waits for the user to paste the callback URI
    the browser was redirected to.

    Args:
        service: VVAuthService instance
        console: Rich console for output

    Returns:
        True if login succeeded
    """
    try:
        console.print("\n[bold]Step 1:[/bold] Opening browser for VVCode login...")
        auth_url = await service.create_auth_request()
        console.print("[dim]If the browser did not open, visit:[/dim]")
        console.print(auth_url, soft_wrap=True)

        console.print("\n[bold]Step 2:[/bold] Complete the login in your browser")
        console.print("\n[bold]Step 3:[/bold] Paste the callback URI below")
        console.print("[dim]It looks like: vscode://PiuQiuPiaQia.vvcode/vv-callback?code=...&state=...[/dim]\n")

        try:
            uri = input("Callback URI: ")
        except KeyboardInterrupt:
            console.print("\n[yellow]Login cancelled by user[/yellow]")
            return False

        return await handle_callback(service, uri, console)

    except VVAuthError as e:
        console.print(f"[red][ERROR][/red] {e}")
        return False


async def handle_callback(service: VVAuthService, uri: str, console) -> bool:
    """
    Complete a login from a callback URI

    Args:
        service: VVAuthService instance
        uri: vscode:// callback URI (or its query string)
        console: Rich console for output

    Returns:
        True if the login completed
    """
    try:
        code, state = parse_callback_uri(uri)
        processed = await service.handle_auth_callback(code, state)
    except VVAuthError as e:
        console.print(f"[red][ERROR][/red] {e}")
        retry = Prompt.ask("\nWould you like to log in again?", choices=["y", "n"], default="n", console=console)
        if retry.lower() == "y":
            return await login(service, console)
        return False

    if not processed:
        console.print("[yellow]Callback ignored (already processed)[/yellow]")
        return False

    console.print("[green][OK][/green] Login successful!")
    show_auth_status(service, console)
    return True


async def logout(service: VVAuthService, console) -> bool:
    """Log out and clear all stored account data"""
    await service.handle_deauth()
    console.print("[green][OK][/green] Logged out")
    return True


async def switch_group(service: VVAuthService, group_type: str, console) -> bool:
    """Switch the active group and show the result"""
    try:
        await service.switch_group(group_type)
    except VVAuthError as e:
        console.print(f"[red][ERROR][/red] {e}")
        return False

    console.print(f"[green][OK][/green] Switched to group [cyan]{group_type}[/cyan]")
    show_groups(service.get_group_config(), console)
    return True


async def refresh_groups(service: VVAuthService, console) -> bool:
    """Re-fetch the group list from the server"""
    if not service.is_authenticated:
        console.print("[yellow]Not logged in. Please login first.[/yellow]")
        return False

    groups = await service.refresh_group_config()
    if groups is None:
        console.print("[red][ERROR][/red] Failed to refresh groups")
        return False

    show_groups(groups, console)
    return True


async def show_remote_config(console, refresh: bool = False) -> bool:
    """Fetch and display the remote runtime configuration"""
    config = await get_dynamic_config(force_refresh=refresh)
    anthropic = config.anthropic

    if anthropic.api_key is None and anthropic.base_url is None:
        console.print("[yellow]Remote configuration unavailable[/yellow]")
        return False

    console.print(f"Anthropic base URL: {anthropic.base_url or '-'}")
    console.print(f"Anthropic API key: {'configured' if anthropic.api_key else '-'}")
    return True
