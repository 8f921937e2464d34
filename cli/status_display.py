"""Status display functionality for CLI"""

from typing import Optional

from rich.table import Table

from vv_auth import GroupConfig, VVAuthService


def _mask(secret: Optional[str]) -> str:
    if not secret:
        return "-"
    if len(secret) <= 8:
        return "****"
    return f"{secret[:4]}...{secret[-4:]}"


def show_auth_status(service: VVAuthService, console):
    """
    Display login status and the stored user profile

    Args:
        service: VVAuthService instance
        console: Rich console for output
    """
    table = Table(title="VVCode Account")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Logged In", "Yes" if service.is_authenticated else "No")
    table.add_row("Phase", service.phase.value)

    user = service.get_user_info() or {}
    for key, value in user.items():
        if isinstance(value, (str, int, float, bool)):
            table.add_row(str(key), str(value))

    table.add_row("API", service.endpoints.api_base_url)
    console.print(table)


def show_groups(groups: Optional[GroupConfig], console):
    """
    Display the group list with the default group marked

    Args:
        groups: Group config, or None if none is stored
        console: Rich console for output
    """
    if not groups:
        console.print("[yellow]No groups available. Please login first.[/yellow]")
        return

    table = Table(title="Groups")
    table.add_column("Default", justify="center")
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    table.add_column("Model")
    table.add_column("Base URL")
    table.add_column("API Key")

    for group in groups:
        table.add_row(
            "[green]*[/green]" if group.is_default else "",
            group.type,
            group.name or "",
            group.default_model_id or "",
            group.api_base_url or "",
            _mask(group.api_key),
        )

    console.print(table)
