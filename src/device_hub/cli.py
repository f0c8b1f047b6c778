"""Typer CLI for Device Hub."""

import asyncio
from typing import Optional

import typer
from rich.console import Console

app = typer.Typer(name="device-hub", help="Device Hub: IoT device registry and audit ledger")
console = Console()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind host (default: DEVICE_HUB_HOST)"),
    port: Optional[int] = typer.Option(None, help="Bind port (default: DEVICE_HUB_PORT)"),
):
    """Start the Device Hub API server."""
    import uvicorn
    from device_hub.app import create_app
    from device_hub.common.config import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"[bold green]Starting Device Hub on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command()
def migrate():
    """Create any missing tables. Run once per deploy, before serving."""
    from device_hub.common.config import get_settings
    from device_hub.common.database import DatabaseManager

    async def _run() -> None:
        db = DatabaseManager(get_settings())
        await db.init()
        try:
            await db.create_all()
        finally:
            await db.close()

    asyncio.run(_run())
    console.print("[bold green]Schema up to date[/bold green]")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", help="Confirm destroying all data"),
):
    """Drop and recreate all tables. Destroys every device, log entry and account."""
    if not yes:
        typer.confirm("This deletes ALL devices, logs and accounts. Continue?", abort=True)

    from device_hub.admin.service import AdminService
    from device_hub.common.config import get_settings
    from device_hub.common.database import DatabaseManager

    async def _run() -> None:
        settings = get_settings()
        db = DatabaseManager(settings)
        await db.init()
        try:
            await AdminService(settings).reset(db)
        finally:
            await db.close()

    asyncio.run(_run())
    console.print("[bold yellow]Storage reset[/bold yellow]")


@app.command("device-token")
def device_token(
    enroll_id: str = typer.Argument(..., help="Device enrollment id"),
    name: str = typer.Argument(..., help="Device display name"),
):
    """Issue a long-lived device token (offline, no DB required)."""
    from device_hub.common.config import get_settings
    from device_hub.common.exceptions import ValidationError
    from device_hub.identity.service import IdentityService
    from device_hub.identity.tokens import TokenSigner

    settings = get_settings()
    svc = IdentityService(settings, TokenSigner(settings))
    try:
        token = svc.issue_device_token(enroll_id, name)
    except ValidationError as e:
        console.print(f"[bold red]{e.code}[/bold red]: {e.message}")
        raise typer.Exit(1)
    console.print(f"[bold]{token}[/bold]")


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Device Hub server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green]: v{data['version']}")
    except (httpx.HTTPError, ValueError, KeyError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
