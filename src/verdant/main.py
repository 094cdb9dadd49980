"""
Verdant - CLI Entry Point.

Usage:
    verdant serve                  Start the API server
    verdant preview care.json      Show the care schedule a payload would produce
    verdant health                 Check configuration
    verdant db                     Check database connection and tables
    verdant --help                 Show help
"""

from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="verdant",
    help="Verdant - plant marketplace backend and care calendar.",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import os

    import uvicorn

    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]Verdant API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "verdant.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


@app.command()
def preview(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="File holding a care_details payload"),
    now: str | None = typer.Option(None, "--now", help="Reference time (ISO 8601); defaults to the current time"),
) -> None:
    """Show how a care payload is parsed and scheduled, without touching the database."""
    from verdant.care.coordinator import build_care_schedule
    from verdant.care.parser import parse_care_details

    try:
        reference = datetime.fromisoformat(now) if now else datetime.now().astimezone()
    except ValueError:
        console.print(f"[red]Invalid --now value: {now}[/red]")
        raise typer.Exit(1)

    outcome = parse_care_details(path.read_text(encoding="utf-8"))
    tasks, source = build_care_schedule(outcome.plan, reference)

    console.print(f"\n[bold]Detected shape:[/bold] {outcome.shape.value}")
    console.print(f"[bold]Task source:[/bold] {source.value}\n")

    table = Table(title="Care Schedule")
    table.add_column("Due", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Description")
    for task in tasks:
        table.add_row(task.due_date.strftime("%Y-%m-%d %H:%M"), task.title, task.description)
    console.print(table)

    if outcome.plan.all_tips:
        console.print("\n[bold]Care Tips:[/bold]")
        for tip in outcome.plan.all_tips:
            console.print(f"  • {tip}")


@app.command()
def health() -> None:
    """Check configuration."""
    from verdant.config import get_settings

    console.print("\n[bold]Verdant Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("[green]OK[/green] Configuration loaded")
        console.print(f"   Environment: {settings.verdant_env}")
        console.print(f"   Log level: {settings.log_level}")

        if settings.supabase_url.startswith("https://"):
            console.print("[green]OK[/green] Supabase URL configured")
        else:
            console.print("[red]FAIL[/red] Supabase URL missing or invalid")

        if settings.stripe_secret_key.startswith(("sk_", "rk_")):
            console.print("[green]OK[/green] Stripe secret key configured")
        else:
            console.print("[yellow]WARN[/yellow] Stripe secret key may be invalid")

        if settings.stripe_webhook_secret.startswith("whsec_"):
            console.print("[green]OK[/green] Stripe webhook secret configured")
        else:
            console.print("[yellow]WARN[/yellow] Stripe webhook secret may be invalid")

        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]FAIL Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)


@app.command()
def db() -> None:
    """Check database connection and the tables the care pipeline uses."""
    from verdant.db.client import get_service_client

    console.print("\n[bold]Database Connection Check[/bold]\n")

    try:
        client = get_service_client()
        console.print("[green]OK[/green] Connected to Supabase")

        console.print("\n[bold]Table Status:[/bold]")
        for table in ("listing", "care_task", "stripe_customers"):
            try:
                result = client.table(table).select("*", count="exact").limit(0).execute()
                count = result.count if hasattr(result, "count") else "?"
                console.print(f"  [green]OK[/green] {table}: {count} rows")
            except Exception as e:
                console.print(f"  [red]FAIL[/red] {table}: {e}")

        console.print("\n[green]Database check complete![/green]")

    except Exception as e:
        console.print(f"\n[red]FAIL Database connection failed: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from verdant import __version__

    console.print(f"Verdant version {__version__}")


if __name__ == "__main__":
    app()
