"""
Jobboard ATS Command Line Interface

Provides operator commands for the applicant tracking core: database
setup and health, the scheduled job-alert run, and audit log review.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="jobboard-ats",
    help="Jobboard Applicant Tracking CLI",
    add_completion=False,
)
console = Console()


@app.callback()
def main():
    """Configure logging before any command runs."""
    from jobboard_ats.utils.logger import setup_logging

    setup_logging()


@app.command()
def version():
    """Show application version."""
    from jobboard_ats import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show system information and configuration."""
    from jobboard_ats.utils.config import get_settings

    settings = get_settings()

    table = Table(title="Jobboard ATS Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("Operation Timeout (ms)", str(settings.database.operation_timeout_ms))
    table.add_row("Notifications", "enabled" if settings.notifications.enabled else "disabled")
    table.add_row("Public Base URL", settings.notifications.base_url)
    table.add_row("Scheduler Secret", "set" if settings.scheduler.cron_secret else "not set")
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Initialize the database with required collections and indexes."""
    from jobboard_ats.data.database import DatabaseManager

    console.print("[yellow]Initializing database...[/yellow]")

    with DatabaseManager() as db_manager:
        console.print("  Checking database connection...")
        if not db_manager.check_connection():
            console.print("[red]Error: Could not connect to MongoDB.[/red]")
            console.print("[dim]Make sure MongoDB is running and connection settings are correct.[/dim]")
            raise typer.Exit(1)

        console.print("  [green]✓[/green] Connected to MongoDB")

        console.print("  Creating indexes...")
        db_manager.ensure_indexes()
        console.print("  [green]✓[/green] Indexes created")

    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def check_db():
    """Ping the database with the configured timeouts."""
    from jobboard_ats.data.database import DatabaseManager

    with DatabaseManager() as db_manager:
        if not db_manager.check_connection():
            console.print("[red]✗ MongoDB is not reachable[/red]")
            raise typer.Exit(1)
        console.print("[green]✓ MongoDB is reachable[/green]")


@app.command()
def run_job_alerts(
    secret: Optional[str] = typer.Option(
        None,
        "--secret",
        "-s",
        envvar="SCHEDULER_CRON_SECRET",
        help="Shared scheduler secret",
    ),
):
    """Send due job alerts for all active saved searches (log-only delivery, a dry run)."""
    from jobboard_ats.core.exceptions import UnauthenticatedError
    from jobboard_ats.core.matching import JobAlertRunner
    from jobboard_ats.data.database import DatabaseManager
    from jobboard_ats.services import LoggingNotificationSender

    with DatabaseManager() as db_manager:
        if not db_manager.check_connection():
            console.print("[red]Error: Could not connect to MongoDB.[/red]")
            raise typer.Exit(1)

        runner = JobAlertRunner.from_database(db_manager, LoggingNotificationSender())
        try:
            summary = runner.run(secret)
        except UnauthenticatedError:
            console.print("[red]Error: invalid or missing scheduler secret.[/red]")
            raise typer.Exit(1)

    table = Table(title="Job Alerts")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for key, value in summary.to_dict().items():
        table.add_row(key.replace("_", " ").title(), str(value))
    console.print(table)

    if summary.dry_run:
        console.print("[yellow]Dry run: alerts were only logged, saved searches stay due.[/yellow]")

    if summary.errors:
        raise typer.Exit(2)


@app.command()
def audit_logs(
    action: Optional[str] = typer.Option(None, "--action", "-a", help="Filter by action"),
    entity_type: Optional[str] = typer.Option(None, "--entity-type", "-e", help="Filter by entity type"),
    entity_id: Optional[str] = typer.Option(None, "--entity-id", help="Filter by entity ID"),
    actor_id: Optional[str] = typer.Option(None, "--actor", help="Filter by actor ID"),
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum number of entries to show"),
):
    """Show recent audit log entries, newest first."""
    from jobboard_ats.core.exceptions import InvalidArgumentError
    from jobboard_ats.core.inputs import parse_input
    from jobboard_ats.data.database import DatabaseManager
    from jobboard_ats.data.models import AuditLogQuery
    from jobboard_ats.data.repositories import AuditRepository
    from jobboard_ats.utils.constants import MAX_AUDIT_LOG_PAGE_SIZE

    try:
        query = parse_input(
            AuditLogQuery,
            {
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "actor_id": actor_id,
                "limit": min(max(limit, 1), MAX_AUDIT_LOG_PAGE_SIZE),
            },
        )
    except InvalidArgumentError as e:
        console.print(f"[red]Error: {e.message} ({e.field})[/red]")
        raise typer.Exit(1)

    with DatabaseManager() as db_manager:
        if not db_manager.check_connection():
            console.print("[red]Error: Could not connect to MongoDB.[/red]")
            raise typer.Exit(1)
        entries, total = AuditRepository(db_manager).search(query)

    if not entries:
        console.print("[yellow]No audit log entries found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Audit Log ({len(entries)} of {total})")
    table.add_column("When", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Entity")
    table.add_column("Actor", style="green")
    table.add_column("Metadata")

    for entry in entries:
        table.add_row(
            f"{entry.created_at:%Y-%m-%d %H:%M:%S}",
            str(entry.action),
            f"{entry.entity_type} {entry.entity_id or ''}".strip(),
            f"{entry.actor.actor_name} <{entry.actor.actor_email}>",
            ", ".join(f"{k}={v}" for k, v in entry.metadata.items()),
        )

    console.print(table)


if __name__ == "__main__":
    app()
