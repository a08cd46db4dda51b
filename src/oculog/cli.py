"""Command-line interface for the Oculog client."""

import asyncio
from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from .clients.errors import ApiError, ClassifiedError
from .clients.location import IPLocationProvider
from .models.query import DateFilterPreset, SortField, SortOrder
from .models.state import WeatherStatus
from .services import DataSync, LocationTracker, SessionManager, WeatherSync
from .services.sync import InvalidDateRangeError, validate_custom_range
from .utils.config import Settings, get_settings
from .utils.logging import setup_logging

app = typer.Typer(
    name="oculog",
    help="Oculog - eye condition log client",
    no_args_is_help=True,
)
console = Console()


def build_session(settings: Optional[Settings] = None) -> SessionManager:
    """Session wired to the configured API and token file."""
    return SessionManager(settings or get_settings())


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """Parse a date string.

    Supports:
    - None: no date
    - "today" / "yesterday"
    - "-N": N days ago (e.g., "-7" = a week ago)
    - "YYYY-MM-DD": specific date
    """
    if date_str is None:
        return None

    if date_str.lower() == "today":
        return date.today()

    if date_str.lower() == "yesterday":
        return date.today() - timedelta(days=1)

    if date_str.startswith("-") and date_str[1:].isdigit():
        return date.today() - timedelta(days=int(date_str[1:]))

    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        console.print(f"[red]Invalid date format: {date_str}[/red]")
        console.print("[dim]Use: YYYY-MM-DD, 'yesterday', or -N (days ago)[/dim]")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Oculog client."""
    setup_logging("DEBUG" if verbose else None)


@app.command()
def status():
    """Check the API and the stored session."""
    async def run() -> None:
        session = build_session()
        sync = DataSync(session, settings=session.settings)
        try:
            try:
                health = await sync.check_health()
                api_status = f"[green]{health.status}[/green]"
            except ApiError as e:
                api_status = f"[red]offline[/red] [dim]({e.message})[/dim]"
            console.print(f"API ({session.settings.api_base_url}): {api_status}")

            await session.check_auth()
            if session.is_authenticated:
                console.print(f"Session: [green]logged in as {session.current_user.login}[/green]")
            elif session.error:
                console.print(f"Session: [red]{session.error}[/red]")
            else:
                console.print("Session: [yellow]not logged in[/yellow]")
        finally:
            await sync.aclose()

    asyncio.run(run())


def _authenticate(email: str, password: str, signup: bool) -> None:
    async def run() -> bool:
        session = build_session()
        try:
            if signup:
                return await session.signup(email, password)
            return await session.login(email, password)
        finally:
            if session.error:
                console.print(f"[red]{session.error}[/red]")
            elif session.is_authenticated:
                console.print(f"[green]✓ Logged in as {session.current_user.login}[/green]")
            await session.aclose()

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command()
def login(
    email: str = typer.Argument(..., help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True),
):
    """Log in and store the session tokens."""
    _authenticate(email, password, signup=False)


@app.command()
def signup(
    email: str = typer.Argument(..., help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create an account and log in."""
    _authenticate(email, password, signup=True)


@app.command()
def logout():
    """Forget the stored session tokens."""
    async def run() -> None:
        session = build_session()
        try:
            session.logout()
        finally:
            await session.aclose()

    asyncio.run(run())
    console.print("[green]✓ Logged out[/green]")


@app.command()
def whoami():
    """Show the logged-in user."""
    async def run() -> None:
        session = build_session()
        try:
            await session.check_auth()
        finally:
            await session.aclose()

        if not session.is_authenticated:
            console.print(f"[yellow]{session.error or 'Not logged in'}[/yellow]")
            raise typer.Exit(1)

        user = session.current_user
        console.print(f"[bold]{user.login}[/bold] ({user.email or 'no email'})")
        console.print(f"[dim]id {user.id} · timezone {user.timezone or '-'} · since {user.created_at}[/dim]")

    asyncio.run(run())


@app.command(name="logs")
def list_logs(
    page: int = typer.Option(1, "--page", "-p", min=1, help="Page number"),
    preset: DateFilterPreset = typer.Option(
        DateFilterPreset.LAST_30_DAYS, "--preset",
        help="Date range preset",
    ),
    start: Optional[str] = typer.Option(None, "--from", help="Custom range start (YYYY-MM-DD or -N)"),
    end: Optional[str] = typer.Option(None, "--to", help="Custom range end (defaults to today)"),
    sort: Optional[SortField] = typer.Option(None, "--sort", help="Sort column (default: last used)"),
    order: Optional[SortOrder] = typer.Option(None, "--order", help="Sort direction"),
):
    """List condition logs."""
    changes = {"date_preset": preset}
    if sort is not None:
        changes.update(sort_field=sort, sort_order=order or SortOrder.DESC)
    elif order is not None:
        changes["sort_order"] = order

    start_date = parse_date(start)
    if start_date is not None:
        end_date = parse_date(end) or date.today()
        try:
            validate_custom_range(start_date, end_date, get_settings().max_custom_range_months)
        except InvalidDateRangeError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        changes.update(
            date_preset=DateFilterPreset.CUSTOM,
            custom_start=start_date,
            custom_end=end_date,
        )

    async def run() -> None:
        session = build_session()
        sync = DataSync(session, settings=session.settings)
        try:
            sync.query = sync.query.model_copy(update=changes)
            ok = await sync.refresh_logs(page)
        finally:
            await sync.aclose()

        if not ok:
            console.print(f"[red]{sync.list_error}[/red]")
            raise typer.Exit(1)

        if not sync.logs:
            console.print("[yellow]No logs found[/yellow]")
            raise typer.Exit(0)

        start_day, end_day = sync.query.date_range(date.today())
        table = Table(title=f"Logs {start_day} → {end_day}")
        table.add_column("Date", style="cyan")
        table.add_column("Rating", justify="center")
        table.add_column("City")
        table.add_column("Comments")
        table.add_column("ID", style="dim")

        for log in sync.logs:
            rating = log.rating_display
            if log.overall_rating is not None:
                color = "green" if log.overall_rating >= 7 else "yellow" if log.overall_rating >= 4 else "red"
                rating = f"[{color}]{rating}[/{color}]"
            table.add_row(
                log.formatted_date,
                rating,
                log.city or "-",
                log.truncated_comments,
                str(log.id),
            )

        console.print(table)
        console.print(
            f"[dim]Page {sync.current_page} of {sync.total_pages} · {sync.total_logs} logs[/dim]"
        )

    asyncio.run(run())


@app.command()
def delete(
    log_id: str = typer.Argument(..., help="Log id"),
):
    """Delete a condition log."""
    try:
        target = UUID(log_id)
    except ValueError:
        console.print(f"[red]Invalid log id: {log_id}[/red]")
        raise typer.Exit(1)

    async def run() -> None:
        session = build_session()
        sync = DataSync(session, settings=session.settings)
        try:
            await sync.delete_log(target)
        except ClassifiedError as e:
            console.print(f"[red]{e.kind.value}: {e.message}[/red]")
            raise typer.Exit(1)
        except ApiError as e:
            console.print(f"[red]{e.message}[/red]")
            raise typer.Exit(1)
        finally:
            await sync.aclose()

        console.print(f"[green]✓ Deleted {target}[/green] [dim]({sync.total_logs} logs left)[/dim]")

    asyncio.run(run())


@app.command()
def weather():
    """Show current weather for this machine's approximate location."""
    async def run() -> None:
        session = build_session()
        tracker = LocationTracker(IPLocationProvider(session.settings))
        weather_sync = WeatherSync(session, session.settings)
        try:
            coordinate = await tracker.resolve()
            if coordinate is None:
                console.print(f"[red]{tracker.error_message}[/red]")
                raise typer.Exit(1)
            await weather_sync.fetch_weather(coordinate.latitude, coordinate.longitude)
        finally:
            await tracker.aclose()
            await session.aclose()

        state = weather_sync.state
        if state.status != WeatherStatus.LOADED:
            console.print(f"[red]{state.message}[/red]")
            raise typer.Exit(1)

        console.print(f"[green]✓[/green] {state.weather.summary()}")
        if tracker.city_name:
            console.print(f"[dim]Located near {tracker.city_name}[/dim]")

    asyncio.run(run())


if __name__ == "__main__":
    app()
