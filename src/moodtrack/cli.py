"""moodtrack Command Line Interface."""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from moodtrack.db import HealthMetric, MoodCategory, StorageError

app = typer.Typer(
    name="moodtrack",
    help="moodtrack - Personal mood and health tracker",
    no_args_is_help=True,
)
console = Console()


def _tracker():
    """Open the store and restore the session; exit if the store is unusable."""
    from moodtrack.config import configure_logging, get_settings
    from moodtrack.tracker import build_tracker

    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        tracker = build_tracker(settings)
    except StorageError as e:
        console.print(f"[red]✗ Database unavailable: {e.message}[/red]")
        raise typer.Exit(code=1) from e
    tracker.restore_session()
    return tracker


def _signed_in(tracker) -> bool:
    if tracker.state.current_user is None:
        console.print("[yellow]Not signed in. Run: moodtrack login EMAIL NAME[/yellow]")
        return False
    return True


def _report_error(tracker) -> None:
    if tracker.state.error_message:
        console.print(f"[red]✗ {tracker.state.error_message}[/red]")
        raise typer.Exit(code=1)


@app.command()
def login(
    email: str = typer.Argument(..., help="Email used as login"),
    name: str = typer.Argument(..., help="Display name"),
):
    """Sign in, creating the profile on first use."""
    tracker = _tracker()
    user = asyncio.run(tracker.sign_in(email, name))
    if user is None:
        _report_error(tracker)
        return
    console.print(f"[green]✓ Signed in as {user.name} ({user.email})[/green]")


@app.command()
def logout():
    """Sign out."""
    tracker = _tracker()
    tracker.sign_out()
    console.print("[green]✓ Signed out[/green]")


@app.command()
def status():
    """Show the signed-in user, settings and widget streak."""
    console.print(Panel("moodtrack Status", style="blue"))
    tracker = _tracker()

    table = Table(title="Status")
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="green")

    user = tracker.state.current_user
    table.add_row("User", f"{user.name} ({user.email})" if user else "Not signed in")

    app_settings = tracker.load_settings()
    if app_settings:
        reminder = (
            f"{app_settings.daily_reminder_hour:02d}:{app_settings.daily_reminder_minute:02d}"
            if app_settings.has_reminder_time
            else "-"
        )
        table.add_row("Notifications", "on" if app_settings.notifications_enabled else "off")
        table.add_row("Reminder", reminder)
        table.add_row("Language", app_settings.preferred_language)
        table.add_row("Auto sync", "on" if app_settings.auto_sync_health_data else "off")
        last_sync = app_settings.last_health_sync
        table.add_row("Last sync", last_sync.strftime("%Y-%m-%d %H:%M") if last_sync else "never")

    table.add_row(
        "Health provider",
        "✓ Configured" if tracker.health.provider.is_available else "✗ Not configured",
    )
    if user:
        snapshot = tracker.refresh_widget()
        if snapshot:
            table.add_row("Streak", f"{snapshot.streak_count} days")

    console.print(table)


@app.command()
def mood(
    mood: MoodCategory = typer.Argument(..., help="How you feel"),
    intensity: int = typer.Option(5, help="Intensity 1-10"),
    notes: str = typer.Option("", help="Free-text notes"),
    trigger: list[str] = typer.Option(None, help="What triggered the feeling"),
    activity: list[str] = typer.Option(None, help="What you did"),
):
    """Log today's mood (updates today's entry if there is one)."""
    tracker = _tracker()
    if not _signed_in(tracker):
        raise typer.Exit(code=1)

    entry = tracker.save_mood_entry(
        mood, intensity=intensity, notes=notes, triggers=trigger, activities=activity
    )
    if entry is None:
        _report_error(tracker)
        return
    console.print(
        f"[green]✓ {entry.mood.symbol} {entry.mood.label} "
        f"(intensity {entry.intensity}/10) saved for {entry.day}[/green]"
    )


@app.command()
def history(
    limit: int = typer.Option(30, help="Max entries"),
):
    """Show recent mood entries."""
    tracker = _tracker()
    if not _signed_in(tracker):
        raise typer.Exit(code=1)

    entries = tracker.load_recent_mood_entries(limit=limit)
    if not entries:
        console.print("[yellow]No mood entries yet[/yellow]")
        return

    table = Table(title="Mood History")
    table.add_column("Date", style="cyan")
    table.add_column("Mood", style="white")
    table.add_column("Intensity", style="green")
    table.add_column("Notes", style="white")

    for entry in entries:
        table.add_row(
            entry.date.strftime("%Y-%m-%d %H:%M"),
            f"{entry.mood.symbol} {entry.mood.label}",
            f"{entry.intensity}/10",
            (entry.notes or "")[:40],
        )

    console.print(table)


@app.command()
def insights():
    """Show mood statistics and insights for the last week."""
    console.print(Panel("Insights", style="blue"))
    tracker = _tracker()
    if not _signed_in(tracker):
        raise typer.Exit(code=1)

    console.print(f"\n[cyan]Average mood:[/cyan] {tracker.average_mood():.1f}")
    most_frequent = tracker.most_frequent_mood()
    if most_frequent:
        console.print(f"[cyan]Most frequent:[/cyan] {most_frequent.symbol} {most_frequent.label}")

    distribution = tracker.mood_distribution()
    if distribution:
        console.print("\n[cyan]Last 30 days:[/cyan]")
        for category, count in sorted(distribution.items(), key=lambda item: -item[1]):
            console.print(f"  {category.symbol} {category.label}: {count}")

    for text in tracker.insights():
        console.print(f"\n• {text}")


@app.command()
def health():
    """Show today's health data and the weekly averages."""
    console.print(Panel("Health Summary", style="blue"))
    tracker = _tracker()
    if not _signed_in(tracker):
        raise typer.Exit(code=1)

    entry = tracker.load_today_health()
    if entry is None:
        _report_error(tracker)
        return

    table = Table(title=f"Today ({entry.day})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_column("Source", style="green")
    for metric in HealthMetric:
        value = entry.get_metric(metric)
        source = "manual" if entry.is_manually_edited(metric) else "sync"
        table.add_row(metric.value, "-" if value is None else f"{value:,}", source)
    console.print(table)

    averages = tracker.weekly_health_averages()
    console.print("\n[cyan]Weekly averages:[/cyan]")
    console.print(f"  Steps: {averages.steps:,.0f}")
    console.print(f"  Calories: {averages.calories:,.0f}")
    console.print(f"  Sleep: {averages.sleep:.1f} hours")
    console.print(f"  Water: {averages.water:.1f} L")


@app.command("set-metric")
def set_metric(
    metric: HealthMetric = typer.Argument(..., help="Metric to set"),
    value: float = typer.Argument(..., help="Value (steps, kcal, hours or litres)"),
):
    """Set a health metric by hand. Sync will not overwrite it afterwards."""
    tracker = _tracker()
    if not _signed_in(tracker):
        raise typer.Exit(code=1)

    entry = tracker.update_health_metric(metric, value)
    if entry is None:
        _report_error(tracker)
        return
    console.print(f"[green]✓ {metric.value} = {entry.get_metric(metric)}[/green]")


@app.command()
def sync():
    """Pull today's health data from the provider."""
    console.print(Panel("Syncing Health Data", style="blue"))
    tracker = _tracker()
    if not _signed_in(tracker):
        raise typer.Exit(code=1)

    entry = asyncio.run(tracker.sync_health())
    if entry is None:
        _report_error(tracker)
        return
    console.print(f"[green]✓ {tracker.health.provider.name} synced[/green]")


@app.command()
def context(
    days: int = typer.Option(14, help="Days to summarize"),
):
    """Print the context text handed to the chat assistant."""
    tracker = _tracker()
    if not _signed_in(tracker):
        raise typer.Exit(code=1)

    text = tracker.build_context(days)
    if text is None:
        _report_error(tracker)
        return
    console.print(text)


@app.command()
def remind(
    at: str = typer.Option(None, help="Reminder time as HH:MM"),
    off: bool = typer.Option(False, "--off", help="Disable the daily reminder"),
):
    """Configure the daily reminder."""
    tracker = _tracker()

    if off:
        result = tracker.set_notifications_enabled(False)
    else:
        if at:
            try:
                hour, minute = (int(part) for part in at.split(":", 1))
                result = tracker.set_reminder_time(hour, minute)
            except ValueError:
                console.print(f"[red]Invalid time: {at}[/red]")
                raise typer.Exit(code=1)
            if result is None:
                _report_error(tracker)
                raise typer.Exit(code=1)
        result = tracker.set_notifications_enabled(True)

    if result is None:
        _report_error(tracker)
        return
    if result.notifications_enabled:
        console.print(
            f"[green]✓ Daily reminder at "
            f"{result.daily_reminder_hour:02d}:{result.daily_reminder_minute:02d}[/green]"
        )
    else:
        console.print("[green]✓ Daily reminder off[/green]")


@app.command()
def language(
    code: str = typer.Argument(..., help="Language code (de, en)"),
):
    """Set the language for insights, reminders and context."""
    tracker = _tracker()
    result = tracker.set_language(code)
    if result is None:
        _report_error(tracker)
        return
    console.print(f"[green]✓ Language set to {result.preferred_language}[/green]")


@app.command()
def widget():
    """Recompute and show the widget snapshot."""
    tracker = _tracker()
    if not _signed_in(tracker):
        raise typer.Exit(code=1)

    snapshot = tracker.refresh_widget() or tracker.widget.load()
    days = " ".join("●" if present else "○" for present in snapshot.last_7_days)
    console.print(f"🔥 {snapshot.streak_count} days   {days}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
):
    """Run the local API server."""
    from moodtrack.api import run_server

    run_server(host=host, port=port)


@app.command()
def version():
    """Show moodtrack version."""
    from moodtrack import __version__

    console.print(f"moodtrack v{__version__}")


if __name__ == "__main__":
    app()
