"""Console script for moodle_dashboard."""

from datetime import datetime
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from .auth import normalize_base_url
from .config import MoodleConfig, load_settings
from .moodle import MoodleAPI, MoodleAPIError, create_moodle_api
from .moodle.api import NOTIFICATION_FILTERS
from .moodle.fixtures import DEMO_BASE_URL, DEMO_TOKEN
from .utils.logging import get_logger, setup_logging

app = typer.Typer(help="Moodle dashboard: web service and command-line client")
console = Console()
logger = get_logger(__name__)

BaseUrlOption = Annotated[str | None, typer.Option("--base-url", help="Moodle site URL")]
TokenOption = Annotated[str | None, typer.Option("--token", help="Web services token")]
DemoOption = Annotated[bool, typer.Option("--demo", help="Use the built-in demo data")]


@app.callback()
def main(
    log_level: Annotated[str | None, typer.Option("--log-level", help="Overrides LOG_LEVEL")] = None,
):
    """Moodle dashboard: web service and command-line client."""
    setup_logging(log_level or load_settings().log_level)


def _open_api(base_url: str | None, token: str | None, demo: bool) -> MoodleAPI:
    """Build a client from the options, falling back to the settings."""
    settings = load_settings()
    if demo:
        config = MoodleConfig(base_url=base_url or DEMO_BASE_URL, token=token or DEMO_TOKEN, demo_mode=True)
    else:
        base_url = base_url or settings.moodle_base_url
        token = token or settings.moodle_ws_token
        if not base_url or not token:
            _fail("Moodle URL and token are required (--base-url/--token or MOODLE_BASE_URL/MOODLE_WS_TOKEN)")
        config = MoodleConfig(base_url=normalize_base_url(base_url), token=token)
    logger.debug(f"Connecting to {config.base_url} (demo={config.demo_mode})")
    return create_moodle_api(config, latency_scale=settings.demo_latency_scale)


def _fail(message: str) -> None:
    console.print(f"[bold red]✗ Error:[/bold red] {message}")
    raise typer.Exit(code=1)


def _date(timestamp: float | None) -> str:
    if not timestamp:
        return "-"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M")


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Interface to bind")] = "0.0.0.0",
    port: Annotated[int, typer.Option(help="Port to listen on")] = 3000,
    reload: Annotated[bool, typer.Option(help="Reload on code changes")] = False,
):
    """Run the HTTP service."""
    import uvicorn

    uvicorn.run("moodle_dashboard.web.app:create_app", host=host, port=port, reload=reload, factory=True)


@app.command("site-info")
def site_info(base_url: BaseUrlOption = None, token: TokenOption = None, demo: DemoOption = False):
    """Show the site and the token's user."""
    try:
        with _open_api(base_url, token, demo) as api:
            info = api.get_site_info()
    except MoodleAPIError as e:
        _fail(str(e))

    table = Table(title="Site info", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key in ("sitename", "siteurl", "username", "fullname", "userid", "release"):
        if key in info:
            table.add_row(key, str(info[key]))
    console.print(table)


@app.command()
def courses(base_url: BaseUrlOption = None, token: TokenOption = None, demo: DemoOption = False):
    """List enrolled courses."""
    try:
        with _open_api(base_url, token, demo) as api:
            items = api.get_user_courses()
    except MoodleAPIError as e:
        _fail(str(e))

    table = Table(title=f"Courses ({len(items)})")
    table.add_column("ID", justify="right")
    table.add_column("Short name", style="cyan")
    table.add_column("Full name")
    table.add_column("Progress", justify="right")
    for course in items:
        progress = "-" if course.progress is None else f"{course.progress:.0f}%"
        table.add_row(str(course.id), course.shortname, course.fullname, progress)
    console.print(table)


@app.command()
def assignments(
    course: Annotated[list[int] | None, typer.Option("--course", help="Course id; repeatable")] = None,
    base_url: BaseUrlOption = None,
    token: TokenOption = None,
    demo: DemoOption = False,
):
    """List assignments of the given courses, or of every enrolled course."""
    try:
        with _open_api(base_url, token, demo) as api:
            courseids = course or [c.id for c in api.get_user_courses()]
            items = api.get_assignments(courseids)
    except MoodleAPIError as e:
        _fail(str(e))

    table = Table(title=f"Assignments ({len(items)})")
    table.add_column("ID", justify="right")
    table.add_column("Course", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Due")
    for assignment in sorted(items, key=lambda a: a.duedate):
        table.add_row(str(assignment.id), str(assignment.course), assignment.name, _date(assignment.duedate))
    console.print(table)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Text to look for")],
    course: Annotated[int | None, typer.Option("--course", help="Restrict to one course")] = None,
    base_url: BaseUrlOption = None,
    token: TokenOption = None,
    demo: DemoOption = False,
):
    """Search site content."""
    try:
        with _open_api(base_url, token, demo) as api:
            results = api.search_content(query, course)
    except MoodleAPIError as e:
        _fail(str(e))

    if not results:
        console.print(f"[yellow]No results for '{query}'[/yellow]")
        return

    table = Table(title=f"Results for '{query}'")
    table.add_column("Course", justify="right")
    table.add_column("Type")
    table.add_column("Title", style="cyan")
    table.add_column("URL", style="dim")
    for result in results:
        table.add_row(str(result.courseid), result.type, result.title, result.url)
    console.print(table)


@app.command()
def grades(
    course: Annotated[int | None, typer.Option("--course", help="Show grade items of one course")] = None,
    base_url: BaseUrlOption = None,
    token: TokenOption = None,
    demo: DemoOption = False,
):
    """Show the grade overview, or one course's grade items."""
    try:
        with _open_api(base_url, token, demo) as api:
            user = api.get_user_info()
            if course is None:
                overview = api.get_grade_overview(user.id)
            else:
                items = api.get_user_grades(course, user.id)
    except MoodleAPIError as e:
        _fail(str(e))

    if course is None:
        console.print(f"[bold]Courses:[/bold] {overview.total_courses}")
        if overview.average_grade is not None:
            console.print(f"[bold]Average grade:[/bold] {overview.average_grade:.1f}%")
        if overview.gpa is not None:
            console.print(f"[bold]GPA:[/bold] {overview.gpa:.2f}")
        if overview.credits_earned is not None:
            console.print(f"[bold]Credits earned:[/bold] {overview.credits_earned}")
        return

    table = Table(title=f"Grades for course {course}")
    table.add_column("Item", style="cyan")
    table.add_column("Grade", justify="right")
    table.add_column("Range", justify="right")
    table.add_column("Percentage", justify="right")
    for item in items:
        table.add_row(
            item.itemname,
            item.gradeformatted or "-",
            f"{item.grademin:g}-{item.grademax:g}",
            item.percentageformatted or "-",
        )
    console.print(table)


@app.command()
def notifications(
    filter: Annotated[str, typer.Option("--filter", help="all, unread or read")] = "all",
    base_url: BaseUrlOption = None,
    token: TokenOption = None,
    demo: DemoOption = False,
):
    """List notifications."""
    if filter not in NOTIFICATION_FILTERS:
        _fail(f"--filter must be one of {', '.join(NOTIFICATION_FILTERS)}")

    try:
        with _open_api(base_url, token, demo) as api:
            user = api.get_user_info()
            items = api.get_notifications(user.id, filter)
    except MoodleAPIError as e:
        _fail(str(e))

    table = Table(title=f"Notifications ({filter})")
    table.add_column("", width=1)
    table.add_column("Subject", style="cyan")
    table.add_column("Message")
    table.add_column("Created")
    for notification in items:
        marker = " " if notification.read else "[bold blue]●[/bold blue]"
        table.add_row(marker, notification.subject, notification.smallmessage, _date(notification.timecreated))
    console.print(table)


if __name__ == "__main__":
    app()
