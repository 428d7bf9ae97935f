"""CLI commands for the reading tracker.

Commands:
- serve: Run the HTTP API
- init-db: Prepare the configured store (schema and seed)
- status: Show per-chapter progress for each user
- mark: Set or clear one user's flag on one subtopic
"""

import typer
from rich.console import Console
from rich.table import Table

from reading_tracker.config.app_config import ConfigError, load_app_config
from reading_tracker.core.errors import (
    InvalidInputError,
    StoreError,
    SubtopicNotFoundError,
)
from reading_tracker.core.factory import create_store
from reading_tracker.core.progress import chapter_percentage, summarize
from reading_tracker.core.service import ProgressService
from reading_tracker.db.progress_repository import SqliteProgressStore

app = typer.Typer(
    name="reading-tracker",
    help="Track two readers' progress through a book outline.",
    no_args_is_help=True,
)

console = Console()


def _load_config_or_exit():
    try:
        return load_app_config()
    except ConfigError as e:
        console.print(f"[red]✗ Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default: HOST or 0.0.0.0)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Listen port (default: PORT or 3000)"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    config = _load_config_or_exit()
    effective_host = host or config.server.host
    effective_port = port or config.server.port

    console.print(
        f"[green]✓ Server running on {effective_host}:{effective_port}[/green] "
        f"[dim]({config.backend} backend)[/dim]"
    )
    uvicorn.run(
        "reading_tracker.web.api:app",
        host=effective_host,
        port=effective_port,
    )


@app.command("init-db")
def init_db() -> None:
    """Create the schema and seed the configured store."""
    config = _load_config_or_exit()
    store = create_store(config)

    try:
        store.initialize()
        book = store.load_all()
    except StoreError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ {config.backend} store ready[/green]")
    console.print(f"  [dim]chapters:[/dim]  {len(book.chapters)}")
    console.print(f"  [dim]subtopics:[/dim] {book.subtopic_count()}")
    console.print(f"  [dim]users:[/dim]     {', '.join(book.users)}")

    if isinstance(store, SqliteProgressStore):
        console.print(f"  [dim]progress rows:[/dim] {store.count_rows('progress')}")


@app.command()
def status(
    user: str | None = typer.Option(None, "--user", "-u", help="Only show this user"),
) -> None:
    """Show overall and per-chapter completion percentages."""
    config = _load_config_or_exit()
    service = ProgressService(create_store(config))

    try:
        summaries = service.summary()
    except StoreError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if user is not None:
        summaries = [s for s in summaries if s.user == user]
        if not summaries:
            console.print(f"[red]✗ Unknown user: {user}[/red]")
            raise typer.Exit(code=1)

    for summary in summaries:
        table = Table(title=f"{summary.user}: {summary.percentage}% ({summary.completed}/{summary.total})")
        table.add_column("Chapter")
        table.add_column("Done", justify="right")
        table.add_column("%", justify="right")
        for chapter in summary.chapters:
            table.add_row(
                chapter.chapter,
                f"{chapter.completed}/{chapter.total}",
                str(chapter.percentage),
            )
        console.print(table)


@app.command()
def mark(
    user: str = typer.Argument(..., help="Reader name, e.g. Khare"),
    subtopic_id: str = typer.Argument(..., help="Subtopic id, e.g. 1.1"),
    undo: bool = typer.Option(False, "--undo", help="Clear the flag instead of setting it"),
) -> None:
    """Mark one subtopic as completed (or not) for one user."""
    config = _load_config_or_exit()
    service = ProgressService(create_store(config))
    completed = not undo

    try:
        book = service.get_tree()
        chapter = service.update(user, subtopic_id, completed)
    except (InvalidInputError, SubtopicNotFoundError, StoreError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    book.merge_chapter(chapter)
    overall = next((s for s in summarize(book) if s.user == user), None)

    action = "completed" if completed else "unchecked"
    console.print(f"[green]✓ {user} {action} {subtopic_id}[/green]")
    console.print(f"  [dim]chapter:[/dim] {chapter.title} ({chapter_percentage(chapter, user)}%)")
    if overall is not None:
        console.print(f"  [dim]overall:[/dim] {overall.percentage}%")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
