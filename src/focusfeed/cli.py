"""Command-line interface for the content generation pipeline."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from .application.factories.component_factory import ComponentFactory
from .application.services.topic_popularity import (
    DEFAULT_POPULAR_TOPICS,
    TopicPopularityTracker,
)
from .config import Config, load_config, set_config
from .domain.entities import GenerationRequest
from .exceptions import BadRequestError, ConfigurationError
from .providers.factory import ProviderFactory
from .utils.logging import configure_logging, flush_logging, get_logger

app = typer.Typer(
    name="focusfeed",
    help="Generate short learning snippets for any topic.",
    no_args_is_help=True,
)

console = Console()


def get_config_and_logger(
    config_path: Path | None = None,
    log_level: str | None = None,
) -> tuple[Config, Any]:
    """Load configuration and configure logging for a command.

    Args:
        config_path: Optional path to config.yaml
        log_level: Overrides the configured log level when given

    Returns:
        Tuple of (Config, Logger)
    """
    config = load_config(config_path)
    set_config(config)
    configure_logging(log_level or config.log_level, log_dir=config.log_dir)
    return config, get_logger("cli")


@app.command()
def generate(
    topic: Annotated[str, typer.Argument(help="Topic to learn about")],
    count: Annotated[
        int,
        typer.Option("--count", "-n", help="Snippets per page", min=1, max=10),
    ] = 5,
    pages: Annotated[
        int,
        typer.Option("--pages", "-p", help="Number of pages to follow", min=1),
    ] = 1,
    options: Annotated[
        bool,
        typer.Option("--options", help="Also suggest sub-topics to explore"),
    ] = False,
    viewer: Annotated[
        str | None,
        typer.Option("--viewer", help="Viewer key scoping duplicate suppression"),
    ] = None,
    like: Annotated[
        bool,
        typer.Option("--like", help="Mark TOPIC as liked for this viewer"),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config.yaml", exists=True),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
    ] = None,
) -> None:
    """Generate snippets for TOPIC, following the feed for several pages."""
    try:
        config, logger = get_config_and_logger(config_path, log_level)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1) from e

    viewer_key = viewer or f"cli-{uuid.uuid4().hex[:12]}"
    logger.info("cli_command_started", command="generate", pages=pages, count=count)

    factory = ComponentFactory(config)
    try:
        orchestrator = factory.create_orchestrator()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1) from e

    cursor: str | None = None
    try:
        for page in range(pages):
            result = orchestrator.generate(
                GenerationRequest(
                    topic=topic,
                    viewer_key=viewer_key,
                    count=count,
                    cursor=cursor,
                    generate_options=options,
                )
            )

            title = f"{topic.strip()} - page {page + 1}"
            if result.used_fallback:
                title += " (fallback)"
            table = Table(title=title, show_header=False)
            table.add_column("#", style="dim", justify="right")
            table.add_column("Snippet")
            for index, snippet in enumerate(result.snippets, start=1):
                table.add_row(str(index), snippet)
            console.print(table)

            if result.options:
                console.print("[bold]Explore further:[/bold]")
                for option in result.options:
                    console.print(f"  [cyan]{option.title}[/cyan] - {option.description}")

            cursor = result.next_cursor

        if like:
            popularity = factory.create_popularity_tracker()
            popularity.track_like(viewer_key, topic)
            ranked = popularity.popular_topics(viewer_key, limit=5)
            console.print(f"[bold]Your topics:[/bold] {', '.join(ranked)}")
    except BadRequestError as e:
        console.print(f"[red]Invalid request:[/red] {e}")
        raise typer.Exit(code=2) from e
    finally:
        factory.shutdown()
        flush_logging()

    console.print(f"[dim]next cursor: {cursor}[/dim]")


@app.command()
def providers() -> None:
    """List supported provider types."""
    table = Table(title="Supported providers")
    table.add_column("Provider", style="cyan")
    for name in ProviderFactory.list_supported_providers():
        table.add_row(name)
    console.print(table)


@app.command()
def topics(
    limit: Annotated[
        int, typer.Option("--limit", help="Number of topics to show", min=1)
    ] = len(DEFAULT_POPULAR_TOPICS),
    user: Annotated[
        str | None,
        typer.Option("--user", help="Rank topics for this viewer"),
    ] = None,
    liked: Annotated[
        list[str] | None,
        typer.Option("--liked", help="Topic the viewer liked (repeatable)"),
    ] = None,
) -> None:
    """Show popular topics, ranked for a viewer when --user is given."""
    if user is None:
        for topic in DEFAULT_POPULAR_TOPICS[:limit]:
            console.print(topic)
        return

    popularity = TopicPopularityTracker()
    for topic in liked or []:
        popularity.track_selection(user, topic)
        popularity.track_like(user, topic)

    table = Table(title=f"Topics for {user}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Topic", style="cyan")
    for rank, topic in enumerate(popularity.popular_topics(user, limit=limit), start=1):
        table.add_row(str(rank), topic)
    console.print(table)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
