"""Command-line interface for ALwrity."""

import asyncio
import json
from pathlib import Path
from datetime import datetime
from typing import Optional
import logging

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.syntax import Syntax
from rich import box

from .config import get_settings
from .database import init_db, reset_db
from .models.outline import GenerationStatus
from .repository import SqlVersionRepository
from .services.content_writer import ContentPersonalizationPreferences, ContentWriter
from .services.orchestrator import GenerationOrchestrator
from .services.outline_builder import OutlineBuilder
from .services.outline_store import OutlineStore
from .services.scorer import SectionScorer
from .services.search_console import SearchConsoleClient
from .services.versioning import VersionStore
from .utils.usage import get_usage_tracker

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Rich console for pretty output
console = Console()


@click.group()
@click.option('--debug/--no-debug', default=False, help='Enable debug logging')
def cli(debug):
    """ALwrity content studio.

    Build SEO outlines, generate and score section content, and track
    content versions against Search Console performance.
    """
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
def init():
    """Initialize the version database."""
    with console.status("[bold green]Initializing database..."):
        init_db()
    console.print("[green]Database initialized successfully!")


@cli.command()
@click.confirmation_option(prompt='This will delete all saved versions. Are you sure?')
def reset():
    """Reset the version database (deletes all versions)."""
    reset_db()
    console.print("[yellow]Database has been reset.")


def _load_store(path: str) -> OutlineStore:
    with open(path) as f:
        return OutlineStore.from_dict(json.load(f))


def _save_store(store: OutlineStore, path: str) -> None:
    with open(path, 'w') as f:
        json.dump(store.to_dict(), f, indent=2)


def _fmt(score: Optional[float]) -> str:
    return "-" if score is None else f"{score:.0f}"


def _display_outline(store: OutlineStore):
    """Display the outline sections with their optimization scores."""
    table = Table(title=store.title or "Outline", box=box.ROUNDED)
    table.add_column("#", style="dim", width=3)
    table.add_column("Section", style="cyan")
    table.add_column("Type", width=12)
    table.add_column("Keywords", max_width=40)
    table.add_column("Words", justify="right", width=6)
    table.add_column("Score", justify="right", width=6)

    for i, section in enumerate(store.snapshot(), 1):
        table.add_row(
            str(i),
            section.title,
            section.section_type.value,
            ", ".join(section.keywords) or "-",
            str(section.estimated_word_count),
            str(section.optimization_score),
        )

    console.print(table)
    console.print(
        f"\n{len(store)} sections, ~{store.total_word_count()} words, "
        f"{store.estimated_reading_time()} min read, "
        f"average optimization score {store.average_optimization_score()}"
    )


def _display_scores(store: OutlineStore, orchestrator: Optional[GenerationOrchestrator] = None):
    """Display the quality sub-scores of every section."""
    table = Table(title="Section Quality", box=box.ROUNDED)
    table.add_column("Section", style="cyan")
    if orchestrator:
        table.add_column("Status", width=10)
    for name in ("Unique", "Context", "Coherence", "Thematic", "Flow"):
        table.add_column(name, justify="right", width=9)

    for section in store.snapshot():
        row = [section.title]
        if orchestrator:
            status = orchestrator.status_of(section.id)
            color = {
                GenerationStatus.COMPLETED: "green",
                GenerationStatus.ERROR: "red",
                GenerationStatus.GENERATING: "yellow",
            }.get(status, "white")
            row.append(f"[{color}]{status.value}[/{color}]")
        row.extend([
            _fmt(section.uniqueness_score),
            _fmt(section.contextual_score),
            _fmt(section.coherence_score),
            _fmt(section.thematic_score),
            _fmt(section.narrative_flow_score),
        ])
        table.add_row(*row)

    console.print(table)


def _display_usage():
    metrics = get_usage_tracker().get_metrics()
    used = {name: count for name, count in metrics.items() if count}
    if used:
        console.print("[dim]API usage: " + ", ".join(f"{k}={v}" for k, v in used.items()))


@cli.command()
@click.argument('title')
@click.option('--query', help='Search query to target (defaults to the title)')
@click.option('--output', '-o', type=click.Path(), help='Write the outline JSON to this file')
def outline(title, query, output):
    """Build an SEO outline for TITLE."""
    settings = get_settings()
    search_console = SearchConsoleClient() if settings.gsc_access_token else None
    builder = OutlineBuilder(search_console=search_console, settings=settings)

    with console.status("[bold green]Generating outline..."):
        sections = asyncio.run(builder.build_outline(title, query=query))

    if builder.last_error:
        console.print(f"[yellow]Outline generation failed, using the default outline: {builder.last_error}")

    store = OutlineStore(title=title, sections=sections)
    _display_outline(store)
    _display_usage()

    if output:
        _save_store(store, output)
        console.print(f"[green]Outline written to {output}")


@cli.command()
@click.argument('outline_file', type=click.Path(exists=True))
@click.option('--output', '-o', type=click.Path(), help='Write the generated outline to this file')
@click.option('--tone', help='Content tone, e.g. professional or casual')
@click.option('--audience', help='Target audience')
@click.option('--complexity', type=click.IntRange(0, 100), help='Content complexity 0-100')
def generate(outline_file, output, tone, audience, complexity):
    """Generate content for every section of OUTLINE_FILE."""
    store = _load_store(outline_file)
    preferences = None
    if tone or audience or complexity is not None:
        preferences = ContentPersonalizationPreferences(
            content_tone=tone,
            target_audience=audience,
            content_complexity=complexity,
        )

    def on_progress(section_id, progress):
        if progress.status != GenerationStatus.PENDING:
            console.print(f"  {progress.message}")

    orchestrator = GenerationOrchestrator(
        store,
        writer=ContentWriter(),
        preferences=preferences,
        settle_seconds=0,
        on_progress=on_progress,
    )

    console.print(f"[bold]Generating {len(store)} sections...[/bold]")
    summary = asyncio.run(orchestrator.generate_all())

    _display_scores(store, orchestrator)
    color = "green" if summary.all_succeeded else "yellow"
    console.print(f"\n[{color}]{summary.message}")
    _display_usage()

    _save_store(store, output or outline_file)
    console.print(f"[green]Outline written to {output or outline_file}")


@cli.command()
@click.argument('outline_file', type=click.Path(exists=True))
def score(outline_file):
    """Score the sections of OUTLINE_FILE that already have content."""
    store = _load_store(outline_file)
    scorer = SectionScorer()
    contents = store.contents()

    for index, section in enumerate(store.snapshot()):
        if not section.content:
            continue
        previous_text = contents[index - 1] if index > 0 else None
        next_text = contents[index + 1] if index < len(contents) - 1 else None
        scores = scorer.score_section(section.content, contents, index, previous_text, next_text)
        store.update(section.id, lambda s: s.apply_scores(scores))

    _display_scores(store)


# Version commands
@cli.group()
def versions():
    """Manage content versions."""
    pass


def _version_store(with_analytics: bool = False) -> VersionStore:
    analytics = SearchConsoleClient() if with_analytics else None
    return VersionStore(repository=SqlVersionRepository(), analytics=analytics)


def _format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp / 1000).strftime('%Y-%m-%d %H:%M:%S')


@versions.command('save')
@click.argument('file_path', type=click.Path(exists=True))
def save_version(file_path):
    """Save the content of FILE_PATH (text or outline JSON) as a new version."""
    path = Path(file_path)
    if path.suffix.lower() == '.json':
        content = _load_store(file_path).full_content()
    else:
        content = path.read_text()

    version = _version_store().save_version(content)
    if version is None:
        console.print("[yellow]Nothing to save, the content is empty.")
        return
    console.print(f"[green]Saved version {version.id}")


@versions.command('list')
def list_versions():
    """List saved versions."""
    items = _version_store().list_versions()
    if not items:
        console.print("[yellow]No versions saved yet.")
        return

    table = Table(title=f"Content Versions ({len(items)})", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Saved", width=19)
    table.add_column("Preview", style="cyan", max_width=50)
    table.add_column("Clicks", justify="right")
    table.add_column("Impr.", justify="right")
    table.add_column("CTR", justify="right")
    table.add_column("Pos.", justify="right")

    for version in items:
        metrics = version.metrics
        table.add_row(
            version.id,
            _format_timestamp(version.timestamp),
            version.preview,
            f"{metrics.clicks:.0f}" if metrics else "-",
            f"{metrics.impressions:.0f}" if metrics else "-",
            f"{metrics.ctr:.2%}" if metrics else "-",
            f"{metrics.position:.1f}" if metrics else "-",
        )

    console.print(table)


@versions.command('metrics')
@click.argument('version_id')
def version_metrics(version_id):
    """Fetch Search Console performance for a version."""
    store = _version_store(with_analytics=True)
    with console.status("[bold green]Fetching performance data..."):
        rows = asyncio.run(store.fetch_performance_data(version_id))

    if rows is None:
        console.print(f"[red]{store.error}")
        return
    if not rows:
        console.print("[yellow]No performance data yet.")
        return

    table = Table(title=f"Performance of version {version_id}", box=box.ROUNDED)
    table.add_column("Date")
    table.add_column("Clicks", justify="right")
    table.add_column("Impressions", justify="right")
    table.add_column("CTR", justify="right")
    table.add_column("Position", justify="right")
    for row in rows:
        table.add_row(
            row.date,
            f"{row.clicks:.0f}",
            f"{row.impressions:.0f}",
            f"{row.ctr:.2%}",
            f"{row.position:.1f}",
        )
    console.print(table)


@versions.command('compare')
@click.argument('version_a')
@click.argument('version_b')
def compare_versions(version_a, version_b):
    """Compare two versions side by side."""
    store = _version_store(with_analytics=True)
    with console.status("[bold green]Comparing versions..."):
        comparison = asyncio.run(store.compare_versions([version_a, version_b]))

    if comparison is None:
        console.print("[red]Select two different saved versions to compare.")
        return
    if store.error:
        console.print(f"[yellow]{store.error}")

    table = Table(title="Version Comparison", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column(f"Version {comparison.version_a.id}", justify="right")
    table.add_column(f"Version {comparison.version_b.id}", justify="right")
    table.add_row("Days of data", str(len(comparison.series_a)), str(len(comparison.series_b)))
    table.add_row(
        "Total clicks",
        f"{sum(r.clicks for r in comparison.series_a):.0f}",
        f"{sum(r.clicks for r in comparison.series_b):.0f}",
    )
    table.add_row(
        "Total impressions",
        f"{sum(r.impressions for r in comparison.series_a):.0f}",
        f"{sum(r.impressions for r in comparison.series_b):.0f}",
    )
    console.print(table)

    if comparison.diff:
        console.print(Panel(
            Syntax("\n".join(comparison.diff), "diff"),
            title="Content Changes",
            border_style="blue"
        ))
    else:
        console.print("[dim]The two versions have identical content.")


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
