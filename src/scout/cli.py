"""Typer CLI: ``scout run``, ``scout validate`` and friends."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from scout.categories import CATEGORIES, list_categories
from scout.config import Settings, load_config
from scout.errors import ScoutError
from scout.schemas.analysis import UIAnalysis
from scout.schemas.config import ScoutConfig
from scout.schemas.job import Job

# Load .env file from project root (if it exists)
load_dotenv()

app = typer.Typer(
    name="scout",
    help="Design Scout: crawl reference sites, score their UX and write a design brief.",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every HTTP request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load_or_exit(config: Path) -> ScoutConfig:
    try:
        return load_config(config)
    except Exception as exc:
        console.print(f"[red]Config validation failed:[/] {exc}")
        raise typer.Exit(code=1)


@app.command()
def validate(
    config: Path = typer.Option(..., "--config", "-c", help="Path to scout.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Validate a configuration file without running the pipeline."""
    _setup_logging(verbose)
    cfg = _load_or_exit(config)

    console.print("[green]Config is valid![/]\n")
    console.print(f"  URLs:        {len(cfg.urls)}")
    for url in cfg.urls:
        console.print(f"    - {url}")
    console.print(f"  Category:    {cfg.category}")
    console.print(f"  Goal:        {cfg.goal}")
    console.print(f"  Depth:       {cfg.depth} ({', '.join(cfg.sections)})")
    console.print(f"  Output dir:  {cfg.output_directory}")


@app.command()
def run(
    config: Path = typer.Option(..., "--config", "-c", help="Path to scout.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Run the full pipeline with canned model output (no API calls)."),
) -> None:
    """Crawl, analyze and generate a design brief."""
    _setup_logging(verbose)
    cfg = _load_or_exit(config)

    if dry_run:
        console.print("[yellow]DRY-RUN mode. No API calls will be made.[/]\n")

    console.print(f"[bold]Scouting {len(cfg.urls)} site(s) for:[/] {cfg.goal}\n")
    settings = Settings.from_env().model_copy(update={"output_dir": cfg.output_directory})

    try:
        job = asyncio.run(_run_scout(cfg, settings, dry_run=dry_run))
    except ScoutError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(code=1)

    if job.result is None:
        console.print(f"[red]Scout failed:[/] {job.error}")
        raise typer.Exit(code=1)

    out_dir = Path(cfg.output_directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / "design-brief.json"
    out_path.write_text(json.dumps(job.result.to_json_dict(), indent=2))
    console.print(f"\n[green]Design brief written to:[/] {out_path}")

    console.print("\n[bold]── Analyzed Sites ──[/]\n")
    for site in job.result.analyzed_sites:
        console.print(f"  [bold cyan]{site.url}[/]  {site.score:.1f}/10")
        console.print(f"    {site.key_takeaway}")
    console.print(f"\n[bold]Summary:[/] {job.result.executive_summary}")


async def _run_scout(cfg: ScoutConfig, settings: Settings, *, dry_run: bool = False) -> Job:
    """Run one job in-process, rendering its event stream."""
    from scout.jobs.factory import build_client, build_crawler, build_service
    from scout.shared.progress import PipelineProgress

    client = build_client(settings, dry_run=dry_run)
    async with build_crawler(settings, cfg.depth) as crawler:
        service = build_service(settings, client, crawler)
        job_id = service.submit(cfg.urls, cfg.category, cfg.goal)

        with PipelineProgress() as progress:
            progress.print_phase(f"Job {job_id}")
            async for event in service.stream(job_id):
                progress.update(event)
        await service.wait()

    return service.status(job_id)


@app.command()
def analyze(
    url: str = typer.Argument(..., help="Site to crawl and score."),
    category: str = typer.Option(None, "--category", help=f"One of: {', '.join(CATEGORIES)}"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use canned model output (no API calls)."),
) -> None:
    """Crawl and score a single site, then print its scores."""
    _setup_logging(verbose)

    from scout.schemas.config import is_valid_url

    if not is_valid_url(url):
        console.print(f"[red]Invalid URL:[/] {url}")
        raise typer.Exit(code=1)
    if category and category not in CATEGORIES:
        console.print(f"[red]Invalid category.[/] Must be one of: {', '.join(CATEGORIES)}")
        raise typer.Exit(code=1)

    try:
        analysis = asyncio.run(_run_analyze(url, category, Settings.from_env(), dry_run=dry_run))
    except Exception as exc:
        console.print(f"[red]Analysis failed:[/] {exc}")
        raise typer.Exit(code=1)

    table = Table(title=f"{url}  {analysis.overall_score:.1f}/10")
    table.add_column("Dimension")
    table.add_column("Score", justify="right")
    table.add_column("Justification")
    for name, js in analysis.all_dimensions():
        table.add_row(name, str(js.score), js.justification)
    console.print(table)

    for label, items in (("Strengths", analysis.strengths), ("Weaknesses", analysis.weaknesses)):
        if items:
            console.print(f"\n[bold]{label}[/]")
            for item in items:
                console.print(f"  - {item}")


async def _run_analyze(
    url: str, category: str | None, settings: Settings, *, dry_run: bool = False,
) -> UIAnalysis:
    from scout.agents.analyzer.agent import AnalyzerAgent
    from scout.agents.analyzer.validation import RepromptBudget
    from scout.jobs.factory import build_client, build_crawler
    from scout.shared.storage import LocalStorage

    client = build_client(settings, dry_run=dry_run)
    async with build_crawler(settings) as crawler:
        crawl = await crawler.crawl(url)
    analysis = await AnalyzerAgent(client).analyze_site(crawl, category, budget=RepromptBudget())
    if category:
        await LocalStorage(Path(settings.output_dir) / "library").save_analysis(analysis, category)
    return analysis


@app.command()
def library(
    category: str = typer.Option(None, "--category", help="Filter by category ('all' for everything)."),
    briefs: bool = typer.Option(False, "--briefs", help="List design briefs instead of site analyses."),
) -> None:
    """List stored analyses or briefs, newest first."""
    from scout.shared.storage import LocalStorage

    storage = LocalStorage(Path(Settings.from_env().output_dir) / "library")

    if briefs:
        items = asyncio.run(storage.get_briefs(category))
        table = Table(title=f"Design briefs ({len(items)})")
        for col in ("Created", "Category", "Sites", "Goal"):
            table.add_column(col)
        for b in items:
            table.add_row(b.created_at[:19], b.category, str(len(b.analyzed_sites)), b.goal)
    else:
        entries = asyncio.run(storage.get_by_category(category))
        table = Table(title=f"Site analyses ({len(entries)})")
        for col in ("Created", "Category", "URL", "Score"):
            table.add_column(col)
        for e in entries:
            table.add_row(
                e.created_at[:19], e.category, e.url, f"{e.analysis.overall_score:.1f}",
            )
    console.print(table)


@app.command()
def categories() -> None:
    """List the site categories the analyzer specialises for."""
    table = Table(title="Categories")
    for col in ("ID", "Label", "Focus"):
        table.add_column(col)
    for c in list_categories():
        table.add_row(c["id"], c["label"], c["description"])
    console.print(table)


@app.command("cache-clean")
def cache_clean(
    ttl_minutes: int = typer.Option(None, "--ttl-minutes", help="Entries older than this are removed (default: SCOUT_CACHE_TTL_MINUTES)."),
) -> None:
    """Remove expired or corrupt crawl cache entries."""
    from scout.shared.crawl_cache import CrawlCache

    settings = Settings.from_env()
    ttl_ms = settings.cache_ttl_ms if ttl_minutes is None else ttl_minutes * 60 * 1000
    cache = CrawlCache(Path(settings.output_dir) / ".crawl-cache")
    removed = asyncio.run(cache.clean_expired(ttl_ms))
    console.print(f"[green]Removed {removed} cache entr{'y' if removed == 1 else 'ies'}[/]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Serve with canned model output (no API calls)."),
) -> None:
    """Serve the HTTP API (job submission, status and SSE progress)."""
    _setup_logging(verbose)

    import uvicorn

    from scout.agents.suggester.agent import SuggesterAgent
    from scout.api.app import create_app
    from scout.jobs.factory import build_client, build_crawler, build_service

    settings = Settings.from_env()
    # Without a server key, requests must send X-OpenRouter-Key
    client = build_client(settings, dry_run=dry_run, require_key=False)
    crawler = build_crawler(settings)
    service = build_service(settings, client, crawler)
    api = create_app(service, SuggesterAgent(client), resources=[crawler])

    console.print(f"[bold]Design Scout API on[/] http://{host}:{port}")
    uvicorn.run(api, host=host, port=port, log_level="debug" if verbose else "info")
