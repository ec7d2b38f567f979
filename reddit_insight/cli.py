from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from reddit_insight.config import AppConfig
from reddit_insight.core.errors import (
    ConfigurationError,
    MalformedResponse,
    UpstreamError,
    ValidationError,
)
from reddit_insight.core.registry import ProviderRegistry
from reddit_insight.infra.kv.store import SqlKeyValueStore
from reddit_insight.modules.backend.service import BackendService, ResolvedBackend
from reddit_insight.modules.insight.cache import AnalysisCache
from reddit_insight.modules.insight.schemas import AnalysisResult
from reddit_insight.modules.insight.service import InsightService
from reddit_insight.modules.keywords.service import KeywordSuggestionService
from reddit_insight.modules.search.service import SearchService
from reddit_insight.modules.themes.service import ThemeService
from reddit_insight.reporting.csv_export import (
    brand_rows,
    pain_point_rows,
    search_rows,
    to_csv,
)
from reddit_insight.services.config_store import ConfigStore
from reddit_insight.settings import AppSettings

app = typer.Typer(help="Reddit Insight CLI")
console = Console()

themes_app = typer.Typer(help="Manage research themes")
export_app = typer.Typer(help="Export results as CSV")
cache_app = typer.Typer(help="Inspect the analysis cache")
app.add_typer(themes_app, name="themes")
app.add_typer(export_app, name="export")
app.add_typer(cache_app, name="cache")


@app.callback()
def _main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _store() -> ConfigStore:
    settings = AppSettings()
    return ConfigStore(config_path=settings.config_file)


def _load_config() -> AppConfig:
    return _store().load()


def _kv_store(config: AppConfig) -> SqlKeyValueStore:
    return SqlKeyValueStore(config.database.url)


def _cache(config: AppConfig) -> AnalysisCache:
    return AnalysisCache(_kv_store(config), namespace=config.cache.namespace)


def _backend(config: AppConfig) -> ResolvedBackend:
    service = BackendService(
        config=config, registry=ProviderRegistry(), api_key=AppSettings().api_key
    )
    try:
        return service.resolve()
    except ConfigurationError as exc:
        console.print(f"[red]Backend not configured:[/red] {exc}")
        raise typer.Exit(1) from exc


def _insight_service(config: AppConfig) -> InsightService:
    resolved = _backend(config)
    return InsightService(
        backend=resolved.backend,
        model=resolved.model,
        cache=_cache(config),
        research=config.research,
        caps=config.caps,
    )


def _run(coro):
    try:
        return asyncio.run(coro)
    except (UpstreamError, MalformedResponse) as exc:
        console.print(f"[red]Analysis failed:[/red] {exc}")
        raise typer.Exit(1) from exc
    except ValidationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


def _emit(content: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(content)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    # BOM keeps the Chinese headers readable in spreadsheet apps.
    output.write_text(content, encoding="utf-8-sig")
    console.print(f"[green]Written:[/green] {output}")


def _print_summary(result: AnalysisResult) -> None:
    metrics = result.metrics
    console.print(
        f"[green]Posts:[/green] {metrics.total_posts_volume} "
        f"([cyan]{metrics.total_posts_growth:+}%[/cyan])  "
        f"[green]Active trends:[/green] {metrics.active_trends}  "
        f"[green]Engagement:[/green] {metrics.engagement_rate}%"
    )

    topics = Table(title="Topics")
    topics.add_column("Title")
    topics.add_column("Growth")
    topics.add_column("Volume")
    topics.add_column("Sentiment")
    for topic in result.topics:
        topics.add_row(
            topic.title, f"{topic.growth:+}%", str(topic.volume), str(topic.sentiment)
        )
    console.print(topics)

    brands = Table(title="Brands")
    brands.add_column("Brand")
    brands.add_column("Mentions")
    brands.add_column("YoY")
    brands.add_column("Pos/Neu/Neg")
    for brand in result.brands:
        sentiment = brand.sentiment
        brands.add_row(
            brand.name,
            str(brand.mentions),
            f"{brand.yoy_growth:+}%",
            f"{sentiment.pos}/{sentiment.neu}/{sentiment.neg}",
        )
    console.print(brands)


@app.command("init-config")
def init_config() -> None:
    store = _store()
    config = store.load()
    store.save(config)
    _kv_store(config)
    console.print(f"[green]Config initialized:[/green] {store.config_path.resolve()}")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind host, default from settings."),
    port: Optional[int] = typer.Option(None, help="Bind port, default from settings."),
    reload: bool = typer.Option(False, help="Enable autoreload mode."),
) -> None:
    settings = AppSettings()
    uvicorn.run(
        "reddit_insight.api:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


@app.command("analyze")
def analyze(
    query: str = typer.Argument(..., help="Market or product query."),
    refresh: bool = typer.Option(False, "--refresh", help="Bypass the cache."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result JSON."),
) -> None:
    config = _load_config()
    service = _insight_service(config)
    result = _run(service.analyze(query, force_refresh=refresh))
    if as_json:
        typer.echo(json.dumps(result.to_payload(), ensure_ascii=False, indent=2))
        return
    _print_summary(result)


@app.command("keywords")
def keywords(theme: str = typer.Argument(..., help="Theme to expand.")) -> None:
    config = _load_config()
    resolved = _backend(config)
    service = KeywordSuggestionService(backend=resolved.backend, model=resolved.model)
    for keyword in _run(service.suggest(theme)):
        console.print(f"- {keyword}")


@app.command("search")
def search(question: str = typer.Argument(..., help="Free-text question.")) -> None:
    config = _load_config()
    resolved = _backend(config)
    service = SearchService(
        backend=resolved.backend,
        model=resolved.model,
        max_sources=config.search.max_sources,
    )
    result = _run(service.search(question))
    console.print(result.summary)
    if result.sources:
        console.print("[green]Sources:[/green]")
        for source in result.sources:
            console.print(f"- {source.title}: {source.url}")


@themes_app.command("list")
def themes_list() -> None:
    config = _load_config()
    service = ThemeService(_kv_store(config), storage_key=config.cache.themes_key)
    table = Table(title="Themes")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Keywords")
    table.add_column("Active")
    table.add_column("Last analyzed")
    for theme in service.list_themes():
        table.add_row(
            theme.id,
            theme.name,
            ", ".join(theme.keywords),
            str(theme.is_active),
            theme.last_analyzed.isoformat() if theme.last_analyzed else "",
        )
    console.print(table)


@themes_app.command("add")
def themes_add(name: str = typer.Argument(..., help="Theme name.")) -> None:
    config = _load_config()
    resolved = _backend(config)
    service = ThemeService(
        _kv_store(config),
        keyword_service=KeywordSuggestionService(
            backend=resolved.backend, model=resolved.model
        ),
        storage_key=config.cache.themes_key,
    )
    theme = _run(service.add_theme(name))
    console.print(f"[green]Added:[/green] {theme.id} {theme.name}")
    console.print(f"Keywords: {', '.join(theme.keywords)}")


@themes_app.command("toggle")
def themes_toggle(theme_id: str = typer.Argument(...)) -> None:
    config = _load_config()
    service = ThemeService(_kv_store(config), storage_key=config.cache.themes_key)
    try:
        theme = service.toggle(theme_id)
    except LookupError as exc:
        console.print(f"[yellow]Not found:[/yellow] {theme_id}")
        raise typer.Exit(1) from exc
    state = "active" if theme.is_active else "paused"
    console.print(f"[green]{theme.name}:[/green] {state}")


@themes_app.command("remove")
def themes_remove(theme_id: str = typer.Argument(...)) -> None:
    config = _load_config()
    service = ThemeService(_kv_store(config), storage_key=config.cache.themes_key)
    if service.delete(theme_id):
        console.print(f"[green]Removed:[/green] {theme_id}")
    else:
        console.print(f"[yellow]Not found:[/yellow] {theme_id}")


@themes_app.command("analyze")
def themes_analyze(
    theme_id: str = typer.Argument(...),
    refresh: bool = typer.Option(False, "--refresh", help="Bypass the cache."),
) -> None:
    config = _load_config()
    themes = ThemeService(_kv_store(config), storage_key=config.cache.themes_key)
    try:
        theme = themes.get(theme_id)
    except LookupError as exc:
        console.print(f"[yellow]Not found:[/yellow] {theme_id}")
        raise typer.Exit(1) from exc
    result = _run(_insight_service(config).analyze(theme.name, force_refresh=refresh))
    themes.mark_analyzed(theme.id)
    _print_summary(result)


def _cached_result(config: AppConfig, query: str) -> AnalysisResult:
    result = _cache(config).get(query)
    if result is None:
        console.print(
            f"[yellow]No cached analysis for[/yellow] {query!r}; "
            "run `reddit-insight analyze` first."
        )
        raise typer.Exit(1)
    return result


@export_app.command("brands")
def export_brands(
    query: str = typer.Argument(...),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
) -> None:
    config = _load_config()
    _emit(to_csv(brand_rows(_cached_result(config, query))), output)


@export_app.command("pain-points")
def export_pain_points(
    query: str = typer.Argument(...),
    topic: Optional[str] = typer.Option(None, help="Only this topic's pain points."),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
) -> None:
    config = _load_config()
    result = _cached_result(config, query)
    try:
        rows = pain_point_rows(result, topic_title=topic)
    except LookupError as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        raise typer.Exit(1) from exc
    _emit(to_csv(rows), output)


@export_app.command("search")
def export_search(
    question: str = typer.Argument(...),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
) -> None:
    config = _load_config()
    resolved = _backend(config)
    service = SearchService(
        backend=resolved.backend,
        model=resolved.model,
        max_sources=config.search.max_sources,
    )
    result = _run(service.search(question))
    _emit(to_csv(search_rows(question, result)), output)


@cache_app.command("list")
def cache_list() -> None:
    config = _load_config()
    for key in _kv_store(config).keys(prefix=config.cache.namespace):
        console.print(key)


@cache_app.command("clear")
def cache_clear(query: str = typer.Argument(...)) -> None:
    config = _load_config()
    cache = _cache(config)
    cache.invalidate(query)
    console.print(f"[green]Cleared:[/green] {cache.key_for(query)}")


def main() -> None:
    app()
