"""
Main application entry point for siteaudit.

Provides the CLI for classifying a page, resolving its brand and running the
keyword analysis.
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table

from siteaudit.core.config import get_settings, provider_status, validate_provider_settings
from siteaudit.core.logging import set_correlation_id, setup_logging
from siteaudit.core.models import BusinessType, KeywordCandidate
from siteaudit.detection.brand import identify_brand
from siteaudit.detection.classifier import classify_page
from siteaudit.detection.html_content import parse_page
from siteaudit.keywords.analysis import analyze_keywords, create_analysis_service

console = Console()


def _read_html(path: str) -> str:
    return Path(path).read_text(encoding="utf-8", errors="replace")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines instead of rich output")
@click.option("--correlation-id", help="Set correlation ID for request tracing")
@click.pass_context
def main(ctx, debug: bool, json_logs: bool, correlation_id: Optional[str]):
    """Website audit: business classification, brand and keyword analysis.

    Every command reads an already fetched HTML page from disk.
    """
    ctx.ensure_object(dict)

    setup_logging(debug=debug, rich_output=not json_logs)

    if correlation_id:
        set_correlation_id(correlation_id)

    ctx.obj["debug"] = debug
    ctx.obj["correlation_id"] = correlation_id


@main.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--domain", required=True, help="Domain the page was fetched from")
@click.pass_context
def classify(ctx, html_file: str, domain: str):
    """Classify the business behind a page."""
    try:
        content = parse_page(_read_html(html_file), domain)
        result = classify_page(content, domain, get_settings().classifier)

        table = Table(title=f"Business Classification: {domain}")
        table.add_column("Rank", style="cyan")
        table.add_column("Category", style="white")
        table.add_column("Subcategory", style="white")
        table.add_column("Confidence", style="green")
        table.add_column("Score", justify="right")
        table.add_column("Methods", style="dim")

        types: List[BusinessType] = [result.primary_type] + list(result.secondary_types)
        for rank, business_type in enumerate(types):
            table.add_row(
                "primary" if rank == 0 else "secondary",
                business_type.category,
                business_type.subcategory,
                str(business_type.confidence),
                f"{business_type.score:.2f}",
                ", ".join(business_type.detection_methods) or "-",
            )
        console.print(table)

        console.print(
            f"UK specific: {result.uk_specific}  Local: {result.local_business}  "
            f"Company size: {result.company_size}"
        )

    except Exception as e:
        console.print(f"[red]Classification Error:[/red] {e}")
        sys.exit(1)


@main.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--domain", required=True, help="Domain the page was fetched from")
@click.option("--candidates", "show_candidates", default=10, help="Number of candidates to list")
@click.pass_context
def brand(ctx, html_file: str, domain: str, show_candidates: int):
    """Resolve the brand name of a page."""
    try:
        content = parse_page(_read_html(html_file), domain)
        name, ranked = identify_brand(content, domain)

        console.print(f"[green]Brand:[/green] {name}")

        table = Table(title="Brand Candidates")
        table.add_column("Value", style="white")
        table.add_column("Source", style="cyan")
        table.add_column("Confidence", justify="right", style="green")
        for candidate in ranked[:show_candidates]:
            table.add_row(candidate.value, candidate.source, f"{candidate.confidence:.2f}")
        console.print(table)

    except Exception as e:
        console.print(f"[red]Brand Error:[/red] {e}")
        sys.exit(1)


@main.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--domain", required=True, help="Domain the page was fetched from")
@click.option("--country", default=None, help="Market for search volumes (default: configured)")
@click.option("--offline", is_flag=True, help="Skip every external provider")
@click.option("--json", "as_json", is_flag=True, help="Print the analysis as JSON")
@click.pass_context
def keywords(ctx, html_file: str, domain: str, country: Optional[str], offline: bool, as_json: bool):
    """Run the full keyword analysis for a page."""
    service = create_analysis_service(get_settings(), offline=offline)
    outcome = asyncio.run(analyze_keywords(domain, _read_html(html_file), country, service=service))
    analysis = outcome.analysis

    if as_json:
        click.echo(analysis.model_dump_json(indent=2))
    else:
        if outcome.error is not None:
            console.print(
                f"[yellow]Analysis fell back to the minimal result at stage "
                f"'{outcome.error.stage}':[/yellow] {outcome.error.message}"
            )

        summary = Table(title=f"Keyword Analysis: {analysis.domain}")
        summary.add_column("Metric", style="cyan")
        summary.add_column("Value", style="white")
        summary.add_row("Brand", analysis.brand_name)
        summary.add_row(
            "Business",
            f"{analysis.business_type.category} / {analysis.business_type.subcategory} "
            f"({analysis.business_type.confidence})",
        )
        summary.add_row("Business size", str(analysis.business_size))
        summary.add_row("Location", analysis.location.best_location or "-")
        summary.add_row("Branded", str(analysis.branded_count))
        summary.add_row("Non-branded", str(analysis.non_branded_count))
        summary.add_row("Relevance", f"{analysis.business_relevance_score:.3f}")
        summary.add_row("Volumes available", str(analysis.api_available))
        summary.add_row("Method", analysis.analysis_method)
        console.print(summary)

        _display_keywords("Top Keywords", analysis.top_keywords)

    if outcome.error is not None:
        sys.exit(1)


@main.command()
@click.pass_context
def config(ctx):
    """Display current configuration."""
    try:
        settings = get_settings()
        console.print("[blue]siteaudit Configuration[/blue]")

        missing = validate_provider_settings(settings)
        if missing:
            console.print("[yellow]Providers without credentials:[/yellow]")
            for item in missing:
                console.print(f"  • Missing: {item}")
            console.print()

        table = Table(title="Providers")
        table.add_column("Provider", style="cyan")
        table.add_column("Status", style="white")
        for name, status in provider_status(settings).items():
            colour = {"available": "green", "disabled": "yellow"}.get(status, "red")
            table.add_row(name, f"[{colour}]{status}[/{colour}]")
        console.print(table)

        keyword_config = settings.keywords
        console.print(
            f"Relevance threshold: {keyword_config.relevance_threshold}  "
            f"Caps: branded {keyword_config.branded_cap}, non-branded {keyword_config.non_branded_cap}, "
            f"top {keyword_config.top_cap}  Country: {keyword_config.country}"
        )

    except Exception as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        sys.exit(1)


def _display_keywords(title: str, keywords: List[KeywordCandidate]) -> None:
    table = Table(title=title)
    table.add_column("Keyword", style="white")
    table.add_column("Intent", style="cyan")
    table.add_column("Relevance", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Difficulty")
    table.add_column("Position", justify="right")

    for keyword in keywords:
        table.add_row(
            keyword.keyword,
            str(keyword.intent),
            f"{keyword.relevance_score:.2f}",
            "-" if keyword.search_volume is None else str(keyword.search_volume),
            keyword.difficulty or "-",
            "-" if keyword.position is None else str(keyword.position),
        )
    console.print(table)


if __name__ == "__main__":
    main()
