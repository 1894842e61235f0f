"""
Command-line interface for the site audit pipeline.

    site-audit sitemap example.com
    site-audit audit example.com --max-pages 100 --csv findings.csv
    site-audit batch https://example.com https://example.com/a https://example.com/b
    site-audit page https://example.com/about
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.table import Table

from models import AuditConfig, PageReport, Severity, SiteReport
from pipeline import InvalidTargetError, PageUnavailableError, SiteAuditor
from reporting.exporter import findings_to_df, to_csv_bytes
from scoring.scorer import score_label

console = Console()


def _severity_style(severity: str) -> str:
    return {
        Severity.PASS: "green",
        Severity.WARNING: "yellow",
        Severity.ERROR: "red",
    }.get(severity, "white")


def _score_style(score: int) -> str:
    if score >= 90:
        return "green"
    elif score >= 75:
        return "yellow"
    elif score >= 50:
        return "orange1"
    else:
        return "red"


def _print_json(data: dict) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def print_site_report(report: SiteReport, limit: int = 15) -> None:
    score = report.overall_score
    console.print()
    console.print(f"[bold]{report.origin}[/bold]")
    console.print(
        f"  Score: [bold {_score_style(score)}]{score}/100[/] ({score_label(score)})  "
        f"Pages audited: {report.pages_audited}/{report.total_urls_in_sitemap}"
    )

    if report.category_counts:
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("Category", style="cyan")
        table.add_column("Passed", justify="right")
        table.add_column("Warnings", justify="right")
        table.add_column("Errors", justify="right")
        for category, counts in report.category_counts.items():
            table.add_row(category, str(counts.passed), str(counts.warned), str(counts.failed))
        console.print(table)

    if report.improvement_suggestions:
        console.print("[bold]Top suggestions:[/bold]")
        for s in report.improvement_suggestions[:limit]:
            style = _severity_style(s.severity)
            console.print(f"  [{style}]{s.severity.upper():7}[/] {s.title} ({s.affected_count} pages)")
            console.print(f"          [dim]{s.recommendation}[/dim]")

    if report.trust is not None:
        console.print(f"  Trust score: {report.trust.score}/100")
    console.print()


def print_page_report(report: PageReport) -> None:
    console.print()
    console.print(
        f"[bold]{report.url}[/bold]  "
        f"[bold {_score_style(report.score)}]{report.score}/100[/]"
    )
    for finding in report.findings:
        if finding.severity == Severity.PASS:
            continue
        style = _severity_style(finding.severity)
        console.print(f"  [{style}]{finding.severity.upper():7}[/] [{finding.category}] {finding.title}")
        if finding.recommendation:
            console.print(f"          [cyan]→ {finding.recommendation}[/cyan]")
    console.print()


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--cache-dir", default=None, type=click.Path(file_okay=False), help="Result cache directory")
@click.option("--workers", default=None, type=int, help="Concurrent page fetches")
@click.option("--timeout", default=None, type=float, help="Per-request timeout in seconds")
@click.pass_context
def cli(ctx, verbose: bool, cache_dir: Optional[str], workers: Optional[int], timeout: Optional[float]):
    """Sitemap-driven site-wide SEO audit."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = AuditConfig()
    if cache_dir:
        config.cache_dir = cache_dir
    if workers:
        config.max_workers = workers
    if timeout:
        config.request_timeout = timeout

    try:
        ctx.obj = SiteAuditor(config)
    except OSError as exc:
        raise click.ClickException(f"Cannot use cache directory {config.cache_dir}: {exc}")


@cli.command()
@click.argument("domain")
@click.option("--force-refresh", is_flag=True, help="Ignore cached sitemap")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def sitemap(auditor: SiteAuditor, domain: str, force_refresh: bool, json_output: bool):
    """List every page URL found in DOMAIN's sitemap."""
    try:
        result = auditor.resolve_sitemap(domain, force_refresh=force_refresh)
    except InvalidTargetError as exc:
        raise click.BadParameter(str(exc), param_hint="DOMAIN")

    if json_output:
        _print_json(result.to_dict())
        return
    for url in result.urls:
        click.echo(url)
    console.print(f"[dim]{result.total} URLs[/dim]")


@cli.command()
@click.argument("domain")
@click.option("--max-pages", default=None, type=click.IntRange(min=1), help="Audit at most N pages")
@click.option("--force-refresh", is_flag=True, help="Ignore cached sitemap and report")
@click.option("--csv", "csv_path", default=None, type=click.Path(dir_okay=False), help="Write findings CSV")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def audit(
    auditor: SiteAuditor,
    domain: str,
    max_pages: Optional[int],
    force_refresh: bool,
    csv_path: Optional[str],
    json_output: bool,
):
    """Audit every page in DOMAIN's sitemap."""
    def _progress(update: dict) -> None:
        if not json_output:
            console.print(f"[dim]{update['pct']:3d}% {update['message']}[/dim]")

    try:
        report = auditor.audit_site(
            domain,
            force_refresh=force_refresh,
            max_pages=max_pages,
            progress_callback=_progress,
        )
    except InvalidTargetError as exc:
        raise click.BadParameter(str(exc), param_hint="DOMAIN")

    if csv_path:
        Path(csv_path).write_bytes(to_csv_bytes(findings_to_df(report.aggregated_findings)))

    if json_output:
        _print_json(report.to_dict())
    else:
        print_site_report(report)


@cli.command()
@click.argument("origin")
@click.argument("urls", nargs=-1, required=True)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def batch(auditor: SiteAuditor, origin: str, urls: tuple, json_output: bool):
    """Audit an explicit list of URLS belonging to ORIGIN."""
    try:
        report = auditor.audit_batch(list(urls), origin)
    except InvalidTargetError as exc:
        raise click.UsageError(str(exc))

    if json_output:
        _print_json(report.to_dict())
    else:
        print_site_report(report)


@cli.command()
@click.argument("url")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def page(auditor: SiteAuditor, url: str, json_output: bool):
    """Audit a single page."""
    try:
        outcome = auditor.audit_page(url)
    except InvalidTargetError as exc:
        raise click.BadParameter(str(exc), param_hint="URL")
    except PageUnavailableError as exc:
        raise click.ClickException(str(exc))

    if json_output:
        _print_json(outcome.to_dict())
    else:
        print_page_report(outcome.page)


def main():
    cli()


if __name__ == "__main__":
    main()
