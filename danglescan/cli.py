"""DANGLESCAN CLI — terminal interface built with Typer + Rich."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from danglescan import __version__
from danglescan.core.config import Config, load_config
from danglescan.core.engine import ScanEngine
from danglescan.core.errors import InputFileError, ScanError
from danglescan.reporting.text_report import format_lines
from danglescan.takeover.models import ScanResult
from danglescan.utils.dns_resolver import build_resolver
from danglescan.utils.helpers import load_fingerprints, load_subdomains
from danglescan.utils.logger import configure_logging, get_logger

app = typer.Typer(
    name="danglescan",
    help="[bold red]DANGLESCAN[/] — dangling CNAME subdomain takeover scanner",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def _print_banner() -> None:
    console.print(
        Panel(
            "[bold red]DANGLESCAN[/]",
            subtitle=f"[dim]v{__version__} — dangling CNAME detection[/]",
            border_style="red",
            expand=False,
        )
    )


# ---------------------------------------------------------------------------
# scan command
# ---------------------------------------------------------------------------


@app.command()
def scan(
    subdomains_file: str = typer.Argument(..., help="File with one subdomain per line"),
    patterns_file: str = typer.Argument(..., help="File with one fingerprint substring per line"),
    results_file: Optional[str] = typer.Argument(
        None, help="Write only vulnerable subdomains to this file"
    ),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Results file format: text/json/csv"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-c", help="Parallel DNS lookups"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-lookup timeout in seconds"),
    resolver: Optional[str] = typer.Option(None, "--resolver", help="Resolver backend: dig/aiodns"),
    nameserver: Optional[List[str]] = typer.Option(None, "--nameserver", "-n", help="DNS server to query"),
    isolate_errors: bool = typer.Option(
        False, "--isolate-errors", help="Record failed lookups instead of aborting the scan"
    ),
    strip_root_dot: bool = typer.Option(
        False, "--strip-root-dot", help="Drop the trailing root dot before matching"
    ),
    silent: bool = typer.Option(False, "--silent", help="Print report lines only"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write the scan log to this file"),
    config_file: Optional[str] = typer.Option(None, "--config", help="Custom config file"),
) -> None:
    """[bold]Check subdomains for dangling CNAME records.[/]

    Examples:

        danglescan scan subdomains.txt fingerprints.txt

        danglescan scan subdomains.txt fingerprints.txt vulnerable.txt -c 20
    """
    configure_logging(verbose=verbose, quiet=silent, log_file=log_file)

    overrides: Dict[str, Dict[str, Any]] = {
        "dns": {"resolver": resolver, "timeout": timeout, "nameservers": nameserver or None},
        "scan": {
            "concurrency": concurrency,
            "error_policy": "isolate" if isolate_errors else None,
        },
        "match": {"strip_root_dot": True if strip_root_dot else None},
        "reporting": {"format": fmt},
    }
    try:
        cfg = _apply_overrides(load_config(config_file), overrides)
    except ValidationError as exc:
        err_console.print(f"[red]Invalid option:[/] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=2)

    if not silent:
        _print_banner()

    try:
        subdomains = load_subdomains(subdomains_file)
        fingerprints = load_fingerprints(patterns_file)
    except InputFileError as exc:
        err_console.print(f"[red]✗[/] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    try:
        result = asyncio.run(_run_scan(subdomains, fingerprints, cfg, silent))
    except ScanError as exc:
        err_console.print(f"[red]✗ Scan aborted:[/] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    for line in format_lines(result.records):
        typer.echo(line)
    if not silent:
        _display_summary(result)

    if results_file:
        _write_output(result, results_file, cfg.reporting.format)
        if not silent:
            console.print(f"\n[bold green]✓[/] Vulnerable subdomains saved to [bold]{results_file}[/]")


def _apply_overrides(cfg: Config, overrides: Dict[str, Dict[str, Any]]) -> Config:
    """Return a validated copy of *cfg* with non-``None`` CLI values applied."""
    raw = cfg.model_dump()
    for section, values in overrides.items():
        for key, value in values.items():
            if value is not None:
                raw[section][key] = value
    return Config(**raw)


async def _run_scan(
    subdomains: Sequence[str],
    fingerprints: Sequence[str],
    cfg: Config,
    silent: bool,
) -> ScanResult:
    engine = ScanEngine(config=cfg, resolver=build_resolver(cfg))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=err_console,
        transient=True,
        disable=silent,
    ) as progress:
        task_id = progress.add_task("Resolving CNAMEs…", total=len(subdomains))

        def on_event(event: dict) -> None:  # type: ignore[type-arg]
            if event.get("event") == "subdomain_checked":
                progress.advance(task_id)

        engine.on_event(on_event)
        return await engine.run(subdomains, fingerprints)


def _display_summary(result: ScanResult) -> None:
    """Render a Rich summary table of the scan."""
    stats = result.stats()
    table = Table(
        title="Scan Summary",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("Outcome", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right", style="bold")
    table.add_row("Checked", str(stats["checked"]))
    table.add_row("CNAME found", str(stats["cname_found"]))
    table.add_row("No CNAME", str(stats["no_cname"]))
    table.add_row("NXDOMAIN", str(stats["nxdomain"]))
    table.add_row("Query errors", str(stats["query_error"]))
    table.add_row("[red]Vulnerable[/]", f"[red]{stats['vulnerable']}[/]")

    console.print()
    console.print(table)
    console.print(f"\n[bold]Duration:[/] {result.duration:.1f}s")


def _write_output(result: ScanResult, output: str, fmt: str) -> None:
    """Write the vulnerable-only report for *result* to *output*."""
    if fmt == "json":
        from danglescan.reporting.json_report import JSONReporter
        JSONReporter().generate(result, output, only_vulnerable=True)
    elif fmt == "csv":
        from danglescan.reporting.csv_report import CSVReporter
        CSVReporter().generate(result, output, only_vulnerable=True)
    else:
        from danglescan.reporting.text_report import TextReporter
        TextReporter().generate(result, output, only_vulnerable=True)


# ---------------------------------------------------------------------------
# config command
# ---------------------------------------------------------------------------


@app.command()
def config(
    config_file: Optional[str] = typer.Option(None, "--config", help="Config file path"),
) -> None:
    """[bold]Show the effective configuration.[/]"""
    cfg = load_config(config_file)
    console.print_json(cfg.model_dump_json(indent=2))


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@app.command()
def version() -> None:
    """[bold]Show DANGLESCAN version information.[/]"""
    console.print(f"[bold red]DANGLESCAN[/] version [bold]{__version__}[/]")


def main() -> None:
    """Entry point registered in pyproject.toml."""
    app()
