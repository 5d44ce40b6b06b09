"""
CLI for repolens.

Provides command-line interface for scanning and analyzing directory trees.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from repolens.core.config import RepolensConfig, load_config
from repolens.core.errors import PathNotFoundError
from repolens.core.file_scanner import DirectoryScanner, ScanConfig, ScanResult
from repolens.core.formatting import format_duration, format_size
from repolens.services import ProjectAnalysis, ProjectAnalyzer

# Initialize Rich Console
console = Console()

app = typer.Typer(
    name="repolens",
    help="Repolens - Fast, approximate insight into a code repository",
    add_completion=False,
)


def _setup_logging(cfg: RepolensConfig, verbose: bool) -> None:
    """Route library logging through Rich at the configured level."""
    level = logging.DEBUG if verbose else getattr(logging, cfg.logging.level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format=cfg.logging.format,
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_scan_config(
    path: Path,
    cfg: RepolensConfig,
    max_depth: Optional[int],
    sequential: bool,
    follow_links: bool,
    ignore: Optional[list[str]],
    no_default_ignores: bool,
    workers: Optional[int],
    gitignore: bool,
) -> ScanConfig:
    """Merge config-file/env settings with command-line overrides."""
    scan_config = cfg.scanner.to_scan_config(path)

    patterns = [] if no_default_ignores else list(scan_config.ignore_patterns)
    if ignore:
        patterns.extend(ignore)

    return replace(
        scan_config,
        max_depth=max_depth if max_depth is not None else scan_config.max_depth,
        parallel=scan_config.parallel and not sequential,
        follow_links=scan_config.follow_links or follow_links,
        ignore_patterns=tuple(patterns),
        max_workers=workers if workers is not None else scan_config.max_workers,
        respect_gitignore=scan_config.respect_gitignore or gitignore,
    )


def _run_scan(scan_config: ScanConfig, show_status: bool = True) -> ScanResult:
    scanner = DirectoryScanner()
    try:
        if not show_status:
            return scanner.scan(scan_config)
        with console.status(f"[bold blue]Scanning[/bold blue] {scan_config.path}..."):
            return scanner.scan(scan_config)
    except PathNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _scan_summary(result: ScanResult) -> Table:
    summary = Table.grid(padding=1)
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("Files:", str(result.file_count))
    summary.add_row("Directories:", str(result.dir_count))
    summary.add_row("Total Size:", format_size(result.total_size))
    summary.add_row("Duration:", format_duration(result.duration_ms))
    return summary


def _render_analysis(analysis: ProjectAnalysis) -> None:
    console.print(
        Panel(
            f"[bold]{analysis.project_type}[/bold]\n"
            f"Estimated lines of code: ~{analysis.estimated_lines:,}",
            title="[bold green]Project[/bold green]",
            border_style="green",
            expand=False,
        )
    )

    if analysis.language_stats:
        table = Table(title="Languages")
        table.add_column("Language", style="cyan")
        table.add_column("Files", justify="right")
        table.add_column("Size", justify="right")
        table.add_column("Share", justify="right")
        for stat in analysis.language_stats:
            table.add_row(
                stat.language,
                str(stat.file_count),
                format_size(stat.total_size),
                f"{stat.percentage:.1f}%",
            )
        console.print(table)

    if analysis.dependency_files:
        console.print("\n[bold]Dependency Files:[/bold]")
        for f in analysis.dependency_files:
            console.print(f"  - {f}")

    if analysis.config_files:
        console.print("\n[bold]Config Files:[/bold]")
        for f in analysis.config_files[:20]:
            console.print(f"  - {f}")
        if len(analysis.config_files) > 20:
            console.print(f"  ... and {len(analysis.config_files) - 20} more")


@app.command()
def scan(
    path: Path = typer.Argument(..., help="Directory to scan"),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", "-d", min=0, help="Maximum depth (root is 0)"
    ),
    sequential: bool = typer.Option(False, "--sequential", help="Scan on a single thread"),
    follow_links: bool = typer.Option(False, "--follow-links", help="Follow symbolic links"),
    ignore: Optional[list[str]] = typer.Option(
        None, "--ignore", "-i", help="Extra ignore pattern. Can be specified multiple times."
    ),
    no_default_ignores: bool = typer.Option(
        False, "--no-default-ignores", help="Do not apply the default ignore patterns"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Number of parallel workers"
    ),
    gitignore: bool = typer.Option(False, "--gitignore", help="Apply the root .gitignore"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (.yaml, .yml or .json)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Scan a directory and report file/directory counts and sizes."""
    load_dotenv()
    cfg = load_config(config_file)
    _setup_logging(cfg, verbose)

    scan_config = _build_scan_config(
        path, cfg, max_depth, sequential, follow_links, ignore, no_default_ignores, workers, gitignore
    )
    result = _run_scan(scan_config, show_status=not as_json)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    console.print(
        Panel(
            _scan_summary(result),
            title="[bold green]Scan Complete[/bold green]",
            border_style="green",
            expand=False,
        )
    )


@app.command()
def analyze(
    path: Path = typer.Argument(..., help="Directory to analyze"),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", "-d", min=0, help="Maximum depth (root is 0)"
    ),
    sequential: bool = typer.Option(False, "--sequential", help="Scan on a single thread"),
    follow_links: bool = typer.Option(False, "--follow-links", help="Follow symbolic links"),
    ignore: Optional[list[str]] = typer.Option(
        None, "--ignore", "-i", help="Extra ignore pattern. Can be specified multiple times."
    ),
    no_default_ignores: bool = typer.Option(
        False, "--no-default-ignores", help="Do not apply the default ignore patterns"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Number of parallel workers"
    ),
    gitignore: bool = typer.Option(False, "--gitignore", help="Apply the root .gitignore"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (.yaml, .yml or .json)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the analysis as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Scan a directory and characterize the project it contains."""
    load_dotenv()
    cfg = load_config(config_file)
    _setup_logging(cfg, verbose)

    scan_config = _build_scan_config(
        path, cfg, max_depth, sequential, follow_links, ignore, no_default_ignores, workers, gitignore
    )
    result = _run_scan(scan_config, show_status=not as_json)
    analysis = ProjectAnalyzer().analyze(result.files)

    if as_json:
        payload = {
            "scan": {
                "file_count": result.file_count,
                "dir_count": result.dir_count,
                "total_size": result.total_size,
                "duration_ms": result.duration_ms,
            },
            "analysis": analysis.to_dict(),
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    console.print(
        Panel(
            _scan_summary(result),
            title="[bold green]Scan Complete[/bold green]",
            border_style="green",
            expand=False,
        )
    )
    _render_analysis(analysis)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
