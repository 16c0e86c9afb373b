"""Command-line interface for Quality Insight"""

import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from . import __version__
from .api import analyze as analyze_code
from .cache import ReportCache
from .config import AnalysisConfig, load_config
from .exceptions import QualityInsightError
from .formatters import JsonFormatter, QuietFormatter, RichFormatter
from .logging_config import setup_logging
from .models import Grade
from .scanning import LANGUAGES, supported_languages

app = typer.Typer(
    name="quality-insight",
    help="Quality Insight - heuristic code quality grades for a single source file",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

_GRADE_ORDER = {Grade.A: 0, Grade.B: 1, Grade.C: 2, Grade.D: 3}
_FORMATS = ("rich", "json", "quiet")


def _version_callback(value: bool) -> None:
    if value:
        console.print(
            f"[bold cyan]Quality Insight[/bold cyan] version [green]{__version__}[/green]"
        )
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Grade complexity, maintainability and reliability of source code."""


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    file_path = Path(path)
    if not file_path.is_file():
        raise typer.BadParameter(f"{path} is not a readable file", param_hint="PATH")
    return file_path.read_text(encoding="utf-8", errors="replace")


def _load_settings(config_file: Optional[Path], **overrides) -> AnalysisConfig:
    try:
        return load_config(config_file=config_file, **overrides)
    except QualityInsightError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _language_for(path: str, language: str) -> str:
    if language != "auto":
        return language
    if path == "-":
        return "generic"
    return Path(path).suffix.lstrip(".").lower() or "generic"


@app.command()
def analyze(
    path: str = typer.Argument(
        ...,
        help="Source file to analyze, or '-' to read from stdin",
    ),
    language: str = typer.Option(
        "auto",
        "--language",
        "-l",
        help="Language tag or alias (default: from the file extension)",
    ),
    fmt: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich (default), json, quiet",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Also write the formatted report to this file",
        dir_okay=False,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (TOML format)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    fail_on: Optional[str] = typer.Option(
        None,
        "--fail-on",
        help="Exit 1 if any rating is this grade or worse (A-D, for CI gating)",
    ),
    feedback: bool = typer.Option(
        False,
        "--feedback",
        help="Ask the configured LLM for narrative suggestions",
    ),
    parallel: bool = typer.Option(
        False,
        "--parallel",
        help="Run independent detectors in a thread pool",
    ),
    use_cache: bool = typer.Option(
        False,
        "--cache",
        help="Reuse reports for unchanged input",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress all but ERROR logging",
    ),
):
    """
    Analyze one source file.

    [bold cyan]Examples:[/bold cyan]

      quality-insight analyze app.py

      cat main.go | quality-insight analyze - --language go --format json

      quality-insight analyze Service.java --fail-on C --format quiet
    """
    if verbose and quiet:
        console.print("[red]Error:[/red] --verbose and --quiet are mutually exclusive")
        raise typer.Exit(1)

    if fmt not in _FORMATS:
        console.print(f"[red]Error:[/red] --format must be one of: {', '.join(_FORMATS)}")
        raise typer.Exit(1)

    threshold: Optional[Grade] = None
    if fail_on is not None:
        try:
            threshold = Grade(fail_on.upper())
        except ValueError:
            console.print("[red]Error:[/red] --fail-on must be one of: A, B, C, D")
            raise typer.Exit(1)

    overrides = {}
    if parallel:
        overrides["parallel_detectors"] = True
    if use_cache:
        overrides["cache_enabled"] = True
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    settings = _load_settings(config, **overrides)

    logger = setup_logging(
        verbose=settings.verbosity == "verbose",
        quiet=settings.verbosity == "quiet",
    )

    try:
        text = _read_source(path)
        tag = _language_for(path, language)
        report = analyze_code(text, language=tag, config=settings)
        source = "<stdin>" if path == "-" else path

        narrative = None
        if feedback:
            from .feedback import generate_narrative_feedback

            narrative = generate_narrative_feedback(text, report, config=settings)

        if fmt == "json":
            extra = {"feedback": asdict(narrative)} if narrative is not None else None
            formatter = JsonFormatter(extra=extra)
        elif fmt == "quiet":
            formatter = QuietFormatter()
        else:
            formatter = RichFormatter(console=console)
        formatter.render(report, source)

        if output is not None:
            output.write_text(formatter.format(report, source), encoding="utf-8")
            logger.info(f"Report written to {output}")

        if narrative is not None and fmt != "json":
            console.print("[bold]Reviewer feedback:[/bold]")
            console.print(narrative.suggestions, markup=False)
            for practice in narrative.best_practices:
                console.print(f"  - {practice}", markup=False)

        if threshold is not None:
            worst = max(
                (report.complexity.grade, report.maintainability.grade, report.reliability.grade),
                key=_GRADE_ORDER.__getitem__,
            )
            if _GRADE_ORDER[worst] >= _GRADE_ORDER[threshold]:
                if fmt == "rich":
                    console.print(
                        f"\n[red]FAIL:[/red] worst grade {worst.value} reaches {threshold.value}"
                    )
                raise typer.Exit(1)

    except QualityInsightError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)


@app.command()
def languages():
    """List supported languages and their aliases."""
    for name in supported_languages():
        aliases = ", ".join(a for a in LANGUAGES[name].aliases if a)
        console.print(f"[bold]{name}[/bold]  [dim]{aliases}[/dim]")


@app.command()
def cache_info(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (TOML format)",
        exists=True,
        dir_okay=False,
    ),
    clear: bool = typer.Option(False, "--clear", help="Clear the cache"),
):
    """Show cache information and statistics."""
    settings = _load_settings(config)
    cache = ReportCache(cache_dir=settings.cache_dir, ttl_hours=settings.cache_ttl_hours)
    try:
        if clear:
            cache.clear()
            console.print("[yellow]Cache cleared[/yellow]")
        stats = cache.stats()
    finally:
        cache.close()

    console.print("[bold cyan]Quality Insight Cache Info[/bold cyan]")
    console.print(f"Directory: [blue]{stats.get('directory', 'N/A')}[/blue]")
    console.print(f"Entries: [yellow]{stats.get('size', 0)}[/yellow]")
    console.print(f"Size: [yellow]{stats.get('volume', 0)} bytes[/yellow]")


if __name__ == "__main__":
    app()
