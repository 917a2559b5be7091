"""CLI entry-point (Typer).

Commands:
- `scan`: reverse-IP lookup of one IP (`-d`) or a file of IPs (`-l`).
- `doctor`: environment diagnostics.

The command layer only parses flags, loads targets and prints; the scan
itself lives in `core.services.scan_pipeline`.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.text import Text

from adapters.reverse_ip_sources import build_default_sources
from cli import doctor
from cli.ui_components import build_summary_table, print_banner, print_error, print_warning
from core.config import AppSettings
from core.errors import IPFinderError
from core.logger import setup_logger
from core.services.scan_pipeline import ScanHooks, run_scan
from core.targets import load_targets_file, parse_single_target

EXIT_FATAL = 1
EXIT_CANCELLED = 130

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Reverse-IP domain discovery across public lookup services.",
)
app.add_typer(doctor.app, name="doctor")


def _load_targets(console: Console, ip: str | None, ip_list: Path | None) -> list[str]:
    if ip is not None:
        return [parse_single_target(ip)]

    assert ip_list is not None
    loaded = load_targets_file(ip_list)
    for lineno, text in loaded.skipped:
        print_warning(console, f"Invalid IP address (line {lineno}): {text}")
    return loaded.targets


def _build_hooks(console: Console, *, verbose: bool, silent: bool) -> ScanHooks:
    if silent:
        return ScanHooks()

    def domain_found(domain: str, ip: str, source: str) -> None:
        if verbose:
            console.print(Text.assemble(domain, (f"  [{source}] {ip}", "dim")))
        else:
            console.print(domain, highlight=False)

    def source_failed(ip: str, source: str, exc: BaseException) -> None:
        print_warning(console, f"{source} failed for {ip}: {str(exc) or exc.__class__.__name__}")

    def target_done(ip: str, found: int) -> None:
        console.print(Text(f"[*] {ip}: {found} new domains", style="cyan"))

    return ScanHooks(
        domain_found=domain_found,
        source_failed=source_failed if verbose else None,
        target_done=target_done if verbose else None,
    )


@app.command()
def scan(
    ip: str | None = typer.Option(None, "-d", "--ip", help="Single IP address to scan."),
    ip_list: Path | None = typer.Option(None, "-l", "--list", help="File containing a list of IPs."),
    output: Path | None = typer.Option(None, "-o", "--output", help="Output file (default: results/domains.txt)."),
    threads: int | None = typer.Option(None, "-t", "--threads", help="Number of concurrent workers (default: 30)."),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
    silent: bool = typer.Option(False, "--silent", help="Silent mode (only shows the count)."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
) -> None:
    """Find the domains hosted on one or more IP addresses."""

    console = Console(no_color=no_color, highlight=False)

    try:
        settings = AppSettings()
    except ValidationError as exc:
        print_error(console, f"Invalid configuration: {exc}")
        raise typer.Exit(EXIT_FATAL) from exc

    setup_logger(
        verbose=verbose,
        silent=silent,
        level=settings.log_level,
        log_file=settings.log_file,
        colorize=not no_color,
    )

    if (ip is None) == (ip_list is None):
        print_error(console, "Either -d (single IP) or -l (IP list file) must be specified")
        raise typer.Exit(EXIT_FATAL)

    try:
        targets = _load_targets(console, ip, ip_list)
    except IPFinderError as exc:
        print_error(console, str(exc))
        raise typer.Exit(EXIT_FATAL) from exc

    sources = build_default_sources(settings)
    if not silent:
        print_banner(console, source_count=len(sources))

    try:
        result = run_scan(
            targets,
            sources,
            output_path=output or settings.output_path,
            threads=threads if threads is not None else settings.threads,
            settings=settings,
            hooks=_build_hooks(console, verbose=verbose, silent=silent),
        )
    except IPFinderError as exc:
        print_error(console, f"Scanner error: {exc}")
        raise typer.Exit(EXIT_FATAL) from exc
    except KeyboardInterrupt:
        print_warning(console, "Interrupted")
        raise typer.Exit(EXIT_CANCELLED)

    if silent:
        console.print(str(result.domains_found))
    else:
        console.print(build_summary_table(result))

    if result.cancelled:
        if not silent:
            print_warning(console, "Scan cancelled; partial results were kept")
        raise typer.Exit(EXIT_CANCELLED)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
