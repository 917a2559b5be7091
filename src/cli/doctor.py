"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client, request_headers
from adapters.reverse_ip_sources import build_default_sources
from core.config import AppSettings, get_user_env_file

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(urls: list[str], settings: AppSettings) -> list[tuple[bool, str]]:
    async with build_async_client(settings) as client:

        async def check(url: str) -> tuple[bool, str]:
            try:
                response = await client.get(url, headers=request_headers(settings))
            except Exception as exc:
                return False, str(exc) or exc.__class__.__name__
            return response.status_code < 500, f"HTTP {response.status_code}"

        return list(await asyncio.gather(*(check(url) for url in urls)))


def _check_output_dir(path: Path) -> tuple[bool, str]:
    """The sink creates the parent directory, so the closest existing ancestor must be writable."""

    directory = path.parent.resolve()
    probe = directory
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    if not os.access(probe, os.W_OK):
        return False, f"{probe} is not writable"
    if directory.exists():
        return True, str(directory)
    return True, f"{directory} (will be created)"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    sources = build_default_sources(settings)

    table = Table(title="ipfinder Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "OPTIONAL", str(env_file))
    table.add_row("Threads", "OK", str(settings.threads))
    table.add_row("HTTP timeout", "OK", f"{settings.http_timeout_seconds:.1f}s")

    ok_out, detail_out = _check_output_dir(settings.output_path)
    table.add_row("Output directory", "OK" if ok_out else "FAIL", detail_out)

    # Connectivity (best-effort)
    checks = asyncio.run(_check_http([source.base_url for source in sources], settings))
    failures = 0
    for source, (ok, detail) in zip(sources, checks):
        if not ok:
            failures += 1
        table.add_row(f"Source: {source.name}", "OK" if ok else "FAIL", detail)

    _console.print(table)

    if failures:
        _console.print(
            "\n[yellow]Note:[/yellow] Unreachable sources are skipped per IP during a scan; "
            "the scan still completes with the remaining ones."
        )
