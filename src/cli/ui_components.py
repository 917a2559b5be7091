"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar banner/tablas en `scan` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ScanResult, ScanStatus


def print_banner(console: Console, *, source_count: int) -> None:
    """Imprime el banner de bienvenida.

    Se omite en modo `--silent` para no ensuciar pipelines.
    """

    title = Text("ipfinder", style="bold cyan")
    subtitle = Text(f"Reverse IP domain discovery • {source_count} sources enabled", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_error(console: Console, message: str) -> None:
    # Text evita que "[ERROR]" se interprete como markup de rich.
    console.print(Text(f"[ERROR] {message}", style="bold red"))


def print_warning(console: Console, message: str) -> None:
    console.print(Text(f"[WARNING] {message}", style="yellow"))


def build_summary_table(result: ScanResult) -> Table:
    """Tabla con el resumen final de un escaneo."""

    status_style = "green" if result.status is ScanStatus.SUCCESS else "yellow"

    table = Table(title="Scan Summary", show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Status", Text(result.status.value, style=status_style))
    table.add_row("IPs scanned", f"{result.targets_processed}/{result.targets_total}")
    table.add_row("Domains found", str(result.domains_found))
    table.add_row("Source failures", str(result.source_failures))
    table.add_row("Elapsed", f"{result.elapsed_seconds:.1f}s")
    table.add_row("Output", str(result.output_path))
    return table
