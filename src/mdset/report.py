from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


def format_bytes(num_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(num_bytes)
    idx = 0
    while size >= 1024 and idx < len(units) - 1:
        size /= 1024
        idx += 1
    if idx == 0:
        return f"{int(size)} {units[idx]}"
    return f"{size:.1f} {units[idx]}"


class Reporter:
    """Вывод хода работы. Передаётся в оркестратор явно, ядро в консоль не пишет."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        self.console = console or Console()
        self.verbose = verbose

    def info(self, message: str):
        self.console.print(message)

    def detail(self, message: str):
        if self.verbose:
            self.console.print(escape(message), style="dim")

    def warn(self, message: str):
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def error(self, message: str):
        self.console.print(f"[bold red]{escape(message)}[/bold red]")

    def summary(self, summary):
        table = Table(title=f"mdset {summary.mode.value}", show_lines=False)
        table.add_column("Датасет", style="cyan")
        table.add_column("Статус")
        table.add_column("Новых файлов", justify="right")
        table.add_column("Дописано", justify="right")
        table.add_column("Комментарий", style="dim")
        status_style = {"ok": "green", "skipped": "yellow", "failed": "bold red"}
        for outcome in summary.data_sets:
            style = status_style.get(outcome.status, "white")
            table.add_row(
                escape(outcome.name),
                f"[{style}]{outcome.status}[/{style}]",
                str(outcome.files_written),
                format_bytes(outcome.bytes_appended),
                escape(outcome.message or ""),
            )
        if summary.data_sets:
            self.console.print(table)
        if summary.backup_path is not None:
            self.console.print(f"Бэкап: [cyan]{escape(str(summary.backup_path))}[/cyan]")
        if summary.rotated_path is not None:
            self.console.print(f"Предыдущий бэкап перемещён в [cyan]{escape(str(summary.rotated_path))}[/cyan]")
        self.console.print(f"Total execution time in millis: {int(summary.elapsed * 1000)}")
