"""
Интерактивное меню для mdset с использованием rich и questionary.
"""
from typing import Optional

import questionary
from prompt_toolkit.completion import PathCompleter
from rich.table import Table

from .config import build_spec, parse_structure
from .errors import MasterDataSetError
from .report import Reporter
from .runner import run


path_completer = PathCompleter(expanduser=True, only_directories=True)


def validate_structure_format(value: str) -> bool:
    """Проверяет формат name1,size1,name2,size2."""
    try:
        return bool(parse_structure(value))
    except MasterDataSetError:
        return False


def validate_mb(value: str) -> bool:
    return value.strip().isdigit()


def ask_spec(mode: str) -> Optional[dict]:
    """Собирает параметры спецификации для режима. None — пользователь отменил."""
    input_folder = questionary.path(
        "Входная папка мастер-датасета:",
        completer=path_completer,
        validate=lambda p: bool(p.strip()) or "Укажите путь",
    ).ask()
    if not input_folder:
        return None
    data = {"mode": mode, "input_folder": input_folder}

    if mode == "generate":
        file_size = questionary.text(
            "Максимальный размер одного файла, MB:",
            default="10",
            validate=lambda v: (validate_mb(v) and int(v) > 0) or "Введите целое число больше 0",
        ).ask()
        if not file_size:
            return None
        data["file_size_mb"] = int(file_size)

    if mode in ("generate", "update"):
        prompt = "Датасеты (name1,size1,name2,size2), MB:" if mode == "generate" else "Прирост датасетов (name1,size1,...), MB:"
        structure = questionary.text(
            prompt,
            validate=lambda v: validate_structure_format(v) or "Неверный формат. Используйте: a,100,b,20",
        ).ask()
        if not structure:
            return None
        data["data_sets"] = structure

    if mode == "backup":
        backup_folder = questionary.path(
            "Папка для бэкапов:",
            completer=path_completer,
            validate=lambda p: bool(p.strip()) or "Укажите путь",
        ).ask()
        if not backup_folder:
            return None
        data["backup_folder"] = backup_folder
        data["preserve_attributes"] = bool(
            questionary.confirm("Сохранять атрибуты файлов?", default=False).ask()
        )
    return data


def run_mode_menu(mode: str, reporter: Reporter):
    console = reporter.console
    console.rule(f"[bold yellow]{mode}[/bold yellow]")
    data = ask_spec(mode)
    if data is None:
        return

    console.print("\n[bold]Параметры запуска:[/bold]")
    summary_table = Table(show_header=False, box=None)
    summary_table.add_column(style="cyan")
    summary_table.add_column(style="white")
    for key, value in data.items():
        summary_table.add_row(f"{key}:", str(value))
    console.print(summary_table)

    if not questionary.confirm("\nЗапустить с этими параметрами?", default=True).ask():
        console.print("[yellow]Запуск отменён.[/yellow]")
        return

    try:
        spec = build_spec(**data)
        summary = run(spec, reporter)
    except MasterDataSetError as exc:
        reporter.error(f"Ошибка: {exc}")
        return
    reporter.summary(summary)
    if summary.ok:
        console.print("[bold green]✅ Готово![/bold green]")


def run_interactive(reporter: Optional[Reporter] = None):
    """Запуск интерактивного меню."""
    reporter = reporter or Reporter()
    console = reporter.console
    while True:
        console.rule("[bold]Меню mdset[/bold]")
        choice = questionary.select(
            "Выберите действие:",
            choices=[
                "📦 Сгенерировать (generate)",
                "📈 Увеличить (update)",
                "💾 Бэкап (backup)",
                questionary.Separator(),
                "⬅️ Выход",
            ],
            use_indicator=True,
        ).ask()

        if choice is None or choice.startswith("⬅️"):
            break

        if choice.startswith("📦"):
            run_mode_menu("generate", reporter)
        elif choice.startswith("📈"):
            run_mode_menu("update", reporter)
        elif choice.startswith("💾"):
            run_mode_menu("backup", reporter)
