import argparse
import sys

from rich.console import Console
from rich.markup import escape

from .config import USAGE, load_spec_config, resolve_spec, spec_from_args
from .errors import ConfigurationError, MasterDataSetError
from .fsops import deep_delete
from .interactive import run_interactive
from .report import Reporter
from .runner import run


MODES = ("generate", "update", "backup")


def normalize_mode_token(argv):
    """Имя режима без учёта регистра: Generate, GENERATE и generate равнозначны."""
    argv = list(sys.argv[1:] if argv is None else argv)
    for idx, token in enumerate(argv):
        if token.startswith("-"):
            continue
        if token.lower() in MODES:
            argv[idx] = token.lower()
        break
    return argv


def build_parser() -> argparse.ArgumentParser:
    top_level_epilog = """
Быстрые примеры:

  # Создать мастер-датасет: файлы по 10MB, датасеты a (300MB) и b (25MB)
  mdset generate ./master 10 a,300,b,25

  # Увеличить датасет a ещё на 50MB
  mdset update ./master a,50

  # Сделать бэкап (старый бэкап переименовывается с меткой времени)
  mdset backup ./master ./backups

  # Запустить спецификацию из YAML
  mdset run --config master.yaml
"""
    parser = argparse.ArgumentParser(
        prog="mdset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Генератор синтетического мастер-датасета для тестовых пайплайнов",
        epilog=top_level_epilog,
    )
    parser.add_argument("--interactive", "-i", action="store_true", help="Запустить интерактивное меню")
    parser.add_argument("--verbose", "-v", action="store_true", help="Печатать каждый созданный файл")
    sub = parser.add_subparsers(dest="cmd", required=False)

    gen = sub.add_parser(
        "generate",
        help="Сгенерировать мастер-датасет",
    )
    gen.add_argument("input_folder", help="Входная папка мастер-датасета (создаётся при отсутствии)")
    gen.add_argument("file_size_mb", help="Максимальный размер одного файла, MB")
    gen.add_argument("structure", help="Датасеты в виде name1,size1,name2,size2 (размеры в MB)")

    upd = sub.add_parser(
        "update",
        help="Увеличить существующие датасеты на указанный размер",
    )
    upd.add_argument("input_folder", help="Существующая входная папка мастер-датасета")
    upd.add_argument("structure", help="Прирост датасетов в виде name1,size1,name2,size2 (MB)")

    bkp = sub.add_parser(
        "backup",
        help="Скопировать мастер-датасет в папку бэкапов",
    )
    bkp.add_argument("input_folder", help="Существующая входная папка мастер-датасета")
    bkp.add_argument("backup_folder", help="Папка для бэкапов")
    bkp.add_argument("--preserve-attributes", dest="preserve_attributes", action="store_true", help="Сохранять атрибуты файлов и время модификации")

    runp = sub.add_parser(
        "run",
        help="Запустить спецификацию из YAML-файла",
    )
    runp.add_argument("--config", required=True, help="YAML-файл спецификации. Параметры можно переопределить через CLI")
    runp.add_argument("--mode", choices=MODES, type=str.lower, default=None, help="Режим работы")
    runp.add_argument("--input-folder", dest="input_folder", default=None, help="Входная папка мастер-датасета")
    runp.add_argument("--file-size-mb", dest="file_size_mb", type=int, default=None, help="Максимальный размер файла, MB")
    runp.add_argument("--data-sets", dest="data_sets", default=None, help="Датасеты в виде name1,size1,name2,size2")
    runp.add_argument("--backup-folder", dest="backup_folder", default=None, help="Папка для бэкапов")
    runp.add_argument("--preserve-attributes", dest="preserve_attributes", action="store_true", default=None, help="Сохранять атрибуты файлов при бэкапе")

    clean = sub.add_parser(
        "clean",
        help="Удалить папку со всем содержимым",
    )
    clean.add_argument("path", help="Удаляемая папка")

    return parser


def main(argv=None, console: Console = None):
    parser = build_parser()
    args = parser.parse_args(normalize_mode_token(argv))
    reporter = Reporter(console=console, verbose=args.verbose)

    # Запуск интерактивного меню, если указан флаг или нет команды
    if args.interactive or args.cmd is None:
        run_interactive(reporter)
        return

    try:
        if args.cmd == "clean":
            deep_delete(args.path, reporter)
            return
        if args.cmd == "run":
            try:
                config_model = load_spec_config(args.config)
            except (OSError, ValueError) as exc:
                raise SystemExit(f"Не удалось прочитать конфиг: {exc}") from exc
            spec = resolve_spec(args, config_model)
        else:
            spec = spec_from_args(args)
        reporter.info(f"Running master data set with specification: {escape(repr(spec))}")
        summary = run(spec, reporter)
    except ConfigurationError as exc:
        print(USAGE, file=sys.stderr)
        raise SystemExit(f"Ошибка конфигурации: {exc}") from exc
    except MasterDataSetError as exc:
        raise SystemExit(f"Ошибка: {exc}") from exc

    reporter.summary(summary)
    if not summary.ok:
        names = ", ".join(o.name for o in summary.failed)
        raise SystemExit(f"Не удалось обработать датасеты: {names}")
