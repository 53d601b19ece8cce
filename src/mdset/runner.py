"""Оркестратор режимов generate / update / backup.

Каждый запуск обрабатывает ровно один режим. Ошибки отдельного датасета
логируются и попадают в сводку, остальные датасеты продолжают работу.
Нарушение инварианта прироста (InvariantViolation) прерывает запуск.
"""
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from rich.markup import escape

from . import fsops
from .config import DataSetRequest, MasterDataSetSpec, Mode
from .dataset import plan_files, plan_growth
from .errors import DataSetError, FileOperationError, PreconditionError
from .report import Reporter, format_bytes


@dataclass
class DataSetOutcome:
    name: str
    status: str  # ok | skipped | failed
    files_written: int = 0
    bytes_appended: int = 0
    message: Optional[str] = None


@dataclass
class RunSummary:
    mode: Mode
    data_sets: List[DataSetOutcome] = field(default_factory=list)
    backup_path: Optional[Path] = None
    rotated_path: Optional[Path] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return all(o.status != "failed" for o in self.data_sets)

    @property
    def failed(self) -> List[DataSetOutcome]:
        return [o for o in self.data_sets if o.status == "failed"]


def run(spec: MasterDataSetSpec, reporter: Optional[Reporter] = None, rng=None) -> RunSummary:
    reporter = reporter or Reporter()
    started = time.monotonic()
    if spec.mode is Mode.GENERATE:
        summary = generate(spec, reporter, rng=rng)
    elif spec.mode is Mode.UPDATE:
        summary = update(spec, reporter, rng=rng)
    elif spec.mode is Mode.BACKUP:
        summary = backup(spec, reporter)
    else:
        raise ValueError(f"Unknown mode {spec.mode}")
    summary.elapsed = time.monotonic() - started
    return summary


def generate_data_set(folder: Path, request: DataSetRequest, unit_mb: int, reporter: Reporter, rng=None) -> int:
    """Создаёт файлы датасета по плану, возвращает количество записанных файлов."""
    fsops.ensure_dir(folder)
    planned = plan_files(request, unit_mb)
    for item in planned:
        path = folder / item.name
        fsops.write_file(path, item.byte_limit, rng=rng)
        reporter.detail(f"  {path} ({format_bytes(item.byte_limit)})")
    return len(planned)


def generate(spec: MasterDataSetSpec, reporter: Reporter, rng=None) -> RunSummary:
    """Генерирует мастер-датасет.

    Все файлы датасета примерно одного размера (file_size_mb), кроме последнего,
    который может быть меньше, чтобы уложиться в размер датасета.
    """
    summary = RunSummary(mode=Mode.GENERATE)
    fsops.ensure_dir(spec.input_folder)
    for request in spec.data_sets:
        reporter.info(f"Creating data set [cyan]{escape(request.name)}[/cyan] of size {request.size_mb}MB")
        try:
            written = generate_data_set(
                spec.data_set_folder(request.name), request, spec.file_size_mb, reporter, rng=rng
            )
        except (FileOperationError, DataSetError) as exc:
            reporter.error(str(exc))
            summary.data_sets.append(DataSetOutcome(request.name, "failed", message=str(exc)))
            continue
        summary.data_sets.append(DataSetOutcome(request.name, "ok", files_written=written))
    return summary


def grow_data_set(folder: Path, request: DataSetRequest, reporter: Reporter, rng=None) -> DataSetOutcome:
    """Увеличивает существующий датасет на request.size_mb.

    Сначала дописывает самый маленький файл до размера эталонного,
    остаток отдаёт генерации новых файлов, нумерация продолжается
    после существующих.
    """
    if request.size_mb == 0:
        return DataSetOutcome(request.name, "ok", message="nothing to grow")

    scan = fsops.scan_data_set(folder)
    if not scan.ok:
        raise DataSetError(request.name, scan.failure.value)
    stats = scan.stats

    plan = plan_growth(request.size_mb, stats.smallest_bytes, stats.reference_bytes)
    reporter.detail(
        f"  smallest {stats.smallest.name} {stats.smallest_bytes}B, "
        f"reference {stats.reference_bytes}B, gap {plan.gap_bytes}B"
    )

    remainder = plan.remainder_request(request.name, stats.file_count)
    if remainder.size_mb > 0 and plan.unit_mb == 0:
        raise DataSetError(
            request.name,
            f"reference file is {stats.reference_bytes}B, under 1MB: cannot derive a unit size",
        )

    if plan.append_bytes > 0:
        fsops.write_file(stats.smallest, plan.append_bytes, append=True, rng=rng)

    written = 0
    if remainder.size_mb > 0:
        written = generate_data_set(folder, remainder, plan.unit_mb, reporter, rng=rng)

    return DataSetOutcome(
        request.name,
        "ok",
        files_written=written,
        bytes_appended=plan.append_bytes,
    )


def update(spec: MasterDataSetSpec, reporter: Reporter, rng=None) -> RunSummary:
    if not spec.input_folder.exists():
        raise PreconditionError("An existing input folder is mandatory in update mode")
    summary = RunSummary(mode=Mode.UPDATE)
    for request in spec.data_sets:
        folder = spec.data_set_folder(request.name)
        if not folder.exists():
            reporter.warn(f"Unknown data set folder {folder}")
            summary.data_sets.append(DataSetOutcome(request.name, "skipped", message="folder not found"))
            continue
        reporter.info(f"Expanding data set [cyan]{escape(request.name)}[/cyan] by {request.size_mb}MB")
        try:
            outcome = grow_data_set(folder, request, reporter, rng=rng)
        except (FileOperationError, DataSetError) as exc:
            reporter.error(str(exc))
            outcome = DataSetOutcome(request.name, "failed", message=str(exc))
        summary.data_sets.append(outcome)
    return summary


def backup_destination(input_folder: Path, backup_folder: Path) -> Path:
    # /data/m в /backups -> /backups/data/m; относительные пути считаются от текущего каталога
    absolute = input_folder.resolve()
    relative = absolute.relative_to(absolute.anchor)
    if relative == Path("."):
        raise PreconditionError(f"Cannot back up the filesystem root {absolute}")
    return backup_folder / relative


def backup(spec: MasterDataSetSpec, reporter: Reporter) -> RunSummary:
    """Копирует input_folder целиком в backup_folder.

    Если бэкап уже существует, он переименовывается с суффиксом текущего
    времени в миллисекундах.
    """
    if not spec.input_folder.exists():
        raise PreconditionError("An existing input folder is mandatory in backup mode")
    if spec.backup_folder is None:
        raise PreconditionError("A backup folder is mandatory in backup mode")

    summary = RunSummary(mode=Mode.BACKUP)
    fsops.ensure_dir(spec.backup_folder)
    destination = backup_destination(spec.input_folder, spec.backup_folder)

    if destination.exists():
        rotated = destination.with_name(f"{destination.name}{int(time.time() * 1000)}")
        reporter.info(f"Moving existing backup path to {escape(str(rotated))}")
        fsops.move(destination, rotated)
        summary.rotated_path = rotated

    reporter.info(f"Copying {escape(str(spec.input_folder))} to {escape(str(destination))}")
    fsops.copy_tree(
        spec.input_folder,
        destination,
        spec.preserve_attributes,
        reporter,
        exclude=(spec.backup_folder,),
    )
    summary.backup_path = destination
    return summary
