import os
import random
import shutil
import string
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import FileOperationError
from .report import Reporter

ALPHABET = string.ascii_letters + string.digits
# длина случайной строки: [LINE_MIN, LINE_MAX)
LINE_MIN = 100
LINE_MAX = 150


def write_file(path: Path, byte_limit: int, append: bool = False, rng=None) -> Path:
    """Пишет строки случайных символов, пока не наберётся byte_limit байт.

    Последняя строка может перелезть за лимит, но меньше чем на одну строку.
    В режиме append байты считаются только для дописанной части.
    """
    rng = rng or random
    written = 0
    try:
        with open(path, "a" if append else "w", encoding="ascii", newline="\n") as fh:
            while written < byte_limit:
                line = "".join(rng.choices(ALPHABET, k=rng.randrange(LINE_MIN, LINE_MAX)))
                fh.write(line)
                fh.write("\n")
                written += len(line) + 1
    except OSError as exc:
        raise FileOperationError("Cannot create file", path, exc) from exc
    return path


def ensure_dir(p: Path):
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOperationError("Cannot create directory", p, exc) from exc


def size_of(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError as exc:
        raise FileOperationError("Cannot determine file size of", path, exc) from exc


def count_files(path: Path) -> int:
    count = 0

    def onerror(exc: OSError):
        raise FileOperationError("Cannot count files in directory", path, exc) from exc

    for _, _, filenames in os.walk(path, onerror=onerror):
        count += len(filenames)
    return count


def move(source: Path, target: Path):
    try:
        source.rename(target)
    except OSError as exc:
        raise FileOperationError(f"Cannot move {source} to", target, exc) from exc


class ScanFailure(Enum):
    EMPTY_DATA_SET = "empty data set"
    NO_REFERENCE_FILE = "no reference file (a single file gives no unit size)"


@dataclass(frozen=True)
class DataSetStats:
    file_count: int
    smallest: Path
    smallest_bytes: int
    # None: все файлы одного размера, эталон совпадает с самым маленьким
    reference: Optional[Path]
    reference_bytes: int


@dataclass(frozen=True)
class ScanResult:
    stats: Optional[DataSetStats] = None
    failure: Optional[ScanFailure] = None

    @property
    def ok(self) -> bool:
        return self.stats is not None


def _list_files(folder: Path) -> List[Tuple[Path, int]]:
    try:
        entries = sorted(p for p in folder.iterdir() if p.is_file())
    except OSError as exc:
        raise FileOperationError("Cannot list data set", folder, exc) from exc
    return [(p, size_of(p)) for p in entries]


def scan_data_set(folder: Path) -> ScanResult:
    """Находит самый маленький файл и эталонный (первый по имени, что больше него)."""
    files = _list_files(folder)
    if not files:
        return ScanResult(failure=ScanFailure.EMPTY_DATA_SET)
    if len(files) == 1:
        return ScanResult(failure=ScanFailure.NO_REFERENCE_FILE)

    smallest, smallest_bytes = min(files, key=lambda item: (item[1], item[0].name))
    reference, reference_bytes = next(
        ((p, size) for p, size in files if size > smallest_bytes),
        (None, smallest_bytes),
    )
    return ScanResult(
        stats=DataSetStats(
            file_count=count_files(folder),
            smallest=smallest,
            smallest_bytes=smallest_bytes,
            reference=reference,
            reference_bytes=reference_bytes,
        )
    )


def copy_file(source: Path, target: Path, preserve: bool):
    # уже скопированные файлы не трогаем
    if target.exists():
        return
    try:
        if preserve:
            shutil.copy2(source, target)
        else:
            shutil.copyfile(source, target)
    except OSError as exc:
        raise FileOperationError(f"Unable to copy {source} to", target, exc) from exc


def copy_tree(source: Path, target: Path, preserve: bool, reporter: Reporter, exclude=()):
    """Рекурсивно копирует source в target.

    Существующие каталоги допустимы. Ошибки отдельных файлов и циклы
    симлинков выводятся через reporter и не прерывают копирование.
    Каталог target и каталоги из exclude не копируются, даже если лежат внутри source.
    """
    source = Path(source)
    target = Path(target)
    skipped = {os.path.realpath(p) for p in (target, *exclude)}
    visited = set()
    copied_dirs = []

    def onerror(exc: OSError):
        reporter.error(f"Unable to copy: {exc.filename}: {exc}")

    for dirpath, dirnames, filenames in os.walk(source, onerror=onerror, followlinks=True):
        real = os.path.realpath(dirpath)
        if real in visited:
            reporter.warn(f"cycle detected: {dirpath}")
            dirnames[:] = []
            continue
        visited.add(real)

        rel = Path(dirpath).relative_to(source)
        newdir = target / rel
        try:
            newdir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            reporter.error(f"Unable to create: {newdir}: {exc}")
            dirnames[:] = []
            continue
        copied_dirs.append((Path(dirpath), newdir))
        dirnames[:] = sorted(
            d for d in dirnames if os.path.realpath(os.path.join(dirpath, d)) not in skipped
        )

        for name in sorted(filenames):
            try:
                copy_file(Path(dirpath) / name, newdir / name, preserve)
            except FileOperationError as exc:
                reporter.error(str(exc))

    if preserve:
        # время модификации каталогов выставляем после копирования содержимого
        for src_dir, new_dir in reversed(copied_dirs):
            try:
                shutil.copystat(src_dir, new_dir)
            except OSError as exc:
                reporter.error(f"Unable to copy all attributes to: {new_dir}: {exc}")


def deep_delete(path: Path, reporter: Reporter):
    path = Path(path)
    if not path.exists() and not path.is_symlink():
        return
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
            reporter.detail(str(path))
            return
        for dirpath, dirnames, filenames in os.walk(path, topdown=False):
            for name in filenames:
                entry = Path(dirpath) / name
                entry.unlink()
                reporter.detail(str(entry))
            for name in dirnames:
                entry = Path(dirpath) / name
                if entry.is_symlink():
                    entry.unlink()
                else:
                    entry.rmdir()
                reporter.detail(str(entry))
        path.rmdir()
        reporter.detail(str(path))
    except OSError as exc:
        raise FileOperationError("Cannot delete", path, exc) from exc
