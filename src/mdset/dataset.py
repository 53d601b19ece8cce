from dataclasses import dataclass
from typing import List

from .config import DataSetRequest
from .errors import InvariantViolation

ONE_MB = 1024 * 1024
FILENAME_TEMPLATE = "file{}.txt"


def file_name(index: int) -> str:
    return FILENAME_TEMPLATE.format(index)


# Size math: all integer, sizes in MB unless the name says bytes

def files_count(target_mb: int, unit_mb: int) -> int:
    if unit_mb <= 0:
        raise ValueError(f"unit size must be positive, got {unit_mb}MB")
    return (target_mb + unit_mb - 1) // unit_mb


def last_file_size_bytes(target_mb: int, unit_mb: int, count: int) -> int:
    return (target_mb - (count - 1) * unit_mb) * ONE_MB


@dataclass(frozen=True)
class PlannedFile:
    index: int
    byte_limit: int

    @property
    def name(self) -> str:
        return file_name(self.index)


def plan_files(request: DataSetRequest, unit_mb: int) -> List[PlannedFile]:
    """Разбивает размер датасета на файлы, продолжая нумерацию с request.seed.

    Все файлы получают unit_mb, последний — остаток (может совпасть с unit_mb).
    """
    if request.size_mb == 0:
        return []
    count = files_count(request.size_mb, unit_mb)
    unit_bytes = unit_mb * ONE_MB
    last_bytes = last_file_size_bytes(request.size_mb, unit_mb, count)
    last_index = request.seed + count - 1
    return [
        PlannedFile(idx, last_bytes if idx == last_index else unit_bytes)
        for idx in range(request.seed, request.seed + count)
    ]


@dataclass(frozen=True)
class GrowthPlan:
    grow_bytes: int
    gap_bytes: int
    append_bytes: int
    remaining_bytes: int
    unit_mb: int

    @property
    def remaining_mb(self) -> int:
        return self.remaining_bytes // ONE_MB

    def remainder_request(self, name: str, file_count: int) -> DataSetRequest:
        # новые файлы продолжают нумерацию после существующих
        return DataSetRequest(name=name, size_mb=self.remaining_mb, seed=file_count)


def plan_growth(grow_mb: int, smallest_bytes: int, reference_bytes: int) -> GrowthPlan:
    """Делит прирост между дозаписью в самый маленький файл и новыми файлами.

    Самый маленький файл дорастает максимум до размера эталонного файла,
    остаток уходит на генерацию новых файлов размером эталона (в целых MB).
    """
    grow_bytes = grow_mb * ONE_MB
    gap_bytes = reference_bytes - smallest_bytes
    if gap_bytes < 0:
        raise InvariantViolation(
            f"reference file ({reference_bytes}B) is smaller than the smallest file ({smallest_bytes}B)"
        )
    if gap_bytes >= grow_bytes:
        append_bytes = grow_bytes
        remaining_bytes = 0
    else:
        append_bytes = gap_bytes
        remaining_bytes = grow_bytes - gap_bytes

    if append_bytes + remaining_bytes != grow_bytes:
        raise InvariantViolation("growth accounting mismatch while growing the data set")

    return GrowthPlan(
        grow_bytes=grow_bytes,
        gap_bytes=gap_bytes,
        append_bytes=append_bytes,
        remaining_bytes=remaining_bytes,
        unit_mb=reference_bytes // ONE_MB,
    )
