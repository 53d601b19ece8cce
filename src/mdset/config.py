from __future__ import annotations

from argparse import Namespace
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import ConfigurationError

STRUCTURE_DELIMITER = ","

USAGE = """\
Usage:
  mdset generate <input_folder> <file_size_mb> <name1,size1,name2,size2,...>
  mdset update   <input_folder> <name1,size1,name2,size2,...>
  mdset backup   <input_folder> <backup_folder>"""


class Mode(str, Enum):
    GENERATE = "generate"
    UPDATE = "update"
    BACKUP = "backup"


def _normalize_mode(value: Any) -> Any:
    # GENERATE, Generate и generate — один и тот же режим
    if isinstance(value, str):
        return value.strip().lower()
    return value


class DataSetRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1)
    size_mb: int = Field(
        ge=0,
        validation_alias=AliasChoices("size_mb", "size-mb", "size"),
    )
    # Смещение индекса: новые файлы продолжают нумерацию существующих
    seed: int = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def _plain_folder_name(cls, value: str) -> str:
        value = value.strip()
        if not value or value in {".", ".."} or "/" in value or "\\" in value:
            raise ValueError(f"data set name {value!r} is not a plain folder name")
        return value


class MasterDataSetSpec(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mode: Mode
    input_folder: Path = Field(validation_alias=AliasChoices("input_folder", "input-folder"))
    # Максимальный размер одного файла датасета, MB
    file_size_mb: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("file_size_mb", "file-size-mb", "file_size"),
    )
    data_sets: List[DataSetRequest] = Field(
        default_factory=list,
        validation_alias=AliasChoices("data_sets", "data-sets", "datasets"),
    )
    backup_folder: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("backup_folder", "backup-folder"),
    )
    preserve_attributes: bool = Field(
        default=False,
        validation_alias=AliasChoices("preserve_attributes", "preserve-attributes"),
    )

    @field_validator("mode", mode="before")
    @classmethod
    def _mode_case(cls, value: Any) -> Any:
        return _normalize_mode(value)

    @field_validator("data_sets", mode="before")
    @classmethod
    def _structure_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_structure(value)
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "MasterDataSetSpec":
        names = [ds.name for ds in self.data_sets]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate data set names: {', '.join(duplicates)}")
        if self.mode is Mode.GENERATE and self.file_size_mb == 0:
            if any(ds.size_mb > 0 for ds in self.data_sets):
                raise ValueError("file_size_mb must be positive to generate non-empty data sets")
        return self

    def data_set_folder(self, name: str) -> Path:
        return self.input_folder / name


def to_int(value: str, what: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"{what}: {value!r} is not a number") from None


def parse_structure(text: str) -> List[DataSetRequest]:
    """Разбирает строку вида 'name1,size1,name2,size2' в список запросов."""
    parts = [p.strip() for p in text.split(STRUCTURE_DELIMITER)]
    if len(parts) % 2 != 0:
        raise ConfigurationError(
            "Unmatched data set structure. Expected <name1>,<size1>,<name2>,<size2>"
        )
    requests = []
    for name, size in zip(parts[0::2], parts[1::2]):
        try:
            requests.append(DataSetRequest(name=name, size_mb=to_int(size, f"size of {name}")))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid data set {name!r}: {exc}") from exc
    return requests


def build_spec(**data: Any) -> MasterDataSetSpec:
    try:
        return MasterDataSetSpec(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid master data set specification: {exc}") from exc


def spec_from_args(args: Namespace) -> MasterDataSetSpec:
    """Спецификация из позиционных аргументов generate/update/backup."""
    mode = _normalize_mode(args.cmd)
    data: dict = {"mode": mode, "input_folder": args.input_folder}
    if mode == Mode.GENERATE.value:
        data["file_size_mb"] = to_int(args.file_size_mb, "file_size_mb")
        if data["file_size_mb"] < 0:
            raise ConfigurationError("file_size_mb must be a positive number")
        data["data_sets"] = parse_structure(args.structure)
    elif mode == Mode.UPDATE.value:
        data["data_sets"] = parse_structure(args.structure)
    elif mode == Mode.BACKUP.value:
        data["backup_folder"] = args.backup_folder
        data["preserve_attributes"] = bool(getattr(args, "preserve_attributes", False))
    else:
        raise ConfigurationError(f"Unknown mode {args.cmd}\n{USAGE}")
    return build_spec(**data)


class SpecConfigModel(BaseModel):
    """Файл конфига: все поля необязательны, CLI может их переопределить."""

    model_config = ConfigDict(extra="ignore")

    mode: Optional[str] = None
    input_folder: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("input_folder", "input-folder"),
    )
    file_size_mb: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("file_size_mb", "file-size-mb", "file_size"),
    )
    data_sets: Optional[Any] = Field(
        default=None,
        validation_alias=AliasChoices("data_sets", "data-sets", "datasets"),
    )
    backup_folder: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("backup_folder", "backup-folder"),
    )
    preserve_attributes: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("preserve_attributes", "preserve-attributes"),
    )


def load_spec_config(path: str) -> SpecConfigModel:
    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as fh:
        parsed = yaml.safe_load(fh) or {}
    if isinstance(parsed, dict) and "spec" in parsed and isinstance(parsed["spec"], dict):
        parsed = parsed["spec"]
    if not isinstance(parsed, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping at the top level.")
    try:
        return SpecConfigModel(**parsed)
    except ValidationError as exc:
        raise ValueError(f"Invalid spec configuration in {config_path}: {exc}") from exc


def resolve_spec(cli_args: Namespace, config: Optional[SpecConfigModel]) -> MasterDataSetSpec:
    def pick(name: str, default=None):
        cli_value = getattr(cli_args, name, None)
        if cli_value is not None:
            return cli_value
        if config is not None:
            conf_value = getattr(config, name)
            if conf_value is not None:
                return conf_value
        return default

    mode = pick("mode")
    if mode is None:
        raise ConfigurationError("run: missing mode (use --mode or set in config file)")
    input_folder = pick("input_folder")
    if input_folder is None:
        raise ConfigurationError("run: missing input folder (use --input-folder or set in config file)")

    return build_spec(
        mode=mode,
        input_folder=input_folder,
        file_size_mb=pick("file_size_mb", default=0),
        data_sets=pick("data_sets", default=[]),
        backup_folder=pick("backup_folder"),
        preserve_attributes=bool(pick("preserve_attributes", default=False)),
    )
