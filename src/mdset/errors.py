class MasterDataSetError(Exception):
    """Базовая ошибка mdset."""


class ConfigurationError(MasterDataSetError):
    """Неверные аргументы или конфиг: обнаруживается до любых операций с диском."""


class PreconditionError(MasterDataSetError):
    """Не выполнено обязательное условие режима (например, нет входной папки)."""


class FileOperationError(MasterDataSetError):
    def __init__(self, operation: str, path, cause: OSError):
        self.operation = operation
        self.path = path
        self.cause = cause
        super().__init__(f"{operation}: {path}: {cause}")


class DataSetError(MasterDataSetError):
    """Отдельный датасет нельзя обработать; остальные продолжают работу."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"data set {name}: {reason}")


class InvariantViolation(AssertionError):
    """Нарушен внутренний инвариант. Не перехватывается по датасетам."""
