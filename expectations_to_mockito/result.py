"""Outcome of a migration call.

``migrate_code``, ``migrate_file`` and ``migrate`` never raise for a file
that cannot be migrated. They return a :class:`Result` instead:

- ``SUCCESS`` carries the migrated source (or target paths),
- ``WARNING`` carries usable data plus messages, e.g. code that could not
  be formatted or files that failed in a multi-file run,
- ``ERROR`` carries the :class:`~expectations_to_mockito.exceptions.MigrationError`
  that stopped the migration, such as a ``StructuralViolation``.

Run details such as ``constructs_rewritten`` or ``generated_code`` travel in
``metadata``.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ResultStatus(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Immutable migration outcome.

    An error result holds no data and a success result holds no error;
    ``warnings`` and ``metadata`` default to empty containers.
    """

    status: ResultStatus
    data: T | None = None
    error: Exception | None = None
    warnings: list[str] | None = None
    metadata: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.status == ResultStatus.SUCCESS and self.error is not None:
            raise ValueError("Success results cannot have errors")
        if self.status == ResultStatus.ERROR and self.data is not None:
            raise ValueError("Error results cannot have data")
        if self.warnings is None:
            object.__setattr__(self, "warnings", [])
        if self.metadata is None:
            object.__setattr__(self, "metadata", {})

    @classmethod
    def success(cls, data: T, metadata: dict[str, Any] | None = None) -> "Result[T]":
        return cls(status=ResultStatus.SUCCESS, data=data, metadata=metadata or {})

    @classmethod
    def failure(cls, error: Exception, metadata: dict[str, Any] | None = None) -> "Result[T]":
        """Wrap the error that stopped a migration."""
        return cls(status=ResultStatus.ERROR, error=error, metadata=metadata or {})

    @classmethod
    def warning(cls, data: T, warnings: list[str], metadata: dict[str, Any] | None = None) -> "Result[T]":
        """Return usable ``data`` together with the problems met producing it.

        Args:
            data: Migrated code or target paths.
            warnings: One message per problem (a formatter failure, a failed file).
            metadata: Optional run details.
        """
        return cls(status=ResultStatus.WARNING, data=data, warnings=warnings, metadata=metadata or {})

    def is_success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    def is_error(self) -> bool:
        return self.status == ResultStatus.ERROR

    def is_warning(self) -> bool:
        return self.status == ResultStatus.WARNING

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Return one run detail, e.g. ``result.get_metadata("constructs_rewritten", 0)``."""
        return (self.metadata or {}).get(key, default)

    def unwrap(self) -> T:
        """Return the migrated data.

        Raises:
            Exception: The stored migration error for an error result.
            RuntimeError: If a non-error result carries no data.
        """
        if self.is_error():
            raise self.error or RuntimeError("Migration failed without an error")
        if self.data is None:
            raise RuntimeError("Result contains no data")
        return self.data

    def __str__(self) -> str:
        if self.is_error():
            return f"Result(error, error={self.error})"
        if self.is_warning():
            return f"Result(warning, data={self.data}, warnings={self.warnings})"
        return f"Result(success, data={self.data})"
