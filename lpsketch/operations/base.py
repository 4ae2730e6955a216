"""
LP Sketch - Operation Results
=============================

Structured results for document-mutating operations.

Operations never raise for user-level problems (missing scale, collinear arc,
vanished target). They return an ``OperationResult`` and leave the input
document untouched; on success ``data`` carries the new document.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class ResultStatus(Enum):
    """Status of an operation."""
    SUCCESS = auto()
    WARNING = auto()  # Succeeded with restrictions
    NO_TARGET = auto()  # Referenced element not found
    NO_EFFECT = auto()  # Valid request that changed nothing
    ERROR = auto()


@dataclass
class OperationResult:
    """
    Structured result of a document operation.

    Distinguishes success, idempotent no-ops and validation failures.
    """
    status: ResultStatus
    message: str = ""
    data: Any = None

    @property
    def success(self) -> bool:
        return self.status in (ResultStatus.SUCCESS, ResultStatus.WARNING)

    @property
    def is_error(self) -> bool:
        return self.status == ResultStatus.ERROR

    @property
    def changed(self) -> bool:
        return self.success and self.data is not None

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> 'OperationResult':
        return cls(ResultStatus.SUCCESS, message, data)

    @classmethod
    def warning(cls, message: str, data: Any = None) -> 'OperationResult':
        return cls(ResultStatus.WARNING, message, data)

    @classmethod
    def no_target(cls, message: str = "No target found") -> 'OperationResult':
        return cls(ResultStatus.NO_TARGET, message)

    @classmethod
    def no_effect(cls, message: str = "Nothing changed") -> 'OperationResult':
        return cls(ResultStatus.NO_EFFECT, message)

    @classmethod
    def error(cls, message: str) -> 'OperationResult':
        return cls(ResultStatus.ERROR, message)
