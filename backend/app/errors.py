"""
Taxonomie des erreurs métier et type Result retourné par les services.

Les services ne lèvent pas d'exception pour un échec métier : ils renvoient
Result.fail(kind, message) et l'appelant branche sur `kind`, jamais sur le texte.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "ValidationError"
    UNAUTHORIZED = "Unauthorized"
    LESSON_NOT_FOUND = "LessonNotFound"
    INVALID_STATUS = "InvalidStatus"
    DATASTORE_UNAVAILABLE = "DatastoreUnavailable"
    DUPLICATE_LESSON = "DuplicateLesson"


# Code HTTP associé à chaque type d'erreur (utilisé par les routers)
HTTP_STATUS_BY_KIND = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.INVALID_STATUS: 400,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.LESSON_NOT_FOUND: 404,
    ErrorKind.DUPLICATE_LESSON: 409,
    ErrorKind.DATASTORE_UNAVAILABLE: 503,
}


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str
    # Renseigné uniquement pour LessonNotFound : dates existantes pour la classe
    available_dates: List[str] = field(default_factory=list)

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.DATASTORE_UNAVAILABLE


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, available_dates: Optional[List[str]] = None) -> "Result[T]":
        return cls(error=ServiceError(kind=kind, message=message, available_dates=available_dates or []))

    @classmethod
    def from_error(cls, error: ServiceError) -> "Result[T]":
        return cls(error=error)
