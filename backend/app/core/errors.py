"""Service-level error kinds and result values.

Services return a ``ServiceResult`` for expected outcomes (bad input, bad
credentials, missing records) and routes translate the error kind into an HTTP
status with :func:`unwrap`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from fastapi import HTTPException, status

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UPSTREAM: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ServiceResult[T]":
        return cls(error=ServiceError(kind=kind, message=message))


def unwrap(result: ServiceResult[T]) -> T:
    """Return the result value or raise the matching HTTPException."""
    if result.error is not None:
        headers = {"WWW-Authenticate": "Bearer"} if result.error.kind is ErrorKind.AUTH else None
        raise HTTPException(status_code=result.error.status_code, detail=result.error.message, headers=headers)
    return result.value
