"""
Typed failures shared by the service layer.

Services never raise for expected failures: they return ``Ok(value)`` or
``Err(ServiceError)``. Routers turn an ``Err`` into an ``HTTPException`` whose
detail carries the kind, a human message and the offending field names.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar, Union

from fastapi import HTTPException, status

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str
    fields: List[str] = field(default_factory=list)

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict:
        return {
            "code": self.status_code,
            "kind": self.kind.value,
            "error": self.message,
            "fields": list(self.fields),
        }


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: ServiceError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def validation(message: str, fields: Optional[List[str]] = None) -> Err:
    return Err(ServiceError(ErrorKind.VALIDATION, message, fields or []))


def conflict(message: str, fields: Optional[List[str]] = None) -> Err:
    return Err(ServiceError(ErrorKind.CONFLICT, message, fields or []))


def not_found(message: str, fields: Optional[List[str]] = None) -> Err:
    return Err(ServiceError(ErrorKind.NOT_FOUND, message, fields or []))


def internal(message: str = "Internal error") -> Err:
    return Err(ServiceError(ErrorKind.INTERNAL, message))


def unwrap(result: Result[T]) -> T:
    """Return the value of an ``Ok`` or raise the matching ``HTTPException``."""
    if isinstance(result, Err):
        raise HTTPException(status_code=result.error.status_code, detail=result.error.to_dict())
    return result.value
