# medistore/domain/errors.py
from enum import Enum


class ErrorKind(Enum):
    """
    Every failure the services know about, tagged with the code sent to
    clients and the HTTP status it maps to.
    """

    VALIDATION = ("VALIDATION_ERROR", 400)
    EMPTY_CART = ("EMPTY_CART", 400)
    MEDICINE_UNAVAILABLE = ("MEDICINE_UNAVAILABLE", 400)
    ILLEGAL_TRANSITION = ("ILLEGAL_TRANSITION", 400)
    CANCEL_NOT_ALLOWED = ("CANCEL_NOT_ALLOWED", 400)
    UNAUTHORIZED = ("UNAUTHORIZED", 401)
    FORBIDDEN = ("FORBIDDEN", 403)
    NOT_FOUND = ("NOT_FOUND", 404)
    CONFLICT = ("CONFLICT", 409)
    INSUFFICIENT_STOCK = ("INSUFFICIENT_STOCK", 409)
    INTERNAL = ("INTERNAL_ERROR", 500)
    RETRYABLE = ("RETRYABLE", 503)

    def __init__(self, code: str, http_status: int):
        self.code = code
        self.http_status = http_status


class ServiceError(Exception):
    """Single error type raised by services; the kind decides the response."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def http_status(self) -> int:
        return self.kind.http_status

    def __repr__(self) -> str:
        return f"ServiceError({self.kind.name}, {self.message!r})"
