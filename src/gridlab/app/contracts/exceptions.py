from __future__ import annotations

from typing import Any, ClassVar


class AppError(Exception):
    """Base of every error the grid reports to its callers.

    `content` is the response body as is: a `message` plus whatever detail the
    raising site attached. `status_code` picks the HTTP status it maps to.
    """

    message: ClassVar[str] = "Internal Server Error"
    status_code: ClassVar[int] = 500

    def __init__(self, message: str | None = None, **detail: Any) -> None:
        super().__init__(message or self.message)
        self.content: dict[str, Any] = {"message": message or self.message, **detail}

    @property
    def raw_message(self) -> str:
        return self.content.get("message") or self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.content!r})"


class DetailedError(AppError):
    def __str__(self) -> str:
        return f"{type(self).__name__}: {self.content!r}"


class BadRequestError(DetailedError):
    message: ClassVar[str] = "Bad Request"
    status_code: ClassVar[int] = 400


class RequestTimeoutError(DetailedError):
    message: ClassVar[str] = "Request Timeout"
    status_code: ClassVar[int] = 408


class ServiceUnavailableError(DetailedError):
    message: ClassVar[str] = "Service Unavailable"
    status_code: ClassVar[int] = 503
