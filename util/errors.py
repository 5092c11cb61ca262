from typing import Optional
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)

    @classmethod
    def of(cls, error: ErrorMessage) -> "AppError":
        return cls(error.value.message, error.value.http_status)


class BackendError(Exception):
    """Base for every failure talking to the job-execution backend."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class BackendTransportError(BackendError):
    # network / DNS / timeout
    pass


class BackendHttpError(BackendError):
    def __init__(self, path: str, status_code: int) -> None:
        super().__init__(path, f"HTTP {status_code}")
        self.status_code = status_code


class BackendPayloadError(BackendError):
    def __init__(self, path: str, message: str, payload: Optional[object] = None) -> None:
        super().__init__(path, message)
        self.payload = payload
