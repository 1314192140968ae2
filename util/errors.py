# util/errors.py
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self,
        message: str,
        http_status: int = status.HTTP_400_BAD_REQUEST,
        code: str = "bad_request",
    ) -> None:
        super().__init__(status_code=http_status, detail=message)
        self.code = code

    @classmethod
    def of(cls, error: ErrorMessage) -> "AppError":
        info = error.value
        return cls(info.message, info.http_status, info.code)


class BackendError(Exception):
    """
    Raised by a backend adapter when a reasoning backend cannot produce text:
    transport failure, non-2xx status, unreadable envelope or empty payload.
    Never leaves the core; the orchestrator turns it into a heuristic verdict.
    """

    def __init__(self, backend: str, reason: str) -> None:
        super().__init__(f"{backend}: {reason}")
        self.backend = backend
        self.reason = reason
