# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class BackendName(str, Enum):
    GROQ = "groq"
    MISTRAL = "mistral"
    OPENAI = "openai"
    HEURISTIC = "heuristic"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value: object) -> "BackendName | None":
        """Case-insensitive lookup; None for anything outside the closed set."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ErrorInfo(NamedTuple):
    code: str
    message: str
    http_status: int


class ErrorMessage(Enum):
    PDF_REQUIRED = ErrorInfo(
        "pdf_required", "PDF file is required.", status.HTTP_400_BAD_REQUEST
    )
    RULES_REQUIRED = ErrorInfo(
        "rules_required",
        "At least one rule is required.",
        status.HTTP_400_BAD_REQUEST,
    )
    RULES_INVALID = ErrorInfo(
        "rules_invalid", "Rules must be non-empty text.", status.HTTP_400_BAD_REQUEST
    )
    TEXT_EXTRACTION_FAILED = ErrorInfo(
        "text_extraction_failed",
        "Could not extract text from the PDF.",
        422,
    )
    INTERNAL_ERROR = ErrorInfo(
        "internal_error",
        "An unexpected error occurred while checking the document.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
