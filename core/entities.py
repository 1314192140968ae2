# core/entities.py
from dataclasses import dataclass
from typing import Optional, Tuple
from util.enums import BackendName


@dataclass(frozen=True)
class ExtractedText:
    text: str
    page_count: Optional[int]


@dataclass(frozen=True)
class EvaluationContext:
    """
    Request-scoped, read-only bundle shared by every rule evaluation.
    """

    document: str  # cleaned and length-capped
    rules: Tuple[str, ...]
    backend: BackendName


@dataclass(frozen=True)
class BackendConfig:
    name: BackendName
    api_key: Optional[str]
    model: str
    api_url: str

    @property
    def configured(self) -> bool:
        return bool(self.api_key)
