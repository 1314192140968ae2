import os

# Settings are read at import time; keep the host's keys and .env out of tests
os.environ["APP_ENV"] = "prod"
for _key in (
    "OPENAI_API_KEY",
    "MISTRAL_API_KEY",
    "GROQ_API_KEY",
    "LLM_PROVIDER",
    "REDIS_URL",
):
    os.environ.pop(_key, None)

from typing import Dict, Iterable, Optional

import fitz
import pytest

from core.entities import BackendConfig
from core.registry import BackendRegistry
from util.enums import BackendName

PLAN_TEXT = "This plan starts March 2024. Jane Doe is responsible for delivery."


def make_registry(
    configured: Iterable[BackendName] = (),
    default: Optional[BackendName] = None,
) -> BackendRegistry:
    configured = set(configured)
    backends: Dict[BackendName, BackendConfig] = {
        name: BackendConfig(
            name=name,
            api_key="test-key" if name in configured else None,
            model=f"{name.value}-model",
            api_url=f"https://{name.value}.test/v1/endpoint",
        )
        for name in (BackendName.OPENAI, BackendName.MISTRAL, BackendName.GROQ)
    }
    if default is None:
        default = next(iter(configured), BackendName.HEURISTIC)
    return BackendRegistry(backends=backends, default=default)


def build_pdf(lines: Iterable[str]) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    y = 72
    for line in lines:
        page.insert_text((72, y), line, fontsize=11)
        y += 18
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def plan_pdf() -> bytes:
    return build_pdf(["This plan starts March 2024.", "Jane Doe is responsible for delivery."])
