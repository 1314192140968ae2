import pytest

from config.settings import Settings
from conftest import make_registry
from core.registry import BackendRegistry
from util.enums import BackendName


def _registry(**env) -> BackendRegistry:
    return BackendRegistry.from_settings(Settings(**env))


def test_no_credentials_means_heuristic_only():
    registry = _registry()
    assert registry.default == BackendName.HEURISTIC
    assert registry.configured() == []
    assert registry.resolve("openai") == BackendName.HEURISTIC
    assert registry.model_for(registry.default) == "heuristic"


def test_blank_credentials_count_as_missing():
    registry = _registry(OPENAI_API_KEY="   ", GROQ_API_KEY="")
    assert registry.default == BackendName.HEURISTIC


@pytest.mark.parametrize(
    "env, expected",
    [
        ({"OPENAI_API_KEY": "a", "GROQ_API_KEY": "c"}, BackendName.OPENAI),
        ({"MISTRAL_API_KEY": "b", "GROQ_API_KEY": "c"}, BackendName.MISTRAL),
        ({"GROQ_API_KEY": "c"}, BackendName.GROQ),
        ({"OPENAI_API_KEY": "a", "GROQ_API_KEY": "c", "LLM_PROVIDER": "Groq"}, BackendName.GROQ),
        ({"OPENAI_API_KEY": "a", "LLM_PROVIDER": "groq"}, BackendName.HEURISTIC),
        ({"OPENAI_API_KEY": "a", "LLM_PROVIDER": "heuristic"}, BackendName.HEURISTIC),
        ({"MISTRAL_API_KEY": "b", "LLM_PROVIDER": "anthropic"}, BackendName.MISTRAL),
    ],
)
def test_default_backend_selection(env, expected):
    assert _registry(**env).default == expected


def test_models_and_groq_endpoint_come_from_settings():
    registry = _registry(
        GROQ_API_KEY="c",
        GROQ_MODEL="llama-3.3-70b",
        GROQ_BASE_URL="https://groq.example/openai/v1/",
    )
    cfg = registry.get(BackendName.GROQ)
    assert cfg.model == "llama-3.3-70b"
    assert cfg.api_url == "https://groq.example/openai/v1/responses"
    assert registry.model_for(BackendName.OPENAI) == "gpt-4o-mini"
    assert registry.model_for(BackendName.MISTRAL) == "mistral-medium-latest"


@pytest.mark.parametrize(
    "requested, expected",
    [
        ("mistral", BackendName.MISTRAL),
        (" MISTRAL ", BackendName.MISTRAL),
        ("heuristic", BackendName.HEURISTIC),
        ("groq", BackendName.OPENAI),  # known but unconfigured
        ("claude", BackendName.OPENAI),
        (None, BackendName.OPENAI),
        (42, BackendName.OPENAI),
    ],
)
def test_resolve_requested_backend(requested, expected):
    registry = make_registry(
        [BackendName.OPENAI, BackendName.MISTRAL], default=BackendName.OPENAI
    )
    assert registry.resolve(requested) == expected
