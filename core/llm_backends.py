# core/llm_backends.py
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import httpx
from config.settings import settings
from core.entities import BackendConfig
from util.enums import BackendName
from util.errors import BackendError
import logging
from util.timing import timed

logger = logging.getLogger(__name__)


def build_prompt(rule: str, document: str) -> str:
    """
    Build the user message asking for a strict-JSON verdict on one rule.
    `document` must already be cleaned and length-capped.
    """
    return settings.EVAL_USER_PROMPT.format(rule=rule, document=document)


async def _post_json(
    url: str,
    headers: Dict[str, str],
    payload: Dict[str, Any],
    timeout: float = 60.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """
    Make a JSON POST to `url`. Raises for non-2xx. Returns parsed JSON dict or {} on parse failure.
    """
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        r = await client.post(url, headers=headers, json=payload)
        r.raise_for_status()
        try:
            data = r.json()
        except ValueError:
            return {}
    return data if isinstance(data, dict) else {}


def _first_message_content(data: Dict[str, Any]) -> Any:
    choices = data.get("choices") or []
    if not choices or not isinstance(choices, list):
        return None
    first = choices[0] if isinstance(choices[0], dict) else {}
    message = first.get("message") or {}
    return message.get("content") if isinstance(message, dict) else None


class BackendAdapter(ABC):
    """
    One reasoning backend behind a single capability: prompt in, raw text out.

    Adapters never retry. Any failure (transport, status, empty payload) is
    raised as BackendError so the caller can degrade on its own terms.
    """

    name: BackendName

    def __init__(
        self,
        config: BackendConfig,
        *,
        temperature: float = settings.SAMPLING_TEMPERATURE,
        system_prompt: str = settings.EVAL_SYSTEM_PROMPT,
        http_timeout: float = settings.BACKEND_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._temperature = temperature
        self._system_prompt = system_prompt
        self._http_timeout = http_timeout
        self._transport = transport

    @property
    def model(self) -> str:
        return self._config.model

    def _headers(self) -> Dict[str, str]:
        return {
            "authorization": f"Bearer {self._config.api_key}",
            "content-type": "application/json",
        }

    @abstractmethod
    def _payload(self, prompt: str) -> Dict[str, Any]: ...

    @abstractmethod
    def _extract_text(self, data: Dict[str, Any]) -> str: ...

    async def invoke(self, prompt: str) -> str:
        if not self._config.configured:
            raise BackendError(self.name.value, "not configured")
        try:
            with timed(logger, "ai.evaluate", backend=self.name.value, model=self.model):
                data = await _post_json(
                    self._config.api_url,
                    self._headers(),
                    self._payload(prompt),
                    timeout=self._http_timeout,
                    transport=self._transport,
                )
        except httpx.HTTPStatusError as e:
            raise BackendError(
                self.name.value, f"status={e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(self.name.value, type(e).__name__) from e

        text = (self._extract_text(data) or "").strip()
        if not text:
            raise BackendError(self.name.value, "empty payload")
        return text


class OpenAIAdapter(BackendAdapter):
    name = BackendName.OPENAI

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self._temperature,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": prompt},
            ],
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        content = _first_message_content(data)
        return content if isinstance(content, str) else ""


class MistralAdapter(BackendAdapter):
    name = BackendName.MISTRAL

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self._temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        content = _first_message_content(data)
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            # Chunked content: text chunks carry "text", others may carry "content"
            parts: List[str] = []
            for chunk in content:
                if not isinstance(chunk, dict):
                    continue
                value = chunk["text"] if "text" in chunk else chunk.get("content")
                parts.append(value if isinstance(value, str) else "")
            return "\n".join(parts)
        return ""


class GroqAdapter(BackendAdapter):
    """
    Groq through its OpenAI-compatible Responses endpoint.
    """

    name = BackendName.GROQ

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self._temperature,
            "input": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": prompt},
            ],
        }

    @staticmethod
    def _chunk_text(chunk: Any) -> str:
        if not isinstance(chunk, dict):
            return ""
        text = chunk.get("text")
        if isinstance(text, dict):
            text = text.get("value")
        return text if isinstance(text, str) else ""

    def _extract_text(self, data: Dict[str, Any]) -> str:
        output_text = data.get("output_text")
        if isinstance(output_text, str):
            return output_text
        if isinstance(output_text, list):
            return "\n".join(t for t in output_text if isinstance(t, str))

        output = data.get("output")
        if not isinstance(output, list):
            return ""
        lines: List[str] = []
        for item in output:
            content = item.get("content") if isinstance(item, dict) else None
            if isinstance(content, list):
                lines.append("".join(self._chunk_text(c) for c in content))
            else:
                lines.append("")
        return "\n".join(lines)


_ADAPTERS = {
    BackendName.OPENAI: OpenAIAdapter,
    BackendName.MISTRAL: MistralAdapter,
    BackendName.GROQ: GroqAdapter,
}


def build_adapter(config: BackendConfig, **kwargs: Any) -> BackendAdapter:
    try:
        cls = _ADAPTERS[config.name]
    except KeyError:
        raise ValueError(f"No adapter for backend {config.name}") from None
    return cls(config, **kwargs)
