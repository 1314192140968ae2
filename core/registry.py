# core/registry.py
from dataclasses import dataclass
from typing import Dict, Optional
from config.settings import Settings
from core.entities import BackendConfig
from util.enums import BackendName
import logging

logger = logging.getLogger(__name__)

# Auto-selection order when no preference is configured
_PRIORITY = (BackendName.OPENAI, BackendName.MISTRAL, BackendName.GROQ)


@dataclass(frozen=True)
class BackendRegistry:
    """
    Process-wide, read-only view of which reasoning backends are usable.

    Built once at start-up and handed to the evaluator; concurrent requests
    only ever read it.
    """

    backends: Dict[BackendName, BackendConfig]
    default: BackendName

    @classmethod
    def from_settings(cls, s: Settings) -> "BackendRegistry":
        backends = {
            BackendName.OPENAI: BackendConfig(
                name=BackendName.OPENAI,
                api_key=s.OPENAI_API_KEY,
                model=s.OPENAI_MODEL,
                api_url=s.OPENAI_API_URL,
            ),
            BackendName.MISTRAL: BackendConfig(
                name=BackendName.MISTRAL,
                api_key=s.MISTRAL_API_KEY,
                model=s.MISTRAL_MODEL,
                api_url=s.MISTRAL_API_URL,
            ),
            BackendName.GROQ: BackendConfig(
                name=BackendName.GROQ,
                api_key=s.GROQ_API_KEY,
                model=s.GROQ_MODEL,
                api_url=s.GROQ_BASE_URL.rstrip("/") + "/responses",
            ),
        }
        registry = cls(
            backends=backends,
            default=cls._pick_default(backends, BackendName.parse(s.LLM_PROVIDER)),
        )
        logger.info(
            "registry.init default=%s configured=%s",
            registry.default,
            ",".join(str(b.name) for b in registry.configured()) or "none",
        )
        return registry

    @staticmethod
    def _pick_default(
        backends: Dict[BackendName, BackendConfig], preference: Optional[BackendName]
    ) -> BackendName:
        # An explicit preference is honoured or nothing is: no silent fallthrough
        if preference is not None:
            cfg = backends.get(preference)
            return preference if cfg and cfg.configured else BackendName.HEURISTIC
        for name in _PRIORITY:
            if backends[name].configured:
                return name
        return BackendName.HEURISTIC

    def configured(self) -> list[BackendConfig]:
        return [cfg for cfg in self.backends.values() if cfg.configured]

    def is_usable(self, name: BackendName) -> bool:
        if name == BackendName.HEURISTIC:
            return True
        cfg = self.backends.get(name)
        return bool(cfg and cfg.configured)

    def resolve(self, requested: object = None) -> BackendName:
        """
        Requested backend when it is a known selector that can actually run,
        otherwise the process default.
        """
        name = BackendName.parse(requested)
        if name is not None and self.is_usable(name):
            return name
        return self.default

    def get(self, name: BackendName) -> Optional[BackendConfig]:
        return self.backends.get(name)

    def model_for(self, name: BackendName) -> str:
        cfg = self.backends.get(name)
        return cfg.model if cfg else BackendName.HEURISTIC.value
