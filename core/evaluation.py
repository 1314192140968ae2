# core/evaluation.py
import asyncio
from typing import Callable, Dict, List, Sequence
from config.settings import settings
from core import heuristic
from core.entities import BackendConfig, EvaluationContext
from core.llm_backends import BackendAdapter, build_adapter, build_prompt
from core.normalizer import normalize
from core.registry import BackendRegistry
from model.verdict import VerdictResult
from util.enums import BackendName
import logging
from util.timing import timed

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[BackendConfig], BackendAdapter]


class RuleEvaluator:
    """
    Turns (rule, document) into a verdict using the selected backend, and
    degrades to the keyword heuristic whenever the backend cannot answer.

    evaluate_rule never raises for backend problems; evaluate_all keeps the
    caller's rule order.
    """

    def __init__(
        self,
        registry: BackendRegistry,
        *,
        adapter_factory: AdapterFactory = build_adapter,
        timeout_seconds: float = settings.BACKEND_TIMEOUT_SECONDS,
        concurrency: int = settings.EVAL_CONCURRENCY,
    ) -> None:
        self._registry = registry
        self._timeout = timeout_seconds
        self._concurrency = max(1, concurrency)
        self._adapters: Dict[BackendName, BackendAdapter] = {
            cfg.name: adapter_factory(cfg) for cfg in registry.configured()
        }

    @property
    def registry(self) -> BackendRegistry:
        return self._registry

    def effective_backend(self, requested: object = None) -> BackendName:
        return self._registry.resolve(requested)

    async def evaluate_rule(
        self, rule: str, document: str, requested: object = None
    ) -> VerdictResult:
        backend = self.effective_backend(requested)
        # Fallback first so there is always something to return
        fallback = heuristic.evaluate(rule, document)
        if backend == BackendName.HEURISTIC:
            return fallback

        adapter = self._adapters.get(backend)
        if adapter is None:
            return fallback

        try:
            raw = await asyncio.wait_for(
                adapter.invoke(build_prompt(fallback.rule, document)),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "eval.backend.timeout backend=%s after=%.1fs", backend, self._timeout
            )
            return fallback
        except Exception as e:
            logger.warning("eval.backend.error backend=%s err=%s", backend, e)
            return fallback

        if not raw:
            logger.warning("eval.backend.empty backend=%s", backend)
            return fallback
        return normalize(raw, fallback, backend)

    async def evaluate_all(
        self, rules: Sequence[str], document: str, requested: object = None
    ) -> List[VerdictResult]:
        """
        Evaluate every rule concurrently (bounded by the configured concurrency)
        and return verdicts in input order. An unexpected error fails the batch.
        """
        sem = asyncio.Semaphore(self._concurrency)

        async def _one(rule: str) -> VerdictResult:
            async with sem:
                return await self.evaluate_rule(rule, document, requested)

        with timed(logger, "eval.batch", rules=len(rules)):
            results = await asyncio.gather(*(_one(r) for r in rules))
        return list(results)

    async def evaluate_context(self, ctx: EvaluationContext) -> List[VerdictResult]:
        return await self.evaluate_all(ctx.rules, ctx.document, ctx.backend)
