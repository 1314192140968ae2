# service/check_service.py
import json
import logging
from typing import Any, List, Optional, Sequence
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from config.settings import settings
from core.entities import EvaluationContext
from core.evaluation import RuleEvaluator
from core.pdf_text import extract_text
from model.api import BackendInfo, BackendsResponse, CheckMeta, CheckResponse
from util.enums import ErrorMessage
from util.errors import AppError
from util.functions import truncate_text

logger = logging.getLogger(__name__)


def parse_rules(raw: Optional[Sequence[str]], max_rules: int = settings.MAX_RULES) -> List[str]:
    """
    Accepts what a multipart form can carry:
      - one field holding a JSON array of strings (what the UI sends)
      - repeated `rules` fields
      - one plain-text rule
    Non-strings and blanks are dropped, the rest trimmed and capped to `max_rules`.
    """
    if not raw:
        raise AppError.of(ErrorMessage.RULES_REQUIRED)

    items: List[Any] = list(raw)
    if len(items) == 1:
        try:
            decoded = json.loads(items[0])
        except (TypeError, ValueError):
            decoded = None
        if isinstance(decoded, list):
            items = decoded
        elif isinstance(decoded, str):
            items = [decoded]

    rules = [r.strip() for r in items if isinstance(r, str) and r.strip()]
    if not rules:
        raise AppError.of(ErrorMessage.RULES_INVALID)
    return rules[:max_rules]


class CheckService:
    def __init__(self, evaluator: RuleEvaluator) -> None:
        self._evaluator = evaluator

    async def check_document(
        self,
        file: Optional[UploadFile],
        raw_rules: Optional[Sequence[str]],
        provider: Optional[str] = None,
    ) -> CheckResponse:
        """
        Validate input, extract the PDF text once, then evaluate every rule.
        Only input problems are surfaced; backend trouble degrades per rule.
        Logs: sizes, counts and backend only (no payloads).
        """
        if file is None:
            raise AppError.of(ErrorMessage.PDF_REQUIRED)
        rules = parse_rules(raw_rules)
        backend = self._evaluator.effective_backend(provider)

        try:
            data = await file.read()
            await file.seek(0)
        except Exception:
            logger.error("check.file.read.error")
            raise
        if not data:
            raise AppError.of(ErrorMessage.PDF_REQUIRED)

        extracted = await run_in_threadpool(extract_text, data)
        document = truncate_text(extracted.text, settings.DOCUMENT_CHAR_LIMIT)
        if not document:
            logger.warning("check.text.empty bytes=%d", len(data))
            raise AppError.of(ErrorMessage.TEXT_EXTRACTION_FAILED)

        ctx = EvaluationContext(document=document, rules=tuple(rules), backend=backend)
        logger.info(
            "check.start bytes=%d pages=%s chars=%d rules=%d backend=%s",
            len(data),
            extracted.page_count,
            len(document),
            len(rules),
            backend,
        )
        results = await self._evaluator.evaluate_context(ctx)

        logger.info(
            "check.ok rules=%d heuristic=%d",
            len(results),
            sum(1 for r in results if r.source == "heuristic"),
        )
        return CheckResponse(
            meta=CheckMeta(
                pageCount=extracted.page_count,
                model=self._evaluator.registry.model_for(backend),
                textLength=len(document),
            ),
            results=results,
        )

    def describe_backends(self) -> BackendsResponse:
        registry = self._evaluator.registry
        return BackendsResponse(
            default=registry.default,
            model=registry.model_for(registry.default),
            backends=[
                BackendInfo(name=cfg.name, configured=cfg.configured, model=cfg.model)
                for cfg in registry.backends.values()
            ],
        )
