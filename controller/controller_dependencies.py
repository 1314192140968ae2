# controller/controller_dependencies.py
from typing import Optional
from fastapi import Depends, File, HTTPException, Request, UploadFile
from fastapi_limiter.depends import RateLimiter
from core.evaluation import RuleEvaluator
from service.check_service import CheckService
from config.cache import rate_limit_enabled
from config.settings import settings


def get_rule_evaluator(request: Request) -> RuleEvaluator:
    # Built once in the lifespan hook; shared read-only by every request
    return request.app.state.evaluator


def get_check_service(
    evaluator: RuleEvaluator = Depends(get_rule_evaluator),
) -> CheckService:
    return CheckService(evaluator)


def rate_limit_dependencies() -> list:
    """Rate limiting needs Redis; without REDIS_URL routes are unthrottled."""
    if not rate_limit_enabled():
        return []
    return [
        Depends(
            RateLimiter(
                times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
            )
        )
    ]


def _too_large() -> HTTPException:
    return HTTPException(
        status_code=413,
        detail={
            "ok": False,
            "error": "file_too_large",
            "message": f"PDF must be at most {settings.MAX_FILE_MB} MB.",
            "maxMb": settings.MAX_FILE_MB,
        },
    )


async def enforce_max_upload_size(
    request: Request, pdf: Optional[UploadFile] = File(None)
) -> Optional[UploadFile]:
    MAX_BYTES = settings.MAX_FILE_MB * 1024 * 1024
    if pdf is None:
        # Missing file is reported by the service with its own message
        return None

    # Fast pre-check via Content-Length if present
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > MAX_BYTES:
        raise _too_large()

    # Hard cap while reading initial bytes (works even if no Content-Length)
    blob = await pdf.read(MAX_BYTES + 1)
    if len(blob) > MAX_BYTES:
        raise _too_large()

    # Reset so downstream can re-read file stream
    await pdf.seek(0)
    return pdf
