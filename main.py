# main.py
import logging
from contextlib import asynccontextmanager
from fastapi_limiter import FastAPILimiter
import routes
from util.enums import Environment, Color, ErrorMessage
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from config.settings import settings
from config.cache import close_redis, get_redis, rate_limit_enabled
from core.evaluation import RuleEvaluator
from core.registry import BackendRegistry
from model.api import ErrorResponse
from fastapi.responses import JSONResponse
from util.constants import InternalURIs
from util.errors import AppError
from util.logger import init_logger

logger = logging.getLogger(__name__)


async def _real_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        fwd = request.headers.get("x-forwarded-for")
        if fwd:
            return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    init_logger()
    print(f"{Color.GREEN}Initializing...{Color.RESET}")
    registry = BackendRegistry.from_settings(settings)
    fastApi.state.evaluator = RuleEvaluator(registry)

    if rate_limit_enabled():
        try:
            redis = await get_redis()
            await FastAPILimiter.init(redis, identifier=_real_ip)
        except Exception as e:
            print("Failed to connect to Redis:", e)
            raise
    print(f"{Color.BLUE}Server Started{Color.RESET} backend={registry.default}")

    try:
        yield
    finally:
        if rate_limit_enabled():
            try:
                await close_redis()
            except Exception as e:
                print("Error closing Redis:", e)

        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=settings.ALLOWED_ORIGIN != "*",
    allow_methods=["GET", "POST"],  # Allowed HTTP Methods
    allow_headers=["Authorization", "Content-Type", "Accept"],  # Allowed HTTP Headers
)


@app.get(InternalURIs.HEALTH)
async def health():
    return {"status": "ok"}


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    return JSONResponse(
        status_code=429,
        content={
            "ok": False,
            "error": "rate_limited",
            "message": f"Too many requests. Try again in {settings.RATE_LIMIT_SECONDS}s.",
        },
        headers={"Retry-After": str(settings.RATE_LIMIT_SECONDS)},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc, AppError):
        content = ErrorResponse(error=exc.code, message=exc.detail).model_dump()
    elif isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = ErrorResponse(error="http_error", message=str(exc.detail)).model_dump()
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("request.unhandled path=%s", request.url.path, exc_info=exc)
    info = ErrorMessage.INTERNAL_ERROR.value
    return JSONResponse(
        status_code=info.http_status,
        content=ErrorResponse(error=info.code, message=info.message).model_dump(),
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
