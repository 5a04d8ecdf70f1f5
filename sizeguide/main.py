import os
import time
import hashlib
from typing import Dict
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from .cache import cache_stats
from .config import settings
from .routers.ocr import router as ocr_router
from .routers.recommend import router as recommend_router
from .routers.translate import router as translate_router
from .security import create_jwt


logger = structlog.get_logger("sizeguide")


app = FastAPI(title="Size Guide OCR & Fit Recommender", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Token-bucket rate limit per client ip
_buckets: Dict[str, tuple[float, float]] = {}


def _rate_limit(ident: str, requests_per_min: int, burst: int) -> bool:
    refill_rate = requests_per_min / 60.0
    capacity = float(burst)
    now = time.time()
    tokens, last = _buckets.get(ident, (capacity, now))
    tokens = min(capacity, tokens + refill_rate * (now - last))
    if tokens < 1.0:
        _buckets[ident] = (tokens, now)
        return False
    _buckets[ident] = (tokens - 1.0, now)
    return True


def _request_id(request: Request) -> str:
    return hashlib.md5(f"{request.client.host if request.client else 'unknown'}{time.time()}".encode()).hexdigest()[:8]


def _validate_config() -> None:
    strict = os.getenv("STRICT_CONFIG", "0") == "1"
    errors = []
    if not settings.api_key or settings.api_key == "change-me":
        errors.append("API_KEY must be set to a secure value")
    if settings.jwt_secret == "dev-secret":
        errors.append("JWT_SECRET must be set to a secure value")
    if not settings.ocr_api_base:
        errors.append("OCR_API_BASE must be set")
    if settings.ocr_timeout_seconds <= 0:
        errors.append("OCR_TIMEOUT_SECONDS must be positive")
    if errors:
        if strict:
            raise RuntimeError("Configuration error: " + "; ".join(errors))
        else:
            for e in errors:
                logger.warning("config_warning", warning=e)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    request_id = _request_id(request)
    resp = None

    try:
        client_ip = request.client.host if request.client else "unknown"
        if not _rate_limit(client_ip, settings.rate_limit_per_min, settings.rate_limit_burst):
            logger.warning("rate_limit_exceeded", client_ip=client_ip, request_id=request_id)
            resp = JSONResponse(status_code=429, content={"detail": "Too Many Requests"})
            return resp

        logger.info("request_started",
                   request_id=request_id,
                   path=str(request.url.path),
                   method=request.method,
                   client_ip=client_ip,
                   user_agent=request.headers.get("user-agent", "unknown"),
                   content_type=request.headers.get("content-type", "unknown"))

        resp = await call_next(request)
        return resp

    except Exception as e:
        duration_ms = int((time.time() - start) * 1000)
        logger.error("request_failed",
                    request_id=request_id,
                    path=str(request.url.path),
                    method=request.method,
                    error=str(e),
                    duration_ms=duration_ms,
                    exc_info=True)
        raise
    finally:
        duration_ms = int((time.time() - start) * 1000)
        status_code = getattr(resp, "status_code", 0) if resp else 0
        logger.info("request_completed",
                   request_id=request_id,
                   path=str(request.url.path),
                   method=request.method,
                   status=status_code,
                   duration_ms=duration_ms)


@app.exception_handler(Exception)
async def handle_exceptions(request: Request, exc: Exception):
    request_id = _request_id(request)

    logger.error("unhandled_exception",
                request_id=request_id,
                path=str(request.url.path),
                method=request.method,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_code": "INTERNAL_ERROR",
            "request_id": request_id,
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
        }
    )


@app.get("/v1/health")
async def health():
    return {"status": "ok"}


@app.get("/v1/debug/status")
async def debug_status():
    """Cache and rate limiter state for this process."""
    return {
        "status": "ok",
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "ocr": {
            "api_base": settings.ocr_api_base,
            "language": settings.ocr_language,
        },
        "cache": cache_stats(),
        "rate_limiting": {
            "requests_per_min": settings.rate_limit_per_min,
            "burst_capacity": settings.rate_limit_burst,
            "active_buckets": len(_buckets)
        }
    }


@app.post("/v1/auth/token")
async def issue_token():
    token = create_jwt("sizeguide-client")
    return {"token": token}


# Routers under versioned prefix
app.include_router(ocr_router, prefix="/v1")
app.include_router(recommend_router, prefix="/v1")
app.include_router(translate_router, prefix="/v1")

# Validate configuration at import time (warnings by default; set STRICT_CONFIG=1 to enforce)
_validate_config()
