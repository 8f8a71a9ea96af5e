import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root wherever uvicorn is started from
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.api import api_router
from app.core.config import cors_origins_list, settings
from app.core.rate_limit import limiter
from app.logging import setup_logging
from app.schemas import PricingConfigResponse
from app.services.refund import TierScheduleInvalid

setup_logging(level=settings.log_level, engine_level=settings.engine_log_level)
log = logging.getLogger("tiffin")


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(
        "Pricing engine ready: environment=%s currency=%s student_discount=%s%%",
        settings.environment,
        settings.currency,
        settings.student_discount_percent,
    )
    yield


app = FastAPI(
    title="Tiffin Pricing API",
    description="Pricing, coupon, refund tier and delivery coverage decisions for meal subscriptions",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, error: str, **extra) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": error, "status_code": status_code, **extra}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("Rate limit exceeded: path=%s limit=%s", request.url.path, exc.detail)
    return _error_response(request, 429, "Too many requests", detail=f"Rate limit exceeded: {exc.detail}")


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(TierScheduleInvalid)
def tier_schedule_handler(request: Request, exc: TierScheduleInvalid) -> JSONResponse:
    log.info("Refund policy rejected: %d violation(s)", len(exc.violations))
    return _error_response(
        request,
        422,
        "Refund policy is invalid.",
        violations=[v.model_dump() for v in exc.violations],
    )


def _jsonable_errors(errs) -> list[dict]:
    # ctx may hold exception objects that JSON cannot carry; input echoes the body
    return [{k: (str(v) if k == "ctx" else v) for k, v in e.items() if k != "input"} for e in errs]


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.warning(
        "Request validation error (422): path=%s method=%s detail=%s",
        request.url.path,
        request.method,
        errs,
    )
    first = errs[0].get("msg") if errs else None
    return _error_response(request, 422, first or "Invalid request.", detail=_jsonable_errors(errs))


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail if isinstance(exc.detail, str) else str(exc.detail))


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc)
    return _error_response(request, 500, "Unexpected server error.")


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)


@app.get("/health")
@limiter.exempt
def health():
    return {"status": "ok", "environment": settings.environment, "currency": settings.currency}


@app.get("/config/pricing", response_model=PricingConfigResponse)
def pricing_config():
    """Platform defaults the checkout shows before a quote is requested."""
    return PricingConfigResponse(
        currency=settings.currency,
        currency_symbol=settings.currency_symbol,
        student_discount_percent=settings.student_discount_percent,
        subscription_deposit_amount=settings.subscription_deposit_amount,
    )
