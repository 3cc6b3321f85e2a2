import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Uvicorn nereden çalışırsa çalışsın .env proje kökünden yüklensin
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlmodel import Session
from starlette.exceptions import HTTPException

from aesthco.api.addresses import router as addresses_router
from aesthco.api.auth import router as auth_router
from aesthco.api.cart import router as cart_router
from aesthco.api.coupons import router as coupons_router
from aesthco.api.orders import router as orders_router
from aesthco.core import database
from aesthco.core.config import cors_origins_list, settings
from aesthco.core.errors import ShopError
from aesthco.core.rate_limit import limiter
from aesthco.logging import request_id_var, setup_logging
from aesthco.models import ErrorLog

setup_logging(level=settings.log_level)
log = logging.getLogger("aesthco")


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.init_db()
    log.info("aesthco started environment=%s currency=%s", settings.environment, settings.currency)
    yield


app = FastAPI(
    title="Aesthco API",
    description="Storefront backend: cart, checkout, coupons and order fulfilment",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, message: str, **extra) -> JSONResponse:
    body = {"error": message, "status_code": status_code, **extra}
    rid = getattr(request.state, "request_id", None)
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(ShopError)
def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    payload = exc.as_dict()
    message = payload.pop("error")
    if exc.status_code >= 500:
        log.error("domain error path=%s code=%s: %s", request.url.path, exc.code, message)
    return _error_response(request, exc.status_code, message, **payload)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("rate limit exceeded path=%s limit=%s", request.url.path, exc.detail)
    return _error_response(request, 429, "Too many requests", code="rate_limited", detail=str(exc.detail))


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.info("request validation error path=%s method=%s", request.url.path, request.method)
    first = errs[0] if errs else {}
    loc = [str(p) for p in (first.get("loc") or []) if p != "body"]
    msg = first.get("msg") or "Invalid request"
    if loc:
        msg = f"{'.'.join(loc)}: {msg}"
    # ctx içinde ValueError nesnesi olabilir; JSON'a çevrilebilir hale getir
    detail = jsonable_encoder([{k: v for k, v in e.items() if k != "ctx"} for e in errs])
    return _error_response(request, 422, msg, code="validation_error", detail=detail)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(request, exc.status_code, detail, code="http_error")


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc)
    try:
        with Session(database.engine) as db:
            db.add(
                ErrorLog(
                    request_id=getattr(request.state, "request_id", None),
                    endpoint=request.url.path,
                    method=request.method,
                    error_type=type(exc).__name__,
                    error_message=str(exc)[:2000],
                    stack_trace=traceback.format_exc()[:10000],
                )
            )
            db.commit()
    except Exception as e:
        log.warning("ErrorLog write failed: %s", e)
    return _error_response(request, 500, "Unexpected server error", code="internal_error")


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    token = request_id_var.set(request.state.request_id)
    start = time.perf_counter()
    try:
        response = await call_next(request)
        latency_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request.state.request_id
        log.info(
            "method=%s path=%s status=%s latency_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            latency_ms,
        )
        return response
    finally:
        request_id_var.reset(token)


app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(addresses_router)
app.include_router(cart_router)
app.include_router(coupons_router)
app.include_router(orders_router)


@app.get("/health")
def health():
    return {"status": "ok", "database": "ok" if database.ping() else "error"}
