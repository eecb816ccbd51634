# transaction_api/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from transaction_api.api.v1 import health, transactions
from transaction_api.core.config import settings
from transaction_api.core.exceptions import ErrorCode, TransactionServiceError
from transaction_api.core.logging import setup_logging
from transaction_api.db import models  # noqa: F401  registers the tables on Base
from transaction_api.db.base import Base
from transaction_api.db.session import engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    Base.metadata.create_all(bind=engine)
    logger.info("Transaction API started")
    yield


app = FastAPI(title="Transaction API", version="0.1.0", lifespan=lifespan)

if settings.CORS_ALLOW_ORIGINS:
    app.add_middleware(
      CORSMiddleware,
      allow_origins=settings.CORS_ALLOW_ORIGINS,
      allow_credentials=True,
      allow_methods=["*"],
      allow_headers=["*"],
    )


@app.exception_handler(TransactionServiceError)
async def handle_service_error(request: Request, exc: TransactionServiceError):
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    # field name -> first message for that field
    details = {}
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        details.setdefault(str(loc[-1]), err.get("msg", "Invalid value"))
    code = ErrorCode.PARAM_VALIDATION_FAILED
    return JSONResponse(
        status_code=code.http_status,
        content={"code": code.code, "message": code.message, "details": details},
    )


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    code = ErrorCode.INTERNAL_SERVER_ERROR
    return JSONResponse(
        status_code=code.http_status,
        content={"code": code.code, "message": code.message, "details": None},
    )


app.include_router(health.router)
app.include_router(transactions.router, prefix="/transactions", tags=["transactions"])


@app.get("/")
def root():
    return {"message": "Transaction API - visit /health"}
