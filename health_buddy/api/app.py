"""
HealthBuddy — FastAPI Application

Головний файл FastAPI додатку.

Запуск:
    uvicorn health_buddy.api.app:app --reload --host 0.0.0.0 --port 8000

    або:

    python -m health_buddy.api.app
"""

from contextlib import asynccontextmanager
from http import HTTPStatus
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from health_buddy.interview import GatewayError, InterviewError, StateError, ValidationError

from .config import config
from .dependencies import services_manager
from .routes import (
    health_router,
    interviews_router,
    assessments_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle manager — створення клієнтів сервісів при старті.
    """
    print("=" * 60)
    print("🏥 HealthBuddy API Starting...")
    print("=" * 60)

    success = services_manager.load()

    if success:
        print("✅ API ready!")
    else:
        print(f"⚠️ API starting in limited mode: {services_manager.error}")

    print("=" * 60)
    print(f"📍 Swagger UI: http://{config.host}:{config.port}/docs")
    print(f"📍 ReDoc: http://{config.host}:{config.port}/redoc")
    print("=" * 60)

    yield

    print("🛑 HealthBuddy API Stopping...")


# Створюємо додаток
app = FastAPI(
    title=config.api_title,
    description=config.api_description,
    version=config.version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=config.cors_allow_methods,
    allow_headers=config.cors_allow_headers,
)


# Middleware для логування запитів
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    process_time = time.time() - start_time

    # Логуємо тільки API запити
    if request.url.path.startswith(config.api_prefix):
        print(f"📨 {request.method} {request.url.path} → {response.status_code} ({process_time*1000:.1f}ms)")

    return response


# Помилки інтерв'ю → HTTP статуси
ERROR_STATUS = {
    ValidationError: 422,
    StateError: 409,
    GatewayError: 502,
}


@app.exception_handler(InterviewError)
async def interview_exception_handler(request: Request, exc: InterviewError):
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        400,
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.user_message,
            "detail": str(exc),
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": HTTPStatus(exc.status_code).phrase,
            "detail": exc.detail,
        }
    )


# Глобальний обробник помилок
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    print(f"❌ Error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if config.debug else None
        }
    )


# Підключаємо роутери
app.include_router(health_router)
app.include_router(interviews_router, prefix=config.api_prefix)
app.include_router(assessments_router, prefix=config.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "health_buddy.api.app:app",
        host=config.host,
        port=config.port,
        reload=config.reload,
    )
