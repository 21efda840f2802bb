"""
Zip Unlimited - FastAPI Application

Главная точка входа backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from .config import settings
from .api import game
from .services.generator import DIFFICULTY_TIERS
from .middleware.security import limiter, add_security_headers


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


# ============================================
# LIFESPAN
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events."""
    logger.info(f"🚀 Starting {settings.APP_NAME}...")
    logger.info(f"🌍 Environment: {settings.ENVIRONMENT}")
    logger.info(f"🐛 Debug mode: {settings.DEBUG}")
    logger.info(f"🧩 Tiers: {', '.join(DIFFICULTY_TIERS)} (max custom grid {settings.MAX_GRID_SIZE})")

    yield

    logger.info(f"🛑 Shutting down ({len(game.session_store)} in-memory session(s) dropped)")


# ============================================
# APP
# ============================================

app = FastAPI(
    title=settings.APP_NAME,
    description="Zip Unlimited API - one path through every cell, numbers in order",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# Rate limiter state
app.state.limiter = limiter


# ============================================
# MIDDLEWARE
# ============================================

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Security headers
app.middleware("http")(add_security_headers)


# ============================================
# ERROR HANDLERS
# ============================================

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handler для rate limit ошибок."""
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please try again later."}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Глобальный обработчик ошибок."""
    # В production не показываем детали ошибок
    logger.exception(f"❌ [Error] {request.method} {request.url.path}: {exc}")
    detail = str(exc) if settings.DEBUG else "Internal server error"

    return JSONResponse(
        status_code=500,
        content={"detail": detail}
    )


# ============================================
# ROUTES
# ============================================

api_prefix = settings.API_PREFIX

app.include_router(game.router, prefix=api_prefix)


# ============================================
# HEALTH CHECK
# ============================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0"
    }


@app.get(f"{api_prefix}/health")
async def api_health_check():
    """Состояние хранилища сессий."""
    return {
        "status": "ok",
        "sessions": len(game.session_store),
        "session_capacity": game.session_store.max_sessions,
    }


# ============================================
# ROOT
# ============================================

@app.get("/")
async def root():
    """Что умеет сервер: уровни сложности и лимиты."""
    return {
        "name": settings.APP_NAME,
        "tiers": list(DIFFICULTY_TIERS),
        "max_grid_size": settings.MAX_GRID_SIZE,
        "max_rewire_iterations": settings.MAX_REWIRE_ITERATIONS,
        "new_game": f"{api_prefix}/game/new",
    }


# ============================================
# RUN
# ============================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "zip_unlimited.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
