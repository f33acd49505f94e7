# app/main.py
# Точка входа FastAPI. Проверка конфигурации и создание таблиц выполняются при старте.

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import admin as admin_router
from app.api import auth as auth_router
from app.api import courses as courses_router
from app.api import payments as payments_router
from app.api import results as results_router
from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.db.base import Base
from app.db.session import engine

# Импорт моделей, чтобы SQLAlchemy видел их определения
import app.models.user  # noqa: F401
import app.models.course  # noqa: F401
import app.models.result  # noqa: F401
import app.models.payment  # noqa: F401

settings = get_settings()

# Настройка логирования
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def try_create_tables(retries: int = 5, delay: int = 2) -> bool:
    """
    Пытаемся создать таблицы с повторными попытками.
    Если БД недоступна, логируем ошибку и пробуем снова.

    Args:
        retries: Количество попыток подключения
        delay: Задержка между попытками в секундах

    Returns:
        True если таблицы созданы/существуют, False если все попытки исчерпаны
    """
    for attempt in range(1, retries + 1):
        try:
            logger.info(f"Creating tables ({attempt}/{retries})...")
            Base.metadata.create_all(bind=engine)
            logger.info("✅ Database tables created (or already exist).")
            return True
        except Exception as e:
            logger.warning(f"❌ Attempt {attempt}/{retries} failed to create tables: {e}")
            if attempt < retries:
                logger.info(f"⏳ Waiting {delay}s before retry...")
                time.sleep(delay)
    logger.error(f"❌ Could not create tables after {retries} retries.")
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Управление жизненным циклом приложения.
    Без явного JWT_SECRET приложение не стартует.
    """
    # Startup
    logger.info("🚀 FastAPI starting up...")
    try:
        settings.validate()
    except ValueError as e:
        logger.critical(str(e))
        raise RuntimeError(f"Cannot start application: {e}") from e

    if not try_create_tables(retries=5, delay=2):
        if settings.is_production:
            raise RuntimeError("Cannot start application: database tables creation failed")
        logger.error("⚠️ Failed to create database tables. Application may not work correctly.")

    yield

    # Shutdown
    logger.info("🛑 FastAPI shutting down...")
    engine.dispose()
    logger.info("✅ Database connection closed")


# Создаём FastAPI приложение с управлением жизненным циклом
app = FastAPI(
    title="MyChild Quiz API",
    description="API for the MyChild quiz and course platform",
    version="1.0.0",
    lifespan=lifespan
)

# CORS: в development разрешено всё, в остальных окружениях — только CORS_ORIGINS
if settings.ENVIRONMENT == "development":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
elif settings.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

register_exception_handlers(app)

# Подключаем роутеры
app.include_router(auth_router.router, prefix="/api", tags=["auth"])
app.include_router(admin_router.router, prefix="/api", tags=["admin"])
app.include_router(courses_router.router, prefix="/api", tags=["courses"])
app.include_router(results_router.router, prefix="/api", tags=["results"])
app.include_router(payments_router.router, prefix="/api", tags=["payment"])


# Базовые health check endpoints
@app.get("/", tags=["health"])
async def root():
    """Базовый health check."""
    return {
        "status": "ok",
        "service": "MyChild Quiz API",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health", tags=["health"])
async def health():
    return {"status": "healthy", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower()
    )
