import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy import text

from . import models  # noqa: F401  регистрирует таблицы в Base.metadata
from .config import settings
from .database import engine, Base, SessionLocal
from .api import api_router
from .api.dependencies import get_current_customer
from .events.producer import event_producer
from .exceptions import CheckoutError, Unauthorized

# Настройка логирования
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def wait_for_db(max_retries: int = 30, delay: int = 2):
    """Ожидает готовности базы данных с повторными попытками"""
    retries = 0
    while retries < max_retries:
        try:
            logger.info(f"Attempting to connect to database (attempt {retries + 1}/{max_retries})...")

            db = SessionLocal()
            try:
                db.execute(text("SELECT 1"))
            finally:
                db.close()

            logger.info("✅ Database connection successful!")
            return True

        except OperationalError:
            retries += 1
            if retries >= max_retries:
                logger.error(f"❌ Failed to connect to database after {max_retries} attempts")
                raise

            logger.warning(f"Database not ready, waiting {delay} seconds... (attempt {retries}/{max_retries})")
            time.sleep(delay)

    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    # Startup
    logger.info("🚀 Starting Checkout Service...")

    try:
        wait_for_db()

        # В проде схемой владеет alembic, create_all только догоняет пустую БД
        Base.metadata.create_all(bind=engine)
        logger.info("✅ Database tables ready")
    except Exception as e:
        logger.error(f"❌ Failed to start Checkout Service: {e}")
        raise

    try:
        await event_producer.start()
    except Exception as e:
        logger.warning(f"⚠️ Kafka unavailable, continuing without events: {e}")

    logger.info("🎉 Checkout Service started successfully!")

    yield  # Приложение работает

    # Shutdown
    logger.info("🛑 Shutting down Checkout Service...")
    await event_producer.stop()
    engine.dispose()
    logger.info("👋 Checkout Service shut down complete")


# Создаем FastAPI приложение
app = FastAPI(
    title=settings.app_name,
    description="Корзина и оформление заказов YourBarrio",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan
)

# Middleware для CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# Подключаем роуты
app.include_router(api_router)


# Health check endpoints
@app.get("/health")
async def health_check():
    """Проверка здоровья сервиса"""
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Database check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unhealthy")
    finally:
        db.close()

    return {
        "status": "healthy",
        "service": settings.app_name,
        "database": db_status,
        "kafka": "connected" if event_producer.producer else "disconnected",
        "version": "1.0.0"
    }


@app.get("/")
async def root():
    """Корневой endpoint"""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "cart": "/api/v1/cart",
            "orders": "/api/v1/orders"
        }
    }


# Exception handlers
@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    if exc.status_code >= 500:
        logger.error(f"❌ {exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Тело разбирается раньше зависимостей: без покупателя отвечаем 401, а не 400
    if request.url.path.startswith(api_router.prefix):
        try:
            get_current_customer(request)
        except Unauthorized as auth_error:
            return JSONResponse(status_code=auth_error.status_code, content=auth_error.to_dict())

    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request", "detail": errors})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Глобальный обработчик исключений"""
    logger.error(f"❌ Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "checkout_service.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info"
    )
