from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
import uvicorn
import logging
import time
import os

from moneytor.api.routes import analytics, budgets, categories, goals, settings as settings_routes, transactions
from moneytor.config import settings
from moneytor.core.errors import DatabaseError, MoneytorError

# Configure logging first
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# -------------------- Lifespan Manager --------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting %s API (%s)...", settings.PROJECT_NAME, settings.ENVIRONMENT)
    yield
    logger.info("🛑 Shutting down %s API...", settings.PROJECT_NAME)


# -------------------- App Initialization --------------------
app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    version=VERSION,
    description="Personal finance API: transactions, categories, budgets, savings goals and analytics.",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan,
)

# -------------------- CORS Setup --------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)


# -------------------- Logging Middleware --------------------
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    logger.info(f"➡️  {request.method} {request.url} - Client: {request.client.host if request.client else 'Unknown'}")

    try:
        response = await call_next(request)
    except Exception as exc:
        process_time = (time.time() - start_time) * 1000
        logger.error(f"❌ Error processing {request.method} {request.url} - {process_time:.2f}ms: {str(exc)}")
        raise

    process_time = (time.time() - start_time) * 1000
    logger.info(f"⬅️  {response.status_code} for {request.method} {request.url} - {process_time:.2f}ms")
    response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
    return response


# -------------------- Security Headers Middleware --------------------
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    if "server" in response.headers:
        del response.headers["server"]

    return response


# -------------------- Routers --------------------
app.include_router(transactions.router)
app.include_router(categories.router)
app.include_router(budgets.router)
app.include_router(goals.router)
app.include_router(analytics.router)
app.include_router(settings_routes.router)


# -------------------- Basic Routes --------------------
@app.get("/")
async def root():
    return {
        "message": f"{settings.PROJECT_NAME} API is live 🚀",
        "version": VERSION,
        "status": "operational"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get("/info")
async def api_info():
    """API information endpoint"""
    return {
        "name": f"{settings.PROJECT_NAME} API",
        "version": VERSION,
        "environment": settings.ENVIRONMENT,
        "default_currency": settings.DEFAULT_CURRENCY,
        "docs": "/docs" if settings.ENVIRONMENT != "production" else "Disabled in production"
    }


# -------------------- Error Handling --------------------
@app.exception_handler(MoneytorError)
async def moneytor_exception_handler(request: Request, exc: MoneytorError):
    """Domain errors carry their own status and a client-safe message"""
    if isinstance(exc, DatabaseError):
        logger.error(f"Database error for {request.method} {request.url}: {exc.message}")
    else:
        logger.info(f"{exc.status_code} for {request.method} {request.url}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    logger.warning(f"Validation error for {request.method} {request.url}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error for {request.method} {request.url}: {str(exc)}", exc_info=True)

    # Don't expose internal errors in production
    detail = "Internal server error" if settings.ENVIRONMENT == "production" else str(exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": detail},
    )


# -------------------- Run (for local dev) --------------------
if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))

    uvicorn.run(
        "moneytor.main:app",
        host="0.0.0.0",
        port=port,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True
    )
