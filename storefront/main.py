"""
License Storefront - Main API Entry Point
FastAPI application: catalog, email verification, checkout and order fulfillment
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from storefront import __version__
from storefront.config import settings, validate_database_environment, validate_email_environment
from storefront.database import SessionLocal, init_db
from storefront.exceptions import StorefrontError
from storefront.repositories import ProductRepository
from storefront.routers import auth, licenses, orders, products
from storefront.services.catalog import seed_products

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# ============================================================
# LIFESPAN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: check environment, create tables, seed the catalog"""
    validate_database_environment()
    validate_email_environment()

    init_db()
    db = SessionLocal()
    try:
        seed_products(ProductRepository(db))
    finally:
        db.close()

    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    yield
    logger.info("Shutdown complete")


# ============================================================
# REQUEST LOGGING
# ============================================================

class RequestLogMiddleware(BaseHTTPMiddleware):
    """One log line per /api request: METHOD path status in Nms"""

    max_length = 80

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)

        if request.url.path.startswith("/api"):
            duration = int((time.perf_counter() - start) * 1000)
            line = f"{request.method} {request.url.path} {response.status_code} in {duration}ms"
            if len(line) > self.max_length:
                line = line[: self.max_length - 1] + "…"
            logger.info(line)

        return response


# ============================================================
# APP
# ============================================================

app = FastAPI(
    title=settings.APP_NAME,
    description="Software license storefront - catalog, OTP checkout and license delivery",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLogMiddleware)

app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(auth.router, prefix="/api/auth", tags=["Verification"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(licenses.router, prefix="/api/licenses", tags=["Licenses"])


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Surface the first validation problem only"""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": __version__,
        "status": "online",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
