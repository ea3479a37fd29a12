import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.api import (
    auth,
    barcodes,
    customers,
    employees,
    integrations,
    inventory,
    locations,
    notifications,
    partners,
    payments,
    reports,
    sales,
    settings as shop_settings,
    users,
)
from app.core.config import settings
from app.core.rate_limit import API_LIMIT_MESSAGE, limiter
from app.db.base import Database
from app.db.seed import seed_defaults
from app.services.scheduler import build_scheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    app.state.database = database
    await database.create_all()
    async with database.session_factory() as session:
        await seed_defaults(session)

    scheduler = build_scheduler(database)
    scheduler.start()
    logger.info("%s started on %s", settings.PROJECT_NAME, database.dialect.name)
    try:
        yield
    finally:
        scheduler.shutdown(wait=False)
        await database.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Point-of-sale backend: inventory, sales, payments, customers and reporting",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting; the middleware only invokes synchronous handlers for RateLimitExceeded
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "errors": errors},
    )


@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit hit by %s on %s", request.client.host if request.client else "-", request.url.path)
    message = exc.detail if exc.limit is not None and exc.limit.error_message else API_LIMIT_MESSAGE
    return JSONResponse(status_code=status.HTTP_429_TOO_MANY_REQUESTS, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Something went wrong!"},
    )


# Routers
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(employees.router, prefix="/api")
app.include_router(customers.router, prefix="/api")
app.include_router(inventory.router, prefix="/api")
app.include_router(locations.router, prefix="/api")
app.include_router(sales.router, prefix="/api")
app.include_router(payments.router, prefix="/api")
app.include_router(reports.router, prefix="/api")
app.include_router(shop_settings.router, prefix="/api")
app.include_router(barcodes.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")
app.include_router(integrations.router, prefix="/api")
app.include_router(partners.router, prefix="/api")


@app.get("/health")
@limiter.exempt
async def health_check(request: Request):
    return {"status": "ok", "version": settings.VERSION}
