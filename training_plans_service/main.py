import time
import uuid

import structlog
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from .config import get_settings
from .database import engine
from .logging_config import configure_logging, reset_plan_context
from .models import Base
from .routers import maintenance, schedule, templates, user_plans

configure_logging()
logger = structlog.get_logger(__name__)
settings = get_settings()

tags_metadata = [
    {
        "name": "Plan Templates",
        "description": "Browse the built-in plan catalog and create custom plans.",
    },
    {
        "name": "User Plans",
        "description": "Assign templates to users and track day-by-day progress.",
    },
    {
        "name": "Weekly Schedule",
        "description": "Current-week Sunday..Saturday view and weekday editing.",
    },
    {
        "name": "Maintenance",
        "description": "Duplicate plan day repair and background task status.",
    },
]

app = FastAPI(
    title="Training Plans Service",
    description="Plan templates, user plan instances, weekly schedules and progress tracking",
    version="1.0.0",
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
)

Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("training_plans_service_started", environment=settings.ENVIRONMENT)


@app.on_event("shutdown")
async def shutdown_event():
    await engine.dispose()


app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)
app.add_middleware(
    CorrelationIdMiddleware,
    header_name="X-Request-ID",
    generator=lambda: str(uuid.uuid4()),
    update_request_header=True,
)

app.include_router(templates.router, prefix="/plans", tags=["Plan Templates"])
app.include_router(user_plans.router, prefix="/plans", tags=["User Plans"])
app.include_router(schedule.router, prefix="/plans", tags=["Weekly Schedule"])
app.include_router(maintenance.router, prefix="/plans", tags=["Maintenance"])


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    reset_plan_context()
    start_time = time.time()
    response = await call_next(request)
    response.headers["X-Process-Time"] = str(time.time() - start_time)
    return response
