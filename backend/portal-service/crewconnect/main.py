import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crewconnect.api.attendance import router as attendance_router
from crewconnect.api.employees import router as employees_router
from crewconnect.api.leaves import router as leaves_router
from crewconnect.core.config import settings
from crewconnect.core.db import close_client, init_db
from crewconnect.core.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Portal Service",
    version="0.1.0",
    description="Employee portal service (REST + MongoDB): employees, attendance, leave requests",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-csrf-token"],
    max_age=600,
)

register_exception_handlers(app)


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("Starting Portal Service (db=%s)", settings.MONGODB_DB_NAME)
    await init_db()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    close_client()


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "service": "portal-service",
    }


@app.get("/")
async def root():
    return {
        "message": "Portal Service is running",
        "docs": "/docs",
    }


app.include_router(employees_router)
app.include_router(attendance_router)
app.include_router(leaves_router)
