# clinicdesk/main.py
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinicdesk.config import get_settings
from clinicdesk.core.logging import setup_logging
from clinicdesk.database import create_tables
from clinicdesk.dependencies import get_store
from clinicdesk.routers import (
    auth, patients, appointments, triage, queue, billing, consultations,
    diagnostics, dashboard, logs, health,
)
from clinicdesk.seed import initialize_mock_data

settings = get_settings()
setup_logging(settings)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)


@app.on_event("startup")
def on_startup():
    create_tables()
    if settings.seed_on_startup:
        store = app.dependency_overrides.get(get_store, get_store)()
        initialize_mock_data(store)
    logger.info(f"{settings.app_name} started ({settings.environment})")


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(patients.router, prefix="/api/v1")
app.include_router(appointments.router, prefix="/api/v1")
app.include_router(triage.router, prefix="/api/v1")
app.include_router(queue.router, prefix="/api/v1")
app.include_router(billing.router, prefix="/api/v1")
app.include_router(consultations.router, prefix="/api/v1")
app.include_router(diagnostics.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(logs.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1")


if __name__ == "__main__":
    uvicorn.run("clinicdesk.main:app", host="0.0.0.0", port=8000, reload=settings.is_development)
