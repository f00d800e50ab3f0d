# clinicdesk/routers/health.py
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from .. import presentation, schemas
from ..config import Settings
from ..dependencies import get_app_settings, get_store
from ..models import Collection
from ..store import CollectionStore, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health Checks"])


@router.get("/health", response_model=schemas.HealthStatus)
def health_check(
    store: CollectionStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Liveness plus a record count per collection."""
    try:
        counts = {c.value: len(store.load(c)) for c in Collection}
    except StoreError as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Store unavailable")

    return schemas.HealthStatus(
        status="ok",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        collections=counts,
    )


@router.get("/meta/labels", response_model=Dict[str, Dict[str, str]])
def read_labels():
    """Display labels for every enum the UI renders."""
    return presentation.all_labels()
