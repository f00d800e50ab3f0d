# clinicdesk/routers/auth.py
import logging
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends

from .. import schemas, security
from ..audit import AuditLogger
from ..config import Settings
from ..dependencies import get_app_settings, get_audit, get_clock, get_store, unwrap
from ..services.auth_service import AuthService
from ..store import CollectionStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)


def get_auth_service(
    store: CollectionStore = Depends(get_store),
    audit: AuditLogger = Depends(get_audit),
    settings: Settings = Depends(get_app_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AuthService:
    return AuthService(store, audit=audit, delay_ms=settings.simulated_delay_ms, clock=clock)


@router.post("/login", response_model=schemas.LoginResponse)
async def login(credentials: schemas.LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Exchange email and password for a bearer token."""
    response = unwrap(await service.login(credentials.email, credentials.password))
    logger.info(f"User '{response.user.email}' successfully authenticated.")
    return response


@router.post("/logout", response_model=schemas.ServiceResult[None])
async def logout(
    current_user: schemas.User = Depends(security.get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return await service.logout(current_user)


@router.get("/me", response_model=schemas.User)
async def read_current_user(current_user: schemas.User = Depends(security.get_current_user)):
    return current_user
