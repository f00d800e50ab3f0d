# clinicdesk/dependencies.py - Store, clock and service wiring for the routers
from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional, TypeVar

from fastapi import Depends, HTTPException, Request, status

from . import schemas
from .audit import AuditLogger, utc_now
from .config import Settings, get_settings
from .database import SessionLocal
from .store import CollectionStore, SQLAlchemyStore

T = TypeVar("T")

ERROR_STATUS = {
    schemas.ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    schemas.ErrorKind.validation_failed: status.HTTP_400_BAD_REQUEST,
    schemas.ErrorKind.unauthorized: status.HTTP_401_UNAUTHORIZED,
}


@lru_cache()
def get_store() -> CollectionStore:
    """Process-wide store backed by the configured database"""
    return SQLAlchemyStore(SessionLocal)


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_app_settings() -> Settings:
    return get_settings()


def get_audit(
    request: Request,
    store: CollectionStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AuditLogger:
    """Audit logger carrying the caller's address and user agent; the actor is bound later."""
    client_ip = request.client.host if request.client else "127.0.0.1"
    return AuditLogger(store, user_agent=request.headers.get("User-Agent"), ip_address=client_ip, clock=clock)


def unwrap(result: schemas.ServiceResult[T]) -> T:
    """Return the payload of a successful result, or raise the matching HTTP error."""
    if result.success:
        return result.data
    raise HTTPException(
        status_code=ERROR_STATUS.get(result.error_kind, status.HTTP_400_BAD_REQUEST),
        detail=result.error or "Request failed",
    )


def service_factory(service_cls, delay: Optional[Callable[[Settings], int]] = None):
    """Build a dependency that constructs `service_cls` for the current user.

    `delay` picks the simulated latency from settings; defaults to
    `simulated_delay_ms`.
    """
    from .security import get_current_user

    def dependency(
        audit: AuditLogger = Depends(get_audit),
        current_user: schemas.User = Depends(get_current_user),
        store: CollectionStore = Depends(get_store),
        settings: Settings = Depends(get_app_settings),
        clock: Callable[[], datetime] = Depends(get_clock),
    ):
        delay_ms = delay(settings) if delay else settings.simulated_delay_ms
        return service_cls(store, audit=audit.bind(current_user.id), delay_ms=delay_ms, clock=clock)

    return dependency
