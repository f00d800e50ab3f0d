# clinicdesk/security.py - Bearer-token authentication and role guards
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from . import schemas
from .dependencies import get_store
from .models import UserRole
from .services.auth_service import AuthService
from .store import CollectionStore

security_logger = logging.getLogger("clinicdesk.security")

# OAuth2 scheme; the token itself is the opaque mock token issued at login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    store: CollectionStore = Depends(get_store),
) -> schemas.User:
    """Resolve the bearer token to an active user"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user = AuthService(store).get_user_for_token(token)
    if user is None:
        security_logger.warning("Rejected bearer token")
        raise credentials_exception
    return user


def require_role(*allowed_roles: UserRole):
    """Dependency factory for role-based access control"""
    allowed = {UserRole(r) for r in allowed_roles}

    def role_dependency(current_user: schemas.User = Depends(get_current_user)) -> schemas.User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {', '.join(sorted(r.value for r in allowed))}"
            )
        return current_user

    return role_dependency


# Specific role dependencies
require_admin = require_role(UserRole.admin)
require_triage = require_role(UserRole.triage_nurse, UserRole.admin)
require_clinician = require_role(UserRole.practitioner, UserRole.admin)
require_billing = require_role(UserRole.billing_staff, UserRole.admin, UserRole.receptionist)
require_front_desk = require_role(UserRole.receptionist, UserRole.triage_nurse, UserRole.admin)
require_diagnostics = require_role(UserRole.lab_technician, UserRole.practitioner, UserRole.admin)
require_staff = require_role(*(r for r in UserRole if r != UserRole.patient))
