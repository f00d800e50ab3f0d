# clinicdesk/services/auth_service.py
"""Mock authentication.

Every seeded account shares one demo password and tokens are opaque strings
carrying the user id; nothing here is fit for real credentials.
"""
import logging
from typing import Optional

from .. import schemas
from ..models import Collection
from .base import BaseService

logger = logging.getLogger(__name__)

MOCK_PASSWORD = "password123"
TOKEN_PREFIX = "mock-jwt-token-"


def issue_token(user_id: str, epoch_ms: int) -> str:
    return f"{TOKEN_PREFIX}{user_id}-{epoch_ms}"


def user_id_from_token(token: str) -> Optional[str]:
    """Pull the user id out of `mock-jwt-token-{user_id}-{epoch_ms}`."""
    if not token or not token.startswith(TOKEN_PREFIX):
        return None
    user_id, _, stamp = token[len(TOKEN_PREFIX):].rpartition("-")
    if not user_id or not stamp.isdigit():
        return None
    return user_id


class AuthService(BaseService):

    async def login(self, email: str, password: str) -> schemas.ServiceResult[schemas.LoginResponse]:
        await self._simulate_latency()

        users = self._load(Collection.users, schemas.User)
        user = next((u for u in users if u.email.lower() == email.lower()), None)
        if user is None or password != MOCK_PASSWORD or not user.is_active:
            logger.warning(f"Failed login attempt for {email}")
            return schemas.ServiceResult.unauthorized("Invalid email or password")

        now = self.clock()
        user.last_login = now
        self._save(Collection.users, users)

        token = issue_token(user.id, int(now.timestamp() * 1000))
        self.audit.log("LOGIN", "user", user.id, user_id=user.id)
        return schemas.ServiceResult.ok(schemas.LoginResponse(user=user, token=token))

    async def logout(self, user: Optional[schemas.User]) -> schemas.ServiceResult[None]:
        await self._simulate_latency(min(self.delay_ms, 200))
        if user is not None:
            self.audit.log("LOGOUT", "user", user.id, user_id=user.id)
        return schemas.ServiceResult.ok()

    async def validate_token(self, token: str) -> bool:
        await self._simulate_latency(min(self.delay_ms, 100))
        return user_id_from_token(token) is not None

    def get_user_for_token(self, token: str) -> Optional[schemas.User]:
        user_id = user_id_from_token(token)
        if user_id is None:
            return None
        user = self._find(Collection.users, schemas.User, user_id)
        if user is None or not user.is_active:
            return None
        return user
