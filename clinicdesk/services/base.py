# clinicdesk/services/base.py
import asyncio
import secrets
from datetime import datetime
from typing import Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from ..audit import AuditLogger, utc_now
from ..models import Collection
from ..store import CollectionStore

M = TypeVar("M", bound=BaseModel)


def new_id(prefix: str) -> str:
    return f"{prefix}-{secrets.token_hex(6)}"


class BaseService:
    """Shared plumbing for the domain services.

    Every service gets its store, audit logger and clock injected, and waits
    `delay_ms` before each public operation to stand in for network latency.
    """

    def __init__(
        self,
        store: CollectionStore,
        audit: Optional[AuditLogger] = None,
        delay_ms: int = 0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.audit = audit or AuditLogger(store, clock=clock)
        self.delay_ms = delay_ms
        self.clock = clock

    async def _simulate_latency(self, delay_ms: Optional[int] = None):
        ms = self.delay_ms if delay_ms is None else delay_ms
        if ms > 0:
            await asyncio.sleep(ms / 1000)

    def _load(self, collection: Collection, model: Type[M]) -> List[M]:
        return [model.model_validate(record) for record in self.store.load(collection)]

    def _save(self, collection: Collection, items: List[BaseModel]) -> None:
        self.store.save(collection, [item.model_dump(mode="json") for item in items])

    def _find(self, collection: Collection, model: Type[M], item_id: str) -> Optional[M]:
        for record in self.store.load(collection):
            if record.get("id") == item_id:
                return model.model_validate(record)
        return None
