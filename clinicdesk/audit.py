import secrets
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import structlog

from . import schemas
from .models import Collection
from .store import CollectionStore


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


class AuditLogger:
	"""Appends an immutable entry to the `audit_log` collection for each mutating action."""

	def __init__(
		self,
		store: CollectionStore,
		actor_id: Optional[str] = None,
		user_agent: Optional[str] = None,
		ip_address: str = '127.0.0.1',
		clock: Callable[[], datetime] = utc_now,
	):
		self.store = store
		self.actor_id = actor_id
		self.user_agent = user_agent
		self.ip_address = ip_address
		self.clock = clock
		self.logger = structlog.get_logger('clinicdesk.audit')

	def bind(self, actor_id: Optional[str], user_agent: Optional[str] = None, ip_address: Optional[str] = None) -> 'AuditLogger':
		"""Return a logger that records `actor_id` as the acting user."""
		return AuditLogger(
			self.store,
			actor_id=actor_id,
			user_agent=user_agent or self.user_agent,
			ip_address=ip_address or self.ip_address,
			clock=self.clock,
		)

	def log(
		self,
		action: str,
		resource: str,
		resource_id: str,
		details: Optional[Dict[str, Any]] = None,
		user_id: Optional[str] = None,
	) -> schemas.AuditLogEntry:
		entry = schemas.AuditLogEntry(
			id=f"audit-{secrets.token_hex(6)}",
			user_id=user_id or self.actor_id or 'system',
			action=action.upper(),
			resource=resource,
			resource_id=str(resource_id),
			details=details or {},
			timestamp=self.clock(),
			ip_address=self.ip_address,
			user_agent=self.user_agent,
		)
		entries = self.store.load(Collection.audit_log)
		entries.append(entry.model_dump(mode='json'))
		self.store.save(Collection.audit_log, entries)

		self.logger.info(
			'audit',
			action=entry.action,
			resource=entry.resource,
			resource_id=entry.resource_id,
			user_id=entry.user_id,
		)
		return entry

	def entries(
		self,
		skip: int = 0,
		limit: int = 100,
		user_id: Optional[str] = None,
		action: Optional[str] = None,
		resource: Optional[str] = None,
		start_date: Optional[date] = None,
		end_date: Optional[date] = None,
	) -> List[schemas.AuditLogEntry]:
		"""Entries newest first, optionally filtered."""
		entries = [schemas.AuditLogEntry.model_validate(e) for e in self.store.load(Collection.audit_log)]

		if user_id:
			entries = [e for e in entries if e.user_id == user_id]
		if action:
			entries = [e for e in entries if e.action == action.upper()]
		if resource:
			entries = [e for e in entries if e.resource == resource]
		if start_date:
			start = datetime.combine(start_date, datetime.min.time(), tzinfo=timezone.utc)
			entries = [e for e in entries if e.timestamp >= start]
		if end_date:
			# Include the whole end day
			end = datetime.combine(end_date + timedelta(days=1), datetime.min.time(), tzinfo=timezone.utc)
			entries = [e for e in entries if e.timestamp < end]

		entries.sort(key=lambda e: e.timestamp, reverse=True)
		return entries[skip:skip + limit]
