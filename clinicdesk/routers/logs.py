# clinicdesk/routers/logs.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..audit import AuditLogger
from ..dependencies import get_audit
from ..security import require_admin

router = APIRouter(
    tags=["Logs"],
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Not found"}},
)


@router.get("/logs", response_model=List[schemas.AuditLogEntry])
def read_audit_logs(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    user_id: Optional[str] = None,
    action: Optional[str] = None,
    resource: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    audit: AuditLogger = Depends(get_audit),
):
    """
    Retrieve audit log entries, newest first, with optional filtering.
    Only accessible by administrators.
    """
    return audit.entries(
        skip=skip, limit=limit, user_id=user_id, action=action,
        resource=resource, start_date=start_date, end_date=end_date,
    )
