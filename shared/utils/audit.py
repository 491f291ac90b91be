"""
shared/utils/audit.py
Append-only admin action log. Callers commit.
"""

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shared.models.models import AdminLog


def record_admin_action(
    db: AsyncSession,
    admin_id: Optional[uuid.UUID],
    action: str,
    target_type: str,
    target_id: Optional[object] = None,
    details: Optional[dict] = None,
) -> None:
    db.add(AdminLog(
        admin_id=admin_id,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        details=details or {},
    ))
