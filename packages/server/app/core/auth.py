"""
Authentication and Authorization for Shopfloor Hub.

Sessions are owned by the hosted auth service. This module only:
- Verifies the bearer JWT it issues (HS256, shared secret, `sub` = employee id)
- Resolves the calling employee
- Provides role-based authorization dependencies
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_session
from app.models.employee import Employee
from shopfloor_shared.schemas.common import EmployeeRole, SUPERVISOR_ROLES

log = structlog.get_logger()
settings = get_settings()

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    employee_id: uuid.UUID,
    role: str,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token the way the hosted auth service does (scripts and tests)."""
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(employee_id),
        "role": role,
        "iat": now,
        "exp": exp,
        "jti": str(uuid.uuid4()),
    }
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    options = {"verify_aud": settings.jwt_audience is not None}
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options=options,
    )


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

class CurrentEmployee:
    """Container for the authenticated employee."""

    def __init__(self, employee: Employee):
        self.employee = employee
        self.employee_id = employee.id
        self.role = employee.role

    @property
    def is_supervisor(self) -> bool:
        return self.role in {r.value for r in SUPERVISOR_ROLES}

    def can_act_for(self, employee_id: uuid.UUID) -> bool:
        return self.is_supervisor or self.employee_id == employee_id


async def get_current_employee(
    request: Request,
    authorization: Optional[str] = Depends(authorization_header),
    session: AsyncSession = Depends(get_session),
) -> CurrentEmployee:
    """Main authentication dependency: bearer JWT from the hosted auth service."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authentication required")

    token = authorization[7:].strip()
    try:
        payload = decode_jwt(token)
        employee_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    employee = await session.get(Employee, employee_id)
    if not employee:
        log.warning("auth.unknown_employee", employee_id=str(employee_id))
        raise HTTPException(status_code=401, detail="Employee not found")

    current = CurrentEmployee(employee)
    request.state.employee_id = str(employee.id)
    structlog.contextvars.bind_contextvars(employee_id=str(employee.id))
    return current


# ---------------------------------------------------------------------------
# Authorization dependencies (role checks)
# ---------------------------------------------------------------------------

async def require_employee(
    current: CurrentEmployee = Depends(get_current_employee),
) -> CurrentEmployee:
    """Any authenticated employee can access this endpoint."""
    return current


def require_roles(roles: Iterable[EmployeeRole]):
    """Build a dependency that only admits the given roles."""
    allowed = {r.value for r in roles}

    async def _dependency(
        current: CurrentEmployee = Depends(get_current_employee),
    ) -> CurrentEmployee:
        if current.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail=f"Requires one of roles: {', '.join(sorted(allowed))}",
            )
        return current

    return _dependency


require_supervisor = require_roles(SUPERVISOR_ROLES)
require_admin = require_roles([EmployeeRole.ADMIN])
