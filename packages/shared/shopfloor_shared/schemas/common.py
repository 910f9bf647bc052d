from enum import Enum
from typing import Optional

from pydantic import BaseModel


class EmployeeRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    WORKER = "worker"
    WORKSTATION = "workstation"
    INSTALLATION_TEAM = "installation_team"


# Roles that receive broadcast rush-order notifications
NOTIFIABLE_ROLES: list["EmployeeRole"] = [
    EmployeeRole.ADMIN,
    EmployeeRole.MANAGER,
    EmployeeRole.WORKER,
    EmployeeRole.INSTALLATION_TEAM,
]

# Roles allowed to act on other employees' notifications and create rush orders
SUPERVISOR_ROLES: list["EmployeeRole"] = [
    EmployeeRole.ADMIN,
    EmployeeRole.MANAGER,
]


class RushOrderStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class BucketStatus(str, Enum):
    CREATED = "created"
    EXISTS = "exists"
    ERROR = "error"


class ErrorDetail(BaseModel):
    code: str
    message: str
    status: int
    retriable: bool = False
    request_id: Optional[str] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
