"""
Script to create an employee for local testing and print a bearer token for it.
"""

import argparse
import asyncio

from sqlmodel import select

from app.core.auth import create_jwt
from app.core.database import get_session_context, init_db
from app.models.employee import Employee
from shopfloor_shared.schemas.common import EmployeeRole


async def create_employee(name: str, email: str, role: EmployeeRole, workstation: str | None):
    await init_db()

    async with get_session_context() as session:
        result = await session.execute(select(Employee).where(Employee.email == email))
        employee = result.scalar_one_or_none()

        if not employee:
            employee = Employee(name=name, email=email, role=role.value, workstation=workstation)
            session.add(employee)
            await session.flush()
            print(f"Created {role.value}: {email}")
        else:
            print(f"Employee {email} already exists.")

        token = create_jwt(employee.id, employee.role)

    print(f"Employee id: {employee.id}")
    print(f"Bearer token: {token}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a local employee and print a dev token.")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--email", required=True, help="Email address for the employee")
    parser.add_argument(
        "--role",
        type=EmployeeRole,
        choices=list(EmployeeRole),
        default=EmployeeRole.ADMIN,
        help="Employee role (default: admin)",
    )
    parser.add_argument("--workstation", default=None, help="Workstation name, if any")

    args = parser.parse_args()

    asyncio.run(create_employee(args.name, args.email, args.role, args.workstation))
