"""Initial schema: employees, rush orders, notifications, rush-order threads and receipts.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ts(name: str, **kwargs) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("now()"),
        **kwargs,
    )


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True, unique=True),
        sa.Column("role", sa.String(), nullable=False, server_default="worker"),
        sa.Column("workstation", sa.String(), nullable=True),
        _ts("created_at"),
    )
    op.create_index("ix_employees_role", "employees", ["role"])

    op.create_table(
        "rush_orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("priority", sa.String(), nullable=False, server_default="critical"),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("employees.id"), nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_rush_orders_created_at", "rush_orders", ["created_at"])

    op.create_table(
        "rush_order_assignments",
        sa.Column("rush_order_id", sa.Uuid(), sa.ForeignKey("rush_orders.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True),
        _ts("created_at"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("rush_order_id", sa.Uuid(), sa.ForeignKey("rush_orders.id"), nullable=True),
        _ts("created_at"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_rush_order_id", "notifications", ["rush_order_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])
    # Unread badge lookups
    op.create_index(
        "ix_notifications_user_unread",
        "notifications",
        ["user_id"],
        postgresql_where=sa.text("read = false"),
    )

    # Authors are not cascaded: a message outlives its author and is shown
    # with an empty name.
    op.create_table(
        "rush_order_messages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("rush_order_id", sa.Uuid(), sa.ForeignKey("rush_orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index(
        "ix_rush_order_messages_thread",
        "rush_order_messages",
        ["rush_order_id", "created_at"],
    )
    op.create_index("ix_rush_order_messages_employee_id", "rush_order_messages", ["employee_id"])

    op.create_table(
        "rush_order_message_reads",
        sa.Column("rush_order_id", sa.Uuid(), sa.ForeignKey("rush_orders.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True),
        _ts("last_read_at"),
    )


def downgrade() -> None:
    op.drop_table("rush_order_message_reads")
    op.drop_index("ix_rush_order_messages_employee_id", table_name="rush_order_messages")
    op.drop_index("ix_rush_order_messages_thread", table_name="rush_order_messages")
    op.drop_table("rush_order_messages")
    op.drop_index("ix_notifications_user_unread", table_name="notifications")
    op.drop_index("ix_notifications_created_at", table_name="notifications")
    op.drop_index("ix_notifications_rush_order_id", table_name="notifications")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("rush_order_assignments")
    op.drop_index("ix_rush_orders_created_at", table_name="rush_orders")
    op.drop_table("rush_orders")
    op.drop_index("ix_employees_role", table_name="employees")
    op.drop_table("employees")
