# Table models, imported together so the metadata is complete for create_all and Alembic.
from .base import CreatedAtMixin, TimestampMixin, UUIDMixin  # noqa: F401
from .employee import Employee  # noqa: F401
from .rush_order import RushOrder, RushOrderAssignment  # noqa: F401
from .notification import Notification  # noqa: F401
from .rush_order_message import RushOrderMessage, RushOrderMessageReceipt  # noqa: F401
