from sqlalchemy import Column, DateTime, Integer, Text
from sqlalchemy.sql import func

from .database import Base

AUDIT_ACTIONS = ("CREATE", "UPDATE", "DELETE")


class AuditLog(Base):
    """Append-only record of one inventory mutation. Rows are never updated or deleted."""
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, index=True)
    action = Column(Text, nullable=False)  # 'CREATE' | 'UPDATE' | 'DELETE'

    # JSON text snapshots of the inventory row
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)

    timestamp = Column(DateTime, nullable=False, server_default=func.now(), index=True)
