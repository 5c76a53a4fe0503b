from sqlalchemy import Column, DateTime, Float, Integer, Text
from sqlalchemy.sql import func

from ..database import Base


def _iso(value):
    return value.isoformat() if value is not None else None


class InventoryItem(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, autoincrement=True)

    part_number = Column(Text, nullable=True, index=True)
    name = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    location = Column(Text, nullable=True, index=True)

    purchase_price = Column(Float, nullable=False, default=0.0)
    sale_price = Column(Float, nullable=False, default=0.0)
    quantity = Column(Integer, nullable=False, default=0)

    last_modified = Column(DateTime, nullable=False, server_default=func.now())
    # Only moves when a stock count is confirmed explicitly
    last_stock_count = Column(DateTime, nullable=True)

    @property
    def to_schema(self):
        """Full row, JSON-ready. Also used as the audit snapshot."""
        return {
            "id": self.id,
            "part_number": self.part_number,
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "purchase_price": self.purchase_price,
            "sale_price": self.sale_price,
            "quantity": self.quantity,
            "last_modified": _iso(self.last_modified),
            "last_stock_count": _iso(self.last_stock_count),
        }
