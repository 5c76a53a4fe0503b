from typing import List, Optional

from pydantic import BaseModel


class InventoryItemRead(BaseModel):
    id: int
    part_number: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    purchase_price: float
    sale_price: float
    quantity: int
    last_modified: Optional[str] = None
    last_stock_count: Optional[str] = None


class PaginationRead(BaseModel):
    currentPage: int
    itemsPerPage: int
    totalItems: int
    totalPages: int


class InventoryPage(BaseModel):
    items: List[InventoryItemRead]
    pagination: PaginationRead


class InventoryCreated(BaseModel):
    id: int


class MutationResult(BaseModel):
    success: bool = True


class InventoryReport(BaseModel):
    totalValue: float
    totalItems: int
    items: List[InventoryItemRead]
