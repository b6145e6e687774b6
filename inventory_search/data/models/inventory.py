from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class InventoryModel(BaseModel):
    """Base for wire models: camelCase JSON, snake_case attributes, immutable."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class LotInfo(InventoryModel):
    """A single lot held for an inventory line."""
    lot_number: str = Field(description="Lot number")
    qty: int = Field(ge=0, description="Quantity held in the lot")
    expiration_date: Optional[datetime] = Field(default=None, description="Lot expiration timestamp")


class InventoryItem(InventoryModel):
    """One part stocked at one branch."""
    part_number: str = Field(min_length=1, description="Part identifier, not unique across branches")
    supplier_sku: str = Field(default="", description="Supplier stock keeping unit")
    description: str = Field(default="", description="Part description")
    branch: str = Field(description="Branch code holding the stock")
    available_qty: int = Field(ge=0, description="Available quantity")
    uom: str = Field(default="", description="Unit of measure")
    lead_time_days: Optional[int] = Field(default=None, description="Replenishment lead time in days")
    last_purchase_date: Optional[datetime] = Field(default=None, description="Last purchase timestamp")
    lots: List[LotInfo] = Field(default_factory=list, description="Lots in receiving order")
