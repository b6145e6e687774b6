from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from ...config import get_config
from .inventory import InventoryModel


class SearchBy(str, Enum):
    """Field the criteria string is matched against."""
    PART_NUMBER = "PartNumber"
    DESCRIPTION = "Description"
    SUPPLIER_SKU = "SupplierSKU"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SearchBy":
        """Case-insensitive lookup; blank or unknown values mean PartNumber."""
        wanted = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return cls.PART_NUMBER


class SortField(str, Enum):
    """Sortable inventory columns, by wire name."""
    PART_NUMBER = "partNumber"
    DESCRIPTION = "description"
    BRANCH = "branch"
    AVAILABLE_QTY = "availableQty"
    UOM = "uom"
    LEAD_TIME_DAYS = "leadTimeDays"
    LAST_PURCHASE_DATE = "lastPurchaseDate"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortField":
        """Case-insensitive lookup; unknown names fall back to partNumber."""
        wanted = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return cls.PART_NUMBER


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortSpec(InventoryModel):
    """Sort field plus direction."""
    field: SortField = Field(default=SortField.PART_NUMBER, description="Column to sort by")
    direction: SortDirection = Field(default=SortDirection.ASC, description="Sort direction")

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SortSpec"]:
        """Parse ``<field>:<asc|desc>``. Blank input means no explicit sort."""
        if value is None or not value.strip():
            return None
        field, _, direction = value.partition(":")
        direction = direction.strip().lower()
        return cls(
            field=SortField.parse(field),
            direction=SortDirection.DESC if direction == "desc" else SortDirection.ASC,
        )

    def to_param(self) -> str:
        return f"{self.field.value}:{self.direction.value}"


class SearchQuery(InventoryModel):
    """Inventory search request.

    Criteria is trimmed, negative pages clamp to 0 and non-positive sizes clamp
    to the default page size. A missing sort means partNumber ascending.
    """
    criteria: str = Field(default="", description="Text criteria; empty matches everything")
    by: SearchBy = Field(default=SearchBy.PART_NUMBER, description="Field the criteria applies to")
    branches: List[str] = Field(default_factory=list, description="Branch codes; empty means all branches")
    only_available: bool = Field(default=False, description="Keep only items with quantity above zero")
    sort: Optional[SortSpec] = Field(default=None, description="Requested sort, if any")
    page: int = Field(default=0, description="Zero-based page index")
    size: int = Field(default_factory=lambda: get_config().default_page_size, description="Page size")

    @field_validator("criteria", mode="before")
    @classmethod
    def _strip_criteria(cls, value):
        return (value or "").strip()

    @field_validator("by", mode="before")
    @classmethod
    def _parse_by(cls, value):
        if isinstance(value, SearchBy):
            return value
        return SearchBy.parse(value)

    @field_validator("branches", mode="before")
    @classmethod
    def _split_branches(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [branch.strip() for branch in value if branch and branch.strip()]

    @field_validator("sort", mode="before")
    @classmethod
    def _parse_sort(cls, value):
        if isinstance(value, str):
            return SortSpec.parse(value)
        return value

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value):
        value = int(value or 0)
        return value if value > 0 else 0

    @field_validator("size", mode="before")
    @classmethod
    def _clamp_size(cls, value):
        value = int(value or 0)
        return value if value > 0 else get_config().default_page_size

    @property
    def effective_sort(self) -> SortSpec:
        return self.sort or SortSpec()
