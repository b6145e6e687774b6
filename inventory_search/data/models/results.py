from __future__ import annotations

from typing import List

from pydantic import Field, model_validator

from .inventory import InventoryItem, InventoryModel


class SearchResult(InventoryModel):
    """One page of matches plus the total match count before pagination."""
    total: int = Field(ge=0, description="Number of matches before pagination")
    items: List[InventoryItem] = Field(default_factory=list, description="Items on the requested page")


class BranchAvailability(InventoryModel):
    """Summed quantity for one branch."""
    branch: str = Field(description="Normalized branch code")
    qty: int = Field(ge=0, description="Quantity summed across the branch's records")


class AvailabilityResult(InventoryModel):
    """Availability of one part aggregated across branches."""
    part_number: str = Field(description="Part identifier")
    total_available: int = Field(ge=0, description="Sum of every branch quantity")
    branches: List[BranchAvailability] = Field(default_factory=list, description="Per-branch sums, largest first")

    @model_validator(mode="after")
    def _total_matches_branches(self):
        if self.total_available != sum(b.qty for b in self.branches):
            raise ValueError("total_available must equal the sum of branch quantities")
        return self
