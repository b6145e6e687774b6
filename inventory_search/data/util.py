from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from ..backend.seed_data import gen_inventory
from ..config import get_config
from .backends.memory_backend import MemoryInventoryStore
from .interface import InventoryRepository


def get_inventory_store(kind: Literal["memory"] = "memory", now: Optional[datetime] = None) -> InventoryRepository:
    if kind == "memory":
        # Regenerated from the configured seed on every startup
        config = get_config()
        items = gen_inventory(config.seed_record_count, seed=config.seed_value, now=now)
        return MemoryInventoryStore(items)
    raise ValueError(f"Unknown inventory store kind: {kind}")
