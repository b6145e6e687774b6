#!/usr/bin/env python3
"""
seed_data.py

Generates a deterministic mock inventory for the in-memory store.
The dataset is regenerated from a fixed seed on every startup; the CLI only
exists to inspect or export it.

Shape:
- one record per (part, branch) line; the part number advances every third record
- enough records to page through at least four pages at the default page size

Run:
  python -m inventory_search.backend.seed_data --records 60 --seed 1234 --out inventory.json
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..config import get_config
from ..data.models import InventoryItem, LotInfo

# -----------------------------
# Config & helper structures
# -----------------------------

BRANCHES = ["SEA", "PDX", "SFO", "LAX", "DEN", "DAL", "ORD", "ATL", "JFK"]
UOMS = ["EA", "BX", "CS"]

PART_NUMBER_BASE = 1000
SUPPLIER_SKU_BASE = 5000
RECORDS_PER_PART = 3


# -----------------------------
# Core generators
# -----------------------------

def gen_lots(rng: random.Random, part_index: int, now: datetime) -> List[LotInfo]:
    lots = []
    for lot in range(rng.randint(0, 2)):
        qty = rng.randint(1, 149)
        expires = now + timedelta(days=rng.randint(30, 364)) if rng.randint(0, 1) == 0 else None
        lots.append(LotInfo(lot_number=f"LOT-{part_index}-{lot}", qty=qty, expiration_date=expires))
    return lots


def gen_inventory(n: int, seed: int = 1234, now: Optional[datetime] = None) -> List[InventoryItem]:
    """Build `n` inventory records. Same seed and `now` give the same records."""
    rng = random.Random(seed)
    now = now or datetime.now(timezone.utc)
    items: List[InventoryItem] = []
    part_index = 0

    for i in range(n):
        available = rng.randint(0, 599)
        lead = rng.randint(1, 29) if rng.randint(0, 1) == 0 else None
        last_purchase = now - timedelta(days=rng.randint(5, 199)) if rng.randint(0, 1) == 0 else None

        items.append(InventoryItem(
            part_number=f"PN-{PART_NUMBER_BASE + part_index}",
            supplier_sku=f"SUP-{SUPPLIER_SKU_BASE + part_index}",
            description=f"Mock part {part_index} - {'standard' if i % 2 == 0 else 'premium'}",
            branch=BRANCHES[i % len(BRANCHES)],
            available_qty=available,
            uom=UOMS[i % len(UOMS)],
            lead_time_days=lead,
            last_purchase_date=last_purchase,
            lots=gen_lots(rng, part_index, now),
        ))

        if i % RECORDS_PER_PART == 0:
            part_index += 1

    return items


# -----------------------------
# CLI
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()
    parser = argparse.ArgumentParser(description="Generate the mock inventory dataset.")
    parser.add_argument("--records", type=int, default=config.seed_record_count, help="Number of records")
    parser.add_argument("--seed", type=int, default=config.seed_value, help="Random seed")
    parser.add_argument("--out", default="-", help="Output JSON file, '-' for stdout")
    args = parser.parse_args(argv)

    items = gen_inventory(args.records, seed=args.seed)
    payload = [item.model_dump(mode="json", by_alias=True) for item in items]
    text = json.dumps(payload, indent=2)

    if args.out == "-":
        sys.stdout.write(text + "\n")
    else:
        with open(args.out, "w", encoding="utf-8") as fh:
            fh.write(text + "\n")
        print(f"Wrote {len(items)} records to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
