#!/usr/bin/env python3
"""
Seed the database with a small bike-shop catalogue and open purchase orders,
so the receiving screens have something to work on.

Usage:
    python scripts/seed_demo_data.py --dry-run   # nothing written
    python scripts/seed_demo_data.py --confirm   # write to the database
    python scripts/seed_demo_data.py --confirm --token-for 1001

Requires: migrations applied (alembic upgrade head), database reachable.
"""

import asyncio
import sys
from datetime import date, timedelta
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.jwt import create_access_token
from src.core.auth.models import UserRole
from src.core.config import settings
from src.core.database.session import async_session
from src.modules.inventory.models import Part
from src.modules.procurement.models import PurchaseOrder, PurchaseOrderLine, Vendor

VENDORS = [
    ("Pedal Pushers Supply", "780-555-0141"),
    ("Chainline Distributors", "780-555-0177"),
    ("Northern Spoke Co.", None),
]

PARTS = [
    # description, vendor part number, on hand
    ("Brake cable, stainless", "BC-200", 14),
    ("Inner tube 700x25c", "IT-725", 40),
    ("Chain 11-speed", "CH-11", 6),
    ("Bottom bracket BSA", "BB-68", 3),
    ("Handlebar tape, black", "HT-01", 12),
    ("Derailleur hanger #42", "DH-42", 2),
]

# vendor index, days ago (None = not sent yet), [(part index, quantity)]
ORDERS = [
    (0, 2, [(0, 10), (1, 25)]),
    (1, 5, [(2, 4), (3, 2), (5, 3)]),
    (2, 9, [(4, 8)]),
    (0, None, [(1, 10)]),
]


async def seed_vendors(session: AsyncSession) -> list[int]:
    ids: list[int] = []
    for name, phone in VENDORS:
        vendor = await session.scalar(select(Vendor).where(Vendor.name == name))
        if vendor is None:
            vendor = Vendor(name=name, phone=phone)
            session.add(vendor)
            await session.flush()
            print(f"  vendor {name}")
        ids.append(vendor.id)
    return ids


async def seed_parts(session: AsyncSession) -> list[Part]:
    parts: list[Part] = []
    for description, vendor_part_number, on_hand in PARTS:
        part = await session.scalar(
            select(Part).where(Part.vendor_part_number == vendor_part_number)
        )
        if part is None:
            part = Part(
                description=description,
                vendor_part_number=vendor_part_number,
                quantity_on_hand=on_hand,
                quantity_on_order=0,
            )
            session.add(part)
            await session.flush()
            print(f"  part {vendor_part_number} {description}")
        parts.append(part)
    return parts


async def seed_orders(session: AsyncSession, vendor_ids: list[int], parts: list[Part]) -> None:
    existing = await session.scalar(select(PurchaseOrder.id).limit(1))
    if existing:
        print("  purchase orders already present, skipping")
        return

    today = date.today()
    for vendor_index, days_ago, lines in ORDERS:
        order = PurchaseOrder(
            vendor_id=vendor_ids[vendor_index],
            order_date=today - timedelta(days=days_ago) if days_ago is not None else None,
            closed=False,
            remove_from_view=False,
        )
        session.add(order)
        await session.flush()
        for part_index, quantity in lines:
            part = parts[part_index]
            session.add(
                PurchaseOrderLine(purchase_order_id=order.id, part_id=part.id, quantity=quantity)
            )
            if order.order_date is not None:
                part.quantity_on_order += quantity
        print(f"  purchase order {order.id} ({len(lines)} lines)")
    await session.flush()


async def run_seed(session: AsyncSession, dry_run: bool) -> None:
    vendor_ids = await seed_vendors(session)
    parts = await seed_parts(session)
    await seed_orders(session, vendor_ids, parts)

    if dry_run:
        await session.rollback()
        print("\n[DRY-RUN] Rolled back, no data written.")
    else:
        await session.commit()
        print("\nSeed completed successfully.")


async def main() -> None:
    import argparse
    parser = argparse.ArgumentParser(description="Seed database with receiving demo data")
    parser.add_argument("--dry-run", action="store_true", help="Do not commit")
    parser.add_argument("--confirm", action="store_true", help="Commit changes")
    parser.add_argument(
        "--token-for",
        metavar="EMPLOYEE_ID",
        help="Also print a Parts Manager access token for this employee id",
    )
    args = parser.parse_args()
    if not args.dry_run and not args.confirm:
        print("Use --dry-run or --confirm")
        sys.exit(1)

    print("Database:", settings.database_url.split("@")[-1] if "@" in settings.database_url else "?")
    print("Mode:", "DRY-RUN" if args.dry_run else "CONFIRM")
    async with async_session() as session:
        await run_seed(session, dry_run=args.dry_run)

    if args.token_for:
        token = create_access_token(args.token_for, UserRole.PARTS_MANAGER.value, "Demo Manager")
        print(f"\nAccess token for employee {args.token_for}:\n{token}")
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
