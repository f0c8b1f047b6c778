#!/usr/bin/env python3
"""Seed a development database with a few demo devices.

Usage:
    device-hub migrate
    python scripts/seed_devices.py
"""

import asyncio
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from device_hub.audit.service import AuditLedger
from device_hub.common.config import get_settings
from device_hub.common.database import DatabaseManager
from device_hub.devices.service import DeviceRegistry

DEMO_DEVICES = [
    ("sensor1", "Hall A", "2024-01-01 10:00:00"),
    ("sensor2", "Hall B", "2024-01-01 10:05:00"),
    ("pump7", "Water Pump", "2024-01-02 08:30:00"),
]


async def seed_devices() -> None:
    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()

    registry = DeviceRegistry(AuditLedger(settings))

    for enroll_id, name, value in DEMO_DEVICES:
        async with db.get_session() as session:
            await registry.register_or_update(session, enroll_id, name, value)
        print(f"  [upserted] {enroll_id} ({name})")

    await db.close()
    print(f"\nDone. {len(DEMO_DEVICES)} devices seeded.")


if __name__ == "__main__":
    asyncio.run(seed_devices())
