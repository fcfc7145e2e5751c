"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 4 vehicle types (one per tariff profile)
  - 12 vehicles (plates registered in Malang, "N" prefix)
  - 3 tour packages
"""

import asyncio

from sqlalchemy import text

from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.models import TourPackageModel, VehicleModel, VehicleTypeModel

VEHICLE_TYPES = [
    {"name": "Angkot", "seat_capacity": 12, "units": 4},
    {"name": "Elf", "seat_capacity": 19, "units": 3},
    {"name": "Hiace Commuter", "seat_capacity": 14, "units": 3},
    {"name": "Hiace Premio", "seat_capacity": 10, "units": 2},
]

TOUR_PACKAGES = [
    {"name": "Bromo Sunrise Jeep Tour", "price": 850_000},
    {"name": "Batu City Family Day", "price": 650_000},
    {"name": "Malang Heritage Walk", "price": 250_000},
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM vehicle_types"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Vehicle types & vehicles ──────────────────────────────────
        plate = 1000
        vehicle_count = 0
        for vt in VEHICLE_TYPES:
            m = VehicleTypeModel(name=vt["name"], seat_capacity=vt["seat_capacity"])
            session.add(m)
            await session.flush()
            for _ in range(vt["units"]):
                plate += 1
                session.add(VehicleModel(vehicle_type_id=m.id, plate_number=f"N {plate} AB"))
                vehicle_count += 1
        await session.flush()
        print(f"  Created {len(VEHICLE_TYPES)} vehicle types, {vehicle_count} vehicles")

        # ── Tour packages ─────────────────────────────────────────────
        for p in TOUR_PACKAGES:
            session.add(TourPackageModel(name=p["name"], price=p["price"]))
        await session.flush()
        print(f"  Created {len(TOUR_PACKAGES)} tour packages")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
