"""Seed script for the vehicle service ecosystem backend.

Creates baseline development data:
- 2 vehicle owners, each with a vehicle
- 3 service providers (garage, carrier, detailer) with profiles and menus

Idempotent: users that already exist are skipped.
Run with: python seed.py

Passwords come from SEED_USER_PASSWORD, with a development-only fallback.
"""

import asyncio
import os
import sys
from decimal import Decimal

from app.config import settings

if settings.is_production:
    print("ERROR: Cannot seed production database.")
    sys.exit(1)

from app.auth.service import hash_password
from app.database import async_session
from app.models.enums import ServiceCategory, UserRole
from app.repositories.provider_repository import ProviderRepository
from app.repositories.user_repository import UserRepository
from app.repositories.vehicle_repository import VehicleRepository

SEED_USER_PASSWORD = os.environ.get("SEED_USER_PASSWORD", "Test1234!")

SEED_OWNERS = [
    {
        "email": "owner1@vse.lk",
        "name": "Nimal Perera",
        "phone": "+94771234561",
        "district": "Colombo",
        "city": "Dehiwala",
        "vehicle": {"make": "Toyota", "model": "Axio", "year": 2016, "license_plate": "CAB-1234"},
    },
    {
        "email": "owner2@vse.lk",
        "name": "Kumari Silva",
        "phone": "+94771234562",
        "district": "Kandy",
        "city": "Peradeniya",
        "vehicle": {"make": "Honda", "model": "Vezel", "year": 2019, "license_plate": "CAD-5678"},
    },
]

SEED_PROVIDERS = [
    {
        "email": "garage@vse.lk",
        "name": "Ruwan Jayasinghe",
        "phone": "+94771234571",
        "district": "Colombo",
        "city": "Nugegoda",
        "business_name": "Ruwan Auto Care",
        "category": ServiceCategory.GARAGE,
        "street_address": "12 High Level Road",
        "menu": [("Full service", Decimal("15000.00")), ("Oil change", Decimal("4500.00"))],
    },
    {
        "email": "carrier@vse.lk",
        "name": "Saman Fernando",
        "phone": "+94771234572",
        "district": "Gampaha",
        "city": "Negombo",
        "business_name": "Island Vehicle Carriers",
        "category": ServiceCategory.CARRIER,
        "street_address": "88 Main Street",
        "menu": [("Tow within 25 km", Decimal("8000.00"))],
    },
    {
        "email": "detailer@vse.lk",
        "name": "Dilani Wickramasinghe",
        "phone": "+94771234573",
        "district": "Kandy",
        "city": "Kandy",
        "business_name": "Shine Detailing",
        "category": ServiceCategory.DETAILER,
        "street_address": "5 Lake Road",
        "menu": [("Interior detailing", Decimal("6000.00")), ("Ceramic coating", Decimal("45000.00"))],
    },
]


async def seed() -> None:
    async with async_session() as db:
        users = UserRepository(db)
        providers = ProviderRepository(db)
        vehicles = VehicleRepository(db)
        password_hash = hash_password(SEED_USER_PASSWORD)

        for data in SEED_OWNERS:
            if await users.get_by_email(data["email"]):
                print(f"  [skip] User {data['email']} already exists")
                continue
            owner = await users.create(
                email=data["email"],
                password_hash=password_hash,
                name=data["name"],
                role=UserRole.OWNER,
                phone=data["phone"],
                district=data["district"],
                city=data["city"],
            )
            await vehicles.create(owner.id, **data["vehicle"])
            print(f"  [created] Owner {data['email']} with {data['vehicle']['license_plate']}")

        for data in SEED_PROVIDERS:
            if await users.get_by_email(data["email"]):
                print(f"  [skip] User {data['email']} already exists")
                continue
            user = await users.create(
                email=data["email"],
                password_hash=password_hash,
                name=data["name"],
                role=UserRole.PROVIDER,
                phone=data["phone"],
                district=data["district"],
                city=data["city"],
            )
            profile = await providers.create_profile(
                user_id=user.id,
                business_name=data["business_name"],
                category=data["category"],
                street_address=data["street_address"],
                district=data["district"],
                city=data["city"],
            )
            for name, price in data["menu"]:
                await providers.add_service_item(profile.id, name=name, price=price)
            print(f"  [created] Provider {data['email']} ({data['category'].value}, {len(data['menu'])} services)")

        await db.commit()
        print("\nSeed completed successfully.")


if __name__ == "__main__":
    print("Seeding vehicle service ecosystem database...")
    asyncio.run(seed())
