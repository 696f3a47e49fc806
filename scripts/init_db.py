"""
Database initialization script.
Recreates tables and seeds an admin, a demo seller with a listing and a
demo buyer with wallet funds.
"""
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from monlyking.core.database import engine, AsyncSessionLocal, Base
from monlyking.core.security import get_password_hash
from monlyking.models import User, UserRole, GameAccount, Game, ListingStatus

DEMO_USERS = [
    {
        "email": "admin@monlyking.gg",
        "username": "admin",
        "password": "admin123!",
        "display_name": "Monlyking Admin",
        "role": UserRole.ADMIN,
        "wallet_balance": Decimal("0"),
    },
    {
        "email": "seller@monlyking.gg",
        "username": "demo_seller",
        "password": "demo123!",
        "display_name": "Demo Seller",
        "role": UserRole.USER,
        "wallet_balance": Decimal("0"),
    },
    {
        "email": "buyer@monlyking.gg",
        "username": "demo_buyer",
        "password": "demo123!",
        "display_name": "Demo Buyer",
        "role": UserRole.USER,
        "wallet_balance": Decimal("5000"),
    },
]


async def create_tables():
    """Drop and recreate all database tables."""
    print("Creating database tables...")
    import monlyking.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    print("✓ Tables created successfully")


async def create_demo_users():
    print("Creating demo users...")

    async with AsyncSessionLocal() as session:
        for data in DEMO_USERS:
            result = await session.execute(select(User).where(User.email == data["email"]))
            if result.scalar_one_or_none():
                print(f"✓ {data['email']} already exists")
                continue

            session.add(User(
                email=data["email"],
                username=data["username"],
                hashed_password=get_password_hash(data["password"]),
                display_name=data["display_name"],
                role=data["role"],
                is_verified=True,
                wallet_balance=data["wallet_balance"],
            ))
            print(f"✓ Created {data['email']} (password: {data['password']})")

        await session.commit()


async def create_demo_listing():
    print("Creating demo listing...")

    async with AsyncSessionLocal() as session:
        seller = (await session.execute(
            select(User).where(User.username == "demo_seller")
        )).scalar_one()

        session.add(GameAccount(
            seller_id=seller.id,
            game=Game.VALORANT,
            title="Immortal 2 Valorant account, EU",
            description=(
                "Main account with every agent unlocked, 40+ skins including the "
                "Reaver and Prime collections. Email change available."
            ),
            price=Decimal("1000"),
            images=[],
            game_data={"rank": "Immortal 2", "rr": 45, "agents": 23, "level": 187, "region": "EU"},
            status=ListingStatus.ACTIVE,
        ))
        await session.commit()
        print("✓ Demo listing created")


async def main():
    """Main initialization function."""
    print("="*60)
    print("Monlyking Database Initialization")
    print("="*60)

    try:
        await create_tables()
        await create_demo_users()
        await create_demo_listing()

        print("="*60)
        print("✓ Database initialization completed successfully!")
        print("="*60)

    except Exception as e:
        print(f"✗ Error during initialization: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
