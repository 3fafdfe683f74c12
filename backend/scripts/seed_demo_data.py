import asyncio
import logging
import sys
from pathlib import Path

"""
Seed demo data (tables, stock, menus, a demo user) into the DB.

This script can be run from either:
- backend/: `python scripts/seed_demo_data.py`
- repo root: `python backend/scripts/seed_demo_data.py`

Measurement units are seeded first; every other step is skipped when the
row already exists, so the script can be run repeatedly.
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import func, select

from core.logging_config import configure_logging
from db.database import async_session_maker, create_db_and_tables, Menu, Table
from db.seed import seed_measurements
from db.users import User
from services import menus, stock, tables
from services.menus import Ingredient

from fastapi_users.password import PasswordHelper

logger = logging.getLogger("seed_demo_data")

password_helper = PasswordHelper()

DEMO_TABLES = [("T1", 2), ("T2", 2), ("T3", 4), ("T4", 4), ("T5", 6), ("T6", 8)]

# name, quantity, unit, unit price
DEMO_STOCK = [
    ("Flour", 25.0, "kg", 1.20),
    ("Butter", 5.0, "kg", 9.50),
    ("Salt", 2.0, "kg", 0.80),
    ("Tomato", 40.0, "piece", 0.35),
    ("Mozzarella", 6.0, "kg", 11.00),
    ("Milk", 12.0, "L", 1.05),
    ("Basil", 10.0, "bunch", 1.50),
]

DEMO_MENUS = [
    (
        "Margherita",
        12.50,
        "Tomato, mozzarella and basil",
        [
            Ingredient("Flour", 250.0, "g"),
            Ingredient("Tomato", 2.0, "piece"),
            Ingredient("Mozzarella", 125.0, "g"),
            Ingredient("Salt", 1.0, "pinch"),
        ],
    ),
    (
        "Crepes",
        8.00,
        "Three crepes with butter",
        [
            Ingredient("Flour", 120.0, "g"),
            Ingredient("Milk", 25.0, "cL"),
            Ingredient("Butter", 1.0, "knob"),
        ],
    ),
]


async def get_or_create_user(session, email: str, password: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        return user

    user = User(
        email=email,
        hashed_password=password_helper.hash(password),
        is_active=True,
        is_superuser=False,
        is_verified=True,
        first_name="Demo",
        last_name="Client",
    )
    session.add(user)
    await session.commit()
    return user


async def seed():
    await create_db_and_tables()
    async with async_session_maker() as session:
        await seed_measurements(session)

        user = await get_or_create_user(session, "demo@restaurant.example.com", "demo-password")
        logger.info("Demo user %s (%s)", user.email, user.id)

        existing = {name for (name,) in (await session.execute(select(Table.name))).all()}
        for name, capacity in DEMO_TABLES:
            if name not in existing:
                res = await tables.add_table(session, capacity, name)
                if not res.ok:
                    logger.error("Table %s: %s", name, res.error.message)

        for name, quantity, unit, price in DEMO_STOCK:
            if (await stock.get_stock(session, name)).ok:
                continue
            res = await stock.add_or_edit(session, name, quantity, unit, price, is_cookable=True)
            if not res.ok:
                logger.error("Stock %s: %s", name, res.error.message)

        for name, price, description, ingredients in DEMO_MENUS:
            found = await session.execute(select(Menu.menu_id).where(func.lower(Menu.name) == name.lower()))
            if found.scalar_one_or_none() is not None:
                continue
            res = await menus.create_menu(session, name, price, description, ingredients)
            if not res.ok:
                logger.error("Menu %s: %s", name, res.error.message)

    logger.info("Demo data ready")


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed())
