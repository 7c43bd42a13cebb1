"""
Seed data

- Demo departments, participants and templates, inserted only into an empty
  store and only when SEED_DEMO_DATA is on.
- Bootstrap SuperAdmin account from SUPERADMIN_USERNAME / SUPERADMIN_PASSWORD.

Both run from the application lifespan; `python -m blastdesk.db.seed_data`
runs them once by hand.
"""
import asyncio

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.config import settings
from blastdesk.core.database import AsyncSessionLocal, init_db
from blastdesk.core.logging_config import logger
from blastdesk.core.security import get_password_hash
from blastdesk.models import Department, EmailTemplate, Participant, User, UserRole


DEMO_DEPARTMENTS = [
    {"id": "1", "name": "Marketing"},
    {"id": "2", "name": "Engineering"},
    {"id": "3", "name": "Human Resources"},
    {"id": "4", "name": "Sales"},
]

DEMO_PARTICIPANTS = [
    {"id": "101", "name": "John Doe", "email": "john.doe@example.com", "role": "Pembangun Frontend", "department_id": "2"},
    {"id": "102", "name": "Jane Smith", "email": "jane.smith@example.com", "role": "Pengurus Pemasaran", "department_id": "1"},
    {"id": "103", "name": "Peter Jones", "email": "peter.jones@example.com", "role": "Eksekutif Jualan", "department_id": "4"},
    {"id": "104", "name": "Mary Johnson", "email": "mary.j@example.com", "role": "Pakar Sumber Manusia", "department_id": "3"},
    {"id": "105", "name": "Sam Wilson", "email": "sam.w@example.com", "role": "Pembangun Backend", "department_id": "2"},
    {"id": "106", "name": "Patricia Williams", "email": "pat.w@example.com", "role": "Pakar SEO", "department_id": "1"},
]

DEMO_TEMPLATES = [
    {
        "id": "t1",
        "name": "Tech Conference Invite",
        "subject": "Invitation: Annual Tech Conference 2024",
        "body": "Hello {name},",
        "category": "Events",
    },
    {
        "id": "t2",
        "name": "Product Launch Announcement",
        "subject": "Introducing Our New Product!",
        "body": "Hi {name},",
        "category": "Marketing",
    },
    {
        "id": "t3",
        "name": "Internal Q3 Update",
        "subject": "Q3 Company Performance Review",
        "body": "Hello Team,",
        "category": "Internal",
    },
]


async def seed_demo_data(db: AsyncSession) -> bool:
    """Insert the demo directory; returns False when departments already exist"""
    existing = (await db.execute(select(func.count()).select_from(Department))).scalar_one()
    if existing:
        logger.info("[Seed] Departments present, skipping demo data")
        return False

    db.add_all(Department(**row) for row in DEMO_DEPARTMENTS)
    db.add_all(Participant(**row) for row in DEMO_PARTICIPANTS)
    db.add_all(EmailTemplate(**row) for row in DEMO_TEMPLATES)
    await db.commit()

    logger.info(
        f"[Seed] Inserted {len(DEMO_DEPARTMENTS)} departments, "
        f"{len(DEMO_PARTICIPANTS)} participants, {len(DEMO_TEMPLATES)} templates"
    )
    return True


async def ensure_superadmin(db: AsyncSession) -> bool:
    """Create the configured SuperAdmin if missing; returns True when created"""
    username = settings.SUPERADMIN_USERNAME
    password = settings.SUPERADMIN_PASSWORD
    if not username or not password:
        return False

    result = await db.execute(select(User).where(User.username == username))
    if result.scalar_one_or_none():
        return False

    db.add(User(
        username=username,
        email=settings.SUPERADMIN_EMAIL or f"{username}@localhost",
        hashed_password=get_password_hash(password),
        first_name="Super",
        last_name="Admin",
        role=UserRole.SUPER_ADMIN,
    ))
    await db.commit()

    logger.info(f"[Seed] Created SuperAdmin account '{username}'")
    return True


async def run_seeders() -> None:
    async with AsyncSessionLocal() as db:
        if settings.SEED_DEMO_DATA:
            await seed_demo_data(db)
        await ensure_superadmin(db)


async def main():
    await init_db()
    await run_seeders()


def cli():
    """Console entry point"""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
