"""
Seed script to create the tables, the permission catalog and a first school.

Run once with env set:
  SEED_SCHOOL_CODE=GVS
  SEED_SCHOOL_NAME="Green Valley School"
  SEED_ADMIN_EMAIL=admin@greenvalley.edu
  SEED_ADMIN_PASSWORD=YourSecurePassword

Creates:
- every table of the metadata (if not exists)
- permissions: one row per (module, action) of the catalog (if not exists)
- schools: the school (if its code is new)
- roles: the system super-admin role for that school, holding every permission
- users: the admin user bound to that role
"""
import asyncio
import logging
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Permission, Role, RolePermission, User
from app.auth.rbac import SUPER_ADMIN_SLUG, permission_catalog
from app.auth.security import hash_password
from app.core.app_logger import get_logger, setup_logging
from app.core.config import settings
from app.core.models import School
from app.db.session import AsyncSessionLocal, Base, engine

logger = get_logger("seed")

SUPER_ADMIN_NAME = "Super Admin"


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_permissions(db: AsyncSession) -> int:
    """Insert missing catalog permissions. Returns how many were created."""
    result = await db.execute(select(Permission.name))
    existing = set(result.scalars().all())
    created = 0
    for name, slug, module, description in permission_catalog():
        if name in existing:
            continue
        db.add(Permission(name=name, slug=slug, module=module, description=description))
        created += 1
    await db.flush()
    return created


async def provision_school(
    db: AsyncSession,
    code: str,
    name: str,
    admin_email: str,
    admin_password: str,
    admin_username: Optional[str] = None,
) -> Tuple[School, Role, User]:
    """Create (or reuse) a school with its super-admin role and admin user, then commit."""
    code = code.strip().upper()

    # 1. School
    school = (await db.execute(select(School).where(School.code == code))).scalar_one_or_none()
    if school is None:
        school = School(code=code, name=name.strip(), is_active=True)
        db.add(school)
        await db.flush()
        logger.info("Created school %s", code)

    # 2. Super-admin role with every permission
    role = (
        await db.execute(select(Role).where(Role.school_id == school.id, Role.slug == SUPER_ADMIN_SLUG))
    ).scalar_one_or_none()
    if role is None:
        role = Role(school_id=school.id, name=SUPER_ADMIN_NAME, slug=SUPER_ADMIN_SLUG, is_system=True)
        db.add(role)
        await db.flush()
    granted = set(
        (await db.execute(select(RolePermission.permission_id).where(RolePermission.role_id == role.id)))
        .scalars()
        .all()
    )
    for permission_id in (await db.execute(select(Permission.id))).scalars().all():
        if permission_id not in granted:
            db.add(RolePermission(role_id=role.id, permission_id=permission_id))

    # 3. Admin user
    user = (
        await db.execute(select(User).where(User.school_id == school.id, User.email == admin_email))
    ).scalar_one_or_none()
    if user is None:
        user = User(
            school_id=school.id,
            username=admin_username or admin_email.split("@")[0],
            email=admin_email,
            password_hash=hash_password(admin_password),
            role_id=role.id,
            is_active=True,
        )
        db.add(user)
        logger.info("Created admin user for school %s", code)
    else:
        user.role_id = role.id
        user.password_hash = hash_password(admin_password)

    await db.commit()
    return school, role, user


async def main() -> None:
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    setup_logging()
    await create_tables()
    async with AsyncSessionLocal() as db:
        try:
            created = await seed_permissions(db)
            await db.commit()
            logger.info("Permission catalog seeded (%d new)", created)

            if not (settings.seed_school_code and settings.seed_admin_email and settings.seed_admin_password):
                logger.info("No SEED_SCHOOL_CODE / SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD; skipping school.")
                return
            await provision_school(
                db,
                code=settings.seed_school_code,
                name=settings.seed_school_name or settings.seed_school_code,
                admin_email=settings.seed_admin_email,
                admin_password=settings.seed_admin_password,
            )
        except Exception:
            await db.rollback()
            logger.exception("Seeding failed")
            raise


if __name__ == "__main__":
    asyncio.run(main())
