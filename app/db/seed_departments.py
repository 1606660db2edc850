"""
Seed script for the fixed department archetypes (DSI, DAF, OPERATIONS, OTHERS).

Idempotent: existing departments keep their id, only the display name is refreshed.
Usage: python -m app.db.seed_departments
"""
import asyncio
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import DepartmentType
from app.core.models import Department
from app.db.session import AsyncSessionLocal


DEPARTMENTS: List[Tuple[DepartmentType, str]] = [
    (DepartmentType.DSI, "Information Systems"),
    (DepartmentType.DAF, "Administration & Finance"),
    (DepartmentType.OPERATIONS, "Operations"),
    (DepartmentType.OTHERS, "Others"),
]


async def seed_departments(db: AsyncSession) -> Tuple[int, int]:
    """Create missing departments and rename existing ones. Returns (created, updated)."""
    created = 0
    updated = 0

    for dept_type, name in DEPARTMENTS:
        result = await db.execute(select(Department).where(Department.type == dept_type.value))
        existing = result.scalar_one_or_none()
        if existing:
            if existing.name != name:
                existing.name = name
                updated += 1
        else:
            db.add(Department(type=dept_type.value, name=name))
            created += 1

    await db.commit()
    return created, updated


async def main() -> None:
    async with AsyncSessionLocal() as db:
        created, updated = await seed_departments(db)
    print(f"Departments created: {created}, updated: {updated}, total: {len(DEPARTMENTS)}")


if __name__ == "__main__":
    asyncio.run(main())
