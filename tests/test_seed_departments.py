from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import Department
from app.db.seed_departments import DEPARTMENTS, seed_departments


async def test_seed_is_idempotent_and_refreshes_names(db_session: AsyncSession) -> None:
    assert await seed_departments(db_session) == (len(DEPARTMENTS), 0)

    result = await db_session.execute(select(Department).where(Department.type == "DSI"))
    dsi = result.scalar_one()
    dsi.name = "IT"
    await db_session.commit()

    assert await seed_departments(db_session) == (0, 1)
    await db_session.refresh(dsi)
    assert dsi.name == "Information Systems"
