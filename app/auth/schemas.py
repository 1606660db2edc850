from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Authenticated actor as seen by the leave services."""

    id: UUID
    role: str
    department_id: Optional[UUID] = None
    gender: Optional[str] = None
