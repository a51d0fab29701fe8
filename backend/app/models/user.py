from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from app.models.ids import new_id


class User(SQLModel, table=True):
    """CRM user record (identity collaborator)."""

    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, index=True, max_length=64)
    email: str = Field(index=True, unique=True, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=255)
    hashed_password: str = Field(max_length=255)
    is_active: bool = Field(default=True)
    # admin, manager, employee, viewer
    role: str = Field(default="employee", max_length=50)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
