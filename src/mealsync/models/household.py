"""Household and membership models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MemberRef(BaseModel):
    """Lightweight reference to the member who performed an action."""

    id: int
    name: str

    model_config = ConfigDict(frozen=True)


class Member(BaseModel):
    """Household member profile."""

    id: int
    name: str
    email: Optional[str] = Field(default=None)
    created_at: datetime

    model_config = ConfigDict(frozen=True)

    def as_ref(self) -> MemberRef:
        return MemberRef(id=self.id, name=self.name)


class Household(BaseModel):
    """Group of members sharing a meal calendar and grocery lists."""

    id: int
    name: str
    invite_code: str
    created_at: datetime
    members: list[Member] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


__all__ = ["MemberRef", "Member", "Household"]
