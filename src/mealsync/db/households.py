"""Household and membership persistence helpers."""

from __future__ import annotations

import secrets
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mealsync.models.household import Household, Member

from .models import HouseholdMemberORM, HouseholdORM, MemberORM
from .repository import session_scope

INVITE_CODE_BYTES = 6


def _member_to_model(row: MemberORM) -> Member:
    return Member.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "email": row.email,
            "created_at": row.created_at,
        }
    )


def _members_of(session: Session, household_id: int) -> List[Member]:
    rows = (
        session.execute(
            select(MemberORM)
            .join(HouseholdMemberORM, HouseholdMemberORM.member_id == MemberORM.id)
            .where(HouseholdMemberORM.household_id == household_id)
            .order_by(HouseholdMemberORM.joined_at.asc(), MemberORM.id.asc())
        )
        .scalars()
        .all()
    )
    return [_member_to_model(row) for row in rows]


def _household_to_model(session: Session, row: HouseholdORM) -> Household:
    return Household.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "invite_code": row.invite_code,
            "created_at": row.created_at,
            "members": _members_of(session, row.id),
        }
    )


def _new_invite_code() -> str:
    return secrets.token_hex(INVITE_CODE_BYTES).upper()


def create_member(*, name: str, email: Optional[str] = None) -> Member:
    """Register a member profile."""

    with session_scope() as session:
        row = MemberORM(name=name.strip(), email=email.strip().lower() if email else None)
        session.add(row)
        try:
            session.flush()
        except IntegrityError as exc:
            raise ValueError(f"Member with email {email} already exists") from exc
        return _member_to_model(row)


def get_member(member_id: int) -> Optional[Member]:
    with session_scope() as session:
        row = session.get(MemberORM, member_id)
        if row is None:
            return None
        return _member_to_model(row)


def create_household(*, name: str, owner_id: int) -> Household:
    """Create a household with ``owner_id`` as its first member."""

    with session_scope() as session:
        if session.get(MemberORM, owner_id) is None:
            raise ValueError(f"Member {owner_id} not found")
        household = HouseholdORM(name=name.strip(), invite_code=_new_invite_code())
        session.add(household)
        session.flush()
        session.add(HouseholdMemberORM(household_id=household.id, member_id=owner_id, role="owner"))
        session.flush()
        return _household_to_model(session, household)


def get_household(household_id: int) -> Optional[Household]:
    with session_scope() as session:
        row = session.get(HouseholdORM, household_id)
        if row is None:
            return None
        return _household_to_model(session, row)


def join_household(*, invite_code: str, member_id: int) -> Household:
    """Add ``member_id`` to the household owning ``invite_code`` (no-op when already joined)."""

    with session_scope() as session:
        household = session.execute(
            select(HouseholdORM).where(HouseholdORM.invite_code == invite_code.strip().upper())
        ).scalar_one_or_none()
        if household is None:
            raise ValueError("Invalid invite code")
        if session.get(MemberORM, member_id) is None:
            raise ValueError(f"Member {member_id} not found")

        existing = session.execute(
            select(HouseholdMemberORM).where(
                HouseholdMemberORM.household_id == household.id,
                HouseholdMemberORM.member_id == member_id,
            )
        ).scalar_one_or_none()
        if existing is None:
            session.add(HouseholdMemberORM(household_id=household.id, member_id=member_id))
            session.flush()
        return _household_to_model(session, household)


def list_households_for_member(member_id: int) -> List[Household]:
    with session_scope() as session:
        rows = (
            session.execute(
                select(HouseholdORM)
                .join(HouseholdMemberORM, HouseholdMemberORM.household_id == HouseholdORM.id)
                .where(HouseholdMemberORM.member_id == member_id)
                .order_by(HouseholdORM.created_at.asc(), HouseholdORM.id.asc())
            )
            .scalars()
            .all()
        )
        return [_household_to_model(session, row) for row in rows]


def list_members(household_id: int) -> List[Member]:
    with session_scope() as session:
        if session.get(HouseholdORM, household_id) is None:
            raise ValueError(f"Household {household_id} not found")
        return _members_of(session, household_id)


def is_member(member_id: int, household_id: int) -> bool:
    with session_scope() as session:
        link = session.execute(
            select(HouseholdMemberORM.id).where(
                HouseholdMemberORM.household_id == household_id,
                HouseholdMemberORM.member_id == member_id,
            )
        ).scalar_one_or_none()
        return link is not None


__all__ = [
    "create_household",
    "create_member",
    "get_household",
    "get_member",
    "is_member",
    "join_household",
    "list_households_for_member",
    "list_members",
]
