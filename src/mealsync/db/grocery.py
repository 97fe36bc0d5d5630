"""Grocery list persistence.

:class:`SqlGroceryRepository` backs every collaborator interface used by the
grocery assembler and purchase lifecycle. Find-or-create and the purchase
toggle each run inside one transaction, which the engine opens with
``BEGIN IMMEDIATE``; concurrent toggles of one item therefore apply one after
the other.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mealsync.grocery.lifecycle import GroceryItemNotFoundError
from mealsync.models.grocery import GroceryItem, GroceryList
from mealsync.models.household import MemberRef
from mealsync.models.meal import Meal

from .meals import list_meals_in_range
from .models import GroceryListItemORM, GroceryListORM, IngredientORM, MemberORM
from .repository import session_scope


def _member_refs(session: Session, rows: Sequence[GroceryListItemORM]) -> Dict[int, MemberRef]:
    member_ids = {row.purchased_by_id for row in rows if row.purchased_by_id is not None}
    if not member_ids:
        return {}
    members = session.execute(
        select(MemberORM.id, MemberORM.name).where(MemberORM.id.in_(member_ids))
    ).all()
    return {member_id: MemberRef(id=member_id, name=name) for member_id, name in members}


def _item_to_model(row: GroceryListItemORM, purchased_by: Optional[MemberRef]) -> GroceryItem:
    return GroceryItem.model_validate(
        {
            "id": row.key,
            "name": row.name,
            "quantity": row.quantity,
            "unit": row.unit,
            "purchased": row.is_purchased,
            "purchased_by": purchased_by,
            "purchased_at": row.purchased_at,
            "item_id": row.id,
            "grocery_list_id": row.grocery_list_id,
            "ingredient_id": row.ingredient_id,
        }
    )


def _items_to_models(session: Session, rows: Sequence[GroceryListItemORM]) -> List[GroceryItem]:
    refs = _member_refs(session, rows)
    return [
        _item_to_model(row, refs.get(row.purchased_by_id) if row.purchased_by_id else None)
        for row in rows
    ]


def _list_to_model(session: Session, row: GroceryListORM) -> GroceryList:
    item_rows = (
        session.execute(
            select(GroceryListItemORM)
            .where(GroceryListItemORM.grocery_list_id == row.id)
            .order_by(GroceryListItemORM.position.asc(), GroceryListItemORM.id.asc())
        )
        .scalars()
        .all()
    )
    return GroceryList.model_validate(
        {
            "id": row.id,
            "household_id": row.household_id,
            "date_range_start": row.date_range_start,
            "date_range_end": row.date_range_end,
            "items": _items_to_models(session, item_rows),
            "created_at": row.created_at,
        }
    )


class SqlGroceryRepository:
    """SQLAlchemy-backed meal source, ingredient catalog and grocery store."""

    def meals_in_range(self, household_id: int, start: date, end: date) -> Sequence[Meal]:
        return list_meals_in_range(household_id, start, end)

    def find_or_create(self, name: str, unit: Optional[str] = None) -> int:
        normalized = name.strip().lower()
        with session_scope() as session:
            existing = session.execute(
                select(IngredientORM.id).where(IngredientORM.name == normalized)
            ).scalar_one_or_none()
            if existing is not None:
                return existing
            ingredient = IngredientORM(name=normalized, unit=unit)
            session.add(ingredient)
            try:
                session.flush()
            except IntegrityError:
                # Lost a race against a concurrent insert of the same name.
                session.rollback()
                return session.execute(
                    select(IngredientORM.id).where(IngredientORM.name == normalized)
                ).scalar_one()
            return ingredient.id

    def create_list(
        self,
        *,
        household_id: int,
        date_range_start: date,
        date_range_end: date,
        items: Sequence[GroceryItem],
        created_at: datetime,
    ) -> GroceryList:
        with session_scope() as session:
            grocery_list = GroceryListORM(
                household_id=household_id,
                date_range_start=date_range_start,
                date_range_end=date_range_end,
                created_at=created_at,
            )
            session.add(grocery_list)
            session.flush()
            for position, item in enumerate(items):
                session.add(
                    GroceryListItemORM(
                        grocery_list_id=grocery_list.id,
                        ingredient_id=item.ingredient_id,
                        key=item.id,
                        name=item.name,
                        quantity=float(item.quantity),
                        unit=item.unit,
                        position=position,
                        is_purchased=item.purchased,
                    )
                )
            session.flush()
            return _list_to_model(session, grocery_list)

    def get_list(self, list_id: int) -> Optional[GroceryList]:
        with session_scope() as session:
            row = session.get(GroceryListORM, list_id)
            if row is None:
                return None
            return _list_to_model(session, row)

    def list_lists(self, household_id: int) -> List[GroceryList]:
        """Return a household's grocery lists, newest first."""

        with session_scope() as session:
            rows = (
                session.execute(
                    select(GroceryListORM)
                    .where(GroceryListORM.household_id == household_id)
                    .order_by(GroceryListORM.created_at.desc(), GroceryListORM.id.desc())
                )
                .scalars()
                .all()
            )
            return [_list_to_model(session, row) for row in rows]

    def delete_list(self, list_id: int) -> None:
        with session_scope() as session:
            row = session.get(GroceryListORM, list_id)
            if row is None:
                raise ValueError(f"Grocery list {list_id} not found")
            session.execute(
                delete(GroceryListItemORM).where(GroceryListItemORM.grocery_list_id == list_id)
            )
            session.delete(row)

    def household_of_list(self, list_id: int) -> Optional[int]:
        with session_scope() as session:
            return session.execute(
                select(GroceryListORM.household_id).where(GroceryListORM.id == list_id)
            ).scalar_one_or_none()

    def household_of_item(self, item_id: int) -> Optional[int]:
        with session_scope() as session:
            return session.execute(
                select(GroceryListORM.household_id)
                .join(GroceryListItemORM, GroceryListItemORM.grocery_list_id == GroceryListORM.id)
                .where(GroceryListItemORM.id == item_id)
            ).scalar_one_or_none()

    def get_item(self, item_id: int) -> Optional[GroceryItem]:
        with session_scope() as session:
            row = session.get(GroceryListItemORM, item_id)
            if row is None:
                return None
            return _items_to_models(session, [row])[0]

    def update_item(
        self,
        item_id: int,
        mutate: Callable[[GroceryItem], GroceryItem],
    ) -> GroceryItem:
        with session_scope() as session:
            row = session.execute(
                select(GroceryListItemORM).where(GroceryListItemORM.id == item_id)
            ).scalar_one_or_none()
            if row is None:
                raise GroceryItemNotFoundError(item_id)

            updated = mutate(_items_to_models(session, [row])[0])
            row.is_purchased = updated.purchased
            row.purchased_by_id = updated.purchased_by.id if updated.purchased_by else None
            row.purchased_at = updated.purchased_at
            session.flush()
            return _items_to_models(session, [row])[0]

    def delete_item(self, item_id: int) -> None:
        with session_scope() as session:
            row = session.get(GroceryListItemORM, item_id)
            if row is None:
                raise ValueError(f"Grocery item {item_id} not found")
            session.delete(row)


__all__ = ["SqlGroceryRepository"]
