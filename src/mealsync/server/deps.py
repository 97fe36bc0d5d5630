"""Dependency definitions for the Mealsync API server."""

from __future__ import annotations

from datetime import date
from typing import Callable, List, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from mealsync.config import get_settings
from mealsync.db.grocery import SqlGroceryRepository
from mealsync.db.households import (
    create_household,
    create_member,
    get_member,
    is_member,
    join_household,
    list_households_for_member,
    list_members,
)
from mealsync.db.meals import create_meal, delete_meal, get_meal, list_meals, update_meal
from mealsync.db.recipes import create_recipe, delete_recipe, get_recipe, list_recipes
from mealsync.events import HouseholdEventPublisher, NullEventPublisher
from mealsync.grocery import GroceryListAssembler, ItemLifecycle
from mealsync.models.household import Household, Member
from mealsync.models.meal import Meal, Recipe

MemberCreator = Callable[[dict], Member]
MemberFetcher = Callable[[int], Optional[Member]]
MembershipChecker = Callable[[int, int], bool]
HouseholdCreator = Callable[[str, int], Household]
HouseholdJoiner = Callable[[str, int], Household]
HouseholdsProvider = Callable[[int], List[Household]]
MembersProvider = Callable[[int], List[Member]]
MealsProvider = Callable[[int, Optional[date], Optional[date]], List[Meal]]
MealFetcher = Callable[[int], Optional[Meal]]
MealCreator = Callable[[dict], Meal]
MealUpdater = Callable[[int, dict], Meal]
MealDeleter = Callable[[int], Meal]
RecipesProvider = Callable[[int], List[Recipe]]
RecipeFetcher = Callable[[int], Optional[Recipe]]
RecipeCreator = Callable[[dict], Recipe]
RecipeDeleter = Callable[[int], None]


def get_member_creator() -> MemberCreator:
    return lambda payload: create_member(**payload)


def get_member_fetcher() -> MemberFetcher:
    return get_member


def get_membership_checker() -> MembershipChecker:
    return is_member


def get_household_creator() -> HouseholdCreator:
    return lambda name, owner_id: create_household(name=name, owner_id=owner_id)


def get_household_joiner() -> HouseholdJoiner:
    return lambda invite_code, member_id: join_household(invite_code=invite_code, member_id=member_id)


def get_households_provider() -> HouseholdsProvider:
    return list_households_for_member


def get_members_provider() -> MembersProvider:
    return list_members


def get_meals_provider() -> MealsProvider:
    return lambda household_id, start, end: list_meals(household_id, start, end)


def get_meal_fetcher() -> MealFetcher:
    return get_meal


def get_meal_creator() -> MealCreator:
    return lambda payload: create_meal(**payload)


def get_meal_updater() -> MealUpdater:
    return lambda meal_id, payload: update_meal(meal_id, **payload)


def get_meal_deleter() -> MealDeleter:
    return delete_meal


def get_recipes_provider() -> RecipesProvider:
    return list_recipes


def get_recipe_fetcher() -> RecipeFetcher:
    return get_recipe


def get_recipe_creator() -> RecipeCreator:
    return lambda payload: create_recipe(**payload)


def get_recipe_deleter() -> RecipeDeleter:
    return delete_recipe


def get_grocery_repository() -> SqlGroceryRepository:
    return SqlGroceryRepository()


def get_event_publisher(request: Request) -> HouseholdEventPublisher:
    """Return the app-wide broadcaster, or a no-op publisher when none is wired."""

    return getattr(request.app.state, "broadcaster", None) or NullEventPublisher()


def get_grocery_assembler(
    repository: SqlGroceryRepository = Depends(get_grocery_repository),
    publisher: HouseholdEventPublisher = Depends(get_event_publisher),
) -> GroceryListAssembler:
    return GroceryListAssembler(
        meals=repository,
        catalog=repository,
        lists=repository,
        publisher=publisher,
    )


def get_item_lifecycle(
    repository: SqlGroceryRepository = Depends(get_grocery_repository),
    publisher: HouseholdEventPublisher = Depends(get_event_publisher),
) -> ItemLifecycle:
    return ItemLifecycle(store=repository, publisher=publisher)


def require_api_token(
    request: Request,
    settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    if request.query_params.get("api_token") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def get_current_member(
    member_id: Optional[int] = Header(default=None, alias="X-Member-ID"),
    fetcher: MemberFetcher = Depends(get_member_fetcher),
) -> Member:
    """Resolve the acting member from the ``X-Member-ID`` header."""

    if member_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Member-ID header is required",
        )
    member = fetcher(member_id)
    if member is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown member")
    return member


def ensure_household_member(
    checker: MembershipChecker,
    member: Member,
    household_id: int,
) -> None:
    if not checker(member.id, household_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
