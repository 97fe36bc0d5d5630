"""ASGI application for Mealsync."""
# mypy: ignore-errors

from __future__ import annotations

import datetime as dt
import logging
from time import perf_counter
from typing import Any, Literal, Optional
from uuid import uuid4

from fastapi import (
    Body,
    Depends,
    FastAPI,
    HTTPException,
    Query,
    Request,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field, model_validator

from mealsync import __version__, metrics
from mealsync.config import Settings, get_settings
from mealsync.db.grocery import SqlGroceryRepository
from mealsync.events import (
    GROCERY_LIST_DELETED,
    MEAL_CREATED,
    MEAL_DELETED,
    MEAL_UPDATED,
    HouseholdBroadcaster,
    HouseholdEventPublisher,
)
from mealsync.grocery import (
    DOWNLOAD_FILENAME,
    DOWNLOAD_MEDIA_TYPE,
    GroceryListAssembler,
    ItemLifecycle,
    categorize,
    consolidate_texts,
    format_categorized,
    format_download,
    format_plain,
    non_empty_buckets,
)
from mealsync.logging_utils import configure_logging as configure_app_logging
from mealsync.models.grocery import CategorizedBucket, GroceryItem, GroceryList
from mealsync.models.household import Household, Member
from mealsync.models.meal import Meal, MealType, Recipe
from mealsync.server import deps

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return repr(value)


def _configure_logging(settings: Settings) -> None:
    configure_app_logging(settings.log_level, settings.log_format, [settings.api_token or ""])


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Mealsync Household Planner", version=__version__)
    application.state.broadcaster = HouseholdBroadcaster()
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("mealsync.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                    duration_ms / 1000.0
                )
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(
                method=method,
                path=path,
                status=str(response.status_code),
            ).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        body_preview: str | None = None
        raw_body = await request.body()
        if raw_body:
            decoded = raw_body.decode("utf-8", errors="replace")
            if len(decoded) > 2048:
                decoded = decoded[:2048] + "...(truncated)"
            body_preview = decoded

        log_kwargs: dict[str, Any] = {}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_kwargs["extra"] = {"request_id": request_id}

        logger.warning(
            "Validation error on %s %s: %s | body=%s",
            request.method,
            request.url.path,
            exc.errors(),
            body_preview,
            **log_kwargs,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": [_json_safe(error) for error in exc.errors()]},
        )

    @application.get("/healthz", include_in_schema=False)
    def healthz() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    # Members and households

    @application.post(
        "/members",
        response_model=Member,
        status_code=status.HTTP_201_CREATED,
        summary="Register a member",
    )
    def members_create(
        payload: MemberCreateRequest,
        auth: None = Depends(deps.require_api_token),
        creator: deps.MemberCreator = Depends(deps.get_member_creator),
    ) -> Member:
        try:
            return creator(payload.model_dump())
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    @application.get("/members/me", response_model=Member, summary="Current member profile")
    def members_me(member: Member = Depends(deps.get_current_member)) -> Member:
        return member

    @application.get(
        "/households",
        response_model=list[Household],
        summary="List households of the current member",
    )
    def households_list(
        member: Member = Depends(deps.get_current_member),
        provider: deps.HouseholdsProvider = Depends(deps.get_households_provider),
    ) -> list[Household]:
        return provider(member.id)

    @application.post(
        "/households",
        response_model=Household,
        status_code=status.HTTP_201_CREATED,
        summary="Create a household",
    )
    def households_create(
        payload: HouseholdCreateRequest,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        creator: deps.HouseholdCreator = Depends(deps.get_household_creator),
    ) -> Household:
        household = creator(payload.name, member.id)
        logger.info(
            "Household %s created by member %s",
            household.id,
            member.id,
            extra={"household_id": household.id, "member_id": member.id},
        )
        return household

    @application.post(
        "/households/join",
        response_model=Household,
        summary="Join a household with an invite code",
    )
    def households_join(
        payload: HouseholdJoinRequest,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        joiner: deps.HouseholdJoiner = Depends(deps.get_household_joiner),
    ) -> Household:
        try:
            return joiner(payload.invite_code, member.id)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @application.get(
        "/households/{household_id}/members",
        response_model=list[Member],
        summary="List household members",
    )
    def households_members(
        household_id: int,
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        provider: deps.MembersProvider = Depends(deps.get_members_provider),
    ) -> list[Member]:
        deps.ensure_household_member(checker, member, household_id)
        return provider(household_id)

    # Meal calendar

    @application.get("/meals", response_model=list[Meal], summary="List household meals")
    def meals_list(
        household_id: int = Query(...),
        start: Optional[dt.date] = Query(default=None),
        end: Optional[dt.date] = Query(default=None),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        provider: deps.MealsProvider = Depends(deps.get_meals_provider),
    ) -> list[Meal]:
        deps.ensure_household_member(checker, member, household_id)
        return provider(household_id, start, end)

    @application.post(
        "/meals",
        response_model=Meal,
        status_code=status.HTTP_201_CREATED,
        summary="Schedule a meal",
    )
    def meals_create(
        payload: MealCreateRequest,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        creator: deps.MealCreator = Depends(deps.get_meal_creator),
        publisher: HouseholdEventPublisher = Depends(deps.get_event_publisher),
    ) -> Meal:
        deps.ensure_household_member(checker, member, payload.household_id)
        try:
            meal = creator(payload.model_dump())
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        publisher.publish(meal.household_id, MEAL_CREATED, meal)
        return meal

    @application.put("/meals/{meal_id}", response_model=Meal, summary="Update a meal")
    def meals_update(
        meal_id: int,
        payload: MealUpdateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        fetcher: deps.MealFetcher = Depends(deps.get_meal_fetcher),
        updater: deps.MealUpdater = Depends(deps.get_meal_updater),
        publisher: HouseholdEventPublisher = Depends(deps.get_event_publisher),
    ) -> Meal:
        existing = fetcher(meal_id)
        if existing is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal not found")
        deps.ensure_household_member(checker, member, existing.household_id)

        update_payload = payload.model_dump(exclude_unset=True)
        if not update_payload:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No fields provided for update",
            )
        try:
            meal = updater(meal_id, update_payload)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        publisher.publish(meal.household_id, MEAL_UPDATED, meal)
        return meal

    @application.delete(
        "/meals/{meal_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a meal",
    )
    def meals_delete(
        meal_id: int,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        fetcher: deps.MealFetcher = Depends(deps.get_meal_fetcher),
        deleter: deps.MealDeleter = Depends(deps.get_meal_deleter),
        publisher: HouseholdEventPublisher = Depends(deps.get_event_publisher),
    ) -> None:
        existing = fetcher(meal_id)
        if existing is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal not found")
        deps.ensure_household_member(checker, member, existing.household_id)
        removed = deleter(meal_id)
        publisher.publish(removed.household_id, MEAL_DELETED, {"id": removed.id})

    # Recipe library

    @application.get("/recipes", response_model=list[Recipe], summary="List household recipes")
    def recipes_list(
        household_id: int = Query(...),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        provider: deps.RecipesProvider = Depends(deps.get_recipes_provider),
    ) -> list[Recipe]:
        deps.ensure_household_member(checker, member, household_id)
        return provider(household_id)

    @application.post(
        "/recipes",
        response_model=Recipe,
        status_code=status.HTTP_201_CREATED,
        summary="Add a recipe",
    )
    def recipes_create(
        payload: RecipeCreateRequest,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        creator: deps.RecipeCreator = Depends(deps.get_recipe_creator),
    ) -> Recipe:
        deps.ensure_household_member(checker, member, payload.household_id)
        return creator(payload.model_dump())

    @application.delete(
        "/recipes/{recipe_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a recipe",
    )
    def recipes_delete(
        recipe_id: int,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        fetcher: deps.RecipeFetcher = Depends(deps.get_recipe_fetcher),
        deleter: deps.RecipeDeleter = Depends(deps.get_recipe_deleter),
    ) -> None:
        recipe = fetcher(recipe_id)
        if recipe is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
        deps.ensure_household_member(checker, member, recipe.household_id)
        deleter(recipe_id)

    # Grocery lists

    @application.post(
        "/grocery/preview",
        response_model=GroceryPreviewResponse,
        summary="Consolidate ingredient text without saving",
    )
    def grocery_preview(payload: GroceryPreviewRequest) -> GroceryPreviewResponse:
        items = consolidate_texts(payload.blocks())
        categorized = categorize(items)
        return GroceryPreviewResponse(
            items=items,
            categories=non_empty_buckets(categorized),
            plain_text=format_plain(items),
            categorized_text=format_categorized(categorized),
        )

    @application.post(
        "/grocery/generate",
        response_model=GroceryList,
        status_code=status.HTTP_201_CREATED,
        summary="Generate a grocery list from scheduled meals",
    )
    def grocery_generate(
        payload: GroceryGenerateRequest,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        assembler: GroceryListAssembler = Depends(deps.get_grocery_assembler),
        settings: Settings = Depends(get_settings),
    ) -> GroceryList:
        deps.ensure_household_member(checker, member, payload.household_id)
        end = payload.date_range_end or (
            payload.date_range_start + dt.timedelta(days=settings.grocery_default_window_days - 1)
        )
        try:
            return assembler.generate(payload.household_id, payload.date_range_start, end)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    @application.get("/grocery", response_model=list[GroceryList], summary="List grocery lists")
    def grocery_lists(
        household_id: int = Query(...),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        repository: SqlGroceryRepository = Depends(deps.get_grocery_repository),
    ) -> list[GroceryList]:
        deps.ensure_household_member(checker, member, household_id)
        return repository.list_lists(household_id)

    def _load_list(
        list_id: int,
        member: Member,
        checker: deps.MembershipChecker,
        repository: SqlGroceryRepository,
    ) -> GroceryList:
        grocery_list = repository.get_list(list_id)
        if grocery_list is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grocery list not found")
        deps.ensure_household_member(checker, member, grocery_list.household_id)
        return grocery_list

    @application.get("/grocery/{list_id}", response_model=GroceryList, summary="Fetch a grocery list")
    def grocery_get(
        list_id: int,
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        repository: SqlGroceryRepository = Depends(deps.get_grocery_repository),
    ) -> GroceryList:
        return _load_list(list_id, member, checker, repository)

    @application.get(
        "/grocery/{list_id}/categories",
        response_model=list[CategorizedBucket],
        summary="Grocery list grouped by category",
    )
    def grocery_categories(
        list_id: int,
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        repository: SqlGroceryRepository = Depends(deps.get_grocery_repository),
    ) -> list[CategorizedBucket]:
        grocery_list = _load_list(list_id, member, checker, repository)
        return non_empty_buckets(categorize(grocery_list.items))

    @application.get(
        "/grocery/{list_id}/export",
        response_class=PlainTextResponse,
        summary="Copyable plain-text grocery list",
    )
    def grocery_export(
        list_id: int,
        export_format: Literal["plain", "categorized"] = Query(default="plain", alias="format"),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        repository: SqlGroceryRepository = Depends(deps.get_grocery_repository),
    ) -> PlainTextResponse:
        grocery_list = _load_list(list_id, member, checker, repository)
        if export_format == "categorized":
            text = format_categorized(categorize(grocery_list.items))
        else:
            text = format_plain(grocery_list.items)
        return PlainTextResponse(text)

    @application.get(
        "/grocery/{list_id}/download",
        response_class=PlainTextResponse,
        summary="Download the grocery list as a text file",
    )
    def grocery_download(
        list_id: int,
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        repository: SqlGroceryRepository = Depends(deps.get_grocery_repository),
    ) -> Response:
        grocery_list = _load_list(list_id, member, checker, repository)
        return Response(
            content=format_download(grocery_list.items),
            media_type=DOWNLOAD_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"'},
        )

    @application.delete(
        "/grocery/{list_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a grocery list",
    )
    def grocery_delete(
        list_id: int,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        repository: SqlGroceryRepository = Depends(deps.get_grocery_repository),
        publisher: HouseholdEventPublisher = Depends(deps.get_event_publisher),
    ) -> None:
        grocery_list = _load_list(list_id, member, checker, repository)
        repository.delete_list(list_id)
        publisher.publish(grocery_list.household_id, GROCERY_LIST_DELETED, {"id": list_id})

    def _check_item_access(
        item_id: int,
        member: Member,
        checker: deps.MembershipChecker,
        repository: SqlGroceryRepository,
    ) -> None:
        household_id = repository.household_of_item(item_id)
        if household_id is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
        deps.ensure_household_member(checker, member, household_id)

    @application.patch(
        "/grocery/items/{item_id}/toggle",
        response_model=GroceryItem,
        summary="Toggle purchased state of a grocery item",
    )
    def grocery_item_toggle(
        item_id: int,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        repository: SqlGroceryRepository = Depends(deps.get_grocery_repository),
        lifecycle: ItemLifecycle = Depends(deps.get_item_lifecycle),
    ) -> GroceryItem:
        _check_item_access(item_id, member, checker, repository)
        try:
            return lifecycle.toggle(item_id, member.as_ref())
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @application.delete(
        "/grocery/items/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Remove an item from a grocery list",
    )
    def grocery_item_delete(
        item_id: int,
        auth: None = Depends(deps.require_api_token),
        member: Member = Depends(deps.get_current_member),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
        repository: SqlGroceryRepository = Depends(deps.get_grocery_repository),
    ) -> None:
        _check_item_access(item_id, member, checker, repository)
        repository.delete_item(item_id)

    # Real-time updates

    @application.websocket("/ws/households/{household_id}")
    async def household_events(
        websocket: WebSocket,
        household_id: int,
        member_id: int = Query(...),
        checker: deps.MembershipChecker = Depends(deps.get_membership_checker),
    ) -> None:
        token = get_settings().api_token
        if token and websocket.query_params.get("api_token") != token:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        if not checker(member_id, household_id):
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        broadcaster: HouseholdBroadcaster = websocket.app.state.broadcaster
        subscription = broadcaster.subscribe(household_id)
        await websocket.accept()
        logger.info(
            "Member %s joined household %s updates",
            member_id,
            household_id,
            extra={"household_id": household_id, "member_id": member_id},
        )
        try:
            while True:
                message = await subscription.get()
                await websocket.send_json(message)
        except WebSocketDisconnect:
            logger.info(
                "Member %s left household %s updates",
                member_id,
                household_id,
                extra={"household_id": household_id, "member_id": member_id},
            )
        finally:
            broadcaster.unsubscribe(subscription)

    return application


class MemberCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)


class HouseholdCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class HouseholdJoinRequest(BaseModel):
    invite_code: str = Field(min_length=1, max_length=32)


class MealCreateRequest(BaseModel):
    household_id: int
    date: dt.date
    title: str = Field(min_length=1, max_length=255)
    meal_type: MealType = Field(default="dinner")
    notes: Optional[str] = Field(default=None, max_length=10000)
    recipe_id: Optional[int] = None


class MealUpdateRequest(BaseModel):
    date: Optional[dt.date] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    meal_type: Optional[MealType] = None
    notes: Optional[str] = Field(default=None, max_length=10000)
    recipe_id: Optional[int] = None


class RecipeCreateRequest(BaseModel):
    household_id: int
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    ingredients: str = Field(default="", max_length=10000)


class GroceryPreviewRequest(BaseModel):
    text: Optional[str] = None
    texts: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def require_some_text(self) -> "GroceryPreviewRequest":
        if self.text is None and not self.texts:
            raise ValueError("Provide 'text' or 'texts'")
        return self

    def blocks(self) -> list[str]:
        return ([self.text] if self.text is not None else []) + list(self.texts)


class GroceryPreviewResponse(BaseModel):
    items: list[GroceryItem]
    categories: list[CategorizedBucket]
    plain_text: str
    categorized_text: str


class GroceryGenerateRequest(BaseModel):
    household_id: int
    date_range_start: dt.date
    date_range_end: Optional[dt.date] = None


MealCreateRequest.model_rebuild()
MealUpdateRequest.model_rebuild()
GroceryGenerateRequest.model_rebuild()


app = create_app()

__all__ = ["app", "create_app"]
