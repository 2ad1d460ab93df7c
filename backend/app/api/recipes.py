import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from websockets.exceptions import WebSocketException

from ..core.checklist import ItemNotFoundError
from ..core.progress_tracker import generating_title
from ..core.sessions import RecipeSession, SessionNotFoundError, SessionRegistry, get_registry
from ..models.recipe import (
    GenerateRequest,
    ParseRequest,
    Progress,
    Recipe,
    RecipeItem,
    SectionsResponse,
    ViewFilter,
)
from ..services.openai_client import RealtimeAPIError
from ..services.recipe_generator import (
    EmptyResponseError,
    GeneratorNotConfiguredError,
    InvalidIdeaError,
    RecipeGenerator,
)
from ..services.recipe_parser import RecipeParser

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])

# Model refused, model API error, or the connection to it failed
UPSTREAM_ERRORS = (EmptyResponseError, RealtimeAPIError, WebSocketException, OSError)


def get_generator() -> RecipeGenerator:
    return RecipeGenerator()


def _session(registry: SessionRegistry, recipe_id: UUID) -> RecipeSession:
    try:
        return registry.get(recipe_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Recipe {recipe_id} not found")


@router.post("/parse", response_model=SectionsResponse)
async def parse_sections(body: ParseRequest) -> SectionsResponse:
    ingredients, steps = RecipeParser.split_sections(body.text)
    return SectionsResponse(ingredients=ingredients, steps=steps)


@router.post("", response_model=Recipe, status_code=status.HTTP_201_CREATED)
async def create_recipe(body: ParseRequest, registry: SessionRegistry = Depends(get_registry)) -> Recipe:
    recipe = RecipeParser.parse(body.text, title=body.title or "Untitled")
    session = await registry.open(recipe)
    return session.recipe


@router.post("/generate", response_model=Recipe, status_code=status.HTTP_201_CREATED)
async def generate_recipe(
    body: GenerateRequest,
    registry: SessionRegistry = Depends(get_registry),
    generator: RecipeGenerator = Depends(get_generator),
) -> Recipe:
    session = await registry.open(Recipe(title=generating_title(body.idea)))
    try:
        generated = await generator.generate(body.idea)
    except Exception as e:
        # The "Generating ..." session never outlives a failed generation
        await registry.close(session.recipe.id, missing_ok=True)
        if isinstance(e, InvalidIdeaError):
            raise HTTPException(status_code=422, detail=str(e))
        if isinstance(e, GeneratorNotConfiguredError):
            raise HTTPException(status_code=503, detail=str(e))
        if isinstance(e, UPSTREAM_ERRORS):
            log.error(f"💥 Recipe generation failed: {e!r}")
            raise HTTPException(status_code=502, detail=f"Failed to generate recipe: {e}")
        raise

    recipe = session.recipe
    recipe.title = generated.title
    recipe.ingredients = generated.ingredients
    recipe.steps = generated.steps
    await session.tracker.restart(recipe.title)
    return recipe


@router.get("/{recipe_id}", response_model=Recipe)
async def get_recipe(recipe_id: UUID, registry: SessionRegistry = Depends(get_registry)) -> Recipe:
    return _session(registry, recipe_id).recipe


@router.get("/{recipe_id}/progress", response_model=Progress)
async def get_progress(
    recipe_id: UUID,
    view: ViewFilter = Query(ViewFilter.BOTH, alias="filter"),
    registry: SessionRegistry = Depends(get_registry),
) -> Progress:
    return _session(registry, recipe_id).checklist.progress(view)


@router.post("/{recipe_id}/items/{item_id}/toggle", response_model=RecipeItem)
async def toggle_item(recipe_id: UUID, item_id: UUID, registry: SessionRegistry = Depends(get_registry)) -> RecipeItem:
    session = _session(registry, recipe_id)
    try:
        item = session.checklist.toggle(item_id)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail=f"Item {item_id} not found")
    await session.sync_progress()
    return item


@router.delete("/{recipe_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(recipe_id: UUID, item_id: UUID, registry: SessionRegistry = Depends(get_registry)) -> Response:
    session = _session(registry, recipe_id)
    try:
        session.checklist.delete(item_id)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail=f"Item {item_id} not found")
    await session.sync_progress()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{recipe_id}/clear", response_model=Recipe)
async def clear_recipe(recipe_id: UUID, registry: SessionRegistry = Depends(get_registry)) -> Recipe:
    session = _session(registry, recipe_id)
    await session.clear()
    return session.recipe


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_recipe(recipe_id: UUID, registry: SessionRegistry = Depends(get_registry)) -> Response:
    _session(registry, recipe_id)
    await registry.close(recipe_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
