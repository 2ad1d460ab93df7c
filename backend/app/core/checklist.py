import logging
from typing import List
from uuid import UUID

from ..models.recipe import ItemKind, Progress, Recipe, RecipeItem, ViewFilter

log = logging.getLogger(__name__)


class ItemNotFoundError(KeyError):
    pass


class Checklist:
    """
    Interactive view over a generated recipe: items get checked off or removed.
    """

    def __init__(self, recipe: Recipe):
        self.recipe = recipe

    def visible_items(self, view: ViewFilter = ViewFilter.BOTH) -> List[RecipeItem]:
        if view == ViewFilter.INGREDIENTS:
            return list(self.recipe.ingredients)
        if view == ViewFilter.STEPS:
            return list(self.recipe.steps)
        return self.recipe.ingredients + self.recipe.steps

    def _find(self, item_id: UUID):
        for kind, items in ((ItemKind.INGREDIENT, self.recipe.ingredients), (ItemKind.STEP, self.recipe.steps)):
            for idx, item in enumerate(items):
                if item.id == item_id:
                    return kind, items, idx
        raise ItemNotFoundError(item_id)

    def toggle(self, item_id: UUID) -> RecipeItem:
        _, items, idx = self._find(item_id)
        item = items[idx]
        item.checked = not item.checked
        log.debug(f"Toggled {item_id} -> {item.checked}")
        return item

    def delete(self, item_id: UUID) -> ItemKind:
        kind, items, idx = self._find(item_id)
        del items[idx]
        log.info(f"🗑️ Removed {kind.value} {item_id}")
        return kind

    def clear(self) -> None:
        self.recipe.ingredients = []
        self.recipe.steps = []

    def progress(self, view: ViewFilter = ViewFilter.BOTH) -> Progress:
        items = self.visible_items(view)
        total = len(items)
        completed = sum(1 for item in items if item.checked and item.text.strip())
        if not total:
            return Progress()
        fraction = completed / total
        return Progress(
            completed=completed,
            total=total,
            fraction=fraction,
            percent_text=f"{int(fraction * 100)}%",
        )

    @property
    def is_complete(self) -> bool:
        progress = self.progress()
        return progress.total > 0 and progress.fraction >= 1.0
