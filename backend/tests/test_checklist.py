from uuid import uuid4

import pytest

from backend.app.core.checklist import Checklist, ItemNotFoundError
from backend.app.models.recipe import ItemKind, Recipe, RecipeItem, ViewFilter


def make_checklist():
    recipe = Recipe(
        title="Eggs",
        ingredients=[RecipeItem(text="eggs"), RecipeItem(text="butter")],
        steps=[RecipeItem(text="melt butter"), RecipeItem(text="scramble")],
    )
    return Checklist(recipe)


def test_toggle_updates_progress():
    checklist = make_checklist()
    first = checklist.recipe.ingredients[0]

    assert checklist.toggle(first.id).checked is True
    progress = checklist.progress()
    assert (progress.completed, progress.total) == (1, 4)
    assert progress.fraction == 0.25
    assert progress.percent_text == "25%"

    assert checklist.toggle(first.id).checked is False
    assert checklist.progress().completed == 0


def test_progress_respects_filter():
    checklist = make_checklist()
    checklist.toggle(checklist.recipe.steps[0].id)

    assert checklist.progress(ViewFilter.INGREDIENTS).completed == 0
    steps = checklist.progress(ViewFilter.STEPS)
    assert (steps.completed, steps.total, steps.percent_text) == (1, 2, "50%")
    assert [i.text for i in checklist.visible_items(ViewFilter.BOTH)] == ["eggs", "butter", "melt butter", "scramble"]


def test_percent_is_truncated():
    recipe = Recipe(title="x", ingredients=[RecipeItem(text="a", checked=True), RecipeItem(text="b", checked=True), RecipeItem(text="c")])
    assert Checklist(recipe).progress().percent_text == "66%"


def test_blank_items_never_count_as_done():
    recipe = Recipe(title="x", ingredients=[RecipeItem(text="  ", checked=True), RecipeItem(text="salt", checked=True)])
    progress = Checklist(recipe).progress()
    assert (progress.completed, progress.total) == (1, 2)


def test_empty_checklist_progress():
    checklist = Checklist(Recipe(title="empty"))
    progress = checklist.progress()
    assert (progress.completed, progress.total, progress.fraction, progress.percent_text) == (0, 0, 0.0, "0%")
    assert not checklist.is_complete


def test_delete_removes_from_right_section():
    checklist = make_checklist()
    step = checklist.recipe.steps[1]

    assert checklist.delete(step.id) == ItemKind.STEP
    assert [i.text for i in checklist.recipe.steps] == ["melt butter"]
    assert checklist.delete(checklist.recipe.ingredients[0].id) == ItemKind.INGREDIENT
    assert checklist.progress().total == 2


def test_unknown_item_raises():
    checklist = make_checklist()
    with pytest.raises(ItemNotFoundError):
        checklist.toggle(uuid4())
    with pytest.raises(KeyError):
        checklist.delete(uuid4())


def test_complete_and_clear():
    checklist = make_checklist()
    for item in checklist.visible_items():
        checklist.toggle(item.id)
    assert checklist.is_complete

    checklist.clear()
    assert checklist.visible_items() == []
    assert not checklist.is_complete
