import asyncio

import pytest

from backend.app.core.config import Settings
from backend.app.services.recipe_generator import (
    INSTRUCTIONS,
    STRICT_SAFETY,
    EmptyResponseError,
    GeneratorNotConfiguredError,
    InvalidIdeaError,
    RecipeGenerator,
)


def fake_model(*responses):
    calls = []
    replies = list(responses)

    async def complete(prompt, instructions):
        calls.append((prompt, instructions))
        return replies.pop(0)

    return complete, calls


def settings(**overrides):
    return Settings(openai_api_key="", **overrides)


def test_generate_parses_sections():
    complete, calls = fake_model("eggs\nmilk\n---\nwhisk\nfry")
    recipe = asyncio.run(RecipeGenerator(complete, settings()).generate("  omelette "))

    assert recipe.title == "omelette"
    assert [i.text for i in recipe.ingredients] == ["eggs", "milk"]
    assert [i.text for i in recipe.steps] == ["whisk", "fry"]
    assert calls == [("omelette", INSTRUCTIONS)]


def test_retries_once_with_stricter_instructions():
    complete, calls = fake_model("Sure! Here is your recipe:", "rice\n---\nboil")
    recipe = asyncio.run(RecipeGenerator(complete, settings()).generate("rice"))

    assert [i.text for i in recipe.steps] == ["boil"]
    assert len(calls) == 2
    assert STRICT_SAFETY not in calls[0][1]
    assert calls[1][1].endswith(STRICT_SAFETY)


def test_empty_after_retry_raises():
    complete, calls = fake_model("", "Ingredients\n---\nSteps")
    with pytest.raises(EmptyResponseError):
        asyncio.run(RecipeGenerator(complete, settings()).generate("anything"))
    assert len(calls) == 2


def test_blank_idea_rejected_without_calling_model():
    complete, calls = fake_model()
    with pytest.raises(InvalidIdeaError):
        asyncio.run(RecipeGenerator(complete, settings()).generate("   "))
    assert calls == []


def test_flat_list_kept_whole_by_default():
    complete, _ = fake_model("a\nb\nc\nd\ne")
    recipe = asyncio.run(RecipeGenerator(complete, settings()).generate("x"))
    assert [i.text for i in recipe.ingredients] == ["a", "b", "c", "d", "e"]
    assert recipe.steps == []


def test_flat_list_halved_when_enabled():
    complete, _ = fake_model("a\nb\nc\nd\ne")
    recipe = asyncio.run(RecipeGenerator(complete, settings(halve_flat_list=True)).generate("x"))
    assert [i.text for i in recipe.ingredients] == ["a", "b"]
    assert [i.text for i in recipe.steps] == ["c", "d", "e"]


def test_missing_api_key():
    with pytest.raises(GeneratorNotConfiguredError):
        asyncio.run(RecipeGenerator(settings=settings()).generate("soup"))


def test_halving_skips_structured_response():
    complete, _ = fake_model("a\nb\nc\n---\nSteps")
    recipe = asyncio.run(RecipeGenerator(complete, settings(halve_flat_list=True)).generate("x"))
    assert [i.text for i in recipe.ingredients] == ["a", "b", "c"]
    assert recipe.steps == []
