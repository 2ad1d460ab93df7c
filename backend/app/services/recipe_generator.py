"""
Asks the language model for a recipe and turns the reply into a Recipe.
"""

import logging
from typing import Awaitable, Callable, Optional

from ..core.config import Settings, get_settings
from ..models.recipe import Recipe, RecipeItem
from . import openai_client
from .recipe_parser import RecipeParser

log = logging.getLogger(__name__)

INSTRUCTIONS = """\
You are a helpful and knowledgeable chef. Given a food idea, generate a detailed recipe with ingredients followed by concise step-by-step instructions.
OUTPUT FORMAT (strict):
- First list all ingredients, ONE per line.
- Then output a SINGLE delimiter line containing exactly: ---
- Then list all steps, ONE per line.
HARD CONSTRAINTS:
- No introductions, headings, section titles, categories, or notes.
- No Markdown (no #, *, -, •), no numbering, and no checkboxes.
- Do not prefix items with punctuation or emojis.
- Keep each item on one line.
SAFETY REQUIREMENTS:
- Only provide benign, non-harmful cooking guidance appropriate for general audiences.
- Avoid hazardous, violent, or explicit language; keep tone neutral and safety-conscious.
- If a requested item is unsafe, substitute a safe culinary alternative."""

STRICT_SAFETY = (
    "STRICT SAFETY: Keep content universally safe. Do not include hazardous activities; "
    "phrase cutting/slicing as careful, standard culinary technique."
)

CompleteFn = Callable[[str, str], Awaitable[str]]


class RecipeGeneratorError(Exception):
    pass


class GeneratorNotConfiguredError(RecipeGeneratorError):
    pass


class InvalidIdeaError(RecipeGeneratorError, ValueError):
    pass


class EmptyResponseError(RecipeGeneratorError):
    pass


class RecipeGenerator:
    def __init__(self, complete: Optional[CompleteFn] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.complete = complete or openai_client.complete

    async def generate(self, idea: str) -> Recipe:
        idea = idea.strip()
        if not idea:
            raise InvalidIdeaError("Food idea must not be empty")
        if self.complete is openai_client.complete and not self.settings.api_key_configured:
            raise GeneratorNotConfiguredError("OpenAI API key not configured. Please set OPENAI_API_KEY in your .env file.")

        instructions = INSTRUCTIONS
        attempts = max(1, self.settings.max_generation_attempts)
        for attempt in range(attempts):
            log.info(f"🍳 Requesting recipe for '{idea}' (attempt {attempt + 1}/{attempts})")
            text = await self.complete(idea, instructions)
            ingredients, steps = RecipeParser.split_sections(text)
            if ingredients or steps:
                break
            # Safety refusals and empty replies both land here
            log.warning(f"⚠️ No usable items in {len(text)} characters of model output")
            instructions = INSTRUCTIONS + "\n" + STRICT_SAFETY
        else:
            raise EmptyResponseError("The model returned no ingredients or steps")

        if self.settings.halve_flat_list and RecipeParser.split_blocks(text) is None:
            mid = max(1, len(ingredients) // 2)
            ingredients, steps = ingredients[:mid], ingredients[mid:]

        log.info(f"✅ Generated {len(ingredients)} ingredients and {len(steps)} steps")
        return Recipe(
            title=idea,
            ingredients=[RecipeItem(text=text) for text in ingredients],
            steps=[RecipeItem(text=text) for text in steps],
        )
