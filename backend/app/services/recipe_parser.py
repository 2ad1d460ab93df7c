"""
Turns free-form model output into ingredient and step lists.

The model is asked for ingredients, a ``---`` line, then steps, but it does
not always comply: it adds intros, headings, markdown bullets and numbering.
Everything here is a pure function of the input string and never raises.
"""

import re
from typing import List, Optional, Tuple

from ..models.recipe import Recipe, RecipeItem

SECTION_DELIMITER = "\n---\n"
STEP_HEADINGS = ("instruction", "direction")
BANNED_TOKENS = (
    "sure!", "here's", "here is", "recipe:",
    "ingredients", "ingredient",
    "instructions", "instruction",
    "directions", "direction",
    "steps", "step",
)


class RecipeParser:
    marker_patterns = [
        re.compile(r"^[-*•‣◦]\s+"),
        re.compile(r"^\d+\.\s+"),
        re.compile(r"^\(\d+\)\s+"),
        re.compile(r"^#+\s+"),
        re.compile(r"^[☐✅❌]\s*"),
        # inline bold label in front of real content, e.g. "**Ingredients:** 2 cups flour"
        re.compile(r"^\*\*[^*\n]+?:\*\*\s+(?=\S)"),
    ]
    edge_pattern = re.compile(r"^[\s*_`~:;—-]+|[\s*_`~:;—-]+$")
    norm_pattern = re.compile(r"""^[\s:*\-_`~!()\[\]{}.,"']+|[\s:*\-_`~!()\[\]{}.,"']+$""")

    @classmethod
    def _strip_markers(cls, line: str) -> str:
        stripped = True
        while stripped:
            stripped = False
            for pattern in cls.marker_patterns:
                new = pattern.sub("", line, count=1)
                if new != line:
                    line = new
                    stripped = True
        return line

    @classmethod
    def clean_line(cls, line: str) -> str:
        """Strip list markers and emphasis until the line stops changing."""
        line = line.strip()
        while True:
            cleaned = cls.edge_pattern.sub("", cls._strip_markers(line)).strip()
            if cleaned == line:
                return cleaned
            line = cleaned

    @classmethod
    def is_noise(cls, line: str) -> bool:
        norm = cls.norm_pattern.sub("", line.lower())
        return any(norm == token or norm.startswith(token) for token in BANNED_TOKENS)

    @classmethod
    def extract_items(cls, text: str) -> List[str]:
        items: List[str] = []
        for raw in text.splitlines():
            if not raw.strip():
                continue
            line = cls.clean_line(raw)
            if line and not cls.is_noise(line):
                items.append(line)
        return items

    @staticmethod
    def split_blocks(text: str) -> Optional[Tuple[str, str]]:
        """Raw (ingredients, steps) blocks, or None when the text has no section cue."""
        normalized = text.replace("\r\n", "\n")
        parts = normalized.split(SECTION_DELIMITER)
        if len(parts) >= 2:
            return parts[0], "\n".join(parts[1:])

        lines = normalized.splitlines()
        idx = _first_step_heading(lines)
        if idx is None:
            return None
        return "\n".join(lines[:idx]), "\n".join(lines[idx:])

    @classmethod
    def split_sections(cls, text: str) -> Tuple[List[str], List[str]]:
        blocks = cls.split_blocks(text)
        if blocks is None:
            # No structure at all: one undifferentiated list
            return cls.extract_items(text.replace("\r\n", "\n")), []
        ingredients_block, steps_block = blocks
        return cls.extract_items(ingredients_block), cls.extract_items(steps_block)

    @classmethod
    def parse(cls, raw: str, title: str = "Untitled") -> Recipe:
        ingredients, steps = cls.split_sections(raw)
        return Recipe(
            title=title,
            ingredients=[RecipeItem(text=text) for text in ingredients],
            steps=[RecipeItem(text=text) for text in steps],
        )


def _first_step_heading(lines: List[str]) -> Optional[int]:
    for idx, line in enumerate(lines):
        if line.strip().lower().startswith(STEP_HEADINGS):
            return idx
    return None


extract_items = RecipeParser.extract_items
split_sections = RecipeParser.split_sections
