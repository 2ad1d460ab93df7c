from __future__ import annotations

from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, confloat, conint


class ItemKind(str, Enum):
    INGREDIENT = "ingredient"
    STEP = "step"


class ViewFilter(str, Enum):
    BOTH = "Both"
    INGREDIENTS = "Ingredients"
    STEPS = "Steps"


class RecipeItem(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    text: str
    checked: bool = False


class Recipe(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    ingredients: List[RecipeItem] = []
    steps: List[RecipeItem] = []


class Progress(BaseModel):
    completed: conint(ge=0) = 0
    total: conint(ge=0) = 0
    fraction: confloat(ge=0, le=1) = 0.0
    percent_text: str = "0%"


class ActivityEvent(str, Enum):
    START = "start"
    UPDATE = "update"
    END = "end"


class ActivityState(BaseModel):
    """Snapshot pushed to whatever mirrors progress outside the app."""

    event: ActivityEvent
    title: str
    progress: confloat(ge=0, le=1) = 0.0


class ParseRequest(BaseModel):
    text: str
    title: Optional[str] = None


class SectionsResponse(BaseModel):
    ingredients: List[str]
    steps: List[str]


class GenerateRequest(BaseModel):
    idea: str
