import asyncio
import logging
from functools import lru_cache
from typing import Dict, List, Optional
from uuid import UUID

from ..models.recipe import ActivityState, Recipe
from .checklist import Checklist
from .config import get_settings
from .progress_tracker import ProgressTracker

log = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    pass


class RecipeSession:
    """A checklist plus the activity that mirrors its progress."""

    def __init__(self, recipe: Recipe, linger_sec: float):
        self.checklist = Checklist(recipe)
        self.tracker = ProgressTracker(self._broadcast, linger_sec=linger_sec)
        self.subscribers: List[asyncio.Queue] = []
        self.last_state: Optional[ActivityState] = None

    @property
    def recipe(self) -> Recipe:
        return self.checklist.recipe

    async def _broadcast(self, state: ActivityState):
        self.last_state = state
        for queue in self.subscribers:
            queue.put_nowait(state)

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self.subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue):
        if queue in self.subscribers:
            self.subscribers.remove(queue)

    async def sync_progress(self):
        await self.tracker.report(self.checklist.progress())

    async def clear(self):
        self.checklist.clear()
        await self.tracker.cancel_all()
        await self.tracker.end()


class SessionRegistry:
    """
    In-memory only; sessions are gone when the process exits. Clients should
    DELETE finished checklists, but once more than max_sessions are open the
    oldest ones are closed to make room.
    """

    def __init__(self, max_sessions: Optional[int] = None):
        self.max_sessions = max(1, max_sessions or get_settings().max_sessions)
        self.sessions: Dict[UUID, RecipeSession] = {}

    async def open(self, recipe: Recipe) -> RecipeSession:
        while len(self.sessions) >= self.max_sessions:
            oldest = next(iter(self.sessions))
            log.warning(f"⚠️ Session limit {self.max_sessions} reached, evicting {oldest}")
            await self.close(oldest)

        session = RecipeSession(recipe, get_settings().completion_linger_sec)
        self.sessions[recipe.id] = session
        await session.tracker.start(recipe.title)
        log.info(f"📋 Opened checklist {recipe.id}: {len(recipe.ingredients)} ingredients, {len(recipe.steps)} steps")
        return session

    def get(self, recipe_id: UUID) -> RecipeSession:
        try:
            return self.sessions[recipe_id]
        except KeyError:
            raise SessionNotFoundError(recipe_id) from None

    async def close(self, recipe_id: UUID, missing_ok: bool = False):
        try:
            session = self.get(recipe_id)
        except SessionNotFoundError:
            if missing_ok:
                return
            raise
        del self.sessions[recipe_id]
        await session.clear()
        log.info(f"🔒 Closed checklist {recipe_id}")


@lru_cache()
def get_registry() -> SessionRegistry:
    return SessionRegistry()
