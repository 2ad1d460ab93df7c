"""
Mirrors checklist progress to an outside subscriber (lock-screen style
activity). One activity at a time; it ends itself shortly after the
checklist reaches 100%.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

from ..models.recipe import ActivityEvent, ActivityState, Progress

log = logging.getLogger(__name__)

DEFAULT_TITLE = "Recipe Progress"


def generating_title(idea: str) -> str:
    idea = idea.strip()
    return f"Generating {idea}" if idea else "Generating Recipe..."


class ProgressTracker:
    def __init__(self, publish_cb: Callable[[ActivityState], Awaitable[None]], linger_sec: float = 2.0):
        self.publish = publish_cb
        self.linger_sec = linger_sec
        self.title: Optional[str] = None
        self.tasks: Set[asyncio.Task] = set()

    @property
    def active(self) -> bool:
        return self.title is not None

    async def start(self, title: str, progress: float = 0.0):
        if self.active:
            return
        self.title = title.strip() or DEFAULT_TITLE
        log.info(f"✅ Activity started: {self.title} - {int(progress * 100)}%")
        await self.publish(ActivityState(event=ActivityEvent.START, title=self.title, progress=progress))

    async def update(self, progress: float):
        if not self.active:
            return
        await self.publish(ActivityState(event=ActivityEvent.UPDATE, title=self.title, progress=progress))

    async def end(self):
        if not self.active:
            return
        title, self.title = self.title, None
        log.info(f"🛑 Activity ended: {title}")
        await self.publish(ActivityState(event=ActivityEvent.END, title=title, progress=0.0))

    async def restart(self, title: str):
        await self.end()
        await self.start(title)

    async def report(self, progress: Progress):
        await self.update(progress.fraction)
        if progress.total > 0 and progress.fraction >= 1.0:
            task = asyncio.create_task(self._end_after_linger())
            self.tasks.add(task)
            task.add_done_callback(self.tasks.discard)

    async def _end_after_linger(self):
        await asyncio.sleep(self.linger_sec)
        await self.end()

    async def cancel_all(self):
        for task in self.tasks:
            task.cancel()
        self.tasks.clear()
