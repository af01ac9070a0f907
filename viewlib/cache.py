# viewlib — server-side view rendering for async web applications
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Bounded in-memory cache for compiled templates and partial listings.

Keys are namespaced strings: ``template:<absolute path>`` for compiled
templates and ``partials:list:<directory>`` for partial directory listings.

:meth:`TemplateCache.get_or_create` guarantees at most one build per key
even when several coroutines ask for the same missing entry: the first
caller starts the build as a task and parks it in a pending table, later
callers await that same task.  Only successful builds are stored.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


def template_key(path: Any) -> str:
    return f"template:{path}"


def listing_key(directory: Any) -> str:
    return f"partials:list:{directory}"


class TemplateCache:
    """Least-recently-used key/value store with a fixed capacity."""

    def __init__(self, max_size: int = DEFAULT_CAPACITY) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries: OrderedDict[str, Any] = OrderedDict()
        self._pending: dict[str, asyncio.Future[Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def peek(self, key: str) -> Any | None:
        """Return the entry for *key* without touching its recency."""
        return self._entries.get(key)

    def get(self, key: str) -> Any | None:
        """Return the entry for *key* and mark it most recently used."""
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted %s from cache", evicted)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def is_pending(self, key: str) -> bool:
        """True while a build for *key* is in flight."""
        return key in self._pending

    async def get_or_create(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """Return the entry for *key*, building it with *factory* on a miss.

        The build runs as its own task, so cancelling one caller neither
        cancels the build nor leaves the other waiters hanging.
        """
        if self.peek(key) is not None:
            logger.debug("Cache hit for %s", key)
            return self.get(key)
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._build(key, factory))
            self._pending[key] = task
            task.add_done_callback(_retrieve_exception)
        else:
            logger.debug("Waiting on in-flight build for %s", key)
        return await asyncio.shield(task)

    async def _build(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        try:
            value = await factory()
        finally:
            if self._pending.get(key) is asyncio.current_task():
                del self._pending[key]
        logger.debug("Saving %s to cache", key)
        self.set(key, value)
        return value


def _retrieve_exception(task: asyncio.Future[Any]) -> None:
    # a failed build whose callers were all cancelled must not warn
    if not task.cancelled():
        task.exception()
