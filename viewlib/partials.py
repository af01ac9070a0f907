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

"""Partial discovery and registration.

Partials are discovered by walking the partials directory.  Each file gets
an id from the path strategy (``nav/main.html`` -> ``navMain``) and is
compiled through the template cache.

Two registration models are supported, selected by
``RendererOptions.partials_mode``:

``pull``
    :meth:`PartialRegistry.get_all` builds a fresh id -> template mapping
    which the renderer passes along with every render call.  Nothing global
    is mutated.

``push``
    Discovered partials are registered once into the renderer's global
    :class:`PartialTable` and kept current with
    :meth:`PartialRegistry.apply_event`.  This table is the only shared
    mutable state: one writer (the registry), many readers (renders).

Either way templates use them as ``{% include partials.navMain %}``; global
partials also resolve by name, ``{% include "navMain" %}``.

Id collisions are not an error: the later file wins and a warning is
logged.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import BaseLoader, Environment, Template, TemplateNotFound

from viewlib.cache import TemplateCache, listing_key, template_key
from viewlib.compiler import CompiledTemplate
from viewlib.paths import PathResolver

if TYPE_CHECKING:
    from viewlib.options import RendererOptions

logger = logging.getLogger(__name__)

EVENT_CREATED = "created"
EVENT_CHANGED = "changed"
EVENT_REMOVED = "removed"


class PartialTable:
    """Global name -> template table shared by every render."""

    def __init__(self) -> None:
        self.templates: dict[str, Template] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.templates

    def __len__(self) -> int:
        return len(self.templates)

    def get(self, name: str) -> Template | None:
        return self.templates.get(name)

    def register(self, name: str, template: Template) -> None:
        self.templates[name] = template

    def unregister(self, name: str) -> bool:
        return self.templates.pop(name, None) is not None


class PartialLoader(BaseLoader):
    """Jinja2 loader serving templates from a :class:`PartialTable`."""

    def __init__(self, table: PartialTable) -> None:
        self.table = table

    def load(
        self,
        environment: Environment,
        name: str,
        globals: dict[str, Any] | None = None,
    ) -> Template:
        template = self.table.get(name)
        if template is None:
            raise TemplateNotFound(name)
        return template

    def list_templates(self) -> list[str]:
        return sorted(self.table.templates)


def _walk(directory: Path, extensions: tuple[str, ...]) -> list[str]:
    files = []
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for filename in filenames:
            if os.path.splitext(filename)[1] in extensions:
                files.append((Path(dirpath) / filename).relative_to(directory).as_posix())
    return sorted(files)


class PartialRegistry:
    """Discover, compile and register partial templates."""

    def __init__(
        self,
        options: RendererOptions,
        resolver: PathResolver,
        get_template: Callable[[Path], Awaitable[CompiledTemplate]],
        cache: TemplateCache | None = None,
    ) -> None:
        self.options = options
        self.resolver = resolver
        self._get_template = get_template
        self.cache = cache

    @property
    def directory(self) -> Path:
        return self.resolver.path("partial", "")

    def partial_id(self, file: str) -> str:
        return self.options.strategy.partial_id(file, self.options)

    async def list(self) -> list[str]:
        """Return partial files relative to the partials dir, sorted.

        A missing partials dir yields an empty list.
        """
        directory = self.directory
        logger.debug("Searching for partials in %s", directory)
        if not await asyncio.to_thread(directory.is_dir):
            return []

        key = listing_key(directory)
        if self.cache is not None and self.cache.peek(key) is not None:
            return list(self.cache.get(key))

        files = await asyncio.to_thread(_walk, directory, self.options.extensions)
        if self.cache is not None:
            self.cache.set(key, tuple(files))
        logger.debug("%d partials found", len(files))
        return files

    async def get(self, file: str) -> CompiledTemplate:
        """Compile (or fetch from cache) the partial at relative path *file*."""
        path = await self.resolver.resolve("partial", file)
        return await self._get_template(path)

    async def get_all(self) -> dict[str, Template]:
        """Return a fresh id -> template mapping of every discovered partial."""
        files = await self.list()
        compiled = await asyncio.gather(*(self.get(file) for file in files))
        partials: dict[str, Template] = {}
        for file, template in zip(files, compiled):
            partial_id = self.partial_id(file)
            if partial_id in partials:
                logger.warning(
                    "Partial %s (%s) overrides an earlier partial with the same id",
                    partial_id, file,
                )
            partials[partial_id] = template.fn
        return partials

    # --- push model ---------------------------------------------------------

    async def register_all(self, table: PartialTable) -> list[str]:
        """Register every discovered partial into *table*; return the ids."""
        partials = await self.get_all()
        for name, template in partials.items():
            if name in table:
                logger.warning("Discovered partial %s replaces a registered partial", name)
            table.register(name, template)
        logger.debug("Registered %d partials", len(partials))
        return list(partials)

    def _relative(self, file: str | Path) -> str | None:
        path = Path(file)
        if path.is_absolute():
            try:
                path = path.relative_to(self.directory)
            except ValueError:
                return None
        if path.suffix not in self.options.extensions:
            return None
        return path.as_posix()

    def _invalidate(self, file: str) -> None:
        if self.cache is None:
            return
        self.cache.delete(listing_key(self.directory))
        self.cache.delete(template_key(self.directory / file))

    async def apply_event(self, table: PartialTable, change: str, file: str | Path) -> bool:
        """Apply one filesystem watch event to *table*.

        ``created`` and ``changed`` recompile the file and (re-)register
        it; ``removed`` unregisters it.  *file* may be absolute or relative
        to the partials dir.  Returns ``False`` for files that are not
        partials.
        """
        rel = self._relative(file)
        if rel is None:
            return False
        name = self.partial_id(rel)
        self._invalidate(rel)

        if change in (EVENT_CREATED, EVENT_CHANGED):
            template = await self.get(rel)
            table.register(name, template.fn)
            logger.info("Partial %s %s (%s)", name, change, rel)
        elif change == EVENT_REMOVED:
            table.unregister(name)
            logger.info("Partial %s removed (%s)", name, rel)
        else:
            raise ValueError(f"Unknown partial event {change!r}")
        return True
