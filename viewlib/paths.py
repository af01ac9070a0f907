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

"""Path resolution for views, layouts and partials.

A :class:`PathStrategy` maps logical ids to template locations; the
:class:`PathResolver` turns those locations into files on disk.

Strategies return *unextended* paths.  A relative result is joined under
``<root>/<category dir>``; an absolute result is used as-is.  The resolver
then probes every configured extension in order and returns the first file
that exists::

    class PageStrategy(PathStrategy):
        # expects pages/<id>/template.html
        def view_path(self, view_id, options):
            return Path(view_id) / "template"

    renderer = Renderer(views_dir="pages", strategy=PageStrategy())
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from viewlib.errors import TemplateNotFoundError
from viewlib.utils import camel_case

if TYPE_CHECKING:
    from viewlib.options import RendererOptions

logger = logging.getLogger(__name__)

CATEGORIES = ("view", "layout", "partial")


class PathStrategy:
    """Default naming conventions.  Subclass and override to customise."""

    def view_path(self, view_id: str, options: RendererOptions) -> str | Path:
        """Return the location of view *view_id*, without extension."""
        return view_id

    def layout_path(self, layout_id: str, options: RendererOptions) -> str | Path:
        """Return the location of layout *layout_id*, without extension."""
        return layout_id

    def partial_id(self, file: str, options: RendererOptions) -> str:
        """Turn a partial path relative to the partials dir into its id.

        The extension is stripped and nested directories are folded into
        one camelCase token: ``nav/main.html`` becomes ``navMain``.
        """
        path = PurePath(file)
        stem = path.name
        for ext in options.extensions:
            if stem.endswith(ext):
                stem = stem[: -len(ext)]
                break
        return camel_case(str(path.parent / stem))


class PathResolver:
    """Resolve logical template ids to absolute files."""

    def __init__(self, options: RendererOptions) -> None:
        self.options = options

    def path(self, category: str, name: str) -> Path:
        """Return the unextended absolute location for *name*.

        For partials *name* is a file path relative to the partials dir; an
        empty name yields the partials dir itself.
        """
        o = self.options
        base = o.category_dir(category)
        if category == "partial":
            return base / name if name else base
        if category == "view":
            ret = Path(o.strategy.view_path(name, o))
        else:
            ret = Path(o.strategy.layout_path(name, o))
        if ret.is_absolute():
            return ret
        return base / ret

    def candidates(self, path: str | Path) -> list[Path]:
        """List the files probed for *path*, in order."""
        path = Path(path)
        found = [Path(f"{path}{ext}") for ext in self.options.extensions]
        if path.suffix in self.options.extensions:
            found.insert(0, path)
        return found

    def find(self, path: str | Path) -> Path | None:
        for candidate in self.candidates(path):
            if candidate.is_file():
                return candidate
        return None

    async def locate(self, path: str | Path, *, category: str = "", name: str = "") -> Path:
        """Return the first existing candidate for *path*.

        Raises :class:`TemplateNotFoundError` naming *path* (not the probe
        list) when none exists.
        """
        found = await asyncio.to_thread(self.find, path)
        if found is None:
            raise TemplateNotFoundError(path, category=category, name=name)
        logger.debug("Resolved %s to %s", path, found.name)
        return found

    async def resolve(self, category: str, name: str) -> Path:
        """Resolve a view, layout or partial id to an existing file."""
        if category not in CATEGORIES:
            raise ValueError(f"Unknown template category {category!r}")
        return await self.locate(self.path(category, name), category=category, name=name)
