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

"""Renderer configuration.

Every :class:`~viewlib.renderer.Renderer` owns one immutable
:class:`RendererOptions`.  Library-wide defaults live on
``Renderer.defaults``; per-instance keyword arguments override them::

    Renderer.defaults = RendererOptions(extension=".jinja")
    renderer = Renderer(root="templates", default_layout="main")
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from jinja2 import Environment

from viewlib.paths import PathStrategy

# may return an awaitable
BeforeRender = Callable[[dict[str, Any], dict[str, Any]], Any]


def normalize_extensions(extension: str | Sequence[str]) -> tuple[str, ...]:
    """Return *extension* as a non-empty tuple of dotted suffixes.

    Accepts a single string or a sequence, with or without the leading dot.
    """
    items = [extension] if isinstance(extension, str) else list(extension)
    if not items:
        raise ValueError("at least one template extension is required")
    return tuple(ext if ext.startswith(".") else f".{ext}" for ext in items)


@dataclass(frozen=True)
class RendererOptions:
    """All the knobs a renderer understands."""

    # base directory for every relative lookup; None means the working
    # directory at the time a renderer is created
    root: Path | None = None

    views_dir: str = "views"
    layouts_dir: str = "layouts"
    partials_dir: str = "partials"

    # one extension or several, tried in order
    extension: str | Sequence[str] = ".html"

    default_layout: str | None = None

    cache: bool = True
    cache_size: int = 100

    # seed for options["data"] on every render
    data: Mapping[str, Any] = field(default_factory=dict)

    helpers: Mapping[str, Callable[..., Any]] | None = None
    partials: Mapping[str, Any] | None = None
    partials_mode: Literal["pull", "push"] = "pull"

    strategy: PathStrategy = field(default_factory=PathStrategy)
    before_render: BeforeRender | None = None

    environment: Environment | None = None
    autoescape: bool = True

    def __post_init__(self) -> None:
        if self.root is not None:
            object.__setattr__(self, "root", Path(self.root).expanduser().absolute())
        normalize_extensions(self.extension)
        if self.partials_mode not in ("pull", "push"):
            raise ValueError(f"partials_mode must be 'pull' or 'push', got {self.partials_mode!r}")
        if self.cache_size < 1:
            raise ValueError("cache_size must be at least 1")

    @property
    def extensions(self) -> tuple[str, ...]:
        return normalize_extensions(self.extension)

    def category_dir(self, category: str) -> Path:
        """Return the absolute directory for ``view``, ``layout`` or ``partial``."""
        try:
            name = {
                "view": self.views_dir,
                "layout": self.layouts_dir,
                "partial": self.partials_dir,
            }[category]
        except KeyError:
            raise ValueError(f"Unknown template category {category!r}") from None
        return (self.root or Path.cwd()) / name
