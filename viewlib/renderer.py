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

"""View rendering with layouts, partials and front matter.

Usage::

    from viewlib import Renderer

    renderer = Renderer(root="templates", default_layout="main")
    html = await renderer.render("home", {"user": user})

Resolution (with the default strategy and ``extension=".html"``):

* view ``home``      -> ``<root>/views/home.html``
* layout ``main``    -> ``<root>/layouts/main.html``
* partial files      -> ``<root>/partials/**/*.html``

A layout receives the rendered view as ``body`` (``{{ body }}``); render
metadata (``view``, ``layout``, ``body`` and anything the caller adds) is
available as ``data``.  Front-matter attributes of the layout and then the
view are merged into the locals, so the view wins.
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, ClassVar

from jinja2 import Environment, Template
from markupsafe import Markup

from viewlib.cache import TemplateCache, listing_key, template_key
from viewlib.compiler import CompiledTemplate, TemplateCompiler
from viewlib.frontmatter import ParsedTemplate
from viewlib.options import RendererOptions
from viewlib.partials import PartialLoader, PartialRegistry, PartialTable
from viewlib.paths import PathResolver
from viewlib.utils import merge

logger = logging.getLogger(__name__)


class Renderer:
    """Locate, compile, cache and compose templates into HTML strings.

    Keyword arguments override the fields of :attr:`defaults`; see
    :class:`~viewlib.options.RendererOptions` for the full list.
    """

    defaults: ClassVar[RendererOptions] = RendererOptions()

    def __init__(self, options: RendererOptions | None = None, **overrides: Any) -> None:
        base = options if options is not None else self.defaults
        o = dataclasses.replace(base, **overrides) if overrides else base
        if o.root is None:
            o = dataclasses.replace(o, root=Path.cwd())
        self.options = o
        logger.debug("Creating renderer with root %s", o.root)

        self.global_partials = PartialTable()
        if o.environment is not None:
            logger.debug("Using a custom Jinja2 environment")
            self.environment = o.environment
        else:
            self.environment = Environment(
                loader=PartialLoader(self.global_partials),
                autoescape=o.autoescape,
                keep_trailing_newline=True,
                cache_size=0,
            )
        self.environment.globals["partials"] = self.global_partials.templates

        self.cache = TemplateCache(o.cache_size) if o.cache else None
        if self.cache is not None:
            logger.debug("Caching enabled (%d entries)", o.cache_size)

        self.resolver = PathResolver(o)
        self.compiler = TemplateCompiler(self.environment, o.root)
        self.partials = PartialRegistry(o, self.resolver, self.get_template, self.cache)
        self._partials_pushed = False
        self._push_lock = asyncio.Lock()

        if o.helpers:
            self.helper(o.helpers)
        if o.partials:
            self.partial(o.partials)

    # --- global helpers and partials ----------------------------------------

    def helper(
        self,
        name: str | Mapping[str, Callable[..., Any]],
        fn: Callable[..., Any] | None = None,
    ) -> None:
        """Register one helper, or a mapping of helpers.

        Helpers are callable from templates both as functions and filters.
        """
        if isinstance(name, Mapping):
            for key, value in name.items():
                self.helper(key, value)
            return
        logger.debug("Registering global helper %s", name)
        self.environment.globals[name] = fn
        self.environment.filters[name] = fn

    def partial(
        self,
        name: str | Mapping[str, Any],
        fn: str | Template | CompiledTemplate | None = None,
    ) -> None:
        """Register one global partial, or a mapping of them.

        A partial may be given as template source, a Jinja2 template or a
        compiled template.
        """
        if isinstance(name, Mapping):
            for key, value in name.items():
                self.partial(key, value)
            return
        if isinstance(fn, CompiledTemplate):
            fn = fn.fn
        elif isinstance(fn, str):
            fn = self.compiler.compile_source(fn)
        logger.debug("Registering global partial %s", name)
        self.global_partials.register(name, fn)

    def unregister_partial(self, name: str) -> bool:
        logger.debug("Unregistering global partial %s", name)
        return self.global_partials.unregister(name)

    # --- paths --------------------------------------------------------------

    def view_path(self, view_id: str) -> Path:
        return self.resolver.path("view", view_id)

    def layout_path(self, layout_id: str) -> Path:
        return self.resolver.path("layout", layout_id)

    def partial_path(self, file: str = "") -> Path:
        return self.resolver.path("partial", file)

    def partial_id(self, file: str) -> str:
        return self.partials.partial_id(file)

    # --- templates ----------------------------------------------------------

    async def get_file(self, path: str | Path) -> ParsedTemplate:
        """Read a template file and split off its front matter."""
        return await self.compiler.read(path)

    async def compile_template(self, path: str | Path) -> CompiledTemplate:
        """Read and compile a template file, bypassing the cache."""
        return await self.compiler.compile(path)

    async def get_template(self, path: str | Path) -> CompiledTemplate:
        """Return the compiled template for *path*, probing extensions.

        With caching enabled the same object is returned for every call
        until it is evicted or invalidated.
        """
        abs_path = await self.resolver.locate(path)
        if self.cache is None:
            return await self.compile_template(abs_path)
        return await self.cache.get_or_create(
            template_key(abs_path), lambda: self.compile_template(abs_path)
        )

    async def get_view(self, view_id: str) -> CompiledTemplate:
        path = await self.resolver.resolve("view", view_id)
        return await self.get_template(path)

    async def get_layout(self, layout_id: str | None) -> CompiledTemplate | None:
        """Return the compiled layout, or ``None`` for a falsy id."""
        if not layout_id:
            return None
        path = await self.resolver.resolve("layout", layout_id)
        return await self.get_template(path)

    async def find_partials(self) -> list[str]:
        return await self.partials.list()

    async def get_partial(self, file: str) -> Template:
        return (await self.partials.get(file)).fn

    async def get_partials(self) -> dict[str, Template]:
        return await self.partials.get_all()

    # --- push-model partials ------------------------------------------------

    async def register_partials(self) -> list[str]:
        """Register every discovered partial as a global partial."""
        names = await self.partials.register_all(self.global_partials)
        self._partials_pushed = True
        return names

    async def apply_partial_event(self, change: str, file: str | Path) -> bool:
        """Apply a ``created``/``changed``/``removed`` watch event."""
        return await self.partials.apply_event(self.global_partials, change, file)

    # --- cache control ------------------------------------------------------

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    def invalidate(self, path: str | Path) -> None:
        """Drop a compiled template (absolute path) and the partials listing."""
        if self.cache is None:
            return
        self.cache.delete(template_key(Path(path)))
        self.cache.delete(listing_key(self.partials.directory))

    async def _pull_partials(self) -> dict[str, Template]:
        discovered = await self.get_partials()
        shadowed = discovered.keys() & self.global_partials.templates.keys()
        if shadowed:
            logger.warning(
                "Discovered partials shadow registered partials: %s",
                ", ".join(sorted(shadowed)),
            )
        return {**self.global_partials.templates, **discovered}

    # --- composition --------------------------------------------------------

    async def render(
        self,
        template: str,
        locals: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """Render view *template* with *locals*, wrapped in a layout if any.

        ``locals["layout"]`` picks the layout: absent falls back to
        ``default_layout``, ``None`` renders the view on its own.
        ``options["body"]`` supplies pre-rendered view output and skips
        the view template.  Neither argument is modified.
        """
        o = self.options
        locals = merge(locals)
        options = merge({"data": dict(o.data)}, options)
        if options.get("data") is None:
            options["data"] = {}
        logger.debug("Rendering %s template", template)

        if o.before_render is not None:
            result = o.before_render(locals, options)
            if inspect.isawaitable(result):
                await result

        layout_id = locals.pop("layout", o.default_layout)
        body = options.get("body")

        if body:
            layout = await self.get_layout(layout_id)
            view = None
        else:
            layout, view = await asyncio.gather(
                self.get_layout(layout_id), self.get_view(template)
            )

        if layout is not None:
            locals.update(merge(layout.attributes))
        if view is not None:
            locals.update(merge(view.attributes))

        data = options["data"]
        data["view"] = template
        if layout_id:
            data["layout"] = layout_id

        if o.partials_mode == "push":
            if not self._partials_pushed:
                async with self._push_lock:
                    if not self._partials_pushed:
                        await self.register_partials()
        else:
            options["partials"] = await self._pull_partials()

        if layout is None:
            return body or view.render(locals, options)

        logger.debug("Rendering with layout %s", layout_id)
        data["body"] = Markup(body) if body else Markup(view.render(locals, options))
        return layout.render(locals, options)
