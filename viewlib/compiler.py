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

"""Compile template files into renderable objects.

:class:`TemplateCompiler` reads a file, splits off its front matter and
hands the body to Jinja2.  The result is a :class:`CompiledTemplate`: the
Jinja2 template plus the front-matter attributes, with a uniform
``render(locals, options)`` entry point.

``options`` is a plain mapping.  Its ``data`` bag is visible to templates as
``data``; ``data["body"]`` (the rendered view inside a layout) is also
visible as ``body``; ``partials`` supplies per-render partial templates.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import Environment, Template
from markupsafe import Markup

from viewlib.errors import TemplateReadError
from viewlib.frontmatter import ParsedTemplate, parse_front_matter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledTemplate:
    """A compiled template file and its front-matter attributes."""

    path: Path
    body: str
    attributes: dict[str, Any] = field(default_factory=dict)
    fn: Template | None = None

    def render(
        self,
        locals: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        return self.fn.render(template_context(locals, options))


def template_context(
    locals: Mapping[str, Any] | None,
    options: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Build the variables a template sees from *locals* and *options*."""
    options = options or {}
    context = dict(locals or {})
    data = options.get("data") or {}
    context["data"] = data
    if data.get("body") is not None:
        context["body"] = Markup(data["body"])
    partials = options.get("partials")
    if partials is not None:
        context["partials"] = partials
    return context


def read_template(path: Path) -> ParsedTemplate:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateReadError(path, exc.strerror or str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise TemplateReadError(path, str(exc)) from exc
    return parse_front_matter(text)


class TemplateCompiler:
    """Turn template files into :class:`CompiledTemplate` objects."""

    def __init__(self, environment: Environment, root: Path | None = None) -> None:
        self.environment = environment
        self.root = root

    def _rel(self, path: Path) -> str:
        if self.root is None:
            return str(path)
        try:
            return str(path.relative_to(self.root))
        except ValueError:
            return str(path)

    async def read(self, path: str | Path) -> ParsedTemplate:
        """Read *path* and split off its front matter."""
        path = Path(path)
        logger.debug("Reading template %s", self._rel(path))
        return await asyncio.to_thread(read_template, path)

    def compile_source(self, source: str) -> Template:
        """Compile template *source*; syntax errors propagate unchanged."""
        return self.environment.from_string(source)

    async def compile(self, path: str | Path) -> CompiledTemplate:
        """Read and compile the template at *path*."""
        path = Path(path)
        parsed = await self.read(path)
        logger.debug("Compiling template %s", self._rel(path))
        fn = self.compile_source(parsed.body)
        return CompiledTemplate(
            path=path,
            body=parsed.body,
            attributes=parsed.attributes,
            fn=fn,
        )
