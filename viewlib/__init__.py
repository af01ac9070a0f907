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

"""viewlib: layouts, partials and front matter for Jinja2 views.

Resolves view, layout and partial ids to template files, compiles and
caches them, and composes views into layouts for async web applications.

Usage::

    from viewlib import Renderer

    renderer = Renderer(root="templates", default_layout="main")
    html = await renderer.render("home", {"name": "World"})
"""

from viewlib.cache import TemplateCache
from viewlib.compiler import CompiledTemplate, TemplateCompiler
from viewlib.errors import FrontMatterError, TemplateNotFoundError, TemplateReadError, ViewError
from viewlib.frontmatter import ParsedTemplate, has_front_matter, parse_front_matter
from viewlib.options import RendererOptions
from viewlib.partials import PartialRegistry, PartialTable
from viewlib.paths import PathResolver, PathStrategy
from viewlib.renderer import Renderer

__all__ = [
    "CompiledTemplate",
    "FrontMatterError",
    "ParsedTemplate",
    "PartialRegistry",
    "PartialTable",
    "PathResolver",
    "PathStrategy",
    "Renderer",
    "RendererOptions",
    "TemplateCache",
    "TemplateCompiler",
    "TemplateNotFoundError",
    "TemplateReadError",
    "ViewError",
    "has_front_matter",
    "parse_front_matter",
]
