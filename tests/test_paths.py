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

"""Tests for viewlib.paths."""

import asyncio
from pathlib import Path

import pytest

from viewlib.errors import TemplateNotFoundError
from viewlib.options import RendererOptions
from viewlib.paths import PathResolver, PathStrategy

FIXTURES = Path(__file__).parent / "fixtures"


def _resolver(**kwargs) -> PathResolver:
    kwargs.setdefault("root", FIXTURES)
    return PathResolver(RendererOptions(**kwargs))


class TestPath:
    def test_view_path(self):
        assert _resolver().path("view", "home") == FIXTURES / "views" / "home"

    def test_custom_views_dir(self):
        assert _resolver(views_dir="pages").path("view", "home") == FIXTURES / "pages" / "home"

    def test_layout_path(self):
        assert _resolver().path("layout", "main") == FIXTURES / "layouts" / "main"

    def test_custom_layouts_dir(self):
        resolver = _resolver(layouts_dir="containers")
        assert resolver.path("layout", "main") == FIXTURES / "containers" / "main"

    def test_partial_path(self):
        resolver = _resolver()
        assert resolver.path("partial", "nav/main.html") == FIXTURES / "partials" / "nav" / "main.html"

    def test_empty_partial_is_partials_root(self):
        assert _resolver().path("partial", "") == FIXTURES / "partials"

    def test_relative_strategy_result_joined_under_category(self):
        class PageStrategy(PathStrategy):
            def view_path(self, view_id, options):
                return Path(view_id) / "template"

        resolver = _resolver(strategy=PageStrategy())
        assert resolver.path("view", "home") == FIXTURES / "views" / "home" / "template"

    def test_absolute_strategy_result_passes_through(self):
        class AbsoluteStrategy(PathStrategy):
            def view_path(self, view_id, options):
                return Path("/this/is/absolute") / view_id

            def layout_path(self, layout_id, options):
                return Path("/this/is/absolute") / layout_id

        resolver = _resolver(strategy=AbsoluteStrategy())
        assert resolver.path("view", "home") == Path("/this/is/absolute/home")
        assert resolver.path("layout", "main") == Path("/this/is/absolute/main")

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            _resolver().path("widget", "x")


class TestCandidates:
    def test_extensions_tried_in_order(self):
        resolver = _resolver(extension=[".html", "md"])
        assert resolver.candidates("/t/home") == [Path("/t/home.html"), Path("/t/home.md")]

    def test_path_with_known_extension_tried_first(self):
        resolver = _resolver()
        assert resolver.candidates("/t/nav.html") == [Path("/t/nav.html"), Path("/t/nav.html.html")]


class TestResolve:
    def test_resolves_view(self):
        path = asyncio.run(_resolver().resolve("view", "simple"))
        assert path == FIXTURES / "views" / "simple.html"

    def test_finds_alternate_extension(self):
        path = asyncio.run(_resolver(extension=[".html", ".md"]).resolve("view", "markdown"))
        assert path == FIXTURES / "views" / "markdown.md"

    def test_first_matching_extension_wins(self, tmp_path):
        (tmp_path / "views").mkdir()
        (tmp_path / "views" / "home.md").write_text("md")
        (tmp_path / "views" / "home.html").write_text("html")
        resolver = _resolver(root=tmp_path, extension=["md", "html"])
        assert asyncio.run(resolver.resolve("view", "home")).name == "home.md"

    def test_missing_template_names_logical_path(self):
        with pytest.raises(TemplateNotFoundError) as excinfo:
            asyncio.run(_resolver().resolve("view", "nope"))
        err = excinfo.value
        assert "nope" in str(err)
        assert str(err) == f"Could not find template file: {FIXTURES / 'views' / 'nope'}"
        assert err.category == "view"
        assert err.name == "nope"
        assert ".html" not in str(err)

    def test_missing_alternate_extension(self):
        with pytest.raises(TemplateNotFoundError):
            asyncio.run(_resolver().resolve("view", "markdown"))

    def test_not_found_is_lookup_error(self):
        with pytest.raises(LookupError):
            asyncio.run(_resolver().resolve("layout", "does-not-exist"))


class TestPartialId:
    def test_strips_extension(self):
        options = RendererOptions(root=FIXTURES)
        assert PathStrategy().partial_id("hello.html", options) == "hello"

    def test_camel_cases_nested_dirs(self):
        options = RendererOptions(root=FIXTURES)
        assert PathStrategy().partial_id("nav/main.html", options) == "navMain"

    def test_strips_any_configured_extension(self):
        options = RendererOptions(root=FIXTURES, extension=["html", "md"])
        assert PathStrategy().partial_id("markdown.md", options) == "markdown"

    def test_custom_partial_id(self):
        class DirStrategy(PathStrategy):
            # partials/<name>/template.html
            def partial_id(self, file, options):
                return Path(file).parent.name

        options = RendererOptions(root=FIXTURES)
        assert DirStrategy().partial_id("header/template.html", options) == "header"
