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

"""Tests for viewlib.utils."""

from types import MappingProxyType

from viewlib.utils import camel_case, merge


class TestCamelCase:
    def test_path(self):
        assert camel_case("nav/main") == "navMain"

    def test_mixed_separators(self):
        assert camel_case("site-header_bar baz") == "siteHeaderBarBaz"

    def test_single_word(self):
        assert camel_case("hello") == "hello"

    def test_existing_case(self):
        assert camel_case("FooBar") == "fooBar"
        assert camel_case("HTMLParser") == "htmlParser"

    def test_digits(self):
        assert camel_case("v2-item") == "v2Item"

    def test_empty(self):
        assert camel_case("") == ""

    def test_non_ascii_letters(self):
        assert camel_case("über") == "über"
        assert camel_case("nav/über-menü") == "navÜberMenü"
        assert camel_case("Ärger") == "ärger"

    def test_non_ascii_ids_stay_distinct(self):
        assert camel_case("über") != camel_case("ber")


class TestMerge:
    def test_later_sources_win(self):
        assert merge({"a": 1, "b": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_skips_none(self):
        assert merge(None, {"a": 1}, None) == {"a": 1}

    def test_deep_merge(self):
        result = merge({"data": {"a": 1}}, {"data": {"b": 2}})
        assert result == {"data": {"a": 1, "b": 2}}

    def test_does_not_share_containers(self):
        source = {"user": {"tags": ["x"]}}
        result = merge(source)
        result["user"]["tags"].append("y")
        result["user"]["name"] = "n"
        assert source == {"user": {"tags": ["x"]}}

    def test_objects_kept_by_reference(self):
        marker = object()
        assert merge({"obj": marker})["obj"] is marker

    def test_mapping_like_objects_kept_by_reference(self):
        proxy = MappingProxyType({"a": 1})
        assert merge({"m": proxy})["m"] is proxy

    def test_shallow(self):
        inner = {"a": 1}
        assert merge({"x": inner}, deep=False)["x"] is inner
