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

"""YAML front-matter parsing.

A template may open with a metadata header delimited by ``---`` lines::

    ---
    title: Welcome
    greeting: Hello
    ---
    <h1>{{ greeting }}, {{ name }}!</h1>

The header is parsed as YAML into ``attributes``; everything after the
closing delimiter is the ``body``.  Templates without a header have empty
attributes and the whole text as body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import yaml

from viewlib.errors import FrontMatterError

FRONT_MATTER_PATTERN = re.compile(
    r"\A(?:\ufeff)?---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


@dataclass
class ParsedTemplate:
    """A template source split into front-matter attributes and body."""

    body: str
    attributes: dict[str, Any] = field(default_factory=dict)
    frontmatter: str = ""


def has_front_matter(text: str) -> bool:
    """True if *text* opens with a ``---`` delimited header."""
    return FRONT_MATTER_PATTERN.match(text) is not None


def parse_front_matter(text: str) -> ParsedTemplate:
    """Split *text* into attributes and body.

    Raises :class:`FrontMatterError` when the header is not valid YAML or
    does not hold a mapping.
    """
    match = FRONT_MATTER_PATTERN.match(text)
    if match is None:
        return ParsedTemplate(body=text)

    raw = match.group(1)
    try:
        attributes = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid YAML in front matter: {exc}") from exc
    if attributes is None:
        attributes = {}
    if not isinstance(attributes, dict):
        raise FrontMatterError(
            f"Front matter must be a YAML mapping, got {type(attributes).__name__}"
        )
    return ParsedTemplate(body=text[match.end():], attributes=attributes, frontmatter=raw)
