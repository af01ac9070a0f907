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

"""Small helpers shared across viewlib modules."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_CHUNK_RE = re.compile(r"[^\W_]+")


def _boundary(prev: str, cur: str, nxt: str) -> bool:
    if cur.isdigit() != prev.isdigit():
        return True
    if cur.isupper():
        return prev.islower() or (prev.isupper() and nxt.islower())
    return False


def _words(text: str) -> list[str]:
    # any letter or digit, in any script, is a word character
    words = []
    for chunk in _CHUNK_RE.findall(text):
        start = 0
        for i in range(1, len(chunk)):
            nxt = chunk[i + 1] if i + 1 < len(chunk) else ""
            if _boundary(chunk[i - 1], chunk[i], nxt):
                words.append(chunk[start:i])
                start = i
        words.append(chunk[start:])
    return words


def camel_case(text: str) -> str:
    """Convert any separated or mixed-case string to ``camelCase``.

    Path separators, dashes, underscores, dots and spaces all count as word
    boundaries, as do existing case changes::

        >>> camel_case("nav/main")
        'navMain'
        >>> camel_case("site-header_bar")
        'siteHeaderBar'
        >>> camel_case("nav/über-menü")
        'navÜberMenü'
    """
    words = _words(text)
    if not words:
        return ""
    first, *rest = words
    return first.lower() + "".join(w.capitalize() for w in rest)


def _clone(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _clone(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_clone(v) for v in value]
    return value


def merge(*sources: Mapping[str, Any] | None, deep: bool = True) -> dict[str, Any]:
    """Merge *sources* left to right into a fresh dict.

    Later sources win.  With ``deep=True`` nested mappings are merged
    recursively and plain containers (dicts, lists) are copied, so the
    result shares no mutable structure with its inputs.  Any other object,
    including mapping-like ones such as a request, is carried over by
    reference.  ``None`` sources are skipped.
    """
    target: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            if deep and isinstance(value, dict) and isinstance(target.get(key), dict):
                target[key] = merge(target[key], value)
            elif deep:
                target[key] = _clone(value)
            else:
                target[key] = value
    return target
