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

"""Exceptions raised by viewlib.

Compile and render errors coming from Jinja2 itself are not wrapped; they
reach the caller with the engine's own diagnostics.
"""

from __future__ import annotations

from pathlib import Path


class ViewError(Exception):
    """Base class for errors raised by viewlib."""


class TemplateNotFoundError(ViewError, LookupError):
    """No template file exists for a view, layout or partial.

    ``path`` is the requested (unextended) location, never the list of
    probed candidates.
    """

    def __init__(self, path: str | Path, *, category: str = "", name: str = "") -> None:
        self.path = str(path)
        self.category = category
        self.name = name
        super().__init__(f"Could not find template file: {self.path}")


class TemplateReadError(ViewError, OSError):
    """A template file exists but could not be read."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        super().__init__(f"Could not read template file {self.path}: {reason}")


class FrontMatterError(ViewError, ValueError):
    """The front-matter header of a template is not a valid YAML mapping."""
