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

"""FastAPI / Starlette integration.

Install the middleware once and render from any route::

    from fastapi import Depends, FastAPI

    from viewlib import Renderer
    from viewlib.middleware import ViewContext, ViewMiddleware, get_views

    app = FastAPI()
    app.add_middleware(ViewMiddleware, renderer=Renderer(root="templates"))

    @app.get("/")
    async def home(views: ViewContext = Depends(get_views)):
        return await views.render("home", {"title": "Home"})

Values stored on ``request.state`` (and a ``request.state.locals`` mapping,
if present) are merged into the locals of every render; the request itself
is available to templates as ``data.request``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import HTMLResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from viewlib.renderer import Renderer
from viewlib.utils import merge

logger = logging.getLogger(__name__)

STATE_KEY = "views"


class ViewContext:
    """Render helpers bound to one request."""

    def __init__(self, renderer: Renderer, request: Request) -> None:
        self.renderer = renderer
        self.request = request

    def ambient_locals(self) -> dict[str, Any]:
        """Locals contributed by the request state."""
        state = dict(self.request.scope.get("state") or {})
        extra = state.pop("locals", None)
        state = {k: v for k, v in state.items() if not isinstance(v, ViewContext)}
        return merge(state, extra if isinstance(extra, Mapping) else None)

    async def render_view(
        self,
        view: str,
        locals: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """Render *view* to a string.

        Any failure becomes a 500 ``HTTPException`` whose detail reads
        ``unable to render view: <view> because <reason>``.
        """
        merged_locals = merge(self.ambient_locals(), locals)
        merged_options = merge(options)
        if merged_options.get("data") is None:
            merged_options["data"] = {}
        merged_options["data"]["request"] = self.request

        try:
            return await self.renderer.render(view, merged_locals, merged_options)
        except Exception as exc:
            logger.error("Unable to render view %s", view, exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"unable to render view: {view} because {exc}",
            ) from exc

    async def render(
        self,
        view: str,
        locals: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        status_code: int = status.HTTP_200_OK,
    ) -> HTMLResponse:
        """Render *view* into an HTML response."""
        html = await self.render_view(view, locals, options)
        return HTMLResponse(html, status_code=status_code)


class ViewMiddleware:
    """ASGI middleware attaching a :class:`ViewContext` to every HTTP request.

    Pass a ready :class:`~viewlib.renderer.Renderer`, or renderer options as
    keyword arguments.
    """

    def __init__(self, app: ASGIApp, renderer: Renderer | None = None, **options: Any) -> None:
        self.app = app
        self.renderer = renderer if renderer is not None else Renderer(**options)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            scope.setdefault("state", {})
            scope["state"][STATE_KEY] = ViewContext(self.renderer, Request(scope, receive))
        await self.app(scope, receive, send)


def get_views(request: Request) -> ViewContext:
    """FastAPI dependency returning the request's :class:`ViewContext`."""
    views = (request.scope.get("state") or {}).get(STATE_KEY)
    if views is None:
        raise RuntimeError("ViewMiddleware is not installed on this application")
    return views
