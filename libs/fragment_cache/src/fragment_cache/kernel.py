"""
In-process host that runs handlers through the fragment cache.

Usage:
    kernel = FragmentKernel(listener)

    @fragment_cache(expiration=5)
    async def sidebar(request: Request) -> str:
        return "<aside>...</aside>"

    master = Request("https://example.com/article/7")
    response = await kernel.render(Request("/block/sidebar"), sidebar, master_request=master)
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from .configuration import CONFIGURATION_ATTRIBUTE, get_configuration
from .http import Request, RequestType, Response
from .listener import ControllerEvent, FragmentCacheListener, ResponseEvent

Handler = Callable[[Request], Any]


def _to_response(result: Any) -> Response:
    if isinstance(result, Response):
        return result
    if isinstance(result, str):
        return Response(result)
    raise TypeError(
        f"Handler must return a Response or str, got {type(result).__name__}"
    )


class FragmentKernel:
    """Dispatches requests to handlers with both interception points applied."""

    def __init__(self, listener: FragmentCacheListener) -> None:
        self.listener = listener

    async def handle(
        self,
        request: Request,
        handler: Handler,
        *,
        request_type: RequestType = RequestType.MASTER,
        master_request: Request | None = None,
    ) -> Response:
        """
        Run ``handler`` for ``request``.

        Parameters:
            request (Request): Request to handle.
            handler (Callable): Sync or async callable taking the request and
                returning a Response or a str body.
            request_type (RequestType): MASTER for external requests, SUB for
                internally dispatched fragments.
            master_request (Request | None): The originating request. A master
                request is its own master; sub-requests must pass it.

        Returns:
            Response: The handler's response, or the cached one on a HIT.

        Raises:
            ValueError: If a sub-request is handled without a master request.
        """
        if master_request is None:
            if request_type != RequestType.MASTER:
                raise ValueError("Sub-requests require the originating master request")
            master_request = request

        configuration = get_configuration(handler)
        if configuration is not None:
            request.attributes[CONFIGURATION_ATTRIBUTE] = configuration

        controller_event = ControllerEvent(request, request_type, master_request, handler)
        await self.listener.on_controller(controller_event)

        result = controller_event.controller(request)
        if inspect.isawaitable(result):
            result = await result
        response = _to_response(result)

        await self.listener.on_response(
            ResponseEvent(request, request_type, master_request, response)
        )
        return response

    async def render(
        self, sub_request: Request, handler: Handler, *, master_request: Request
    ) -> Response:
        """Render a fragment as a sub-request of ``master_request``."""
        return await self.handle(
            sub_request,
            handler,
            request_type=RequestType.SUB,
            master_request=master_request,
        )
