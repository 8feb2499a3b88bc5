"""
Routes tool invocations to the TMDB client and wraps every outcome,
success or failure, into a tool result.
"""
import json
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, Mapping, Optional, Tuple

import anyio
import mcp.types as types

import tools
from errors import InvocationError
from tmdb_api import TMDBApi

logger = logging.getLogger(__name__)

# tool name -> (TMDBApi method, parameters passed to it)
ROUTES: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "search_movies": ("search_movies", ("query", "page")),
    "get_movie_details": ("get_movie_details", ("movie_id",)),
    "get_popular_movies": ("get_popular_movies", ("page",)),
    "get_top_rated_movies": ("get_top_rated_movies", ("page",)),
    "get_now_playing_movies": ("get_now_playing_movies", ("page",)),
    "get_upcoming_movies": ("get_upcoming_movies", ("page",)),
}


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one invocation: a single text payload plus an error flag"""

    text: str
    is_error: bool = False

    def to_call_tool_result(self) -> types.CallToolResult:
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=self.text)],
            isError=self.is_error,
        )


class Dispatcher:
    def __init__(self, movie_api: TMDBApi):
        self.movie_api = movie_api

    async def invoke(self, name: str, arguments: Optional[Mapping[str, Any]]) -> ToolResult:
        """Run a tool and return its result.

        Never raises for application-level failures: they come back as an
        error-flagged result whose text is "Error: <message>".
        """
        try:
            result = await self._call(name, arguments)
            return ToolResult(text=json.dumps(result, indent=2, ensure_ascii=False))
        except Exception as e:
            logger.warning("Tool %s failed: %s", name, e)
            return ToolResult(text=f"Error: {e}", is_error=True)

    async def _call(self, name: str, arguments: Optional[Mapping[str, Any]]) -> Any:
        if arguments is None:
            raise InvocationError("Missing arguments")

        tool = tools.get_tool(name)
        if tool is None or name not in ROUTES:
            raise InvocationError(f"Unknown tool: {name}")

        method_name, parameters = ROUTES[name]
        defaults = tools.parameter_defaults(tool)
        kwargs = {}
        for parameter in parameters:
            value = arguments.get(parameter)
            if value is None:
                value = defaults.get(parameter)
            kwargs[parameter] = value

        logger.debug("Calling %s with %s", name, kwargs)
        method = getattr(self.movie_api, method_name)
        # a cancelled caller stops waiting at once; the request finishes in
        # its thread and the result is dropped
        return await anyio.to_thread.run_sync(partial(method, **kwargs), abandon_on_cancel=True)
