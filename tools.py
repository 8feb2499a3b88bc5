"""
Static catalog of the tools this server exposes.
Each tool specifies its arguments using JSON Schema.
"""
from typing import Any, Dict, List, Optional

from mcp.types import Tool

PAGE_PARAMETER = {
    "type": "integer",
    "description": "Page number for pagination (default: 1)",
    "default": 1,
}


def _page_only_tool(name: str, description: str) -> Tool:
    return Tool(
        name=name,
        description=description,
        inputSchema={
            "type": "object",
            "properties": {
                "page": PAGE_PARAMETER,
            },
            "required": [],
        },
    )


TOOLS: List[Tool] = [
    Tool(
        name="search_movies",
        description="Search for movies by title or keywords",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query (movie title or keywords)",
                },
                "page": PAGE_PARAMETER,
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="get_movie_details",
        description="Get detailed information about a specific movie by ID",
        inputSchema={
            "type": "object",
            "properties": {
                "movie_id": {
                    "type": "integer",
                    "description": "TMDB movie ID",
                },
            },
            "required": ["movie_id"],
        },
    ),
    _page_only_tool("get_popular_movies", "Get a list of popular movies"),
    _page_only_tool("get_top_rated_movies", "Get a list of top rated movies"),
    _page_only_tool("get_now_playing_movies", "Get a list of movies currently in theaters"),
    _page_only_tool("get_upcoming_movies", "Get a list of upcoming movies"),
]

_TOOLS_BY_NAME: Dict[str, Tool] = {tool.name: tool for tool in TOOLS}


def list_tools() -> List[Tool]:
    """List available tools, in presentation order"""
    # deep copies; the module-level catalog is never handed out
    return [tool.model_copy(deep=True) for tool in TOOLS]


def get_tool(name: str) -> Optional[Tool]:
    return _TOOLS_BY_NAME.get(name)


def parameter_defaults(tool: Tool) -> Dict[str, Any]:
    """Declared defaults of a tool's optional parameters"""
    return {
        name: schema["default"]
        for name, schema in tool.inputSchema.get("properties", {}).items()
        if "default" in schema
    }
