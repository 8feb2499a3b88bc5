import pytest

import tools

EXPECTED = {
    "search_movies": (["query"], ["page"]),
    "get_movie_details": (["movie_id"], []),
    "get_popular_movies": ([], ["page"]),
    "get_top_rated_movies": ([], ["page"]),
    "get_now_playing_movies": ([], ["page"]),
    "get_upcoming_movies": ([], ["page"]),
}


def test_catalog_lists_each_tool_once_in_order():
    names = [tool.name for tool in tools.list_tools()]

    assert names == list(EXPECTED)


@pytest.mark.parametrize("name", list(EXPECTED))
def test_required_and_optional_parameters(name):
    required, optional = EXPECTED[name]
    tool = tools.get_tool(name)

    assert tool.description
    assert tool.inputSchema["type"] == "object"
    assert tool.inputSchema["required"] == required
    assert sorted(tool.inputSchema["properties"]) == sorted(required + optional)


@pytest.mark.parametrize("name", [n for n, (_, optional) in EXPECTED.items() if "page" in optional])
def test_page_is_optional_integer_defaulting_to_one(name):
    tool = tools.get_tool(name)

    assert tool.inputSchema["properties"]["page"]["type"] == "integer"
    assert tools.parameter_defaults(tool) == {"page": 1}


def test_parameter_types():
    assert tools.get_tool("search_movies").inputSchema["properties"]["query"]["type"] == "string"
    assert tools.get_tool("get_movie_details").inputSchema["properties"]["movie_id"]["type"] == "integer"
    assert tools.parameter_defaults(tools.get_tool("get_movie_details")) == {}


def test_list_tools_is_identical_on_every_call():
    first = tools.list_tools()
    first[0].inputSchema["properties"].clear()

    assert tools.list_tools() == tools.list_tools()
    assert tools.list_tools()[0].inputSchema["properties"]


def test_unknown_tool():
    assert tools.get_tool("get_tv_details") is None
