"""Tests for the tool registry."""

import pytest
from pydantic import Field

from src.tools.base import ToolParams, ToolResult
from src.tools.registry import ToolRegistry

# -- Fixtures ----------------------------------------------------------------


@pytest.fixture
def reg() -> ToolRegistry:
    """Fresh registry for each test."""
    return ToolRegistry()


# -- Decorator registration --------------------------------------------------


def test_register_via_decorator(reg: ToolRegistry) -> None:
    @reg.tool(name="ping", description="Ping", category="test")
    async def ping() -> ToolResult:
        return ToolResult(text="pong")

    assert "ping" in reg.tool_names
    assert reg.get("ping").category == "test"


def test_decorator_rejects_sync_function(reg: ToolRegistry) -> None:
    with pytest.raises(TypeError, match="must be an async function"):

        @reg.tool(name="bad", description="Bad", category="test")
        def bad() -> ToolResult:
            return ToolResult()


# -- Schema generation -------------------------------------------------------


def test_get_schemas_no_params(reg: ToolRegistry) -> None:
    @reg.tool(name="simple", description="Simple tool", category="test")
    async def simple() -> ToolResult:
        return ToolResult()

    schemas = reg.get_schemas()
    assert schemas[0]["name"] == "simple"
    assert schemas[0]["input_schema"] == {"type": "object", "properties": {}}


def test_get_schemas_with_params(reg: ToolRegistry) -> None:
    class Params(ToolParams):
        query: str = Field(description="Search query")
        limit: int = Field(default=5, description="Max results")

    @reg.tool(name="search", description="Search things", category="test", params_model=Params)
    async def search(query: str, limit: int = 5) -> ToolResult:
        return ToolResult()

    props = reg.get_schemas()[0]["input_schema"]["properties"]
    assert props["query"]["type"] == "string"
    assert props["limit"]["type"] == "integer"


# -- Execution ---------------------------------------------------------------


async def test_execute_with_params(reg: ToolRegistry) -> None:
    class AddParams(ToolParams):
        a: int = Field(description="First number")
        b: int = Field(description="Second number")

    @reg.tool(name="add", description="Add", category="test", params_model=AddParams)
    async def add(a: int, b: int) -> ToolResult:
        return ToolResult(data={"sum": a + b})

    result = await reg.execute("add", {"a": 3, "b": 7})
    assert result.success
    assert result.data["sum"] == 10


async def test_execute_injects_session_key_when_accepted(reg: ToolRegistry) -> None:
    @reg.tool(name="who", description="Who", category="test")
    async def who(session_key: str | None = None) -> ToolResult:
        return ToolResult(text=session_key or "none")

    @reg.tool(name="plain", description="Plain", category="test")
    async def plain() -> ToolResult:
        return ToolResult(text="ok")

    assert (await reg.execute("who", {}, session_key="s1")).text == "s1"
    assert (await reg.execute("plain", {}, session_key="s1")).text == "ok"


async def test_execute_unknown_tool(reg: ToolRegistry) -> None:
    result = await reg.execute("nonexistent", {})
    assert not result.success
    assert "Unknown tool" in result.error


async def test_execute_with_invalid_params(reg: ToolRegistry) -> None:
    class Params(ToolParams):
        count: int = Field(description="A number")

    @reg.tool(name="strict", description="Strict", category="test", params_model=Params)
    async def strict(count: int) -> ToolResult:
        return ToolResult(data={"count": count})

    result = await reg.execute("strict", {"count": "not_a_number"})
    assert not result.success


async def test_execute_handler_exception(reg: ToolRegistry) -> None:
    @reg.tool(name="boom", description="Boom", category="test")
    async def boom() -> ToolResult:
        msg = "kaboom"
        raise RuntimeError(msg)

    result = await reg.execute("boom", {})
    assert not result.success
    assert "failed" in result.error


# -- ToolResult --------------------------------------------------------------


def test_tool_result_to_content() -> None:
    assert ToolResult(text="hi", data={"n": 1}).to_content() == '{"text": "hi", "n": 1}'
    assert ToolResult(error="bad").to_content() == '{"error": "bad"}'
