"""Tool framework. Importing this package registers the memory tools."""

# Import tool modules so their @registry.tool() decorators execute.
from src.tools import memory_tools  # noqa: F401
from src.tools.registry import registry

__all__ = ["registry"]
