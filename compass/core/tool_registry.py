# compass/core/tool_registry.py
# Discovers the advisor tools and maps each declared tool name to its instance.
# Version 0.2.0: Tools are constructed with injected services instead of reading global settings.

import importlib
import inspect
import pkgutil
from typing import Dict, Iterable, List, Any, Optional
from compass import tools as tools_package
from compass.tools.base_tool import BaseTool, ToolName, ToolServices
from compass.utils.logger import console


class ToolRegistry:
    """
    Maps ToolName to a tool instance. Tools are discovered from the
    compass.tools package unless an explicit list is given.
    """
    def __init__(self, services: Optional[ToolServices] = None, tools: Optional[Iterable[BaseTool]] = None):
        self.tools: Dict[ToolName, BaseTool] = {}
        if tools is not None:
            for tool in tools:
                self.register(tool)
        else:
            if services is None:
                raise ValueError("Tool discovery needs the services the tools are constructed with.")
            self._discover_tools(services)
        console.success(f"Tool registry ready with {len(self.tools)} tools: {[name.value for name in self.tools]}")

    def register(self, tool: BaseTool):
        self.tools[tool.name] = tool
        console.info(f"Successfully registered tool: '{tool.name.value}'")

    def _discover_tools(self, services: ToolServices):
        """
        Scans the compass.tools package, imports all modules, finds concrete
        classes that inherit from BaseTool, and registers an instance of each.
        """
        prefix = f"{tools_package.__name__}."
        for _, modname, _ in pkgutil.iter_modules(tools_package.__path__, prefix):
            if modname == f"{prefix}base_tool":
                continue
            try:
                module = importlib.import_module(modname)
                for _, obj in inspect.getmembers(module, inspect.isclass):
                    if issubclass(obj, BaseTool) and obj is not BaseTool and not inspect.isabstract(obj):
                        if obj.__module__ == module.__name__:
                            self.register(obj(services))
            except Exception as e:
                console.error(f"Failed to load or register tool from module {modname}: {e}")

    def get(self, name: str) -> Optional[BaseTool]:
        tool_name = ToolName.lookup(name)
        if tool_name is None:
            return None
        return self.tools.get(tool_name)

    def get_definitions(self) -> List[Dict[str, Any]]:
        """Returns the declarations of all tools for the remote model, in ToolName order."""
        return [self.tools[name].get_definition() for name in ToolName if name in self.tools]
