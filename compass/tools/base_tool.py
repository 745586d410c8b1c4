# The module is to define the base class for all advisor tools.
# Date: 2026-10-19
# Version: 0.2.0

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pydantic import BaseModel
from typing import Any, Dict, Optional, Type, TYPE_CHECKING
from compass.models.common import ToolCall, ToolResult, WidgetState
from compass.utils.logger import console

if TYPE_CHECKING:
    from compass.services.advisor import AdvisorService
    from compass.services.document_renderer import DocumentExporter


class ToolName(str, Enum):
    """The tool names declared to the remote model."""
    GENERATE_STUDY_FLOWCHART = "generate_study_flowchart"
    ANALYZE_CAREER_POTENTIAL = "analyze_career_potential"
    GET_TUITION_ESTIMATE = "get_tuition_estimate"
    GET_COURSE_SUMMARY = "get_course_summary"
    GET_TEACHER_REVIEWS = "get_teacher_reviews"
    FIND_TEACHERS = "find_teachers"
    GET_TRANSFER_OPTIONS = "get_transfer_options"
    OFFER_PDF_EXPORT = "offer_pdf_export"
    CALCULATE_DEGREE_COST = "calculate_degree_cost"
    SEARCH_COLLEGE_ARTICULATION_DOCS = "search_college_articulation_docs"

    @classmethod
    def lookup(cls, name: str) -> Optional["ToolName"]:
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass
class ToolServices:
    """The collaborators tools are constructed with."""
    advisor: "AdvisorService"
    exporter: "DocumentExporter"


def _clean_schema(node: Any) -> Any:
    """
    Strips pydantic titles and collapses Optional[X] (anyOf X/null) into X,
    which keeps the declarations inside the schema subset every provider accepts.
    """
    if isinstance(node, list):
        return [_clean_schema(item) for item in node]
    if not isinstance(node, dict):
        return node

    any_of = node.get("anyOf")
    if any_of is not None:
        non_null = [option for option in any_of if option.get("type") != "null"]
        if len(non_null) == 1:
            merged = {k: v for k, v in node.items() if k not in ("anyOf", "default")}
            merged.update(non_null[0])
            node = merged

    cleaned = {}
    for key, value in node.items():
        if key == "title":
            continue
        if key == "properties":
            cleaned[key] = {name: _clean_schema(prop) for name, prop in value.items()}
        elif key == "default" and value is None:
            continue
        else:
            cleaned[key] = _clean_schema(value)
    return cleaned


class BaseTool(ABC):
    """
    Abstract Base Class for all tools.

    A tool performs exactly one external operation and answers with the
    uniform envelope: {"success": True, <result_field>: value} on success,
    {"success": False, "error": message} on failure.
    Attributes:
        name (ToolName): The declared tool name.
        description (str): What the tool does, shown to the model.
        args_schema (Type[BaseModel]): The declared parameters. Arguments arrive
            already shaped by this schema and are not validated again.
        result_field (str): The payload key on success. None means `execute`
            returns the complete response dict itself.
        failure_message (str): Error text used when an exception carries none.
        propagate_errors (bool): Re-raise instead of answering with an error
            envelope, leaving the report to the dispatcher.
    """
    name: ToolName
    description: str
    args_schema: Type[BaseModel]
    result_field: Optional[str] = "result"
    failure_message: str = "Tool execution failed"
    propagate_errors: bool = False

    def __init__(self, services: ToolServices):
        self.services = services

    @abstractmethod
    async def execute(self, state: WidgetState, **kwargs) -> Any:
        """
        The core logic of the tool.

        Args:
            state: The widget state, which holds the current study plan document.
            **kwargs: The arguments of the tool call.
        """
        pass

    async def run(self, call: ToolCall, state: WidgetState) -> ToolResult:
        console.info(f"Executing tool '{self.name.value}' with args: {call.args}")
        try:
            value = await self.execute(state, **call.args)
        except Exception as e:
            if self.propagate_errors:
                raise
            console.exception(f"Tool '{self.name.value}' failed.")
            response = {"success": False, "error": str(e) or self.failure_message}
            return ToolResult(id=call.id, name=self.name.value, response=response)

        if self.result_field is None:
            response = dict(value)
        else:
            response = {"success": True, self.result_field: value}
        if response.get("success"):
            console.success(f"Tool '{self.name.value}' executed successfully.")
        return ToolResult(id=call.id, name=self.name.value, response=response)

    def get_definition(self) -> Dict[str, Any]:
        """
        Returns the tool's definition in the OpenAI function-calling format.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name.value,
                "description": self.description,
                "parameters": _clean_schema(self.args_schema.model_json_schema()),
            }
        }
