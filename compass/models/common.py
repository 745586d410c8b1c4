# The module is to define the common models shared by the chat widget, the tools and the renderer.
# Date: 2026-10-19
# Version: 0.2.0

from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional

Role = Literal["user", "bot"]
MessageKind = Literal["text", "timeline", "notice"]
ExportStatus = Literal["idle", "exporting", "ready", "failed"]


class ToolCall(BaseModel):
    """
    A tool invocation requested by the remote model.
    Attributes:
        id (str): The call ID assigned by the model; may be empty.
        name (str): The tool name, one of the declared tools (or anything the model invents).
        args (dict): Parameter name to value, already shaped by the declared schema.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default="", description="The call ID assigned by the model.")
    name: str = Field(..., description="The name of the requested tool.")
    args: Dict[str, Any] = Field(default_factory=dict, description="The tool arguments.")


class ToolResult(BaseModel):
    """
    The answer to exactly one ToolCall, relayed back into the conversation.
    `response` is {"success": True, ...payload} or {"success": False, "error": str}.
    """
    id: str = ""
    name: str
    response: Dict[str, Any]

    @property
    def succeeded(self) -> bool:
        return bool(self.response.get("success"))

    @property
    def error(self) -> Optional[str]:
        return self.response.get("error")


class GroundingSource(BaseModel):
    title: str = ""
    uri: str


class AIResponse(BaseModel):
    """
    A normalized model reply. A reply with function calls is non-terminal.
    """
    text: str = ""
    function_calls: List[ToolCall] = Field(default_factory=list)
    grounding_sources: List[GroundingSource] = Field(default_factory=list)

    @property
    def has_function_calls(self) -> bool:
        return len(self.function_calls) > 0


class TermPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    term: str
    courses: List[str] = Field(default_factory=list)


class DegreePlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    institution: str
    degree: str
    timeline: List[TermPlan] = Field(default_factory=list)


class Extracurriculars(BaseModel):
    model_config = ConfigDict(frozen=True)

    clubs: List[str] = Field(default_factory=list)
    activities: List[str] = Field(default_factory=list)


class StudyPlanDocument(BaseModel):
    """
    A generated study plan: one degree plan for an Associate-only path, two when
    the student transfers for a Bachelor's degree.
    """
    model_config = ConfigDict(frozen=True)

    career: str
    plans: List[DegreePlan]
    extracurriculars: Optional[Extracurriculars] = None


class ChatMessage(BaseModel):
    """
    One entry of the widget transcript.
    Attributes:
        role (Role): 'user' or 'bot'.
        content (str): Plain text, or the timeline markup when kind == 'timeline'.
        kind (MessageKind): How the widget should present the entry.
    """
    role: Role
    content: str
    kind: MessageKind = "text"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class WidgetState(BaseModel):
    """
    The UI state owned by a WidgetController, including the single
    'current document' slot used for PDF export.
    """
    session_id: Optional[str] = None
    is_open: bool = False
    is_loading: bool = False
    messages: List[ChatMessage] = Field(default_factory=list)
    current_document: Optional[StudyPlanDocument] = None
    export_status: ExportStatus = "idle"
    last_export_filename: Optional[str] = None
