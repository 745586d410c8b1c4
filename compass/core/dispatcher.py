# compass/core/dispatcher.py
# Executes model-issued tool calls in order, relays every result and follows nested rounds up to a depth limit.
# Date: 2026-10-19
# Version: 0.1.0

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence
from compass.core.conversation import ConversationSession
from compass.core.errors import ToolError
from compass.core.tool_registry import ToolRegistry
from compass.models.common import AIResponse, MessageKind, ToolCall, ToolResult, WidgetState
from compass.services.document_renderer import DocumentRenderer
from compass.services.speech import Narrator
from compass.tools.base_tool import ToolName
from compass.utils.logger import console

UNKNOWN_FUNCTION_ERROR = "Unknown function call"
DEPTH_LIMIT_MESSAGE = "Sorry, I encountered too many nested function calls. Please try again."
SERVICE_UNAVAILABLE_MESSAGE = "Sorry, the service is temporarily unavailable. Please try again in a moment."
NO_REPLY_MESSAGE = "I processed your request. Is there anything else you'd like to know?"
TIMELINE_FAILED_MESSAGE = "Sorry, I couldn't display the study plan timeline."


class ChatSurface(Protocol):
    """Where the dispatcher reports to the user during one exchange."""
    state: WidgetState
    timed_out: bool

    def add_bot_message(self, content: str, kind: MessageKind = "text") -> None: ...


def display_text(reply: AIResponse) -> str:
    """Reply text with its grounding sources appended as a markdown list."""
    if not reply.grounding_sources:
        return reply.text
    sources = "\n- ".join(f"[{s.title or s.uri}]({s.uri})" for s in reply.grounding_sources)
    return f"{reply.text}\n\n**Sources:**\n- {sources}"


def is_service_unavailable(message: str) -> bool:
    return "503" in message or "Service Unavailable" in message


@dataclass
class _DispatchRun:
    results: List[ToolResult] = field(default_factory=list)
    halted: bool = False


class ToolDispatcher:
    """
    Processes tool calls sequentially: each result is relayed through the
    conversation session before the next call runs, so only one send is ever
    in flight. A reply with more tool calls starts a nested round one level
    deeper; past `max_depth` the whole run stops with a single notice.
    """
    def __init__(self, session: ConversationSession, registry: ToolRegistry, renderer: DocumentRenderer,
                 narrator: Optional[Narrator] = None, max_depth: int = 5):
        self._session = session
        self._registry = registry
        self._renderer = renderer
        self._narrator = narrator
        self.max_depth = max_depth

    async def dispatch(self, calls: Sequence[ToolCall], surface: ChatSurface, depth: int = 0) -> List[ToolResult]:
        """Returns the ToolResult relayed for each call that ran, in call order."""
        run = _DispatchRun()
        await self._dispatch(calls, surface, depth, run)
        return run.results

    async def _dispatch(self, calls: Sequence[ToolCall], surface: ChatSurface, depth: int, run: _DispatchRun):
        if run.halted:
            return
        if depth > self.max_depth:
            console.error(f"Maximum function call depth reached ({self.max_depth}).")
            surface.add_bot_message(DEPTH_LIMIT_MESSAGE)
            run.halted = True
            return

        console.tool_round(depth, [call.name for call in calls])
        for call in calls:
            if run.halted:
                return
            await self._handle_call(call, surface, depth, run)

    async def _invoke(self, call: ToolCall, state: WidgetState) -> ToolResult:
        tool = self._registry.get(call.name)
        if tool is None:
            console.warning(f"Model requested unknown tool '{call.name}'.")
            return ToolResult(id=call.id, name=call.name, response={"error": UNKNOWN_FUNCTION_ERROR})
        return await tool.run(call, state)

    async def _handle_call(self, call: ToolCall, surface: ChatSurface, depth: int, run: _DispatchRun):
        try:
            result = await self._invoke(call, surface.state)
            reply = await self._session.send("", result)
        except Exception as e:
            error = ToolError(call.name, str(e) or "An error occurred")
            await self._handle_failure(call, error, surface, depth, run)
            return

        run.results.append(result)
        await self._handle_reply(call, result, reply, surface, depth, run)

    async def _handle_failure(self, call: ToolCall, error: ToolError, surface: ChatSurface,
                              depth: int, run: _DispatchRun):
        message = str(error)
        console.tool_failure(call.name, message)

        # The user hears about the failure before the relay, which may fail as well.
        if is_service_unavailable(message):
            surface.add_bot_message(SERVICE_UNAVAILABLE_MESSAGE)
        else:
            surface.add_bot_message(f"Sorry, I encountered an error while processing {call.name}: {message}")

        result = ToolResult(id=call.id, name=call.name, response={"success": False, "error": message})
        run.results.append(result)
        try:
            reply = await self._session.send("", result)
        except Exception as send_error:
            console.error(f"Error sending error response for '{call.name}': {send_error}")
            return
        await self._handle_reply(call, result, reply, surface, depth, run, reported_error=message)

    async def _handle_reply(self, call: ToolCall, result: ToolResult, reply: AIResponse, surface: ChatSurface,
                            depth: int, run: _DispatchRun, reported_error: Optional[str] = None):
        if reply.has_function_calls:
            await self._dispatch(reply.function_calls, surface, depth + 1, run)
        elif reply.text:
            if reported_error and reported_error in reply.text:
                return
            surface.add_bot_message(display_text(reply))
            if call.name == ToolName.GENERATE_STUDY_FLOWCHART.value and result.succeeded:
                self._present_plan(call, reply, surface)
        elif reported_error is None:
            console.warning(f"No response text after function call '{call.name}'.")
            surface.add_bot_message(NO_REPLY_MESSAGE)

    def _present_plan(self, call: ToolCall, reply: AIResponse, surface: ChatSurface):
        document = surface.state.current_document
        if document is not None:
            try:
                surface.add_bot_message(self._renderer.render(document).to_html(), kind="timeline")
            except Exception as e:
                console.error(f"Failed to render the study plan timeline: {e}")
                surface.add_bot_message(TIMELINE_FAILED_MESSAGE, kind="notice")
        # nobody is listening once the exchange has timed out
        if self._narrator is not None and not surface.timed_out:
            self._narrator.narrate_plan(reply.text, call.args.get("career"))
