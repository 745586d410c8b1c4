# compass/core/conversation.py
# The conversation session: owns the single handle to the remote model and serializes sends.
# Date: 2026-10-19
# Version: 0.1.0

import asyncio
from typing import Any, Dict, List, Optional
from compass.models.common import AIResponse, ToolResult
from compass.services.llm_connector import ConversationHandle, ModelGateway
from compass.utils.logger import console


class ConversationSession:
    """
    Wraps one ConversationHandle for the lifetime of a widget.

    Every send goes through an asyncio.Lock, so two sends never interleave on
    the handle's history. Callers must relay every ToolResult back through
    `send`, otherwise the model's context drifts from what the user sees.
    """
    def __init__(self, gateway: ModelGateway, system_instruction: str, tools: List[Dict[str, Any]]):
        self._gateway = gateway
        self._handle: ConversationHandle = gateway.create_conversation(system_instruction, tools)
        self._lock = asyncio.Lock()

    @property
    def history_length(self) -> int:
        return len(self._handle.history)

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def send(self, message: str = "", tool_result: Optional[ToolResult] = None) -> AIResponse:
        """
        Sends a user message, or relays a tool result when one is given.

        Raises:
            GatewayError: The remote call failed; the history is unchanged.
        """
        async with self._lock:
            if tool_result is not None:
                console.info(f"Relaying result of '{tool_result.name}' (success={tool_result.succeeded}).")
            else:
                console.info("Sending user message to the model.")
            response = await self._gateway.send(self._handle, message=message, tool_result=tool_result)
            console.info(
                f"Model replied with {len(response.function_calls)} tool call(s) "
                f"and {len(response.text)} characters of text."
            )
            return response
