# compass/services/llm_connector.py
# Adapter between the chat widget and an OpenAI-compatible chat-completions backend.
# Date: 2026-10-19
# Version: 0.2.0

import json
from uuid import uuid4
from openai import AsyncOpenAI, OpenAIError, APIStatusError
from typing import Any, Dict, List, Optional
from compass.core.config import Settings
from compass.core.errors import GatewayError, SetupError
from compass.models.common import AIResponse, GroundingSource, ToolCall, ToolResult
from compass.utils.logger import console

SUPPORTED_PROVIDERS = ("GEMINI", "CHATGPT", "CLAUDE", "DEEPSEEK_CHAT")

# Part keys that mark a content part as a tool-call payload rather than text.
_CALL_PART_KEYS = ("function_call", "functionCall", "tool_call", "tool_calls")


class ConversationHandle:
    """
    The remote dialogue state: system instruction, tool declarations and the
    message history sent with every request. Owned by exactly one ConversationSession.

    Tool calls from an assistant reply are kept in `pending_calls` until their
    result is relayed; the relay then records the call and its answer as an
    adjacent assistant/tool pair, which keeps the history valid even when some
    calls are never answered. A new user message discards calls still pending,
    since no result will ever be relayed for them.
    """
    def __init__(self, system_instruction: str, tools: List[Dict[str, Any]]):
        self.system_instruction = system_instruction
        self.tools = tools
        self.history: List[Dict[str, Any]] = []
        self.pending_calls: List[Dict[str, Any]] = []

    def request_messages(self, outbound: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [{"role": "system", "content": self.system_instruction}, *self.history, *outbound]

    def find_pending(self, tool_result: ToolResult) -> Optional[Dict[str, Any]]:
        for entry in self.pending_calls:
            if tool_result.id and entry["call"].id == tool_result.id:
                return entry
        # id-less results answer the latest call of that name
        for entry in reversed(self.pending_calls):
            if not tool_result.id and entry["call"].name == tool_result.name:
                return entry
        return None


def _parse_arguments(raw_arguments: Any) -> Dict[str, Any]:
    if raw_arguments is None or raw_arguments == "":
        return {}
    if isinstance(raw_arguments, dict):
        return raw_arguments
    try:
        parsed = json.loads(raw_arguments)
    except (TypeError, json.JSONDecodeError) as e:
        raise GatewayError(f"Malformed tool call arguments: {e}") from e
    if not isinstance(parsed, dict):
        raise GatewayError("Malformed tool call arguments: expected a JSON object.")
    return parsed


def _is_call_part(part: Dict[str, Any]) -> bool:
    return any(part.get(key) for key in _CALL_PART_KEYS)


def extract_text(content: Any, has_calls: bool) -> str:
    """
    Builds the reply text. Structured content contributes only its plain text
    parts; a plain string is read only when the reply carries no tool calls.
    """
    if isinstance(content, list):
        texts = [
            part["text"] for part in content
            if isinstance(part, dict)
            and part.get("type", "text") == "text"
            and part.get("text")
            and not _is_call_part(part)
        ]
        text = " ".join(texts).strip()
        if text:
            return text
        return ""
    if has_calls:
        return ""
    if isinstance(content, str):
        return content.strip()
    return ""


def extract_sources(annotations: Any) -> List[GroundingSource]:
    sources: List[GroundingSource] = []
    seen = set()
    for annotation in annotations or []:
        if not isinstance(annotation, dict) or annotation.get("type") != "url_citation":
            continue
        citation = annotation.get("url_citation") or {}
        uri = citation.get("url")
        if uri and uri not in seen:
            seen.add(uri)
            sources.append(GroundingSource(title=citation.get("title") or "", uri=uri))
    return sources


def normalize_message(message: Dict[str, Any]) -> AIResponse:
    """Turns a raw chat-completions message dict into an AIResponse."""
    calls: List[ToolCall] = []
    for raw_call in message.get("tool_calls") or []:
        function = raw_call.get("function") or {}
        name = function.get("name")
        if not name:
            raise GatewayError("Malformed tool call: missing function name.")
        calls.append(ToolCall(
            id=raw_call.get("id") or "",
            name=name,
            args=_parse_arguments(function.get("arguments")),
        ))

    return AIResponse(
        text=extract_text(message.get("content"), has_calls=bool(calls)),
        function_calls=calls,
        grounding_sources=extract_sources(message.get("annotations")),
    )


def _wire_call(call_id: str, call: ToolCall) -> Dict[str, Any]:
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": call.name, "arguments": json.dumps(call.args)},
    }


class ModelGateway:
    """
    The remote model boundary. The client is created on first use so that
    missing credentials surface as SetupError when a conversation is created,
    not when the application starts.
    """
    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None, temperature: float = 0.0):
        self._settings = settings
        self._client = client
        self._temperature = temperature
        self._model: Optional[str] = None

    @property
    def provider(self) -> str:
        return self._settings.LLM_PROVIDER.upper()

    def _get_client_and_model(self) -> tuple[AsyncOpenAI, str]:
        """
        Acts as a factory for the configured provider's client and model name.

        Raises:
            SetupError: If the provider is unsupported or its API key is missing.
        """
        provider = self.provider
        if provider not in SUPPORTED_PROVIDERS:
            raise SetupError(f"Unsupported or misconfigured LLM provider: {provider}")

        if self._model is None:
            self._model = getattr(self._settings, f"{provider}_MODEL")

        if self._client is None:
            api_key = getattr(self._settings, f"{provider}_API_KEY")
            if not api_key:
                raise SetupError(f"{provider}_API_KEY is not set in the environment.")
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=getattr(self._settings, f"{provider}_BASE_URL"),
            )
            console.info(f"LLM client initialized for provider '{provider}' with model '{self._model}'.")

        return self._client, self._model

    def create_conversation(self, system_instruction: str, tools: List[Dict[str, Any]]) -> ConversationHandle:
        self._get_client_and_model()
        return ConversationHandle(system_instruction=system_instruction, tools=tools)

    async def _complete(self, messages: List[Dict[str, Any]], tools: Optional[List[Dict[str, Any]]] = None,
                        model: Optional[str] = None) -> Dict[str, Any]:
        client, default_model = self._get_client_and_model()

        request_params: Dict[str, Any] = {
            "model": model or default_model,
            "messages": messages,
            "temperature": self._temperature,
        }
        if tools:
            request_params["tools"] = tools
            request_params["tool_choice"] = "auto"

        try:
            response = await client.chat.completions.create(**request_params)
        except APIStatusError as e:
            console.error(f"LLM provider returned status {e.status_code}: {e.message}")
            raise GatewayError(str(e), status_code=e.status_code) from e
        except OpenAIError as e:
            console.error(f"LLM request failed: {e}")
            raise GatewayError(str(e)) from e

        raw = response.model_dump()
        choices = raw.get("choices") or []
        if not choices or not isinstance(choices[0].get("message"), dict):
            raise GatewayError("Malformed response from LLM provider: no message in choices.")
        return choices[0]["message"]

    def _outbound_for(self, handle: ConversationHandle, message: str,
                      tool_result: Optional[ToolResult]) -> tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        if tool_result is None:
            if not message:
                raise ValueError("Either a message or a tool result must carry content.")
            return [{"role": "user", "content": message}], None

        pending = handle.find_pending(tool_result)
        if pending is not None:
            call, wire_id = pending["call"], pending["wire_id"]
        else:
            call = ToolCall(id=tool_result.id, name=tool_result.name)
            wire_id = tool_result.id or f"call_{uuid4().hex[:24]}"

        outbound = [
            {"role": "assistant", "content": None, "tool_calls": [_wire_call(wire_id, call)]},
            {"role": "tool", "tool_call_id": wire_id, "content": json.dumps(tool_result.response, default=str)},
        ]
        return outbound, pending

    async def send(self, handle: ConversationHandle, message: str = "",
                   tool_result: Optional[ToolResult] = None) -> AIResponse:
        """
        Sends user text or a tool result and returns the normalized reply.
        The handle's history is only updated when the call succeeds.
        """
        outbound, pending = self._outbound_for(handle, message, tool_result)
        raw_message = await self._complete(handle.request_messages(outbound), tools=handle.tools)
        reply = normalize_message(raw_message)

        handle.history.extend(outbound)
        if tool_result is None:
            if handle.pending_calls:
                console.warning(f"Discarding {len(handle.pending_calls)} unanswered tool call(s).")
            handle.pending_calls.clear()
        elif pending is not None:
            handle.pending_calls.remove(pending)
        if reply.text:
            handle.history.append({"role": "assistant", "content": reply.text})
        for call in reply.function_calls:
            handle.pending_calls.append({
                "call": call,
                "wire_id": call.id or f"call_{uuid4().hex[:24]}",
            })
        return reply

    async def generate(self, prompt: str, model: Optional[str] = None) -> str:
        """One-shot completion used by the advisor operations."""
        raw_message = await self._complete([{"role": "user", "content": prompt}], model=model)
        return extract_text(raw_message.get("content"), has_calls=False)

    async def generate_plan_text(self, prompt: str) -> str:
        return await self.generate(prompt, model=self._settings.PLANNER_MODEL if self.provider == "GEMINI" else None)
