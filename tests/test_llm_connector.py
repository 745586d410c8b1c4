"""
Tests for the model gateway adapter: reply normalization and how the
conversation history is kept valid across tool-call relays.
"""

import json
from unittest.mock import AsyncMock, Mock

import pytest
from openai import OpenAIError

from compass.core.conversation import ConversationSession
from compass.core.errors import GatewayError, SetupError
from compass.models.common import ToolResult
from compass.services.llm_connector import ModelGateway, extract_text, normalize_message

from conftest import make_settings, run


class FakeCompletion:
    def __init__(self, message):
        self._message = message

    def model_dump(self):
        return {"choices": [{"index": 0, "message": self._message}]}


def fake_client(*messages):
    client = Mock()
    client.chat.completions.create = AsyncMock(side_effect=[
        m if isinstance(m, Exception) else FakeCompletion(m) for m in messages
    ])
    return client


def course_call(call_id="call_1"):
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": "get_course_summary", "arguments": '{"career": "CS", "courseName": "Calculus I"}'},
    }


# --- normalization ---

def test_plain_text_reply():
    reply = normalize_message({"role": "assistant", "content": " Hello there! "})
    assert reply.text == "Hello there!"
    assert not reply.has_function_calls


def test_tool_calls_are_parsed_and_plain_text_ignored():
    reply = normalize_message({"role": "assistant", "content": "thinking...", "tool_calls": [course_call()]})
    assert reply.text == ""
    assert len(reply.function_calls) == 1
    call = reply.function_calls[0]
    assert (call.id, call.name) == ("call_1", "get_course_summary")
    assert call.args == {"career": "CS", "courseName": "Calculus I"}


def test_text_parts_are_joined_and_call_parts_skipped():
    content = [
        {"type": "text", "text": "First part."},
        {"type": "text", "text": "", "function_call": {"name": "x"}},
        {"type": "text", "text": "Second part."},
    ]
    assert extract_text(content, has_calls=True) == "First part. Second part."


def test_missing_call_id_becomes_empty_string():
    raw = course_call()
    del raw["id"]
    reply = normalize_message({"role": "assistant", "content": None, "tool_calls": [raw]})
    assert reply.function_calls[0].id == ""


def test_url_citations_become_grounding_sources():
    reply = normalize_message({
        "role": "assistant",
        "content": "Tuition is about $120 per credit.",
        "annotations": [
            {"type": "url_citation", "url_citation": {"url": "https://www.mdc.edu/tuition", "title": "Tuition"}},
            {"type": "url_citation", "url_citation": {"url": "https://www.mdc.edu/tuition", "title": "Dup"}},
            {"type": "file_citation"},
        ],
    })
    assert [(s.title, s.uri) for s in reply.grounding_sources] == [("Tuition", "https://www.mdc.edu/tuition")]


def test_malformed_arguments_raise_gateway_error():
    raw = course_call()
    raw["function"]["arguments"] = "{not json"
    with pytest.raises(GatewayError):
        normalize_message({"role": "assistant", "tool_calls": [raw]})


# --- gateway ---

def test_missing_api_key_is_a_setup_error():
    gateway = ModelGateway(make_settings(GEMINI_API_KEY=None))
    with pytest.raises(SetupError):
        gateway.create_conversation("system", [])


def test_unsupported_provider_is_a_setup_error():
    gateway = ModelGateway(make_settings(LLM_PROVIDER="PALM"), client=fake_client())
    with pytest.raises(SetupError):
        gateway.create_conversation("system", [])


def test_tool_result_is_recorded_next_to_its_call():
    client = fake_client(
        {"role": "assistant", "content": None, "tool_calls": [course_call()]},
        {"role": "assistant", "content": "Calculus I covers limits and derivatives."},
    )
    gateway = ModelGateway(make_settings(), client=client)
    tools = [{"type": "function", "function": {"name": "get_course_summary", "parameters": {}}}]
    handle = gateway.create_conversation("You are an advisor.", tools)

    first = run(gateway.send(handle, message="What is Calculus I?"))
    assert first.has_function_calls
    assert handle.history == [{"role": "user", "content": "What is Calculus I?"}]
    assert len(handle.pending_calls) == 1

    result = ToolResult(id="call_1", name="get_course_summary", response={"success": True, "summary": "Limits."})
    second = run(gateway.send(handle, tool_result=result))

    assert second.text == "Calculus I covers limits and derivatives."
    assert handle.pending_calls == []
    assert handle.history[1] == {
        "role": "assistant",
        "content": None,
        "tool_calls": [{
            "id": "call_1",
            "type": "function",
            "function": {"name": "get_course_summary", "arguments": json.dumps({"career": "CS", "courseName": "Calculus I"})},
        }],
    }
    assert handle.history[2]["role"] == "tool"
    assert handle.history[2]["tool_call_id"] == "call_1"
    assert json.loads(handle.history[2]["content"]) == {"success": True, "summary": "Limits."}
    assert handle.history[3] == {"role": "assistant", "content": "Calculus I covers limits and derivatives."}

    request = client.chat.completions.create.await_args.kwargs
    assert request["messages"][0] == {"role": "system", "content": "You are an advisor."}
    assert request["tools"] == tools
    assert request["tool_choice"] == "auto"


def test_call_without_id_gets_a_wire_id():
    raw = course_call()
    raw["id"] = ""
    client = fake_client(
        {"role": "assistant", "content": None, "tool_calls": [raw]},
        {"role": "assistant", "content": "Done."},
    )
    gateway = ModelGateway(make_settings(), client=client)
    handle = gateway.create_conversation("system", [])

    run(gateway.send(handle, message="hi"))
    run(gateway.send(handle, tool_result=ToolResult(name="get_course_summary", response={"success": True})))

    wire_id = handle.history[1]["tool_calls"][0]["id"]
    assert wire_id.startswith("call_")
    assert handle.history[2]["tool_call_id"] == wire_id


def test_failed_send_leaves_history_untouched():
    client = fake_client(OpenAIError("connection refused"))
    gateway = ModelGateway(make_settings(), client=client)
    handle = gateway.create_conversation("system", [])

    with pytest.raises(GatewayError):
        run(gateway.send(handle, message="hello"))
    assert handle.history == []


def test_empty_send_is_rejected():
    gateway = ModelGateway(make_settings(), client=fake_client())
    handle = gateway.create_conversation("system", [])
    with pytest.raises(ValueError):
        run(gateway.send(handle))


def test_plan_generation_uses_the_planner_model():
    client = fake_client({"role": "assistant", "content": '{"career": "Nursing", "plans": []}'})
    gateway = ModelGateway(make_settings(PLANNER_MODEL="gemini-2.5-pro"), client=client)

    text = run(gateway.generate_plan_text("make a plan"))

    assert text == '{"career": "Nursing", "plans": []}'
    request = client.chat.completions.create.await_args.kwargs
    assert request["model"] == "gemini-2.5-pro"
    assert "tools" not in request


def test_session_tracks_history_through_the_gateway():
    client = fake_client({"role": "assistant", "content": "Hi! How can I help?"})
    session = ConversationSession(ModelGateway(make_settings(), client=client), "system", [])

    reply = run(session.send("hello"))

    assert reply.text == "Hi! How can I help?"
    assert session.history_length == 2
    assert not session.busy


def summary_call(course, call_id=""):
    raw = course_call(call_id)
    raw["function"]["arguments"] = json.dumps({"career": "CS", "courseName": course})
    return raw


def test_user_message_discards_unanswered_calls():
    client = fake_client(
        {"role": "assistant", "content": None, "tool_calls": [summary_call("Statistics")]},
        {"role": "assistant", "content": None, "tool_calls": [summary_call("Physics I")]},
        {"role": "assistant", "content": "Physics I covers mechanics."},
    )
    gateway = ModelGateway(make_settings(), client=client)
    handle = gateway.create_conversation("system", [])

    run(gateway.send(handle, message="Tell me about Statistics"))
    # the Statistics call is never answered; the student moves on
    run(gateway.send(handle, message="Actually, tell me about Physics I"))
    assert [entry["call"].args["courseName"] for entry in handle.pending_calls] == ["Physics I"]

    run(gateway.send(handle, tool_result=ToolResult(name="get_course_summary", response={"success": True})))

    recorded = json.loads(handle.history[-3]["tool_calls"][0]["function"]["arguments"])
    assert recorded["courseName"] == "Physics I"
    assert handle.pending_calls == []


def test_id_less_result_answers_the_latest_call_of_that_name():
    client = fake_client(
        {"role": "assistant", "content": None,
         "tool_calls": [summary_call("Statistics"), summary_call("Physics I")]},
        {"role": "assistant", "content": "Done."},
    )
    gateway = ModelGateway(make_settings(), client=client)
    handle = gateway.create_conversation("system", [])

    run(gateway.send(handle, message="Summaries please"))
    run(gateway.send(handle, tool_result=ToolResult(name="get_course_summary", response={"success": True})))

    recorded = json.loads(handle.history[1]["tool_calls"][0]["function"]["arguments"])
    assert recorded["courseName"] == "Physics I"
    assert [entry["call"].args["courseName"] for entry in handle.pending_calls] == ["Statistics"]
