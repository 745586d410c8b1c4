"""
Shared fixtures: a scripted model gateway, a mocked advisor and a small page
geometry so rendering stays fast.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from compass.core.config import Settings
from compass.core.container import CompassServices
from compass.core.errors import SetupError
from compass.core.tool_registry import ToolRegistry
from compass.models.common import (
    AIResponse, DegreePlan, Extracurriculars, StudyPlanDocument, TermPlan, WidgetState,
)
from compass.services.document_renderer import DocumentExporter, DocumentRenderer, PageGeometry
from compass.services.llm_connector import ConversationHandle
from compass.tools.base_tool import ToolServices


class FakeGateway:
    """
    Stands in for ModelGateway. Each send pops the next scripted reply: an
    AIResponse, an exception to raise, or a coroutine function to await.
    """
    def __init__(self, replies=None, default=None):
        self.replies = list(replies or [])
        self.default = default
        self.sent = []
        self.fail_setup = False
        self.conversations = 0

    def create_conversation(self, system_instruction, tools):
        if self.fail_setup:
            raise SetupError("GEMINI_API_KEY is not set in the environment.")
        self.conversations += 1
        return ConversationHandle(system_instruction=system_instruction, tools=tools)

    async def send(self, handle, message="", tool_result=None):
        self.sent.append((message, tool_result))
        if self.replies:
            reply = self.replies.pop(0)
        else:
            reply = self.default or AIResponse()
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return await reply()
        return reply


class RecordingSurface:
    """Collects what the dispatcher shows the user as (kind, content) pairs."""
    def __init__(self):
        self.state = WidgetState(session_id="test")
        self.messages = []
        self.timed_out = False

    def add_bot_message(self, content, kind="text"):
        self.messages.append((kind, content))

    @property
    def texts(self):
        return [content for kind, content in self.messages if kind == "text"]


class RecordingNarrator:
    def __init__(self):
        self.calls = []

    def narrate_plan(self, text, career=None):
        self.calls.append((text, career))
        return None

    async def drain(self):
        pass


def make_settings(**overrides) -> Settings:
    values = {
        "GEMINI_API_KEY": None,
        "TAVILY_API_KEY": None,
        "ELEVENLABS_API_KEY": None,
        "REDIS_URL": None,
        "INIT_RETRY_DELAY_SECONDS": 0.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def study_plan():
    return StudyPlanDocument(
        career="Nursing",
        plans=[
            DegreePlan(
                institution="Miami Dade College",
                degree="Associate in Science - Nursing",
                timeline=[
                    TermPlan(term="Fall 2025", courses=["BSC 2085 - Anatomy & Physiology I", "ENC 1101 - English Composition I"]),
                    TermPlan(term="Spring 2026", courses=["BSC 2086 - Anatomy & Physiology II", "MAC 1105 - College Algebra"]),
                ],
            )
        ],
        extracurriculars=Extracurriculars(clubs=["Student Nurses Association"], activities=["Hospital volunteering"]),
    )


@pytest.fixture
def geometry():
    return PageGeometry(width=400, height=560, margin=20, dpi=72)


@pytest.fixture
def renderer(geometry):
    return DocumentRenderer(geometry)


@pytest.fixture
def exporter(renderer, tmp_path):
    return DocumentExporter(renderer, str(tmp_path / "exports"))


@pytest.fixture
def advisor(study_plan):
    advisor = Mock()
    advisor.home_institution = "Miami Dade College"
    advisor.get_flowchart_data = AsyncMock(return_value=study_plan)
    advisor.get_degree_cost = AsyncMock(return_value="Estimated total: about $8,000.")
    advisor.get_course_summary = AsyncMock(return_value="A calculus course.")
    advisor.get_teacher_reviews = AsyncMock(return_value="Students like Prof. Smith.")
    advisor.find_teachers = AsyncMock(return_value="1. Prof. Smith")
    advisor.get_tuition_estimate = AsyncMock(return_value="About $120 per credit hour.")
    return advisor


@pytest.fixture
def tool_services(advisor, exporter):
    return ToolServices(advisor=advisor, exporter=exporter)


@pytest.fixture
def registry(tool_services):
    return ToolRegistry(tool_services)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def make_services(gateway, registry, renderer, exporter):
    def factory(**overrides):
        return CompassServices(
            settings=make_settings(**overrides),
            gateway=gateway,
            registry=registry,
            renderer=renderer,
            exporter=exporter,
            narrator=None,
        )
    return factory


def run(coro):
    return asyncio.run(coro)
