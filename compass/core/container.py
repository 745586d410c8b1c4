# compass/core/container.py
# Builds the long-lived services once at startup and hands them to each widget.
# Date: 2026-10-19
# Version: 0.1.0

from dataclasses import dataclass
from typing import Optional
from compass.core.config import Settings
from compass.core.conversation import ConversationSession
from compass.core.dispatcher import ToolDispatcher
from compass.core.tool_registry import ToolRegistry
from compass.services.advisor import AdvisorService
from compass.services.document_renderer import DocumentExporter, DocumentRenderer
from compass.services.llm_connector import ModelGateway
from compass.services.search_client import SearchClient
from compass.services.speech import Narrator, SpeechClient
from compass.tools.base_tool import ToolServices
from compass.utils.logger import console


@dataclass
class CompassServices:
    settings: Settings
    gateway: ModelGateway
    registry: ToolRegistry
    renderer: DocumentRenderer
    exporter: DocumentExporter
    narrator: Optional[Narrator] = None

    def new_session(self) -> ConversationSession:
        """
        Raises:
            SetupError: The model backend is not configured.
        """
        return ConversationSession(
            self.gateway,
            system_instruction=self.settings.SYSTEM_INSTRUCTION,
            tools=self.registry.get_definitions(),
        )

    def new_dispatcher(self, session: ConversationSession) -> ToolDispatcher:
        return ToolDispatcher(
            session,
            self.registry,
            self.renderer,
            narrator=self.narrator,
            max_depth=self.settings.MAX_TOOL_DEPTH,
        )


def build_services(settings: Settings) -> CompassServices:
    console.set_level(settings.LOG_LEVEL)
    console.rule("Starting Course Compass")
    gateway = ModelGateway(settings)
    advisor = AdvisorService(settings, gateway, SearchClient(settings))
    renderer = DocumentRenderer.from_settings(settings)
    exporter = DocumentExporter(renderer, settings.EXPORT_DIR)
    registry = ToolRegistry(ToolServices(advisor=advisor, exporter=exporter))
    narrator = Narrator(SpeechClient(settings), voice_id=settings.ELEVENLABS_VOICE_ID)
    return CompassServices(
        settings=settings,
        gateway=gateway,
        registry=registry,
        renderer=renderer,
        exporter=exporter,
        narrator=narrator,
    )
