# The module is to define the configuration settings for the application.
# Date: 2026-10-19
# Version: 0.2.0

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a friendly and knowledgeable AI career advisor for students, with a focus on "
    "Miami Dade College (MDC). Your goal is to provide helpful, accurate, and up-to-date "
    "information. For users who are unsure where to start, you can offer to perform a detailed "
    "career potential analysis based on their interests and skills. When a user asks for "
    "information that could be time-sensitive or requires real-world data (like tuition, reviews, "
    "transfer options), use your available tools. Teacher reviews, tuition estimates, and transfer "
    "options should be specific to MDC. For transfer options, assume the student is completing an "
    "Associate in Arts (AA) at MDC. If a tool requires more information (like a start date for a "
    "study plan), ask the user for it before calling the tool. Be encouraging and clear in your responses."
)


class Settings(BaseSettings):
    """
    The Settings class is used to define the configuration settings for the application.
    It inherits from BaseSettings, which allows it to load environment variables
    and provides type validation for the settings.
    Attributes:
        LOG_LEVEL (str): Console log level name, e.g. DEBUG, INFO or SUCCESS.
        LLM_PROVIDER (str): The name of the LLM provider backing the chat widget.
        <PROVIDER>_API_KEY / _MODEL / _BASE_URL: Credentials and endpoint per provider.
        PLANNER_MODEL (str): Optional model override used for study plan generation.
        TAVILY_API_KEY (str): API key for search grounding.
        ELEVENLABS_* : Text-to-speech credentials and voice.
        REDIS_URL (str): Optional Redis URL for transcript snapshots.
        MAX_TOOL_DEPTH (int): Ceiling for nested tool-call rounds.
        SEND_TIMEOUT_SECONDS (float): Watchdog for a single chat exchange.
        PDF_* : Page geometry for exported study plans.
    """
    # Logging
    LOG_LEVEL: str = "INFO"

    # LLM Provider Switch
    LLM_PROVIDER: str = "GEMINI"

    # Gemini (OpenAI-compatible endpoint)
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"

    # CHATGPT
    CHATGPT_API_KEY: Optional[str] = None
    CHATGPT_MODEL: str = "gpt-4o-mini"
    CHATGPT_BASE_URL: str = "https://api.openai.com/v1"

    # Claude
    CLAUDE_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-0"
    CLAUDE_BASE_URL: str = "https://api.anthropic.com/v1/"

    # DEEPSEEK_CHAT
    DEEPSEEK_CHAT_API_KEY: Optional[str] = None
    DEEPSEEK_CHAT_MODEL: str = "deepseek-chat"
    DEEPSEEK_CHAT_BASE_URL: str = "https://api.deepseek.com"

    # Plan generation benefits from the larger model
    PLANNER_MODEL: Optional[str] = "gemini-2.5-pro"

    SYSTEM_INSTRUCTION: str = DEFAULT_SYSTEM_INSTRUCTION
    HOME_INSTITUTION: str = "Miami Dade College"

    # TAVILY_SEARCH
    TAVILY_API_KEY: Optional[str] = None
    SEARCH_MAX_RESULTS: int = 5

    # ELEVENLABS_TTS
    ELEVENLABS_API_KEY: Optional[str] = None
    ELEVENLABS_BASE_URL: str = "https://api.elevenlabs.io"
    ELEVENLABS_VOICE_ID: str = "bajNon13EdhNMndG3z05"
    ELEVENLABS_MODEL_ID: str = "eleven_multilingual_v2"
    ELEVENLABS_MAX_RETRIES: int = 2
    ELEVENLABS_TIMEOUT_SECONDS: float = 60.0
    NARRATION_DIR: str = "narration"

    # REDIS
    REDIS_URL: Optional[str] = None
    SESSION_TTL_SECONDS: int = 86400

    # Chat orchestration
    MAX_TOOL_DEPTH: int = 5
    SEND_TIMEOUT_SECONDS: float = 60.0
    INIT_RETRY_DELAY_SECONDS: float = 1.0

    # PDF export (A4 by default)
    PDF_PAGE_WIDTH_MM: float = 210.0
    PDF_PAGE_HEIGHT_MM: float = 297.0
    PDF_MARGIN_MM: float = 10.0
    PDF_DPI: int = 150
    PDF_FONT_PATH: Optional[str] = None
    EXPORT_DIR: str = "exports"

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"

# lru_cache to cache the settings instance.
@lru_cache
def get_settings():
    return Settings()


if __name__ == "__main__":
    settings = get_settings()
    print(settings.model_dump_json(indent=4))
