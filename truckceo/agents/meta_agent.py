"""Meta Agent: picks the assistant implementation for the current configuration."""
from .base_agent import AssistantService
from .fallback_agent import FallbackAssistant
from .gemini_agent import GeminiAssistant
from ..app.config import Config
from ..app.generate import GenerationClient
from ..utils.logger import get_logger

logger = get_logger()


def build_assistant() -> AssistantService:
    """Gemini when a usable key is configured, otherwise local fallbacks."""
    if Config.has_gemini_key():
        logger.info(f"Assistant provider: gemini model={Config.GEMINI_MODEL}")
        return GeminiAssistant(GenerationClient(api_key=Config.GEMINI_API_KEY))
    logger.info("Assistant provider: local fallback")
    return FallbackAssistant()
