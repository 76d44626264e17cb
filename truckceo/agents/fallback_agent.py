"""Deterministic assistant used when no model credential is configured."""
import math
from typing import Any, Dict, List, Optional, Sequence

from .base_agent import AssistantService
from ..schemas.entities import Product, Truck
from ..schemas.io_models import AgentReply, ImpactLevel, RouteDirections, SmartSuggestion
from ..utils.logger import get_logger

logger = get_logger()

UNAVAILABLE_CHAT = ("AI Agent is currently unavailable. Please configure GEMINI_API_KEY "
                    "in your .env file to enable AI features.")
UNREACHABLE_CHAT = "I'm having trouble connecting to the Mateo business servers right now. Please try again."
ROUTE_FAILED = "Failed to calculate truck-safe route. Please use secondary commercial route maps."

_DEMO_IMPACT = (ImpactLevel.high, ImpactLevel.medium, ImpactLevel.low)


def demo_suggestions(products: Sequence[Product]) -> List[SmartSuggestion]:
    """First three products, last order + 20, impact high/medium/low."""
    return [
        SmartSuggestion(
            product_id=product.id,
            recommended_qty=product.last_order_quantity + 20,
            reason="Demo mode - Configure GEMINI_API_KEY for AI suggestions",
            impact_level=_DEMO_IMPACT[index],
        )
        for index, product in enumerate(list(products)[:3])
    ]


def historical_suggestions(products: Sequence[Product]) -> List[SmartSuggestion]:
    """Every product at 110% of its last order; used when the model call fails."""
    return [
        SmartSuggestion(
            product_id=product.id,
            recommended_qty=math.floor(product.last_order_quantity * 1.1),
            reason="Historical average (AI unavailable)",
            impact_level=ImpactLevel.low,
        )
        for product in products
    ]


class FallbackAssistant(AssistantService):
    name = "fallback"

    def suggest_order_quantities(self, products: Sequence[Product], current_date: str,
                                 weather: Optional[str] = None) -> List[SmartSuggestion]:
        logger.warning("Gemini API key not configured. Using mock suggestions.")
        return demo_suggestions(products)

    def chat(self, message: str, history: Optional[List[Dict[str, Any]]] = None) -> AgentReply:
        logger.warning("Gemini API key not configured.")
        return AgentReply(text=UNAVAILABLE_CHAT)

    def route(self, origin: str, destination: str, truck: Truck) -> RouteDirections:
        logger.warning("Gemini API key not configured.")
        return RouteDirections(
            text=f"{origin} → {destination}",
            distance="Calculating...",
            duration="Calculating...",
            warnings=["AI route calculation unavailable - Configure GEMINI_API_KEY"],
        )
