"""Gemini-backed assistant: order suggestions, operations chat, truck-safe routing."""
import json
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .base_agent import AGENT_TOOLS, AssistantService
from .fallback_agent import ROUTE_FAILED, UNREACHABLE_CHAT, historical_suggestions
from ..app.config import Config
from ..app.generate import (
    GenerationClient,
    GenerationError,
    extract_function_calls,
    extract_grounding,
    extract_text,
)
from ..schemas.entities import Product, Truck
from ..schemas.io_models import AgentReply, FunctionCall, RouteDirections, SmartSuggestion
from ..utils.logger import get_logger

logger = get_logger()

SUGGESTION_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "productId": {"type": "STRING"},
            "recommendedQty": {"type": "NUMBER"},
            "reason": {"type": "STRING"},
            "impactLevel": {"type": "STRING", "enum": ["low", "medium", "high"]},
        },
        "required": ["productId", "recommendedQty", "reason", "impactLevel"],
    },
}

SUGGESTION_PROMPT = """You are a logistics expert for TruckCEO.com. Analyze the bread route inventory and suggest order quantities based on seasonal trends.

Context:
- Current Date: {current_date}
- Weather: {weather}
- Products: {products}

Market Rules:
1. Buns (Hamburger/Hot Dog) demand surges (3x-5x) during summer, fall, and major holidays (July 4th, Labor Day, Memorial Day) due to BBQs.
2. Snacks (Tastykakes) demand increases (2x) during winter and colder weather.
3. Sliced bread remains stable but dips slightly in summer.

Task:
Generate recommended order quantities for each product."""

CHAT_PROMPT = """You are the TruckCEO AI Agent for "Mateos in Motion". You help the owners manage their bread distribution business.

CAPABILITIES:
- You can update orders, track employees, and manage fleet maintenance using available tools.
- You analyze weather patterns (e.g. heatwaves surging bun demand).
- You provide business insights and execute operational updates.

Always be professional, highly capable, and proactive. If they ask to update something, use the provided tools.
{history}
User message: {message}"""

ROUTE_PROMPT = """Calculate a truck-safe navigation route from "{origin}" to "{destination}".
TRUCK CONSTRAINTS:
- Height: {height} feet
- Weight: {weight} lbs
- Length: {length} feet

CRITICAL: Avoid any parkways where trucks are prohibited (like Merritt Parkway, Hutchinson River Parkway) and any bridges with clearance lower than {clearance} feet.
Provide step-by-step driving directions that strictly adhere to these constraints."""


def _format_history(history: Optional[List[Dict[str, Any]]]) -> str:
    if not history:
        return ""
    lines = [f"{m.get('role', 'user')}: {m.get('text', '')}" for m in history[-Config.MAX_CONVERSATION_TURNS:]]
    return "\nConversation so far:\n" + "\n".join(lines) + "\n"


class GeminiAssistant(AssistantService):
    name = "gemini"

    def __init__(self, client: Optional[GenerationClient] = None):
        self.client = client or GenerationClient()

    def suggest_order_quantities(self, products: Sequence[Product], current_date: str,
                                 weather: Optional[str] = None) -> List[SmartSuggestion]:
        prompt = SUGGESTION_PROMPT.format(
            current_date=current_date,
            weather=weather or Config.DEFAULT_WEATHER,
            products=json.dumps([p.model_dump(mode="json", by_alias=True) for p in products]),
        )
        try:
            data = self.client.generate_content(prompt, generation_config={
                "responseMimeType": "application/json",
                "responseSchema": SUGGESTION_SCHEMA,
            })
            text = extract_text(data)
            if not text:
                return []
            raw = json.loads(text)
            suggestions = []
            for item in raw:
                item = dict(item)
                item["recommendedQty"] = int(round(float(item.get("recommendedQty", 0))))
                suggestions.append(SmartSuggestion.model_validate(item))
            return suggestions
        except (GenerationError, ValueError, TypeError, ValidationError) as e:
            logger.error(f"Gemini Error: {e}")
            return historical_suggestions(products)

    def chat(self, message: str, history: Optional[List[Dict[str, Any]]] = None) -> AgentReply:
        prompt = CHAT_PROMPT.format(history=_format_history(history), message=message)
        try:
            data = self.client.generate_content(prompt, tools=[{"functionDeclarations": AGENT_TOOLS}])
        except GenerationError as e:
            logger.error(f"Agent Error: {e}")
            return AgentReply(text=UNREACHABLE_CHAT)
        calls = [FunctionCall(name=c.get("name", ""), args=c.get("args") or {})
                 for c in extract_function_calls(data)]
        return AgentReply(
            text=extract_text(data) or "I've processed your request and updated the system.",
            function_calls=calls,
        )

    def route(self, origin: str, destination: str, truck: Truck) -> RouteDirections:
        dims = truck.dimensions
        prompt = ROUTE_PROMPT.format(
            origin=origin,
            destination=destination,
            height=dims.height,
            weight=dims.weight,
            length=dims.length,
            clearance=dims.height + 0.5,
        )
        try:
            data = self.client.generate_content(prompt, tools=[{"googleMaps": {}}])
        except GenerationError as e:
            logger.error(f"Routing Error: {e}")
            return RouteDirections(text=ROUTE_FAILED)
        return RouteDirections(text=extract_text(data), grounding=extract_grounding(data))
