"""AssistantService interface shared by the hosted and local assistants."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..schemas.entities import Product, Truck
from ..schemas.io_models import AgentReply, RouteDirections, SmartSuggestion

# Function declarations offered to the model in chat
AGENT_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "update_order_quantity",
        "description": "Updates the recommended or actual order quantity for a specific product.",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "productId": {"type": "STRING", "description": "The ID of the product to update."},
                "newQuantity": {"type": "NUMBER", "description": "The new order quantity."},
                "reason": {"type": "STRING", "description": "Brief reason for the manual override."},
            },
            "required": ["productId", "newQuantity"],
        },
    },
    {
        "name": "update_employee_status",
        "description": "Updates a team member status or logs an event like sick day or vacation.",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "employeeId": {"type": "STRING", "description": "The name or ID of the employee (e.g. Andres, Adrian)."},
                "status": {"type": "STRING", "description": "The new status (active, off, break, vacation, sick)."},
                "note": {"type": "STRING", "description": "Note regarding the change (e.g., \"Doctor appointment\")."},
            },
            "required": ["employeeId", "status"],
        },
    },
    {
        "name": "report_truck_issue",
        "description": "Logs a new maintenance issue or updates the health status of a truck.",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "truckId": {"type": "STRING", "description": "The plate or ID of the truck (e.g. GMC-06-01)."},
                "issue": {"type": "STRING", "description": "Description of the problem."},
                "healthStatus": {"type": "STRING", "description": "New health status (good, warning, critical)."},
            },
            "required": ["truckId", "healthStatus"],
        },
    },
]


class AssistantService(ABC):
    name: str = "base"

    @abstractmethod
    def suggest_order_quantities(self, products: Sequence[Product], current_date: str,
                                 weather: Optional[str] = None) -> List[SmartSuggestion]:
        ...

    @abstractmethod
    def chat(self, message: str, history: Optional[List[Dict[str, Any]]] = None) -> AgentReply:
        ...

    @abstractmethod
    def route(self, origin: str, destination: str, truck: Truck) -> RouteDirections:
        ...
