"""Pydantic models for API I/O and assistant contracts."""
import enum
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CSVUploadResult(CamelModel):
    success: bool
    message: str
    records_processed: int = 0


class ImpactLevel(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"

class SmartSuggestion(CamelModel):
    product_id: str
    recommended_qty: int = Field(..., ge=0)
    reason: str
    impact_level: ImpactLevel


class FunctionCall(BaseModel):
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)

class AgentReply(CamelModel):
    text: str
    function_calls: List[FunctionCall] = Field(default_factory=list)

class ToolResult(BaseModel):
    name: str
    ok: bool
    detail: str


class RouteDirections(CamelModel):
    text: str
    distance: Optional[str] = None
    duration: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    grounding: List[Dict[str, Any]] = Field(default_factory=list)


class SessionCreateRequest(CamelModel):
    """Identity already verified by the identity provider."""
    uid: str = Field(..., min_length=1)
    email: Optional[str] = None
    display_name: Optional[str] = None
    session_id: Optional[str] = None

class SessionCreateResponse(CamelModel):
    session_id: str
    business_id: str
    role: str
    counts: Dict[str, int]

class ChatRequest(CamelModel):
    message: str = Field(..., min_length=1)
    apply_tools: bool = True

class ChatResponse(CamelModel):
    text: str
    function_calls: List[FunctionCall] = Field(default_factory=list)
    tool_results: List[ToolResult] = Field(default_factory=list)

class SuggestionRequest(CamelModel):
    current_date: str
    weather: Optional[str] = None

class RouteRequest(CamelModel):
    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    truck_id: str = Field(..., min_length=1)

class CreatedResponse(CamelModel):
    id: str
