#!/usr/bin/env python3
"""
Main FastAPI application for the TruckCEO operations backend.
"""

import os
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import Config
from .session import SessionManager
from ..agents.base_agent import AssistantService
from ..agents.meta_agent import build_assistant
from ..agents.tool_executor import ToolExecutor
from ..data.accounts import AccountService
from ..data.blob_storage import LocalBlobStorage
from ..data.database import SessionLocal, create_tables
from ..data.document_store import DocumentStore
from ..data.errors import (
    ConfigurationError,
    DocumentNotFoundError,
    InvalidPathError,
    StoreOperationError,
)
from ..importers.csv_import import CSVImportService, CSVType
from ..schemas.io_models import (
    ChatRequest,
    ChatResponse,
    CreatedResponse,
    CSVUploadResult,
    RouteDirections,
    RouteRequest,
    SessionCreateRequest,
    SessionCreateResponse,
    SmartSuggestion,
    SuggestionRequest,
)
from ..sync.context import SyncContext, SyncContextRegistry
from ..sync.scoping import Snapshot
from ..utils.logger import get_logger

logger = get_logger()

# URL segment -> SyncContext method suffix
COLLECTION_METHODS = {
    "products": "product",
    "employees": "employee",
    "trucks": "truck",
    "routes": "route",
    "sale-alerts": "sale_alert",
}


@dataclass
class Services:
    store: DocumentStore
    accounts: AccountService
    contexts: SyncContextRegistry
    blob_storage: LocalBlobStorage
    sessions: SessionManager
    assistant: AssistantService


@lru_cache(maxsize=None)
def get_services() -> Services:
    """Default wiring; tests override this dependency."""
    create_tables()
    store = DocumentStore(SessionLocal)
    return Services(
        store=store,
        accounts=AccountService(store),
        contexts=SyncContextRegistry(store),
        blob_storage=LocalBlobStorage(Config.BLOB_STORAGE_DIR),
        sessions=SessionManager(),
        assistant=build_assistant(),
    )


# Initialize FastAPI app
app = FastAPI(
    title="TruckCEO API",
    description="Routes, fleet, staff, promotions and ordering for a bread-route business",
    version="1.0.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your frontend domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})

@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return _error(409, str(exc))

@app.exception_handler(DocumentNotFoundError)
async def not_found_handler(request: Request, exc: DocumentNotFoundError):
    return _error(404, str(exc))

@app.exception_handler(InvalidPathError)
async def invalid_path_handler(request: Request, exc: InvalidPathError):
    return _error(400, str(exc))

@app.exception_handler(StoreOperationError)
async def store_error_handler(request: Request, exc: StoreOperationError):
    logger.error(f"Remote operation failed: {exc}")
    return _error(502, "Data store operation failed")

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.errors(include_url=False, include_context=False, include_input=False)})


def _context(session_id: str, services: Services) -> SyncContext:
    context = services.contexts.get(session_id)
    if context is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return context


def _dump_snapshot(snapshot: Snapshot) -> Dict[str, Any]:
    def dump(items):
        return [item.model_dump(mode="json", by_alias=True) for item in items]
    return {
        "products": dump(snapshot.products),
        "employees": dump(snapshot.employees),
        "trucks": dump(snapshot.trucks),
        "saleAlerts": dump(snapshot.sale_alerts),
        "routes": dump(snapshot.routes),
    }


def _collection_method(context: SyncContext, action: str, collection: str):
    suffix = COLLECTION_METHODS.get(collection)
    if suffix is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {collection}")
    return getattr(context, f"{action}_{suffix}")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/session", response_model=SessionCreateResponse)
def create_session(request: SessionCreateRequest, services: Services = Depends(get_services)):
    """
    Start a data session for a verified identity.

    First sign-in of an unknown identity registers it as the owner of a new
    business.
    """
    profile = services.accounts.get_profile(request.uid)
    if profile is None:
        profile = services.accounts.register_owner(request.uid, request.email, request.display_name)

    session_id = request.session_id or str(uuid.uuid4())
    context = services.contexts.open(session_id, profile)
    services.sessions.create_session(session_id)
    return SessionCreateResponse(
        session_id=session_id,
        business_id=profile.business_id,
        role=profile.role.value,
        counts=context.snapshot.counts(),
    )


@app.delete("/session/{session_id}")
def close_session(session_id: str, services: Services = Depends(get_services)):
    services.contexts.close(session_id)
    services.sessions.delete_session(session_id)
    return {"closed": session_id}


@app.get("/session/{session_id}/data")
def get_data(session_id: str, services: Services = Depends(get_services)):
    context = _context(session_id, services)
    return {"state": context.state.value, **_dump_snapshot(context.snapshot)}


@app.post("/session/{session_id}/refetch")
def refetch(session_id: str, services: Services = Depends(get_services)):
    context = _context(session_id, services)
    return {"state": context.state.value, **_dump_snapshot(context.refetch_all())}


@app.post("/session/{session_id}/routes/{route_id}/stores", response_model=CreatedResponse)
def add_store(session_id: str, route_id: str, data: Dict[str, Any], services: Services = Depends(get_services)):
    store_id = _context(session_id, services).add_store(route_id, data)
    return CreatedResponse(id=store_id)


@app.patch("/session/{session_id}/routes/{route_id}/stores/{store_id}")
def update_store(session_id: str, route_id: str, store_id: str, fields: Dict[str, Any],
                 services: Services = Depends(get_services)):
    _context(session_id, services).update_store(route_id, store_id, fields)
    return {"updated": store_id}


@app.delete("/session/{session_id}/routes/{route_id}/stores/{store_id}")
def delete_store(session_id: str, route_id: str, store_id: str, services: Services = Depends(get_services)):
    _context(session_id, services).delete_store(route_id, store_id)
    return {"deleted": store_id}


@app.post("/session/{session_id}/csv/{csv_type}", response_model=CSVUploadResult)
def upload_csv(session_id: str, csv_type: CSVType, file: UploadFile = File(...),
               services: Services = Depends(get_services)):
    context = _context(session_id, services)
    if context.gateway is None:
        raise ConfigurationError("Service not initialized")
    content = file.file.read()
    importer = CSVImportService(context.gateway.business_id, context.gateway, services.blob_storage)
    result = importer.upload_csv(file.filename, content, csv_type)
    context.refetch_all()
    return result


@app.post("/session/{session_id}/assistant/suggestions", response_model=List[SmartSuggestion])
def suggest_orders(session_id: str, request: SuggestionRequest, services: Services = Depends(get_services)):
    context = _context(session_id, services)
    return services.assistant.suggest_order_quantities(context.products, request.current_date, request.weather)


@app.post("/session/{session_id}/assistant/chat", response_model=ChatResponse)
def chat(session_id: str, request: ChatRequest, services: Services = Depends(get_services)):
    context = _context(session_id, services)
    history = services.sessions.get_history(session_id)
    services.sessions.add_message(session_id, "user", request.message)

    reply = services.assistant.chat(request.message, history)
    tool_results = []
    if request.apply_tools and reply.function_calls:
        tool_results = ToolExecutor(context).execute_all(reply.function_calls)

    services.sessions.add_message(session_id, "agent", reply.text)
    return ChatResponse(text=reply.text, function_calls=reply.function_calls, tool_results=tool_results)


@app.post("/session/{session_id}/assistant/route", response_model=RouteDirections)
def truck_route(session_id: str, request: RouteRequest, services: Services = Depends(get_services)):
    context = _context(session_id, services)
    truck = next((t for t in context.trucks if t.id == request.truck_id), None)
    if truck is None:
        raise HTTPException(status_code=404, detail=f"Unknown truck: {request.truck_id}")
    return services.assistant.route(request.origin, request.destination, truck)


# Generic collection endpoints go last so the fixed paths above match first

@app.post("/session/{session_id}/{collection}", response_model=CreatedResponse)
def add_entity(session_id: str, collection: str, data: Dict[str, Any], services: Services = Depends(get_services)):
    context = _context(session_id, services)
    return CreatedResponse(id=_collection_method(context, "add", collection)(data))


@app.patch("/session/{session_id}/{collection}/{entity_id}")
def update_entity(session_id: str, collection: str, entity_id: str, fields: Dict[str, Any],
                  services: Services = Depends(get_services)):
    context = _context(session_id, services)
    _collection_method(context, "update", collection)(entity_id, fields)
    return {"updated": entity_id}


@app.delete("/session/{session_id}/{collection}/{entity_id}")
def delete_entity(session_id: str, collection: str, entity_id: str, services: Services = Depends(get_services)):
    context = _context(session_id, services)
    _collection_method(context, "delete", collection)(entity_id)
    return {"deleted": entity_id}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
