#!/usr/bin/env python3
"""
Synchronization context for one session.

The context is the single in-memory holder of the data a session can see.
Every mutation writes through the persistence gateway and then reloads the
whole visible dataset; the new snapshot replaces the old one in a single
assignment, so readers never observe a half-updated view.
"""

import enum
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union

from ..data.document_store import DocumentStore
from ..data.errors import ConfigurationError, DocumentNotFoundError
from ..data.gateway import PersistenceGateway
from ..schemas.entities import (
    Employee,
    Product,
    RouteTerritory,
    SaleAlert,
    Store,
    Truck,
    UserProfile,
    new_store_id,
)
from ..utils.logger import get_logger
from .scoping import EMPTY_SNAPSHOT, Snapshot, load_snapshot

logger = get_logger()


class SyncState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class RefreshStrategy(ABC):
    """How the snapshot is brought back in line with the store after a write."""

    @abstractmethod
    def refresh(self, gateway: PersistenceGateway, profile: UserProfile, current: Snapshot) -> Snapshot:
        ...


class FullRefetchStrategy(RefreshStrategy):
    """Reload every visible collection."""

    def refresh(self, gateway: PersistenceGateway, profile: UserProfile, current: Snapshot) -> Snapshot:
        return load_snapshot(gateway, profile)


class SyncContext:
    """Session-owned snapshot plus write-then-refetch mutations."""

    def __init__(self, store: DocumentStore, refresh_strategy: Optional[RefreshStrategy] = None):
        self.store = store
        self.refresh_strategy = refresh_strategy or FullRefetchStrategy()
        self.gateway: Optional[PersistenceGateway] = None
        self.profile: Optional[UserProfile] = None
        self.state = SyncState.UNINITIALIZED
        self.snapshot: Snapshot = EMPTY_SNAPSHOT
        # Serializes write+reload and store read-modify-write within one session
        self._lock = threading.RLock()

    # ----- lifecycle -----

    def start(self, profile: UserProfile) -> Snapshot:
        """Bind to ``profile``'s business and perform the initial load."""
        with self._lock:
            self.profile = profile
            self.gateway = PersistenceGateway(profile.business_id, self.store)
            return self.refetch_all()

    def close(self) -> None:
        with self._lock:
            self.gateway = None
            self.profile = None
            self.snapshot = EMPTY_SNAPSHOT
            self.state = SyncState.UNINITIALIZED

    @property
    def loading(self) -> bool:
        return self.state is SyncState.LOADING

    # Snapshot accessors
    @property
    def products(self) -> List[Product]:
        return list(self.snapshot.products)

    @property
    def employees(self) -> List[Employee]:
        return list(self.snapshot.employees)

    @property
    def trucks(self) -> List[Truck]:
        return list(self.snapshot.trucks)

    @property
    def sale_alerts(self) -> List[SaleAlert]:
        return list(self.snapshot.sale_alerts)

    @property
    def routes(self) -> List[RouteTerritory]:
        return list(self.snapshot.routes)

    # ----- fetching -----

    def _require_gateway(self) -> PersistenceGateway:
        if self.gateway is None or self.profile is None:
            raise ConfigurationError("Service not initialized")
        return self.gateway

    def _reload(self) -> Snapshot:
        gateway = self._require_gateway()
        self.state = SyncState.LOADING
        try:
            fresh = self.refresh_strategy.refresh(gateway, self.profile, self.snapshot)
        except Exception:
            # No error state: keep serving the previous snapshot
            self.state = SyncState.READY
            raise
        self.snapshot = fresh
        self.state = SyncState.READY
        return fresh

    def refetch_all(self) -> Snapshot:
        """Reload the visible dataset, keeping the old snapshot if the fetch fails."""
        with self._lock:
            self._require_gateway()
            try:
                return self._reload()
            except Exception as e:
                logger.error(f"Error fetching data: {e}")
                return self.snapshot

    def _mutate(self, operation: Callable[[], Any]) -> Any:
        with self._lock:
            self._require_gateway()
            result = operation()
            self._reload()
            return result

    # ----- products -----

    def add_product(self, data: Union[Product, Dict[str, Any]]) -> str:
        return self._mutate(lambda: self.gateway.products.add(data))

    def update_product(self, product_id: str, fields: Dict[str, Any]) -> None:
        self._mutate(lambda: self.gateway.products.update(product_id, fields))

    def delete_product(self, product_id: str) -> None:
        self._mutate(lambda: self.gateway.products.delete(product_id))

    # ----- employees -----

    def add_employee(self, data: Union[Employee, Dict[str, Any]], **account) -> str:
        return self._mutate(lambda: self.gateway.employees.add(data, **account))

    def update_employee(self, employee_id: str, fields: Dict[str, Any]) -> None:
        self._mutate(lambda: self.gateway.employees.update(employee_id, fields))

    def delete_employee(self, employee_id: str) -> None:
        self._mutate(lambda: self.gateway.employees.delete(employee_id))

    # ----- trucks -----

    def add_truck(self, data: Union[Truck, Dict[str, Any]]) -> str:
        return self._mutate(lambda: self.gateway.trucks.add(data))

    def update_truck(self, truck_id: str, fields: Dict[str, Any]) -> None:
        self._mutate(lambda: self.gateway.trucks.update(truck_id, fields))

    def delete_truck(self, truck_id: str) -> None:
        self._mutate(lambda: self.gateway.trucks.delete(truck_id))

    # ----- routes -----

    def add_route(self, data: Union[RouteTerritory, Dict[str, Any]]) -> str:
        return self._mutate(lambda: self.gateway.routes.add(data))

    def update_route(self, route_id: str, fields: Dict[str, Any]) -> None:
        self._mutate(lambda: self.gateway.routes.update(route_id, fields))

    def delete_route(self, route_id: str) -> None:
        # Employees keep any assignedRoutes entry pointing at this id
        self._mutate(lambda: self.gateway.routes.delete(route_id))

    # ----- stores (embedded in routes) -----
    # Each call rewrites the parent route's whole ``stores`` array. Two
    # sessions editing the same route concurrently: the last write wins.

    def _current_route(self, route_id: str) -> RouteTerritory:
        gateway = self._require_gateway()
        route = gateway.routes.get_one(route_id)
        if route is None:
            raise DocumentNotFoundError(f"{gateway.routes.path}/{route_id}")
        return route

    def _write_stores(self, route_id: str, stores: List[Store]) -> None:
        self.update_route(route_id, {"stores": [s.model_dump(mode="json") for s in stores]})

    def add_store(self, route_id: str, data: Dict[str, Any]) -> str:
        with self._lock:
            route = self._current_route(route_id)
            store = Store.model_validate({**data, "id": new_store_id()})
            self._write_stores(route_id, route.stores + [store])
            return store.id

    def update_store(self, route_id: str, store_id: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            route = self._current_route(route_id)
            if not any(s.id == store_id for s in route.stores):
                raise DocumentNotFoundError(f"{route_id}/stores/{store_id}")
            updated = [
                Store.model_validate({**s.model_dump(), **fields, "id": s.id}) if s.id == store_id else s
                for s in route.stores
            ]
            self._write_stores(route_id, updated)

    def delete_store(self, route_id: str, store_id: str) -> None:
        with self._lock:
            route = self._current_route(route_id)
            self._write_stores(route_id, [s for s in route.stores if s.id != store_id])

    # ----- sale alerts -----

    def add_sale_alert(self, data: Union[SaleAlert, Dict[str, Any]]) -> str:
        return self._mutate(lambda: self.gateway.sale_alerts.add(data))

    def update_sale_alert(self, alert_id: str, fields: Dict[str, Any]) -> None:
        self._mutate(lambda: self.gateway.sale_alerts.update(alert_id, fields))

    def delete_sale_alert(self, alert_id: str) -> None:
        self._mutate(lambda: self.gateway.sale_alerts.delete(alert_id))


class SyncContextRegistry:
    """Contexts keyed by session id, created on sign-in and dropped on sign-out."""

    def __init__(self, store: DocumentStore, refresh_strategy_factory: Callable[[], RefreshStrategy] = FullRefetchStrategy):
        self.store = store
        self.refresh_strategy_factory = refresh_strategy_factory
        self._contexts: Dict[str, SyncContext] = {}

    def open(self, session_id: str, profile: UserProfile) -> SyncContext:
        self.close(session_id)
        context = SyncContext(self.store, self.refresh_strategy_factory())
        context.start(profile)
        self._contexts[session_id] = context
        return context

    def get(self, session_id: str) -> Optional[SyncContext]:
        return self._contexts.get(session_id)

    def close(self, session_id: str) -> None:
        context = self._contexts.pop(session_id, None)
        if context is not None:
            context.close()
