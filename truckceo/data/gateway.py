"""
Persistence gateway: typed entity operations scoped to one business.

Every collection lives under ``businesses/{business_id}/{collection}``. The
gateway holds no state besides the business id and the store handle, so it
is cheap to build one per session.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from .document_store import DocumentStore
from .errors import ConfigurationError, InvalidPathError
from ..schemas.entities import (
    Employee,
    Entity,
    Product,
    RouteTerritory,
    SaleAlert,
    Truck,
    to_document_fields,
)
from ..utils.logger import get_logger

logger = get_logger()

E = TypeVar("E", bound=Entity)

PRODUCTS = "products"
EMPLOYEES = "employees"
TRUCKS = "trucks"
ROUTES = "routes"
SALE_ALERTS = "saleAlerts"


def business_path(business_id: str) -> str:
    return f"businesses/{business_id}"


class EntityCollection(Generic[E]):
    """get_all / get_one / add / update / delete for one entity type."""

    def __init__(self, store: DocumentStore, business_id: str, name: str, model: Type[E]):
        self.store = store
        self.business_id = business_id
        self.name = name
        self.model = model

    @property
    def path(self) -> str:
        return f"{business_path(self.business_id)}/{self.name}"

    def _doc_path(self, entity_id: str) -> str:
        if not entity_id or "/" in entity_id:
            raise InvalidPathError(f"Invalid {self.name} id: {entity_id!r}")
        return f"{self.path}/{entity_id}"

    def _from_document(self, doc_id: str, data: Dict[str, Any]) -> E:
        return self.model.model_validate({**data, "id": doc_id})

    def _to_document(self, data: Union[E, Dict[str, Any]]) -> Dict[str, Any]:
        entity = data if isinstance(data, self.model) else self.model.model_validate(data)
        return entity.to_document()

    def get_all(self) -> List[E]:
        """Every document in the collection; order is not guaranteed."""
        return [self._from_document(doc_id, data) for doc_id, data in self.store.collection(self.path)]

    def get_one(self, entity_id: str) -> Optional[E]:
        data = self.store.get(self._doc_path(entity_id))
        if data is None:
            return None
        return self._from_document(entity_id, data)

    def add(self, data: Union[E, Dict[str, Any]]) -> str:
        """Write a new document and return the store-generated id.

        Any ``id`` on the input is ignored.
        """
        document = self._to_document(data)
        new_id = self.store.new_id()
        self.store.set(self._doc_path(new_id), document)
        logger.debug(f"Added {self.name}/{new_id} for business {self.business_id}")
        return new_id

    def update(self, entity_id: str, fields: Dict[str, Any]) -> None:
        """Merge only the supplied fields.

        Raises:
            pydantic.ValidationError: unknown field or invalid value (nothing written).
            DocumentNotFoundError: the document does not exist.
        """
        changes = to_document_fields(self.model, fields)
        self.store.update(self._doc_path(entity_id), changes)

    def delete(self, entity_id: str) -> None:
        """Hard delete; a missing id is not an error."""
        self.store.delete(self._doc_path(entity_id))


class EmployeeCollection(EntityCollection[Employee]):

    def add(self, data: Union[Employee, Dict[str, Any]], user_id: Optional[str] = None,
            email: Optional[str] = None, assigned_routes: Optional[List[str]] = None) -> str:
        # Employees may be created before any login account exists
        employee = data if isinstance(data, Employee) else Employee.model_validate(data)
        overrides: Dict[str, Any] = {}
        if user_id is not None:
            overrides["user_id"] = user_id
        if email is not None:
            overrides["email"] = email
        if assigned_routes is not None:
            overrides["assigned_routes"] = list(assigned_routes)
        if overrides:
            employee = employee.model_copy(update=overrides)
        return super().add(employee)


class RouteCollection(EntityCollection[RouteTerritory]):

    def get_for_member(self, assigned_route_ids: List[str]) -> List[RouteTerritory]:
        """Routes whose id is in ``assigned_route_ids``; no read for an empty set."""
        if not assigned_route_ids:
            return []
        wanted = set(assigned_route_ids)
        return [route for route in self.get_all() if route.id in wanted]


class PersistenceGateway:
    """All entity collections of one business."""

    def __init__(self, business_id: str, store: DocumentStore):
        if not business_id:
            raise ConfigurationError("A business id is required to access data")
        self.business_id = business_id
        self.store = store
        self.products: EntityCollection[Product] = EntityCollection(store, business_id, PRODUCTS, Product)
        self.employees = EmployeeCollection(store, business_id, EMPLOYEES, Employee)
        self.trucks: EntityCollection[Truck] = EntityCollection(store, business_id, TRUCKS, Truck)
        self.routes = RouteCollection(store, business_id, ROUTES, RouteTerritory)
        self.sale_alerts: EntityCollection[SaleAlert] = EntityCollection(store, business_id, SALE_ALERTS, SaleAlert)

    def get_routes_for_member(self, assigned_route_ids: List[str]) -> List[RouteTerritory]:
        return self.routes.get_for_member(assigned_route_ids)
