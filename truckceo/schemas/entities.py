"""Domain entities stored under each business.

Every model reads and writes the camelCase field names used in stored
documents (``currentInventory``) while exposing snake_case attributes.
"""
import enum
import random
import string
import time
from functools import lru_cache
from typing import Annotated, Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel


class ProductCategory(str, enum.Enum):
    buns = "buns"
    bread = "bread"
    snacks = "snacks"

class EmployeeRole(str, enum.Enum):
    executive = "executive"
    driver = "driver"

class EmployeeStatus(str, enum.Enum):
    active = "active"
    on_break = "break"
    off = "off"

class AttendanceType(str, enum.Enum):
    work = "work"
    vacation = "vacation"
    sick = "sick"

class HealthStatus(str, enum.Enum):
    good = "good"
    warning = "warning"
    critical = "critical"


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored document shape (no ``id``)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})


class Entity(DocumentModel):
    id: Optional[str] = None


class Product(Entity):
    name: str = Field(..., min_length=1)
    category: ProductCategory
    current_inventory: int = Field(0, ge=0)
    last_order_quantity: int = Field(0, ge=0)


class SalesHistory(DocumentModel):
    month: str
    amount: float

class AttendanceRecord(DocumentModel):
    date: str
    late_start: bool = False
    late_finish: bool = False
    type: AttendanceType = AttendanceType.work


class Employee(Entity):
    name: str = Field(..., min_length=1)
    role: EmployeeRole
    hours_this_week: float = Field(0, ge=0)
    engagement_score: int = Field(0, ge=0, le=100)
    status: EmployeeStatus = EmployeeStatus.active
    sales_history: List[SalesHistory] = Field(default_factory=list)
    attendance: List[AttendanceRecord] = Field(default_factory=list)
    vacation_days_used: int = Field(0, ge=0)
    sick_days_used: int = Field(0, ge=0)
    # Set once a login account is linked to this employee
    user_id: Optional[str] = None
    email: Optional[str] = None
    assigned_routes: List[str] = Field(default_factory=list)


class MaintenanceRecord(DocumentModel):
    date: str
    service: str
    cost: float = Field(0, ge=0)
    provider: str = ""

class Dimensions(DocumentModel):
    height: float = Field(..., gt=0)  # feet
    length: float = Field(..., gt=0)  # feet
    weight: float = Field(..., gt=0)  # lbs

class Upkeep(DocumentModel):
    tires: int = Field(100, ge=0, le=100)
    oil: int = Field(100, ge=0, le=100)
    brakes: int = Field(100, ge=0, le=100)


class Truck(Entity):
    plate: str = Field(..., min_length=1)
    type: str
    mileage: int = Field(0, ge=0)
    last_service: str = ""
    health_status: HealthStatus = HealthStatus.good
    issues: List[str] = Field(default_factory=list)
    maintenance_history: List[MaintenanceRecord] = Field(default_factory=list)
    registration_expiry: str = ""
    insurance_expiry: str = ""
    dimensions: Dimensions
    upkeep: Upkeep = Field(default_factory=Upkeep)


class Store(DocumentModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    address: str = ""


_BASE36 = string.digits + string.ascii_lowercase


def new_store_id() -> str:
    """``store-{timestampMs}-{9 random base36 chars}``; unique within a batch."""
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"store-{int(time.time() * 1000)}-{suffix}"


def check_unique_store_ids(stores: List[Store]) -> List[Store]:
    seen = set()
    for store in stores:
        if store.id in seen:
            raise ValueError(f"duplicate store id {store.id!r}")
        seen.add(store.id)
    return stores


class RouteTerritory(Entity):
    name: str = Field(..., min_length=1)
    stores: List[Store] = Field(default_factory=list)

    @field_validator("stores")
    @classmethod
    def _unique_store_ids(cls, stores: List[Store]) -> List[Store]:
        return check_unique_store_ids(stores)


class SaleAlert(Entity):
    store_name: str = Field(..., min_length=1)
    promo_type: str
    date: str
    contact_name: str = ""


class Role(str, enum.Enum):
    """Session role; OWNER sees the whole business, MEMBER only its routes."""
    OWNER = "business_owner"
    MEMBER = "team_member"


class UserProfile(DocumentModel):
    """``users/{uid}``: links an identity to a business."""
    email: Optional[str] = None
    display_name: str = ""
    role: Role
    business_id: str = Field(..., min_length=1)
    employee_id: Optional[str] = None


class Business(DocumentModel):
    """``businesses/{businessId}`` metadata."""
    name: str
    owner_id: str
    created_at: str
    subscription: str = "free"


def _resolve_field(model_cls: Type[BaseModel], key: str) -> Optional[str]:
    if key in model_cls.model_fields:
        return key
    for name, info in model_cls.model_fields.items():
        if info.alias == key:
            return name
    return None


@lru_cache(maxsize=None)
def _field_adapter(model_cls: Type[BaseModel], name: str) -> TypeAdapter:
    info = model_cls.model_fields[name]
    annotation = info.annotation
    if info.metadata:
        annotation = Annotated[(annotation, *info.metadata)]
    return TypeAdapter(annotation)


def to_document_fields(model_cls: Type[Entity], fields: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a partial update and return it keyed by stored field names.

    Accepts either attribute or stored names. ``id`` is never written.

    Raises:
        pydantic.ValidationError: unknown field or invalid value.
    """
    out: Dict[str, Any] = {}
    errors = []
    for key, value in fields.items():
        name = _resolve_field(model_cls, key)
        if name == "id":
            continue
        if name is None:
            errors.append({"type": "extra_forbidden", "loc": (key,), "input": value})
            continue
        adapter = _field_adapter(model_cls, name)
        try:
            validated = adapter.validate_python(value)
        except ValidationError as e:
            for err in e.errors():
                errors.append({
                    "type": err["type"],
                    "loc": (key,) + tuple(err["loc"]),
                    "input": err.get("input", value),
                    "ctx": err.get("ctx", {}),
                })
            continue
        if name == "stores":
            # Field validators don't run through the bare type adapter
            try:
                check_unique_store_ids(validated)
            except ValueError as e:
                errors.append({"type": "value_error", "loc": (key,), "input": value,
                               "ctx": {"error": e}})
                continue
        out[model_cls.model_fields[name].alias or name] = adapter.dump_python(
            validated, mode="json", by_alias=True
        )
    if errors:
        for err in errors:
            if not err.get("ctx"):
                err.pop("ctx", None)
        raise ValidationError.from_exception_data(model_cls.__name__, errors)
    return out
