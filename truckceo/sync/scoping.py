"""
Role-based data scoping.

This is the only place that branches on ``Role``. It decides which
collections a session loads and which records of them it keeps. The filter
minimizes what a client holds; it is not an access-control boundary, which
must be enforced by the store's own rules.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..data.gateway import PersistenceGateway
from ..schemas.entities import Employee, Product, Role, RouteTerritory, SaleAlert, Truck, UserProfile
from ..utils.logger import get_logger

logger = get_logger()


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of every collection visible to a session."""
    products: Tuple[Product, ...] = ()
    employees: Tuple[Employee, ...] = ()
    trucks: Tuple[Truck, ...] = ()
    sale_alerts: Tuple[SaleAlert, ...] = ()
    routes: Tuple[RouteTerritory, ...] = ()

    def counts(self) -> dict:
        return {
            "products": len(self.products),
            "employees": len(self.employees),
            "trucks": len(self.trucks),
            "sale_alerts": len(self.sale_alerts),
            "routes": len(self.routes),
        }


EMPTY_SNAPSHOT = Snapshot()


@dataclass(frozen=True)
class AccessScope:
    role: Role
    employee_id: Optional[str] = None
    assigned_routes: Tuple[str, ...] = field(default_factory=tuple)


def load_snapshot(gateway: PersistenceGateway, profile: UserProfile) -> Snapshot:
    """Fetch the data ``profile`` may see.

    Owners get all five collections. Members get every product, their own
    employee record, and the routes listed in its ``assignedRoutes``; trucks
    and sale alerts stay empty. A member whose employee record cannot be
    resolved gets an empty snapshot.
    """
    role = Role(profile.role)
    if role is Role.OWNER:
        logger.info(f"Fetching all data for business owner ({gateway.business_id})")
        snapshot = Snapshot(
            products=tuple(gateway.products.get_all()),
            employees=tuple(gateway.employees.get_all()),
            trucks=tuple(gateway.trucks.get_all()),
            sale_alerts=tuple(gateway.sale_alerts.get_all()),
            routes=tuple(gateway.routes.get_all()),
        )
    elif role is Role.MEMBER:
        snapshot = _load_member_snapshot(gateway, profile)
    else:
        raise ValueError(f"Unhandled role: {role!r}")
    logger.info(f"Loaded: {snapshot.counts()}")
    return snapshot


def _load_member_snapshot(gateway: PersistenceGateway, profile: UserProfile) -> Snapshot:
    logger.info("Fetching data for team member")
    if not profile.employee_id:
        logger.warning("Team member profile has no employee record; nothing to load")
        return EMPTY_SNAPSHOT
    employee = gateway.employees.get_one(profile.employee_id)
    if employee is None:
        logger.warning(f"Employee {profile.employee_id} not found; nothing to load")
        return EMPTY_SNAPSHOT

    scope = AccessScope(
        role=Role.MEMBER,
        employee_id=employee.id,
        assigned_routes=tuple(employee.assigned_routes),
    )
    logger.debug(f"Team member assigned routes: {list(scope.assigned_routes)}")
    return Snapshot(
        products=tuple(gateway.products.get_all()),
        employees=(employee,),
        routes=tuple(gateway.get_routes_for_member(list(scope.assigned_routes))),
    )
