"""
Applies assistant function calls to the session's data.

The model names things the way people do ("Andres", "GMC-06-03"), so ids are
resolved against the current snapshot by exact id, then exact name or plate,
then fuzzy name match.
"""
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from rapidfuzz import fuzz, process, utils

from ..schemas.entities import Employee, EmployeeStatus, HealthStatus, Product, Truck
from ..schemas.io_models import FunctionCall, ToolResult
from ..sync.context import SyncContext
from ..utils.logger import get_logger

logger = get_logger()

T = TypeVar("T")

FUZZY_CUTOFF = 60


def resolve(items: Sequence[T], key: str, label: Callable[[T], str]) -> Optional[T]:
    """Find ``key`` among ``items`` by id, then label, then fuzzy label."""
    if not key:
        return None
    for item in items:
        if getattr(item, "id", None) == key:
            return item
    folded = key.strip().lower()
    for item in items:
        if label(item).lower() == folded:
            return item
    labels = [label(item) for item in items]
    match = process.extractOne(key, labels, scorer=fuzz.WRatio,
                                 processor=utils.default_process, score_cutoff=FUZZY_CUTOFF)
    if match:
        return items[match[2]]
    return None


class ToolExecutor:
    def __init__(self, context: SyncContext):
        self.context = context
        self._handlers: Dict[str, Callable[[Dict], str]] = {
            "update_order_quantity": self._update_order_quantity,
            "update_employee_status": self._update_employee_status,
            "report_truck_issue": self._report_truck_issue,
        }

    def execute(self, call: FunctionCall) -> ToolResult:
        handler = self._handlers.get(call.name)
        if handler is None:
            return ToolResult(name=call.name, ok=False, detail=f"Unknown tool: {call.name}")
        logger.info(f"Executing {call.name.replace('_', ' ')} with {call.args}")
        try:
            detail = handler(call.args)
        except LookupError as e:
            return ToolResult(name=call.name, ok=False, detail=str(e))
        except Exception as e:
            logger.error(f"Tool {call.name} failed: {e}")
            return ToolResult(name=call.name, ok=False, detail=f"Failed: {e}")
        return ToolResult(name=call.name, ok=True, detail=detail)

    def execute_all(self, calls: List[FunctionCall]) -> List[ToolResult]:
        return [self.execute(call) for call in calls]

    def _update_order_quantity(self, args: Dict) -> str:
        product: Product = resolve(self.context.products, str(args.get("productId", "")), lambda p: p.name)
        if product is None:
            raise LookupError(f"No product matching {args.get('productId')!r}")
        quantity = int(round(float(args["newQuantity"])))
        self.context.update_product(product.id, {"last_order_quantity": quantity})
        return f"{product.name} order set to {quantity}"

    def _update_employee_status(self, args: Dict) -> str:
        employee: Employee = resolve(self.context.employees, str(args.get("employeeId", "")), lambda e: e.name)
        if employee is None:
            raise LookupError(f"No employee matching {args.get('employeeId')!r}")
        status = str(args.get("status", "")).strip().lower()
        fields: Dict = {}
        if status == "vacation":
            fields = {"status": EmployeeStatus.off, "vacation_days_used": employee.vacation_days_used + 1}
        elif status == "sick":
            fields = {"status": EmployeeStatus.off, "sick_days_used": employee.sick_days_used + 1}
        else:
            fields = {"status": EmployeeStatus(status)}
        self.context.update_employee(employee.id, fields)
        note = args.get("note")
        return f"{employee.name} marked {status}" + (f" ({note})" if note else "")

    def _report_truck_issue(self, args: Dict) -> str:
        truck: Truck = resolve(self.context.trucks, str(args.get("truckId", "")), lambda t: t.plate)
        if truck is None:
            raise LookupError(f"No truck matching {args.get('truckId')!r}")
        fields: Dict = {"health_status": HealthStatus(str(args["healthStatus"]).strip().lower())}
        issue = (args.get("issue") or "").strip()
        if issue:
            fields["issues"] = truck.issues + [issue]
        self.context.update_truck(truck.id, fields)
        return f"{truck.plate} is now {fields['health_status'].value}"
