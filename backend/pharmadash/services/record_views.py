"""
Record views: one table each, fetched whole, searched locally, appended to on insert.

CONTRACT (same for every view):
- fetch(): select all columns ordered by the view's display key. On error the
  previous rows stay visible and `last_error` is set.
- search(term): case-insensitive substring match on the view's search fields,
  over the rows already fetched. Never queries. Only an empty term matches
  everything; whitespace is matched literally.
- insert(record): required fields must be non-empty before any query; the
  row returned by the data API is appended once, no refetch. Insert errors
  are raised to the caller and never stored in `last_error`.

The server's ordering is kept as-is; rows are never re-sorted here.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from pharmadash.core.config import settings
from pharmadash.core.exceptions import NotConnectedError, ReadOnlyViewError, RecordValidationError
from pharmadash.gateway.client import DataGateway, Filter, GatewayError
from pharmadash.schemas.records import (
    Drug,
    DrugCreate,
    Employee,
    EmployeeCreate,
    RestockCreate,
    RestockRequest,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewDefinition:
    name: str
    title: str
    table: str
    order_by: str
    search_fields: Tuple[str, ...]
    row_schema: Type[BaseModel]
    create_schema: Optional[Type[BaseModel]] = None
    required_fields: Tuple[str, ...] = ()
    filters: Tuple[Filter, ...] = ()
    empty_message: str = "No records found matching your search."

    @property
    def can_insert(self) -> bool:
        return self.create_schema is not None


class RecordView:
    def __init__(self, definition: ViewDefinition, gateway: Optional[DataGateway] = None):
        self.definition = definition
        self.rows: List[BaseModel] = []
        self.loading = False
        self.loaded = False
        # Set once a fetch was issued on the current handle, whether or not it succeeded
        self.attempted = False
        self.last_error: Optional[str] = None
        self._gateway = gateway
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def gateway(self) -> Optional[DataGateway]:
        return self._gateway

    def bind(self, gateway: Optional[DataGateway]) -> None:
        """Re-acquire the handle after a connection change. Drops rows of the old connection."""
        with self._lock:
            self._gateway = gateway
            self.rows = []
            self.loaded = False
            self.attempted = False
            self.last_error = None

    def fetch(self) -> bool:
        """Reload the table. Returns False (rows untouched) on any failure."""
        gateway = self._gateway
        if gateway is None:
            self.last_error = str(NotConnectedError())
            return False

        d = self.definition
        self.attempted = True
        self.loading = True
        try:
            raw_rows = gateway.select(d.table, columns="*", filters=d.filters, order=d.order_by)
            rows = [d.row_schema.model_validate(r) for r in raw_rows]
        except GatewayError as e:
            self.last_error = f"Error fetching {d.title.lower()}: {e.message}"
            logger.warning(f"[{d.name}] fetch failed ({e.code}): {e.message}")
            return False
        except ValidationError as e:
            self.last_error = f"Error fetching {d.title.lower()}: unexpected row format"
            logger.warning(f"[{d.name}] rows did not match {d.row_schema.__name__}: {e}")
            return False
        finally:
            self.loading = False

        with self._lock:
            # A rebind while this fetch was in flight wins
            if gateway is not self._gateway:
                logger.info(f"[{d.name}] discarding rows from retired handle v{gateway.version}")
                return False
            self.rows = rows
            self.loaded = True
            self.last_error = None
        logger.info(f"[{d.name}] fetched {len(rows)} rows")
        return True

    def search(self, term: Optional[str] = "") -> List[BaseModel]:
        needle = (term or "").lower()
        rows = list(self.rows)
        if not needle:
            return rows
        return [row for row in rows if self._matches(row, needle)]

    def _matches(self, row: BaseModel, needle: str) -> bool:
        for field_name in self.definition.search_fields:
            value = getattr(row, field_name, None)
            if value is not None and needle in str(value).lower():
                return True
        return False

    def insert(self, record: Dict[str, Any]) -> BaseModel:
        """
        Insert a row through the gateway and append what comes back.

        Raises:
            ReadOnlyViewError: view has no insert form
            RecordValidationError: required field empty or wrong value type (no query issued)
            NotConnectedError: no gateway handle
            GatewayError: data API refused the insert (rows unchanged)
        """
        d = self.definition
        if not d.can_insert:
            raise ReadOnlyViewError(f"{d.title} is read-only")

        missing = [f for f in d.required_fields if not str(record.get(f) or "").strip()]
        if missing:
            raise RecordValidationError(f"Missing required fields: {', '.join(missing)}", missing)

        # Blank optional inputs mean "not given"
        cleaned = {
            k: (v.strip() if isinstance(v, str) else v)
            for k, v in record.items()
            if not (isinstance(v, str) and not v.strip())
        }
        try:
            payload = d.create_schema(**cleaned)
        except ValidationError as e:
            fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
            raise RecordValidationError(f"Invalid values for: {', '.join(fields)}", fields) from e

        gateway = self._gateway
        if gateway is None:
            raise NotConnectedError()

        try:
            inserted = gateway.insert(d.table, payload.model_dump(mode="json"))
        except GatewayError as e:
            logger.warning(f"[{d.name}] insert failed ({e.code}): {e.message}")
            raise

        try:
            row = d.row_schema.model_validate(inserted)
        except ValidationError as e:
            raise GatewayError("invalid_response", f"Inserted row has an unexpected format: {e}") from e

        with self._lock:
            if gateway is self._gateway:
                self.rows = self.rows + [row]
        logger.info(f"[{d.name}] inserted row into {d.table}")
        return row


# ==============================================================================
# VIEW DEFINITIONS
# ==============================================================================

INVENTORY = ViewDefinition(
    name="inventory",
    title="Inventory Management",
    table="inventory",
    order_by="drug_name",
    search_fields=("drug_name", "company"),
    row_schema=Drug,
    create_schema=DrugCreate,
    required_fields=("drug_name", "company"),
    empty_message="No drugs found matching your search.",
)

LOW_STOCK = ViewDefinition(
    name="low-stock",
    title=f"Low Stock Items (Below {settings.LOW_STOCK_THRESHOLD} units)",
    table="inventory",
    order_by="current_quantity",
    search_fields=("drug_name", "company"),
    row_schema=Drug,
    filters=(("current_quantity", "lt", settings.LOW_STOCK_THRESHOLD),),
    empty_message="No low stock items found matching your search.",
)

RESTOCKING = ViewDefinition(
    name="restocking",
    title="Restocking Items",
    table="restocking",
    order_by="drug_name",
    search_fields=("drug_name", "supplier"),
    row_schema=RestockRequest,
    create_schema=RestockCreate,
    required_fields=("drug_name", "supplier"),
    empty_message="No restocking items found matching your search.",
)

EMPLOYEES = ViewDefinition(
    name="employees",
    title="Employee Management",
    table="employees",
    order_by="name",
    search_fields=("name", "employee_id"),
    row_schema=Employee,
    create_schema=EmployeeCreate,
    required_fields=("name", "shift"),
    empty_message="No employees found matching your search.",
)

VIEW_DEFINITIONS = (INVENTORY, LOW_STOCK, RESTOCKING, EMPLOYEES)
