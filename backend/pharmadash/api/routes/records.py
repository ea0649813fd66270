"""Records: inventory, low stock, restocking and employee tables with search and insert."""
from fastapi import APIRouter, Body, Depends, Query
from typing import Any, Dict, Optional

from pharmadash.api.deps import get_dashboard
from pharmadash.core.exceptions import (
    BusinessError,
    NotConnectedError,
    ReadOnlyViewError,
    RecordValidationError,
    UnknownViewError,
)
from pharmadash.gateway.client import GatewayError
from pharmadash.schemas.records import RecordCreated, RecordList
from pharmadash.services.dashboard import Dashboard
from pharmadash.services.record_views import RecordView

router = APIRouter()


def _get_view(dashboard: Dashboard, view_name: str) -> RecordView:
    try:
        return dashboard.view(view_name)
    except UnknownViewError as e:
        raise BusinessError.not_found("View", str(e))


def _require_connection(view: RecordView) -> None:
    if view.gateway is None:
        raise BusinessError.service_unavailable(str(NotConnectedError()))


def _record_list(view: RecordView, search: Optional[str]) -> RecordList:
    rows = view.search(search)
    d = view.definition
    return RecordList(
        view=d.name,
        title=d.title,
        search=search or "",
        rows=[row.model_dump(mode="json") for row in rows],
        total=len(view.rows),
        loading=view.loading,
        error=view.last_error,
        empty_message=d.empty_message if not rows else None,
        can_insert=d.can_insert,
    )


@router.get("/{view_name}", response_model=RecordList)
def list_records(
    view_name: str,
    search: Optional[str] = Query(None),
    dashboard: Dashboard = Depends(get_dashboard),
):
    """Rows of one view, filtered locally. The table is fetched once, not per keystroke."""
    view = _get_view(dashboard, view_name)
    _require_connection(view)
    if not view.attempted:
        # At most one automatic fetch per handle; failures wait for an explicit refresh
        view.fetch()
    return _record_list(view, search)


@router.post("/{view_name}/refresh", response_model=RecordList)
def refresh_records(view_name: str, dashboard: Dashboard = Depends(get_dashboard)):
    view = _get_view(dashboard, view_name)
    _require_connection(view)
    view.fetch()
    return _record_list(view, None)


@router.post("/{view_name}", response_model=RecordCreated)
def create_record(
    view_name: str,
    record: Dict[str, Any] = Body(...),
    dashboard: Dashboard = Depends(get_dashboard),
):
    """Insert one row; the stored row is appended to the view without a refetch."""
    view = _get_view(dashboard, view_name)
    try:
        row = view.insert(record)
    except ReadOnlyViewError as e:
        raise BusinessError.method_not_allowed(str(e))
    except RecordValidationError as e:
        raise BusinessError.bad_request({"message": str(e), "fields": e.fields})
    except NotConnectedError as e:
        raise BusinessError.service_unavailable(str(e))
    except GatewayError as e:
        raise BusinessError.bad_gateway(e.message)

    return RecordCreated(
        view=view.name,
        row=row.model_dump(mode="json"),
        message=f"Added to {view.definition.title.lower()}",
    )
