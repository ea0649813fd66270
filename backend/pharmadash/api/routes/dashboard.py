"""Tab selection. Purely presentational state."""
from fastapi import APIRouter, Depends

from pharmadash.api.deps import get_dashboard
from pharmadash.core.exceptions import BusinessError, UnknownViewError
from pharmadash.schemas.dashboard import DashboardState, TabSelect
from pharmadash.services.dashboard import Dashboard

router = APIRouter()


@router.get("", response_model=DashboardState)
def get_dashboard_state(dashboard: Dashboard = Depends(get_dashboard)):
    return dashboard.state()


@router.put("/tab", response_model=DashboardState)
def select_tab(data: TabSelect, dashboard: Dashboard = Depends(get_dashboard)):
    try:
        dashboard.select_tab(data.tab)
    except UnknownViewError as e:
        raise BusinessError.not_found("Tab", str(e))
    return dashboard.state()
