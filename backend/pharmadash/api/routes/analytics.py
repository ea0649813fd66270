"""
Analytics API: summary tiles for the dashboard header.

Provides:
- Total drugs
- Low stock items (quantity below threshold)
- Total employees
- Restocking items

Counts are recomputed on every call; nothing is cached.
"""
from fastapi import APIRouter, Depends

from pharmadash.api.deps import get_dashboard
from pharmadash.core.exceptions import BusinessError, NotConnectedError
from pharmadash.schemas.dashboard import DashboardStats
from pharmadash.services.dashboard import Dashboard

router = APIRouter()


@router.get("/summary", response_model=DashboardStats)
def get_analytics_summary(dashboard: Dashboard = Depends(get_dashboard)):
    """A failed tile is reported under `errors` while the other tiles still update."""
    if dashboard.connection.gateway is None:
        raise BusinessError.service_unavailable(str(NotConnectedError()))
    return dashboard.stats.refresh()
