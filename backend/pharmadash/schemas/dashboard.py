from pydantic import BaseModel
from typing import Dict, List, Optional


class DashboardStats(BaseModel):
    total_drugs: Optional[int] = None
    low_stock_items: Optional[int] = None
    total_employees: Optional[int] = None
    restocking_items: Optional[int] = None
    low_stock_threshold: int = 25
    errors: Dict[str, str] = {}


class TabSelect(BaseModel):
    tab: str


class DashboardState(BaseModel):
    tabs: List[str]
    active_tab: str
    connection_state: str
