"""
Dashboard summary tiles.

Four count queries, each applied on its own: one failing tile keeps its last
value and records an error, the others still update. No tile depends on
another query's result.
"""
import logging
from typing import Callable, Dict, Optional, Tuple

from pharmadash.core.config import settings
from pharmadash.gateway.client import DataGateway, GatewayError
from pharmadash.schemas.dashboard import DashboardStats

logger = logging.getLogger(__name__)


class StatsAggregator:
    def __init__(self, gateway: Optional[DataGateway] = None, low_stock_threshold: int = None):
        self.low_stock_threshold = (
            settings.LOW_STOCK_THRESHOLD if low_stock_threshold is None else low_stock_threshold
        )
        self._gateway = gateway
        self.values: Dict[str, Optional[int]] = {name: None for name, _ in self._queries()}
        self.errors: Dict[str, str] = {}

    def bind(self, gateway: Optional[DataGateway]) -> None:
        self._gateway = gateway
        self.values = {name: None for name in self.values}
        self.errors = {}

    def _queries(self) -> Tuple[Tuple[str, Callable[[DataGateway], int]], ...]:
        return (
            ("total_drugs", lambda g: g.count("inventory")),
            ("low_stock_items", lambda g: g.count(
                "inventory", filters=[("current_quantity", "lt", self.low_stock_threshold)]
            )),
            ("total_employees", lambda g: g.count("employees")),
            ("restocking_items", lambda g: g.count("restocking")),
        )

    def refresh(self) -> DashboardStats:
        gateway = self._gateway
        if gateway is None:
            self.errors = {name: "Database connection not available" for name in self.values}
            return self.snapshot()

        errors = {}
        for name, query in self._queries():
            try:
                self.values[name] = query(gateway)
            except GatewayError as e:
                errors[name] = e.message
                logger.warning(f"Stats query '{name}' failed ({e.code}): {e.message}")
        self.errors = errors
        return self.snapshot()

    def snapshot(self) -> DashboardStats:
        return DashboardStats(
            **self.values,
            low_stock_threshold=self.low_stock_threshold,
            errors=dict(self.errors),
        )
