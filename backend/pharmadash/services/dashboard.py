"""Tab container plus the wiring from connection events to views and stats."""
import logging
from typing import Dict, Iterable, List

from pharmadash.core.exceptions import UnknownViewError
from pharmadash.schemas.dashboard import DashboardState
from pharmadash.services.connection_manager import ConnectionEvent, ConnectionManager
from pharmadash.services.record_views import VIEW_DEFINITIONS, RecordView, ViewDefinition
from pharmadash.services.stats import StatsAggregator

logger = logging.getLogger(__name__)


class Dashboard:
    def __init__(self, connection: ConnectionManager, definitions: Iterable[ViewDefinition] = VIEW_DEFINITIONS):
        self.connection = connection
        self.views: Dict[str, RecordView] = {d.name: RecordView(d) for d in definitions}
        self.stats = StatsAggregator()
        self.active_tab = next(iter(self.views))
        connection.add_listener(self.on_connection_change)

    @property
    def tabs(self) -> List[str]:
        return list(self.views)

    def view(self, name: str) -> RecordView:
        try:
            return self.views[name]
        except KeyError:
            raise UnknownViewError(f"Unknown view '{name}'")

    def select_tab(self, name: str) -> str:
        self.view(name)
        self.active_tab = name
        return name

    def state(self) -> DashboardState:
        return DashboardState(
            tabs=self.tabs,
            active_tab=self.active_tab,
            connection_state=self.connection.state.value,
        )

    def on_connection_change(self, event: ConnectionEvent) -> None:
        logger.info(f"Connection event: state={event.state.value}, handle v{event.version}")
        for view in self.views.values():
            view.bind(event.gateway)
        self.stats.bind(event.gateway)
        if event.gateway is not None:
            self.reload()

    def reload(self) -> None:
        """Full reload of dependents. Each fetch fails on its own."""
        self.stats.refresh()
        for view in self.views.values():
            view.fetch()
