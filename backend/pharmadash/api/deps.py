"""FastAPI dependencies: the connection manager and dashboard owned by the app."""
from fastapi import Request

from pharmadash.services.connection_manager import ConnectionManager
from pharmadash.services.dashboard import Dashboard


def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.connection_manager


def get_dashboard(request: Request) -> Dashboard:
    return request.app.state.dashboard
