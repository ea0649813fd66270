"""Connection setup: enter, validate, and clear the data API credentials."""
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from pharmadash.api.deps import get_connection_manager
from pharmadash.core.exceptions import BusinessError, CredentialError
from pharmadash.schemas.connection import ConnectRequest, ConnectionStatus
from pharmadash.services.connection_manager import ConnectionManager, ConnectionState

router = APIRouter()


@router.get("", response_model=ConnectionStatus)
def get_connection(manager: ConnectionManager = Depends(get_connection_manager)):
    return manager.status()


@router.post("", response_model=ConnectionStatus)
def connect(data: ConnectRequest, manager: ConnectionManager = Depends(get_connection_manager)):
    """Validate the pair with a probe query; persisted only on success."""
    try:
        state = manager.connect(data.endpoint_url, data.access_key)
    except CredentialError as e:
        raise BusinessError.bad_request(str(e))
    except SQLAlchemyError as e:
        # Local credential storage failed
        raise BusinessError.server_error(e)

    if state != ConnectionState.CONNECTED:
        raise BusinessError.bad_gateway(manager.last_error or "Connection failed")
    return manager.status()


@router.delete("", response_model=ConnectionStatus)
def disconnect(manager: ConnectionManager = Depends(get_connection_manager)):
    try:
        manager.disconnect()
    except SQLAlchemyError as e:
        raise BusinessError.server_error(e)
    return manager.status()
