"""
Connection lifecycle: credential entry, probe validation, persistence, teardown.

STATES:
    unconfigured -> validating -> connected
    unconfigured -> validating -> failed   (new pair NOT persisted, stored pair cleared)
    any state    -> disconnect -> unconfigured

HANDLE OWNERSHIP:
- This manager is the only owner of the DataGateway handle
- Dependents never import a module-level client; they receive the handle
  through a ConnectionEvent and must drop it when the next event arrives
- Every new handle gets a higher version; retired handles are closed and
  raise StaleGatewayError if still used

A probe that fails with a schema-missing code still counts as success: the
credentials were accepted, the tables just are not provisioned yet.
"""
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from pharmadash.core.config import settings
from pharmadash.core.exceptions import CredentialError
from pharmadash.gateway.client import DataGateway, GatewayError
from pharmadash.schemas.connection import ConnectionStatus
from pharmadash.services.credential_store import CredentialStore, GatewayCredentials

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    UNCONFIGURED = "unconfigured"
    VALIDATING = "validating"
    CONNECTED = "connected"
    FAILED = "failed"


@dataclass(frozen=True)
class ConnectionEvent:
    state: ConnectionState
    gateway: Optional[DataGateway]
    version: int


GatewayFactory = Callable[..., DataGateway]
ConnectionListener = Callable[[ConnectionEvent], None]


class ConnectionManager:
    def __init__(
        self,
        store: CredentialStore,
        gateway_factory: GatewayFactory = DataGateway,
        probe_table: str = None,
    ):
        self.store = store
        self.gateway_factory = gateway_factory
        self.probe_table = probe_table or settings.PROBE_TABLE
        self.state = ConnectionState.UNCONFIGURED
        self.last_error: Optional[str] = None
        self.endpoint_url: Optional[str] = None
        self._gateway: Optional[DataGateway] = None
        self._version = 0
        self._listeners: List[ConnectionListener] = []
        self._lock = threading.RLock()

    @property
    def gateway(self) -> Optional[DataGateway]:
        """The active handle, or None unless connected."""
        if self.state != ConnectionState.CONNECTED:
            return None
        return self._gateway

    @property
    def version(self) -> int:
        return self._version

    def add_listener(self, listener: ConnectionListener) -> None:
        self._listeners.append(listener)

    def status(self) -> ConnectionStatus:
        return ConnectionStatus(
            state=self.state.value,
            endpoint_url=self.endpoint_url,
            version=self._version if self._gateway else 0,
            error=self.last_error,
        )

    def connect(self, endpoint_url: str, access_key: str) -> ConnectionState:
        """
        Validate a credential pair with a probe query and persist it on success.

        Raises:
            CredentialError: either field is empty (no query, nothing stored)

        Returns:
            CONNECTED or FAILED; on FAILED `last_error` holds the gateway message
            and any previously stored pair is cleared
        """
        credentials = GatewayCredentials(
            endpoint_url=(endpoint_url or "").strip(),
            access_key=(access_key or "").strip(),
        )
        if not credentials.endpoint_url:
            raise CredentialError("Endpoint URL is required")
        if not credentials.access_key:
            raise CredentialError("Access key is required")

        return self._establish(credentials, persist=True)

    def restore(self) -> ConnectionState:
        """
        Reconnect silently at start-up from stored credentials.

        Falls back to credentials provided through the environment, which are
        never copied into local storage. Stored credentials are left in place
        if validation fails.
        """
        credentials = self.store.load()
        source = "local storage"
        if credentials is None:
            env_credentials = GatewayCredentials(settings.GATEWAY_URL, settings.GATEWAY_KEY)
            if env_credentials.is_complete:
                credentials = env_credentials
                source = "environment"

        if credentials is None:
            logger.info("No stored credentials; waiting for connection setup")
            return self.state

        logger.info(f"Restoring connection to {credentials.endpoint_url} from {source}")
        return self._establish(credentials, persist=False)

    def disconnect(self) -> None:
        with self._lock:
            self.store.clear()
            self._retire_gateway()
            self.state = ConnectionState.UNCONFIGURED
            self.last_error = None
            self.endpoint_url = None
            logger.info("Disconnected from data API")
        self._notify()

    def close(self) -> None:
        """Shutdown hook: drop the handle without touching stored credentials."""
        with self._lock:
            self._retire_gateway()

    def _establish(self, credentials: GatewayCredentials, persist: bool) -> ConnectionState:
        with self._lock:
            had_gateway = self._gateway is not None
            self._retire_gateway()
            self.state = ConnectionState.VALIDATING
            self.last_error = None
            self.endpoint_url = credentials.endpoint_url
        if had_gateway:
            # Dependents must stop using the old handle before validation starts
            self._notify()

        with self._lock:
            self._version += 1
            gateway = self.gateway_factory(
                credentials.endpoint_url, credentials.access_key, version=self._version
            )
            try:
                gateway.select(self.probe_table, columns="*", limit=1)
            except GatewayError as e:
                if not e.is_schema_missing:
                    gateway.close()
                    self.state = ConnectionState.FAILED
                    self.last_error = e.message
                    logger.warning(
                        f"Connection to {credentials.endpoint_url} failed ({e.code}): {e.message}"
                    )
                    if persist:
                        # Stored pair belonged to the connection this attempt replaced
                        self.store.clear()
                    return self.state
                logger.warning(
                    f"Connected to {credentials.endpoint_url} but table "
                    f"'{self.probe_table}' is missing ({e.code}); schema not provisioned yet"
                )

            if persist:
                try:
                    self.store.save(credentials)
                except Exception:
                    gateway.close()
                    self.state = ConnectionState.FAILED
                    self.last_error = "Could not store credentials locally"
                    raise
            self._gateway = gateway
            self.state = ConnectionState.CONNECTED
            logger.info(f"Connected to {credentials.endpoint_url} (handle v{gateway.version})")

        self._notify()
        return self.state

    def _retire_gateway(self) -> None:
        if self._gateway is not None:
            self._gateway.close()
            self._gateway = None

    def _notify(self) -> None:
        event = ConnectionEvent(state=self.state, gateway=self.gateway, version=self._version)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Connection listener failed: {e}", exc_info=True)
