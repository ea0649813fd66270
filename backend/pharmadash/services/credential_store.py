"""Client-local storage of the data API credential pair.

The pair is all-or-nothing: if either key is missing or blank, `load()`
reports no credentials at all.

SECURITY: the access key is stored as-is in local storage. It is never logged
and never returned by the HTTP API.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.orm import Session

from pharmadash.db.session import SessionLocal
from pharmadash.models.client_storage import ClientStorageEntry

logger = logging.getLogger(__name__)

ENDPOINT_URL_KEY = "endpointUrl"
ACCESS_KEY_KEY = "accessKey"


@dataclass(frozen=True)
class GatewayCredentials:
    endpoint_url: str
    access_key: str

    @property
    def is_complete(self) -> bool:
        return bool(self.endpoint_url and self.endpoint_url.strip()) and bool(
            self.access_key and self.access_key.strip()
        )

    def __repr__(self):
        return f"GatewayCredentials(endpoint_url={self.endpoint_url!r}, access_key='***')"


class CredentialStore:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    def load(self) -> Optional[GatewayCredentials]:
        db = self._session_factory()
        try:
            entries = {
                e.key: e.value
                for e in db.query(ClientStorageEntry).filter(
                    ClientStorageEntry.key.in_([ENDPOINT_URL_KEY, ACCESS_KEY_KEY])
                )
            }
        finally:
            db.close()

        credentials = GatewayCredentials(
            endpoint_url=entries.get(ENDPOINT_URL_KEY, ""),
            access_key=entries.get(ACCESS_KEY_KEY, ""),
        )
        if not credentials.is_complete:
            if entries:
                logger.warning("Ignoring partially stored credentials")
            return None
        return credentials

    def save(self, credentials: GatewayCredentials) -> None:
        db = self._session_factory()
        try:
            for key, value in (
                (ENDPOINT_URL_KEY, credentials.endpoint_url),
                (ACCESS_KEY_KEY, credentials.access_key),
            ):
                entry = db.get(ClientStorageEntry, key)
                if entry:
                    entry.value = value
                else:
                    db.add(ClientStorageEntry(key=key, value=value))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
        logger.info(f"Stored credentials for {credentials.endpoint_url}")

    def clear(self) -> None:
        db = self._session_factory()
        try:
            db.query(ClientStorageEntry).filter(
                ClientStorageEntry.key.in_([ENDPOINT_URL_KEY, ACCESS_KEY_KEY])
            ).delete(synchronize_session=False)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
        logger.info("Cleared stored credentials")
