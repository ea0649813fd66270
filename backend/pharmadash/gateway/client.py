"""
Data Gateway: client handle for the hosted relational data API.

================================================================================
WIRE FORMAT (PostgREST / Supabase REST)
================================================================================

    GET  {endpoint}/rest/v1/{table}?select=*&order=col.asc&limit=1&col=lt.25
    POST {endpoint}/rest/v1/{table}   body: [row]   Prefer: return=representation

Both carry `apikey: <key>` and `Authorization: Bearer <key>`.
Errors come back as JSON: {"code": "42P01", "message": "...", ...}

HANDLE LIFECYCLE:
- One handle per validated credential pair, numbered by `version`
- The connection manager owns the handle and closes it on disconnect/reconnect
- A closed handle raises StaleGatewayError instead of querying

No timeout is passed to requests: the transport default applies.
================================================================================
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

# Postgres "relation does not exist" and PostgREST "table not in schema cache".
# Both mean the credentials worked but the tables are not provisioned yet.
SCHEMA_MISSING_CODES = frozenset({"42P01", "PGRST205"})

TRANSPORT_ERROR = "transport_error"
STALE_HANDLE = "stale_handle"

# (column, operator, value), e.g. ("current_quantity", "lt", 25)
Filter = Tuple[str, str, Any]


class GatewayError(Exception):
    """Error reported by the data API or the transport beneath it."""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    @property
    def is_schema_missing(self) -> bool:
        return self.code in SCHEMA_MISSING_CODES

    def __repr__(self):
        return f"GatewayError(code={self.code!r}, message={self.message!r})"


class StaleGatewayError(GatewayError):
    """Raised when a retired handle is used after a credential change."""

    def __init__(self, version: int):
        super().__init__(
            STALE_HANDLE,
            f"Gateway handle v{version} was retired; re-acquire the current connection",
        )


class DataGateway:
    """
    Minimal wrapper over the hosted data API.

    Only two operations exist on the remote side (select, insert); `count`
    is a select that asks for the exact total in the Content-Range header.
    """

    REST_PREFIX = "/rest/v1"

    def __init__(self, endpoint_url: str, access_key: str, version: int = 1,
                 session: Optional[requests.Session] = None):
        self.endpoint_url = endpoint_url.rstrip("/")
        self.version = version
        self._closed = False
        self._session = session or requests.Session()
        self._session.headers.update({
            "apikey": access_key,
            "Authorization": f"Bearer {access_key}",
            "Accept": "application/json",
        })

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._session.close()
            logger.info(f"Retired gateway handle v{self.version}")

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Iterable[Filter] = (),
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = self._query_params(columns, filters, order, limit)
        response = self._request("GET", table, params=params)
        return self._json(response) or []

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored (ids and defaults filled in)."""
        response = self._request(
            "POST", table,
            json=[row],
            headers={"Prefer": "return=representation", "Content-Type": "application/json"},
        )
        rows = self._json(response) or []
        if not rows:
            raise GatewayError("empty_response", f"Insert into {table} returned no row")
        return rows[0]

    def count(self, table: str, filters: Iterable[Filter] = ()) -> int:
        params = self._query_params("*", filters, None, 1)
        response = self._request("GET", table, params=params, headers={"Prefer": "count=exact"})
        total = parse_content_range_total(response.headers.get("Content-Range"))
        if total is None:
            # No exact count available; fall back to what came back
            total = len(self._json(response) or [])
        return total

    def _query_params(
        self,
        columns: str,
        filters: Iterable[Filter],
        order: Optional[str],
        limit: Optional[int],
    ) -> List[Tuple[str, str]]:
        params: List[Tuple[str, str]] = [("select", columns)]
        for column, operator, value in filters:
            params.append((column, f"{operator}.{value}"))
        if order:
            params.append(("order", order if "." in order else f"{order}.asc"))
        if limit is not None:
            params.append(("limit", str(limit)))
        return params

    def _request(self, method: str, table: str, **kwargs) -> requests.Response:
        if self._closed:
            raise StaleGatewayError(self.version)

        url = f"{self.endpoint_url}{self.REST_PREFIX}/{table}"
        try:
            response = self._session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"Transport error on {method} {table}: {e}")
            raise GatewayError(TRANSPORT_ERROR, str(e)) from e

        if not response.ok:
            raise self._error_from_response(response)
        return response

    @staticmethod
    def _error_from_response(response: requests.Response) -> GatewayError:
        code = str(response.status_code)
        message = response.reason or f"HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            code = str(body.get("code") or code)
            message = body.get("message") or body.get("msg") or body.get("error") or message
        elif response.text:
            message = response.text.strip()

        logger.debug(f"Gateway returned {response.status_code} ({code})")
        return GatewayError(code, message, status_code=response.status_code)

    @staticmethod
    def _json(response: requests.Response):
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError("invalid_response", f"Data API returned non-JSON body: {e}") from e


def parse_content_range_total(header: Optional[str]) -> Optional[int]:
    """`0-24/42` -> 42, `*/0` -> 0, `0-24/*` or missing -> None."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1].strip()
    if not total.isdigit():
        return None
    return int(total)
