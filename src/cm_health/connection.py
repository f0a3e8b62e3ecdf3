from __future__ import annotations
import json
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

import httpx

from .config import Settings
from .errors import NoDataError, QueryError, SiteConnectionError

log = logging.getLogger(__name__)


class ManagementConnection(Protocol):
    """Narrow query capability the checks are written against."""

    def query(
        self,
        class_name: str,
        select: Optional[Iterable[str]] = None,
        where: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        ...


def _mask(secret: Optional[str]) -> str:
    if not secret:
        return "-"
    return "***"


class AdminServiceConnection:
    """Synchronous client for the site's AdminService WMI route (OData JSON).

    ``settings.timeout_s`` bounds each httpx phase (connect, read, write, pool)
    and also the whole query, including reading the response body.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._clock = clock
        auth = None
        if settings.username:
            auth = httpx.BasicAuth(settings.username, settings.password or "")
        self._client = httpx.Client(
            base_url=settings.base_url,
            timeout=settings.timeout_s,
            follow_redirects=True,
            headers={"Accept": "application/json"},
            verify=settings.verify_tls,
            auth=auth,
            transport=transport,
        )

    def query(
        self,
        class_name: str,
        select: Optional[Iterable[str]] = None,
        where: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {}
        if select:
            params["$select"] = ",".join(select)
        if where:
            params["$filter"] = where
        log.debug("GET %s params=%s", class_name, params)
        timed_out = f"timed out after {self._settings.timeout_s:g}s"
        deadline = self._clock() + self._settings.timeout_s
        body = bytearray()
        try:
            with self._client.stream("GET", f"/{class_name}", params=params) as resp:
                if resp.status_code != 200:
                    raise QueryError(class_name, f"unexpected HTTP status {resp.status_code}")
                for chunk in resp.iter_bytes():
                    if self._clock() > deadline:
                        raise QueryError(class_name, timed_out)
                    body.extend(chunk)
        except httpx.TimeoutException:
            raise QueryError(class_name, timed_out)
        except httpx.HTTPError as e:
            raise QueryError(class_name, f"transport error {e}")
        try:
            payload = json.loads(bytes(body))
        except ValueError:
            raise QueryError(class_name, "response is not JSON")
        rows = payload.get("value") if isinstance(payload, dict) else None
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise QueryError(class_name, "response has no OData 'value' array")
        return rows

    def close(self) -> None:
        self._client.close()


def require_rows(rows: List[Dict[str, Any]], source: str) -> List[Dict[str, Any]]:
    if not rows:
        raise NoDataError(source, "query returned no rows")
    return rows


def connect(settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> AdminServiceConnection:
    """Open the AdminService connection and verify the configured site exists.

    Any failure here is fatal for the run and raised as :class:`SiteConnectionError`.
    """
    log.info(
        "Connecting to %s (site %s, user %s, password %s)",
        settings.base_url,
        settings.site_code,
        settings.username or "-",
        _mask(settings.password),
    )
    try:
        conn = AdminServiceConnection(settings, transport=transport)
    except Exception as e:
        raise SiteConnectionError(f"cannot create client for {settings.provider}: {e}") from e
    try:
        sites = conn.query("SMS_Site", select=["SiteCode", "SiteName"], where=f"SiteCode eq '{settings.site_code}'")
    except QueryError as e:
        conn.close()
        raise SiteConnectionError(f"AdminService on {settings.provider} not usable: {e}") from e
    if not sites:
        conn.close()
        raise SiteConnectionError(f"site {settings.site_code} not found on {settings.provider}")
    log.info("Connected to site %s (%s)", settings.site_code, sites[0].get("SiteName") or "unnamed")
    return conn
