"""
tests/test_connection.py — AdminService client against httpx.MockTransport.
"""
import itertools

import httpx
import pytest

from cm_health.config import Settings
from cm_health.connection import AdminServiceConnection, connect, require_rows
from cm_health.errors import NoDataError, QueryError, SiteConnectionError

SETTINGS = Settings(provider="cm01.corp.local", site_code="PS1", timeout_s=5)


def _transport(handler):
    return httpx.MockTransport(handler)


def _json(rows, status=200):
    return lambda request: httpx.Response(status, json={"value": rows})


class TestQuery:
    def test_builds_odata_request(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"value": [{"Name": "CPU0", "LoadPercentage": 12}]})

        conn = AdminServiceConnection(SETTINGS, transport=_transport(handler))
        rows = conn.query("Win32_Processor", select=["Name", "LoadPercentage"], where="Name eq 'CPU0'")
        assert rows == [{"Name": "CPU0", "LoadPercentage": 12}]
        assert seen["path"] == "/AdminService/wmi/Win32_Processor"
        assert seen["params"] == {"$select": "Name,LoadPercentage", "$filter": "Name eq 'CPU0'"}

    def test_http_error_status(self):
        conn = AdminServiceConnection(SETTINGS, transport=_transport(_json([], status=500)))
        with pytest.raises(QueryError, match="unexpected HTTP status 500") as exc:
            conn.query("SMS_Site")
        assert exc.value.source == "SMS_Site"

    def test_not_json(self):
        conn = AdminServiceConnection(SETTINGS, transport=_transport(lambda r: httpx.Response(200, text="<html>")))
        with pytest.raises(QueryError, match="not JSON"):
            conn.query("SMS_Site")

    def test_missing_value_array(self):
        conn = AdminServiceConnection(SETTINGS, transport=_transport(lambda r: httpx.Response(200, json={"rows": []})))
        with pytest.raises(QueryError, match="OData 'value'"):
            conn.query("SMS_Site")

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        conn = AdminServiceConnection(SETTINGS, transport=_transport(handler))
        with pytest.raises(QueryError, match="timed out after 5s"):
            conn.query("SMS_Site")

    def test_slow_body_hits_total_deadline(self):
        class Trickle(httpx.SyncByteStream):
            def __iter__(self):
                yield b'{"value": '
                yield b'[]}'

        clock = itertools.chain([0.0, 1.0], itertools.repeat(100.0))
        conn = AdminServiceConnection(
            SETTINGS,
            transport=_transport(lambda r: httpx.Response(200, stream=Trickle())),
            clock=lambda: next(clock),
        )
        with pytest.raises(QueryError, match="timed out after 5s"):
            conn.query("SMS_Site")

    def test_body_within_deadline(self):
        clock = itertools.repeat(0.0)
        conn = AdminServiceConnection(SETTINGS, transport=_transport(_json([{"SiteCode": "PS1"}])), clock=lambda: next(clock))
        assert conn.query("SMS_Site") == [{"SiteCode": "PS1"}]

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        conn = AdminServiceConnection(SETTINGS, transport=_transport(handler))
        with pytest.raises(QueryError, match="transport error"):
            conn.query("SMS_Site")

    def test_require_rows(self):
        with pytest.raises(NoDataError):
            require_rows([], "SMS_Site")
        assert require_rows([{"a": 1}], "SMS_Site") == [{"a": 1}]


class TestConnect:
    def test_site_found(self):
        conn = connect(SETTINGS, transport=_transport(_json([{"SiteCode": "PS1", "SiteName": "Primary"}])))
        try:
            assert isinstance(conn, AdminServiceConnection)
        finally:
            conn.close()

    def test_site_missing(self):
        with pytest.raises(SiteConnectionError, match="site PS1 not found"):
            connect(SETTINGS, transport=_transport(_json([])))

    def test_access_denied(self):
        with pytest.raises(SiteConnectionError, match="not usable"):
            connect(SETTINGS, transport=_transport(_json([], status=401)))
