"""Tests for the hosted data API client"""

import json

import pytest
import requests
from unittest.mock import MagicMock

from pharmadash.gateway.client import (
    TRANSPORT_ERROR,
    DataGateway,
    GatewayError,
    StaleGatewayError,
    parse_content_range_total,
)


def make_response(status_code=200, body=None, headers=None, reason="OK"):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.encoding = "utf-8"
    if body is None:
        response._content = b""
    elif isinstance(body, (bytes, str)):
        response._content = body.encode() if isinstance(body, str) else body
    else:
        response._content = json.dumps(body).encode()
    response.headers.update(headers or {})
    return response


@pytest.fixture
def session():
    session = requests.Session()
    session.request = MagicMock(return_value=make_response(body=[]))
    return session


@pytest.fixture
def gateway(session):
    return DataGateway("https://abc.supabase.co/", "anon-key", version=3, session=session)


class TestDataGateway:
    """Requests built for the PostgREST wire format"""

    def test_auth_headers_on_session(self, gateway, session):
        assert session.headers["apikey"] == "anon-key"
        assert session.headers["Authorization"] == "Bearer anon-key"
        assert gateway.endpoint_url == "https://abc.supabase.co"

    def test_select_builds_url_and_params(self, gateway, session):
        session.request.return_value = make_response(body=[{"drug_id": 1, "drug_name": "Ibuprofen"}])

        rows = gateway.select(
            "inventory",
            filters=[("current_quantity", "lt", 25)],
            order="current_quantity",
            limit=1,
        )

        assert rows == [{"drug_id": 1, "drug_name": "Ibuprofen"}]
        method, url = session.request.call_args.args
        assert method == "GET"
        assert url == "https://abc.supabase.co/rest/v1/inventory"
        assert session.request.call_args.kwargs["params"] == [
            ("select", "*"),
            ("current_quantity", "lt.25"),
            ("order", "current_quantity.asc"),
            ("limit", "1"),
        ]

    def test_explicit_order_direction_is_kept(self, gateway, session):
        gateway.select("employees", order="name.desc")

        assert ("order", "name.desc") in session.request.call_args.kwargs["params"]

    def test_insert_asks_for_representation(self, gateway, session):
        session.request.return_value = make_response(201, body=[{"employee_id": 7, "name": "Emily Brown"}])

        row = gateway.insert("employees", {"name": "Emily Brown", "shift": "Morning"})

        assert row == {"employee_id": 7, "name": "Emily Brown"}
        kwargs = session.request.call_args.kwargs
        assert session.request.call_args.args[0] == "POST"
        assert kwargs["json"] == [{"name": "Emily Brown", "shift": "Morning"}]
        assert kwargs["headers"]["Prefer"] == "return=representation"

    def test_insert_with_empty_representation_is_an_error(self, gateway, session):
        session.request.return_value = make_response(201, body=[])

        with pytest.raises(GatewayError) as exc_info:
            gateway.insert("employees", {"name": "Emily Brown"})
        assert exc_info.value.code == "empty_response"

    def test_count_reads_content_range(self, gateway, session):
        session.request.return_value = make_response(
            206, body=[{"drug_id": 1}], headers={"Content-Range": "0-0/42"}
        )

        assert gateway.count("inventory", filters=[("current_quantity", "lt", 25)]) == 42
        assert session.request.call_args.kwargs["headers"] == {"Prefer": "count=exact"}

    def test_count_of_empty_table(self, gateway, session):
        session.request.return_value = make_response(200, body=[], headers={"Content-Range": "*/0"})

        assert gateway.count("restocking") == 0

    def test_error_body_code_and_message(self, gateway, session):
        session.request.return_value = make_response(
            404,
            body={"code": "42P01", "message": 'relation "public.inventory" does not exist'},
            reason="Not Found",
        )

        with pytest.raises(GatewayError) as exc_info:
            gateway.select("inventory", limit=1)

        error = exc_info.value
        assert error.code == "42P01"
        assert error.is_schema_missing
        assert error.status_code == 404
        assert "does not exist" in error.message

    def test_auth_error_without_postgrest_code(self, gateway, session):
        session.request.return_value = make_response(
            401, body={"message": "Invalid API key"}, reason="Unauthorized"
        )

        with pytest.raises(GatewayError) as exc_info:
            gateway.select("inventory")

        assert exc_info.value.code == "401"
        assert exc_info.value.message == "Invalid API key"
        assert not exc_info.value.is_schema_missing

    def test_plain_text_error_body(self, gateway, session):
        session.request.return_value = make_response(502, body="Bad gateway upstream", reason="Bad Gateway")

        with pytest.raises(GatewayError) as exc_info:
            gateway.select("inventory")

        assert exc_info.value.message == "Bad gateway upstream"

    def test_transport_failure_becomes_gateway_error(self, gateway, session):
        session.request.side_effect = requests.ConnectionError("Name or service not known")

        with pytest.raises(GatewayError) as exc_info:
            gateway.select("inventory")

        assert exc_info.value.code == TRANSPORT_ERROR
        assert "Name or service not known" in exc_info.value.message

    def test_non_json_success_body(self, gateway, session):
        session.request.return_value = make_response(200, body="<html>login</html>")

        with pytest.raises(GatewayError) as exc_info:
            gateway.select("inventory")
        assert exc_info.value.code == "invalid_response"

    def test_closed_handle_never_queries(self, gateway, session):
        gateway.close()

        with pytest.raises(StaleGatewayError) as exc_info:
            gateway.select("inventory")

        assert "v3" in exc_info.value.message
        session.request.assert_not_called()
        assert gateway.closed


@pytest.mark.parametrize("header, expected", [
    ("0-24/42", 42),
    ("*/0", 0),
    ("0-24/*", None),
    (None, None),
    ("", None),
    ("garbage", None),
])
def test_parse_content_range_total(header, expected):
    assert parse_content_range_total(header) == expected
