"""Integration tests: every failure path renders the error envelope over HTTP."""

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from gathevent_api.exceptions import ErrorCode, code_to_default_message
from gathevent_api.middleware import REQUEST_ID_HEADER
from tests.stubs import StubSession

VALID_REGISTRATION = {
    "name": "Ada Lovelace",
    "email": "ada@gathevent.io",
    "password": "analytical-engine",
}


@pytest.mark.asyncio
async def test_health_pings_database(client: AsyncClient, db: StubSession) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert len(db.statements) == 1


@pytest.mark.asyncio
async def test_health_database_down_returns_500_envelope(
    client: AsyncClient, db: StubSession
) -> None:
    db.error = OperationalError("SELECT 1", {}, Exception("connection refused"))

    resp = await client.get("/health")

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "INTERNAL_SERVER_ERROR"
    assert body["error"]["name"] == "HttpError"


@pytest.mark.asyncio
async def test_unknown_route_returns_404_envelope(client: AsyncClient) -> None:
    resp = await client.get("/no/such/route")

    assert resp.status_code == 404
    assert resp.json() == {
        "success": False,
        "error": {
            "code": "NOT_FOUND",
            "name": "HttpError",
            "message": code_to_default_message(ErrorCode.NOT_FOUND),
        },
    }


@pytest.mark.asyncio
async def test_wrong_method_returns_405_envelope(client: AsyncClient) -> None:
    resp = await client.get("/auth/register")

    assert resp.status_code == 405
    assert resp.json()["error"]["code"] == "METHOD_NOT_ALLOWED"
    assert resp.json()["error"]["name"] == "HttpError"
    assert "POST" in resp.headers["allow"]
    assert resp.json()["error"]["message"] == code_to_default_message(
        ErrorCode.METHOD_NOT_ALLOWED
    )


@pytest.mark.asyncio
async def test_register_invalid_email_returns_validation_envelope(client: AsyncClient) -> None:
    resp = await client.post("/auth/register", json={**VALID_REGISTRATION, "email": "nope"})

    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "BAD_REQUEST"
    assert error["name"] == "ValidationError"
    assert error["message"] == "The request data is invalid."
    assert [issue["path"] for issue in error["details"]["errors"]] == ["body.email"]


@pytest.mark.asyncio
async def test_register_reports_every_invalid_field(client: AsyncClient) -> None:
    resp = await client.post("/auth/register", json={"name": "", "email": "x", "password": "123"})

    assert resp.status_code == 400
    paths = [issue["path"] for issue in resp.json()["error"]["details"]["errors"]]
    assert paths == ["body.name", "body.email", "body.password"]


@pytest.mark.asyncio
async def test_register_malformed_json_returns_validation_envelope(client: AsyncClient) -> None:
    resp = await client.post(
        "/auth/register",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["name"] == "ValidationError"


@pytest.mark.asyncio
async def test_register_stub_returns_500_envelope(client: AsyncClient) -> None:
    resp = await client.post("/auth/register", json=VALID_REGISTRATION)

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": {
            "code": "INTERNAL_SERVER_ERROR",
            "name": "HttpError",
            "message": "Not implemented",
        },
    }


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={REQUEST_ID_HEADER: "req-123"})
    assert resp.headers[REQUEST_ID_HEADER] == "req-123"


@pytest.mark.asyncio
async def test_request_id_is_generated_for_error_responses(client: AsyncClient) -> None:
    resp = await client.get("/no/such/route")
    assert resp.headers[REQUEST_ID_HEADER]


@pytest.mark.asyncio
async def test_request_id_is_echoed_on_unhandled_500(client: AsyncClient) -> None:
    resp = await client.post(
        "/auth/register", json=VALID_REGISTRATION, headers={REQUEST_ID_HEADER: "req-500"}
    )

    assert resp.status_code == 500
    assert resp.headers[REQUEST_ID_HEADER] == "req-500"
    assert resp.json()["error"]["message"] == "Not implemented"


@pytest.mark.asyncio
async def test_request_id_is_generated_when_database_is_down(
    client: AsyncClient, db: StubSession
) -> None:
    db.error = OperationalError("SELECT 1", {}, Exception("connection refused"))

    resp = await client.get("/health")

    assert resp.status_code == 500
    assert resp.headers[REQUEST_ID_HEADER]
    assert resp.json()["error"]["code"] == "INTERNAL_SERVER_ERROR"


@pytest.mark.asyncio
async def test_unhandled_exception_is_logged_once(
    client: AsyncClient, caplog: pytest.LogCaptureFixture
) -> None:
    await client.post("/auth/register", json=VALID_REGISTRATION)

    events = [record.msg for record in caplog.records if isinstance(record.msg, dict)]
    names = [event["event"] for event in events]
    assert names.count("unhandled_exception") == 1
    assert "request_failed" not in names
    completed = [event for event in events if event["event"] == "request_completed"]
    assert [event["status"] for event in completed] == [500]


@pytest.mark.asyncio
async def test_pretty_query_indents_json(client: AsyncClient) -> None:
    resp = await client.get("/health?pretty")

    assert resp.status_code == 200
    assert resp.text == '{\n  "status": "ok"\n}'
    assert resp.headers["content-length"] == str(len(resp.content))
    assert resp.headers[REQUEST_ID_HEADER]


@pytest.mark.asyncio
async def test_pretty_query_indents_error_envelope(client: AsyncClient) -> None:
    resp = await client.get("/no/such/route?pretty=1")

    assert resp.status_code == 404
    assert resp.text.startswith('{\n  "success": false,\n  "error": {\n    "code": "NOT_FOUND"')
    assert resp.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_json_is_compact_without_pretty_query(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.text == '{"status":"ok"}'


@pytest.mark.asyncio
async def test_openapi_documents_error_envelope(client: AsyncClient) -> None:
    resp = await client.get("/openapi.json")

    assert resp.status_code == 200
    schema = resp.json()
    responses = schema["paths"]["/auth/register"]["post"]["responses"]
    assert {"201", "400", "409", "500"} <= set(responses)
    assert "ErrorResponse" in schema["components"]["schemas"]
