import json

import pytest
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request

from app.api.core.exceptions import (
    PersistenceError,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)


def _request() -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/subscriptions",
            "headers": [],
            "query_string": b"",
        }
    )


def _body(response) -> dict:
    return json.loads(response.body.decode())


@pytest.mark.asyncio
async def test_validation_errors_become_bad_request():
    exc = RequestValidationError(
        [
            {"loc": ("body", "name"), "msg": "Field required", "type": "missing"},
            {"loc": ("body", "email"), "msg": "Field required", "type": "missing"},
        ]
    )

    response = await validation_exception_handler(_request(), exc)

    assert response.status_code == 400
    body = _body(response)
    assert body["error"] == "VALIDATION_ERROR"
    assert body["errors"] == {"name": ["Field required"], "email": ["Field required"]}


@pytest.mark.asyncio
async def test_validation_error_messages_drop_value_error_prefix():
    exc = RequestValidationError(
        [{"loc": ("body", "email"), "msg": "Value error, bad", "type": "value_error"}]
    )

    response = await validation_exception_handler(_request(), exc)

    assert _body(response)["errors"] == {"email": ["bad"]}


@pytest.mark.asyncio
async def test_http_exception_keeps_status_code():
    response = await http_exception_handler(_request(), HTTPException(404, "Not here"))

    assert response.status_code == 404
    assert _body(response)["message"] == "Not here"


@pytest.mark.asyncio
async def test_http_exception_keeps_headers():
    exc = HTTPException(405, "Method Not Allowed", headers={"Allow": "GET"})

    response = await http_exception_handler(_request(), exc)

    assert response.status_code == 405
    assert response.headers["allow"] == "GET"


@pytest.mark.asyncio
async def test_general_exception_hides_the_cause():
    response = await general_exception_handler(_request(), RuntimeError("password=hunter2"))

    assert response.status_code == 500
    assert "hunter2" not in response.body.decode()


def test_persistence_error_keeps_detail():
    err = PersistenceError("Failed to save subscription")

    assert err.detail == "Failed to save subscription"
    assert str(err) == "Failed to save subscription"
