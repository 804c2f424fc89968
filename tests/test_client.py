"""Tests for client.py: session guard integration, headers and error mapping."""
import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import httpx
import pytest

from tandoor_mcp.auth import TandoorAuthenticator
from tandoor_mcp.client import TandoorClient
from tandoor_mcp.models.auth import Credentials
from tandoor_mcp.session import Session
from tandoor_mcp.utils.errors import (
    AuthenticationError,
    AuthFailure,
    RemoteCallError,
    RemoteFailure,
    SessionUnavailableError,
)


@pytest.fixture
def client(fake_config, session, mock_authenticator):
    c = TandoorClient(fake_config, session, authenticator=mock_authenticator)
    c._http = MagicMock()
    return c


def _resp(status_code=200, json_data=None, text=None):
    """Build a fake httpx.Response."""
    r = MagicMock(spec=httpx.Response)
    r.status_code = status_code
    body = json.dumps(json_data) if json_data is not None else (text or "")
    r.text = body
    r.content = body.encode()
    r.json.return_value = json_data
    return r


def _token_resp(token):
    r = MagicMock(spec=httpx.Response)
    r.status_code = 200
    r.json.return_value = {"token": token}
    r.text = ""
    return r


# ── Requests ─────────────────────────────────────────────────────────

def test_builds_url_under_api_prefix(client):
    client._http.request.return_value = _resp(200, {"results": []})
    client.get("/keyword/")

    kwargs = client._http.request.call_args[1]
    assert kwargs["method"] == "GET"
    assert kwargs["url"] == "http://tandoor.test/api/keyword/"


def test_headers_include_bearer_token(client):
    client._http.request.return_value = _resp(200, {})
    client.get("/recipe/1/")

    headers = client._http.request.call_args[1]["headers"]
    assert headers["Authorization"] == "Bearer tda_test_token_123456"
    assert headers["Accept"] == "application/json"


def test_none_params_dropped(client):
    client._http.request.return_value = _resp(200, [])
    client.get("/recipe/", params={"query": "soup", "page": None})

    assert client._http.request.call_args[1]["params"] == {"query": "soup"}


def test_body_sent_as_json(client):
    client._http.request.return_value = _resp(201, {"id": 1})
    client.post("/cook-log/", body={"recipe": 1})

    assert client._http.request.call_args[1]["json"] == {"recipe": 1}


def test_empty_response_returns_none(client):
    client._http.request.return_value = _resp(204)
    assert client.delete("/meal-plan/1/") is None


def test_returns_decoded_json(client):
    client._http.request.return_value = _resp(200, {"id": 7, "name": "Soup"})
    assert client.get("/recipe/7/") == {"id": 7, "name": "Soup"}


# ── Error mapping ────────────────────────────────────────────────────

@pytest.mark.parametrize("status,kind", [
    (400, RemoteFailure.VALIDATION),
    (401, RemoteFailure.UNAUTHORIZED),
    (403, RemoteFailure.FORBIDDEN),
    (404, RemoteFailure.NOT_FOUND),
    (500, RemoteFailure.SERVER_ERROR),
    (502, RemoteFailure.SERVER_ERROR),
    (409, RemoteFailure.UNEXPECTED_STATUS),
])
def test_status_maps_to_remote_failure(client, status, kind):
    client._http.request.return_value = _resp(status, text="detail")

    with pytest.raises(RemoteCallError) as exc:
        client.get("/recipe/")
    assert exc.value.kind is kind
    assert exc.value.status_code == status


def test_not_found_uses_custom_message(client):
    client._http.request.return_value = _resp(404, text="")

    with pytest.raises(RemoteCallError, match="Recipe with ID 3 not found"):
        client.get("/recipe/3/", not_found="Recipe with ID 3 not found")


def test_transport_error_is_network(client):
    client._http.request.side_effect = httpx.ConnectTimeout("timed out")

    with pytest.raises(RemoteCallError) as exc:
        client.get("/recipe/")
    assert exc.value.kind is RemoteFailure.NETWORK


def test_unparseable_body_is_malformed(client):
    r = _resp(200, text="<html>")
    r.json.side_effect = ValueError("Expecting value")
    client._http.request.return_value = r

    with pytest.raises(RemoteCallError) as exc:
        client.get("/recipe/")
    assert exc.value.kind is RemoteFailure.MALFORMED_RESPONSE


def test_downstream_401_keeps_token(client, session, mock_authenticator):
    client._http.request.return_value = _resp(401, text="")

    with pytest.raises(RemoteCallError):
        client.get("/recipe/")
    with pytest.raises(RemoteCallError):
        client.get("/recipe/")
    assert session.tokens.get() == "tda_test_token_123456"
    mock_authenticator.authenticate.assert_called_once()


# ── Session guard ────────────────────────────────────────────────────

def test_no_session_path_skips_request(fake_config, mock_authenticator):
    c = TandoorClient(fake_config, Session(), authenticator=mock_authenticator)
    c._http = MagicMock()

    with pytest.raises(SessionUnavailableError):
        c.get("/recipe/")
    c._http.request.assert_not_called()
    mock_authenticator.authenticate.assert_not_called()


def test_auth_failure_skips_request(client, mock_authenticator):
    mock_authenticator.authenticate.side_effect = AuthenticationError(
        AuthFailure.UNREACHABLE, "down"
    )

    with pytest.raises(AuthenticationError):
        client.get("/recipe/")
    client._http.request.assert_not_called()


def test_concurrent_calls_on_one_client_authenticate_once(client, mock_authenticator):
    def slow_authenticate(creds):
        time.sleep(0.05)
        return "tda_once"

    mock_authenticator.authenticate.side_effect = slow_authenticate
    client._http.request.return_value = _resp(200, {"results": []})
    barrier = threading.Barrier(10)

    def call(_):
        barrier.wait()
        return client.get("/keyword/")

    with ThreadPoolExecutor(max_workers=10) as pool:
        results = list(pool.map(call, range(10)))

    assert results == [{"results": []}] * 10
    mock_authenticator.authenticate.assert_called_once()
    for c in client._http.request.call_args_list:
        assert c[1]["headers"]["Authorization"] == "Bearer tda_once"


# ── End-to-end against a mocked transport ────────────────────────────

def _wire(fake_config, credentials):
    session = Session(credentials=credentials)
    authenticator = TandoorAuthenticator(fake_config.settings.base_url)
    authenticator._http = MagicMock()
    client = TandoorClient(fake_config, session, authenticator=authenticator)
    client._http = MagicMock()
    return session, authenticator, client


def test_first_call_authenticates_second_reuses_token(fake_config):
    session, authenticator, client = _wire(fake_config, Credentials(username="admin", password="admin"))
    authenticator._http.post.return_value = _token_resp("tda_e2e")
    client._http.request.return_value = _resp(200, {"count": 0, "results": []})

    client.get("/recipe/")
    other = TandoorClient(fake_config, session, authenticator=authenticator)
    other._http = MagicMock()
    other._http.request.return_value = _resp(200, {"count": 0, "results": []})
    other.get("/recipe/")

    assert authenticator._http.post.call_count == 1
    assert session.tokens.get() == "tda_e2e"
    assert other._http.request.call_args[1]["headers"]["Authorization"] == "Bearer tda_e2e"


def test_wrong_password_is_not_cached(fake_config):
    session, authenticator, client = _wire(fake_config, Credentials(username="admin", password="wrongpass"))
    authenticator._http.post.return_value = _make_401()

    with pytest.raises(AuthenticationError) as exc:
        client.get("/recipe/")
    assert exc.value.kind is AuthFailure.INVALID_CREDENTIALS
    assert session.tokens.get() is None

    # The failure is not remembered: the next call tries again
    with pytest.raises(AuthenticationError):
        client.get("/recipe/")
    assert authenticator._http.post.call_count == 2
    client._http.request.assert_not_called()


def _make_401():
    r = MagicMock(spec=httpx.Response)
    r.status_code = 401
    r.text = "Invalid username or password"
    return r


def test_missing_recipe_is_not_found_not_auth_error(fake_config):
    session, authenticator, client = _wire(fake_config, Credentials(username="admin", password="admin"))
    session.tokens.set("tda_ready")
    client._http.request.return_value = _resp(404, text='{"detail": "Not found."}')

    with pytest.raises(RemoteCallError) as exc:
        client.get("/recipe/999999/", not_found="Recipe with ID 999999 not found")
    assert exc.value.kind is RemoteFailure.NOT_FOUND
    assert exc.value.code == "NOT_FOUND"
    assert not isinstance(exc.value, AuthenticationError)
    authenticator._http.post.assert_not_called()
