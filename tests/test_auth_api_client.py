from unittest.mock import MagicMock, patch

import pytest
import requests

import auth
from infrastructure.clients.auth_api_client import AuthApiClient


def _response(status, body=None, content=b"{}"):
    resp = MagicMock()
    resp.status_code = status
    resp.content = content
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def client():
    return AuthApiClient("http://api.test/api/", timeout=3)


@patch("requests.request")
def test_login_posts_credentials(mock_request, client):
    mock_request.return_value = _response(200, {"token": "t", "role": "staff"})
    assert client.login("staff1", "pw") == {"token": "t", "role": "staff"}

    args, kwargs = mock_request.call_args
    assert args == ("POST", "http://api.test/api/auth/login")
    assert kwargs["json"] == {"username": "staff1", "password": "pw"}
    assert kwargs["timeout"] == 3
    assert "Authorization" not in kwargs["headers"]


@patch("requests.request")
def test_login_rejection_uses_remote_message(mock_request, client):
    mock_request.return_value = _response(401, {"message": "Account locked"})
    with pytest.raises(auth.InvalidCredentialsError) as excinfo:
        client.login("staff1", "pw")
    assert excinfo.value.message == "Account locked"


@patch("requests.request")
def test_login_rejection_without_message_uses_default(mock_request, client):
    mock_request.return_value = _response(400, ValueError("no json"))
    with pytest.raises(auth.InvalidCredentialsError) as excinfo:
        client.login("staff1", "pw")
    assert excinfo.value.message == "Invalid credentials"


@patch("requests.request")
def test_server_error_is_unavailable(mock_request, client):
    mock_request.return_value = _response(503, {"message": "down"})
    with pytest.raises(auth.RemoteUnavailableError):
        client.login("staff1", "pw")


@patch("requests.request")
def test_network_error_is_unavailable(mock_request, client):
    mock_request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(auth.RemoteUnavailableError):
        client.verify_two_factor("u1", "123456")


@patch("requests.request")
def test_verify_two_factor(mock_request, client):
    mock_request.return_value = _response(200, {"token": "t"})
    client.verify_two_factor("u1", "123456")
    args, kwargs = mock_request.call_args
    assert args[1].endswith("/auth/verify-2fa")
    assert kwargs["json"] == {"userId": "u1", "code": "123456"}

    mock_request.return_value = _response(400, {})
    with pytest.raises(auth.InvalidCredentialsError) as excinfo:
        client.verify_two_factor("u1", "000000")
    assert excinfo.value.message == "Invalid or expired code"


@patch("requests.request")
def test_update_profile_sends_bearer_and_fields(mock_request, client):
    mock_request.return_value = _response(200, {"username": "renamed"})
    client.update_profile("tok", "old", username="renamed", new_password="newpass")
    args, kwargs = mock_request.call_args
    assert args == ("PUT", "http://api.test/api/auth/profile")
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["json"] == {"currentPassword": "old", "username": "renamed", "password": "newpass"}


@patch("requests.request")
def test_update_profile_errors(mock_request, client):
    mock_request.return_value = _response(401, {})
    with pytest.raises(auth.SessionExpiredError):
        client.update_profile("tok", "old")

    mock_request.return_value = _response(400, {"message": "Current password is incorrect"})
    with pytest.raises(auth.RemoteRequestError) as excinfo:
        client.update_profile("tok", "bad")
    assert excinfo.value.message == "Current password is incorrect"


@patch("requests.request")
def test_password_reset_endpoints(mock_request, client):
    mock_request.return_value = _response(200, None, content=b"")
    assert client.forgot_password("a@b.com") == {}
    assert client.reset_password("tok/with slash", "newpass") == {}
    args, _ = mock_request.call_args
    assert args == ("PUT", "http://api.test/api/auth/reset-password/tok%2Fwith%20slash")

    mock_request.return_value = _response(400, {"message": "Token expired"})
    with pytest.raises(auth.RemoteRequestError, match="Token expired"):
        client.reset_password("tok", "newpass")


@patch("requests.request")
def test_non_json_success_body_is_unavailable(mock_request, client):
    mock_request.return_value = _response(200, ValueError("html"))
    with pytest.raises(auth.RemoteUnavailableError):
        client.login("staff1", "pw")
