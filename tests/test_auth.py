import httpx
import pytest

from invoice_api.auth import is_transient_auth_error, verify_token
from invoice_api.errors import AuthenticationError, AuthUnavailableError

from .conftest import USER_ID
from .fakes import FakeAuth, FakeAuthApiError


def test_missing_header_is_401(client):
    response = client.get("/api/invoices")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Missing or invalid authorization header"}


def test_non_bearer_scheme_is_401(client):
    response = client.get("/api/invoices", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert response.status_code == 401


def test_invalid_token_is_401(client):
    response = client.get("/api/invoices", headers={"Authorization": "Bearer expired-token"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


def test_provider_outage_is_503(client, auth, headers):
    auth.outage = True
    response = client.get("/api/invoices", headers=headers)
    assert response.status_code == 503
    assert response.json()["error"] == "Auth service temporarily unavailable. Please try again."
    assert auth.calls == 3


def test_valid_token(client, headers):
    assert client.get("/api/invoices", headers=headers).status_code == 200


def test_transient_failure_is_retried():
    auth = FakeAuth({"t": USER_ID})
    auth.fail_times = 2
    delays = []
    assert verify_token(auth, "t", sleep=delays.append) == USER_ID
    assert delays == [0.2, 0.5]


def test_rejected_token_is_not_retried():
    auth = FakeAuth()
    with pytest.raises(AuthenticationError):
        verify_token(auth, "nope", sleep=lambda s: None)
    assert auth.calls == 1


def test_outage_raises_unavailable():
    auth = FakeAuth()
    auth.outage = True
    with pytest.raises(AuthUnavailableError):
        verify_token(auth, "t", sleep=lambda s: None)


def test_missing_user_is_401():
    class NoUser:
        def get_user(self, token):
            return None

    with pytest.raises(AuthenticationError):
        verify_token(NoUser(), "t")


@pytest.mark.parametrize("error,transient", [
    (httpx.ConnectError("boom"), True),
    (httpx.ReadTimeout("slow"), True),
    (Exception("fetch failed"), True),
    (Exception("getaddrinfo ENOTFOUND example.supabase.co"), True),
    (FakeAuthApiError("invalid JWT"), False),
    (None, False),
])
def test_is_transient_auth_error(error, transient):
    assert is_transient_auth_error(error) is transient
