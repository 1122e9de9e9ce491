import time
from typing import Optional

import httpx
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .dependencies import get_auth_client
from .errors import AuthenticationError, AuthUnavailableError
from .logs import logger

log = logger(__file__)

AUTH_GET_USER_RETRIES = 2
AUTH_GET_USER_DELAYS = [0.2, 0.5]

_TRANSIENT_MARKERS = ("fetch failed", "connection refused", "econnrefused", "timed out",
                      "etimedout", "enotfound", "name or service not known", "network")

bearer_scheme = HTTPBearer(auto_error=False)


def is_transient_auth_error(error: Optional[BaseException]) -> bool:
    """True if the auth provider could not be reached, as opposed to rejecting the token"""
    if error is None:
        return False
    if isinstance(error, httpx.TransportError):
        return True
    if type(error).__name__ == "AuthRetryableError":
        return True
    message = str(error).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


def verify_token(auth_client, token: str, sleep=None) -> str:
    """Resolve a bearer token to a user id via the managed auth provider"""
    sleep = sleep or time.sleep
    last_error: Optional[BaseException] = None
    user = None

    for attempt in range(AUTH_GET_USER_RETRIES + 1):
        try:
            response = auth_client.get_user(token)
            user = response.user if response else None
            last_error = None
            break
        except Exception as e:
            last_error = e
            if not is_transient_auth_error(e):
                break
            if attempt < AUTH_GET_USER_RETRIES:
                sleep(AUTH_GET_USER_DELAYS[attempt])

    if last_error is not None and is_transient_auth_error(last_error):
        log.error("Auth verification failed (provider unreachable): %s", last_error)
        raise AuthUnavailableError()

    if last_error is not None or user is None:
        log.warning(
            "Auth verification failed: %s (token %s...)",
            last_error or "no user returned", token[:20],
        )
        raise AuthenticationError()

    return user.id


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_client=Depends(get_auth_client),
) -> str:
    """FastAPI dependency: the authenticated user's id"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing or invalid authorization header")
    return verify_token(auth_client, credentials.credentials)
