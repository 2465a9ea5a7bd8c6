"""Credential passthrough.

Authentication itself lives in the SkillForge backend. This layer only
carries the caller's bearer token through to backend requests and reads the
user id the frontend already knows.
"""

from typing import Annotated

from fastapi import Depends, Request, WebSocket

AUTH_HEADER = "Authorization"
USER_HEADER = "X-User-Id"
DEFAULT_USER_ID = "current"


def _bearer(value: str | None) -> str | None:
    if not value:
        return None
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def get_auth_token(request: Request) -> str | None:
    """Bearer token from the incoming request, if any."""
    return _bearer(request.headers.get(AUTH_HEADER))


def get_auth_token_from_ws(websocket: WebSocket) -> str | None:
    """Bearer token from the header or the ``token`` query parameter.

    Browsers cannot set headers on WebSocket handshakes, so the query
    parameter is accepted as well.
    """
    return _bearer(websocket.headers.get(AUTH_HEADER)) or websocket.query_params.get("token")


def get_auth_user(request: Request) -> str:
    """User id the frontend is acting for (``"current"`` when unknown)."""
    return request.headers.get(USER_HEADER) or DEFAULT_USER_ID


AuthTokenDep = Annotated[str | None, Depends(get_auth_token)]
CurrentUserDep = Annotated[str, Depends(get_auth_user)]
