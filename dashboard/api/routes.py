"""
FastAPI routes for the dashboard's login, session and CDN-link endpoints.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from dashboard.core.exceptions import (
    CredentialMissingError,
    DashboardError,
    ForbiddenError,
    StorageError,
)
from dashboard.dependencies import (
    AppSettingsDep,
    get_access_authority,
    get_discord_oauth_client,
)
from dashboard.schemas import (
    AdminStatusResponse,
    CredentialStatusResponse,
    DiscordTokenResponse,
    FileViewerTokenResponse,
    LoginRequest,
    LoginResponse,
    ResourceLinkResponse,
    UserResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "

# Anything not listed maps to 400, matching the dashboard front-end's convention.
_ERROR_STATUS: dict[type[DashboardError], HTTPStatus] = {
    ForbiddenError: HTTPStatus.FORBIDDEN,
    CredentialMissingError: HTTPStatus.NOT_FOUND,
    StorageError: HTTPStatus.SERVICE_UNAVAILABLE,
}


def _http_error(exc: DashboardError) -> HTTPException:
    status = _ERROR_STATUS.get(type(exc), HTTPStatus.BAD_REQUEST)
    return HTTPException(status_code=status, detail=str(exc))


def _bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Invalid authorization header",
        )
    return authorization[len(_BEARER_PREFIX):]


AuthorizationHeader = Annotated[str | None, Header()]


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(settings: AppSettingsDep) -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "environment": settings.environment}


@router.get("/auth/discord/authorize", status_code=HTTPStatus.OK)
async def start_discord_oauth_flow(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_discord_oauth_client)],
    state: str | None = Query(
        default=None,
        description="Opaque value echoed back by Discord to the redirect URI.",
    ),
    redirect: bool = Query(
        default=False,
        description="When true, respond with a redirect to the Discord consent screen.",
    ),
) -> Any:
    """Return (or redirect to) the Discord consent URL."""
    authorization_url = oauth_client.build_authorization_url(state=state)

    wants_html = "text/html" in request.headers.get("accept", "").lower()
    if redirect or wants_html:
        return RedirectResponse(url=authorization_url, status_code=HTTPStatus.TEMPORARY_REDIRECT)

    return {"authorization_url": authorization_url}


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    authority: Annotated[Any, Depends(get_access_authority)],
) -> LoginResponse:
    """Complete the Discord login and return a session token."""
    try:
        result = await authority.login(payload.code)
    except DashboardError as exc:
        logger.warning("Login failed: %s", type(exc).__name__)
        raise _http_error(exc) from exc

    return LoginResponse(
        token=result.session_token,
        user=UserResponse.from_identity(result.identity),
    )


@router.get("/auth/verify", response_model=UserResponse)
def verify_session(
    authority: Annotated[Any, Depends(get_access_authority)],
    authorization: AuthorizationHeader = None,
) -> UserResponse:
    session_token = _bearer_token(authorization)
    try:
        identity = authority.authenticate(session_token)
    except DashboardError as exc:
        raise _http_error(exc) from exc
    return UserResponse.from_identity(identity)


@router.post("/auth/logout")
def logout(
    authority: Annotated[Any, Depends(get_access_authority)],
    authorization: AuthorizationHeader = None,
) -> dict:
    """Revoke the session's stored Discord credential; the client discards the token."""
    session_token = _bearer_token(authorization)
    try:
        authority.logout(session_token)
    except DashboardError as exc:
        raise _http_error(exc) from exc
    return {"message": "Logged out successfully"}


@router.get("/auth/credential/status", response_model=CredentialStatusResponse)
def credential_status(
    authority: Annotated[Any, Depends(get_access_authority)],
    authorization: AuthorizationHeader = None,
) -> CredentialStatusResponse:
    """Report whether a live Discord credential backs this session."""
    session_token = _bearer_token(authorization)
    try:
        identity = authority.authenticate(session_token)
        has_credential = authority.has_credential(session_token)
    except DashboardError as exc:
        raise _http_error(exc) from exc
    return CredentialStatusResponse(
        has_credential=has_credential,
        user=UserResponse.from_identity(identity),
    )


@router.get("/auth/discord-token", response_model=DiscordTokenResponse)
def discord_token(
    authority: Annotated[Any, Depends(get_access_authority)],
    authorization: AuthorizationHeader = None,
) -> DiscordTokenResponse:
    """Return the Discord access token stored at login for this session."""
    session_token = _bearer_token(authorization)
    try:
        identity = authority.authenticate(session_token)
        credential = authority.resolve_credential(session_token)
    except DashboardError as exc:
        raise _http_error(exc) from exc
    return DiscordTokenResponse(
        discord_token=credential,
        user=UserResponse.from_identity(identity),
    )


@router.get("/auth/admin/check", response_model=AdminStatusResponse)
def check_admin_status(
    authority: Annotated[Any, Depends(get_access_authority)],
    authorization: AuthorizationHeader = None,
) -> AdminStatusResponse:
    session_token = _bearer_token(authorization)
    try:
        identity = authority.authenticate(session_token)
    except DashboardError as exc:
        raise _http_error(exc) from exc
    return AdminStatusResponse(
        is_admin=authority.is_admin(identity.discord_id),
        user=UserResponse.from_identity(identity),
    )


@router.get("/image/fileviewer-token", response_model=FileViewerTokenResponse)
def file_viewer_token(
    authority: Annotated[Any, Depends(get_access_authority)],
    authorization: AuthorizationHeader = None,
) -> FileViewerTokenResponse:
    """Hand admins the shared CDN token used by the file browser."""
    session_token = _bearer_token(authorization)
    try:
        identity = authority.authorize_admin(session_token)
        viewer = authority.file_viewer_token(identity.discord_id)
    except DashboardError as exc:
        raise _http_error(exc) from exc
    return FileViewerTokenResponse(
        token=viewer.token,
        expiry=viewer.expiry,
        base_url=viewer.base_url,
    )


@router.post("/image/generate-link", response_model=ResourceLinkResponse)
def generate_file_link(
    authority: Annotated[Any, Depends(get_access_authority)],
    path: str = Query(..., description="File path under the CDN."),
    expiry: int = Query(..., description="Unix timestamp at which the link stops working."),
    authorization: AuthorizationHeader = None,
) -> ResourceLinkResponse:
    """Mint a signed, time-limited link to a single CDN file."""
    session_token = _bearer_token(authorization)
    try:
        identity = authority.authorize_admin(session_token)
        link = authority.mint_resource_link(identity.discord_id, path, expiry)
    except DashboardError as exc:
        raise _http_error(exc) from exc
    return ResourceLinkResponse(url=link.url, token=link.token, expiry=link.expiry)


__all__ = ["router"]
