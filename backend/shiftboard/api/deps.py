"""
API Dependencies

Dependency injection for FastAPI routes: settings, the job service built at
startup, and the authenticated caller resolved from the bearer token.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shiftboard.application.services import JobService
from shiftboard.core.config import Settings
from shiftboard.core.observability import set_user_id
from shiftboard.core.security import Principal, decode_access_token

bearer_scheme = HTTPBearer(auto_error=False, description="JWT access token")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_job_service(request: Request) -> JobService:
    return request.app.state.job_service


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
JobServiceDep = Annotated[JobService, Depends(get_job_service)]
CredentialsDep = Annotated[
    HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
]


def get_current_principal(
    settings: SettingsDep, credentials: CredentialsDep
) -> Principal:
    """
    Resolve the caller from the Authorization header.

    Raises:
        UnauthenticatedError: If the header is missing or the token is invalid
    """
    token = credentials.credentials if credentials else None
    principal = decode_access_token(token, settings)
    set_user_id(principal.user_id)
    return principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
