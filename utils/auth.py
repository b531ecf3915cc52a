from __future__ import annotations
from typing import Iterable, Protocol

from fastapi import Depends, Request, status

from config.settings import Settings, get_settings


class PermissionChecker(Protocol):
    """Authorization collaborator consulted before every read."""

    def check(self, resource: str, action: str) -> bool: ...

    def authorization_required_code(self) -> int: ...


class CapabilityPermissionChecker:
    """
    Grants access when "<resource>:<action>" is among the granted capabilities.

    Denials are reported as 401 for anonymous callers and 403 for callers
    that presented credentials.
    """

    def __init__(self, granted: Iterable[str], authenticated: bool = False):
        self.granted = frozenset(granted)
        self.authenticated = authenticated

    def check(self, resource: str, action: str) -> bool:
        return f"{resource}:{action}" in self.granted

    def authorization_required_code(self) -> int:
        if self.authenticated:
            return status.HTTP_403_FORBIDDEN
        return status.HTTP_401_UNAUTHORIZED


async def get_permission_checker(
    request: Request,
    app_settings: Settings = Depends(get_settings),
) -> PermissionChecker:
    return CapabilityPermissionChecker(
        granted=app_settings.GRANTED_CAPABILITIES,
        authenticated=bool(request.headers.get("Authorization")),
    )
