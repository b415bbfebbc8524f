"""Administrative surface — nonces, warning actions, web endpoints."""

from sitewatch.admin.actions import NONCE_ACTION, ActionResult, AdminActions, serialize_warning
from sitewatch.admin.exceptions import (
    AdminError,
    InvalidNonceError,
    InvalidRequestError,
    PermissionDeniedError,
)
from sitewatch.admin.nonces import NonceManager
from sitewatch.admin.web import create_admin_app, start_admin_server

__all__ = [
    "NONCE_ACTION",
    "ActionResult",
    "AdminActions",
    "AdminError",
    "InvalidNonceError",
    "InvalidRequestError",
    "NonceManager",
    "PermissionDeniedError",
    "create_admin_app",
    "serialize_warning",
    "start_admin_server",
]
