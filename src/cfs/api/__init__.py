"""HTTP layer — FastAPI app, routes and the authorization hook."""

from cfs.api.app import create_app
from cfs.api.auth import (
    AllowAllAuthorizer,
    AuthorizationError,
    Authorizer,
    BasicAuthorizer,
)

__all__ = [
    "AllowAllAuthorizer",
    "AuthorizationError",
    "Authorizer",
    "BasicAuthorizer",
    "create_app",
]
