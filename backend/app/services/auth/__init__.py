from app.services.auth.identity import (
    ExternalIdentity,
    IdentityConfigError,
    IdentityTokenError,
    verify_identity_token,
)

__all__ = [
    "ExternalIdentity",
    "IdentityConfigError",
    "IdentityTokenError",
    "verify_identity_token",
]
