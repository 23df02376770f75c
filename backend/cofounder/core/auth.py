"""Bearer JWT authentication for FastAPI (HS256 access tokens)."""

from dataclasses import dataclass

import jwt as pyjwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cofounder.core.config import get_settings
from cofounder.db.base import session_scope
from cofounder.services.subscription_service import SubscriptionSession

_bearer_scheme = HTTPBearer(auto_error=False)

# In-memory cache of provisioned user IDs to avoid DB queries on every request
_provisioned_cache: set[str] = set()


@dataclass(frozen=True)
class AuthUser:
    """Authenticated user extracted from an access token."""

    user_id: str
    claims: dict


def decode_access_token(token: str) -> AuthUser:
    """Verify and decode an HS256 access token.

    Raises ``HTTPException(401)`` on any validation failure and
    ``ConfigurationError`` when the signing secret is not configured.
    """
    settings = get_settings()
    secret = settings.require("auth_jwt_secret")

    try:
        payload = pyjwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            audience=settings.auth_jwt_audience or None,
            options={
                "verify_exp": True,
                "verify_aud": bool(settings.auth_jwt_audience),
                "require": ["sub", "exp"],
            },
        )
    except pyjwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except pyjwt.MissingRequiredClaimError as exc:
        raise HTTPException(status_code=401, detail=f"Missing required claim: {exc}")
    except pyjwt.InvalidAudienceError:
        raise HTTPException(status_code=401, detail="Unauthorized audience (aud mismatch)")
    except pyjwt.InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail=f"Invalid token: {exc}")

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Token missing sub claim")

    return AuthUser(user_id=sub, claims=payload)


async def require_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> AuthUser:
    """FastAPI dependency that extracts and validates the bearer token.

    Also provisions an empty profile on the user's first API call.

    Usage::

        @router.get("/protected")
        async def protected(user: AuthUser = Depends(require_auth)):
            ...
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    user = decode_access_token(credentials.credentials)

    if user.user_id not in _provisioned_cache:
        from cofounder.core.provisioning import provision_profile

        await provision_profile(user.user_id, user.claims)
        _provisioned_cache.add(user.user_id)

    # Set user_id on request state for downstream use (error handlers, audit logging)
    request.state.user_id = user.user_id

    return user


async def get_subscription(user: AuthUser = Depends(require_auth)) -> SubscriptionSession:
    """Fresh entitlement state for the current request."""
    subscription = SubscriptionSession(user.user_id)
    async with session_scope() as session:
        await subscription.refetch(session)
    return subscription


async def require_subscription(
    user: AuthUser = Depends(require_auth),
    subscription: SubscriptionSession = Depends(get_subscription),
) -> AuthUser:
    """FastAPI dependency that requires legacy access or a live paid subscription.

    Returns a structured HTTP 402 response when access is missing.
    """
    if not subscription.has_access():
        raise HTTPException(
            status_code=402,
            detail={
                "code": "subscription_required",
                "message": "Subscription required. Please subscribe to a plan at /pricing.",
                "upgrade_url": "/pricing",
            },
        )
    return user
