"""Profile provisioning on first sight of a user.

Idempotent: repeat calls for the same user_id return the existing profile.
A concurrent insert losing the unique-constraint race re-reads the winner's row.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cofounder.db.base import session_scope
from cofounder.db.models.profile import Profile

logger = structlog.get_logger(__name__)


async def provision_profile(
    user_id: str,
    jwt_claims: dict,
    session: AsyncSession | None = None,
) -> Profile:
    """Create an empty profile (no legacy flag, no subscription) if none exists.

    Args:
        user_id: Auth subject from the JWT
        jwt_claims: Decoded claims; ``user_metadata.full_name`` seeds the profile name
        session: Optional AsyncSession for testing (if None, creates new session)
    """
    if session is not None:
        return await _do_provision(user_id, jwt_claims, session)

    async with session_scope() as session:
        return await _do_provision(user_id, jwt_claims, session)


async def _do_provision(user_id: str, jwt_claims: dict, session: AsyncSession) -> Profile:
    result = await session.execute(select(Profile).where(Profile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is not None:
        return profile

    metadata = jwt_claims.get("user_metadata") or {}
    profile = Profile(
        user_id=user_id,
        full_name=metadata.get("full_name") if isinstance(metadata, dict) else None,
        is_legacy_user=False,
    )
    session.add(profile)
    try:
        await session.commit()
    except IntegrityError:
        # Concurrent request already provisioned this user
        await session.rollback()
        result = await session.execute(select(Profile).where(Profile.user_id == user_id))
        return result.scalar_one()

    logger.info("profile_provisioned", user_id=user_id)
    return profile
