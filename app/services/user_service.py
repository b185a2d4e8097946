"""
User Service - maps provider identities to application users.

Called by the OAuth callback (through OAuthFlowController.resolve_user) and
by /api/userinfo. One user row per (auth_provider, auth_provider_id); the
profile fields follow whatever the provider reported at the last login.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.user import User


logger = logging.getLogger("family_calendar.services.user")


def find_or_create_user(
    db: Session,
    provider: str,
    provider_user_id: str,
    given_name: str,
    family_name: str,
    email: str,
) -> User:
    """
    Return the user for a provider identity, creating it on first login.

    An existing user gets its name and email refreshed from the provider.

    Raises:
        ValueError: provider or provider_user_id is empty
        SQLAlchemyError: the lookup or the write failed (session rolled back)
    """
    if not provider or not provider_user_id:
        raise ValueError("provider and provider_user_id are required")

    try:
        user = db.query(User).filter(
            User.auth_provider == provider,
            User.auth_provider_id == provider_user_id,
        ).first()

        if user:
            user.given_name = given_name
            user.family_name = family_name
            user.email = email
        else:
            user = User(
                auth_provider=provider,
                auth_provider_id=provider_user_id,
                given_name=given_name,
                family_name=family_name,
                email=email,
            )
            db.add(user)

        db.commit()
        db.refresh(user)
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(f"Resolved {provider} identity to user {user.id}")
    return user


def get_user(db: Session, user_id: int) -> Optional[User]:
    """Get a user by primary key, or None."""
    return db.get(User, user_id)
