"""Authentication service for password handling and account linking."""

import logging

from passlib.context import CryptContext

from src.errors import AuthenticationError, ConflictError, ValidationError
from src.schemas.auth import GoogleProfile, UserRegister
from src.schemas.user import UserCreate, UserRecord, UserUpdate
from src.stores.base import UserStore

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

INVALID_CREDENTIALS = "Incorrect email or password"
SOCIAL_LOGIN_ONLY = "This account uses social login. Please sign in with Google."


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


async def authenticate_user(users: UserStore, email: str, password: str) -> UserRecord:
    """Authenticate a user by email and password.

    Accounts created through Google and never given a password are rejected
    with a message telling the caller to use social login.
    """
    user = await users.find_by_email(email)
    if user is None:
        pwd_context.dummy_verify()
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not user.password_hash:
        raise AuthenticationError(SOCIAL_LOGIN_ONLY)
    if not verify_password(password, user.password_hash):
        raise AuthenticationError(INVALID_CREDENTIALS)
    return user


async def register_user(users: UserStore, data: UserRegister) -> UserRecord:
    """Create a local account. Raises ConflictError when the email is taken."""
    if await users.find_by_email(data.email):
        raise ConflictError("Email already in use")

    return await users.create_user(
        UserCreate(
            email=data.email,
            password_hash=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
        )
    )


async def login_with_google(users: UserStore, profile: GoogleProfile) -> UserRecord:
    """Resolve a Google profile to a user, linking or creating as needed.

    Lookup order is google id, then email. A match by email gains the google
    id and only the profile fields it is missing; otherwise a passwordless
    client account is created.
    """
    user = await users.find_by_google_id(profile.id)
    if user is not None:
        return user

    if not profile.email:
        raise ValidationError("Email not available on the Google account")

    existing = await users.find_by_email(profile.email)
    if existing is not None:
        logger.info(f"Linking Google account to existing user {existing.id}")
        return await users.update_user(
            existing.id,
            UserUpdate(
                google_id=profile.id,
                first_name=existing.first_name or profile.given_name,
                last_name=existing.last_name or profile.family_name,
                profile_image_url=existing.profile_image_url or profile.picture,
            ),
        )

    logger.info("Creating user from Google profile")
    return await users.create_user(
        UserCreate(
            email=profile.email,
            google_id=profile.id,
            first_name=profile.given_name,
            last_name=profile.family_name,
            profile_image_url=profile.picture,
        )
    )
