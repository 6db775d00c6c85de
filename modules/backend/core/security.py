"""
Password Hashing and Access Tokens.

Passwords are stored as bcrypt hashes. Logins are answered with an HS256
JWT whose `sub` is the user id and `role` the user's role; the signing
secret comes from config/.env and everything else from security.yaml.
"""

from datetime import timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from modules.backend.core.config import get_app_config, get_settings
from modules.backend.core.exceptions import AuthenticationError
from modules.backend.core.logging import get_logger
from modules.backend.core.utils import utc_now

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False for a wrong password and for a stored hash bcrypt cannot read."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a bcrypt hash")
        return False


def create_access_token(user_id: str, role: str, expires_delta: timedelta | None = None) -> str:
    """
    Sign an access token for a user.

    Args:
        user_id: Stored as the `sub` claim
        role: Stored as the `role` claim
        expires_delta: Lifetime; defaults to security.yaml access_token_expire_minutes
    """
    jwt_config = get_app_config().security.jwt
    lifetime = expires_delta or timedelta(minutes=jwt_config.access_token_expire_minutes)
    claims = {
        "sub": user_id,
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "aud": jwt_config.audience,
        "exp": utc_now() + lifetime,
    }
    return jwt.encode(claims, get_settings().jwt_secret, algorithm=jwt_config.algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature, audience and expiry and return the claims.

    Raises:
        AuthenticationError: Bad or expired token, or one that is not an
            access token for a user
    """
    jwt_config = get_app_config().security.jwt
    try:
        claims = jwt.decode(
            token,
            get_settings().jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token") from e

    if claims.get("type") != ACCESS_TOKEN_TYPE or not claims.get("sub"):
        logger.warning("Token is not a user access token", extra={"type": claims.get("type")})
        raise AuthenticationError("Invalid or expired token")
    return claims
