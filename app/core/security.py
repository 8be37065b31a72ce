from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import Settings
from app.core.exceptions import Unauthorized

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ROLE_USER = "user"
ROLE_STORE = "store"
ROLE_DELIVERY = "delivery"
ROLE_ADMIN = "admin"

ROLES = (ROLE_USER, ROLE_STORE, ROLE_DELIVERY, ROLE_ADMIN)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(frozen=True)
class Identity:
    identity_id: int
    role: str


class AccessPolicy:
    """
    Issues and resolves bearer tokens.

    Built once from the settings passed to ``create_app``; the core trusts
    the ``{identity_id, role}`` pair it resolves.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_access_token(self, identity_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)

        to_encode = {"sub": str(identity_id), "role": role, "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Optional[dict]:
        """
        Decode and validate a JWT

        Returns:
            The token payload if valid, None otherwise
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

    def resolve(self, token: str) -> Identity:
        payload = self.decode_token(token)
        if not payload:
            raise Unauthorized()

        role = payload.get("role")
        if role not in ROLES:
            raise Unauthorized("Invalid token payload")

        try:
            identity_id = int(payload.get("sub"))
        except (ValueError, TypeError):
            raise Unauthorized("Invalid token payload")

        return Identity(identity_id=identity_id, role=role)
