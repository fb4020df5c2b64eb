# src/auth/services.py
import logging

from jose import JWTError, jwt
from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional
from auth.schemas import AdminUser, SessionData
from config import settings

logger = logging.getLogger(__name__)


class AuthService:
    pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt."""
        return AuthService.pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        if not hashed_password:
            return False
        try:
            return AuthService.pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            logger.warning("Stored password hash is not a recognised bcrypt hash")
            return False

    @staticmethod
    def is_admin_email(email: str) -> bool:
        return email in settings.ADMIN_EMAILS

    @staticmethod
    def admin_user(email: str) -> AdminUser:
        return AdminUser(id=email, email=email, name=settings.ADMIN_ACCOUNT_NAME)

    @staticmethod
    def verify_login(email: str, password: str) -> Optional[AdminUser]:
        """Check the static admin account: allow-listed email plus bcrypt password."""
        if not AuthService.is_admin_email(email):
            return None
        if email != settings.ADMIN_ACCOUNT_EMAIL:
            return None
        if not AuthService.verify_password(password, settings.ADMIN_PASSWORD_HASH):
            logger.info(f"Failed admin login for {email}")
            return None
        return AuthService.admin_user(email)

    @staticmethod
    def create_session_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create the signed value stored in the session cookie."""
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.SESSION_MAX_AGE_DAYS))
        to_encode = {"sub": email, "exp": expire}
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_session_token(token: Optional[str]) -> Optional[SessionData]:
        """Return the session claims, or None if the cookie is missing, forged or expired."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            return None
        if not payload.get("sub") or payload.get("exp") is None:
            return None
        return SessionData(sub=payload["sub"], exp=payload["exp"])
