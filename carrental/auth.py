"""Password hashing, JWT handling, and helper utilities."""
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import Settings
from .errors import Unauthorized
from .models import User


@lru_cache
def _crypt_context(scheme: str, bcrypt_rounds: int) -> CryptContext:
    options: Dict[str, Any] = {}
    if scheme == "bcrypt":
        options["bcrypt__rounds"] = bcrypt_rounds
    return CryptContext(schemes=[scheme], deprecated="auto", **options)


def pwd_context(settings: Settings) -> CryptContext:
    return _crypt_context(settings.password_hash_scheme, settings.bcrypt_rounds)


def verify_password(plain_password: str, hashed_password: str, settings: Settings) -> bool:
    return pwd_context(settings).verify(plain_password, hashed_password)


def get_password_hash(password: str, settings: Settings) -> str:
    return pwd_context(settings).hash(password)


def create_access_token(*, user_id: int, username: str, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    to_encode: Dict[str, Any] = {"userId": user_id, "username": username, "iat": now}
    if expires_delta is None and settings.access_token_expire_minutes:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    if expires_delta is not None:
        to_encode["exp"] = now + expires_delta
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise Unauthorized("invalid token") from exc


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()
