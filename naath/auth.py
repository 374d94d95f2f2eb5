import os
import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext

from .errors import Unauthenticated, InvalidCredential, IdentityUnavailable
from .models import AsyncSessionLocal
from .models.users import User
from .schemas.common import MAX_ID
from .storage import storage_operation

logger = logging.getLogger(__name__)

# Prefer JWT_SECRET but support legacy JWT_SECRET_KEY for compatibility
SECRET = os.getenv('JWT_SECRET') or os.getenv('JWT_SECRET_KEY', 'devsecret')
ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', str(60 * 24 * 7)))

pwd_ctx = CryptContext(schemes=['bcrypt'], deprecated='auto')
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_ctx.verify(password, password_hash)


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({'exp': expire})
    encoded = jwt.encode(to_encode, SECRET, algorithm=ALGORITHM)
    return encoded


def token_for_user(user: User) -> str:
    return create_access_token({'id': user.id, 'username': user.username, 'role': user.role})


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, SECRET, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise InvalidCredential('Your authentication token has expired. Please log in again.') from e
    except JWTError as e:
        raise InvalidCredential() from e
    user_id = payload.get('id')
    if not isinstance(user_id, int) or not 1 <= user_id <= MAX_ID:
        raise InvalidCredential('Token contained no recognizable user identification')
    return payload


@storage_operation
async def load_identity(user_id: int) -> Optional[User]:
    async with AsyncSessionLocal() as session:
        return await session.get(User, user_id)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """Resolve the bearer token on the request to an active user."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated('Access token required')
    payload = decode_token(credentials.credentials)
    user = await load_identity(payload['id'])
    if user is None:
        raise IdentityUnavailable('The user associated with this token no longer exists')
    if not user.is_active:
        raise IdentityUnavailable('Your account has been deactivated. Please contact support.')
    return user
