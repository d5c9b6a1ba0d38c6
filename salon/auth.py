# salon/auth.py

import logging
import os
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext

from .data import DEFAULT_PROVIDERS, USERS_KEY
from .deps import get_providers
from .schemas import Provider

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-later")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_MINUTES", "720"))

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def create_access_token(data: dict, expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes)
    to_encode["exp"] = expire
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


class ProviderDirectory:
    """Staff accounts, stored under the `users` key.

    The collection is seeded with the default cosmetologists the first time
    the storage is opened.
    """

    def __init__(self, storage):
        self.storage = storage
        raw = storage.load(USERS_KEY)
        if raw is None:
            raw = [
                Provider(
                    id=p["id"],
                    username=p["username"],
                    name=p["name"],
                    role=p["role"],
                    password_hash=hash_password(p["password"]),
                ).to_snapshot()
                for p in DEFAULT_PROVIDERS
            ]
            storage.save(USERS_KEY, raw)
            logger.info(f"Seeded {len(raw)} default providers")
        self._by_id: Dict[str, Provider] = {}
        for item in raw:
            provider = Provider.model_validate(item)
            self._by_id[provider.id] = provider

    def all(self) -> List[Provider]:
        return list(self._by_id.values())

    def get(self, provider_id: str) -> Optional[Provider]:
        return self._by_id.get(provider_id)

    def by_username(self, username: str) -> Optional[Provider]:
        for p in self._by_id.values():
            if p.username == username:
                return p
        return None

    def authenticate(self, username: str, password: str) -> Optional[Provider]:
        provider = self.by_username(username)
        if provider is None or not verify_password(password, provider.password_hash):
            return None
        return provider


def get_current_user(
    token: str = Depends(oauth2_scheme),
    providers: ProviderDirectory = Depends(get_providers),
) -> Provider:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        username = payload.get("sub")
        if username is None:
            raise HTTPException(
                status_code=401,
                detail="Invalid token",
                headers={"WWW-Authenticate": "Bearer"},
            )
    except JWTError:
        raise HTTPException(
            status_code=401,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = providers.by_username(username)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user
