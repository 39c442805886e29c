# exam_portal/services/session_store.py
from typing import List, Optional
from datetime import datetime, timezone
import asyncio
import base64
import hashlib
import json
import logging
import uuid
import bcrypt
from ..config import settings
from ..database.local_storage import LocalStorage
from ..schemas.exam_schemas import AuthState, Role, StoredUser, User
from .errors import DuplicateEmailError, InvalidCredentialsError

logger = logging.getLogger(__name__)

USERS_STORAGE_KEY = "exam-system-users"
AUTH_STORAGE_KEY = "auth-storage"


def _prehash(password: str) -> bytes:
    # bcrypt only accepts 72 bytes; a base64 SHA-256 digest is always 44
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class SessionStore:
    """Current identity plus the registry of known users.

    The session lives under AUTH_STORAGE_KEY so a new store built over the
    same storage picks up where the previous one left off.
    """

    def __init__(self, storage: LocalStorage, auth_delay: Optional[float] = None):
        self.storage = storage
        self.auth_delay = settings.auth_delay_seconds if auth_delay is None else auth_delay

    # Session state

    def _load_state(self) -> AuthState:
        raw = self.storage.get_item(AUTH_STORAGE_KEY)
        return AuthState.model_validate_json(raw) if raw else AuthState()

    def _save_state(self, state: AuthState) -> None:
        self.storage.set_item(AUTH_STORAGE_KEY, state.model_dump_json())

    @property
    def user(self) -> Optional[User]:
        return self._load_state().user

    @property
    def is_authenticated(self) -> bool:
        return self._load_state().isAuthenticated

    # Registry

    def _get_stored_users(self) -> List[StoredUser]:
        raw = self.storage.get_item(USERS_STORAGE_KEY)
        return [StoredUser.model_validate(u) for u in json.loads(raw)] if raw else []

    def _save_user(self, user: StoredUser) -> None:
        users = self._get_stored_users()
        users.append(user)
        self.storage.set_item(
            USERS_STORAGE_KEY, json.dumps([u.model_dump(mode="json") for u in users])
        )

    def _user_exists(self, email: str) -> bool:
        return any(u.email == email for u in self._get_stored_users())

    def _find_user(self, email: str, password: str, role: Role) -> Optional[StoredUser]:
        for stored in self._get_stored_users():
            if stored.email == email and stored.role == role and verify_password(password, stored.password_hash):
                return stored
        return None

    def get_users(self, role: Optional[Role] = None) -> List[User]:
        users = self._get_stored_users()
        if role:
            users = [u for u in users if u.role == role]
        return [u.to_user() for u in users]

    # Transitions

    async def _simulate_latency(self):
        if self.auth_delay > 0:
            await asyncio.sleep(self.auth_delay)

    async def login(self, email: str, password: str, role: Role) -> User:
        await self._simulate_latency()

        stored = self._find_user(email, password, Role(role))
        if not stored:
            logger.warning(f"Failed login attempt for {email} as {Role(role).value}")
            raise InvalidCredentialsError()

        user = stored.to_user()
        self._save_state(AuthState(user=user, isAuthenticated=True))
        logger.info(f"User {user.id} logged in as {user.role.value}")
        return user

    async def register(self, name: str, email: str, password: str, role: Role) -> User:
        await self._simulate_latency()

        if self._user_exists(email):
            logger.warning(f"Registration rejected, email already in use: {email}")
            raise DuplicateEmailError()

        stored = StoredUser(
            id=uuid.uuid4().hex,
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=Role(role),
            created_at=datetime.now(timezone.utc),
        )
        self._save_user(stored)

        user = stored.to_user()
        self._save_state(AuthState(user=user, isAuthenticated=True))
        logger.info(f"Registered user {user.id} as {user.role.value}")
        return user

    def logout(self) -> None:
        self._save_state(AuthState())
        logger.info("Session cleared")
