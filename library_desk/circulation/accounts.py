"""
User accounts and login sessions.

Passwords are stored as bcrypt hashes.  Sessions are opaque random tokens held
in memory for the life of the process; there is no expiry.
"""

import logging
import secrets
import threading

import bcrypt

from library_desk.circulation.errors import Conflict, InvalidArgument
from library_desk.circulation.models import User

logger = logging.getLogger(__name__)

LIBRARIAN = "librarian"
STUDENT = "student"


class Accounts:
    def __init__(self, bcrypt_rounds: int = 12) -> None:
        self._lock = threading.Lock()
        self._users: dict[int, User] = {}
        self._sessions: dict[str, int] = {}
        self._bcrypt_rounds = bcrypt_rounds

    # ── Users ────────────────────────────────────────────────────────────────

    def register(
        self, name: str, email: str, password: str, role: str | None = None
    ) -> User:
        """
        Create a user.  Only the exact role ``"librarian"`` grants librarian
        rights; anything else registers a student.

        Raises ``InvalidArgument`` for a blank name, email or password and
        ``Conflict`` if the email is already registered.
        """
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email or not password:
            raise InvalidArgument("name, email, password are required")

        password_hash = bcrypt.hashpw(
            password.encode(), bcrypt.gensalt(rounds=self._bcrypt_rounds)
        )

        with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise Conflict("User with this email already exists")
            user = User(
                id=len(self._users) + 1,
                name=name,
                email=email,
                password_hash=password_hash,
                role=LIBRARIAN if role == LIBRARIAN else STUDENT,
            )
            self._users[user.id] = user

        logger.info("Registered user %d <%s> as %s", user.id, user.email, user.role)
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        with self._lock:
            user = next((u for u in self._users.values() if u.email == email), None)
        if user is None:
            return None
        if not bcrypt.checkpw(password.encode(), user.password_hash):
            return None
        return user

    def get(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def list(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    # ── Sessions ─────────────────────────────────────────────────────────────

    def open_session(self, user: User) -> str:
        token = secrets.token_hex(32)
        with self._lock:
            self._sessions[token] = user.id
        return token

    def close_session(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def principal(self, token: str | None) -> User | None:
        """Resolve a session token to its user, or ``None``."""
        if not token:
            return None
        with self._lock:
            user_id = self._sessions.get(token)
            return self._users.get(user_id) if user_id is not None else None
