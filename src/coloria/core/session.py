"""Authentication provider and the per-session user context.

The library only ever reads ``current_user.id`` as the owner id and gates
its actions on a user being present. ``SessionContext`` is created once per
UI session, mounted when the session starts and unmounted when it ends, and
passed explicitly to whoever needs it.
"""

import logging
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from pwdlib.hashers.bcrypt import BcryptHasher

from .errors import AuthenticationError, TransportError, ValidationError

logger = logging.getLogger(__name__)

# bcrypt: deliberately slow hash
pwd_hash = BcryptHasher()


@dataclass(frozen=True)
class User:
    """A signed-in user."""

    id: str
    email: str
    full_name: str = ""


class LocalAuthProvider:
    """Email/password accounts stored next to the library in SQLite."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()

    def _initialize_db(self) -> None:
        """Create the users table if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    full_name TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL
                )
                """)
            conn.commit()

    def sign_up(
        self, email: str, password: str, confirm_password: str, full_name: str = ""
    ) -> User:
        """Create an account.

        Raises:
            ValidationError: Missing email/password, or passwords differ
            AuthenticationError: The account could not be created
        """
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Email and password are required")
        if password != confirm_password:
            raise ValidationError("Passwords do not match")

        user = User(id=str(uuid.uuid4()), email=email, full_name=(full_name or "").strip())
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO users (id, email, password_hash, full_name, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        user.id,
                        user.email,
                        pwd_hash.hash(password),
                        user.full_name,
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
                conn.commit()
        except sqlite3.IntegrityError as e:
            logger.warning(f"Sign up rejected for {email}: {e}")
            raise AuthenticationError("Failed to create an account. Please try again.") from e
        except sqlite3.Error as e:
            logger.error(f"Error creating account for {email}: {e}")
            raise TransportError(f"Failed to create an account: {e}") from e

        logger.info(f"Created account {user.id}")
        return user

    def sign_in(self, email: str, password: str) -> User:
        """Check credentials and return the matching user.

        Raises:
            AuthenticationError: Unknown email or wrong password
        """
        email = (email or "").strip().lower()
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT id, email, password_hash, full_name FROM users WHERE email = ?",
                    (email,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error signing in {email}: {e}")
            raise TransportError(f"Failed to sign in: {e}") from e

        if row is None or not pwd_hash.verify(password or "", row[2]):
            raise AuthenticationError("Invalid email or password")

        return User(id=row[0], email=row[1], full_name=row[3])


class SessionContext:
    """Session-scoped view of the signed-in user.

    ``loading`` is True until :meth:`mount` runs. Consumers read
    :attr:`current_user` (``None`` when signed out) or call
    :meth:`require_user` to gate an action.
    """

    def __init__(self, provider: LocalAuthProvider):
        self.provider = provider
        self.current_user: User | None = None
        self.loading = True

    def mount(self) -> "SessionContext":
        self.loading = False
        logger.debug("Session mounted")
        return self

    def unmount(self) -> None:
        self.current_user = None
        self.loading = True
        logger.debug("Session unmounted")

    @property
    def owner_id(self) -> str | None:
        return self.current_user.id if self.current_user else None

    def require_user(self) -> User:
        if self.current_user is None:
            raise AuthenticationError()
        return self.current_user

    def sign_in(self, email: str, password: str) -> User:
        self.current_user = self.provider.sign_in(email, password)
        logger.info(f"Signed in {self.current_user.id}")
        return self.current_user

    def sign_up(
        self, email: str, password: str, confirm_password: str, full_name: str = ""
    ) -> User:
        self.current_user = self.provider.sign_up(email, password, confirm_password, full_name)
        return self.current_user

    def sign_out(self) -> None:
        if self.current_user is not None:
            logger.info(f"Signed out {self.current_user.id}")
        self.current_user = None
