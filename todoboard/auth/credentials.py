"""
Credential store - username to bcrypt password hash.
"""
import logging
from typing import Optional, Dict, Any

import bcrypt

from todoboard.storage.interface import StorageInterface

logger = logging.getLogger(__name__)


class CredentialStore:
    """Verifies Basic-Auth credentials against stored bcrypt hashes."""

    def __init__(self, storage: StorageInterface, rounds: int = 10):
        self.storage = storage
        self.rounds = rounds
        # Checked when the username is unknown so both paths cost one bcrypt round.
        self._dummy_hash = self.hash_password("todoboard-dummy-password")

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt."""
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=self.rounds)).decode('utf-8')

    def _check_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
        except (ValueError, TypeError):
            return False

    def verify(self, username: str, password: str) -> bool:
        """
        Check a username/password pair.

        Returns:
            True only if the user exists and the password matches.
            Lookup or comparison errors are logged and count as a mismatch.
        """
        try:
            user = self.storage.get_user_by_username(username)
        except Exception:
            logger.error("Credential lookup failed", exc_info=True)
            return False

        if not user:
            self._check_password(password, self._dummy_hash)
            return False
        return self._check_password(password, user["password_hash"])

    def resolve_identity(self, username: str) -> Optional[Dict[str, Any]]:
        """Return ``{"id", "username"}`` for a username, or None."""
        user = self.storage.get_user_by_username(username)
        if not user:
            return None
        return {"id": user["id"], "username": user["username"]}

    def create_user(self, username: str, password: str) -> int:
        """
        Create a user account.

        Raises:
            ValueError: If the username is blank or already exists
        """
        if not username or not username.strip():
            raise ValueError("Username is required")
        if self.storage.get_user_by_username(username):
            raise ValueError(f"Username '{username}' already exists")
        user_id = self.storage.create_user(username, self.hash_password(password))
        logger.info(f"Created user {user_id} with username '{username}'")
        return user_id

    def delete_user(self, user_id: int) -> bool:
        """Delete a user account (cascades to groups and tasks)."""
        deleted = self.storage.delete_user(user_id)
        if deleted:
            logger.info(f"Deleted user {user_id} and all owned groups and tasks")
        return deleted

    def ensure_default_user(self, username: str, password: str) -> Optional[int]:
        """
        Seed the default account if it does not exist yet.

        Returns:
            The new user ID, or None if the account was already present.
        """
        if self.storage.get_user_by_username(username):
            return None
        user_id = self.create_user(username, password)
        logger.warning(
            f"Default user created (username: {username}). "
            "Its password is the well-known default; change TODO_DEFAULT_PASSWORD "
            "or replace the account before exposing the service."
        )
        return user_id
