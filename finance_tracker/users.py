from __future__ import annotations

import hashlib
import hmac
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from finance_tracker.core.models import User, format_amount, to_amount
from finance_tracker.core.validation import (
    validate_email,
    validate_name,
    validate_password,
)
from finance_tracker.store import StoreIOError

logger = logging.getLogger(__name__)

_HASH_NAME = "sha256"
_ITERATIONS = 120_000


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac(_HASH_NAME, password.encode("utf-8"), salt, _ITERATIONS)
    return f"pbkdf2_{_HASH_NAME}${_ITERATIONS}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        scheme, iterations, salt_hex, digest_hex = stored.split("$")
        hash_name = scheme.split("_", 1)[1]
        digest = hashlib.pbkdf2_hmac(
            hash_name, password.encode("utf-8"), bytes.fromhex(salt_hex), int(iterations)
        )
    except (ValueError, IndexError):
        logger.warning("Unrecognized password hash format")
        return False
    return hmac.compare_digest(digest.hex(), digest_hex)


class UserRepository:
    """Registered users and their budgets, persisted to a YAML file.

    Create one per session and pass it to whatever needs it.
    """

    def __init__(self, path) -> None:
        self.path = Path(path)
        self._users: List[User] = []
        self._next_id = 1
        self.load()

    @property
    def users(self) -> List[User]:
        return list(self._users)

    def load(self) -> None:
        self._users = []
        self._next_id = 1
        if not self.path.exists() or self.path.stat().st_size == 0:
            return
        try:
            with self.path.open("r", encoding="utf-8") as fp:
                data = yaml.safe_load(fp) or []
            self._users = [self._from_dict(entry) for entry in data]
        except (OSError, yaml.YAMLError, TypeError, KeyError, ValueError) as exc:
            logger.warning("Could not load users from %s: %s", self.path, exc)
            self._users = []
        self._next_id = max((u.id for u in self._users), default=0) + 1

    def save(self) -> None:
        payload = [self._to_dict(u) for u in self._users]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as fp:
                yaml.safe_dump(payload, fp, sort_keys=False)
        except OSError as exc:
            logger.error("Could not save users to %s: %s", self.path, exc)
            raise StoreIOError(f"Could not save users to {self.path}: {exc}") from exc

    @staticmethod
    def _from_dict(entry: dict) -> User:
        return User(
            id=int(entry["id"]),
            name=str(entry["name"]),
            email=str(entry["email"]),
            password_hash=str(entry["password_hash"]),
            budgets={
                str(cat): to_amount(amount)
                for cat, amount in (entry.get("budgets") or {}).items()
            },
        )

    @staticmethod
    def _to_dict(user: User) -> dict:
        return {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "password_hash": user.password_hash,
            "budgets": {cat: format_amount(amt) for cat, amt in user.budgets.items()},
        }

    def find_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().casefold()
        return next((u for u in self._users if u.email.casefold() == wanted), None)

    def email_exists(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def register(self, name: str, email: str, password: str) -> User:
        for result in (validate_name(name), validate_email(email), validate_password(password)):
            if not result.ok:
                raise ValueError(result.reason)
        if self.email_exists(email):
            raise ValueError("Email already exists.")

        user = User(
            id=self._next_id,
            name=name.strip(),
            email=email.strip(),
            password_hash=hash_password(password),
        )
        self._users.append(user)
        self._next_id += 1
        self.save()
        logger.info("Registered user %s", user)
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        user = self.find_by_email(email or "")
        if user is None or not verify_password(password or "", user.password_hash):
            return None
        return user

    def _get(self, user_id: int) -> User:
        for user in self._users:
            if user.id == user_id:
                return user
        raise KeyError(f"No user with id {user_id}")

    def set_budget(self, user_id: int, category: str, amount) -> Decimal:
        if not category or not category.strip():
            raise ValueError("Budget category cannot be empty.")
        user = self._get(user_id)
        value = to_amount(amount)
        user.budgets[category.strip()] = value
        self.save()
        return value

    def budgets(self, user_id: int) -> Dict[str, Decimal]:
        return dict(self._get(user_id).budgets)
