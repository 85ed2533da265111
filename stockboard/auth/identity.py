# stockboard/auth/identity.py
from __future__ import annotations

import json
import logging
import re
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from passlib.hash import pbkdf2_sha256

from stockboard.errors import AuthError, ValidationError
from stockboard.inventory.record_store import ListenerRef, Subscription, listener_ref
from stockboard.utils.io_utils import atomic_write_text

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_ACCOUNT_KEYS = {"uid", "email", "password_hash"}

OwnerListener = Callable[[Optional["Owner"]], None]

# providers opened on the same accounts file share one lock
_file_locks: Dict[Path, threading.RLock] = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = path.resolve()
    with _file_locks_guard:
        return _file_locks.setdefault(key, threading.RLock())


@dataclass(frozen=True)
class Owner:
    """An authenticated user; owns one collection of inventory records."""
    uid: str
    email: str
    display_name: Optional[str] = None

    @property
    def label(self) -> str:
        """Name shown in the header: display name, else the local part of the email."""
        return self.display_name or self.email.split("@")[0]


def normalize_email(email: Any) -> str:
    return str(email or "").strip().lower()


def validate_credentials(email: Any, password: Any) -> str:
    """Return the normalized email. Raises ValidationError for a bad email or short password."""
    normalized = normalize_email(email)
    if not _EMAIL_RE.match(normalized):
        raise ValidationError("email", "Invalid email.")
    if len(str(password or "")) < MIN_PASSWORD_LENGTH:
        raise ValidationError("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    return normalized


class IdentityProvider:
    """
    Email + password identities with a "current owner" stream.

    Accounts are kept as dicts: {uid, email, display_name, password_hash}, where
    password_hash is a passlib pbkdf2_sha256 string. Subclasses persist them by
    overriding `_persist` and pick up changes made elsewhere in `_refresh`.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._accounts: Dict[str, Dict[str, Any]] = {}
        self._current: Optional[Owner] = None
        self._listeners: List[ListenerRef] = []

    def _persist(self, accounts: List[Dict[str, Any]]) -> None:
        """Persist all accounts. Raise OSError to abort the sign-up."""

    def _refresh(self) -> None:
        """Reload accounts from the backing store. Called with `_lock` held."""

    # ---------------------------
    # Current owner stream
    # ---------------------------
    @property
    def current_owner(self) -> Optional[Owner]:
        return self._current

    def subscribe(self, listener: OwnerListener, weak: bool = False) -> Subscription:
        """
        Call `listener` with the current owner now and on every sign-in/sign-out.
        weak=True holds a bound method weakly, like RecordStore.subscribe.
        """
        ref = listener_ref(listener, weak)
        with self._lock:
            self._listeners.append(ref)
            current = self._current

        def _release() -> None:
            with self._lock:
                self._listeners = [r for r in self._listeners if r is not ref]

        self._deliver(listener, current)
        return Subscription(_release)

    def _deliver(self, listener: OwnerListener, owner: Optional[Owner]) -> None:
        try:
            listener(owner)
        except Exception:
            logger.exception("Identity listener %r failed", listener)

    def _set_current(self, owner: Optional[Owner]) -> None:
        with self._lock:
            if owner == self._current:
                return
            self._current = owner
            resolved = [(ref, ref()) for ref in self._listeners]
            self._listeners = [ref for ref, listener in resolved if listener is not None]
            listeners = [listener for _, listener in resolved if listener is not None]
        for listener in listeners:
            self._deliver(listener, owner)

    # ---------------------------
    # Sign up / in / out
    # ---------------------------
    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Owner:
        """Register a new account and sign it in."""
        normalized = validate_credentials(email, password)
        name = str(display_name).strip() if display_name and str(display_name).strip() else None

        with self._lock:
            self._refresh()
            if normalized in self._accounts:
                raise AuthError(AuthError.EMAIL_IN_USE)
            account = {
                "uid": uuid.uuid4().hex,
                "email": normalized,
                "display_name": name,
                "password_hash": pbkdf2_sha256.hash(str(password)),
            }
            accounts = dict(self._accounts)
            accounts[normalized] = account
            try:
                self._persist(list(accounts.values()))
            except OSError as exc:
                logger.exception("Failed to save account for %s", normalized)
                raise AuthError("internal-error") from exc
            self._accounts = accounts

        logger.info("Signed up owner %s", account["uid"])
        owner = Owner(uid=account["uid"], email=normalized, display_name=name)
        self._set_current(owner)
        return owner

    def sign_in(self, email: str, password: str) -> Owner:
        """Sign in. Unknown email and wrong password give the same error."""
        normalized = normalize_email(email)
        with self._lock:
            self._refresh()
            account = self._accounts.get(normalized)
        if account is None or not pbkdf2_sha256.verify(str(password or ""), account["password_hash"]):
            logger.info("Failed sign-in for %s", normalized)
            raise AuthError(AuthError.INVALID_CREDENTIAL)

        owner = Owner(uid=account["uid"], email=account["email"], display_name=account.get("display_name"))
        self._set_current(owner)
        logger.info("Signed in owner %s", owner.uid)
        return owner

    def sign_out(self) -> None:
        if self._current is not None:
            logger.info("Signed out owner %s", self._current.uid)
        self._set_current(None)


class InMemoryIdentityProvider(IdentityProvider):
    """Accounts live only in memory (tests, demos)."""


class JsonIdentityProvider(IdentityProvider):
    """
    Accounts stored in a JSON list file, written atomically.

    Several providers may share one file (one per browser session): they share a
    lock, and re-read the file before every sign-up and sign-in.
    """

    def __init__(self, storage_file: Union[str, Path] = "data/accounts.json") -> None:
        super().__init__()
        self.storage_file = Path(storage_file)
        self._lock = _lock_for(self.storage_file)
        with self._lock:
            self._refresh()

    def _refresh(self) -> None:
        self._accounts = self._read()

    def _read(self) -> Dict[str, Dict[str, Any]]:
        if not self.storage_file.exists():
            return {}
        try:
            data = json.loads(self.storage_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to load accounts from %s. Keeping the accounts in memory.", self.storage_file)
            return self._accounts
        if not isinstance(data, list):
            logger.warning("Accounts file %s doesn't contain a list. Ignoring.", self.storage_file)
            return {}

        accounts: Dict[str, Dict[str, Any]] = {}
        for row in data:
            if not isinstance(row, dict) or not _ACCOUNT_KEYS <= set(row):
                logger.warning("Skipping malformed account row in %s", self.storage_file)
                continue
            accounts[normalize_email(row["email"])] = row
        return accounts

    def _persist(self, accounts: List[Dict[str, Any]]) -> None:
        atomic_write_text(self.storage_file, json.dumps(accounts, ensure_ascii=False, indent=2))
