# src/taskboard/identity/session.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.ports import IdentityProvider, Session, SessionCallback
from ..errors import CollaboratorError, ProfileNotFound
from ..storage.mapping import user_from_profile
from ..users.user_models import User
from ..users.user_store import UserStore

logger = logging.getLogger(__name__)

UserListener = Callable[[User | None], None]


def resolve_user(session: Session, users: UserStore) -> User:
    """
    Map an authenticated session to a domain User.

    Raises ProfileNotFound when the subject has no profile record.
    Name defaults to the email's local part; role defaults to member.
    """
    rec = users.get_profile_record(session.subject_id)
    if rec is None:
        raise ProfileNotFound(session.subject_id)
    return user_from_profile(rec, email=session.email)


class SessionTracker:
    """
    Keeps "who is logged in" in sync with the identity collaborator.

    Resolution runs once on start() and again on every session change. A
    session without a profile counts as logged out. Collaborator failures are
    logged and also leave nobody logged in; there is no caller to raise to
    from inside a change callback.
    """

    def __init__(self, identity: IdentityProvider, users: UserStore) -> None:
        self._identity = identity
        self._users = users
        self._current: User | None = None
        self._listeners: list[UserListener] = []
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def current_user(self) -> User | None:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def add_listener(self, listener: UserListener) -> None:
        self._listeners.append(listener)

    def start(self) -> User | None:
        if self._unsubscribe is None:
            self._unsubscribe = self._identity.subscribe(self._on_session_change)
        self._apply(self._identity.current_session())
        return self._current

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def refresh(self) -> User | None:
        """Re-read the profile for the current session (e.g. after a profile update)."""
        self._apply(self._identity.current_session())
        return self._current

    def _on_session_change(self, session: Session | None) -> None:
        logger.info("Session changed subject=%s", session.subject_id if session else None)
        self._apply(session)

    def _apply(self, session: Session | None) -> None:
        user: User | None = None
        if session is not None:
            try:
                user = resolve_user(session, self._users)
            except ProfileNotFound:
                logger.warning("No profile for subject=%s; treating as logged out", session.subject_id)
            except CollaboratorError:
                logger.exception("Profile lookup failed subject=%s", session.subject_id)

        self._current = user
        for listener in list(self._listeners):
            try:
                listener(user)
            except Exception:
                logger.exception("Session listener failed")


class LocalIdentityProvider:
    """
    In-process identity collaborator (email sign-in, no password check).

    Accounts map an email to a subject id. Subscribers are called on every
    sign-in and sign-out.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, str] = {}
        self._session: Session | None = None
        self._subscribers: list[SessionCallback] = []

    def register(self, email: str, subject_id: str) -> None:
        self._accounts[email.strip().lower()] = subject_id

    def current_session(self) -> Session | None:
        return self._session

    def subscribe(self, callback: SessionCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def sign_in(self, email: str) -> Session | None:
        """Returns the new session, or None for an unknown email (current session is kept)."""
        key = (email or "").strip().lower()
        subject_id = self._accounts.get(key)
        if subject_id is None:
            logger.info("Sign-in rejected for unknown email=%s", key)
            return None
        self._session = Session(subject_id=subject_id, email=key)
        self._notify()
        return self._session

    def sign_out(self) -> None:
        if self._session is None:
            return
        self._session = None
        self._notify()

    def _notify(self) -> None:
        for cb in list(self._subscribers):
            cb(self._session)
