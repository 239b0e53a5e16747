"""
HotelOps Session

Single-operator login session, current view and theme preference. The
logged-in user's snapshot lives in the ``currentUser`` session slot so a
restart can restore it once users have hydrated.
"""
import logging
import threading
from typing import Callable, Dict, List, Optional

from ..domain import User, View
from ..storage import SessionSlots
from .errors import AccessDenied, NotAuthenticated, ValidationError

logger = logging.getLogger(__name__)

SLOT_CURRENT_USER = "currentUser"
SLOT_THEME = "theme"
THEMES = ("light", "dark")

# Views that need an administrator
ADMIN_VIEWS = (View.ADMIN,)


class SessionManager:

    def __init__(self, slots: SessionSlots, users_provider: Callable[[], List[User]]):
        self._slots = slots
        self._users = users_provider
        # Never read users while holding this lock: user listeners call back in
        self._lock = threading.RLock()
        self.current_user: Optional[User] = None
        self.view: View = View.LOGIN
        self.selected_audit_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def login(self, email: str, password: str) -> User:
        """Match email case-insensitively and compare the stored password."""
        email = (email or "").strip().lower()
        users = self._users()
        user = next((u for u in users if u.email.lower() == email), None)
        if user is None or user.password != password or not user.is_active:
            logger.info(f"[Session] Login rejected for {email!r}")
            raise NotAuthenticated("Invalid email or password, or account is on hold.")
        with self._lock:
            self._set_user(user)
            self.view = View.DASHBOARD
        logger.info(f"[Session] {user.name} logged in")
        return user

    def logout(self):
        with self._lock:
            if self.current_user is not None:
                logger.info(f"[Session] {self.current_user.name} logged out")
            self.current_user = None
            self.selected_audit_id = None
            self.view = View.LOGIN
            self._slots.remove(SLOT_CURRENT_USER)

    def restore(self) -> Optional[User]:
        """
        Re-validate the stored session against the current user list.

        The stored user must still exist with the same id and email and be
        active; otherwise the session is cleared.
        """
        users = self._users()
        with self._lock:
            snapshot = self._slots.get(SLOT_CURRENT_USER)
            if not snapshot:
                return None
            if not isinstance(snapshot, dict):
                logger.error("[Session] Stored session is malformed, logging out")
                self.logout()
                return None
            valid = next(
                (u for u in users
                 if u.id == snapshot.get("id") and u.email == snapshot.get("email") and u.is_active),
                None,
            )
            if valid is None:
                logger.warning("[Session] Stored session user not found or inactive, logging out")
                self.logout()
                return None
            self._set_user(valid)
            if self.view == View.LOGIN:
                self.view = View.DASHBOARD
            return valid

    def refresh(self, user: User) -> bool:
        """Replace the stored snapshot when ``user`` is the one logged in."""
        with self._lock:
            if self.current_user is None or self.current_user.id != user.id:
                return False
            self._set_user(user)
            return True

    def _set_user(self, user: User):
        self.current_user = user
        self._slots.set(SLOT_CURRENT_USER, user.to_dict(include_password=False))

    def require_user(self) -> User:
        user = self.current_user
        if user is None:
            raise NotAuthenticated()
        return user

    def require_admin(self) -> User:
        user = self.require_user()
        if not user.is_admin:
            raise AccessDenied()
        return user

    def actor_name(self) -> str:
        return self.current_user.name if self.current_user else "Unknown"

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def navigate(self, view, audit_id: Optional[str] = None) -> View:
        try:
            view = View(view)
        except ValueError:
            raise ValidationError(f"Unknown view: {view}", field="view")
        user = self.require_user()
        with self._lock:
            if view in ADMIN_VIEWS and not user.is_admin:
                self.view = View.DASHBOARD
                logger.warning(f"[Session] {user.name} denied access to {view.value}")
                raise AccessDenied()
            self.view = view
            self.selected_audit_id = audit_id if view == View.AUDIT else None
            return self.view

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------

    @property
    def theme(self) -> str:
        return self._slots.get(SLOT_THEME, "light")

    def set_theme(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValidationError(f"Theme must be one of: {', '.join(THEMES)}", field="theme")
        self._slots.set(SLOT_THEME, theme)
        return theme

    def toggle_theme(self) -> str:
        return self.set_theme("light" if self.theme == "dark" else "dark")

    def snapshot(self) -> Dict:
        user = self.current_user
        return {
            "authenticated": user is not None,
            "user": user.to_dict(include_password=False) if user else None,
            "view": self.view.value,
            "selectedAuditId": self.selected_audit_id,
            "theme": self.theme,
        }
