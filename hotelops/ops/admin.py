# ============================================================================
# HotelOps - Admin Operations
# ============================================================================
# Hotels, departments and user accounts. Callers are expected to have
# checked that the acting user is an administrator.
# ============================================================================

import dataclasses
import logging
from typing import Optional

from ..domain import User, UserRole, UserStatus, new_id
from .errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

ON_HOLD_LOGOUT_MESSAGE = "Your account has been put on hold. Logging you out."


def initials(name: str) -> str:
    """First letters of up to the first two words, uppercased."""
    return "".join(part[0] for part in (name or "").split())[:2].upper()


# ============================================================================
# Hotels / departments
# ============================================================================

def _add_name(setting, name: str) -> bool:
    name = (name or "").strip()
    if not name or name in setting.value:
        return False
    setting.update(lambda names: names + [name])
    return True


def _remove_name(setting, name: str) -> bool:
    if name not in setting.value:
        return False
    setting.update(lambda names: [n for n in names if n != name])
    return True


def add_hotel(state, name: str) -> bool:
    """Append a hotel. Blank and duplicate names are ignored (returns False)."""
    return _add_name(state.hotels, name)


def delete_hotel(state, name: str) -> bool:
    return _remove_name(state.hotels, name)


def add_department(state, name: str) -> bool:
    return _add_name(state.departments, name)


def delete_department(state, name: str) -> bool:
    return _remove_name(state.departments, name)


# ============================================================================
# Users
# ============================================================================

def get_user(state, user_id: str) -> User:
    for user in state.users.value:
        if user.id == user_id:
            return user
    raise NotFound(f"User {user_id} not found")


def _role(value) -> UserRole:
    try:
        return UserRole(value or UserRole.STAFF.value)
    except ValueError:
        raise ValidationError(f"Invalid role: {value}", field="role")


def add_user(
    state,
    name: str,
    role: str = "staff",
    department: Optional[str] = None,
    email: str = "",
    password: str = "",
) -> User:
    if not (name or "").strip():
        raise ValidationError("Please provide a name.", field="name")
    email = (email or "").strip()
    if email and any(u.email.lower() == email.lower() for u in state.users.value):
        raise ValidationError(f"A user with email {email} already exists.", field="email")
    if department is None:
        departments = state.departments.value
        department = departments[0] if departments else "Kitchen"

    user = User(
        id=new_id("u"),
        name=name,
        role=_role(role),
        avatar=initials(name),
        email=email,
        password=password or "",
        department=department,
        status=UserStatus.ACTIVE,
    )
    state.users.update(lambda users: users + [user])
    logger.info(f"[Admin] Added user {user.id} '{name}' ({user.role.value})")
    return user


def update_user(
    state,
    user_id: str,
    name: str,
    role: Optional[str] = None,
    department: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    """Edit name, role and department. Status is left as it was."""
    if not (name or "").strip():
        raise ValidationError("Please provide a name.", field="name")
    existing = get_user(state, user_id)
    updated = User(
        id=existing.id,
        name=name,
        role=_role(role) if role else existing.role,
        avatar=initials(name),
        email=existing.email if email is None else email.strip(),
        password=existing.password if not password else password,
        department=department or existing.department,
        status=existing.status,
    )
    # Refresh first: the users listener re-validates the session against the new email
    state.session.refresh(updated)
    state.users.update(lambda users: [updated if u.id == user_id else u for u in users])
    logger.info(f"[Admin] Updated user {user_id}")
    return updated


def delete_user(state, user_id: str) -> bool:
    """Remove a user. Returns True when the operator deleted their own account."""
    get_user(state, user_id)
    current = state.session.current_user
    state.users.update(lambda users: [u for u in users if u.id != user_id])
    logged_out = current is not None and current.id == user_id
    if logged_out:
        state.session.logout()
    logger.info(f"[Admin] Deleted user {user_id}")
    return logged_out


def toggle_user_status(state, user_id: str) -> User:
    """Flip active and on-hold. Putting the operator on hold logs them out."""
    existing = get_user(state, user_id)
    new_status = UserStatus.ON_HOLD if existing.status == UserStatus.ACTIVE else UserStatus.ACTIVE
    updated = dataclasses.replace(existing, status=new_status)
    current = state.session.current_user
    state.users.update(lambda users: [updated if u.id == user_id else u for u in users])

    if current is not None and current.id == user_id and new_status == UserStatus.ON_HOLD:
        logger.warning(f"[Admin] {ON_HOLD_LOGOUT_MESSAGE} ({user_id})")
        state.session.logout()
    logger.info(f"[Admin] User {user_id} is now {new_status.value}")
    return updated
