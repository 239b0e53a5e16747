# ============================================================================
# HotelOps Domain - Entities
# ============================================================================
# Records are persisted as camelCase JSON objects, one per row, keyed by id.
# ============================================================================

import datetime
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class AuditStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class InspectionResult(str, Enum):
    PASS = "Pass"
    FAIL = "Fail"
    NA = "N/A"


class IncidentStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    VERIFIED = "Verified"


class IncidentPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class IncidentType(str, Enum):
    EMERGENCY = "Emergency"
    DAILY_LOG = "Daily Log"


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


class UserStatus(str, Enum):
    ACTIVE = "active"
    ON_HOLD = "on-hold"


class View(str, Enum):
    LOGIN = "login"
    DASHBOARD = "dashboard"
    AUDIT = "audit"
    AUDIT_LIST = "auditList"
    INCIDENTS = "incidents"
    SOP = "sop"
    ADMIN = "admin"
    COLLECTIONS = "collections"
    REPORTS = "reports"


PRIORITY_ORDER = {
    IncidentPriority.CRITICAL: 4,
    IncidentPriority.HIGH: 3,
    IncidentPriority.MEDIUM: 2,
    IncidentPriority.LOW: 1,
}

UNASSIGNED = "Unassigned"


# ============================================================================
# Identifiers & timestamps
# ============================================================================

_id_lock = threading.Lock()
_last_stamp = 0


def _next_stamp() -> int:
    """Millisecond timestamp, strictly increasing within the process."""
    global _last_stamp
    with _id_lock:
        stamp = int(time.time() * 1000)
        if stamp <= _last_stamp:
            stamp = _last_stamp + 1
        _last_stamp = stamp
        return stamp


def new_id(prefix: str) -> str:
    return f"{prefix}-{_next_stamp()}"


def new_item_ids(count: int) -> List[str]:
    stamp = _next_stamp()
    return [f"item-{stamp}-{idx}" for idx in range(count)]


def utc_now_iso() -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def today_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).date().isoformat()


def parse_timestamp(value: Optional[str]) -> Optional[datetime.datetime]:
    """Parse the ISO-ish timestamps used in records. None when unparseable."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.datetime.fromisoformat(text)
    except ValueError:
        return None


def _enum_or_none(enum_cls, value):
    if value is None or value == "":
        return None
    return enum_cls(value)


# ============================================================================
# Assignee reference
# ============================================================================

@dataclass
class AssigneeRef:
    """
    Display name plus an optional stable user id.

    When ``user_id`` resolves against the user list, the user's current name
    wins over the stored one, so renames carry through to assignments.
    """
    name: str
    user_id: Optional[str] = None

    @classmethod
    def from_value(cls, value: Any) -> Optional["AssigneeRef"]:
        if value is None:
            return None
        if isinstance(value, AssigneeRef):
            return value
        if isinstance(value, str):
            return cls(name=value) if value.strip() else None
        if isinstance(value, dict):
            name = value.get("name") or ""
            user_id = value.get("userId") or None
            if not name and not user_id:
                return None
            return cls(name=name, user_id=user_id)
        raise TypeError(f"Cannot build an assignee from {type(value).__name__}")

    @classmethod
    def for_name(cls, name: Optional[str], users: Iterable["User"] = ()) -> Optional["AssigneeRef"]:
        """Bind a typed name to the first user carrying it, if any."""
        if not name or not name.strip():
            return None
        name = name.strip()
        for user in users:
            if user.name == name:
                return cls(name=name, user_id=user.id)
        return cls(name=name)

    def to_value(self) -> Dict[str, Any]:
        return {"name": self.name, "userId": self.user_id}

    def display_name(self, users_by_id: Optional[Dict[str, "User"]] = None) -> str:
        if self.user_id and users_by_id and self.user_id in users_by_id:
            return users_by_id[self.user_id].name
        return self.name

    def refers_to(self, user: "User") -> bool:
        if self.user_id:
            return self.user_id == user.id
        return self.name == user.name


def users_index(users: Optional[Iterable["User"]]) -> Dict[str, "User"]:
    return {u.id: u for u in (users or ())}


def assignee_label(ref: Optional[AssigneeRef], users_by_id: Optional[Dict[str, "User"]] = None) -> str:
    return ref.display_name(users_by_id) if ref else UNASSIGNED


# ============================================================================
# Records
# ============================================================================

@dataclass
class InspectionItem:
    id: str
    description: str
    result: Optional[InspectionResult] = None
    temperature: Optional[float] = None
    photo: Optional[str] = None
    notes: str = ""
    assignee: Optional[AssigneeRef] = None

    @classmethod
    def from_dict(cls, d: Dict) -> "InspectionItem":
        return cls(
            id=d["id"],
            description=d.get("description", ""),
            result=_enum_or_none(InspectionResult, d.get("result")),
            temperature=d.get("temperature"),
            photo=d.get("photo"),
            notes=d.get("notes") or "",
            assignee=AssigneeRef.from_value(d.get("assignee")),
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "description": self.description,
            "result": self.result.value if self.result else None,
            "temperature": self.temperature,
            "photo": self.photo,
            "notes": self.notes,
            "assignee": self.assignee.to_value() if self.assignee else None,
        }


@dataclass
class Audit:
    id: str
    title: str
    department: str
    status: AuditStatus = AuditStatus.PENDING
    due_date: str = ""
    items: List[InspectionItem] = field(default_factory=list)
    completed_date: Optional[str] = None
    hotel_name: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict) -> "Audit":
        return cls(
            id=d["id"],
            title=d.get("title", ""),
            department=d.get("department", ""),
            status=AuditStatus(d.get("status") or AuditStatus.PENDING.value),
            due_date=d.get("dueDate", ""),
            items=[InspectionItem.from_dict(i) for i in d.get("items", [])],
            completed_date=d.get("completedDate"),
            hotel_name=d.get("hotelName"),
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "department": self.department,
            "status": self.status.value,
            "dueDate": self.due_date,
            "items": [i.to_dict() for i in self.items],
            "completedDate": self.completed_date,
            "hotelName": self.hotel_name,
        }


@dataclass
class AuditTemplateItem:
    description: str
    assignee: Optional[AssigneeRef] = None

    @classmethod
    def from_dict(cls, d: Dict) -> "AuditTemplateItem":
        return cls(description=d.get("description", ""), assignee=AssigneeRef.from_value(d.get("assignee")))

    def to_dict(self) -> Dict:
        return {
            "description": self.description,
            "assignee": self.assignee.to_value() if self.assignee else None,
        }


@dataclass
class AuditTemplate:
    id: str
    title: str
    department: str
    items: List[AuditTemplateItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict) -> "AuditTemplate":
        return cls(
            id=d["id"],
            title=d.get("title", ""),
            department=d.get("department", ""),
            items=[AuditTemplateItem.from_dict(i) for i in d.get("items", [])],
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "department": self.department,
            "items": [i.to_dict() for i in self.items],
        }


@dataclass
class IncidentActivity:
    id: str
    timestamp: str
    action: str
    user: str
    details: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict) -> "IncidentActivity":
        return cls(
            id=d["id"],
            timestamp=d.get("timestamp", ""),
            action=d.get("action", ""),
            user=d.get("user", ""),
            details=d.get("details"),
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "action": self.action,
            "user": self.user,
            "details": self.details,
        }


@dataclass
class Incident:
    id: str
    title: str
    description: str
    department: str
    assignee: Optional[AssigneeRef] = None
    status: IncidentStatus = IncidentStatus.OPEN
    priority: IncidentPriority = IncidentPriority.HIGH
    type: IncidentType = IncidentType.EMERGENCY
    reported_at: str = ""
    photo: Optional[str] = None
    # Newest first
    history: List[IncidentActivity] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict) -> "Incident":
        return cls(
            id=d["id"],
            title=d.get("title", ""),
            description=d.get("description", ""),
            department=d.get("department", ""),
            assignee=AssigneeRef.from_value(d.get("assignee")),
            status=IncidentStatus(d.get("status") or IncidentStatus.OPEN.value),
            priority=IncidentPriority(d.get("priority") or IncidentPriority.MEDIUM.value),
            # Older records predate the type field
            type=IncidentType(d.get("type") or IncidentType.EMERGENCY.value),
            reported_at=d.get("reportedAt", ""),
            photo=d.get("photo"),
            history=[IncidentActivity.from_dict(h) for h in d.get("history") or []],
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "department": self.department,
            "assignee": self.assignee.to_value() if self.assignee else None,
            "status": self.status.value,
            "priority": self.priority.value,
            "type": self.type.value,
            "reportedAt": self.reported_at,
            "photo": self.photo,
            "history": [h.to_dict() for h in self.history],
        }


@dataclass
class SOP:
    id: str
    title: str
    category: str
    content: str
    document: Optional[str] = None
    document_name: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict) -> "SOP":
        return cls(
            id=d["id"],
            title=d.get("title", ""),
            category=d.get("category", ""),
            content=d.get("content", ""),
            document=d.get("document"),
            document_name=d.get("documentName"),
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "content": self.content,
            "document": self.document,
            "documentName": self.document_name,
        }


@dataclass
class Collection:
    id: str
    title: str
    description: str = ""
    template_ids: List[str] = field(default_factory=list)
    sop_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict) -> "Collection":
        return cls(
            id=d["id"],
            title=d.get("title", ""),
            description=d.get("description", ""),
            template_ids=list(d.get("templateIds") or []),
            sop_ids=list(d.get("sopIds") or []),
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "templateIds": list(self.template_ids),
            "sopIds": list(self.sop_ids),
        }


@dataclass
class User:
    id: str
    name: str
    role: UserRole = UserRole.STAFF
    avatar: str = ""
    email: str = ""
    password: str = ""
    department: Optional[str] = None
    status: UserStatus = UserStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @classmethod
    def from_dict(cls, d: Dict) -> "User":
        return cls(
            id=d["id"],
            name=d.get("name", ""),
            role=UserRole(d.get("role") or UserRole.STAFF.value),
            avatar=d.get("avatar", ""),
            email=d.get("email", ""),
            password=d.get("password", ""),
            department=d.get("department"),
            status=UserStatus(d.get("status") or UserStatus.ACTIVE.value),
        )

    def to_dict(self, include_password: bool = True) -> Dict:
        d = {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "avatar": self.avatar,
            "email": self.email,
            "department": self.department,
            "status": self.status.value,
        }
        if include_password:
            d["password"] = self.password
        return d


# ============================================================================
# Collection codecs
# ============================================================================

def list_codec(record_cls):
    """(encode, decode) pair for a list of records of ``record_cls``."""

    def encode(records):
        return [r.to_dict() for r in records]

    def decode(rows):
        return [record_cls.from_dict(r) for r in rows]

    return encode, decode
