"""
Which audits and incidents a user gets to see.

Administrators see everything. Staff see work assigned to them, work
nobody has claimed yet, and (in the archive) their own department's records.
"""
from typing import Iterable, List, Optional

from ..domain import (
    Audit,
    AuditStatus,
    Incident,
    IncidentStatus,
    User,
)

ARCHIVED_INCIDENT_STATUSES = (IncidentStatus.RESOLVED, IncidentStatus.VERIFIED)


def _assigned_to(audit: Audit, user: User) -> bool:
    return any(i.assignee is not None and i.assignee.refers_to(user) for i in audit.items)


def _has_unassigned(audit: Audit) -> bool:
    return any(i.assignee is None for i in audit.items)


def _title_matches(title: str, search: Optional[str]) -> bool:
    return not search or search.lower() in (title or "").lower()


def audits_for_user(audits: Iterable[Audit], user: User, status: Optional[str] = None) -> List[Audit]:
    result = []
    for audit in audits:
        if status and audit.status.value != status:
            continue
        if user.is_admin or _assigned_to(audit, user) or _has_unassigned(audit):
            result.append(audit)
    return result


def pending_for_user(audits: Iterable[Audit], user: User) -> List[Audit]:
    """Dashboard task list: Pending audits the user can work on."""
    return audits_for_user(audits, user, status=AuditStatus.PENDING.value)


def archived_audits(audits: Iterable[Audit], user: User, search: Optional[str] = None) -> List[Audit]:
    result = []
    for audit in audits:
        if audit.status != AuditStatus.COMPLETED:
            continue
        if not user.is_admin and not _assigned_to(audit, user) and audit.department != user.department:
            continue
        if _title_matches(audit.title, search):
            result.append(audit)
    return result


def archived_incidents(incidents: Iterable[Incident], user: User, search: Optional[str] = None) -> List[Incident]:
    result = []
    for inc in incidents:
        if inc.status not in ARCHIVED_INCIDENT_STATUSES:
            continue
        if not user.is_admin:
            assigned = inc.assignee is not None and inc.assignee.refers_to(user)
            if inc.department != user.department and not assigned:
                continue
        if _title_matches(inc.title, search):
            result.append(inc)
    return result
