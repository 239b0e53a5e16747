# ============================================================================
# HotelOps - Incident Operations
# ============================================================================
# Reporting, status changes with an activity trail, and list filtering.
# History is kept newest first; entries are never edited once written.
# ============================================================================

import copy
import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..domain import (
    AssigneeRef,
    Incident,
    IncidentActivity,
    IncidentPriority,
    IncidentStatus,
    IncidentType,
    PRIORITY_ORDER,
    User,
    new_id,
    parse_timestamp,
    users_index,
    utc_now_iso,
)
from .errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("date-desc", "date-asc", "priority-desc", "priority-asc")
ALL = "All"


def get_incident(state, incident_id: str) -> Incident:
    for incident in state.incidents.value:
        if incident.id == incident_id:
            return incident
    raise NotFound(f"Incident {incident_id} not found")


def _enum(enum_cls, value, field):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value}", field=field)


def report_incident(state, data: Dict[str, Any]) -> Incident:
    """
    File a new incident or daily-log entry.

    ``data`` carries title, description, department, assignee, type, priority
    and photo. The new record starts Open with a single "Reported" entry.
    """
    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("Please provide a title.", field="title")

    incident_type = _enum(IncidentType, data.get("type") or IncidentType.EMERGENCY.value, "type")
    default_priority = IncidentPriority.HIGH if incident_type == IncidentType.EMERGENCY else IncidentPriority.MEDIUM
    priority = _enum(IncidentPriority, data.get("priority") or default_priority.value, "priority")

    assignee = data.get("assignee")
    if isinstance(assignee, str):
        assignee = AssigneeRef.for_name(assignee, state.users.value)
    else:
        assignee = AssigneeRef.from_value(assignee)

    timestamp = utc_now_iso()
    incident = Incident(
        id=new_id("inc"),
        title=data.get("title"),
        description=data.get("description") or "",
        department=data.get("department") or (state.departments.value or [""])[0],
        assignee=assignee,
        status=IncidentStatus.OPEN,
        priority=priority,
        type=incident_type,
        reported_at=timestamp,
        photo=data.get("photo") or None,
        history=[
            IncidentActivity(
                id=new_id("log"),
                timestamp=timestamp,
                action="Reported",
                user=state.session.actor_name(),
                details="Initial report created.",
            )
        ],
    )
    state.incidents.update(lambda incidents: [incident] + incidents)
    logger.info(f"[Incidents] Reported {incident.id} '{title}' ({incident.type.value}, {incident.priority.value})")
    return incident


def update_incident_status(state, incident_id: str, status, comment: str = "") -> Incident:
    """Set a new status and prepend one "Status Update" entry to the history."""
    status = _enum(IncidentStatus, status, "status")
    comment = (comment or "").strip()
    details = f"Changed status to {status.value}."
    if comment:
        details += f" Note: {comment}"

    entry = IncidentActivity(
        id=new_id("log"),
        timestamp=utc_now_iso(),
        action="Status Update",
        user=state.session.actor_name(),
        details=details,
    )

    get_incident(state, incident_id)
    result = {}

    def apply(incidents: List[Incident]) -> List[Incident]:
        updated = []
        for inc in incidents:
            if inc.id == incident_id:
                inc = copy.copy(inc)
                inc.status = status
                inc.history = [entry] + list(inc.history)
                result["incident"] = inc
            updated.append(inc)
        return updated

    state.incidents.update(apply)
    logger.info(f"[Incidents] {incident_id} -> {status.value}")
    return result["incident"]


def _reported_key(incident: Incident) -> float:
    dt = parse_timestamp(incident.reported_at)
    if dt is None:
        return 0.0
    if dt.tzinfo is None:
        # Naive timestamps sort as if UTC
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.timestamp()


def filter_incidents(
    incidents: Iterable[Incident],
    type: Optional[str] = None,
    department: Optional[str] = None,
    status: Optional[str] = None,
    assignee: Optional[str] = None,
    sort: str = "date-desc",
    users: Optional[Iterable[User]] = None,
) -> List[Incident]:
    """Tab and dropdown filters from the incident board. ``All`` or None skips a filter."""
    if sort not in SORT_OPTIONS:
        raise ValidationError(f"Unknown sort: {sort}", field="sort")
    by_id = users_index(users)

    def keep(inc: Incident) -> bool:
        if type not in (None, ALL) and inc.type.value != type:
            return False
        if department not in (None, ALL) and inc.department != department:
            return False
        if status not in (None, ALL) and inc.status.value != status:
            return False
        if assignee not in (None, ALL):
            if inc.assignee is None or inc.assignee.display_name(by_id) != assignee:
                return False
        return True

    result = [i for i in incidents if keep(i)]
    if sort == "priority-desc":
        result.sort(key=lambda i: PRIORITY_ORDER[i.priority], reverse=True)
    elif sort == "priority-asc":
        result.sort(key=lambda i: PRIORITY_ORDER[i.priority])
    elif sort == "date-asc":
        result.sort(key=_reported_key)
    else:
        result.sort(key=_reported_key, reverse=True)
    return result
