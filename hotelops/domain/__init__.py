"""
HotelOps Domain
Record types shared by the operations, analytics and API layers.
"""
from .models import (
    AssigneeRef,
    Audit,
    AuditStatus,
    AuditTemplate,
    AuditTemplateItem,
    Collection,
    Incident,
    IncidentActivity,
    IncidentPriority,
    IncidentStatus,
    IncidentType,
    InspectionItem,
    InspectionResult,
    PRIORITY_ORDER,
    SOP,
    UNASSIGNED,
    User,
    UserRole,
    UserStatus,
    View,
    assignee_label,
    list_codec,
    new_id,
    new_item_ids,
    parse_timestamp,
    today_iso,
    users_index,
    utc_now_iso,
)

__all__ = [
    "AssigneeRef",
    "Audit",
    "AuditStatus",
    "AuditTemplate",
    "AuditTemplateItem",
    "Collection",
    "Incident",
    "IncidentActivity",
    "IncidentPriority",
    "IncidentStatus",
    "IncidentType",
    "InspectionItem",
    "InspectionResult",
    "PRIORITY_ORDER",
    "SOP",
    "UNASSIGNED",
    "User",
    "UserRole",
    "UserStatus",
    "View",
    "assignee_label",
    "list_codec",
    "new_id",
    "new_item_ids",
    "parse_timestamp",
    "today_iso",
    "users_index",
    "utc_now_iso",
]
