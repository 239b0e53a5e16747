# ============================================================================
# HotelOps - Audit Operations
# ============================================================================
# Scheduling, template instantiation, item updates and completion.
# New audits are prepended; updates replace the record with the same id.
# ============================================================================

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..domain import (
    AssigneeRef,
    Audit,
    AuditStatus,
    InspectionItem,
    InspectionResult,
    new_id,
    new_item_ids,
    today_iso,
    utc_now_iso,
)
from .errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

# Fields a caller may change on a single checklist item
ITEM_FIELDS = ("result", "temperature", "photo", "notes", "assignee")


def get_audit(state, audit_id: str) -> Audit:
    for audit in state.audits.value:
        if audit.id == audit_id:
            return audit
    raise NotFound(f"Audit {audit_id} not found")


def _item_parts(raw) -> Dict[str, Any]:
    if isinstance(raw, str):
        return {"description": raw, "assignee": None}
    return {"description": raw.get("description") or "", "assignee": raw.get("assignee")}


def _assignee(value, users) -> Optional[AssigneeRef]:
    if isinstance(value, str):
        return AssigneeRef.for_name(value, users)
    return AssigneeRef.from_value(value)


def _replace(audits: List[Audit], updated: Audit) -> List[Audit]:
    return [updated if a.id == updated.id else a for a in audits]


def create_audit(
    state,
    title: str,
    department: str,
    due_date: str,
    items: Iterable,
    hotel_name: Optional[str] = None,
) -> Audit:
    """Schedule a new Pending audit. Items with a blank description are dropped."""
    if not (title or "").strip():
        raise ValidationError("Please provide a title.", field="title")
    if not department:
        raise ValidationError("Please choose a department.", field="department")
    if not due_date:
        raise ValidationError("Please provide a due date.", field="dueDate")

    parts = [p for p in (_item_parts(i) for i in items or []) if p["description"].strip()]
    if not parts:
        raise ValidationError("Add at least one checklist item.", field="items")

    users = state.users.value
    ids = new_item_ids(len(parts))
    audit = Audit(
        id=new_id("audit"),
        title=title,
        department=department,
        status=AuditStatus.PENDING,
        due_date=due_date,
        hotel_name=hotel_name or None,
        items=[
            InspectionItem(id=item_id, description=p["description"], assignee=_assignee(p["assignee"], users))
            for item_id, p in zip(ids, parts)
        ],
    )
    state.audits.update(lambda audits: [audit] + audits)
    logger.info(f"[Audits] Scheduled {audit.id} '{audit.title}' ({audit.department})")
    return audit


def start_audit_from_template(state, template_id: str) -> Audit:
    """Instantiate a template as a Pending audit due now.

    Items are copied; later edits to the template do not touch the audit.
    """
    template = next((t for t in state.templates.value if t.id == template_id), None)
    if template is None:
        raise NotFound(f"Template {template_id} not found")

    ids = new_item_ids(len(template.items))
    audit = Audit(
        id=new_id("audit"),
        title=template.title,
        department=template.department,
        status=AuditStatus.PENDING,
        due_date=utc_now_iso(),
        items=[
            InspectionItem(id=item_id, description=t.description, assignee=copy.deepcopy(t.assignee))
            for item_id, t in zip(ids, template.items)
        ],
    )
    state.audits.update(lambda audits: [audit] + audits)
    logger.info(f"[Audits] Started {audit.id} from template {template_id}")
    return audit


def update_audit(state, audit: Audit) -> Audit:
    """Replace the stored audit that has the same id."""
    get_audit(state, audit.id)
    state.audits.update(lambda audits: _replace(audits, audit))
    return audit


def update_item(state, audit_id: str, item_id: str, changes: Dict[str, Any]) -> Audit:
    """Change fields on one checklist item, e.g. result, notes or photo."""
    unknown = set(changes) - set(ITEM_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown item field(s): {', '.join(sorted(unknown))}", field="item")

    audit = copy.deepcopy(get_audit(state, audit_id))
    item = next((i for i in audit.items if i.id == item_id), None)
    if item is None:
        raise NotFound(f"Item {item_id} not found on audit {audit_id}")

    for key, value in changes.items():
        if key == "result":
            try:
                item.result = InspectionResult(value) if value else None
            except ValueError:
                raise ValidationError(f"Invalid result: {value}", field="result")
        elif key == "assignee":
            item.assignee = _assignee(value, state.users.value)
        elif key == "notes":
            item.notes = value or ""
        else:
            setattr(item, key, value)

    return update_audit(state, audit)


def complete_audit(state, audit: Audit) -> Audit:
    """Mark an audit Completed with today's date and store it."""
    audit = copy.deepcopy(audit)
    audit.status = AuditStatus.COMPLETED
    audit.completed_date = today_iso()
    update_audit(state, audit)
    logger.info(f"[Audits] Completed {audit.id}")
    return audit


def toggle_item(state, audit_id: str, item_id: str, checked: bool) -> Audit:
    """Quick check-off from the admin board: Pass when checked, cleared otherwise."""
    return update_item(state, audit_id, item_id, {"result": InspectionResult.PASS.value if checked else None})
