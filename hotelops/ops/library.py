# ============================================================================
# HotelOps - Library Operations
# ============================================================================
# SOPs, audit templates and collections (bundles of templates and SOPs).
# ============================================================================

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from ..domain import (
    AssigneeRef,
    AuditTemplate,
    AuditTemplateItem,
    Collection,
    SOP,
    new_id,
)
from .errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

ALL_DEPARTMENTS = "All Departments"

_BULLET = re.compile(r"^[-*•]\s*")


def _delete(state_attr, record_id: str, kind: str):
    before = len(state_attr.value)
    state_attr.update(lambda records: [r for r in records if r.id != record_id])
    if len(state_attr.value) == before:
        raise NotFound(f"{kind} {record_id} not found")
    logger.info(f"[Library] Deleted {kind.lower()} {record_id}")


# ============================================================================
# SOPs
# ============================================================================

def create_sop(
    state,
    title: str,
    content: str,
    category: Optional[str] = None,
    document: Optional[str] = None,
    document_name: Optional[str] = None,
) -> SOP:
    if not (title or "").strip():
        raise ValidationError("Please provide a title.", field="title")
    if not (content or "").strip():
        raise ValidationError("Please provide the procedure text.", field="content")
    if not category:
        departments = state.departments.value
        category = departments[0] if departments else ALL_DEPARTMENTS

    sop = SOP(
        id=new_id("sop"),
        title=title,
        category=category,
        content=content,
        document=document or None,
        document_name=document_name or None,
    )
    state.sops.update(lambda sops: [sop] + sops)
    logger.info(f"[Library] Added SOP {sop.id} '{title}'")
    return sop


def delete_sop(state, sop_id: str):
    _delete(state.sops, sop_id, "SOP")


def sop_to_template_draft(state, sop_id: str) -> Dict[str, Any]:
    """
    Pre-fill a template form from an SOP.

    Each non-blank line of the procedure becomes an item, with a leading
    bullet character stripped. Nothing is saved.
    """
    sop = next((s for s in state.sops.value if s.id == sop_id), None)
    if sop is None:
        raise NotFound(f"SOP {sop_id} not found")

    departments = state.departments.value
    if sop.category in departments:
        department = sop.category
    else:
        department = departments[0] if departments else ""

    lines = [line.strip() for line in sop.content.split("\n")]
    items = [{"description": _BULLET.sub("", line), "assignee": None} for line in lines if line]
    if not items:
        items = [{"description": f"Review procedure: {sop.title}", "assignee": None}]

    return {"title": sop.title, "department": department, "items": items}


# ============================================================================
# Templates
# ============================================================================

def create_template(state, title: str, department: str, items: Iterable) -> AuditTemplate:
    if not (title or "").strip():
        raise ValidationError("Please provide a title.", field="title")
    if not department:
        raise ValidationError("Please choose a department.", field="department")

    users = state.users.value
    parsed: List[AuditTemplateItem] = []
    for raw in items or []:
        if isinstance(raw, str):
            raw = {"description": raw}
        description = raw.get("description") or ""
        if not description.strip():
            continue
        assignee = raw.get("assignee")
        if isinstance(assignee, str):
            assignee = AssigneeRef.for_name(assignee, users)
        else:
            assignee = AssigneeRef.from_value(assignee)
        parsed.append(AuditTemplateItem(description=description, assignee=assignee))
    if not parsed:
        raise ValidationError("Add at least one checklist item.", field="items")

    template = AuditTemplate(id=new_id("temp"), title=title, department=department, items=parsed)
    state.templates.update(lambda templates: [template] + templates)
    logger.info(f"[Library] Added template {template.id} '{title}'")
    return template


def delete_template(state, template_id: str):
    _delete(state.templates, template_id, "Template")


# ============================================================================
# Collections
# ============================================================================

def create_collection(
    state,
    title: str,
    description: str = "",
    template_ids: Optional[List[str]] = None,
    sop_ids: Optional[List[str]] = None,
) -> Collection:
    if not (title or "").strip():
        raise ValidationError("Please provide a title.", field="title")
    collection = Collection(
        id=new_id("col"),
        title=title,
        description=description or "",
        template_ids=list(dict.fromkeys(template_ids or [])),
        sop_ids=list(dict.fromkeys(sop_ids or [])),
    )
    state.collections.update(lambda cols: [collection] + cols)
    logger.info(f"[Library] Added collection {collection.id} '{title}'")
    return collection


def delete_collection(state, collection_id: str):
    _delete(state.collections, collection_id, "Collection")


def resolve_collection(state, collection: Collection) -> Dict[str, Any]:
    """Look up a collection's templates and SOPs. Ids that no longer resolve are dropped."""
    templates = {t.id: t for t in state.templates.value}
    sops = {s.id: s for s in state.sops.value}
    return {
        "collection": collection,
        "templates": [templates[t] for t in collection.template_ids if t in templates],
        "sops": [sops[s] for s in collection.sop_ids if s in sops],
    }
