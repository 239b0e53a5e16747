# ============================================================================
# HotelOps - Operations API Routes
# ============================================================================
# Routers:
#   - session_router:  /api/session/*, /api/status
#   - audit_router:    /api/audits/*
#   - incident_router: /api/incidents/*
#   - library_router:  /api/sops/*, /api/templates/*, /api/collections/*
#   - admin_router:    /api/admin/*    (administrators only)
#   - reports_router:  /api/reports/*  (completed / closed record archive)
#
# Registration via register_ops_routes(app).  Operation errors are rendered
# by the app-level OpsError handler as {"ok": false, "error": ...}.
# ============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Request

from ..analytics import audit_assignee_progress, audit_progress, audit_score
from ..domain import Audit
from ..web import get_state, read_json
from . import admin as admin_ops
from . import audits as audit_ops
from . import incidents as incident_ops
from . import library as library_ops
from . import visibility
from .errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

session_router = APIRouter(tags=["session"])
audit_router = APIRouter(prefix="/api/audits", tags=["audits"])
incident_router = APIRouter(prefix="/api/incidents", tags=["incidents"])
library_router = APIRouter(prefix="/api", tags=["library"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])
reports_router = APIRouter(prefix="/api/reports", tags=["reports"])


def _audit_view(audit: Audit) -> dict:
    d = audit.to_dict()
    d["progress"] = audit_progress(audit)
    d["score"] = audit_score(audit)
    return d


# ============================================================================
# Session
# ============================================================================

@session_router.get("/api/status")
async def app_status(request: Request):
    """Hydration and saving flags for every collection."""
    return {"ok": True, **get_state(request).status()}


@session_router.get("/api/session")
async def session_info(request: Request):
    return {"ok": True, "session": get_state(request).session.snapshot()}


@session_router.post("/api/session/login")
async def login(request: Request):
    data = await read_json(request)
    state = get_state(request)
    user = state.session.login(data.get("email", ""), data.get("password", ""))
    return {"ok": True, "user": user.to_dict(include_password=False), "session": state.session.snapshot()}


@session_router.post("/api/session/logout")
async def logout(request: Request):
    state = get_state(request)
    state.session.logout()
    return {"ok": True, "session": state.session.snapshot()}


@session_router.post("/api/session/navigate")
async def navigate(request: Request):
    data = await read_json(request)
    state = get_state(request)
    view = state.session.navigate(data.get("view"), audit_id=data.get("auditId"))
    return {"ok": True, "view": view.value}


@session_router.get("/api/session/theme")
async def get_theme(request: Request):
    return {"ok": True, "theme": get_state(request).session.theme}


@session_router.post("/api/session/theme")
async def set_theme(request: Request):
    data = await read_json(request)
    session = get_state(request).session
    theme = session.set_theme(data["theme"]) if "theme" in data else session.toggle_theme()
    return {"ok": True, "theme": theme}


@session_router.get("/api/settings")
async def get_settings(request: Request):
    """Hotel and department lists used by forms and filters."""
    state = get_state(request)
    state.session.require_user()
    return {"ok": True, "hotels": state.hotels.value, "departments": state.departments.value}


# ============================================================================
# Audits
# ============================================================================

@audit_router.get("")
async def list_audits(request: Request, status: Optional[str] = None):
    state = get_state(request)
    user = state.session.require_user()
    audits = visibility.audits_for_user(state.audits.value, user, status=status)
    return {"ok": True, "audits": [_audit_view(a) for a in audits]}


@audit_router.get("/pending")
async def list_pending(request: Request):
    state = get_state(request)
    user = state.session.require_user()
    audits = visibility.pending_for_user(state.audits.value, user)
    return {"ok": True, "audits": [_audit_view(a) for a in audits]}


@audit_router.post("")
async def create_audit(request: Request):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_admin()
    audit = audit_ops.create_audit(
        state,
        title=data.get("title", ""),
        department=data.get("department", ""),
        due_date=data.get("dueDate", ""),
        items=data.get("items", []),
        hotel_name=data.get("hotelName"),
    )
    return {"ok": True, "audit": audit.to_dict()}


@audit_router.get("/{audit_id}")
async def get_audit(request: Request, audit_id: str):
    state = get_state(request)
    state.session.require_user()
    audit = audit_ops.get_audit(state, audit_id)
    users = state.users.value
    return {
        "ok": True,
        "audit": _audit_view(audit),
        "assigneeProgress": audit_assignee_progress(audit, users),
    }


@audit_router.put("/{audit_id}")
async def replace_audit(request: Request, audit_id: str):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_user()
    data["id"] = audit_id
    try:
        audit = Audit.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid audit: {e}", field="audit")
    audit_ops.update_audit(state, audit)
    return {"ok": True, "audit": audit.to_dict()}


@audit_router.patch("/{audit_id}/items/{item_id}")
async def update_item(request: Request, audit_id: str, item_id: str):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_user()
    audit = audit_ops.update_item(state, audit_id, item_id, data)
    return {"ok": True, "audit": _audit_view(audit)}


@audit_router.post("/{audit_id}/items/{item_id}/toggle")
async def toggle_item(request: Request, audit_id: str, item_id: str):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_admin()
    audit = audit_ops.toggle_item(state, audit_id, item_id, bool(data.get("checked")))
    return {"ok": True, "audit": _audit_view(audit)}


@audit_router.post("/{audit_id}/complete")
async def complete_audit(request: Request, audit_id: str):
    """Complete an audit, optionally submitting the edited record in the body."""
    data = await read_json(request)
    state = get_state(request)
    state.session.require_user()
    if data:
        data["id"] = audit_id
        try:
            audit = Audit.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid audit: {e}", field="audit")
    else:
        audit = audit_ops.get_audit(state, audit_id)
    audit = audit_ops.complete_audit(state, audit)
    return {"ok": True, "audit": _audit_view(audit)}


# ============================================================================
# Incidents
# ============================================================================

@incident_router.get("")
async def list_incidents(
    request: Request,
    type: Optional[str] = None,
    department: Optional[str] = None,
    status: Optional[str] = None,
    assignee: Optional[str] = None,
    sort: str = "date-desc",
):
    state = get_state(request)
    state.session.require_user()
    incidents = incident_ops.filter_incidents(
        state.incidents.value,
        type=type,
        department=department,
        status=status,
        assignee=assignee,
        sort=sort,
        users=state.users.value,
    )
    return {"ok": True, "incidents": [i.to_dict() for i in incidents]}


@incident_router.post("")
async def report_incident(request: Request):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_user()
    incident = incident_ops.report_incident(state, data)
    return {"ok": True, "incident": incident.to_dict()}


@incident_router.get("/{incident_id}")
async def get_incident(request: Request, incident_id: str):
    state = get_state(request)
    state.session.require_user()
    return {"ok": True, "incident": incident_ops.get_incident(state, incident_id).to_dict()}


@incident_router.post("/{incident_id}/status")
async def update_incident_status(request: Request, incident_id: str):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_user()
    if not data.get("status"):
        raise ValidationError("status is required", field="status")
    incident = incident_ops.update_incident_status(state, incident_id, data["status"], data.get("comment", ""))
    return {"ok": True, "incident": incident.to_dict()}


# ============================================================================
# Library: SOPs, templates, collections
# ============================================================================

@library_router.get("/sops")
async def list_sops(request: Request, search: Optional[str] = None):
    state = get_state(request)
    state.session.require_user()
    sops = state.sops.value
    if search:
        needle = search.lower()
        sops = [s for s in sops if needle in s.title.lower() or needle in s.content.lower()]
    return {"ok": True, "sops": [s.to_dict() for s in sops]}


@library_router.post("/sops")
async def create_sop(request: Request):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_admin()
    sop = library_ops.create_sop(
        state,
        title=data.get("title", ""),
        content=data.get("content", ""),
        category=data.get("category"),
        document=data.get("document"),
        document_name=data.get("documentName"),
    )
    return {"ok": True, "sop": sop.to_dict()}


@library_router.delete("/sops/{sop_id}")
async def delete_sop(request: Request, sop_id: str):
    state = get_state(request)
    state.session.require_admin()
    library_ops.delete_sop(state, sop_id)
    return {"ok": True}


@library_router.get("/sops/{sop_id}/template-draft")
async def sop_template_draft(request: Request, sop_id: str):
    state = get_state(request)
    state.session.require_admin()
    return {"ok": True, "draft": library_ops.sop_to_template_draft(state, sop_id)}


@library_router.get("/templates")
async def list_templates(request: Request):
    state = get_state(request)
    state.session.require_user()
    return {"ok": True, "templates": [t.to_dict() for t in state.templates.value]}


@library_router.post("/templates")
async def create_template(request: Request):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_admin()
    template = library_ops.create_template(
        state,
        title=data.get("title", ""),
        department=data.get("department", ""),
        items=data.get("items", []),
    )
    return {"ok": True, "template": template.to_dict()}


@library_router.delete("/templates/{template_id}")
async def delete_template(request: Request, template_id: str):
    state = get_state(request)
    state.session.require_admin()
    library_ops.delete_template(state, template_id)
    return {"ok": True}


@library_router.post("/templates/{template_id}/start")
async def start_from_template(request: Request, template_id: str):
    state = get_state(request)
    state.session.require_user()
    audit = audit_ops.start_audit_from_template(state, template_id)
    state.session.navigate("audit", audit_id=audit.id)
    return {"ok": True, "audit": audit.to_dict()}


@library_router.get("/collections")
async def list_collections(request: Request):
    state = get_state(request)
    state.session.require_user()
    return {"ok": True, "collections": [c.to_dict() for c in state.collections.value]}


@library_router.post("/collections")
async def create_collection(request: Request):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_admin()
    collection = library_ops.create_collection(
        state,
        title=data.get("title", ""),
        description=data.get("description", ""),
        template_ids=data.get("templateIds"),
        sop_ids=data.get("sopIds"),
    )
    return {"ok": True, "collection": collection.to_dict()}


@library_router.get("/collections/{collection_id}")
async def get_collection(request: Request, collection_id: str):
    state = get_state(request)
    state.session.require_user()
    collection = next((c for c in state.collections.value if c.id == collection_id), None)
    if collection is None:
        raise NotFound(f"Collection {collection_id} not found")
    resolved = library_ops.resolve_collection(state, collection)
    return {
        "ok": True,
        "collection": collection.to_dict(),
        "templates": [t.to_dict() for t in resolved["templates"]],
        "sops": [s.to_dict() for s in resolved["sops"]],
    }


@library_router.delete("/collections/{collection_id}")
async def delete_collection(request: Request, collection_id: str):
    state = get_state(request)
    state.session.require_admin()
    library_ops.delete_collection(state, collection_id)
    return {"ok": True}


# ============================================================================
# Admin: users, hotels, departments
# ============================================================================

@admin_router.get("/users")
async def list_users(request: Request):
    state = get_state(request)
    state.session.require_admin()
    return {"ok": True, "users": [u.to_dict(include_password=False) for u in state.users.value]}


@admin_router.post("/users")
async def add_user(request: Request):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_admin()
    user = admin_ops.add_user(
        state,
        name=data.get("name", ""),
        role=data.get("role", "staff"),
        department=data.get("department"),
        email=data.get("email", ""),
        password=data.get("password", ""),
    )
    return {"ok": True, "user": user.to_dict(include_password=False)}


@admin_router.put("/users/{user_id}")
async def update_user(request: Request, user_id: str):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_admin()
    user = admin_ops.update_user(
        state,
        user_id,
        name=data.get("name", ""),
        role=data.get("role"),
        department=data.get("department"),
        email=data.get("email"),
        password=data.get("password"),
    )
    return {"ok": True, "user": user.to_dict(include_password=False)}


@admin_router.delete("/users/{user_id}")
async def delete_user(request: Request, user_id: str):
    state = get_state(request)
    state.session.require_admin()
    logged_out = admin_ops.delete_user(state, user_id)
    return {"ok": True, "loggedOut": logged_out, "session": state.session.snapshot()}


@admin_router.post("/users/{user_id}/toggle-status")
async def toggle_user_status(request: Request, user_id: str):
    state = get_state(request)
    state.session.require_admin()
    user = admin_ops.toggle_user_status(state, user_id)
    result = {"ok": True, "user": user.to_dict(include_password=False), "session": state.session.snapshot()}
    if not state.session.is_authenticated:
        result["message"] = admin_ops.ON_HOLD_LOGOUT_MESSAGE
    return result


@admin_router.post("/hotels")
async def add_hotel(request: Request):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_admin()
    added = admin_ops.add_hotel(state, data.get("name", ""))
    return {"ok": True, "added": added, "hotels": state.hotels.value}


@admin_router.delete("/hotels/{name}")
async def delete_hotel(request: Request, name: str):
    state = get_state(request)
    state.session.require_admin()
    removed = admin_ops.delete_hotel(state, name)
    return {"ok": True, "removed": removed, "hotels": state.hotels.value}


@admin_router.post("/departments")
async def add_department(request: Request):
    data = await read_json(request)
    state = get_state(request)
    state.session.require_admin()
    added = admin_ops.add_department(state, data.get("name", ""))
    return {"ok": True, "added": added, "departments": state.departments.value}


@admin_router.delete("/departments/{name}")
async def delete_department(request: Request, name: str):
    state = get_state(request)
    state.session.require_admin()
    removed = admin_ops.delete_department(state, name)
    return {"ok": True, "removed": removed, "departments": state.departments.value}


# ============================================================================
# Reports archive
# ============================================================================

@reports_router.get("/audits")
async def archived_audits(request: Request, search: Optional[str] = None):
    state = get_state(request)
    user = state.session.require_user()
    audits = visibility.archived_audits(state.audits.value, user, search=search)
    return {"ok": True, "audits": [_audit_view(a) for a in audits]}


@reports_router.get("/incidents")
async def archived_incidents(request: Request, search: Optional[str] = None):
    state = get_state(request)
    user = state.session.require_user()
    incidents = visibility.archived_incidents(state.incidents.value, user, search=search)
    return {"ok": True, "incidents": [i.to_dict() for i in incidents]}


def register_ops_routes(app):
    """Register the session, entity, admin and archive routers."""
    app.include_router(session_router)
    app.include_router(audit_router)
    app.include_router(incident_router)
    app.include_router(library_router)
    app.include_router(admin_router)
    app.include_router(reports_router)
    logger.info("[Ops] Routes registered")
