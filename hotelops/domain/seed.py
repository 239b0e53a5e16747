"""
Demo data used until the local store holds real records.

Assignees are plain names here; names matching a seeded user are bound to
that user's id when the seed is built.
"""
from typing import List

from .models import (
    Audit,
    AuditTemplate,
    Collection,
    Incident,
    SOP,
    User,
)

_USERS = [
    {"id": "u1", "name": "Jane Doe", "email": "admin@hotel.com", "password": "password123",
     "role": "admin", "avatar": "JD", "department": "Management", "status": "active"},
    {"id": "u2", "name": "Bob Smith", "email": "bob@hotel.com", "password": "password123",
     "role": "staff", "avatar": "BS", "department": "Kitchen", "status": "active"},
    {"id": "u3", "name": "Alice Johnson", "email": "alice@hotel.com", "password": "password123",
     "role": "staff", "avatar": "AJ", "department": "Housekeeping", "status": "active"},
    {"id": "u4", "name": "Charlie Brown", "email": "charlie@hotel.com", "password": "password123",
     "role": "staff", "avatar": "CB", "department": "FrontOffice", "status": "on-hold"},
]

_AUDITS = [
    {
        "id": "audit-1", "title": "Morning Kitchen Prep Audit", "department": "Kitchen",
        "status": "Pending", "dueDate": "2024-08-15T10:00",
        "items": [
            {"id": "item-1-1", "description": "Refrigerator temperatures below 40°F/4°C", "assignee": "Alice Johnson"},
            {"id": "item-1-2", "description": "All food surfaces sanitized", "assignee": "Bob Smith", "temperature": 38},
            {"id": "item-1-3", "description": "Hand washing stations stocked and clean"},
            {"id": "item-1-4", "description": "Proper food labeling and dating"},
        ],
    },
    {
        "id": "audit-2", "title": "Room 201 Turnover Inspection", "department": "Housekeeping",
        "status": "Pending", "dueDate": "2024-08-15T14:30",
        "items": [
            {"id": "item-2-1", "description": "Bed linens are fresh and wrinkle-free", "assignee": "Alice Johnson"},
            {"id": "item-2-2", "description": "Bathroom surfaces sanitized and polished", "assignee": "Maria Garcia"},
            {"id": "item-2-3", "description": "No dust on surfaces (headboard, tables, lamps)"},
            {"id": "item-2-4", "description": "Trash cans empty and clean"},
            {"id": "item-2-5", "description": "Welcome amenities correctly placed"},
        ],
    },
    {
        "id": "audit-3", "title": "Lobby & Entrance Cleanliness Check", "department": "Front Office",
        "status": "Completed", "dueDate": "2024-08-14T09:00", "completedDate": "2024-08-14",
        "items": [
            {"id": "item-3-1", "description": "Glass doors are free of smudges", "result": "Pass",
             "notes": "Looks good.", "assignee": "John Doe"},
            {"id": "item-3-2", "description": "Floors are clean and dry", "result": "Pass", "assignee": "John Doe"},
            {"id": "item-3-3", "description": "Reception desk is tidy and organized", "result": "Pass",
             "assignee": "Sarah Lee"},
            {"id": "item-3-4", "description": "Seating area is clean and inviting", "result": "Fail",
             "photo": "https://picsum.photos/400/300", "notes": "Cushion out of place.", "assignee": "Sarah Lee"},
            {"id": "item-3-5", "description": "Main entrance clear of obstructions", "result": "Pass",
             "assignee": "John Doe"},
            {"id": "item-3-6", "description": "Ambient lighting functional", "result": "Fail",
             "notes": "One light flickering near plant.", "assignee": "John Doe"},
        ],
    },
    {
        "id": "audit-4", "title": "Evening Kitchen Close Down", "department": "Kitchen",
        "status": "Completed", "dueDate": "2024-08-13T22:00", "completedDate": "2024-08-13",
        "items": [
            {"id": "item-4-1", "description": "All cooking equipment turned off and cleaned", "result": "Pass",
             "assignee": "Bob Smith"},
            {"id": "item-4-2", "description": "Floors swept and mopped", "result": "Fail",
             "notes": "Some grease spots remain near fryers.", "assignee": "Bob Smith"},
            {"id": "item-4-3", "description": "Waste bins emptied and sanitized", "result": "Pass",
             "assignee": "Bob Smith"},
            {"id": "item-4-4", "description": "Cold storage locked securely", "result": "Pass",
             "assignee": "Bob Smith"},
        ],
    },
    {
        "id": "audit-5", "title": "Guest Room 302 Maintenance Check", "department": "Maintenance",
        "status": "Completed", "dueDate": "2024-08-12T11:00", "completedDate": "2024-08-12",
        "items": [
            {"id": "item-5-1", "description": "HVAC system functioning correctly", "result": "Pass",
             "notes": "Checked filter, OK.", "assignee": "John Doe"},
            {"id": "item-5-2", "description": "Plumbing fixtures (faucets, shower) checked for leaks",
             "result": "Pass", "assignee": "John Doe"},
            {"id": "item-5-3", "description": "All lights and outlets functional", "result": "Pass",
             "assignee": "John Doe"},
            {"id": "item-5-4", "description": "Window seals intact, no drafts", "result": "Fail",
             "notes": "Small draft near balcony door.", "assignee": "John Doe"},
        ],
    },
]

_TEMPLATES = [
    {
        "id": "temp-1", "title": "Daily Kitchen Opening", "department": "Kitchen",
        "items": [
            {"description": "Check fridge temp", "assignee": "Bob Smith"},
            {"description": "Sanitize food prep surfaces", "assignee": "Bob Smith"},
            {"description": "Verify dishwasher chemicals", "assignee": "Bob Smith"},
        ],
    },
    {
        "id": "temp-2", "title": "Standard Room Inspection", "department": "Housekeeping",
        "items": [
            {"description": "Check for dust on high surfaces", "assignee": "Alice Johnson"},
            {"description": "Ensure bathroom amenities stocked", "assignee": "Alice Johnson"},
            {"description": "Test TV and remote", "assignee": "Alice Johnson"},
        ],
    },
]

_INCIDENTS = [
    {
        "id": "inc-1", "title": "Pest Sighting in Kitchen",
        "description": "A small rodent was reported near the dry storage area.",
        "department": "Kitchen", "assignee": "Exterminator Co.", "status": "In Progress",
        "priority": "Critical", "type": "Emergency", "reportedAt": "2024-08-14T08:00:00Z",
        # Newest first
        "history": [
            {"id": "h2", "timestamp": "2024-08-14T09:30:00Z", "action": "Status Update", "user": "Jane Doe",
             "details": "Changed status to In Progress. Exterminator contacted."},
            {"id": "h1", "timestamp": "2024-08-14T08:00:00Z", "action": "Reported", "user": "Jane Doe",
             "details": "Initial sighting reported."},
        ],
    },
    {
        "id": "inc-2", "title": "Leaky Faucet in Room 305",
        "description": "Guest reported a constant drip from the bathroom sink.",
        "department": "Maintenance", "assignee": "John Doe", "status": "Open",
        "priority": "Medium", "type": "Daily Log", "reportedAt": "2024-08-15T10:15:00Z",
        "history": [
            {"id": "h3", "timestamp": "2024-08-15T10:15:00Z", "action": "Reported", "user": "Alice Johnson",
             "details": "Guest complaint logged."},
        ],
    },
    {
        "id": "inc-3", "title": "Lobby carpet stain",
        "description": "Coffee spill near the main entrance that requires deep cleaning.",
        "department": "Housekeeping", "assignee": "Cleaning Crew", "status": "Resolved",
        "priority": "Low", "type": "Daily Log", "reportedAt": "2024-08-13T14:00:00Z",
        "history": [
            {"id": "h5", "timestamp": "2024-08-13T16:00:00Z", "action": "Resolved", "user": "Cleaning Crew",
             "details": "Stain removed."},
            {"id": "h4", "timestamp": "2024-08-13T14:00:00Z", "action": "Reported", "user": "System",
             "details": "Automated log."},
        ],
    },
]

_SOPS = [
    {"id": "sop-1", "title": "Kitchen Opening & Closing Procedures", "category": "Kitchen",
     "content": "Detailed checklist for daily kitchen setup and breakdown, including equipment checks, "
                "sanitation stations, and food storage protocols."},
    {"id": "sop-2", "title": "Guest Room Deep Cleaning Standard", "category": "Housekeeping",
     "content": "Step-by-step guide for deep cleaning guest rooms, covering high-touch surfaces, "
                "UVC light usage, and linen handling."},
    {"id": "sop-3", "title": "Biohazard Spill Response Protocol", "category": "All Departments",
     "content": "Emergency procedures for safely containing and cleaning biohazardous materials, "
                "including required PPE and disposal methods."},
    {"id": "sop-4", "title": "Front Desk Hygiene & Safety", "category": "Front Office",
     "content": "Guidelines for maintaining a clean and safe reception area, including sanitizing key cards, "
                "managing guest queues, and handling luggage."},
]

_COLLECTIONS = [
    {"id": "col-1", "title": "Kitchen Hygiene Pack",
     "description": "Complete set of checks and guides for kitchen safety and daily operations.",
     "templateIds": ["temp-1"], "sopIds": ["sop-1", "sop-3"]},
    {"id": "col-2", "title": "Housekeeping Excellence",
     "description": "Standard operating procedures and inspection templates for room turnover.",
     "templateIds": ["temp-2"], "sopIds": ["sop-2", "sop-3"]},
]


def _bind_assignees(refs, users):
    by_name = {u.name: u.id for u in users}
    for ref in refs:
        if ref is not None and ref.user_id is None and ref.name in by_name:
            ref.user_id = by_name[ref.name]


def seed_users() -> List[User]:
    return [User.from_dict(d) for d in _USERS]


def seed_audits() -> List[Audit]:
    audits = [Audit.from_dict(d) for d in _AUDITS]
    _bind_assignees([i.assignee for a in audits for i in a.items], seed_users())
    return audits


def seed_templates() -> List[AuditTemplate]:
    templates = [AuditTemplate.from_dict(d) for d in _TEMPLATES]
    _bind_assignees([i.assignee for t in templates for i in t.items], seed_users())
    return templates


def seed_incidents() -> List[Incident]:
    incidents = [Incident.from_dict(d) for d in _INCIDENTS]
    _bind_assignees([i.assignee for i in incidents], seed_users())
    return incidents


def seed_sops() -> List[SOP]:
    return [SOP.from_dict(d) for d in _SOPS]


def seed_collections() -> List[Collection]:
    return [Collection.from_dict(d) for d in _COLLECTIONS]
