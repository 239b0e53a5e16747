# ============================================================================
# HotelOps - Analytics Engine
# ============================================================================
# Pure aggregations over in-memory audit records.
#
#   department_heatmap       - pass rate per (department | item, weekday)
#   top_failures             - most frequent failing checklist items
#   weekly_trend             - pass rate per weekday, Sun..Sat
#   team_stats               - per-assignee completion and pass/fail counts
#   audit_progress / score   - single-audit completion and pass rate
#   dashboard_summary        - headline numbers for the dashboard
#
# Only items with a Pass or Fail result count toward pass rates; N/A and
# unanswered items are ignored.  Every ratio returns 0 for an empty
# denominator.
# ============================================================================

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..domain import (
    UNASSIGNED,
    Audit,
    AuditStatus,
    Incident,
    IncidentPriority,
    IncidentStatus,
    InspectionResult,
    User,
    assignee_label,
    parse_timestamp,
    users_index,
)

logger = logging.getLogger(__name__)

WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

_SCORED = (InspectionResult.PASS, InspectionResult.FAIL)


# ============================================================================
# Helpers
# ============================================================================

def _pct(part: int, whole: int) -> int:
    """Rounded percentage, 0 when ``whole`` is 0."""
    if not whole:
        return 0
    return int(round(part / whole * 100))


def weekday_index(due_date: Optional[str]) -> Optional[int]:
    """Weekday of a due date with Sunday as 0, or None when unparseable."""
    dt = parse_timestamp(due_date)
    if dt is None:
        return None
    return (dt.weekday() + 1) % 7


def _scored_items(audit: Audit):
    for item in audit.items:
        if item.result in _SCORED:
            yield item


# ============================================================================
# Heatmap
# ============================================================================

def department_heatmap(
    audits: Iterable[Audit],
    department: Optional[str] = None,
    limit: int = 10,
) -> List[Dict[str, Any]]:
    """
    Pass-rate grid of rows by weekday.

    Rows are departments, or item descriptions when ``department`` is given.
    Each row has seven cells (Sun..Sat); a cell with no data has score None.
    Rows are ordered worst first by their overall pass rate.
    """
    buckets: Dict[str, List[List[int]]] = {}

    for audit in audits:
        if department and audit.department != department:
            continue
        day = weekday_index(audit.due_date)
        if day is None:
            logger.debug(f"[Analytics] Skipping audit {audit.id}: unparseable due date {audit.due_date!r}")
            continue
        for item in _scored_items(audit):
            key = item.description if department else audit.department
            row = buckets.setdefault(key, [[0, 0] for _ in WEEKDAYS])
            row[day][1] += 1
            if item.result == InspectionResult.PASS:
                row[day][0] += 1

    rows = []
    for name, cells in buckets.items():
        passed = sum(c[0] for c in cells)
        total = sum(c[1] for c in cells)
        rows.append({
            "name": name,
            "passed": passed,
            "total": total,
            "score": _pct(passed, total),
            "days": [
                {
                    "day": WEEKDAYS[idx],
                    "passed": cell[0],
                    "total": cell[1],
                    "score": _pct(cell[0], cell[1]) if cell[1] else None,
                }
                for idx, cell in enumerate(cells)
            ],
        })

    rows.sort(key=lambda r: (r["passed"] / r["total"]) if r["total"] else 0)
    return rows[:limit]


# ============================================================================
# Top failures
# ============================================================================

def top_failures(audits: Iterable[Audit], limit: int = 5) -> List[Dict[str, Any]]:
    """Most frequent failing item descriptions, highest count first."""
    counts: Dict[str, Dict[str, Any]] = {}
    for audit in audits:
        for item in audit.items:
            if item.result != InspectionResult.FAIL:
                continue
            entry = counts.setdefault(item.description, {"description": item.description, "count": 0})
            entry["count"] += 1
            # Same text in another department still aggregates; last one wins the tag
            entry["department"] = audit.department

    ranked = sorted(counts.values(), key=lambda e: e["count"], reverse=True)
    return ranked[:limit]


# ============================================================================
# Weekly trend
# ============================================================================

def weekly_trend(
    audits: Iterable[Audit],
    department: Optional[str] = None,
    baseline: int = 94,
) -> Dict[str, Any]:
    """Pass rate per weekday plus the mean of the days that have data."""
    passed = [0] * 7
    total = [0] * 7

    for audit in audits:
        if department and audit.department != department:
            continue
        day = weekday_index(audit.due_date)
        if day is None:
            continue
        for item in _scored_items(audit):
            total[day] += 1
            if item.result == InspectionResult.PASS:
                passed[day] += 1

    days = [
        {"day": WEEKDAYS[idx], "passed": passed[idx], "total": total[idx], "score": _pct(passed[idx], total[idx])}
        for idx in range(7)
    ]
    scores = [d["score"] for d in days if d["score"] > 0]
    average = int(round(sum(scores) / len(scores))) if scores else baseline
    return {"days": days, "average": average}


# ============================================================================
# Team / assignee progress
# ============================================================================

def team_stats(audits: Iterable[Audit], users: Optional[Iterable[User]] = None) -> List[Dict[str, Any]]:
    """Per-assignee item counts across all audits, in first-seen order."""
    by_id = users_index(users)
    stats: Dict[str, Dict[str, Any]] = {}

    for audit in audits:
        for item in audit.items:
            name = assignee_label(item.assignee, by_id)
            entry = stats.setdefault(name, {
                "assignee": name, "total": 0, "completed": 0, "passed": 0, "failed": 0,
            })
            entry["total"] += 1
            if item.result is not None:
                entry["completed"] += 1
            if item.result == InspectionResult.PASS:
                entry["passed"] += 1
            elif item.result == InspectionResult.FAIL:
                entry["failed"] += 1

    for entry in stats.values():
        entry["progress"] = _pct(entry["completed"], entry["total"])
    return list(stats.values())


# ============================================================================
# Single audit
# ============================================================================

def audit_progress(audit: Audit) -> int:
    return _pct(sum(1 for i in audit.items if i.result is not None), len(audit.items))


def audit_score(audit: Audit) -> int:
    return _pct(sum(1 for i in audit.items if i.result == InspectionResult.PASS), len(audit.items))


def audit_assignee_progress(audit: Audit, users: Optional[Iterable[User]] = None) -> List[Dict[str, Any]]:
    """Per-assignee total/completed for one audit. Always has an Unassigned row."""
    by_id = users_index(users)
    rows: Dict[str, Dict[str, Any]] = {UNASSIGNED: {"assignee": UNASSIGNED, "total": 0, "completed": 0}}
    for item in audit.items:
        name = assignee_label(item.assignee, by_id)
        row = rows.setdefault(name, {"assignee": name, "total": 0, "completed": 0})
        row["total"] += 1
        if item.result is not None:
            row["completed"] += 1
    for row in rows.values():
        row["progress"] = _pct(row["completed"], row["total"])
    return list(rows.values())


# ============================================================================
# Dashboard
# ============================================================================

def dashboard_summary(
    audits: List[Audit],
    incidents: List[Incident],
    baseline: int = 94,
) -> Dict[str, Any]:
    pending = sum(1 for a in audits if a.status == AuditStatus.PENDING)
    critical = sum(
        1 for i in incidents
        if i.priority == IncidentPriority.CRITICAL
        and i.status not in (IncidentStatus.RESOLVED, IncidentStatus.VERIFIED)
    )
    return {
        "pendingAudits": pending,
        "criticalIncidents": critical,
        "dailyHygieneScore": weekly_trend(audits, baseline=baseline)["average"],
    }
