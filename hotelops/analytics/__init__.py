"""
HotelOps Analytics
Heatmaps, failure rankings, weekly trend and team progress over audit records.
"""
from .engine import (
    WEEKDAYS,
    audit_assignee_progress,
    audit_progress,
    audit_score,
    dashboard_summary,
    department_heatmap,
    team_stats,
    top_failures,
    weekday_index,
    weekly_trend,
)

__all__ = [
    "WEEKDAYS",
    "audit_assignee_progress",
    "audit_progress",
    "audit_score",
    "dashboard_summary",
    "department_heatmap",
    "team_stats",
    "top_failures",
    "weekday_index",
    "weekly_trend",
]
