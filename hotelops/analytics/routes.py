# ============================================================================
# HotelOps - Analytics API Routes
# ============================================================================
# Read-only aggregations for the reports and dashboard screens.
# Registration via register_analytics_routes(app).
# ============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Request

from ..config import get_config
from ..web import get_state
from .engine import (
    WEEKDAYS,
    dashboard_summary,
    department_heatmap,
    team_stats,
    top_failures,
    weekly_trend,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def _department(value: Optional[str]) -> Optional[str]:
    # The department dropdown sends "All" for no filter
    if not value or value == "All":
        return None
    return value


@router.get("/heatmap")
async def heatmap(request: Request, department: Optional[str] = None, limit: Optional[int] = None):
    state = get_state(request)
    state.session.require_user()
    rows = department_heatmap(
        state.audits.value,
        department=_department(department),
        limit=limit or get_config("heatmap_limit", 10),
    )
    return {"ok": True, "days": WEEKDAYS, "rows": rows}


@router.get("/top-failures")
async def failures(request: Request, limit: Optional[int] = None):
    state = get_state(request)
    state.session.require_user()
    items = top_failures(state.audits.value, limit=limit or get_config("top_failures_limit", 5))
    return {"ok": True, "failures": items}


@router.get("/trend")
async def trend(request: Request, department: Optional[str] = None):
    state = get_state(request)
    state.session.require_user()
    result = weekly_trend(
        state.audits.value,
        department=_department(department),
        baseline=get_config("trend_baseline", 94),
    )
    return {"ok": True, **result}


@router.get("/team")
async def team(request: Request):
    state = get_state(request)
    state.session.require_user()
    return {"ok": True, "team": team_stats(state.audits.value, state.users.value)}


@router.get("/dashboard")
async def dashboard(request: Request):
    state = get_state(request)
    state.session.require_user()
    summary = dashboard_summary(
        state.audits.value,
        state.incidents.value,
        baseline=get_config("trend_baseline", 94),
    )
    return {"ok": True, **summary}


def register_analytics_routes(app):
    app.include_router(router)
    logger.info("[Analytics] Routes registered")
