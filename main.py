# ============================================================================
# HotelOps - Local Backend
# ============================================================================
# Hotel audit / incident / SOP tool for a single operator.  All data lives
# in a local SQLite object store; in-memory collections are hydrated on
# startup and written back on a debounce after each change.
#
#   uvicorn main:app            (or: python main.py)
# ============================================================================

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hotelops.analytics.routes import register_analytics_routes
from hotelops.config import get_config
from hotelops.ops import HotelOpsState, OpsError
from hotelops.ops.routes import register_ops_routes

logger = logging.getLogger("hotelops.main")


def create_app(state: HotelOpsState = None) -> FastAPI:
    """Build the API around a state container (a fresh one by default)."""
    app = FastAPI(title="HotelOps")
    app.state.hotelops = state or HotelOpsState()

    @app.on_event("startup")
    async def _startup():
        ready = app.state.hotelops.start(wait=True)
        if not ready:
            logger.warning("[Main] Starting before every collection finished loading")
        logger.info("[Main] HotelOps backend startup")

    @app.on_event("shutdown")
    async def _shutdown():
        app.state.hotelops.stop()
        logger.info("[Main] HotelOps backend shutdown")

    @app.exception_handler(OpsError)
    async def _ops_error(request: Request, exc: OpsError):
        body = {"ok": False, "error": exc.message}
        field = getattr(exc, "field", None)
        if field:
            body["field"] = field
        if exc.status_code == 403:
            body["view"] = app.state.hotelops.session.view.value
        return JSONResponse(body, status_code=exc.status_code)

    @app.get("/api/health")
    async def health():
        return {"ok": True, "ready": app.state.hotelops.ready}

    register_ops_routes(app)
    register_analytics_routes(app)
    return app


logging.basicConfig(
    level=getattr(logging, str(get_config("log_level", "INFO")).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
