# ============================================================================
# HotelOps - Application State
# ============================================================================
# Owns every persisted collection and setting plus the operator session.
# One instance per app, attached to ``app.state.hotelops`` by the factory.
# ============================================================================

import logging
from typing import Dict, List, Optional

from ..config import get_config
from ..domain import (
    Audit,
    AuditTemplate,
    Collection,
    Incident,
    SOP,
    User,
    list_codec,
    users_index,
)
from ..domain.seed import (
    seed_audits,
    seed_collections,
    seed_incidents,
    seed_sops,
    seed_templates,
    seed_users,
)
from ..persistence import KIND_SETTING, PersistentState, WriteScheduler
from ..storage import ObjectStore, SessionSlots
from .session import SessionManager

logger = logging.getLogger(__name__)


class HotelOpsState:
    """Persistent collections, settings and session for one operator."""

    def __init__(
        self,
        db_path: Optional[str] = None,
        scheduler: Optional[WriteScheduler] = None,
        debounce_seconds: Optional[float] = None,
        saving_hold_seconds: Optional[float] = None,
        seed_when_empty: Optional[bool] = None,
    ):
        self.db_path = db_path or get_config("db_path", "hotelops.db")
        self.store = ObjectStore(self.db_path)
        self.slots = SessionSlots(self.db_path)
        self.scheduler = scheduler or WriteScheduler()

        common = dict(
            store=self.store,
            scheduler=self.scheduler,
            debounce_seconds=debounce_seconds,
            saving_hold_seconds=saving_hold_seconds,
            seed_when_empty=seed_when_empty,
        )

        def collection(key, seed, record_cls):
            encode, decode = list_codec(record_cls)
            return PersistentState(key, seed, encode=encode, decode=decode, **common)

        self.users: PersistentState[List[User]] = collection("users", seed_users(), User)
        self.audits: PersistentState[List[Audit]] = collection("audits", seed_audits(), Audit)
        self.incidents: PersistentState[List[Incident]] = collection("incidents", seed_incidents(), Incident)
        self.sops: PersistentState[List[SOP]] = collection("sops", seed_sops(), SOP)
        self.templates: PersistentState[List[AuditTemplate]] = collection(
            "templates", seed_templates(), AuditTemplate
        )
        self.collections: PersistentState[List[Collection]] = collection(
            "collections", seed_collections(), Collection
        )

        self.hotels: PersistentState[List[str]] = PersistentState(
            "hotels", list(get_config("default_hotels")), kind=KIND_SETTING, **common
        )
        self.departments: PersistentState[List[str]] = PersistentState(
            "departments", list(get_config("default_departments")), kind=KIND_SETTING, **common
        )

        self.session = SessionManager(self.slots, lambda: self.users.value)
        self.users.subscribe(self._on_users_changed)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def all_states(self) -> Dict[str, PersistentState]:
        return {
            "users": self.users,
            "audits": self.audits,
            "incidents": self.incidents,
            "sops": self.sops,
            "templates": self.templates,
            "collections": self.collections,
            "hotels": self.hotels,
            "departments": self.departments,
        }

    def start(self, wait: bool = True, timeout: Optional[float] = None) -> bool:
        """Start the write scheduler and hydrate every collection.

        With ``wait`` the call blocks until all collections settle (or the
        timeout passes). Returns whether everything is loaded.
        """
        self.scheduler.start()
        for state in self.all_states.values():
            state.mount()
        if not wait:
            return self.ready
        if timeout is None:
            timeout = get_config("hydrate_timeout_seconds", 10)
        for key, state in self.all_states.items():
            if not state.wait_loaded(timeout):
                logger.warning(f"[State] {key} not hydrated after {timeout}s")
        logger.info(f"[State] Started (ready={self.ready})")
        return self.ready

    def stop(self):
        """Flush pending writes and stop the scheduler."""
        for key, state in self.all_states.items():
            if state.flush():
                logger.info(f"[State] Flushed pending write for {key}")
        self.scheduler.shutdown(wait=True)

    @property
    def ready(self) -> bool:
        return all(s.loaded for s in self.all_states.values())

    @property
    def saving(self) -> bool:
        return any(s.saving for s in self.all_states.values())

    def status(self) -> Dict:
        return {
            "ready": self.ready,
            "saving": self.saving,
            "collections": {
                key: {"loaded": s.loaded, "saving": s.saving, "pending": s.has_pending_write()}
                for key, s in self.all_states.items()
            },
        }

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def users_by_id(self) -> Dict[str, User]:
        return users_index(self.users.value)

    def _on_users_changed(self, users):
        if self.users.loaded:
            self.session.restore()
