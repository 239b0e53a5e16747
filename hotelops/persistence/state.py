"""
HotelOps Persistence - Persistent State

Binds one in-memory collection (or scalar setting) to the object store with
hydrate-then-sync semantics:

  - mount() hydrates once; an empty stored collection keeps the seed value
  - every change after hydration schedules a trailing, debounced write-back
  - ``loaded`` / ``saving`` flags report progress to the UI layer

Read and write failures are logged and swallowed. Nothing is retried.
"""
import copy
import logging
import threading
from typing import Any, Callable, Generic, Optional, TypeVar

from ..config import get_config
from ..storage import ObjectStore
from .scheduler import WriteScheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")

KIND_STORE = "store"
KIND_SETTING = "setting"

# Write jobs for one key that may run at once; they serialize on the write lock
WRITE_MAX_INSTANCES = 16


def _identity(value):
    return value


class PersistentState(Generic[T]):
    """
    State container for one named collection or setting.

    ``encode`` turns the in-memory value into what the store holds (a list of
    dicts for collections); ``decode`` does the reverse on hydration.
    """

    def __init__(
        self,
        key: str,
        default: T,
        store: ObjectStore,
        scheduler: WriteScheduler,
        kind: str = KIND_STORE,
        encode: Callable[[T], Any] = None,
        decode: Callable[[Any], T] = None,
        debounce_seconds: float = None,
        saving_hold_seconds: float = None,
        seed_when_empty: bool = None,
    ):
        if kind not in (KIND_STORE, KIND_SETTING):
            raise ValueError(f"Unknown state kind: {kind}")
        self.key = key
        self.kind = kind
        self._store = store
        self._scheduler = scheduler
        self._encode = encode or _identity
        self._decode = decode or _identity
        self._default = default
        self._value = default

        if debounce_seconds is None:
            debounce_seconds = get_config("debounce_ms", 800) / 1000.0
        if saving_hold_seconds is None:
            saving_hold_seconds = get_config("saving_hold_ms", 500) / 1000.0
        if seed_when_empty is None:
            seed_when_empty = get_config("seed_empty_collections", True)
        self.debounce_seconds = debounce_seconds
        self.saving_hold_seconds = saving_hold_seconds
        self.seed_when_empty = seed_when_empty

        self._lock = threading.RLock()
        self._write_lock = threading.Lock()
        self._loaded = threading.Event()
        self._mounted = False
        self._saving = False
        self._writes_in_flight = 0
        # Bumped on every change; a write compares it to catch changes made mid-write
        self._version = 0
        self._listeners = []

    # ------------------------------------------------------------------
    # Job ids
    # ------------------------------------------------------------------

    @property
    def _write_job_id(self) -> str:
        return f"persist:{self.key}:write"

    @property
    def _hydrate_job_id(self) -> str:
        return f"persist:{self.key}:hydrate"

    @property
    def _saving_job_id(self) -> str:
        return f"persist:{self.key}:saving"

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._loaded.is_set()

    @property
    def saving(self) -> bool:
        return self._saving

    def wait_loaded(self, timeout: float = None) -> bool:
        return self._loaded.wait(timeout)

    # ------------------------------------------------------------------
    # Value access
    # ------------------------------------------------------------------

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        """Replace the in-memory value and schedule a write-back."""
        with self._lock:
            self._value = value
            self._after_change()

    def update(self, fn: Callable[[T], T]) -> T:
        """Apply ``fn`` to the current value under the state lock."""
        with self._lock:
            self._value = fn(self._value)
            self._after_change()
            return self._value

    def subscribe(self, listener: Callable[[T], None]) -> None:
        """Call ``listener(value)`` after every change and after hydration."""
        self._listeners.append(listener)

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener(self._value)
            except Exception as e:
                logger.error(f"[Persist] Listener for {self.key} failed: {e}")

    def _after_change(self):
        self._version += 1
        self._notify()
        if not self.loaded:
            # Hydration still pending: never clobber stored data with the default
            return
        self._schedule_write()

    def _schedule_write(self):
        # Overlapping runs queue on the write lock instead of being skipped
        self._scheduler.schedule(
            self._write_job_id,
            self._write_back,
            self.debounce_seconds,
            max_instances=WRITE_MAX_INSTANCES,
        )

    # ------------------------------------------------------------------
    # Hydration
    # ------------------------------------------------------------------

    def mount(self, background: bool = True) -> None:
        """Hydrate from the store once. Later calls are no-ops."""
        with self._lock:
            if self._mounted:
                return
            self._mounted = True
        if background and self._scheduler.running:
            self._scheduler.schedule(self._hydrate_job_id, self._hydrate, 0)
        else:
            self._hydrate()

    def _read(self) -> Any:
        if self.kind == KIND_STORE:
            saved = self._store.get_all(self.key)
            if isinstance(saved, list) and len(saved) == 0 and self.seed_when_empty:
                # Empty store counts as "no data yet": keep the seed value
                return None
            return saved
        return self._store.get_setting(self.key)

    def _hydrate(self):
        try:
            saved = self._read()
            if saved is not None:
                decoded = self._decode(saved)
                with self._lock:
                    self._value = decoded
                logger.info(f"[Persist] Hydrated {self.key} from store")
            else:
                logger.info(f"[Persist] No stored data for {self.key}, using default")
        except Exception as e:
            logger.error(f"[Persist] Error loading {self.key} from DB: {e}")
        finally:
            with self._lock:
                self._loaded.set()
                self._notify()
                # Persist whatever we settled on (seed data on first run)
                self._schedule_write()

    # ------------------------------------------------------------------
    # Write-back
    # ------------------------------------------------------------------

    def _write_back(self):
        with self._lock:
            self._saving = True
            self._writes_in_flight += 1

        with self._write_lock:
            # Snapshot under the write lock so the last write to run carries the latest value
            with self._lock:
                snapshot = copy.deepcopy(self._value)
                version = self._version
            try:
                payload = self._encode(snapshot)
                if self.kind == KIND_STORE:
                    if not isinstance(payload, list):
                        raise TypeError(f"encoded {self.key} must be a list, got {type(payload).__name__}")
                    self._store.save_all(self.key, payload)
                else:
                    self._store.save_setting(self.key, payload)
                logger.debug(f"[Persist] Saved {self.key}")
            except Exception as e:
                logger.error(f"[Persist] Error saving {self.key} to DB: {e}")
            finally:
                with self._lock:
                    self._writes_in_flight -= 1
                    changed = self._version != version
                if changed and not self.has_pending_write():
                    logger.debug(f"[Persist] {self.key} changed during write, scheduling another")
                    self._schedule_write()
                # Keep the indicator up briefly so fast writes are still visible
                self._scheduler.schedule(self._saving_job_id, self._clear_saving, self.saving_hold_seconds)

    def _clear_saving(self):
        with self._lock:
            if self._writes_in_flight == 0:
                self._saving = False

    def has_pending_write(self) -> bool:
        return self._scheduler.pending(self._write_job_id)

    def flush(self) -> bool:
        """Run a pending write immediately. Returns False if none was pending."""
        return self._scheduler.run_now(self._write_job_id)
