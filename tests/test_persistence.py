"""
HotelOps - Persistence Tests
=============================
Tests: hydration, seed handling, debounced write-back, saving flag,
       failure handling, write scheduler replacement
"""

import threading
import time

import pytest

from hotelops.persistence import KIND_SETTING, PersistentState, WriteScheduler
from hotelops.storage import ObjectStore
from tests.conftest import wait_for


class RecordingStore(ObjectStore):
    """ObjectStore that records every write and can be told to fail."""

    def __init__(self, db_path, fail_reads=False, fail_writes=False):
        super().__init__(db_path)
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes = []
        self._lock = threading.Lock()

    def get_all(self, collection):
        if self.fail_reads:
            raise RuntimeError("disk unavailable")
        return super().get_all(collection)

    def save_all(self, collection, records):
        with self._lock:
            self.writes.append((collection, records))
        if self.fail_writes:
            raise RuntimeError("disk full")
        super().save_all(collection, records)

    def save_setting(self, key, value):
        with self._lock:
            self.writes.append((key, value))
        super().save_setting(key, value)


class SlowStore(RecordingStore):
    """Collection writes for ``slow_keys`` sleep before touching the database."""

    def __init__(self, db_path, delay=0.6, slow_keys=("audits",)):
        super().__init__(db_path)
        self.delay = delay
        self.slow_keys = slow_keys

    def save_all(self, collection, records):
        if collection in self.slow_keys:
            time.sleep(self.delay)
        super().save_all(collection, records)


def make(store, scheduler, default=None, **kwargs):
    kwargs.setdefault("debounce_seconds", 0.05)
    kwargs.setdefault("saving_hold_seconds", 0.05)
    kwargs.setdefault("seed_when_empty", True)
    return PersistentState("audits", default if default is not None else [{"id": "seed-1"}],
                           store, scheduler, **kwargs)


# ============================================================================
# Hydration
# ============================================================================

class TestHydration:

    def test_stored_data_wins_over_seed(self, db_path, scheduler):
        store = RecordingStore(db_path)
        store.save_all("audits", [{"id": "stored-1"}, {"id": "stored-2"}])
        ps = make(store, scheduler)
        ps.mount(background=False)

        assert ps.loaded
        assert [r["id"] for r in ps.value] == ["stored-1", "stored-2"]
        time.sleep(0.3)
        assert [r["id"] for r in store.get_all("audits")] == ["stored-1", "stored-2"]

    def test_empty_store_keeps_seed_and_persists_it(self, db_path, scheduler):
        store = RecordingStore(db_path)
        ps = make(store, scheduler)
        ps.mount()

        assert ps.wait_loaded(2)
        assert ps.value == [{"id": "seed-1"}]
        assert wait_for(lambda: store.count("audits") == 1)

    def test_empty_store_without_seeding(self, db_path, scheduler):
        store = RecordingStore(db_path)
        store.save_all("audits", [])
        ps = make(store, scheduler, seed_when_empty=False)
        ps.mount(background=False)
        assert ps.value == []

    def test_read_failure_keeps_default_and_still_loads(self, db_path, scheduler):
        store = RecordingStore(db_path, fail_reads=True)
        ps = make(store, scheduler)
        ps.mount(background=False)
        assert ps.loaded
        assert ps.value == [{"id": "seed-1"}]

    def test_mount_is_idempotent(self, db_path, scheduler):
        store = RecordingStore(db_path)
        store.save_all("audits", [{"id": "stored-1"}])
        ps = make(store, scheduler)
        ps.mount(background=False)
        ps.set([{"id": "changed"}])
        ps.mount(background=False)
        assert ps.value == [{"id": "changed"}]

    def test_listener_sees_hydrated_value(self, db_path, scheduler):
        store = RecordingStore(db_path)
        store.save_all("audits", [{"id": "stored-1"}])
        seen = []
        ps = make(store, scheduler)
        ps.subscribe(lambda value: seen.append(list(value)))
        ps.mount(background=False)
        assert seen[-1] == [{"id": "stored-1"}]

    def test_no_write_before_hydration(self, db_path, scheduler):
        store = RecordingStore(db_path)
        store.save_all("audits", [{"id": "stored-1"}])
        store.writes.clear()

        ps = make(store, scheduler)
        ps.set([{"id": "early"}])
        time.sleep(0.2)

        assert not ps.has_pending_write()
        assert store.writes == []
        assert store.get_all("audits") == [{"id": "stored-1"}]


# ============================================================================
# Write-back
# ============================================================================

class TestWriteBack:

    def _mounted(self, db_path, scheduler, **kwargs):
        store = RecordingStore(db_path)
        store.save_all("audits", [{"id": "stored-1"}])
        store.writes.clear()
        ps = make(store, scheduler, **kwargs)
        ps.mount(background=False)
        # Let the post-hydration write go through, then start counting
        assert wait_for(lambda: len(store.writes) >= 1)
        assert wait_for(lambda: not ps.saving, timeout=3)
        store.writes.clear()
        return store, ps

    def test_rapid_changes_produce_one_write_of_final_state(self, db_path, scheduler):
        store, ps = self._mounted(db_path, scheduler, debounce_seconds=0.3)
        for n in range(5):
            ps.set([{"id": f"v{n}"}])
            time.sleep(0.02)

        assert wait_for(lambda: len(store.writes) >= 1, timeout=3)
        time.sleep(0.5)
        assert len(store.writes) == 1
        assert store.writes[0][1] == [{"id": "v4"}]
        assert store.get_all("audits") == [{"id": "v4"}]

    def test_update_applies_function(self, db_path, scheduler):
        store, ps = self._mounted(db_path, scheduler)
        ps.update(lambda records: [{"id": "new"}] + records)
        assert wait_for(lambda: store.get_all("audits") == [{"id": "new"}, {"id": "stored-1"}])

    def test_saving_flag_held_after_write(self, db_path, scheduler):
        store, ps = self._mounted(db_path, scheduler, debounce_seconds=0.01, saving_hold_seconds=0.5)
        assert not ps.saving
        ps.set([{"id": "x"}])

        assert wait_for(lambda: len(store.writes) == 1)
        assert ps.saving
        assert wait_for(lambda: not ps.saving, timeout=3)

    def test_write_failure_is_swallowed_and_not_retried(self, db_path, scheduler):
        store, ps = self._mounted(db_path, scheduler)
        store.fail_writes = True
        ps.set([{"id": "lost"}])

        assert wait_for(lambda: len(store.writes) == 1)
        assert wait_for(lambda: not ps.saving, timeout=3)
        time.sleep(0.3)
        assert len(store.writes) == 1
        assert ps.value == [{"id": "lost"}]

    def test_flush_writes_immediately(self, db_path, scheduler):
        store, ps = self._mounted(db_path, scheduler)
        ps.debounce_seconds = 30
        ps.set([{"id": "flushed"}])
        assert ps.has_pending_write()

        assert ps.flush() is True
        assert store.get_all("audits") == [{"id": "flushed"}]
        assert not ps.has_pending_write()
        assert ps.flush() is False

    def test_change_during_slow_write_is_persisted(self, db_path, scheduler):
        store = SlowStore(db_path)
        store.save_all("audits", [{"id": "stored-1"}])
        ps = make(store, scheduler)
        ps.mount(background=False)

        ps.set([{"id": "A"}])
        time.sleep(0.2)  # first write is now sleeping inside save_all
        ps.set([{"id": "B"}])

        assert wait_for(lambda: store.get_all("audits") == [{"id": "B"}], timeout=4)
        assert wait_for(lambda: not ps.has_pending_write() and not ps.saving, timeout=3)
        assert store.get_all("audits") == [{"id": "B"}]

    def test_different_collections_write_independently(self, db_path, scheduler):
        store = SlowStore(db_path, delay=0.6, slow_keys=("audits",))
        store.save_all("audits", [{"id": "stored-1"}])
        audits = make(store, scheduler)
        sops = PersistentState("sops", [], store, scheduler, debounce_seconds=0.05, saving_hold_seconds=0.05)
        audits.mount(background=False)
        sops.mount(background=False)

        audits.set([{"id": "audit-new"}])
        sops.set([{"id": "sop-new"}])

        # The sops write lands while the audits write is still sleeping
        assert wait_for(lambda: store.get_all("sops") == [{"id": "sop-new"}], timeout=0.4)
        assert store.get_all("audits") == [{"id": "stored-1"}]
        assert wait_for(lambda: store.get_all("audits") == [{"id": "audit-new"}], timeout=3)

    def test_store_state_never_writes_non_list_into_settings(self, db_path, scheduler):
        store = RecordingStore(db_path)
        ps = PersistentState(
            "sops", ["a"], store, scheduler,
            encode=lambda names: {"names": names},
            debounce_seconds=0.01, saving_hold_seconds=0.01,
        )
        ps.mount(background=False)
        time.sleep(0.3)

        assert store.writes == []
        assert store.get_setting("sops") is None
        assert store.get_all("sops") == []
        assert ps.value == ["a"]

    def test_encode_applied_on_write(self, db_path, scheduler):
        store = RecordingStore(db_path)
        ps = PersistentState(
            "sops", ["a", "b"], store, scheduler,
            encode=lambda names: [{"id": n} for n in names],
            decode=lambda rows: [r["id"] for r in rows],
            debounce_seconds=0.01, saving_hold_seconds=0.01,
        )
        ps.mount(background=False)
        assert wait_for(lambda: store.get_all("sops") == [{"id": "a"}, {"id": "b"}])


class TestSettings:

    def test_setting_default_then_persisted(self, db_path, scheduler):
        store = RecordingStore(db_path)
        ps = PersistentState("hotels", ["Grand Plaza Hotel"], store, scheduler, kind=KIND_SETTING,
                             debounce_seconds=0.01, saving_hold_seconds=0.01)
        ps.mount(background=False)
        assert ps.value == ["Grand Plaza Hotel"]

        ps.update(lambda hotels: hotels + ["Lakeside Inn"])
        assert wait_for(lambda: store.get_setting("hotels") == ["Grand Plaza Hotel", "Lakeside Inn"])

    def test_stored_setting_wins(self, db_path, scheduler):
        store = RecordingStore(db_path)
        store.save_setting("departments", ["Spa"])
        ps = PersistentState("departments", ["Kitchen"], store, scheduler, kind=KIND_SETTING)
        ps.mount(background=False)
        assert ps.value == ["Spa"]

    def test_unknown_kind_rejected(self, db_path, scheduler):
        with pytest.raises(ValueError):
            PersistentState("hotels", [], ObjectStore(db_path), scheduler, kind="cookie")


# ============================================================================
# Write scheduler
# ============================================================================

class TestWriteScheduler:

    def test_rescheduling_replaces_pending_job(self, scheduler):
        ran = []
        scheduler.schedule("job", ran.append, 0.2, args=("first",))
        scheduler.schedule("job", ran.append, 0.2, args=("second",))
        assert wait_for(lambda: ran, timeout=2)
        time.sleep(0.3)
        assert ran == ["second"]

    def test_overlapping_runs_allowed_up_to_max_instances(self, scheduler):
        ran = []

        def slow(tag):
            time.sleep(0.4)
            ran.append(tag)

        scheduler.schedule("job", slow, 0, args=("first",), max_instances=2)
        time.sleep(0.15)
        scheduler.schedule("job", slow, 0, args=("second",), max_instances=2)
        assert wait_for(lambda: len(ran) == 2, timeout=3)
        assert ran == ["first", "second"]

    def test_cancel(self, scheduler):
        ran = []
        scheduler.schedule("job", ran.append, 0.2, args=("x",))
        assert scheduler.cancel("job") is True
        assert scheduler.cancel("job") is False
        time.sleep(0.3)
        assert ran == []

    def test_run_now(self, scheduler):
        ran = []
        scheduler.schedule("job", ran.append, 30, args=("now",))
        assert scheduler.pending("job")
        assert scheduler.run_now("job") is True
        assert ran == ["now"]
        assert not scheduler.pending("job")

    def test_start_and_shutdown_are_idempotent(self):
        s = WriteScheduler()
        s.start()
        s.start()
        assert s.running
        s.shutdown()
        s.shutdown()
        assert not s.running
