"""Entity store + repositories: ids, absent markers, shallow merge, indexes."""

from __future__ import annotations

import threading

from okcoin.core.db.base import Store
from okcoin.core.db.seed import DEFAULT_TASKS, seed_if_needed
from okcoin.persistence import referrals as repo_referrals
from okcoin.persistence import tasks as repo_tasks
from okcoin.persistence import user_tasks as repo_progress
from okcoin.persistence import users as repo_users


class TestIds:
    def test_ids_start_at_one_per_table(self):
        store = Store()
        assert repo_users.create(store, "a")["id"] == 1
        assert repo_users.create(store, "b")["id"] == 2
        assert repo_tasks.create(store, title="t", description="d", reward=1, icon="i", type="join")["id"] == 1
        assert repo_referrals.add_once(store, 1, 2, 10)["id"] == 1

    def test_clear_resets_counters(self):
        store = Store()
        repo_users.create(store, "a")
        store.clear()
        assert repo_users.get(store, 1) is None
        assert repo_users.create(store, "b")["id"] == 1


class TestUsersRepo:
    def test_get_missing_returns_none(self):
        assert repo_users.get(Store(), 99) is None

    def test_update_is_shallow_merge(self):
        store = Store()
        user = repo_users.create(store, "a")
        updated = repo_users.update(store, user["id"], coins=42)
        assert updated["coins"] == 42
        assert updated["energy"] == user["energy"]
        assert updated["username"] == "a"

    def test_update_missing_returns_none(self):
        assert repo_users.update(Store(), 7, coins=1) is None

    def test_update_keeps_identity_fields(self):
        store = Store()
        user = repo_users.create(store, "a")
        updated = repo_users.update(store, user["id"], id=99, username="zz", created_at=None)
        assert updated["id"] == user["id"]
        assert updated["username"] == "a"
        assert updated["created_at"] == user["created_at"]

    def test_lookup_by_username(self):
        store = Store()
        user = repo_users.create(store, "alice")
        assert repo_users.get_by_username(store, "alice")["id"] == user["id"]
        assert repo_users.get_by_username(store, "bob") is None

    def test_reads_are_copies(self):
        store = Store()
        user = repo_users.create(store, "a")
        user["coins"] = 1_000_000
        assert repo_users.get(store, user["id"])["coins"] == 0


class TestProgressRepo:
    def test_absent_until_recorded(self):
        store = Store()
        assert repo_progress.get(store, 1, 1) is None

    def test_upsert_overwrites(self):
        store = Store()
        first = repo_progress.upsert_progress(store, 1, 2, 5)
        second = repo_progress.upsert_progress(store, 1, 2, 3)
        assert second["id"] == first["id"]
        assert second["progress"] == 3
        assert second["completed"] is False

    def test_rows_are_keyed_by_pair(self):
        store = Store()
        repo_progress.upsert_progress(store, 1, 1, 10)
        repo_progress.upsert_progress(store, 1, 2, 20)
        repo_progress.upsert_progress(store, 2, 1, 30)
        assert repo_progress.get(store, 1, 2)["progress"] == 20
        assert repo_progress.get(store, 2, 1)["progress"] == 30
        assert {r["task_id"] for r in repo_progress.for_user(store, 1)} == {1, 2}

    def test_mark_completed_sets_timestamp(self):
        store = Store()
        row = repo_progress.mark_completed(store, 1, 1)
        assert row["completed"] is True
        assert row["completed_at"] is not None


class TestReferralsRepo:
    def test_add_once_rejects_same_pair(self):
        store = Store()
        assert repo_referrals.add_once(store, 1, 2, 10) is not None
        assert repo_referrals.add_once(store, 1, 2, 10) is None
        assert repo_referrals.exists(store, 1, 2)
        assert not repo_referrals.exists(store, 2, 1)

    def test_for_referrer(self):
        store = Store()
        repo_referrals.add_once(store, 1, 2, 10)
        repo_referrals.add_once(store, 1, 3, 10)
        repo_referrals.add_once(store, 2, 3, 10)
        assert [r["referred_id"] for r in repo_referrals.for_referrer(store, 1)] == [2, 3]


class TestSeed:
    def test_seed_creates_default_tasks_once(self):
        store = Store()
        assert seed_if_needed(store) == len(DEFAULT_TASKS)
        assert seed_if_needed(store) == 0
        assert [t["type"] for t in repo_tasks.list_active(store)] == ["share", "tap", "join"]

    def test_inactive_tasks_are_not_listed(self):
        store = Store()
        repo_tasks.create(store, title="old", description="", reward=1, icon="", type="join", is_active=False)
        assert repo_tasks.list_active(store) == []
        assert repo_tasks.get(store, 1)["title"] == "old"


class TestAtomic:
    def test_reentrant(self):
        store = Store()
        with store.atomic(1, 2):
            with store.atomic(2):
                with store.write():
                    pass

    def test_blocks_other_thread_on_same_user(self):
        store = Store()
        entered = threading.Event()
        released = threading.Event()
        order: list[str] = []

        def other():
            entered.wait()
            with store.atomic(1):
                order.append("other")

        t = threading.Thread(target=other)
        t.start()
        with store.atomic(1):
            entered.set()
            released.wait(0.1)
            order.append("owner")
        t.join(2)
        assert order == ["owner", "other"]

    def test_lock_pool_is_bounded(self):
        store = Store()
        pool = store._stripes
        for uid in range(1, 5000, 7):
            with store.atomic(uid, uid + 1):
                assert repo_users.get(store, uid) is None
        assert store._stripes is pool
        assert len(pool) == Store.LOCK_STRIPES

    def test_pair_on_same_stripe(self):
        store = Store()
        with store.atomic(1, 1 + Store.LOCK_STRIPES):
            pass
