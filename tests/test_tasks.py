"""Task listing, progress rows, one-way completion and the claim flow."""

from __future__ import annotations

from okcoin.domain.failures import Failure
from okcoin.persistence import tasks as repo_tasks

SHARE_TASK_ID, TAP_TASK_ID, JOIN_TASK_ID = 1, 2, 3


class TestListing:
    def test_default_tasks(self, engine):
        tasks = engine.list_active_tasks()
        assert [t["id"] for t in tasks] == [1, 2, 3]
        assert tasks[2]["target"] is None

    def test_inactive_excluded(self, engine, store):
        repo_tasks.create(store, title="gone", description="", reward=1, icon="", type="join", is_active=False)
        assert engine.count_tasks() == 4
        assert len(engine.list_active_tasks()) == 3

    def test_with_progress_defaults(self, engine, make_user):
        user = make_user("alice")
        engine.update_task_progress(user["id"], SHARE_TASK_ID, 2)

        rows = {t["id"]: t for t in engine.get_user_tasks_with_progress(user["id"])}

        assert rows[SHARE_TASK_ID]["progress"] == 2
        assert rows[TAP_TASK_ID]["progress"] == 0
        assert rows[JOIN_TASK_ID]["completed"] is False
        assert rows[SHARE_TASK_ID]["title"] == "Share with 5 friends"


class TestProgress:
    def test_absent_is_not_zero(self, engine, make_user):
        user = make_user("alice")
        assert engine.get_task_progress(user["id"], SHARE_TASK_ID) is None

        engine.update_task_progress(user["id"], SHARE_TASK_ID, 0)

        row = engine.get_task_progress(user["id"], SHARE_TASK_ID)
        assert row is not None
        assert row["progress"] == 0

    def test_overwrite_not_increment(self, engine, make_user):
        user = make_user("alice")
        engine.update_task_progress(user["id"], SHARE_TASK_ID, 4)
        row = engine.update_task_progress(user["id"], SHARE_TASK_ID, 1)
        assert row["progress"] == 1
        assert row["completed"] is False


class TestCompleteTask:
    def test_completes_once(self, engine, make_user):
        user = make_user("alice", coins=10)

        done, failure = engine.complete_task(user["id"], JOIN_TASK_ID)
        assert failure is None
        assert done["coins"] == 310

        again, failure = engine.complete_task(user["id"], JOIN_TASK_ID)
        assert again is None
        assert failure is Failure.ALREADY_COMPLETED
        assert engine.get_user(user["id"])["coins"] == 310

    def test_does_not_check_threshold(self, engine, make_user):
        user = make_user("alice")
        done, failure = engine.complete_task(user["id"], SHARE_TASK_ID)
        assert failure is None
        assert done["coins"] == 500

    def test_sets_completed_at(self, engine, make_user):
        user = make_user("alice")
        engine.complete_task(user["id"], JOIN_TASK_ID)
        row = engine.get_task_progress(user["id"], JOIN_TASK_ID)
        assert row["completed"] is True
        assert row["completed_at"] is not None

    def test_missing_user_or_task(self, engine, make_user):
        user = make_user("alice")
        assert engine.complete_task(999, JOIN_TASK_ID) == (None, Failure.NOT_FOUND)
        assert engine.complete_task(user["id"], 999) == (None, Failure.NOT_FOUND)

    def test_inactive_task_is_not_found(self, engine, store, make_user):
        task = repo_tasks.create(store, title="old", description="", reward=5, icon="", type="join", is_active=False)
        user = make_user("alice")
        assert engine.complete_task(user["id"], task["id"]) == (None, Failure.NOT_FOUND)


class TestClaimTask:
    def test_binary_task_is_claimable(self, engine, make_user, now):
        user = make_user("alice")
        done, failure = engine.claim_task(user["id"], JOIN_TASK_ID, at=now)
        assert failure is None
        assert done["coins"] == 300

    def test_share_task_waits_for_referrals(self, engine, make_user, now):
        user = make_user("alice", referral_count=3)

        done, failure = engine.claim_task(user["id"], SHARE_TASK_ID, at=now)
        assert done is None
        assert failure is Failure.NOT_READY
        assert engine.get_task_progress(user["id"], SHARE_TASK_ID)["progress"] == 3

        engine.update_user(user["id"], referral_count=5)
        done, failure = engine.claim_task(user["id"], SHARE_TASK_ID, at=now)
        assert failure is None
        assert done["coins"] == 500

    def test_tap_task_measures_coins(self, engine, make_user, now):
        user = make_user("alice", coins=1500)
        done, failure = engine.claim_task(user["id"], TAP_TASK_ID, at=now)
        assert failure is None
        assert done["coins"] == 1700

    def test_claim_twice(self, engine, make_user, now):
        user = make_user("alice")
        engine.claim_task(user["id"], JOIN_TASK_ID, at=now)
        assert engine.claim_task(user["id"], JOIN_TASK_ID, at=now) == (None, Failure.ALREADY_COMPLETED)

    def test_claim_unknown(self, engine, now):
        assert engine.claim_task(1, 1, at=now) == (None, Failure.NOT_FOUND)
