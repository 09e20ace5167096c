"""Lazy energy regeneration: 1 unit/second, capped, clock advanced only on gain."""

from __future__ import annotations

from datetime import timedelta

from okcoin.domain import energy as d_energy


class TestRegenerated:
    def test_one_per_second(self, now):
        assert d_energy.regenerated(500, 1000, now - timedelta(seconds=200), now) == 200

    def test_capped_at_max(self, now):
        assert d_energy.regenerated(900, 1000, now - timedelta(hours=1), now) == 100

    def test_full_energy_gains_nothing(self, now):
        assert d_energy.regenerated(1000, 1000, now - timedelta(hours=1), now) == 0

    def test_partial_second_gains_nothing(self, now):
        assert d_energy.regenerated(10, 1000, now - timedelta(milliseconds=900), now) == 0

    def test_clock_going_backwards_gains_nothing(self, now):
        assert d_energy.regenerated(10, 1000, now + timedelta(seconds=30), now) == 0


class TestReconcile:
    def test_regenerates_and_advances_clock(self, store, make_user, seconds_later, now):
        user = make_user("alice", energy=500, last_energy_update=now)
        at = seconds_later(200)

        after = d_energy.reconcile(store, user["id"], at)

        assert after["energy"] == 700
        assert after["last_energy_update"] == at

    def test_second_call_without_elapsed_time_is_noop(self, store, make_user, seconds_later, now):
        user = make_user("alice", energy=500, last_energy_update=now)
        at = seconds_later(200)
        first = d_energy.reconcile(store, user["id"], at)

        second = d_energy.reconcile(store, user["id"], at)

        assert second == first

    def test_no_gain_keeps_last_update(self, store, make_user, seconds_later, now):
        user = make_user("alice", energy=500, last_energy_update=now)

        after = d_energy.reconcile(store, user["id"], seconds_later(0.5))

        assert after["energy"] == 500
        assert after["last_energy_update"] == now

    def test_never_exceeds_max(self, store, make_user, seconds_later, now):
        user = make_user("alice", energy=990, last_energy_update=now)

        after = d_energy.reconcile(store, user["id"], seconds_later(3600))

        assert after["energy"] == after["max_energy"] == 1000

    def test_missing_user(self, store, now):
        assert d_energy.reconcile(store, 404, now) is None
