"""Tests for seed decomposition and cartesian pockets."""

from __future__ import annotations

import itertools

import pytest

from lazypick import (
    GLOBAL_POCKET,
    CartesianPocket,
    CombiningSeeds,
    ErrorCode,
    PickSession,
    PickUsageError,
    SeedMode,
    TrailingSeedId,
)
from lazypick.pockets import PocketSeedId


@pytest.fixture
def session() -> PickSession:
    session = PickSession()
    session.start_new_run()
    return session


def run_until_done(session, test, max_runs=200):
    runs = []
    while True:
        session.start_new_run()
        runs.append(test(session))
        if not session.has_pending_combinations():
            return runs
        assert len(runs) < max_runs, "session did not terminate"


# ============================================================
# CombiningSeeds Tests
# ============================================================


class TestCombiningSeeds:
    """Tests for CombiningSeeds budgets and core picks."""

    def test_uncombined_launch(self, session):
        seeds = CombiningSeeds.uncombined(session, "list", 4)
        assert seeds.mode is SeedMode.PLAIN
        assert seeds.pairwise_countdown == 0
        assert seeds.slice_budget == 3
        assert seeds.pocket is None

    def test_combined_launch(self, session):
        seeds = CombiningSeeds.combined(session, "perm", 5)
        assert seeds.mode is SeedMode.PAIRWISE
        assert seeds.pairwise_countdown == 17
        assert seeds.slice_budget == 20

    def test_combined_launch_with_pocket(self, session):
        pocket = CartesianPocket("hub")
        seeds = CombiningSeeds.combined(session, "perm", 3, pocket)
        assert seeds.mode is SeedMode.POCKETED
        assert seeds.pocket == pocket

    def test_pocketed_mode_requires_pocket(self, session):
        with pytest.raises(ValueError, match="require a pocket"):
            CombiningSeeds(session, "x", SeedMode.POCKETED, 1, 1)

    def test_first_seed_uses_base_id(self, session):
        seeds = CombiningSeeds.combined(session, "perm", 5)
        assert seeds.next(5) == 0
        assert session.options_of("perm", True, 5)
        assert seeds.pairwise_countdown == 12
        assert seeds.slice_budget == 4

    def test_later_seeds_use_trailing_ids(self, session):
        seeds = CombiningSeeds.combined(session, "perm", 5)
        seeds.next(5)
        seeds.next(4)
        assert session.options_of(TrailingSeedId(2, "perm"), True, 4)
        assert seeds.seed_count == 2

    def test_uncombined_seed_picks_uncombined(self, session):
        seeds = CombiningSeeds.uncombined(session, "list", 3)
        assert 0 <= seeds.next(6) < 6
        assert session.options_of("list", False, 6)
        assert not session.options_of("list", True, 6)

    def test_trivial_bound_after_countdown_skips_core_pick(self, session):
        seeds = CombiningSeeds.uncombined(session, "list", 1)
        assert seeds.next(1) == 0
        assert len(session.ledger) == 0
        assert seeds.seed_count == 0

    def test_large_bound_is_factored(self, session):
        seeds = CombiningSeeds.combined(session, "big", 2)
        value = seeds.next(100)
        assert 0 <= value < 100
        assert seeds.seed_count == 3
        assert session.options_of("big", True, 10)
        assert session.options_of(TrailingSeedId(2, "big"), True, 2)
        assert session.options_of(TrailingSeedId(3, "big"), False, 5)

    @pytest.mark.parametrize("bound", [0, -3])
    def test_non_positive_bound_rejected(self, session, bound):
        seeds = CombiningSeeds.combined(session, "perm", 3)
        with pytest.raises(PickUsageError, match="positive") as exc_info:
            seeds.next(bound)
        assert exc_info.value.error_code == ErrorCode.INVALID_SEED_BOUND

    def test_pocket_serves_picks_while_slice_lasts(self, session):
        seeds = CombiningSeeds.combined(session, "perm", 3, CartesianPocket("hub"))
        seeds.next(3)
        assert session.options_of(PocketSeedId((), "perm"), True, 3)
        assert seeds.mode is SeedMode.POCKETED

    def test_pocket_dropped_when_slice_runs_out(self, session):
        seeds = CombiningSeeds(session, "perm", SeedMode.POCKETED, 20, 2, CartesianPocket("hub"))
        seeds.next(3)
        assert seeds.mode is SeedMode.PAIRWISE
        assert seeds.pocket is None
        assert session.options_of("perm", True, 3)

    def test_permutation_covers_every_first_element(self):
        def test(session):
            seeds = CombiningSeeds.combined(session, "perm", 4)
            remaining = ["a", "b", "c", "d"]
            order = []
            while remaining:
                order.append(remaining.pop(seeds.next(len(remaining))))
            return tuple(order)

        runs = run_until_done(PickSession(), test)
        assert {run[0] for run in runs} == {"a", "b", "c", "d"}
        assert all(sorted(run) == ["a", "b", "c", "d"] for run in runs)


# ============================================================
# CartesianPocket Tests
# ============================================================


class TestCartesianPocket:
    """Tests for fully combined pocket picks."""

    def test_equality_by_name(self):
        assert CartesianPocket("hub") == CartesianPocket("hub")
        assert CartesianPocket("hub") != CartesianPocket("other")
        assert hash(CartesianPocket("hub")) == hash(CartesianPocket("hub"))

    def test_global_pocket(self):
        assert GLOBAL_POCKET.name is None
        assert GLOBAL_POCKET == CartesianPocket()
        assert str(GLOBAL_POCKET) == "CartesianPocket"
        assert str(CartesianPocket("hub")) == "CartesianPocket: hub"

    def test_first_pick_is_primary(self, session):
        assert CartesianPocket("hub").pick(session, "x", 3) == 0

    def test_repeated_pick_in_run_returns_same_value(self, session):
        pocket = CartesianPocket("hub")
        pocket.pick(session, "x", 2)
        first = pocket.pick(session, "y", 3)
        assert pocket.pick(session, "y", 3) == first
        assert len(session.trail) == 2

    def test_core_ids_include_previous_picks(self, session):
        pocket = CartesianPocket("hub")
        x = pocket.pick(session, "x", 2)
        pocket.pick(session, "y", 3)
        assert session.options_of(PocketSeedId((), "x"), True, 2)
        assert session.options_of(PocketSeedId((x,), "y"), True, 3)

    def test_full_cartesian_product(self):
        pocket = CartesianPocket("hub")

        def test(session):
            return pocket.pick(session, "x", 2), pocket.pick(session, "y", 3)

        runs = run_until_done(PickSession(), test)
        assert set(runs) == set(itertools.product(range(2), range(3)))

    def test_pocket_recreated_per_run(self):
        def test(session):
            pocket = CartesianPocket("fresh")
            return pocket.pick(session, "x", 2), pocket.pick(session, "y", 2)

        runs = run_until_done(PickSession(), test)
        assert set(runs) == set(itertools.product(range(2), range(2)))

    def test_separate_pockets_do_not_share_crumbs(self, session):
        CartesianPocket("one").pick(session, "x", 2)
        CartesianPocket("two").pick(session, "y", 2)
        assert session.options_of(PocketSeedId((), "y"), True, 2)
