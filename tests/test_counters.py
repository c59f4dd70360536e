"""Tests for the dense counter set and the value ledger."""

from __future__ import annotations

import pytest

from lazypick.core import SCORE_BUDGET, CounterSet, ParameterDefinition, ValueLedger


@pytest.fixture
def ledger() -> ValueLedger:
    ledger = ValueLedger()
    ledger.create_options(ParameterDefinition("a", True, 3))
    ledger.create_options(ParameterDefinition("b", False, 2))
    return ledger


# ============================================================
# ValueLedger Tests
# ============================================================


class TestValueLedger:
    """Tests for the append-only value arena."""

    def test_slot_ids_are_dense(self, ledger):
        assert [info.slot_id for info in ledger] == [0, 1, 2, 3, 4]
        assert len(ledger) == 5

    def test_indices_per_definition(self, ledger):
        assert [info.index for info in ledger] == [0, 1, 2, 0, 1]

    def test_lookback_seed_only_on_combined_primary(self, ledger):
        seeds = [info.stats.lookback_seed for info in ledger]
        assert seeds == [3, 0, 0, 0, 0]

    def test_uncombined_values_track_first_touch_enablers(self, ledger):
        a0, _, _, b0, _ = ledger.entries
        assert None not in a0.stats.pending_combos
        assert None in b0.stats.pending_combos

    def test_definition_identity(self):
        assert ParameterDefinition("x", True, 2) == ParameterDefinition("x", True, 2)
        assert ParameterDefinition("x", True, 2) != ParameterDefinition("x", False, 2)
        assert ParameterDefinition("x", True, 2) != ParameterDefinition("x", True, 3)

    def test_definition_repr(self):
        assert repr(ParameterDefinition("x", False, 4)) == "ParameterDefinition('x', uncombined, 4)"

    def test_fresh_stats(self, ledger):
        stats = ledger.entries[0].stats
        assert stats.total_count == 0
        assert stats.forward_request_count == 0
        assert stats.enabler_count == 0
        assert stats.forward_score() == 2

    def test_weighted_enabler_count_halves_for_uncombined(self, ledger):
        stats = ledger.entries[3].stats
        stats.enabler_count = 3
        assert stats.weighted_enabler_count() == 4
        stats.total_count = 2
        assert stats.weighted_enabler_count() == 1


# ============================================================
# CounterSet Tests
# ============================================================


class TestCounterSet:
    """Tests for CounterSet as a set and as a count map."""

    def test_untouched_entries_report_initial_value(self, ledger):
        counts = CounterSet(ledger)
        assert counts.get(ledger.entries[4]) == 0
        negative = CounterSet(ledger, -SCORE_BUDGET)
        assert negative.get(ledger.entries[4]) == -SCORE_BUDGET

    def test_add_returns_new_count(self, ledger):
        counts = CounterSet(ledger)
        info = ledger.entries[2]
        assert counts.increase(info) == 1
        assert counts.increase(info) == 2
        assert counts.decrease(info) == 1
        assert counts.add(info, 10) == 11

    def test_add_member(self, ledger):
        members = CounterSet(ledger)
        info = ledger.entries[1]
        assert members.add_member(info) is True
        assert members.add_member(info) is False
        assert info in members
        assert len(members) == 1

    def test_iterates_positive_counts_in_slot_order(self, ledger):
        members = CounterSet(ledger)
        members.increase(ledger.entries[3])
        members.increase(ledger.entries[0])
        members.increase(ledger.entries[2])
        members.decrease(ledger.entries[2])
        assert list(members) == [ledger.entries[0], ledger.entries[3]]

    def test_grows_with_ledger(self, ledger):
        members = CounterSet(ledger)
        members.increase(ledger.entries[0])
        late = ledger.create_options(ParameterDefinition("c", True, 2))
        assert members.get(late[1]) == 0
        members.increase(late[1])
        assert late[1] in members

    def test_discard(self, ledger):
        members = CounterSet(ledger)
        info = ledger.entries[0]
        members.add_member(info)
        assert members.discard(info) is True
        assert members.discard(info) is False
        assert info not in members
        assert len(members) == 0

    def test_bool(self, ledger):
        members = CounterSet(ledger)
        assert not members
        members.increase(ledger.entries[0])
        assert members

    def test_shifted_counts_reject_size_and_removal(self, ledger):
        shifted = CounterSet(ledger, -SCORE_BUDGET)
        with pytest.raises(TypeError, match="start at 0"):
            len(shifted)
        with pytest.raises(TypeError, match="start at 0"):
            shifted.discard(ledger.entries[0])

    def test_shifted_counts_iterate_once_lifted(self, ledger):
        shifted = CounterSet(ledger, -SCORE_BUDGET)
        info = ledger.entries[1]
        shifted.increase(info)
        assert list(shifted) == []
        shifted.add(info, SCORE_BUDGET)
        assert list(shifted) == [info]

    def test_foreign_objects_are_not_members(self, ledger):
        assert "a" not in CounterSet(ledger)
