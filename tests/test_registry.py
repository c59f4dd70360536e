"""Tests for the parameter registry."""

from __future__ import annotations

import pytest

from lazypick.core import ParameterDefinition, ParameterRegistry, ValueLedger
from lazypick.errors import InconsistentRepetitionError


@pytest.fixture
def registry() -> ParameterRegistry:
    return ParameterRegistry(ValueLedger())


class TestParameterRegistry:
    """Tests for definitions, introductions and reservations."""

    def test_register_and_resolve(self, registry):
        definition = ParameterDefinition("a", True, 3)
        assert registry.resolve(definition) is None
        options = registry.register(definition, ())
        assert registry.resolve(ParameterDefinition("a", True, 3)) is options
        assert registry.definitions == [definition]
        assert len(registry) == 1

    def test_introduction_site_points_at_caller(self, registry):
        definition = ParameterDefinition("a", True, 2)
        registry.register(definition, (1, 0))
        record = registry.introduction_of(definition)
        assert record.crumbs == (1, 0)
        assert "test_registry.py:" in record.site
        assert record.conflicts == []

    def test_reservation_accepts_same_definition(self, registry):
        definition = ParameterDefinition("a", True, 2)
        registry.register(definition, ())
        registry.reserve((), definition)
        registry.reserve((), ParameterDefinition("a", True, 2))
        registry.check_reservation((0,), None)

    def test_reservation_rejects_other_definition(self, registry):
        first = ParameterDefinition("a", True, 2)
        registry.register(first, ())
        registry.reserve((), first)
        with pytest.raises(InconsistentRepetitionError) as exc_info:
            registry.reserve((), ParameterDefinition("b", True, 2))
        assert exc_info.value.introduction_site == registry.introduction_of(first).site
        assert len(registry.introduction_of(first).conflicts) == 1

    def test_reservation_rejects_run_end(self, registry):
        first = ParameterDefinition("a", True, 2)
        registry.register(first, ())
        registry.reserve((), first)
        with pytest.raises(InconsistentRepetitionError, match="run ended at"):
            registry.check_reservation((), None)

    def test_pending_values(self, registry):
        options = registry.register(ParameterDefinition("a", False, 2), ())
        assert registry.has_pending_values()
        for info in options:
            info.stats.total_count = 1
        assert not registry.has_pending_values()
        options[0].stats.forward_request_count = 1
        assert registry.has_pending_values()
