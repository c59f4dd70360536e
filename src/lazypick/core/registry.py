"""Parameter Registry: definitions, their value options and crumb reservations."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from lazypick.core.ledger import ParameterDefinition, ValueInformation, ValueLedger
from lazypick.errors import ErrorContext, InconsistentRepetitionError, StackTraceFilter

logger = logging.getLogger(__name__)


@dataclass
class IntroductionRecord:
    """Where a parameter was first introduced, plus later conflicts.

    Attributes:
        definition: The registered parameter definition.
        crumbs: Crumb key at which it was introduced.
        site: User call site of the introduction.
        conflicts: Sites at which a repetition diverged from the
            reservation held by this parameter.
    """

    definition: ParameterDefinition
    crumbs: tuple[int, ...]
    site: str
    conflicts: list[str] = field(default_factory=list)


def _fallback_site(crumbs: tuple[int, ...]) -> str:
    return f"... at {list(crumbs)} pick"


class ParameterRegistry:
    """Maps parameter definitions to ledger entries and guards repetition order.

    Each crumb key that has ever been followed by a new pick is reserved
    for the parameter that was picked there. A later run that reaches the
    same key must pick the same parameter next.
    """

    def __init__(self, ledger: ValueLedger) -> None:
        self.ledger = ledger
        self._options: dict[ParameterDefinition, list[ValueInformation]] = {}
        self._reserved: dict[tuple[int, ...], ParameterDefinition] = {}
        self._introductions: dict[ParameterDefinition, IntroductionRecord] = {}

    def resolve(self, definition: ParameterDefinition) -> list[ValueInformation] | None:
        """Return the value options of an already registered definition."""
        return self._options.get(definition)

    def register(
        self, definition: ParameterDefinition, crumbs: tuple[int, ...]
    ) -> list[ValueInformation]:
        """Create ledger entries for a newly seen definition."""
        options = self.ledger.create_options(definition)
        self._options[definition] = options
        self._introductions[definition] = IntroductionRecord(
            definition=definition,
            crumbs=crumbs,
            site=StackTraceFilter.describe_call_site(_fallback_site(crumbs)),
        )
        logger.debug(
            f"Registered {definition!r} at crumbs {list(crumbs)} "
            f"({len(self.ledger)} ledger entries)"
        )
        return options

    def check_reservation(
        self, crumbs: tuple[int, ...], definition: ParameterDefinition | None
    ) -> None:
        """Raise if ``crumbs`` is reserved for another parameter.

        Args:
            crumbs: Current crumb key.
            definition: Parameter about to be picked at ``crumbs``, or None
                when the run ends there.

        Raises:
            InconsistentRepetitionError: The key was reserved by a different
                parameter on an earlier run.
        """
        reserved = self._reserved.get(crumbs)
        if reserved is None or reserved == definition:
            return
        record = self._introductions[reserved]
        if definition is None:
            conflict = f"run ended at {list(crumbs)} without picking {reserved!r}"
        else:
            site = StackTraceFilter.describe_call_site(_fallback_site(crumbs))
            conflict = f"{definition!r} picked instead of {reserved!r} at {site}"
        record.conflicts.append(conflict)
        logger.warning(f"Inconsistent repetition at crumbs {list(crumbs)}: {conflict}")
        raise InconsistentRepetitionError(
            record.site,
            conflicting_sites=record.conflicts,
            context=ErrorContext(
                parameter_id=reserved.parameter_id,
                crumbs=crumbs,
            ),
        )

    def reserve(self, crumbs: tuple[int, ...], definition: ParameterDefinition) -> None:
        """Reserve ``crumbs`` for ``definition`` after checking consistency."""
        self.check_reservation(crumbs, definition)
        self._reserved[crumbs] = definition

    def introduction_of(self, definition: ParameterDefinition) -> IntroductionRecord:
        return self._introductions[definition]

    def has_pending_values(self) -> bool:
        """Check for unmet forward requests or never-picked values."""
        for options in self._options.values():
            for info in options:
                if info.stats.forward_request_count > 0 or info.stats.total_count <= 0:
                    return True
        return False

    @property
    def definitions(self) -> list[ParameterDefinition]:
        return list(self._options)

    def __iter__(self) -> Iterator[tuple[ParameterDefinition, list[ValueInformation]]]:
        return iter(self._options.items())

    def __len__(self) -> int:
        return len(self._options)
