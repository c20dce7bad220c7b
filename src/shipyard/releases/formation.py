"""
Formation derivation.

A release's formation is derived from exactly two inputs: the formation of
the application's previous release and the process types declared by the
new slug.

Merge rule::

    previous ∩ slug   → keep quantity + constraints, take the slug's command
    slug only         → default quantity + default constraints
    previous only     → dropped

The previous formation is never mutated; every derived Process is a new
object with no ``release_id`` (the service tags it with the new release).
An application's first release therefore gets every type defaulted.

Examples:
    >>> builder = FormationBuilder()
    >>> prev = {"web": Process(type="web", command="old", quantity=2)}
    >>> f = builder.derive(prev, {"web": "./bin/web", "worker": "./bin/worker"})
    >>> (f["web"].quantity, f["web"].command, f["worker"].quantity)
    (2, './bin/web', 0)

Tags:
    releases, formation, processes
"""

from __future__ import annotations

from collections.abc import Mapping

from shipyard.core.models import DEFAULT_CONSTRAINTS, Constraints, Formation, Process


class FormationBuilder:
    """Derives a release's formation from the previous one.

    Parameters:
        default_quantity: Quantity for process types new to the app.
        default_quantities: Per-type overrides of ``default_quantity``
            (e.g. ``{"web": 1}``).
        default_constraints: Constraints for process types new to the app.
    """

    def __init__(
        self,
        default_quantity: int = 0,
        default_quantities: Mapping[str, int] | None = None,
        default_constraints: Constraints = DEFAULT_CONSTRAINTS,
    ) -> None:
        self.default_quantity = default_quantity
        self.default_quantities = dict(default_quantities or {})
        self.default_constraints = default_constraints

    def quantity_for(self, process_type: str) -> int:
        return self.default_quantities.get(process_type, self.default_quantity)

    def derive(
        self,
        existing: Formation | None,
        process_types: Mapping[str, str],
    ) -> Formation:
        """Merge *existing* with the slug's *process_types* (type → command)."""
        existing = existing or {}
        formation: Formation = {}

        for process_type, command in process_types.items():
            previous = existing.get(process_type)
            if previous is not None:
                formation[process_type] = Process(
                    type=process_type,
                    command=command,
                    quantity=previous.quantity,
                    constraints=previous.constraints,
                )
            else:
                formation[process_type] = Process(
                    type=process_type,
                    command=command,
                    quantity=self.quantity_for(process_type),
                    constraints=self.default_constraints,
                )

        return formation
