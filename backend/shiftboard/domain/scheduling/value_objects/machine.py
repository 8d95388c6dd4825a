"""Machine reference data value object."""

from pydantic import Field

from ...shared.base import ValueObject


class Machine(ValueObject):
    """
    A production machine jobs can be placed on.

    Machines are configuration, loaded once at startup; the scheduling core
    never mutates them.
    """

    id: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    department: str = Field(default="Printing", max_length=100)


def departments_of(machines: list[Machine]) -> list[str]:
    """Distinct departments in first-seen order."""
    seen: dict[str, None] = {}
    for machine in machines:
        seen.setdefault(machine.department, None)
    return list(seen)
