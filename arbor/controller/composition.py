"""
Controller Composition

Splits discovered controllers into the units the registration engine
activates directly and the child units that are activated through their
parent. The split is set based: a unit is either a parent, a child of
some parent, or standalone.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Type

from .base import Controller


@dataclass
class Partition:
    """
    Result of partitioning a set of controllers.

    Attributes:
        with_children: Units declaring at least one child
        children: Units referenced as a child by any unit in ``with_children``
        standalone: Units that are neither parents nor children
    """
    with_children: List[Type[Controller]] = field(default_factory=list)
    children: List[Type[Controller]] = field(default_factory=list)
    standalone: List[Type[Controller]] = field(default_factory=list)

    @property
    def top_level(self) -> List[Type[Controller]]:
        """Units the engine activates: parents first, then standalone units."""
        return [*self.with_children, *self.standalone]


def _unique(units: Iterable[Type[Controller]]) -> List[Type[Controller]]:
    seen = set()
    ordered = []
    for unit in units:
        if unit not in seen:
            seen.add(unit)
            ordered.append(unit)
    return ordered


def partition(units: Iterable[Type[Controller]]) -> Partition:
    """
    Partition controllers for registration.

    Never calls ``setup``; only the declared child relations are read.

    Args:
        units: Discovered controller classes (duplicates are ignored)

    Returns:
        Partition with parents, children and standalone units
    """
    units = _unique(units)

    with_children = [unit for unit in units if unit.child_units()]
    children = _unique(
        child
        for parent in with_children
        for child in parent.child_units()
    )

    claimed = set(with_children) | set(children)
    standalone = [unit for unit in units if unit not in claimed]

    return Partition(
        with_children=with_children,
        children=children,
        standalone=standalone,
    )
