"""
Capacity-Bounded Material Buffers

A buffer owns an ordered collection of materials and refuses any push that
would take its total mass over capacity. Materials leave in the order they
arrived. Moving a material between buffers is a pop from one and a push to
the other; a material is never held by two buffers.
"""

from collections import deque
import math
from typing import Deque, Iterable, List, Tuple

from .constants import EPS_RSRC
from .errors import CapacityExceeded
from .materials import Material


class ResourceBuffer:
    """
    Ordered, mass-limited material store.

    Attributes:
        name: Label used in error messages and logs
        capacity: Maximum total mass [kg]
    """

    def __init__(self, capacity: float, name: str = "buffer"):
        if capacity < 0:
            raise ValueError(f"Buffer capacity must be non-negative, got {capacity}")
        self.name = name
        self.capacity = float(capacity)
        self._mats: Deque[Material] = deque()
        self._ids = set()
        self._quantity = 0.0

    def __len__(self) -> int:
        return len(self._mats)

    def __iter__(self):
        return iter(tuple(self._mats))

    def __repr__(self) -> str:
        return (
            f"ResourceBuffer(name={self.name!r}, count={self.count()}, "
            f"quantity={self._quantity:.6g}, capacity={self.capacity:.6g})"
        )

    def count(self) -> int:
        """Number of materials held."""
        return len(self._mats)

    def quantity(self) -> float:
        """Total mass held [kg]."""
        return self._quantity

    def space(self) -> float:
        """Remaining mass that fits [kg]."""
        return max(0.0, self.capacity - self._quantity)

    def empty(self) -> bool:
        return not self._mats

    def whole_space(self, unit: float) -> int:
        """
        Number of additional whole ``unit``-mass items that fit.

        Args:
            unit: Mass of one item [kg], e.g. an assembly

        Returns:
            Count of whole items, never negative
        """
        if unit <= 0:
            raise ValueError(f"Unit mass must be positive, got {unit}")
        return max(0, int(math.floor((self.space() + EPS_RSRC) / unit)))

    def push(self, material: Material) -> None:
        """
        Take ownership of ``material``.

        Raises:
            CapacityExceeded: If the buffer would be overfilled
            ValueError: If the material is already held here
        """
        if material.obj_id in self._ids:
            raise ValueError(
                f"material {material.obj_id} is already in the {self.name} buffer"
            )
        new_qty = self._quantity + material.quantity
        if new_qty - self.capacity > EPS_RSRC:
            raise CapacityExceeded(self.name, new_qty, self.capacity)
        self._mats.append(material)
        self._ids.add(material.obj_id)
        self._quantity = new_qty

    def push_all(self, materials: Iterable[Material]) -> None:
        """
        Push several materials, all or none.

        Raises:
            CapacityExceeded: If their combined mass does not fit
        """
        materials = list(materials)
        total = self._quantity + sum(m.quantity for m in materials)
        if total - self.capacity > EPS_RSRC:
            raise CapacityExceeded(self.name, total, self.capacity)
        for m in materials:
            self.push(m)

    def pop(self) -> Material:
        """Remove and return the oldest material."""
        if not self._mats:
            raise IndexError(f"pop from empty {self.name} buffer")
        m = self._mats.popleft()
        self._forget(m)
        return m

    def pop_n(self, n: int) -> List[Material]:
        """Remove and return the ``n`` oldest materials."""
        if n < 0 or n > len(self._mats):
            raise ValueError(
                f"cannot pop {n} materials from {self.name} buffer "
                f"holding {len(self._mats)}"
            )
        return [self.pop() for _ in range(n)]

    def pop_all(self) -> List[Material]:
        """Remove and return everything, oldest first."""
        return self.pop_n(len(self._mats))

    def peek_all(self) -> Tuple[Material, ...]:
        """Everything held, oldest first, without giving up ownership."""
        return tuple(self._mats)

    def remove(self, materials: Iterable[Material]) -> List[Material]:
        """
        Remove specific held materials, keeping the rest in order.

        Raises:
            KeyError: If any of them is not held here
        """
        materials = list(materials)
        wanted = {m.obj_id for m in materials}
        missing = wanted - self._ids
        if missing:
            raise KeyError(
                f"materials {sorted(missing)} are not in the {self.name} buffer"
            )
        self._mats = deque(m for m in self._mats if m.obj_id not in wanted)
        for m in materials:
            self._forget(m)
        return materials

    def _forget(self, material: Material) -> None:
        self._ids.discard(material.obj_id)
        self._quantity -= material.quantity
        if not self._mats:
            # Drop accumulated rounding
            self._quantity = 0.0
