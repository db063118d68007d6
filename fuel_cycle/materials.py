"""
Material Resources for Fuel Cycle Modeling

This module defines the material handle that moves between facilities.
A material carries a mass and the name of the recipe (nuclide composition)
it currently has. Composition arithmetic is not modeled: a recipe is only
a name that other facilities can look up.

Reactor fuel is handled as whole assemblies; each assembly is one
Material of the reactor's assembly mass.
"""

from dataclasses import dataclass, field
from typing import Dict, Any


_last_obj_id = 0


def _new_obj_id() -> int:
    global _last_obj_id
    _last_obj_id += 1
    return _last_obj_id


def _reserve_obj_id(obj_id: int) -> None:
    # Restored materials keep their ids; new ids must not collide with them
    global _last_obj_id
    _last_obj_id = max(_last_obj_id, obj_id)


@dataclass(eq=False)
class Material:
    """
    A discrete quantity of nuclear material.

    Materials compare by identity: two materials with the same mass and
    recipe are still different objects with different ids. Ids are never
    reused within a process, which lets facilities key lookup tables on them.

    Attributes:
        quantity: Mass [kg]
        recipe: Name of the nuclide composition
        obj_id: Unique resource id (assigned automatically)
    """

    quantity: float
    recipe: str
    obj_id: int = field(default_factory=_new_obj_id)

    def __post_init__(self):
        if self.quantity < 0:
            raise ValueError(
                f"Material quantity must be non-negative, got {self.quantity}"
            )

    def transmute(self, recipe: str) -> None:
        """
        Replace the composition of this material in place.

        The mass is unchanged; only the recipe name is substituted.
        """
        self.recipe = recipe

    def to_dict(self) -> Dict[str, Any]:
        return {
            "obj_id": self.obj_id,
            "quantity": self.quantity,
            "recipe": self.recipe,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Material":
        """Rebuild a material from a snapshot row, keeping its id."""
        obj_id = int(data["obj_id"])
        _reserve_obj_id(obj_id)
        return cls(
            quantity=float(data["quantity"]),
            recipe=str(data["recipe"]),
            obj_id=obj_id,
        )


def create_assembly(assem_size: float, recipe: str) -> Material:
    """
    Factory function to create one fuel assembly.

    Args:
        assem_size: Assembly mass [kg]
        recipe: Fresh fuel recipe name

    Returns:
        New Material with a fresh id
    """
    return Material(quantity=assem_size, recipe=recipe)
