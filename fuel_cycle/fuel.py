"""
Fuel Ledger and Resource Index

The fuel ledger is the ordered list of fuel types a reactor accepts. Each
fuel type ties an input commodity and fresh recipe to the spent recipe and
output commodity that fuel becomes once burned, plus the preference used
when requesting it. The list position of a fuel type is its identity.

Preferences and recipe pairs can be changed on given time steps through
scheduled changes. The resource index remembers which fuel type each
received material arrived as, since the material itself only carries a
recipe name.
"""

from dataclasses import dataclass
import logging
from typing import Dict, Iterator, List, Optional, Sequence, Union

from .constants import DEFAULT_PREFERENCE
from .errors import ConfigurationError, UnknownResource
from .materials import Material

logger = logging.getLogger(__name__)


@dataclass
class FuelType:
    """
    One accepted fuel and its burned counterpart.

    Attributes:
        incommod: Commodity fresh fuel is requested on
        inrecipe: Fresh fuel recipe
        outrecipe: Recipe the fuel is transmuted to on discharge
        outcommod: Commodity spent fuel is offered on
        preference: Request preference
    """

    incommod: str
    inrecipe: str
    outrecipe: str
    outcommod: str
    preference: float = DEFAULT_PREFERENCE


@dataclass(frozen=True)
class PreferenceChange:
    """New request preference for the fuel received on ``commod``."""

    time: int
    commod: str
    preference: float

    def apply(self, fuel: FuelType) -> None:
        fuel.preference = self.preference


@dataclass(frozen=True)
class RecipeChange:
    """New fresh/spent recipe pair for the fuel received on ``commod``."""

    time: int
    commod: str
    inrecipe: str
    outrecipe: str

    def apply(self, fuel: FuelType) -> None:
        fuel.inrecipe = self.inrecipe
        fuel.outrecipe = self.outrecipe


ScheduledChange = Union[PreferenceChange, RecipeChange]


def check_parallel_lengths(group: str, **arrays: Sequence) -> int:
    """
    Check that parallel configuration arrays have equal lengths.

    Args:
        group: Name of the array group, used in the error message
        **arrays: The arrays, keyed by parameter name

    Returns:
        The common length

    Raises:
        ConfigurationError: If the lengths differ
    """
    lengths = {name: len(values) for name, values in arrays.items()}
    if len(set(lengths.values())) > 1:
        detail = ", ".join(f"{name}={n}" for name, n in lengths.items())
        raise ConfigurationError(
            f"{group} arrays must have equal lengths, got {detail}"
        )
    return next(iter(lengths.values()), 0)


class ResourceIndex:
    """
    Lookup table from material id to the fuel type index it arrived as.

    Entries are kept for the whole run; material ids are never reused, so a
    stale entry can never be hit by a different material.
    """

    def __init__(self, entries: Optional[Dict[int, int]] = None):
        self._indexes: Dict[int, int] = dict(entries or {})

    def add(self, material: Material, fuel_index: int) -> None:
        self._indexes[material.obj_id] = fuel_index

    def lookup(self, material: Material) -> int:
        try:
            return self._indexes[material.obj_id]
        except KeyError:
            raise UnknownResource(
                f"material {material.obj_id} was never received by this reactor"
            ) from None

    def __contains__(self, material: Material) -> bool:
        return material.obj_id in self._indexes

    def __len__(self) -> int:
        return len(self._indexes)

    def to_dict(self) -> Dict[str, int]:
        # JSON object keys are strings
        return {str(obj_id): idx for obj_id, idx in self._indexes.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "ResourceIndex":
        return cls({int(obj_id): int(idx) for obj_id, idx in data.items()})


class FuelLedger:
    """
    Ordered fuel types plus their time-indexed changes.

    Attributes:
        fuels: Fuel types in configuration order
        changes: Scheduled preference and recipe changes
        index: Resource index for received materials
    """

    def __init__(
        self,
        fuels: List[FuelType],
        changes: Sequence[ScheduledChange] = (),
        index: Optional[ResourceIndex] = None,
    ):
        if not fuels:
            raise ConfigurationError("At least one fuel type is required")
        self.fuels = list(fuels)
        self.changes = list(changes)
        self.index = index if index is not None else ResourceIndex()
        self._last_applied: Optional[int] = None

    @classmethod
    def from_arrays(
        cls,
        incommods: Sequence[str],
        inrecipes: Sequence[str],
        outrecipes: Sequence[str],
        outcommods: Sequence[str],
        prefs: Sequence[float] = (),
        pref_change_times: Sequence[int] = (),
        pref_change_commods: Sequence[str] = (),
        pref_change_values: Sequence[float] = (),
        recipe_change_times: Sequence[int] = (),
        recipe_change_commods: Sequence[str] = (),
        recipe_change_in: Sequence[str] = (),
        recipe_change_out: Sequence[str] = (),
    ) -> "FuelLedger":
        """
        Build a ledger from the parallel configuration arrays.

        An empty ``prefs`` gives every fuel type the default preference.

        Raises:
            ConfigurationError: On any length mismatch
        """
        n = check_parallel_lengths(
            "fuel",
            fuel_incommods=incommods,
            fuel_inrecipes=inrecipes,
            fuel_outrecipes=outrecipes,
            fuel_outcommods=outcommods,
        )
        if len(prefs) == 0:
            prefs = [DEFAULT_PREFERENCE] * n
        elif len(prefs) != n:
            raise ConfigurationError(
                f"fuel_prefs has {len(prefs)} values, expected {n} or none"
            )
        check_parallel_lengths(
            "preference change",
            pref_change_times=pref_change_times,
            pref_change_commods=pref_change_commods,
            pref_change_values=pref_change_values,
        )
        check_parallel_lengths(
            "recipe change",
            recipe_change_times=recipe_change_times,
            recipe_change_commods=recipe_change_commods,
            recipe_change_in=recipe_change_in,
            recipe_change_out=recipe_change_out,
        )

        fuels = [
            FuelType(inc, inr, outr, outc, float(pref))
            for inc, inr, outr, outc, pref in zip(
                incommods, inrecipes, outrecipes, outcommods, prefs
            )
        ]
        changes: List[ScheduledChange] = [
            PreferenceChange(int(t), c, float(v))
            for t, c, v in zip(
                pref_change_times, pref_change_commods, pref_change_values
            )
        ]
        changes.extend(
            RecipeChange(int(t), c, rin, rout)
            for t, c, rin, rout in zip(
                recipe_change_times,
                recipe_change_commods,
                recipe_change_in,
                recipe_change_out,
            )
        )
        return cls(fuels, changes)

    def __len__(self) -> int:
        return len(self.fuels)

    def __iter__(self) -> Iterator[FuelType]:
        return iter(self.fuels)

    def lookup(self, fuel_index: int) -> FuelType:
        return self.fuels[fuel_index]

    def index_of(self, incommod: str) -> int:
        """
        Index of the first fuel type received on ``incommod``.

        Raises:
            UnknownResource: If no fuel type uses that commodity
        """
        for i, fuel in enumerate(self.fuels):
            if fuel.incommod == incommod:
                return i
        raise UnknownResource(f"received unsupported incommod '{incommod}'")

    def index_res(self, material: Material, incommod: str) -> int:
        """Record ``material`` as received on ``incommod``; returns its fuel index."""
        i = self.index_of(incommod)
        self.index.add(material, i)
        return i

    def resolve(self, material: Material) -> int:
        """Fuel type index ``material`` was received as."""
        i = self.index.lookup(material)
        if i >= len(self.fuels):
            raise UnknownResource(
                f"material {material.obj_id} maps to missing fuel type {i}"
            )
        return i

    def fuel_of(self, material: Material) -> FuelType:
        return self.fuels[self.resolve(material)]

    def unique_outcommods(self) -> List[str]:
        """Output commodities in configuration order, without duplicates."""
        return list(dict.fromkeys(fuel.outcommod for fuel in self.fuels))

    def apply_due_changes(self, time: int) -> int:
        """
        Apply every scheduled change due at ``time``.

        Calling this more than once for the same time step applies the
        changes only once.

        Returns:
            Number of changes applied
        """
        if self._last_applied == time:
            return 0
        self._last_applied = time

        applied = 0
        for change in self.changes:
            if change.time != time:
                continue
            for fuel in self.fuels:
                if fuel.incommod == change.commod:
                    change.apply(fuel)
                    applied += 1
                    logger.debug("t=%d applied %s", time, change)
                    break
            else:
                logger.warning(
                    "t=%d scheduled change for unknown commodity '%s' ignored",
                    time,
                    change.commod,
                )
        return applied

    def state(self) -> Dict:
        """Mutable ledger state, for snapshots."""
        return {
            "preferences": [fuel.preference for fuel in self.fuels],
            "inrecipes": [fuel.inrecipe for fuel in self.fuels],
            "outrecipes": [fuel.outrecipe for fuel in self.fuels],
            "last_applied": self._last_applied,
            "res_indexes": self.index.to_dict(),
        }

    def restore(self, state: Dict) -> None:
        """Inverse of :meth:`state`."""
        check_parallel_lengths(
            "ledger snapshot",
            fuels=self.fuels,
            preferences=state["preferences"],
            inrecipes=state["inrecipes"],
            outrecipes=state["outrecipes"],
        )
        for fuel, pref, inr, outr in zip(
            self.fuels,
            state["preferences"],
            state["inrecipes"],
            state["outrecipes"],
        ):
            fuel.preference = float(pref)
            fuel.inrecipe = inr
            fuel.outrecipe = outr
        self._last_applied = state.get("last_applied")
        self.index = ResourceIndex.from_dict(state.get("res_indexes", {}))
