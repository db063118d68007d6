"""
Reactor Configuration

All reactor parameters in one validated dataclass. Fuel types are given as
ordered parallel arrays (same order for incommods, inrecipes, outrecipes,
outcommods and, optionally, preferences). Preference and recipe changes are
given the same way, one entry per change.

``cycle_step`` and ``discharged`` are normally left at their defaults; they
exist so a reactor can be started part way through a cycle.
"""

from dataclasses import dataclass, field, asdict, fields
import json
from typing import Any, Dict, List, Optional

from .constants import DEFAULT_N_ASSEM_FRESH, DEFAULT_N_ASSEM_SPENT
from .errors import ConfigurationError
from .fuel import FuelLedger


@dataclass
class ReactorConfig:
    """
    Reactor facility parameters.

    Attributes:
        fuel_incommods: Commodities fresh fuel is requested on
        fuel_inrecipes: Fresh fuel recipe per input commodity
        fuel_outrecipes: Spent fuel recipe per input commodity
        fuel_outcommods: Commodity spent fuel is offered on, per input commodity
        n_assem_batch: Assemblies discharged at the end of each cycle
        assem_size: Mass of one assembly [kg]
        n_assem_core: Assemblies in a full core
        cycle_time: Operating cycle length, refueling excluded [time steps]
        refuel_time: Minimum refueling period after a cycle [time steps]
        fuel_prefs: Request preference per input commodity (empty: all zero)
        n_assem_spent: Spent assemblies storable before operation stalls
        n_assem_fresh: Fresh assemblies to keep on hand
        cycle_step: Time steps since the current cycle began
        discharged: Whether the current cycle's batch has been discharged
    """

    fuel_incommods: List[str]
    fuel_inrecipes: List[str]
    fuel_outrecipes: List[str]
    fuel_outcommods: List[str]
    n_assem_batch: int
    assem_size: float
    n_assem_core: int
    cycle_time: int
    refuel_time: int
    fuel_prefs: List[float] = field(default_factory=list)
    n_assem_spent: int = DEFAULT_N_ASSEM_SPENT
    n_assem_fresh: int = DEFAULT_N_ASSEM_FRESH
    cycle_step: int = 0
    discharged: bool = False

    # Preference changes
    pref_change_times: List[int] = field(default_factory=list)
    pref_change_commods: List[str] = field(default_factory=list)
    pref_change_values: List[float] = field(default_factory=list)

    # Recipe changes
    recipe_change_times: List[int] = field(default_factory=list)
    recipe_change_commods: List[str] = field(default_factory=list)
    recipe_change_in: List[str] = field(default_factory=list)
    recipe_change_out: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate parameters."""
        if self.assem_size <= 0:
            raise ConfigurationError(
                f"assem_size must be positive, got {self.assem_size}"
            )
        for name in ("n_assem_core", "n_assem_batch", "n_assem_spent", "cycle_time"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")
        for name in ("n_assem_fresh", "refuel_time", "cycle_step"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")
        if self.n_assem_batch > self.n_assem_core:
            raise ConfigurationError(
                f"n_assem_batch ({self.n_assem_batch}) cannot exceed "
                f"n_assem_core ({self.n_assem_core})"
            )

        # Array lengths are checked by building a ledger once
        self.build_ledger()

    @property
    def fresh_capacity(self) -> float:
        """Fresh fuel buffer capacity [kg]."""
        return self.n_assem_fresh * self.assem_size

    @property
    def core_capacity(self) -> float:
        """Core capacity [kg]."""
        return self.n_assem_core * self.assem_size

    @property
    def spent_capacity(self) -> float:
        """Spent fuel buffer capacity [kg]."""
        return self.n_assem_spent * self.assem_size

    def build_ledger(self) -> FuelLedger:
        """Create a fresh fuel ledger from the fuel and change arrays."""
        return FuelLedger.from_arrays(
            self.fuel_incommods,
            self.fuel_inrecipes,
            self.fuel_outrecipes,
            self.fuel_outcommods,
            self.fuel_prefs,
            pref_change_times=self.pref_change_times,
            pref_change_commods=self.pref_change_commods,
            pref_change_values=self.pref_change_values,
            recipe_change_times=self.recipe_change_times,
            recipe_change_commods=self.recipe_change_commods,
            recipe_change_in=self.recipe_change_in,
            recipe_change_out=self.recipe_change_out,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReactorConfig":
        """
        Build a configuration from a plain dictionary.

        Raises:
            ConfigurationError: On unknown or missing keys, or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown reactor parameters: {', '.join(sorted(unknown))}"
            )
        try:
            return cls(**data)
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc

    @classmethod
    def from_json(cls, filepath: str) -> "ReactorConfig":
        with open(filepath, 'r') as f:
            return cls.from_dict(json.load(f))

    def to_json(self, filepath: Optional[str] = None) -> str:
        """
        Export the configuration to JSON.

        Args:
            filepath: Optional file path to save JSON

        Returns:
            JSON string
        """
        json_str = json.dumps(self.to_dict(), indent=2)

        if filepath:
            with open(filepath, 'w') as f:
                f.write(json_str)

        return json_str
