"""
Error Types for the Reactor Facility

Configuration and integrity failures are fatal and propagate to the caller.
Running short of fresh fuel or spent fuel storage is not an error; the
reactor waits and retries on the following time step.
"""


class FuelCycleError(Exception):
    """Base class for all reactor facility errors."""


class ConfigurationError(FuelCycleError, ValueError):
    """Invalid reactor parameters, detected when the configuration is built."""


class CapacityExceeded(FuelCycleError):
    """A push would overfill an inventory buffer."""

    def __init__(self, buffer_name: str, quantity: float, capacity: float):
        self.buffer_name = buffer_name
        self.quantity = quantity
        self.capacity = capacity
        super().__init__(
            f"{buffer_name} buffer would hold {quantity:.6g} kg, "
            f"capacity is {capacity:.6g} kg"
        )


class UnknownResource(FuelCycleError, KeyError):
    """A resource or commodity cannot be matched to any configured fuel type."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class PartialAssembly(FuelCycleError, ValueError):
    """A delivered or traded quantity is not exactly one fuel assembly."""

    def __init__(self, quantity: float, assem_size: float):
        self.quantity = quantity
        self.assem_size = assem_size
        super().__init__(
            f"{quantity:.6g} kg is not one {assem_size:.6g} kg assembly"
        )
