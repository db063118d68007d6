"""
Reactor Facility Model for Fuel Cycle Simulation

A batch-refueled reactor for discrete-time, agent-based fuel cycle
simulation: it requests fresh fuel assemblies, burns them in cycles,
discharges and transmutes spent batches, and offers the spent fuel back
through a resource exchange.

Modules:
    - constants: Defaults, tolerances and event names
    - errors: Error types
    - materials: Material handles (fuel assemblies)
    - fuel: Fuel ledger, scheduled changes and resource index
    - inventory: Capacity-bounded material buffers
    - config: Reactor configuration
    - exchange: Request, bid and trade types
    - recorder: Event log
    - reactor: The reactor facility
    - simulation: Time stepping driver, greedy exchange, source and sink
"""

from .errors import (
    FuelCycleError,
    ConfigurationError,
    CapacityExceeded,
    UnknownResource,
    PartialAssembly,
)
from .materials import Material, create_assembly
from .fuel import FuelType, FuelLedger, PreferenceChange, RecipeChange, ResourceIndex
from .inventory import ResourceBuffer
from .config import ReactorConfig
from .exchange import Request, RequestPortfolio, Bid, BidPortfolio, Trade
from .recorder import EventRecorder, ReactorEvent
from .reactor import Reactor, CyclePhase, create_reactor
from .simulation import Simulation, GreedyExchange, FuelSource, FuelSink

__version__ = "1.0.0"

__all__ = [
    "FuelCycleError",
    "ConfigurationError",
    "CapacityExceeded",
    "UnknownResource",
    "PartialAssembly",
    "Material",
    "create_assembly",
    "FuelType",
    "FuelLedger",
    "PreferenceChange",
    "RecipeChange",
    "ResourceIndex",
    "ResourceBuffer",
    "ReactorConfig",
    "Request",
    "RequestPortfolio",
    "Bid",
    "BidPortfolio",
    "Trade",
    "EventRecorder",
    "ReactorEvent",
    "Reactor",
    "CyclePhase",
    "create_reactor",
    "Simulation",
    "GreedyExchange",
    "FuelSource",
    "FuelSink",
]
